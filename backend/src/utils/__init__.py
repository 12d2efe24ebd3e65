"""
Utils package initialization.
"""

from src.utils.file_utils import (
    generate_unique_filename,
    get_file_extension,
    is_allowed_file,
    is_allowed_upload,
    guess_content_type,
    format_file_size,
)
from src.utils.normalization import (
    normalize_text,
    normalize_email,
    is_valid_email,
    parse_date,
    parse_datetime,
)

__all__ = [
    "generate_unique_filename",
    "get_file_extension",
    "is_allowed_file",
    "is_allowed_upload",
    "guess_content_type",
    "format_file_size",
    "normalize_text",
    "normalize_email",
    "is_valid_email",
    "parse_date",
    "parse_datetime",
]
