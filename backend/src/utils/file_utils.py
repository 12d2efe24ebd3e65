"""
File handling utilities for report uploads.
"""

import mimetypes
import uuid
from pathlib import Path
from typing import Optional, Set


def generate_unique_filename(original_filename: str) -> str:
    """
    Generate a storage filename that keeps only the original extension.

    "CBC results.PDF" -> "3f0c...e1.pdf"
    """
    return f"{uuid.uuid4()}{get_file_extension(original_filename)}"


def get_file_extension(filename: Optional[str]) -> str:
    """Lowercased extension including the dot, or "" if there is none."""
    if not filename:
        return ""
    return Path(filename).suffix.lower()


def is_allowed_file(filename: Optional[str], allowed_extensions: Set[str]) -> bool:
    """Check the upload's extension against the allow-list."""
    return get_file_extension(filename) in allowed_extensions


def is_allowed_upload(
    filename: Optional[str],
    content_type: Optional[str],
    allowed_extensions: Set[str],
    allowed_mime_types: Set[str],
) -> bool:
    """
    Both the extension and the declared MIME type must be allowed.

    Args:
        filename: Client-supplied filename
        content_type: Client-declared MIME type
        allowed_extensions: e.g. {".pdf", ".png"}
        allowed_mime_types: e.g. {"application/pdf", "image/png"}
    """
    if not is_allowed_file(filename, allowed_extensions):
        return False
    return (content_type or "").lower() in allowed_mime_types


def guess_content_type(filename: str, default: str = "application/octet-stream") -> str:
    """MIME type for a filename, used when serving files back."""
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or default


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., '2.45 MB')
    """
    for unit in ["B", "KB", "MB", "GB"]:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} TB"
