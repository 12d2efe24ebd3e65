"""
File storage for report artifacts.

Two backends share one interface:
- LocalFileStore: files under ``settings.upload_dir`` (default)
- GCSFileStore: objects in a Google Cloud Storage bucket

A file reference returned by ``store`` is opaque to callers: a filesystem
path for the local backend, an object name for GCS.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional

from google.api_core import exceptions as gcs_exceptions
from google.cloud import storage
from google.oauth2 import service_account

from src.core.config import Settings
from src.core.exceptions import StorageError
from src.utils.file_utils import generate_unique_filename

logger = logging.getLogger(__name__)


class RemoveResult(str, Enum):
    """Outcome of ``FileStore.remove``."""

    REMOVED = "removed"
    ALREADY_ABSENT = "already_absent"


class FileStore:
    """Interface for report file storage."""

    async def store(
        self, content: bytes, original_filename: str, content_type: str
    ) -> str:
        """Persist bytes and return the new file reference."""
        raise NotImplementedError

    async def read(self, file_ref: str) -> Optional[bytes]:
        """Return the file's bytes, or None if it does not exist."""
        raise NotImplementedError

    async def remove(self, file_ref: str) -> RemoveResult:
        """
        Delete a file. Removing a missing file is not an error.

        Raises:
            StorageError: the file exists but could not be deleted
        """
        raise NotImplementedError

    async def exists(self, file_ref: str) -> bool:
        raise NotImplementedError


class LocalFileStore(FileStore):
    """Stores uploads on the local filesystem with unique names."""

    def __init__(self, upload_dir: str):
        self.upload_dir = Path(upload_dir)

    def _ensure_dir(self) -> None:
        os.makedirs(self.upload_dir, exist_ok=True)

    async def store(
        self, content: bytes, original_filename: str, content_type: str
    ) -> str:
        self._ensure_dir()
        file_path = self.upload_dir / generate_unique_filename(original_filename)
        try:
            file_path.write_bytes(content)
        except OSError as e:
            raise StorageError(f"Failed to store file: {e}", str(file_path)) from e

        logger.info(f"Stored {len(content)} bytes at {file_path} ({content_type})")
        return str(file_path)

    async def read(self, file_ref: str) -> Optional[bytes]:
        path = Path(file_ref)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read file: {e}", file_ref) from e

    async def remove(self, file_ref: str) -> RemoveResult:
        try:
            Path(file_ref).unlink()
        except FileNotFoundError:
            logger.info(f"File already absent: {file_ref}")
            return RemoveResult.ALREADY_ABSENT
        except OSError as e:
            raise StorageError(f"Failed to remove file: {e}", file_ref) from e
        return RemoveResult.REMOVED

    async def exists(self, file_ref: str) -> bool:
        return Path(file_ref).is_file()


class GCSFileStore(FileStore):
    """Stores uploads in a Google Cloud Storage bucket."""

    def __init__(self, settings: Settings, folder: str = "reports"):
        """
        Initialize storage service.

        Args:
            settings: Application settings
            folder: Object name prefix for uploaded reports
        """
        self.settings = settings
        self.bucket_name = settings.gcs_bucket_name
        self.folder = folder
        self.client = None
        self.bucket = None

        self._init_gcs()

    def _init_gcs(self) -> None:
        """Initialize Google Cloud Storage with explicit credentials."""
        if not self.bucket_name:
            raise ValueError("GCS_BUCKET_NAME not configured in .env")

        credentials_path = self.settings.google_application_credentials
        if not credentials_path:
            raise ValueError("GOOGLE_APPLICATION_CREDENTIALS not configured in .env")

        if not os.path.exists(credentials_path):
            raise FileNotFoundError(
                f"Service account file not found at: {credentials_path}"
            )

        credentials = service_account.Credentials.from_service_account_file(
            credentials_path,
            scopes=["https://www.googleapis.com/auth/cloud-platform"],
        )

        self.client = storage.Client(
            credentials=credentials, project=self.settings.google_cloud_project
        )
        self.bucket = self.client.bucket(self.bucket_name)

        if not self.bucket.exists():
            raise ValueError(f"Bucket '{self.bucket_name}' does not exist")

        logger.info(f"Google Cloud Storage initialized: {self.bucket_name}")

    async def store(
        self, content: bytes, original_filename: str, content_type: str
    ) -> str:
        file_ref = f"{self.folder}/{generate_unique_filename(original_filename)}"
        try:
            blob = self.bucket.blob(file_ref)
            blob.upload_from_string(content, content_type=content_type)
        except gcs_exceptions.GoogleAPIError as e:
            raise StorageError(f"Failed to upload to GCS: {e}", file_ref) from e

        logger.info(f"Uploaded {len(content)} bytes to gs://{self.bucket_name}/{file_ref}")
        return file_ref

    async def read(self, file_ref: str) -> Optional[bytes]:
        try:
            return self.bucket.blob(file_ref).download_as_bytes()
        except gcs_exceptions.NotFound:
            return None
        except gcs_exceptions.GoogleAPIError as e:
            raise StorageError(f"Failed to read from GCS: {e}", file_ref) from e

    async def remove(self, file_ref: str) -> RemoveResult:
        try:
            self.bucket.blob(file_ref).delete()
        except gcs_exceptions.NotFound:
            logger.info(f"Object already absent: gs://{self.bucket_name}/{file_ref}")
            return RemoveResult.ALREADY_ABSENT
        except gcs_exceptions.GoogleAPIError as e:
            raise StorageError(f"Failed to delete from GCS: {e}", file_ref) from e
        return RemoveResult.REMOVED

    async def exists(self, file_ref: str) -> bool:
        return self.bucket.blob(file_ref).exists()


def create_file_store(settings: Settings) -> FileStore:
    """Build the file store selected by ``settings.storage_backend``."""
    backend = settings.storage_backend.lower()
    if backend == "local":
        return LocalFileStore(settings.upload_dir)
    if backend == "gcs":
        return GCSFileStore(settings)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
