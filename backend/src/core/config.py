"""
Core configuration and settings for the FastAPI application.
"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application Info
    app_name: str = "Health Wallet API"
    app_version: str = "1.0.0"
    debug: bool = False
    DEBUG: bool = False  # Alias for SQLAlchemy
    log_level: str = "INFO"

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 5000

    # File Storage Configuration
    storage_backend: str = "local"  # local or gcs
    upload_dir: str = "./uploads"

    # Google Cloud Storage Configuration (storage_backend == "gcs")
    google_cloud_project: Optional[str] = None
    google_application_credentials: Optional[str] = None
    gcs_bucket_name: Optional[str] = None

    # File Upload Configuration
    max_file_size_mb: int = 10
    allowed_extensions: set = {".pdf", ".jpg", ".jpeg", ".png"}
    allowed_mime_types: set = {"application/pdf", "image/jpeg", "image/png"}

    # CORS Settings
    cors_origins: list = ["http://localhost:3000", "http://localhost:5173"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list = ["*"]
    cors_allow_headers: list = ["*"]

    # Auth tokens
    jwt_secret_key: str = "dev-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7

    # Database
    DATABASE_URL: str = "sqlite:///./health_wallet.db"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Export settings instance
settings = get_settings()
