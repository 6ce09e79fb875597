"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    fetch_timeout_seconds: float = 20.0
    max_image_bytes: int = 5 * 1024 * 1024
    allow_local_files: bool = False
    jpeg_quality: int = 90
    background_color: str = "#111111"
    archive_folder: str = "frames"
    archive_filename: str = "siodelhi_frames.zip"
    preview_max_dimension: int = 1920
    job_timeout_seconds: float = 600.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
