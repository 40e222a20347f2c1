"""
Configuration

Loads and manages service configuration from library_config.yaml,
with environment variable overrides.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

env_path = Path.cwd() / "config" / ".env"
if env_path.exists():
    load_dotenv(env_path)


DEFAULT_ALLOWED_TYPES = [
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "text/html",
    "text/markdown",
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "video/mp4",
    "audio/mpeg",
    "application/json",
    "application/zip",
]


class StorageConfig(BaseModel):
    """Where documents and uploaded blobs live."""
    data_dir: Path = Path("data")
    uploads_dir: Path = Path("uploads")


class UploadConfig(BaseModel):
    """Upload validation and ingestion settings."""
    max_file_size: int = Field(default=100 * 1024 * 1024, gt=0)
    allowed_types: List[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_TYPES))
    text_prefix: str = "text/"
    preview_chars: int = Field(default=500, ge=0)
    chunk_size: int = Field(default=1024 * 1024, gt=0)


class QueryConfig(BaseModel):
    """Listing and search defaults."""
    default_limit: int = Field(default=50, ge=0)
    search_limit: int = Field(default=50, ge=0)


class ServerConfig(BaseModel):
    """HTTP server settings."""
    host: str = "0.0.0.0"
    port: int = 3002
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class LoggingConfig(BaseModel):
    """Logging settings."""
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class LibraryConfig(BaseModel):
    """Main configuration model."""
    storage: StorageConfig = Field(default_factory=StorageConfig)
    uploads: UploadConfig = Field(default_factory=UploadConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Optional[Path] = None) -> LibraryConfig:
    """
    Load configuration from YAML file.

    Falls back to environment variables and defaults.
    """
    if config_path is None:
        config_path = Path.cwd() / "config" / "library_config.yaml"

    config_data = {}

    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    # Override with environment variables
    if os.getenv("ATLAS_DATA_DIR"):
        config_data.setdefault("storage", {})["data_dir"] = os.getenv("ATLAS_DATA_DIR")

    if os.getenv("ATLAS_UPLOADS_DIR"):
        config_data.setdefault("storage", {})["uploads_dir"] = os.getenv("ATLAS_UPLOADS_DIR")

    if os.getenv("ATLAS_MAX_UPLOAD_MB"):
        megabytes = int(os.getenv("ATLAS_MAX_UPLOAD_MB"))
        config_data.setdefault("uploads", {})["max_file_size"] = megabytes * 1024 * 1024

    if os.getenv("PORT"):
        config_data.setdefault("server", {})["port"] = int(os.getenv("PORT"))

    if os.getenv("ATLAS_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = os.getenv("ATLAS_LOG_LEVEL")

    return LibraryConfig(**config_data)


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Attach a single stream handler to the package logger."""
    logger = logging.getLogger("atlas_library")
    logger.setLevel(config.level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(config.format))

    # Remove existing handlers to avoid duplicates on reload
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False
    return logger
