"""
Tests for Configuration

Tests YAML loading and environment overrides.
"""

import logging
import tempfile
from pathlib import Path

import pytest

from atlas_library.config import LoggingConfig, configure_logging, load_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("ATLAS_DATA_DIR", "ATLAS_UPLOADS_DIR", "ATLAS_MAX_UPLOAD_MB", "PORT", "ATLAS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, clean_env):
        config = load_config(Path("/nonexistent/library_config.yaml"))

        assert config.storage.data_dir == Path("data")
        assert config.uploads.max_file_size == 100 * 1024 * 1024
        assert "application/pdf" in config.uploads.allowed_types
        assert len(config.uploads.allowed_types) == 18
        assert config.query.default_limit == 50
        assert config.server.port == 3002

    def test_yaml_file(self, clean_env):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "library_config.yaml"
            path.write_text(
                "storage:\n  data_dir: /srv/atlas/data\nquery:\n  default_limit: 20\n",
                encoding="utf-8",
            )
            config = load_config(path)

        assert config.storage.data_dir == Path("/srv/atlas/data")
        assert config.query.default_limit == 20

    def test_env_overrides(self, clean_env):
        clean_env.setenv("ATLAS_DATA_DIR", "/tmp/atlas-data")
        clean_env.setenv("ATLAS_UPLOADS_DIR", "/tmp/atlas-uploads")
        clean_env.setenv("ATLAS_MAX_UPLOAD_MB", "5")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("ATLAS_LOG_LEVEL", "debug")

        config = load_config(Path("/nonexistent/library_config.yaml"))

        assert config.storage.data_dir == Path("/tmp/atlas-data")
        assert config.storage.uploads_dir == Path("/tmp/atlas-uploads")
        assert config.uploads.max_file_size == 5 * 1024 * 1024
        assert config.server.port == 8080
        assert config.logging.level == "debug"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_single_handler(self):
        configure_logging(LoggingConfig(level="debug"))
        logger = configure_logging(LoggingConfig(level="warning"))

        assert logger.name == "atlas_library"
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
