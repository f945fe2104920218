"""
Tests for configuration and logging utilities.
"""

import logging

import pytest
import structlog
import structlog.testing
from pydantic import ValidationError

from utilities.config import StoreConfig
from utilities.logger import StoreLogger, setup_logging


class TestStoreConfig:
    """Test cases for StoreConfig."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MONGODB_DATABASE", raising=False)
        config = StoreConfig(_env_file=None)
        assert config.mongodb_database == "inventario"
        assert config.books_collection == "books"
        assert config.authors_collection == "authors"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URL", "mongodb://db.example:27017")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        config = StoreConfig(_env_file=None)
        assert config.mongodb_url == "mongodb://db.example:27017"
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("field,value", [
        ("log_level", "LOUD"),
        ("log_format", "xml"),
        ("server_selection_timeout_ms", 10),
    ])
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            StoreConfig(_env_file=None, **{field: value})


class TestLogging:
    """Test cases for structured logging helpers."""

    def test_setup_writes_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "api.log"
        try:
            setup_logging(log_level="INFO", log_format="json", log_file=str(log_file))
            assert log_file.exists()
        finally:
            root = logging.getLogger()
            for handler in list(root.handlers):
                if isinstance(handler, logging.FileHandler):
                    root.removeHandler(handler)
                    handler.close()
            structlog.reset_defaults()

    def test_store_logger_binds_collection(self):
        store_logger = StoreLogger("tests", collection="books")
        with structlog.testing.capture_logs() as captured:
            store_logger.log_dangling_references("64b7f0c2a1b2c3d4e5f60718", ["a1"])
        assert captured == [{
            "event": "Book references missing authors",
            "log_level": "warning",
            "book_id": "64b7f0c2a1b2c3d4e5f60718",
            "missing_authors": ["a1"],
            "collection": "books",
        }]
