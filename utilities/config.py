"""
Configuration management using environment variables.
Handles MongoDB and logging settings with proper validation and defaults.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class StoreConfig(BaseSettings):
    """
    Configuration class for the document store and logging.
    Uses pydantic BaseSettings for environment variable management.
    """

    # MongoDB Configuration
    mongodb_url: str = Field(default="mongodb://localhost:27017")
    mongodb_database: str = Field(default="inventario")
    books_collection: str = Field(default="books")
    authors_collection: str = Field(default="authors")
    server_selection_timeout_ms: int = Field(default=5000)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    # Development/Testing
    debug: bool = Field(default=False)

    @field_validator('server_selection_timeout_ms')
    @classmethod
    def validate_selection_timeout(cls, v):
        """Ensure the server selection timeout is reasonable."""
        if v < 100 or v > 60000:
            raise ValueError('server_selection_timeout_ms must be between 100 and 60000')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra fields from .env
    }


# Global configuration instance
config = StoreConfig()
