"""
Structured logging using structlog.
Provides JSON or console output and a context-bound logger for store operations.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.stdlib import LoggerFactory


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    debug: bool = False
) -> None:
    """
    Set up structured logging with configurable output formats.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        log_file: Optional log file path
        debug: Add call-site information to every event
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors.append(structlog.processors.CallsiteParameterAdder())

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, log_level.upper()))
        file_handler.setFormatter(logging.Formatter('%(message)s'))
        logging.getLogger().addHandler(file_handler)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Logging system initialized",
        level=log_level,
        format=log_format,
        file=str(log_file) if log_file else None,
        debug=debug
    )


class StoreLogger:
    """
    Logger for collection operations with bound context.
    """

    def __init__(self, name: str, **context: Any):
        self.logger = structlog.get_logger(name)
        self.context = dict(context)

    def log_database_operation(self, operation: str, success: bool = True, **fields: Any) -> None:
        """Log a database operation; failures are logged at error level."""
        level = "debug" if success else "error"
        getattr(self.logger, level)(
            "Database operation",
            operation=operation,
            success=success,
            **fields,
            **self.context
        )

    def log_not_found(self, operation: str, **fields: Any) -> None:
        """Log an operation that targeted a missing record."""
        self.logger.warning(
            "Record not found",
            operation=operation,
            **fields,
            **self.context
        )

    def log_malformed_document(self, document_id: Any, error: str) -> None:
        """Log a stored document that does not fit the record schema."""
        self.logger.error(
            "Skipping malformed document",
            document_id=str(document_id),
            error=error,
            **self.context
        )

    def log_dangling_references(self, book_id: str, missing: list) -> None:
        """Log author ids referenced by a book that no longer resolve."""
        self.logger.warning(
            "Book references missing authors",
            book_id=book_id,
            missing_authors=missing,
            **self.context
        )
