"""Logging configuration module with structured logging support."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Optional, Union

from loguru import logger


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for logging system."""

    # File logging
    log_file: Path = Path("logs/doc_scanner.log")
    log_level: str = "INFO"
    rotation_size: str = "10 MB"
    retention_count: int = 10
    compression: str = "zip"
    file_enabled: bool = True

    # Console logging
    console_enabled: bool = True
    console_level: str = "WARNING"
    console_format: str = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"

    # File format
    file_format: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message} | {extra}"

    # Performance monitoring
    enable_performance_logging: bool = True
    slow_operation_threshold_seconds: float = 1.0

    def __post_init__(self) -> None:
        """Validate logging configuration."""
        valid_levels: set[str] = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}

        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.log_level}")
        if self.console_level.upper() not in valid_levels:
            raise ValueError(f"Invalid console log level: {self.console_level}")
        if self.retention_count < 1:
            raise ValueError("Retention count must be at least 1")
        if self.slow_operation_threshold_seconds <= 0:
            raise ValueError("Slow operation threshold must be positive")


class StructuredLogger:
    """Logger facade with structured operation and performance records."""

    def __init__(self, config: LoggingConfig) -> None:
        """Initialize structured logger with configuration."""
        self.config: LoggingConfig = config
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Setup loguru logger with configuration."""
        # Remove default handler
        logger.remove()

        if self.config.console_enabled:
            logger.add(
                sys.stderr,
                level=self.config.console_level.upper(),
                format=self.config.console_format,
                colorize=True,
            )

        if self.config.file_enabled:
            logger.add(
                str(self.config.log_file),
                level=self.config.log_level.upper(),
                format=self.config.file_format,
                rotation=self.config.rotation_size,
                retention=self.config.retention_count,
                compression=self.config.compression,
                enqueue=True,
                serialize=False  # Keep human-readable format
            )

    def log_operation_start(self, operation: str, **context: Any) -> str:
        """Log the start of an operation and return operation ID.

        Args:
            operation: Name of the operation.
            **context: Additional context data.

        Returns:
            Operation ID for tracking.
        """
        operation_id: str = f"{operation}_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}"

        logger.bind(operation_id=operation_id, operation=operation, **context).info(
            f"Operation started: {operation}"
        )

        return operation_id

    def log_operation_end(
        self,
        operation_id: str,
        operation: str,
        success: bool = True,
        error: Optional[BaseException] = None,
        **context: Any
    ) -> None:
        """Log the end of an operation.

        Args:
            operation_id: Operation ID from log_operation_start.
            operation: Name of the operation.
            success: Whether operation was successful.
            error: Exception if operation failed.
            **context: Additional context data.
        """
        log_data: Dict[str, Any] = {
            "operation_id": operation_id,
            "operation": operation,
            "success": success,
            "end_time": datetime.now().isoformat(),
            **context
        }

        if success:
            logger.bind(**log_data).success(f"Operation completed: {operation}")
        else:
            logger.bind(
                error_type=type(error).__name__ if error else "Unknown",
                error_message=str(error) if error else "Unknown error",
                **log_data
            ).error(f"Operation failed: {operation}")

    def log_performance_metric(
        self,
        metric_name: str,
        value: Union[int, float],
        unit: str = "",
        **context: Any
    ) -> None:
        """Log a performance metric, warning when a duration is slow."""
        logger.bind(metric_name=metric_name, metric_value=value, metric_unit=unit, **context).debug(
            f"Performance metric: {metric_name}={value}{unit and ' ' + unit}"
        )

        if (self.config.enable_performance_logging and
                metric_name.endswith('_duration_seconds') and
                value > self.config.slow_operation_threshold_seconds):
            logger.bind(threshold_seconds=self.config.slow_operation_threshold_seconds, **context).warning(
                f"Slow operation detected: {metric_name} took {value:.2f}s"
            )

    def log_sync_operation(
        self,
        document_id: str,
        success: bool,
        items_count: int = 0,
        error: Optional[str] = None,
        **context: Any
    ) -> None:
        """Log a sync of scanned items to the store.

        Args:
            document_id: Synced document.
            success: Whether the sync succeeded.
            items_count: Number of items handed to the store.
            error: Error message if failed.
            **context: Additional context data.
        """
        bound = logger.bind(
            sync_document_id=document_id,
            sync_success=success,
            sync_items_count=items_count,
            sync_error=error,
            **context
        )
        if success:
            bound.info(f"Sync operation: {document_id}")
        else:
            bound.error(f"Sync operation failed: {document_id}")


def setup_logging(config: Optional[LoggingConfig] = None) -> StructuredLogger:
    """Setup logging system with configuration.

    Args:
        config: Logging configuration. If None, uses default configuration.

    Returns:
        Configured StructuredLogger instance.
    """
    if config is None:
        config = LoggingConfig()

    if config.file_enabled:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)

    structured_logger: StructuredLogger = StructuredLogger(config)

    logger.bind(
        log_file=str(config.log_file),
        log_level=config.log_level,
        console_enabled=config.console_enabled,
    ).debug("Logging system initialized")

    return structured_logger


class LoggedOperation:
    """Context manager for logging operations with automatic timing."""

    def __init__(
        self,
        structured_logger: StructuredLogger,
        operation_name: str,
        **context: Any
    ) -> None:
        self.structured_logger: StructuredLogger = structured_logger
        self.operation_name: str = operation_name
        self.context: Dict[str, Any] = context
        self.operation_id: Optional[str] = None
        self.start_time: Optional[datetime] = None

    def __enter__(self) -> LoggedOperation:
        """Enter context and start logging operation."""
        self.start_time = datetime.now()
        self.operation_id = self.structured_logger.log_operation_start(
            self.operation_name,
            **self.context
        )
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        _: Optional[TracebackType]
    ) -> None:
        """Exit context and log operation completion."""
        if self.start_time and self.operation_id:
            duration_seconds: float = (datetime.now() - self.start_time).total_seconds()

            self.structured_logger.log_performance_metric(
                f"{self.operation_name}_duration_seconds",
                duration_seconds,
                "seconds",
                operation_id=self.operation_id
            )

            self.structured_logger.log_operation_end(
                self.operation_id,
                self.operation_name,
                success=exc_type is None,
                error=exc_val,
                duration_seconds=duration_seconds,
                **self.context
            )
