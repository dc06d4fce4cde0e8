"""Centralized logging configuration for capgains.

Console logs go to stderr through structlog's stdlib integration, so stdout
only ever carries JSON tax results. An optional rotating file handler writes
the same events as JSON lines.
"""

import inspect
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

TIMESTAMP_FORMATS = {
    "iso": "iso",
    "compact": "%y%m%d-%H%M%S",
    "time": "%H:%M:%S",
}

DEFAULT_LOG_FILE = Path("logs/capgains.log")


class LoggingConfig(BaseModel):
    """Configuration for logging system.

    What each level shows:

    DEBUG:
    - Every applied transaction with the resulting portfolio state

    INFO:
    - Run summaries (transaction count, total tax)

    WARNING (CLI default):
    - Missing input files

    ERROR:
    - Runs that failed (unsupported operation, malformed or unreadable
      input, arithmetic fault)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Minimum console log level",
    )
    format: Literal["console", "json"] = Field(
        default="console",
        description="Console output format",
    )
    timestamp_format: Literal["iso", "compact", "time"] = Field(
        default="compact",
        description="Timestamp format: iso, compact (YYMMDD-HHMMSS) or time (HH:MM:SS)",
    )
    enable_file: bool = Field(
        default=False,
        description="Also write JSON lines to a rotating log file",
    )
    file_path: Path | None = Field(
        default=None,
        description="Log file path (logs/capgains.log if None)",
    )
    file_level: LogLevel = Field(
        default="WARNING",
        description="Minimum log level for file output",
    )
    max_file_size_mb: int = Field(
        default=10,
        description="Log file size in MB that triggers rotation",
    )
    backup_count: int = Field(
        default=3,
        description="Number of rotated log files to keep",
    )


class LoggerFactory:
    """
    Factory for creating and configuring structured loggers.

    Call configure() once at startup, then use get_logger() in modules.

    Example:
        LoggerFactory.configure(LoggingConfig(level="DEBUG"))

        logger = LoggerFactory.get_logger()
        logger.info("tax.processor.run_completed", transactions=3)
    """

    _config: LoggingConfig | None = None
    _configured: bool = False

    @classmethod
    def configure(cls, config: LoggingConfig | None = None) -> None:
        """
        Configure the logging system.

        Args:
            config: LoggingConfig instance. If None, uses default configuration.
        """
        if config is None:
            config = LoggingConfig()

        cls._config = config

        pre_chain = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt=TIMESTAMP_FORMATS[config.timestamp_format], utc=True, key="ts"),
        ]

        renderer: Any = _render_console if config.format == "console" else structlog.processors.JSONRenderer()
        console_handler = logging.StreamHandler(stream=sys.stderr)
        console_handler.setLevel(getattr(logging, config.level))
        console_handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain))

        handlers: list[logging.Handler] = [console_handler]
        root_level = getattr(logging, config.level)

        if config.enable_file:
            handlers.append(cls._file_handler(config, pre_chain))
            root_level = min(root_level, getattr(logging, config.file_level))

        logging.basicConfig(level=root_level, handlers=handlers, force=True)

        structlog.configure(
            processors=[
                *pre_chain,
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        cls._configured = True

    @staticmethod
    def _file_handler(config: LoggingConfig, pre_chain: list[Any]) -> logging.Handler:
        """Rotating JSON-lines handler for config.file_path."""
        file_path = config.file_path or DEFAULT_LOG_FILE
        file_path.parent.mkdir(parents=True, exist_ok=True)

        handler = RotatingFileHandler(
            filename=str(file_path),
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(getattr(logging, config.file_level))
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=pre_chain,
            )
        )
        return handler

    @classmethod
    def get_logger(cls, name: str | None = None):
        """
        Get a configured logger instance.

        Args:
            name: Optional logger name. If None, uses the calling module's __name__.

        Returns:
            Configured structlog BoundLogger instance.
        """
        if not cls._configured:
            cls.configure()

        if name is None:
            frame = inspect.currentframe()
            caller = frame.f_back if frame else None
            name = caller.f_globals.get("__name__", "capgains") if caller else "capgains"

        return structlog.get_logger(name)

    @classmethod
    def get_config(cls) -> LoggingConfig:
        """Get current logging configuration."""
        if cls._config is None:
            return LoggingConfig()
        return cls._config

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def reset(cls) -> None:
        """Drop handlers and structlog state (used between tests)."""
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        root_logger.setLevel(logging.NOTSET)

        cls._config = None
        cls._configured = False

        structlog.reset_defaults()


def _render_console(logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
    """Render ``ts [level] event | key=value (logger)`` on one line."""
    timestamp = event_dict.pop("ts", "")
    level = event_dict.pop("level", method_name)
    event = event_dict.pop("event", "")
    logger_name = event_dict.pop("logger", "")

    line = f"{timestamp} [{level}] {event}"
    context = " ".join(f"{key}={value}" for key, value in sorted(event_dict.items()) if not key.startswith("_"))
    if context:
        line += f" | {context}"
    if logger_name:
        line += f" ({logger_name})"
    return line
