from __future__ import annotations

import logging
import logging.handlers
import os
import pathlib
import sys
from typing import Any, Dict, List, Optional

import structlog
from pythonjsonlogger import jsonlogger

from vnite_sdk.core.base import VniteManager
from vnite_sdk.utils.exceptions import ManagerInitializationError


def get_logger(name: str) -> Any:
    """Get a structured logger for a component.

    Loggers are lazy proxies, so they may be created at import time and will
    pick up the configuration applied later by :class:`LoggingManager`.
    """
    return structlog.get_logger(name)


class LoggingManager(VniteManager):
    """Manages logging configuration for the SDK tools.

    The Logging Manager configures Python's logging module with console and
    file handlers according to the ``logging`` configuration section, and
    routes structlog through those handlers so every component logs through
    the same pipeline. Console output goes to stderr; stdout is reserved for
    the user-facing progress narration of the command-line tools.
    """

    # Mapping from string log levels to logging module constants
    LOG_LEVELS = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }

    def __init__(self, config_manager: Any) -> None:
        """Initialize the Logging Manager.

        Args:
            config_manager: The Configuration Manager to use for logging settings.
        """
        super().__init__(name="logging_manager")
        self._config_manager = config_manager
        self._root_logger: Optional[logging.Logger] = None
        self._file_handler: Optional[logging.Handler] = None
        self._console_handler: Optional[logging.Handler] = None
        self._log_directory: Optional[pathlib.Path] = None
        self._handlers: List[logging.Handler] = []
        self._log_format = "text"

    def initialize(self) -> None:
        """Initialize the Logging Manager.

        Sets up logging based on the configuration, creating handlers for
        console and file as configured.

        Raises:
            ManagerInitializationError: If initialization fails.
        """
        try:
            logging_config = self._config_manager.get("logging", {})
            log_level = self._parse_level(logging_config.get("level", "WARNING"))
            self._log_format = str(logging_config.get("format", "text")).lower()

            self._root_logger = logging.getLogger()
            self._root_logger.setLevel(log_level)

            # Remove any existing handlers
            for handler in list(self._root_logger.handlers):
                self._root_logger.removeHandler(handler)

            formatter = self._create_formatter()

            console_config = logging_config.get("console", {})
            if console_config.get("enabled", True):
                self._console_handler = logging.StreamHandler(sys.stderr)
                self._console_handler.setLevel(
                    self._parse_level(console_config.get("level", "WARNING"))
                )
                self._console_handler.setFormatter(formatter)
                self._root_logger.addHandler(self._console_handler)
                self._handlers.append(self._console_handler)

            file_config = logging_config.get("file", {})
            if file_config.get("enabled", False):
                file_path = pathlib.Path(file_config.get("path", "logs/vnite-sdk.log"))
                self._log_directory = file_path.parent
                os.makedirs(self._log_directory, exist_ok=True)

                self._file_handler = logging.handlers.RotatingFileHandler(
                    file_path,
                    maxBytes=self._parse_rotation(file_config.get("rotation", "10 MB")),
                    backupCount=self._parse_retention(file_config.get("retention", "30 days")),
                    encoding="utf-8",
                )
                self._file_handler.setLevel(log_level)
                self._file_handler.setFormatter(formatter)
                self._root_logger.addHandler(self._file_handler)
                self._handlers.append(self._file_handler)

            self._configure_structlog()

            self._initialized = True
            self._healthy = True

            get_logger("vnite_sdk.logging").debug(
                "Logging Manager initialized", format=self._log_format
            )

        except Exception as e:
            raise ManagerInitializationError(
                f"Failed to initialize LoggingManager: {str(e)}",
                manager_name=self.name,
            ) from e

    def _parse_level(self, level: Any) -> int:
        return self.LOG_LEVELS.get(str(level).lower(), logging.WARNING)

    @staticmethod
    def _parse_rotation(rotation: Any) -> int:
        # e.g. "10 MB"
        if isinstance(rotation, str) and "MB" in rotation:
            return int(rotation.split()[0]) * 1024 * 1024
        return 10 * 1024 * 1024

    @staticmethod
    def _parse_retention(retention: Any) -> int:
        # e.g. "30 days"
        if isinstance(retention, str) and "days" in retention:
            return int(retention.split()[0])
        return 30

    def _shared_processors(self) -> List[Any]:
        return [
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ]

    def _create_formatter(self) -> logging.Formatter:
        """Create the formatter matching the configured log format.

        Returns:
            logging.Formatter: JSON formatter or a structlog console renderer.
        """
        if self._log_format == "json":
            return jsonlogger.JsonFormatter(
                fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
                json_ensure_ascii=False,
            )
        return structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False),
            foreign_pre_chain=self._shared_processors(),
        )

    def _configure_structlog(self) -> None:
        """Configure structlog for structured logging."""
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                *self._shared_processors(),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )

    def get_logger(self, name: str) -> Any:
        """Get a logger for a specific component.

        Args:
            name: The name of the component requesting a logger.

        Returns:
            A structlog bound logger for the component.
        """
        return get_logger(name)

    def set_level(self, level: str) -> None:
        """Change the root and console log level at runtime.

        Args:
            level: Level name such as ``"debug"`` or ``"INFO"``.
        """
        log_level = self._parse_level(level)
        if self._root_logger:
            self._root_logger.setLevel(log_level)
        if self._console_handler:
            self._console_handler.setLevel(log_level)
        if self._file_handler:
            self._file_handler.setLevel(log_level)

    def shutdown(self) -> None:
        """Shut down the Logging Manager.

        Flushes and closes all handlers it installed.
        """
        if not self._initialized:
            return

        for handler in self._handlers:
            handler.flush()
            handler.close()
            if self._root_logger:
                self._root_logger.removeHandler(handler)

        self._handlers.clear()
        self._console_handler = None
        self._file_handler = None
        self._initialized = False
        self._healthy = False

    def status(self) -> Dict[str, Any]:
        """Get the status of the Logging Manager.

        Returns:
            Dict[str, Any]: Status information about the Logging Manager.
        """
        status = super().status()
        status.update({
            "log_directory": str(self._log_directory) if self._log_directory else None,
            "format": self._log_format,
            "handlers": {
                "console": self._console_handler is not None,
                "file": self._file_handler is not None,
            },
        })
        return status
