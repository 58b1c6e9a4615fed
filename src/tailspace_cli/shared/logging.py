"""Logging configuration for tailspace-cli.

Configures structlog with a prefixed, human-readable line format for
interactive provisioning runs and JSON output when logs are shipped
elsewhere. All diagnostics go to stderr unless a log file is given.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog

LOG_PREFIX = "[devcontainer-setup]"

# Key used to carry a display level that has no stdlib equivalent
SEVERITY_KEY = "severity"


def _apply_severity(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Replace the stdlib level with an explicit severity tag (e.g. success)."""
    severity = event_dict.pop(SEVERITY_KEY, None)
    if severity:
        event_dict["level"] = severity
    return event_dict


class PrefixedRenderer:
    """Render ``<timestamp> [devcontainer-setup] LEVEL: message key=value``."""

    def __init__(self, prefix: str = LOG_PREFIX):
        self.prefix = prefix

    def __call__(
        self, logger: Any, method_name: str, event_dict: structlog.types.EventDict
    ) -> str:
        timestamp = event_dict.pop("timestamp", "")
        level = str(event_dict.pop("level", method_name)).upper()
        event = event_dict.pop("event", "")
        event_dict.pop("logger", None)
        line = f"{timestamp} {self.prefix} {level}: {event}".lstrip()
        if event_dict:
            extras = " ".join(f"{key}={value}" for key, value in event_dict.items())
            line = f"{line} {extras}"
        return line


def configure_logging(
    level: str = "info",
    log_file: str | Path | None = None,
    json_output: bool = False,
) -> None:
    """Configure logging for the application.

    Called once on startup. Configures both standard logging and structlog.

    Args:
        level: Log level (debug, info, warning, error, critical)
        log_file: Optional path to log file (instead of stderr)
        json_output: If True, output JSON format
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = []

    if log_file:
        file_handler = logging.FileHandler(str(log_file))
        file_handler.setLevel(log_level)
        handlers.append(file_handler)
    else:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(log_level)
        handlers.append(stream_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        format="%(message)s",
        force=True,
    )

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _apply_severity,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(PrefixedRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class ProvisionLogger:
    """Leveled logger with the info/error/success vocabulary of a setup run."""

    def __init__(self, bound: structlog.stdlib.BoundLogger):
        self._log = bound

    def debug(self, event: str, **kw: Any) -> None:
        self._log.debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._log.info(event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._log.error(event, **kw)

    def success(self, event: str, **kw: Any) -> None:
        kw[SEVERITY_KEY] = "success"
        self._log.info(event, **kw)

    def bind(self, **kw: Any) -> "ProvisionLogger":
        return ProvisionLogger(self._log.bind(**kw))


def get_logger(name: str) -> ProvisionLogger:
    """Get a provisioning logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        ProvisionLogger wrapping a structlog logger
    """
    return ProvisionLogger(structlog.get_logger(name))
