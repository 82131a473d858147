"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import os
import sys

import structlog

from tz_autoset.logging.device_log import DeviceLogHandler


class _BelowLevel(logging.Filter):
    """Pass only records strictly below ``level``."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self._level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self._level


def setup_logging(
    level: str = "INFO",
    fmt: str = "console",
    log_file: str = "",
    device_tag: str = "",
    device_log_binary: str = "/system/bin/log",
) -> None:
    """Configure logging for a correction run.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        fmt: Output format - "console" for human-readable lines, "json" for
            machine consumption.
        log_file: Optional file path for log output. Empty = streams only.
        device_tag: Android log tag. Empty disables the device log sink.
        device_log_binary: Path of the Android ``log`` binary. The device
            sink is only attached when it exists.

    Records below WARNING go to stdout, WARNING and above to stderr.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if fmt == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = []

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(_BelowLevel(logging.WARNING))
    stdout_handler.setFormatter(formatter)
    handlers.append(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)
    handlers.append(stderr_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # logcat adds its own timestamp and tag, so only the message is sent
    if device_tag and os.path.exists(device_log_binary):
        device_handler = DeviceLogHandler(device_tag, device_log_binary)
        device_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(device_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
