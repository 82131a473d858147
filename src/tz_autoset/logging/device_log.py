"""Logging handler that forwards records to the Android system log."""

from __future__ import annotations

import logging
import subprocess

# android.util.Log priority letters accepted by /system/bin/log -p
_PRIORITIES = {
    logging.DEBUG: "d",
    logging.INFO: "i",
    logging.WARNING: "w",
    logging.ERROR: "e",
    logging.CRITICAL: "f",
}


def priority_for(levelno: int) -> str:
    """Map a stdlib log level to the nearest Android log priority."""
    for level in sorted(_PRIORITIES, reverse=True):
        if levelno >= level:
            return _PRIORITIES[level]
    return "v"


class DeviceLogHandler(logging.Handler):
    """Writes each record through the device's ``log`` binary.

    Output goes to logcat under ``tag`` so a provisioning run can be followed
    with ``adb logcat -s <tag>``.
    """

    def __init__(self, tag: str, binary: str = "/system/bin/log", timeout: float = 5.0) -> None:
        super().__init__()
        self.tag = tag
        self.binary = binary
        self.timeout = timeout

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            subprocess.run(
                [self.binary, "-t", self.tag, "-p", priority_for(record.levelno), message],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=self.timeout,
                check=False,
            )
        except Exception:
            self.handleError(record)
