"""Android implementations of the timezone store and notifier.

Both shell out to the platform binaries available to a privileged shell
(``adb shell`` or a boot script): getprop/setprop, ``am`` and ``cmd``.
"""

from __future__ import annotations

import logging
import subprocess

from tz_autoset.config.schema import DeviceConfig
from tz_autoset.errors import PropertyStoreError

logger = logging.getLogger(__name__)


def _run(cmd: list[str], timeout: float) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )


class AndroidPropertyStore:
    """Reads and writes the persisted timezone system property."""

    def __init__(self, config: DeviceConfig) -> None:
        self._config = config

    @property
    def key(self) -> str:
        return self._config.timezone_property

    def read(self) -> str:
        cmd = [self._config.getprop_binary, self.key]
        try:
            result = _run(cmd, self._config.command_timeout_seconds)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise PropertyStoreError(f"Cannot read {self.key}: {e}") from e
        if result.returncode != 0:
            raise PropertyStoreError(
                f"Cannot read {self.key}: {result.stderr.strip() or f'exit {result.returncode}'}"
            )
        return result.stdout.strip()

    def write(self, zone: str) -> bool:
        cmd = [self._config.setprop_binary, self.key, zone]
        try:
            result = _run(cmd, self._config.command_timeout_seconds)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.error("setprop %s failed: %s", self.key, e)
            return False
        if result.returncode != 0:
            logger.error("setprop %s failed: %s", self.key, result.stderr.strip())
            return False
        return True


class AndroidTimezoneNotifier:
    """Notifies apps and the system time zone detector of a new zone."""

    def __init__(self, config: DeviceConfig) -> None:
        self._config = config

    def broadcast_timezone_changed(self, zone: str) -> bool:
        return self._call(
            "broadcast",
            [
                self._config.am_binary, "broadcast",
                "-a", self._config.broadcast_action,
                "--es", "time-zone", zone,
            ],
        )

    def suggest_manual_time_zone(self, zone: str, timestamp_ms: int) -> bool:
        return self._call(
            "time_zone_detector suggestion",
            [
                self._config.cmd_binary, "time_zone_detector", "suggest_manual_time_zone",
                "--zone_id", zone,
                "--quality", self._config.suggestion_quality,
                "--elapsed_realtime", str(timestamp_ms),
            ],
        )

    def _call(self, what: str, cmd: list[str]) -> bool:
        try:
            result = _run(cmd, self._config.command_timeout_seconds)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Timezone %s failed: %s", what, e)
            return False
        if result.returncode != 0:
            logger.warning(
                "Timezone %s exited %d: %s", what, result.returncode, result.stderr.strip(),
            )
            return False
        return True
