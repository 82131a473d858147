"""Protocols for the device state a correction run reads and mutates."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TimezoneStore(Protocol):
    """The device's persisted timezone setting."""

    def read(self) -> str:
        """Return the current persisted zone (may be empty)."""
        ...

    def write(self, zone: str) -> bool:
        """Persist ``zone``. Returns False if the write was rejected."""
        ...


@runtime_checkable
class TimezoneNotifier(Protocol):
    """Consumers that must learn about a timezone change."""

    def broadcast_timezone_changed(self, zone: str) -> bool:
        """Announce the change to apps (clocks, screensavers, ...)."""
        ...

    def suggest_manual_time_zone(self, zone: str, timestamp_ms: int) -> bool:
        """Hand the zone to the OS time zone detector as a manual suggestion."""
        ...
