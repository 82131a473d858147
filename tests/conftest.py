"""Shared test fixtures and fakes for tz-autoset."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from tz_autoset.config.manager import ConfigManager
from tz_autoset.config.schema import AppConfig
from tz_autoset.errors import TimezoneNotFoundError


class FakeStore:
    """In-memory timezone property."""

    def __init__(
        self,
        zone: str = "",
        accept_writes: bool = True,
        read_back: str | None = None,
        read_error: Exception | None = None,
    ) -> None:
        self.zone = zone
        self.accept_writes = accept_writes
        self.read_back = read_back  # value reported by reads after a write
        self.read_error = read_error
        self.writes: list[str] = []
        self.reads = 0

    def read(self) -> str:
        self.reads += 1
        if self.read_error is not None:
            raise self.read_error
        if self.writes and self.read_back is not None:
            return self.read_back
        return self.zone

    def write(self, zone: str) -> bool:
        self.writes.append(zone)
        if not self.accept_writes:
            return False
        self.zone = zone
        return True


class RecordingNotifier:
    def __init__(self) -> None:
        self.broadcasts: list[str] = []
        self.suggestions: list[tuple[str, int]] = []

    def broadcast_timezone_changed(self, zone: str) -> bool:
        self.broadcasts.append(zone)
        return True

    def suggest_manual_time_zone(self, zone: str, timestamp_ms: int) -> bool:
        self.suggestions.append((zone, timestamp_ms))
        return True


class ScriptedResolver:
    """Returns queued zones. ``None`` raises TimezoneNotFoundError, exceptions are raised as-is."""

    def __init__(self, *results: str | Exception | None) -> None:
        self._results = list(results)
        self.calls = 0
        self.closed = False

    def resolve(self) -> str:
        self.calls += 1
        result = self._results.pop(0) if self._results else None
        if result is None:
            raise TimezoneNotFoundError("Could not determine timezone from any API")
        if isinstance(result, Exception):
            raise result
        return result

    def close(self) -> None:
        self.closed = True


class FakeProbe:
    """Reports unreachable for ``failures`` probes, then reachable (if ``up``)."""

    def __init__(self, failures: int = 0, up: bool = True) -> None:
        self._failures = failures
        self._up = up
        self.calls = 0

    def is_reachable(self) -> bool:
        self.calls += 1
        if self.calls <= self._failures:
            return False
        return self._up


@pytest.fixture
def config() -> AppConfig:
    """Provide a default test configuration."""
    return AppConfig()


@pytest.fixture
def config_manager(tmp_path: Path) -> ConfigManager:
    """Provide a config manager with test paths."""
    defaults = tmp_path / "config.defaults.yaml"
    defaults.write_text("resolver:\n  max_attempts: 3\n")
    user = tmp_path / "config.yaml"
    mgr = ConfigManager(defaults_path=defaults, user_path=user)
    mgr.load()
    return mgr


@pytest.fixture
def make_store() -> Callable[..., FakeStore]:
    return FakeStore


@pytest.fixture
def make_resolver() -> Callable[..., ScriptedResolver]:
    return ScriptedResolver


@pytest.fixture
def make_probe() -> Callable[..., FakeProbe]:
    return FakeProbe


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def sleeps() -> list[float]:
    return []
