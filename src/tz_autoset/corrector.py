"""Timezone correction run.

Sequence:
  read current zone → wait for network → resolve (with retries) →
  apply tzdata fixups → write + notify → verify

Nothing is written until a valid candidate zone is known, and a failed run
leaves the persisted zone as it was found.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from tz_autoset.config.schema import AppConfig, TzdataFixup
from tz_autoset.device.base import TimezoneNotifier, TimezoneStore
from tz_autoset.errors import (
    CorrectorError,
    NetworkUnavailableError,
    PropertyWriteError,
    TimezoneNotFoundError,
    VerificationError,
)
from tz_autoset.fixups import apply_fixups
from tz_autoset.logging.context import bind_context, clear_context
from tz_autoset.network import ReachabilityProbe, wait_for_network

logger = logging.getLogger(__name__)


class CorrectorState(str, Enum):
    INIT = "init"
    WAITING_FOR_NETWORK = "waiting_for_network"
    RESOLVING = "resolving"
    APPLYING = "applying"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"


class ZoneResolver(Protocol):
    def resolve(self) -> str: ...

    def close(self) -> None: ...


@dataclass
class CorrectionResult:
    """Outcome of a single run."""

    state: CorrectorState = CorrectorState.INIT
    previous_zone: str = ""
    detected_zone: str = ""
    target_zone: str = ""
    fixup: TzdataFixup | None = None
    changed: bool = False
    error: CorrectorError | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is CorrectorState.DONE

    @property
    def exit_code(self) -> int:
        if self.succeeded:
            return 0
        return self.error.exit_code if self.error is not None else 1


class TimezoneCorrector:
    """Detects the device's timezone from its public IP and persists it."""

    def __init__(
        self,
        config: AppConfig,
        store: TimezoneStore,
        notifier: TimezoneNotifier,
        resolver: ZoneResolver,
        probe: ReachabilityProbe,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._store = store
        self._notifier = notifier
        self._resolver = resolver
        self._probe = probe
        self._sleep = sleep
        self._clock = clock

    def run(self, dry_run: bool = False) -> CorrectionResult:
        """Execute one correction run. Never raises ``CorrectorError``."""
        result = CorrectionResult()
        logger.info("Starting timezone auto-detection...")
        try:
            with contextlib.closing(self._resolver):
                self._run(result, dry_run)
        except CorrectorError as e:
            result.error = e
            self._transition(result, CorrectorState.FAILED)
            if result.changed:
                # the property was written, so the previous zone is gone
                logger.error("%s", e)
            else:
                logger.error("%s. Keeping timezone: %s", e, result.previous_zone or "<unset>")
        finally:
            clear_context()
        return result

    def _run(self, result: CorrectionResult, dry_run: bool) -> None:
        result.previous_zone = self._store.read()
        logger.info("Current timezone: %s", result.previous_zone or "<unset>")

        self._transition(result, CorrectorState.WAITING_FOR_NETWORK)
        net = self._config.network
        if not wait_for_network(self._probe, net.max_attempts, net.interval_seconds, self._sleep):
            waited = net.max_attempts * net.interval_seconds
            raise NetworkUnavailableError(f"No network connectivity after {waited:g}s")
        logger.info("Network is up.")

        self._transition(result, CorrectorState.RESOLVING)
        result.detected_zone = self._resolve_with_retries()
        logger.info("Detected timezone: %s", result.detected_zone)

        self._transition(result, CorrectorState.APPLYING)
        result.target_zone, result.fixup = apply_fixups(result.detected_zone, self._config.fixups)
        if result.fixup is not None:
            logger.info(
                "Applying tzdata fixup: %s -> %s (outdated tzdata workaround)",
                result.fixup.stale,
                result.fixup.corrected,
            )

        if result.target_zone == result.previous_zone:
            logger.info("Timezone already correct: %s", result.target_zone)
            self._transition(result, CorrectorState.DONE)
            return

        if dry_run:
            logger.info(
                "Dry run: would change timezone %s -> %s",
                result.previous_zone or "<unset>",
                result.target_zone,
            )
            self._transition(result, CorrectorState.DONE)
            return

        self._apply(result)

        self._transition(result, CorrectorState.VERIFYING)
        current = self._store.read()
        if current != result.target_zone:
            raise VerificationError(
                f"Failed to verify timezone change (expected {result.target_zone}, got {current})"
            )
        logger.info(
            "Timezone set successfully: %s (detected: %s)",
            result.target_zone,
            result.detected_zone,
        )
        self._transition(result, CorrectorState.DONE)

    def _resolve_with_retries(self) -> str:
        cfg = self._config.resolver
        for attempt in range(1, cfg.max_attempts + 1):
            try:
                return self._resolver.resolve()
            except TimezoneNotFoundError as e:
                if attempt == cfg.max_attempts:
                    break
                logger.info(
                    "Attempt %d/%d failed (%s), retrying in %gs...",
                    attempt,
                    cfg.max_attempts,
                    e,
                    cfg.retry_delay_seconds,
                )
                self._sleep(cfg.retry_delay_seconds)
        raise TimezoneNotFoundError(
            f"Could not detect timezone after {cfg.max_attempts} attempts"
        )

    def _apply(self, result: CorrectionResult) -> None:
        logger.info(
            "Changing timezone: %s -> %s",
            result.previous_zone or "<unset>",
            result.target_zone,
        )
        if not self._store.write(result.target_zone):
            raise PropertyWriteError(f"Could not persist timezone {result.target_zone}")
        result.changed = True

        # Clocks and screensavers only pick up the new zone from the broadcast
        self._notifier.broadcast_timezone_changed(result.target_zone)
        self._notifier.suggest_manual_time_zone(
            result.target_zone, int(self._clock() * 1000)
        )

    @staticmethod
    def _transition(result: CorrectionResult, state: CorrectorState) -> None:
        result.state = state
        bind_context(state=state.value)
        logger.debug("State -> %s", state.value)
