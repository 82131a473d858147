"""Internet reachability checks."""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class ReachabilityProbe(Protocol):
    def is_reachable(self) -> bool: ...


class NetworkProbe:
    """Single ICMP echo to a well-known host via the system ``ping``."""

    def __init__(self, host: str = "8.8.8.8", timeout_seconds: int = 2, ping_binary: str = "ping") -> None:
        self.host = host
        self.timeout_seconds = timeout_seconds
        self.ping_binary = ping_binary

    def is_reachable(self) -> bool:
        cmd = [self.ping_binary, "-c", "1", "-W", str(self.timeout_seconds), self.host]
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                # -W bounds the wait for a reply, not DNS or process start
                timeout=self.timeout_seconds + 5,
                check=False,
            )
        except OSError as e:
            logger.debug("Cannot run %s (%s), treating network as unreachable", self.ping_binary, e)
            return False
        except subprocess.TimeoutExpired:
            logger.debug("ping %s timed out", self.host)
            return False
        return result.returncode == 0


def wait_for_network(
    probe: ReachabilityProbe,
    max_attempts: int = 30,
    interval_seconds: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Probe until reachable or ``max_attempts`` probes have failed.

    At boot the network may not be up yet.
    """
    for attempt in range(1, max_attempts + 1):
        if probe.is_reachable():
            return True
        logger.debug("Network probe %d/%d failed", attempt, max_attempts)
        if attempt < max_attempts:
            sleep(interval_seconds)
    return False
