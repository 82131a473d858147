"""tz-autoset entry point.

Usage (on-device, from a boot script or ``adb shell``):
  tz-autoset --config /data/local/tmp/tz-autoset.yaml

Exits 0 when the timezone is correct afterwards (including when it already
was), 1 on any failure. The persisted timezone is only touched once a valid
zone has been resolved.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tz_autoset import __version__
from tz_autoset.config.manager import ConfigManager
from tz_autoset.config.schema import AppConfig
from tz_autoset.corrector import CorrectionResult, TimezoneCorrector
from tz_autoset.device.android import AndroidPropertyStore, AndroidTimezoneNotifier
from tz_autoset.errors import ConfigError, CorrectorError
from tz_autoset.logging.structured import setup_logging
from tz_autoset.network import NetworkProbe
from tz_autoset.resolver import TimezoneResolver

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="tz-autoset",
        description="Detect the device timezone from its public IP and persist it.",
    )
    p.add_argument("--config", default="config.yaml", help="user overrides (YAML)")
    p.add_argument("--defaults", default="config.defaults.yaml", help="defaults (YAML)")
    p.add_argument("--log-level", default="", help="overrides logging.level from config")
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="resolve and report the target zone without changing anything",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def build_corrector(config: AppConfig) -> TimezoneCorrector:
    """Wire the Android device layer, network probe and HTTP resolver."""
    resolver = TimezoneResolver(config.resolver)
    probe = NetworkProbe(
        host=config.network.probe_host,
        timeout_seconds=config.network.probe_timeout_seconds,
        ping_binary=config.network.ping_binary,
    )
    return TimezoneCorrector(
        config=config,
        store=AndroidPropertyStore(config.device),
        notifier=AndroidTimezoneNotifier(config.device),
        resolver=resolver,
        probe=probe,
    )


def run(config: AppConfig, dry_run: bool = False) -> int:
    """Run one correction and return the process exit code."""
    try:
        corrector = build_corrector(config)
    except CorrectorError as e:
        logger.error("Failed to set up timezone lookup: %s", e)
        return e.exit_code

    result: CorrectionResult = corrector.run(dry_run=dry_run)
    return result.exit_code


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``tz-autoset`` command."""
    args = parse_args(argv)

    config_manager = ConfigManager(Path(args.defaults), Path(args.config))
    try:
        config = config_manager.load()
    except ConfigError as e:
        # Log with built-in defaults so the failure still reaches the device log
        fallback = AppConfig().logging
        setup_logging(
            level=args.log_level or fallback.level,
            fmt=fallback.format,
            device_tag=fallback.device_tag,
            device_log_binary=fallback.device_log_binary,
        )
        logger.error("%s", e)
        sys.exit(e.exit_code)

    setup_logging(
        level=args.log_level or config.logging.level,
        fmt=config.logging.format,
        log_file=config.logging.file,
        device_tag=config.logging.device_tag,
        device_log_binary=config.logging.device_log_binary,
    )

    sys.exit(run(config, dry_run=args.dry_run))


if __name__ == "__main__":
    main()
