"""IP geolocation timezone lookup.

Queries plain-text geolocation endpoints for the IANA zone of the caller's
public IP. Free, no authentication required:
  - ip-api.com: http://ip-api.com/line/?fields=timezone
  - ipinfo.io:  https://ipinfo.io/timezone
"""

from __future__ import annotations

import logging

import httpx

from tz_autoset.config.schema import ResolverConfig
from tz_autoset.errors import LookupHelperError, TimezoneNotFoundError

logger = logging.getLogger(__name__)


def is_valid_zone(value: str) -> bool:
    """Return True when ``value`` looks like a ``Region/City`` IANA identifier.

    Error pages and empty bodies never contain a slash.
    """
    return "/" in value


class TimezoneResolver:
    """Tries each configured endpoint in order and returns the first valid zone."""

    def __init__(self, config: ResolverConfig, client: httpx.Client | None = None) -> None:
        self._config = config
        self._endpoints = self._check_endpoints(config.endpoints)
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(
                config.read_timeout_seconds,
                connect=config.connect_timeout_seconds,
            ),
            follow_redirects=False,
        )
        self._owns_client = client is None

    @property
    def endpoints(self) -> list[str]:
        return list(self._endpoints)

    def resolve(self) -> str:
        """Return the first valid zone from the configured endpoints.

        Raises:
            TimezoneNotFoundError: no endpoint produced a valid zone.
        """
        for url in self._endpoints:
            zone = self._query(url)
            if zone is not None:
                logger.debug("Timezone %s from %s", zone, url)
                return zone
        raise TimezoneNotFoundError("Could not determine timezone from any API")

    def _query(self, url: str) -> str | None:
        try:
            resp = self._client.get(url, headers={"User-Agent": self._config.user_agent})
        except httpx.HTTPError as e:
            logger.warning("Timezone lookup via %s failed: %s", url, e)
            return None

        if resp.status_code != 200:
            logger.warning("Timezone lookup via %s returned HTTP %d", url, resp.status_code)
            return None

        lines = resp.text.splitlines()
        zone = lines[0].strip() if lines else ""
        if not zone:
            logger.warning("Timezone lookup via %s returned an empty body", url)
            return None
        if not is_valid_zone(zone):
            logger.warning("Invalid timezone format from %s: %r", url, zone[:80])
            return None
        return zone

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> TimezoneResolver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @staticmethod
    def _check_endpoints(endpoints: list[str]) -> list[str]:
        if not endpoints:
            raise LookupHelperError("No geolocation endpoints configured")
        for url in endpoints:
            try:
                parsed = httpx.URL(url)
            except httpx.InvalidURL as e:
                raise LookupHelperError(f"Invalid geolocation endpoint {url!r}: {e}") from e
            if parsed.scheme not in ("http", "https") or not parsed.host:
                raise LookupHelperError(f"Geolocation endpoint must be an http(s) URL: {url!r}")
        return list(endpoints)
