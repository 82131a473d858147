"""Tests for the IP geolocation timezone resolver."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest

from tz_autoset.config.schema import ResolverConfig
from tz_autoset.errors import LookupHelperError, TimezoneNotFoundError
from tz_autoset.resolver import TimezoneResolver, is_valid_zone

IP_API = "http://ip-api.com/line/?fields=timezone"
IPINFO = "https://ipinfo.io/timezone"


def _client(routes: dict[str, httpx.Response | Exception], seen: list[httpx.Request] | None = None) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        outcome = routes[str(request.url)]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestIsValidZone:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Asia/Amman", True),
            ("America/Argentina/Buenos_Aires", True),
            ("/", True),
            ("", False),
            ("garbage", False),
            ("UTC", False),
            ("<html>error</html>", True),
        ],
    )
    def test_slash_heuristic(self, value: str, expected: bool) -> None:
        assert is_valid_zone(value) is expected


class TestTimezoneResolver:
    def test_first_endpoint_wins(self) -> None:
        seen: list[httpx.Request] = []
        client = _client(
            {IP_API: httpx.Response(200, text="Europe/Berlin\n"), IPINFO: httpx.Response(200, text="Asia/Tokyo")},
            seen,
        )
        resolver = TimezoneResolver(ResolverConfig(), client=client)
        assert resolver.resolve() == "Europe/Berlin"
        assert [str(r.url) for r in seen] == [IP_API]

    def test_sends_user_agent(self) -> None:
        seen: list[httpx.Request] = []
        client = _client({IP_API: httpx.Response(200, text="Europe/Berlin")}, seen)
        resolver = TimezoneResolver(ResolverConfig(user_agent="panel-provisioner/2.0"), client=client)
        resolver.resolve()
        assert seen[0].headers["User-Agent"] == "panel-provisioner/2.0"

    def test_falls_back_on_transport_error(self) -> None:
        client = _client({
            IP_API: httpx.ConnectError("connection refused"),
            IPINFO: httpx.Response(200, text="  Asia/Amman  \n"),
        })
        resolver = TimezoneResolver(ResolverConfig(), client=client)
        assert resolver.resolve() == "Asia/Amman"

    def test_falls_back_on_timeout(self) -> None:
        client = _client({
            IP_API: httpx.ReadTimeout("timed out"),
            IPINFO: httpx.Response(200, text="Asia/Amman"),
        })
        assert TimezoneResolver(ResolverConfig(), client=client).resolve() == "Asia/Amman"

    def test_falls_back_on_http_error_status(self) -> None:
        client = _client({
            IP_API: httpx.Response(429, text="Too/Many"),
            IPINFO: httpx.Response(200, text="America/Chicago"),
        })
        assert TimezoneResolver(ResolverConfig(), client=client).resolve() == "America/Chicago"

    def test_rejects_body_without_slash(self) -> None:
        client = _client({
            IP_API: httpx.Response(200, text="fail"),
            IPINFO: httpx.Response(200, text="Australia/Brisbane"),
        })
        assert TimezoneResolver(ResolverConfig(), client=client).resolve() == "Australia/Brisbane"

    def test_only_first_line_is_used(self) -> None:
        client = _client({IP_API: httpx.Response(200, text="\nEurope/Berlin\n")})
        resolver = TimezoneResolver(ResolverConfig(endpoints=[IP_API]), client=client)
        with pytest.raises(TimezoneNotFoundError):
            resolver.resolve()

    def test_all_endpoints_fail(self) -> None:
        client = _client({
            IP_API: httpx.Response(200, text=""),
            IPINFO: httpx.Response(503, text="unavailable"),
        })
        resolver = TimezoneResolver(ResolverConfig(), client=client)
        with pytest.raises(TimezoneNotFoundError, match="any API"):
            resolver.resolve()

    def test_custom_endpoint_order(self) -> None:
        seen: list[httpx.Request] = []
        client = _client(
            {IP_API: httpx.Response(200, text="Europe/Berlin"), IPINFO: httpx.Response(200, text="Asia/Tokyo")},
            seen,
        )
        resolver = TimezoneResolver(ResolverConfig(endpoints=[IPINFO, IP_API]), client=client)
        assert resolver.resolve() == "Asia/Tokyo"
        assert resolver.endpoints == [IPINFO, IP_API]


class TestResolverLifecycle:
    def test_owned_client_closed(self) -> None:
        resolver = TimezoneResolver(ResolverConfig())
        with resolver:
            pass
        assert resolver._client.is_closed

    def test_injected_client_not_closed(self) -> None:
        client = MagicMock(spec=httpx.Client)
        TimezoneResolver(ResolverConfig(), client=client).close()
        client.close.assert_not_called()

    def test_owned_client_timeouts(self) -> None:
        resolver = TimezoneResolver(
            ResolverConfig(connect_timeout_seconds=3.0, read_timeout_seconds=4.0),
        )
        timeout = resolver._client.timeout
        assert timeout.connect == 3.0
        assert timeout.read == 4.0
        resolver.close()

    def test_no_endpoints(self) -> None:
        with pytest.raises(LookupHelperError, match="No geolocation endpoints"):
            TimezoneResolver(ResolverConfig(endpoints=[]))

    @pytest.mark.parametrize("url", ["ftp://example.com/tz", "not-a-url", "/timezone"])
    def test_rejects_non_http_endpoint(self, url: str) -> None:
        with pytest.raises(LookupHelperError):
            TimezoneResolver(ResolverConfig(endpoints=[url]))
