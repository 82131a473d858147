"""Pydantic configuration models for a correction run."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from tz_autoset import __version__


class NetworkConfig(BaseModel):
    probe_host: str = "8.8.8.8"
    probe_timeout_seconds: int = Field(2, ge=1)
    ping_binary: str = "ping"
    max_attempts: int = Field(30, ge=1)
    interval_seconds: float = Field(2.0, ge=0.0)


class ResolverConfig(BaseModel):
    endpoints: list[str] = [
        "http://ip-api.com/line/?fields=timezone",
        "https://ipinfo.io/timezone",
    ]
    connect_timeout_seconds: float = Field(10.0, gt=0.0)
    read_timeout_seconds: float = Field(10.0, gt=0.0)
    user_agent: str = f"tz-autoset/{__version__}"
    max_attempts: int = Field(3, ge=1)
    retry_delay_seconds: float = Field(10.0, ge=0.0)


class TzdataFixup(BaseModel):
    """A zone the device's tzdata gets wrong, and an equivalent it gets right."""

    stale: str
    corrected: str


class DeviceConfig(BaseModel):
    timezone_property: str = "persist.sys.timezone"
    getprop_binary: str = "getprop"
    setprop_binary: str = "setprop"
    am_binary: str = "am"
    cmd_binary: str = "cmd"
    broadcast_action: str = "android.intent.action.TIMEZONE_CHANGED"
    suggestion_quality: str = "single"
    command_timeout_seconds: float = Field(10.0, gt=0.0)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"
    file: str = ""
    device_tag: str = "TzAutoSet"
    device_log_binary: str = "/system/bin/log"


# tzdata 2022a still models Asia/Amman as UTC+2 with DST although Jordan moved
# to permanent UTC+3 in late 2022. Asia/Baghdad is UTC+3 year-round there.
DEFAULT_FIXUPS = [TzdataFixup(stale="Asia/Amman", corrected="Asia/Baghdad")]


class AppConfig(BaseModel):
    """Root configuration model."""

    network: NetworkConfig = NetworkConfig()
    resolver: ResolverConfig = ResolverConfig()
    fixups: list[TzdataFixup] = Field(default_factory=lambda: list(DEFAULT_FIXUPS))
    device: DeviceConfig = DeviceConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("fixups")
    @classmethod
    def _check_fixups(cls, fixups: list[TzdataFixup]) -> list[TzdataFixup]:
        stale = [f.stale for f in fixups]
        if len(stale) != len(set(stale)):
            raise ValueError("fixups: each stale zone may appear only once")
        chained = sorted({f.corrected for f in fixups} & set(stale))
        if chained:
            raise ValueError(f"fixups: corrected zones must not be stale keys: {chained}")
        return fixups
