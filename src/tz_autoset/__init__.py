"""tz-autoset: IP-based timezone detection and correction for provisioned devices."""

try:
    from importlib.metadata import version as _pkg_version
    __version__ = _pkg_version("tz-autoset")
except Exception:
    __version__ = "dev"
