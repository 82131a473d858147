"""Failure taxonomy for a correction run.

Every error ends the run with the persisted timezone left as it was found,
except ``VerificationError`` which is raised after a write was attempted.
"""

from __future__ import annotations


class CorrectorError(Exception):
    """Base class for failures that end a run with a non-zero exit code."""

    exit_code = 1


class NetworkUnavailableError(CorrectorError):
    """No internet reachability within the bounded wait."""


class TimezoneNotFoundError(CorrectorError):
    """No geolocation endpoint returned a valid IANA zone."""


class LookupHelperError(CorrectorError):
    """The HTTP lookup helper could not be built from configuration."""


class PropertyStoreError(CorrectorError):
    """The persisted timezone property could not be read."""


class PropertyWriteError(CorrectorError):
    """Writing the timezone property was rejected."""


class VerificationError(CorrectorError):
    """The persisted timezone does not match the value just written."""


class ConfigError(CorrectorError):
    """The configuration files could not be parsed or validated."""
