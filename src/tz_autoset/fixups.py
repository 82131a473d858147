"""Corrections for zones an outdated device tzdata models incorrectly."""

from __future__ import annotations

from collections.abc import Iterable

from tz_autoset.config.schema import TzdataFixup


def apply_fixups(zone: str, fixups: Iterable[TzdataFixup]) -> tuple[str, TzdataFixup | None]:
    """Return the zone to apply for ``zone`` and the fixup that matched, if any.

    The first entry whose ``stale`` equals ``zone`` wins.
    """
    for fixup in fixups:
        if fixup.stale == zone:
            return fixup.corrected, fixup
    return zone, None
