"""Seconds to display-time formatting for elapsed/remaining/duration readouts."""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_NO_TIME = "--:--"


def format_display_time(
    seconds: object, *, no_time: str = DEFAULT_NO_TIME, zero_pad: bool = False
) -> str:
    """Format seconds as M:SS (or MM:SS when padded), or H:MM:SS past an hour.

    Negative input keeps a leading minus sign. Input that is not a finite
    number yields ``no_time``.
    """
    numeric = _coerce_seconds(seconds)
    if numeric is None:
        return no_time
    # Round half up on the magnitude so -1.5 and 1.5 both land on 2.
    total_seconds = math.floor(abs(numeric) + 0.5)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    sign = "-" if numeric < 0 else ""
    if hours > 0:
        return f"{sign}{hours}:{minutes:02d}:{secs:02d}"
    if zero_pad:
        return f"{sign}{minutes:02d}:{secs:02d}"
    return f"{sign}{minutes}:{secs:02d}"


def _coerce_seconds(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        numeric = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


@dataclass
class TimeFormatter:
    """Per-player formatting policy; both settings may change at runtime."""

    no_time: str = DEFAULT_NO_TIME
    zero_pad: bool = False

    def format(self, seconds: object) -> str:
        return format_display_time(
            seconds, no_time=self.no_time, zero_pad=self.zero_pad
        )
