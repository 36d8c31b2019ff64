"""Runtime configuration and normalization helpers.

These helpers keep CLI flag interpretation deterministic and give the
reconciler a single immutable settings object.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

BACKEND_NAMES = ("fake", "vlc")
DEFAULT_BACKEND = "fake"
DEFAULT_TICK_INTERVAL_S = 0.1
TICK_INTERVAL_MIN_S = 0.02
TICK_INTERVAL_MAX_S = 1.0
DEFAULT_NO_TIME_DISPLAY = "--:--"


@dataclass(frozen=True)
class PlayerConfig:
    """Reconciler settings that are fixed for the lifetime of a player."""

    tick_interval_s: float = DEFAULT_TICK_INTERVAL_S
    no_time_display: str = DEFAULT_NO_TIME_DISPLAY
    zero_pad_minutes: bool = False


def resolve_log_level(*, verbose: bool, quiet: bool) -> str:
    """Resolve effective log level from CLI flags.

    Precedence is deterministic: --quiet overrides --verbose.
    """
    if quiet:
        return "WARNING"
    if verbose:
        return "DEBUG"
    return "INFO"


def normalize_tick_interval(value: object) -> float:
    """Clamp a tick interval in seconds; unusable values fall back to default."""
    try:
        numeric = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_TICK_INTERVAL_S
    if not math.isfinite(numeric) or numeric <= 0:
        return DEFAULT_TICK_INTERVAL_S
    return max(TICK_INTERVAL_MIN_S, min(TICK_INTERVAL_MAX_S, numeric))


def normalize_backend_name(value: str | None) -> str:
    """Normalize a backend name to a supported engine, defaulting to fake."""
    if value is None:
        return DEFAULT_BACKEND
    normalized = value.strip().lower()
    if normalized in BACKEND_NAMES:
        return normalized
    return DEFAULT_BACKEND


def build_player_config(
    *,
    tick_interval_s: object = DEFAULT_TICK_INTERVAL_S,
    no_time_display: str | None = None,
    zero_pad_minutes: bool = False,
) -> PlayerConfig:
    """Build a normalized `PlayerConfig` from loosely typed inputs."""
    return PlayerConfig(
        tick_interval_s=normalize_tick_interval(tick_interval_s),
        no_time_display=(
            DEFAULT_NO_TIME_DISPLAY if no_time_display is None else no_time_display
        ),
        zero_pad_minutes=bool(zero_pad_minutes),
    )
