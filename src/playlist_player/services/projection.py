"""Optional one-way projections of reconciler state.

Display layers implement any subset of these sinks. The reconciler never
requires one to be attached.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class PlaybackStatus:
    """Formatted time readouts plus slider position for the current track."""

    elapsed: str
    remaining: str
    duration: str
    position_percent: float


class StatusSink(Protocol):
    def update_times(self, elapsed: str, remaining: str, duration: str) -> None: ...

    def set_position(self, percent: float) -> None: ...


class BoundarySink(Protocol):
    def set_skip_enabled(self, *, previous: bool, next_: bool) -> None: ...


class PlayStateSink(Protocol):
    def set_playing(self, playing: bool) -> None: ...
