"""Native playback engine contract, events and snapshots.

`PlaybackReconciler` depends on this protocol only. The engine is treated as
an untrusted peer: its paused/ended flags may flip without any call from the
reconciler (hardware media keys, OS transport controls), and `play()` may
reject asynchronously.
"""

from __future__ import annotations

import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol


class EnginePlayError(RuntimeError):
    """Raised by `PlaybackEngine.play` when the engine refuses to start."""


@dataclass(frozen=True)
class EngineEvent:
    """Marker base type for engine-originated notifications."""

    pass


@dataclass(frozen=True)
class TrackEnded(EngineEvent):
    """The loaded media played through to its end."""

    pass


@dataclass(frozen=True)
class MetadataLoaded(EngineEvent):
    """Enough of the media loaded to know its duration (NaN if unknown)."""

    duration: float


@dataclass(frozen=True)
class TimeUpdated(EngineEvent):
    """Periodic transport position update in seconds."""

    current_time: float
    duration: float


@dataclass(frozen=True)
class EngineFault(EngineEvent):
    """Engine-reported runtime error outside of a play request."""

    message: str


EngineEventHandler = Callable[[EngineEvent], Awaitable[None]]


class PlaybackEngine(Protocol):
    """Playback engine capability set consumed by `PlaybackReconciler`."""

    def set_event_handler(self, handler: EngineEventHandler) -> None: ...

    async def start(self) -> None: ...

    async def shutdown(self) -> None: ...

    @property
    def source(self) -> str | None: ...

    def assign_source(self, url: str) -> None: ...

    async def play(self) -> None: ...

    def pause(self) -> None: ...

    @property
    def current_time(self) -> float: ...

    def seek(self, seconds: float) -> None: ...

    @property
    def duration(self) -> float: ...

    @property
    def paused(self) -> bool: ...

    @property
    def ended(self) -> bool: ...

    @property
    def error(self) -> str | None: ...


@dataclass(frozen=True)
class EngineSnapshot:
    """Point-in-time read of engine state; never assumed to match intent."""

    source: str | None
    current_time: float
    duration: float
    paused: bool
    ended: bool
    error: str | None

    @classmethod
    def read(cls, engine: PlaybackEngine) -> EngineSnapshot:
        return cls(
            source=engine.source,
            current_time=engine.current_time,
            duration=engine.duration,
            paused=engine.paused,
            ended=engine.ended,
            error=engine.error,
        )

    @property
    def known_duration(self) -> float:
        """Duration in seconds, or 0.0 while the engine does not know it."""
        if math.isfinite(self.duration) and self.duration > 0:
            return self.duration
        return 0.0
