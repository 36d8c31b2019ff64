"""Fake playback engine for deterministic testing and the `fake` CLI backend."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Mapping
from contextlib import suppress
from dataclasses import dataclass, field

from .playback_engine import (
    EngineEvent,
    EngineEventHandler,
    EnginePlayError,
    MetadataLoaded,
    TimeUpdated,
    TrackEnded,
)


@dataclass
class _EngineState:
    source: str | None = None
    current_time: float = 0.0
    duration: float = math.nan
    paused: bool = True
    ended: bool = False
    error: str | None = None
    metadata_announced: bool = False


@dataclass
class FakeEngineLog:
    """What the reconciler asked the engine to do, in call order."""

    assigned: list[str] = field(default_factory=list)
    plays: list[str | None] = field(default_factory=list)
    pauses: int = 0
    seeks: list[float] = field(default_factory=list)


class FakeEngine:
    """In-memory engine that simulates playback progress.

    With ``tick_interval_ms=None`` nothing moves on its own and tests drive
    time through `advance()`. Out-of-band transport changes are simulated
    with `external_pause()` / `external_resume()`.
    """

    def __init__(
        self,
        *,
        tick_interval_ms: int | None = 250,
        default_duration_s: float = 180.0,
        durations: Mapping[str, float] | None = None,
    ) -> None:
        self._tick_interval_ms = tick_interval_ms
        self._default_duration_s = default_duration_s
        self._durations = dict(durations or {})
        self._state = _EngineState()
        self._handler: EngineEventHandler | None = None
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._rejected_sources: set[str] = set()
        self._failures_pending = 0
        self.log = FakeEngineLog()

    def set_event_handler(self, handler: EngineEventHandler) -> None:
        self._handler = handler

    async def start(self) -> None:
        if self._task is not None or self._tick_interval_ms is None:
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._ticker_loop())

    async def shutdown(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    @property
    def source(self) -> str | None:
        return self._state.source

    @property
    def current_time(self) -> float:
        return self._state.current_time

    @property
    def duration(self) -> float:
        return self._state.duration

    @property
    def paused(self) -> bool:
        return self._state.paused

    @property
    def ended(self) -> bool:
        return self._state.ended

    @property
    def error(self) -> str | None:
        return self._state.error

    def assign_source(self, url: str) -> None:
        self.log.assigned.append(url)
        self._state = _EngineState(source=url)

    async def play(self) -> None:
        source = self._state.source
        self.log.plays.append(source)
        # Resolve on a later loop iteration, like a real engine would.
        await asyncio.sleep(0)
        if source is None:
            raise EnginePlayError("no source assigned")
        if source in self._rejected_sources:
            self._state.error = f"cannot play {source}"
            raise EnginePlayError(self._state.error)
        if self._failures_pending > 0:
            self._failures_pending -= 1
            self._state.error = f"play rejected for {source}"
            raise EnginePlayError(self._state.error)
        if self._state.source != source:
            # A newer source arrived while this request was pending.
            return
        self._load_metadata()
        if self._state.ended:
            self._state.current_time = 0.0
            self._state.ended = False
        self._state.error = None
        self._state.paused = False
        if not self._state.metadata_announced:
            self._state.metadata_announced = True
            await self._emit(MetadataLoaded(self._state.duration))

    def pause(self) -> None:
        self.log.pauses += 1
        self._state.paused = True

    def seek(self, seconds: float) -> None:
        self.log.seeks.append(seconds)
        self._load_metadata()
        position = max(0.0, seconds)
        if math.isfinite(self._state.duration):
            position = min(position, self._state.duration)
            self._state.ended = position >= self._state.duration > 0
        self._state.current_time = position

    # -- out-of-band simulation -------------------------------------------

    def reject_source(self, url: str) -> None:
        """Make every future play of `url` fail."""
        self._rejected_sources.add(url)

    def accept_source(self, url: str) -> None:
        self._rejected_sources.discard(url)

    def fail_next_play(self, count: int = 1) -> None:
        self._failures_pending += max(0, count)

    def external_pause(self) -> None:
        """Pause as if a lock-screen or hardware control did it."""
        self._state.paused = True

    def external_resume(self) -> None:
        """Resume as if a lock-screen or hardware control did it."""
        if self._state.source is None:
            return
        self._load_metadata()
        if self._state.ended:
            self._state.current_time = 0.0
            self._state.ended = False
        self._state.paused = False

    async def advance(self, seconds: float) -> None:
        """Move the playhead forward while playing; ends the track at duration."""
        state = self._state
        if state.paused or state.source is None:
            return
        self._load_metadata()
        state.current_time = min(state.current_time + seconds, state.duration)
        reached_end = state.current_time >= state.duration
        if reached_end:
            state.ended = True
            state.paused = True
        await self._emit(TimeUpdated(state.current_time, state.duration))
        if reached_end:
            await self._emit(TrackEnded())

    async def finish(self) -> None:
        """Play the current track through to its end."""
        self._load_metadata()
        await self.advance(self._state.duration - self._state.current_time)

    def _load_metadata(self) -> None:
        source = self._state.source
        if source is None or math.isfinite(self._state.duration):
            return
        self._state.duration = self._durations.get(source, self._default_duration_s)

    async def _ticker_loop(self) -> None:
        assert self._tick_interval_ms is not None
        interval_s = self._tick_interval_ms / 1000
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(interval_s)
                await self.advance(interval_s)
        except asyncio.CancelledError:
            pass

    async def _emit(self, event: EngineEvent) -> None:
        if self._handler is None:
            return
        await self._handler(event)
