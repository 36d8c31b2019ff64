"""Playback intent reconciliation between callers and a native engine.

`PlaybackReconciler` is the transport authority. Callers declare intent
(play, pause, which track, where in it); the reconciler pushes that intent
into the engine and a periodic tick re-reads live engine state to correct
any divergence. The engine can be paused, resumed or run to the end of a
track by forces outside this process, and it may reject `play()` after the
fact, so success is never assumed.

Every public operation is synchronous and fully updates intent, index and
deferred state before returning. The only awaited work is the engine's own
play request, which runs as a task and reports back through
`_settle_play`. Operations must be invoked from within the running event
loop.
"""

from __future__ import annotations

import asyncio
import logging
import math
from contextlib import suppress
from typing import Callable

from playlist_player.runtime_config import PlayerConfig, normalize_tick_interval
from playlist_player.services.deferred import DeferredOperationQueue
from playlist_player.services.dispatcher import (
    EventDispatcher,
    LifecycleHandler,
    TrackChangeHandler,
)
from playlist_player.services.navigator import TrackNavigator
from playlist_player.services.playback_engine import (
    EngineEvent,
    EngineFault,
    EngineSnapshot,
    MetadataLoaded,
    PlaybackEngine,
    TimeUpdated,
    TrackEnded,
)
from playlist_player.services.playlist import PlaylistError, Track, build_playlist
from playlist_player.services.projection import (
    BoundarySink,
    PlaybackStatus,
    PlayStateSink,
    StatusSink,
)
from playlist_player.utils.time_format import TimeFormatter

logger = logging.getLogger(__name__)


class PlaybackReconciler:
    """Owns playback intent for one engine and keeps the engine in line with it."""

    def __init__(
        self,
        *,
        engine: PlaybackEngine,
        config: PlayerConfig | None = None,
        status_sink: StatusSink | None = None,
        boundary_sink: BoundarySink | None = None,
        play_state_sink: PlayStateSink | None = None,
        dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._engine = engine
        self._config = config or PlayerConfig()
        self._formatter = TimeFormatter(
            no_time=self._config.no_time_display,
            zero_pad=self._config.zero_pad_minutes,
        )
        self._tick_interval = normalize_tick_interval(self._config.tick_interval_s)
        self._navigator = TrackNavigator()
        self._deferred = DeferredOperationQueue()
        self._dispatcher = dispatcher or EventDispatcher()
        self._status_sink = status_sink
        self._boundary_sink = boundary_sink
        self._play_state_sink = play_state_sink
        self._playing = False
        self._scrubbing = False
        self._play_generation = 0
        self._pending_play: asyncio.Task[None] | None = None
        self._tick_task: asyncio.Task[None] | None = None
        self._engine.set_event_handler(self._handle_engine_event)

    # -- queries ------------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def current_index(self) -> int:
        return self._navigator.index

    @property
    def playlist(self) -> tuple[Track, ...]:
        return self._navigator.tracks

    @property
    def current_track(self) -> Track | None:
        if not self._navigator.is_loaded:
            return None
        return self._navigator.current_track

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    @property
    def play_pending(self) -> bool:
        """True while an engine play request has not resolved yet."""
        return self._pending_play is not None

    @property
    def scrubbing(self) -> bool:
        return self._scrubbing

    def status(self) -> PlaybackStatus:
        """Elapsed/remaining/duration readouts for the current engine state."""
        snapshot = EngineSnapshot.read(self._engine)
        duration = _round_half_up(snapshot.known_duration)
        pending_seek = self._deferred.peek_seek()
        if pending_seek is not None:
            current: float = pending_seek
        else:
            current = _round_half_up(_finite_or_zero(snapshot.current_time))
        return PlaybackStatus(
            elapsed=self._formatter.format(current),
            remaining=self._formatter.format(current - duration),
            duration=self._formatter.format(duration),
            position_percent=_percent(current, duration),
        )

    def format_time(self, seconds: object) -> str:
        return self._formatter.format(seconds)

    def set_no_time_display(self, value: str) -> None:
        self._formatter.no_time = value

    def enable_display_time_zero_pad(self) -> None:
        self._formatter.zero_pad = True

    # -- handler registration -----------------------------------------------

    def register_play_handler(self, handler: LifecycleHandler | None) -> None:
        self._dispatcher.register_play_handler(handler)

    def register_pause_handler(self, handler: LifecycleHandler | None) -> None:
        self._dispatcher.register_pause_handler(handler)

    def register_stop_handler(self, handler: LifecycleHandler | None) -> None:
        self._dispatcher.register_stop_handler(handler)

    def register_track_change_handler(
        self, handler: TrackChangeHandler | None
    ) -> None:
        self._dispatcher.register_track_change_handler(handler)

    # -- lifecycle ------------------------------------------------------------

    async def start(self) -> None:
        """Start the engine and the periodic reconciliation tick."""
        await self._engine.start()
        if self._tick_task is None:
            self._tick_task = asyncio.create_task(self._tick_loop())

    async def shutdown(self) -> None:
        """Stop ticking, let any pending play settle, then release the engine."""
        if self._tick_task is not None:
            self._tick_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._tick_task
            self._tick_task = None
        await self.wait_for_pending_play()
        try:
            await self._engine.shutdown()
        except Exception:
            logger.warning("Playback engine shutdown failed.", exc_info=True)

    async def wait_for_pending_play(self) -> None:
        """Wait until the latest engine play request has succeeded or failed."""
        while self._pending_play is not None:
            task = self._pending_play
            await task
            if self._pending_play is task:
                self._pending_play = None

    # -- intent operations ----------------------------------------------------

    def load_playlist(self, records: object) -> None:
        """Replace the playlist; raises `PlaylistError` for unusable input."""
        tracks = build_playlist(records)  # type: ignore[arg-type]
        was_playing = self._playing
        if was_playing:
            self.pause()
        self._navigator.load(tracks)
        self._deferred.clear_all()
        self._engine.assign_source(self._navigator.current_track.url)
        self._publish_boundaries()
        self._dispatcher.reset_track_change()
        logger.info(
            "Loaded playlist with %d track(s).",
            len(tracks),
            extra={"resume": was_playing},
        )
        self._dispatcher.dispatch_track_change(self._navigator.index)
        if was_playing:
            self.play()

    def play(self) -> None:
        self._require_playlist()
        was_playing = self._playing
        self._playing = True
        # Source must be in place before the deferred seek and the play command.
        source = self._deferred.take_source()
        if source is not None:
            self._engine.assign_source(source)
        seek = self._deferred.take_seek()
        if seek is not None:
            self._engine.seek(seek)
        self._request_engine_play()
        self._publish_play_state()
        self._dispatcher.dispatch_track_change(self._navigator.index)
        if not was_playing:
            self._dispatcher.dispatch_play()

    def pause(self) -> None:
        self._enter_paused()
        self._refresh_status()
        self._dispatcher.dispatch_pause()

    def stop(self) -> None:
        self._enter_paused()
        self._deferred.clear_seek()
        self._engine.seek(0.0)
        self._publish_position(0.0)
        self._refresh_status()
        self._dispatcher.dispatch_stop()

    def play_pause(self) -> None:
        if self._playing:
            self.pause()
        else:
            self.play()

    def seek(self, seconds: float) -> None:
        """Seek now while playing; while paused, park it for the next `play()`."""
        position = _finite_or_none(seconds)
        if position is None:
            return
        position = max(0.0, position)
        if self._playing:
            self._engine.seek(position)
        else:
            self._deferred.defer_seek(position)
            if not self._scrubbing:
                duration = EngineSnapshot.read(self._engine).known_duration
                self._publish_position(_percent(position, duration))
        self._refresh_status()

    def seek_percent(self, percent: float) -> None:
        """Seek to a slider position expressed as 0-100 percent of duration."""
        fraction = _fraction(percent)
        if fraction is None:
            return
        duration = EngineSnapshot.read(self._engine).known_duration
        self.seek(duration * fraction)

    def previous_track(self) -> None:
        self._change_track(self._navigator.step_previous())

    def next_track(self) -> None:
        self._change_track(self._navigator.step_next())

    def play_track(self, index: int) -> bool:
        """Jump to `index` and play; returns False (no-op) when out of range.

        Jumping to the current index keeps the loaded source and still
        resumes playback.
        """
        self._require_playlist()
        target = self._navigator.clamp_or_reject(index)
        if target is None:
            return False
        if target != self._navigator.index:
            self._navigator.move_to(target)
            self._engine.assign_source(self._navigator.current_track.url)
        self._publish_boundaries()
        self._refresh_status()
        self._deferred.clear_all()
        self.play()
        return True

    # -- slider scrubbing -------------------------------------------------------

    def begin_scrub(self) -> None:
        """Suppress position/status publishing while a slider is being dragged."""
        self._scrubbing = True

    def end_scrub(self) -> None:
        self._scrubbing = False
        self._refresh_status()

    def preview_scrub(self, percent: float) -> PlaybackStatus:
        """Readouts for a slider position, published without seeking."""
        fraction = _fraction(percent) or 0.0
        duration = _round_half_up(EngineSnapshot.read(self._engine).known_duration)
        seconds = _round_half_up(duration * fraction)
        status = PlaybackStatus(
            elapsed=self._formatter.format(seconds),
            remaining=self._formatter.format(seconds - duration),
            duration=self._formatter.format(duration),
            position_percent=fraction * 100,
        )
        if self._status_sink is not None:
            self._project(
                self._status_sink.update_times,
                status.elapsed,
                status.remaining,
                status.duration,
            )
        return status

    # -- reconciliation ---------------------------------------------------------

    def reconcile(self) -> None:
        """Bring intent and the live engine state back into agreement.

        Runs on every tick and eagerly when the engine reports a track end.
        """
        if not self._navigator.is_loaded:
            return
        if self._pending_play is not None:
            # The engine has not answered the last play request yet; its
            # paused flag says nothing about an outside actor.
            self._refresh_status()
            return
        snapshot = EngineSnapshot.read(self._engine)
        if self._playing:
            if snapshot.ended:
                if not self._navigator.is_last:
                    logger.debug(
                        "Track ended; advancing.",
                        extra={"track_index": self._navigator.index},
                    )
                    self.next_track()
                else:
                    self._park_at_start()
            elif snapshot.paused:
                logger.info("Engine paused outside the player; following it.")
                self.pause()
            self._refresh_status()
        elif not snapshot.paused:
            logger.info("Engine resumed outside the player; following it.")
            self.play()

    def _park_at_start(self) -> None:
        """After the last track ends: rewind to the first track, paused."""
        logger.info("Playlist finished; parking at the first track.")
        self._enter_paused()
        self._dispatcher.dispatch_pause()
        self._navigator.move_to(0)
        self._engine.assign_source(self._navigator.current_track.url)
        self._deferred.clear_all()
        self._publish_position(0.0)
        self._publish_boundaries()
        self._refresh_status()
        self._dispatcher.dispatch_track_change(self._navigator.index)

    async def _tick_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self._tick_interval)
                try:
                    self.reconcile()
                except Exception:
                    logger.exception("Reconciliation tick failed.")
        except asyncio.CancelledError:
            return

    async def _handle_engine_event(self, event: EngineEvent) -> None:
        if isinstance(event, TrackEnded):
            self.reconcile()
        elif isinstance(event, MetadataLoaded):
            self._publish_position(0.0)
            self._refresh_status()
        elif isinstance(event, TimeUpdated):
            if not self._scrubbing:
                duration = event.duration if event.duration > 0 else 0.0
                self._publish_position(_percent(event.current_time, duration))
        elif isinstance(event, EngineFault):
            logger.warning("Playback engine fault: %s", event.message)

    # -- engine play requests ---------------------------------------------------

    def _request_engine_play(self) -> None:
        self._play_generation += 1
        self._pending_play = asyncio.create_task(
            self._settle_play(self._play_generation, self._engine.source)
        )

    async def _settle_play(self, generation: int, source: str | None) -> None:
        try:
            if generation != self._play_generation or not self._playing:
                # Superseded or paused before the request went out.
                return
            try:
                await self._engine.play()
            except Exception as exc:
                self._handle_play_failure(generation, source, exc)
                return
            if not self._playing:
                # Paused while the engine was starting up.
                self._engine.pause()
        finally:
            if generation == self._play_generation:
                self._pending_play = None

    def _handle_play_failure(
        self, generation: int, source: str | None, exc: Exception
    ) -> None:
        logger.error(
            "Engine could not play %s: %s",
            source,
            exc,
            extra={"track_index": self._navigator.index},
        )
        if generation != self._play_generation or self._engine.source != source:
            logger.debug("Discarding play failure for a superseded source.")
            return
        if source is not None:
            self._deferred.defer_source(source)
        if self._playing:
            self.pause()

    # -- internals ----------------------------------------------------------

    def _require_playlist(self) -> None:
        if not self._navigator.is_loaded:
            raise PlaylistError("no playlist loaded", kind="not_loaded")

    def _enter_paused(self) -> None:
        self._playing = False
        self._engine.pause()
        self._publish_play_state()

    def _change_track(self, index: int) -> None:
        self._deferred.clear_all()
        self._engine.assign_source(self._navigator.current_track.url)
        self._publish_position(0.0)
        self._publish_boundaries()
        self._dispatcher.dispatch_track_change(index)
        self.play()

    def _refresh_status(self) -> None:
        if self._scrubbing or self._status_sink is None:
            return
        status = self.status()
        self._project(
            self._status_sink.update_times,
            status.elapsed,
            status.remaining,
            status.duration,
        )

    def _publish_position(self, percent: float) -> None:
        if self._status_sink is not None:
            self._project(self._status_sink.set_position, percent)

    def _publish_boundaries(self) -> None:
        if self._boundary_sink is None:
            return
        self._project(
            self._boundary_sink.set_skip_enabled,
            previous=not self._navigator.is_first,
            next_=not self._navigator.is_last,
        )

    def _publish_play_state(self) -> None:
        if self._play_state_sink is not None:
            self._project(self._play_state_sink.set_playing, self._playing)

    @staticmethod
    def _project(
        sink_call: Callable[..., object], *args: object, **kwargs: object
    ) -> None:
        try:
            sink_call(*args, **kwargs)
        except Exception:
            logger.exception("Projection sink failed.")


def _round_half_up(value: float) -> int:
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def _finite_or_none(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        numeric = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def _fraction(percent: object) -> float | None:
    numeric = _finite_or_none(percent)
    if numeric is None:
        return None
    return max(0.0, min(100.0, numeric)) / 100


def _percent(position: float, duration: float) -> float:
    if duration <= 0:
        return 0.0
    return position / duration * 100
