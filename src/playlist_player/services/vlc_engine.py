"""VLC playback engine using python-vlc.

libVLC runs on a dedicated thread fed by a command queue. Property reads
come from a snapshot the thread refreshes every poll. Writes update that
snapshot optimistically and are applied on the thread in order.
"""

from __future__ import annotations

import asyncio
import math
import queue
import threading
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any, cast

from .playback_engine import (
    EngineEvent,
    EngineEventHandler,
    EngineFault,
    EnginePlayError,
    MetadataLoaded,
    TimeUpdated,
    TrackEnded,
)

_PAUSED_STATES = frozenset({"nothingspecial", "paused", "stopped", "ended", "error"})


@dataclass
class _Command:
    name: str
    args: tuple[Any, ...]
    future: asyncio.Future[Any] | None


@dataclass
class _Snapshot:
    source: str | None = None
    current_time: float = 0.0
    duration: float = math.nan
    paused: bool = True
    ended: bool = False
    error: str | None = None


class VLCPlaybackEngine:
    """Playback engine backed by a dedicated VLC thread."""

    def __init__(self, *, poll_interval_ms: int = 200) -> None:
        self._poll_interval = poll_interval_ms / 1000
        self._handler: EngineEventHandler | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: queue.Queue[_Command] = queue.Queue()
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._snapshot = _Snapshot()
        # Commands posted but not yet applied; the poll must not overwrite
        # optimistic snapshot values while any are outstanding.
        self._unapplied = 0

    def set_event_handler(self, handler: EngineEventHandler) -> None:
        self._handler = handler

    async def start(self) -> None:
        if self._thread is not None:
            return
        self._loop = asyncio.get_running_loop()
        ready_future: asyncio.Future[None] = self._loop.create_future()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._thread_main,
            args=(ready_future,),
            name="VLCEngineThread",
            daemon=True,
        )
        self._thread.start()
        await ready_future

    async def shutdown(self) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._queue.put(_Command("wake", (), None))
        self._thread.join(timeout=2.0)
        self._thread = None

    @property
    def source(self) -> str | None:
        with self._lock:
            return self._snapshot.source

    @property
    def current_time(self) -> float:
        with self._lock:
            return self._snapshot.current_time

    @property
    def duration(self) -> float:
        with self._lock:
            return self._snapshot.duration

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._snapshot.paused

    @property
    def ended(self) -> bool:
        with self._lock:
            return self._snapshot.ended

    @property
    def error(self) -> str | None:
        with self._lock:
            return self._snapshot.error

    def assign_source(self, url: str) -> None:
        with self._lock:
            self._snapshot = _Snapshot(source=url)
        self._post("assign_source", url)

    async def play(self) -> None:
        await self._submit("play")
        with self._lock:
            self._snapshot.paused = False
            self._snapshot.ended = False
            self._snapshot.error = None

    def pause(self) -> None:
        with self._lock:
            self._snapshot.paused = True
        self._post("pause")

    def seek(self, seconds: float) -> None:
        with self._lock:
            self._snapshot.current_time = max(0.0, seconds)
        self._post("seek", seconds)

    def _post(self, name: str, *args: Any) -> None:
        # Posted before start() is fine; the thread drains the queue on startup.
        with self._lock:
            self._unapplied += 1
        self._queue.put(_Command(name, args, None))

    async def _submit(self, name: str, *args: Any) -> Any:
        if self._loop is None:
            raise RuntimeError("VLC engine not started.")
        future: asyncio.Future[Any] = self._loop.create_future()
        with self._lock:
            self._unapplied += 1
        self._queue.put(_Command(name, args, future))
        return await future

    def _thread_main(self, ready_future: asyncio.Future[None]) -> None:
        try:
            import vlc

            instance = vlc.Instance()
            player = instance.media_player_new()
        except Exception as exc:  # pragma: no cover - depends on VLC install
            self._notify_future_exception(
                ready_future,
                RuntimeError(
                    "VLC engine unavailable. Ensure VLC/libVLC is installed."
                ),
            )
            self._emit_event(EngineFault(str(exc)))
            return

        self._notify_future_result(ready_future, None)
        while not self._stop_event.is_set():
            try:
                cmd = self._queue.get(timeout=self._poll_interval)
            except queue.Empty:
                cmd = None

            if cmd is not None and cmd.name != "wake":
                try:
                    result = self._handle_command(cmd, instance, player)
                    self._notify_future_result(cmd.future, result)
                except Exception as exc:
                    self._notify_future_exception(cmd.future, exc)
                    if cmd.future is None:
                        self._emit_event(EngineFault(str(exc)))
                finally:
                    with self._lock:
                        self._unapplied -= 1

            self._refresh_snapshot(player)

        player.stop()

    def _handle_command(self, cmd: _Command, instance: Any, player: Any) -> Any:
        name = cmd.name
        if name == "assign_source":
            (url,) = cmd.args
            if "://" in url:
                media = instance.media_new(url)
            else:
                media = instance.media_new_path(url)
            player.set_media(media)
            return None
        if name == "play":
            if _state_name(player) == "ended":
                player.stop()
            if player.play() == -1:
                raise EnginePlayError("libVLC refused to start playback.")
            return None
        if name == "pause":
            player.set_pause(1)
            return None
        if name == "seek":
            (seconds,) = cmd.args
            player.set_time(int(max(0.0, seconds) * 1000))
            return None
        raise ValueError(f"Unknown command {name}")

    def _refresh_snapshot(self, player: Any) -> None:
        state = _state_name(player)
        time_ms = player.get_time()
        length_ms = player.get_length()
        events: list[EngineEvent] = []
        with self._lock:
            if self._unapplied:
                return
            snap = self._snapshot
            was_ended = snap.ended
            had_error = snap.error is not None
            previous_duration = snap.duration
            previous_time = snap.current_time
            snap.paused = state in _PAUSED_STATES
            snap.ended = state == "ended"
            if time_ms is not None and time_ms >= 0:
                snap.current_time = time_ms / 1000
            if length_ms is not None and length_ms > 0:
                snap.duration = length_ms / 1000
            if snap.ended and math.isfinite(snap.duration):
                snap.current_time = snap.duration
            if state == "error" and not had_error:
                snap.error = "libVLC reported a playback error."
                events.append(EngineFault(snap.error))
            if snap.duration != previous_duration and math.isfinite(snap.duration):
                events.append(MetadataLoaded(snap.duration))
            if not snap.paused and snap.current_time != previous_time:
                events.append(TimeUpdated(snap.current_time, snap.duration))
            if snap.ended and not was_ended:
                events.append(TrackEnded())
        for event in events:
            self._emit_event(event)

    def _emit_event(self, event: EngineEvent) -> None:
        if self._handler is None or self._loop is None:
            return
        coro = self._handler(event)
        asyncio.run_coroutine_threadsafe(
            cast(Coroutine[Any, Any, None], coro), self._loop
        )

    def _notify_future_result(
        self, future: asyncio.Future[Any] | None, value: Any
    ) -> None:
        if future is None or self._loop is None:
            return
        self._loop.call_soon_threadsafe(_resolve_future_result, future, value)

    def _notify_future_exception(
        self, future: asyncio.Future[Any] | None, exc: Exception
    ) -> None:
        if future is None or self._loop is None:
            return
        self._loop.call_soon_threadsafe(_resolve_future_exception, future, exc)


def _resolve_future_result(future: asyncio.Future[Any], value: Any) -> None:
    if not future.done():
        future.set_result(value)


def _resolve_future_exception(future: asyncio.Future[Any], exc: Exception) -> None:
    if not future.done():
        future.set_exception(exc)


def _state_name(player: Any) -> str:
    try:
        state = player.get_state()
    except Exception:
        return "error"
    return str(getattr(state, "name", "")).lower()
