"""Lifecycle callbacks for embedding applications.

Each event kind has a single handler slot. Handlers run in isolation: an
exception is logged and swallowed so it never unwinds the playback operation
that triggered it.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

LifecycleHandler = Callable[[], object]
TrackChangeHandler = Callable[[int], object]


class EventDispatcher:
    """Holds the play/pause/stop/track-change handlers and invokes them safely."""

    def __init__(self) -> None:
        self._play_handler: LifecycleHandler | None = None
        self._pause_handler: LifecycleHandler | None = None
        self._stop_handler: LifecycleHandler | None = None
        self._track_change_handler: TrackChangeHandler | None = None
        self._last_track_index: int | None = None

    @property
    def last_track_index(self) -> int | None:
        return self._last_track_index

    def register_play_handler(self, handler: LifecycleHandler | None) -> None:
        self._play_handler = handler

    def register_pause_handler(self, handler: LifecycleHandler | None) -> None:
        self._pause_handler = handler

    def register_stop_handler(self, handler: LifecycleHandler | None) -> None:
        self._stop_handler = handler

    def register_track_change_handler(
        self, handler: TrackChangeHandler | None
    ) -> None:
        self._track_change_handler = handler

    def dispatch_play(self) -> None:
        self._invoke("play", self._play_handler)

    def dispatch_pause(self) -> None:
        self._invoke("pause", self._pause_handler)

    def dispatch_stop(self) -> None:
        self._invoke("stop", self._stop_handler)

    def dispatch_track_change(self, index: int) -> None:
        """Notify once per distinct index; repeats of the last index are dropped."""
        handler = self._track_change_handler
        if handler is None:
            return
        if index != self._last_track_index:
            try:
                handler(index)
            except Exception:
                logger.exception(
                    "Track change handler failed.", extra={"track_index": index}
                )
        self._last_track_index = index

    def reset_track_change(self) -> None:
        """Forget the last delivered index so the next change always fires."""
        self._last_track_index = None

    @staticmethod
    def _invoke(kind: str, handler: LifecycleHandler | None) -> None:
        if handler is None:
            return
        try:
            handler()
        except Exception:
            logger.exception("%s handler failed.", kind.capitalize())
