"""Single-slot holding area for engine operations that must wait for play.

Some engines misbehave when asked to seek, or even to play, before any media
has loaded. A seek requested while paused, or a source the engine refused to
play, is parked here and applied on the next `play()`.
"""

from __future__ import annotations


class DeferredOperationQueue:
    """At most one pending source and one pending seek; newer requests win."""

    def __init__(self) -> None:
        self._source: str | None = None
        self._seek: float | None = None

    @property
    def pending_source(self) -> str | None:
        return self._source

    @property
    def pending_seek(self) -> float | None:
        return self._seek

    def defer_source(self, url: str) -> None:
        self._source = url

    def take_source(self) -> str | None:
        source, self._source = self._source, None
        return source

    def defer_seek(self, seconds: float) -> None:
        self._seek = seconds

    def take_seek(self) -> float | None:
        seek, self._seek = self._seek, None
        return seek

    def peek_seek(self) -> float | None:
        return self._seek

    def clear_seek(self) -> None:
        self._seek = None

    def clear_all(self) -> None:
        """Drop both slots; stale operations must never reach a different track."""
        self._source = None
        self._seek = None
