"""Playlist position bookkeeping with wraparound navigation."""

from __future__ import annotations

from collections.abc import Sequence

from playlist_player.services.playlist import PlaylistError, Track


def previous_index(current: int, length: int) -> int:
    """Index before `current`, wrapping from the first track to the last."""
    if current == 0:
        return length - 1
    return current - 1


def next_index(current: int, length: int) -> int:
    """Index after `current`, wrapping from the last track to the first."""
    if current == length - 1:
        return 0
    return current + 1


def is_first(current: int) -> bool:
    return current == 0


def is_last(current: int, length: int) -> bool:
    return current >= length - 1


def clamp_or_reject(target: object, length: int) -> int | None:
    """Return `target` when it is a valid index, otherwise None."""
    if isinstance(target, bool) or not isinstance(target, int):
        return None
    if 0 <= target < length:
        return target
    return None


class TrackNavigator:
    """Owns the loaded playlist and the current index into it."""

    def __init__(self) -> None:
        self._tracks: tuple[Track, ...] = ()
        self._index = 0

    @property
    def is_loaded(self) -> bool:
        return bool(self._tracks)

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self._tracks

    @property
    def length(self) -> int:
        return len(self._tracks)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current_track(self) -> Track:
        self._require_loaded()
        return self._tracks[self._index]

    @property
    def is_first(self) -> bool:
        return is_first(self._index)

    @property
    def is_last(self) -> bool:
        return is_last(self._index, len(self._tracks))

    def load(self, tracks: Sequence[Track]) -> None:
        """Replace the playlist and rewind to the first track."""
        if not tracks:
            raise PlaylistError("playlist can not be empty", kind="empty")
        self._tracks = tuple(tracks)
        self._index = 0

    def step_previous(self) -> int:
        self._require_loaded()
        self._index = previous_index(self._index, len(self._tracks))
        return self._index

    def step_next(self) -> int:
        self._require_loaded()
        self._index = next_index(self._index, len(self._tracks))
        return self._index

    def clamp_or_reject(self, target: object) -> int | None:
        return clamp_or_reject(target, len(self._tracks))

    def move_to(self, target: object) -> bool:
        """Jump to `target`; returns False and leaves the index alone if invalid."""
        index = clamp_or_reject(target, len(self._tracks))
        if index is None:
            return False
        self._index = index
        return True

    def _require_loaded(self) -> None:
        if not self._tracks:
            raise PlaylistError("no playlist loaded", kind="not_loaded")
