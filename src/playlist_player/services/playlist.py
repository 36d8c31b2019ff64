"""Playlist records and load-time validation.

A playlist is an ordered, non-empty sequence of tracks. Each caller record
must carry a non-empty ``url`` string; every other key is passed through
untouched for track-change handlers to read.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

PlaylistErrorKind = Literal[
    "missing", "empty", "missing_url", "invalid_url", "not_loaded"
]


class PlaylistError(ValueError):
    """Configuration error raised for unusable playlists."""

    def __init__(
        self, message: str, *, kind: PlaylistErrorKind, index: int | None = None
    ) -> None:
        super().__init__(message)
        self.kind: PlaylistErrorKind = kind
        self.index = index


@dataclass(frozen=True)
class Track:
    """One playable entry; immutable once part of a playlist."""

    url: str
    fields: Mapping[str, object] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def get(self, key: str, default: object = None) -> object:
        if key == "url":
            return self.url
        return self.fields.get(key, default)

    @classmethod
    def from_record(cls, record: object, *, index: int = 0) -> Track:
        """Build a track from a mapping (or pass an existing track through)."""
        if isinstance(record, Track):
            return record
        if not isinstance(record, Mapping) or "url" not in record:
            raise PlaylistError(
                f"playlist missing 'url' at playlist index {index}",
                kind="missing_url",
                index=index,
            )
        url = record["url"]
        if not isinstance(url, str) or not url.strip():
            raise PlaylistError(
                f"playlist has an empty or non-string 'url' at playlist index {index}",
                kind="invalid_url",
                index=index,
            )
        extra = {str(key): value for key, value in record.items() if key != "url"}
        return cls(url=url, fields=MappingProxyType(extra))


def build_playlist(records: Iterable[object] | None) -> tuple[Track, ...]:
    """Validate caller records and return them as an immutable track tuple."""
    if records is None:
        raise PlaylistError("playlist not found", kind="missing")
    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
        raise PlaylistError(
            "playlist must be a sequence of track records", kind="missing"
        )
    tracks = tuple(
        Track.from_record(record, index=index) for index, record in enumerate(records)
    )
    if not tracks:
        raise PlaylistError("playlist can not be empty", kind="empty")
    return tracks
