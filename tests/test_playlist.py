"""Tests for playlist record validation."""

from __future__ import annotations

import pytest

from playlist_player.services.playlist import PlaylistError, Track, build_playlist


def test_build_playlist_keeps_order_and_passthrough_fields() -> None:
    tracks = build_playlist(
        [
            {"url": "a.mp3", "title": "A", "cover": "a.jpg"},
            {"url": "b.mp3"},
        ]
    )

    assert [track.url for track in tracks] == ["a.mp3", "b.mp3"]
    assert tracks[0].get("title") == "A"
    assert tracks[0].get("cover") == "a.jpg"
    assert tracks[0].get("url") == "a.mp3"
    assert tracks[1].get("title", "untitled") == "untitled"


def test_track_fields_are_read_only() -> None:
    track = Track.from_record({"url": "a.mp3", "title": "A"})
    with pytest.raises(TypeError):
        track.fields["title"] = "B"  # type: ignore[index]


def test_existing_tracks_pass_through() -> None:
    track = Track(url="a.mp3")
    assert build_playlist([track]) == (track,)


def test_missing_playlist() -> None:
    with pytest.raises(PlaylistError) as excinfo:
        build_playlist(None)
    assert excinfo.value.kind == "missing"
    assert str(excinfo.value) == "playlist not found"


@pytest.mark.parametrize(
    "records", ["a.mp3", b"a.mp3", {"url": "a.mp3"}, 5, 1.5, object()]
)
def test_non_sequence_playlist_is_rejected(records: object) -> None:
    with pytest.raises(PlaylistError) as excinfo:
        build_playlist(records)  # type: ignore[arg-type]
    assert excinfo.value.kind == "missing"


def test_empty_playlist() -> None:
    with pytest.raises(PlaylistError) as excinfo:
        build_playlist([])
    assert excinfo.value.kind == "empty"
    assert str(excinfo.value) == "playlist can not be empty"


def test_missing_url_reports_index() -> None:
    with pytest.raises(PlaylistError) as excinfo:
        build_playlist([{"url": "a.mp3"}, {"title": "no url"}])
    assert excinfo.value.kind == "missing_url"
    assert excinfo.value.index == 1
    assert str(excinfo.value) == "playlist missing 'url' at playlist index 1"


@pytest.mark.parametrize("url", ["", "   ", 42, None])
def test_invalid_url(url: object) -> None:
    with pytest.raises(PlaylistError) as excinfo:
        build_playlist([{"url": url}])
    assert excinfo.value.kind == "invalid_url"
    assert excinfo.value.index == 0


def test_playlist_error_is_value_error() -> None:
    assert issubclass(PlaylistError, ValueError)
