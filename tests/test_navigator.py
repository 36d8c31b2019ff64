"""Tests for track navigation and index bounds."""

from __future__ import annotations

import pytest

from playlist_player.services.navigator import (
    TrackNavigator,
    clamp_or_reject,
    is_first,
    is_last,
    next_index,
    previous_index,
)
from playlist_player.services.playlist import PlaylistError, Track


def _tracks(count: int) -> list[Track]:
    return [Track(url=f"track-{index}.mp3") for index in range(count)]


@pytest.mark.parametrize("length", [1, 2, 5])
def test_wraparound_at_both_ends(length: int) -> None:
    assert next_index(length - 1, length) == 0
    assert previous_index(0, length) == length - 1


def test_steps_inside_playlist() -> None:
    assert next_index(1, 4) == 2
    assert previous_index(3, 4) == 2


def test_boundary_predicates_report_literal_position() -> None:
    assert is_first(0) is True
    assert is_first(1) is False
    assert is_last(2, 3) is True
    assert is_last(1, 3) is False
    assert is_last(0, 1) is True


def test_clamp_or_reject() -> None:
    assert clamp_or_reject(0, 3) == 0
    assert clamp_or_reject(2, 3) == 2
    assert clamp_or_reject(3, 3) is None
    assert clamp_or_reject(-1, 3) is None
    assert clamp_or_reject(1.0, 3) is None
    assert clamp_or_reject(True, 3) is None
    assert clamp_or_reject("1", 3) is None


def test_navigator_load_rewinds_to_first_track() -> None:
    navigator = TrackNavigator()
    navigator.load(_tracks(3))
    navigator.step_next()
    navigator.step_next()
    assert navigator.index == 2
    assert navigator.is_last is True

    navigator.load(_tracks(2))

    assert navigator.index == 0
    assert navigator.length == 2
    assert navigator.current_track.url == "track-0.mp3"


def test_navigator_steps_wrap() -> None:
    navigator = TrackNavigator()
    navigator.load(_tracks(3))

    assert navigator.step_previous() == 2
    assert navigator.step_next() == 0
    assert navigator.step_next() == 1


def test_navigator_single_track_wraps_to_itself() -> None:
    navigator = TrackNavigator()
    navigator.load(_tracks(1))

    assert navigator.step_next() == 0
    assert navigator.step_previous() == 0
    assert navigator.is_first is True
    assert navigator.is_last is True


def test_navigator_move_to_rejects_out_of_range() -> None:
    navigator = TrackNavigator()
    navigator.load(_tracks(3))

    assert navigator.move_to(2) is True
    assert navigator.move_to(5) is False
    assert navigator.move_to(-1) is False
    assert navigator.index == 2


def test_navigator_requires_tracks() -> None:
    navigator = TrackNavigator()
    assert navigator.is_loaded is False

    with pytest.raises(PlaylistError) as excinfo:
        navigator.step_next()
    assert excinfo.value.kind == "not_loaded"

    with pytest.raises(PlaylistError) as excinfo:
        navigator.load([])
    assert excinfo.value.kind == "empty"
