"""Tests for lifecycle handler dispatch."""

from __future__ import annotations

import logging

from playlist_player.services.dispatcher import EventDispatcher


def test_lifecycle_handlers_fire() -> None:
    dispatcher = EventDispatcher()
    calls: list[str] = []
    dispatcher.register_play_handler(lambda: calls.append("play"))
    dispatcher.register_pause_handler(lambda: calls.append("pause"))
    dispatcher.register_stop_handler(lambda: calls.append("stop"))

    dispatcher.dispatch_play()
    dispatcher.dispatch_pause()
    dispatcher.dispatch_stop()

    assert calls == ["play", "pause", "stop"]


def test_registration_replaces_and_none_unregisters() -> None:
    dispatcher = EventDispatcher()
    calls: list[str] = []
    dispatcher.register_play_handler(lambda: calls.append("first"))
    dispatcher.register_play_handler(lambda: calls.append("second"))
    dispatcher.dispatch_play()
    dispatcher.register_play_handler(None)
    dispatcher.dispatch_play()

    assert calls == ["second"]


def test_dispatch_without_handlers_is_noop() -> None:
    dispatcher = EventDispatcher()
    dispatcher.dispatch_play()
    dispatcher.dispatch_pause()
    dispatcher.dispatch_stop()
    dispatcher.dispatch_track_change(3)


def test_raising_handler_is_logged_and_swallowed(caplog) -> None:
    dispatcher = EventDispatcher()

    def _boom() -> None:
        raise RuntimeError("boom")

    dispatcher.register_pause_handler(_boom)
    with caplog.at_level(logging.ERROR, logger="playlist_player.services.dispatcher"):
        dispatcher.dispatch_pause()

    assert "Pause handler failed." in caplog.text
    assert "boom" in caplog.text


def test_track_change_deduplicates_repeats() -> None:
    dispatcher = EventDispatcher()
    seen: list[int] = []
    dispatcher.register_track_change_handler(seen.append)

    for index in (0, 0, 1, 1, 0, 2, 2):
        dispatcher.dispatch_track_change(index)

    assert seen == [0, 1, 0, 2]
    assert dispatcher.last_track_index == 2


def test_reset_allows_same_index_again() -> None:
    dispatcher = EventDispatcher()
    seen: list[int] = []
    dispatcher.register_track_change_handler(seen.append)

    dispatcher.dispatch_track_change(0)
    dispatcher.reset_track_change()
    dispatcher.dispatch_track_change(0)

    assert seen == [0, 0]


def test_failed_track_change_still_counts_as_delivered(caplog) -> None:
    dispatcher = EventDispatcher()
    attempts: list[int] = []

    def _flaky(index: int) -> None:
        attempts.append(index)
        raise ValueError("bad handler")

    dispatcher.register_track_change_handler(_flaky)
    with caplog.at_level(logging.ERROR):
        dispatcher.dispatch_track_change(1)
        dispatcher.dispatch_track_change(1)

    assert attempts == [1]
    assert "Track change handler failed." in caplog.text


def test_index_not_remembered_without_handler() -> None:
    dispatcher = EventDispatcher()
    dispatcher.dispatch_track_change(4)
    assert dispatcher.last_track_index is None

    seen: list[int] = []
    dispatcher.register_track_change_handler(seen.append)
    dispatcher.dispatch_track_change(4)

    assert seen == [4]
