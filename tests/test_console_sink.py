"""Tests for the terminal status line sink."""

from __future__ import annotations

from rich.text import Text

from playlist_player.services.console_sink import ConsoleStatusSink


def test_render_reflects_projections() -> None:
    sink = ConsoleStatusSink(bar_length=5)
    sink.update_times("1:30", "-1:30", "3:00")
    sink.set_position(50.0)
    sink.set_skip_enabled(previous=False, next_=True)
    sink.set_playing(True)
    sink.set_title("Song")

    rendered = sink.render()

    assert isinstance(rendered, Text)
    assert rendered.plain == "   > >| 1:30 ==●-- -1:30 / 3:00  Song"


def test_render_clamps_position() -> None:
    sink = ConsoleStatusSink(bar_length=3)
    sink.set_position(250.0)
    assert "==●" in sink.render().plain

    sink.set_position(float("nan"))
    assert "●--" in sink.render().plain


def test_render_paused_with_both_boundaries() -> None:
    sink = ConsoleStatusSink(bar_length=1)
    sink.set_skip_enabled(previous=True, next_=True)

    assert sink.render().plain.startswith("|< = >|")
