"""Terminal projection sink rendering reconciler state as one rich line."""

from __future__ import annotations

import math

from rich.text import Text

DEFAULT_BAR_LENGTH = 30


class ConsoleStatusSink:
    """Status, boundary and play-state sink for the command-line player.

    Collects the latest projections and renders them on demand; it never
    talks back to the reconciler.
    """

    def __init__(self, *, bar_length: int = DEFAULT_BAR_LENGTH) -> None:
        self.bar_length = max(1, bar_length)
        self.title = ""
        self.elapsed = ""
        self.remaining = ""
        self.duration = ""
        self.fraction = 0.0
        self.previous_enabled = False
        self.next_enabled = False
        self.playing = False

    def update_times(self, elapsed: str, remaining: str, duration: str) -> None:
        self.elapsed = elapsed
        self.remaining = remaining
        self.duration = duration

    def set_position(self, percent: float) -> None:
        self.fraction = _clamp_fraction(percent / 100)

    def set_skip_enabled(self, *, previous: bool, next_: bool) -> None:
        self.previous_enabled = previous
        self.next_enabled = next_

    def set_playing(self, playing: bool) -> None:
        self.playing = playing

    def set_title(self, title: str) -> None:
        self.title = title

    def render(self) -> Text:
        text = Text(no_wrap=True)
        text.append("|<" if self.previous_enabled else "  ", style="bold")
        text.append(" ")
        text.append(">" if self.playing else "=", style="bold green")
        text.append(" ")
        text.append(">|" if self.next_enabled else "  ", style="bold")
        text.append(f" {self.elapsed} ")
        text.append(_render_bar(self.fraction, self.bar_length), style="cyan")
        text.append(f" {self.remaining} / {self.duration}")
        if self.title:
            text.append(f"  {self.title}", style="italic")
        return text


def _render_bar(fraction: float, bar_length: int) -> str:
    if bar_length == 1:
        return "●"
    thumb_index = int(round(fraction * (bar_length - 1)))
    thumb_index = max(0, min(thumb_index, bar_length - 1))
    chars = ["-"] * bar_length
    for index in range(thumb_index):
        chars[index] = "="
    chars[thumb_index] = "●"
    return "".join(chars)


def _clamp_fraction(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(value, 1.0))
