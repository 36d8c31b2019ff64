"""Tests for runtime config normalization and precedence."""

from __future__ import annotations

import math

import pytest

from playlist_player.cli import build_parser
from playlist_player.runtime_config import (
    DEFAULT_TICK_INTERVAL_S,
    PlayerConfig,
    build_player_config,
    normalize_backend_name,
    normalize_tick_interval,
    resolve_log_level,
)


def test_resolve_log_level_precedence_matrix() -> None:
    assert resolve_log_level(verbose=False, quiet=False) == "INFO"
    assert resolve_log_level(verbose=True, quiet=False) == "DEBUG"
    assert resolve_log_level(verbose=False, quiet=True) == "WARNING"
    assert resolve_log_level(verbose=True, quiet=True) == "WARNING"


def test_parser_and_log_resolution_consistent() -> None:
    args = build_parser().parse_args(
        ["list.json", "--backend", "vlc", "--verbose", "--quiet"]
    )
    assert normalize_backend_name(args.backend) == "vlc"
    assert resolve_log_level(verbose=args.verbose, quiet=args.quiet) == "WARNING"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.25, 0.25),
        ("0.5", 0.5),
        (0.001, 0.02),
        (5, 1.0),
        (0, DEFAULT_TICK_INTERVAL_S),
        (-1, DEFAULT_TICK_INTERVAL_S),
        (math.nan, DEFAULT_TICK_INTERVAL_S),
        (math.inf, DEFAULT_TICK_INTERVAL_S),
        ("fast", DEFAULT_TICK_INTERVAL_S),
        (None, DEFAULT_TICK_INTERVAL_S),
    ],
)
def test_normalize_tick_interval(value: object, expected: float) -> None:
    assert normalize_tick_interval(value) == expected


def test_normalize_backend_name() -> None:
    assert normalize_backend_name(None) == "fake"
    assert normalize_backend_name(" VLC ") == "vlc"
    assert normalize_backend_name("fake") == "fake"
    assert normalize_backend_name("mpv") == "fake"


def test_build_player_config_normalizes_inputs() -> None:
    config = build_player_config(tick_interval_s="bogus", no_time_display=None)
    assert config == PlayerConfig()

    config = build_player_config(
        tick_interval_s=0.5, no_time_display="", zero_pad_minutes=True
    )
    assert config.tick_interval_s == 0.5
    assert config.no_time_display == ""
    assert config.zero_pad_minutes is True
