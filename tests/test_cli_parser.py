"""Tests for CLI argparse configuration."""

from __future__ import annotations

import pytest

from playlist_player.cli import build_parser
from playlist_player.version import PROJECT_URL, __version__


def test_cli_parser_accepts_backend() -> None:
    parser = build_parser()
    args = parser.parse_args(["list.json", "--backend", "vlc"])
    assert args.backend == "vlc"
    assert args.playlist == "list.json"


def test_cli_parser_defaults() -> None:
    parser = build_parser()
    args = parser.parse_args(["list.json"])
    assert args.backend == "fake"
    assert args.tick_interval == 0.1
    assert args.no_time == "--:--"
    assert args.zero_pad is False
    assert args.verbose is False
    assert args.quiet is False
    assert args.log_file is None


def test_cli_parser_rejects_unknown_backend() -> None:
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["list.json", "--backend", "mpv"])


def test_cli_parser_requires_playlist() -> None:
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_cli_help_includes_project_metadata() -> None:
    parser = build_parser()
    help_text = parser.format_help()
    assert f"Project URL: {PROJECT_URL}" in help_text
    assert "Platform: " in help_text
    assert f"Version: {__version__}" in help_text
