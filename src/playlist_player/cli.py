"""Command-line interface for playlist-player."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import math
import sys
from pathlib import Path

from rich.console import Console
from rich.live import Live

from . import __version__
from .logging_utils import setup_logging
from .paths import log_dir
from .runtime_config import (
    BACKEND_NAMES,
    DEFAULT_BACKEND,
    DEFAULT_NO_TIME_DISPLAY,
    DEFAULT_TICK_INTERVAL_S,
    build_player_config,
    normalize_backend_name,
    resolve_log_level,
)
from .services.console_sink import ConsoleStatusSink
from .services.fake_engine import FakeEngine
from .services.playback_engine import PlaybackEngine
from .services.playlist import PlaylistError
from .services.reconciler import PlaybackReconciler
from .version import build_help_epilog

logger = logging.getLogger(__name__)

M3U_SUFFIXES = frozenset({".m3u", ".m3u8"})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="playlist-player",
        description="Play a playlist once through, keeping the engine in line.",
        epilog=build_help_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("playlist", help="Playlist file (.json, .m3u or .m3u8)")
    parser.add_argument(
        "--backend",
        choices=BACKEND_NAMES,
        default=DEFAULT_BACKEND,
        help="Playback engine to use (fake or vlc).",
    )
    parser.add_argument(
        "--tick-interval",
        type=float,
        default=DEFAULT_TICK_INTERVAL_S,
        help="Seconds between reconciliation ticks (clamped to 0.02-1.0).",
    )
    parser.add_argument(
        "--no-time",
        default=DEFAULT_NO_TIME_DISPLAY,
        help="Text shown when a time is unknown.",
    )
    parser.add_argument(
        "--zero-pad", action="store_true", help="Zero-pad minutes (00:42)"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--quiet", action="store_true", help="Only show warnings and errors"
    )
    parser.add_argument("--log-file", help="Write logs to a file path")
    return parser


def load_playlist_file(path: Path) -> list[dict[str, object]]:
    """Read playlist records from a JSON or M3U file.

    JSON files hold a list of records or an object with a ``tracks`` list.
    M3U files hold one URL or path per non-comment line; relative paths are
    resolved against the playlist's directory and ``#EXTINF`` titles are
    kept.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise PlaylistError("playlist not found", kind="missing") from None
    except (OSError, UnicodeDecodeError) as exc:
        raise PlaylistError(
            f"playlist could not be read: {exc}", kind="missing"
        ) from exc
    if path.suffix.lower() in M3U_SUFFIXES:
        return _parse_m3u(raw, base_dir=path.parent)
    return _parse_json(raw)


def _parse_json(raw: str) -> list[dict[str, object]]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PlaylistError(
            f"playlist is not valid JSON: {exc}", kind="missing"
        ) from exc
    if isinstance(data, dict):
        data = data.get("tracks")
    if not isinstance(data, list):
        raise PlaylistError(
            "playlist JSON must be a list or an object with a 'tracks' list",
            kind="missing",
        )
    return data


def _parse_m3u(raw: str, *, base_dir: Path) -> list[dict[str, object]]:
    records: list[dict[str, object]] = []
    title: str | None = None
    for line in raw.splitlines():
        entry = line.strip()
        if not entry:
            continue
        if entry.startswith("#"):
            if entry.upper().startswith("#EXTINF:") and "," in entry:
                title = entry.split(",", 1)[1].strip() or None
            continue
        if "://" not in entry and not Path(entry).is_absolute():
            entry = str(base_dir / entry)
        record: dict[str, object] = {"url": entry}
        if title is not None:
            record["title"] = title
            title = None
        records.append(record)
    return records


def build_engine(
    backend: str, records: list[dict[str, object]] | None = None
) -> PlaybackEngine:
    """Create the playback engine selected on the command line."""
    if normalize_backend_name(backend) == "vlc":
        from .services.vlc_engine import VLCPlaybackEngine

        return VLCPlaybackEngine()
    return FakeEngine(durations=_record_durations(records or []))


def _record_durations(records: list[dict[str, object]]) -> dict[str, float]:
    durations: dict[str, float] = {}
    for record in records:
        if not isinstance(record, dict):
            continue
        url = record.get("url")
        duration = record.get("duration")
        if (
            isinstance(url, str)
            and isinstance(duration, (int, float))
            and not isinstance(duration, bool)
            and math.isfinite(duration)
            and duration > 0
        ):
            durations[url] = float(duration)
    return durations


async def play_through(
    args: argparse.Namespace,
    records: list[dict[str, object]],
    *,
    console: Console | None = None,
) -> None:
    """Play every track once, rendering a live status line until parked."""
    config = build_player_config(
        tick_interval_s=args.tick_interval,
        no_time_display=args.no_time,
        zero_pad_minutes=args.zero_pad,
    )
    sink = ConsoleStatusSink()
    reconciler = PlaybackReconciler(
        engine=build_engine(args.backend, records),
        config=config,
        status_sink=sink,
        boundary_sink=sink,
        play_state_sink=sink,
    )

    def _show_track(index: int) -> None:
        track = reconciler.playlist[index]
        sink.set_title(str(track.get("title") or track.url))
        logger.info("Now playing track %d.", index, extra={"url": track.url})

    reconciler.register_track_change_handler(_show_track)
    await reconciler.start()
    try:
        reconciler.load_playlist(records)
        reconciler.play()
        with Live(
            sink.render(),
            console=console or Console(),
            refresh_per_second=10,
        ) as live:
            while reconciler.is_playing or reconciler.play_pending:
                await asyncio.sleep(config.tick_interval_s)
                live.update(sink.render())
            live.update(sink.render())
    finally:
        await reconciler.shutdown()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        level = resolve_log_level(verbose=args.verbose, quiet=args.quiet)
        setup_logging(
            log_dir=log_dir(),
            level=level,
            log_file=Path(args.log_file) if args.log_file else None,
        )
        logger.info("Starting playlist-player CLI")
        records = load_playlist_file(Path(args.playlist))
        asyncio.run(play_through(args, records))
        return 0
    except PlaylistError as exc:
        logger.error("Playlist rejected: %s", exc, extra={"kind": exc.kind})
        print(f"Playlist error: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:  # pragma: no cover - top-level safety net
        logger.exception("Unhandled error: %s", exc)
        print("Unexpected error. Re-run with --verbose for details.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
