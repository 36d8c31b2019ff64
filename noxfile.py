"""Nox sessions for lint, typecheck and tests."""

from __future__ import annotations

import nox

nox.options.sessions = ["lint", "typecheck", "tests"]


@nox.session
def lint(session: nox.Session) -> None:
    """Check lint and formatting without touching files."""
    session.install("ruff")
    session.run("ruff", "check", ".")
    session.run("ruff", "format", "--check", ".")


@nox.session(name="lint-fix")
def lint_fix(session: nox.Session) -> None:
    session.install("ruff")
    session.run("ruff", "check", "--fix", ".")
    session.run("ruff", "format", ".")


@nox.session
def typecheck(session: nox.Session) -> None:
    """Run mypy over the playlist_player package."""
    session.install("mypy")
    session.install("-e", ".")
    session.run("mypy", "src/playlist_player")


@nox.session
def tests(session: nox.Session) -> None:
    """Run the pytest suite; live VLC tests need PLAYLIST_PLAYER_TEST_VLC=1."""
    session.install("-e", ".[test]")
    session.run("pytest", *session.posargs)


@nox.session(name="tests-vlc")
def tests_vlc(session: nox.Session) -> None:
    """Run the suite including live libVLC smoke tests."""
    session.install("-e", ".[test,vlc]")
    session.run(
        "pytest",
        "tests/test_vlc_engine.py",
        env={"PLAYLIST_PLAYER_TEST_VLC": "1"},
    )
