"""
Pytest configuration and fixtures for episode-renamer tests.
"""

import io
import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import episode_renamer  # noqa: E402
from episode_parser import ParsedInfo  # noqa: E402
from rich.console import Console  # noqa: E402


@pytest.fixture
def console_output(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
    """Swap the CLI console for one writing into a buffer."""
    buf = io.StringIO()
    console = Console(file=buf, theme=episode_renamer.THEME, width=200, highlight=False)
    monkeypatch.setattr(episode_renamer, "console", console)
    return buf


@pytest.fixture
def make_files() -> Callable[..., list[Path]]:
    """Create empty files with the given names inside a directory."""

    def _make(directory: Path, *names: str) -> list[Path]:
        directory.mkdir(parents=True, exist_ok=True)
        paths = []
        for name in names:
            p = directory / name
            p.write_text("x")
            paths.append(p)
        return paths

    return _make


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Config that keeps log files inside the test's tmp dir."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text(f"logging:\n  enabled: true\n  dir: {tmp_path / 'logs'}\n")
    return cfg


def make_info(
    name: str,
    show: str | None = None,
    season: str | None = None,
    episode: str | None = None,
    remainder: str | None = None,
    needs_fallback: bool | None = None,
    directory: Path = Path("/tv/season"),
) -> ParsedInfo:
    """Build a ParsedInfo by hand (for planner/fallback tests)."""
    path = directory / name
    if needs_fallback is None:
        needs_fallback = show is None or season is None
    return ParsedInfo(
        original_path=path,
        original_filename=name,
        extension=path.suffix[1:],
        show_name_part=show,
        season_prefix_part=season,
        episode_number_part=episode,
        remainder_part=remainder,
        needs_fallback=needs_fallback,
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging() so log files don't leak across tests."""
    yield
    root = logging.getLogger()
    for handler in episode_renamer._handlers:
        root.removeHandler(handler)
        handler.close()
    episode_renamer._handlers.clear()


@pytest.fixture
def prompt_answers(monkeypatch: pytest.MonkeyPatch) -> Callable[..., list[str]]:
    """Replay canned answers to every rich Prompt.ask call.

    Returns a function that queues answers and hands back the list the
    asked prompts are recorded into.
    """
    queue: list[str] = []
    asked: list[str] = []

    def fake_ask(prompt, *args, **kwargs):
        asked.append(str(prompt))
        return queue.pop(0)

    monkeypatch.setattr(episode_renamer, "_has_prompt_toolkit", False)
    monkeypatch.setattr(episode_renamer.Prompt, "ask", fake_ask)

    def _queue(*answers: str) -> list[str]:
        queue.extend(answers)
        return asked

    return _queue
