"""
Batch-wide fallback for files whose name lacks a show name or a season.

The operator is asked once per run (show name, then season). The answers are
interpreted here; acquiring them (terminal prompt, CLI flag) is the caller's
job and is passed in as an `ask(prompt, default)` callable.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from episode_parser import ParsedInfo
from show_normalizer import normalize

logger = logging.getLogger(__name__)

AskFn = Callable[[str, str | None], str]

SHOW_PROMPT = "Enter Show Name for these files"
SEASON_PROMPT = "Enter Season Number (e.g., 1, 02, 15) for these files"

_LEADING_NON_DIGITS = re.compile(r"^[^0-9]+")
_DIGITS = re.compile(r"[0-9]+")
MAX_SEASON = 2**32 - 1


class FallbackState(Enum):
    UNUSED = "unused"  # nothing needed it
    APPLIED = "applied"  # season parsed; show optional
    UNUSABLE = "unusable"  # season text rejected, fallback disabled for the batch


@dataclass(frozen=True)
class FallbackResult:
    state: FallbackState
    show_name: str | None = None
    season_prefix: str | None = None
    season_text: str | None = None  # raw input, kept for the warning message

    @classmethod
    def unused(cls) -> FallbackResult:
        return cls(FallbackState.UNUSED)

    @classmethod
    def applied(cls, show_name: str | None, season_prefix: str) -> FallbackResult:
        return cls(FallbackState.APPLIED, show_name=show_name, season_prefix=season_prefix)

    @classmethod
    def unusable(cls, season_text: str) -> FallbackResult:
        return cls(FallbackState.UNUSABLE, season_text=season_text)

    @property
    def is_applied(self) -> bool:
        return self.state is FallbackState.APPLIED


def interpret_show(text: str | None) -> str | None:
    """Normalize operator-supplied show text; blank input means 'no global show'."""
    if not text:
        return None
    return normalize(text) or None


def interpret_season(text: str | None) -> str | None:
    """Turn season text into a canonical token.

    '3' -> 'S03', 'Season 12' -> 'S12', 'S2' -> 'S02', '3rd' -> None, '' -> None
    """
    if text is None:
        return None
    digits = _LEADING_NON_DIGITS.sub("", text.strip())
    if not _DIGITS.fullmatch(digits):
        return None
    number = int(digits)
    if number > MAX_SEASON:
        return None
    return f"S{number:02d}"


def resolve_fallback(show_text: str | None, season_text: str | None) -> FallbackResult:
    """Interpret the two operator answers into one FallbackResult."""
    season = interpret_season(season_text)
    if season is None:
        logger.warning("Could not parse season number %r; fallback disabled", season_text)
        return FallbackResult.unusable(season_text or "")
    show = interpret_show(show_text)
    logger.info("Fallback applied: show=%s season=%s", show, season)
    return FallbackResult.applied(show, season)


def needs_fallback(items: Iterable[ParsedInfo]) -> bool:
    return any(info.needs_fallback for info in items)


def acquire_fallback(
    items: Iterable[ParsedInfo],
    ask: AskFn,
    show_default: str | None = None,
    season_default: str | None = None,
) -> FallbackResult:
    """Ask for show and season only if at least one item needs them."""
    if not needs_fallback(items):
        return FallbackResult.unused()
    show_text = ask(SHOW_PROMPT, show_default)
    season_text = ask(SEASON_PROMPT, season_default)
    return resolve_fallback(show_text, season_text)


def directory_defaults(directory: Path) -> tuple[str | None, str | None]:
    """Prompt defaults from the folder layout '.../<Show>/<Season NN>/'.

    Returns (show_default, season_default).
    """
    season = directory.name or None
    show = directory.parent.name if directory.parent != directory else ""
    return show or None, season
