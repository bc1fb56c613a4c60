"""
Turn parsed filenames into an old -> new rename mapping.

Pure: reads the ParsedInfo list and the fallback decision, never the disk.

New names follow:
    Show.Name.SxxExx[.Remainder][.ext]
with the show name title-cased and the extension kept exactly as found.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from episode_parser import ParsedInfo
from season_fallback import FallbackResult
from show_normalizer import title_case

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedItem:
    """A file that cannot be renamed (missing show, season or episode)."""

    info: ParsedInfo
    reason: str

    def describe(self) -> str:
        return f"Skipping '{self.info.original_filename}': {self.reason}"


@dataclass
class RenamePlan:
    renames: dict[Path, Path] = field(default_factory=dict)
    skipped: list[SkippedItem] = field(default_factory=list)

    def pairs(self) -> list[tuple[Path, Path]]:
        """(old, new) pairs sorted by original path, for display and execution."""
        return sorted(self.renames.items(), key=lambda kv: str(kv[0]))

    def __len__(self) -> int:
        return len(self.renames)


def build_new_name(
    show: str,
    season: str,
    episode: str,
    remainder: str | None,
    extension: str,
) -> str:
    """Assemble the final file name from canonical parts.

    ('some.show', 'S02', 'E14', None, 'mkv')        -> 'Some.Show.S02E14.mkv'
    ('the.office', 'S01', 'E03', 'pilot', 'MP4')    -> 'The.Office.S01E03.pilot.MP4'
    """
    parts = [title_case(show), f"{season}{episode}"]
    if remainder:
        parts.append(remainder)
    stem = ".".join(parts)
    return f"{stem}.{extension}" if extension else stem


def _missing_fields(show: str | None, season: str | None, episode: str | None) -> list[str]:
    missing = []
    if show is None:
        missing.append("show name")
    if season is None:
        missing.append("season")
    if episode is None:
        missing.append("episode")
    return missing


def plan_item(info: ParsedInfo, fallback: FallbackResult) -> Path | SkippedItem:
    """Compute the target path for one file, or the reason it is skipped."""
    show = info.show_name_part
    season = info.season_prefix_part
    episode = info.episode_number_part

    # Episode and remainder only ever come from the filename itself
    if info.needs_fallback and fallback.is_applied:
        if fallback.show_name:
            show = fallback.show_name
        if fallback.season_prefix:
            season = fallback.season_prefix

    if show is None or season is None or episode is None:
        missing = ", ".join(_missing_fields(show, season, episode))
        found = f"season={season or 'Missing'}, episode={episode or 'Missing'}"
        return SkippedItem(info, f"cannot determine {missing} ({found})")

    if not title_case(show):
        return SkippedItem(info, "empty show name component")

    new_name = build_new_name(show, season, episode, info.remainder_part, info.extension)
    return info.original_path.parent / new_name


def plan_renames(items: Iterable[ParsedInfo], fallback: FallbackResult) -> RenamePlan:
    """Build the rename mapping for a batch.

    Files whose target equals their current path are left out (no-op), and an
    original path seen twice is only planned once.
    """
    plan = RenamePlan()
    seen: set[Path] = set()
    for info in items:
        if info.original_path in seen:
            continue
        seen.add(info.original_path)

        result = plan_item(info, fallback)
        if isinstance(result, SkippedItem):
            logger.warning(result.describe())
            plan.skipped.append(result)
            continue

        if result == info.original_path:
            logger.debug("Already named correctly: %s", info.original_filename)
            continue

        logger.debug("Planned %s -> %s", info.original_filename, result.name)
        plan.renames[info.original_path] = result
    return plan
