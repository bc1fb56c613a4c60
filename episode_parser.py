"""
Filename parsing: pull show / season / episode / remainder out of a media filename.

Handles the common shapes found in a season folder:
    'Some Show - S2E14.mkv'               -> some.show  S02  E14
    'show.name.s01e03.pilot.720p.mkv'     -> show.name  S01  E03  pilot.720p
    'Show E07 - The Return.mp4'           -> show       -    E07  the.return
    'Show.S01E01-NOGROUP[WEB].mkv'        -> show       S01  E01  (suffix dropped)

Anything without a season (or without a show name) is flagged with
needs_fallback so the caller can supply both once for the whole batch.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from show_normalizer import normalize

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class FilenameParseError(Exception):
    """Structural problem with a candidate path; the item is skipped."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class NotAFileError(FilenameParseError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, "Not a regular file")


class NoFileNameError(FilenameParseError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, "Path has no file name")


# ---------------------------------------------------------------------------
# Patterns & result type
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParserPatterns:
    """Compiled patterns used by parse_name(), built once and reused."""

    season_episode: re.Pattern[str] = field(
        default_factory=lambda: re.compile(r"S(\d{1,3})E(\d{1,3})", re.IGNORECASE)
    )
    episode: re.Pattern[str] = field(
        default_factory=lambda: re.compile(r"E(\d{1,3})", re.IGNORECASE)
    )
    # '-ReleaseGroup[Source]' at the very end of the stem
    release_suffix: re.Pattern[str] = field(
        default_factory=lambda: re.compile(r"-[^-]+\[[^\]]+\]$")
    )


DEFAULT_PATTERNS = ParserPatterns()


@dataclass(frozen=True)
class ParsedInfo:
    original_path: Path
    original_filename: str
    extension: str
    show_name_part: str | None = None
    season_prefix_part: str | None = None
    episode_number_part: str | None = None
    remainder_part: str | None = None
    needs_fallback: bool = False

    @property
    def is_unrecoverable(self) -> bool:
        """True when no fallback can help: there is no episode number to keep."""
        return (
            self.needs_fallback
            and self.season_prefix_part is None
            and self.episode_number_part is None
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# Separator junk left around a segment once the marker is cut out ('Show - ')
_EDGE_CHARS = " \t-_."


def _segment(text: str) -> str | None:
    cleaned = normalize(text.strip(_EDGE_CHARS))
    return cleaned or None


def _token(prefix: str, digits: str) -> str:
    """Render a canonical marker token: ('S', '2') -> 'S02', ('E', '123') -> 'E123'."""
    try:
        number = int(digits)
    except ValueError:
        number = 0
    return f"{prefix}{number:02d}"


def split_extension(name: str) -> tuple[str, str]:
    """Split a file name into (stem, extension-without-dot).

    Follows pathlib: a leading dot does not start an extension.
    """
    path = Path(name)
    return path.stem, path.suffix[1:]


def strip_release_suffix(stem: str, patterns: ParserPatterns = DEFAULT_PATTERNS) -> str:
    """Drop a trailing '-Group[Source]' tag, e.g. 'Show.S01E01-NTb[WEB]' -> 'Show.S01E01'."""
    m = patterns.release_suffix.search(stem)
    if not m:
        return stem
    return stem[: m.start()].rstrip()


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_name(path: Path, patterns: ParserPatterns = DEFAULT_PATTERNS) -> ParsedInfo:
    """Parse the file name of `path` without touching the filesystem."""
    filename = path.name
    if filename in ("", ".", ".."):
        raise NoFileNameError(path)

    stem, extension = split_extension(filename)
    stem = strip_release_suffix(stem, patterns)

    show: str | None = None
    season: str | None = None
    episode: str | None = None
    remainder: str | None = None
    needs_fallback = False

    se_match = patterns.season_episode.search(stem)
    if se_match:
        show = _segment(stem[: se_match.start()])
        if show is None:
            needs_fallback = True
        season = _token("S", se_match.group(1))
        episode = _token("E", se_match.group(2))
        remainder = _segment(stem[se_match.end() :])
    else:
        needs_fallback = True
        e_match = patterns.episode.search(stem)
        if e_match:
            episode = _token("E", e_match.group(1))
            show = _segment(stem[: e_match.start()])
            remainder = _segment(stem[e_match.end() :])
        else:
            show = _segment(stem)

    if show is None or season is None:
        needs_fallback = True

    info = ParsedInfo(
        original_path=path,
        original_filename=filename,
        extension=extension,
        show_name_part=show,
        season_prefix_part=season,
        episode_number_part=episode,
        remainder_part=remainder,
        needs_fallback=needs_fallback,
    )
    logger.debug(
        "Parsed %s: show=%s season=%s episode=%s remainder=%s fallback=%s",
        filename,
        show,
        season,
        episode,
        remainder,
        needs_fallback,
    )
    return info


def parse_filename(path: Path, patterns: ParserPatterns = DEFAULT_PATTERNS) -> ParsedInfo:
    """Parse a candidate file, re-checking that it is a regular file first.

    Raises NotAFileError / NoFileNameError for structural problems.
    """
    if not path.name or path.name in (".", ".."):
        raise NoFileNameError(path)
    if not path.is_file():
        raise NotAFileError(path)
    return parse_name(path, patterns)
