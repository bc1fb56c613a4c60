#!/usr/bin/env python3
"""
episode_renamer.py - Rename a season folder's episodes to Show.Name.SxxExx form.

Flow:
- Scan one directory for video files (allow-listed extensions).
- Parse show / season / episode / trailing text from every filename.
- If some names lack a show or season, ask once for both (defaults come
  from the folder layout '.../<Show>/<Season NN>/').
- Show the planned renames, refuse the whole batch on any collision.
- Ask for confirmation, rename, print a tally.

Usage:
    python episode_renamer.py                       # current directory
    python episode_renamer.py "/tv/Some Show/Season 02"
    python episode_renamer.py --season 2 --dry-run
    python episode_renamer.py --config config.yaml --yes
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, cast

try:
    import yaml
except ImportError as e:
    print("❌ PyYAML is not installed. Install it with:\n   pip install pyyaml")
    raise SystemExit(1) from e

try:
    from rich import box
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.markup import escape
    from rich.panel import Panel
    from rich.prompt import Prompt
    from rich.table import Table
    from rich.text import Text
    from rich.theme import Theme
    from rich.traceback import install as install_rich_traceback

    install_rich_traceback(show_locals=False)
except ImportError as e:
    print("❌ rich is not installed. Install it with:\n   pip install rich")
    raise SystemExit(1) from e

try:
    from prompt_toolkit import PromptSession
    from prompt_toolkit.history import InMemoryHistory

    _fallback_history: InMemoryHistory | None = InMemoryHistory()
    _has_prompt_toolkit = True
except ImportError:
    # prompt_toolkit is optional; rich's Prompt is used instead
    _fallback_history = None
    _has_prompt_toolkit = False

from episode_parser import (
    DEFAULT_PATTERNS,
    FilenameParseError,
    ParsedInfo,
    ParserPatterns,
    parse_filename,
)
from rename_conflicts import Conflict, detect_conflicts
from rename_executor import ExecutionReport, execute_renames
from rename_planner import plan_renames
from season_fallback import (
    SEASON_PROMPT,
    SHOW_PROMPT,
    AskFn,
    FallbackResult,
    FallbackState,
    acquire_fallback,
    directory_defaults,
    needs_fallback,
)

THEME = Theme(
    {
        "title": "bold cyan",
        "accent": "cyan",
        "info": "bright_cyan",
        "ok": "bold green",
        "warn": "bold yellow",
        "err": "bold red",
        "dim": "dim",
        "path": "bright_white",
    }
)
console = Console(theme=THEME, highlight=False)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_CONFIG_PATH = Path("config.yaml")
DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "episode-renamer"
DEFAULT_EXTENSIONS = frozenset(
    {"mkv", "mp4", "avi", "mov", "wmv", "flv", "webm", "mpeg", "mpg", "ts", "m2ts", "vob"}
)

EXIT_OK = 0
EXIT_ERROR = 1  # conflicts, bad directory, bad config
EXIT_RENAME_FAILED = 2


def _coerce_bool(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, int | float):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("true", "yes", "y", "1", "on", "enabled"):
            return True
        if s in ("false", "no", "n", "0", "off", "disabled"):
            return False
    return default


def _expand_path(p: str) -> str:
    """Expand ~ and $VARS and return a normalized path string (doesn't require existence)."""
    p = (p or "").strip()
    if not p:
        return p
    p = os.path.expandvars(p)
    return str(Path(p).expanduser())


def _normalize_extensions(raw: Iterable[Any]) -> frozenset[str]:
    """'.MKV', 'mp4 ' -> {'mkv', 'mp4'}"""
    exts = {str(e).strip().lstrip(".").lower() for e in raw}
    exts.discard("")
    return frozenset(exts)


@dataclass(frozen=True)
class LogCfg:
    enabled: bool = True
    dir: str = str(DEFAULT_LOG_DIR)
    level: str = "INFO"


@dataclass(frozen=True)
class AppCfg:
    extensions: frozenset[str] = DEFAULT_EXTENSIONS
    directory_defaults: bool = True
    log: LogCfg = field(default_factory=LogCfg)


def load_config(path: Path, required: bool = False) -> AppCfg:
    """Load config.yaml; a missing optional file yields the defaults."""
    raw: dict[str, Any] = {}
    if path.exists():
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        if loaded is None:
            raw = {}
        elif not isinstance(loaded, dict):
            raise ValueError("config.yaml root must be a mapping")
        else:
            raw = cast(dict[str, Any], loaded)
    elif required:
        raise FileNotFoundError(f"Config not found: {path}")

    ext_node = raw.get("extensions")
    if ext_node is None:
        extensions = DEFAULT_EXTENSIONS
    elif isinstance(ext_node, list):
        extensions = _normalize_extensions(ext_node)
    else:
        raise ValueError("extensions must be a list")
    if not extensions:
        raise ValueError("extensions must not be empty")

    log_node: dict[str, Any] = cast(dict[str, Any], raw.get("logging") or {})
    level = str(log_node.get("level", "INFO")).strip().upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        raise ValueError("logging.level must be one of: DEBUG, INFO, WARNING, ERROR")
    log_cfg = LogCfg(
        enabled=_coerce_bool(log_node.get("enabled", True), True),
        dir=_expand_path(str(log_node.get("dir") or DEFAULT_LOG_DIR)),
        level=level,
    )

    return AppCfg(
        extensions=extensions,
        directory_defaults=_coerce_bool(raw.get("directory_defaults", True), True),
        log=log_cfg,
    )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


_handlers: list[logging.Handler] = []


def _install(handler: logging.Handler) -> None:
    logging.getLogger().addHandler(handler)
    _handlers.append(handler)


def setup_logging(cfg: LogCfg, verbose: bool = False) -> Path | None:
    """Set up file logging (plus a console echo of debug lines with --verbose).

    Returns the log file path if a log file was opened, None otherwise.
    Calling it again replaces the handlers installed by the previous call.
    """
    root = logging.getLogger()
    for old in _handlers:
        root.removeHandler(old)
        old.close()
    _handlers.clear()

    root.setLevel(logging.DEBUG if verbose else getattr(logging, cfg.level))
    # Keeps logging.warning() from falling back to a stderr handler
    _install(logging.NullHandler())

    if verbose:
        echo = RichHandler(console=console, show_path=False, show_time=False)
        echo.setLevel(logging.DEBUG)
        # INFO and above already reach the console through log()/warn()/error()
        echo.addFilter(lambda record: record.levelno < logging.INFO)
        _install(echo)

    if not cfg.enabled:
        return None
    try:
        log_dir = Path(cfg.dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"episode_renamer_{timestamp}.log"

        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        _install(handler)
        return log_file
    except OSError:
        return None


def log(msg: str) -> None:
    console.print(escape(msg))
    logging.info(msg)


def warn(msg: str, record: bool = True) -> None:
    console.print(f"[warn]⚠ {escape(msg)}[/]")
    if record:
        logging.warning(msg)


def error(msg: str) -> None:
    console.print(f"[err]❌ {escape(msg)}[/]")
    logging.error(msg)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def ask_text(prompt: str, default: str | None = None) -> str:
    """Ask for one line of text; blank input returns the default."""
    if _has_prompt_toolkit and _fallback_history is not None and sys.stdin.isatty():
        session: PromptSession[str] = PromptSession(history=_fallback_history)
        raw = session.prompt(f"{prompt}: ", default=default or "")
    else:
        raw = Prompt.ask(prompt, default=default or "", show_default=bool(default))
    raw = (raw or "").strip()
    return raw or (default or "")


def preset_ask(show: str | None, season: str | None, fallback_ask: AskFn | None = None) -> AskFn:
    """Answer the fallback prompts from --show/--season, prompting only for what is missing."""
    presets = {SHOW_PROMPT: show, SEASON_PROMPT: season}

    def ask(prompt: str, default: str | None) -> str:
        preset = presets.get(prompt)
        if preset is not None:
            return preset
        return (fallback_ask or ask_text)(prompt, default)

    return ask


def confirm_renames() -> bool:
    """Final gate: only 'y' / 'yes' (any case) proceeds."""
    answer = Prompt.ask("\nProceed with renaming? [dim](yes/no)[/]", default="no", show_default=False)
    return answer.strip().lower() in ("y", "yes")


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


@dataclass
class ScanResult:
    items: list[ParsedInfo] = field(default_factory=list)
    existing: set[Path] = field(default_factory=set)  # every entry, the conflict snapshot
    errors: list[FilenameParseError] = field(default_factory=list)


def own_paths() -> set[Path]:
    """Paths of the running program, never treated as candidates."""
    paths = {Path(__file__).resolve()}
    if sys.argv and sys.argv[0]:
        paths.add(Path(sys.argv[0]).resolve())
    return paths


def scan_directory(
    directory: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    exclude: Iterable[Path] = (),
    patterns: ParserPatterns = DEFAULT_PATTERNS,
) -> ScanResult:
    """Parse every allow-listed video file directly inside `directory`."""
    allowed = _normalize_extensions(extensions)
    skip = set(exclude)
    result = ScanResult()

    for entry in sorted(directory.iterdir(), key=str):
        result.existing.add(entry)
        if entry in skip or entry.resolve() in skip:
            continue
        if not entry.is_file():
            continue
        if entry.suffix[1:].lower() not in allowed:
            logging.debug("Skipping non-video file: %s", entry.name)
            continue
        try:
            result.items.append(parse_filename(entry, patterns))
        except FilenameParseError as e:
            result.errors.append(e)

    return result


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def render_plan(pairs: list[tuple[Path, Path]]) -> None:
    table = Table(title="Proposed renames", box=box.SIMPLE, title_style="title")
    table.add_column("Original", style="path", overflow="fold")
    table.add_column("", style="accent")
    table.add_column("New", style="ok", overflow="fold")
    for old, new in pairs:
        table.add_row(Text(old.name), "→", Text(new.name))
    console.print(table)
    console.print(f"[dim]Total files: {len(pairs)}[/]")


def render_conflicts(conflicts: list[Conflict]) -> None:
    console.print("\n[err]Warning: Potential conflicts detected![/]")
    for conflict in conflicts:
        msg = conflict.describe()
        console.print(f"[err]- {escape(msg)}[/]")
        logging.error(msg)
    console.print("[err]Please resolve conflicts before proceeding.[/]")


def render_report(report: ExecutionReport) -> None:
    for old, new in report.succeeded:
        console.print(f"[ok]Renamed:[/] {escape(old.name)} [accent]→[/] {escape(new.name)}")
    for old, new, reason in report.failed:
        console.print(
            f"[err]Error renaming[/] {escape(old.name)} [accent]→[/] {escape(new.name)}: "
            f"{escape(reason)}"
        )

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("key", style="accent")
    table.add_column("val")
    table.add_row("Succeeded", f"[ok]{len(report.succeeded)}[/]")
    table.add_row("Failed", f"[err]{len(report.failed)}[/]" if report.failed else "0")
    console.print(Panel(table, title="Renaming complete", border_style="cyan", box=box.ROUNDED))
    logging.info(
        "Renaming complete. %d succeeded, %d failed.", len(report.succeeded), len(report.failed)
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def resolve_batch_fallback(
    items: list[ParsedInfo],
    directory: Path,
    cfg: AppCfg,
    show: str | None = None,
    season: str | None = None,
) -> FallbackResult:
    if not needs_fallback(items):
        return FallbackResult.unused()

    log("\nSome video files lack Show Name or Season info (Sxx) in the filename.")
    show_default, season_default = (
        directory_defaults(directory) if cfg.directory_defaults else (None, None)
    )
    fallback = acquire_fallback(items, preset_ask(show, season), show_default, season_default)

    if fallback.state is FallbackState.UNUSABLE:
        warn(
            f"Could not parse Season Number '{fallback.season_text}'. "
            "Files needing it will be skipped.",
            record=False,
        )
    elif fallback.show_name is None:
        warn("No Show Name provided, files needing it might be skipped or use partial names.")
    return fallback


def run(args: argparse.Namespace, cfg: AppCfg) -> int:
    log_file = setup_logging(cfg.log, verbose=args.verbose)

    directory = Path(os.path.expanduser(args.path)).resolve()
    if not directory.is_dir():
        error(f"Not a directory: {directory}")
        return EXIT_ERROR

    console.rule("[title]Episode Renamer[/]")
    if log_file:
        console.print(f"[dim]📝 Logging to: {escape(str(log_file))}[/]")
    log(f"Scanning directory: {directory}")
    logging.debug("Allowed extensions: %s", ", ".join(sorted(cfg.extensions)))

    scan = scan_directory(directory, cfg.extensions, exclude=own_paths())
    for err in scan.errors:
        warn(f"Could not parse: {err}")
    for info in scan.items:
        if info.is_unrecoverable:
            warn(
                f"Video file '{info.original_filename}' is missing Season and Episode "
                "identifiers (SxxExx)."
            )

    if not scan.items:
        log("No eligible video files found to process in this directory.")
        return EXIT_OK

    fallback = resolve_batch_fallback(scan.items, directory, cfg, args.show, args.season)

    plan = plan_renames(scan.items, fallback)
    for skipped in plan.skipped:
        warn(skipped.describe(), record=False)

    if not plan:
        log("\nNo files need renaming based on the current rules and inputs.")
        return EXIT_OK

    pairs = plan.pairs()
    console.print()
    render_plan(pairs)

    conflicts = detect_conflicts(plan.renames, scan.existing)
    if conflicts:
        render_conflicts(conflicts)
        return EXIT_ERROR

    if args.dry_run:
        log("\n🧪 Dry-run mode: no changes will be made.")
        return EXIT_OK

    if not args.yes and not confirm_renames():
        log("Renaming cancelled by user.")
        return EXIT_OK

    log("\nRenaming files...")
    report = execute_renames(pairs)
    render_report(report)
    return EXIT_OK if report.ok else EXIT_RENAME_FAILED


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Rename TV episode files in one directory to Show.Name.SxxExx form",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    episode-renamer                                  # current directory
    episode-renamer "/tv/Some Show/Season 02"
    episode-renamer --show "Some Show" --season 2    # no fallback prompts
    episode-renamer --dry-run                        # plan only
        """,
    )
    ap.add_argument("path", nargs="?", default=".", help="Directory to process (default: .)")
    ap.add_argument(
        "--config", "-c", default=None, help="Path to config.yaml (default: ./config.yaml if present)"
    )
    ap.add_argument("--show", help="Show name for files whose name lacks one")
    ap.add_argument("--season", help="Season number for files whose name lacks one")
    ap.add_argument("--dry-run", "-n", action="store_true", help="Show the plan, rename nothing")
    ap.add_argument("--yes", "-y", action="store_true", help="Skip the confirmation prompt")
    ap.add_argument("--verbose", "-v", action="store_true", help="Show debug output")
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        if args.config is not None:
            cfg = load_config(Path(args.config), required=True)
        else:
            cfg = load_config(DEFAULT_CONFIG_PATH)
    except (OSError, ValueError, yaml.YAMLError) as e:
        error(f"Configuration error: {e}")
        return EXIT_ERROR

    try:
        return run(args, cfg)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[dim]⏹ Interrupted. Bye.[/]")
        return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
