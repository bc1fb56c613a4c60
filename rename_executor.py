"""
Apply an approved, conflict-free rename plan.

Each rename is its own operation: a failure is recorded and the run moves on,
earlier successes are never rolled back. The destination is checked again
right before each call because the directory may have changed since the scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ExecutionReport:
    succeeded: list[tuple[Path, Path]] = field(default_factory=list)
    failed: list[tuple[Path, Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def order_for_execution(pairs: list[tuple[Path, Path]]) -> list[tuple[Path, Path]]:
    """Order renames so a file is moved away before another takes its name.

    'b -> c' must run before 'a -> b'. Pairs that do not depend on each other
    keep their input order; a cycle (a -> b, b -> a) is left as given and the
    destination check in rename_one() refuses it.
    """
    pending = list(pairs)
    ordered: list[tuple[Path, Path]] = []
    while pending:
        sources = {old for old, _ in pending}
        ready = [pair for pair in pending if pair[1] not in sources]
        if not ready:
            ordered.extend(pending)
            break
        ordered.extend(ready)
        pending = [pair for pair in pending if pair not in ready]
    return ordered


def _is_same_file(old: Path, new: Path) -> bool:
    # Case-only renames on case-insensitive filesystems
    try:
        return old.samefile(new)
    except OSError:
        return False


def rename_one(old: Path, new: Path) -> None:
    """Rename a single file, refusing to overwrite anything."""
    if (new.exists() or new.is_symlink()) and not _is_same_file(old, new):
        raise FileExistsError(f"Destination file already exists: {new.name}")
    old.rename(new)


def execute_renames(pairs: list[tuple[Path, Path]]) -> ExecutionReport:
    report = ExecutionReport()
    for old, new in order_for_execution(pairs):
        try:
            rename_one(old, new)
        except OSError as e:
            logger.error("Error renaming '%s' to '%s': %s", old.name, new.name, e)
            report.failed.append((old, new, str(e)))
            continue
        logger.info("Renamed '%s' to '%s'", old.name, new.name)
        report.succeeded.append((old, new))
    return report
