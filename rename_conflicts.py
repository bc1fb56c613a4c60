"""
Pre-flight collision checks for a rename mapping.

Runs on the complete mapping before anything is touched. Every conflict is
collected so the operator sees all of them at once; any conflict means the
whole batch is refused.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ConflictKind(Enum):
    FOREIGN = "foreign"  # target exists on disk and is not moving away
    INTERNAL = "internal"  # several sources share one target


@dataclass(frozen=True)
class Conflict:
    kind: ConflictKind
    target: Path
    sources: tuple[Path, ...]

    def describe(self) -> str:
        if self.kind is ConflictKind.FOREIGN:
            return f"Target '{self.target.name}' already exists and is not being renamed."
        names = ", ".join(f"'{p.name}'" for p in self.sources)
        return f"Multiple files would be renamed to '{self.target.name}': {names}"


def _sorted_paths(paths: Iterable[Path]) -> tuple[Path, ...]:
    return tuple(sorted(paths, key=str))


def detect_conflicts(
    renames: Mapping[Path, Path],
    existing_paths: Iterable[Path],
) -> list[Conflict]:
    """Return every foreign and internal collision in `renames`.

    `existing_paths` is the directory snapshot taken during the scan. The
    result is ordered (foreign first, then internal, each by target path) and
    does not depend on the mapping's iteration order.
    """
    existing = set(existing_paths)

    by_target: dict[Path, list[Path]] = defaultdict(list)
    for source, target in renames.items():
        by_target[target].append(source)

    targets = _sorted_paths(by_target)
    conflicts: list[Conflict] = []

    for target in targets:
        if target in existing and target not in renames:
            conflicts.append(
                Conflict(ConflictKind.FOREIGN, target, _sorted_paths(by_target[target]))
            )

    for target in targets:
        sources = by_target[target]
        if len(sources) > 1:
            conflicts.append(Conflict(ConflictKind.INTERNAL, target, _sorted_paths(sources)))

    return conflicts
