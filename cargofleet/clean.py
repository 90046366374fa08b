"""Removal of build-output directories."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from .logging import get_logger
from .manifest import TARGET_DIR
from .models import CleanResult

DEBUG_DIR = "debug"

_logger = get_logger("clean")


def clean_project(
    project_path: str,
    *,
    debug_only: bool = False,
    size_hint: Optional[int] = None,
) -> CleanResult:
    """Delete ``target/`` (or only ``target/debug``) for one project.

    ``freed_bytes`` is derived from ``size_hint`` instead of re-measuring:
    the full hint for a full clean, half of it for a debug-only clean.
    """
    path = Path(project_path)
    name = path.name or "unknown"
    target = path / TARGET_DIR

    if not target.exists():
        return CleanResult(path=project_path, name=name)

    size_before = size_hint or 0
    victim = target / DEBUG_DIR if debug_only else target
    try:
        if victim.exists():
            shutil.rmtree(victim)
    except OSError as exc:
        _logger.warning("Failed to clean %s: %s", victim, exc)
        return CleanResult(path=project_path, name=name, success=False, error=str(exc))

    freed = size_before // 2 if debug_only else size_before
    _logger.info("Cleaned %s (about %d bytes freed)", victim, freed)
    return CleanResult(path=project_path, name=name, freed_bytes=freed)


def clean_projects(
    project_paths: Sequence[str],
    *,
    debug_only: bool = False,
    size_hints: Optional[Sequence[int]] = None,
) -> List[CleanResult]:
    results: List[CleanResult] = []
    for index, project_path in enumerate(project_paths):
        hint = size_hints[index] if size_hints is not None and index < len(size_hints) else None
        results.append(clean_project(project_path, debug_only=debug_only, size_hint=hint))
    return results


__all__ = ["clean_project", "clean_projects"]
