"""Bounded filesystem walk that finds Cargo manifests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

from .logging import get_logger
from .manifest import MANIFEST_NAME, TARGET_DIR

MAX_DEPTH = 4

_logger = get_logger("locator")


def _log_walk_error(exc: OSError) -> None:
    _logger.debug("Skipping unreadable directory %s: %s", exc.filename, exc)


def iter_manifests(root: Path | str, max_depth: int = MAX_DEPTH) -> Iterator[Path]:
    """Yield Cargo.toml paths under ``root`` at most ``max_depth`` entries deep.

    Depth counts path components below ``root``: ``root/Cargo.toml`` is at
    depth 1 and ``root/a/b/c/Cargo.toml`` at depth 4. Anything below a
    ``target`` directory is never yielded and unreadable directories are
    skipped.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        return

    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_log_walk_error):
        current_dir = Path(dirpath)
        rel_parts = current_dir.relative_to(root_path).parts
        if TARGET_DIR in rel_parts:
            dirnames[:] = []
            continue

        depth = len(rel_parts)
        if depth + 1 >= max_depth:
            dirnames[:] = []
        else:
            dirnames[:] = [name for name in dirnames if name != TARGET_DIR]

        if depth + 1 <= max_depth and MANIFEST_NAME in filenames:
            yield current_dir / MANIFEST_NAME


__all__ = ["MAX_DEPTH", "iter_manifests"]
