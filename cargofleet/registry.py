"""Project discovery: turns a directory tree into an ordered project list."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Dict, List

from .locator import MAX_DEPTH, iter_manifests
from .logging import get_logger
from .manifest import MANIFEST_NAME, TARGET_DIR, parse_manifest
from .models import Project
from .workspace import find_workspace_root, resolve_workspace_graph

UNKNOWN_NAME = "unknown"
SOURCE_DIR = "src"
SOURCE_SCAN_DEPTH = 3


def dir_size(path: Path) -> int:
    """Return the total size in bytes of regular files below ``path``."""
    if not path.is_dir():
        return 0
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for filename in filenames:
            try:
                info = os.lstat(os.path.join(dirpath, filename))
            except OSError:
                continue
            if stat.S_ISREG(info.st_mode):
                total += info.st_size
    return total


def _mtime_seconds(path: Path) -> int:
    try:
        return int(path.stat().st_mtime)
    except OSError:
        return 0


def last_modified(project_dir: Path) -> int:
    """Most recent mtime across Cargo.toml, src/ and src/ entries up to three levels deep."""
    src_path = project_dir / SOURCE_DIR
    latest = max(_mtime_seconds(src_path), _mtime_seconds(project_dir / MANIFEST_NAME))

    if not src_path.is_dir():
        return latest

    for dirpath, dirnames, filenames in os.walk(src_path):
        current = Path(dirpath)
        for name in (*dirnames, *filenames):
            latest = max(latest, _mtime_seconds(current / name))
        if len(current.relative_to(src_path).parts) + 1 >= SOURCE_SCAN_DEPTH:
            dirnames[:] = []
    return latest


class ProjectRegistry:
    """Discovers Cargo projects and their workspace relationships."""

    def __init__(self, max_depth: int = MAX_DEPTH) -> None:
        self.max_depth = max_depth
        self.logger = get_logger("registry")

    def discover(self, root: str | Path) -> List[Project]:
        """Return every project under ``root`` sorted by case-insensitive name."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.is_dir():
            self.logger.warning("Scan root %s is not a directory", root_path)
            return []

        manifests = sorted(iter_manifests(root_path, self.max_depth))
        graph = resolve_workspace_graph(root_path, manifests, max_depth=self.max_depth)
        members = graph.members
        declares_cache: Dict[Path, bool] = {}

        projects: List[Project] = []
        for manifest in manifests:
            record = parse_manifest(manifest)
            if record is None:
                continue
            project_dir = manifest.parent
            is_member = project_dir in members
            workspace_root = None
            if is_member:
                found = find_workspace_root(project_dir, graph, declares_cache=declares_cache)
                workspace_root = str(found) if found is not None else None

            projects.append(
                Project(
                    name=record.name or UNKNOWN_NAME,
                    path=str(project_dir),
                    target_size=dir_size(project_dir / TARGET_DIR),
                    dep_count=record.dependency_count,
                    last_modified=last_modified(project_dir),
                    is_workspace_member=is_member,
                    workspace_root=workspace_root,
                )
            )

        projects.sort(key=lambda project: (project.name.lower(), project.path))
        self.logger.info("Discovered %d project(s) under %s", len(projects), root_path)
        return projects


def scan_projects(root: str | Path) -> List[Project]:
    """Discover projects under ``root`` with the default walk depth."""
    return ProjectRegistry().discover(root)


__all__ = ["ProjectRegistry", "dir_size", "last_modified", "scan_projects"]
