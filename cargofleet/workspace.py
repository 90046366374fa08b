"""Workspace graph resolution for discovered Cargo manifests."""

from __future__ import annotations

import glob
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from .locator import MAX_DEPTH, iter_manifests
from .logging import get_logger
from .manifest import MANIFEST_NAME, declares_workspace, load_toml, package_name, parse_manifest
from .models import WorkspaceGraph, WorkspaceInfo, WorkspaceMember

MAX_ANCESTOR_STEPS = 64
_GLOB_CHARS = ("*", "?", "[")

_logger = get_logger("workspace")


def _normalise(path: Path | str) -> Path:
    return Path(os.path.normpath(path))


def is_glob(member: str) -> bool:
    return any(char in member for char in _GLOB_CHARS)


def expand_member(workspace_dir: Path, member: str) -> List[Path]:
    """Resolve one declared member entry relative to ``workspace_dir``."""
    if is_glob(member):
        matches = glob.glob(member, root_dir=workspace_dir)
        return sorted(_normalise(workspace_dir / match) for match in matches)
    return [_normalise(workspace_dir / member)]


def resolve_members(workspace_dir: Path, members: Iterable[str]) -> Set[Path]:
    resolved: Set[Path] = set()
    for member in members:
        resolved.update(expand_member(workspace_dir, member))
    return resolved


def resolve_workspace_graph(
    root: Path | str,
    manifests: Iterable[Path] | None = None,
    *,
    max_depth: int = MAX_DEPTH,
) -> WorkspaceGraph:
    """Build the workspace graph for every workspace manifest under ``root``.

    Glob members are expanded without regard to ``max_depth``; the depth
    only bounds which workspace manifests are found.
    """
    if manifests is None:
        manifests = iter_manifests(root, max_depth)

    graph = WorkspaceGraph()
    for manifest in manifests:
        record = parse_manifest(manifest)
        if record is None or record.workspace_members is None:
            continue
        workspace_dir = _normalise(manifest.parent)
        graph.roots[workspace_dir] = resolve_members(workspace_dir, record.workspace_members)
        _logger.debug(
            "Workspace %s declares %d member path(s)",
            workspace_dir,
            len(graph.roots[workspace_dir]),
        )
    return graph


def find_workspace_root(
    project_dir: Path,
    graph: WorkspaceGraph,
    *,
    declares_cache: Optional[Dict[Path, bool]] = None,
) -> Optional[Path]:
    """Return the nearest ancestor that is a member or declares a workspace.

    The directory itself is never considered. The walk stops after
    ``MAX_ANCESTOR_STEPS`` parents or when a directory repeats.
    """
    members = graph.members
    cache = declares_cache if declares_cache is not None else {}
    visited: Set[Path] = set()

    for steps, ancestor in enumerate(_normalise(project_dir).parents):
        if steps >= MAX_ANCESTOR_STEPS or ancestor in visited:
            break
        visited.add(ancestor)
        if ancestor in members:
            return ancestor
        if ancestor not in cache:
            cache[ancestor] = declares_workspace(ancestor)
        if cache[ancestor]:
            return ancestor
    return None


def _workspace_members_of(directory: Path) -> Optional[List[str]]:
    manifest = directory / MANIFEST_NAME
    if not manifest.is_file():
        return None
    data = load_toml(manifest)
    if data is None:
        return None
    workspace = data.get("workspace")
    if not isinstance(workspace, dict):
        return None
    members = workspace.get("members")
    if not isinstance(members, list):
        return None
    return [member for member in members if isinstance(member, str)]


def find_parent_workspace(project_dir: Path) -> Optional[Path]:
    """Walk upward for a workspace whose declared members include ``project_dir``."""
    target = _normalise(project_dir)
    visited: Set[Path] = set()
    for steps, ancestor in enumerate(target.parents):
        if steps >= MAX_ANCESTOR_STEPS or ancestor in visited:
            break
        visited.add(ancestor)
        # The filesystem root itself is never treated as a workspace.
        if ancestor.parent == ancestor:
            break
        members = _workspace_members_of(ancestor)
        if not members:
            continue
        for member in members:
            if target in expand_member(ancestor, member):
                return ancestor
    return None


def workspace_info(project_dir: Path | str) -> WorkspaceInfo:
    """Describe the workspace role of a single project directory."""
    path = _normalise(project_dir)
    members = _workspace_members_of(path)

    if members is not None:
        listed: List[WorkspaceMember] = []
        for pattern in members:
            for member_path in expand_member(path, pattern):
                if not (member_path / MANIFEST_NAME).is_file():
                    continue
                fallback = member_path.name if is_glob(pattern) else pattern
                listed.append(
                    WorkspaceMember(
                        name=package_name(member_path) or fallback,
                        path=str(member_path),
                        is_current=member_path == path,
                    )
                )
        return WorkspaceInfo(is_workspace=True, members=listed, root_path=str(path))

    parent = find_parent_workspace(path)
    if parent is None:
        return WorkspaceInfo()
    return WorkspaceInfo(
        is_member_of_workspace=True,
        parent_workspace_path=str(parent),
        parent_workspace_name=parent.name or "workspace",
    )


__all__ = [
    "MAX_ANCESTOR_STEPS",
    "expand_member",
    "find_parent_workspace",
    "find_workspace_root",
    "is_glob",
    "resolve_members",
    "resolve_workspace_graph",
    "workspace_info",
]
