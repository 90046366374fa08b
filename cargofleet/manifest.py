"""Cargo.toml reading helpers."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from .logging import get_logger
from .models import ManifestRecord

MANIFEST_NAME = "Cargo.toml"
TARGET_DIR = "target"
DEPENDENCY_TABLES = ("dependencies", "dev-dependencies", "build-dependencies")

_logger = get_logger("manifest")


def load_toml(path: Path) -> Optional[Dict[str, Any]]:
    """Return the parsed TOML document, or None when unreadable or malformed."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _logger.debug("Skipping unreadable %s: %s", path, exc)
        return None
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        _logger.debug("Skipping malformed %s: %s", path, exc)
        return None


def parse_manifest(path: Path) -> Optional[ManifestRecord]:
    """Parse a Cargo.toml into a ManifestRecord."""
    data = load_toml(path)
    if data is None:
        return None

    package = data.get("package")
    name = None
    if isinstance(package, dict) and isinstance(package.get("name"), str):
        name = package["name"]

    dependencies = data.get("dependencies")
    dep_count = len(dependencies) if isinstance(dependencies, dict) else 0

    workspace = data.get("workspace")
    members: Optional[List[str]] = None
    if isinstance(workspace, dict):
        raw_members = workspace.get("members")
        if isinstance(raw_members, list):
            members = [item for item in raw_members if isinstance(item, str)]

    return ManifestRecord(
        path=path,
        name=name,
        dependency_count=dep_count,
        workspace_members=members,
        has_workspace=isinstance(workspace, dict),
    )


def declares_workspace(directory: Path) -> bool:
    """Return True when ``directory`` hosts a manifest with a [workspace] table."""
    manifest = directory / MANIFEST_NAME
    if not manifest.is_file():
        return False
    record = parse_manifest(manifest)
    return record is not None and record.has_workspace


def package_name(directory: Path) -> Optional[str]:
    manifest = directory / MANIFEST_NAME
    if not manifest.is_file():
        return None
    record = parse_manifest(manifest)
    return record.name if record else None


__all__ = [
    "DEPENDENCY_TABLES",
    "MANIFEST_NAME",
    "TARGET_DIR",
    "declares_workspace",
    "load_toml",
    "package_name",
    "parse_manifest",
]
