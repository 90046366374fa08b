"""Pinned toolchain and MSRV grouping across projects."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..logging import get_logger
from ..manifest import MANIFEST_NAME, load_toml
from ..models import ToolchainAnalysis, ToolchainGroup, ToolchainInfo
from .dependencies import project_display_name

TOOLCHAIN_TOML = "rust-toolchain.toml"
TOOLCHAIN_PLAIN = "rust-toolchain"

_logger = get_logger("aggregate.toolchains")


def read_toolchain(project_dir: Path) -> Optional[str]:
    """Return the pinned channel, preferring rust-toolchain.toml over the plain file."""
    structured = project_dir / TOOLCHAIN_TOML
    if structured.is_file():
        data = load_toml(structured)
        toolchain = data.get("toolchain") if data else None
        if isinstance(toolchain, dict) and isinstance(toolchain.get("channel"), str):
            return toolchain["channel"]

    plain = project_dir / TOOLCHAIN_PLAIN
    if plain.is_file():
        try:
            content = plain.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError):
            return None
        return content or None
    return None


def read_msrv(project_dir: Path) -> Optional[str]:
    data = load_toml(project_dir / MANIFEST_NAME)
    package = data.get("package") if data else None
    if isinstance(package, dict) and isinstance(package.get("rust-version"), str):
        return package["rust-version"]
    return None


def _to_groups(mapping: Dict[str, List[str]]) -> List[ToolchainGroup]:
    groups = [ToolchainGroup(version=value, projects=names) for value, names in mapping.items()]
    groups.sort(key=lambda group: (-len(group.projects), group.version))
    return groups


def analyze_toolchains(project_paths: Iterable[str]) -> ToolchainAnalysis:
    """Group projects by pinned toolchain and by declared MSRV."""
    projects: List[ToolchainInfo] = []
    toolchain_map: Dict[str, List[str]] = {}
    msrv_map: Dict[str, List[str]] = {}

    for project_path in project_paths:
        path = Path(project_path)
        name = project_display_name(project_path)
        toolchain = read_toolchain(path)
        msrv = read_msrv(path)

        if toolchain is not None:
            toolchain_map.setdefault(toolchain, []).append(name)
        if msrv is not None:
            msrv_map.setdefault(msrv, []).append(name)

        projects.append(
            ToolchainInfo(
                project_path=project_path,
                project_name=name,
                toolchain=toolchain,
                msrv=msrv,
                channel=toolchain,
            )
        )

    analysis = ToolchainAnalysis(
        projects=projects,
        toolchain_groups=_to_groups(toolchain_map),
        msrv_groups=_to_groups(msrv_map),
    )
    if analysis.has_mismatches:
        _logger.info(
            "Toolchain mismatch: %d toolchain(s), %d MSRV value(s)",
            len(analysis.toolchain_groups),
            len(analysis.msrv_groups),
        )
    return analysis


__all__ = ["analyze_toolchains", "read_msrv", "read_toolchain"]
