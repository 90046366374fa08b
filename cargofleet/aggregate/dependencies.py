"""Dependency version grouping across many projects."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..logging import get_logger
from ..manifest import DEPENDENCY_TABLES, MANIFEST_NAME, load_toml
from ..models import DependencyAnalysis, DependencyUsage, VersionUsage

_logger = get_logger("aggregate.dependencies")


def project_display_name(project_path: str) -> str:
    return Path(project_path).name or project_path


def extract_version(value: Any) -> Optional[str]:
    """Return a comparable version for a dependency declaration.

    ``serde = "1.0"`` yields ``"1.0"`` and ``serde = { version = "1.0" }``
    yields the same; path or git dependencies without a version yield None.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        version = value.get("version")
        if isinstance(version, str):
            return version
    return None


def iter_declared_dependencies(manifest: Dict[str, Any]) -> Iterator[Tuple[str, Any]]:
    """Yield ``(name, declaration)`` from normal, dev and build tables in that order."""
    for table_name in DEPENDENCY_TABLES:
        table = manifest.get(table_name)
        if not isinstance(table, dict):
            continue
        yield from table.items()


def analyze_dependencies(project_paths: Iterable[str]) -> DependencyAnalysis:
    """Group every versioned dependency by name and exact version string."""
    dep_map: Dict[str, Dict[str, List[str]]] = {}

    for project_path in project_paths:
        manifest = load_toml(Path(project_path) / MANIFEST_NAME)
        if manifest is None:
            continue
        project_name = project_display_name(project_path)
        for name, value in iter_declared_dependencies(manifest):
            version = extract_version(value)
            if version is None:
                continue
            dep_map.setdefault(name, {}).setdefault(version, []).append(project_name)

    dependencies = [
        DependencyUsage(
            name=name,
            versions=[VersionUsage(version=v, projects=p) for v, p in versions.items()],
        )
        for name, versions in dep_map.items()
    ]
    dependencies.sort(key=lambda dep: (-dep.project_count, dep.name))

    analysis = DependencyAnalysis(dependencies=dependencies)
    _logger.info(
        "Analyzed %d unique dependencies (%d with version mismatches)",
        analysis.total_unique_deps,
        analysis.deps_with_mismatches,
    )
    return analysis


__all__ = ["analyze_dependencies", "extract_version", "iter_declared_dependencies"]
