"""License grouping and the copyleft/restrictive license check."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, List, Set

from ..logging import get_logger
from ..models import LicenseAnalysis, LicenseGroup, LicenseResult, ProcessInvocation
from ..parsers import parse_cargo_license_json
from .dependencies import project_display_name

if TYPE_CHECKING:  # pragma: no cover
    from ..execution.runner import CommandRunner

# Licenses with requirements that may conflict with commercial use.
PROBLEMATIC_LICENSES = (
    "GPL",
    "AGPL",
    "LGPL",
    "CC-BY-SA",
    "CC-BY-NC",
    "SSPL",
    "BSL",
    "BUSL",
    "Elastic",
    "Commons Clause",
)

_logger = get_logger("aggregate.licenses")


def is_problematic_license(license_expr: str) -> bool:
    upper = license_expr.upper()
    return any(token.upper() in upper for token in PROBLEMATIC_LICENSES)


def aggregate_licenses(results: Iterable[LicenseResult]) -> LicenseAnalysis:
    """Bucket ``name@version`` identifiers by license expression."""
    projects = list(results)
    license_map: Dict[str, Set[str]] = {}
    for result in projects:
        if not result.success:
            continue
        for info in result.licenses:
            license_map.setdefault(info.license, set()).add(f"{info.name}@{info.version}")

    groups = [
        LicenseGroup(
            license=license_expr,
            packages=sorted(packages),
            is_problematic=is_problematic_license(license_expr),
        )
        for license_expr, packages in license_map.items()
    ]
    groups.sort(key=lambda group: (not group.is_problematic, -len(group.packages), group.license))
    return LicenseAnalysis(projects=projects, license_groups=groups)


def check_licenses(project_path: str, runner: "CommandRunner") -> LicenseResult:
    """Run ``cargo license --json`` for one project and decode the report."""
    project_name = project_display_name(project_path)
    result = runner.run(ProcessInvocation(command="license", args=["--json"], cwd=project_path))
    if result.spawn_error is not None:
        return LicenseResult(
            project_path=project_path,
            project_name=project_name,
            success=False,
            error=f"Failed to run cargo-license: {result.spawn_error}",
        )

    parsed = parse_cargo_license_json(result.stdout)
    if not parsed.ok:
        _logger.debug("License report for %s could not be decoded: %s", project_path, parsed.error)
        return LicenseResult(
            project_path=project_path,
            project_name=project_name,
            success=False,
            error=f"{parsed.error}. Stderr: {result.stderr.strip()}",
        )
    return LicenseResult(
        project_path=project_path,
        project_name=project_name,
        licenses=parsed.value or [],
    )


def check_all_licenses(project_paths: Iterable[str], runner: "CommandRunner") -> LicenseAnalysis:
    results: List[LicenseResult] = [check_licenses(path, runner) for path in project_paths]
    analysis = aggregate_licenses(results)
    _logger.info(
        "Collected %d package license(s), %d problematic",
        analysis.total_packages,
        analysis.problematic_count,
    )
    return analysis


__all__ = [
    "PROBLEMATIC_LICENSES",
    "aggregate_licenses",
    "check_all_licenses",
    "check_licenses",
    "is_problematic_license",
]
