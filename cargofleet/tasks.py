"""Async entry points that offload blocking work to the default executor.

Each coroutine converts a failure inside the offloaded call into an empty
or failed result so callers always receive a well-typed value.
"""

from __future__ import annotations

import asyncio
from typing import Callable, List, Sequence, TypeVar

from .aggregate import analyze_dependencies as _analyze_dependencies
from .aggregate import analyze_toolchains as _analyze_toolchains
from .aggregate import check_all_licenses as _check_all_licenses
from .execution import CommandRunner
from .logging import get_logger
from .models import (
    CommandResult,
    DependencyAnalysis,
    LicenseAnalysis,
    ProcessInvocation,
    Project,
    ToolchainAnalysis,
)
from .registry import ProjectRegistry

T = TypeVar("T")

_logger = get_logger("tasks")


async def _offload(func: Callable[[], T], fallback: Callable[[], T], label: str) -> T:
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, func)
    except Exception as exc:
        _logger.error("%s failed: %s", label, exc)
        return fallback()


async def scan_projects(root: str) -> List[Project]:
    return await _offload(lambda: ProjectRegistry().discover(root), list, "Project scan")


async def analyze_dependencies(project_paths: Sequence[str]) -> DependencyAnalysis:
    paths = list(project_paths)
    return await _offload(
        lambda: _analyze_dependencies(paths), DependencyAnalysis, "Dependency analysis"
    )


async def analyze_toolchains(project_paths: Sequence[str]) -> ToolchainAnalysis:
    paths = list(project_paths)
    return await _offload(
        lambda: _analyze_toolchains(paths), ToolchainAnalysis, "Toolchain analysis"
    )


async def check_all_licenses(
    project_paths: Sequence[str], runner: CommandRunner | None = None
) -> LicenseAnalysis:
    paths = list(project_paths)
    active = runner or CommandRunner()
    return await _offload(
        lambda: _check_all_licenses(paths, active), LicenseAnalysis, "License analysis"
    )


async def run_command(
    invocation: ProcessInvocation, runner: CommandRunner | None = None
) -> CommandResult:
    """Batch-run one invocation without blocking the event loop."""
    active = runner or CommandRunner()

    def _failed() -> CommandResult:
        return CommandResult(
            project_path=invocation.cwd,
            command=invocation.command,
            success=False,
            stderr="Task failed",
        )

    return await _offload(lambda: active.run(invocation), _failed, f"cargo {invocation.command}")


__all__ = [
    "analyze_dependencies",
    "analyze_toolchains",
    "check_all_licenses",
    "run_command",
    "scan_projects",
]
