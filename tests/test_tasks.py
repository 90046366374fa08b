from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from cargofleet import tasks
from cargofleet.execution import CommandRunner
from cargofleet.models import DependencyAnalysis, ProcessInvocation


def test_scan_projects_runs_off_the_event_loop(cargo_tree) -> None:
    cargo_tree.crate("app", "app")

    projects = asyncio.run(tasks.scan_projects(str(cargo_tree.path())))

    assert [project.name for project in projects] == ["app"]


def test_analysis_failure_degrades_to_empty_result(monkeypatch: pytest.MonkeyPatch) -> None:
    def _explode(paths):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(tasks, "_analyze_dependencies", _explode)

    analysis = asyncio.run(tasks.analyze_dependencies(["/p/a"]))

    assert analysis == DependencyAnalysis()


def test_scan_failure_degrades_to_empty_list(monkeypatch: pytest.MonkeyPatch) -> None:
    class _BrokenRegistry:
        def discover(self, root):
            raise RuntimeError("boom")

    monkeypatch.setattr(tasks, "ProjectRegistry", _BrokenRegistry)

    assert asyncio.run(tasks.scan_projects("/anywhere")) == []


def test_run_command_uses_supplied_runner(tmp_path: Path) -> None:
    invocation = ProcessInvocation(command="-c", args=["print('ok')"], cwd=str(tmp_path))

    result = asyncio.run(tasks.run_command(invocation, CommandRunner(sys.executable)))

    assert result.success is True
    assert result.stdout.strip() == "ok"


def test_run_command_failure_is_converted(tmp_path: Path) -> None:
    class _CrashingRunner:
        def run(self, invocation):
            raise RuntimeError("runner crashed")

    invocation = ProcessInvocation(command="build", cwd=str(tmp_path))

    result = asyncio.run(tasks.run_command(invocation, _CrashingRunner()))

    assert result.success is False
    assert result.stderr == "Task failed"
    assert result.project_path == str(tmp_path)
