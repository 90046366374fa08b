"""Tests for license aggregation."""

from __future__ import annotations

import json

import pytest

from cargofleet.aggregate import aggregate_licenses, check_all_licenses, is_problematic_license
from cargofleet.aggregate.licenses import check_licenses
from cargofleet.models import CommandResult, LicenseInfo, LicenseResult


class StubRunner:
    """Returns canned batch results keyed by working directory."""

    def __init__(self, results: dict[str, CommandResult]) -> None:
        self.results = results
        self.invocations = []

    def run(self, invocation):
        self.invocations.append(invocation)
        return self.results[invocation.cwd]


def _ok(path: str, packages: list[dict[str, str]]) -> CommandResult:
    return CommandResult(
        project_path=path,
        command="license",
        success=True,
        stdout=json.dumps(packages),
        exit_code=0,
    )


@pytest.mark.parametrize(
    ("expression", "expected"),
    [
        ("GPL-3.0", True),
        ("gpl-3.0", True),
        ("MIT", False),
        ("MIT OR Apache-2.0", False),
        ("LGPL-2.1-or-later", True),
        ("BUSL-1.1", True),
        ("Apache-2.0 WITH Commons Clause", True),
    ],
)
def test_is_problematic_license(expression: str, expected: bool) -> None:
    assert is_problematic_license(expression) is expected


def test_aggregate_dedups_and_orders_groups() -> None:
    results = [
        LicenseResult(
            project_path="/p/a",
            project_name="a",
            licenses=[
                LicenseInfo(name="serde", version="1.0.0", license="MIT OR Apache-2.0"),
                LicenseInfo(name="rand", version="0.8.5", license="MIT OR Apache-2.0"),
                LicenseInfo(name="readline", version="1.0.0", license="GPL-3.0"),
            ],
        ),
        LicenseResult(
            project_path="/p/b",
            project_name="b",
            licenses=[
                LicenseInfo(name="serde", version="1.0.0", license="MIT OR Apache-2.0"),
                LicenseInfo(name="ring", version="0.17.0", license="ISC"),
            ],
        ),
        LicenseResult(project_path="/p/c", project_name="c", success=False, error="boom"),
    ]

    analysis = aggregate_licenses(results)

    assert [(g.license, g.packages, g.is_problematic) for g in analysis.license_groups] == [
        ("GPL-3.0", ["readline@1.0.0"], True),
        ("MIT OR Apache-2.0", ["rand@0.8.5", "serde@1.0.0"], False),
        ("ISC", ["ring@0.17.0"], False),
    ]
    assert analysis.total_packages == 4
    assert analysis.problematic_count == 1
    assert len(analysis.projects) == 3


def test_check_licenses_decodes_report() -> None:
    runner = StubRunner(
        {"/p/a": _ok("/p/a", [{"name": "serde", "version": "1.0.0", "license": None}])}
    )

    result = check_licenses("/p/a", runner)

    assert result.success is True
    assert result.project_name == "a"
    assert result.licenses[0].license == "Unknown"
    assert runner.invocations[0].command == "license"
    assert runner.invocations[0].args == ["--json"]


def test_check_licenses_reports_spawn_failure() -> None:
    runner = StubRunner(
        {
            "/p/a": CommandResult(
                project_path="/p/a",
                command="license",
                success=False,
                stderr="Failed to execute command: not found",
                spawn_error="not found",
            )
        }
    )

    result = check_licenses("/p/a", runner)

    assert result.success is False
    assert result.error == "Failed to run cargo-license: not found"


def test_check_licenses_reports_undecodable_output() -> None:
    runner = StubRunner(
        {
            "/p/a": CommandResult(
                project_path="/p/a",
                command="license",
                success=False,
                stderr="error: no such command: `license`\n",
                exit_code=101,
            )
        }
    )

    result = check_licenses("/p/a", runner)

    assert result.success is False
    assert result.error is not None
    assert result.error.startswith("JSON parse error")
    assert "no such command" in result.error


def test_check_all_licenses_degrades_per_project() -> None:
    runner = StubRunner(
        {
            "/p/a": _ok("/p/a", [{"name": "gpl-crate", "version": "2.0.0", "license": "AGPL-3.0"}]),
            "/p/b": CommandResult(project_path="/p/b", command="license", success=False, stdout="{"),
        }
    )

    analysis = check_all_licenses(["/p/a", "/p/b"], runner)

    assert [p.success for p in analysis.projects] == [True, False]
    assert analysis.license_groups[0].license == "AGPL-3.0"
    assert analysis.problematic_count == 1
