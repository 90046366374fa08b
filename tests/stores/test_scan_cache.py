from __future__ import annotations

import json
from pathlib import Path

from cargofleet.models import (
    DependencyAnalysis,
    DependencyUsage,
    LicenseAnalysis,
    ToolchainAnalysis,
    VersionUsage,
)
from cargofleet.stores import ScanCache
from cargofleet.stores.scan_cache import default_cache_path


def _analysis() -> DependencyAnalysis:
    return DependencyAnalysis(
        dependencies=[
            DependencyUsage(name="serde", versions=[VersionUsage(version="1", projects=["a"])])
        ]
    )


def test_saved_sections_survive_reload(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    cache = ScanCache(path)
    cache.save_dependency_analysis(_analysis())
    cache.save_toolchain_analysis(ToolchainAnalysis())

    reloaded = ScanCache(path)

    assert reloaded.get("dep_analysis") == _analysis().to_dict()
    assert reloaded.get("toolchain_analysis") == ToolchainAnalysis().to_dict()
    assert reloaded.get("license_analysis") is None
    assert isinstance(reloaded.timestamp("dep_analysis"), int)


def test_snapshot_includes_timestamps(tmp_path: Path) -> None:
    cache = ScanCache(tmp_path / "cache.json")
    cache.save_license_analysis(LicenseAnalysis())

    snapshot = cache.snapshot()

    assert set(snapshot) == {
        "dep_analysis",
        "dep_analysis_timestamp",
        "toolchain_analysis",
        "toolchain_analysis_timestamp",
        "license_analysis",
        "license_analysis_timestamp",
    }
    assert snapshot["license_analysis"] == LicenseAnalysis().to_dict()
    assert snapshot["dep_analysis_timestamp"] is None


def test_corrupt_or_outdated_cache_loads_empty(tmp_path: Path) -> None:
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    assert ScanCache(corrupt).get("dep_analysis") is None

    stale = tmp_path / "stale.json"
    stale.write_text(
        json.dumps({"version": 0, "entries": {"dep_analysis": {"payload": {}, "timestamp": 1}}}),
        encoding="utf-8",
    )
    assert ScanCache(stale).timestamp("dep_analysis") is None


def test_clear_removes_every_section(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    cache = ScanCache(path)
    cache.save_dependency_analysis(_analysis())

    cache.clear()

    assert ScanCache(path).get("dep_analysis") is None


def test_default_location_follows_config_dir(isolated_config_dir: Path) -> None:
    cache = ScanCache()
    cache.save_dependency_analysis(_analysis())

    assert default_cache_path() == isolated_config_dir / "cache.json"
    assert default_cache_path().exists()
