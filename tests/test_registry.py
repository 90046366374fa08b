"""Tests for cargofleet.registry."""

from __future__ import annotations

import os
import time
from pathlib import Path

from cargofleet.registry import ProjectRegistry, dir_size, last_modified


def test_discover_returns_empty_list_without_manifests(cargo_tree) -> None:
    cargo_tree.write({"notes/readme.txt": "nothing to see\n"})

    assert cargo_tree.discover() == []


def test_discover_returns_empty_list_for_missing_root(tmp_path: Path) -> None:
    assert ProjectRegistry().discover(tmp_path / "missing") == []


def test_discover_sorts_by_case_insensitive_name(cargo_tree) -> None:
    cargo_tree.crate("b", "beta")
    cargo_tree.crate("a", "Alpha")
    cargo_tree.crate("g", "gamma")

    names = [project.name for project in cargo_tree.discover()]

    assert names == ["Alpha", "beta", "gamma"]


def test_discover_defaults_name_and_counts_dependencies(cargo_tree) -> None:
    cargo_tree.crate("nameless", None, dependencies={"serde": '"1.0"', "rand": '"0.8"'})

    (project,) = cargo_tree.discover()

    assert project.name == "unknown"
    assert project.dep_count == 2
    assert project.path == str(cargo_tree.path("nameless"))


def test_discover_skips_malformed_manifests(cargo_tree) -> None:
    cargo_tree.write({"broken/Cargo.toml": "[package\nname = 'oops'"})
    cargo_tree.crate("fine", "fine")

    assert [project.name for project in cargo_tree.discover()] == ["fine"]


def test_target_size_is_sum_of_regular_files(cargo_tree) -> None:
    project_dir = cargo_tree.crate("sized", "sized")
    target = project_dir / "target"
    (target / "debug" / "deps").mkdir(parents=True)
    (target / "release").mkdir()
    (target / "debug" / "deps" / "a.rlib").write_bytes(b"x" * 100)
    (target / "release" / "bin").write_bytes(b"y" * 250)
    (target / "CACHEDIR.TAG").write_bytes(b"z" * 7)
    cargo_tree.crate("bare", "bare")

    projects = {project.name: project for project in cargo_tree.discover()}

    assert projects["sized"].target_size == 357
    assert projects["bare"].target_size == 0
    assert dir_size(target) == 357


def test_last_modified_uses_manifest_and_shallow_sources(cargo_tree) -> None:
    project_dir = cargo_tree.crate("timed", "timed")
    cargo_tree.write({"timed/src/a/b/c/deep.rs": "\n"})
    now = int(time.time())
    os.utime(project_dir / "src" / "lib.rs", (now + 1000, now + 1000))
    os.utime(project_dir / "src" / "a" / "b" / "c" / "deep.rs", (now + 5000, now + 5000))

    assert last_modified(project_dir) == now + 1000


def test_last_modified_without_sources_uses_manifest(tmp_path: Path) -> None:
    manifest = tmp_path / "Cargo.toml"
    manifest.write_text("[package]\nname = 'x'\n", encoding="utf-8")
    os.utime(manifest, (1_600_000_000, 1_600_000_000))

    assert last_modified(tmp_path) == 1_600_000_000


def test_non_member_has_no_workspace_root(cargo_tree) -> None:
    cargo_tree.workspace("ws", ["member"])
    cargo_tree.crate("ws/member", "member")
    cargo_tree.crate("loose", "loose")

    projects = {project.name: project for project in cargo_tree.discover()}

    assert projects["loose"].is_workspace_member is False
    assert projects["loose"].workspace_root is None
    assert projects["member"].is_workspace_member is True
    assert projects["member"].workspace_root == str(cargo_tree.path("ws"))


def test_workspace_root_itself_is_listed_as_unknown_project(cargo_tree) -> None:
    cargo_tree.workspace("ws", ["crates/*"])
    cargo_tree.crate("ws/crates/core", "core")

    projects = cargo_tree.discover()

    assert [(p.name, p.is_workspace_member) for p in projects] == [
        ("core", True),
        ("unknown", False),
    ]


def test_member_without_resolvable_root_keeps_none(cargo_tree) -> None:
    cargo_tree.workspace("ws", ["../outside"])
    cargo_tree.crate("outside", "outside")

    projects = {project.name: project for project in cargo_tree.discover()}

    assert projects["outside"].is_workspace_member is True
    assert projects["outside"].workspace_root is None


def test_discovery_is_idempotent(cargo_tree) -> None:
    cargo_tree.workspace("ws", ["a", "pkgs/*"])
    cargo_tree.crate("ws/a", "a")
    cargo_tree.crate("ws/pkgs/x", "x")
    cargo_tree.crate("other", "Other")

    first = cargo_tree.discover()
    second = cargo_tree.discover()

    assert first == second
