"""Decoders for JSON reports produced by third-party cargo subcommands."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, TypeVar

from .models import LicenseInfo

T = TypeVar("T")


@dataclass
class ParseResult(Generic[T]):
    """Either a decoded value or the reason decoding failed."""

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "ParseResult[T]":
        return cls(ok=False, error=error)


@dataclass
class OutdatedDependency:
    name: str
    current: str
    latest: str
    kind: str = "Normal"


def _load_json(text: str) -> tuple[Any, Optional[str]]:
    try:
        return json.loads(text), None
    except json.JSONDecodeError as exc:
        return None, f"JSON parse error: {exc}"


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def parse_cargo_license_json(text: str) -> ParseResult[List[LicenseInfo]]:
    """Decode ``cargo license --json`` output."""
    payload, error = _load_json(text)
    if error is not None:
        return ParseResult.failure(error)
    if not isinstance(payload, list):
        return ParseResult.failure("JSON parse error: expected a list of packages")

    licenses: List[LicenseInfo] = []
    for entry in payload:
        if not isinstance(entry, dict):
            return ParseResult.failure("JSON parse error: package entry is not an object")
        name = entry.get("name")
        version = entry.get("version")
        if not isinstance(name, str) or not isinstance(version, str):
            return ParseResult.failure("JSON parse error: package entry lacks name or version")
        licenses.append(
            LicenseInfo(
                name=name,
                version=version,
                license=_optional_str(entry.get("license")) or "Unknown",
                authors=_optional_str(entry.get("authors")),
                repository=_optional_str(entry.get("repository")),
            )
        )
    return ParseResult.success(licenses)


def parse_cargo_outdated_json(text: str) -> ParseResult[List[OutdatedDependency]]:
    """Decode ``cargo outdated --format json`` output, keeping only stale entries."""
    payload, error = _load_json(text)
    if error is not None:
        return ParseResult.failure(error)
    dependencies = payload.get("dependencies") if isinstance(payload, dict) else None
    if not isinstance(dependencies, list):
        return ParseResult.failure("JSON parse error: missing dependencies list")

    outdated: List[OutdatedDependency] = []
    for entry in dependencies:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        current = entry.get("project")
        latest = entry.get("latest")
        if not all(isinstance(value, str) for value in (name, current, latest)):
            continue
        if current == latest:
            continue
        outdated.append(
            OutdatedDependency(
                name=name,
                current=current,
                latest=latest,
                kind=_optional_str(entry.get("kind")) or "Normal",
            )
        )
    return ParseResult.success(outdated)


__all__ = [
    "OutdatedDependency",
    "ParseResult",
    "parse_cargo_license_json",
    "parse_cargo_outdated_json",
]
