"""Persistent snapshot of the most recent fleet-wide analyses."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import config_dir
from ..models import DependencyAnalysis, LicenseAnalysis, ToolchainAnalysis

_CACHE_VERSION = 1
_CACHE_FILENAME = "cache.json"
_SECTIONS = ("dep_analysis", "toolchain_analysis", "license_analysis")


def default_cache_path() -> Path:
    return config_dir() / _CACHE_FILENAME


class ScanCache:
    """Stores serialised analyses keyed by section with the time they were saved."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path if path is not None else default_cache_path()
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._load(self._path)

    def get(self, section: str) -> Optional[Dict[str, Any]]:
        entry = self._entries.get(section)
        if not entry:
            return None
        payload = entry.get("payload")
        return payload if isinstance(payload, dict) else None

    def timestamp(self, section: str) -> Optional[int]:
        entry = self._entries.get(section)
        if not entry:
            return None
        value = entry.get("timestamp")
        return value if isinstance(value, int) else None

    def snapshot(self) -> Dict[str, Any]:
        """Return a copy of every stored section, suitable for presentation."""
        data: Dict[str, Any] = {}
        for section in _SECTIONS:
            data[section] = self.get(section)
            data[f"{section}_timestamp"] = self.timestamp(section)
        return data

    def save_dependency_analysis(self, analysis: DependencyAnalysis) -> None:
        self._store("dep_analysis", analysis.to_dict())

    def save_toolchain_analysis(self, analysis: ToolchainAnalysis) -> None:
        self._store("toolchain_analysis", analysis.to_dict())

    def save_license_analysis(self, analysis: LicenseAnalysis) -> None:
        self._store("license_analysis", analysis.to_dict())

    def clear(self) -> None:
        self._entries.clear()
        self._persist()

    # ------------------------------------------------------------------
    # Internal helpers

    def _store(self, section: str, payload: Dict[str, Any]) -> None:
        self._entries[section] = {"payload": payload, "timestamp": int(time.time())}
        self._persist()

    def _persist(self) -> None:
        payload = {"version": _CACHE_VERSION, "entries": self._entries}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        self._entries = {
            key: raw
            for key, raw in entries.items()
            if key in _SECTIONS and isinstance(raw, dict) and "payload" in raw
        }


__all__ = ["ScanCache", "default_cache_path"]
