"""Application configuration snapshots stored as YAML."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

import yaml

CONFIG_DIR_ENV = "CARGOFLEET_CONFIG_DIR"
CONFIG_FILENAME = "config.yml"
MAX_RECENT_PROJECTS = 5


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class AppConfig:
    """Immutable snapshot of user preferences."""

    favorites: Tuple[str, ...] = ()
    hidden: Tuple[str, ...] = ()
    scan_root: Optional[str] = None
    recent_projects: Tuple[str, ...] = ()
    preferred_ide: Optional[str] = None
    cargo_executable: str = "cargo"
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "favorites": list(self.favorites),
            "hidden": list(self.hidden),
            "recent_projects": list(self.recent_projects),
            "cargo_executable": self.cargo_executable,
        }
        if self.scan_root is not None:
            data["scan_root"] = self.scan_root
        if self.preferred_ide is not None:
            data["preferred_ide"] = self.preferred_ide
        return data


def config_dir() -> Path:
    override = os.getenv(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    base = os.getenv("XDG_CONFIG_HOME")
    root = Path(base).expanduser() if base else Path.home() / ".config"
    return root / "cargofleet"


def default_config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


def default_scan_root() -> str:
    return str(Path.home() / "Projects")


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the configuration snapshot, returning defaults when the file is absent."""
    path = config_path or default_config_path()
    if not path.exists():
        return AppConfig()

    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return AppConfig()

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if data is None:
        return AppConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")

    known = {
        "favorites",
        "hidden",
        "scan_root",
        "recent_projects",
        "preferred_ide",
        "cargo_executable",
    }
    return AppConfig(
        favorites=_as_str_tuple(data.get("favorites")),
        hidden=_as_str_tuple(data.get("hidden")),
        scan_root=_as_str(data.get("scan_root")),
        recent_projects=_as_str_tuple(data.get("recent_projects"))[:MAX_RECENT_PROJECTS],
        preferred_ide=_as_str(data.get("preferred_ide")),
        cargo_executable=_as_str(data.get("cargo_executable")) or "cargo",
        extra={key: value for key, value in data.items() if key not in known},
    )


def save_config(config: AppConfig, config_path: Path | None = None) -> Path:
    """Write ``config`` to disk and return the path written."""
    path = config_path or default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {**config.extra, **config.to_dict()}
    path.write_text(yaml.safe_dump(payload, sort_keys=True), encoding="utf-8")
    return path


def with_favorite(config: AppConfig, path: str, is_favorite: bool) -> AppConfig:
    return replace(config, favorites=_toggle(config.favorites, path, is_favorite))


def with_hidden(config: AppConfig, path: str, is_hidden: bool) -> AppConfig:
    return replace(config, hidden=_toggle(config.hidden, path, is_hidden))


def with_recent_project(config: AppConfig, path: str) -> AppConfig:
    """Move ``path`` to the front of the recent list, keeping the newest five."""
    recent = (path, *(item for item in config.recent_projects if item != path))
    return replace(config, recent_projects=recent[:MAX_RECENT_PROJECTS])


def with_scan_root(config: AppConfig, path: str) -> AppConfig:
    return replace(config, scan_root=path)


def _toggle(items: Tuple[str, ...], value: str, present: bool) -> Tuple[str, ...]:
    if present:
        return items if value in items else (*items, value)
    return tuple(item for item in items if item != value)


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence):
        return tuple(str(item) for item in value if isinstance(item, (str, int, float)))
    return ()


__all__ = [
    "AppConfig",
    "ConfigError",
    "default_config_path",
    "default_scan_root",
    "load_config",
    "save_config",
    "with_favorite",
    "with_hidden",
    "with_recent_project",
    "with_scan_root",
]
