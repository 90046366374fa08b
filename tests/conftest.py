from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.cargo_tree import CargoTreeBuilder


@pytest.fixture
def cargo_tree(tmp_path: Path) -> CargoTreeBuilder:
    """Provide a Cargo tree builder rooted at the pytest tmp_path."""
    return CargoTreeBuilder(tmp_path)


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep config and cache files out of the real home directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("CARGOFLEET_CONFIG_DIR", str(config_dir))
    return config_dir


@pytest.fixture(autouse=True)
def reset_cargofleet_logger() -> Iterator[None]:
    """Drop handlers bound to captured streams once a CLI test finishes."""
    yield
    logger = logging.getLogger("cargofleet")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
