from __future__ import annotations

import io
import logging
from pathlib import Path

from cargofleet.execution import OUTPUT_CHANNEL, LoggingEventSink
from cargofleet.logging import configure_logging, get_logger
from cargofleet.models import OutputEvent


def test_get_logger_nests_under_package() -> None:
    assert get_logger().name == "cargofleet"
    assert get_logger("execution.runner").name == "cargofleet.execution.runner"


def test_console_respects_verbosity() -> None:
    stream = io.StringIO()
    configure_logging(stream=stream)

    get_logger("registry").debug("hidden detail")
    get_logger("registry").info("Discovered 2 project(s)")

    assert stream.getvalue() == "[cargofleet] INFO Discovered 2 project(s)\n"


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging(stream=io.StringIO())
    logger = configure_logging(verbose=True, stream=io.StringIO())

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG


def test_log_file_records_output_lines_without_verbose(tmp_path: Path) -> None:
    console = io.StringIO()
    log_file = tmp_path / "logs" / "cargofleet.log"
    logger = configure_logging(log_file=log_file, stream=console)

    LoggingEventSink().emit(OUTPUT_CHANNEL, OutputEvent(line="Compiling serde", stream="stdout"))
    for handler in logger.handlers:
        handler.flush()

    assert "Compiling serde" in log_file.read_text(encoding="utf-8")
    assert "Compiling serde" not in console.getvalue()
