"""Event sinks that receive streaming command notifications."""

from __future__ import annotations

import queue
from typing import Any, Callable, Iterator, Optional, Protocol, Tuple

from ..logging import get_logger
from ..models import CompletionEvent, OutputEvent

OUTPUT_CHANNEL = "command-output"
COMPLETE_CHANNEL = "command-complete"


class EventSink(Protocol):
    """Anything that accepts ``(channel, payload)`` notifications."""

    def emit(self, channel: str, payload: Any) -> None:
        ...


class CallbackEventSink:
    """Forwards every notification to a plain callable."""

    def __init__(self, callback: Callable[[str, Any], None]) -> None:
        self._callback = callback

    def emit(self, channel: str, payload: Any) -> None:
        self._callback(channel, payload)


class LoggingEventSink:
    """Default sink: writes output lines and completions to the cargofleet log."""

    def __init__(self) -> None:
        self.logger = get_logger("execution.events")

    def emit(self, channel: str, payload: Any) -> None:
        if isinstance(payload, OutputEvent):
            self.logger.debug("[%s] %s", payload.stream, payload.line)
        elif isinstance(payload, CompletionEvent):
            self.logger.info(
                "cargo %s in %s finished (success=%s, exit_code=%s, %d ms)",
                payload.command,
                payload.project_path,
                payload.success,
                payload.exit_code,
                payload.duration_ms,
            )


class QueueEventSink:
    """Thread-safe sink that buffers notifications for a single consumer."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[Tuple[str, Any]]" = queue.Queue()

    def emit(self, channel: str, payload: Any) -> None:
        self._queue.put((channel, payload))

    def get(self, timeout: Optional[float] = None) -> Tuple[str, Any]:
        return self._queue.get(timeout=timeout)

    def iter_events(self, timeout: Optional[float] = None) -> Iterator[Tuple[str, Any]]:
        """Yield notifications until (and including) the completion event.

        ``queue.Empty`` propagates when ``timeout`` elapses between events.
        """
        while True:
            channel, payload = self._queue.get(timeout=timeout)
            yield channel, payload
            if channel == COMPLETE_CHANNEL:
                return


__all__ = [
    "COMPLETE_CHANNEL",
    "CallbackEventSink",
    "EventSink",
    "LoggingEventSink",
    "OUTPUT_CHANNEL",
    "QueueEventSink",
]
