"""External process execution and event publishing."""

from .runner import CommandRunner, StreamingInvocation, StreamState
from .sink import (
    COMPLETE_CHANNEL,
    OUTPUT_CHANNEL,
    CallbackEventSink,
    EventSink,
    LoggingEventSink,
    QueueEventSink,
)

__all__ = [
    "COMPLETE_CHANNEL",
    "CallbackEventSink",
    "CommandRunner",
    "EventSink",
    "LoggingEventSink",
    "OUTPUT_CHANNEL",
    "QueueEventSink",
    "StreamState",
    "StreamingInvocation",
]
