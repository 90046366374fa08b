"""Batch and streaming execution of external cargo invocations."""

from __future__ import annotations

import enum
import subprocess
import threading
import time
from typing import IO, Any, List, Optional

from ..logging import get_logger
from ..models import CommandResult, CompletionEvent, OutputEvent, ProcessInvocation
from .sink import COMPLETE_CHANNEL, OUTPUT_CHANNEL, EventSink, LoggingEventSink

STDOUT = "stdout"
STDERR = "stderr"


class StreamState(enum.Enum):
    SPAWNING = "spawning"
    RUNNING = "running"
    DRAINING = "draining"
    COMPLETED = "completed"
    FAILED = "failed"


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r\n")


def _exit_code(returncode: Optional[int]) -> Optional[int]:
    # Negative return codes mean the child was killed by a signal.
    if returncode is None or returncode < 0:
        return None
    return returncode


class StreamingInvocation:
    """Handle for one background streaming invocation."""

    def __init__(self, invocation: ProcessInvocation) -> None:
        self.invocation = invocation
        self.state = StreamState.SPAWNING
        self.completion: Optional[CompletionEvent] = None
        self._thread: Optional[threading.Thread] = None

    def join(self, timeout: Optional[float] = None) -> Optional[CompletionEvent]:
        """Block until the invocation has published its completion event."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self.completion

    @property
    def done(self) -> bool:
        return self.state in (StreamState.COMPLETED, StreamState.FAILED)


class CommandRunner:
    """Spawns ``<executable> <command> <args...>`` in a project directory."""

    def __init__(self, executable: str = "cargo", *, sink: EventSink | None = None) -> None:
        self.executable = executable
        self.sink: EventSink = sink if sink is not None else LoggingEventSink()
        self.logger = get_logger("execution.runner")

    def build_args(self, invocation: ProcessInvocation) -> List[str]:
        return [self.executable, invocation.command, *invocation.args]

    def run(self, invocation: ProcessInvocation) -> CommandResult:
        """Run to completion and capture stdout and stderr in full."""
        args = self.build_args(invocation)
        self.logger.debug("Running %s in %s", " ".join(args), invocation.cwd)
        try:
            completed = subprocess.run(args, cwd=invocation.cwd, capture_output=True)
        except (OSError, ValueError) as exc:
            message = f"Failed to execute command: {exc}"
            self.logger.debug(message)
            return CommandResult(
                project_path=invocation.cwd,
                command=invocation.command,
                success=False,
                stderr=message,
                spawn_error=str(exc),
            )
        return CommandResult(
            project_path=invocation.cwd,
            command=invocation.command,
            success=completed.returncode == 0,
            stdout=completed.stdout.decode("utf-8", errors="replace"),
            stderr=completed.stderr.decode("utf-8", errors="replace"),
            exit_code=_exit_code(completed.returncode),
        )

    def start_streaming(self, invocation: ProcessInvocation) -> StreamingInvocation:
        """Schedule a streaming invocation and return immediately.

        Output lines are published on ``command-output`` as they arrive and
        exactly one ``CompletionEvent`` follows on ``command-complete``.
        """
        handle = StreamingInvocation(invocation)
        thread = threading.Thread(
            target=self._supervise,
            args=(handle,),
            name=f"cargofleet-{invocation.command}",
            daemon=True,
        )
        handle._thread = thread
        thread.start()
        return handle

    def stream(self, invocation: ProcessInvocation) -> Optional[CompletionEvent]:
        """Run a streaming invocation and wait for its completion event."""
        return self.start_streaming(invocation).join()

    # ------------------------------------------------------------------
    # Internal helpers

    def _publish(self, channel: str, payload: Any) -> None:
        try:
            self.sink.emit(channel, payload)
        except Exception as exc:
            self.logger.warning("Event sink rejected %s notification: %s", channel, exc)

    def _complete(
        self,
        handle: StreamingInvocation,
        *,
        success: bool,
        exit_code: Optional[int],
        output: List[str],
        started: float,
        state: StreamState = StreamState.COMPLETED,
    ) -> None:
        invocation = handle.invocation
        event = CompletionEvent(
            project_path=invocation.cwd,
            command=invocation.command,
            success=success,
            exit_code=exit_code,
            output=output,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        handle.completion = event
        handle.state = state
        self._publish(COMPLETE_CHANNEL, event)

    def _fail(self, handle: StreamingInvocation, message: str, started: float) -> None:
        self._publish(OUTPUT_CHANNEL, OutputEvent(line=message, stream=STDERR))
        self._complete(
            handle,
            success=False,
            exit_code=None,
            output=[message],
            started=started,
            state=StreamState.FAILED,
        )

    def _drain(
        self,
        pipe: IO[bytes],
        stream: str,
        output: List[str],
        lock: threading.Lock,
    ) -> None:
        with pipe:
            for raw in iter(pipe.readline, b""):
                line = _decode(raw)
                with lock:
                    output.append(line)
                self._publish(OUTPUT_CHANNEL, OutputEvent(line=line, stream=stream))

    def _supervise(self, handle: StreamingInvocation) -> None:
        invocation = handle.invocation
        started = time.monotonic()
        args = self.build_args(invocation)
        try:
            process = subprocess.Popen(
                args,
                cwd=invocation.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            self.logger.debug("Failed to start %s: %s", " ".join(args), exc)
            self._fail(handle, f"Failed to start command: {exc}", started)
            return

        output: List[str] = []
        lock = threading.Lock()
        try:
            drains = [
                threading.Thread(
                    target=self._drain,
                    args=(pipe, stream, output, lock),
                    name=f"cargofleet-{invocation.command}-{stream}",
                    daemon=True,
                )
                for pipe, stream in ((process.stdout, STDOUT), (process.stderr, STDERR))
            ]
            for drain in drains:
                drain.start()
            handle.state = StreamState.RUNNING

            returncode = process.wait()
            handle.state = StreamState.DRAINING
            for drain in drains:
                drain.join()
        except Exception as exc:  # pragma: no cover - converted into a failed completion
            self.logger.warning("Streaming %s failed: %s", invocation.command, exc)
            process.kill()
            with lock:
                collected = list(output)
            self._complete(
                handle,
                success=False,
                exit_code=None,
                output=collected,
                started=started,
                state=StreamState.FAILED,
            )
            return

        with lock:
            collected = list(output)
        self._complete(
            handle,
            success=returncode == 0,
            exit_code=_exit_code(returncode),
            output=collected,
            started=started,
        )


__all__ = ["CommandRunner", "StreamState", "StreamingInvocation"]
