"""FastAPI application exposing cargofleet to a presentation layer."""

from __future__ import annotations

import asyncio
import json
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from fastapi import FastAPI
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from .. import tasks
from ..clean import clean_projects
from ..execution import COMPLETE_CHANNEL, CommandRunner, EventSink, QueueEventSink
from ..models import ProcessInvocation
from ..workspace import workspace_info

RunnerFactory = Callable[[Optional[EventSink]], CommandRunner]


class ScanRequest(BaseModel):
    root: str


class ProjectPathsRequest(BaseModel):
    project_paths: List[str] = Field(default_factory=list)


class CommandRequest(BaseModel):
    project_path: str
    command: str
    args: List[str] = Field(default_factory=list)


class CleanRequest(BaseModel):
    project_paths: List[str] = Field(default_factory=list)
    debug_only: bool = False
    size_hints: Optional[List[int]] = None


class HealthResponse(BaseModel):
    status: str


def _default_runner_factory(sink: Optional[EventSink] = None) -> CommandRunner:
    return CommandRunner(sink=sink)


def _encode_event(channel: str, payload: Any) -> str:
    body: Dict[str, Any] = {"channel": channel}
    body.update(payload.to_dict())
    return json.dumps(body) + "\n"


def create_app(runner_factory: RunnerFactory = _default_runner_factory) -> FastAPI:
    """Create the FastAPI application exposing discovery, analysis and execution."""

    app = FastAPI(title="cargofleet", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/projects/scan")
    async def scan(payload: ScanRequest) -> List[Dict[str, Any]]:
        projects = await tasks.scan_projects(payload.root)
        return [project.to_dict() for project in projects]

    @app.get("/projects/workspace")
    async def workspace(path: str) -> Dict[str, Any]:
        return workspace_info(path).to_dict()

    @app.post("/projects/clean")
    async def clean(payload: CleanRequest) -> List[Dict[str, Any]]:
        loop = asyncio.get_running_loop()
        results = await loop.run_in_executor(
            None,
            lambda: clean_projects(
                payload.project_paths,
                debug_only=payload.debug_only,
                size_hints=payload.size_hints,
            ),
        )
        return [result.to_dict() for result in results]

    @app.post("/analysis/dependencies")
    async def dependencies(payload: ProjectPathsRequest) -> Dict[str, Any]:
        analysis = await tasks.analyze_dependencies(payload.project_paths)
        return analysis.to_dict()

    @app.post("/analysis/toolchains")
    async def toolchains(payload: ProjectPathsRequest) -> Dict[str, Any]:
        analysis = await tasks.analyze_toolchains(payload.project_paths)
        return analysis.to_dict()

    @app.post("/analysis/licenses")
    async def licenses(payload: ProjectPathsRequest) -> Dict[str, Any]:
        analysis = await tasks.check_all_licenses(payload.project_paths, runner_factory(None))
        return analysis.to_dict()

    @app.post("/commands/run")
    async def run_command(payload: CommandRequest) -> Dict[str, Any]:
        invocation = ProcessInvocation(
            command=payload.command, args=list(payload.args), cwd=payload.project_path
        )
        result = await tasks.run_command(invocation, runner_factory(None))
        return result.to_dict()

    @app.post("/commands/stream")
    async def stream_command(payload: CommandRequest) -> StreamingResponse:
        sink = QueueEventSink()
        runner = runner_factory(sink)
        invocation = ProcessInvocation(
            command=payload.command, args=list(payload.args), cwd=payload.project_path
        )
        runner.start_streaming(invocation)

        async def _events() -> AsyncIterator[str]:
            loop = asyncio.get_running_loop()
            while True:
                channel, event = await loop.run_in_executor(None, sink.get)
                yield _encode_event(channel, event)
                if channel == COMPLETE_CHANNEL:
                    break

        return StreamingResponse(_events(), media_type="application/x-ndjson")

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
