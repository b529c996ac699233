"""FastAPI application serving the generated page and executing commands.

Routes, in matching order:

* ``GET /`` -- the rendered page (404 when page serving is disabled).
* ``POST /upload`` -- multipart ``name``, ``type`` and one or more ``data``
  files; answers ``{"path": ...}`` with the value for the flag's input.
* ``/ws`` -- WebSocket streaming the output of every execution (only when
  live output is enabled).
* ``GET|POST /<root>/<child>/...`` -- runs the addressed command with the
  query parameters (and, for POST, form fields) as flag values and answers
  with its output as ``text/plain``.

Every :class:`~cliweb.exceptions.CliwebError` escaping a route becomes a
``text/plain`` response carrying the error message and the exception's
``status_code``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from starlette.datastructures import UploadFile

from cliweb.definition.builder import mark_uploadable
from cliweb.exceptions import (
    HTTP_BAD_REQUEST,
    CliwebError,
    InvalidArgumentError,
    NotFoundError,
    UploadError,
)
from cliweb.models import CommandNode, ServerConfig
from cliweb.render.renderer import render_page
from cliweb.server.broadcast import Broadcaster
from cliweb.server.dispatcher import Dispatcher
from cliweb.server.uploads import UploadStore

logger = logging.getLogger(__name__)


class CliwebApplication:
    """Wire a command tree, its dispatcher, uploads, and live output into one app.

    The page is rendered once here, so a broken host page template fails at
    startup rather than on the first request.

    Args:
        root: Root of the command tree. Flags listed in
            ``config.uploadable_flags`` are marked uploadable before the
            page is rendered.
        config: Server settings. Defaults to :class:`ServerConfig` defaults.
    """

    def __init__(self, root: CommandNode, config: Optional[ServerConfig] = None) -> None:
        self.root = root
        self.config = config or ServerConfig()
        if self.config.uploadable_flags:
            mark_uploadable(root, self.config.uploadable_flags)

        self.broadcaster = Broadcaster(self.config.live_queue_size)
        self.dispatcher = Dispatcher(
            root, self.broadcaster if self.config.live_output else None
        )
        self.uploads = UploadStore(self.config.upload_dir)
        self.page = render_page(root, self.config) if self.config.serve_page else None

        self.app = FastAPI(
            title=f"{root.name} (cliweb)",
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
            lifespan=self._lifespan,
        )
        self.app.state.cliweb = self
        if self.config.allow_cors:
            self.app.add_middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["*"],
                allow_headers=["*"],
            )
        self.app.add_exception_handler(CliwebError, self._handle_error)
        self._register_routes()

    @contextlib.asynccontextmanager
    async def _lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        logger.debug("Serving %s; uploads go to %s", self.root.name, self.uploads.root)
        yield
        self.uploads.cleanup()

    async def _handle_error(self, request: Request, exc: CliwebError) -> PlainTextResponse:
        status = exc.status_code
        if isinstance(exc, InvalidArgumentError) and self.config.strict_status_codes:
            status = HTTP_BAD_REQUEST
        logger.warning("%s %s -> %d: %s", request.method, request.url.path, status, exc)
        return PlainTextResponse(str(exc), status_code=status)

    def _register_routes(self) -> None:
        app = self.app

        @app.get("/", response_class=HTMLResponse)
        def index() -> HTMLResponse:
            if self.page is None:
                raise NotFoundError("page serving is disabled")
            return HTMLResponse(self.page)

        @app.post("/upload")
        async def upload(request: Request) -> JSONResponse:
            async with request.form() as form:
                name = form.get("name")
                value_type = form.get("type")
                if not isinstance(name, str) or not isinstance(value_type, str):
                    raise UploadError("upload requires 'name' and 'type' fields")
                files = [
                    (item.filename, item.file)
                    for item in form.getlist("data")
                    if isinstance(item, UploadFile)
                ]
                path = await run_in_threadpool(self.uploads.store, name, value_type, files)
            return JSONResponse({"path": path})

        if self.config.live_output:

            @app.websocket("/ws")
            async def live_output(websocket: WebSocket) -> None:
                queue = self.broadcaster.subscribe()
                await websocket.accept()

                async def forward() -> None:
                    while True:
                        await websocket.send_text(await queue.get())

                sender = asyncio.create_task(forward())
                try:
                    while True:
                        # Frames from the client carry no meaning.
                        await websocket.receive_text()
                except WebSocketDisconnect:
                    logger.debug("Live client went away")
                finally:
                    self.broadcaster.unsubscribe(queue)
                    sender.cancel()
                    try:
                        await sender
                    except asyncio.CancelledError:
                        pass
                    except Exception:
                        logger.debug("Sending to a live client failed", exc_info=True)

        @app.api_route("/{command_path:path}", methods=["GET", "POST"])
        async def execute(command_path: str, request: Request) -> PlainTextResponse:
            params = list(request.query_params.multi_items())
            if request.method == "POST":
                async with request.form() as form:
                    params.extend(
                        (key, value)
                        for key, value in form.multi_items()
                        if isinstance(value, str)
                    )
            result = await run_in_threadpool(self.dispatcher.dispatch, command_path, params)
            return PlainTextResponse(result.output)


def create_app(root: CommandNode, config: Optional[ServerConfig] = None) -> FastAPI:
    """Build the FastAPI application for *root*."""
    return CliwebApplication(root, config).app


def run(
    root: CommandNode,
    config: Optional[ServerConfig] = None,
    log_level: str = "info",
) -> None:
    """Serve *root* with uvicorn until interrupted."""
    config = config or ServerConfig()
    app = create_app(root, config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=log_level)
