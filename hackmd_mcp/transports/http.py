"""Stateless streamable-HTTP binding."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass

import uvicorn
from fastmcp import FastMCP
from fastmcp.server.http import (
    StreamableHTTPASGIApp,
    StreamableHTTPSessionManager,
    create_base_app,
)
from starlette.applications import Starlette
from starlette.routing import BaseRoute, Route

from ..logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class HttpTransportConfig:
    """Configuration for the HTTP transport layer."""

    host: str
    port: int
    path: str = "/mcp"


def run_http(server: FastMCP, config: HttpTransportConfig) -> None:
    """Serve ``server`` over stateless streamable HTTP using uvicorn.

    A port that cannot be bound ends the process with exit status 1.
    """

    http_path = _normalise_path(config.path)
    context = {
        "host": config.host,
        "port": config.port,
        "path": http_path,
    }

    async def _serve() -> None:
        app = build_http_app(server, config)
        uvicorn_config = uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            timeout_graceful_shutdown=0,
            lifespan="on",
        )
        server_instance = uvicorn.Server(uvicorn_config)
        logger.info(
            "transport.http.serve",
            extra={"context": {**context, "url": f"http://{config.host}:{config.port}{http_path}"}},
        )
        await server_instance.serve()

    logger.info("transport.http.start", extra={"context": context})
    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        logger.info("transport.http.interrupted", extra={"context": context})
        raise
    except SystemExit as exc:
        # uvicorn exits with status 1 when the listener cannot bind
        logger.error("transport.http.bind_failed", extra={"context": {**context, "exit_code": exc.code}})
        raise
    except OSError as exc:
        logger.exception("transport.http.bind_failed", extra={"context": context})
        raise SystemExit(1) from exc
    except Exception:
        logger.exception("transport.http.failed", extra={"context": context})
        raise
    else:
        logger.info("transport.http.stop", extra={"context": context})


def build_http_app(server: FastMCP, config: HttpTransportConfig) -> Starlette:
    """Create a Starlette app with a single POST endpoint.

    The session manager runs stateless: every request gets its own transport,
    with no session id, torn down once the response is sent.
    """

    http_path = _normalise_path(config.path)
    session_manager = StreamableHTTPSessionManager(
        app=server._mcp_server,
        event_store=None,
        json_response=True,
        stateless=True,
    )
    endpoint = StreamableHTTPASGIApp(session_manager)
    routes: list[BaseRoute] = [Route(http_path, endpoint=endpoint, methods=["POST"])]

    @asynccontextmanager
    async def lifespan(_app):
        async with server._lifespan_manager():
            async with session_manager.run():
                yield

    app = create_base_app(
        routes=routes,
        middleware=[],
        debug=False,
        lifespan=lifespan,
    )
    app.state.fastmcp_server = server
    app.state.path = http_path
    return app


def _normalise_path(path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")
    return path
