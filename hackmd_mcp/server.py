"""FastMCP server entrypoint for the HackMD MCP service."""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools.tool import Tool, ToolResult
from mcp.types import TextContent
from pydantic import PrivateAttr

from . import __version__
from .client import HackMDClient
from .config import ConfigError, load_config
from .dispatch import Dispatcher
from .logging import configure_logging, get_logger
from .registry import ToolContract
from .tools import build_registry
from .transports import HttpTransportConfig, run_http, run_stdio

LOGGER = get_logger(__name__)
SERVER_NAME = "hackmd-mcp"


class DispatchTool(Tool):
    """FastMCP tool forwarding every call to the shared dispatcher.

    Failure envelopes are raised as ``ToolError`` so the SDK answers with
    ``isError: true`` and the message as the only text block.
    """

    _dispatcher: Dispatcher = PrivateAttr()

    @classmethod
    def from_contract(cls, contract: ToolContract, dispatcher: Dispatcher) -> "DispatchTool":
        tool = cls(
            name=contract.name,
            title=contract.title,
            description=contract.description,
            parameters=dict(contract.parameters),
        )
        tool._dispatcher = dispatcher
        return tool

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        response = await self._dispatcher.call(self.name, arguments)
        if response.is_error:
            raise ToolError(response.text)
        return ToolResult(content=[TextContent(type="text", text=response.text)])


def build_server(dispatcher: Dispatcher, *, name: str = SERVER_NAME) -> FastMCP:
    """Expose every registered contract as a tool on a new FastMCP server."""

    server = FastMCP(name=name, version=__version__)
    for contract in dispatcher.registry:
        server.add_tool(DispatchTool.from_contract(contract, dispatcher))
    return server


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for running the HackMD MCP server."""

    configure_logging()
    try:
        config = load_config(argv)
    except ConfigError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        raise SystemExit(1) from exc

    configure_logging(config.log_level)
    LOGGER.info(
        "Configuration loaded",
        extra={
            "context": {
                "api_url": config.api_url,
                "transport": config.transport,
                "http_host": config.http_host,
                "http_port": config.http_port,
                "http_path": config.http_path,
            }
        },
    )

    client = HackMDClient(
        config.api_token,
        base_url=config.api_url,
        timeout=config.request_timeout.total_seconds(),
    )
    server = build_server(Dispatcher(build_registry(), client))

    if config.use_http:
        http_config = HttpTransportConfig(
            host=config.http_host,
            port=config.http_port,
            path=config.http_path,
        )
        run_http(server, http_config)
    else:
        run_stdio(server)


if __name__ == "__main__":  # pragma: no cover - manual invocation only
    main()
