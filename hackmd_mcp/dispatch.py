"""Dispatch engine turning tool calls into response envelopes."""

from __future__ import annotations

import time
from typing import Any, Mapping

from .client import HackMDClient
from .errors import INTERNAL_ERROR, UNKNOWN_TOOL, HackMDMCPError
from .logging import get_logger
from .models import ToolResponse
from .registry import ToolRegistry
from .validation import validate_arguments

__all__ = ["Dispatcher"]

LOGGER = get_logger(__name__)


class Dispatcher:
    """Resolve, validate and run one tool call, always returning an envelope.

    Holds no per-call state, so concurrent calls on one instance are safe.
    """

    def __init__(self, registry: ToolRegistry, client: HackMDClient) -> None:
        self.registry = registry
        self.client = client

    async def call(self, name: str, arguments: Mapping[str, Any] | None = None) -> ToolResponse:
        contract = self.registry.get(name)
        if contract is None:
            LOGGER.warning("dispatch.unknown_tool", extra={"context": {"tool": name}})
            return _failure(name, HackMDMCPError(UNKNOWN_TOOL, f"Unknown tool: {name}"), log=False)

        started = time.monotonic()
        try:
            validated = validate_arguments(contract.parameters, arguments, tool_name=name)
            payload = await contract.handler(self.client, validated)
        except HackMDMCPError as exc:
            return _failure(name, exc)
        except Exception as exc:
            LOGGER.exception("dispatch.crashed", extra={"context": {"tool": name}})
            message = str(exc) or type(exc).__name__
            return _failure(name, HackMDMCPError(INTERNAL_ERROR, message), log=False)

        LOGGER.debug(
            "dispatch.ok",
            extra={"context": {"tool": name, "elapsed_ms": round((time.monotonic() - started) * 1000, 1)}},
        )
        return ToolResponse.success(payload)


def _failure(name: str, error: HackMDMCPError, *, log: bool = True) -> ToolResponse:
    if log:
        LOGGER.error("dispatch.failed", extra={"context": {"tool": name, **error.to_dict()}})
    return ToolResponse.failure(error.message)
