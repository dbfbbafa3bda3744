"""Declarative tool contracts and the registry holding them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, Mapping

from .errors import CONFIG_ERROR, HackMDMCPError
from .validation import check_parameters_schema

__all__ = ["Handler", "ToolContract", "ToolRegistry"]

Handler = Callable[[Any, Mapping[str, Any]], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class ToolContract:
    """A named tool: documentation, JSON Schema for its arguments and its handler.

    ``parameters`` is plain data so callers can introspect it before invoking
    the tool; it is published unchanged as the MCP ``inputSchema``.
    """

    name: str
    title: str
    description: str
    parameters: Mapping[str, Any]
    handler: Handler

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(self.parameters.get("required", ()))


class ToolRegistry:
    """Append-only mapping of tool name to contract, in registration order."""

    def __init__(self) -> None:
        self._contracts: dict[str, ToolContract] = {}

    def register(self, contract: ToolContract) -> ToolContract:
        if contract.name in self._contracts:
            raise HackMDMCPError(CONFIG_ERROR, f"Tool {contract.name!r} is already registered")
        check_parameters_schema(contract.parameters)
        self._contracts[contract.name] = contract
        return contract

    def get(self, name: str) -> ToolContract | None:
        return self._contracts.get(name)

    def names(self) -> list[str]:
        return list(self._contracts)

    def __contains__(self, name: object) -> bool:
        return name in self._contracts

    def __iter__(self) -> Iterator[ToolContract]:
        return iter(list(self._contracts.values()))

    def __len__(self) -> int:
        return len(self._contracts)
