"""Centralized error codes and helper utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

__all__ = [
    "VALIDATION_ERROR",
    "UNKNOWN_TOOL",
    "DOWNSTREAM_ERROR",
    "CONFIG_ERROR",
    "INTERNAL_ERROR",
    "HackMDMCPError",
    "error_payload",
]

VALIDATION_ERROR = "VALIDATION_ERROR"
UNKNOWN_TOOL = "UNKNOWN_TOOL"
DOWNSTREAM_ERROR = "DOWNSTREAM_ERROR"
CONFIG_ERROR = "CONFIG_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass(slots=True)
class HackMDMCPError(Exception):
    """Domain-specific exception carrying an error code and message."""

    code: str
    message: str
    details: Mapping[str, Any] | None = None

    def __str__(self) -> str:  # pragma: no cover - delegation to message
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return error_payload(self.code, self.message, details=self.details)


def error_payload(code: str, message: str, *, details: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build a structured error payload used in diagnostic log records."""

    payload: dict[str, Any] = {
        "code": code,
        "message": message,
    }
    if details:
        payload["details"] = dict(details)
    return payload
