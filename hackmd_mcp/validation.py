"""Generic argument validation for declared tool contracts."""

from __future__ import annotations

import copy
from typing import Any, Mapping

from jsonschema import exceptions as jsonschema_exceptions, validators as jsonschema_validators

from .errors import INTERNAL_ERROR, VALIDATION_ERROR, HackMDMCPError

__all__ = ["check_parameters_schema", "validate_arguments"]


def check_parameters_schema(schema: Mapping[str, Any]) -> None:
    """Reject a malformed parameters schema at registration time."""

    try:
        validator_cls = jsonschema_validators.validator_for(schema)
        validator_cls.check_schema(schema)
    except jsonschema_exceptions.SchemaError as exc:
        raise HackMDMCPError(INTERNAL_ERROR, f"Invalid parameters schema: {exc.message}") from exc


def validate_arguments(
    schema: Mapping[str, Any],
    arguments: Mapping[str, Any] | None,
    *,
    tool_name: str | None = None,
) -> dict[str, Any]:
    """Return ``arguments`` filtered to declared properties with defaults applied.

    Raises HackMDMCPError(VALIDATION_ERROR) describing the first violation.
    """

    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise HackMDMCPError(VALIDATION_ERROR, _prefix(tool_name, "arguments must be an object"))

    properties: Mapping[str, Any] = schema.get("properties") or {}
    coerced = {name: value for name, value in arguments.items() if name in properties}
    for name, prop in properties.items():
        if name not in coerced and isinstance(prop, Mapping) and "default" in prop:
            coerced[name] = copy.deepcopy(prop["default"])

    validator_cls = jsonschema_validators.validator_for(schema)
    validator = validator_cls(schema)
    errors = sorted(validator.iter_errors(coerced), key=lambda error: [str(part) for part in error.absolute_path])
    if errors:
        first = errors[0]
        raise HackMDMCPError(
            VALIDATION_ERROR,
            _prefix(tool_name, _describe(first)),
            details={"errors": [_describe(error) for error in errors]},
        )
    return coerced


def _describe(error: jsonschema_exceptions.ValidationError) -> str:
    path = ".".join(str(part) for part in error.absolute_path)
    if path:
        return f"{path}: {error.message}"
    return error.message


def _prefix(tool_name: str | None, message: str) -> str:
    if tool_name:
        return f"Invalid arguments for {tool_name}: {message}"
    return f"Invalid arguments: {message}"
