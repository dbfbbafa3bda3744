"""Configuration loading utilities for the HackMD MCP server."""

from __future__ import annotations

import argparse
import json
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Sequence

from .client import DEFAULT_API_URL

ENV_PREFIX = "HACKMD_MCP_"

TRANSPORTS = ("stdio", "http")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_TRANSPORT = "stdio"
DEFAULT_HTTP_HOST = "127.0.0.1"
DEFAULT_HTTP_PORT = 3000
DEFAULT_HTTP_PATH = "/mcp"
DEFAULT_REQUEST_TIMEOUT = "30s"
DEFAULT_LOG_LEVEL = "INFO"

T_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600}

ENV_FIELD_MAP = {
    "config_file": f"{ENV_PREFIX}CONFIG_FILE",
    "api_token": "HACKMD_API_KEY",
    "api_url": "HACKMD_API_URL",
    "transport": f"{ENV_PREFIX}TRANSPORT",
    "http_host": f"{ENV_PREFIX}HTTP_HOST",
    "http_port": "PORT",
    "http_path": f"{ENV_PREFIX}HTTP_PATH",
    "request_timeout": f"{ENV_PREFIX}REQUEST_TIMEOUT",
    "log_level": f"{ENV_PREFIX}LOG_LEVEL",
}

DEFAULT_VALUES: dict[str, Any] = {
    "config_file": None,
    "api_token": None,
    "api_url": DEFAULT_API_URL,
    "transport": DEFAULT_TRANSPORT,
    "http_host": DEFAULT_HTTP_HOST,
    "http_port": DEFAULT_HTTP_PORT,
    "http_path": DEFAULT_HTTP_PATH,
    "request_timeout": DEFAULT_REQUEST_TIMEOUT,
    "log_level": DEFAULT_LOG_LEVEL,
}


class ConfigError(ValueError):
    """Raised when configuration values are invalid."""


@dataclass(slots=True)
class Config:
    """Configuration model for the HackMD MCP server."""

    api_token: str
    api_url: str
    transport: str
    http_host: str
    http_port: int
    http_path: str
    request_timeout: timedelta
    log_level: str
    config_file: Path | None = None

    @property
    def use_http(self) -> bool:
        return self.transport == "http"


def load_config(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """Load configuration from CLI arguments, environment variables, and optional file."""

    parser = _build_arg_parser()
    parsed = parser.parse_args(argv)
    cli_values = {k: v for k, v in vars(parsed).items() if v is not None}

    env_values = _extract_env_values(os.environ if environ is None else environ)

    config_path_value = cli_values.get("config_file") or env_values.get("config_file")
    file_values = _load_config_file(config_path_value)

    merged: dict[str, Any] = {}
    _merge_layer(merged, DEFAULT_VALUES)
    _merge_layer(merged, file_values)
    _merge_layer(merged, env_values)
    _merge_layer(merged, cli_values)

    return _normalize_values(merged, config_path_value)


def hot_reload_config(*_args: Any, **_kwargs: Any) -> None:
    """Explicitly prevent runtime configuration reloading."""

    raise ConfigError("Configuration can only be loaded during startup. Restart the server to apply changes.")


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hackmd-mcp",
        description="HackMD MCP server configuration flags.",
        add_help=False,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("-h", "--help", action="help", help="Show this help message and exit.")
    parser.add_argument(
        "--config-file",
        dest="config_file",
        metavar="PATH",
        help="Path to a JSON configuration file. Default: none.",
    )
    parser.add_argument(
        "--api-token",
        dest="api_token",
        metavar="TOKEN",
        help="HackMD API token (prefer the HACKMD_API_KEY environment variable).",
    )
    parser.add_argument(
        "--api-url",
        dest="api_url",
        metavar="URL",
        help=f"HackMD API base URL (default: {DEFAULT_API_URL}).",
    )

    transport = parser.add_mutually_exclusive_group()
    transport.add_argument(
        "--transport",
        dest="transport",
        choices=TRANSPORTS,
        help=f"Transport binding to serve (default: {DEFAULT_TRANSPORT}).",
    )
    transport.add_argument(
        "--http",
        dest="transport",
        action="store_const",
        const="http",
        help="Shorthand for --transport http.",
    )
    transport.add_argument(
        "--stdio",
        dest="transport",
        action="store_const",
        const="stdio",
        help="Shorthand for --transport stdio.",
    )

    parser.add_argument(
        "--http-host",
        dest="http_host",
        metavar="HOST",
        help=f"HTTP listener host (default: {DEFAULT_HTTP_HOST}).",
    )
    parser.add_argument(
        "--http-port",
        dest="http_port",
        metavar="PORT",
        help=f"HTTP listener port (default: {DEFAULT_HTTP_PORT}; env PORT).",
    )
    parser.add_argument(
        "--http-path",
        dest="http_path",
        metavar="PATH",
        help=f"HTTP path accepting MCP requests (default: {DEFAULT_HTTP_PATH}).",
    )
    parser.add_argument(
        "--request-timeout",
        dest="request_timeout",
        metavar="DURATION",
        help=f"Timeout for HackMD API requests (default: {DEFAULT_REQUEST_TIMEOUT}).",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        metavar="LEVEL",
        help=f"Log level, one of {', '.join(LOG_LEVELS)} (default: {DEFAULT_LOG_LEVEL}).",
    )
    return parser


def _extract_env_values(env: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for field, env_name in ENV_FIELD_MAP.items():
        if env_name in env:
            values[field] = env[env_name]
    return values


def _load_config_file(path_value: str | Path | None) -> dict[str, Any]:
    if not path_value:
        return {}
    path = _parse_path(path_value, field="config_file")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file is not valid JSON: {path}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object")
    result: dict[str, Any] = {k: v for k, v in data.items() if k in DEFAULT_VALUES}
    result["config_file"] = str(path)
    return result


def _merge_layer(base: MutableMapping[str, Any], overrides: Mapping[str, Any]) -> None:
    for key, value in overrides.items():
        if value is None:
            continue
        base[key] = value


def _normalize_values(values: Mapping[str, Any], config_path_value: str | Path | None) -> Config:
    api_token_value = values.get("api_token")
    api_token = str(api_token_value).strip() if api_token_value is not None else ""
    if not api_token:
        raise ConfigError(f"{ENV_FIELD_MAP['api_token']} not set")

    api_url = str(values.get("api_url", DEFAULT_VALUES["api_url"])).strip()
    if not api_url.startswith(("http://", "https://")):
        raise ConfigError(f"api_url must be an http(s) URL: {api_url!r}")

    transport = str(values.get("transport", DEFAULT_VALUES["transport"])).strip().lower()
    if transport not in TRANSPORTS:
        raise ConfigError(f"transport must be one of: {', '.join(TRANSPORTS)}")

    http_host = str(values.get("http_host", DEFAULT_VALUES["http_host"]))
    http_port = _parse_int(values.get("http_port", DEFAULT_VALUES["http_port"]), field="http_port", minimum=0, maximum=65535)
    http_path = _normalise_http_path(str(values.get("http_path", DEFAULT_VALUES["http_path"])))

    request_timeout = _parse_duration(
        values.get("request_timeout", DEFAULT_VALUES["request_timeout"]),
        default_unit="s",
        field="request_timeout",
    )

    log_level = str(values.get("log_level", DEFAULT_VALUES["log_level"])).strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")

    config_file_path = _parse_optional_path(config_path_value, field="config_file")

    return Config(
        api_token=api_token,
        api_url=api_url,
        transport=transport,
        http_host=http_host,
        http_port=http_port,
        http_path=http_path,
        request_timeout=request_timeout,
        log_level=log_level,
        config_file=config_file_path,
    )


def _normalise_http_path(path: str) -> str:
    path = path.strip()
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")
    return path


def _parse_int(value: Any, *, field: str, minimum: int | None = None, maximum: int | None = None) -> int:
    try:
        if isinstance(value, (int, float)):
            int_value = int(value)
        else:
            int_value = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid integer for {field}: {value!r}") from exc

    if minimum is not None and int_value < minimum:
        raise ConfigError(f"{field} must be >= {minimum}")
    if maximum is not None and int_value > maximum:
        raise ConfigError(f"{field} must be <= {maximum}")
    return int_value


def _parse_duration(value: Any, *, default_unit: str, field: str) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        seconds = float(value)
        if seconds < 0:
            raise ConfigError(f"{field} must be positive")
        return timedelta(seconds=seconds)
    if not isinstance(value, str):
        raise ConfigError(f"Invalid duration for {field}: {value!r}")

    stripped = value.strip()
    if not stripped:
        raise ConfigError(f"{field} may not be empty")

    unit = default_unit
    suffix = stripped[-1]
    number_part = stripped
    if suffix.lower() in T_DURATION_UNITS:
        unit = suffix.lower()
        number_part = stripped[:-1]
    if not number_part or not number_part.isdigit():
        raise ConfigError(f"{field} must be a positive integer optionally suffixed with s, m, or h")
    return timedelta(seconds=int(number_part) * T_DURATION_UNITS[unit])


def _parse_path(value: Any, *, field: str) -> Path:
    if isinstance(value, Path):
        return value.expanduser().resolve()
    if not isinstance(value, str):
        raise ConfigError(f"Invalid path for {field}: {value!r}")
    stripped = value.strip()
    if not stripped:
        raise ConfigError(f"{field} may not be empty")
    return Path(stripped).expanduser().resolve()


def _parse_optional_path(value: Any, *, field: str) -> Path | None:
    if value in (None, ""):
        return None
    return _parse_path(value, field=field)
