"""Async client for the HackMD REST API."""

from __future__ import annotations

import json
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from .errors import DOWNSTREAM_ERROR, HackMDMCPError
from .logging import get_logger

__all__ = [
    "DEFAULT_API_URL",
    "HackMDAPIError",
    "HackMDClient",
    "HackMDConnectionError",
]

DEFAULT_API_URL = "https://api.hackmd.io/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0

logger = get_logger(__name__)


class HackMDAPIError(HackMDMCPError):
    """Raised when the API answers with an error status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(DOWNSTREAM_ERROR, message, details={"status_code": status_code})
        self.status_code = status_code


class HackMDConnectionError(HackMDMCPError):
    """Raised when the API cannot be reached."""

    def __init__(self, base_url: str, detail: str = "") -> None:
        message = f"Cannot connect to HackMD API at {base_url}"
        if detail:
            message += f": {detail}"
        super().__init__(DOWNSTREAM_ERROR, message, details={"base_url": base_url})
        self.base_url = base_url


class HackMDClient:
    """Thin async wrapper over the HackMD v1 API.

    Personal and team variants map one-to-one onto the REST endpoints; note
    records are returned as the decoded JSON objects. Each request opens its
    own ``httpx.AsyncClient`` so no connection state outlives a call.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not token:
            raise ValueError("HackMD API token must not be empty")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }

    # Listing

    async def get_note_list(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/notes")

    async def get_team_notes(self, team_path: str) -> list[dict[str, Any]]:
        return await self._request("GET", f"/teams/{_segment(team_path)}/notes")

    # Single notes

    async def get_note(self, note_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/notes/{_segment(note_id)}")

    async def create_note(self, options: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/notes", body=options)

    async def create_team_note(self, team_path: str, options: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/teams/{_segment(team_path)}/notes", body=options)

    async def update_note(self, note_id: str, options: Mapping[str, Any]) -> None:
        await self._request("PATCH", f"/notes/{_segment(note_id)}", body=options)

    async def update_team_note(self, team_path: str, note_id: str, options: Mapping[str, Any]) -> None:
        await self._request(
            "PATCH",
            f"/teams/{_segment(team_path)}/notes/{_segment(note_id)}",
            body=options,
        )

    async def delete_note(self, note_id: str) -> None:
        await self._request("DELETE", f"/notes/{_segment(note_id)}")

    async def delete_team_note(self, team_path: str, note_id: str) -> None:
        await self._request("DELETE", f"/teams/{_segment(team_path)}/notes/{_segment(note_id)}")

    async def _request(self, method: str, path: str, *, body: Mapping[str, Any] | None = None) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            ) as http:
                response = await http.request(
                    method,
                    path,
                    json=dict(body) if body is not None else None,
                )
        except httpx.TimeoutException as exc:
            raise HackMDConnectionError(self.base_url, "request timed out") from exc
        except httpx.HTTPError as exc:
            raise HackMDConnectionError(self.base_url, str(exc)) from exc

        logger.debug(
            "client.response",
            extra={"context": {"method": method, "path": path, "status": response.status_code}},
        )
        return _handle_response(response)


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _handle_response(response: httpx.Response) -> Any:
    """Decode a response body, raising HackMDAPIError on error statuses."""

    if response.status_code >= 400:
        raise HackMDAPIError(response.status_code, _error_message(response))
    if not response.content:
        return None
    try:
        return response.json()
    except json.JSONDecodeError:
        return response.text


def _error_message(response: httpx.Response) -> str:
    prefix = f"HackMD API error {response.status_code}"
    try:
        body = response.json()
    except json.JSONDecodeError:
        body = None
    if isinstance(body, Mapping):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return f"{prefix}: {value.strip()}"
    text = response.text.strip()
    if text:
        return f"{prefix}: {text}"
    return f"{prefix}: {response.reason_phrase}"
