from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from hackmd_mcp.client import HackMDAPIError, HackMDClient, HackMDConnectionError
from hackmd_mcp.errors import DOWNSTREAM_ERROR


class _Recorder:
    def __init__(self, responder) -> None:
        self.requests: list[httpx.Request] = []
        self._responder = responder

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)


def _client(responder) -> tuple[HackMDClient, _Recorder]:
    recorder = _Recorder(responder)
    client = HackMDClient(
        "secret-token",
        base_url="https://api.example.test/v1/",
        transport=httpx.MockTransport(recorder),
    )
    return client, recorder


def _json(request: httpx.Request) -> Any:
    return json.loads(request.content) if request.content else None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("method_name", "args", "http_method", "path"),
    [
        ("get_note_list", (), "GET", "/v1/notes"),
        ("get_team_notes", ("my team",), "GET", "/v1/teams/my%20team/notes"),
        ("get_note", ("abc",), "GET", "/v1/notes/abc"),
        ("delete_note", ("abc",), "DELETE", "/v1/notes/abc"),
        ("delete_team_note", ("team", "abc"), "DELETE", "/v1/teams/team/notes/abc"),
    ],
)
async def test_endpoints_without_body(method_name, args, http_method, path) -> None:
    client, recorder = _client(lambda request: httpx.Response(200, json=[]))

    await getattr(client, method_name)(*args)

    (request,) = recorder.requests
    assert request.method == http_method
    assert request.url.raw_path.decode() == path
    assert request.headers["Authorization"] == "Bearer secret-token"


@pytest.mark.asyncio
async def test_create_note_posts_options_and_returns_record() -> None:
    client, recorder = _client(lambda request: httpx.Response(201, json={"id": "new", "title": "T"}))

    note = await client.create_note({"title": "T", "content": "body"})

    assert note == {"id": "new", "title": "T"}
    (request,) = recorder.requests
    assert request.method == "POST"
    assert request.url.path == "/v1/notes"
    assert _json(request) == {"title": "T", "content": "body"}


@pytest.mark.asyncio
async def test_create_team_note_targets_team_endpoint() -> None:
    client, recorder = _client(lambda request: httpx.Response(201, json={"id": "new", "title": "T"}))

    await client.create_team_note("team", {"title": "T"})

    assert recorder.requests[0].url.path == "/v1/teams/team/notes"


@pytest.mark.asyncio
async def test_update_endpoints_use_patch_and_return_none() -> None:
    client, recorder = _client(lambda request: httpx.Response(202))

    assert await client.update_note("abc", {"content": "x"}) is None
    assert await client.update_team_note("team", "abc", {"content": "y"}) is None

    personal, team = recorder.requests
    assert (personal.method, personal.url.path, _json(personal)) == ("PATCH", "/v1/notes/abc", {"content": "x"})
    assert (team.method, team.url.path, _json(team)) == ("PATCH", "/v1/teams/team/notes/abc", {"content": "y"})


@pytest.mark.asyncio
async def test_error_status_uses_json_message() -> None:
    client, _ = _client(lambda request: httpx.Response(404, json={"message": "Note not found"}))

    with pytest.raises(HackMDAPIError) as exc_info:
        await client.get_note("missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.code == DOWNSTREAM_ERROR
    assert exc_info.value.message == "HackMD API error 404: Note not found"


@pytest.mark.asyncio
async def test_error_status_falls_back_to_text() -> None:
    client, _ = _client(lambda request: httpx.Response(403, text="Forbidden for you"))

    with pytest.raises(HackMDAPIError) as exc_info:
        await client.get_note_list()

    assert str(exc_info.value) == "HackMD API error 403: Forbidden for you"


@pytest.mark.asyncio
async def test_error_status_without_body_uses_reason() -> None:
    client, _ = _client(lambda request: httpx.Response(401))

    with pytest.raises(HackMDAPIError) as exc_info:
        await client.get_note_list()

    assert exc_info.value.message == "HackMD API error 401: Unauthorized"


@pytest.mark.asyncio
async def test_transport_failure_raises_connection_error() -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = _client(_refuse)

    with pytest.raises(HackMDConnectionError) as exc_info:
        await client.get_note_list()

    assert exc_info.value.message.startswith("Cannot connect to HackMD API at https://api.example.test/v1")


@pytest.mark.asyncio
async def test_timeout_raises_connection_error() -> None:
    def _slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    client, _ = _client(_slow)

    with pytest.raises(HackMDConnectionError) as exc_info:
        await client.get_note("abc")

    assert exc_info.value.message.endswith("request timed out")


def test_empty_token_is_rejected() -> None:
    with pytest.raises(ValueError):
        HackMDClient("")
