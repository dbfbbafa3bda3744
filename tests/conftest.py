from __future__ import annotations

import copy
import itertools
from typing import Any, Mapping

import pytest

from hackmd_mcp.client import HackMDAPIError
from hackmd_mcp.dispatch import Dispatcher
from hackmd_mcp.tools import build_registry


def make_note(note_id: str, title: str, last_changed: Any, **fields: Any) -> dict[str, Any]:
    note: dict[str, Any] = {
        "id": note_id,
        "title": title,
        "content": f"# {title}",
        "tags": [],
        "createdAt": 1_700_000_000_000,
        "lastChangedAt": last_changed,
        "publishedAt": None,
        "publishType": "view",
        "publishLink": f"https://hackmd.io/@user/{note_id}",
        "readPermission": "owner",
        "writePermission": "owner",
        "teamPath": None,
    }
    note.update(fields)
    return note


class FakeHackMDClient:
    """In-memory stand-in for HackMDClient recording every call."""

    def __init__(self, notes: list[Mapping[str, Any]] | None = None) -> None:
        self.notes: dict[str, dict[str, Any]] = {note["id"]: dict(note) for note in notes or []}
        self.calls: list[tuple[Any, ...]] = []
        self._ids = itertools.count(1)

    def _require(self, note_id: str) -> dict[str, Any]:
        note = self.notes.get(note_id)
        if note is None:
            raise HackMDAPIError(404, "HackMD API error 404: Note not found")
        return note

    async def get_note_list(self) -> list[dict[str, Any]]:
        self.calls.append(("get_note_list",))
        return [copy.deepcopy(note) for note in self.notes.values() if not note.get("teamPath")]

    async def get_team_notes(self, team_path: str) -> list[dict[str, Any]]:
        self.calls.append(("get_team_notes", team_path))
        return [copy.deepcopy(note) for note in self.notes.values() if note.get("teamPath") == team_path]

    async def get_note(self, note_id: str) -> dict[str, Any]:
        self.calls.append(("get_note", note_id))
        return copy.deepcopy(self._require(note_id))

    async def create_note(self, options: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("create_note", dict(options)))
        return self._create(options, team_path=None)

    async def create_team_note(self, team_path: str, options: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("create_team_note", team_path, dict(options)))
        return self._create(options, team_path=team_path)

    async def update_note(self, note_id: str, options: Mapping[str, Any]) -> None:
        self.calls.append(("update_note", note_id, dict(options)))
        self._update(note_id, options)

    async def update_team_note(self, team_path: str, note_id: str, options: Mapping[str, Any]) -> None:
        self.calls.append(("update_team_note", team_path, note_id, dict(options)))
        self._update(note_id, options)

    async def delete_note(self, note_id: str) -> None:
        self.calls.append(("delete_note", note_id))
        self._require(note_id)
        del self.notes[note_id]

    async def delete_team_note(self, team_path: str, note_id: str) -> None:
        self.calls.append(("delete_team_note", team_path, note_id))
        self._require(note_id)
        del self.notes[note_id]

    def _create(self, options: Mapping[str, Any], *, team_path: str | None) -> dict[str, Any]:
        note_id = f"new-{next(self._ids)}"
        note = make_note(
            note_id,
            options.get("title", "Untitled"),
            2_000_000_000_000,
            content=options.get("content", ""),
            readPermission=options.get("readPermission"),
            writePermission=options.get("writePermission"),
            teamPath=team_path,
        )
        self.notes[note_id] = note
        return copy.deepcopy(note)

    def _update(self, note_id: str, options: Mapping[str, Any]) -> None:
        note = self._require(note_id)
        for key in ("content", "readPermission", "writePermission", "permalink"):
            if key in options:
                note[key] = options[key]
        note["lastChangedAt"] = 2_000_000_000_000


@pytest.fixture
def fake_client() -> FakeHackMDClient:
    return FakeHackMDClient(
        [
            make_note("n1", "Design A", 2000, tags=["design"]),
            make_note("n2", "Design B", 3000, publishedAt=1234),
            make_note("n3", "Other", 1000),
            make_note("t1", "Team Design", 1500, teamPath="core-team"),
        ]
    )


@pytest.fixture
def dispatcher(fake_client: FakeHackMDClient) -> Dispatcher:
    return Dispatcher(build_registry(), fake_client)


@pytest.fixture
def note_factory():
    return make_note


@pytest.fixture
def client_factory():
    return FakeHackMDClient


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
