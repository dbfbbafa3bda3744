"""HackMD workspace tools: argument contracts and handlers."""

from __future__ import annotations

from typing import Any, Mapping

from .client import HackMDClient
from .models import changed_at_key, project_note, project_notes
from .registry import ToolContract, ToolRegistry

__all__ = [
    "DEFAULT_CONTENT_TO",
    "DEFAULT_LIST_LIMIT",
    "NOTE_DELETED_MESSAGE",
    "PERMISSION_VALUES",
    "build_registry",
]

DEFAULT_LIST_LIMIT = 100
DEFAULT_CONTENT_TO = 10000
NOTE_DELETED_MESSAGE = "(Note deleted)"
PERMISSION_VALUES = ("owner", "signed_in", "guest")

_TEAM_PATH_PROPERTY = {
    "type": "string",
    "description": "Optional team path, defaults to personal workspace if not provided",
}


async def get_workspace_notes(client: HackMDClient, arguments: Mapping[str, Any]) -> list[dict[str, Any]]:
    team_path = arguments.get("teamPath")
    if team_path:
        notes = await client.get_team_notes(team_path)
    else:
        notes = await client.get_note_list()
    notes = list(notes or [])

    title_filter = arguments.get("titleFilter")
    if title_filter:
        notes = [note for note in notes if title_filter in str(note.get("title") or "")]

    notes.sort(key=changed_at_key, reverse=True)
    notes = notes[: int(arguments["limit"])]
    return [projection.to_dict() for projection in project_notes(notes)]


async def get_workspace_single_note(client: HackMDClient, arguments: Mapping[str, Any]) -> dict[str, Any]:
    note = await client.get_note(arguments["noteId"])
    payload = project_note(note).to_dict()
    content = note.get("content") or ""
    payload["content"] = content[int(arguments["contentFrom"]) : int(arguments["contentTo"])]
    return payload


async def upsert_workspace_note(client: HackMDClient, arguments: Mapping[str, Any]) -> list[dict[str, Any]]:
    team_path = arguments.get("teamPath")
    note_id = arguments.get("noteId")
    options = {
        key: arguments[key]
        for key in ("title", "content", "permalink", "readPermission", "writePermission")
        if arguments.get(key) is not None
    }

    if note_id:
        # title only applies on creation
        options.pop("title", None)
        if team_path:
            await client.update_team_note(team_path, note_id, options)
        else:
            await client.update_note(note_id, options)
        note = await client.get_note(note_id)
    elif team_path:
        note = await client.create_team_note(team_path, options)
    else:
        note = await client.create_note(options)

    return [projection.to_dict() for projection in project_notes([note])]


async def delete_workspace_note(client: HackMDClient, arguments: Mapping[str, Any]) -> str:
    team_path = arguments.get("teamPath")
    if team_path:
        await client.delete_team_note(team_path, arguments["noteId"])
    else:
        await client.delete_note(arguments["noteId"])
    return NOTE_DELETED_MESSAGE


GET_WORKSPACE_NOTES = ToolContract(
    name="get_workspace_notes",
    title="HackMD Get Workspace Notes",
    description="Get list of notes in a workspace on HackMD",
    parameters={
        "type": "object",
        "properties": {
            "teamPath": dict(_TEAM_PATH_PROPERTY),
            "limit": {
                "type": "number",
                "minimum": 1,
                "default": DEFAULT_LIST_LIMIT,
                "description": f"Optional return limit, defaults to {DEFAULT_LIST_LIMIT}",
            },
            "titleFilter": {
                "type": "string",
                "description": "Optional text filter the title needs to include",
            },
        },
    },
    handler=get_workspace_notes,
)

GET_WORKSPACE_SINGLE_NOTE = ToolContract(
    name="get_workspace_single_note",
    title="HackMD Get Single Workspace Note",
    description="Get detail of a single note in a workspace on HackMD",
    parameters={
        "type": "object",
        "properties": {
            "noteId": {
                "type": "string",
                "description": "The note id to get the detail of",
            },
            "contentFrom": {
                "type": "number",
                "minimum": 0,
                "default": 0,
                "description": "Optional content slicing start, defaults to 0 (document start)",
            },
            "contentTo": {
                "type": "number",
                "minimum": 0,
                "default": DEFAULT_CONTENT_TO,
                "description": f"Optional content slicing end, defaults to {DEFAULT_CONTENT_TO}",
            },
        },
        "required": ["noteId"],
    },
    handler=get_workspace_single_note,
)

UPSERT_WORKSPACE_NOTE = ToolContract(
    name="upsert_workspace_note",
    title="Upsert Workspace Note",
    description="Update or create a note in a workspace on HackMD",
    parameters={
        "type": "object",
        "properties": {
            "teamPath": dict(_TEAM_PATH_PROPERTY),
            "noteId": {
                "type": "string",
                "description": "The note id to update. Creates a new note if not provided",
            },
            "title": {
                "type": "string",
                "description": "Title of the new note (only used for create, no effect on update)",
            },
            "content": {
                "type": "string",
                "description": "Content of the note to create/update",
            },
            "permalink": {
                "type": "string",
                "pattern": "^[A-Za-z0-9_-]+$",
                "description": "Permalink of the note to create/update, must only contains a-zA-Z0-9_-",
            },
            "readPermission": {
                "type": "string",
                "enum": list(PERMISSION_VALUES),
                "default": "owner",
                "description": "Read permission of the note to create/update",
            },
            "writePermission": {
                "type": "string",
                "enum": list(PERMISSION_VALUES),
                "default": "owner",
                "description": "Write permission of the note to create/update",
            },
        },
    },
    handler=upsert_workspace_note,
)

DELETE_WORKSPACE_NOTE = ToolContract(
    name="delete_workspace_note",
    title="Delete Workspace Note",
    description="!!CAUTION!! REQUIRES USER CONFIRMATION. Delete a note from a workspace on HackMD",
    parameters={
        "type": "object",
        "properties": {
            "teamPath": dict(_TEAM_PATH_PROPERTY),
            "noteId": {
                "type": "string",
                "description": "The note id to delete",
            },
        },
        "required": ["noteId"],
    },
    handler=delete_workspace_note,
)

WORKSPACE_TOOLS = (
    GET_WORKSPACE_NOTES,
    GET_WORKSPACE_SINGLE_NOTE,
    UPSERT_WORKSPACE_NOTE,
    DELETE_WORKSPACE_NOTE,
)


def build_registry() -> ToolRegistry:
    """Return a registry holding the four workspace note tools."""

    registry = ToolRegistry()
    for contract in WORKSPACE_TOOLS:
        registry.register(contract)
    return registry
