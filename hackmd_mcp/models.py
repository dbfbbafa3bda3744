"""Note projections and tool response envelopes."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping

from .errors import VALIDATION_ERROR, HackMDMCPError

__all__ = [
    "NoteProjection",
    "TextBlock",
    "ToolResponse",
    "changed_at_key",
    "project_note",
    "project_notes",
]


@dataclass(slots=True)
class NoteProjection:
    """Reduced, caller-facing view of a HackMD note record."""

    id: str
    title: str
    tags: list[str] = field(default_factory=list)
    published: bool = False
    published_type: str | None = None
    created_at: Any = None
    last_changed: Any = None
    publish_link: str | None = None
    read_permission: str | None = None
    write_permission: str | None = None
    team_path: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "NoteProjection":
        if not isinstance(record, Mapping):
            raise HackMDMCPError(VALIDATION_ERROR, "Note record must be an object")
        note_id = record.get("id")
        title = record.get("title")
        if note_id is None or title is None:
            raise HackMDMCPError(
                VALIDATION_ERROR,
                "Note record is missing an id or title",
                details={"id": note_id},
            )
        tags = record.get("tags") or []
        return cls(
            id=str(note_id),
            title=str(title),
            tags=[str(tag) for tag in tags],
            published=bool(record.get("publishedAt")),
            published_type=record.get("publishType"),
            created_at=record.get("createdAt"),
            last_changed=record.get("lastChangedAt"),
            publish_link=record.get("publishLink"),
            read_permission=record.get("readPermission"),
            write_permission=record.get("writePermission"),
            team_path=record.get("teamPath"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "tags": list(self.tags),
            "published": self.published,
            "publishedType": self.published_type,
            "createdAt": self.created_at,
            "lastChanged": self.last_changed,
            "publishLink": self.publish_link,
            "readPermission": self.read_permission,
            "writePermission": self.write_permission,
            "teamPath": self.team_path,
        }


def project_note(record: Mapping[str, Any]) -> NoteProjection:
    return NoteProjection.from_record(record)


def project_notes(records: Iterable[Mapping[str, Any]]) -> list[NoteProjection]:
    """Project note records in input order."""

    if records is None or isinstance(records, (str, bytes, Mapping)):
        raise HackMDMCPError(VALIDATION_ERROR, "Note listing must be an array of records")
    return [NoteProjection.from_record(record) for record in records]


def changed_at_key(record: Mapping[str, Any]) -> float:
    """Sort key for a record's ``lastChangedAt``; unknown values sort last."""

    value = record.get("lastChangedAt") if isinstance(record, Mapping) else None
    if isinstance(value, bool) or value is None:
        return float("-inf")
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return float("-inf")
    # epoch milliseconds, matching the API's numeric timestamps
    return parsed.timestamp() * 1000


@dataclass(frozen=True, slots=True)
class TextBlock:
    text: str
    type: str = "text"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True, slots=True)
class ToolResponse:
    """Uniform envelope returned for every tool invocation.

    Always carries exactly one text block. On failure the block holds the
    human-readable error message and nothing else.
    """

    content: tuple[TextBlock, ...]
    is_error: bool = False

    @classmethod
    def success(cls, payload: Any) -> "ToolResponse":
        text = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
        return cls(content=(TextBlock(text),), is_error=False)

    @classmethod
    def failure(cls, message: str) -> "ToolResponse":
        return cls(content=(TextBlock(message),), is_error=True)

    @property
    def text(self) -> str:
        return self.content[0].text

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [block.to_dict() for block in self.content],
            "isError": self.is_error,
        }
