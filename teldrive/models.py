"""Database records for users, sessions, channels, bots, files and uploads."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class Bot:
    token: str = ""
    user_id: int = 0
    bot_id: int = 0
    bot_user_name: str = ""
    channel_id: int = 0


@dataclass
class Channel:
    channel_id: int = 0
    channel_name: str = ""
    user_id: int = 0
    selected: bool = False


@dataclass
class Part:
    id: int = 0
    salt: str = ""


@dataclass
class File:
    id: str = ""
    name: str = ""
    type: str = ""
    mime_type: str = ""
    path: str = ""
    size: int | None = None
    starred: bool = False
    depth: int | None = None
    encrypted: bool = False
    user_id: int = 0
    status: str = ""
    parent_id: str = ""
    parts: list[Part] | None = None
    channel_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Session:
    user_id: int = 0
    hash: str = ""
    session: str = ""
    created_at: datetime | None = None


@dataclass
class Upload:
    upload_id: str = ""
    user_id: int = 0
    name: str = ""
    part_no: int = 0
    part_id: int = 0
    encrypted: bool = False
    salt: str = ""
    channel_id: int = 0
    size: int = 0
    created_at: datetime | None = None


@dataclass
class User:
    user_id: int = 0
    name: str = ""
    user_name: str = ""
    is_premium: bool = False
    updated_at: datetime | None = None
    created_at: datetime | None = None


def _part_to_plain(part: Part) -> dict[str, Any]:
    out: dict[str, Any] = {"id": part.id}
    if part.salt:
        out["salt"] = part.salt
    return out


def parts_to_json(parts: list[Part] | None) -> str:
    """Encode parts as the JSON column value; the salt is left out when empty."""
    if parts is None:
        return "null"
    return json.dumps([_part_to_plain(p) for p in parts], separators=(",", ":"))


def parts_from_json(raw: str | bytes) -> list[Part]:
    """Decode the JSON column value of a file's parts."""
    data = json.loads(raw)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("parts must be a JSON array")
    parts: list[Part] = []
    for item in data:
        if not isinstance(item, dict):
            raise ValueError("each part must be a JSON object")
        part_id = item.get("id", 0)
        salt = item.get("salt", "")
        if isinstance(part_id, bool) or not isinstance(part_id, int):
            raise ValueError("part id must be an integer")
        if not isinstance(salt, str):
            raise ValueError("part salt must be a string")
        parts.append(Part(id=part_id, salt=salt))
    return parts