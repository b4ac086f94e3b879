"""Part selection for byte ranges, random ids and cache keys."""

from __future__ import annotations

import dataclasses
import os

from teldrive.types import Part


def rand_int64() -> int:
    """A random signed 64-bit integer."""
    return int.from_bytes(os.urandom(8), "little", signed=True)


def ranged_parts(parts: list[Part], start_byte: int, end_byte: int) -> list[Part]:
    """The parts covering an inclusive byte range, with starts and ends set within each."""
    chunk_size = parts[0].end + 1
    first_chunk = max(start_byte // chunk_size, 0)
    last_chunk = min(end_byte // chunk_size, len(parts))
    start_in_first = start_byte % chunk_size
    end_in_last = end_byte % chunk_size

    if first_chunk == last_chunk:
        return [dataclasses.replace(parts[first_chunk], start=start_in_first, end=end_in_last)]

    valid = [dataclasses.replace(parts[first_chunk], start=start_in_first)]
    valid.extend(
        dataclasses.replace(part, start=0) for part in parts[first_chunk + 1 : last_chunk]
    )
    valid.append(dataclasses.replace(parts[last_chunk], start=0, end=end_in_last))
    return valid


def messages_cache_key(file_id: str, user_id: str) -> str:
    return f"messages:{file_id}:{user_id}"


def channel_cache_key(user_id: int) -> str:
    return f"users:channel:{user_id}"


def bots_cache_key(user_id: int, channel_id: int) -> str:
    return f"users:bots:{user_id}:{channel_id}"


def session_cache_key(session_hash: str) -> str:
    return f"sessions:{session_hash}"