"""Hex MD5 digests of bytes, strings and streams."""

from __future__ import annotations

import hashlib
from typing import BinaryIO

_CHUNK = 64 * 1024


def from_bytes(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def from_string(text: str) -> str:
    return from_bytes(text.encode("utf-8"))


def from_reader(stream: BinaryIO) -> str:
    """Digest everything left in a binary stream."""
    digest = hashlib.md5()
    for chunk in iter(lambda: stream.read(_CHUNK), b""):
        digest.update(chunk)
    return digest.hexdigest()