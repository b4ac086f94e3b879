"""Parsing of HTTP Range headers."""

from __future__ import annotations

import re
from dataclasses import dataclass

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


@dataclass(frozen=True)
class Range:
    start: int
    end: int


class InvalidRangeError(ValueError):
    def __init__(self, message: str = "invalid range") -> None:
        super().__init__(message)


class NoOverlapError(ValueError):
    def __init__(self, message: str = "invalid range: failed to overlap") -> None:
        super().__init__(message)


def _parse_int(text: str) -> int | None:
    if not _INT_RE.fullmatch(text):
        return None
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def parse(header: str, size: int) -> list[Range]:
    """Parse a Range header against a resource of the given size."""
    index = header.find("=")
    if index == -1:
        raise InvalidRangeError()
    ranges: list[Range] = []
    for value in header[index + 1 :].split(","):
        bounds = value.split("-")
        if len(bounds) < 2:
            raise InvalidRangeError()
        start = _parse_int(bounds[0])
        end = _parse_int(bounds[1])
        if start is None and end is None:
            continue
        if start is None:
            start = size - end
            end = size - 1
        elif end is None:
            end = size - 1
        if end >= size:
            end = size - 1
        if start > end or start < 0:
            continue
        ranges.append(Range(start, end))
    if not ranges:
        raise NoOverlapError()
    return ranges