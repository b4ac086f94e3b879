"""Database error kinds and their recognition."""

from __future__ import annotations

_UNIQUE_VIOLATION = "23505"


class NotFoundError(LookupError):
    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)


class KeyConflictError(Exception):
    def __init__(self, message: str = "key conflict") -> None:
        super().__init__(message)


def is_record_not_found(err: BaseException | None) -> bool:
    return isinstance(err, NotFoundError)


def is_key_conflict(err: BaseException | None) -> bool:
    """True for a key conflict or a database unique-constraint violation."""
    if isinstance(err, KeyConflictError):
        return True
    if err is None:
        return False
    code = getattr(err, "pgcode", None) or getattr(err, "sqlstate", None)
    return code == _UNIQUE_VIOLATION