"""Shared value types passed between services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


class AppError(Exception):
    """A failure carrying the HTTP status it should be reported with."""

    def __init__(self, error: BaseException, code: int = 500) -> None:
        super().__init__(str(error))
        self.error = error
        self.code = code


@dataclass
class Part:
    location: Any = None
    start: int = 0
    end: int = 0
    size: int = 0
    salt: str = ""


def _epoch(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def _date(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"invalid numeric date {value!r}")
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


@dataclass
class JWTClaims:
    issuer: str = ""
    subject: str = ""
    audience: list[str] = field(default_factory=list)
    expiry: datetime | None = None
    not_before: datetime | None = None
    issued_at: datetime | None = None
    id: str = ""
    tg_session: str = ""
    name: str = ""
    user_name: str = ""
    bot: bool = False
    is_premium: bool = False
    hash: str = ""

    def to_dict(self) -> dict[str, Any]:
        """The JSON object form, omitting unset registered claims."""
        out: dict[str, Any] = {}
        if self.issuer:
            out["iss"] = self.issuer
        if self.subject:
            out["sub"] = self.subject
        if self.audience:
            out["aud"] = self.audience[0] if len(self.audience) == 1 else list(self.audience)
        if self.expiry is not None:
            out["exp"] = _epoch(self.expiry)
        if self.not_before is not None:
            out["nbf"] = _epoch(self.not_before)
        if self.issued_at is not None:
            out["iat"] = _epoch(self.issued_at)
        if self.id:
            out["jti"] = self.id
        out.update(
            {
                "tgSession": self.tg_session,
                "name": self.name,
                "userName": self.user_name,
                "bot": self.bot,
                "isPremium": self.is_premium,
                "hash": self.hash,
            }
        )
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JWTClaims:
        audience = data.get("aud")
        if audience is None:
            audiences: list[str] = []
        elif isinstance(audience, str):
            audiences = [audience]
        elif isinstance(audience, list):
            audiences = [str(a) for a in audience]
        else:
            raise ValueError("invalid audience")
        return cls(
            issuer=data.get("iss", ""),
            subject=data.get("sub", ""),
            audience=audiences,
            expiry=_date(data.get("exp")),
            not_before=_date(data.get("nbf")),
            issued_at=_date(data.get("iat")),
            id=data.get("jti", ""),
            tg_session=data.get("tgSession", ""),
            name=data.get("name", ""),
            user_name=data.get("userName", ""),
            bot=bool(data.get("bot", False)),
            is_premium=bool(data.get("isPremium", False)),
            hash=data.get("hash", ""),
        )


@dataclass
class SessionData:
    version: int = 0
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class SocketMessage:
    auth_type: str = ""
    message: str = ""
    phone_no: str = ""
    phone_code_hash: str = ""
    phone_code: str = ""
    password: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SocketMessage:
        return cls(
            auth_type=data.get("authType", ""),
            message=data.get("message", ""),
            phone_no=data.get("phoneNo", ""),
            phone_code_hash=data.get("phoneCodeHash", ""),
            phone_code=data.get("phoneCode", ""),
            password=data.get("password", ""),
        )


@dataclass
class BotInfo:
    id: int = 0
    user_name: str = ""
    access_hash: int = 0
    token: str = ""