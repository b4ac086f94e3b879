from datetime import datetime, timezone

import pytest

from teldrive.types import AppError, BotInfo, JWTClaims, Part, SocketMessage


def test_app_error_carries_code_and_message():
    err = AppError(ValueError("boom"), 404)
    assert err.code == 404
    assert str(err) == "boom"
    assert isinstance(err.error, ValueError)


def test_app_error_default_code():
    assert AppError(RuntimeError("x")).code == 500


def test_part_defaults():
    part = Part(start=3, end=9)
    assert (part.start, part.end, part.size, part.salt) == (3, 9, 0, "")


def test_claims_round_trip():
    claims = JWTClaims(
        subject="42",
        audience=["web", "api"],
        issued_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        expiry=datetime(2024, 2, 1, tzinfo=timezone.utc),
        tg_session="placeholder",
        name="Jane Doe",
        user_name="jane",
        bot=True,
        hash="abc",
    )
    assert JWTClaims.from_dict(claims.to_dict()) == claims


def test_claims_dict_keys():
    out = JWTClaims(subject="42", audience=["web"], user_name="jane").to_dict()
    assert out["sub"] == "42"
    assert out["aud"] == "web"
    assert out["userName"] == "jane"
    assert "exp" not in out
    assert "iss" not in out
    assert out["isPremium"] is False


def test_claims_from_dict_audience_string():
    claims = JWTClaims.from_dict({"aud": "web", "sub": "7"})
    assert claims.audience == ["web"]
    assert claims.subject == "7"
    assert claims.expiry is None


def test_claims_from_dict_bad_date():
    with pytest.raises(ValueError):
        JWTClaims.from_dict({"exp": "soon"})


def test_socket_message_from_dict():
    msg = SocketMessage.from_dict({"authType": "phone", "message": "sendcode", "phoneCodeHash": "h"})
    assert msg.auth_type == "phone"
    assert msg.message == "sendcode"
    assert msg.phone_code_hash == "h"
    assert msg.password == ""


def test_bot_info_fields():
    info = BotInfo(id=5, user_name="bot", token="token")
    assert (info.id, info.user_name, info.access_hash, info.token) == (5, "bot", 0, "token")