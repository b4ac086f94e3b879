import pytest

from teldrive.duration import (
    DURATION_OFF,
    Duration,
    duration_from_json,
    parse_duration,
    parse_go_duration,
)

SECOND = 10**9
HOUR = 3600 * SECOND
DAY = 24 * HOUR


def test_parse_clock_duration():
    assert parse_duration("15h2m10s") == (15 * 3600 + 2 * 60 + 10) * SECOND


def test_parse_off():
    result = parse_duration("off")
    assert result == DURATION_OFF
    assert not result.is_set()
    assert str(result) == "off"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1d", DAY),
        ("2w", 14 * DAY),
        ("1M", 30 * DAY),
        ("1y", 365 * DAY),
        ("1.5d", DAY + 12 * HOUR),
        ("10", 10 * SECOND),
    ],
)
def test_parse_suffixes(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["abc", "d", "1x", ""])
def test_parse_invalid(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_go_duration_parsing():
    assert parse_go_duration("1.5h") == parse_go_duration("1h30m")
    assert parse_go_duration("-2s") == -2 * SECOND
    assert parse_go_duration("0") == 0
    assert parse_go_duration("1\u00b5s") == parse_go_duration("1us")


@pytest.mark.parametrize("text", ["5", "", "1q", ".s", "-"])
def test_go_duration_errors(text):
    with pytest.raises(ValueError):
        parse_go_duration(text)


@pytest.mark.parametrize(
    "value, text",
    [
        (DAY, "1d"),
        (7 * DAY, "1w"),
        (14 * DAY, "2w"),
        (30 * DAY, "1M"),
        (90 * SECOND, "1m30s"),
        (HOUR, "1h0m0s"),
        (1500 * 10**6, "1.5s"),
        (0, "0s"),
    ],
)
def test_string(value, text):
    assert str(Duration(value)) == text
    assert Duration(value).is_set()


def test_string_round_trip():
    for text in ["3d", "2w", "1y"]:
        assert str(parse_duration(text)) == text


def test_from_json():
    assert duration_from_json('"2h"') == 2 * HOUR
    assert duration_from_json("3600") == 3600
    assert duration_from_json('"off"') == DURATION_OFF


@pytest.mark.parametrize("raw", ["true", "null", "[1]"])
def test_from_json_invalid(raw):
    with pytest.raises(ValueError):
        duration_from_json(raw)