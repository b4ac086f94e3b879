"""Durations with day, week, month and year suffixes."""

from __future__ import annotations

import json
from decimal import Decimal
from fractions import Fraction

_NANOSECOND = 1
_MICROSECOND = 1000
_MILLISECOND = 1000 * _MICROSECOND
_SECOND = 1000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR

_MAX_INT64 = (1 << 63) - 1

_AGE_SUFFIXES: tuple[tuple[str, int], ...] = (
    ("d", _DAY),
    ("w", _DAY * 7),
    ("M", _DAY * 30),
    ("y", _DAY * 365),
    ("", _SECOND),
)

_UNITS = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "\u00b5s": _MICROSECOND,
    "\u03bcs": _MICROSECOND,
    "ms": _MILLISECOND,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}


def _fraction_text(value: int, precision: int) -> str:
    whole, frac = divmod(value, 10**precision)
    digits = str(frac).rjust(precision, "0").rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def _format_clock(nanos: int) -> str:
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    u = abs(nanos)
    if u < _SECOND:
        if u < _MICROSECOND:
            text = f"{u}ns"
        elif u < _MILLISECOND:
            text = _fraction_text(u, 3) + "\u00b5s"
        else:
            text = _fraction_text(u, 6) + "ms"
        return sign + text
    text = _fraction_text(u % _MINUTE, 9) + "s"
    minutes = u // _MINUTE
    if minutes > 0:
        text = f"{minutes % 60}m" + text
        hours = minutes // 60
        if hours > 0:
            text = f"{hours}h" + text
    return sign + text


def _format_float(value: float) -> str:
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class Duration(int):
    """A nanosecond count that prints with the largest fitting age suffix."""

    def __str__(self) -> str:
        if self == DURATION_OFF:
            return "off"
        for suffix, multiplier in reversed(_AGE_SUFFIXES[:-1]):
            if abs(float(self)) >= float(multiplier):
                return _format_float(float(self) / float(multiplier)) + suffix
        return _format_clock(int(self))

    def __repr__(self) -> str:
        return f"Duration({int(self)})"

    def is_set(self) -> bool:
        """Whether the duration is anything other than "off"."""
        return self != DURATION_OFF


DURATION_OFF = Duration(_MAX_INT64)


def parse_go_duration(text: str) -> int:
    """Parse a clock duration such as "1h30m" or "-1.5s" into nanoseconds."""
    original = text
    s = text
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise ValueError(f"invalid duration {original!r}")
    total = Fraction(0)
    while s:
        if not (s[0] == "." or s[0].isdigit()):
            raise ValueError(f"invalid duration {original!r}")
        i = 0
        while i < len(s) and "0" <= s[i] <= "9":
            i += 1
        whole_digits = s[:i]
        s = s[i:]
        frac_digits = ""
        if s.startswith("."):
            s = s[1:]
            i = 0
            while i < len(s) and "0" <= s[i] <= "9":
                i += 1
            frac_digits = s[:i]
            s = s[i:]
        if not whole_digits and not frac_digits:
            raise ValueError(f"invalid duration {original!r}")
        i = 0
        while i < len(s) and s[i] != "." and not ("0" <= s[i] <= "9"):
            i += 1
        unit_name = s[:i]
        s = s[i:]
        if not unit_name:
            raise ValueError(f"missing unit in duration {original!r}")
        unit = _UNITS.get(unit_name)
        if unit is None:
            raise ValueError(f"unknown unit {unit_name!r} in duration {original!r}")
        value = int(whole_digits or "0") * unit
        if frac_digits:
            value += int(Fraction(int(frac_digits), 10 ** len(frac_digits)) * unit)
        total += value
        if total > (1 << 63):
            raise ValueError(f"invalid duration {original!r}")
    result = int(total)
    if negative:
        return -result
    if result > _MAX_INT64:
        raise ValueError(f"invalid duration {original!r}")
    return result


def _parse_float(text: str) -> float:
    if not text or text != text.strip() or "_" in text:
        raise ValueError(f"invalid number {text!r}")
    return float(text)


def _parse_suffixed(age: str) -> int:
    for suffix, multiplier in _AGE_SUFFIXES:
        if age.endswith(suffix):
            period = _parse_float(age[: len(age) - len(suffix)]) * multiplier
            if period != period or abs(period) >= 2.0**63:
                raise ValueError(f"duration out of range {age!r}")
            return int(period)
    return 0


def parse_duration(age: str) -> Duration:
    """Parse "off", a clock duration, or a number with an age suffix."""
    if age == "off":
        return DURATION_OFF
    try:
        return Duration(parse_go_duration(age))
    except ValueError:
        return Duration(_parse_suffixed(age))


def duration_from_json(raw: str | bytes) -> Duration:
    """Decode a JSON number of nanoseconds or a JSON duration string."""
    value = json.loads(raw)
    if isinstance(value, bool):
        raise ValueError("invalid duration")
    if isinstance(value, (int, float)):
        return Duration(int(value))
    if isinstance(value, str):
        return parse_duration(value)
    raise ValueError("invalid duration")