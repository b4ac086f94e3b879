import pytest

from teldrive.parts import (
    bots_cache_key,
    channel_cache_key,
    messages_cache_key,
    rand_int64,
    ranged_parts,
    session_cache_key,
)
from teldrive.types import Part


def _parts(count, size=100):
    return [Part(location=f"loc{i}", start=0, end=size - 1, size=size) for i in range(count)]


def _covered(parts):
    return sum(p.end - p.start + 1 for p in parts)


def test_rand_int64_range_and_variety():
    values = {rand_int64() for _ in range(20)}
    assert len(values) > 1
    assert all(-(1 << 63) <= v < (1 << 63) for v in values)


def test_ranged_parts_whole_file():
    parts = _parts(3)
    result = ranged_parts(parts, 0, 299)
    assert [p.location for p in result] == ["loc0", "loc1", "loc2"]
    assert result[0].start == 0
    assert result[-1].end == parts[-1].end
    assert _covered(result) == 300


def test_ranged_parts_within_one_part():
    parts = _parts(3)
    result = ranged_parts(parts, 150, 160)
    assert len(result) == 1
    assert result[0].location == "loc1"
    assert _covered(result) == 160 - 150 + 1


@pytest.mark.parametrize("start,end", [(50, 250), (99, 100), (0, 199), (120, 299)])
def test_ranged_parts_cover_exact_span(start, end):
    parts = _parts(3)
    result = ranged_parts(parts, start, end)
    assert _covered(result) == end - start + 1
    assert result[0].location == parts[start // 100].location
    assert result[-1].location == parts[end // 100].location


def test_ranged_parts_leaves_input_unchanged():
    parts = _parts(3)
    ranged_parts(parts, 120, 280)
    assert all(p.start == 0 and p.end == 99 for p in parts)


def test_ranged_parts_past_end_raises():
    with pytest.raises(IndexError):
        ranged_parts(_parts(2), 0, 250)


def test_cache_keys():
    assert messages_cache_key("abc", "7") == "messages:abc:7"
    assert channel_cache_key(5) == "users:channel:5"
    assert bots_cache_key(5, 9) == "users:bots:5:9"
    assert session_cache_key("h").startswith("sessions:")
    assert session_cache_key("h").endswith(":h")