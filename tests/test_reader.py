import io

import pytest

from teldrive.crypt import Cipher, decrypted_size
from teldrive.reader import DecryptedReader, LinearReader, TGReader, calculate_chunk_size
from teldrive.types import Part

DATA = bytes(range(256)) * 20


class Store:
    def __init__(self, blobs):
        self.blobs = blobs
        self.calls = []

    def __call__(self, location, offset, limit):
        self.calls.append((location, offset, limit))
        return self.blobs[location][offset : offset + limit]


def test_chunk_size_bounds():
    assert calculate_chunk_size(0, 10**7) == 1024 * 1024
    assert calculate_chunk_size(0, 100) == 1024


def test_chunk_size_is_power_of_two_fitting_span():
    for span in (2000, 5000, 70000, 600000):
        size = calculate_chunk_size(0, span)
        assert size & (size - 1) == 0
        assert size <= span or size == 1024


def test_tg_reader_reads_range():
    store = Store({"a": DATA})
    reader = TGReader(store, Part(location="a", start=100, end=3000))
    assert reader.read() == DATA[100:3001]
    assert reader.read() == b""


def test_tg_reader_requests_are_aligned():
    store = Store({"a": DATA})
    TGReader(store, Part(location="a", start=100, end=3000)).read()
    chunk = calculate_chunk_size(100, 3000)
    assert store.calls
    for _, offset, limit in store.calls:
        assert limit == chunk
        assert offset % chunk == 0


def test_tg_reader_single_chunk():
    store = Store({"a": DATA})
    reader = TGReader(store, Part(location="a", start=10, end=20))
    assert reader.read() == DATA[10:21]


def test_tg_reader_small_reads():
    store = Store({"a": DATA})
    reader = TGReader(store, Part(location="a", start=5, end=4000))
    pieces = []
    while True:
        piece = reader.read(7)
        if not piece:
            break
        assert len(piece) <= 7
        pieces.append(piece)
    assert b"".join(pieces) == DATA[5:4001]


def test_linear_reader_joins_parts():
    store = Store({"a": DATA, "b": DATA[::-1]})
    parts = [
        Part(location="a", start=1000, end=len(DATA) - 1),
        Part(location="b", start=0, end=499),
    ]
    length = (len(DATA) - 1000) + 500
    with LinearReader(store, parts, length) as reader:
        assert reader.read() == DATA[1000:] + DATA[::-1][:500]


def test_linear_reader_stops_at_content_length():
    store = Store({"a": DATA})
    reader = LinearReader(store, [Part(location="a", start=0, end=len(DATA) - 1)], 300)
    assert reader.read() == DATA[:300]
    assert reader.read(10) == b""


def test_linear_reader_needs_parts():
    with pytest.raises(ValueError):
        LinearReader(Store({}), [], 0)


def _encrypt(key, salt, plain):
    return Cipher(key, salt).encrypt_data(io.BytesIO(plain)).read()


def test_decrypted_reader_whole_and_range():
    key = "secret"
    plain = bytes(range(256)) * 600
    blob = _encrypt(key, "salt-a", plain)
    assert decrypted_size(len(blob)) == len(plain)
    store = Store({"a": blob})

    whole = Part(location="a", start=0, end=len(plain) - 1, size=len(blob), salt="salt-a")
    reader = DecryptedReader(store, [whole], len(plain), key)
    assert reader.read() == plain
    reader.close()

    start, end = 70000, 140000
    sub = Part(location="a", start=start, end=end, size=len(blob), salt="salt-a")
    reader = DecryptedReader(store, [sub], end - start + 1, key)
    assert reader.read() == plain[start : end + 1]


def test_decrypted_reader_two_parts():
    key = "secret"
    first = bytes(range(256)) * 300
    second = bytes(reversed(range(256))) * 100
    store = Store({"a": _encrypt(key, "s1", first), "b": _encrypt(key, "s2", second)})
    parts = [
        Part(location="a", start=500, end=len(first) - 1,
             size=len(store.blobs["a"]), salt="s1"),
        Part(location="b", start=0, end=999, size=len(store.blobs["b"]), salt="s2"),
    ]
    length = len(first) - 500 + 1000
    reader = DecryptedReader(store, parts, length, key)
    assert reader.read() == first[500:] + second[:1000]