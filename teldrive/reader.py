"""Readers that stream file parts, plain or encrypted, chunk by chunk."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, Protocol

from teldrive.crypt import Cipher
from teldrive.types import Part

FetchChunk = Callable[[Any, int, int], bytes]

_MAX_CHUNK_SIZE = 1024 * 1024
_MIN_CHUNK_SIZE = 1024


class _Readable(Protocol):
    def read(self, size: int = -1) -> bytes: ...

    def close(self) -> None: ...


def _drain(read_once: Callable[[int], bytes], size: int) -> bytes:
    out: list[bytes] = []
    got = 0
    while size < 0 or got < size:
        chunk = read_once(-1 if size < 0 else size - got)
        if not chunk:
            break
        out.append(chunk)
        got += len(chunk)
    return b"".join(out)


def calculate_chunk_size(start: int, end: int) -> int:
    """The request size for a byte span: 1 MiB, halved down to 1 KiB to fit the span."""
    chunk_size = _MAX_CHUNK_SIZE
    while chunk_size > _MIN_CHUNK_SIZE and chunk_size > end - start:
        chunk_size //= 2
    return chunk_size


class TGReader:
    """Reads the inclusive byte range of one part through aligned chunk requests."""

    def __init__(self, fetch_chunk: FetchChunk, part: Part) -> None:
        self._fetch = fetch_chunk
        self._location = part.location
        self._start = part.start
        self._end = part.end
        self._chunk_size = calculate_chunk_size(part.start, part.end)
        self._total = part.end - part.start + 1
        self._bytes_read = 0
        self._stream = self._part_stream()
        self._buffer = b""
        self._index = 0

    def _part_stream(self) -> Iterator[bytes]:
        chunk_size = self._chunk_size
        offset = self._start - (self._start % chunk_size)
        left_cut = self._start - offset
        right_cut = (self._end % chunk_size) + 1
        total_parts = (self._end - offset + chunk_size) // chunk_size
        current = 1
        while current <= total_parts:
            data = self._fetch(self._location, offset, chunk_size)
            if not data:
                yield b""
                continue
            if total_parts == 1:
                data = data[left_cut:right_cut]
            elif current == 1:
                data = data[left_cut:]
            elif current == total_parts:
                data = data[:right_cut]
            current += 1
            offset += chunk_size
            yield data

    def _read_once(self, max_size: int) -> bytes:
        remaining = self._total - self._bytes_read
        if remaining <= 0:
            return b""
        if self._index >= len(self._buffer):
            self._buffer = next(self._stream, b"")
            if not self._buffer:
                self._stream = self._part_stream()
                self._buffer = next(self._stream, b"")
                if not self._buffer:
                    return b""
            self._index = 0
        take = remaining if max_size < 0 else min(max_size, remaining)
        chunk = self._buffer[self._index : self._index + take]
        self._index += len(chunk)
        self._bytes_read += len(chunk)
        return chunk

    def read(self, size: int = -1) -> bytes:
        return _drain(self._read_once, size)

    def close(self) -> None:
        """Nothing to release."""

    def __enter__(self) -> TGReader:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class _PartSequenceReader:
    """Reads parts one after another until the content length is reached."""

    def __init__(self, parts: list[Part], content_length: int) -> None:
        if not parts:
            raise ValueError("no parts to read")
        self._parts = list(parts)
        self._pos = 0
        self._content_length = content_length
        self._bytes_read = 0
        self._reader: _Readable | None = self._open_part(self._parts[0])

    def _open_part(self, part: Part) -> _Readable:
        raise NotImplementedError

    def _advance(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        self._pos += 1
        if self._pos < len(self._parts):
            self._reader = self._open_part(self._parts[self._pos])

    def _read_once(self, max_size: int) -> bytes:
        remaining = self._content_length - self._bytes_read
        if remaining <= 0:
            return b""
        take = remaining if max_size < 0 else min(max_size, remaining)
        while self._reader is not None:
            chunk = self._reader.read(take)
            if chunk:
                self._bytes_read += len(chunk)
                return chunk
            self._advance()
        return b""

    def read(self, size: int = -1) -> bytes:
        return _drain(self._read_once, size)

    def close(self) -> None:
        if self._reader is not None:
            reader, self._reader = self._reader, None
            reader.close()

    def __enter__(self) -> _PartSequenceReader:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class LinearReader(_PartSequenceReader):
    """Reads the ranges of several plain parts as one stream."""

    def __init__(self, fetch_chunk: FetchChunk, parts: list[Part], content_length: int) -> None:
        self._fetch = fetch_chunk
        super().__init__(parts, content_length)

    def _open_part(self, part: Part) -> _Readable:
        return TGReader(self._fetch, part)

    def read(self, size: int = -1) -> bytes:
        return super().read(size)

    def close(self) -> None:
        super().close()


class DecryptedReader(_PartSequenceReader):
    """Reads the plain ranges of several encrypted parts as one stream."""

    def __init__(
        self,
        fetch_chunk: FetchChunk,
        parts: list[Part],
        content_length: int,
        encryption_key: str,
    ) -> None:
        self._fetch = fetch_chunk
        self._encryption_key = encryption_key
        super().__init__(parts, content_length)

    def _open_part(self, part: Part) -> _Readable:
        cipher = Cipher(self._encryption_key, part.salt)

        def open_range(underlying_offset: int, underlying_limit: int) -> TGReader:
            if underlying_limit >= 0:
                end = min(part.size - 1, underlying_offset + underlying_limit - 1)
            else:
                end = part.size - 1
            return TGReader(
                self._fetch,
                Part(location=part.location, start=underlying_offset, end=end),
            )

        return cipher.decrypt_data_seek(open_range, part.start, part.end - part.start + 1)

    def read(self, size: int = -1) -> bytes:
        return super().read(size)

    def close(self) -> None:
        super().close()