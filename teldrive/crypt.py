"""Authenticated block encryption of file data with seekable decryption."""

from __future__ import annotations

import hashlib
import io
import os
import threading
from collections.abc import Callable
from typing import Protocol

import nacl.exceptions
import nacl.secret

FILE_MAGIC = b"TELDRIVE\x00\x00"
FILE_NONCE_SIZE = 24
FILE_HEADER_SIZE = len(FILE_MAGIC) + FILE_NONCE_SIZE
BLOCK_HEADER_SIZE = 16
BLOCK_DATA_SIZE = 64 * 1024
BLOCK_SIZE = BLOCK_HEADER_SIZE + BLOCK_DATA_SIZE

_KEY_SIZE = 32
_NAME_TWEAK_SIZE = 16
_NONCE_MODULUS = 1 << (8 * FILE_NONCE_SIZE)


class CryptError(Exception):
    """Base class of encryption and decryption failures."""


class EncryptedFileTooShortError(CryptError):
    def __init__(self, message: str = "file is too short to be encrypted") -> None:
        super().__init__(message)


class EncryptedFileBadHeaderError(CryptError):
    def __init__(self, message: str = "file has truncated block header") -> None:
        super().__init__(message)


class BadMagicError(CryptError):
    def __init__(self, message: str = "not an encrypted file - bad magic string") -> None:
        super().__init__(message)


class FileClosedError(CryptError):
    def __init__(self, message: str = "file already closed") -> None:
        super().__init__(message)


class BadSeekError(CryptError):
    def __init__(self, message: str = "Seek beyond end of file") -> None:
        super().__init__(message)


class Readable(Protocol):
    def read(self, size: int = -1) -> bytes: ...

    def close(self) -> None: ...


OpenRange = Callable[[int, int], Readable]

# Marks a stream that has reached its end; never raised to callers.
_END = EOFError("end of stream")


def _read_fill(stream: Readable, size: int) -> bytes:
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _nonce_bytes(value: int) -> bytes:
    return value.to_bytes(FILE_NONCE_SIZE, "little")


class Cipher:
    """Keys derived from a password and salt, used to seal and open data blocks."""

    def __init__(self, password: str, salt: str) -> None:
        key = hashlib.scrypt(
            password.encode("utf-8"),
            salt=salt.encode("utf-8"),
            n=16384,
            r=8,
            p=1,
            maxmem=64 * 1024 * 1024,
            dklen=_KEY_SIZE * 2 + _NAME_TWEAK_SIZE,
        )
        self.data_key = key[:_KEY_SIZE]
        self.name_key = key[_KEY_SIZE : 2 * _KEY_SIZE]
        self.name_tweak = key[2 * _KEY_SIZE :]
        self._box = nacl.secret.SecretBox(self.data_key)

    def _seal(self, data: bytes, nonce: int) -> bytes:
        return self._box.encrypt(data, _nonce_bytes(nonce)).ciphertext

    def _open(self, data: bytes, nonce: int) -> bytes | None:
        try:
            return self._box.decrypt(data, _nonce_bytes(nonce))
        except nacl.exceptions.CryptoError:
            return None

    def encrypt_data(self, stream: Readable) -> Encrypter:
        """Wrap a plain stream in one that yields its encrypted form."""
        return Encrypter(self, stream)

    def decrypt_data(self, stream: Readable) -> Decrypter:
        """Wrap an encrypted stream in one that yields the plain data."""
        return Decrypter(self, stream)

    def decrypt_data_seek(self, open_range: OpenRange, offset: int, limit: int) -> Decrypter:
        """Decrypt limit bytes (all if negative) from offset, opening ranges on demand."""
        do_seek = False
        set_limit = False
        if offset == 0 and limit < 0:
            stream = open_range(0, -1)
        elif offset == 0:
            _, underlying_limit, _, _ = calculate_underlying(offset, limit)
            stream = open_range(0, FILE_HEADER_SIZE + underlying_limit)
            set_limit = True
        else:
            stream = open_range(0, FILE_HEADER_SIZE)
            do_seek = True
        decrypter = Decrypter(self, stream, open_range, limit if set_limit else -1)
        if do_seek:
            try:
                decrypter.range_seek(offset, io.SEEK_SET, limit)
            except Exception:
                decrypter.close()
                raise
        return decrypter


class Encrypter:
    """A readable stream producing the header and sealed blocks of its input."""

    def __init__(self, cipher: Cipher, stream: Readable, nonce: bytes | None = None) -> None:
        if nonce is None:
            nonce = os.urandom(FILE_NONCE_SIZE)
        if len(nonce) != FILE_NONCE_SIZE:
            raise CryptError("short read of nonce")
        self._cipher = cipher
        self._in = stream
        self._nonce = int.from_bytes(nonce, "little")
        self._buf = FILE_MAGIC + bytes(nonce)
        self._index = 0
        self._done = False
        self._lock = threading.Lock()

    def _read_once(self, max_size: int) -> bytes:
        if self._done:
            return b""
        if self._index >= len(self._buf):
            block = _read_fill(self._in, BLOCK_DATA_SIZE)
            if not block:
                self._done = True
                self._buf = b""
                return b""
            self._buf = self._cipher._seal(block, self._nonce)
            self._index = 0
            self._nonce = (self._nonce + 1) % _NONCE_MODULUS
        end = len(self._buf) if max_size < 0 else self._index + max_size
        chunk = self._buf[self._index : end]
        self._index += len(chunk)
        return chunk

    def read(self, size: int = -1) -> bytes:
        with self._lock:
            out: list[bytes] = []
            got = 0
            while size < 0 or got < size:
                chunk = self._read_once(-1 if size < 0 else size - got)
                if not chunk:
                    break
                out.append(chunk)
                got += len(chunk)
            return b"".join(out)

    def close(self) -> None:
        """Nothing to release; the input stream stays open."""

    def __enter__(self) -> Encrypter:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class Decrypter:
    """A readable, seekable stream of the plain data inside an encrypted stream."""

    def __init__(
        self,
        cipher: Cipher,
        stream: Readable,
        open_range: OpenRange | None = None,
        limit: int = -1,
    ) -> None:
        self._cipher = cipher
        self._rc: Readable | None = stream
        self._open = open_range
        self._lock = threading.Lock()
        self._state: BaseException | None = None
        self._buf = b""
        self._index = 0
        self._limit = -1
        try:
            header = _read_fill(stream, FILE_HEADER_SIZE)
        except Exception:
            stream.close()
            raise
        if len(header) < FILE_HEADER_SIZE:
            stream.close()
            raise EncryptedFileTooShortError()
        if header[: len(FILE_MAGIC)] != FILE_MAGIC:
            stream.close()
            raise BadMagicError()
        self._initial_nonce = int.from_bytes(header[len(FILE_MAGIC) :], "little")
        self._nonce = self._initial_nonce
        self._limit = limit

    def _finish(self, err: BaseException) -> BaseException:
        if self._state is not None:
            return self._state
        self._state = err
        return err

    def _fail(self, err: BaseException) -> BaseException:
        state = self._finish(err)
        return err if state is _END else state

    def _fill_buffer(self) -> bool:
        assert self._rc is not None
        data = _read_fill(self._rc, BLOCK_SIZE)
        if not data:
            return False
        if len(data) <= BLOCK_HEADER_SIZE:
            raise EncryptedFileBadHeaderError()
        plain = self._cipher._open(data, self._nonce)
        if plain is None:
            plain = bytes(len(data) - BLOCK_HEADER_SIZE)
        self._buf = plain
        self._index = 0
        self._nonce = (self._nonce + 1) % _NONCE_MODULUS
        return True

    def _read_once(self, max_size: int) -> bytes:
        if self._state is not None:
            if self._state is _END:
                return b""
            raise self._state
        if self._index >= len(self._buf):
            try:
                filled = self._fill_buffer()
            except Exception as exc:
                raise self._fail(exc)
            if not filled:
                self._finish(_END)
                return b""
        to_copy = len(self._buf) - self._index
        if self._limit >= 0:
            to_copy = min(to_copy, self._limit)
        if max_size >= 0:
            to_copy = min(to_copy, max_size)
        chunk = self._buf[self._index : self._index + to_copy]
        self._index += len(chunk)
        if self._limit >= 0:
            self._limit -= len(chunk)
            if self._limit == 0:
                self._finish(_END)
        return chunk

    def read(self, size: int = -1) -> bytes:
        with self._lock:
            out: list[bytes] = []
            got = 0
            while size < 0 or got < size:
                chunk = self._read_once(-1 if size < 0 else size - got)
                if not chunk:
                    break
                out.append(chunk)
                got += len(chunk)
            return b"".join(out)

    def range_seek(self, offset: int, whence: int = io.SEEK_SET, limit: int = -1) -> int:
        """Move to offset from the start and read at most limit bytes from there."""
        with self._lock:
            if self._open is None:
                raise self._fail(CryptError("can't seek - not initialised with a range opener"))
            if whence != io.SEEK_SET:
                raise self._fail(CryptError("can only seek from the start"))
            if self._state is _END:
                self._state = None
                self._buf = b""
                self._index = 0
            elif self._state is not None:
                raise self._state

            underlying_offset, underlying_limit, discard, blocks = calculate_underlying(
                offset, limit
            )
            self._nonce = (self._initial_nonce + blocks) % _NONCE_MODULUS
            previous = self._rc
            try:
                stream = self._open(underlying_offset, underlying_limit)
            except Exception as exc:
                raise self._fail(
                    CryptError(f"couldn't reopen file with offset and limit: {exc}")
                ) from exc
            if previous is not None and previous is not stream:
                previous.close()
            self._rc = stream

            try:
                filled = self._fill_buffer()
            except Exception as exc:
                raise self._fail(exc)
            if not filled:
                self._finish(_END)
                return offset
            if discard > len(self._buf):
                raise self._fail(BadSeekError())
            self._index = discard
            self._limit = limit
            return offset

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return self.range_seek(offset, whence, -1)

    def close(self) -> None:
        """Close the underlying stream; closing twice raises FileClosedError."""
        with self._lock:
            if isinstance(self._state, FileClosedError):
                raise self._state
            self._state = FileClosedError()
            self._buf = b""
            if self._rc is not None:
                self._rc.close()

    def __enter__(self) -> Decrypter:
        return self

    def __exit__(self, *exc: object) -> None:
        if not isinstance(self._state, FileClosedError):
            self.close()


def calculate_underlying(offset: int, limit: int) -> tuple[int, int, int, int]:
    """Map a plain range to (underlying offset, underlying limit, discard, blocks)."""
    blocks, discard = divmod(offset, BLOCK_DATA_SIZE)
    underlying_offset = FILE_HEADER_SIZE + blocks * BLOCK_SIZE
    underlying_limit = -1
    if limit >= 0:
        bytes_to_read = limit - (BLOCK_DATA_SIZE - discard)
        blocks_to_read = 1
        if bytes_to_read > 0:
            extra, end_bytes = divmod(bytes_to_read, BLOCK_DATA_SIZE)
            if end_bytes:
                extra += 1
            blocks_to_read += extra
        underlying_limit = blocks_to_read * BLOCK_SIZE
    return underlying_offset, underlying_limit, discard, blocks


def encrypted_size(size: int) -> int:
    blocks, residue = divmod(size, BLOCK_DATA_SIZE)
    result = FILE_HEADER_SIZE + blocks * BLOCK_SIZE
    if residue:
        result += BLOCK_HEADER_SIZE + residue
    return result


def decrypted_size(size: int) -> int:
    size -= FILE_HEADER_SIZE
    if size < 0:
        raise EncryptedFileTooShortError()
    blocks, residue = divmod(size, BLOCK_SIZE)
    result = blocks * BLOCK_DATA_SIZE
    if residue:
        residue -= BLOCK_HEADER_SIZE
        if residue <= 0:
            raise EncryptedFileBadHeaderError()
    return result + residue