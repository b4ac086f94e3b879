# teldrive

Building blocks for a file drive that keeps its files as chunks in chat
channels. The package gives you:

- streamed block encryption of file data, with seekable decryption;
- parsing of HTTP `Range` headers;
- readers that fetch byte ranges chunk by chunk and join parts back into one
  stream, decrypting them when needed;
- selection of the parts that cover a byte range;
- round-robin hand-out of bots and connected clients per channel;
- retry and recovery wrappers for remote calls, with exponential backoff;
- durations with day, week, month and year suffixes;
- the record and value types these pieces pass around.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Encryption

`teldrive.crypt.Cipher` derives its keys from a password and a salt with
scrypt. Data is sealed in blocks of 64 KiB behind a short header.

```python
import io
from teldrive.crypt import Cipher, encrypted_size, decrypted_size

cipher = Cipher("password", "salt")
sealed = cipher.encrypt_data(io.BytesIO(b"hello")).read()
assert len(sealed) == encrypted_size(5)
plain = cipher.decrypt_data(io.BytesIO(sealed)).read()
assert plain == b"hello"
assert decrypted_size(len(sealed)) == 5
```

`Cipher.decrypt_data_seek(open_range, offset, limit)` decrypts only part of a
file. `open_range(offset, limit)` is called with positions in the encrypted
data and must return a readable stream over them; a negative `limit` means "to
the end". The returned `Decrypter` also supports `seek` and `range_seek`.
Errors are raised as subclasses of `CryptError`: `EncryptedFileTooShortError`,
`EncryptedFileBadHeaderError`, `BadMagicError`, `FileClosedError` and
`BadSeekError`.

## Range headers

```python
from teldrive.http_range import parse

ranges = parse("bytes=0-99", 1000)
print(ranges[0].start, ranges[0].end)   # 0 99
```

A header without `=` raises `InvalidRangeError`. A header with no satisfiable
range raises `NoOverlapError`.

## Reading parts

`teldrive.reader` reads file parts through a function you supply,
`fetch_chunk(location, offset, limit) -> bytes`, which returns the bytes of one
aligned request.

- `TGReader(fetch_chunk, part)` reads the inclusive range `part.start` to
  `part.end` of one part.
- `LinearReader(fetch_chunk, parts, content_length)` reads several parts in turn.
- `DecryptedReader(fetch_chunk, parts, content_length, encryption_key)` does the
  same for encrypted parts. It uses each part's `salt`.

`teldrive.parts.ranged_parts(parts, start_byte, end_byte)` picks the parts, of
type `teldrive.types.Part`, that cover an inclusive byte range and sets `start`
and `end` within each. The same module has `rand_int64()` and the cache key
helpers `messages_cache_key`, `channel_cache_key`, `bots_cache_key` and
`session_cache_key`.

## Workers

`teldrive.workers.UploadWorker` hands out the bot tokens of a channel in turn.
`StreamWorker(client_factory, connect)` does the same with clients: it builds
one client per token and connects each the first time it is handed out.
`StreamWorker.user_worker(client, user_id)` keeps a single connected client for
a user.

## Retry and recovery

`teldrive.rpc_middleware` wraps callables:

- `Retry(max_attempts, *error_types)` repeats a call that fails with an
  `RPCError` of one of the given types or of a built-in set of transient types.
  When the attempts run out it raises `RetryLimitError`.
- `Recovery(is_cancelled, backoff, sleep)` retries with backoff on any failure
  that is neither an `RPCError` nor a cancellation. Wrap an error in
  `PermanentError` to stop it being retried.
- `ExponentialBackoff` gives growing, randomised delays. `default_backoff()`
  returns one with multiplier 1.1 and a two-minute limit.

## Durations

```python
from teldrive.duration import parse_duration

str(parse_duration("36h"))   # "1.5d"
str(parse_duration("2w"))    # "2w"
str(parse_duration("off"))   # "off"
```

`parse_go_duration` accepts only clock forms such as `1h30m`.
`duration_from_json` takes a JSON number of nanoseconds or a JSON string.

## Records and types

- `teldrive.models` holds dataclasses for bots, channels, files, sessions,
  uploads and users. `parts_to_json` and `parts_from_json` convert a file's
  parts to and from JSON.
- `teldrive.types` holds `AppError`, `Part`, `JWTClaims` (with `to_dict` and
  `from_dict`), `SessionData`, `SocketMessage` and `BotInfo`.
- `teldrive.dberrors` has `NotFoundError` and `KeyConflictError`.
  `is_key_conflict` also recognises database errors that carry the
  unique-violation SQL state `23505`.
- `teldrive.checksum` gives hex MD5 digests of bytes, strings and streams.

## What this package does not do

The package has no command-line tool, no HTTP server or API routes, and no
connection to a chat network. The readers and workers work only through the
callables you pass in. It does not store anything: there is no database layer,
no key-value store and no cache. It also does not encode or decode session
tokens. `JWTClaims` only converts claims to and from plain dictionaries.