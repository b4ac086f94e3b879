"""Chunked encryption, range parsing, part readers and RPC retry for a channel-backed drive."""

__version__ = "0.1.0"