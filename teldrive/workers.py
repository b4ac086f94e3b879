"""Round-robin selection of bots and connected clients per channel."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


class UploadWorker:
    """Hands out bot tokens of a channel in turn."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._bots: dict[int, list[str]] = {}
        self._curr_idx: dict[int, int] = {}

    def set(self, bots: list[str], channel_id: int) -> None:
        """Register the bots of a channel; the previous registration is dropped."""
        with self._lock:
            if channel_id not in self._bots:
                self._bots = {channel_id: list(bots)}
                self._curr_idx = {channel_id: 0}

    def next(self, channel_id: int) -> tuple[str, int]:
        """The next bot token of the channel and its index."""
        with self._lock:
            bots = self._bots.get(channel_id)
            if not bots:
                raise LookupError(f"no bots registered for channel {channel_id}")
            index = self._curr_idx.get(channel_id, 0)
            self._curr_idx[channel_id] = (index + 1) % len(bots)
            return bots[index], index


@dataclass
class WorkerClient:
    tg: Any
    stop: Callable[[], Any] | None = None
    status: str = "idle"


class StreamWorker:
    """Hands out clients of a channel in turn, connecting each on first use."""

    def __init__(self, client_factory: Callable[[str], Any],
                 connect: Callable[[Any], Callable[[], Any]]) -> None:
        self._client_factory = client_factory
        self._connect = connect
        self._lock = threading.Lock()
        self._bots: dict[int, list[str]] = {}
        self._clients: dict[int, list[WorkerClient]] = {}
        self._curr_idx: dict[int, int] = {}

    def _start(self, client: WorkerClient) -> None:
        if client.status == "idle":
            client.stop = self._connect(client.tg)
            client.status = "running"

    def set(self, bots: list[str], channel_id: int) -> None:
        """Create clients for the bots of a channel; earlier ones are dropped."""
        with self._lock:
            if channel_id not in self._bots:
                self._bots = {channel_id: list(bots)}
                self._clients = {
                    channel_id: [WorkerClient(tg=self._client_factory(t)) for t in bots]
                }
                self._curr_idx = {channel_id: 0}

    def next(self, channel_id: int) -> tuple[WorkerClient, int]:
        """The next client of the channel, connected, and its index."""
        with self._lock:
            clients = self._clients.get(channel_id)
            if not clients:
                raise LookupError(f"no clients registered for channel {channel_id}")
            index = self._curr_idx.get(channel_id, 0)
            client = clients[index]
            self._curr_idx[channel_id] = (index + 1) % len(clients)
            self._start(client)
            return client, index

    def user_worker(self, client: Any, user_id: int) -> WorkerClient:
        """The connected client kept for a user, registering the given one if needed."""
        with self._lock:
            if user_id not in self._clients:
                self._clients = {user_id: [WorkerClient(tg=client)]}
            worker = self._clients[user_id][0]
            self._start(worker)
            return worker