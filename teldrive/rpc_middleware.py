"""Retry and recovery wrappers around RPC invocations, with exponential backoff."""

from __future__ import annotations

import functools
import random
import time
from collections.abc import Callable
from typing import Any, Protocol

INTERNAL_ERRORS = (
    "Timedout",
    "No workers running",
    "RPC_CALL_FAIL",
    "RPC_MCGET_FAIL",
    "WORKER_BUSY_TOO_LONG_RETRY",
)


class RPCError(Exception):
    """An error answered by the remote side, identified by its type string."""

    def __init__(self, code: int, type: str, message: str = "") -> None:
        self.code = code
        self.type = type
        self.message = message or type
        super().__init__(f"rpc error code {code}: {self.message}")


class RetryLimitError(Exception):
    def __init__(self, attempts: int) -> None:
        super().__init__(f"retry limit reached after {attempts} attempts")
        self.attempts = attempts


class PermanentError(Exception):
    """Wraps an error that must not be retried."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(str(error))
        self.error = error


def _chain(err: BaseException | None):
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__


def is_rpc_error(err: BaseException | None, *args: str) -> bool:
    """True if err or a cause is an RPCError, of one of the given types when any are given."""
    for item in _chain(err):
        if isinstance(item, RPCError):
            return not args or item.type in args
    return False


def has_error(err: BaseException | None, target: str) -> bool:
    """True if err or one of its causes has exactly the message target."""
    return any(str(item) == target for item in _chain(err))


class ExponentialBackoff:
    """Growing, randomised delays in seconds that stop after a maximum elapsed time."""

    def __init__(
        self,
        initial_interval: float = 0.5,
        multiplier: float = 1.5,
        max_interval: float = 60.0,
        max_elapsed: float = 900.0,
        randomization: float = 0.5,
    ) -> None:
        self.initial_interval = initial_interval
        self.multiplier = multiplier
        self.max_interval = max_interval
        self.max_elapsed = max_elapsed
        self.randomization = randomization
        self.clock: Callable[[], float] = time.monotonic
        self.reset()

    def reset(self) -> None:
        self._current = self.initial_interval
        self._start = self.clock()

    def _randomized(self, interval: float) -> float:
        if self.randomization == 0:
            return interval
        delta = self.randomization * interval
        low = interval - delta
        high = interval + delta
        return low + random.random() * (high - low)

    def _increment(self) -> None:
        if self._current >= self.max_interval / self.multiplier:
            self._current = self.max_interval
        else:
            self._current *= self.multiplier

    def next_delay(self) -> float | None:
        """The next delay, or None once the elapsed time would pass max_elapsed."""
        elapsed = self.clock() - self._start
        delay = self._randomized(self._current)
        self._increment()
        if self.max_elapsed and elapsed + delay > self.max_elapsed:
            return None
        return delay


def default_backoff() -> ExponentialBackoff:
    """The backoff used for reconnection and recovery."""
    return ExponentialBackoff(multiplier=1.1, max_elapsed=120.0)


class _Backoff(Protocol):
    def reset(self) -> None: ...

    def next_delay(self) -> float | None: ...


class Retry:
    """Repeats a call while it fails with one of the retryable RPC error types."""

    def __init__(self, max_attempts: int, *args: str) -> None:
        self.max_attempts = max_attempts
        self.errors = (*args, *INTERNAL_ERRORS)

    def __call__(self, invoke: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(invoke)
        def wrapped(*call_args: Any, **call_kwargs: Any) -> Any:
            for _ in range(self.max_attempts):
                try:
                    return invoke(*call_args, **call_kwargs)
                except Exception as err:
                    if is_rpc_error(err, *self.errors):
                        continue
                    raise
            raise RetryLimitError(self.max_attempts)

        return wrapped


class Recovery:
    """Retries a call with backoff on failures that are neither RPC errors nor cancellation."""

    def __init__(
        self,
        is_cancelled: Callable[[], bool] | None = None,
        backoff: _Backoff | None = None,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        self.is_cancelled = is_cancelled or (lambda: False)
        self.backoff = backoff if backoff is not None else default_backoff()
        self.sleep = sleep

    def _should_recover(self, err: BaseException) -> bool:
        if self.is_cancelled():
            return False
        return not has_error(err, "context canceled") and not is_rpc_error(err)

    def __call__(self, invoke: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(invoke)
        def wrapped(*call_args: Any, **call_kwargs: Any) -> Any:
            self.backoff.reset()
            while True:
                try:
                    return invoke(*call_args, **call_kwargs)
                except PermanentError as err:
                    raise err.error from err
                except Exception as err:
                    if not self._should_recover(err):
                        raise
                    delay = self.backoff.next_delay()
                    if delay is None:
                        raise
                    self.sleep(delay)

        return wrapped