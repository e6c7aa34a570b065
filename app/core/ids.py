"""Primary key generation for persisted records."""

from __future__ import annotations

import secrets
import string
import threading
import time

ID_PREFIX = "c"
ID_LENGTH = 24

_BASE36 = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    digits: list[str] = []
    while True:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
        if value == 0:
            return "".join(reversed(digits))


class _MillisecondSequence:
    """Counter that restarts every millisecond, so ids from one tick stay ordered."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tick = 0
        self._value = 0

    def next(self, tick: int) -> int:
        with self._lock:
            if tick == self._tick:
                self._value += 1
            else:
                self._tick = tick
                self._value = 0
            return self._value


_sequence = _MillisecondSequence()


def generate_cuid(length: int = ID_LENGTH) -> str:
    """Lower-case alphanumeric id: prefix, base36 timestamp, counter, random tail."""
    tick = time.time_ns() // 1_000_000
    body_length = max(length - len(ID_PREFIX), 8)
    ordered = to_base36(tick) + to_base36(_sequence.next(tick)).rjust(4, "0")
    tail = "".join(secrets.choice(_BASE36) for _ in range(max(body_length - len(ordered), 0)))
    return ID_PREFIX + (ordered + tail)[:body_length]
