from __future__ import annotations
import itertools
import random
import time
from typing import Callable, Optional, Protocol as TypingProtocol

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

class IdSource(TypingProtocol):
    def __call__(self) -> str: ...

def to_base36(n: int) -> str:
    if n < 0:
        raise ValueError("base36 encoding needs a non-negative integer")
    digits = []
    while True:
        n, rem = divmod(n, 36)
        digits.append(_ALPHABET[rem])
        if n == 0:
            break
    return "".join(reversed(digits))

class TimeIdSource:
    """
    Short tokens '<ms timestamp base36>-<6 random base36 chars>'.
    Lexicographic order follows creation time while the timestamp width is stable.
    """
    def __init__(self, *, seed: Optional[int] = None, clock: Callable[[], float] = time.time):
        self._rng = random.Random(seed)
        self._clock = clock

    def __call__(self) -> str:
        stamp = to_base36(int(self._clock() * 1000))
        tail = "".join(self._rng.choice(_ALPHABET) for _ in range(6))
        return f"{stamp}-{tail}"

class CounterIdSource:
    """Monotonic ids '0', '1', ... with an optional prefix; deterministic under test."""
    def __init__(self, prefix: str = "", start: int = 0):
        self._prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self._prefix}{next(self._counter)}"

def id_source(name: str) -> IdSource:
    label = name.lower()
    if label == "time":
        return TimeIdSource()
    if label == "counter":
        return CounterIdSource()
    raise ValueError(f"Unknown id source: {name}")
