"""
Explicit random-generator state for distribution kernels.

Each call to a distribution kernel builds a fresh generator from
`RandomState.next_seed()`. Seeds advance by one per call, so successive
draws inside a process are decorrelated. Without a fixed base seed the
sequence is offset by wall-clock time and is not reproducible across runs;
with one, the whole sequence is deterministic.

This is not a cryptographic source of randomness.
"""

from __future__ import annotations

import threading
import time
from typing import Optional


class RandomState:
    """
    Monotonically advancing seed source.

    Parameters
    ----------
    seed : Optional[int]
        Fixed base seed. When None, the base is `int(time.time())` sampled
        at each draw.

    Notes
    -----
    The counter is guarded by a lock so one state can be shared by several
    threads, although kernels issued concurrently still race on the tensors
    they write.
    """

    __slots__ = ("_seed", "_counter", "_lock")

    def __init__(self, seed: Optional[int] = None) -> None:
        self._seed = None if seed is None else int(seed)
        self._counter = 0
        self._lock = threading.Lock()

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    @property
    def counter(self) -> int:
        """Number of seeds handed out so far."""
        return self._counter

    def next_seed(self) -> int:
        """Advance the counter and return the next seed (non-negative, < 2**32)."""
        with self._lock:
            self._counter += 1
            counter = self._counter
        base = self._seed if self._seed is not None else int(time.time())
        return (base + counter) % (2**32)

    def reset(self, seed: Optional[int] = None) -> None:
        """Restart the sequence, optionally with a new base seed."""
        with self._lock:
            self._seed = None if seed is None else int(seed)
            self._counter = 0

    def __repr__(self) -> str:
        return f"RandomState(seed={self._seed!r}, counter={self._counter})"


__all__ = [RandomState.__name__]
