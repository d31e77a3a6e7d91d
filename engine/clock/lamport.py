"""
Lamport logical clock providing a happens-before ordering between span-producing events, independent of wall-clock skew between threads and processes.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import threading


class LamportClock:
    """Monotonic counter shared by every tracer thread of one session.

    ``tick()`` hands out the current value and advances by one. ``sync(remote)``
    merges a value received from another process so that the next local event
    is ordered after it: ``max(local, remote) + 1``.
    """

    def __init__(self, initial_value: int = 0) -> None:
        self._lock = threading.Lock()
        self._counter = max(0, int(initial_value))

    @classmethod
    def with_value(cls, initial_value: int) -> LamportClock:
        return cls(initial_value)

    def tick(self) -> int:
        with self._lock:
            value = self._counter
            self._counter += 1
            return value

    def sync(self, remote_clock: int) -> None:
        with self._lock:
            self._counter = max(self._counter, int(remote_clock)) + 1

    def now(self) -> int:
        with self._lock:
            return self._counter

    def reset(self) -> None:
        # only meant for tests; a live session never rewinds its clock
        with self._lock:
            self._counter = 0

    def __repr__(self) -> str:
        return f"LamportClock(now={self.now()})"
