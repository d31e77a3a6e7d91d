"""
Enumerations for Severity, Span Kinds, Span Status Codes, and Anti-Pattern Kinds

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from enum import Enum, IntEnum

from config import SEVERITY_WEIGHTS

class Severity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

    @classmethod
    def from_thresholds(
        cls,
        value: float,
        medium: float,
        high: float,
        critical: float,
    ) -> Severity | None:
        # every bound is exclusive; ``medium`` is the flag threshold and gates
        # the upper bands, so raising it above ``high`` suppresses them too
        if value <= medium:
            return None
        if value > critical:
            return cls.critical
        if value > high:
            return cls.high
        return cls.medium

    def weight(self) -> int:
        return SEVERITY_WEIGHTS[self.value]

    # str ordering would rank alphabetically; severities rank by weight
    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.weight() < other.weight()

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.weight() <= other.weight()

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.weight() > other.weight()

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.weight() >= other.weight()


class SpanKind(IntEnum):
    internal = 0
    server = 1
    client = 2
    producer = 3
    consumer = 4


class StatusCode(IntEnum):
    unset = 0
    ok = 1
    error = 2


class PatternKind(str, Enum):
    dominant_process = "dominant_process"
    tight_loop = "tight_loop"
    transfer_bottleneck = "transfer_bottleneck"
