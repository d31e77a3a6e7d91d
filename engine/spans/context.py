"""
W3C trace context parsing, used to join a traced program to a trace started by its caller.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from engine.exceptions import TraceContextError

log = logging.getLogger(__name__)

_HEX = re.compile(r"^[0-9a-fA-F]+$")

SAMPLED_FLAG = 0x01


def _hex_field(value: str, length: int, error: str) -> bytes:
    if len(value) != length or not _HEX.match(value):
        raise TraceContextError(error)
    return bytes.fromhex(value)


@dataclass(frozen=True)
class TraceContext:
    version: int
    trace_id: bytes
    parent_id: bytes
    trace_flags: int

    @classmethod
    def parse(cls, traceparent: str) -> TraceContext:
        parts = traceparent.strip().split("-")
        if len(parts) != 4:
            raise TraceContextError(
                "Invalid traceparent format (expected: version-trace_id-parent_id-flags)"
            )
        version_raw, trace_raw, parent_raw, flags_raw = parts

        version = _hex_field(version_raw, 2, "Invalid version (must be 00)")[0]
        if version != 0:
            raise TraceContextError("Invalid version (must be 00)")

        trace_id = _hex_field(trace_raw, 32, "Invalid trace_id (must be 32 hex characters)")
        if not any(trace_id):
            raise TraceContextError("Trace ID cannot be all zeros")

        parent_id = _hex_field(parent_raw, 16, "Invalid parent_id (must be 16 hex characters)")
        if not any(parent_id):
            raise TraceContextError("Parent ID cannot be all zeros")

        trace_flags = _hex_field(flags_raw, 2, "Invalid trace_flags (must be 2 hex characters)")[0]
        return cls(version=version, trace_id=trace_id, parent_id=parent_id, trace_flags=trace_flags)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Optional[TraceContext]:
        from config import settings

        if environ is None:
            environ = os.environ
        for name in settings.traceparent_env_vars:
            raw = environ.get(name)
            if raw is None:
                continue
            try:
                return cls.parse(raw)
            except TraceContextError as exc:
                log.warning("Ignoring %s=%r: %s", name, raw, exc.reason)
                return None
        return None

    def is_sampled(self) -> bool:
        return bool(self.trace_flags & SAMPLED_FLAG)

    def __str__(self) -> str:
        return f"{self.version:02x}-{self.trace_id.hex()}-{self.parent_id.hex()}-{self.trace_flags:02x}"
