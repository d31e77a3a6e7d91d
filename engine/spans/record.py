"""
Span record: the immutable unit of observation produced by the tracer and consumed by every analysis in the engine.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from engine.enums import SpanKind, StatusCode
from engine.exceptions import SpanValidationError

TRACE_ID_SIZE = 16
SPAN_ID_SIZE = 8


def serialize_map(values: Mapping[str, Any] | None) -> str:
    # sorted keys and fixed separators keep equal maps byte-identical
    return json.dumps(dict(values or {}), sort_keys=True, separators=(",", ":"), default=str)


def _parse_map(blob: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(blob)
    except (TypeError, ValueError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


@dataclass(frozen=True)
class Span:
    trace_id: bytes
    span_id: bytes
    parent_span_id: Optional[bytes]
    name: str
    start_time_nanos: int
    end_time_nanos: int
    logical_clock: int
    process_id: int = 0
    thread_id: int = 0
    kind: SpanKind = SpanKind.internal
    status_code: StatusCode = StatusCode.unset
    status_message: str = ""
    attributes_json: str = "{}"
    resource_json: str = "{}"

    def __post_init__(self) -> None:
        if len(self.trace_id) != TRACE_ID_SIZE:
            raise SpanValidationError(
                f"trace_id must be {TRACE_ID_SIZE} bytes, got {len(self.trace_id)}"
            )
        if len(self.span_id) != SPAN_ID_SIZE:
            raise SpanValidationError(
                f"span_id must be {SPAN_ID_SIZE} bytes, got {len(self.span_id)}"
            )
        if self.parent_span_id is not None and len(self.parent_span_id) != SPAN_ID_SIZE:
            raise SpanValidationError(
                f"parent_span_id must be {SPAN_ID_SIZE} bytes, got {len(self.parent_span_id)}"
            )

    @classmethod
    def create(
        cls,
        trace_id: bytes,
        span_id: bytes,
        parent_span_id: Optional[bytes],
        name: str,
        start_time_nanos: int,
        end_time_nanos: int,
        logical_clock: int,
        process_id: int = 0,
        thread_id: int = 0,
        kind: SpanKind = SpanKind.internal,
        status_code: StatusCode = StatusCode.unset,
        status_message: str = "",
        attributes: Mapping[str, Any] | None = None,
        resource: Mapping[str, Any] | None = None,
    ) -> Span:
        return cls(
            trace_id=bytes(trace_id),
            span_id=bytes(span_id),
            parent_span_id=bytes(parent_span_id) if parent_span_id is not None else None,
            name=name,
            start_time_nanos=int(start_time_nanos),
            end_time_nanos=int(end_time_nanos),
            logical_clock=int(logical_clock),
            process_id=int(process_id),
            thread_id=int(thread_id),
            kind=kind,
            status_code=status_code,
            status_message=status_message,
            attributes_json=serialize_map(attributes),
            resource_json=serialize_map(resource),
        )

    @property
    def duration_nanos(self) -> int:
        return max(self.end_time_nanos - self.start_time_nanos, 0)

    @property
    def trace_id_hex(self) -> str:
        return self.trace_id.hex()

    @property
    def span_id_hex(self) -> str:
        return self.span_id.hex()

    @property
    def parent_span_id_hex(self) -> Optional[str]:
        return self.parent_span_id.hex() if self.parent_span_id is not None else None

    def parse_attributes(self) -> Dict[str, Any]:
        return _parse_map(self.attributes_json)

    def parse_resource(self) -> Dict[str, Any]:
        return _parse_map(self.resource_json)

    def is_root(self) -> bool:
        return self.parent_span_id is None

    def is_error(self) -> bool:
        return self.status_code == StatusCode.error
