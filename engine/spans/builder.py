"""
Tracer-side span construction, stamping each span with the session's logical clock and a fresh span identifier.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from engine.clock import LamportClock
from engine.enums import SpanKind, StatusCode
from engine.spans.context import TraceContext
from engine.spans.record import SPAN_ID_SIZE, TRACE_ID_SIZE, Span


def _random_id(size: int) -> bytes:
    while True:
        value = os.urandom(size)
        if any(value):
            return value


class SpanBuilder:
    """Creates spans for one trace, ticking the shared clock once per span."""

    def __init__(
        self,
        clock: LamportClock,
        trace_id: bytes | None = None,
        process_id: int = 0,
        thread_id: int = 0,
        remote_parent: bytes | None = None,
    ) -> None:
        self.clock = clock
        self.trace_id = bytes(trace_id) if trace_id is not None else _random_id(TRACE_ID_SIZE)
        self.process_id = process_id
        self.thread_id = thread_id
        self.remote_parent = remote_parent

    @classmethod
    def from_context(
        cls,
        context: TraceContext,
        clock: LamportClock,
        process_id: int = 0,
        thread_id: int = 0,
    ) -> SpanBuilder:
        return cls(
            clock,
            trace_id=context.trace_id,
            process_id=process_id,
            thread_id=thread_id,
            remote_parent=context.parent_id,
        )

    def record(
        self,
        name: str,
        start_time_nanos: int,
        end_time_nanos: int,
        parent: Span | bytes | None = None,
        attributes: Mapping[str, Any] | None = None,
        status_code: StatusCode = StatusCode.ok,
        status_message: str = "",
        kind: SpanKind = SpanKind.internal,
        process_id: Optional[int] = None,
        thread_id: Optional[int] = None,
        span_id: bytes | None = None,
    ) -> Span:
        if isinstance(parent, Span):
            parent_id: Optional[bytes] = parent.span_id
        elif parent is not None:
            parent_id = bytes(parent)
        else:
            parent_id = self.remote_parent

        return Span.create(
            trace_id=self.trace_id,
            span_id=span_id if span_id is not None else _random_id(SPAN_ID_SIZE),
            parent_span_id=parent_id,
            name=name,
            start_time_nanos=start_time_nanos,
            end_time_nanos=end_time_nanos,
            logical_clock=self.clock.tick(),
            process_id=self.process_id if process_id is None else process_id,
            thread_id=self.thread_id if thread_id is None else thread_id,
            kind=kind,
            status_code=status_code,
            status_message=status_message,
            attributes=attributes,
        )
