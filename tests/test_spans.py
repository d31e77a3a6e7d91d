"""
Test cases for span records, W3C trace context parsing, and tracer-side span construction.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import dataclasses

import pytest

from engine.clock import LamportClock
from engine.enums import SpanKind, StatusCode
from engine.exceptions import SpanValidationError, TraceContextError
from engine.spans import Span, SpanBuilder, TraceContext, serialize_map


def _span(**overrides) -> Span:
    fields = dict(
        trace_id=b"\x01" * 16,
        span_id=b"\x02" * 8,
        parent_span_id=None,
        name="read",
        start_time_nanos=1000,
        end_time_nanos=2000,
        logical_clock=42,
    )
    fields.update(overrides)
    return Span.create(**fields)


def test_span_creation_and_duration():
    span = _span(attributes={"syscall.fd": "3"}, resource={"service.name": "tracewise"}, process_id=1234, thread_id=5678)
    assert span.duration_nanos == 1000
    assert span.kind == SpanKind.internal
    assert span.status_code == StatusCode.unset
    assert span.parse_attributes() == {"syscall.fd": "3"}
    assert span.parse_resource() == {"service.name": "tracewise"}
    assert span.process_id == 1234
    assert span.thread_id == 5678


def test_duration_saturates_at_zero():
    span = _span(start_time_nanos=5000, end_time_nanos=1000)
    assert span.duration_nanos == 0


def test_span_is_immutable():
    span = _span()
    with pytest.raises(dataclasses.FrozenInstanceError):
        span.name = "write"


def test_hex_ids_and_root_checks():
    span = _span(
        trace_id=bytes.fromhex("4bf92f3c7b644bf92f3c7b644bf92f3c"),
        span_id=bytes.fromhex("00f067aa0ba902b7"),
    )
    assert span.trace_id_hex == "4bf92f3c7b644bf92f3c7b644bf92f3c"
    assert span.span_id_hex == "00f067aa0ba902b7"
    assert span.parent_span_id_hex is None
    assert span.is_root()

    child = _span(span_id=b"\x03" * 8, parent_span_id=b"\x02" * 8)
    assert not child.is_root()
    assert child.parent_span_id_hex == "0202020202020202"


def test_is_error():
    assert _span(status_code=StatusCode.error, status_message="boom").is_error()
    assert not _span(status_code=StatusCode.ok).is_error()


@pytest.mark.parametrize(
    "overrides",
    [
        {"trace_id": b"\x01" * 8},
        {"span_id": b"\x02" * 4},
        {"parent_span_id": b"\x02" * 16},
    ],
)
def test_wrong_id_sizes_rejected(overrides):
    with pytest.raises(SpanValidationError):
        _span(**overrides)


def test_attribute_serialization_is_canonical():
    assert serialize_map({"b": 1, "a": 2}) == serialize_map({"a": 2, "b": 1})
    assert serialize_map(None) == "{}"


def test_malformed_attribute_blob_parses_empty():
    span = dataclasses.replace(_span(), attributes_json="not json")
    assert span.parse_attributes() == {}


def test_trace_context_parse_and_render():
    header = "00-4bf92f3c7b644bf92f3c7b644bf92f3c-00f067aa0ba902b7-01"
    ctx = TraceContext.parse(header)
    assert ctx.version == 0
    assert ctx.trace_id.hex() == "4bf92f3c7b644bf92f3c7b644bf92f3c"
    assert ctx.parent_id.hex() == "00f067aa0ba902b7"
    assert ctx.is_sampled()
    assert str(ctx) == header


@pytest.mark.parametrize(
    "header",
    [
        "garbage",
        "01-4bf92f3c7b644bf92f3c7b644bf92f3c-00f067aa0ba902b7-01",
        "00-4bf92f3c7b644bf92f3c7b644bf92f3-00f067aa0ba902b7-01",
        "00-zzf92f3c7b644bf92f3c7b644bf92f3c-00f067aa0ba902b7-01",
        "00-00000000000000000000000000000000-00f067aa0ba902b7-01",
        "00-4bf92f3c7b644bf92f3c7b644bf92f3c-0000000000000000-01",
        "00-4bf92f3c7b644bf92f3c7b644bf92f3c-00f067aa0ba902b7-1",
    ],
)
def test_trace_context_rejects_invalid_headers(header):
    with pytest.raises(TraceContextError):
        TraceContext.parse(header)


def test_trace_context_from_env():
    header = "00-4bf92f3c7b644bf92f3c7b644bf92f3c-00f067aa0ba902b7-00"
    ctx = TraceContext.from_env({"OTEL_TRACEPARENT": header})
    assert ctx is not None
    assert not ctx.is_sampled()
    assert TraceContext.from_env({}) is None
    assert TraceContext.from_env({"TRACEPARENT": "bad"}) is None


def test_builder_stamps_logical_clock_and_parents():
    clock = LamportClock()
    builder = SpanBuilder(clock, process_id=10, thread_id=11)
    root = builder.record("main", 0, 1000)
    child = builder.record("read", 100, 200, parent=root, attributes={"fd": 3})

    assert root.logical_clock == 0
    assert child.logical_clock == 1
    assert clock.now() == 2
    assert root.is_root()
    assert child.parent_span_id == root.span_id
    assert child.trace_id == root.trace_id
    assert child.process_id == 10
    assert child.parse_attributes() == {"fd": 3}
    assert root.span_id != child.span_id


def test_builder_from_context_joins_remote_trace():
    ctx = TraceContext.parse("00-4bf92f3c7b644bf92f3c7b644bf92f3c-00f067aa0ba902b7-01")
    builder = SpanBuilder.from_context(ctx, LamportClock())
    span = builder.record("main", 0, 10)
    assert span.trace_id == ctx.trace_id
    assert span.parent_span_id == ctx.parent_id
