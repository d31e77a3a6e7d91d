"""
Run-length compression of span batches, merging maximal runs of identical consecutive operations into summary segments that can be expanded back into synthetic spans.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from config import settings
from engine.enums import StatusCode
from engine.exceptions import CompressionError
from engine.spans import Span
from engine.spans.record import SPAN_ID_SIZE

log = logging.getLogger(__name__)

_SPAN_ID_SPACE = 2 ** (SPAN_ID_SIZE * 8) - 1


@dataclass(frozen=True)
class RleSegment:
    operation_name: str
    count: int
    start_logical_clock: int
    end_logical_clock: int
    total_duration: int
    avg_duration: int
    min_duration: int
    max_duration: int
    common_attributes: str
    process_id: int
    thread_id: int
    trace_id: bytes

    def compression_ratio(self) -> float:
        return float(self.count)

    def duration_variance(self) -> int:
        return max(self.max_duration - self.min_duration, 0)

    def is_tight_loop(self) -> bool:
        return self.count > settings.pattern_loop_threshold


@dataclass
class CompressedTrace:
    segments: List[RleSegment] = field(default_factory=list)
    uncompressed: List[Span] = field(default_factory=list)
    original_count: int = 0

    def compression_ratio(self) -> float:
        compressed_count = len(self.segments) + len(self.uncompressed)
        if compressed_count == 0:
            return 1.0
        return self.original_count / compressed_count

    def storage_savings_percent(self) -> float:
        ratio = self.compression_ratio()
        if ratio <= 1.0:
            return 0.0
        return ((ratio - 1.0) / ratio) * 100.0

    def total_span_count(self) -> int:
        return sum(s.count for s in self.segments) + len(self.uncompressed)

    def decompress(self) -> List[Span]:
        spans: List[Span] = list(self.uncompressed)
        for segment in self.segments:
            spans.extend(decompress_segment(segment))
        spans.sort(key=lambda s: s.logical_clock)
        return spans


def _same_run(first: Span, other: Span) -> bool:
    # exact blob equality: semantically equal but differently serialized attributes do not merge
    return (
        other.name == first.name
        and other.process_id == first.process_id
        and other.thread_id == first.thread_id
        and other.attributes_json == first.attributes_json
    )


def _segment(run: Sequence[Span]) -> RleSegment:
    first, last = run[0], run[-1]
    durations = np.fromiter((s.duration_nanos for s in run), dtype=np.int64, count=len(run))
    total = int(durations.sum())
    return RleSegment(
        operation_name=first.name,
        count=len(run),
        start_logical_clock=first.logical_clock,
        end_logical_clock=last.logical_clock,
        total_duration=total,
        avg_duration=total // len(run),
        min_duration=int(durations.min()),
        max_duration=int(durations.max()),
        common_attributes=first.attributes_json,
        process_id=first.process_id,
        thread_id=first.thread_id,
        trace_id=first.trace_id,
    )


def compress_spans(spans: Sequence[Span], min_run_length: int | None = None) -> CompressedTrace:
    if min_run_length is None:
        min_run_length = settings.rle_min_run_length
    if min_run_length < 1:
        raise CompressionError(f"min_run_length must be >= 1, got {min_run_length}")
    if not spans:
        return CompressedTrace()

    ordered = sorted(spans, key=lambda s: s.logical_clock)
    result = CompressedTrace(original_count=len(ordered))

    i = 0
    while i < len(ordered):
        first = ordered[i]
        j = i + 1
        while j < len(ordered) and _same_run(first, ordered[j]):
            j += 1

        run = ordered[i:j]
        if len(run) >= min_run_length:
            result.segments.append(_segment(run))
        else:
            result.uncompressed.extend(run)
        i = j

    log.debug(
        "compress_spans original=%d segments=%d uncompressed=%d ratio=%.2f",
        result.original_count, len(result.segments), len(result.uncompressed), result.compression_ratio(),
    )
    return result


def compress_trace(spans: Sequence[Span]) -> CompressedTrace:
    return compress_spans(spans, settings.rle_min_run_length)


def _synthetic_span_id(logical_clock: int) -> bytes:
    # keyed by clock so segments of one trace never share ids; never all zeros.
    # Ids can still coincide with real span ids left in the uncompressed output.
    return (logical_clock % _SPAN_ID_SPACE + 1).to_bytes(SPAN_ID_SIZE, "big")


def decompress_segment(segment: RleSegment) -> List[Span]:
    spans: List[Span] = []
    tick_ns = settings.rle_synthetic_tick_ns

    for i in range(segment.count):
        logical_clock = segment.start_logical_clock + i
        start_time = logical_clock * tick_ns
        spans.append(Span(
            trace_id=segment.trace_id,
            span_id=_synthetic_span_id(logical_clock),
            parent_span_id=None,
            name=segment.operation_name,
            start_time_nanos=start_time,
            end_time_nanos=start_time + segment.avg_duration,
            logical_clock=logical_clock,
            process_id=segment.process_id,
            thread_id=segment.thread_id,
            status_code=StatusCode.ok,
            attributes_json=segment.common_attributes,
        ))

    return spans
