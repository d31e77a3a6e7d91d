"""
Response models for trace analysis results handed to output formatters and exporters.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Any, List, Literal, Optional, Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, model_serializer
from engine.enums import PatternKind, Severity


def _coerce(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _coerce(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_coerce(v) for v in obj]
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    return obj


class NpModel(BaseModel):

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        return _coerce(handler(self))


class AntiPattern(NpModel):

    severity: Severity

    @property
    def name(self) -> str:
        raise NotImplementedError

    def description(self) -> str:
        raise NotImplementedError

    def recommendation(self) -> str:
        raise NotImplementedError


class DominantProcess(AntiPattern):

    kind: Literal[PatternKind.dominant_process] = PatternKind.dominant_process
    process_id: int
    critical_path_percentage: float
    total_duration: int

    @property
    def name(self) -> str:
        return "Dominant Process"

    def description(self) -> str:
        return (
            f"Process {self.process_id} dominates critical path "
            f"({self.critical_path_percentage:.1f}% of total, {self.total_duration}ns). "
            "Consider decomposing or load balancing."
        )

    def recommendation(self) -> str:
        return (
            "Decompose the monolithic process into smaller workers. "
            "Use load balancing or sharding to distribute work."
        )


class TightLoop(AntiPattern):

    kind: Literal[PatternKind.tight_loop] = PatternKind.tight_loop
    operation_name: str
    repetition_count: int
    total_duration: int
    node_range: Tuple[int, int]

    @property
    def name(self) -> str:
        return "Tight Loop"

    def description(self) -> str:
        return (
            f"Operation '{self.operation_name}' repeated {self.repetition_count} times "
            f"(total {self.total_duration}ns). Consider batching with vectorized I/O (readv/writev)."
        )

    def recommendation(self) -> str:
        return (
            "Use vectorized I/O (readv/writev) to batch syscalls. "
            "Consider buffering or async I/O to reduce syscall frequency."
        )


class TransferBottleneck(AntiPattern):

    kind: Literal[PatternKind.transfer_bottleneck] = PatternKind.transfer_bottleneck
    transfer_time: int
    compute_time: int
    transfer_percentage: float

    @property
    def name(self) -> str:
        return "Transfer Bottleneck"

    def description(self) -> str:
        return (
            f"GPU memory transfers ({self.transfer_percentage:.1f}% of kernel time) saturate the bus: "
            f"{self.transfer_time}ns transfers vs {self.compute_time}ns compute. Consider kernel fusion."
        )

    def recommendation(self) -> str:
        return (
            "Fuse GPU kernels to reduce transfers. "
            "Use persistent kernels or unified memory. "
            "Minimize host-device data movement."
        )


Finding = Union[DominantProcess, TightLoop, TransferBottleneck]


class CriticalPathSummary(NpModel):

    span_names: List[str]
    nodes: List[int]
    total_duration_ns: int
    trace_duration_ns: int
    critical_path_percentage: float
    bottleneck_node: Optional[int] = None
    bottleneck_span: Optional[str] = None
    bottleneck_duration_ns: Optional[int] = None


class CompressionSummary(NpModel):

    original_count: int
    segment_count: int
    uncompressed_count: int
    compression_ratio: float
    storage_savings_percent: float
    compressed_spans: int
    tight_loop_segments: int


class TraceReport(NpModel):

    trace_id: str
    span_count: int
    edge_count: int
    root_count: int
    orphan_count: int
    critical_path: CriticalPathSummary
    anti_patterns: List[Finding] = Field(default_factory=list)
    compression: CompressionSummary
    overall_severity: Severity
    summary: str
