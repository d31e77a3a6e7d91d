"""
Trace analysis pipeline: spans to causal graph to critical path to anti-patterns, with run-length compression of the same batch, assembled into a single report.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Sequence

from api.responses import CompressionSummary, CriticalPathSummary, Finding, TraceReport
from config import settings
from engine.causal import CausalGraph, CriticalPathResult, find_critical_path
from engine.compression import CompressedTrace, compress_spans
from engine.enums import Severity
from engine.exceptions import AnalysisError
from engine.patterns import detect_anti_patterns
from engine.spans import Span

log = logging.getLogger(__name__)


def _overall_severity(findings: Sequence[Finding]) -> Severity:
    best = Severity.low
    for item in findings:
        if item.severity.weight() > best.weight():
            best = item.severity
    return best


def _critical_path_summary(graph: CausalGraph, result: CriticalPathResult) -> CriticalPathSummary:
    precision = settings.analyzer_round_precision
    trace_duration = graph.total_duration()
    bottleneck = result.longest_span()
    bottleneck_span = graph.get_span(bottleneck[0]) if bottleneck else None
    return CriticalPathSummary(
        span_names=list(result.span_names),
        nodes=list(result.path),
        total_duration_ns=result.total_duration,
        trace_duration_ns=trace_duration,
        critical_path_percentage=round(result.critical_path_percentage(trace_duration), precision),
        bottleneck_node=bottleneck[0] if bottleneck else None,
        bottleneck_span=bottleneck_span.name if bottleneck_span else None,
        bottleneck_duration_ns=bottleneck[1] if bottleneck else None,
    )


def _compression_summary(compressed: CompressedTrace) -> CompressionSummary:
    precision = settings.analyzer_round_precision
    return CompressionSummary(
        original_count=compressed.original_count,
        segment_count=len(compressed.segments),
        uncompressed_count=len(compressed.uncompressed),
        compression_ratio=round(compressed.compression_ratio(), precision),
        storage_savings_percent=round(compressed.storage_savings_percent(), precision),
        compressed_spans=sum(s.count for s in compressed.segments),
        tight_loop_segments=sum(1 for s in compressed.segments if s.is_tight_loop()),
    )


def _summary(report: TraceReport) -> str:
    parts = []
    if report.critical_path.span_names:
        parts.append(
            f"critical path of {len(report.critical_path.span_names)} span(s), "
            f"{report.critical_path.total_duration_ns}ns"
        )
    if report.critical_path.bottleneck_span:
        parts.append(f"bottleneck '{report.critical_path.bottleneck_span}'")
    if report.anti_patterns:
        names = ", ".join(dict.fromkeys(p.name for p in report.anti_patterns))
        parts.append(f"{len(report.anti_patterns)} anti-pattern(s): {names}")
    if report.compression.segment_count:
        parts.append(f"compression {report.compression.compression_ratio:.1f}x")
    if not parts:
        return "No spans to analyze."
    return f"[{report.overall_severity.value.upper()}] {' | '.join(parts)}."


def group_by_trace(spans: Sequence[Span]) -> Dict[bytes, List[Span]]:
    groups: Dict[bytes, List[Span]] = defaultdict(list)
    for span in spans:
        groups[span.trace_id].append(span)
    return dict(groups)


def analyze_trace(spans: Sequence[Span], min_run_length: int | None = None) -> TraceReport:
    graph = CausalGraph.from_spans(spans)
    critical_path = find_critical_path(graph)
    findings = detect_anti_patterns(graph, critical_path)
    compressed = compress_spans(spans, min_run_length)

    report = TraceReport(
        trace_id=spans[0].trace_id_hex if spans else "",
        span_count=graph.node_count(),
        edge_count=graph.edge_count(),
        root_count=len(graph.roots()),
        orphan_count=len(graph.orphans()),
        critical_path=_critical_path_summary(graph, critical_path),
        anti_patterns=findings,
        compression=_compression_summary(compressed),
        overall_severity=_overall_severity(findings),
        summary="",
    )
    report.summary = _summary(report)
    log.info("analyze_trace trace=%s %s", report.trace_id or "-", report.summary)
    return report


async def analyze_batches(
    batches: Sequence[Sequence[Span]],
    max_parallel: int | None = None,
    min_run_length: int | None = None,
) -> Dict[int, TraceReport]:
    if max_parallel is None:
        max_parallel = settings.analyzer_max_parallel_traces
    semaphore = asyncio.Semaphore(max(1, max_parallel))

    async def _run(batch: Sequence[Span]) -> TraceReport:
        async with semaphore:
            return await asyncio.to_thread(analyze_trace, batch, min_run_length)

    results = await asyncio.gather(*[_run(b) for b in batches], return_exceptions=True)

    reports: Dict[int, TraceReport] = {}
    for idx, result in enumerate(results):
        if isinstance(result, AnalysisError):
            log.warning("analyze_batches: skipping batch %d: %s", idx, result)
            continue
        if isinstance(result, BaseException):
            raise result
        reports[idx] = result
    return reports
