"""
Anti-pattern detection over a causal graph and its critical path: dominant processes, tight loops of repeated operations, and GPU transfer bottlenecks, ranked by severity.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from api.responses import DominantProcess, Finding, TightLoop, TransferBottleneck
from config import settings
from engine.causal import CausalGraph, CriticalPathResult, NodeId, find_critical_path
from engine.enums import Severity

log = logging.getLogger(__name__)


def detect_dominant_process(
    graph: CausalGraph,
    critical_path: CriticalPathResult,
    threshold: float | None = None,
) -> Optional[DominantProcess]:
    if threshold is None:
        threshold = settings.pattern_dominant_threshold
    if critical_path.is_empty() or critical_path.total_duration <= 0:
        return None

    process_time: Dict[int, int] = defaultdict(int)
    for node in critical_path.path:
        span = graph.get_span(node)
        if span is not None:
            process_time[span.process_id] += span.duration_nanos

    if len(process_time) < settings.pattern_dominant_min_processes:
        return None

    dominant = max(process_time, key=lambda pid: (process_time[pid], -pid))
    duration = process_time[dominant]
    if duration == 0:
        return None

    percentage = (duration / critical_path.total_duration) * 100.0
    severity = Severity.from_thresholds(
        percentage,
        medium=threshold,
        high=settings.pattern_dominant_high,
        critical=settings.pattern_dominant_critical,
    )
    if severity is None:
        return None

    return DominantProcess(
        process_id=dominant,
        critical_path_percentage=percentage,
        total_duration=duration,
        severity=severity,
    )


def _loop_finding(name: str, count: int, duration: int, start: NodeId, end: NodeId, threshold: int) -> Optional[TightLoop]:
    severity = Severity.from_thresholds(
        count,
        medium=threshold,
        high=settings.pattern_loop_high,
        critical=settings.pattern_loop_critical,
    )
    if severity is None:
        return None
    return TightLoop(
        operation_name=name,
        repetition_count=count,
        total_duration=duration,
        node_range=(start, end),
        severity=severity,
    )


def detect_tight_loops(graph: CausalGraph, threshold: int | None = None) -> List[TightLoop]:
    if threshold is None:
        threshold = settings.pattern_loop_threshold

    # sorted() is stable, so equal clocks keep node order
    ordered = sorted(graph.nodes(), key=lambda n: graph.get_span(n).logical_clock)
    findings: List[TightLoop] = []

    current_name: Optional[str] = None
    count = 0
    duration = 0
    start_node = end_node = -1

    for node in ordered:
        span = graph.get_span(node)
        if span.name == current_name:
            count += 1
            duration += span.duration_nanos
            end_node = node
            continue

        if current_name is not None:
            finding = _loop_finding(current_name, count, duration, start_node, end_node, threshold)
            if finding is not None:
                findings.append(finding)

        current_name = span.name
        count = 1
        duration = span.duration_nanos
        start_node = end_node = node

    # the final run has no successor to close it
    if current_name is not None:
        finding = _loop_finding(current_name, count, duration, start_node, end_node, threshold)
        if finding is not None:
            findings.append(finding)

    return findings


def _matches(name: str, markers: Sequence[str]) -> bool:
    return any(marker in name for marker in markers)


def detect_transfer_bottleneck(graph: CausalGraph, threshold: float | None = None) -> Optional[TransferBottleneck]:
    if threshold is None:
        threshold = settings.pattern_transfer_threshold

    transfer_time = 0
    compute_time = 0
    for node in graph.nodes():
        span = graph.get_span(node)
        if _matches(span.name, settings.pattern_transfer_markers):
            transfer_time += span.duration_nanos
        elif _matches(span.name, settings.pattern_compute_markers):
            compute_time += span.duration_nanos

    if compute_time == 0:
        return None

    percentage = (transfer_time / compute_time) * 100.0
    severity = Severity.from_thresholds(
        percentage,
        medium=threshold,
        high=settings.pattern_transfer_high,
        critical=settings.pattern_transfer_critical,
    )
    if severity is None:
        return None

    return TransferBottleneck(
        transfer_time=transfer_time,
        compute_time=compute_time,
        transfer_percentage=percentage,
        severity=severity,
    )


def detect_anti_patterns(graph: CausalGraph, critical_path: CriticalPathResult | None = None) -> List[Finding]:
    if critical_path is None:
        critical_path = find_critical_path(graph)

    patterns: List[Finding] = []

    dominant = detect_dominant_process(graph, critical_path)
    if dominant is not None:
        patterns.append(dominant)

    patterns.extend(detect_tight_loops(graph))

    transfer = detect_transfer_bottleneck(graph)
    if transfer is not None:
        patterns.append(transfer)

    patterns.sort(key=lambda p: p.severity.weight(), reverse=True)
    log.debug("anti-patterns detected=%d", len(patterns))
    return patterns
