"""
Critical path analysis over a causal graph: topological ordering followed by a longest-path dynamic program, yielding the bottleneck chain of spans that bounds the trace's completion time.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from engine.causal.graph import CausalGraph, NodeId
from engine.exceptions import CycleDetectedError

log = logging.getLogger(__name__)


@dataclass
class CriticalPathResult:
    path: List[NodeId] = field(default_factory=list)
    total_duration: int = 0
    node_durations: Dict[NodeId, int] = field(default_factory=dict)
    span_names: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.path

    def critical_path_percentage(self, total_trace_duration: int) -> float:
        if total_trace_duration <= 0:
            return 0.0
        return (self.total_duration / total_trace_duration) * 100.0

    def longest_span(self) -> Optional[Tuple[NodeId, int]]:
        if not self.node_durations:
            return None
        node = max(self.node_durations, key=lambda n: (self.node_durations[n], -n))
        return node, self.node_durations[node]

    def is_on_critical_path(self, node: NodeId) -> bool:
        return node in self.node_durations


def topological_sort(graph: CausalGraph) -> List[NodeId]:
    if not graph.is_dag():
        raise CycleDetectedError("Graph contains cycles - cannot compute critical path")

    visited: Set[NodeId] = set()
    postorder: List[NodeId] = []
    root_set = set(graph.roots())
    starts = graph.roots() + [n for n in graph.nodes() if n not in root_set]

    for start in starts:
        if start in visited:
            continue
        visited.add(start)
        stack: List[Tuple[NodeId, List[Tuple[NodeId, int]], int]] = [(start, graph.children(start), 0)]
        while stack:
            node, children, idx = stack[-1]
            if idx >= len(children):
                stack.pop()
                postorder.append(node)
                continue
            stack[-1] = (node, children, idx + 1)
            child = children[idx][0]
            if child not in visited:
                visited.add(child)
                stack.append((child, graph.children(child), 0))

    postorder.reverse()
    return postorder


def _longest_distances(graph: CausalGraph) -> Tuple[Dict[NodeId, int], Dict[NodeId, Optional[NodeId]]]:
    dist: Dict[NodeId, int] = {}
    parent: Dict[NodeId, Optional[NodeId]] = {}

    for node in topological_sort(graph):
        own = graph.get_span(node).duration_nanos
        best: Optional[NodeId] = None
        best_dist = own
        # lowest parent index wins ties
        for p in sorted(graph.parents(node)):
            candidate = dist[p] + own
            if best is None or candidate > best_dist:
                best, best_dist = p, candidate
        dist[node] = best_dist
        parent[node] = best

    return dist, parent


def _build_result(
    graph: CausalGraph,
    terminal: NodeId,
    dist: Dict[NodeId, int],
    parent: Dict[NodeId, Optional[NodeId]],
) -> CriticalPathResult:
    path: List[NodeId] = []
    current: Optional[NodeId] = terminal
    while current is not None:
        path.append(current)
        current = parent.get(current)
    path.reverse()

    node_durations: Dict[NodeId, int] = {}
    span_names: List[str] = []
    for node in path:
        span = graph.get_span(node)
        node_durations[node] = span.duration_nanos
        span_names.append(span.name)

    return CriticalPathResult(
        path=path,
        total_duration=dist[terminal],
        node_durations=node_durations,
        span_names=span_names,
    )


def find_critical_path(graph: CausalGraph) -> CriticalPathResult:
    if graph.node_count() == 0:
        return CriticalPathResult()

    dist, parent = _longest_distances(graph)
    terminal = max(dist, key=lambda n: (dist[n], -n))
    result = _build_result(graph, terminal, dist, parent)
    log.debug(
        "critical path nodes=%d total_ns=%d terminal=%d",
        len(result.path), result.total_duration, terminal,
    )
    return result


def find_all_critical_paths(graph: CausalGraph, tolerance_ns: int = 0) -> List[CriticalPathResult]:
    """Every root-to-leaf path whose duration is within ``tolerance_ns`` of the longest one."""
    if graph.node_count() == 0:
        return []

    dist, parent = _longest_distances(graph)
    longest = max(dist.values())
    leaves = [n for n in graph.nodes() if not graph.children(n)]
    terminals = [n for n in leaves if dist[n] >= longest - max(tolerance_ns, 0)]
    terminals.sort(key=lambda n: (-dist[n], n))
    return [_build_result(graph, n, dist, parent) for n in terminals]
