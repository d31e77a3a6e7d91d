"""
Causal graph of spans: nodes are spans, edges are explicit parent-to-child relationships weighted by the child's duration, with root discovery, traversal queries, and acyclicity validation.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from engine.exceptions import TraceValidationError
from engine.spans import Span

log = logging.getLogger(__name__)

# node handles are indexes into the span sequence the graph was built from
NodeId = int


class CausalGraph:
    def __init__(self) -> None:
        self._spans: List[Span] = []
        self._span_index: Dict[bytes, NodeId] = {}
        self._roots: List[NodeId] = []
        self._orphans: List[NodeId] = []
        self._forward: List[List[Tuple[NodeId, int]]] = []
        self._reverse: List[List[NodeId]] = []
        self._edge_count = 0

    @classmethod
    def from_spans(cls, spans: Sequence[Span]) -> CausalGraph:
        graph = cls()
        if not spans:
            return graph

        trace_id = spans[0].trace_id
        for span in spans:
            if span.trace_id != trace_id:
                raise TraceValidationError(
                    f"All spans must have same trace_id. Expected {trace_id.hex()}, got {span.trace_id.hex()}"
                )

        for node, span in enumerate(spans):
            graph._spans.append(span)
            graph._span_index[span.span_id] = node
            graph._forward.append([])
            graph._reverse.append([])
            if span.is_root():
                graph._roots.append(node)

        for child, span in enumerate(spans):
            if span.parent_span_id is None:
                continue
            parent = graph._span_index.get(span.parent_span_id)
            if parent is None:
                graph._orphans.append(child)
                continue
            graph._forward[parent].append((child, span.duration_nanos))
            graph._reverse[child].append(parent)
            graph._edge_count += 1

        log.debug(
            "causal graph trace=%s nodes=%d edges=%d roots=%d orphans=%d",
            trace_id.hex(), len(graph._spans), graph._edge_count, len(graph._roots), len(graph._orphans),
        )
        return graph

    def node_count(self) -> int:
        return len(self._spans)

    def edge_count(self) -> int:
        return self._edge_count

    def nodes(self) -> range:
        return range(len(self._spans))

    def roots(self) -> List[NodeId]:
        return list(self._roots)

    def orphans(self) -> List[NodeId]:
        """Nodes whose parent span id does not resolve inside the batch."""
        return list(self._orphans)

    def get_span(self, node: NodeId) -> Optional[Span]:
        if 0 <= node < len(self._spans):
            return self._spans[node]
        return None

    def children(self, node: NodeId) -> List[Tuple[NodeId, int]]:
        if 0 <= node < len(self._forward):
            return list(self._forward[node])
        return []

    def parents(self, node: NodeId) -> List[NodeId]:
        if 0 <= node < len(self._reverse):
            return list(self._reverse[node])
        return []

    def get_node_by_span_id(self, span_id: bytes) -> Optional[NodeId]:
        return self._span_index.get(bytes(span_id))

    def get_span_by_id(self, span_id: bytes) -> Optional[Span]:
        node = self.get_node_by_span_id(span_id)
        return self.get_span(node) if node is not None else None

    def descendants(self, root: NodeId) -> List[NodeId]:
        if self.get_span(root) is None:
            return []
        visited: List[NodeId] = []
        seen: Set[NodeId] = set()
        stack: List[NodeId] = [root]

        while stack:
            node = stack.pop()
            if node in seen:
                continue
            seen.add(node)
            visited.append(node)
            for child, _ in self._forward[node]:
                if child not in seen:
                    stack.append(child)

        return visited

    def is_dag(self) -> bool:
        visited: Set[NodeId] = set()
        on_path: Set[NodeId] = set()

        # roots first, then anything no root reaches (cycles have no root)
        root_set = set(self._roots)
        starts = list(self._roots) + [n for n in self.nodes() if n not in root_set]
        for start in starts:
            if start in visited:
                continue
            visited.add(start)
            on_path.add(start)
            stack: List[Tuple[NodeId, int]] = [(start, 0)]

            while stack:
                node, next_edge = stack[-1]
                edges = self._forward[node]
                if next_edge >= len(edges):
                    stack.pop()
                    on_path.discard(node)
                    continue
                stack[-1] = (node, next_edge + 1)
                child = edges[next_edge][0]
                if child in on_path:
                    log.debug("cycle detected: edge %d -> %d closes a loop", node, child)
                    return False
                if child not in visited:
                    visited.add(child)
                    on_path.add(child)
                    stack.append((child, 0))

        return True

    def total_duration(self) -> int:
        """Wall-clock extent of the batch: latest end minus earliest start."""
        if not self._spans:
            return 0
        start = min(s.start_time_nanos for s in self._spans)
        end = max(s.end_time_nanos for s in self._spans)
        return max(end - start, 0)
