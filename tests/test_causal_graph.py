"""
Test cases for causal graph construction from span batches, traversal queries, and cycle detection.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import pytest

from conftest import OTHER_TRACE_ID, span_id
from engine.causal import CausalGraph
from engine.exceptions import TraceValidationError


def test_empty_graph(make_span):
    g = CausalGraph.from_spans([])
    assert g.node_count() == 0
    assert g.edge_count() == 0
    assert g.roots() == []
    assert g.is_dag()
    assert g.total_duration() == 0


def test_mismatched_trace_ids_rejected(make_span):
    spans = [make_span(1), make_span(2, parent=1, trace=OTHER_TRACE_ID)]
    with pytest.raises(TraceValidationError) as exc:
        CausalGraph.from_spans(spans)
    assert OTHER_TRACE_ID.hex() in str(exc.value)


def test_microservice_trace_structure(make_span):
    spans = [
        make_span(1, "gateway", 5000),
        make_span(2, "auth", 800, parent=1),
        make_span(3, "orders", 3000, parent=1),
        make_span(4, "db.query", 2500, parent=3),
    ]
    g = CausalGraph.from_spans(spans)
    assert g.node_count() == 4
    assert g.edge_count() == 3
    assert g.roots() == [0]
    assert sorted(g.children(0)) == [(1, 800), (2, 3000)]
    assert g.children(2) == [(3, 2500)]
    assert g.parents(3) == [2]
    assert g.get_span(3).name == "db.query"
    assert g.get_span(99) is None
    assert g.get_node_by_span_id(span_id(3)) == 2
    assert g.get_span_by_id(span_id(4)).name == "db.query"
    assert g.get_span_by_id(span_id(42)) is None


def test_edge_weight_is_child_duration(make_span):
    g = CausalGraph.from_spans([make_span(1, duration=10), make_span(2, duration=1234, parent=1)])
    assert g.children(0) == [(1, 1234)]


def test_missing_parent_is_tolerated(make_span):
    spans = [make_span(1), make_span(2, parent=77)]
    g = CausalGraph.from_spans(spans)
    assert g.node_count() == 2
    assert g.edge_count() == 0
    assert g.roots() == [0]
    assert g.orphans() == [1]
    assert g.is_dag()


def test_multiple_roots(make_span):
    spans = [make_span(1), make_span(2), make_span(3, parent=1), make_span(4, parent=2)]
    g = CausalGraph.from_spans(spans)
    assert g.roots() == [0, 1]
    assert sorted(g.descendants(0)) == [0, 2]
    assert sorted(g.descendants(1)) == [1, 3]


def test_descendants_of_deep_stack(make_span):
    depth = 5000
    spans = [make_span(1)] + [make_span(i, parent=i - 1) for i in range(2, depth + 1)]
    g = CausalGraph.from_spans(spans)
    desc = g.descendants(0)
    assert len(desc) == depth
    assert desc[0] == 0
    assert g.is_dag()


def test_descendants_of_unknown_node_is_empty(make_span):
    g = CausalGraph.from_spans([make_span(1)])
    assert g.descendants(5) == []


def test_parent_derived_graph_is_acyclic(make_span):
    spans = [make_span(1)]
    for i in range(2, 200):
        spans.append(make_span(i, parent=(i // 2)))
    assert CausalGraph.from_spans(spans).is_dag()


def test_mutual_parents_form_detected_cycle(make_span):
    spans = [make_span(1, parent=2), make_span(2, parent=1)]
    g = CausalGraph.from_spans(spans)
    assert g.roots() == []
    assert not g.is_dag()


def test_self_parented_span_is_cycle(make_span):
    g = CausalGraph.from_spans([make_span(1), make_span(2, parent=2)])
    assert not g.is_dag()


def test_cycle_beside_valid_tree_is_detected(make_span):
    spans = [
        make_span(1),
        make_span(2, parent=1),
        make_span(3, parent=5),
        make_span(4, parent=3),
        make_span(5, parent=4),
    ]
    assert not CausalGraph.from_spans(spans).is_dag()


def test_total_duration_spans_batch_extent(make_span):
    spans = [make_span(1, start=100, duration=50), make_span(2, start=400, duration=100, parent=1)]
    assert CausalGraph.from_spans(spans).total_duration() == 400
