from graphmerge.graph.graph_store import (
    add_edge,
    add_node,
    create_edge,
    create_node,
    find_edge,
    find_node,
    node_labels,
    remove_node,
    update_node_props,
)
from graphmerge.merge.merge_engine import filter_upstream_subgraph, merge_graphs, scoped_merge

from backend.tests.graph_factory import make_graph


def test_merge_without_base_only_adds_and_overwrites():
    target = make_graph(["A", "Local"], [("A", "Local")])
    target = update_node_props(target, "A", {"v": "old", "keep": "x"})
    incoming = update_node_props(make_graph(["A", "B"], [("A", "B")]), "A", {"v": "new"})

    merged = merge_graphs(target, incoming)

    assert node_labels(merged) == ["A", "Local", "B"]
    assert find_node(merged, "A").props == {"v": "new"}
    assert find_edge(merged, "A", "Local") is not None
    assert find_edge(merged, "A", "B") is not None


def test_merge_keeps_target_type_on_overwrite():
    target = make_graph([("A", "mine")], [])
    incoming = make_graph([("A", "theirs")], [])
    assert find_node(merge_graphs(target, incoming), "A").type == "mine"


def test_merge_with_base_propagates_deletions():
    base = make_graph(["A", "B", "C"], [("A", "B"), ("B", "C")])
    target = add_node(base, create_node("Local"))
    target = add_edge(target, create_edge("Local", "A"))
    incoming = remove_node(base, "C")

    merged = merge_graphs(target, incoming, base)

    assert set(node_labels(merged)) == {"A", "B", "Local"}
    assert find_edge(merged, "B", "C") is None
    assert find_edge(merged, "Local", "A") is not None


def test_merge_prunes_edges_left_dangling():
    base = make_graph(["A", "B"], [])
    target = make_graph(["A", "B", "L"], [("L", "B")])
    incoming = make_graph(["A"], [])

    merged = merge_graphs(target, incoming, base)

    assert node_labels(merged) == ["A", "L"]
    assert merged.edges == ()


def test_merge_is_idempotent():
    target = make_graph(["A", "T"], [("T", "A")])
    incoming = update_node_props(make_graph(["A", "B"], [("A", "B")]), "B", {"k": "v"})
    once = merge_graphs(target, incoming)
    assert merge_graphs(once, incoming) == once


def test_merge_does_not_touch_inputs():
    target = make_graph(["A"], [])
    incoming = update_node_props(make_graph(["A"], []), "A", {"x": "1"})
    merge_graphs(target, incoming)
    assert find_node(target, "A").props == {}


def test_empty_scope_returns_same_graph(report_graph):
    assert filter_upstream_subgraph(report_graph, []) is report_graph
    assert filter_upstream_subgraph(report_graph, None) is report_graph


def test_filter_upstream_subgraph():
    graph = make_graph(["A", "B", "C", "D"], [("A", "B"), ("C", "D")])
    scoped = filter_upstream_subgraph(graph, ["B"])
    assert set(node_labels(scoped)) == {"A", "B"}


def test_scoped_merge_filters_base_identically():
    # two independent branches: A->B and C->D
    base = make_graph(["A", "B", "C", "D"], [("A", "B"), ("C", "D")])
    target = base
    incoming = update_node_props(base, "A", {"x": "1"})

    merged = scoped_merge(target, incoming, base, ["B"])

    # out-of-scope nodes survive; an unfiltered base would have deleted them
    assert set(node_labels(merged)) == {"A", "B", "C", "D"}
    assert find_node(merged, "A").props == {"x": "1"}


def test_scoped_merge_still_deletes_inside_scope():
    base = make_graph(["A", "B", "C", "D"], [("A", "B"), ("C", "D")])
    incoming = remove_node(base, "A")

    merged = scoped_merge(base, incoming, base, ["B"])

    assert set(node_labels(merged)) == {"B", "C", "D"}
