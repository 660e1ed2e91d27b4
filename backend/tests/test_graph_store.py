import pytest

from graphmerge.graph.graph_schema import Edge, Graph, Node, split_edge_key
from graphmerge.graph.graph_store import (
    add_edge,
    add_node,
    create_edge,
    create_graph,
    create_node,
    find_edge,
    find_node,
    get_ancestor_subgraph,
    graphs_equal,
    is_empty,
    node_labels,
    remove_edge,
    remove_node,
    to_networkx,
    update_edge_props,
    update_node_props,
)

from backend.tests.graph_factory import make_graph


def test_mutators_return_new_graphs_and_leave_input_untouched():
    g0 = create_graph()
    g1 = add_node(g0, create_node("A", {"x": "1"}, "t"))
    g2 = add_node(g1, create_node("B"))
    g3 = add_edge(g2, create_edge("A", "B", {"w": "2"}))

    assert is_empty(g0)
    assert node_labels(g1) == ["A"]
    assert node_labels(g3) == ["A", "B"]
    assert find_edge(g3, "A", "B").props == {"w": "2"}
    assert find_edge(g2, "A", "B") is None
    assert find_node(g3, "A").type == "t"


def test_added_node_does_not_alias_caller_props():
    props = {"x": "1"}
    node = Node.create("A", props)
    props["x"] = "2"
    graph = add_node(create_graph(), node)
    assert find_node(graph, "A").props == {"x": "1"}


def test_remove_node_drops_touching_edges():
    graph = make_graph(["A", "B", "C"], [("A", "B"), ("B", "C"), ("A", "C")])
    reduced = remove_node(graph, "B")

    assert node_labels(reduced) == ["A", "C"]
    assert [e.key for e in reduced.edges] == ["A→C"]
    assert len(graph.edges) == 3


def test_remove_edge_is_direction_sensitive():
    graph = make_graph(["A", "B"], [("A", "B")])
    assert len(remove_edge(graph, "B", "A").edges) == 1
    assert len(remove_edge(graph, "A", "B").edges) == 0


def test_update_props_replaces_wholesale_and_optionally_type():
    graph = make_graph([("A", "old")], [])
    graph = add_node(graph, create_node("B"))
    graph = add_edge(graph, create_edge("A", "B", {"a": "1"}, "rel"))

    updated = update_node_props(graph, "A", {"y": "2"})
    assert find_node(updated, "A").props == {"y": "2"}
    assert find_node(updated, "A").type == "old"

    retyped = update_node_props(graph, "A", {}, type=None)
    assert find_node(retyped, "A").type is None

    edge_updated = update_edge_props(graph, "A", "B", {"b": "2"}, type="other")
    edge = find_edge(edge_updated, "A", "B")
    assert edge.props == {"b": "2"}
    assert edge.type == "other"
    assert find_edge(graph, "A", "B").props == {"a": "1"}


def test_untouched_elements_are_shared_between_versions():
    graph = make_graph(["A", "B"], [("A", "B")])
    updated = update_node_props(graph, "A", {"k": "v"})
    assert updated.nodes[1] is graph.nodes[1]
    assert updated.edges[0] is graph.edges[0]


def test_ancestor_subgraph_collects_upstream_only():
    graph = make_graph(
        ["A", "B", "C", "D", "E"],
        [("A", "B"), ("B", "C"), ("D", "C"), ("C", "E")],
    )
    branch = get_ancestor_subgraph(graph, "C")

    assert set(node_labels(branch)) == {"A", "B", "C", "D"}
    assert {e.key for e in branch.edges} == {"A→B", "B→C", "D→C"}


def test_ancestor_subgraph_of_unknown_root_is_empty():
    graph = make_graph(["A"], [])
    assert is_empty(get_ancestor_subgraph(graph, "missing"))


def test_ancestor_subgraph_terminates_on_cycles():
    graph = make_graph(["A", "B"], [("A", "B"), ("B", "A")])
    branch = get_ancestor_subgraph(graph, "A")
    assert set(node_labels(branch)) == {"A", "B"}


def test_networkx_view_skips_dangling_edges(caplog):
    graph = Graph(nodes=(Node.create("A"),), edges=(Edge.create("A", "ghost"),))
    g = to_networkx(graph)
    assert list(g.nodes) == ["A"]
    assert g.number_of_edges() == 0
    assert "dangling" in caplog.text


def test_edge_key_round_trip_and_equality():
    assert Edge.create("A", "B").key == "A→B"
    assert split_edge_key("A→B") == ("A", "B")
    assert graphs_equal(make_graph(["A"], []), make_graph(["A"], []))
    assert not graphs_equal(make_graph(["A", "B"], []), make_graph(["B", "A"], []))


def test_props_cannot_be_edited_in_place_across_versions():
    g1 = make_graph(["A", "B"], [("A", "B")])
    g2 = update_node_props(g1, "A", {"k": "v"})

    shared = g2.nodes[1]
    assert shared is g1.nodes[1]
    with pytest.raises(TypeError):
        shared.props["leak"] = "x"
    with pytest.raises(TypeError):
        g2.edges[0].props["leak"] = "x"
    assert find_node(g1, "B").props == {}

    source = {"k": "v"}
    g3 = update_edge_props(g1, "A", "B", source)
    source["k"] = "changed"
    assert find_edge(g3, "A", "B").props == {"k": "v"}
