import logging

from graphmerge.tracking.exclusions import (
    compute_tracking_state,
    is_node_fully_excluded,
    merge_exclusions,
    propagate_exclusions,
    prune_stale_exclusions,
    relevant_exclusions,
)
from graphmerge.tracking.path_tags import (
    compute_path_tags,
    format_path_tag,
    leaves_first_order,
    serialize_tag,
)

from backend.tests.graph_factory import make_graph

REPORT_TYPES = ["reporter", "category"]


def _fan_graph():
    # Q -> P, P -> X1, P -> X2 with both leaves special
    return make_graph(
        ["Q", "P", ("X1", "r"), ("X2", "r")],
        [("Q", "P"), ("P", "X1"), ("P", "X2")],
    )


def test_report_example(report_graph):
    tags = compute_path_tags(report_graph, REPORT_TYPES)
    assert tags["C1→R1"] == [{"reporter": "R1"}]
    assert tags["P1→C1"] == [{"reporter": "R1", "category": "C1"}]


def test_chain_tags_pass_through_untyped_nodes(chain_graph):
    tags = compute_path_tags(chain_graph, ["leaf"])
    assert tags["B→C"] == [{"leaf": "C"}]
    assert tags["A→B"] == [{"leaf": "C"}]


def test_untyped_leaf_gives_wildcard():
    graph = make_graph(["A", "B"], [("A", "B")])
    tags = compute_path_tags(graph, REPORT_TYPES)
    assert tags == {"A→B": [{}]}
    assert serialize_tag({}, REPORT_TYPES) == "|"
    assert format_path_tag({}, REPORT_TYPES) == "(any)"


def test_no_special_types_means_no_tags(report_graph):
    assert compute_path_tags(report_graph, []) == {}


def test_every_edge_gets_at_least_one_tag():
    graph = make_graph(
        ["A", "B", ("C", "r"), "D"],
        [("A", "B"), ("B", "C"), ("A", "D"), ("B", "D")],
    )
    tags = compute_path_tags(graph, ["r"])
    assert set(tags) == {e.key for e in graph.edges}
    assert all(tags[key] for key in tags)
    assert sorted(serialize_tag(t, ["r"]) for t in tags["A→B"]) == ["", "C"]


def test_node_type_overrides_descendant_entry():
    # Dedup runs after the own-type stamp, so paths that only differ below a
    # stamped node collapse into one descriptor (see the test below).
    graph = make_graph(
        ["N", ("M", "r"), ("L", "r")],
        [("N", "M"), ("M", "L")],
    )
    tags = compute_path_tags(graph, ["r"])
    assert tags["M→L"] == [{"r": "L"}]
    assert tags["N→M"] == [{"r": "M"}]


def test_stamping_collapses_descriptors_that_become_identical():
    # N(c) has two c-children that both reach R1; stamping N overwrites the
    # c entry, leaving one descriptor rather than two identical copies
    graph = make_graph(
        ["X", ("N", "c"), ("C1", "c"), ("C2", "c"), ("R1", "r")],
        [("X", "N"), ("N", "C1"), ("N", "C2"), ("C1", "R1"), ("C2", "R1")],
    )
    tags = compute_path_tags(graph, ["r", "c"])
    assert tags["X→N"] == [{"r": "R1", "c": "N"}]
    assert tags["N→C1"] == [{"r": "R1", "c": "C1"}]


def test_fan_out_unions_children():
    tags = compute_path_tags(_fan_graph(), ["r"])
    assert [serialize_tag(t, ["r"]) for t in tags["Q→P"]] == ["X1", "X2"]


def test_descriptor_threshold_warning(caplog):
    compute_path_tags(_fan_graph(), ["r"], warning_threshold=1)
    assert "path descriptors" in caplog.text


def test_serialize_and_format():
    tag = {"reporter": "R1", "category": "C1"}
    assert serialize_tag(tag, REPORT_TYPES) == "R1|C1"
    assert serialize_tag({"category": "C1"}, REPORT_TYPES) == "|C1"
    assert format_path_tag(tag, REPORT_TYPES) == "(R1, C1)"
    assert format_path_tag({"category": "C1"}, REPORT_TYPES) == "(C1)"


def test_leaves_first_order(chain_graph):
    assert leaves_first_order(chain_graph) == ["C", "B", "A"]

    cyclic = make_graph(["A", "B", "C"], [("A", "B"), ("B", "A")])
    assert leaves_first_order(cyclic) == ["C", "A", "B"]


def test_exclusion_propagates_upstream(chain_graph):
    tags = compute_path_tags(chain_graph, ["leaf"])
    effective = propagate_exclusions(chain_graph, {"B→C": ["C"]}, tags, ["leaf"])
    assert effective == {"B→C": {"C"}, "A→B": {"C"}}


def test_exclusion_only_travels_with_matching_tags():
    graph = _fan_graph()
    tags = compute_path_tags(graph, ["r"])
    effective = propagate_exclusions(graph, {"P→X1": ["X1"]}, tags, ["r"])

    assert effective == {"P→X1": {"X1"}, "Q→P": {"X1"}}
    assert not is_node_fully_excluded(graph, "P", tags, effective, ["r"])
    assert not is_node_fully_excluded(graph, "Q", tags, effective, ["r"])


def test_fully_excluded_once_every_tag_is_excluded():
    graph = _fan_graph()
    tags = compute_path_tags(graph, ["r"])
    effective = propagate_exclusions(
        graph, {"P→X1": ["X1"], "P→X2": ["X2"]}, tags, ["r"]
    )

    assert is_node_fully_excluded(graph, "P", tags, effective, ["r"])
    assert is_node_fully_excluded(graph, "Q", tags, effective, ["r"])
    assert not is_node_fully_excluded(graph, "X1", tags, effective, ["r"])


def test_prune_stale_exclusions(chain_graph):
    tags = compute_path_tags(chain_graph, ["leaf"])
    pruned = prune_stale_exclusions(
        {"B→C": ["C", "gone"], "A→B": ["gone"], "X→Y": ["C"]}, tags, ["leaf"]
    )
    assert pruned == {"B→C": ["C"]}


def test_tracking_state_recomputes_after_pruning(caplog):
    caplog.set_level(logging.INFO, logger="graphmerge.tracking")
    graph = _fan_graph()

    # X2 is not a tag of P->X1, but Q->P does carry it
    state = compute_tracking_state(graph, {"P→X1": ["X2"]}, ["r"])

    assert state.direct == {}
    assert state.effective == {}
    assert "dropped 1 stale exclusions" in caplog.text


def test_tracking_state_fully_excluded_nodes(chain_graph):
    state = compute_tracking_state(chain_graph, {"B→C": ["C"]}, ["leaf"])
    assert state.direct == {"B→C": ["C"]}
    assert state.fully_excluded_nodes(chain_graph, ["leaf"]) == ["A", "B"]


def test_merge_exclusions():
    target = {"A→B": ["x"]}
    source = {"A→B": ["x", "y"], "B→C": ["z"]}

    assert merge_exclusions(target, source, source_tracked=False) == {"A→B": ["x"]}
    assert merge_exclusions(target, source, source_tracked=True) == {
        "A→B": ["x", "y"],
        "B→C": ["z"],
    }
    assert target == {"A→B": ["x"]}


def test_relevant_exclusions():
    subgraph = make_graph(["A", "B"], [("A", "B")])
    direct = {"A→B": ["C"], "B→C": ["C"]}
    assert relevant_exclusions(direct, subgraph) == {"A→B": ["C"]}
