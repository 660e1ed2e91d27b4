from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class GraphType:
    """
    Topological policy constraining structural edits.
    """

    name: str
    label: str
    directed: bool
    acyclic: bool
    must_be_connected: bool = False


GRAPH_TYPES: Dict[str, GraphType] = {
    "UCG": GraphType("UCG", "Undirected Cyclic Graph", directed=False, acyclic=False),
    "UTree": GraphType(
        "UTree",
        "Undirected Tree",
        directed=False,
        acyclic=True,
        must_be_connected=True,
    ),
    "DAG": GraphType("DAG", "Directed Acyclic Graph", directed=True, acyclic=True),
    "DG": GraphType("DG", "Directed Graph", directed=True, acyclic=False),
    "Forest": GraphType("Forest", "Forest", directed=False, acyclic=True),
}


def get_graph_type(graph_type: Union[str, GraphType, None]) -> Optional[GraphType]:
    if isinstance(graph_type, GraphType):
        return graph_type
    if graph_type is None:
        return None
    return GRAPH_TYPES.get(graph_type)


# ---------------------------------------------------------------------
# Cosmetic element types (consumed by renderers, ignored by the core)
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class ElementType:
    id: str
    label: str
    style: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Template:
    """
    Editor template: the graph type plus the node/edge type catalogue.

    ``special_types`` is the ordered list of node type ids that act as
    path anchors for path tracking.
    """

    name: str
    graph_type: str = "UCG"
    node_types: Tuple[ElementType, ...] = ()
    edge_types: Tuple[ElementType, ...] = ()
    special_types: Tuple[str, ...] = ()

    @property
    def graph_type_info(self) -> Optional[GraphType]:
        return get_graph_type(self.graph_type)


def default_template() -> Template:
    return Template(name="Default", graph_type="UCG")


def create_template(
    name: str,
    graph_type: str = "UCG",
    special_types: Tuple[str, ...] = (),
) -> Template:
    return Template(name=name, graph_type=graph_type, special_types=tuple(special_types))


def add_node_type(template: Template, node_type: ElementType) -> Template:
    return replace(template, node_types=template.node_types + (node_type,))


def add_edge_type(template: Template, edge_type: ElementType) -> Template:
    return replace(template, edge_types=template.edge_types + (edge_type,))


def remove_node_type(template: Template, type_id: str) -> Template:
    return replace(
        template,
        node_types=tuple(t for t in template.node_types if t.id != type_id),
        special_types=tuple(s for s in template.special_types if s != type_id),
    )


def remove_edge_type(template: Template, type_id: str) -> Template:
    return replace(
        template,
        edge_types=tuple(t for t in template.edge_types if t.id != type_id),
    )


def update_node_type(template: Template, type_id: str, **changes: Any) -> Template:
    return replace(
        template,
        node_types=tuple(
            replace(t, **changes) if t.id == type_id else t for t in template.node_types
        ),
    )


def update_edge_type(template: Template, type_id: str, **changes: Any) -> Template:
    return replace(
        template,
        edge_types=tuple(
            replace(t, **changes) if t.id == type_id else t for t in template.edge_types
        ),
    )
