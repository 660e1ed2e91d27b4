from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

EDGE_KEY_SEPARATOR = "→"


def _frozen_props(props: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType(dict(props or {}))


@dataclass(frozen=True)
class Node:
    """
    Labelled vertex. The label is the identity key within a graph.
    """

    label: str
    type: Optional[str] = None
    props: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # read-only copy, unchanged elements are shared between graph versions
        object.__setattr__(self, "props", _frozen_props(self.props))

    @staticmethod
    def create(
        label: str,
        props: Optional[Mapping[str, str]] = None,
        type: Optional[str] = None,
    ) -> "Node":
        return Node(label=label, type=type, props=props or {})

    @property
    def key(self) -> str:
        return self.label

    def with_props(self, props: Mapping[str, str]) -> "Node":
        return replace(self, props=props)


@dataclass(frozen=True)
class Edge:
    """
    Directed connection between two node labels.

    Identity is the ordered pair (source, target), even when the graph
    type treats edges as undirected.
    """

    source: str
    target: str
    type: Optional[str] = None
    props: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # read-only copy, unchanged elements are shared between graph versions
        object.__setattr__(self, "props", _frozen_props(self.props))

    @staticmethod
    def create(
        source: str,
        target: str,
        props: Optional[Mapping[str, str]] = None,
        type: Optional[str] = None,
    ) -> "Edge":
        return Edge(source=source, target=target, type=type, props=props or {})

    @property
    def key(self) -> str:
        return f"{self.source}{EDGE_KEY_SEPARATOR}{self.target}"

    def with_props(self, props: Mapping[str, str]) -> "Edge":
        return replace(self, props=props)

    def touches(self, label: str) -> bool:
        return self.source == label or self.target == label


@dataclass(frozen=True)
class Graph:
    """
    Immutable graph value. Every mutator returns a new instance; unchanged
    Node and Edge objects are shared between versions.
    """

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()


def node_key(node: Node) -> str:
    return node.label


def edge_key(edge: Edge) -> str:
    return edge.key


def split_edge_key(key: str) -> Tuple[str, str]:
    source, _, target = key.partition(EDGE_KEY_SEPARATOR)
    return source, target
