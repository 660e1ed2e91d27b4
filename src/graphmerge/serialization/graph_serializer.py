from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from graphmerge.graph.graph_schema import EDGE_KEY_SEPARATOR, Edge, Graph, Node


class NodePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    label: StrictStr = Field(min_length=1)
    type: Optional[StrictStr] = None
    props: Dict[StrictStr, StrictStr] = Field(default_factory=dict)

    @field_validator("type", mode="before")
    @classmethod
    def blank_type_is_none(cls, value: Any) -> Any:
        return value or None

    @field_validator("props", mode="before")
    @classmethod
    def missing_props_are_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_node(self) -> Node:
        return Node(label=self.label, type=self.type, props=dict(self.props))


class EdgePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    source: StrictStr = Field(min_length=1)
    target: StrictStr = Field(min_length=1)
    type: Optional[StrictStr] = None
    props: Dict[StrictStr, StrictStr] = Field(default_factory=dict)

    @field_validator("type", mode="before")
    @classmethod
    def blank_type_is_none(cls, value: Any) -> Any:
        return value or None

    @field_validator("props", mode="before")
    @classmethod
    def missing_props_are_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_edge(self) -> Edge:
        return Edge(source=self.source, target=self.target, type=self.type, props=dict(self.props))


@dataclass(frozen=True)
class ImportResult:
    """
    Outcome of ingesting an external graph payload.
    """

    ok: bool
    graph: Optional[Graph] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, graph: Graph) -> "ImportResult":
        return cls(ok=True, graph=graph)

    @classmethod
    def failure(cls, error: str) -> "ImportResult":
        logging.getLogger("graphmerge.serializer").info("rejected graph payload: %s", error)
        return cls(ok=False, error=error)


def _first_error_field(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors or not errors[0]["loc"]:
        return ""
    return str(errors[0]["loc"][0])


def validate_graph(data: Any) -> ImportResult:
    """
    Check ``data`` against the persisted graph shape and normalize it.

    Labels must be unique non-empty strings, edges must reference labels
    of the same payload, and props must be flat string maps. Missing
    ``props`` become ``{}`` and missing or blank ``type`` becomes ``None``.
    """
    if not isinstance(data, dict):
        return ImportResult.failure("Invalid data: expected an object")
    if not isinstance(data.get("nodes"), list):
        return ImportResult.failure("Invalid data: missing nodes array")
    if not isinstance(data.get("edges"), list):
        return ImportResult.failure("Invalid data: missing edges array")

    nodes = []
    labels = set()
    for raw in data["nodes"]:
        try:
            payload = NodePayload.model_validate(raw)
        except ValidationError as exc:
            field_name = _first_error_field(exc)
            label = raw.get("label") if isinstance(raw, dict) else None
            if field_name == "props":
                return ImportResult.failure(f'Invalid props on node "{label}"')
            if field_name == "type":
                return ImportResult.failure(f'Invalid type on node "{label}"')
            return ImportResult.failure("Invalid node: missing or invalid label")

        if payload.label in labels:
            return ImportResult.failure(f'Duplicate node label: "{payload.label}"')
        labels.add(payload.label)
        nodes.append(payload.to_node())

    edges = []
    for raw in data["edges"]:
        try:
            payload = EdgePayload.model_validate(raw)
        except ValidationError as exc:
            field_name = _first_error_field(exc)
            if field_name in ("props", "type") and isinstance(raw, dict):
                key = f"{raw.get('source')}{EDGE_KEY_SEPARATOR}{raw.get('target')}"
                return ImportResult.failure(f'Invalid {field_name} on edge "{key}"')
            return ImportResult.failure("Invalid edge: missing source or target")

        if payload.source not in labels:
            return ImportResult.failure(f'Edge references unknown source: "{payload.source}"')
        if payload.target not in labels:
            return ImportResult.failure(f'Edge references unknown target: "{payload.target}"')
        edges.append(payload.to_edge())

    return ImportResult.success(Graph(nodes=tuple(nodes), edges=tuple(edges)))


def graph_to_dict(graph: Graph) -> Dict[str, Any]:
    return {
        "nodes": [
            {"label": n.label, "type": n.type, "props": dict(n.props)} for n in graph.nodes
        ],
        "edges": [
            {"source": e.source, "target": e.target, "type": e.type, "props": dict(e.props)}
            for e in graph.edges
        ],
    }


def to_json(graph: Graph) -> str:
    return json.dumps(graph_to_dict(graph), indent=2, ensure_ascii=False)


def from_json(text: str) -> ImportResult:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return ImportResult.failure(f"Invalid JSON: {exc}")
    return validate_graph(data)
