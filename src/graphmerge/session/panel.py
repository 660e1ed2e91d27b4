from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from graphmerge.config.settings import GraphMergeConfig
from graphmerge.diff.diff_engine import DiffEntry, compute_diff, format_diff_summary
from graphmerge.graph.graph_constraints import (
    has_cycle,
    validate_edge_add,
    would_disconnect_on_edge_remove,
    would_disconnect_on_node_remove,
)
from graphmerge.graph.graph_schema import Edge, Graph, Node, split_edge_key
from graphmerge.graph.graph_store import (
    UNSET,
    create_graph,
    find_edge,
    find_node,
    get_ancestor_subgraph,
    is_empty,
)
from graphmerge.graph.graph_store import add_edge as _add_edge
from graphmerge.graph.graph_store import add_node as _add_node
from graphmerge.graph.graph_store import update_edge_props as _update_edge_props
from graphmerge.graph.graph_store import update_node_props as _update_node_props
from graphmerge.graph.graph_template import GRAPH_TYPES, GraphType, Template, default_template
from graphmerge.merge.merge_engine import merge_graphs, scoped_merge
from graphmerge.serialization.graph_serializer import graph_to_dict, validate_graph
from graphmerge.tracking.exclusions import (
    TrackingState,
    compute_tracking_state,
    merge_exclusions,
    relevant_exclusions,
)
from graphmerge.tracking.path_tags import compute_path_tags, serialize_tag
from graphmerge.utils.history import iso_timestamp, push_bounded

ConfirmFn = Callable[[str, str], bool]


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a panel operation. ``error`` and ``warning`` are user-facing.
    """

    ok: bool
    error: Optional[str] = None
    warning: Optional[str] = None

    @classmethod
    def success(cls, warning: Optional[str] = None) -> "OperationResult":
        return cls(ok=True, warning=warning)

    @classmethod
    def failure(cls, error: str) -> "OperationResult":
        return cls(ok=False, error=error)


@dataclass(frozen=True)
class ApprovalRecord:
    graph: Graph
    base_graph: Optional[Graph]
    timestamp: str
    diff_summary: str


class GraphPanel:
    """
    Editing state of one graph panel, independent of any rendering.

    Holds the working graph, the last approved snapshot (the diff and
    merge baseline), bounded undo/redo stacks, the approval log and the
    user-authored exclusions for path tracking. Effective exclusions are
    never stored; they are derived on demand by :meth:`tracking_state`.
    """

    def __init__(
        self,
        panel_id: str,
        template: Optional[Template] = None,
        *,
        config: Optional[GraphMergeConfig] = None,
    ) -> None:
        self.panel_id = panel_id
        self.template = template or default_template()
        self.config = config or GraphMergeConfig()

        self.graph: Graph = create_graph()
        self.base_graph: Optional[Graph] = None
        self.merge_direction: Optional[str] = None
        self.last_approval: Optional[str] = None
        self.path_tracking_enabled = False

        self._direct_exclusions: Dict[str, List[str]] = {}
        self._history: List[Graph] = []
        self._redo_stack: List[Graph] = []
        self._approval_history: List[ApprovalRecord] = []
        self._log = logging.getLogger("graphmerge.panel")

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def graph_type(self) -> GraphType:
        return self.template.graph_type_info or GRAPH_TYPES[self.config.default_graph_type]

    @property
    def special_types(self) -> List[str]:
        return list(self.template.special_types)

    @property
    def tracking_active(self) -> bool:
        return self.path_tracking_enabled and bool(self.template.special_types)

    def set_template(self, template: Template) -> None:
        self.template = template
        self._collect_stale_exclusions()

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def load_graph(self, graph: Graph) -> None:
        self.graph = graph
        self._collect_stale_exclusions()

    def add_node(
        self,
        label: str,
        props: Optional[Dict[str, str]] = None,
        type: Optional[str] = None,
    ) -> OperationResult:
        if find_node(self.graph, label) is not None:
            return OperationResult.failure(f'Node "{label}" already exists')
        self._commit(_add_node(self.graph, Node.create(label, props, type)))
        return OperationResult.success()

    def add_edge(
        self,
        source: str,
        target: str,
        props: Optional[Dict[str, str]] = None,
        type: Optional[str] = None,
    ) -> OperationResult:
        if find_node(self.graph, source) is None:
            return OperationResult.failure(f'Source node "{source}" not found')
        if find_node(self.graph, target) is None:
            return OperationResult.failure(f'Target node "{target}" not found')

        check = validate_edge_add(self.graph, source, target, self.graph_type)
        if not check.ok:
            return OperationResult.failure(check.error or "Edge rejected")

        self._commit(_add_edge(self.graph, Edge.create(source, target, props, type)))
        return OperationResult.success()

    def update_node_props(self, label: str, props: Dict[str, str], type=UNSET) -> OperationResult:
        if find_node(self.graph, label) is None:
            return OperationResult.failure(f'Node "{label}" not found')
        self._commit(_update_node_props(self.graph, label, props, type))
        return OperationResult.success()

    def update_edge_props(
        self,
        source: str,
        target: str,
        props: Dict[str, str],
        type=UNSET,
    ) -> OperationResult:
        if find_edge(self.graph, source, target) is None:
            return OperationResult.failure(f"Edge {source}→{target} not found")
        self._commit(_update_edge_props(self.graph, source, target, props, type))
        return OperationResult.success()

    def delete_elements(
        self,
        node_labels: Iterable[str] = (),
        edge_keys: Iterable[str] = (),
        confirm: Optional[ConfirmFn] = None,
    ) -> OperationResult:
        """
        Remove nodes (with their edges) and edges in one step.

        On graph types that must stay connected, ``confirm(title, message)``
        is asked first when the deletion would split the graph; a declined
        confirmation leaves the panel untouched.
        """
        labels = set(node_labels)
        keys = set(edge_keys)
        if not labels and not keys:
            return OperationResult.failure("Nothing selected")

        warning = None
        if self.graph_type.must_be_connected and self._would_disconnect(labels, keys):
            if confirm is not None and not confirm(
                "Disconnect Warning",
                "Deleting this would disconnect the tree. Proceed anyway?",
            ):
                return OperationResult.failure("Deletion cancelled")
            warning = f"Deletion disconnected the {self.graph_type.label}"

        self._commit(
            Graph(
                nodes=tuple(n for n in self.graph.nodes if n.label not in labels),
                edges=tuple(
                    e
                    for e in self.graph.edges
                    if e.key not in keys and e.source not in labels and e.target not in labels
                ),
            )
        )
        return OperationResult.success(warning)

    def clear_graph(self) -> None:
        """
        Total reset, approval state included.
        """
        self._commit(create_graph())
        self.base_graph = None
        self.merge_direction = None
        self.last_approval = None
        self._approval_history = []

    # ------------------------------------------------------------------
    # Approval & merging
    # ------------------------------------------------------------------

    def approve(self) -> ApprovalRecord:
        """
        Snapshot the current graph as the new baseline.
        """
        if self.base_graph is None:
            summary = "(initial)"
        else:
            summary = format_diff_summary(compute_diff(self.base_graph, self.graph)) or "(no changes)"

        timestamp = iso_timestamp()
        record = ApprovalRecord(
            graph=self.graph,
            base_graph=self.base_graph,
            timestamp=timestamp,
            diff_summary=summary,
        )
        push_bounded(self._approval_history, record, self.config.history.max_approval_history)

        self.base_graph = self.graph
        self.merge_direction = None
        self.last_approval = timestamp
        self._log.info("panel %s approved %s", self.panel_id, summary)
        return record

    def receive_merge(
        self,
        incoming: Graph,
        direction: str,
        scope: Optional[Sequence[str]] = None,
    ) -> OperationResult:
        """
        Merge ``incoming`` using this panel's approved snapshot as the
        deletion baseline. An empty, never-approved panel adopts
        ``incoming`` outright and approves it.
        """
        if self._adopt_if_pristine(incoming):
            return OperationResult.success()

        self._commit(scoped_merge(self.graph, incoming, self.base_graph, scope))
        self.merge_direction = direction
        return OperationResult.success(self._cycle_warning())

    def paste_subgraph(
        self,
        incoming: Graph,
        direction: str,
        exclusions: Optional[Mapping[str, Iterable[str]]] = None,
        source_tracked: bool = False,
    ) -> OperationResult:
        """
        Additive merge: nothing in this panel is deleted.
        """
        if exclusions:
            self._direct_exclusions = merge_exclusions(
                self._direct_exclusions, exclusions, source_tracked
            )

        if self._adopt_if_pristine(incoming):
            return OperationResult.success()

        self._commit(merge_graphs(self.graph, incoming, None))
        self.merge_direction = direction
        return OperationResult.success(self._cycle_warning())

    def branch(self, label: str) -> Graph:
        return get_ancestor_subgraph(self.graph, label)

    def _adopt_if_pristine(self, incoming: Graph) -> bool:
        if not is_empty(self.graph) or self.base_graph is not None:
            return False
        self.graph = incoming
        self.base_graph = incoming
        self.last_approval = iso_timestamp()
        self.merge_direction = None
        self._collect_stale_exclusions()
        return True

    def _cycle_warning(self) -> Optional[str]:
        info = self.graph_type
        if not info.acyclic or not has_cycle(self.graph, info.directed):
            return None
        message = f"Warning: merge introduced a cycle in {info.label}"
        self._log.warning("panel %s: %s", self.panel_id, message)
        return message

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> OperationResult:
        if not self._history:
            return OperationResult.failure("Nothing to undo")
        self._redo_stack.append(self.graph)
        self.graph = self._history.pop()
        self._collect_stale_exclusions()
        return OperationResult.success()

    def redo(self) -> OperationResult:
        if not self._redo_stack:
            return OperationResult.failure("Nothing to redo")
        push_bounded(self._history, self.graph, self.config.history.max_history)
        self.graph = self._redo_stack.pop()
        self._collect_stale_exclusions()
        return OperationResult.success()

    def restore_from_approved(self) -> OperationResult:
        if self.base_graph is None:
            return OperationResult.failure("No approved state to restore")
        self._commit(self.base_graph)
        return OperationResult.success()

    @property
    def approval_history(self) -> List[ApprovalRecord]:
        return list(self._approval_history)

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def _commit(self, graph: Graph) -> None:
        push_bounded(self._history, self.graph, self.config.history.max_history)
        self._redo_stack = []
        self.graph = graph
        self._collect_stale_exclusions()

    # ------------------------------------------------------------------
    # Diff
    # ------------------------------------------------------------------

    def diff(self) -> List[DiffEntry]:
        return compute_diff(self.base_graph, self.graph)

    def is_clean(self) -> bool:
        return not self.diff()

    # ------------------------------------------------------------------
    # Path tracking
    # ------------------------------------------------------------------

    @property
    def direct_exclusions(self) -> Dict[str, List[str]]:
        return {key: list(tags) for key, tags in self._direct_exclusions.items()}

    def set_path_tracking(self, enabled: bool) -> None:
        self.path_tracking_enabled = enabled
        self._collect_stale_exclusions()

    def tracking_state(self) -> TrackingState:
        if not self.tracking_active:
            return TrackingState(direct=self.direct_exclusions)
        return compute_tracking_state(
            self.graph,
            self._direct_exclusions,
            self.special_types,
            warning_threshold=self.config.tracking.descriptor_warning_threshold,
        )

    def toggle_exclusion(self, edge_key: str, serialized_tag: str) -> OperationResult:
        """
        Flip a direct exclusion of ``serialized_tag`` on ``edge_key``.
        """
        if not self.tracking_active:
            return OperationResult.failure("Path tracking is not enabled")

        source, target = split_edge_key(edge_key)
        if find_edge(self.graph, source, target) is None:
            return OperationResult.failure(f"Edge {edge_key} not found")

        tags = compute_path_tags(self.graph, self.special_types, warning_threshold=None)
        carried = {serialize_tag(t, self.special_types) for t in tags.get(edge_key, [])}
        if serialized_tag not in carried:
            return OperationResult.failure(f'Tag "{serialized_tag}" does not apply to edge {edge_key}')

        current = list(self._direct_exclusions.get(edge_key, []))
        if serialized_tag in current:
            current.remove(serialized_tag)
        else:
            current.append(serialized_tag)

        if current:
            self._direct_exclusions[edge_key] = current
        else:
            self._direct_exclusions.pop(edge_key, None)
        return OperationResult.success()

    def is_node_fully_excluded(self, label: str) -> bool:
        state = self.tracking_state()
        return label in state.fully_excluded_nodes(self.graph, self.special_types)

    def relevant_exclusions(self, subgraph: Graph) -> Dict[str, List[str]]:
        return relevant_exclusions(self._direct_exclusions, subgraph)

    def _collect_stale_exclusions(self) -> None:
        if self.tracking_active:
            self._direct_exclusions = self.tracking_state().direct

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def get_state(self) -> Dict[str, Any]:
        """
        JSON-ready snapshot. Only direct exclusions are persisted.
        """

        def _opt(graph: Optional[Graph]) -> Optional[Dict[str, Any]]:
            return graph_to_dict(graph) if graph is not None else None

        return {
            "id": self.panel_id,
            "graph": graph_to_dict(self.graph),
            "base_graph": _opt(self.base_graph),
            "merge_direction": self.merge_direction,
            "last_approval": self.last_approval,
            "path_tracking_enabled": self.path_tracking_enabled,
            "exclusions": self.direct_exclusions,
            "history": [graph_to_dict(g) for g in self._history],
            "redo_stack": [graph_to_dict(g) for g in self._redo_stack],
            "approval_history": [
                {
                    "graph": graph_to_dict(r.graph),
                    "base_graph": _opt(r.base_graph),
                    "timestamp": r.timestamp,
                    "diff_summary": r.diff_summary,
                }
                for r in self._approval_history
            ],
        }

    def set_state(self, state: Mapping[str, Any]) -> None:
        """
        Restore a snapshot produced by :meth:`get_state`.

        Raises ``ValueError`` when an embedded graph is malformed; the panel
        is left exactly as it was.
        """

        def _graph(data: Any) -> Graph:
            result = validate_graph(data)
            if not result.ok or result.graph is None:
                raise ValueError(f"Invalid panel state: {result.error}")
            return result.graph

        def _opt(data: Any) -> Optional[Graph]:
            return _graph(data) if data is not None else None

        graph = _opt(state.get("graph")) or create_graph()
        base_graph = _opt(state.get("base_graph"))
        history = [_graph(g) for g in state.get("history") or []]
        redo_stack = [_graph(g) for g in state.get("redo_stack") or []]
        approval_history = [
            ApprovalRecord(
                graph=_graph(r["graph"]),
                base_graph=_opt(r.get("base_graph")),
                timestamp=r["timestamp"],
                diff_summary=r["diff_summary"],
            )
            for r in state.get("approval_history") or []
        ]
        exclusions = {
            key: list(tags) for key, tags in (state.get("exclusions") or {}).items()
        }

        self.graph = graph
        self.base_graph = base_graph
        self.merge_direction = state.get("merge_direction")
        self.last_approval = state.get("last_approval")
        self.path_tracking_enabled = bool(state.get("path_tracking_enabled", False))
        self._direct_exclusions = exclusions
        self._history = history
        self._redo_stack = redo_stack
        self._approval_history = approval_history
        self._collect_stale_exclusions()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _would_disconnect(self, labels: Iterable[str], keys: Iterable[str]) -> bool:
        for label in labels:
            if would_disconnect_on_node_remove(self.graph, label):
                return True
        for key in keys:
            source, target = split_edge_key(key)
            if would_disconnect_on_edge_remove(self.graph, source, target):
                return True
        return False
