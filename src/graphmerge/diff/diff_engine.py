from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Mapping, Optional, Sequence, Tuple, TypeVar

from graphmerge.graph.graph_schema import Edge, Graph, Node

DiffKind = Literal["node", "edge"]
DiffAction = Literal["added", "removed", "modified"]

_Element = TypeVar("_Element", Node, Edge)


@dataclass(frozen=True)
class DiffEntry:
    """
    One element-level difference between a baseline and a current graph.

    ``key`` is the node label or the ``source→target`` edge key.
    """

    kind: DiffKind
    action: DiffAction
    key: str
    old_props: Optional[Dict[str, str]] = None
    new_props: Optional[Dict[str, str]] = None

    def changed_keys(self) -> List[str]:
        old = self.old_props or {}
        new = self.new_props or {}
        keys = list(old) + [k for k in new if k not in old]
        return [k for k in keys if old.get(k) != new.get(k)]


def props_equal(a: Mapping[str, str], b: Mapping[str, str]) -> bool:
    """
    Unordered key/value comparison.
    """
    return len(a) == len(b) and all(k in b and b[k] == v for k, v in a.items())


def _diff_elements(
    kind: DiffKind,
    base: Dict[str, _Element],
    current: Dict[str, _Element],
) -> List[DiffEntry]:
    added: List[DiffEntry] = []
    modified: List[DiffEntry] = []
    removed: List[DiffEntry] = []

    for key, element in current.items():
        previous = base.get(key)
        if previous is None:
            added.append(DiffEntry(kind, "added", key, None, dict(element.props)))
        elif not props_equal(previous.props, element.props):
            modified.append(
                DiffEntry(kind, "modified", key, dict(previous.props), dict(element.props))
            )

    for key, element in base.items():
        if key not in current:
            removed.append(DiffEntry(kind, "removed", key, dict(element.props), None))

    return added + modified + removed


def compute_diff(base: Optional[Graph], current: Graph) -> List[DiffEntry]:
    """
    Set-difference of ``current`` against ``base``.

    Nodes come before edges; within each kind entries are grouped as
    added, modified, removed. A missing baseline yields no entries.
    """
    if base is None:
        return []

    entries = _diff_elements(
        "node",
        {n.key: n for n in base.nodes},
        {n.key: n for n in current.nodes},
    )
    entries += _diff_elements(
        "edge",
        {e.key: e for e in base.edges},
        {e.key: e for e in current.edges},
    )
    return entries


# ---------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------

_COMPACT_ORDER: Tuple[Tuple[DiffAction, DiffKind, str], ...] = (
    ("added", "node", "+{}n"),
    ("modified", "node", "~{}n"),
    ("removed", "node", "-{}n"),
    ("added", "edge", "+{}e"),
    ("modified", "edge", "~{}e"),
    ("removed", "edge", "-{}e"),
)


def format_diff_summary(entries: Sequence[DiffEntry]) -> str:
    """
    Compact counter string such as ``"+3n ~1n -2n +1e"``.
    """
    parts = []
    for action, kind, pattern in _COMPACT_ORDER:
        count = sum(1 for d in entries if d.action == action and d.kind == kind)
        if count:
            parts.append(pattern.format(count))
    return " ".join(parts)


def _plural(word: str, count: int) -> str:
    return word if count == 1 else f"{word}s"


def format_grouped_diff_summary(entries: Sequence[DiffEntry]) -> str:
    if not entries:
        return "No changes."

    sentences = []
    for kind in ("node", "edge"):
        for action, verb in (("added", "Added"), ("removed", "Removed"), ("modified", "Modified")):
            group = [d for d in entries if d.action == action and d.kind == kind]
            if not group:
                continue
            items = []
            for d in group:
                changed = d.changed_keys() if action == "modified" else []
                items.append(f"{d.key} ({', '.join(changed)} changed)" if changed else d.key)
            sentences.append(
                f"{verb} {len(group)} {_plural(kind, len(group))}: {', '.join(items)}"
            )
    return ". ".join(sentences) + "."
