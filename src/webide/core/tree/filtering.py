"""Filtered, depth-preserving projections of the project tree for name search."""

from __future__ import annotations

from typing import Optional, Tuple

from webide.core.tree.models import FolderNode, Node, ProjectTree


def _matches(node: Node, needle: str) -> bool:
    return needle in node.name.lower()


def _filter_nodes(nodes: Tuple[Node, ...], needle: str) -> Tuple[Node, ...]:
    kept = []
    for node in nodes:
        projected = _project(node, needle)
        if projected is not None:
            kept.append(projected)
    return tuple(kept)


def _project(node: Node, needle: str) -> Optional[Node]:
    if isinstance(node, FolderNode):
        children = _filter_nodes(node.children, needle)
        if children or _matches(node, needle):
            if children == node.children:
                return node
            return node.model_copy(update={"children": children})
        return None
    return node if _matches(node, needle) else None


def filter_tree(tree: ProjectTree, query: str) -> Tuple[Node, ...]:
    """Keep nodes whose name contains ``query`` (case-insensitive) plus their ancestors.

    A folder survives when its own name matches or when it still has a kept
    descendant; relative order and depth are unchanged. An empty query keeps
    everything. The result is a read-only view: mutations address the full
    tree by path.
    """
    if not query:
        return tree.roots
    return _filter_nodes(tree.roots, query.lower())


def count_matches(tree: ProjectTree, query: str) -> int:
    """Number of nodes whose own name matches ``query``."""
    needle = query.lower()
    return sum(1 for node in tree.walk() if _matches(node, needle))


__all__ = ["filter_tree", "count_matches"]
