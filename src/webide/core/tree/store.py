"""
Tree store: path-addressed CRUD over an immutable ProjectTree.

The module-level functions are pure: they take a tree and return a new one,
raising before anything is built when the request is invalid. Only the nodes
on the root-to-target path are rebuilt; every other subtree is reused by
reference. ``TreeStore`` owns the tree-of-record and swaps it atomically.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from webide.core.errors import (
    DuplicateNameError,
    InvalidMoveError,
    NotFoundError,
    ParentNotFoundError,
)
from webide.core.tree.models import (
    FolderNode,
    Node,
    NodeKind,
    ProjectTree,
    default_seed,
    make_node,
)
from webide.core.tree.paths import (
    NodePath,
    is_same_or_descendant,
    join_path,
    normalize_parent,
    split_path,
    validate_name,
)
from webide.utils.logging import log_calls

logger = logging.getLogger(__name__)

# Receives the node at the target path; returns its replacement, or None to drop it.
Transform = Callable[[Node], Optional[Node]]


def _rebuild(nodes: Tuple[Node, ...], segments: Tuple[str, ...], path: str, transform: Transform) -> Tuple[Node, ...]:
    head, rest = segments[0], segments[1:]
    for index, node in enumerate(nodes):
        if node.name != head:
            continue
        if rest:
            if not isinstance(node, FolderNode):
                raise NotFoundError(path)
            replacement: Optional[Node] = node.model_copy(
                update={"children": _rebuild(node.children, rest, path, transform)}
            )
        else:
            replacement = transform(node)
        if replacement is None:
            return nodes[:index] + nodes[index + 1 :]
        return nodes[:index] + (replacement,) + nodes[index + 1 :]
    raise NotFoundError(path)


def _apply(tree: ProjectTree, path: str, transform: Transform) -> ProjectTree:
    segments = split_path(path)
    if not segments:
        raise NotFoundError(path)
    return ProjectTree(roots=_rebuild(tree.roots, segments, path, transform))


def _append_child(tree: ProjectTree, parent_path: Optional[str], node: Node) -> ProjectTree:
    if parent_path is None:
        return ProjectTree(roots=tree.roots + (node,))

    def _append(parent: Node) -> Node:
        if not isinstance(parent, FolderNode):
            raise ParentNotFoundError(parent_path)
        return parent.model_copy(update={"children": parent.children + (node,)})

    return _apply(tree, parent_path, _append)


def _rebase(node: Node, parent_path: Optional[str], name: Optional[str] = None) -> Node:
    """Copy ``node`` under a new parent (and optionally a new name), fixing every descendant path."""
    name = name or node.name
    path = join_path(parent_path, name)
    if isinstance(node, FolderNode):
        children = tuple(_rebase(child, path) for child in node.children)
        return node.model_copy(update={"name": name, "path": path, "children": children})
    return node.model_copy(update={"name": name, "path": path})


def _ensure_unique(tree: ProjectTree, parent_path: Optional[str], name: str) -> None:
    siblings = tree.children_of(parent_path)
    if any(sibling.name == name for sibling in siblings):
        raise DuplicateNameError(parent_path, name)


# =============================================================================
# Pure operations
# =============================================================================


def create_node(tree: ProjectTree, parent_path: Optional[str], name: str, kind: NodeKind | str) -> ProjectTree:
    """Append an empty file or folder to ``parent_path`` (roots when None)."""
    parent_path = normalize_parent(parent_path)
    validate_name(name)
    _ensure_unique(tree, parent_path, name)
    return _append_child(tree, parent_path, make_node(kind, parent_path, name))


def update_content(tree: ProjectTree, path: str, content: str) -> ProjectTree:
    """Replace the content of the file at ``path``."""
    current = tree.resolve_file(path)
    if current.content == content:
        return tree
    return _apply(tree, path, lambda node: node.model_copy(update={"content": content}))


def rename_node(tree: ProjectTree, path: str, new_name: str) -> ProjectTree:
    """Rename the node at ``path``; its subtree is re-pathed, sibling order is kept."""
    node = tree.resolve(path)
    validate_name(new_name)
    if new_name == node.name:
        return tree
    parent = NodePath.parse(node.path).parent
    _ensure_unique(tree, parent, new_name)
    return _apply(tree, path, lambda current: _rebase(current, parent, new_name))


def move_node(tree: ProjectTree, path: str, new_parent_path: Optional[str]) -> ProjectTree:
    """Move the node at ``path`` to the end of ``new_parent_path`` (roots when None)."""
    node = tree.resolve(path)
    destination = normalize_parent(new_parent_path)
    if destination is not None:
        if not isinstance(tree.find(destination), FolderNode):
            raise ParentNotFoundError(destination)
        if is_same_or_descendant(destination, node.path):
            raise InvalidMoveError(node.path, destination)
    if destination == NodePath.parse(node.path).parent:
        return tree
    _ensure_unique(tree, destination, node.name)
    detached = _apply(tree, path, lambda _current: None)
    return _append_child(detached, destination, _rebase(node, destination))


def delete_node(tree: ProjectTree, path: str) -> ProjectTree:
    """Remove the node at ``path`` together with its whole subtree."""
    tree.resolve(path)
    return _apply(tree, path, lambda _current: None)


# =============================================================================
# Store
# =============================================================================


class TreeStore:
    """
    Owner of the tree-of-record.

    Each mutating method returns the new tree after adopting it. When an
    operation fails the previous tree stays in place, untouched.
    """

    def __init__(self, tree: ProjectTree | None = None):
        self._tree = tree if tree is not None else default_seed()

    @property
    def tree(self) -> ProjectTree:
        return self._tree

    def _adopt(self, tree: ProjectTree) -> ProjectTree:
        self._tree = tree
        return tree

    @log_calls()
    def create(self, parent_path: Optional[str], name: str, kind: NodeKind | str) -> ProjectTree:
        return self._adopt(create_node(self._tree, parent_path, name, kind))

    @log_calls(hide=("new_content",))
    def update(self, path: str, new_content: str) -> ProjectTree:
        return self._adopt(update_content(self._tree, path, new_content))

    @log_calls()
    def rename(self, path: str, new_name: str) -> ProjectTree:
        return self._adopt(rename_node(self._tree, path, new_name))

    @log_calls()
    def move(self, path: str, new_parent_path: Optional[str]) -> ProjectTree:
        return self._adopt(move_node(self._tree, path, new_parent_path))

    @log_calls()
    def delete(self, path: str) -> ProjectTree:
        return self._adopt(delete_node(self._tree, path))

    def resolve(self, path: str) -> Node:
        return self._tree.resolve(path)

    def find(self, path: str) -> Optional[Node]:
        return self._tree.find(path)

    def replace(self, tree: ProjectTree) -> ProjectTree:
        """Adopt a whole new tree (import, pull)."""
        logger.info("Replacing project tree (%d nodes)", tree.node_count())
        return self._adopt(tree)

    def serialize(self) -> str:
        from webide.io.snapshot import serialize

        return serialize(self._tree)

    def deserialize(self, snapshot: str) -> ProjectTree:
        """Parse ``snapshot`` and adopt it; nothing changes when parsing fails."""
        from webide.io.snapshot import deserialize

        return self.replace(deserialize(snapshot))


__all__ = [
    "TreeStore",
    "create_node",
    "update_content",
    "rename_node",
    "move_node",
    "delete_node",
]
