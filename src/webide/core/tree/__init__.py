"""
Virtual project tree.

Components:
- FileNode / FolderNode: frozen node models, tagged by ``type``
- ProjectTree: the ordered root sequence with path lookups
- TreeStore: owner of the tree-of-record, path-addressed CRUD
- filter_tree: name-search view over a tree

Example:
    from webide.core.tree import NodeKind, TreeStore

    store = TreeStore()
    store.create("src", "app.js", NodeKind.FILE)
    store.update("src/app.js", "console.log(1)")
"""

from webide.core.tree.filtering import count_matches, filter_tree
from webide.core.tree.models import (
    FileNode,
    FolderNode,
    Node,
    NodeKind,
    ProjectTree,
    check_invariants,
    default_seed,
)
from webide.core.tree.store import TreeStore

__all__ = [
    "FileNode",
    "FolderNode",
    "Node",
    "NodeKind",
    "ProjectTree",
    "TreeStore",
    "check_invariants",
    "count_matches",
    "default_seed",
    "filter_tree",
]
