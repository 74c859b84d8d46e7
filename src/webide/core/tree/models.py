"""
Virtual project tree data models.

These models describe the in-memory project the IDE works on:
- FileNode: a file with a text content buffer
- FolderNode: a folder with an ordered tuple of children
- ProjectTree: the ordered sequence of root nodes

All models are frozen. A mutation never edits a node in place; the tree
store builds a new ProjectTree that reuses every untouched subtree, so a
caller holding an older tree keeps a stable view of it.

Example:
    src/                 FolderNode(path="src")
    └── index.js         FileNode(path="src/index.js")
    README.md            FileNode(path="README.md")
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from webide.core.errors import InvalidNameError, NotFoundError, ParentNotFoundError
from webide.core.tree.paths import SEPARATOR, file_extension, join_path, split_path, validate_name


class NodeKind(str, Enum):
    """Kind of a tree node; the value is the snapshot ``type`` tag."""

    FILE = "file"
    FOLDER = "folder"


class FileNode(BaseModel):
    """A file entry. ``content`` is opaque text and may be empty."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: Literal["file"] = "file"
    path: str
    content: str = ""

    @property
    def kind(self) -> NodeKind:
        return NodeKind.FILE

    @property
    def extension(self) -> str:
        return file_extension(self.name)


class FolderNode(BaseModel):
    """A folder entry. Children keep insertion order, which is display order."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: Literal["folder"] = "folder"
    path: str
    children: Tuple[Node, ...] = ()

    @property
    def kind(self) -> NodeKind:
        return NodeKind.FOLDER

    def child(self, name: str) -> Optional[Node]:
        for node in self.children:
            if node.name == name:
                return node
        return None

    def child_names(self) -> List[str]:
        return [node.name for node in self.children]


Node = Annotated[Union[FileNode, FolderNode], Field(discriminator="type")]

FolderNode.model_rebuild()


def make_node(kind: NodeKind | str, parent_path: Optional[str], name: str) -> Node:
    """Build an empty file or folder under ``parent_path``."""
    validate_name(name)
    path = join_path(parent_path, name)
    if NodeKind(kind) is NodeKind.FILE:
        return FileNode(name=name, path=path)
    return FolderNode(name=name, path=path)


class ProjectTree(BaseModel):
    """
    Immutable project tree: the ordered sequence of root nodes.

    Lookups descend by name one segment at a time, so ``resolve`` costs
    O(depth x siblings) and never touches unrelated subtrees.
    """

    model_config = ConfigDict(frozen=True)

    roots: Tuple[Node, ...] = ()

    # =========================================================================
    # Lookup
    # =========================================================================

    def find(self, path: str) -> Optional[Node]:
        """Return the node at ``path`` or None."""
        segments = split_path(path)
        if not segments:
            return None
        nodes: Tuple[Node, ...] = self.roots
        current: Optional[Node] = None
        for segment in segments:
            current = next((node for node in nodes if node.name == segment), None)
            if current is None:
                return None
            nodes = current.children if isinstance(current, FolderNode) else ()
        return current

    def resolve(self, path: str) -> Node:
        """Return the node at ``path``; raise NotFoundError otherwise."""
        node = self.find(path)
        if node is None:
            raise NotFoundError(path)
        return node

    def resolve_file(self, path: str) -> FileNode:
        node = self.find(path)
        if not isinstance(node, FileNode):
            raise NotFoundError(path, f"File not found: {path}")
        return node

    def children_of(self, parent_path: Optional[str]) -> Tuple[Node, ...]:
        """Children of a folder, or the root sequence when ``parent_path`` is None."""
        if parent_path is None:
            return self.roots
        parent = self.find(parent_path)
        if not isinstance(parent, FolderNode):
            raise ParentNotFoundError(parent_path)
        return parent.children

    def contains(self, path: str) -> bool:
        return self.find(path) is not None

    # =========================================================================
    # Traversal
    # =========================================================================

    def walk(self) -> Iterator[Node]:
        """Depth-first traversal in display order."""
        stack: List[Node] = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, FolderNode):
                stack.extend(reversed(node.children))

    def paths(self) -> List[str]:
        return [node.path for node in self.walk()]

    def files(self) -> List[FileNode]:
        return [node for node in self.walk() if isinstance(node, FileNode)]

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def is_empty(self) -> bool:
        return not self.roots


def check_invariants(tree: ProjectTree) -> List[str]:
    """
    Return every invariant violation found in ``tree``.

    Checked:
    - names are valid (non-empty, no separators, not '.' or '..')
    - each path equals the parent path joined with the name
    - sibling names are unique, so paths are unique tree-wide
    """
    problems: List[str] = []
    seen: Dict[str, int] = {}

    def visit(nodes: Tuple[Node, ...], parent_path: Optional[str]) -> None:
        sibling_names: set = set()
        for node in nodes:
            try:
                validate_name(node.name)
            except InvalidNameError as exc:
                problems.append(str(exc))
            expected = join_path(parent_path, node.name)
            if node.path != expected:
                problems.append(f"{node.path}: path should be {expected}")
            if node.name in sibling_names:
                problems.append(f"{expected}: duplicate name '{node.name}'")
            sibling_names.add(node.name)
            seen[node.path] = seen.get(node.path, 0) + 1
            if isinstance(node, FolderNode):
                visit(node.children, expected)

    visit(tree.roots, None)
    for path, count in seen.items():
        if count > 1:
            problems.append(f"{path}: path used {count} times")
    return problems


def default_seed() -> ProjectTree:
    """The starter project every new session opens with."""
    return ProjectTree(
        roots=(
            FolderNode(
                name="src",
                path="src",
                children=(
                    FileNode(
                        name="index.js",
                        path=f"src{SEPARATOR}index.js",
                        content='// Welcome to Web IDE\nconsole.log("Hello World!");',
                    ),
                ),
            ),
            FileNode(name="README.md", path="README.md", content="# My Project\n\nWelcome to your project!"),
        )
    )


__all__ = [
    "NodeKind",
    "FileNode",
    "FolderNode",
    "Node",
    "ProjectTree",
    "make_node",
    "check_invariants",
    "default_seed",
]
