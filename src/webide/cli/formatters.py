"""Formatting helpers for CLI presentation."""

from __future__ import annotations

from typing import Iterable, Tuple

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from webide.core.tree.models import FolderNode, Node

def _label(node: Node) -> str:
    if isinstance(node, FolderNode):
        return f"[bold blue]{escape(node.name)}/[/bold blue]"
    return escape(node.name)

def build_tree_view(nodes: Tuple[Node, ...], title: str = "project") -> Tree:
    """Render nodes as a rich tree in display order."""
    root = Tree(f"[bold]{escape(title)}[/bold]")

    def add(branch: Tree, children: Tuple[Node, ...]) -> None:
        for node in children:
            child = branch.add(_label(node))
            if isinstance(node, FolderNode):
                add(child, node.children)

    add(root, nodes)
    return root

def print_lines(console: Console, lines: Iterable[str]) -> None:
    """Print terminal lines verbatim (no markup, no wrapping)."""
    for line in lines:
        console.print(line, markup=False, highlight=False, soft_wrap=True)


__all__ = ["build_tree_view", "print_lines"]
