"""Snapshot codec: the textual, order-preserving encoding of a ProjectTree.

Format (JSON, two-space indent):

    [
      {"name": "src", "type": "folder", "path": "src", "children": [
        {"name": "index.js", "type": "file", "path": "src/index.js", "content": "..."}
      ]},
      {"name": "README.md", "type": "file", "path": "README.md", "content": "..."}
    ]

The same records can be written as YAML for project export.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Tuple

import yaml
from pydantic import TypeAdapter, ValidationError

from webide.core.errors import ParseError, WebIDEError
from webide.core.tree.models import FolderNode, Node, NodeKind, ProjectTree, check_invariants
from webide.core.tree.paths import join_path, split_path

logger = logging.getLogger(__name__)

_ROOTS_ADAPTER: TypeAdapter[List[Node]] = TypeAdapter(List[Node])

YAML_SUFFIXES = (".yaml", ".yml")


def to_records(tree: ProjectTree) -> List[dict[str, Any]]:
    """Plain dict records in snapshot key order (name, type, path, content|children)."""
    return [node.model_dump(mode="json") for node in tree.roots]


def from_records(data: Any, *, source: str | None = None) -> ProjectTree:
    """Validate decoded records and build a tree; raises ParseError, never partially applies."""
    if not isinstance(data, list):
        raise ParseError("Snapshot must be a list of node records", source=source)
    try:
        roots = _ROOTS_ADAPTER.validate_python(data)
        tree = ProjectTree(roots=tuple(roots))
        problems = check_invariants(tree)
    except ValidationError as exc:
        raise ParseError("Invalid snapshot", source=source, cause=exc) from exc
    except RecursionError as exc:
        raise ParseError("Snapshot is nested too deeply", source=source) from exc
    if problems:
        raise ParseError("Snapshot violates tree invariants", problems=problems, source=source)
    return tree


def serialize(tree: ProjectTree) -> str:
    return json.dumps(to_records(tree), indent=2, ensure_ascii=False)


def deserialize(snapshot: str | bytes) -> ProjectTree:
    try:
        data = json.loads(snapshot)
    except RecursionError as exc:
        raise ParseError("Snapshot is nested too deeply") from exc
    except (TypeError, ValueError) as exc:
        raise ParseError("Snapshot is not valid JSON", cause=exc) from exc
    return from_records(data)


def export_snapshot(tree: ProjectTree, file_path: str | Path) -> Path:
    """Write ``tree`` to ``file_path`` as JSON, or YAML for .yaml/.yml."""
    path = Path(file_path)
    if path.suffix.lower() in YAML_SUFFIXES:
        text = yaml.safe_dump(to_records(tree), sort_keys=False, allow_unicode=True, default_flow_style=False)
    else:
        text = serialize(tree)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise ParseError("Cannot write snapshot file", source=str(path), cause=exc) from exc
    logger.info("Exported %d nodes to %s", tree.node_count(), path)
    return path


def import_snapshot(file_path: str | Path) -> ProjectTree:
    """Read a snapshot file written by ``export_snapshot`` (or by hand)."""
    path = Path(file_path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError("Cannot read snapshot file", source=str(path), cause=exc) from exc

    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            data = yaml.safe_load(text)
        except RecursionError as exc:
            raise ParseError("Snapshot is nested too deeply", source=str(path)) from exc
        except yaml.YAMLError as exc:
            raise ParseError("Snapshot is not valid YAML", source=str(path), cause=exc) from exc
        return from_records(data if data is not None else [], source=str(path))

    try:
        data = json.loads(text)
    except RecursionError as exc:
        raise ParseError("Snapshot is nested too deeply", source=str(path)) from exc
    except ValueError as exc:
        raise ParseError("Snapshot is not valid JSON", source=str(path), cause=exc) from exc
    return from_records(data, source=str(path))


def build_tree_from_files(entries: Iterable[Tuple[str, str]]) -> ProjectTree:
    """Build a tree from flat ``(path, content)`` pairs.

    Intermediate folders are created in first-seen order, files keep the
    order of ``entries``.
    """
    from webide.core.tree.store import create_node, update_content

    tree = ProjectTree()
    for raw_path, content in entries:
        segments = split_path(raw_path)
        if not segments:
            raise ParseError(f"Empty file path in listing: {raw_path!r}")
        parent = None
        try:
            for name in segments[:-1]:
                folder_path = join_path(parent, name)
                existing = tree.find(folder_path)
                if existing is None:
                    tree = create_node(tree, parent, name, NodeKind.FOLDER)
                elif not isinstance(existing, FolderNode):
                    raise ParseError(f"{folder_path} is both a file and a folder")
                parent = folder_path
            tree = create_node(tree, parent, segments[-1], NodeKind.FILE)
            tree = update_content(tree, join_path(parent, segments[-1]), content)
        except ParseError:
            raise
        except WebIDEError as exc:
            raise ParseError(f"Cannot place {raw_path}", cause=exc) from exc
    return tree


__all__ = [
    "serialize",
    "deserialize",
    "to_records",
    "from_records",
    "export_snapshot",
    "import_snapshot",
    "build_tree_from_files",
]
