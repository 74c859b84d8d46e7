from __future__ import annotations

"""Utilities for resolving the workspace snapshot and export paths."""

from pathlib import Path

SNAPSHOT_SUFFIXES = (".json", ".yaml", ".yml")


def workspace_path(path: str | None, default: str = "project.json") -> Path:
    """Workspace snapshot file; relative paths resolve against the current directory."""
    p = Path(path or default)
    return p if p.is_absolute() else Path.cwd() / p


def resolve_export_path(name: str) -> Path:
    """Resolve an export target.

    A name without a snapshot extension gets ``.json`` appended, so
    ``webide export backup`` writes ``backup.json``.
    """
    p = Path(name)
    if p.suffix.lower() not in SNAPSHOT_SUFFIXES:
        p = p.with_name(f"{p.name}.json")
    return p


def find_snapshot_file(name_or_path: str) -> Path:
    """
    Find a snapshot file to import.

    1. If the path exists as-is, use it
    2. Otherwise try it with each snapshot extension

    Raises:
        FileNotFoundError: If no candidate exists
    """
    p = Path(name_or_path)
    if p.exists():
        return p

    candidates = [p.with_name(f"{p.name}{suffix}") for suffix in SNAPSHOT_SUFFIXES]
    for candidate in candidates:
        if candidate.exists():
            return candidate

    looked = "\n".join(f"  - {c}" for c in [p, *candidates])
    raise FileNotFoundError(f"Snapshot file not found: '{name_or_path}'\nLooked in:\n{looked}")


__all__ = ["workspace_path", "resolve_export_path", "find_snapshot_file", "SNAPSHOT_SUFFIXES"]
