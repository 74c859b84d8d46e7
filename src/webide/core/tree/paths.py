"""Path utilities for slash-joined node paths like 'src/app/index.js'."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from webide.core.errors import InvalidNameError

SEPARATOR = "/"
_FORBIDDEN_CHARS = ("/", "\\")
_RESERVED_NAMES = (".", "..")


def validate_name(name: str) -> str:
    """Return ``name`` unchanged or raise InvalidNameError."""
    if not isinstance(name, str) or not name:
        raise InvalidNameError(str(name), "name must not be empty")
    if not name.strip():
        raise InvalidNameError(name, "name must not be blank")
    for char in _FORBIDDEN_CHARS:
        if char in name:
            raise InvalidNameError(name, f"name must not contain {char!r}")
    if name in _RESERVED_NAMES:
        raise InvalidNameError(name, "name is reserved")
    return name


def join_path(parent_path: Optional[str], name: str) -> str:
    if not parent_path:
        return name
    return f"{parent_path}{SEPARATOR}{name}"


def split_path(path: str) -> Tuple[str, ...]:
    """Split a path into its name segments; empty segments are dropped."""
    return tuple(segment for segment in path.split(SEPARATOR) if segment)


def normalize_parent(parent_path: Optional[str]) -> Optional[str]:
    """Canonical parent path; '', '/' and None are the root sequence."""
    if parent_path is None:
        return None
    return SEPARATOR.join(split_path(parent_path)) or None


def file_extension(name: str) -> str:
    """Lower-cased extension including the dot, or '' when there is none."""
    stem, dot, suffix = name.rpartition(".")
    if not dot or not stem:
        return ""
    return f".{suffix.lower()}"


def is_same_or_descendant(path: str, ancestor: str) -> bool:
    return path == ancestor or path.startswith(ancestor + SEPARATOR)


@dataclass(frozen=True)
class NodePath:
    """Parsed node path: parent path plus final name."""

    parent: Optional[str]
    name: str

    @classmethod
    def parse(cls, path: str) -> "NodePath":
        segments = split_path(path)
        if not segments:
            raise InvalidNameError(path, "path must not be empty")
        parent = SEPARATOR.join(segments[:-1]) or None
        return cls(parent=parent, name=segments[-1])

    def to_string(self) -> str:
        return join_path(self.parent, self.name)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def depth(self) -> int:
        return len(split_path(self.to_string()))


__all__ = [
    "SEPARATOR",
    "NodePath",
    "validate_name",
    "join_path",
    "split_path",
    "normalize_parent",
    "is_same_or_descendant",
    "file_extension",
]
