from __future__ import annotations

"""Error taxonomy shared by the tree store, session, sandbox and sync client."""

import os
from typing import Iterable, Optional

from pydantic import ValidationError


class WebIDEError(RuntimeError):
    """Base class for every recoverable error raised by the core."""


class NotFoundError(WebIDEError):
    """A path does not resolve to a node of the expected kind."""

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(message or f"Path not found: {path}")


class NotAFileError(WebIDEError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a file: {path}")


class ParentNotFoundError(WebIDEError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Parent folder not found: {path}")


class DuplicateNameError(WebIDEError):
    def __init__(self, parent_path: str | None, name: str):
        self.parent_path = parent_path
        self.name = name
        where = parent_path or "<root>"
        super().__init__(f"'{name}' already exists in {where}")


class InvalidNameError(WebIDEError):
    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid name {name!r}: {reason}")


class InvalidMoveError(WebIDEError):
    def __init__(self, path: str, destination: str):
        self.path = path
        self.destination = destination
        super().__init__(f"Cannot move {path} into {destination}")


class NoActiveFileError(WebIDEError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"No active file: cannot {operation}")


class ParseError(WebIDEError):
    """Malformed snapshot text or snapshot file."""

    def __init__(
        self,
        message: str,
        *,
        problems: Iterable[str] | None = None,
        source: str | None = None,
        cause: Exception | None = None,
    ):
        self.message = message
        self.problems = list(problems or [])
        self.source = source
        self.cause = cause
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        base = self.message
        if self.source:
            base = f"{base} ({_relative_path(self.source)})"
        if isinstance(self.cause, ValidationError):
            return f"{base}: {format_validation_errors(self.cause.errors())}"
        if self.problems:
            return f"{base}: {_join_limited(self.problems)}"
        if self.cause:
            return f"{base}: {self.cause}"
        return base

    def __str__(self) -> str:
        return self._build_message()


class ConfigurationError(WebIDEError):
    """Missing or malformed configuration, detected before any remote call."""

    def __init__(self, message: str, *, file_path: str | None = None, cause: Exception | None = None):
        self.message = message
        self.file_path = file_path
        self.cause = cause
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        base = self.message
        if self.file_path:
            base = f"{base} ({_relative_path(self.file_path)})"
        if isinstance(self.cause, ValidationError):
            return f"{base}: {format_validation_errors(self.cause.errors())}"
        if self.cause:
            return f"{base}: {self.cause}"
        return base

    def __str__(self) -> str:
        return self._build_message()


class RemoteError(WebIDEError):
    """Transport or authentication failure reported by the remote collaborator."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class EvaluationFault(WebIDEError):
    """The host evaluator raised while running a script."""


def format_validation_errors(errors: Iterable[dict]) -> str:
    snippets = []
    for err in errors:
        loc = ".".join(str(entry) for entry in err.get("loc", [])) or "<root>"
        msg = err.get("msg") or err.get("type") or "validation error"
        snippets.append(f"{loc}: {msg}")
    return _join_limited(snippets)


def _join_limited(snippets: list[str], limit: int = 3) -> str:
    shown = snippets[:limit]
    remaining = len(snippets) - len(shown)
    if remaining > 0:
        shown.append(f"... ({remaining} more)")
    return "; ".join(shown)


def _relative_path(path: str) -> str:
    try:
        return os.path.relpath(path)
    except ValueError:  # pragma: no cover - different drive on Windows
        return path


__all__ = [
    "WebIDEError",
    "NotFoundError",
    "NotAFileError",
    "ParentNotFoundError",
    "DuplicateNameError",
    "InvalidNameError",
    "InvalidMoveError",
    "NoActiveFileError",
    "ParseError",
    "ConfigurationError",
    "RemoteError",
    "EvaluationFault",
    "format_validation_errors",
]
