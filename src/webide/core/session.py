"""
Editing session: binds one file as active and buffers its content.

States:
    Unbound                 no active file
    Bound(path, buffer)     ``buffer`` is a private copy of the file content

``open`` replaces any previous binding without writing it back. Only
``save`` pushes the buffer into the tree store. Callers that want to warn
about unsaved changes check ``has_unsaved_changes()`` before ``open``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from webide.core.errors import NoActiveFileError, NotAFileError
from webide.core.tree.models import FileNode, FolderNode, ProjectTree
from webide.core.tree.store import TreeStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unbound:
    pass


@dataclass(frozen=True)
class Bound:
    path: str
    buffer: str


SessionState = Union[Unbound, Bound]


class EditingSession:
    def __init__(self, store: TreeStore):
        self.store = store
        self._state: SessionState = Unbound()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_bound(self) -> bool:
        return isinstance(self._state, Bound)

    @property
    def active_path(self) -> Optional[str]:
        return self._state.path if isinstance(self._state, Bound) else None

    @property
    def active_name(self) -> Optional[str]:
        path = self.active_path
        return path.rsplit("/", 1)[-1] if path else None

    @property
    def buffer(self) -> Optional[str]:
        return self._state.buffer if isinstance(self._state, Bound) else None

    def _require_bound(self, operation: str) -> Bound:
        if not isinstance(self._state, Bound):
            raise NoActiveFileError(operation)
        return self._state

    def open(self, path: str) -> FileNode:
        """Bind ``path`` and load its content into the buffer.

        Raises NotFoundError when the path does not resolve and NotAFileError
        for folders. Any unsaved buffer is dropped.
        """
        node = self.store.resolve(path)
        if isinstance(node, FolderNode):
            raise NotAFileError(path)
        if isinstance(self._state, Bound) and self._state.path != node.path:
            logger.debug("Discarding buffer for %s", self._state.path)
        self._state = Bound(path=node.path, buffer=node.content)
        return node

    def edit(self, text: str) -> None:
        bound = self._require_bound("edit")
        self._state = Bound(path=bound.path, buffer=text)

    def save(self) -> ProjectTree:
        """Write the buffer back through ``TreeStore.update``.

        Surfaces NotFoundError when the file was deleted or renamed since it
        was opened; the buffer is kept so the caller can recover it.
        """
        bound = self._require_bound("save")
        return self.store.update(bound.path, bound.buffer)

    def close(self) -> None:
        self._state = Unbound()

    def has_unsaved_changes(self) -> bool:
        if not isinstance(self._state, Bound):
            return False
        node = self.store.find(self._state.path)
        if not isinstance(node, FileNode):
            return True
        return node.content != self._state.buffer


__all__ = ["EditingSession", "Unbound", "Bound", "SessionState"]
