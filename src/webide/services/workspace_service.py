"""Workspace Service: one editing session over a project tree, with terminal reporting."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

from webide.config import IDEConfig, SandboxSettings
from webide.core.errors import ConfigurationError, NoActiveFileError, ParseError, WebIDEError
from webide.core.sandbox import ExecutionResult, ExecutionSandbox, SubprocessEvaluator
from webide.core.session import EditingSession
from webide.core.terminal import TerminalLog
from webide.core.tree.filtering import filter_tree
from webide.core.tree.models import FileNode, Node, NodeKind, ProjectTree
from webide.core.tree.paths import is_same_or_descendant, join_path, normalize_parent
from webide.core.tree.store import TreeStore
from webide.io.snapshot import export_snapshot, import_snapshot
from webide.sync.base import RemoteAck, RemoteCollaborator, parse_remote_ref
from webide.sync.client import SyncClient

logger = logging.getLogger(__name__)

MISSING_REMOTE = "GitHub token and repo URL required"
MISSING_TOKEN = "Please enter GitHub token in settings"


def build_sandbox(settings: SandboxSettings) -> ExecutionSandbox:
    """One subprocess evaluator per configured extension."""
    evaluators = {
        ext: SubprocessEvaluator(
            spec.command,
            language=spec.language,
            suffix=ext,
            timeout=settings.timeout_seconds,
        )
        for ext, spec in settings.runners.items()
    }
    return ExecutionSandbox(evaluators)


class Workspace:
    """
    High-level service bundling store, editing session, sandbox and sync client.

    Every operation writes its outcome to the terminal log. Core errors are
    reported there as ``Error: <message>``, logged, and re-raised; the tree
    and the buffer keep their last good state.
    """

    def __init__(
        self,
        store: TreeStore | None = None,
        *,
        sandbox: ExecutionSandbox | None = None,
        sync: SyncClient | None = None,
        terminal: TerminalLog | None = None,
    ):
        """
        Initialize workspace.

        Args:
            store: Tree store (seed project when None)
            sandbox: Execution sandbox (default runners when None)
            sync: Sync client (unconfigured in-memory remote when None)
            terminal: Terminal log (fresh log with the welcome line when None)
        """
        self.store = store or TreeStore()
        self.session = EditingSession(self.store)
        self.sandbox = sandbox or build_sandbox(SandboxSettings())
        if sync is None:
            from webide.sync.memory import InMemoryCollaborator

            sync = SyncClient(self.store, InMemoryCollaborator())
        self.sync = sync
        self.terminal = terminal or TerminalLog()

    @classmethod
    def from_config(
        cls,
        config: IDEConfig,
        *,
        tree: ProjectTree | None = None,
        collaborator: RemoteCollaborator | None = None,
    ) -> "Workspace":
        store = TreeStore(tree)
        return cls(
            store,
            sandbox=build_sandbox(config.sandbox),
            sync=SyncClient.from_settings(store, config.remote, collaborator),
        )

    @property
    def tree(self) -> ProjectTree:
        return self.store.tree

    # =========================================================================
    # Reporting
    # =========================================================================

    def _say(self, message: str) -> None:
        self.terminal.append(message)

    @contextmanager
    def _reporting(self, operation: str) -> Iterator[None]:
        try:
            yield
        except WebIDEError as exc:
            logger.warning("%s failed: %s", operation, exc)
            self._say(f"Error: {exc}")
            raise

    def _unsupported_message(self) -> str:
        extensions = self.sandbox.extensions
        if extensions == [".js"]:
            return "Only JavaScript files can be executed"
        if not extensions:
            return "Execution is not enabled for any file type"
        return f"Only {', '.join(extensions)} files can be executed"

    def _close_if_gone(self) -> None:
        path = self.session.active_path
        if path is not None and not isinstance(self.store.find(path), FileNode):
            logger.debug("Active file %s no longer exists; closing it", path)
            self.session.close()

    # =========================================================================
    # Tree operations
    # =========================================================================

    def create_file(self, name: str, parent_path: Optional[str] = None) -> ProjectTree:
        with self._reporting("create file"):
            tree = self.store.create(normalize_parent(parent_path), name, NodeKind.FILE)
        self._say(f"Created file: {name}")
        return tree

    def create_folder(self, name: str, parent_path: Optional[str] = None) -> ProjectTree:
        with self._reporting("create folder"):
            tree = self.store.create(normalize_parent(parent_path), name, NodeKind.FOLDER)
        self._say(f"Created folder: {name}")
        return tree

    def rename(self, path: str, new_name: str) -> ProjectTree:
        with self._reporting("rename"):
            old_name = self.store.resolve(path).name
            tree = self.store.rename(path, new_name)
        self._say(f"Renamed: {old_name} -> {new_name}")
        return tree

    def move(self, path: str, new_parent_path: Optional[str] = None) -> ProjectTree:
        destination = normalize_parent(new_parent_path)
        with self._reporting("move"):
            name = self.store.resolve(path).name
            tree = self.store.move(path, destination)
        self._say(f"Moved: {path} -> {join_path(destination, name)}")
        return tree

    def delete(self, path: str) -> ProjectTree:
        with self._reporting("delete"):
            removed = self.store.resolve(path).path
            tree = self.store.delete(path)
        active = self.session.active_path
        if active is not None and is_same_or_descendant(active, removed):
            self.session.close()
        self._say(f"Deleted: {path}")
        return tree

    def search(self, query: str) -> Tuple[Node, ...]:
        return filter_tree(self.store.tree, query)

    # =========================================================================
    # Editing
    # =========================================================================

    def open(self, path: str) -> FileNode:
        with self._reporting("open"):
            return self.session.open(path)

    def edit(self, text: str) -> None:
        with self._reporting("edit"):
            self.session.edit(text)

    def save(self) -> ProjectTree:
        with self._reporting("save"):
            tree = self.session.save()
        self._say(f"Saved: {self.session.active_name}")
        return tree

    def write(self, path: str, text: str) -> ProjectTree:
        """Open ``path``, replace its buffer with ``text`` and save it."""
        self.open(path)
        self.edit(text)
        return self.save()

    # =========================================================================
    # Execution
    # =========================================================================

    async def run_active(self) -> ExecutionResult:
        """Run the active buffer (not the stored content)."""
        with self._reporting("run"):
            path = self.session.active_path
            buffer = self.session.buffer
            if path is None or buffer is None:
                raise NoActiveFileError("run")
            name = self.session.active_name or path
            if not self.sandbox.supports(name):
                self._say(self._unsupported_message())
                return await self.sandbox.run(buffer, name)

            self._say(f"Running {self.sandbox.language_for(name)}...")
            result = await self.sandbox.run(buffer, name)
        for line in result.output:
            self._say(line)
        if result.error:
            self._say(f"Error: {result.error}")
        return result

    async def run(self, path: str) -> ExecutionResult:
        self.open(path)
        return await self.run_active()

    # =========================================================================
    # Import / export
    # =========================================================================

    def export(self, file_path: str | Path) -> Path:
        with self._reporting("export"):
            written = export_snapshot(self.store.tree, file_path)
        self._say("Project downloaded")
        return written

    def import_(self, file_path: str | Path) -> ProjectTree:
        try:
            tree = import_snapshot(file_path)
        except ParseError as exc:
            logger.warning("import failed: %s", exc)
            self._say("Error uploading project")
            raise
        self.store.replace(tree)
        self._close_if_gone()
        self._say("Project uploaded successfully")
        return tree

    # =========================================================================
    # Source control
    # =========================================================================

    async def connect(self) -> str:
        if not self.sync.has_credential:
            self._say(MISSING_TOKEN)
            raise ConfigurationError("An access token is required")
        with self._reporting("connect"):
            account = await self.sync.check_connection()
        self._say("Connected to GitHub")
        return account

    async def push(self, message: str = "") -> RemoteAck:
        if not self.sync.is_configured:
            self._say(MISSING_REMOTE)
            raise ConfigurationError("An access token and a remote repository are required")
        self._say("Pushing to GitHub...")
        with self._reporting("push"):
            ref = parse_remote_ref(self.sync.remote_ref or "")
            self._say(f"Pushing to {ref.slug}")
            ack = await self.sync.push(self.store.tree, message)
        self._say("Push completed")
        return ack

    async def pull(self) -> ProjectTree:
        if not self.sync.is_configured:
            self._say(MISSING_REMOTE)
            raise ConfigurationError("An access token and a remote repository are required")
        self._say("Pulling from GitHub...")
        with self._reporting("pull"):
            tree = await self.sync.pull()
        self._close_if_gone()
        self._say("Pull completed successfully")
        return tree


__all__ = ["Workspace", "build_sandbox", "MISSING_REMOTE", "MISSING_TOKEN"]
