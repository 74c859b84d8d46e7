"""Source-control sync client: push the tree as one commit, pull a tree snapshot."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from pydantic import SecretStr

from webide.config import RemoteSettings
from webide.core.errors import ConfigurationError
from webide.core.tree.models import ProjectTree
from webide.core.tree.store import TreeStore
from webide.io.snapshot import deserialize, serialize
from webide.sync.base import RemoteAck, RemoteCollaborator, RemoteRef, parse_remote_ref

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_MESSAGE = "Update files"


def build_collaborator(settings: RemoteSettings) -> RemoteCollaborator:
    if settings.provider == "memory":
        from webide.sync.memory import InMemoryCollaborator

        return InMemoryCollaborator()
    from webide.sync.github import GitHubCollaborator

    return GitHubCollaborator(api_url=settings.api_url, branch=settings.branch, timeout=settings.timeout)


class SyncClient:
    """
    Maps the tree store to push/pull operations on a remote collaborator.

    The remote reference and the credential are checked before anything is
    sent; when either is missing a ConfigurationError is raised and the
    collaborator is never called. Remote failures surface as RemoteError,
    without retry. A pull swaps the store's tree in one step, so a failed
    pull leaves the local tree as it was.
    """

    def __init__(
        self,
        store: TreeStore,
        collaborator: RemoteCollaborator,
        *,
        remote_ref: Optional[str] = None,
        credential: SecretStr | str | None = None,
    ):
        self.store = store
        self.collaborator = collaborator
        self.remote_ref = remote_ref
        if isinstance(credential, str):
            credential = SecretStr(credential)
        self.credential: Optional[SecretStr] = credential

    @classmethod
    def from_settings(
        cls,
        store: TreeStore,
        settings: RemoteSettings,
        collaborator: RemoteCollaborator | None = None,
    ) -> "SyncClient":
        return cls(
            store,
            collaborator or build_collaborator(settings),
            remote_ref=settings.repo_url,
            credential=settings.token,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.remote_ref and self.remote_ref.strip()) and self.has_credential

    @property
    def has_credential(self) -> bool:
        return self.credential is not None and bool(self.credential.get_secret_value().strip())

    def _require_credential(self) -> SecretStr:
        if self.credential is None or not self.has_credential:
            raise ConfigurationError("An access token is required")
        return self.credential

    def _require(self, remote_ref: Optional[str] = None) -> Tuple[RemoteRef, SecretStr]:
        raw = remote_ref if remote_ref is not None else self.remote_ref
        if not raw or not raw.strip():
            raise ConfigurationError("A remote repository (owner/repo) is required")
        credential = self._require_credential()
        return parse_remote_ref(raw), credential

    async def check_connection(self) -> str:
        """Validate the credential with the collaborator; returns the account name."""
        credential = self._require_credential()
        account = await self.collaborator.authenticate(credential)
        logger.info("Authenticated against %s as %s", self.collaborator.name, account or "<unknown>")
        return account

    async def push(self, tree: ProjectTree, message: str = "") -> RemoteAck:
        """Submit ``tree`` as a single commit."""
        ref, credential = self._require()
        snapshot = serialize(tree)
        message = message.strip() or DEFAULT_COMMIT_MESSAGE
        ack = await self.collaborator.apply_commit(ref, credential, snapshot, message)
        logger.info("Pushed %d nodes to %s", tree.node_count(), ref.slug)
        return ack

    async def pull(self, remote_ref: Optional[str] = None) -> ProjectTree:
        """Fetch the remote snapshot and make it the store's tree-of-record."""
        ref, credential = self._require(remote_ref)
        snapshot = await self.collaborator.fetch_tree_snapshot(ref, credential)
        tree = deserialize(snapshot)
        logger.info("Pulled %d nodes from %s", tree.node_count(), ref.slug)
        return self.store.replace(tree)


__all__ = ["SyncClient", "build_collaborator", "DEFAULT_COMMIT_MESSAGE"]
