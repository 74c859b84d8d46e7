"""In-memory remote collaborator for offline sessions and tests."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from pydantic import SecretStr

from webide.core.errors import RemoteError
from webide.sync.base import RemoteAck, RemoteCollaborator, RemoteRef

logger = logging.getLogger(__name__)


class InMemoryCollaborator(RemoteCollaborator):
    """Keeps one snapshot per repository; every call is recorded in ``calls``.

    When ``token`` is set, any other credential is rejected the way a real
    host rejects a bad token.
    """

    name = "memory"

    def __init__(self, snapshots: Optional[Dict[str, str]] = None, *, token: Optional[str] = None):
        self.snapshots: Dict[str, str] = dict(snapshots or {})
        self.commits: List[Tuple[str, str]] = []
        self.calls: List[str] = []
        self._token = token

    def _check(self, credential: SecretStr) -> None:
        if self._token is not None and credential.get_secret_value() != self._token:
            raise RemoteError("Authentication failed: bad credentials", status_code=401)

    async def fetch_tree_snapshot(self, remote_ref: RemoteRef, credential: SecretStr) -> str:
        self.calls.append(f"fetch {remote_ref.slug}")
        self._check(credential)
        try:
            return self.snapshots[remote_ref.slug]
        except KeyError:
            raise RemoteError(f"Repository not found: {remote_ref.slug}", status_code=404) from None

    async def apply_commit(
        self,
        remote_ref: RemoteRef,
        credential: SecretStr,
        snapshot: str,
        message: str,
    ) -> RemoteAck:
        self.calls.append(f"commit {remote_ref.slug}")
        self._check(credential)
        self.snapshots[remote_ref.slug] = snapshot
        self.commits.append((remote_ref.slug, message))
        revision = f"mem-{len(self.commits)}"
        logger.debug("Stored snapshot for %s as %s", remote_ref.slug, revision)
        return RemoteAck(remote_ref=remote_ref.slug, revision=revision, message=message)

    async def authenticate(self, credential: SecretStr) -> str:
        self.calls.append("authenticate")
        self._check(credential)
        return "local"


__all__ = ["InMemoryCollaborator"]
