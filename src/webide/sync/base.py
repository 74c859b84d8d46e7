"""Remote collaborator interface and remote reference parsing."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, SecretStr

from webide.core.errors import ConfigurationError

_URL_PREFIXES = (
    re.compile(r"^https?://(www\.)?github\.com/", re.IGNORECASE),
    re.compile(r"^git@github\.com:", re.IGNORECASE),
)
_SEGMENT = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class RemoteRef:
    """Owner/repository pair identifying a remote repository."""

    owner: str
    repo: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return self.slug


def parse_remote_ref(value: str) -> RemoteRef:
    """Parse 'owner/repo' or a GitHub URL ('https://github.com/owner/repo.git')."""
    raw = (value or "").strip()
    for prefix in _URL_PREFIXES:
        raw = prefix.sub("", raw)
    raw = raw.rstrip("/")
    if raw.endswith(".git"):
        raw = raw[: -len(".git")]
    parts = raw.split("/")
    if len(parts) != 2 or not all(_SEGMENT.match(part) for part in parts):
        raise ConfigurationError(f"Invalid repository reference: {value!r} (expected owner/repo)")
    return RemoteRef(owner=parts[0], repo=parts[1])


class RemoteAck(BaseModel):
    """Opaque acknowledgement of an applied commit."""

    remote_ref: str
    revision: Optional[str] = None
    message: str = ""


class RemoteCollaborator(ABC):
    """Source-control host seen by the sync client.

    Both operations raise RemoteError on transport or authentication
    failures. Snapshots use the format of ``webide.io.snapshot``.
    """

    name: str = "remote"

    @abstractmethod
    async def fetch_tree_snapshot(self, remote_ref: RemoteRef, credential: SecretStr) -> str:
        raise NotImplementedError

    @abstractmethod
    async def apply_commit(
        self,
        remote_ref: RemoteRef,
        credential: SecretStr,
        snapshot: str,
        message: str,
    ) -> RemoteAck:
        raise NotImplementedError

    async def authenticate(self, credential: SecretStr) -> str:
        """Check the credential and return the account name it belongs to."""
        return "anonymous"


__all__ = ["RemoteRef", "RemoteAck", "RemoteCollaborator", "parse_remote_ref"]
