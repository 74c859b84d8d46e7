"""
Source-control synchronization.

Components:
- RemoteCollaborator: fetch-tree-snapshot / apply-commit interface
- GitHubCollaborator: the interface over the GitHub REST API (httpx)
- InMemoryCollaborator: local stand-in keeping snapshots in memory
- SyncClient: push/pull between a TreeStore and a collaborator
"""

from webide.sync.base import RemoteAck, RemoteCollaborator, RemoteRef, parse_remote_ref
from webide.sync.client import DEFAULT_COMMIT_MESSAGE, SyncClient, build_collaborator
from webide.sync.github import GitHubCollaborator
from webide.sync.memory import InMemoryCollaborator

__all__ = [
    "RemoteAck",
    "RemoteCollaborator",
    "RemoteRef",
    "parse_remote_ref",
    "SyncClient",
    "build_collaborator",
    "DEFAULT_COMMIT_MESSAGE",
    "GitHubCollaborator",
    "InMemoryCollaborator",
]
