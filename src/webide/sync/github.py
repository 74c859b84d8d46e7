"""GitHub remote collaborator built on the REST git-data API."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx
from pydantic import SecretStr

from webide.core.errors import RemoteError
from webide.core.tree.models import ProjectTree
from webide.io.snapshot import build_tree_from_files, deserialize, serialize
from webide.sync.base import RemoteAck, RemoteCollaborator, RemoteRef

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
FILE_MODE = "100644"


class GitHubCollaborator(RemoteCollaborator):
    """
    Fetches and commits whole-project snapshots.

    fetch: repository -> branch -> recursive git tree -> blobs -> snapshot
    apply: snapshot -> blobs -> full tree (no base tree) -> commit on the
    branch head -> ref update

    Git stores no empty directories, so empty folders are dropped on push.
    """

    name = "github"

    def __init__(
        self,
        *,
        api_url: str = DEFAULT_API_URL,
        branch: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.branch = branch
        self.timeout = timeout
        self._transport = transport

    def _client(self, credential: SecretStr) -> httpx.AsyncClient:
        headers = {
            "Authorization": f"Bearer {credential.get_secret_value()}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        return httpx.AsyncClient(
            base_url=self.api_url,
            headers=headers,
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self._transport,
        )

    # =========================================================================
    # HTTP helpers
    # =========================================================================

    @staticmethod
    def _handle_response(response: httpx.Response) -> Dict[str, Any]:
        status = response.status_code
        if status == 401:
            raise RemoteError("Authentication failed: invalid or expired token", status_code=status)
        if status == 403:
            raise RemoteError("Access denied by GitHub (missing scope or rate limited)", status_code=status)
        if status == 404:
            raise RemoteError(f"Not found: {response.request.url.path}", status_code=status)
        if status >= 400:
            try:
                message = response.json().get("message") or f"GitHub error: {status}"
            except (json.JSONDecodeError, AttributeError):
                message = f"GitHub error: {status}"
            raise RemoteError(message, status_code=status)
        try:
            return response.json()
        except json.JSONDecodeError as err:
            raise RemoteError("Invalid response format from GitHub", status_code=status) from err

    async def _request(self, client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as err:
            raise RemoteError(f"Request to GitHub timed out: {method} {url}") from err
        except httpx.HTTPError as err:
            raise RemoteError(f"Network error talking to GitHub: {err}") from err
        return self._handle_response(response)

    async def _resolve_branch(self, client: httpx.AsyncClient, ref: RemoteRef) -> str:
        if self.branch:
            return self.branch
        repo = await self._request(client, "GET", f"/repos/{ref.slug}")
        branch = repo.get("default_branch")
        if not branch:
            raise RemoteError(f"Repository {ref.slug} has no default branch")
        return branch

    # =========================================================================
    # Collaborator operations
    # =========================================================================

    async def authenticate(self, credential: SecretStr) -> str:
        async with self._client(credential) as client:
            user = await self._request(client, "GET", "/user")
        return str(user.get("login", ""))

    async def fetch_tree_snapshot(self, remote_ref: RemoteRef, credential: SecretStr) -> str:
        async with self._client(credential) as client:
            branch = await self._resolve_branch(client, remote_ref)
            try:
                listing = await self._request(
                    client,
                    "GET",
                    f"/repos/{remote_ref.slug}/git/trees/{quote(branch)}",
                    params={"recursive": "1"},
                )
            except RemoteError as exc:
                if exc.status_code == 409:  # empty repository
                    logger.info("Repository %s is empty", remote_ref.slug)
                    return serialize(ProjectTree())
                raise
            if listing.get("truncated"):
                raise RemoteError(f"Tree listing for {remote_ref.slug} was truncated")

            entries: List[Tuple[str, str]] = []
            for item in listing.get("tree", []):
                if item.get("type") != "blob":
                    continue
                blob = await self._request(client, "GET", f"/repos/{remote_ref.slug}/git/blobs/{item['sha']}")
                entries.append((item["path"], _decode_blob(blob)))

        logger.info("Fetched %d files from %s@%s", len(entries), remote_ref.slug, branch)
        return serialize(build_tree_from_files(entries))

    async def apply_commit(
        self,
        remote_ref: RemoteRef,
        credential: SecretStr,
        snapshot: str,
        message: str,
    ) -> RemoteAck:
        tree = deserialize(snapshot)
        base = f"/repos/{remote_ref.slug}/git"
        async with self._client(credential) as client:
            branch = await self._resolve_branch(client, remote_ref)
            head = await self._request(client, "GET", f"{base}/ref/heads/{quote(branch)}")
            head_sha = head["object"]["sha"]

            tree_entries = []
            for node in tree.files():
                blob = await self._request(
                    client, "POST", f"{base}/blobs", json={"content": node.content, "encoding": "utf-8"}
                )
                tree_entries.append({"path": node.path, "mode": FILE_MODE, "type": "blob", "sha": blob["sha"]})

            new_tree = await self._request(client, "POST", f"{base}/trees", json={"tree": tree_entries})
            commit = await self._request(
                client,
                "POST",
                f"{base}/commits",
                json={"message": message, "tree": new_tree["sha"], "parents": [head_sha]},
            )
            await self._request(
                client,
                "PATCH",
                f"{base}/refs/heads/{quote(branch)}",
                json={"sha": commit["sha"]},
            )

        logger.info("Committed %d files to %s@%s", len(tree_entries), remote_ref.slug, branch)
        return RemoteAck(remote_ref=remote_ref.slug, revision=commit["sha"], message=message)


def _decode_blob(blob: Dict[str, Any]) -> str:
    content = blob.get("content") or ""
    if blob.get("encoding") == "base64":
        return base64.b64decode(content).decode("utf-8", errors="replace")
    return content


__all__ = ["GitHubCollaborator", "DEFAULT_API_URL"]
