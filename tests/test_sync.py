"""
Tests for source-control synchronization.

Tests cover:
- remote reference parsing
- SyncClient configuration checks (no remote call without ref and token)
- push / pull against the in-memory collaborator
- GitHubCollaborator against a mocked GitHub REST API
"""

import asyncio
import base64
import json

import httpx
import pytest

from webide.config import RemoteSettings
from webide.core.errors import ConfigurationError, ParseError, RemoteError
from webide.core.tree.models import ProjectTree, default_seed
from webide.core.tree.store import TreeStore
from webide.io.snapshot import serialize
from webide.sync import (
    DEFAULT_COMMIT_MESSAGE,
    GitHubCollaborator,
    InMemoryCollaborator,
    SyncClient,
    parse_remote_ref,
)

TOKEN = "secret-token"
REPO = "octo/demo"


class TestParseRemoteRef:
    @pytest.mark.parametrize(
        "value",
        [
            "octo/demo",
            " octo/demo ",
            "https://github.com/octo/demo",
            "https://github.com/octo/demo/",
            "https://github.com/octo/demo.git",
            "git@github.com:octo/demo.git",
        ],
    )
    def test_accepted_forms(self, value):
        ref = parse_remote_ref(value)

        assert (ref.owner, ref.repo) == ("octo", "demo")
        assert ref.slug == "octo/demo"

    @pytest.mark.parametrize("value", ["", "octo", "octo/demo/extra", "https://example.com/octo/demo", "a b/c"])
    def test_rejected_forms(self, value):
        with pytest.raises(ConfigurationError):
            parse_remote_ref(value)


class TestSyncClientMemory:
    """SyncClient over the in-memory collaborator."""

    def _client(self, store, collaborator, **kwargs):
        options = {"remote_ref": REPO, "credential": TOKEN}
        options.update(kwargs)
        return SyncClient(store, collaborator, **options)

    def test_push_stores_snapshot(self, store, collaborator):
        client = self._client(store, collaborator)

        ack = asyncio.run(client.push(store.tree, ""))

        assert ack.remote_ref == REPO
        assert ack.revision == "mem-1"
        assert collaborator.commits == [(REPO, DEFAULT_COMMIT_MESSAGE)]
        assert collaborator.snapshots[REPO] == serialize(store.tree)

    def test_push_message_is_stripped(self, store, collaborator):
        client = self._client(store, collaborator)

        ack = asyncio.run(client.push(store.tree, "  Add docs  "))

        assert ack.message == "Add docs"

    def test_pull_replaces_tree(self, nested_tree, collaborator):
        collaborator.snapshots[REPO] = serialize(nested_tree)
        store = TreeStore()
        client = self._client(store, collaborator)

        pulled = asyncio.run(client.pull())

        assert pulled == nested_tree
        assert store.tree is pulled

    def test_pull_from_other_ref(self, nested_tree, collaborator):
        collaborator.snapshots["octo/other"] = serialize(nested_tree)
        store = TreeStore()
        client = self._client(store, collaborator)

        asyncio.run(client.pull("https://github.com/octo/other"))

        assert store.tree == nested_tree

    @pytest.mark.parametrize(
        "overrides",
        [{"credential": None}, {"credential": "  "}, {"remote_ref": None}, {"remote_ref": ""}],
    )
    def test_missing_configuration_never_calls_remote(self, store, collaborator, overrides):
        client = self._client(store, collaborator, **overrides)
        before = store.tree

        with pytest.raises(ConfigurationError):
            asyncio.run(client.pull())
        with pytest.raises(ConfigurationError):
            asyncio.run(client.push(store.tree, "x"))

        assert collaborator.calls == []
        assert store.tree is before
        assert not client.is_configured

    def test_malformed_ref_never_calls_remote(self, store, collaborator):
        client = self._client(store, collaborator, remote_ref="not a repo")

        with pytest.raises(ConfigurationError):
            asyncio.run(client.push(store.tree, ""))

        assert collaborator.calls == []

    def test_bad_token(self, store):
        collaborator = InMemoryCollaborator({REPO: "[]"}, token=TOKEN)
        client = self._client(store, collaborator, credential="wrong")
        before = store.tree

        with pytest.raises(RemoteError) as excinfo:
            asyncio.run(client.pull())

        assert excinfo.value.status_code == 401
        assert store.tree is before

    def test_missing_repository(self, store, collaborator):
        client = self._client(store, collaborator)

        with pytest.raises(RemoteError) as excinfo:
            asyncio.run(client.pull())

        assert excinfo.value.status_code == 404

    def test_malformed_remote_snapshot(self, store, collaborator):
        collaborator.snapshots[REPO] = "{broken"
        client = self._client(store, collaborator)
        before = store.tree

        with pytest.raises(ParseError):
            asyncio.run(client.pull())

        assert store.tree is before

    def test_check_connection(self, store, collaborator):
        client = self._client(store, collaborator)

        assert asyncio.run(client.check_connection()) == "local"
        assert collaborator.calls == ["authenticate"]

    def test_check_connection_needs_token(self, store, collaborator):
        client = self._client(store, collaborator, credential=None)

        with pytest.raises(ConfigurationError):
            asyncio.run(client.check_connection())

        assert collaborator.calls == []


class TestFromSettings:
    def test_memory_provider(self, store):
        settings = RemoteSettings(provider="memory", repo_url=REPO, token=TOKEN)

        client = SyncClient.from_settings(store, settings)

        assert isinstance(client.collaborator, InMemoryCollaborator)
        assert client.is_configured
        assert client.credential.get_secret_value() == TOKEN

    def test_github_provider(self, store):
        settings = RemoteSettings(repo_url=REPO, branch="dev", api_url="https://ghe.example/api/v3/")

        client = SyncClient.from_settings(store, settings)

        assert isinstance(client.collaborator, GitHubCollaborator)
        assert client.collaborator.api_url == "https://ghe.example/api/v3"
        assert client.collaborator.branch == "dev"
        assert not client.is_configured

    def test_explicit_collaborator_wins(self, store, collaborator):
        client = SyncClient.from_settings(store, RemoteSettings(), collaborator)

        assert client.collaborator is collaborator


# =============================================================================
# GitHub REST API mock
# =============================================================================


class FakeGitHub:
    """Minimal git-data API for one repository (octo/demo)."""

    def __init__(self, files=None, *, empty=False, truncated=False):
        self.files = dict(files or {})
        self.empty = empty
        self.truncated = truncated
        self.requests = []
        self.blobs = {}
        self.trees = []
        self.commits = []
        self.head = "c0"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.requests.append(f"{method} {path}")
        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return httpx.Response(401, json={"message": "Bad credentials"})

        body = json.loads(request.content) if request.content else None
        base = "/repos/octo/demo"
        if method == "GET" and path == "/user":
            return httpx.Response(200, json={"login": "octocat"})
        if method == "GET" and path == base:
            return httpx.Response(200, json={"default_branch": "main"})
        if method == "GET" and path.startswith(f"{base}/git/trees/"):
            if self.empty:
                return httpx.Response(409, json={"message": "Git Repository is empty."})
            return httpx.Response(200, json={"tree": self._listing(), "truncated": self.truncated})
        if method == "GET" and path.startswith(f"{base}/git/blobs/"):
            file_path = self._by_sha(path.rsplit("/", 1)[-1])
            encoded = base64.encodebytes(self.files[file_path].encode("utf-8")).decode("ascii")
            return httpx.Response(200, json={"content": encoded, "encoding": "base64"})
        if method == "GET" and path.startswith(f"{base}/git/ref/heads/"):
            return httpx.Response(200, json={"object": {"sha": self.head}})
        if method == "POST" and path == f"{base}/git/blobs":
            sha = f"b{len(self.blobs) + 1}"
            self.blobs[sha] = body["content"]
            return httpx.Response(201, json={"sha": sha})
        if method == "POST" and path == f"{base}/git/trees":
            self.trees.append(body["tree"])
            return httpx.Response(201, json={"sha": f"t{len(self.trees)}"})
        if method == "POST" and path == f"{base}/git/commits":
            self.commits.append(body)
            return httpx.Response(201, json={"sha": f"c{len(self.commits)}"})
        if method == "PATCH" and path.startswith(f"{base}/git/refs/heads/"):
            self.head = body["sha"]
            return httpx.Response(200, json={"object": {"sha": self.head}})
        return httpx.Response(404, json={"message": "Not Found"})

    def _listing(self):
        entries = []
        seen_dirs = set()
        for index, file_path in enumerate(self.files):
            parts = file_path.split("/")
            for depth in range(1, len(parts)):
                folder = "/".join(parts[:depth])
                if folder not in seen_dirs:
                    seen_dirs.add(folder)
                    entries.append({"path": folder, "type": "tree", "sha": f"d-{folder}"})
            entries.append({"path": file_path, "type": "blob", "sha": f"f{index}"})
        return entries

    def _by_sha(self, sha):
        return list(self.files)[int(sha[1:])]


def _github(fake, **kwargs) -> GitHubCollaborator:
    return GitHubCollaborator(transport=httpx.MockTransport(fake), **kwargs)


class TestGitHubCollaborator:
    def test_pull_builds_tree_from_blobs(self):
        fake = FakeGitHub({"README.md": "hi", "src/app/main.js": "console.log('é')", "src/index.js": "x"})
        store = TreeStore(ProjectTree())
        client = SyncClient(store, _github(fake), remote_ref=REPO, credential=TOKEN)

        tree = asyncio.run(client.pull())

        assert tree.paths() == ["README.md", "src", "src/app", "src/app/main.js", "src/index.js"]
        assert tree.resolve_file("src/app/main.js").content == "console.log('é')"
        assert store.tree is tree
        assert fake.requests[0] == "GET /repos/octo/demo"

    def test_pull_empty_repository(self):
        fake = FakeGitHub(empty=True)
        store = TreeStore()
        client = SyncClient(store, _github(fake), remote_ref=REPO, credential=TOKEN)

        assert asyncio.run(client.pull()) == ProjectTree()

    def test_truncated_listing_keeps_local_tree(self):
        fake = FakeGitHub({"README.md": "hi"}, truncated=True)
        store = TreeStore()
        before = store.tree
        client = SyncClient(store, _github(fake), remote_ref=REPO, credential=TOKEN)

        with pytest.raises(RemoteError, match="truncated"):
            asyncio.run(client.pull())

        assert store.tree is before
        assert not any("/git/blobs/" in request for request in fake.requests)

    def test_push_creates_commit_on_head(self):
        fake = FakeGitHub()
        store = TreeStore(default_seed())
        client = SyncClient(store, _github(fake), remote_ref=REPO, credential=TOKEN)

        ack = asyncio.run(client.push(store.tree, ""))

        assert ack.revision == "c1"
        assert fake.commits == [{"message": "Update files", "tree": "t1", "parents": ["c0"]}]
        assert [entry["path"] for entry in fake.trees[0]] == ["src/index.js", "README.md"]
        assert all(entry["mode"] == "100644" for entry in fake.trees[0])
        assert fake.blobs["b2"] == "# My Project\n\nWelcome to your project!"
        assert fake.head == "c1"
        assert fake.requests[-1] == "PATCH /repos/octo/demo/git/refs/heads/main"

    def test_configured_branch_skips_repository_lookup(self):
        fake = FakeGitHub({"a.txt": "a"})
        client = SyncClient(TreeStore(), _github(fake, branch="dev"), remote_ref=REPO, credential=TOKEN)

        asyncio.run(client.pull())

        assert fake.requests[0] == "GET /repos/octo/demo/git/trees/dev"

    def test_push_then_pull_round_trip(self, nested_tree):
        fake = FakeGitHub()
        pusher = SyncClient(TreeStore(nested_tree), _github(fake), remote_ref=REPO, credential=TOKEN)
        asyncio.run(pusher.push(nested_tree, "snapshot"))
        fake.files = {
            entry["path"]: fake.blobs[entry["sha"]] for entry in fake.trees[0]
        }

        puller = SyncClient(TreeStore(ProjectTree()), _github(fake), remote_ref=REPO, credential=TOKEN)
        pulled = asyncio.run(puller.pull())

        # git keeps no empty folders
        assert not pulled.contains("docs")
        assert [f.path for f in pulled.files()] == [f.path for f in nested_tree.files()]
        assert [f.content for f in pulled.files()] == [f.content for f in nested_tree.files()]

    def test_authenticate(self):
        client = SyncClient(TreeStore(), _github(FakeGitHub()), remote_ref=REPO, credential=TOKEN)

        assert asyncio.run(client.check_connection()) == "octocat"

    def test_bad_token(self):
        client = SyncClient(TreeStore(), _github(FakeGitHub()), remote_ref=REPO, credential="wrong")

        with pytest.raises(RemoteError) as excinfo:
            asyncio.run(client.check_connection())

        assert excinfo.value.status_code == 401

    def test_unknown_repository(self):
        client = SyncClient(TreeStore(), _github(FakeGitHub()), remote_ref="octo/missing", credential=TOKEN)
        before = client.store.tree

        with pytest.raises(RemoteError) as excinfo:
            asyncio.run(client.pull())

        assert excinfo.value.status_code == 404
        assert client.store.tree is before

    def test_network_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = SyncClient(TreeStore(), _github(refuse), remote_ref=REPO, credential=TOKEN)

        with pytest.raises(RemoteError, match="Network error"):
            asyncio.run(client.push(client.store.tree, ""))
