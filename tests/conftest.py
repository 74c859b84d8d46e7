"""
Shared fixtures for webide tests.
"""

import sys

import pytest

from webide.config import REPO_URL_ENV, TOKEN_ENV, RunnerSpec, SandboxSettings
from webide.core.sandbox import ExecutionSandbox
from webide.core.tree.models import FileNode, FolderNode, ProjectTree
from webide.core.tree.store import TreeStore
from webide.services.workspace_service import Workspace, build_sandbox
from webide.sync.client import SyncClient
from webide.sync.memory import InMemoryCollaborator

PYTHON_RUNNER = RunnerSpec(command=[sys.executable, "-u"], language="Python")
TOKEN = "secret-token"
REPO = "octo/demo"


def build_nested_tree() -> ProjectTree:
    """
    src/
      app/
        main.js
        util.js
      index.js
    docs/
    README.md
    """
    return ProjectTree(
        roots=(
            FolderNode(
                name="src",
                path="src",
                children=(
                    FolderNode(
                        name="app",
                        path="src/app",
                        children=(
                            FileNode(name="main.js", path="src/app/main.js", content="main"),
                            FileNode(name="util.js", path="src/app/util.js", content="util"),
                        ),
                    ),
                    FileNode(name="index.js", path="src/index.js", content="index"),
                ),
            ),
            FolderNode(name="docs", path="docs"),
            FileNode(name="README.md", path="README.md", content="readme"),
        )
    )


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep real credentials in the environment out of every test."""
    monkeypatch.delenv(TOKEN_ENV, raising=False)
    monkeypatch.delenv(REPO_URL_ENV, raising=False)


@pytest.fixture
def nested_tree() -> ProjectTree:
    return build_nested_tree()


@pytest.fixture
def store(nested_tree) -> TreeStore:
    return TreeStore(nested_tree)


@pytest.fixture
def python_sandbox() -> ExecutionSandbox:
    return build_sandbox(SandboxSettings(timeout_seconds=10.0, runners={".py": PYTHON_RUNNER}))


@pytest.fixture
def collaborator() -> InMemoryCollaborator:
    return InMemoryCollaborator(token=TOKEN)


@pytest.fixture
def workspace(python_sandbox, collaborator) -> Workspace:
    store = TreeStore()
    sync = SyncClient(store, collaborator, remote_ref=REPO, credential=TOKEN)
    return Workspace(store, sandbox=python_sandbox, sync=sync)
