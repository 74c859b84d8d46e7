"""
Tests for project tree data models.

Tests cover:
- FileNode / FolderNode
- ProjectTree lookups and traversal
- check_invariants
- default_seed
"""

import pytest
from pydantic import ValidationError

from webide.core.errors import NotFoundError, ParentNotFoundError
from webide.core.tree.models import (
    FileNode,
    FolderNode,
    NodeKind,
    ProjectTree,
    check_invariants,
    default_seed,
    make_node,
)


class TestNodes:
    """Tests for FileNode and FolderNode."""

    def test_file_defaults_to_empty_content(self):
        node = FileNode(name="a.txt", path="a.txt")

        assert node.content == ""
        assert node.kind is NodeKind.FILE
        assert node.type == "file"

    def test_file_extension_is_lower_cased(self):
        assert FileNode(name="App.JS", path="App.JS").extension == ".js"
        assert FileNode(name="Makefile", path="Makefile").extension == ""

    def test_folder_child_lookup(self):
        folder = FolderNode(
            name="src",
            path="src",
            children=(FileNode(name="a.js", path="src/a.js"), FileNode(name="b.js", path="src/b.js")),
        )

        assert folder.child("b.js").path == "src/b.js"
        assert folder.child("c.js") is None
        assert folder.child_names() == ["a.js", "b.js"]

    def test_nodes_are_frozen(self):
        node = FileNode(name="a.txt", path="a.txt")

        with pytest.raises(ValidationError):
            node.content = "changed"

    def test_make_node_builds_path_from_parent(self):
        file_node = make_node(NodeKind.FILE, "src/app", "x.js")
        folder_node = make_node("folder", None, "lib")

        assert isinstance(file_node, FileNode)
        assert file_node.path == "src/app/x.js"
        assert isinstance(folder_node, FolderNode)
        assert folder_node.path == "lib"
        assert folder_node.children == ()

    def test_discriminated_validation(self):
        """Records are dispatched on their ``type`` tag."""
        tree = ProjectTree.model_validate(
            {
                "roots": [
                    {"name": "a", "type": "folder", "path": "a", "children": [{"name": "b", "type": "file", "path": "a/b"}]},
                ]
            }
        )

        folder = tree.roots[0]
        assert isinstance(folder, FolderNode)
        assert isinstance(folder.children[0], FileNode)
        assert folder.children[0].content == ""


class TestProjectTree:
    """Tests for ProjectTree lookups and traversal."""

    def test_find_and_resolve(self, nested_tree):
        assert nested_tree.find("src/app/util.js").content == "util"
        assert nested_tree.find("src/missing") is None
        assert nested_tree.find("") is None
        assert nested_tree.resolve("docs").kind is NodeKind.FOLDER

    def test_resolve_missing_raises(self, nested_tree):
        with pytest.raises(NotFoundError) as excinfo:
            nested_tree.resolve("src/nope.js")

        assert excinfo.value.path == "src/nope.js"

    def test_find_does_not_descend_into_files(self, nested_tree):
        assert nested_tree.find("README.md/x") is None

    def test_resolve_file_rejects_folders(self, nested_tree):
        with pytest.raises(NotFoundError):
            nested_tree.resolve_file("src")

    def test_children_of(self, nested_tree):
        assert [n.name for n in nested_tree.children_of(None)] == ["src", "docs", "README.md"]
        assert [n.name for n in nested_tree.children_of("src")] == ["app", "index.js"]
        with pytest.raises(ParentNotFoundError):
            nested_tree.children_of("README.md")

    def test_walk_is_depth_first_in_display_order(self, nested_tree):
        assert nested_tree.paths() == [
            "src",
            "src/app",
            "src/app/main.js",
            "src/app/util.js",
            "src/index.js",
            "docs",
            "README.md",
        ]

    def test_files_and_counts(self, nested_tree):
        assert [f.path for f in nested_tree.files()] == [
            "src/app/main.js",
            "src/app/util.js",
            "src/index.js",
            "README.md",
        ]
        assert nested_tree.node_count() == 7
        assert not nested_tree.is_empty()
        assert ProjectTree().is_empty()


class TestInvariants:
    """Tests for check_invariants."""

    def test_valid_tree_has_no_problems(self, nested_tree):
        assert check_invariants(nested_tree) == []

    def test_inconsistent_path_is_reported(self):
        tree = ProjectTree(
            roots=(FolderNode(name="src", path="src", children=(FileNode(name="a.js", path="lib/a.js"),)),)
        )

        problems = check_invariants(tree)

        assert any("lib/a.js" in p and "src/a.js" in p for p in problems)

    def test_duplicate_siblings_are_reported(self):
        tree = ProjectTree(roots=(FileNode(name="a", path="a"), FileNode(name="a", path="a")))

        problems = check_invariants(tree)

        assert any("duplicate name" in p for p in problems)
        assert any("used 2 times" in p for p in problems)

    def test_invalid_name_is_reported(self):
        tree = ProjectTree(roots=(FileNode(name="..", path=".."),))

        assert check_invariants(tree)


class TestDefaultSeed:
    """Tests for the starter project."""

    def test_seed_layout(self):
        seed = default_seed()

        assert seed.paths() == ["src", "src/index.js", "README.md"]
        assert check_invariants(seed) == []

    def test_seed_content(self):
        seed = default_seed()

        assert seed.resolve_file("src/index.js").content == '// Welcome to Web IDE\nconsole.log("Hello World!");'
        assert seed.resolve_file("README.md").content == "# My Project\n\nWelcome to your project!"
