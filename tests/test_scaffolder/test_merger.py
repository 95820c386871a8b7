"""Tests for merging rendered files into a tree (libscaffold.scaffolder.merger)."""

from __future__ import annotations

import pytest

from libscaffold.errors import MergeConflictError
from libscaffold.scaffolder.merger import MergePolicy, branch_and_merge, find_conflicts, merge
from libscaffold.scaffolder.templates import RenderedFile
from libscaffold.workspace.tree import VirtualTree

pytestmark = pytest.mark.unit


@pytest.fixture
def tree() -> VirtualTree:
    return VirtualTree(files={"a.txt": "old", "same.txt": "same"})


@pytest.fixture
def files() -> list[RenderedFile]:
    return [
        RenderedFile("new.txt", b"new"),
        RenderedFile("same.txt", b"same"),
        RenderedFile("a.txt", b"generated"),
    ]


class TestMerge:
    def test_creates_absent_paths(self):
        tree = VirtualTree()
        written = merge(tree, [RenderedFile("x/y.txt", b"1")])
        assert written == ["x/y.txt"]
        assert tree.read("x/y.txt") == b"1"

    def test_error_policy_leaves_tree_unchanged(self, tree, files):
        before = tree.snapshot()
        with pytest.raises(MergeConflictError) as excinfo:
            merge(tree, files, MergePolicy.ERROR)
        assert excinfo.value.path == "a.txt"
        assert tree.snapshot() == before

    def test_reports_first_conflict(self):
        tree = VirtualTree(files={"b.txt": "1", "c.txt": "1"})
        with pytest.raises(MergeConflictError) as excinfo:
            merge(tree, [RenderedFile("c.txt", b"2"), RenderedFile("b.txt", b"2")])
        assert excinfo.value.path == "c.txt"

    def test_identical_content_is_not_a_conflict(self):
        tree = VirtualTree(files={"same.txt": "same"})
        assert merge(tree, [RenderedFile("same.txt", b"same")]) == []

    def test_overwrite_policy(self, tree, files):
        written = merge(tree, files, MergePolicy.OVERWRITE)
        assert written == ["new.txt", "a.txt"]
        assert tree.read("a.txt") == b"generated"

    def test_skip_policy(self, tree, files):
        written = merge(tree, files, MergePolicy.SKIP)
        assert written == ["new.txt"]
        assert tree.read("a.txt") == b"old"
        assert tree.read("new.txt") == b"new"

    def test_find_conflicts(self, tree, files):
        assert find_conflicts(tree, files) == ["a.txt"]


class TestBranchAndMerge:
    def test_success_is_adopted(self):
        tree = VirtualTree()
        branch_and_merge(tree, [RenderedFile("x.txt", b"1")])
        assert tree.read("x.txt") == b"1"

    def test_conflict_without_override(self, tree, files):
        before = tree.snapshot()
        with pytest.raises(MergeConflictError):
            branch_and_merge(tree, files)
        assert tree.snapshot() == before

    def test_override_branch(self, tree, files):
        written = branch_and_merge(tree, files, MergePolicy.ERROR, override=MergePolicy.OVERWRITE)
        assert "a.txt" in written
        assert tree.read("a.txt") == b"generated"
        assert tree.read("new.txt") == b"new"

    def test_override_skip(self, tree, files):
        branch_and_merge(tree, files, override=MergePolicy.SKIP)
        assert tree.read("a.txt") == b"old"
        assert tree.read("new.txt") == b"new"

    def test_override_same_as_policy_reraises(self, tree, files):
        with pytest.raises(MergeConflictError):
            branch_and_merge(tree, files, MergePolicy.ERROR, override=MergePolicy.ERROR)
