"""Merge rendered files into a ``VirtualTree`` under a conflict policy."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from ..errors import MergeConflictError
from ..workspace.tree import VirtualTree
from .templates import RenderedFile


class MergePolicy(str, Enum):
    """What to do when a generated file already exists with other content."""

    OVERWRITE = "overwrite"
    ERROR = "error"
    SKIP = "skip"


def find_conflicts(tree: VirtualTree, files: Iterable[RenderedFile]) -> list[str]:
    """Paths in *files* that exist in *tree* with different content."""
    conflicts: list[str] = []
    for rendered in files:
        existing = tree.read(rendered.path)
        if existing is not None and existing != rendered.content:
            conflicts.append(rendered.path)
    return conflicts


def merge(
    tree: VirtualTree,
    files: Iterable[RenderedFile],
    policy: MergePolicy = MergePolicy.ERROR,
) -> list[str]:
    """Write *files* into *tree*.

    Absent paths are created and identical files are left alone.  Under
    ``MergePolicy.ERROR`` every conflict is detected before anything is
    written and ``MergeConflictError`` names the first one, so the tree is
    unchanged on failure.

    Returns:
        The paths actually written.
    """
    files = list(files)
    if policy is MergePolicy.ERROR:
        conflicts = find_conflicts(tree, files)
        if conflicts:
            raise MergeConflictError(conflicts[0])

    written: list[str] = []
    for rendered in files:
        existing = tree.read(rendered.path)
        if existing == rendered.content:
            continue
        if existing is not None and policy is MergePolicy.SKIP:
            continue
        tree.write(rendered.path, rendered.content)
        written.append(rendered.path)
    return written


def branch_and_merge(
    tree: VirtualTree,
    files: Iterable[RenderedFile],
    policy: MergePolicy = MergePolicy.ERROR,
    override: MergePolicy | None = None,
) -> list[str]:
    """Stage *files* on a branch of *tree* and adopt it only on success.

    When the merge fails with a conflict and the caller supplied an
    *override* policy, the merge is retried once on a fresh branch with that
    policy.  Without an override the conflict propagates and *tree* is
    untouched.
    """
    files = list(files)
    staged = tree.branch()
    try:
        written = merge(staged, files, policy)
    except MergeConflictError:
        if override is None or override is policy:
            raise
        staged = tree.branch()
        written = merge(staged, files, override)
    tree.adopt(staged)
    return written
