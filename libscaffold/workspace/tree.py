"""In-memory view of a workspace on disk.

A ``VirtualTree`` layers an overlay of pending changes on top of an optional
root directory.  Reads fall through to disk for untouched paths; writes only
touch the overlay.  Nothing reaches the filesystem until :meth:`commit`, so
a failed pipeline simply drops the tree.
"""

from __future__ import annotations

import asyncio
import os
import posixpath
import tempfile
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

# Directories never loaded from disk when listing the tree.
_IGNORED_DIRS = frozenset({".git", "node_modules", "dist", "out-tsc", ".angular"})


@dataclass(frozen=True)
class TreeAction:
    """A pending change: ``kind`` is ``create``, ``update`` or ``delete``."""

    kind: str
    path: str


def normalize_path(path: str) -> str:
    """Return a workspace-relative POSIX path.

    Leading ``/`` and ``./`` are dropped.  Paths escaping the root raise
    ``ValueError``.
    """
    cleaned = posixpath.normpath(path.replace("\\", "/").lstrip("/"))
    if cleaned in ("", "."):
        raise ValueError(f"Empty path: {path!r}")
    if cleaned == ".." or cleaned.startswith("../"):
        raise ValueError(f"Path escapes the workspace root: {path!r}")
    return cleaned


def _to_bytes(content: bytes | str) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return content


class VirtualTree:
    """Ordered path -> content mapping over an optional on-disk root.

    Args:
        root: Directory backing the tree.  ``None`` gives a purely in-memory
            tree (handy in tests).
        files: Initial in-memory files, applied as if already on disk.
    """

    def __init__(
        self,
        root: str | Path | None = None,
        files: Mapping[str, bytes | str] | None = None,
    ) -> None:
        self.root = Path(root) if root is not None else None
        self._base: dict[str, bytes] = {
            normalize_path(p): _to_bytes(c) for p, c in (files or {}).items()
        }
        self._overlay: dict[str, bytes | None] = {}

    @classmethod
    def from_directory(cls, root: str | Path) -> "VirtualTree":
        """Open the workspace rooted at *root*."""
        root_path = Path(root)
        if not root_path.is_dir():
            raise NotADirectoryError(f"Workspace directory not found: {root_path}")
        return cls(root_path)

    # -- Reading -----------------------------------------------------------

    def _disk_path(self, path: str) -> Path | None:
        if self.root is None:
            return None
        return self.root / path

    def _read_base(self, path: str) -> bytes | None:
        if path in self._base:
            return self._base[path]
        disk = self._disk_path(path)
        if disk is None or not disk.is_file():
            return None
        data = disk.read_bytes()
        self._base[path] = data
        return data

    def read(self, path: str) -> bytes | None:
        """Return the content at *path*, or ``None`` when absent."""
        key = normalize_path(path)
        if key in self._overlay:
            return self._overlay[key]
        return self._read_base(key)

    def read_text(self, path: str) -> str | None:
        data = self.read(path)
        return data.decode("utf-8") if data is not None else None

    def exists(self, path: str) -> bool:
        return self.read(path) is not None

    def _base_paths(self) -> Iterator[str]:
        seen = set(self._base)
        yield from self._base
        if self.root is None or not self.root.is_dir():
            return
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in _IGNORED_DIRS)
            rel_dir = Path(dirpath).relative_to(self.root).as_posix()
            for filename in sorted(filenames):
                rel = filename if rel_dir == "." else f"{rel_dir}/{filename}"
                if rel not in seen:
                    yield rel

    def paths(self) -> list[str]:
        """Every existing path, sorted."""
        result = set(self._base_paths())
        for path, content in self._overlay.items():
            if content is None:
                result.discard(path)
            else:
                result.add(path)
        return sorted(result)

    def snapshot(self) -> dict[str, bytes]:
        """Return a ``{path: content}`` copy of the whole tree."""
        return {p: self.read(p) for p in self.paths()}  # type: ignore[misc]

    # -- Writing -----------------------------------------------------------

    def create(self, path: str, content: bytes | str) -> None:
        """Add a new file.  Raises ``FileExistsError`` if *path* exists."""
        key = normalize_path(path)
        if self.exists(key):
            raise FileExistsError(key)
        self._overlay[key] = _to_bytes(content)

    def overwrite(self, path: str, content: bytes | str) -> None:
        """Replace an existing file.  Raises ``FileNotFoundError`` if absent."""
        key = normalize_path(path)
        if not self.exists(key):
            raise FileNotFoundError(key)
        self._overlay[key] = _to_bytes(content)

    def write(self, path: str, content: bytes | str) -> None:
        """Create or overwrite *path*."""
        self._overlay[normalize_path(path)] = _to_bytes(content)

    def delete(self, path: str) -> None:
        key = normalize_path(path)
        if not self.exists(key):
            raise FileNotFoundError(key)
        self._overlay[key] = None

    # -- Branching ---------------------------------------------------------

    def branch(self) -> "VirtualTree":
        """Return a copy whose changes stay invisible until :meth:`adopt`."""
        child = VirtualTree(self.root)
        child._base = self._base
        child._overlay = dict(self._overlay)
        return child

    def adopt(self, branch: "VirtualTree") -> None:
        """Take over every pending change made on *branch*."""
        if branch.root != self.root:
            raise ValueError("Cannot adopt a branch of a different workspace")
        self._overlay = dict(branch._overlay)

    # -- Committing --------------------------------------------------------

    @property
    def actions(self) -> list[TreeAction]:
        """Pending changes relative to the base, sorted by path."""
        result: list[TreeAction] = []
        for path in sorted(self._overlay):
            content = self._overlay[path]
            base = self._read_base(path)
            if content is None:
                if base is not None:
                    result.append(TreeAction("delete", path))
            elif base is None:
                result.append(TreeAction("create", path))
            elif base != content:
                result.append(TreeAction("update", path))
        return result

    async def commit(self) -> list[TreeAction]:
        """Write every pending change to disk.

        All new contents are staged as temp files next to their targets
        before any of them replaces a real file, so a failure while staging
        leaves the workspace untouched.
        """
        if self.root is None:
            raise RuntimeError("Cannot commit an in-memory tree without a root directory")
        actions = self.actions
        await asyncio.to_thread(_apply_actions, self.root, actions, self._overlay)
        for action in actions:
            content = self._overlay.pop(action.path)
            if content is None:
                self._base.pop(action.path, None)
            else:
                self._base[action.path] = content
        self._overlay.clear()
        return actions


def _apply_actions(
    root: Path, actions: list[TreeAction], overlay: Mapping[str, bytes | None]
) -> None:
    """Synchronous helper: stage temp files, then move them into place."""
    staged: list[tuple[str, Path]] = []
    try:
        for action in actions:
            if action.kind == "delete":
                continue
            target = root / action.path
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
            with os.fdopen(fd, "wb") as handle:
                handle.write(overlay[action.path] or b"")
            staged.append((tmp_name, target))
            mode = target.stat().st_mode & 0o777 if target.exists() else 0o644
            os.chmod(tmp_name, mode)
    except OSError:
        for tmp_name, _ in staged:
            Path(tmp_name).unlink(missing_ok=True)
        raise

    for tmp_name, target in staged:
        os.replace(tmp_name, target)
    for action in actions:
        if action.kind == "delete":
            (root / action.path).unlink(missing_ok=True)
