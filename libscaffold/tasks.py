"""Deferred post-generation tasks.

The pipeline only *schedules* tasks; it returns them next to the tree.  The
host decides whether and how to run them.  ``run_tasks`` is the host-side
runner used by the CLI.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from .utils import print_error, print_success, run_command


@dataclass(frozen=True)
class Task(ABC):
    """A deferred action with no effect on the tree."""

    name: str

    @abstractmethod
    def command(self) -> list[str]:
        """Argument vector the host runs for this task."""


@dataclass(frozen=True)
class NodePackageInstallTask(Task):
    """Install the workspace's node dependencies."""

    name: str = "node-package-install"
    working_directory: str = "."
    package_manager: str = "npm"
    quiet: bool = True
    extra_args: tuple[str, ...] = field(default_factory=tuple)

    def command(self) -> list[str]:
        cmd = [self.package_manager, "install"]
        if self.quiet:
            cmd.append("--quiet")
        cmd.extend(self.extra_args)
        return cmd


async def run_tasks(
    tasks: list[Task],
    workspace_root: str | Path,
    timeout: int = 600,
) -> list[tuple[Task, int]]:
    """Run *tasks* in order inside *workspace_root*.

    Stops at the first task that exits non-zero.

    Returns:
        ``(task, returncode)`` pairs for every task that was started.
    """
    results: list[tuple[Task, int]] = []
    for task in tasks:
        cwd = Path(workspace_root) / getattr(task, "working_directory", ".")
        returncode, _stdout, stderr = await run_command(task.command(), cwd=cwd, timeout=timeout)
        results.append((task, returncode))
        if returncode != 0:
            print_error(f"Task {task.name} failed (exit {returncode}): {stderr}")
            break
        print_success(f"Task {task.name} completed")
    return results
