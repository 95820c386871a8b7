"""Project registry of the Angular workspace (``angular.json``).

Builds the project entry for a generated library and inserts it into the
workspace's ``projects`` map, refusing names or roots that are already in
use.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..errors import DuplicateProjectError, WorkspaceNotFoundError
from ..naming import NamingContext
from .json_config import parse_json_file, update_json_file
from .tree import VirtualTree

WORKSPACE_PATHS: tuple[str, ...] = ("angular.json", ".angular.json")

DEFAULT_NEW_PROJECT_ROOT = "projects"

PROJECT_TYPE_LIBRARY = "library"


class Builders:
    """Builder identifiers wired into the architect targets."""

    NG_PACKAGR = "@angular-devkit/build-ng-packagr:build"
    KARMA = "@angular-devkit/build-angular:karma"
    TSLINT = "@angular-devkit/build-angular:tslint"


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ArchitectTarget(BaseModel):
    builder: str
    options: dict[str, Any] = Field(default_factory=dict)


class Architect(BaseModel):
    build: ArchitectTarget
    test: ArchitectTarget
    lint: ArchitectTarget


class ProjectEntry(BaseModel):
    """One entry of the workspace ``projects`` map."""

    model_config = ConfigDict(populate_by_name=True)

    root: str
    source_root: str = Field(..., alias="sourceRoot")
    project_type: str = Field(default=PROJECT_TYPE_LIBRARY, alias="projectType")
    prefix: str
    architect: Architect

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def build_library_project(naming: NamingContext) -> ProjectEntry:
    """Return the registry entry for the library described by *naming*."""
    root = naming.project_root
    return ProjectEntry(
        root=root,
        source_root=naming.source_root,
        project_type=PROJECT_TYPE_LIBRARY,
        prefix=naming.prefix,
        architect=Architect(
            build=ArchitectTarget(
                builder=Builders.NG_PACKAGR,
                options={
                    "tsConfig": f"{root}/tsconfig.lib.json",
                    "project": f"{root}/ng-package.json",
                },
            ),
            test=ArchitectTarget(
                builder=Builders.KARMA,
                options={
                    "main": f"{naming.source_root}/test.ts",
                    "tsConfig": f"{root}/tsconfig.spec.json",
                    "karmaConfig": f"{root}/karma.conf.js",
                },
            ),
            lint=ArchitectTarget(
                builder=Builders.TSLINT,
                options={
                    "tsConfig": [f"{root}/tsconfig.lib.json", f"{root}/tsconfig.spec.json"],
                    "exclude": ["**/node_modules/**"],
                },
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Workspace access
# ---------------------------------------------------------------------------


def find_workspace_path(tree: VirtualTree) -> str:
    for path in WORKSPACE_PATHS:
        if tree.exists(path):
            return path
    raise WorkspaceNotFoundError(
        f"Could not find workspace file ({' or '.join(WORKSPACE_PATHS)})."
    )


def get_workspace(tree: VirtualTree) -> dict[str, Any]:
    path = find_workspace_path(tree)
    workspace = parse_json_file(tree, path)
    if workspace is None:
        raise WorkspaceNotFoundError(f"Could not read workspace file {path}.")
    return workspace


def get_new_project_root(
    workspace: dict[str, Any], default: str = DEFAULT_NEW_PROJECT_ROOT
) -> str:
    value = workspace.get("newProjectRoot")
    if value is None:
        return default
    return str(value)


def register(
    workspace: dict[str, Any], project_name: str, entry: ProjectEntry | dict[str, Any]
) -> dict[str, Any]:
    """Insert *entry* under *project_name* in ``workspace["projects"]``.

    Raises ``DuplicateProjectError`` (leaving *workspace* as it was) when the
    name is taken or another project already lives at the same root.  The
    first project registered becomes the workspace's ``defaultProject``.
    """
    data = entry.to_json() if isinstance(entry, ProjectEntry) else dict(entry)
    projects = workspace.get("projects") or {}

    if project_name in projects:
        raise DuplicateProjectError(project_name)
    for other_name, other in projects.items():
        if isinstance(other, dict) and other.get("root") == data.get("root"):
            raise DuplicateProjectError(
                project_name,
                f"Project '{other_name}' already uses root '{data.get('root')}'.",
            )

    projects[project_name] = data
    workspace["projects"] = projects
    if not workspace.get("defaultProject") and len(projects) == 1:
        workspace["defaultProject"] = project_name
    return workspace


def add_project_to_workspace(
    tree: VirtualTree,
    project_name: str,
    entry: ProjectEntry,
    indent: int = 2,
) -> str:
    """Register *entry* in the tree's workspace file and return that path."""
    path = find_workspace_path(tree)
    update_json_file(tree, path, lambda ws: register(ws, project_name, entry), indent=indent)
    return path
