"""Workspace access: the in-memory tree and its JSON configuration files."""

from libscaffold.workspace.json_config import (
    NodeDependency,
    NodeDependencyType,
    add_package_json_dependencies,
    add_tsconfig_paths,
    update_json_file,
)
from libscaffold.workspace.registry import (
    ProjectEntry,
    add_project_to_workspace,
    build_library_project,
    get_workspace,
    register,
)
from libscaffold.workspace.tree import TreeAction, VirtualTree

__all__ = [
    "NodeDependency",
    "NodeDependencyType",
    "ProjectEntry",
    "TreeAction",
    "VirtualTree",
    "add_package_json_dependencies",
    "add_project_to_workspace",
    "add_tsconfig_paths",
    "build_library_project",
    "get_workspace",
    "register",
    "update_json_file",
]
