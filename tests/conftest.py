"""Shared pytest fixtures for the libscaffold test suite.

Provides reusable fixtures for:
- Workspace configuration documents (angular.json, package.json, tsconfig.json)
- In-memory and on-disk workspaces
- Library options
- A stub external module generator
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from libscaffold.config import LibraryOptions, ScaffoldConfig
from libscaffold.scaffolder.module_gen import ModuleGeneratorConfig
from libscaffold.scaffolder.templates import RenderedFile
from libscaffold.workspace.tree import VirtualTree


# ---------------------------------------------------------------------------
# Workspace documents
# ---------------------------------------------------------------------------


@pytest.fixture
def angular_json() -> dict[str, Any]:
    """An Angular workspace with no projects yet."""
    return {
        "$schema": "./node_modules/@angular/cli/lib/config/schema.json",
        "version": 1,
        "newProjectRoot": "projects",
        "projects": {},
    }


@pytest.fixture
def package_json() -> dict[str, Any]:
    return {
        "name": "host-app",
        "version": "0.0.0",
        "private": True,
        "scripts": {"ng": "ng", "build": "ng build"},
        "dependencies": {"@angular/core": "~7.0.0", "rxjs": "~6.3.3"},
        "devDependencies": {"typescript": "~3.1.6"},
    }


@pytest.fixture
def tsconfig_json() -> dict[str, Any]:
    return {
        "compileOnSave": False,
        "compilerOptions": {
            "baseUrl": "./",
            "outDir": "./dist/out-tsc",
            "sourceMap": True,
            "target": "es5",
            "lib": ["es2018", "dom"],
        },
    }


def dump(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2) + "\n"


@pytest.fixture
def workspace_files(
    angular_json: dict[str, Any],
    package_json: dict[str, Any],
    tsconfig_json: dict[str, Any],
) -> dict[str, str]:
    """Files of a freshly created workspace, keyed by path."""
    return {
        "angular.json": dump(angular_json),
        "package.json": dump(package_json),
        "tsconfig.json": dump(tsconfig_json),
    }


# ---------------------------------------------------------------------------
# Trees
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_tree(workspace_files: dict[str, str]) -> VirtualTree:
    """In-memory workspace tree (no disk backing)."""
    return VirtualTree(files=workspace_files)


@pytest.fixture
def workspace_dir(tmp_path: Path, workspace_files: dict[str, str]) -> Path:
    """Workspace written to a temporary directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    for path, content in workspace_files.items():
        (root / path).write_text(content, encoding="utf-8")
    yield root


# ---------------------------------------------------------------------------
# Options & config
# ---------------------------------------------------------------------------


@pytest.fixture
def scoped_options() -> LibraryOptions:
    return LibraryOptions(name="@acme/widgets")


@pytest.fixture
def scaffold_config(workspace_dir: Path) -> ScaffoldConfig:
    return ScaffoldConfig(workspace_root=workspace_dir)


# ---------------------------------------------------------------------------
# External generator stubs
# ---------------------------------------------------------------------------


class StubModuleGenerator:
    """Records every call and returns one fixed module file."""

    def __init__(self) -> None:
        self.calls: list[ModuleGeneratorConfig] = []

    def generate(self, config: ModuleGeneratorConfig) -> list[RenderedFile]:
        self.calls.append(config)
        return [RenderedFile(f"{config.path}/{config.name}.module.ts", b"export class Stub {}\n")]


class FailingModuleGenerator:
    def generate(self, config: ModuleGeneratorConfig) -> list[RenderedFile]:
        raise RuntimeError("schematic blew up")


@pytest.fixture
def stub_generator() -> StubModuleGenerator:
    return StubModuleGenerator()


@pytest.fixture
def failing_generator() -> FailingModuleGenerator:
    return FailingModuleGenerator()
