"""Read-modify-write helpers for JSON configuration files in a tree.

``update_json_file`` is the single entry point: it parses a file, hands the
document to a transform that mutates it in place, and writes it back with
stable formatting.  The transforms used by the pipeline live here too:
compiler path aliases for ``tsconfig.json`` and dev dependencies for
``package.json``.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ..errors import ConfigParseError
from .tree import VirtualTree

PACKAGE_JSON = "package.json"
TSCONFIG_JSON = "tsconfig.json"

JsonTransform = Callable[[dict[str, Any]], Any]


# ---------------------------------------------------------------------------
# Generic read-modify-write
# ---------------------------------------------------------------------------


def _loads(path: str, text: str) -> dict[str, Any]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(path, str(exc)) from exc
    if not isinstance(document, dict):
        raise ConfigParseError(path, "top-level value is not an object")
    return document


def parse_json_file(tree: VirtualTree, path: str) -> dict[str, Any] | None:
    """Parse the JSON object at *path*, or return ``None`` when it is absent."""
    text = tree.read_text(path)
    if text is None:
        return None
    return _loads(path, text)


def serialize_json(document: Any, indent: int = 2, trailing_newline: bool = True) -> str:
    """Serialise *document* the same way every time."""
    text = json.dumps(document, indent=indent, ensure_ascii=False)
    return text + "\n" if trailing_newline else text


def update_json_file(
    tree: VirtualTree,
    path: str,
    transform: JsonTransform,
    *,
    indent: int = 2,
) -> bool:
    """Apply *transform* to the JSON document at *path*.

    A missing file is not an error: the tree is left alone and ``False`` is
    returned.  A file that exists but does not parse raises
    ``ConfigParseError``.  If *transform* raises, the file is not rewritten.

    Returns:
        ``True`` when the file existed and was rewritten.
    """
    text = tree.read_text(path)
    if text is None:
        return False
    document = _loads(path, text)
    transform(document)
    tree.overwrite(path, serialize_json(document, indent, text.endswith("\n")))
    return True


# ---------------------------------------------------------------------------
# tsconfig.json path aliases
# ---------------------------------------------------------------------------


def _append_unique(values: list[Any], item: str) -> None:
    if item not in values:
        values.append(item)


def _object_member(document: dict[str, Any], key: str, label: str) -> dict[str, Any]:
    value = document.setdefault(key, {})
    if not isinstance(value, dict):
        raise ConfigParseError(TSCONFIG_JSON, f'"{label}" is not an object')
    return value


def add_tsconfig_paths(package_name: str, dist_root: str) -> JsonTransform:
    """Build a transform mapping *package_name* onto *dist_root*.

    Adds ``package_name -> [dist_root]`` and, for deep imports and secondary
    entry points, ``package_name/* -> [dist_root/*]``.  Other aliases are
    left untouched and re-applying the transform adds nothing.
    """

    def transform(tsconfig: dict[str, Any]) -> None:
        compiler_options = _object_member(tsconfig, "compilerOptions", "compilerOptions")
        paths = _object_member(compiler_options, "paths", "compilerOptions.paths")
        for alias, target in ((package_name, dist_root), (f"{package_name}/*", f"{dist_root}/*")):
            targets = paths.setdefault(alias, [])
            if not isinstance(targets, list):
                raise ConfigParseError(
                    TSCONFIG_JSON, f'"compilerOptions.paths.{alias}" is not an array'
                )
            _append_unique(targets, target)

    return transform


def update_tsconfig(tree: VirtualTree, package_name: str, dist_root: str, indent: int = 2) -> bool:
    """Register the library's path aliases in the root ``tsconfig.json``."""
    return update_json_file(
        tree, TSCONFIG_JSON, add_tsconfig_paths(package_name, dist_root), indent=indent
    )


# ---------------------------------------------------------------------------
# package.json dependencies
# ---------------------------------------------------------------------------


class NodeDependencyType(str, Enum):
    """Sections of ``package.json`` that hold dependencies."""

    DEFAULT = "dependencies"
    DEV = "devDependencies"
    PEER = "peerDependencies"
    OPTIONAL = "optionalDependencies"


class NodeDependency(BaseModel):
    """A single npm dependency record."""

    type: NodeDependencyType = Field(default=NodeDependencyType.DEFAULT)
    name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    overwrite: bool = Field(default=False, description="Replace an existing version")


def add_package_json_dependencies(dependencies: Iterable[NodeDependency]) -> JsonTransform:
    """Build a transform inserting *dependencies* into their sections.

    Entries already present under the same section are skipped unless the
    dependency asks to overwrite.
    """
    deps = list(dependencies)

    def transform(manifest: dict[str, Any]) -> None:
        for dep in deps:
            section = manifest.setdefault(dep.type.value, {})
            if not isinstance(section, dict):
                raise ConfigParseError(PACKAGE_JSON, f'"{dep.type.value}" is not an object')
            if dep.name not in section or dep.overwrite:
                section[dep.name] = dep.version

    return transform


def add_package_json_dependency(
    tree: VirtualTree, dependency: NodeDependency, indent: int = 2
) -> bool:
    return update_json_file(
        tree, PACKAGE_JSON, add_package_json_dependencies([dependency]), indent=indent
    )


def get_package_json_dependency(tree: VirtualTree, name: str) -> NodeDependency | None:
    """Look *name* up across every dependency section of ``package.json``."""
    manifest = parse_json_file(tree, PACKAGE_JSON)
    if manifest is None:
        return None
    for dep_type in NodeDependencyType:
        section = manifest.get(dep_type.value)
        if isinstance(section, dict) and isinstance(section.get(name), str):
            return NodeDependency(type=dep_type, name=name, version=section[name])
    return None
