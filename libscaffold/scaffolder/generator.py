"""Library template context and rendering.

Turns a ``NamingContext`` plus the run options into the substitution
context for the ``library`` template tree, and renders that tree.  The
toolchain versions written into generated files and into the workspace
``package.json`` are kept here as well.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..naming import STRING_HELPERS, NamingContext
from ..workspace.json_config import NodeDependency, NodeDependencyType
from .templates import RenderedFile, TemplateRenderer

if TYPE_CHECKING:
    from ..config import LibraryOptions


LIBRARY_TEMPLATE_ROOT = "library"

# ---------------------------------------------------------------------------
# Toolchain versions
# ---------------------------------------------------------------------------

LATEST_VERSIONS: dict[str, str] = {
    "Angular": "~7.0.0",
    "RxJs": "~6.3.3",
    "ZoneJs": "~0.8.26",
    "TypeScript": "~3.1.1",
    "TsLib": "^1.9.0",
    "DevkitBuildAngular": "~0.10.0",
    "DevkitBuildNgPackagr": "~0.10.0",
    "NgPackagr": "^4.2.0",
    "Tsickle": ">=0.29.0",
}


def library_dev_dependencies() -> list[NodeDependency]:
    """Dev dependencies every workspace hosting a library needs."""
    dev = NodeDependencyType.DEV
    return [
        NodeDependency(type=dev, name="@angular/compiler-cli", version=LATEST_VERSIONS["Angular"]),
        NodeDependency(
            type=dev,
            name="@angular-devkit/build-ng-packagr",
            version=LATEST_VERSIONS["DevkitBuildNgPackagr"],
        ),
        NodeDependency(
            type=dev,
            name="@angular-devkit/build-angular",
            version=LATEST_VERSIONS["DevkitBuildAngular"],
        ),
        NodeDependency(type=dev, name="ng-packagr", version=LATEST_VERSIONS["NgPackagr"]),
        NodeDependency(type=dev, name="tsickle", version=LATEST_VERSIONS["Tsickle"]),
        NodeDependency(type=dev, name="tslib", version=LATEST_VERSIONS["TsLib"]),
        NodeDependency(type=dev, name="typescript", version=LATEST_VERSIONS["TypeScript"]),
    ]


def bare_version(version: str) -> str:
    """``~7.0.0`` -> ``7.0.0``."""
    return version.lstrip("~^")


# ---------------------------------------------------------------------------
# Context building
# ---------------------------------------------------------------------------


def build_context(naming: NamingContext, options: LibraryOptions | None = None) -> dict[str, Any]:
    """Merge string helpers, raw options and naming fields into one mapping.

    Later sources win, so naming fields shadow option fields of the same
    name (``name`` is always the short, scope-stripped name).
    """
    context: dict[str, Any] = dict(STRING_HELPERS)
    if options is not None:
        context.update(options.model_dump())
    context.update(naming.model_dump())
    context.update(
        {
            "relative_path_to_workspace_root": naming.relative_root_path,
            "angular_latest_version": bare_version(LATEST_VERSIONS["Angular"]),
            "rxjs_version": LATEST_VERSIONS["RxJs"],
            "zonejs_version": LATEST_VERSIONS["ZoneJs"],
        }
    )
    return context


class LibraryGenerator:
    """Renders the library template tree for one ``NamingContext``."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def render(
        self, naming: NamingContext, options: LibraryOptions | None = None
    ) -> list[RenderedFile]:
        context = build_context(naming, options)
        return self.renderer.render(LIBRARY_TEMPLATE_ROOT, context)
