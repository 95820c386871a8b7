"""NgModule generation for the library's source directory.

The pipeline treats module generation as an external capability: anything
implementing ``ExternalGenerator`` can be injected.  ``NgModuleGenerator``
is the bundled implementation; it renders the ``module`` templates into the
requested directory and returns the files without touching any tree.
"""

from __future__ import annotations

import posixpath
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from ..naming import classify, dasherize
from .templates import RenderedFile, TemplateRenderer

MODULE_TEMPLATE_ROOT = "module"


class ModuleGeneratorConfig(BaseModel):
    """Invocation record handed to the external module generator."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    common_module: bool = Field(default=False, alias="commonModule")
    flat: bool = Field(default=True)
    path: str
    project: str
    spec: bool = Field(default=True, description="Also emit a .spec.ts file")


class ExternalGenerator(Protocol):
    """Anything able to produce files for a ``ModuleGeneratorConfig``."""

    def generate(self, config: ModuleGeneratorConfig) -> list[RenderedFile]: ...


class NgModuleGenerator:
    """Renders ``<path>/<name>.module.ts`` (and its spec) from templates."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def generate(self, config: ModuleGeneratorConfig) -> list[RenderedFile]:
        file_name = dasherize(config.name)
        context = {
            "name": config.name,
            "file_name": file_name,
            "class_name": f"{classify(config.name)}Module",
            "common_module": config.common_module,
            "project": config.project,
        }
        directory = config.path if config.flat else posixpath.join(config.path, file_name)

        files: list[RenderedFile] = []
        for rendered in self.renderer.render(MODULE_TEMPLATE_ROOT, context):
            if not config.spec and rendered.path.endswith(".spec.ts"):
                continue
            files.append(RenderedFile(posixpath.join(directory, rendered.path), rendered.content))
        return files
