"""libscaffold scaffolder -- renders and merges library file trees.

This module takes a ``NamingContext`` (and the run options) as input, renders
the bundled ``library`` template tree, and merges the result into a
``VirtualTree`` under a conflict policy.  The library NgModule is produced by
an injectable ``ExternalGenerator``; ``NgModuleGenerator`` is the default.

Quick usage::

    from libscaffold.naming import resolve_naming
    from libscaffold.scaffolder import LibraryGenerator, MergePolicy, branch_and_merge

    naming = resolve_naming("@acme/widgets", "projects")
    files = LibraryGenerator().render(naming)
    branch_and_merge(tree, files, MergePolicy.ERROR)
"""

from libscaffold.scaffolder.generator import LibraryGenerator, build_context
from libscaffold.scaffolder.merger import MergePolicy, branch_and_merge, merge
from libscaffold.scaffolder.module_gen import (
    ExternalGenerator,
    ModuleGeneratorConfig,
    NgModuleGenerator,
)
from libscaffold.scaffolder.templates import RenderedFile, TemplateRenderer

__all__ = [
    "ExternalGenerator",
    "LibraryGenerator",
    "MergePolicy",
    "ModuleGeneratorConfig",
    "NgModuleGenerator",
    "RenderedFile",
    "TemplateRenderer",
    "branch_and_merge",
    "build_context",
    "merge",
]
