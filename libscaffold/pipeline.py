"""libscaffold Pipeline Orchestrator.

Generates an Angular/Meteor library inside an existing workspace by running
a fixed chain of stages against an in-memory tree:

VALIDATE                    -- check the name, locate the workspace, derive names.
RENDER_MERGE                -- render the library templates and merge them in.
REGISTER_PROJECT            -- add the project to ``angular.json``.
PATCH_PACKAGE_MANIFEST      -- add toolchain dev dependencies (``skip_package_json``).
PATCH_COMPILER_CONFIG       -- add path aliases to ``tsconfig.json`` (``skip_ts_config``).
DELEGATE_EXTERNAL_GENERATOR -- generate the library NgModule.
SCHEDULE_INSTALL_TASK       -- queue ``npm install`` (``skip_install``).

Any failure aborts the whole chain; the caller's tree is never modified and
nothing reaches the disk.

Usage::

    python -m libscaffold.pipeline @acme/widgets --workspace ./my-workspace
    python -m libscaffold.pipeline widgets --skip-install --dry-run
"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import ValidationError

from .config import LibraryOptions, ScaffoldConfig
from .errors import ConfigParseError, DelegateGeneratorError, ScaffoldError
from .naming import NamingContext, resolve_naming, validate_project_name
from .scaffolder.generator import LibraryGenerator, library_dev_dependencies
from .scaffolder.merger import MergePolicy, branch_and_merge
from .scaffolder.module_gen import ExternalGenerator, ModuleGeneratorConfig, NgModuleGenerator
from .scaffolder.templates import TemplateRenderer
from .tasks import NodePackageInstallTask, Task, run_tasks
from .utils import (
    format_duration,
    print_actions,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
)
from .workspace.json_config import (
    PACKAGE_JSON,
    add_package_json_dependencies,
    update_json_file,
    update_tsconfig,
)
from .workspace.registry import (
    add_project_to_workspace,
    build_library_project,
    find_workspace_path,
    get_new_project_root,
    get_workspace,
)
from .workspace.tree import TreeAction, VirtualTree, normalize_path


class Stage(str, Enum):
    VALIDATE = "validate"
    RENDER_MERGE = "render-merge"
    REGISTER_PROJECT = "register-project"
    PATCH_PACKAGE_MANIFEST = "patch-package-manifest"
    PATCH_COMPILER_CONFIG = "patch-compiler-config"
    DELEGATE_EXTERNAL_GENERATOR = "delegate-external-generator"
    SCHEDULE_INSTALL_TASK = "schedule-install-task"


STAGE_NAMES: dict[Stage, str] = {
    Stage.VALIDATE: "Validate",
    Stage.RENDER_MERGE: "Render templates",
    Stage.REGISTER_PROJECT: "Register project",
    Stage.PATCH_PACKAGE_MANIFEST: "Update package.json",
    Stage.PATCH_COMPILER_CONFIG: "Update tsconfig.json",
    Stage.DELEGATE_EXTERNAL_GENERATOR: "Generate module",
    Stage.SCHEDULE_INSTALL_TASK: "Schedule install",
}


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class PipelineResult:
    """Outcome of a successful run: the tree to commit and the queued tasks."""

    tree: VirtualTree
    naming: NamingContext
    tasks: list[Task] = field(default_factory=list)
    stages_completed: list[Stage] = field(default_factory=list)
    stages_skipped: list[Stage] = field(default_factory=list)
    actions: list[TreeAction] = field(default_factory=list)
    workspace_path: str = ""


@dataclass
class _RunState:
    tree: VirtualTree
    resolved: NamingContext | None = None
    workspace_path: str = ""
    manifest_patched: bool = False
    tasks: list[Task] = field(default_factory=list)

    @property
    def naming(self) -> NamingContext:
        if self.resolved is None:
            raise RuntimeError("Names are resolved by the validate stage")
        return self.resolved


def _always(_options: LibraryOptions) -> bool:
    return True


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Runs the library generation chain.

    Attributes:
        options: What to generate.
        config: How to generate it.
        external_generator: Produces the library NgModule; injectable so
            tests can stub it.
        merge_override: Policy to retry with when the template merge hits a
            conflict (``None`` means conflicts are fatal).
    """

    _STAGES: list[tuple[Stage, Callable[[LibraryOptions], bool], str]] = [
        (Stage.VALIDATE, _always, "_validate"),
        (Stage.RENDER_MERGE, _always, "_render_and_merge"),
        (Stage.REGISTER_PROJECT, _always, "_register_project"),
        (Stage.PATCH_PACKAGE_MANIFEST, lambda o: not o.skip_package_json, "_patch_package_json"),
        (Stage.PATCH_COMPILER_CONFIG, lambda o: not o.skip_ts_config, "_patch_tsconfig"),
        (Stage.DELEGATE_EXTERNAL_GENERATOR, _always, "_delegate_module"),
        (
            Stage.SCHEDULE_INSTALL_TASK,
            lambda o: not o.skip_package_json and not o.skip_install,
            "_schedule_install",
        ),
    ]

    def __init__(
        self,
        options: LibraryOptions,
        config: ScaffoldConfig | None = None,
        external_generator: ExternalGenerator | None = None,
        merge_override: MergePolicy | None = None,
        verbose: bool = False,
    ) -> None:
        self.options = options
        self.config = config or ScaffoldConfig()
        renderer = TemplateRenderer(self.config.template_dir)
        self.generator = LibraryGenerator(renderer)
        self.external_generator = external_generator or NgModuleGenerator(renderer)
        self.merge_override = merge_override
        self.verbose = verbose

    # ------------------------------------------------------------------
    # Core chain
    # ------------------------------------------------------------------

    def run(self, tree: VirtualTree) -> PipelineResult:
        """Apply every stage to a branch of *tree*.

        Returns:
            A ``PipelineResult`` whose ``tree`` holds all pending changes.
            *tree* itself is left untouched whether the run succeeds or not.

        Raises:
            ScaffoldError: The first failing stage's error, with ``stage``
                set to that stage's value.
        """
        state = _RunState(tree=tree.branch())
        completed: list[Stage] = []
        skipped: list[Stage] = []

        for index, (stage, predicate, method_name) in enumerate(self._STAGES, start=1):
            if not predicate(self.options):
                skipped.append(stage)
                continue
            if self.verbose:
                print_stage_header(index, STAGE_NAMES[stage])
            try:
                getattr(self, method_name)(state)
            except ScaffoldError as exc:
                exc.stage = stage.value
                raise
            completed.append(stage)

        return PipelineResult(
            tree=state.tree,
            naming=state.naming,
            tasks=list(state.tasks),
            stages_completed=completed,
            stages_skipped=skipped,
            actions=state.tree.actions,
            workspace_path=state.workspace_path,
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _validate(self, state: _RunState) -> None:
        validate_project_name(self.options.name)
        state.workspace_path = find_workspace_path(state.tree)
        workspace = get_workspace(state.tree)
        new_project_root = get_new_project_root(workspace, self.config.default_project_root)
        state.resolved = resolve_naming(self.options.name, new_project_root, self.options.prefix)
        try:
            normalize_path(state.resolved.project_root)
        except ValueError as exc:
            raise ConfigParseError(
                state.workspace_path,
                f'newProjectRoot "{new_project_root}" places the project outside the workspace',
            ) from exc

    def _render_and_merge(self, state: _RunState) -> None:
        files = self.generator.render(state.naming, self.options)
        written = branch_and_merge(
            state.tree, files, self.config.conflict_policy, override=self.merge_override
        )
        if self.verbose:
            print_success(f"  {len(written)} file(s) staged under {state.naming.project_root}")

    def _register_project(self, state: _RunState) -> None:
        entry = build_library_project(state.naming)
        add_project_to_workspace(
            state.tree, state.naming.project_name, entry, indent=self.config.json_indent
        )

    def _patch_package_json(self, state: _RunState) -> None:
        state.manifest_patched = update_json_file(
            state.tree,
            PACKAGE_JSON,
            add_package_json_dependencies(library_dev_dependencies()),
            indent=self.config.json_indent,
        )
        if not state.manifest_patched and self.verbose:
            print_warning("  package.json not found -- dependencies not added.")

    def _patch_tsconfig(self, state: _RunState) -> None:
        patched = update_tsconfig(
            state.tree,
            state.naming.package_name,
            state.naming.dist_root,
            indent=self.config.json_indent,
        )
        if not patched and self.verbose:
            print_warning("  tsconfig.json not found -- path aliases not added.")

    def _delegate_module(self, state: _RunState) -> None:
        module_config = ModuleGeneratorConfig(
            name=state.naming.name,
            common_module=False,
            flat=True,
            path=state.naming.source_dir,
            project=state.naming.project_name,
        )
        try:
            files = self.external_generator.generate(module_config)
        except Exception as exc:
            raise DelegateGeneratorError(f"Module generation failed: {exc}") from exc
        branch_and_merge(state.tree, files, MergePolicy.ERROR)

    def _schedule_install(self, state: _RunState) -> None:
        if not state.manifest_patched:
            return
        state.tasks.append(NodePackageInstallTask(package_manager=self.config.package_manager))

    # ------------------------------------------------------------------
    # Host routine
    # ------------------------------------------------------------------

    async def execute(self) -> PipelineResult:
        """Open the workspace, run the chain, commit and drain the tasks."""
        started = time.monotonic()
        tree = VirtualTree.from_directory(self.config.workspace_root)
        result = self.run(tree)

        print_actions(result.actions)
        if self.config.dry_run:
            print_warning("Dry run -- no changes were written.")
            return result

        await result.tree.commit()
        if result.tasks:
            await run_tasks(
                result.tasks, self.config.workspace_root, timeout=self.config.install_timeout
            )

        print_summary_table(
            {
                "Project": result.naming.project_name,
                "Root": result.naming.project_root,
                "Dist": result.naming.dist_root,
                "Files changed": str(len(result.actions)),
                "Tasks": ", ".join(t.name for t in result.tasks) or "none",
                "Duration": format_duration(time.monotonic() - started),
            },
            title="Library generated",
        )
        return result


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``libscaffold`` / ``python -m libscaffold.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="libscaffold",
        description="Generate an Angular/Meteor library inside an Angular workspace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  libscaffold my-lib\n"
            "  libscaffold @acme/widgets --prefix acme --workspace ./app\n"
            "  libscaffold my-lib --skip-install --dry-run\n"
        ),
    )
    parser.add_argument("name", help="Library name, optionally scoped (@scope/name)")
    parser.add_argument("--prefix", default="lib", help="Component selector prefix (default: lib)")
    parser.add_argument("--skip-package-json", action="store_true", help="Do not touch package.json")
    parser.add_argument("--skip-ts-config", action="store_true", help="Do not touch tsconfig.json")
    parser.add_argument("--skip-install", action="store_true", help="Do not run the install task")
    parser.add_argument("--workspace", "-w", default=None, help="Workspace root (default: .)")
    parser.add_argument("--force", action="store_true", help="Overwrite conflicting files")
    parser.add_argument("--dry-run", action="store_true", help="Report changes without writing")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print each stage")

    args = parser.parse_args(argv)

    try:
        config = ScaffoldConfig.from_env()
        if args.workspace:
            config = config.model_copy(update={"workspace_root": Path(args.workspace)})
        if args.dry_run:
            config = config.model_copy(update={"dry_run": True})
        options = LibraryOptions(
            name=args.name,
            prefix=args.prefix,
            skip_package_json=args.skip_package_json,
            skip_ts_config=args.skip_ts_config,
            skip_install=args.skip_install,
        )
    except (ValidationError, ValueError) as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(2)

    pipeline = Pipeline(
        options,
        config,
        merge_override=MergePolicy.OVERWRITE if args.force else None,
        verbose=args.verbose,
    )
    try:
        asyncio.run(pipeline.execute())
    except ScaffoldError as exc:
        where = f" [{exc.stage}]" if exc.stage else ""
        print_error(f"{type(exc).__name__}{where}: {exc}")
        sys.exit(1)
    except NotADirectoryError as exc:
        print_error(str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
