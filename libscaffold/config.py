"""libscaffold configuration.

Centralised, typed configuration for the scaffolding pipeline.  All settings
use Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.

Two models live here:

* ``LibraryOptions`` -- what to generate (the per-invocation options record).
* ``ScaffoldConfig`` -- how to generate it (workspace location, formatting,
  conflict handling, install command).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .naming import DEFAULT_PREFIX
from .scaffolder.merger import MergePolicy


class LibraryOptions(BaseModel):
    """Options for one library generation run.

    Field names are snake_case; the camelCase spellings used by workspace
    tooling (``skipPackageJson`` ...) are accepted as aliases.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, description="Library name, optionally @scope/name")
    prefix: str = Field(default=DEFAULT_PREFIX, min_length=1, description="Component selector prefix")
    skip_package_json: bool = Field(default=False, alias="skipPackageJson")
    skip_ts_config: bool = Field(default=False, alias="skipTsConfig")
    skip_install: bool = Field(default=False, alias="skipInstall")


class ScaffoldConfig(BaseModel):
    """Global libscaffold configuration.

    Instances are typically created once by the CLI entry point and then
    passed to ``Pipeline``.
    """

    workspace_root: Path = Field(default=Path("."))
    template_dir: Path | None = Field(
        default=None, description="Override for the bundled template directory"
    )
    json_indent: int = Field(default=2, ge=0, le=8)
    conflict_policy: MergePolicy = Field(default=MergePolicy.ERROR)
    package_manager: str = Field(default="npm")
    install_timeout: int = Field(default=600, ge=10, description="Install task timeout in seconds")
    default_project_root: str = Field(
        default="projects", description="Used when the workspace sets no newProjectRoot"
    )
    dry_run: bool = Field(default=False)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "ScaffoldConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            LIBSCAFFOLD_WORKSPACE, LIBSCAFFOLD_TEMPLATE_DIR,
            LIBSCAFFOLD_JSON_INDENT, LIBSCAFFOLD_CONFLICT_POLICY,
            LIBSCAFFOLD_PACKAGE_MANAGER, LIBSCAFFOLD_INSTALL_TIMEOUT,
            LIBSCAFFOLD_DEFAULT_PROJECT_ROOT, LIBSCAFFOLD_DRY_RUN.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("LIBSCAFFOLD_WORKSPACE"):
            kwargs["workspace_root"] = Path(os.environ["LIBSCAFFOLD_WORKSPACE"])
        if os.environ.get("LIBSCAFFOLD_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["LIBSCAFFOLD_TEMPLATE_DIR"])
        if os.environ.get("LIBSCAFFOLD_JSON_INDENT"):
            kwargs["json_indent"] = int(os.environ["LIBSCAFFOLD_JSON_INDENT"])
        if os.environ.get("LIBSCAFFOLD_CONFLICT_POLICY"):
            kwargs["conflict_policy"] = MergePolicy(os.environ["LIBSCAFFOLD_CONFLICT_POLICY"])
        if os.environ.get("LIBSCAFFOLD_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["LIBSCAFFOLD_PACKAGE_MANAGER"]
        if os.environ.get("LIBSCAFFOLD_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["LIBSCAFFOLD_INSTALL_TIMEOUT"])
        if os.environ.get("LIBSCAFFOLD_DEFAULT_PROJECT_ROOT"):
            kwargs["default_project_root"] = os.environ["LIBSCAFFOLD_DEFAULT_PROJECT_ROOT"]
        if os.environ.get("LIBSCAFFOLD_DRY_RUN"):
            kwargs["dry_run"] = os.environ["LIBSCAFFOLD_DRY_RUN"].lower() in ("1", "true", "yes")
        return cls(**kwargs)
