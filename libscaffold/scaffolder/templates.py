"""Jinja2 template rendering for library scaffolding.

Provides the TemplateRenderer class which loads templates from the
``libscaffold/scaffolder/templates/`` directory and expands a whole template
directory into a list of ``RenderedFile`` objects.  Rendering never touches
the workspace; merging the result into a tree is the merger's job.

Conventions:

* Files ending in ``.j2`` are Jinja2 templates; the suffix is dropped from
  the output name.  Any other file is copied byte for byte.
* Path segments may contain ``__key__`` placeholders, optionally piped
  through a string helper: ``__name@dasherize__.module.ts.j2``.
* Every name a template or path uses must be present in the context,
  otherwise ``MissingSubstitutionError`` is raised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, UndefinedError, meta

from ..errors import MissingSubstitutionError
from ..naming import STRING_HELPERS

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

_PATH_PLACEHOLDER_RE = re.compile(r"__([a-zA-Z][a-zA-Z0-9_]*?)(?:@([a-zA-Z]+))?__")
_UNDEFINED_RE = re.compile(r"'([^']+)' is undefined")


@dataclass(frozen=True)
class RenderedFile:
    """A file produced by rendering, relative to the workspace root."""

    path: str
    content: bytes

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 template trees for library scaffolding."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # String-case helpers double as filters: {{ name | classify }}
        self.env.filters.update(STRING_HELPERS)

    # -- Single template rendering -----------------------------------------

    def _check_undeclared(self, source: str, context: dict[str, Any], template: str) -> None:
        ast = self.env.parse(source)
        known = set(context) | set(self.env.globals)
        for name in sorted(meta.find_undeclared_variables(ast)):
            if name not in known:
                raise MissingSubstitutionError(name, template)

    def render_template(self, template_path: str, context: dict[str, Any]) -> str:
        """Render one template (path relative to the template directory)."""
        source, _, _ = self.env.loader.get_source(self.env, template_path)  # type: ignore[union-attr]
        self._check_undeclared(source, context, template_path)
        try:
            return self.env.get_template(template_path).render(**context)
        except UndefinedError as exc:
            match = _UNDEFINED_RE.search(str(exc))
            raise MissingSubstitutionError(
                match.group(1) if match else str(exc), template_path
            ) from exc

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        self._check_undeclared(template_string, context, "<string>")
        try:
            return self.env.from_string(template_string).render(**context)
        except UndefinedError as exc:
            match = _UNDEFINED_RE.search(str(exc))
            raise MissingSubstitutionError(match.group(1) if match else str(exc)) from exc

    # -- Tree rendering ----------------------------------------------------

    def render_path(self, relative_path: str, context: dict[str, Any]) -> str:
        """Substitute ``__key__`` / ``__key@helper__`` placeholders in a path."""

        def _replace(match: re.Match[str]) -> str:
            key, helper = match.group(1), match.group(2)
            if key not in context:
                raise MissingSubstitutionError(key, relative_path)
            value = str(context[key])
            if helper:
                if helper not in STRING_HELPERS:
                    raise MissingSubstitutionError(helper, relative_path)
                value = STRING_HELPERS[helper](value)
            return value

        return _PATH_PLACEHOLDER_RE.sub(_replace, relative_path)

    def render(self, template_root: str, context: dict[str, Any]) -> list[RenderedFile]:
        """Expand every file under *template_root* with *context*.

        Args:
            template_root: Subdirectory of the template directory to expand.
            context: Substitution context (naming fields, options, helpers).

        Returns:
            Rendered files sorted by template path.  Output paths keep the
            directory structure below *template_root*.
        """
        root_path = self.template_dir / template_root
        if not root_path.is_dir():
            raise FileNotFoundError(f"Template directory not found: {root_path}")

        rendered: list[RenderedFile] = []
        for template_file in sorted(p for p in root_path.rglob("*") if p.is_file()):
            rel = template_file.relative_to(root_path).as_posix()
            if rel.endswith(".j2"):
                content = self.render_template(f"{template_root}/{rel}", context).encode("utf-8")
                rel = rel[: -len(".j2")]
            else:
                content = template_file.read_bytes()
            rendered.append(RenderedFile(self.render_path(rel, context), content))
        return rendered

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*."""
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix() for p in search_dir.rglob("*.j2")
        )
