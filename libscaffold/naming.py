"""Name derivation for generated libraries.

Turns a raw, possibly scoped identifier (``@scope/name``) into every name the
pipeline needs: folder name, project root, distribution path, source
directories, the flat ``scope:name`` package name and the relative path back
to the workspace root.  Everything here is a pure function of its arguments
so re-running the pipeline against the same workspace always yields the same
``NamingContext``.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from .errors import InvalidNameError

DEFAULT_PREFIX = "lib"

RESERVED_PROJECT_NAMES: tuple[str, ...] = ("test", "ember", "ember-cli", "vendor", "app")

_SCOPED_RE = re.compile(r"^@(?P<scope>[^/]*)/(?P<name>.*)$")
_SEGMENT_RE = re.compile(r"^[a-zA-Z][.0-9a-zA-Z]*$")
_SCOPE_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_PACKAGE_NAME_RE = re.compile(r"^(?:@[a-zA-Z0-9_-]+/)?[a-zA-Z0-9_-]+$")


# ---------------------------------------------------------------------------
# String-case helpers
# ---------------------------------------------------------------------------


def decamelize(value: str) -> str:
    """``innerHTML`` -> ``inner_html``."""
    return re.sub(r"([a-z\d])([A-Z])", r"\1_\2", value).lower()


def dasherize(value: str) -> str:
    """``innerHTML`` -> ``inner-html``, ``my lib`` -> ``my-lib``."""
    return re.sub(r"[ _]", "-", decamelize(value))


def camelize(value: str) -> str:
    """``my-lib_name`` -> ``myLibName``."""
    result = re.sub(
        r"(-|_|\.|\s)+(.)?",
        lambda m: m.group(2).upper() if m.group(2) else "",
        value,
    )
    return re.sub(r"^([A-Z])", lambda m: m.group(1).lower(), result)


def capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def classify(value: str) -> str:
    """``my-lib`` -> ``MyLib``.  Dotted parts are classified independently."""
    return ".".join(capitalize(camelize(part)) for part in value.split("."))


def underscore(value: str) -> str:
    """``innerHTML`` -> ``inner_html``, ``my-lib`` -> ``my_lib``."""
    result = re.sub(r"([a-z\d])([A-Z]+)", r"\1_\2", value)
    return re.sub(r"-|\s+", "_", result).lower()


STRING_HELPERS = {
    "decamelize": decamelize,
    "dasherize": dasherize,
    "camelize": camelize,
    "classify": classify,
    "underscore": underscore,
    "capitalize": capitalize,
}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def split_scoped_name(identifier: str) -> tuple[str | None, str]:
    """Split ``@scope/name`` into ``("scope", "name")``.

    Unscoped identifiers come back as ``(None, identifier)``.
    """
    match = _SCOPED_RE.match(identifier)
    if match is None:
        return None, identifier
    return match.group("scope"), match.group("name")


def _fail_position(short_name: str) -> int | None:
    """Return the index of the first invalid character, or ``None``."""
    matched: list[str] = []
    for part in short_name.split("-"):
        if not _SEGMENT_RE.match(part):
            break
        matched.append(part)
    valid_prefix = "-".join(matched)
    if valid_prefix == short_name:
        return None
    return len(valid_prefix)


def validate_project_name(identifier: str | None) -> str:
    """Return *identifier* unchanged if it is a usable project name.

    Raises ``InvalidNameError`` otherwise.

    The rules are applied to the short name once any ``@scope/`` prefix has
    been stripped: every dash-separated segment must start with a letter,
    the identifier must be a plain package name (letters, digits, dashes and
    underscores), no path separators are allowed, and a handful of names
    reserved by the build tool are refused.
    """
    if not identifier:
        raise InvalidNameError(identifier, 'Invalid options, "name" is required.')

    scope, short_name = split_scoped_name(identifier)
    if scope is not None and not _SCOPE_RE.match(scope):
        raise InvalidNameError(identifier, f'Project scope "{scope}" is invalid.')
    if not short_name or "/" in short_name or "\\" in short_name:
        raise InvalidNameError(
            identifier, f'Project name "{identifier}" must not contain path separators.'
        )

    position = _fail_position(short_name)
    if position is not None:
        raise InvalidNameError(
            identifier,
            f'Project name "{identifier}" is not valid (error at character {position}). '
            "New project names must start with a letter, and must contain only "
            "alphanumeric characters or dashes. When adding a dash the segment "
            "after the dash must also start with a letter.",
        )
    if not _PACKAGE_NAME_RE.match(identifier):
        raise InvalidNameError(
            identifier, f'Project name "{identifier}" is not a valid package name.'
        )
    if short_name in RESERVED_PROJECT_NAMES:
        raise InvalidNameError(identifier, f'Project name "{short_name}" is not a supported name.')
    return identifier


# ---------------------------------------------------------------------------
# NamingContext
# ---------------------------------------------------------------------------


class NamingContext(BaseModel):
    """Every derived name for one generated library."""

    model_config = ConfigDict(frozen=True)

    project_name: str
    package_name: str
    name: str
    scope_name: str | None = None
    folder_name: str
    project_root: str
    source_root: str
    source_dir: str
    dist_root: str
    scope_prefix: str = ""
    meteor_package_name: str
    relative_root_path: str
    prefix: str = DEFAULT_PREFIX


def relative_path_to_root(path: str) -> str:
    """``projects/foo-bar`` -> ``../..``."""
    segments = [s for s in path.split("/") if s]
    return "/".join(".." for _ in segments)


def resolve_naming(
    identifier: str | None,
    new_project_root: str,
    prefix: str | None = None,
) -> NamingContext:
    """Derive the ``NamingContext`` for *identifier*.

    Args:
        identifier: Raw project name, e.g. ``"@acme/widgets"`` or ``"baz"``.
        new_project_root: The workspace's ``newProjectRoot`` convention.
        prefix: Selector prefix for generated components (default ``"lib"``).
    """
    identifier = validate_project_name(identifier)
    scope, short_name = split_scoped_name(identifier)

    scope_folder = f"{dasherize(scope)}-" if scope else ""
    folder_name = f"{scope_folder}{dasherize(short_name)}"
    base = new_project_root.strip("/")
    project_root = f"{base}/{folder_name}" if base else folder_name
    scope_prefix = f"{dasherize(scope)}:" if scope else ""

    return NamingContext(
        project_name=identifier,
        package_name=dasherize(identifier),
        name=short_name,
        scope_name=scope,
        folder_name=folder_name,
        project_root=project_root,
        source_root=f"{project_root}/client/src",
        source_dir=f"{project_root}/client/src/lib",
        dist_root=f"dist/{folder_name}",
        scope_prefix=scope_prefix,
        meteor_package_name=f"{scope_prefix}{dasherize(short_name)}",
        relative_root_path=relative_path_to_root(project_root),
        prefix=prefix or DEFAULT_PREFIX,
    )
