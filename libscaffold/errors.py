"""Exception taxonomy for the libscaffold pipeline.

Every error raised by the core derives from ``ScaffoldError``.  All of them
are fatal to a pipeline run: the in-memory tree is discarded and nothing is
written to disk.  The orchestrator stamps the failing stage onto the
exception before it propagates.
"""

from __future__ import annotations


class ScaffoldError(Exception):
    """Base class for all scaffolding failures."""

    def __init__(self, message: str) -> None:
        self.stage: str | None = None
        super().__init__(message)


class InvalidNameError(ScaffoldError):
    """Raised when the project identifier is missing or malformed."""

    def __init__(self, name: str | None, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(reason)


class DuplicateProjectError(ScaffoldError):
    """Raised when a project name or root is already registered."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"Project '{name}' already exists in workspace.")


class MergeConflictError(ScaffoldError):
    """Raised when a generated file collides with an existing one."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path '{path}' already exists and differs from the generated file.")


class MissingSubstitutionError(ScaffoldError):
    """Raised when a template references a key absent from the context."""

    def __init__(self, name: str, template: str = "") -> None:
        self.name = name
        self.template = template
        where = f" in template '{template}'" if template else ""
        super().__init__(f"No substitution for '{name}'{where}.")


class DelegateGeneratorError(ScaffoldError):
    """Wraps any failure coming out of the external module generator.

    The original exception is kept as ``__cause__``.
    """


class WorkspaceNotFoundError(ScaffoldError):
    """Raised when no workspace registry file exists in the tree."""


class ConfigParseError(ScaffoldError):
    """Raised when a config file exists but cannot be parsed."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Could not parse '{path}': {detail}")
