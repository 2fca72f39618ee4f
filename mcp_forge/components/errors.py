"""
Component errors
Failures raised while materializing, loading or validating a component file.

All of these are per-file: the directory loader catches them and records a
message, so one broken file never stops its siblings from loading.
"""

from pathlib import Path


class ComponentError(Exception):
    """Base class for per-file component failures."""

    def __init__(self, message: str, path: Path | str | None = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class CompilationError(ComponentError):
    """The compiler could not translate a source file."""


class DependencyResolutionError(ComponentError):
    """A relative import could not be located on disk."""

    def __init__(self, specifier: str, path: Path | str):
        super().__init__(f"Cannot resolve relative import '{specifier}' from {path}", path)
        self.specifier = specifier


class ModuleLoadError(ComponentError):
    """Executing a staged artifact raised."""


class ValidationFailure(ComponentError):
    """A loaded object does not satisfy the contract of its kind."""


class DirectoryMissing(UserWarning):
    """A component directory does not exist.

    This is a condition, not an error: a missing directory means the feature
    is switched off. Discovery emits it through `warnings` and returns nothing.
    """
