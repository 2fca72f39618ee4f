"""
Module Resolution

Decides where an import inside a staged artifact comes from:

- Relative specifiers (".utils", "..shared.helpers") resolve inside the
  staging root, next to the artifact, where the Materializer put the
  compiled dependencies.
- Everything else resolves against the original project root first, then
  the interpreter's normal path (installed libraries). Staged components
  therefore share one copy of every project module and library.
"""

import sys
from importlib.machinery import ModuleSpec, PathFinder, SourceFileLoader
from importlib.util import spec_from_file_location
from pathlib import Path
from typing import Protocol

from mcp_forge.components.types import ARTIFACT_EXTENSION, SOURCE_EXTENSIONS


class Resolver(Protocol):
    """resolve(specifier, context_dir) -> path of the module, or None."""

    def resolve(self, specifier: str, context_dir: Path) -> Path | None:
        ...


def is_relative(specifier: str) -> bool:
    return specifier.startswith(".")


def split_relative(specifier: str) -> tuple[int, str]:
    """'..shared.helpers' -> (2, 'shared.helpers')"""
    module = specifier.lstrip(".")
    return len(specifier) - len(module), module


def resolve_relative(
    specifier: str,
    context_dir: Path,
    extensions: tuple[str, ...] = SOURCE_EXTENSIONS
) -> Path | None:
    """
    Resolve a relative specifier against a directory.

    Candidates, in order: <name><ext> for each extension, <name>/__init__<ext>,
    then <name>/ as a namespace directory. A bare "." (or "..") resolves to
    the package __init__ if present, otherwise the directory itself.

    Returns:
        Path to a file or directory, or None if nothing matches
    """
    level, module = split_relative(specifier)
    base = Path(context_dir)
    for _ in range(level - 1):
        base = base.parent

    target = base.joinpath(*module.split(".")) if module else base

    if module:
        for ext in extensions:
            candidate = target.with_name(target.name + ext)
            if candidate.is_file():
                return candidate

    for ext in extensions:
        candidate = target / f"__init__{ext}"
        if candidate.is_file():
            return candidate

    if target.is_dir():
        return target

    return None


class StagingResolver:
    """Relative specifiers against the artifact's directory in the staging root."""

    def __init__(self, staging_root: Path):
        self.staging_root = Path(staging_root)

    def resolve(self, specifier: str, context_dir: Path) -> Path | None:
        path = resolve_relative(specifier, context_dir, (ARTIFACT_EXTENSION,))
        if path is None:
            return None
        # Never escape the staging root through ".." chains
        try:
            path.resolve().relative_to(self.staging_root.resolve())
        except ValueError:
            return None
        return path


class ProjectRootResolver:
    """Top-level module names against the original project root."""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)

    def find_spec(self, specifier: str) -> ModuleSpec | None:
        """
        Module spec for the top-level name of specifier in the project root.

        Covers plain modules, regular packages and namespace packages (a
        directory without __init__), plus .pyw sources the path finder skips.
        """
        top = specifier.split(".", 1)[0]
        spec = PathFinder.find_spec(top, [str(self.project_root)])
        if spec is not None and spec.has_location:
            return spec

        # PathFinder reports a namespace package before looking at .pyw files
        for ext in SOURCE_EXTENSIONS:
            package_init = self.project_root / top / f"__init__{ext}"
            if package_init.is_file():
                return _source_spec(top, package_init, package=True)
            candidate = self.project_root / f"{top}{ext}"
            if candidate.is_file():
                return _source_spec(top, candidate)

        if spec is not None:
            # As in a normal import, a namespace portion loses to a regular
            # module or package anywhere else on the path
            root = str(self.project_root)
            elsewhere = PathFinder.find_spec(top, [p for p in sys.path if p != root])
            if elsewhere is not None and elsewhere.has_location:
                return None
        return spec

    def resolve(self, specifier: str, context_dir: Path | None = None) -> Path | None:
        spec = self.find_spec(specifier)
        if spec is None:
            return None
        if spec.has_location:
            return Path(spec.origin)
        return Path(list(spec.submodule_search_locations)[0])


def _source_spec(name: str, path: Path, package: bool = False) -> ModuleSpec:
    return spec_from_file_location(
        name,
        path,
        loader=SourceFileLoader(name, str(path)),
        submodule_search_locations=[str(path.parent)] if package else None,
    )


class DualRootResolver:
    """Picks the staging or project-root strategy per specifier class."""

    def __init__(self, staging_root: Path, project_root: Path):
        self.staging = StagingResolver(staging_root)
        self.project = ProjectRootResolver(project_root)

    def resolve(self, specifier: str, context_dir: Path) -> Path | None:
        if is_relative(specifier):
            return self.staging.resolve(specifier, context_dir)
        return self.project.resolve(specifier, context_dir)
