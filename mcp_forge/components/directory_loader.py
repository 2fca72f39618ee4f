"""
Directory Loader

Runs discovery -> materialize -> load -> validate for one component kind
and one directory, collecting per-file errors instead of raising them.
"""

import asyncio
import fnmatch
import logging
from pathlib import Path

from mcp_forge.components.discovery import discover
from mcp_forge.components.compiler import Compiler
from mcp_forge.components.dynamic_loader import EXPORT_NAME, DynamicLoader
from mcp_forge.components.errors import ValidationFailure
from mcp_forge.components.materializer import Materializer
from mcp_forge.components.types import (
    ComponentKind,
    ComponentSourceFile,
    LoadAllOptions,
    LoadOptions,
    LoadResult,
    build_definition,
)
from mcp_forge.components.validators import VALIDATORS, Validator, classify

logger = logging.getLogger(__name__)


class ComponentLoader:
    """Loads components of each kind from their configured directories."""

    def __init__(self, materializer: Materializer, loader: DynamicLoader):
        self.materializer = materializer
        self.loader = loader

    @classmethod
    def create(
        cls,
        project_root: Path,
        staging_root: Path,
        compiler: Compiler | None = None,
        cache_policy: str = "mtime"
    ) -> "ComponentLoader":
        """Build a loader with its own Materializer and DynamicLoader."""
        materializer = Materializer(project_root, staging_root, compiler, cache_policy)
        loader = DynamicLoader(materializer.project_root, materializer.staging_root)
        return cls(materializer, loader)

    @property
    def project_root(self) -> Path:
        return self.materializer.project_root

    def resolve_directory(self, directory: str) -> Path:
        """Relative directories are taken from the project root."""
        path = Path(directory).expanduser()
        if not path.is_absolute():
            path = self.project_root / path
        return path

    async def load_directory(
        self,
        options: LoadOptions,
        kind: ComponentKind,
        validator: Validator | None = None
    ) -> LoadResult:
        """
        Load every component of one kind found under options.directory.

        Args:
            options: enabled / directory / optional glob pattern
            kind: Component kind to load; files of other kinds are skipped
            validator: Contract check (default: the validator for kind)

        Returns:
            LoadResult with validated components and formatted per-file errors.
            Disabled and missing directories return an empty result.
        """
        if not isinstance(kind, ComponentKind):
            raise TypeError(f"kind must be a ComponentKind, got {kind!r}")

        if not options.enabled or not options.directory:
            logger.debug(f"Autoload disabled for {kind.value}s")
            return LoadResult()

        directory = self.resolve_directory(options.directory)
        if not directory.exists():
            logger.warning(
                f"Directory {directory} does not exist, skipping {kind.value} loading"
            )
            return LoadResult(directory_missing=True)

        validator = validator or VALIDATORS[kind]
        result = LoadResult()

        try:
            files = discover(directory)
        except OSError as e:
            error = f"Failed to scan directory {directory}: {e}"
            logger.warning(error)
            result.errors.append(error)
            return result

        for source in files:
            if source.kind is not kind or not self._matches(source, options.pattern):
                continue
            try:
                component = self.load_file(source, kind, validator)
                result.components.append(component)
            except Exception as e:
                error = f"Failed to load component from {source.path}: {e}"
                logger.warning(error)
                result.errors.append(error)
            # Let the other kinds' loads make progress
            await asyncio.sleep(0)

        logger.debug(
            f"Loaded {len(result.components)} {kind.value}(s) from {directory} "
            f"with {len(result.errors)} error(s)"
        )
        return result

    def load_file(self, source: ComponentSourceFile, kind: ComponentKind, validator: Validator | None = None):
        """
        Materialize, load and validate a single file.

        Raises:
            CompilationError, DependencyResolutionError, ModuleLoadError, ValidationFailure
        """
        validator = validator or VALIDATORS[kind]
        artifact = self.materializer.materialize(source.path)
        candidate = self.loader.load_component(artifact.artifact_path)

        if candidate is None:
            raise ValidationFailure(f"{source.path} does not export a component as '{EXPORT_NAME}'", source.path)

        if not validator(candidate):
            found = classify(candidate)
            detail = f"looks like a {found.value}" if found else "matches no component contract"
            raise ValidationFailure(
                f"Export of {source.path} is not a valid {kind.value}: {detail}", source.path
            )

        return build_definition(kind, candidate)

    async def load_all(self, options: LoadAllOptions) -> dict[ComponentKind, LoadResult]:
        """Load tools, resources and prompts concurrently."""
        kinds = list(ComponentKind)
        results = await asyncio.gather(*(
            self.load_directory(options.for_kind(kind), kind) for kind in kinds
        ))
        return dict(zip(kinds, results))

    def _matches(self, source: ComponentSourceFile, pattern: str | None) -> bool:
        if not pattern:
            return True
        try:
            relative = source.path.relative_to(self.project_root).as_posix()
        except ValueError:
            relative = source.path.as_posix()
        return fnmatch.fnmatch(relative, pattern) or fnmatch.fnmatch(source.path.name, pattern)
