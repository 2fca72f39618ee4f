"""
Materializer

Compile-if-stale and stage a component source file as an executable artifact.

Artifacts live in a private staging root that mirrors the project layout:

    <project>/src/tools/math/tool.py   -> <staging>/src/tools/math/tool.py
    <project>/src/tools/math/utils.py  -> <staging>/src/tools/math/utils.py

so relative imports between staged files resolve exactly as they did in the
source tree. Sources outside the project root are mirrored under
<staging>/_external/ by absolute path.
"""

import logging
import os
from pathlib import Path

from mcp_forge.components.compiler import Compiler, PythonCompiler, scan_relative_imports
from mcp_forge.components.errors import CompilationError, ComponentError, DependencyResolutionError
from mcp_forge.components.resolver import resolve_relative
from mcp_forge.components.staging import StagingManifest, compute_content_hash
from mcp_forge.components.types import ARTIFACT_EXTENSION, MaterializedArtifact

logger = logging.getLogger(__name__)

CACHE_POLICIES = ("mtime", "hash")
EXTERNAL_DIR = "_external"


class Materializer:
    """
    Stages source files into the staging root, recompiling only when stale.

    Freshness policies:
    - "mtime": reuse an artifact whose mtime is not older than the source's
    - "hash": reuse an artifact whose manifest hash matches the source content
    """

    def __init__(
        self,
        project_root: Path,
        staging_root: Path,
        compiler: Compiler | None = None,
        cache_policy: str = "mtime"
    ):
        if cache_policy not in CACHE_POLICIES:
            raise ValueError(f"Unknown cache policy '{cache_policy}', expected one of {CACHE_POLICIES}")

        self.project_root = Path(project_root).resolve()
        self.staging_root = Path(staging_root).resolve()
        self.compiler = compiler or PythonCompiler()
        self.cache_policy = cache_policy
        self.manifest = StagingManifest(self.staging_root)

    # =========================================================================
    # Public API
    # =========================================================================

    def artifact_path_for(self, source_path: Path) -> Path:
        """Deterministic staging location for a source file."""
        source = Path(source_path).resolve()
        try:
            relative = source.relative_to(self.project_root)
        except ValueError:
            relative = Path(EXTERNAL_DIR, *source.parts[1:])
        return self.staging_root / relative.with_suffix(ARTIFACT_EXTENSION)

    def materialize(self, source_path: Path | str) -> MaterializedArtifact:
        """
        Stage a source file and, recursively, its relative dependencies.

        Args:
            source_path: Component source file

        Returns:
            MaterializedArtifact for source_path

        Raises:
            CompilationError: The compiler rejected this file or a dependency
            DependencyResolutionError: A required relative import does not exist
        """
        return self._materialize(Path(source_path).resolve(), set())

    def is_fresh(self, source_path: Path) -> bool:
        """True if the staged artifact for source_path can be reused."""
        source = Path(source_path).resolve()
        artifact = self.artifact_path_for(source)
        if not artifact.is_file():
            return False

        if self.cache_policy == "hash":
            entry = self.manifest.get(source)
            current = compute_content_hash(source.read_text(encoding="utf-8"))
            return entry is not None and entry.get("hash") == current

        return artifact.stat().st_mtime_ns >= source.stat().st_mtime_ns

    # =========================================================================
    # Staging
    # =========================================================================

    def _materialize(self, source: Path, active: set[Path]) -> MaterializedArtifact:
        # Import cycle: the file is already being staged further up the stack
        active.add(source)

        if not source.is_file():
            raise ComponentError(f"Source file not found: {source}", source)

        source_text = source.read_text(encoding="utf-8")
        artifact = self.artifact_path_for(source)

        compiled = False
        if self.is_fresh(source):
            logger.debug(f"Cache hit: {source}")
        else:
            self._compile(source, source_text, artifact)
            compiled = True

        # Dependencies are checked on hits too: a fresh component may import a changed helper
        self._stage_dependencies(source, source_text, active)

        return MaterializedArtifact(
            source_path=source,
            artifact_path=artifact,
            modified_at=artifact.stat().st_mtime,
            compiled=compiled,
        )

    def _compile(self, source: Path, source_text: str, artifact: Path) -> None:
        logger.debug(f"Compiling {source} -> {artifact}")
        try:
            executable = self.compiler.compile(source_text, str(source))
        except CompilationError:
            self._discard(source, artifact)
            raise
        except Exception as e:
            self._discard(source, artifact)
            raise CompilationError(f"Failed to compile {source}: {e}", source) from e

        artifact.parent.mkdir(parents=True, exist_ok=True)
        artifact.write_text(executable, encoding="utf-8")

        # The artifact carries the source mtime, so future-dated sources still hit
        source_stat = source.stat()
        os.utime(artifact, ns=(artifact.stat().st_atime_ns, source_stat.st_mtime_ns))

        self.manifest.record(
            source,
            artifact,
            compute_content_hash(source_text),
            source_stat.st_mtime,
        )

    def _discard(self, source: Path, artifact: Path) -> None:
        """Drop a stale artifact so a broken source is never served from cache."""
        artifact.unlink(missing_ok=True)
        self.manifest.remove(source)

    def _stage_dependencies(self, source: Path, source_text: str, active: set[Path]) -> None:
        """Materialize every relative import of source into the staging root."""
        for reference in scan_relative_imports(source_text):
            dependency = resolve_relative(reference.specifier, source.parent)

            if dependency is None:
                if reference.required:
                    raise DependencyResolutionError(reference.specifier, source)
                continue

            dependency = dependency.resolve()
            if dependency.is_dir():
                # Namespace package: nothing to compile, just mirror the directory
                self.artifact_path_for(dependency / "__init__.py").parent.mkdir(parents=True, exist_ok=True)
                continue

            if dependency in active:
                continue

            self._materialize(dependency, active)
