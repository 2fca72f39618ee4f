"""
Dynamic Loader

Executes staged artifacts and normalizes their exported component.

A component file exports its component as the module-level name `default`:

    default = tool(schema, handler, name="math")        # structural object
    default = GreeterTool                               # class with to_definition()
    default = GreeterTool()                             # instance with to_definition()
    default = {"name": "math", "input_schema": {...}, "execute": run}

Each artifact runs in a fresh module whose `__import__` is routed through a
DualRootResolver: relative imports load the sibling staged artifacts, all
other imports come from the project root or the installed libraries.
"""

import builtins
import hashlib
import importlib.util
import inspect
import logging
import sys
import types
from contextlib import contextmanager
from importlib.machinery import ModuleSpec
from pathlib import Path
from typing import Any, Mapping

from mcp_forge.components.errors import ModuleLoadError
from mcp_forge.components.resolver import DualRootResolver

logger = logging.getLogger(__name__)

EXPORT_NAME = "default"
MODULE_PREFIX = "_mcp_forge_staged_"

# camelCase spellings accepted from structural objects
FIELD_ALIASES = {
    "inputSchema": "input_schema",
    "outputSchema": "output_schema",
    "getMessages": "get_messages",
    "contentType": "content_type",
    "mimeType": "content_type",
    "mime_type": "content_type",
}

_NOT_STRUCTURAL = (str, bytes, int, float, bool, list, tuple, set, frozenset)


class DynamicLoader:
    """Loads staged artifacts as modules and turns their exports into candidates."""

    def __init__(self, project_root: Path, staging_root: Path, resolver: DualRootResolver | None = None):
        self.project_root = Path(project_root).resolve()
        self.staging_root = Path(staging_root).resolve()
        self.resolver = resolver or DualRootResolver(self.staging_root, self.project_root)

    def load(self, artifact_path: Path | str) -> Any:
        """
        Execute an artifact and return its raw `default` export.

        Raises:
            ModuleLoadError: Executing the artifact or one of its imports raised
        """
        path = Path(artifact_path).resolve()
        try:
            with _project_on_path(self.project_root):
                module = _LoadSession(self.resolver).load_module(path)
        except (Exception, SystemExit) as e:
            raise ModuleLoadError(f"Import failed: {e}", path) from e
        return getattr(module, EXPORT_NAME, None)

    def load_component(self, artifact_path: Path | str) -> dict[str, Any] | None:
        """load() + normalize(); errors raised by user code surface as ModuleLoadError."""
        value = self.load(artifact_path)
        try:
            return self.normalize(value)
        except (Exception, SystemExit) as e:
            raise ModuleLoadError(f"Failed to build component definition: {e}", artifact_path) from e

    # =========================================================================
    # Normalization
    # =========================================================================

    def normalize(self, value: Any) -> dict[str, Any] | None:
        """
        Turn an exported value into a candidate dict.

        Order:
        1. unwrap one level of `default` (a module or mapping holding the real export)
        2. classes with to_definition() are instantiated without arguments and converted
        3. instances with to_definition() are converted
        4. other structural objects become dicts; legacy and camelCase keys are renamed

        Returns:
            Candidate dict ready for validation, or None if nothing usable
        """
        if isinstance(value, types.ModuleType):
            value = getattr(value, EXPORT_NAME, None)
        elif isinstance(value, Mapping) and EXPORT_NAME in value:
            value = value[EXPORT_NAME]

        if value is None:
            return None

        if inspect.isclass(value):
            if not callable(getattr(value, "to_definition", None)):
                return None
            value = value().to_definition()
        elif callable(getattr(value, "to_definition", None)):
            value = value.to_definition()

        candidate = _as_mapping(value)
        if candidate is None:
            return None
        return _rename_fields(candidate)


def _as_mapping(value: Any) -> dict[str, Any] | None:
    """Plain dict view of a structural object."""
    if isinstance(value, Mapping):
        return dict(value)
    if (
        value is None
        or isinstance(value, _NOT_STRUCTURAL)
        or isinstance(value, types.ModuleType)
        or inspect.isclass(value)
        or inspect.isroutine(value)
    ):
        return None
    # Dataclasses, namespaces and plain objects: public attributes, methods included
    return {
        attr: getattr(value, attr)
        for attr in dir(value)
        if not attr.startswith("_")
    }


def _rename_fields(candidate: dict[str, Any]) -> dict[str, Any]:
    for alias, key in FIELD_ALIASES.items():
        if alias in candidate and candidate.get(key) is None:
            candidate[key] = candidate.pop(alias)

    # Legacy tools declare "parameters" instead of "input_schema"
    if "parameters" in candidate and candidate.get("input_schema") is None:
        candidate["input_schema"] = candidate.pop("parameters")

    return candidate


# =========================================================================
# Module execution
# =========================================================================

class _LoadSession:
    """One load() call: staged modules are executed at most once per session."""

    def __init__(self, resolver: DualRootResolver):
        self.resolver = resolver
        self.modules: dict[Path, types.ModuleType] = {}

    def load_module(self, path: Path) -> types.ModuleType:
        path = path.resolve()
        if path in self.modules:
            return self.modules[path]

        name = MODULE_PREFIX + hashlib.sha1(str(path).encode()).hexdigest()[:12]
        module = types.ModuleType(name)

        if path.is_dir():
            # Namespace package inside the staging root
            module.__path__ = [str(path)]
            self.modules[path] = module
            return module

        module.__file__ = str(path)
        if path.stem == "__init__":
            module.__path__ = [str(path.parent)]
        module.__dict__["__builtins__"] = self._builtins_for(path.parent)

        # Registered before executing so import cycles see the partial module
        self.modules[path] = module
        sys.modules[name] = module

        try:
            code = compile(path.read_text(encoding="utf-8"), str(path), "exec")
            exec(code, module.__dict__)
        except BaseException:
            self.modules.pop(path, None)
            sys.modules.pop(name, None)
            raise
        logger.debug(f"Executed staged module {path}")
        return module

    def _builtins_for(self, context_dir: Path) -> dict[str, Any]:
        namespace = dict(builtins.__dict__)

        def _import(name, globals=None, locals=None, fromlist=(), level=0):
            if level > 0:
                return self._import_relative(name, fromlist or (), level, context_dir)
            return self._import_absolute(name, globals, locals, fromlist, context_dir)

        namespace["__import__"] = _import
        return namespace

    def _import_relative(self, name: str, fromlist, level: int, context_dir: Path) -> types.ModuleType:
        dots = "." * level

        if name:
            parts = name.split(".")
            parent = None
            for i in range(1, len(parts) + 1):
                specifier = dots + ".".join(parts[:i])
                module = self._load_staged(specifier, context_dir)
                if parent is not None:
                    setattr(parent, parts[i - 1], module)
                parent = module
            target = parent
            base = dots + name + "."
        else:
            target = self._load_staged(dots, context_dir)
            base = dots

        for item in fromlist:
            if item == "*" or hasattr(target, item):
                continue
            path = self.resolver.resolve(base + item, context_dir)
            if path is not None:
                setattr(target, item, self.load_module(path))

        return target

    def _load_staged(self, specifier: str, context_dir: Path) -> types.ModuleType:
        path = self.resolver.resolve(specifier, context_dir)
        if path is None:
            raise ImportError(f"No staged module for '{specifier}' in {context_dir}")
        return self.load_module(path)

    def _import_absolute(self, name, globals, locals, fromlist, context_dir: Path):
        top = name.split(".", 1)[0]
        if top not in sys.modules:
            spec = self.resolver.project.find_spec(top)
            if spec is not None:
                _load_project_module(spec)
        return builtins.__import__(name, globals, locals, fromlist, 0)


def _load_project_module(spec: ModuleSpec) -> types.ModuleType:
    """Import a top-level module found in the project root under its own name."""
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    try:
        # Namespace packages have nothing to execute
        if spec.loader is not None:
            spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(spec.name, None)
        raise
    logger.debug(f"Loaded project module '{spec.name}' from {spec.origin or spec.submodule_search_locations}")
    return module


@contextmanager
def _project_on_path(project_root: Path):
    """Keep the project root importable while project modules run their own imports."""
    entry = str(project_root)
    added = entry not in sys.path
    if added:
        sys.path.insert(0, entry)
    try:
        yield
    finally:
        if added and entry in sys.path:
            sys.path.remove(entry)
