"""
Compiler
Turns component source text into executable text, and finds the relative
imports a source file depends on.

The compiler is a collaborator: anything with a compatible `compile` method
can be handed to the Materializer. The default PythonCompiler only checks
syntax, since authored components are already Python.
"""

import ast
import re
from dataclasses import dataclass
from typing import Protocol

from mcp_forge.components.errors import CompilationError


class Compiler(Protocol):
    """Source-to-executable translator. Pure: no caching, no I/O."""

    def compile(self, source_text: str, filename: str) -> str:
        ...


class PythonCompiler:
    """Default compiler: validates Python syntax and passes the text through."""

    def compile(self, source_text: str, filename: str) -> str:
        try:
            ast.parse(source_text, filename=filename)
        except SyntaxError as e:
            raise CompilationError(
                f"Syntax error in {filename} line {e.lineno}: {e.msg}", filename
            ) from e
        return source_text


# =========================================================================
# Relative import scanning
# =========================================================================

# from <dots><module> import <names>   (names may be parenthesised over lines)
_RELATIVE_IMPORT = re.compile(
    r'^[ \t]*from[ \t]+(\.+)([\w.]*)[ \t]+import[ \t]+(\([^)]*\)|[^\n#;]+)',
    re.MULTILINE,
)


@dataclass(frozen=True)
class RelativeImport:
    """A relative import reference found in source text.

    required references must exist on disk; optional ones are imported
    names that may be submodules or plain attributes.
    """
    specifier: str  # e.g. ".utils", "..shared.helpers"
    required: bool = True


def scan_relative_imports(source_text: str) -> list[RelativeImport]:
    """
    Find relative import specifiers in source text.

    Parsed sources are walked as a syntax tree, so imports quoted in strings
    are ignored and imports inside `try: ... except ImportError:` are only
    optional. Text that does not parse (non-Python authoring dialects with
    Python import syntax) falls back to a line scan.

    Examples:
        from .utils import add        -> .utils (required), .utils.add (optional)
        from . import helpers         -> . (optional), .helpers (optional)
        from ..shared import (a, b)   -> ..shared (required), ..shared.a, ..shared.b
        from .pkg.mod import x        -> .pkg (optional), .pkg.mod (required), .pkg.mod.x
    """
    found: dict[str, RelativeImport] = {}

    try:
        tree = ast.parse(source_text)
    except (SyntaxError, ValueError):
        for match in _RELATIVE_IMPORT.finditer(source_text):
            dots, module, names = match.groups()
            _add(found, dots, module, _split_names(names), guarded=False)
        return list(found.values())

    collector = _RelativeImportCollector()
    collector.visit(tree)
    for dots, module, names, guarded in collector.imports:
        _add(found, dots, module, names, guarded)
    return list(found.values())


def _add(found: dict[str, RelativeImport], dots: str, module: str, names: list[str], guarded: bool):
    base = f"{dots}{module}"

    if module:
        # Parent packages of a dotted module run their __init__ first
        parts = module.split(".")
        for i in range(1, len(parts)):
            parent = dots + ".".join(parts[:i])
            found.setdefault(parent, RelativeImport(parent, required=False))
        if guarded:
            found.setdefault(base, RelativeImport(base, required=False))
        else:
            found[base] = RelativeImport(base, required=True)
    else:
        # The package itself, whose __init__ may define the names
        found.setdefault(dots, RelativeImport(dots, required=False))

    for name in names:
        specifier = f"{base}.{name}" if module else f"{dots}{name}"
        # Never downgrade a required reference
        found.setdefault(specifier, RelativeImport(specifier, required=False))


_IMPORT_GUARDS = {"ImportError", "ModuleNotFoundError", "Exception", "BaseException"}


class _RelativeImportCollector(ast.NodeVisitor):
    """Collects (dots, module, names, guarded) for every relative from-import."""

    def __init__(self):
        self.imports: list[tuple[str, str, list[str], bool]] = []
        self._guards = 0

    def visit_ImportFrom(self, node: ast.ImportFrom):
        if node.level > 0:
            names = [alias.name for alias in node.names if alias.name != "*"]
            self.imports.append(("." * node.level, node.module or "", names, self._guards > 0))

    def visit_Try(self, node):
        guarded = any(_catches_import_error(handler.type) for handler in node.handlers)
        if guarded:
            self._guards += 1
        for statement in node.body:
            self.visit(statement)
        if guarded:
            self._guards -= 1
        for child in (*node.handlers, *node.orelse, *node.finalbody):
            self.visit(child)

    visit_TryStar = visit_Try


def _catches_import_error(handler_type: ast.expr | None) -> bool:
    if handler_type is None:
        return True
    if isinstance(handler_type, ast.Tuple):
        return any(_catches_import_error(element) for element in handler_type.elts)
    if isinstance(handler_type, ast.Name):
        return handler_type.id in _IMPORT_GUARDS
    if isinstance(handler_type, ast.Attribute):
        return handler_type.attr in _IMPORT_GUARDS
    return False


def _split_names(names: str) -> list[str]:
    """Split the import list of a from-import, dropping aliases and '*'."""
    lines = [line.split("#", 1)[0] for line in names.splitlines()]
    cleaned = " ".join(lines).replace("\\", " ").strip().strip("()")
    result = []
    for part in cleaned.split(","):
        part = part.strip()
        if not part or part == "*":
            continue
        name = part.split()[0]
        if name.isidentifier():
            result.append(name)
    return result
