"""
Component File Discovery

Finds component source files in a directory tree. A file is a component
purely by its base name: tool.py, resource.py or prompt.py (or .pyw),
at any depth, e.g. src/tools/math/tool.py.
"""

import os
import warnings
from pathlib import Path

from mcp_forge.components.errors import DirectoryMissing
from mcp_forge.components.types import ComponentKind, ComponentSourceFile

# Directories never worth descending into
SKIP_DIRECTORIES = frozenset({
    "__pycache__",
    "node_modules",
    "site-packages",
    "venv",
    ".venv",
})


class DiscoveryResult(list):
    """Discovered files (a plain list) plus whether the root was missing."""

    def __init__(self, files=(), directory_missing: bool = False):
        super().__init__(files)
        self.directory_missing = directory_missing


def discover(root_dir: Path | str) -> DiscoveryResult:
    """
    Recursively find component files under root_dir.

    Args:
        root_dir: Directory to search

    Returns:
        DiscoveryResult of ComponentSourceFile, in no particular order.
        If root_dir does not exist the result is empty, has
        directory_missing set, and a DirectoryMissing warning is emitted.

    Raises:
        OSError: If the directory exists but cannot be listed
    """
    root = Path(root_dir)
    if not root.is_dir():
        warnings.warn(
            DirectoryMissing(f"Directory {root} does not exist"),
            stacklevel=2,
        )
        return DiscoveryResult(directory_missing=True)

    def _raise(error: OSError):
        raise error

    results = []
    for current, dirnames, filenames in os.walk(root, onerror=_raise):
        # Prune in place so os.walk skips them
        dirnames[:] = [
            d for d in dirnames
            if d not in SKIP_DIRECTORIES and not d.startswith(".")
        ]
        for filename in filenames:
            kind = ComponentKind.from_file_name(filename)
            if kind is None:
                continue
            path = Path(current, filename).resolve()
            results.append(ComponentSourceFile(
                path=path,
                kind=kind,
                modified_at=path.stat().st_mtime,
            ))

    return DiscoveryResult(results)
