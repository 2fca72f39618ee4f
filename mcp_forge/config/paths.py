"""
Paths

Where mcp-forge keeps its per-user state.
"""

import hashlib
import os
import tempfile
from pathlib import Path


def get_forge_home() -> Path:
    """Get the mcp-forge home directory.

    Uses MCP_FORGE_HOME env var if set, otherwise <tmp>/mcp-forge
    """
    env_home = os.environ.get("MCP_FORGE_HOME")
    if env_home:
        return Path(os.path.expanduser(env_home))
    return Path(tempfile.gettempdir()) / "mcp-forge"


def get_staging_root(project_root: Path, home: Path | None = None) -> Path:
    """Staging directory for one project: <home>/components/<sha256(root)[:12]>."""
    digest = hashlib.sha256(str(Path(project_root).resolve()).encode("utf-8")).hexdigest()[:12]
    return (home or get_forge_home()) / "components" / digest
