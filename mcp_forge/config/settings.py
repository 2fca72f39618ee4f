"""
Settings
Configuration management for mcp-forge projects.

Precedence, lowest first: defaults, mcp-forge.json, .env, environment.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import dotenv_values
from jsonschema import ValidationError, validate

from mcp_forge.components.materializer import CACHE_POLICIES
from mcp_forge.components.types import LoadAllOptions, LoadOptions
from mcp_forge.config.paths import get_forge_home, get_staging_root

PROJECT_FILE = "mcp-forge.json"

DEFAULT_DIRECTORIES = {
    "tools": "src/tools",
    "resources": "src/resources",
    "prompts": "src/prompts",
}

_AUTOLOAD_SCHEMA = {
    "type": "object",
    "properties": {
        "enabled": {"type": "boolean"},
        "directory": {"type": "string"},
        "pattern": {"type": "string"},
    },
    "additionalProperties": False,
}

PROJECT_SCHEMA = {
    "type": "object",
    "properties": {
        "server": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "version": {"type": "string", "minLength": 1},
            },
        },
        "tools": _AUTOLOAD_SCHEMA,
        "resources": _AUTOLOAD_SCHEMA,
        "prompts": _AUTOLOAD_SCHEMA,
        "cache_policy": {"enum": list(CACHE_POLICIES)},
        "log_level": {"enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
    },
}


class ConfigError(Exception):
    """The project configuration file is unreadable or invalid."""


def _default_autoload() -> LoadAllOptions:
    return LoadAllOptions(
        tools=LoadOptions(directory=DEFAULT_DIRECTORIES["tools"]),
        resources=LoadOptions(directory=DEFAULT_DIRECTORIES["resources"]),
        prompts=LoadOptions(directory=DEFAULT_DIRECTORIES["prompts"]),
    )


@dataclass
class Config:
    """Project configuration."""
    project_root: Path = field(default_factory=Path.cwd)
    environment: str = "development"
    log_level: str = "INFO"
    server_name: str = "mcp-forge-server"
    server_version: str = "1.0.0"
    cache_policy: str = "mtime"
    home: Path = field(default_factory=get_forge_home)
    autoload: LoadAllOptions = field(default_factory=_default_autoload)

    @property
    def staging_root(self) -> Path:
        return get_staging_root(self.project_root, self.home)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def load_project_file(project_root: Path) -> dict[str, Any]:
    """
    Read and validate <project_root>/mcp-forge.json.

    Returns:
        The parsed file, or {} if there is none

    Raises:
        ConfigError: Invalid JSON or schema violation
    """
    path = Path(project_root) / PROJECT_FILE
    if not path.is_file():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        validate(instance=data, schema=PROJECT_SCHEMA)
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"Invalid {path} at {where}: {e.message}") from e

    return data


class ConfigManager:
    """Configuration manager - loads and provides config."""

    def __init__(self, project_root: Optional[Path] = None):
        self._project_root = project_root
        self._config: Optional[Config] = None

    async def load(self) -> Config:
        """Load configuration from defaults, project file, .env and environment."""
        root = self._project_root or os.getenv("MCP_FORGE_PROJECT_ROOT") or Path.cwd()
        root = Path(root).expanduser().resolve()

        # .env never overrides variables already set in the process
        env = {k: v for k, v in dotenv_values(root / ".env").items() if v is not None}
        env.update(os.environ)

        project = load_project_file(root)
        server = project.get("server", {})

        autoload = _default_autoload()
        for kind in DEFAULT_DIRECTORIES:
            options = getattr(autoload, kind)
            for key, value in project.get(kind, {}).items():
                setattr(options, key, value)

        environment = env.get("ENVIRONMENT", "development")
        cache_policy = env.get("MCP_FORGE_CACHE_POLICY", project.get("cache_policy", "mtime"))
        if cache_policy not in CACHE_POLICIES:
            raise ConfigError(
                f"MCP_FORGE_CACHE_POLICY must be one of {CACHE_POLICIES}, got '{cache_policy}'"
            )

        home = env.get("MCP_FORGE_HOME")
        self._config = Config(
            project_root=root,
            environment=environment,
            log_level=env.get("LOG_LEVEL", project.get("log_level", "INFO")).upper(),
            server_name=server.get("name", "mcp-forge-server"),
            server_version=server.get("version", "1.0.0"),
            cache_policy=cache_policy,
            home=Path(home).expanduser() if home else get_forge_home(),
            autoload=autoload,
        )
        return self._config

    def get(self) -> Config:
        """Get current configuration."""
        if self._config is None:
            # Create default config if not loaded
            self._config = Config(project_root=Path(self._project_root or Path.cwd()).resolve())
        return self._config
