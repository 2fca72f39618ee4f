"""
Config Module
Configuration management.
"""

from .paths import get_forge_home, get_staging_root
from .settings import Config, ConfigError, ConfigManager, load_project_file

__all__ = [
    "ConfigManager",
    "Config",
    "ConfigError",
    "load_project_file",
    "get_forge_home",
    "get_staging_root",
]
