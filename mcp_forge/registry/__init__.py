"""
Registry Module
Stores loaded components and serves lookups.
"""

from .errors import InvalidCursor, ItemNotFound, RegistryItemLoadError
from .loader import DirectoryRegistryLoader, RegistryLoader
from .pagination import Page, paginate_with_cursor
from .registry import ComponentRegistry, RegistryStats
from .storage import InMemoryRegistryStorage, RegistryItem

__all__ = [
    "ComponentRegistry",
    "RegistryStats",
    "InMemoryRegistryStorage",
    "RegistryItem",
    "RegistryLoader",
    "DirectoryRegistryLoader",
    "Page",
    "paginate_with_cursor",
    # Errors
    "ItemNotFound",
    "RegistryItemLoadError",
    "InvalidCursor",
]
