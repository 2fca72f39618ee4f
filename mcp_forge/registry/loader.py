"""
Registry Loaders
Produce a single component on demand when the registry does not hold it.
"""

import logging
from typing import Optional, Protocol

from mcp_forge.components.directory_loader import ComponentLoader
from mcp_forge.components.types import ComponentDefinition, ComponentKind, LoadAllOptions
from mcp_forge.registry.errors import RegistryItemLoadError

logger = logging.getLogger(__name__)


class RegistryLoader(Protocol):
    async def load_item(self, kind: ComponentKind, identifier: str) -> Optional[ComponentDefinition]:
        """Return the component, None if it does not exist; raise RegistryItemLoadError on failure."""
        ...


class DirectoryRegistryLoader:
    """Looks an identifier up in the configured directory for its kind."""

    def __init__(self, component_loader: ComponentLoader, options: LoadAllOptions):
        self.component_loader = component_loader
        self.options = options

    async def load_item(self, kind: ComponentKind, identifier: str) -> Optional[ComponentDefinition]:
        try:
            result = await self.component_loader.load_directory(self.options.for_kind(kind), kind)
        except Exception as e:
            raise RegistryItemLoadError(kind.value, identifier, str(e)) from e

        for component in result.components:
            if component.identifier == identifier:
                logger.debug(f"Loaded {kind.value} '{identifier}' on demand")
                return component

        if result.errors:
            # The item may live in one of the files that failed
            raise RegistryItemLoadError(kind.value, identifier, "; ".join(result.errors))
        return None
