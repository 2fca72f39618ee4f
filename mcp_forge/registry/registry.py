"""
Component Registry

Holds the loaded tools, resources and prompts of one project.

Usage:
    registry = ComponentRegistry(ComponentLoader.create(project_root, staging_root))
    report = await registry.load_all(options)
    tool = registry.get_tool("math")
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from mcp_forge.components.directory_loader import ComponentLoader
from mcp_forge.components.types import (
    ComponentDefinition,
    ComponentKind,
    LoadAllOptions,
    LoadReport,
    PromptDefinition,
    ResourceDefinition,
    ToolDefinition,
)
from mcp_forge.registry.errors import ItemNotFound
from mcp_forge.registry.loader import RegistryLoader
from mcp_forge.registry.pagination import DEFAULT_PAGE_SIZE, Page, paginate_with_cursor
from mcp_forge.registry.storage import InMemoryRegistryStorage, RegistryItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryStats:
    tools: int
    resources: int
    prompts: int

    @property
    def total(self) -> int:
        return self.tools + self.resources + self.prompts


class ComponentRegistry:
    """Registry of loaded components, populated once by load_all()."""

    def __init__(
        self,
        component_loader: ComponentLoader,
        registry_loader: Optional[RegistryLoader] = None,
        storage: Optional[InMemoryRegistryStorage] = None
    ):
        self.component_loader = component_loader
        self.registry_loader = registry_loader
        self.storage = storage if storage is not None else InMemoryRegistryStorage()
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    # =========================================================================
    # Loading
    # =========================================================================

    async def load_all(self, options: LoadAllOptions) -> LoadReport:
        """
        Load every component kind and replace the registry contents.

        Component failures are reported, never raised. A second call is a
        no-op until clear() is called.
        """
        if self._loaded:
            logger.warning("Registry already loaded, skipping; call clear() to reload")
            stats = self.stats
            return LoadReport(
                tools=stats.tools,
                resources=stats.resources,
                prompts=stats.prompts,
                already_loaded=True,
            )

        results = await self.component_loader.load_all(options)
        tools = results[ComponentKind.TOOL]
        resources = results[ComponentKind.RESOURCE]
        prompts = results[ComponentKind.PROMPT]

        self.storage.clear()
        for result in (tools, resources, prompts):
            for key in self.storage.add_all(result.components):
                logger.warning(f"Duplicate component '{key}', keeping the last one loaded")

        errors = tools.errors + resources.errors + prompts.errors
        stats = self.stats
        logger.info(
            f"Loaded {stats.tools} tools, {stats.resources} resources, "
            f"{stats.prompts} prompts ({stats.total} total)"
        )
        if errors:
            logger.warning(f"{len(errors)} component(s) failed to load:")
            for error in errors:
                logger.warning(f"  - {error}")

        self._loaded = True
        return LoadReport(
            tools=stats.tools,
            resources=stats.resources,
            prompts=stats.prompts,
            errors=errors,
        )

    def clear(self) -> None:
        self.storage.clear()
        self._loaded = False

    # =========================================================================
    # Queries
    #
    # Getters return the stored definitions themselves. Every definition
    # carries its `kind` and `identifier`, so the RegistryItem wrapper stays
    # internal to storage.
    # =========================================================================

    def get_all_tools(self) -> List[ToolDefinition]:
        """All tools, in load order; each is a ToolDefinition keyed by its name."""
        return self._all(ComponentKind.TOOL)

    def get_all_resources(self) -> List[ResourceDefinition]:
        """All resources, in load order; each is keyed by its URI."""
        return self._all(ComponentKind.RESOURCE)

    def get_all_prompts(self) -> List[PromptDefinition]:
        return self._all(ComponentKind.PROMPT)

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """The tool whose identifier (name) is given, or None."""
        return self._one(ComponentKind.TOOL, name)

    def get_resource(self, uri: str) -> Optional[ResourceDefinition]:
        """The resource whose identifier (URI) is given, or None."""
        return self._one(ComponentKind.RESOURCE, uri)

    def get_prompt(self, name: str) -> Optional[PromptDefinition]:
        return self._one(ComponentKind.PROMPT, name)

    @property
    def stats(self) -> RegistryStats:
        return RegistryStats(
            tools=len(self.storage.items_of(ComponentKind.TOOL)),
            resources=len(self.storage.items_of(ComponentKind.RESOURCE)),
            prompts=len(self.storage.items_of(ComponentKind.PROMPT)),
        )

    async def get(self, kind: ComponentKind, identifier: str) -> ComponentDefinition:
        """
        Get a component, loading it on demand if the registry lacks it.

        Raises:
            ItemNotFound: Neither storage nor the registry loader has it
            RegistryItemLoadError: The registry loader failed
        """
        item = self.storage.get_item(kind, identifier)
        if item is not None:
            return item.definition

        if self.registry_loader is not None:
            definition = await self.registry_loader.load_item(kind, identifier)
            if definition is not None:
                self.storage.set_item(RegistryItem(kind, identifier, definition))
                return definition

        raise ItemNotFound(kind.value, identifier)

    def get_paginated_tools(self, cursor: Optional[str] = None, page_size: int = DEFAULT_PAGE_SIZE) -> Page[ToolDefinition]:
        return paginate_with_cursor(self.get_all_tools(), cursor, page_size)

    def get_paginated_resources(self, cursor: Optional[str] = None, page_size: int = DEFAULT_PAGE_SIZE) -> Page[ResourceDefinition]:
        return paginate_with_cursor(self.get_all_resources(), cursor, page_size)

    def get_paginated_prompts(self, cursor: Optional[str] = None, page_size: int = DEFAULT_PAGE_SIZE) -> Page[PromptDefinition]:
        return paginate_with_cursor(self.get_all_prompts(), cursor, page_size)

    def _all(self, kind: ComponentKind) -> list:
        return [item.definition for item in self.storage.items_of(kind)]

    def _one(self, kind: ComponentKind, identifier: str):
        item = self.storage.get_item(kind, identifier)
        return item.definition if item else None
