"""Tests for ComponentRegistry."""

import logging
from unittest.mock import AsyncMock

import pytest

from mcp_forge.components.directory_loader import ComponentLoader
from mcp_forge.components.types import ComponentKind, LoadAllOptions, LoadOptions, ToolDefinition
from mcp_forge.registry import (
    ComponentRegistry,
    DirectoryRegistryLoader,
    InvalidCursor,
    ItemNotFound,
    RegistryItemLoadError,
)


def default_options() -> LoadAllOptions:
    return LoadAllOptions(
        tools=LoadOptions(directory="src/tools"),
        resources=LoadOptions(directory="src/resources"),
        prompts=LoadOptions(directory="src/prompts"),
    )


def make_tool(name: str) -> ToolDefinition:
    return ToolDefinition(name=name, input_schema={"type": "object"}, execute=lambda args: name)


@pytest.fixture
def component_loader(project):
    return ComponentLoader.create(project.root, project.staging_root)


@pytest.fixture
def registry(component_loader):
    return ComponentRegistry(component_loader)


class TestLoadAll:
    """Test ComponentRegistry.load_all()."""

    @pytest.mark.asyncio
    async def test_end_to_end(self, full_project, registry):
        """One tool, one resource and one prompt in the default layout."""
        report = await registry.load_all(default_options())

        stats = registry.stats
        assert (stats.tools, stats.resources, stats.prompts, stats.total) == (1, 1, 1, 3)
        assert (report.tools, report.resources, report.prompts) == (1, 1, 1)
        assert report.errors == []
        assert registry.loaded is True

        math = registry.get_tool("math")
        assert math is not None
        assert math.execute({"a": 1, "b": 2}) == "3"
        assert registry.get_resource("docs://readme").name == "readme"
        assert registry.get_prompt("greeting") is not None

    @pytest.mark.asyncio
    async def test_second_call_is_a_no_op(self, full_project, registry, caplog):
        await registry.load_all(default_options())
        full_project.write("src/tools/extra/tool.py", '''
            default = {"name": "extra", "input_schema": {}, "execute": print}
        ''')

        with caplog.at_level(logging.WARNING, logger="mcp_forge"):
            report = await registry.load_all(default_options())

        assert report.already_loaded is True
        assert registry.stats.total == 3
        assert registry.get_tool("extra") is None
        assert "already loaded" in caplog.text

    @pytest.mark.asyncio
    async def test_clear_allows_reload(self, full_project, registry):
        await registry.load_all(default_options())
        registry.clear()

        assert registry.loaded is False
        assert registry.stats.total == 0

        report = await registry.load_all(default_options())
        assert report.already_loaded is False
        assert registry.stats.total == 3

    @pytest.mark.asyncio
    async def test_failures_are_reported_not_raised(self, full_project, registry):
        full_project.write("src/tools/broken/tool.py", "def oops(:\n")

        report = await registry.load_all(default_options())

        assert report.tools == 1
        assert len(report.errors) == 1
        assert "broken" in report.errors[0]

    @pytest.mark.asyncio
    async def test_disabled_and_missing_directories(self, full_project, registry):
        options = default_options()
        options.prompts = LoadOptions(enabled=False, directory="src/prompts")
        options.resources = LoadOptions(directory="src/not-there")

        report = await registry.load_all(options)

        assert (report.tools, report.resources, report.prompts) == (1, 0, 0)
        assert report.errors == []

    @pytest.mark.asyncio
    async def test_duplicate_identifiers_last_wins(self, project, registry, caplog):
        for folder in ("a", "b"):
            project.write(f"src/tools/{folder}/tool.py", f'''
                default = {{"name": "same", "input_schema": {{}}, "execute": lambda args: "{folder}"}}
            ''')

        with caplog.at_level(logging.WARNING, logger="mcp_forge"):
            await registry.load_all(default_options())

        assert registry.stats.tools == 1
        assert "Duplicate component 'tool:same'" in caplog.text

    @pytest.mark.asyncio
    async def test_getters_return_definitions_with_kind_and_identifier(self, full_project, registry):
        await registry.load_all(default_options())

        [tool] = registry.get_all_tools()
        [resource] = registry.get_all_resources()
        [prompt] = registry.get_all_prompts()

        assert (tool.kind, tool.identifier) == (ComponentKind.TOOL, "math")
        assert (resource.kind, resource.identifier) == (ComponentKind.RESOURCE, "docs://readme")
        assert (prompt.kind, prompt.identifier) == (ComponentKind.PROMPT, "greeting")
        assert registry.get_tool("math") is tool

    def test_unknown_items_are_none(self, registry):
        assert registry.get_tool("nope") is None
        assert registry.get_all_prompts() == []


class TestGet:
    """Test on-demand lookups through a registry loader."""

    @pytest.mark.asyncio
    async def test_storage_hit(self, registry):
        registry.storage.add_all([make_tool("stored")])

        assert (await registry.get(ComponentKind.TOOL, "stored")).name == "stored"

    @pytest.mark.asyncio
    async def test_delegates_and_caches(self, component_loader):
        registry_loader = AsyncMock()
        registry_loader.load_item.return_value = make_tool("lazy")
        registry = ComponentRegistry(component_loader, registry_loader=registry_loader)

        first = await registry.get(ComponentKind.TOOL, "lazy")
        second = await registry.get(ComponentKind.TOOL, "lazy")

        assert first is second
        registry_loader.load_item.assert_awaited_once_with(ComponentKind.TOOL, "lazy")
        assert registry.get_tool("lazy") is first

    @pytest.mark.asyncio
    async def test_not_found(self, registry):
        with pytest.raises(ItemNotFound) as exc_info:
            await registry.get(ComponentKind.PROMPT, "ghost")

        assert isinstance(exc_info.value, LookupError)
        assert "ghost" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_directory_registry_loader(self, full_project, component_loader):
        registry = ComponentRegistry(
            component_loader,
            registry_loader=DirectoryRegistryLoader(component_loader, default_options()),
        )

        resource = await registry.get(ComponentKind.RESOURCE, "docs://readme")

        assert resource.name == "readme"
        with pytest.raises(ItemNotFound):
            await registry.get(ComponentKind.RESOURCE, "docs://other")

    @pytest.mark.asyncio
    async def test_directory_registry_loader_reports_failures(self, project, component_loader):
        project.write("src/tools/bad/tool.py", "raise RuntimeError('bad tool')\n")
        registry_loader = DirectoryRegistryLoader(component_loader, default_options())

        with pytest.raises(RegistryItemLoadError, match="bad tool"):
            await registry_loader.load_item(ComponentKind.TOOL, "bad")


class TestPaginatedGetters:

    def test_pages_through_tools(self, registry):
        registry.storage.add_all([make_tool(f"t{i}") for i in range(5)])

        first = registry.get_paginated_tools(page_size=2)
        second = registry.get_paginated_tools(first.next_cursor, page_size=2)
        last = registry.get_paginated_tools(second.next_cursor, page_size=2)

        assert [t.name for t in first.items + second.items + last.items] == [f"t{i}" for i in range(5)]
        assert last.next_cursor is None

    def test_invalid_cursor(self, registry):
        with pytest.raises(InvalidCursor):
            registry.get_paginated_prompts("%%%")
