"""Tests for ComponentLoader."""

import logging
import os
from unittest.mock import patch

import jsonschema
import pytest

from mcp_forge.components.directory_loader import ComponentLoader
from mcp_forge.components.types import (
    ComponentKind,
    LoadAllOptions,
    LoadOptions,
    PromptDefinition,
    ResourceDefinition,
    ToolDefinition,
)

TOOL_TEMPLATE = '''
    default = {{
        "name": "{name}",
        "input_schema": {{"type": "object"}},
        "execute": lambda args: "{name}",
    }}
'''


@pytest.fixture
def loader(project):
    return ComponentLoader.create(project.root, project.staging_root)


class TestLoadDirectory:
    """Test load_directory()."""

    @pytest.mark.asyncio
    async def test_loads_tool_with_relative_import(self, full_project, loader):
        result = await loader.load_directory(LoadOptions(directory="src/tools"), ComponentKind.TOOL)

        assert result.errors == []
        [tool] = result.components
        assert isinstance(tool, ToolDefinition)
        assert tool.name == "math"
        assert tool.execute({"a": 2, "b": 3}) == "5"

    @pytest.mark.asyncio
    async def test_loads_resource_and_prompt(self, full_project, loader):
        resources = await loader.load_directory(LoadOptions(directory="src/resources"), ComponentKind.RESOURCE)
        prompts = await loader.load_directory(LoadOptions(directory="src/prompts"), ComponentKind.PROMPT)

        [resource] = resources.components
        [prompt] = prompts.components
        assert isinstance(resource, ResourceDefinition)
        assert resource.uri == "docs://readme"
        assert resource.content_type == "text/plain"
        assert isinstance(prompt, PromptDefinition)
        assert prompt.get_messages({"name": "Ada"})[0]["content"]["text"] == "Say hi to Ada"

    @pytest.mark.asyncio
    async def test_absolute_directory(self, full_project, loader):
        options = LoadOptions(directory=str(full_project.root / "src/tools"))

        result = await loader.load_directory(options, ComponentKind.TOOL)

        assert len(result.components) == 1

    @pytest.mark.asyncio
    async def test_one_broken_file_does_not_stop_the_rest(self, project, loader):
        """N files with one syntax error -> N-1 components and 1 error."""
        for name in ("alpha", "beta", "gamma"):
            project.write(f"src/tools/{name}/tool.py", TOOL_TEMPLATE.format(name=name))
        broken = project.write("src/tools/broken/tool.py", "default = {\n")

        result = await loader.load_directory(LoadOptions(directory="src/tools"), ComponentKind.TOOL)

        assert sorted(t.name for t in result.components) == ["alpha", "beta", "gamma"]
        assert len(result.errors) == 1
        assert result.errors[0].startswith(f"Failed to load component from {broken}: ")

    @pytest.mark.asyncio
    async def test_runtime_and_dependency_errors_are_collected(self, project, loader):
        project.write("src/tools/a/tool.py", "raise RuntimeError('import-time failure')\n")
        project.write("src/tools/b/tool.py", "from .missing import thing\n")

        result = await loader.load_directory(LoadOptions(directory="src/tools"), ComponentKind.TOOL)

        assert result.components == []
        assert len(result.errors) == 2
        assert any("import-time failure" in e for e in result.errors)
        assert any("Cannot resolve relative import '.missing'" in e for e in result.errors)

    @pytest.mark.asyncio
    async def test_sys_exit_in_one_file_does_not_stop_the_rest(self, project, loader):
        project.write("src/tools/a/tool.py", TOOL_TEMPLATE.format(name="a"))
        exiting = project.write("src/tools/b/tool.py", "import sys\nsys.exit(3)\n")

        result = await loader.load_directory(LoadOptions(directory="src/tools"), ComponentKind.TOOL)

        assert [t.name for t in result.components] == ["a"]
        assert len(result.errors) == 1
        assert result.errors[0].startswith(f"Failed to load component from {exiting}: ")

    @pytest.mark.asyncio
    async def test_execute_uses_staged_helper_library_and_project_module(self, project, loader):
        """One execute() reaching a ./utils helper, jsonschema and a project-root module."""
        project.write("forge_limits.py", "OFFSET = 100\n")
        project.write("src/tools/calc/utils.py", "def add(a, b):\n    return a + b\n")
        project.write("src/tools/calc/tool.py", '''
            import jsonschema
            import forge_limits

            from .utils import add

            SCHEMA = {
                "type": "object",
                "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
                "required": ["a", "b"],
            }

            def run(args):
                jsonschema.validate(instance=args, schema=SCHEMA)
                return str(add(args["a"], args["b"]) + forge_limits.OFFSET)

            default = {"name": "calc", "input_schema": SCHEMA, "execute": run}
        ''')

        result = await loader.load_directory(LoadOptions(directory="src/tools"), ComponentKind.TOOL)

        assert result.errors == []
        [tool] = result.components
        assert tool.execute({"a": 2, "b": 3}) == "105"
        with pytest.raises(jsonschema.ValidationError):
            tool.execute({"a": 2})

    @pytest.mark.asyncio
    async def test_contract_violation_is_an_error(self, project, loader):
        """A resource-shaped export in tool.py fails validation."""
        project.write("src/tools/x/tool.py", 'default = {"uri": "a://b", "name": "b", "content": "c"}\n')

        result = await loader.load_directory(LoadOptions(directory="src/tools"), ComponentKind.TOOL)

        assert result.components == []
        assert "is not a valid tool: looks like a resource" in result.errors[0]

    @pytest.mark.asyncio
    async def test_missing_default_is_an_error(self, project, loader):
        project.write("src/tools/x/tool.py", "name = 'x'\n")

        result = await loader.load_directory(LoadOptions(directory="src/tools"), ComponentKind.TOOL)

        assert "does not export a component as 'default'" in result.errors[0]

    @pytest.mark.asyncio
    async def test_other_kinds_are_skipped(self, project, loader):
        project.write("src/tools/t/tool.py", TOOL_TEMPLATE.format(name="t"))
        project.write("src/tools/t/prompt.py", "raise RuntimeError('should not run')\n")

        result = await loader.load_directory(LoadOptions(directory="src/tools"), ComponentKind.TOOL)

        assert [t.name for t in result.components] == ["t"]
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_pattern_filters_files(self, project, loader):
        project.write("src/tools/public/a/tool.py", TOOL_TEMPLATE.format(name="a"))
        project.write("src/tools/internal/b/tool.py", TOOL_TEMPLATE.format(name="b"))
        options = LoadOptions(directory="src/tools", pattern="src/tools/public/*")

        result = await loader.load_directory(options, ComponentKind.TOOL)

        assert [t.name for t in result.components] == ["a"]

    @pytest.mark.asyncio
    async def test_disabled_directory(self, full_project, loader, caplog):
        caplog.set_level(logging.DEBUG, logger="mcp_forge")

        result = await loader.load_directory(LoadOptions(enabled=False, directory="src/tools"), ComponentKind.TOOL)

        assert result.components == [] and result.errors == []
        assert result.directory_missing is False
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    @pytest.mark.asyncio
    async def test_empty_directory_option(self, project, loader):
        result = await loader.load_directory(LoadOptions(directory=""), ComponentKind.TOOL)

        assert result.components == [] and result.errors == []

    @pytest.mark.asyncio
    async def test_missing_directory(self, project, loader, caplog):
        caplog.set_level(logging.WARNING, logger="mcp_forge")

        result = await loader.load_directory(LoadOptions(directory="src/nope"), ComponentKind.TOOL)

        assert result.components == [] and result.errors == []
        assert result.directory_missing is True
        assert "does not exist" in caplog.text

    @pytest.mark.asyncio
    async def test_scan_failure_is_recorded(self, project, loader):
        project.write("src/tools/t/tool.py", TOOL_TEMPLATE.format(name="t"))

        with patch(
            "mcp_forge.components.directory_loader.discover",
            side_effect=PermissionError("permission denied"),
        ):
            result = await loader.load_directory(LoadOptions(directory="src/tools"), ComponentKind.TOOL)

        assert result.components == []
        assert result.errors[0].startswith("Failed to scan directory")
        assert "permission denied" in result.errors[0]

    @pytest.mark.asyncio
    async def test_unknown_kind_raises(self, project, loader):
        with pytest.raises(TypeError):
            await loader.load_directory(LoadOptions(directory="src"), "tool")

    @pytest.mark.asyncio
    async def test_second_load_hits_the_cache(self, full_project, loader):
        options = LoadOptions(directory="src/tools")
        await loader.load_directory(options, ComponentKind.TOOL)

        with patch.object(loader.materializer, "_compile") as compile_:
            result = await loader.load_directory(options, ComponentKind.TOOL)

        compile_.assert_not_called()
        assert len(result.components) == 1

    @pytest.mark.asyncio
    async def test_edited_source_is_reloaded(self, project, loader):
        source = project.write("src/tools/t/tool.py", TOOL_TEMPLATE.format(name="before"))
        options = LoadOptions(directory="src/tools")
        await loader.load_directory(options, ComponentKind.TOOL)

        project.write("src/tools/t/tool.py", TOOL_TEMPLATE.format(name="after"))
        stat = source.stat()
        os.utime(source, (stat.st_atime + 10, stat.st_mtime + 10))
        result = await loader.load_directory(options, ComponentKind.TOOL)

        assert [t.name for t in result.components] == ["after"]


class TestLoadAll:
    """Test load_all()."""

    @pytest.mark.asyncio
    async def test_loads_every_kind(self, full_project, loader):
        options = LoadAllOptions(
            tools=LoadOptions(directory="src/tools"),
            resources=LoadOptions(directory="src/resources"),
            prompts=LoadOptions(directory="src/prompts"),
        )

        results = await loader.load_all(options)

        assert {kind: len(r.components) for kind, r in results.items()} == {
            ComponentKind.TOOL: 1,
            ComponentKind.RESOURCE: 1,
            ComponentKind.PROMPT: 1,
        }
