"""
mcp-forge MCP Server
Serves a project's components over the MCP stdio transport.
"""

import inspect
import json
import re
from typing import Any, Dict, List, Optional

from jsonschema import ValidationError, validate
from mcp import types
from mcp.server import Server
from mcp.server.lowlevel import NotificationOptions
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server

from mcp_forge import __package_name__
from mcp_forge.authoring import error_result, to_tool_result
from mcp_forge.components import ComponentLoader, LoadReport
from mcp_forge.components.types import PromptDefinition, ResourceDefinition, ToolDefinition
from mcp_forge.config import ConfigManager
from mcp_forge.registry import ComponentRegistry, DirectoryRegistryLoader
from mcp_forge.utils import Logger


# =========================================================================
# Conversion helpers
# =========================================================================

def normalize_name(name: str) -> str:
    """Lowercase, runs of other characters to '_' ("Greeter Good" -> "greeter_good")."""
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def tool_to_mcp(tool: ToolDefinition) -> types.Tool:
    return types.Tool(
        name=normalize_name(tool.name),
        description=tool.description or "",
        inputSchema=dict(tool.input_schema),
        annotations=types.ToolAnnotations(**tool.annotations) if tool.annotations else None,
    )


async def call_tool(tool: ToolDefinition, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Validate arguments against the tool's input schema and execute it.

    Returns:
        MCP tool result dict; failures are reported with isError=True
    """
    arguments = arguments or {}
    try:
        validate(instance=arguments, schema=tool.input_schema)
    except ValidationError as e:
        return error_result(f"Invalid arguments for tool '{tool.name}': {e.message}")

    try:
        result = tool.execute(arguments)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        return error_result(e)
    return to_tool_result(result)


async def read_resource(resource: ResourceDefinition) -> str:
    content = resource.content
    if callable(content):
        content = content()
        if inspect.isawaitable(content):
            content = await content
    if content is None:
        return ""
    return content if isinstance(content, str) else str(content)


def _to_prompt_message(message: Any) -> types.PromptMessage:
    if isinstance(message, types.PromptMessage):
        return message
    if isinstance(message, str):
        return types.PromptMessage(role="user", content=types.TextContent(type="text", text=message))

    role = message.get("role") if isinstance(message, dict) else None
    if role not in ("user", "assistant"):
        role = "assistant"

    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, dict) and content.get("type") == "text" and isinstance(content.get("text"), str):
        text = content["text"]
    elif isinstance(content, str):
        text = content
    else:
        text = json.dumps(message, default=str, ensure_ascii=False)
    return types.PromptMessage(role=role, content=types.TextContent(type="text", text=text))


async def get_prompt_messages(prompt: PromptDefinition, arguments: Optional[Dict[str, Any]]) -> List[types.PromptMessage]:
    """Call get_messages with the non-None arguments and coerce the result to MCP messages."""
    args = {k: v for k, v in (arguments or {}).items() if v is not None}
    messages = prompt.get_messages(args)
    if inspect.isawaitable(messages):
        messages = await messages
    if not isinstance(messages, (list, tuple)):
        messages = [messages]
    return [_to_prompt_message(m) for m in messages]


def prompt_to_mcp(prompt: PromptDefinition) -> types.Prompt:
    arguments = [
        types.PromptArgument(
            name=arg["name"],
            description=arg.get("description"),
            required=bool(arg.get("required", False)),
        )
        for arg in (prompt.arguments or [])
    ]
    return types.Prompt(
        name=normalize_name(prompt.name),
        description=prompt.description or f"Prompt: {prompt.name}",
        arguments=arguments or None,
    )


def resource_to_mcp(resource: ResourceDefinition) -> types.Resource:
    return types.Resource(
        uri=resource.uri,
        name=normalize_name(resource.name),
        description=resource.description,
        mimeType=resource.content_type,
    )


# =========================================================================
# Server
# =========================================================================

class ForgeMCPServer:
    """MCP server exposing the components of one project."""

    def __init__(self, project_root=None):
        # Initialize configuration
        self.config = ConfigManager(project_root)
        config = self.config.get()

        # Initialize MCP Server
        self.server = Server(__package_name__)

        # Initialize logger
        self.logger = Logger(level=config.log_level)

        # Populated by initialize()
        self.registry: Optional[ComponentRegistry] = None

        # Set up MCP protocol handlers
        self._setup_handlers()

    async def initialize(self) -> LoadReport:
        """Load configuration and every component of the project."""
        config = await self.config.load()
        self.logger.setLevel(config.log_level)
        self.logger.debug(f"Project root: {config.project_root}, staging: {config.staging_root}")

        component_loader = ComponentLoader.create(
            config.project_root,
            config.staging_root,
            cache_policy=config.cache_policy,
        )
        self.registry = ComponentRegistry(
            component_loader,
            registry_loader=DirectoryRegistryLoader(component_loader, config.autoload),
        )
        return await self.registry.load_all(config.autoload)

    # =========================================================================
    # Lookups by exposed name
    # =========================================================================

    def find_tool(self, name: str) -> Optional[ToolDefinition]:
        if self.registry is None:
            return None
        tool = self.registry.get_tool(name)
        if tool is not None:
            return tool
        return next((t for t in self.registry.get_all_tools() if normalize_name(t.name) == name), None)

    def find_prompt(self, name: str) -> Optional[PromptDefinition]:
        if self.registry is None:
            return None
        prompt = self.registry.get_prompt(name)
        if prompt is not None:
            return prompt
        return next((p for p in self.registry.get_all_prompts() if normalize_name(p.name) == name), None)

    def find_resource(self, uri: str) -> Optional[ResourceDefinition]:
        if self.registry is None:
            return None
        return self.registry.get_resource(uri) or self.registry.get_resource(uri.rstrip("/"))

    def _setup_handlers(self):
        """Set up MCP protocol request handlers using decorators."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[types.Tool]:
            if self.registry is None:
                return []
            return [tool_to_mcp(t) for t in self.registry.get_all_tools()]

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: dict) -> list[types.TextContent]:
            tool = self.find_tool(name)
            if tool is None:
                raise ValueError(f"Tool '{name}' not found")

            result = await call_tool(tool, arguments)
            texts = [
                item["text"] if item.get("type") == "text" else json.dumps(item, default=str)
                for item in result.get("content", [])
            ]
            if result.get("isError"):
                self.logger.warning(f"Tool '{name}' failed: {' '.join(texts)}")
                raise RuntimeError(" ".join(texts) or f"Tool '{name}' failed")
            return [types.TextContent(type="text", text=text) for text in texts]

        @self.server.list_resources()
        async def handle_list_resources() -> list[types.Resource]:
            if self.registry is None:
                return []
            return [resource_to_mcp(r) for r in self.registry.get_all_resources()]

        @self.server.read_resource()
        async def handle_read_resource(uri) -> list[ReadResourceContents]:
            resource = self.find_resource(str(uri))
            if resource is None:
                raise ValueError(f"Resource '{uri}' not found")
            text = await read_resource(resource)
            return [ReadResourceContents(content=text, mime_type=resource.content_type or "text/plain")]

        @self.server.list_prompts()
        async def handle_list_prompts() -> list[types.Prompt]:
            if self.registry is None:
                return []
            return [prompt_to_mcp(p) for p in self.registry.get_all_prompts()]

        @self.server.get_prompt()
        async def handle_get_prompt(name: str, arguments: dict | None) -> types.GetPromptResult:
            prompt = self.find_prompt(name)
            if prompt is None:
                raise ValueError(f"Prompt '{name}' not found")
            return types.GetPromptResult(
                description=prompt.description,
                messages=await get_prompt_messages(prompt, arguments),
            )

    async def start(self):
        """Start the MCP server."""
        try:
            report = await self.initialize()
            config = self.config.get()
            self.logger.info(
                f"Serving {report.tools} tools, {report.resources} resources, "
                f"{report.prompts} prompts from {config.project_root}"
            )

            # Create transport and run server
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    InitializationOptions(
                        server_name=config.server_name,
                        server_version=config.server_version,
                        capabilities=self.server.get_capabilities(
                            notification_options=NotificationOptions(),
                            experimental_capabilities={}
                        ),
                    ),
                )

        except Exception as e:
            self.logger.error(f"Failed to start server: {e}")
            raise

