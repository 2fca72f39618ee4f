"""
mcp-forge
Discover, compile and serve MCP tools, resources and prompts from a project tree.
"""

__version__ = "0.1.0"
__package_name__ = "mcp-forge"

from mcp_forge.authoring import (
    BasePrompt,
    BaseResource,
    BaseTool,
    error_result,
    prompt,
    resource,
    text_result,
    tool,
    with_error_handling,
)

__all__ = [
    "__version__",
    "__package_name__",
    # Authoring API
    "BaseTool",
    "BaseResource",
    "BasePrompt",
    "tool",
    "resource",
    "prompt",
    "text_result",
    "error_result",
    "with_error_handling",
]
