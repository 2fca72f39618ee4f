"""
Authoring API
Helpers for writing component files.

A component file exports its component as `default`:

    # src/tools/math/tool.py
    from mcp_forge import tool

    def add(args):
        return str(args["a"] + args["b"])

    default = tool(
        {"type": "object", "properties": {"a": {"type": "number"}, "b": {"type": "number"}}},
        add,
        name="math",
    )

or as a class:

    class Greeter(BaseTool):
        name = "greeter"
        input_schema = {"type": "object", "properties": {"name": {"type": "string"}}}

        def execute(self, args):
            return f"Hello, {args['name']}!"

    default = Greeter
"""

import functools
import inspect
import json
from typing import Any, Callable, Dict, List, Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"


# =========================================================================
# Results
# =========================================================================

def text_result(text: str) -> Dict[str, Any]:
    """MCP tool result with a single text item."""
    return {"content": [{"type": "text", "text": text}], "isError": False}


def error_result(error: BaseException | str) -> Dict[str, Any]:
    """MCP tool result reporting an error."""
    return {"content": [{"type": "text", "text": str(error)}], "isError": True}


def to_tool_result(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict) and isinstance(value.get("content"), list):
        return {"isError": False, **value}
    if isinstance(value, str):
        return text_result(value)
    if isinstance(value, dict) and "text" in value:
        return text_result(str(value["text"]))
    if isinstance(value, (list, tuple)):
        if all(isinstance(item, str) for item in value):
            return {"content": [{"type": "text", "text": item} for item in value], "isError": False}
        if all(isinstance(item, dict) and "text" in item for item in value):
            return {
                "content": [{"type": "text", "text": str(item["text"])} for item in value],
                "isError": False,
            }
    return text_result(json.dumps(value, default=str, ensure_ascii=False))


def with_error_handling(fn: Callable[..., Any]) -> Callable[..., Any]:
    """
    Wrap a tool handler so it always returns an MCP tool result.

    Strings, {"text": ...} dicts, lists of either and results that already
    carry "content" are converted; anything else is JSON-encoded. Exceptions
    become error results.
    """
    @functools.wraps(fn)
    async def wrapper(*args, **kwargs) -> Dict[str, Any]:
        try:
            value = fn(*args, **kwargs)
            if inspect.isawaitable(value):
                value = await value
            return to_tool_result(value)
        except Exception as e:
            return error_result(e)

    return wrapper


# =========================================================================
# Functional API
# =========================================================================

def tool(
    input_schema: Dict[str, Any],
    handler: Callable[..., Any],
    name: str,
    description: Optional[str] = None,
    output_schema: Optional[Dict[str, Any]] = None,
    annotations: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "name": name,
        "description": description or "",
        "input_schema": input_schema,
        "output_schema": output_schema,
        "annotations": annotations,
        "execute": with_error_handling(handler),
    }


def resource(
    uri: str,
    name: str,
    content: str | Callable[[], Any],
    description: Optional[str] = None,
    content_type: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "uri": uri,
        "name": name,
        "content": content,
        "description": description,
        "content_type": content_type or DEFAULT_CONTENT_TYPE,
    }


def prompt(
    name: str,
    get_messages: Callable[..., Any],
    description: Optional[str] = None,
    arguments: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "arguments": arguments,
        "get_messages": get_messages,
    }


# =========================================================================
# Class API
# =========================================================================

class BaseTool:
    """Base class for tools. The name defaults to the class name."""

    name: Optional[str] = None
    description: Optional[str] = None
    input_schema: Dict[str, Any] = {"type": "object", "properties": {}}
    output_schema: Optional[Dict[str, Any]] = None
    annotations: Optional[Dict[str, Any]] = None

    def execute(self, args: Dict[str, Any]) -> Any:
        raise NotImplementedError(f"{type(self).__name__} must implement execute()")

    def to_definition(self) -> Dict[str, Any]:
        return {
            "name": self.name or type(self).__name__,
            "description": self.description,
            "input_schema": self.input_schema,
            "output_schema": self.output_schema,
            "annotations": self.annotations,
            "execute": with_error_handling(self.execute),
        }


class BaseResource:
    """Base class for resources. Subclasses set uri and name and implement get_content()."""

    uri: str
    name: str
    description: Optional[str] = None
    content_type: Optional[str] = None

    def get_content(self) -> Any:
        raise NotImplementedError(f"{type(self).__name__} must implement get_content()")

    def to_definition(self) -> Dict[str, Any]:
        return resource(
            uri=self.uri,
            name=self.name,
            content=self.get_content,
            description=self.description,
            content_type=self.content_type,
        )


class BasePrompt:
    """Base class for prompts. Subclasses set name and implement get_messages()."""

    name: str
    description: Optional[str] = None
    arguments: Optional[List[Dict[str, Any]]] = None

    def get_messages(self, args: Optional[Dict[str, str]] = None) -> Any:
        raise NotImplementedError(f"{type(self).__name__} must implement get_messages()")

    def to_definition(self) -> Dict[str, Any]:
        return prompt(
            name=self.name,
            get_messages=self.get_messages,
            description=self.description,
            arguments=self.arguments,
        )
