"""
Contract Validators

Structural checks for loaded components. Only the presence and type of
fields matter; base classes and declared types are never consulted, so any
object with the right shape is accepted.

Each validator accepts a mapping or an attribute-style object.
"""

from typing import Any, Callable, Mapping

from mcp_forge.components.types import ComponentKind

_MISSING = object()


def _field(component: Any, key: str) -> Any:
    if isinstance(component, Mapping):
        return component.get(key, _MISSING)
    return getattr(component, key, _MISSING)


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_optional_str(value: Any) -> bool:
    return value is _MISSING or value is None or isinstance(value, str)


def validate_tool(component: Any) -> bool:
    """Tool: str name, optional str description, mapping input_schema (or legacy parameters), callable execute."""
    if component is None:
        return False
    schema = _field(component, "input_schema")
    if schema is _MISSING or schema is None:
        schema = _field(component, "parameters")
    return (
        _is_str(_field(component, "name"))
        and _is_optional_str(_field(component, "description"))
        and isinstance(schema, Mapping)
        and callable(_field(component, "execute"))
    )


def validate_resource(component: Any) -> bool:
    """Resource: str uri, str name, content that is a str or a callable."""
    if component is None:
        return False
    content = _field(component, "content")
    return (
        _is_str(_field(component, "uri"))
        and _is_str(_field(component, "name"))
        and (isinstance(content, str) or callable(content))
    )


def validate_prompt(component: Any) -> bool:
    """Prompt: str name, callable get_messages."""
    if component is None:
        return False
    return (
        _is_str(_field(component, "name"))
        and callable(_field(component, "get_messages"))
    )


Validator = Callable[[Any], bool]

VALIDATORS: dict[ComponentKind, Validator] = {
    ComponentKind.TOOL: validate_tool,
    ComponentKind.RESOURCE: validate_resource,
    ComponentKind.PROMPT: validate_prompt,
}


def classify(component: Any) -> ComponentKind | None:
    """The first kind whose contract the component satisfies, or None."""
    for kind, validator in VALIDATORS.items():
        if validator(component):
            return kind
    return None
