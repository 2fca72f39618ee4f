"""Tests for structural contract validators."""

from types import SimpleNamespace

import pytest

from mcp_forge.components.types import ComponentKind
from mcp_forge.components.validators import classify, validate_prompt, validate_resource, validate_tool


def noop(*args):
    return None


TOOL = {"name": "t", "input_schema": {"type": "object"}, "execute": noop}
RESOURCE = {"uri": "docs://a", "name": "a", "content": "text"}
PROMPT = {"name": "p", "get_messages": noop}


class TestValidateTool:

    def test_valid(self):
        assert validate_tool(TOOL)

    def test_attribute_object(self):
        assert validate_tool(SimpleNamespace(**TOOL))

    def test_legacy_parameters(self):
        assert validate_tool({"name": "t", "parameters": {}, "execute": noop})

    def test_description_may_be_none(self):
        assert validate_tool({**TOOL, "description": None})

    @pytest.mark.parametrize("override", [
        {"name": 1},
        {"description": 5},
        {"input_schema": "object"},
        {"execute": "not callable"},
    ])
    def test_invalid_fields(self, override):
        assert not validate_tool({**TOOL, **override})

    def test_missing_execute(self):
        assert not validate_tool({"name": "t", "input_schema": {}})

    def test_none(self):
        assert not validate_tool(None)


class TestValidateResource:

    def test_static_content(self):
        assert validate_resource(RESOURCE)

    def test_callable_content(self):
        assert validate_resource({**RESOURCE, "content": lambda: "dynamic"})

    @pytest.mark.parametrize("override", [
        {"uri": None},
        {"name": 3},
        {"content": 42},
    ])
    def test_invalid_fields(self, override):
        assert not validate_resource({**RESOURCE, **override})


class TestValidatePrompt:

    def test_valid(self):
        assert validate_prompt(PROMPT)

    def test_get_messages_must_be_callable(self):
        assert not validate_prompt({"name": "p", "get_messages": []})


class TestExclusivity:
    """A component satisfies exactly one contract."""

    @pytest.mark.parametrize("component,kind", [
        (TOOL, ComponentKind.TOOL),
        (RESOURCE, ComponentKind.RESOURCE),
        (PROMPT, ComponentKind.PROMPT),
    ])
    def test_each_shape_matches_one_kind(self, component, kind):
        results = {
            ComponentKind.TOOL: validate_tool(component),
            ComponentKind.RESOURCE: validate_resource(component),
            ComponentKind.PROMPT: validate_prompt(component),
        }

        assert [k for k, ok in results.items() if ok] == [kind]
        assert classify(component) is kind

    def test_classify_unknown(self):
        assert classify({"something": "else"}) is None
