"""
Shared pytest fixtures for mcp-forge tests

Provides throwaway project trees and cleanup of modules loaded from them.
"""

import sys
import textwrap
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from mcp_forge.components.dynamic_loader import MODULE_PREFIX  # noqa: E402


# ============================================================================
# Project builder
# ============================================================================

class ProjectBuilder:
    """
    A project tree under tmp_path plus its staging directory.

    Usage:
        project.write("src/tools/math/tool.py", '''
            default = {...}
        ''')
    """

    def __init__(self, base: Path):
        self.root = base / "project"
        self.staging_root = base / "staging"
        self.root.mkdir()

    def write(self, relative: str, content: str = "") -> Path:
        """Write a file (dedented) relative to the project root."""
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path.resolve()


# Component sources reused across test modules

MATH_TOOL = '''
    from .utils import add

    def run(args):
        return str(add(args["a"], args["b"]))

    default = {
        "name": "math",
        "description": "Add two numbers",
        "input_schema": {
            "type": "object",
            "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
            "required": ["a", "b"],
        },
        "execute": run,
    }
'''

MATH_UTILS = '''
    def add(a, b):
        return a + b
'''

DOCS_RESOURCE = '''
    default = {
        "uri": "docs://readme",
        "name": "readme",
        "content": "Read me first",
        "content_type": "text/plain",
    }
'''

GREETING_PROMPT = '''
    def get_messages(args=None):
        name = (args or {}).get("name", "there")
        return [{"role": "user", "content": {"type": "text", "text": f"Say hi to {name}"}}]

    default = {
        "name": "greeting",
        "arguments": [{"name": "name", "required": False}],
        "get_messages": get_messages,
    }
'''


@pytest.fixture
def project(tmp_path) -> ProjectBuilder:
    return ProjectBuilder(tmp_path)


@pytest.fixture
def full_project(project) -> ProjectBuilder:
    """A project with one tool (with a helper), one resource and one prompt."""
    project.write("src/tools/math/tool.py", MATH_TOOL)
    project.write("src/tools/math/utils.py", MATH_UTILS)
    project.write("src/resources/docs/resource.py", DOCS_RESOURCE)
    project.write("src/prompts/greeting/prompt.py", GREETING_PROMPT)
    return project


@pytest.fixture(autouse=True)
def clean_loaded_modules(tmp_path):
    """Drop modules executed from staged artifacts or temporary projects."""
    before = set(sys.modules)
    base = str(tmp_path.resolve())
    yield
    for name in set(sys.modules) - before:
        module = sys.modules.get(name)
        locations = [getattr(module, "__file__", None) or ""]
        locations.extend(getattr(module, "__path__", None) or [])
        if name.startswith(MODULE_PREFIX) or any(str(p).startswith(base) for p in locations):
            sys.modules.pop(name, None)
