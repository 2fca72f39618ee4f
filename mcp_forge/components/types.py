"""
Component types
Dataclasses shared by discovery, materialization, loading and the registry.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union


class ComponentKind(Enum):
    """The three component kinds a project can define."""
    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"

    @classmethod
    def from_file_name(cls, file_name: str) -> Optional["ComponentKind"]:
        """Map a base name like ``tool.py`` to its kind (None if not a component file)."""
        stem, dot, suffix = file_name.rpartition(".")
        if not dot or f".{suffix}" not in SOURCE_EXTENSIONS:
            return None
        for kind in cls:
            if kind.value == stem:
                return kind
        return None


# Accepted component source extensions, in resolution order
SOURCE_EXTENSIONS = (".py", ".pyw")

# Extension of every staged artifact
ARTIFACT_EXTENSION = ".py"


@dataclass(frozen=True)
class ComponentSourceFile:
    """A discovered component source file. Identity is its absolute path."""
    path: Path
    kind: ComponentKind
    modified_at: float


@dataclass(frozen=True)
class MaterializedArtifact:
    """A staged, executable copy of a source file."""
    source_path: Path
    artifact_path: Path
    modified_at: float
    compiled: bool = False  # True when this call ran the compiler


# =========================================================================
# Component definitions
# =========================================================================

ResourceContent = Union[str, Callable[[], Union[str, Awaitable[str]]]]


@dataclass
class ToolDefinition:
    """A validated tool."""
    name: str
    input_schema: Mapping[str, Any]
    execute: Callable[..., Any]
    description: Optional[str] = None
    output_schema: Optional[Mapping[str, Any]] = None
    annotations: Optional[Dict[str, Any]] = None

    kind = ComponentKind.TOOL

    @property
    def identifier(self) -> str:
        return self.name


@dataclass
class ResourceDefinition:
    """A validated resource."""
    uri: str
    name: str
    content: ResourceContent
    description: Optional[str] = None
    content_type: Optional[str] = None

    kind = ComponentKind.RESOURCE

    @property
    def identifier(self) -> str:
        return self.uri


@dataclass
class PromptDefinition:
    """A validated prompt."""
    name: str
    get_messages: Callable[..., Any]
    description: Optional[str] = None
    arguments: Optional[List[Dict[str, Any]]] = None

    kind = ComponentKind.PROMPT

    @property
    def identifier(self) -> str:
        return self.name


ComponentDefinition = Union[ToolDefinition, ResourceDefinition, PromptDefinition]

DEFINITION_TYPES = {
    ComponentKind.TOOL: ToolDefinition,
    ComponentKind.RESOURCE: ResourceDefinition,
    ComponentKind.PROMPT: PromptDefinition,
}


def build_definition(kind: ComponentKind, candidate: Mapping[str, Any]) -> ComponentDefinition:
    """Build the typed definition for a candidate that already passed validation."""
    if kind is ComponentKind.TOOL:
        return ToolDefinition(
            name=candidate["name"],
            input_schema=candidate.get("input_schema") or candidate.get("parameters") or {},
            execute=candidate["execute"],
            description=candidate.get("description"),
            output_schema=candidate.get("output_schema"),
            annotations=candidate.get("annotations"),
        )
    if kind is ComponentKind.RESOURCE:
        return ResourceDefinition(
            uri=candidate["uri"],
            name=candidate["name"],
            content=candidate["content"],
            description=candidate.get("description"),
            content_type=candidate.get("content_type"),
        )
    if kind is ComponentKind.PROMPT:
        return PromptDefinition(
            name=candidate["name"],
            get_messages=candidate["get_messages"],
            description=candidate.get("description"),
            arguments=candidate.get("arguments"),
        )
    raise ValueError(f"Unknown component kind: {kind!r}")


# =========================================================================
# Loading options and results
# =========================================================================

@dataclass
class LoadOptions:
    """Where to autoload one component kind from."""
    enabled: bool = True
    directory: str = ""
    pattern: Optional[str] = None  # glob on the project-relative path


@dataclass
class LoadAllOptions:
    """Autoload options for all three kinds."""
    tools: LoadOptions = field(default_factory=LoadOptions)
    resources: LoadOptions = field(default_factory=LoadOptions)
    prompts: LoadOptions = field(default_factory=LoadOptions)

    def for_kind(self, kind: ComponentKind) -> LoadOptions:
        return {
            ComponentKind.TOOL: self.tools,
            ComponentKind.RESOURCE: self.resources,
            ComponentKind.PROMPT: self.prompts,
        }[kind]


@dataclass
class LoadResult:
    """Result of loading one directory."""
    components: List[ComponentDefinition] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    directory_missing: bool = False


@dataclass
class LoadReport:
    """Result of a registry-wide load."""
    tools: int = 0
    resources: int = 0
    prompts: int = 0
    errors: List[str] = field(default_factory=list)
    already_loaded: bool = False
