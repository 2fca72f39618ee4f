"""
Components Module
Discovery, staging, loading and validation of project components.
"""

from .compiler import Compiler, PythonCompiler, scan_relative_imports
from .directory_loader import ComponentLoader
from .discovery import discover
from .dynamic_loader import DynamicLoader
from .errors import (
    CompilationError,
    ComponentError,
    DependencyResolutionError,
    DirectoryMissing,
    ModuleLoadError,
    ValidationFailure,
)
from .materializer import Materializer
from .resolver import DualRootResolver, ProjectRootResolver, StagingResolver
from .types import (
    ComponentDefinition,
    ComponentKind,
    ComponentSourceFile,
    LoadAllOptions,
    LoadOptions,
    LoadReport,
    LoadResult,
    MaterializedArtifact,
    PromptDefinition,
    ResourceDefinition,
    ToolDefinition,
)
from .validators import classify, validate_prompt, validate_resource, validate_tool

__all__ = [
    "discover",
    "Compiler",
    "PythonCompiler",
    "scan_relative_imports",
    "Materializer",
    "DynamicLoader",
    "ComponentLoader",
    "StagingResolver",
    "ProjectRootResolver",
    "DualRootResolver",
    # Validators
    "validate_tool",
    "validate_resource",
    "validate_prompt",
    "classify",
    # Types
    "ComponentKind",
    "ComponentSourceFile",
    "MaterializedArtifact",
    "ToolDefinition",
    "ResourceDefinition",
    "PromptDefinition",
    "ComponentDefinition",
    "LoadOptions",
    "LoadAllOptions",
    "LoadResult",
    "LoadReport",
    # Errors
    "ComponentError",
    "CompilationError",
    "DependencyResolutionError",
    "ModuleLoadError",
    "ValidationFailure",
    "DirectoryMissing",
]
