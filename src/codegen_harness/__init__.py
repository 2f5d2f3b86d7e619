"""Integration-test harness for schema-to-code generators."""

from .cleanup import CleanupRegistry, default_registry, remove_tree
from .compiler import CompilationReport, PythonCompiler
from .errors import (
    CleanupError,
    CompilationError,
    DependencyResolutionError,
    GenerationError,
    GeneratorExecutionError,
    HarnessError,
    LoaderError,
    SchemaNotFoundError,
    TypeNotFoundError,
    WorkspaceError,
)
from .generator import BuildContext, GeneratorConfig, SchemaGenerator, StubBuildContext
from .harness import (
    CodeGenerationHarness,
    HarnessConfig,
    build_loader,
    compile_directory,
    generate,
    generate_and_compile,
)
from .loader import GeneratedModuleLoader
from .plugins.class_generator import ClassGenerator
from .plugins.datamodel_generator import DatamodelCodeGenerator
from .schema import GenerationRequest, SchemaResolver
from .workspace import Workspace

__all__ = [
    "BuildContext",
    "ClassGenerator",
    "CleanupError",
    "CleanupRegistry",
    "CodeGenerationHarness",
    "CompilationError",
    "CompilationReport",
    "DatamodelCodeGenerator",
    "DependencyResolutionError",
    "GeneratedModuleLoader",
    "GenerationError",
    "GenerationRequest",
    "GeneratorConfig",
    "GeneratorExecutionError",
    "HarnessConfig",
    "HarnessError",
    "LoaderError",
    "PythonCompiler",
    "SchemaGenerator",
    "SchemaNotFoundError",
    "SchemaResolver",
    "StubBuildContext",
    "TypeNotFoundError",
    "Workspace",
    "WorkspaceError",
    "build_loader",
    "compile_directory",
    "default_registry",
    "generate",
    "generate_and_compile",
    "remove_tree",
]
