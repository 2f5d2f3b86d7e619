"""Generate, compile and load code from a JSON schema in a throwaway workspace."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Callable, List, Mapping, Optional, Union

from .cleanup import CleanupRegistry, default_registry
from .compiler import CompilationReport, PythonCompiler
from .errors import DependencyResolutionError, GenerationError, GeneratorExecutionError
from .generator import BuildContext, GeneratorConfig, SchemaGenerator, StubBuildContext
from .loader import GeneratedModuleLoader
from .plugins.class_generator import ClassGenerator
from .schema import GenerationRequest, SchemaLocation, SchemaResolver, schema_path
from .utils import timer
from .workspace import Workspace

logger = logging.getLogger(__name__)

TEMP_ROOT_ENV = "CODEGEN_HARNESS_TEMP_ROOT"
SCHEMA_PATH_ENV = "CODEGEN_HARNESS_SCHEMA_PATH"


@dataclass
class HarnessConfig:
    temp_root: Optional[Path] = None
    workspace_prefix: str = "codegen-"
    schema_roots: List[Path] = field(default_factory=list)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HarnessConfig":
        environ = os.environ if environ is None else environ
        temp_root = environ.get(TEMP_ROOT_ENV) or None
        search_path = environ.get(SCHEMA_PATH_ENV, "")
        return cls(
            temp_root=Path(temp_root) if temp_root else None,
            schema_roots=[Path(entry) for entry in search_path.split(os.pathsep) if entry],
        )


class CodeGenerationHarness:
    """Drives a schema generator, the compiler and the loader for tests."""

    def __init__(
        self,
        config: Optional[HarnessConfig] = None,
        generator: Optional[SchemaGenerator] = None,
        compiler: Optional[PythonCompiler] = None,
        registry: Optional[CleanupRegistry] = None,
        build_context: Optional[BuildContext] = None,
    ) -> None:
        self.config = config or HarnessConfig()
        self.generator = generator or ClassGenerator()
        self.compiler = compiler or PythonCompiler()
        self.registry = registry or default_registry()
        self.build_context = build_context
        self.resolver = SchemaResolver(self.config.schema_roots)

    def generate(
        self,
        schema: SchemaLocation,
        target_package: str,
        generate_builders: bool = False,
        use_primitives: bool = False,
    ) -> Path:
        """Invoke the generator for ``schema`` and return the output directory.

        Args:
            schema: a resource name looked up on the schema roots, an absolute
                path, or a URL.
            target_package: the package generated types are placed in.
            generate_builders: should fluent ``with_*`` methods be generated?
            use_primitives: should numbers and booleans default to zero
                values instead of ``None``?
        """

        request = GenerationRequest(schema, target_package, generate_builders, use_primitives)
        return self._generate(request)

    def compile(self, source_directory: Union[str, Path]) -> CompilationReport:
        with timer() as elapsed:
            report = self.compiler.compile(source_directory)
        logger.info(
            "Compiled %d file(s) in %s in %.2fs",
            len(report.compiled),
            source_directory,
            elapsed(),
        )
        return report

    def build_loader(
        self,
        source_directory: Union[str, Path],
        parent: Optional[Callable[[str], ModuleType]] = None,
    ) -> GeneratedModuleLoader:
        return GeneratedModuleLoader(source_directory, parent=parent)

    def run(self, request: GenerationRequest) -> GeneratedModuleLoader:
        """Generate, compile and wrap the result in a loader.

        Nothing is rolled back on failure: the workspace stays on disk until
        the cleanup registry is drained.
        """

        output_directory = self._generate(request)
        self.compile(output_directory)
        return self.build_loader(output_directory)

    def generate_and_compile(
        self,
        schema: SchemaLocation,
        target_package: str,
        generate_builders: bool = False,
        use_primitives: bool = False,
    ) -> GeneratedModuleLoader:
        request = GenerationRequest(schema, target_package, generate_builders, use_primitives)
        return self.run(request)

    # ------------------------------------------------------------------
    def _generate(self, request: GenerationRequest) -> Path:
        location = self.resolver.resolve(request.schema)
        workspace = Workspace.create(
            temp_root=self.config.temp_root,
            prefix=self.config.workspace_prefix,
            registry=self.registry,
        )

        try:
            config = GeneratorConfig(
                source=schema_path(location),
                output_directory=workspace.root,
                target_package=request.target_package,
                generate_builders=request.generate_builders,
                use_primitives=request.use_primitives,
                build_context=self.build_context or StubBuildContext(),
            )
            with timer() as elapsed:
                self.generator.execute(config)
        except (ValueError, GeneratorExecutionError, DependencyResolutionError) as exc:
            raise GenerationError(f"Generation failed for {location}: {exc}") from exc

        logger.info("Generated sources for %s into %s in %.2fs", location, workspace.root, elapsed())
        return workspace.root


_default_harness: Optional[CodeGenerationHarness] = None
_default_lock = threading.Lock()


def default_harness() -> CodeGenerationHarness:
    global _default_harness
    with _default_lock:
        if _default_harness is None:
            _default_harness = CodeGenerationHarness(HarnessConfig.from_env())
        return _default_harness


def generate(
    schema: SchemaLocation,
    target_package: str,
    generate_builders: bool = False,
    use_primitives: bool = False,
) -> Path:
    return default_harness().generate(schema, target_package, generate_builders, use_primitives)


def compile_directory(source_directory: Union[str, Path]) -> CompilationReport:
    return default_harness().compile(source_directory)


def build_loader(source_directory: Union[str, Path]) -> GeneratedModuleLoader:
    return default_harness().build_loader(source_directory)


def generate_and_compile(
    schema: SchemaLocation,
    target_package: str,
    generate_builders: bool = False,
    use_primitives: bool = False,
) -> GeneratedModuleLoader:
    return default_harness().generate_and_compile(
        schema, target_package, generate_builders, use_primitives
    )
