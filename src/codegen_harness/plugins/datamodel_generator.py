"""Generator plugin backed by the datamodel-code-generator package."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

try:
    from datamodel_code_generator import DataModelType, InputFileType  # type: ignore
    from datamodel_code_generator import generate as datamodel_generate  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    DataModelType = None  # type: ignore[assignment]
    InputFileType = None  # type: ignore[assignment]
    datamodel_generate = None  # type: ignore[assignment]

from ..errors import GeneratorExecutionError
from ..generator import (
    GeneratorConfig,
    SchemaGenerator,
    iter_schema_files,
    package_directory,
    write_package_exports,
)
from ..utils import class_name_for, snake_case

logger = logging.getLogger(__name__)


class DatamodelCodeGenerator(SchemaGenerator):
    """SchemaGenerator adapter that delegates to ``datamodel_code_generator.generate``."""

    def __init__(
        self,
        *,
        output_model_type: str = "dataclasses.dataclass",
        extra_options: Optional[Dict[str, Any]] = None,
        generate_fn: Optional[Callable[..., Any]] = None,
    ) -> None:
        if generate_fn is None and datamodel_generate is None:
            raise ImportError(
                "datamodel-code-generator is required to use DatamodelCodeGenerator."
                " Install with `pip install codegen-harness[datamodel]`."
            )

        self.output_model_type = output_model_type
        self.extra_options = dict(extra_options or {})
        self._generate = generate_fn or datamodel_generate

    def execute(self, config: GeneratorConfig) -> None:
        config.build_context.compile_classpath_elements()
        if config.generate_builders or config.use_primitives:
            logger.warning(
                "datamodel-code-generator has no builder or primitive options;"
                " ignoring generate_builders=%s use_primitives=%s",
                config.generate_builders,
                config.use_primitives,
            )

        package_dir = package_directory(config.output_directory, config.target_package)
        exports = []
        for schema_file in iter_schema_files(config.source):
            class_name = class_name_for(schema_file.stem)
            module = snake_case(schema_file.stem)
            output = package_dir / f"{module}.py"
            try:
                self._generate(schema_file, output=output, **self._options(class_name))
            except Exception as exc:
                raise GeneratorExecutionError(
                    f"datamodel-code-generator failed for {schema_file}: {exc}"
                ) from exc
            exports.append((module, class_name))
            logger.debug("Wrote %s.%s to %s", config.target_package, class_name, output)

        write_package_exports(package_dir, exports)

    # ------------------------------------------------------------------
    def _options(self, class_name: str) -> Dict[str, Any]:
        # The class name always follows the schema file name.
        options: Dict[str, Any] = {**self.extra_options, "class_name": class_name}
        if InputFileType is not None:
            options.setdefault("input_file_type", InputFileType.JsonSchema)
            options.setdefault("output_model_type", DataModelType(self.output_model_type))
        else:
            options.setdefault("input_file_type", "jsonschema")
            options.setdefault("output_model_type", self.output_model_type)
        return options
