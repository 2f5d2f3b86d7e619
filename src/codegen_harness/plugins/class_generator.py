"""Generator plugin that turns JSON schemas into plain Python classes."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from ..errors import GeneratorExecutionError
from ..generator import (
    GENERATED_HEADER,
    GeneratorConfig,
    SchemaGenerator,
    iter_schema_files,
    package_directory,
    write_package_exports,
)
from ..utils import class_name_for, snake_case

logger = logging.getLogger(__name__)

_SCALARS = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
}

_PRIMITIVE_DEFAULTS = {
    "int": "0",
    "float": "0.0",
    "bool": "False",
}


@dataclass
class PropertyModel:
    """A single generated attribute along with its accessors."""

    json_name: str
    attribute: str
    annotation: str
    parameter: str
    default: str = "None"
    container: Optional[str] = None
    description: Optional[str] = None


@dataclass
class ClassModel:
    """A generated class and the module that holds it."""

    name: str
    module: str
    source: str
    description: Optional[str] = None
    properties: List[PropertyModel] = field(default_factory=list)
    imports: List[Tuple[str, str]] = field(default_factory=list)


class ClassGenerator(SchemaGenerator):
    """Emits one module per object type found in the schema.

    The root type takes its name from the schema file (``address.json``
    becomes ``Address``); nested object properties become classes of their
    own, named after the property.
    """

    def execute(self, config: GeneratorConfig) -> None:
        classpath = config.build_context.compile_classpath_elements()
        logger.debug("Compile classpath for %s: %s", config.source, classpath or "<empty>")

        package_dir = package_directory(config.output_directory, config.target_package)
        models: List[ClassModel] = []
        taken: Set[str] = set()

        for schema_file in iter_schema_files(config.source):
            document = self._load(schema_file)
            self._collect(
                document,
                class_name_for(schema_file.stem),
                schema_file.name,
                config,
                models,
                taken,
            )

        for model in models:
            target = package_dir / f"{model.module}.py"
            self._write(target, self._render(model, config.generate_builders))
            logger.debug("Wrote %s.%s to %s", config.target_package, model.name, target)

        write_package_exports(package_dir, [(model.module, model.name) for model in models])
        logger.info(
            "Generated %d type(s) in package %s from %s",
            len(models),
            config.target_package,
            config.source,
        )

    # ------------------------------------------------------------------
    def _load(self, schema_file: Path) -> Dict[str, Any]:
        try:
            document = json.loads(schema_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise GeneratorExecutionError(f"Unable to read schema {schema_file}: {exc}") from exc

        if not isinstance(document, dict):
            raise GeneratorExecutionError(f"Schema {schema_file} must be a JSON object")
        if _schema_type(document) not in ("object", None):
            raise GeneratorExecutionError(f"Root of schema {schema_file} must describe an object")
        return document

    def _collect(
        self,
        schema: Dict[str, Any],
        name: str,
        source: str,
        config: GeneratorConfig,
        models: List[ClassModel],
        taken: Set[str],
    ) -> ClassModel:
        name = _claim(name, taken)
        model = ClassModel(
            name=name,
            module=snake_case(name),
            source=source,
            description=schema.get("description"),
        )
        models.append(model)

        properties = schema.get("properties") or {}
        if not isinstance(properties, dict):
            raise GeneratorExecutionError(f"'properties' of {name} in {source} must be an object")

        # Names the generated __init__ already uses.
        attributes: Set[str] = {"self", "list", "set"}
        if config.generate_builders:
            attributes.update("with_" + snake_case(json_name) for json_name in properties)
        for json_name, property_schema in properties.items():
            if not isinstance(property_schema, dict):
                raise GeneratorExecutionError(
                    f"Property {json_name!r} of {name} in {source} is not a schema object"
                )
            attribute = _unique(snake_case(json_name), attributes)
            model.properties.append(
                self._property(json_name, attribute, property_schema, model, config, models, taken)
            )
        return model

    def _property(
        self,
        json_name: str,
        attribute: str,
        schema: Dict[str, Any],
        owner: ClassModel,
        config: GeneratorConfig,
        models: List[ClassModel],
        taken: Set[str],
    ) -> PropertyModel:
        annotation = self._annotation(schema, json_name, owner, config, models, taken)

        container = None
        if annotation.startswith("List["):
            container = "list"
        elif annotation.startswith("Set["):
            container = "set"

        primitive = config.use_primitives and annotation in _PRIMITIVE_DEFAULTS
        default = "None"
        if container is None and isinstance(schema.get("default"), (str, int, float, bool)):
            value = schema["default"]
            if isinstance(value, float) and not math.isfinite(value):
                raise GeneratorExecutionError(
                    f"Default {value!r} of property {json_name!r} in {owner.source} is not a finite number"
                )
            default = repr(value)
        elif primitive:
            default = _PRIMITIVE_DEFAULTS[annotation]

        if container is not None:
            parameter = f"Optional[{annotation}]"
        elif primitive or annotation == "Any":
            parameter = annotation
        else:
            annotation = parameter = f"Optional[{annotation}]"

        return PropertyModel(
            json_name=json_name,
            attribute=attribute,
            annotation=annotation,
            parameter=parameter,
            default=default,
            container=container,
            description=schema.get("description"),
        )

    def _annotation(
        self,
        schema: Dict[str, Any],
        hint: str,
        owner: ClassModel,
        config: GeneratorConfig,
        models: List[ClassModel],
        taken: Set[str],
    ) -> str:
        kind = _schema_type(schema)
        if kind in _SCALARS:
            return _SCALARS[kind]

        if kind == "array":
            items = schema.get("items")
            if isinstance(items, dict):
                item = self._annotation(items, _singular(hint), owner, config, models, taken)
            else:
                item = "Any"
            if schema.get("uniqueItems") and item in _SCALARS.values():
                return f"Set[{item}]"
            return f"List[{item}]"

        if kind == "object":
            if schema.get("properties"):
                nested = self._collect(
                    schema, class_name_for(hint), owner.source, config, models, taken
                )
                owner.imports.append((nested.module, nested.name))
                return nested.name
            return "Dict[str, Any]"

        return "Any"

    def _render(self, model: ClassModel, builders: bool) -> str:
        lines = [
            GENERATED_HEADER,
            f"# Source: {model.source}",
            "",
            "from __future__ import annotations",
            "",
            "from typing import Any, Dict, List, Optional, Set",
        ]
        if model.imports:
            lines.append("")
        for module, name in model.imports:
            lines.append(f"from .{module} import {name}")
        lines += ["", "", f"class {model.name}:"]
        if model.description:
            lines += [f"    {_docstring(model.description)}", ""]

        parameters = ", ".join(
            f"{prop.attribute}: {prop.parameter} = {prop.default}" for prop in model.properties
        )
        lines.append(f"    def __init__(self{', ' + parameters if parameters else ''}) -> None:")
        for prop in model.properties:
            if prop.container:
                lines.append(
                    f"        self._{prop.attribute} = {prop.container}({prop.attribute})"
                    f" if {prop.attribute} is not None else {prop.container}()"
                )
            else:
                lines.append(f"        self._{prop.attribute} = {prop.attribute}")
        if not model.properties:
            lines.append("        pass")

        for prop in model.properties:
            lines += self._render_accessors(model, prop, builders)

        lines += self._render_dunders(model)
        return "\n".join(lines) + "\n"

    def _render_accessors(self, model: ClassModel, prop: PropertyModel, builders: bool) -> List[str]:
        name = prop.attribute
        lines = ["", "    @property", f"    def {name}(self) -> {prop.annotation}:"]
        if prop.description:
            lines.append(f"        {_docstring(prop.description)}")
        lines += [
            f"        return self._{name}",
            "",
            f"    @{name}.setter",
            f"    def {name}(self, value: {prop.annotation}) -> None:",
            f"        self._{name} = value",
        ]
        if builders:
            lines += [
                "",
                f"    def with_{name}(self, value: {prop.annotation}) -> {model.name}:",
                f"        self._{name} = value",
                "        return self",
            ]
        return lines

    def _render_dunders(self, model: ClassModel) -> List[str]:
        fields = ", ".join(
            prop.attribute + "={self._" + prop.attribute + "!r}" for prop in model.properties
        )
        return [
            "",
            "    def __repr__(self) -> str:",
            '        return f"' + model.name + "(" + fields + ')"',
            "",
            "    def __eq__(self, other: object) -> bool:",
            f"        if not isinstance(other, {model.name}):",
            "            return NotImplemented",
            f"        return {_as_tuple('self', model)} == {_as_tuple('other', model)}",
        ]

    def _write(self, target: Path, source: str) -> None:
        try:
            target.write_text(source, encoding="utf-8")
        except OSError as exc:
            raise GeneratorExecutionError(f"Unable to write {target}: {exc}") from exc


def _schema_type(schema: Dict[str, Any]) -> Optional[str]:
    kind = schema.get("type")
    if isinstance(kind, list):
        kind = next((entry for entry in kind if entry != "null"), None)
    if kind is None:
        if "properties" in schema:
            return "object"
        if "items" in schema:
            return "array"
    if kind is not None and not isinstance(kind, str):
        raise GeneratorExecutionError(f"Unsupported schema type {kind!r}")
    return kind


def _claim(name: str, taken: Set[str]) -> str:
    candidate, counter = name, 1
    while snake_case(candidate) in taken:
        candidate = f"{name}{counter}"
        counter += 1
    taken.add(snake_case(candidate))
    return candidate


def _unique(name: str, taken: Set[str]) -> str:
    candidate, counter = name, 1
    while candidate in taken:
        candidate = f"{name}_{counter}"
        counter += 1
    taken.add(candidate)
    return candidate


def _singular(name: str) -> str:
    if len(name) > 1 and name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


def _docstring(text: str) -> str:
    return repr(text)


def _as_tuple(target: str, model: ClassModel) -> str:
    values = [f"{target}._{prop.attribute}" for prop in model.properties]
    if len(values) == 1:
        return f"({values[0]},)"
    return "(" + ", ".join(values) + ")"
