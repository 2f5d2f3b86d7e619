"""Interfaces shared by schema-to-source generators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

from .errors import GeneratorExecutionError
from .utils import is_package_name

GENERATED_HEADER = "# Generated by codegen-harness. Do not edit."


class BuildContext(ABC):
    """The slice of a build-tool project that generators may consult."""

    @abstractmethod
    def compile_classpath_elements(self) -> List[str]:
        """Return the ordered import roots available to generated code."""


class StubBuildContext(BuildContext):
    """A project with nothing on its compile classpath."""

    def compile_classpath_elements(self) -> List[str]:
        return []


@dataclass(frozen=True)
class GeneratorConfig:
    """Everything a generator needs for one ``execute`` call."""

    source: Path
    output_directory: Path
    target_package: str
    generate_builders: bool = False
    use_primitives: bool = False
    build_context: BuildContext = field(default_factory=StubBuildContext)


class SchemaGenerator(ABC):
    """Abstract base class for schema-to-source generators."""

    @abstractmethod
    def execute(self, config: GeneratorConfig) -> None:
        """Write generated sources for ``config.source`` into ``config.output_directory``.

        Implementations raise ``GeneratorExecutionError`` when the schema is
        invalid or the sources cannot be written, and let
        ``DependencyResolutionError`` from the build context propagate.
        """


# ----------------------------------------------------------------------
def iter_schema_files(source: Path) -> List[Path]:
    """Return the schema files named by ``source`` (a file or a directory)."""

    if source.is_dir():
        return sorted(path for path in source.rglob("*.json") if path.is_file())
    if source.is_file():
        return [source]
    raise GeneratorExecutionError(f"Schema source {source} does not exist")


def package_directory(output_directory: Path, target_package: str) -> Path:
    """Create the directories (and ``__init__`` files) for ``target_package``."""

    if not target_package or not is_package_name(target_package):
        raise GeneratorExecutionError(f"Invalid target package {target_package!r}")

    directory = output_directory
    try:
        for part in target_package.split("."):
            directory = directory / part
            directory.mkdir(exist_ok=True)
            init_file = directory / "__init__.py"
            if not init_file.exists():
                init_file.write_text("", encoding="utf-8")
    except OSError as exc:
        raise GeneratorExecutionError(f"Unable to create package {target_package}: {exc}") from exc
    return directory


def write_package_exports(
    package_dir: Path, exports: Sequence[Tuple[str, str]]
) -> Path:
    """Re-export ``(module, class_name)`` pairs from the package ``__init__``.

    This lets a generated type be resolved as ``<target_package>.<ClassName>``.
    """

    by_module: Dict[str, List[str]] = {}
    for module, class_name in exports:
        by_module.setdefault(module, []).append(class_name)

    lines = [GENERATED_HEADER, ""]
    for module in sorted(by_module):
        names = ", ".join(by_module[module])
        lines.append(f"from .{module} import {names}")
    all_names: Iterable[str] = sorted(name for _, name in exports)
    lines.append("")
    lines.append("__all__ = [" + ", ".join(repr(name) for name in all_names) + "]")
    lines.append("")

    init_file = package_dir / "__init__.py"
    try:
        init_file.write_text("\n".join(lines), encoding="utf-8")
    except OSError as exc:
        raise GeneratorExecutionError(f"Unable to write {init_file}: {exc}") from exc
    return init_file
