"""Byte-compilation of generated source trees."""

from __future__ import annotations

import logging
import py_compile
import threading
import traceback
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from .errors import CompilationError

logger = logging.getLogger(__name__)

# warnings.catch_warnings swaps process-wide filter state.
_WARNINGS_LOCK = threading.Lock()


@dataclass
class CompilationReport:
    """Result of compiling every source file under a directory."""

    source_directory: Path
    compiled: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class PythonCompiler:
    """Compiles ``*.py`` files in place, writing ``__pycache__`` beside them."""

    def __init__(self, optimize: int = -1) -> None:
        self.optimize = optimize

    def compile(self, source_directory: Union[str, Path]) -> CompilationReport:
        directory = Path(source_directory)
        if not directory.is_dir():
            raise CompilationError(f"Source directory {directory} does not exist")

        report = CompilationReport(source_directory=directory)
        errors: List[str] = []

        with _WARNINGS_LOCK, warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            for source in sorted(directory.rglob("*.py")):
                try:
                    py_compile.compile(str(source), doraise=True, optimize=self.optimize)
                except py_compile.PyCompileError as exc:
                    errors.append(self._format_compile_error(source, exc))
                    continue
                report.compiled.append(source)

        for warning in caught:
            message = f"{warning.filename}:{warning.lineno}: {warning.category.__name__}: {warning.message}"
            logger.warning("Compiler warning: %s", message)
            report.warnings.append(message)

        if errors:
            raise CompilationError(
                f"Compilation failed for {len(errors)} file(s) in {directory}", errors
            )

        if not report.compiled:
            logger.warning("No Python sources found under %s", directory)
        logger.debug("Compiled %d file(s) under %s", len(report.compiled), directory)
        return report

    # ------------------------------------------------------------------
    def _format_compile_error(self, source: Path, exc: py_compile.PyCompileError) -> str:
        cause = exc.exc_value
        summary = "".join(traceback.format_exception_only(type(cause), cause)).strip()
        if not summary:
            summary = exc.msg
        return f"{source}: {summary}"
