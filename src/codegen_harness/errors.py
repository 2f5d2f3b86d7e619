"""Exception types raised by the code generation harness."""

from __future__ import annotations

from typing import Iterable, List


class HarnessError(RuntimeError):
    """Base class for unrecoverable harness failures."""


class WorkspaceError(HarnessError):
    """The temporary output directory could not be created."""


class GenerationError(HarnessError):
    """Source generation failed for a schema."""


class CompilationError(HarnessError):
    """One or more generated sources failed to compile."""

    def __init__(self, message: str, diagnostics: Iterable[str] = ()) -> None:
        self.diagnostics: List[str] = list(diagnostics)
        if self.diagnostics:
            message = message + "\n" + "\n".join(self.diagnostics)
        super().__init__(message)


class LoaderError(HarnessError):
    """A loader could not be built or could not resolve a name."""


class TypeNotFoundError(LoaderError, LookupError):
    """No generated or ambient type exists under the requested name."""


class CleanupError(HarnessError):
    """At least one deferred cleanup action failed."""

    def __init__(self, errors: Iterable[BaseException]) -> None:
        self.errors: List[BaseException] = list(errors)
        summary = "; ".join(repr(error) for error in self.errors)
        super().__init__(f"{len(self.errors)} cleanup action(s) failed: {summary}")


class SchemaNotFoundError(AssertionError):
    """The schema resource could not be read from the search path."""


class GeneratorExecutionError(Exception):
    """Raised by a generator when it cannot produce sources."""


class DependencyResolutionError(Exception):
    """Raised by a build context when its classpath cannot be resolved."""
