"""Generation requests and lookup of schema resources."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

from .errors import SchemaNotFoundError

SchemaLocation = Union[str, os.PathLike]


@dataclass(frozen=True)
class GenerationRequest:
    """Inputs for a single generate-and-compile run."""

    schema: SchemaLocation
    target_package: str
    generate_builders: bool = False
    use_primitives: bool = False


def is_url(value: object) -> bool:
    # Single letter schemes are Windows drive letters, not URLs.
    if not isinstance(value, str):
        return False
    scheme = urlparse(value).scheme
    return len(scheme) > 1


class SchemaResolver:
    """Finds schema resources by name on a list of search roots.

    Names behave like classpath resources: a relative name, or a name with a
    leading ``/``, is looked up under each root in turn. Absolute filesystem
    paths are honoured directly and URLs are passed through unchanged.
    """

    def __init__(self, roots: Optional[Iterable[Union[str, Path]]] = None) -> None:
        self.roots: List[Path] = [Path(root) for root in (roots or ())] or [Path.cwd()]

    def resolve(self, schema: SchemaLocation) -> str:
        """Return the location of ``schema`` as a URL string."""

        if is_url(schema):
            return str(schema)

        for candidate in self._candidates(schema):
            if candidate.exists() and os.access(candidate, os.R_OK):
                return candidate.resolve().as_uri()

        searched = ", ".join(str(root) for root in self.roots)
        raise SchemaNotFoundError(
            f"Unable to read schema resource {os.fspath(schema)!r} (searched: {searched})"
        )

    def _candidates(self, schema: SchemaLocation) -> List[Path]:
        path = Path(schema)
        candidates = [path] if path.is_absolute() else []
        relative = os.fspath(schema).lstrip("/\\")
        if relative:
            candidates.extend(root / relative for root in self.roots)
        return candidates


def schema_path(location: str) -> Path:
    """Convert a ``file`` URL into a local path.

    Raises ``ValueError`` for anything that does not name a local file.
    """

    parsed = urlparse(location)
    if parsed.scheme != "file":
        raise ValueError(f"Unsupported schema location {location!r}: only file URLs can be read")
    if parsed.netloc not in ("", "localhost"):
        raise ValueError(f"Unsupported schema location {location!r}: remote host {parsed.netloc!r}")
    if not parsed.path:
        raise ValueError(f"Malformed schema location {location!r}: missing path")
    return Path(url2pathname(parsed.path))
