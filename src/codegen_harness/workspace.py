"""Utilities for managing the temporary output directories of generation runs."""

from __future__ import annotations

import logging
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from .cleanup import CleanupRegistry, default_registry, remove_tree
from .errors import WorkspaceError

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """A uniquely named directory that is deleted when the process exits."""

    root: Path

    @classmethod
    def create(
        cls,
        temp_root: Optional[Union[str, Path]] = None,
        prefix: str = "codegen-",
        registry: Optional[CleanupRegistry] = None,
    ) -> "Workspace":
        base = Path(temp_root) if temp_root is not None else Path(tempfile.gettempdir())
        root = base / f"{prefix}{uuid.uuid4()}"
        registry = registry or default_registry()

        try:
            root.mkdir()
        except OSError as exc:
            raise WorkspaceError(f"Unable to create output directory {root}") from exc
        finally:
            registry.register(lambda: remove_tree(root))

        logger.debug("Created workspace %s", root)
        return cls(root=root)

    def exists(self) -> bool:
        return self.root.is_dir()

    def write_file(self, relative_path: str, content: str) -> Path:
        target = self.root / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    def read_file(self, relative_path: str) -> str:
        target = self.root / relative_path
        return target.read_text(encoding="utf-8")

    def iter_files(self, pattern: str = "*") -> Iterator[Path]:
        return (path for path in sorted(self.root.rglob(pattern)) if path.is_file())

    def cleanup(self) -> None:
        """Delete the directory now; the deferred deletion then finds nothing."""

        remove_tree(self.root)

    def __enter__(self) -> "Workspace":  # pragma: no cover - trivial context wrapper
        return self

    def __exit__(self, *exc_info) -> Optional[bool]:  # pragma: no cover
        self.cleanup()
        return None
