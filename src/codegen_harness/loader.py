"""Scoped import of generated modules from a compiled workspace."""

from __future__ import annotations

import importlib
import importlib.abc
import importlib.machinery
import logging
import os
import sys
import threading
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Optional, Union

from .errors import LoaderError, TypeNotFoundError

logger = logging.getLogger(__name__)

# Guards the temporary changes to sys.modules and sys.meta_path.
_IMPORT_LOCK = threading.RLock()


class _WorkspaceFinder(importlib.abc.MetaPathFinder):
    """Finds top-level packages under a single root; submodules follow ``__path__``."""

    def __init__(self, root: str) -> None:
        self._root = root

    def find_spec(self, fullname, path=None, target=None):
        if path is not None:
            return None
        return importlib.machinery.PathFinder.find_spec(fullname, [self._root])


def _take_modules(top_level: str) -> Dict[str, ModuleType]:
    names = [
        name
        for name in sys.modules
        if name == top_level or name.startswith(top_level + ".")
    ]
    return {name: sys.modules.pop(name) for name in names}


class GeneratedModuleLoader:
    """Resolves names against a compiled workspace before the ambient importer.

    Modules imported from the workspace are cached by this loader and kept
    out of ``sys.modules``, so loaders over different workspaces can each
    hold their own ``com.example.Address``.
    """

    def __init__(
        self,
        root: Union[str, os.PathLike],
        parent: Optional[Callable[[str], ModuleType]] = None,
    ) -> None:
        try:
            self.root = Path(root).resolve()
        except (TypeError, ValueError, OSError) as exc:
            raise LoaderError(f"Invalid artifact root {root!r}") from exc
        if not self.root.is_dir():
            raise LoaderError(f"Artifact root {self.root} is not a directory")

        self.parent = parent or importlib.import_module
        self._modules: Dict[str, ModuleType] = {}
        importlib.invalidate_caches()

    def owns(self, module_name: str) -> bool:
        """Whether ``module_name`` lives under this loader's root."""

        top_level = module_name.partition(".")[0]
        if top_level in self._modules:
            return True
        spec = importlib.machinery.PathFinder.find_spec(top_level, [str(self.root)])
        return spec is not None

    def load_module(self, module_name: str) -> ModuleType:
        cached = self._modules.get(module_name)
        if cached is not None:
            return cached
        if not self.owns(module_name):
            return self.parent(module_name)
        with _IMPORT_LOCK:
            return self._import_isolated(module_name)

    def load_class(self, qualified_name: str) -> type:
        module_name, _, attribute = qualified_name.rpartition(".")
        if not module_name or not attribute:
            raise TypeNotFoundError(f"{qualified_name!r} is not a fully-qualified type name")

        try:
            module = self.load_module(module_name)
        except ImportError as exc:
            raise TypeNotFoundError(f"No module {module_name!r} for type {qualified_name!r}") from exc

        value = getattr(module, attribute, None)
        if not isinstance(value, type):
            raise TypeNotFoundError(f"Type {qualified_name!r} not found")
        return value

    def new_instance(self, qualified_name: str, *args: Any, **kwargs: Any) -> Any:
        return self.load_class(qualified_name)(*args, **kwargs)

    # ------------------------------------------------------------------
    def _import_isolated(self, module_name: str) -> ModuleType:
        top_level = module_name.partition(".")[0]
        finder = _WorkspaceFinder(str(self.root))

        shadowed = _take_modules(top_level)
        sys.modules.update(
            (name, module)
            for name, module in self._modules.items()
            if name == top_level or name.startswith(top_level + ".")
        )
        sys.meta_path.insert(0, finder)
        try:
            module = importlib.import_module(module_name)
        finally:
            sys.meta_path.remove(finder)
            self._modules.update(_take_modules(top_level))
            sys.modules.update(shadowed)

        logger.debug("Loaded %s from %s", module_name, self.root)
        return module
