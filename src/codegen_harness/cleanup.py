"""Process-wide registry of cleanup actions drained at interpreter exit."""

from __future__ import annotations

import atexit
import logging
import os
import shutil
import sys
import threading
from typing import Callable, List, Optional, Union

from .errors import CleanupError

logger = logging.getLogger(__name__)

CleanupAction = Callable[[], None]


class CleanupRegistry:
    """Collects deferred actions and runs each of them exactly once.

    Registration is safe from any number of threads. Draining takes the
    pending actions under the lock, so an action can never run twice even if
    ``run_all`` is invoked concurrently or repeatedly.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._actions: List[CleanupAction] = []

    def register(self, action: CleanupAction) -> None:
        with self._lock:
            self._actions.append(action)

    def pending(self) -> int:
        with self._lock:
            return len(self._actions)

    def run_all(self) -> None:
        """Run every pending action, then escalate any failures together."""

        with self._lock:
            actions, self._actions = self._actions, []

        failures: List[BaseException] = []
        for action in actions:
            try:
                action()
            except Exception as exc:
                logger.error("Cleanup action %r failed: %s", action, exc)
                failures.append(exc)

        if failures:
            raise CleanupError(failures)


_default_registry: Optional[CleanupRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> CleanupRegistry:
    """Return the registry drained by ``atexit`` when the interpreter stops."""

    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = CleanupRegistry()
            atexit.register(_default_registry.run_all)
        return _default_registry


def _ignore_missing(function, path, excinfo) -> None:
    exc = excinfo[1] if isinstance(excinfo, tuple) else excinfo
    if isinstance(exc, FileNotFoundError):
        return
    raise exc


def remove_tree(path: Union[str, os.PathLike]) -> None:
    """Recursively delete ``path``; a tree that is already gone counts as removed."""

    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_ignore_missing)
    else:  # pragma: no cover - exercised on older interpreters only
        shutil.rmtree(path, onerror=_ignore_missing)
    logger.debug("Removed %s", path)
