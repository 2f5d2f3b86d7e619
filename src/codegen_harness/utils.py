"""Shared utility helpers for the generation harness."""

from __future__ import annotations

import keyword
import re
import time
from contextlib import contextmanager
from typing import Callable, Iterator

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|[^A-Za-z0-9]+")


@contextmanager
def timer() -> Iterator[Callable[[], float]]:
    """Yield a callable that returns the elapsed time when invoked."""

    start = time.perf_counter()
    elapsed = lambda: time.perf_counter() - start
    yield elapsed


def _words(name: str) -> list:
    return [word for word in _WORD_BOUNDARY.split(name) if word]


def safe_identifier(name: str) -> str:
    if not name:
        name = "_"
    if name[0].isdigit():
        name = "_" + name
    if keyword.iskeyword(name):
        name += "_"
    return name


def snake_case(name: str) -> str:
    """``firstName`` -> ``first_name``; always a valid identifier."""

    return safe_identifier("_".join(word.lower() for word in _words(name)))


def class_name_for(name: str) -> str:
    """``postal-address`` -> ``PostalAddress``; always a valid identifier."""

    return safe_identifier("".join(word[:1].upper() + word[1:] for word in _words(name)))


def is_package_name(name: str) -> bool:
    parts = name.split(".")
    return all(part.isidentifier() and not keyword.iskeyword(part) for part in parts)
