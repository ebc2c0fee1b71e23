"""
Target backends.

A backend is exactly three tables: templates for the type registry, a syntax
table and an import table. Everything else is target independent.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, Tuple

from ..imports import ImportTable
from ..syntax import SyntaxTable
from ..types import TypeRegistry


class UnknownBackendError(KeyError):
    """Raised by `get_backend` for a target name with no backend."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown target '{self.name}' (available: {', '.join(TARGETS)})"


@dataclass(frozen=True)
class Backend:
    name: str
    registry: TypeRegistry
    syntax: SyntaxTable
    imports: ImportTable


def _java() -> Backend:
    from . import java

    return java.build()


def _python() -> Backend:
    from . import python

    return python.build()


_BUILDERS: Dict[str, Callable[[], Backend]] = {
    "java": _java,
    "python": _python,
}

TARGETS: Tuple[str, ...] = tuple(sorted(_BUILDERS))


@lru_cache(maxsize=None)
def get_backend(name: str) -> Backend:
    """Backend for `name`; built once per process and shared read-only."""
    try:
        builder = _BUILDERS[name]
    except KeyError:
        raise UnknownBackendError(name) from None
    return builder()


__all__ = ["Backend", "TARGETS", "UnknownBackendError", "get_backend"]
