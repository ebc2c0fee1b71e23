"""
Compile entry points.

`compile_source` is the stateless form: every call parses the source, builds a
fresh `CompileContext` and returns the target text together with its import
block. `Transpiler` wraps it for callers that want to ask for the imports of
the last compile separately.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from .backends import Backend, get_backend
from .context import CompileContext
from .errors import ArgumentError, TranspileError
from .parser import normalize_source, parse_source
from .walker import Walker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileOptions:
    idiomatic: bool = True
    # Sources longer than this are rejected before parsing.
    max_source_length: Optional[int] = None


@dataclass(frozen=True)
class CompileResult:
    code: str
    imports: str


@lru_cache(maxsize=None)
def _walker(target: str) -> Walker:
    return Walker(get_backend(target))


def _compile(source: str, backend: Backend, walker: Walker, options: CompileOptions) -> CompileResult:
    if options.max_source_length is not None and len(source) > options.max_source_length:
        raise ArgumentError(
            f"source is {len(source)} characters long; the limit is {options.max_source_length}"
        )
    tree = parse_source(source)
    ctx = CompileContext(source=normalize_source(source), idiomatic=options.idiomatic)
    code = walker.visit(ctx, tree).strip()
    return CompileResult(code=code, imports=ctx.imports.render(backend.imports))


def compile_source(
    source: str,
    target: str,
    idiomatic: bool = True,
    max_source_length: Optional[int] = None,
) -> CompileResult:
    """Translate `source` into `target` text plus the imports that text needs."""
    options = CompileOptions(idiomatic=idiomatic, max_source_length=max_source_length)
    return Transpiler(target, options).compile_result(source)


class Transpiler:
    """Compiles sources for one target and remembers the imports of the last call."""

    def __init__(self, target: str, options: Optional[CompileOptions] = None) -> None:
        self.backend = get_backend(target)
        self.options = options or CompileOptions()
        self._walker = _walker(target)
        self._imports = ""

    @property
    def target(self) -> str:
        return self.backend.name

    def compile_result(self, source: str) -> CompileResult:
        self._imports = ""
        logger.debug("compiling %d characters for %s", len(source), self.target)
        try:
            result = _compile(source, self.backend, self._walker, self.options)
        except TranspileError as exc:
            logger.debug("compile for %s failed: %s %s", self.target, exc.code, exc)
            raise
        self._imports = result.imports
        logger.debug("compiled %d characters for %s", len(result.code), self.target)
        return result

    def compile(self, source: str) -> str:
        return self.compile_result(source).code

    def get_imports(self) -> str:
        """Import block of the last successful compile, or '' if there was none."""
        return self._imports


__all__ = ["CompileOptions", "CompileResult", "Transpiler", "compile_source"]
