"""
Error kinds raised while transpiling.

Every error unwinds the whole compile call; there is no partial output. Callers
distinguish kinds by the stable `code` (or `kind`) class attributes rather than
by matching message text.
"""

from __future__ import annotations

from typing import Optional


class TranspileError(Exception):
    """Base class for all transpiler failures."""

    kind = "TranspileError"
    code = "E_TRANSPILE"

    def __init__(self, message: str = "", line: Optional[int] = None, column: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line is not None and self.line >= 0:
            return f"{self.line}:{self.column}: {self.message}"
        return self.message


class ArgumentError(TranspileError):
    kind = "ArgumentError"
    code = "E_ARGUMENT"


class AttributeAccessError(TranspileError):
    kind = "AttributeError"
    code = "E_ATTRIBUTE"


class UndefinedSymbolError(TranspileError):
    kind = "ReferenceError"
    code = "E_REFERENCE"


class NotCallableError(TranspileError):
    kind = "TypeError"
    code = "E_TYPE"


class EvaluationError(TranspileError):
    """A literal could not be evaluated, or evaluated to an unsupported value."""

    kind = "RuntimeError"
    code = "E_RUNTIME"


class InternalError(TranspileError):
    kind = "InternalError"
    code = "E_INTERNAL"

    def __init__(self, message: str = "Internal error", line: Optional[int] = None, column: Optional[int] = None) -> None:
        super().__init__(message, line=line, column=column)


class UnimplementedError(TranspileError):
    kind = "UnimplementedError"
    code = "E_UNIMPLEMENTED"


class SourceSyntaxError(TranspileError):
    kind = "SyntaxError"
    code = "E_SYNTAX"


ERROR_KINDS = {
    cls.code: cls
    for cls in (
        ArgumentError,
        AttributeAccessError,
        UndefinedSymbolError,
        NotCallableError,
        EvaluationError,
        InternalError,
        UnimplementedError,
        SourceSyntaxError,
    )
}


__all__ = [
    "ERROR_KINDS",
    "ArgumentError",
    "AttributeAccessError",
    "EvaluationError",
    "InternalError",
    "NotCallableError",
    "SourceSyntaxError",
    "TranspileError",
    "UndefinedSymbolError",
    "UnimplementedError",
]
