"""Translate BSON-flavoured Python expressions into driver code for other languages."""

from .backends import TARGETS, UnknownBackendError, get_backend
from .errors import (
    ArgumentError,
    AttributeAccessError,
    EvaluationError,
    InternalError,
    NotCallableError,
    SourceSyntaxError,
    TranspileError,
    UndefinedSymbolError,
    UnimplementedError,
)
from .transpiler import CompileOptions, CompileResult, Transpiler, compile_source

__all__ = [
    "ArgumentError",
    "AttributeAccessError",
    "CompileOptions",
    "CompileResult",
    "EvaluationError",
    "InternalError",
    "NotCallableError",
    "SourceSyntaxError",
    "TARGETS",
    "TranspileError",
    "Transpiler",
    "UndefinedSymbolError",
    "UnimplementedError",
    "UnknownBackendError",
    "compile_source",
    "get_backend",
]
