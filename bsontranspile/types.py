from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Tuple

from .errors import UndefinedSymbolError

Template = Callable[..., str]
# One tuple per positional parameter: acceptable type ids, None marks the position optional.
ArgSpec = Tuple[Tuple[Optional[str], ...], ...]

OPTIONAL = None


class CallableKind(Enum):
    NONE = "none"
    CONSTRUCTOR = "constructor"
    FUNCTION = "function"


@dataclass(frozen=True, eq=False)
class Type:
    id: str
    code: int
    callable: CallableKind = CallableKind.NONE
    args: ArgSpec = ()
    attr: Mapping[str, "Type"] = field(default_factory=lambda: MappingProxyType({}))
    returns: Optional[str] = None
    value: Optional[str] = None
    template: Optional[Template] = None
    args_template: Optional[Template] = None

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"Type({self.id!r}, code={self.code})"

    @property
    def result_id(self) -> str:
        """Type id synthesized for a call of this type."""
        return self.returns or self.id


@dataclass(frozen=True)
class TypeTemplates:
    """Per-target rendering hooks for one type id."""

    template: Optional[Template] = None
    args_template: Optional[Template] = None


@dataclass(frozen=True)
class _Spec:
    code: int
    callable: CallableKind = CallableKind.NONE
    args: ArgSpec = ()
    attr: Tuple[Tuple[str, str, "_Spec"], ...] = ()
    returns: Optional[str] = None
    value: Optional[str] = None


INTEGER = "_integer"
LONG = "_long"
DECIMAL = "_decimal"
HEX = "_hex"
OCTAL = "_octal"
NUMERIC = "_numeric"
STRING = "_string"
REGEX = "_regex"
ARRAY = "_array"
OBJECT = "_object"
NULL = "_null"
UNDEFINED = "_undefined"
BOOL = "_bool"
BINARY_LITERAL = "_bin"
REGEX_FLAG = "_regex_flag"
DATE = "Date"

NUMERIC_IDS = frozenset({INTEGER, DECIMAL, HEX, OCTAL, LONG, NUMERIC})
NUMERIC_WRAPPER_IDS = frozenset({"Int64", "Int32", "Double"})

# Import keys that only exist for import tracking.
CODE_WITH_SCOPE = 113
OBJECT_CODE = 10
ARRAY_CODE = 9
# Builder helper families; each collects the helper names it used.
FILTERS_CODE = 300
AGGREGATES_CODE = 301
ACCUMULATORS_CODE = 302
PROJECTIONS_CODE = 303
SORTS_CODE = 304
GEOJSON_CODE = 305
MODEL_CODE = 306
BUILDER_CODES = (FILTERS_CODE, AGGREGATES_CODE, ACCUMULATORS_CODE, PROJECTIONS_CODE, SORTS_CODE, GEOJSON_CODE, MODEL_CODE)

_NUMBER_ARG = (INTEGER, STRING, OPTIONAL)
_DATE_PART = (INTEGER, OPTIONAL)

_REGEX_FLAG_NAMES = (
    ("I", "i"),
    ("IGNORECASE", "i"),
    ("M", "m"),
    ("MULTILINE", "m"),
    ("S", "s"),
    ("DOTALL", "s"),
    ("X", "x"),
    ("VERBOSE", "x"),
    ("U", "u"),
    ("UNICODE", "u"),
    ("A", "a"),
    ("ASCII", "a"),
    ("L", "l"),
    ("LOCALE", "l"),
)

_BASIC_SPECS: Dict[str, _Spec] = {
    INTEGER: _Spec(code=1),
    LONG: _Spec(code=2),
    DECIMAL: _Spec(code=3),
    HEX: _Spec(code=4),
    OCTAL: _Spec(code=5),
    NUMERIC: _Spec(code=6),
    STRING: _Spec(code=7),
    REGEX: _Spec(code=8),
    ARRAY: _Spec(code=ARRAY_CODE),
    OBJECT: _Spec(code=OBJECT_CODE),
    NULL: _Spec(code=11),
    UNDEFINED: _Spec(code=12),
    BOOL: _Spec(code=13),
    BINARY_LITERAL: _Spec(code=14),
    DATE: _Spec(code=200),
}

_BSON_SPECS: Dict[str, _Spec] = {
    "Code": _Spec(code=100, callable=CallableKind.CONSTRUCTOR, args=((STRING,), (OBJECT, OPTIONAL))),
    "ObjectId": _Spec(
        code=101,
        callable=CallableKind.CONSTRUCTOR,
        args=((STRING, OPTIONAL),),
        attr=(
            (
                "from_datetime",
                "ObjectId.from_datetime",
                _Spec(code=101, callable=CallableKind.FUNCTION, args=((DATE, NUMERIC),), returns="ObjectId"),
            ),
        ),
    ),
    "Binary": _Spec(code=102, callable=CallableKind.CONSTRUCTOR, args=((STRING,), (NUMERIC, OPTIONAL))),
    "DBRef": _Spec(
        code=103,
        callable=CallableKind.CONSTRUCTOR,
        args=((STRING,), ("ObjectId", STRING, NUMERIC, OBJECT), (STRING, OPTIONAL)),
    ),
    "float": _Spec(code=104, callable=CallableKind.FUNCTION, args=((DECIMAL, STRING, OPTIONAL),), returns=DECIMAL),
    "int": _Spec(code=105, callable=CallableKind.FUNCTION, args=(_NUMBER_ARG,), returns=INTEGER),
    "Int64": _Spec(code=106, callable=CallableKind.CONSTRUCTOR, args=((LONG, STRING, OPTIONAL),)),
    "MinKey": _Spec(code=107, callable=CallableKind.CONSTRUCTOR),
    "MaxKey": _Spec(code=108, callable=CallableKind.CONSTRUCTOR),
    "Regex": _Spec(code=109, callable=CallableKind.CONSTRUCTOR, args=((STRING,), (STRING, OPTIONAL))),
    "Timestamp": _Spec(code=110, callable=CallableKind.CONSTRUCTOR, args=((INTEGER,), (INTEGER,))),
    "Decimal128": _Spec(code=112, callable=CallableKind.CONSTRUCTOR, args=((STRING, NUMERIC),)),
    "datetime": _Spec(
        code=200,
        callable=CallableKind.CONSTRUCTOR,
        args=(_DATE_PART,) * 7,
        returns=DATE,
    ),
    "re": _Spec(
        code=8,
        attr=(
            (
                "compile",
                "re.compile",
                _Spec(code=8, callable=CallableKind.FUNCTION, args=((STRING,), (REGEX_FLAG, OPTIONAL)), returns=REGEX),
            ),
        )
        + tuple((name, REGEX_FLAG, _Spec(code=8, value=flag)) for name, flag in _REGEX_FLAG_NAMES),
    ),
}

# Identifiers visible in source and the type id each one is bound to.
SYMBOL_NAMES: Tuple[str, ...] = tuple(_BSON_SPECS)


class TypeRegistry:
    """Immutable catalog of types for one target, plus the source symbol table."""

    def __init__(self, types: Mapping[str, Type], symbols: Mapping[str, Type]) -> None:
        self._types = MappingProxyType(dict(types))
        self._symbols = MappingProxyType(dict(symbols))

    @classmethod
    def build(cls, templates: Mapping[str, TypeTemplates]) -> "TypeRegistry":
        types: Dict[str, Type] = {}

        def make(type_id: str, spec: _Spec) -> Type:
            attr = {name: make(attr_id, attr_spec) for name, attr_id, attr_spec in spec.attr}
            hooks = templates.get(type_id, TypeTemplates())
            ty = Type(
                id=type_id,
                code=spec.code,
                callable=spec.callable,
                args=spec.args,
                attr=MappingProxyType(attr),
                returns=spec.returns,
                value=spec.value,
                template=hooks.template,
                args_template=hooks.args_template,
            )
            types.setdefault(type_id, ty)
            return ty

        for type_id, spec in _BASIC_SPECS.items():
            make(type_id, spec)
        symbols = {name: make(name, spec) for name, spec in _BSON_SPECS.items()}
        return cls(types, symbols)

    def __getitem__(self, type_id: str) -> Type:
        return self._types[type_id]

    def __contains__(self, type_id: str) -> bool:
        return type_id in self._types

    def lookup(self, name: str) -> Type:
        """Resolve a source identifier to its type."""
        ty = self._symbols.get(name)
        if ty is None:
            raise UndefinedSymbolError(f"Symbol '{name}' is undefined")
        return ty

    @property
    def symbols(self) -> Mapping[str, Type]:
        return self._symbols


def is_numeric(ty: Type) -> bool:
    return ty.id in NUMERIC_IDS


def is_domain_type(ty: Type) -> bool:
    """Closed, known types whose attribute set is complete."""
    return not ty.id.startswith("_") or ty.id == REGEX_FLAG


__all__ = [
    "ACCUMULATORS_CODE",
    "AGGREGATES_CODE",
    "ARRAY",
    "BOOL",
    "BUILDER_CODES",
    "CallableKind",
    "DATE",
    "DECIMAL",
    "FILTERS_CODE",
    "GEOJSON_CODE",
    "HEX",
    "INTEGER",
    "LONG",
    "MODEL_CODE",
    "NULL",
    "NUMERIC",
    "NUMERIC_IDS",
    "NUMERIC_WRAPPER_IDS",
    "OBJECT",
    "OCTAL",
    "OPTIONAL",
    "PROJECTIONS_CODE",
    "REGEX",
    "REGEX_FLAG",
    "SORTS_CODE",
    "STRING",
    "SYMBOL_NAMES",
    "Type",
    "TypeRegistry",
    "TypeTemplates",
    "UNDEFINED",
    "is_domain_type",
    "is_numeric",
]
