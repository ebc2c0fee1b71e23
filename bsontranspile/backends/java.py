"""Java target (MongoDB Java driver)."""

from __future__ import annotations

import re
from typing import Callable, Dict, Optional, Sequence, Tuple

from . import Backend
from ..evaluator import DateValue, evaluate_number
from ..format import double_quote
from ..imports import ImportTable
from ..syntax import BSON_REGEX_FLAGS, BuilderTable, BuilderTemplate, SyntaxTable
from ..types import (
    ACCUMULATORS_CODE,
    AGGREGATES_CODE,
    FILTERS_CODE,
    GEOJSON_CODE,
    MODEL_CODE,
    OCTAL,
    PROJECTIONS_CODE,
    SORTS_CODE,
    STRING,
    TypeRegistry,
    TypeTemplates,
)

# Constructors that are static factories or plain literals in Java.
_NO_NEW = frozenset({104, 105, 106, 112})

_PATTERN_FLAGS = {
    "I": "Pattern.CASE_INSENSITIVE",
    "IGNORECASE": "Pattern.CASE_INSENSITIVE",
    "M": "Pattern.MULTILINE",
    "MULTILINE": "Pattern.MULTILINE",
    "S": "Pattern.DOTALL",
    "DOTALL": "Pattern.DOTALL",
    "X": "Pattern.COMMENTS",
    "VERBOSE": "Pattern.COMMENTS",
    "U": "Pattern.UNICODE_CASE",
    "UNICODE": "Pattern.UNICODE_CASE",
}

REGEX_FLAGS = {"i": "i", "m": "m", "s": "s", "x": "x", "u": "u", "a": "", "l": "", "g": ""}


def _document(pairs: Sequence[Tuple[str, str]]) -> str:
    if not pairs:
        return "new Document()"
    (key, value), rest = pairs[0], pairs[1:]
    return f"new Document({key}, {value})" + "".join(f".append({k}, {v})" for k, v in rest)


def _octal(text: str, type_id: str) -> str:
    return str(evaluate_number(text, OCTAL))


def _code(lhs: str, code: str, scope: Optional[str]) -> str:
    if scope is None:
        return f"Code({code})"
    return f"CodeWithScope({code}, {scope})"


def _object_id(lhs: str, hexstr: Optional[str]) -> str:
    return f"{lhs}({hexstr or ''})"


def _from_datetime(lhs: str, arg: str, is_number: bool) -> str:
    if is_number:
        return f"new ObjectId(new java.util.Date({arg}))"
    return f"new ObjectId({arg})"


def _db_ref(lhs: str, collection: str, oid: str, database: Optional[str] = None) -> str:
    if database is None:
        return f"{lhs}({collection}, {oid})"
    return f"{lhs}({database}, {collection}, {oid})"


def _double(lhs: str, arg: Optional[str], type_id: Optional[str]) -> str:
    if arg is None:
        return "0.0d"
    if type_id == STRING:
        return f"Double.parseDouble({arg})"
    return f"{arg}d"


def _int(lhs: str, arg: Optional[str], type_id: Optional[str]) -> str:
    if arg is None:
        return "0"
    if type_id == STRING:
        return f"Integer.parseInt({arg})"
    return arg


def _int64(lhs: str, arg: Optional[str], type_id: Optional[str]) -> str:
    return "0L" if arg is None else arg


def _date(lhs: str, date: Optional[DateValue]) -> str:
    if date is None:
        return f"{lhs}()"
    return f"{lhs}({date.epoch_millis}L)"


def _compile(lhs: str, rendered: str, pattern: str, flags: str) -> str:
    # Only the first backslash is re-escaped.
    escaped = re.sub(r"\\(?!/)", r"\\\\", pattern, count=1)
    suffix = f"(?{flags})" if flags else ""
    return f"Pattern.compile({double_quote(escaped + suffix)})"


def _pattern_flag(lhs: str, rhs: str) -> str:
    return _PATTERN_FLAGS.get(rhs, f"{lhs}.{rhs}")


TEMPLATES = {
    "_string": TypeTemplates(template=lambda body, type_id: double_quote(body)),
    "_long": TypeTemplates(template=lambda text, type_id: f"{text}L"),
    "_octal": TypeTemplates(template=_octal),
    "_bool": TypeTemplates(template=lambda text, type_id: text.lower()),
    "_null": TypeTemplates(template=lambda text, type_id: "new BsonNull()"),
    "_object": TypeTemplates(template=_document),
    "_array": TypeTemplates(template=lambda items: f"Arrays.asList({', '.join(items)})"),
    "_regex_flag": TypeTemplates(template=_pattern_flag),
    "Code": TypeTemplates(args_template=_code),
    "ObjectId": TypeTemplates(args_template=_object_id),
    "ObjectId.from_datetime": TypeTemplates(args_template=_from_datetime),
    "DBRef": TypeTemplates(args_template=_db_ref),
    "float": TypeTemplates(args_template=_double),
    "int": TypeTemplates(args_template=_int),
    "Int64": TypeTemplates(args_template=_int64),
    "Regex": TypeTemplates(template=lambda: "BsonRegularExpression"),
    "Timestamp": TypeTemplates(template=lambda: "BSONTimestamp"),
    "Decimal128": TypeTemplates(args_template=lambda lhs, value: f"Decimal128.parse({value})"),
    "datetime": TypeTemplates(template=lambda: "java.util.Date", args_template=_date),
    "re.compile": TypeTemplates(args_template=_compile),
}


def _helper(code: int, name: str) -> BuilderTemplate:
    return BuilderTemplate(code, name, lambda *args: f"{name}({', '.join(args)})")


def _class(code: int, name: str) -> BuilderTemplate:
    return BuilderTemplate(code, name, lambda *args: f"new {name}({', '.join(args)})")


def _near(name: str) -> BuilderTemplate:
    def render(field: str, point: str, maximum: Optional[str], minimum: Optional[str]) -> str:
        return f"{name}({field}, {point}, {maximum or 'null'}, {minimum or 'null'})"

    return BuilderTemplate(FILTERS_CODE, name, render)


def _graph_lookup_options(*options: Tuple[str, str]) -> str:
    return "new GraphLookupOptions()" + "".join(f".{method}({value})" for method, value in options)


def _family(code: int, names: Sequence[str]) -> Dict[str, BuilderTemplate]:
    return {f"${name}": _helper(code, name) for name in names}


FILTERS = {
    **_family(
        FILTERS_CODE,
        (
            "eq", "ne", "gt", "gte", "lt", "lte", "in", "nin", "all", "size", "exists", "type",
            "bitsAllClear", "bitsAllSet", "bitsAnyClear", "bitsAnySet", "and", "or", "nor", "not",
            "expr", "where", "text", "regex", "mod", "elemMatch", "geoWithin", "geoIntersects",
        ),
    ),
    "eq": _helper(FILTERS_CODE, "eq"),
    "$box": _helper(FILTERS_CODE, "geoWithinBox"),
    "$polygon": _helper(FILTERS_CODE, "geoWithinPolygon"),
    "$center": _helper(FILTERS_CODE, "geoWithinCenter"),
    "$centerSphere": _helper(FILTERS_CODE, "geoWithinCenterSphere"),
    "$near": _near("near"),
    "$nearSphere": _near("nearSphere"),
}

BUILDERS = BuilderTable(
    filters=FILTERS,
    aggregates=_family(
        AGGREGATES_CODE,
        (
            "count", "facet", "graphLookup", "group", "limit", "lookup", "match", "out", "project",
            "replaceRoot", "sample", "skip", "sort", "sortByCount", "unwind",
        ),
    ),
    accumulators=_family(
        ACCUMULATORS_CODE,
        ("sum", "avg", "first", "last", "max", "min", "push", "addToSet", "stdDevPop", "stdDevSamp"),
    ),
    projections={name: _helper(PROJECTIONS_CODE, name) for name in ("fields", "include", "exclude", "excludeId")},
    sorts={name: _helper(SORTS_CODE, name) for name in ("ascending", "descending", "metaTextScore", "orderBy")},
    geojson={
        name: _class(GEOJSON_CODE, name)
        for name in (
            "Point", "MultiPoint", "LineString", "MultiLineString", "Polygon", "MultiPolygon",
            "GeometryCollection", "PolygonCoordinates", "Position",
        )
    },
    model={
        "Facet": _class(MODEL_CODE, "Facet"),
        "GraphLookupOptions": BuilderTemplate(MODEL_CODE, "GraphLookupOptions", _graph_lookup_options),
    },
)

_EQUALITY = {"==": "==", "!=": "!=", "is": "==", "isnot": "!="}


def _contains(lhs: str, op: str, rhs: str) -> str:
    if op == "notin":
        return f"!{rhs}.contains({lhs})"
    return f"{rhs}.contains({lhs})"


SYNTAX = SyntaxTable(
    equality=lambda lhs, op, rhs: f"{lhs} {_EQUALITY[op]} {rhs}",
    contains=_contains,
    and_=lambda operands: " && ".join(operands),
    or_=lambda operands: " || ".join(operands),
    not_=lambda operand: f"!{operand}",
    power=lambda base, exponent: f"(long) Math.pow({base}, {exponent})",
    floor_div=lambda lhs, rhs: f"Math.floorDiv({lhs}, {rhs})",
    new=lambda expr, skip_new, code: expr if skip_new or code in _NO_NEW else f"new {expr}",
    regex_flags=REGEX_FLAGS,
    bson_regex_flags={flag: flag for flag in BSON_REGEX_FLAGS},
    builders=BUILDERS,
)


def _fixed(statement: str) -> Callable[[Optional[Sequence[str]]], str]:
    return lambda names: statement


_IMPORT_LINES = {
    8: "import java.util.regex.Pattern;",
    9: "import java.util.Arrays;",
    10: "import org.bson.Document;",
    11: "import org.bson.BsonNull;",
    100: "import org.bson.types.Code;",
    101: "import org.bson.types.ObjectId;",
    103: "import com.mongodb.DBRef;",
    107: "import org.bson.types.MinKey;",
    108: "import org.bson.types.MaxKey;",
    109: "import org.bson.BsonRegularExpression;",
    110: "import org.bson.types.BSONTimestamp;",
    112: "import org.bson.types.Decimal128;",
    113: "import org.bson.types.CodeWithScope;",
}


def _names(statement: str) -> Callable[[Optional[Sequence[str]]], str]:
    """One import line per helper name, sorted and unique."""
    return lambda names: "\n".join(statement.format(name) for name in sorted(set(names or ())))


_BUILDER_IMPORTS = {
    FILTERS_CODE: "import static com.mongodb.client.model.Filters.{};",
    AGGREGATES_CODE: "import static com.mongodb.client.model.Aggregates.{};",
    ACCUMULATORS_CODE: "import static com.mongodb.client.model.Accumulators.{};",
    PROJECTIONS_CODE: "import static com.mongodb.client.model.Projections.{};",
    SORTS_CODE: "import static com.mongodb.client.model.Sorts.{};",
    GEOJSON_CODE: "import com.mongodb.client.model.geojson.{};",
    MODEL_CODE: "import com.mongodb.client.model.{};",
}


IMPORTS = ImportTable(
    templates={
        **{code: _fixed(statement) for code, statement in _IMPORT_LINES.items()},
        **{code: _names(statement) for code, statement in _BUILDER_IMPORTS.items()},
    },
)


def build() -> Backend:
    return Backend(name="java", registry=TypeRegistry.build(TEMPLATES), syntax=SYNTAX, imports=IMPORTS)
