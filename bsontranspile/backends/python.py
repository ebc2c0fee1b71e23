"""Python target (PyMongo / bson)."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from . import Backend
from ..evaluator import DateValue
from ..format import single_quote
from ..imports import ImportTable
from ..syntax import BSON_REGEX_FLAGS, SyntaxTable
from ..types import TypeRegistry, TypeTemplates

REGEX_FLAGS = {flag: flag for flag in "imsxual"}


def _dict(pairs: Sequence[Tuple[str, str]]) -> str:
    return "{" + ", ".join(f"{key}: {value}" for key, value in pairs) + "}"


def _from_datetime(lhs: str, arg: str, is_number: bool) -> str:
    if is_number:
        return f"{lhs}(datetime.datetime.fromtimestamp({arg}, datetime.timezone.utc))"
    return f"{lhs}({arg})"


def _date(lhs: str, date: Optional[DateValue]) -> str:
    if date is None:
        return "datetime.datetime.now(datetime.timezone.utc)"
    moment = date.moment
    parts = [moment.year, moment.month, moment.day, moment.hour, moment.minute, moment.second, moment.microsecond]
    while len(parts) > 3 and parts[-1] == 0:
        parts.pop()
    args = ", ".join(str(part) for part in parts)
    return f"datetime.datetime({args}, tzinfo=datetime.timezone.utc)"


def _compile(lhs: str, rendered: str, pattern: str, flags: str) -> str:
    if not flags:
        return f"{lhs}({rendered})"
    names = " | ".join(f"re.{flag.upper()}" for flag in flags)
    return f"{lhs}({rendered}, {names})"


TEMPLATES = {
    "_string": TypeTemplates(template=lambda body, type_id: single_quote(body)),
    "_object": TypeTemplates(template=_dict),
    "_array": TypeTemplates(template=lambda items: f"[{', '.join(items)}]"),
    "ObjectId.from_datetime": TypeTemplates(args_template=_from_datetime),
    "datetime": TypeTemplates(args_template=_date),
    "re.compile": TypeTemplates(args_template=_compile),
}

_EQUALITY = {"==": "==", "!=": "!=", "is": "is", "isnot": "is not"}
_CONTAINS = {"in": "in", "notin": "not in"}

SYNTAX = SyntaxTable(
    equality=lambda lhs, op, rhs: f"{lhs} {_EQUALITY[op]} {rhs}",
    contains=lambda lhs, op, rhs: f"{lhs} {_CONTAINS[op]} {rhs}",
    regex_flags=REGEX_FLAGS,
    bson_regex_flags={flag: flag for flag in BSON_REGEX_FLAGS},
)

_MODULES = {
    8: "import re",
    200: "import datetime",
}

_BSON_NAMES = {
    100: "Code",
    101: "ObjectId",
    103: "DBRef",
    106: "Int64",
    107: "MinKey",
    108: "MaxKey",
    109: "Regex",
    110: "Timestamp",
    112: "Decimal128",
}


def _fixed(text: str):
    return lambda names: text


def _import_block(fragments: Sequence[Tuple[int, str]]) -> str:
    """Module imports first, then one `from bson import ...` line in code order."""
    modules = [fragment for code, fragment in fragments if code in _MODULES]
    names = [fragment for code, fragment in fragments if code in _BSON_NAMES]
    lines = list(dict.fromkeys(modules))
    if names:
        lines.append(f"from bson import {', '.join(dict.fromkeys(names))}")
    return "\n".join(lines)


IMPORTS = ImportTable(
    templates={code: _fixed(text) for code, text in {**_MODULES, **_BSON_NAMES}.items()},
    block=_import_block,
)


def build() -> Backend:
    return Backend(name="python", registry=TypeRegistry.build(TEMPLATES), syntax=SYNTAX, imports=IMPORTS)
