"""
Literal evaluator.

A handful of constructors need a canonical value rather than re-emitted text:
dates (epoch milliseconds), ObjectIds (normalized hex), 64-bit integers,
Decimal128 strings, regex flag sets and binary payloads. This module computes
those values from already-parsed literal pieces. It never evaluates source
text as code.
"""

from __future__ import annotations

import datetime as _dt
import decimal
import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import EvaluationError
from .types import DECIMAL, HEX, OCTAL

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

BINARY_SUBTYPES = (0, 1, 2, 3, 4, 5, 128)

_OBJECT_ID = re.compile(r"^[0-9a-fA-F]{24}$")
_INTEGER_TEXT = re.compile(r"^[+-]?\d+$")
_EPOCH = _dt.datetime(1970, 1, 1, tzinfo=_dt.timezone.utc)


@dataclass(frozen=True)
class DateValue:
    moment: _dt.datetime

    @property
    def epoch_millis(self) -> int:
        delta = self.moment - _EPOCH
        return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def evaluate_number(text: str, type_id: str) -> Union[int, float]:
    """Numeric value of a literal; octal text is re-read as base 8."""
    clean = text.replace("_", "")
    try:
        if type_id == OCTAL:
            digits = clean[2:] if clean[:2].lower() == "0o" else clean
            return int(digits, 8)
        if type_id == HEX:
            return int(clean, 16)
        if type_id == DECIMAL:
            return float(clean)
        if clean[:2].lower() == "0b":
            return int(clean, 2)
        try:
            return int(clean, 10)
        except ValueError:
            return float(clean)
    except ValueError as exc:
        raise EvaluationError(f"Invalid numeric literal '{text}': {exc}") from exc


def canonical_number(value: Union[int, float], type_id: str) -> str:
    """Text of `value` as a literal of numeric type `type_id`."""
    if type_id == DECIMAL:
        return repr(float(value))
    number = int(value)
    if type_id == HEX:
        return hex(number)
    if type_id == OCTAL:
        return oct(number)
    return str(number)


def evaluate_date(parts: Sequence[int]) -> DateValue:
    """UTC date from (year, month, day[, hour, minute, second, microsecond])."""
    if not 3 <= len(parts) <= 7:
        raise EvaluationError(f"datetime needs between 3 and 7 components, got {len(parts)}")
    try:
        moment = _dt.datetime(*parts, tzinfo=_dt.timezone.utc)
    except (ValueError, OverflowError, TypeError) as exc:
        raise EvaluationError(f"Unable to construct date: {exc}") from exc
    return DateValue(moment)


def evaluate_object_id(text: str) -> str:
    if not _OBJECT_ID.match(text):
        raise EvaluationError(
            f"ObjectId requires a 24 character hex string, got '{text}'"
        )
    return text.lower()


def evaluate_int64(text: str) -> str:
    clean = text.strip().replace("_", "")
    if not _INTEGER_TEXT.match(clean):
        raise EvaluationError(f"Int64 requires an integer string, got '{text}'")
    return str(check_int64(int(clean, 10)))


def check_int64(value: Union[int, float]) -> int:
    """Integer part of `value`, which must fit in a signed 64-bit long."""
    try:
        number = int(value)
    except (OverflowError, ValueError) as exc:
        raise EvaluationError(f"Int64 value {value} is out of range") from exc
    if not INT64_MIN <= number <= INT64_MAX:
        raise EvaluationError(f"Int64 value {number} is out of range")
    return number


def evaluate_decimal128(text: str) -> str:
    try:
        value = decimal.Decimal(text.strip())
    except decimal.InvalidOperation as exc:
        raise EvaluationError(f"Decimal128 requires a numeric string, got '{text}'") from exc
    if value.is_nan():
        return "NaN"
    if value.is_infinite():
        return "-Infinity" if value.is_signed() else "Infinity"
    return str(value)


def evaluate_binary(data: str, subtype: int = 0) -> Tuple[bytes, int]:
    if subtype not in BINARY_SUBTYPES:
        raise EvaluationError(f"Unsupported binary subtype {subtype}")
    try:
        payload = data.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EvaluationError(f"Binary payload is not encodable: {exc}") from exc
    return payload, subtype


def evaluate_regex_flags(values: Iterable[Optional[str]]) -> str:
    """Flag characters of `re.<FLAG>` operands, deduplicated in first-seen order.

    A None value stands for an operand that is not a flag constant.
    """
    seen: List[str] = []
    for flag in values:
        if flag is None:
            raise EvaluationError("Regex flags must be re flag constants joined with |")
        if flag not in seen:
            seen.append(flag)
    return "".join(seen)


def translate_flags(flags: str, table: Mapping[str, str], accepted: Optional[str] = None) -> str:
    """Map each flag through `table`.

    Characters outside `accepted` are rejected; characters the table maps to
    the empty string are dropped.
    """
    out = []
    for char in flags:
        if accepted is not None and char not in accepted:
            raise EvaluationError(f"Invalid flag '{char}' passed to Regex")
        out.append(table.get(char, char if accepted is not None else ""))
    return "".join(out)


__all__ = [
    "BINARY_SUBTYPES",
    "DateValue",
    "INT64_MAX",
    "INT64_MIN",
    "canonical_number",
    "check_int64",
    "evaluate_binary",
    "evaluate_date",
    "evaluate_decimal128",
    "evaluate_int64",
    "evaluate_number",
    "evaluate_object_id",
    "evaluate_regex_flags",
    "translate_flags",
]
