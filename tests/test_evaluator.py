from __future__ import annotations

import pytest

from bsontranspile.errors import EvaluationError
from bsontranspile.evaluator import (
    INT64_MAX,
    canonical_number,
    check_int64,
    evaluate_binary,
    evaluate_date,
    evaluate_decimal128,
    evaluate_int64,
    evaluate_number,
    evaluate_object_id,
    evaluate_regex_flags,
    translate_flags,
)
from bsontranspile.types import DECIMAL, HEX, INTEGER, LONG, OCTAL


def test_evaluate_number_by_base() -> None:
    assert evaluate_number("0o17", OCTAL) == 15
    assert evaluate_number("017", OCTAL) == 15
    assert evaluate_number("0x1F", HEX) == 31
    assert evaluate_number("1.5", DECIMAL) == 1.5
    assert evaluate_number("0b101", INTEGER) == 5
    assert evaluate_number("1_000", INTEGER) == 1000
    assert evaluate_number("2.5", INTEGER) == 2.5


def test_evaluate_number_rejects_garbage() -> None:
    with pytest.raises(EvaluationError):
        evaluate_number("0o9", OCTAL)


def test_canonical_number() -> None:
    assert canonical_number(15, DECIMAL) == "15.0"
    assert canonical_number(31, HEX) == "0x1f"
    assert canonical_number(15, OCTAL) == "0o17"
    assert canonical_number(16, LONG) == "16"
    # integer targets truncate toward zero
    assert canonical_number(1.9, INTEGER) == "1"
    assert canonical_number(-1.9, INTEGER) == "-1"


def test_evaluate_date() -> None:
    assert evaluate_date([2020, 1, 1]).epoch_millis == 1577836800000
    assert evaluate_date([1970, 1, 1, 0, 0, 1, 500000]).epoch_millis == 1500
    assert evaluate_date([1969, 12, 31, 23, 59, 59]).epoch_millis == -1000


@pytest.mark.parametrize("parts", [[2020, 13, 1], [2020, 2, 30], [2020, 1]])
def test_evaluate_date_rejects_invalid(parts) -> None:
    with pytest.raises(EvaluationError):
        evaluate_date(parts)


def test_evaluate_object_id() -> None:
    assert evaluate_object_id("5AB901C29EE65F5C8550C5B9") == "5ab901c29ee65f5c8550c5b9"
    with pytest.raises(EvaluationError, match="24 character hex"):
        evaluate_object_id("xyz")


def test_evaluate_int64_bounds() -> None:
    assert evaluate_int64(" 12 ") == "12"
    assert evaluate_int64(str(INT64_MAX)) == str(INT64_MAX)
    with pytest.raises(EvaluationError, match="out of range"):
        evaluate_int64(str(INT64_MAX + 1))
    with pytest.raises(EvaluationError):
        evaluate_int64("1.5")


def test_check_int64() -> None:
    assert check_int64(1.9) == 1
    assert check_int64(-(2 ** 63)) == -(2 ** 63)
    with pytest.raises(EvaluationError, match="out of range"):
        check_int64(1e30)
    with pytest.raises(EvaluationError, match="out of range"):
        check_int64(float("inf"))


def test_evaluate_decimal128() -> None:
    assert evaluate_decimal128("1.50") == "1.50"
    assert evaluate_decimal128("nan") == "NaN"
    assert evaluate_decimal128("-inf") == "-Infinity"
    assert evaluate_decimal128("Infinity") == "Infinity"
    with pytest.raises(EvaluationError):
        evaluate_decimal128("abc")


def test_binary_subtypes() -> None:
    assert evaluate_binary("abc", 4) == (b"abc", 4)
    with pytest.raises(EvaluationError):
        evaluate_binary("abc", 7)


def test_regex_flags_are_deduplicated() -> None:
    assert evaluate_regex_flags(["i", "m", "i"]) == "im"
    assert evaluate_regex_flags([]) == ""
    with pytest.raises(EvaluationError, match="flag constants"):
        evaluate_regex_flags(["i", None])


def test_translate_flags() -> None:
    table = {"i": "i", "m": "m", "a": ""}
    assert translate_flags("iam", table) == "im"
    assert translate_flags("iz", table) == "i"
    assert translate_flags("ixl", {"i": "i"}, accepted="imxlsu") == "ixl"
    with pytest.raises(EvaluationError, match="Invalid flag 'c' passed to Regex"):
        translate_flags("ic", {}, accepted="imxlsu")
