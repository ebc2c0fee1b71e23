from __future__ import annotations

import pytest

from bsontranspile import (
    ArgumentError,
    AttributeAccessError,
    EvaluationError,
    NotCallableError,
    SourceSyntaxError,
    UndefinedSymbolError,
    UnimplementedError,
    compile_source,
)


def _java(source: str, idiomatic: bool = True) -> str:
    return compile_source(source, "java", idiomatic=idiomatic).code


def _java_imports(source: str, idiomatic: bool = True) -> str:
    return compile_source(source, "java", idiomatic=idiomatic).imports


@pytest.mark.parametrize(
    "source,expected",
    [
        ("1", "1L"),
        ("1.5", "1.5"),
        ("0x1F", "0x1F"),
        ("0o17", "15"),
        ("True", "true"),
        ("False", "false"),
        ("'abc'", '"abc"'),
        ('"abc"', '"abc"'),
        ("'it\"s'", '"it\\"s"'),
        ("[]", "Arrays.asList()"),
        ("[1, 'a']", 'Arrays.asList(1L, "a")'),
    ],
)
def test_literals(source: str, expected: str) -> None:
    assert _java(source) == expected


def test_none_imports_bson_null() -> None:
    result = compile_source("None", "java")
    assert result.code == "new BsonNull()"
    assert result.imports == "import org.bson.BsonNull;"


def test_array_imports_arrays() -> None:
    assert _java_imports("[1]") == "import java.util.Arrays;"


@pytest.mark.parametrize(
    "source,expected",
    [
        ("1 + 2", "1L + 2L"),
        ("(1 + 2) * 3", "(1L + 2L) * 3L"),
        ("10 // 3", "Math.floorDiv(10L, 3L)"),
        ("10 // 3 // 2", "Math.floorDiv(Math.floorDiv(10L, 3L), 2L)"),
        ("2 ** 3", "(long) Math.pow(2L, 3L)"),
        ("-1", "-1L"),
        ("1 == 2", "1L == 2L"),
        ("1 != 2", "1L != 2L"),
        ("1 is None", "1L == new BsonNull()"),
        ("1 is not None", "1L != new BsonNull()"),
        ("1 < 2 < 3", "1L < 2L && 2L < 3L"),
        ("1 in [1, 2]", "Arrays.asList(1L, 2L).contains(1L)"),
        ("1 not in [1, 2]", "!Arrays.asList(1L, 2L).contains(1L)"),
        ("not True", "!true"),
        ("True and False", "true && false"),
        ("True or False", "true || false"),
    ],
)
def test_operators(source: str, expected: str) -> None:
    assert _java(source) == expected


def test_statements_are_rendered_one_per_line() -> None:
    assert _java("1\n2") == "1L\n2L"
    assert _java("1; 2") == "1L\n2L"


@pytest.mark.parametrize(
    "source,expected",
    [
        ("int('5')", 'Integer.parseInt("5")'),
        ("int(5)", "5"),
        ("int(0o17)", "15"),
        ("int()", "0"),
        ("float(1)", "1.0d"),
        ("float(0o17)", "15.0d"),
        ("float('1.5')", 'Double.parseDouble("1.5")'),
        ("float()", "0.0d"),
        ("Int64(5)", "5L"),
        ("Int64('12')", "12L"),
        ("Int64(0x10)", "16L"),
        ("Int64()", "0L"),
    ],
)
def test_number_constructors(source: str, expected: str) -> None:
    assert _java(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("Timestamp(1, 2)", "new BSONTimestamp(1, 2)"),
        ("Timestamp(0x10, 0o17)", "new BSONTimestamp(16, 15)"),
        ("Timestamp(1.9, 2)", "new BSONTimestamp(1, 2)"),
        ("Timestamp(-1, 2)", "new BSONTimestamp(-1, 2)"),
    ],
)
def test_timestamp_casts_numeric_arguments(source: str, expected: str) -> None:
    assert _java(source) == expected


def test_int64_string_out_of_range() -> None:
    with pytest.raises(EvaluationError):
        _java("Int64('9223372036854775808')")


@pytest.mark.parametrize("source", ["Int64(1e30)", "Int64(9223372036854775808)", "Int64(-0x8000000000000001)"])
def test_int64_number_out_of_range(source: str) -> None:
    with pytest.raises(EvaluationError, match="out of range"):
        _java(source)


def test_int64_number_at_the_bounds() -> None:
    assert _java("Int64(9223372036854775807)") == "9223372036854775807L"
    assert _java("Int64(-9223372036854775808)") == "-9223372036854775808L"


@pytest.mark.parametrize(
    "source,expected",
    [
        ("Decimal128(0x10)", 'Decimal128.parse("16")'),
        ("Decimal128(0o17)", 'Decimal128.parse("15")'),
        ("Decimal128(-0o17)", 'Decimal128.parse("-15")'),
        ("Decimal128(1_000)", 'Decimal128.parse("1000")'),
        ("Decimal128(2.5)", 'Decimal128.parse("2.5")'),
    ],
)
def test_decimal128_reads_number_values(source: str, expected: str) -> None:
    assert _java(source) == expected


def test_bson_constructors() -> None:
    assert _java("MinKey()") == "new MinKey()"
    assert _java("MaxKey()") == "new MaxKey()"
    assert _java("ObjectId()") == "new ObjectId()"
    assert _java("ObjectId('5AB901C29EE65F5C8550C5B9')") == 'new ObjectId("5ab901c29ee65f5c8550c5b9")'
    assert _java("Code('x')") == 'new Code("x")'
    assert _java("Regex('a', 'im')") == 'new BsonRegularExpression("a", "im")'
    assert _java("Regex('a')") == 'new BsonRegularExpression("a")'
    assert _java("Decimal128('1.5')") == 'Decimal128.parse("1.5")'
    assert _java("Decimal128(1)") == 'Decimal128.parse("1")'
    assert _java("Decimal128('nan')") == 'Decimal128.parse("NaN")'


def test_dbref() -> None:
    result = compile_source("DBRef('coll', ObjectId('5ab901c29ee65f5c8550c5b9'), 'db')", "java")
    assert result.code == 'new DBRef("db", "coll", new ObjectId("5ab901c29ee65f5c8550c5b9"))'
    assert result.imports == "import org.bson.types.ObjectId;\nimport com.mongodb.DBRef;"
    assert _java("DBRef('coll', 1)") == 'new DBRef("coll", 1L)'


def test_object_id_validation() -> None:
    with pytest.raises(EvaluationError):
        _java("ObjectId('xyz')")


def test_regex_flag_validation() -> None:
    with pytest.raises(EvaluationError, match="Invalid flag 'c' passed to Regex"):
        _java("Regex('a', 'c')")


def test_code_scope_is_always_a_document() -> None:
    result = compile_source("Code('code', {'x': 1})", "java")
    assert result.code == 'new CodeWithScope("code", new Document("x", 1L))'
    assert result.imports == "\n".join(
        [
            "import org.bson.Document;",
            "import org.bson.types.Code;",
            "import org.bson.types.CodeWithScope;",
        ]
    )


def test_dates() -> None:
    assert _java("datetime(2020, 1, 1)") == "new java.util.Date(1577836800000L)"
    assert _java("datetime(1970, 1, 1, 0, 0, 1)") == "new java.util.Date(1000L)"
    assert _java("datetime()") == "new java.util.Date()"
    assert _java_imports("datetime()") == ""


def test_date_errors() -> None:
    with pytest.raises(ArgumentError, match="needs at least 3, got 2"):
        _java("datetime(2020, 1)")
    with pytest.raises(ArgumentError, match="either no args or up to 7 numbers"):
        _java("datetime('2020', 1, 1)")
    with pytest.raises(EvaluationError):
        _java("datetime(2020, 13, 1)")


def test_object_id_from_datetime() -> None:
    assert (
        _java("ObjectId.from_datetime(datetime(2020, 1, 1))")
        == "new ObjectId(new java.util.Date(1577836800000L))"
    )
    assert _java("ObjectId.from_datetime(1000)") == "new ObjectId(new java.util.Date(1000L))"
    assert _java_imports("ObjectId.from_datetime(1000)") == "import org.bson.types.ObjectId;"


def test_re_compile() -> None:
    result = compile_source("re.compile('a+b', re.I | re.M)", "java")
    assert result.code == 'Pattern.compile("a+b(?im)")'
    assert result.imports == "import java.util.regex.Pattern;"
    assert _java("re.compile('a+b')") == 'Pattern.compile("a+b")'
    assert _java("re.compile('a', re.I | re.I | re.A)") == 'Pattern.compile("a(?i)")'
    assert _java("re.I") == "Pattern.CASE_INSENSITIVE"


def test_re_compile_rejects_non_flag_operands() -> None:
    with pytest.raises(ArgumentError):
        _java("re.compile('a', 1)")


def test_binary_is_not_supported() -> None:
    with pytest.raises(UnimplementedError, match="Binary type not supported"):
        _java("Binary('abc', 0)")
    with pytest.raises(UnimplementedError):
        _java("Binary()")


@pytest.mark.parametrize(
    "source,message",
    [
        ("MinKey(1)", "Argument count mismatch: 'MinKey' expects 0 args and got 1"),
        ("Timestamp(1)", "too few arguments passed to 'Timestamp'"),
        ("Code()", "'Code' requires at least one argument"),
        ("Timestamp('a', 1)", "got type _string for argument at index 0"),
    ],
)
def test_argument_errors(source: str, message: str) -> None:
    with pytest.raises(ArgumentError) as excinfo:
        _java(source)
    assert message in str(excinfo.value)


def test_name_errors() -> None:
    with pytest.raises(UndefinedSymbolError, match="Symbol 'Foo' is undefined"):
        _java("Foo()")
    with pytest.raises(AttributeAccessError, match="'foo' not an attribute of ObjectId"):
        _java("ObjectId.foo")
    with pytest.raises(NotCallableError, match="_undefined is not callable"):
        _java("'abc'.upper()")


@pytest.mark.parametrize(
    "source,message",
    [
        ("x = 1", "Assignment not yet implemented"),
        ("x += 1", "Assignment not yet implemented"),
        ("if True:\n    1", "'if' not yet implemented"),
        ("while True:\n    1", "'while' not yet implemented"),
        ("[x for x in y]", "Comprehensions not yet implemented"),
        ("{'a': x for x in y}", "Comprehensions not yet implemented"),
        ("[1][0]", "Indexing not currently supported"),
        ("lambda: 1", "'lambdef' not yet implemented"),
        ("ObjectId(oid='a')", "Keyword arguments not yet implemented"),
    ],
)
def test_unsupported_syntax(source: str, message: str) -> None:
    with pytest.raises(UnimplementedError) as excinfo:
        _java(source)
    assert message in str(excinfo.value)


def test_syntax_error() -> None:
    with pytest.raises(SourceSyntaxError) as excinfo:
        _java("{'x': }")
    assert excinfo.value.code == "E_SYNTAX"
