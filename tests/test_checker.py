from __future__ import annotations

import pytest

from bsontranspile.backends import get_backend
from bsontranspile.checker import cast_type, check_arguments
from bsontranspile.context import CompileContext
from bsontranspile.errors import ArgumentError
from bsontranspile.parser import call_arguments, iter_tree, name_of, normalize_source, parse_source
from bsontranspile.types import DECIMAL, INTEGER, NUMERIC, OPTIONAL, STRING
from bsontranspile.walker import Walker


def _call_args(source: str):
    tree = parse_source(source)
    call = next(node for node in iter_tree(tree) if name_of(node) == "function_call")
    return CompileContext(source=normalize_source(source)), call_arguments(call)


@pytest.fixture
def walker() -> Walker:
    return Walker(get_backend("java"))


def test_exact_types_render_naturally(walker: Walker) -> None:
    ctx, args = _call_args("f('a', 1)")
    assert check_arguments(walker, ctx, ((STRING,), (NUMERIC,)), args, "f") == ['"a"', "1L"]


def test_numeric_casts_follow_the_first_numeric_slot(walker: Walker) -> None:
    ctx, args = _call_args("f(0o17, 2, 3.7)")
    rendered = check_arguments(walker, ctx, ((DECIMAL,), (INTEGER, STRING), (INTEGER,)), args, "f")
    assert rendered == ["15.0", "2", "3"]
    assert ctx.type_of(args[0]).id == DECIMAL
    assert ctx.original_type_of(args[0]).id == "_octal"


def test_optional_positions(walker: Walker) -> None:
    ctx, args = _call_args("f()")
    assert check_arguments(walker, ctx, ((STRING, OPTIONAL),), args, "f") == []
    ctx, args = _call_args("f('a')")
    assert check_arguments(walker, ctx, ((STRING,), (STRING, OPTIONAL)), args, "f") == ['"a"']


def test_mismatch_names_expected_types(walker: Walker) -> None:
    ctx, args = _call_args("f(True)")
    with pytest.raises(ArgumentError) as excinfo:
        check_arguments(walker, ctx, ((STRING, OPTIONAL),), args, "f")
    assert str(excinfo.value) == (
        "Argument type mismatch: 'f' expects types ['_string', '[optional]'] "
        "but got type _bool for argument at index 0"
    )


def test_cast_type_rejects_non_numeric(walker: Walker) -> None:
    ctx, args = _call_args("f('a')")
    assert cast_type(walker, ctx, (INTEGER,), args[0]) is None
