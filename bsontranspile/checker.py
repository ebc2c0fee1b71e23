"""
Argument checking and numeric casts for call expressions.

`check_arguments` validates arity and per-position types against a callable's
`args` spec and returns the rendered text of each argument. Numeric arguments
whose natural type differs from the expected one are re-rendered under the
expected type, so the text of a single node may be produced twice.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

from lark import Tree

from .context import CompileContext
from .errors import ArgumentError
from .types import NUMERIC, NUMERIC_IDS, NUMERIC_WRAPPER_IDS, OPTIONAL, ArgSpec, is_numeric

if TYPE_CHECKING:
    from .walker import Walker


def check_arguments(walker: "Walker", ctx: CompileContext, expected: ArgSpec, args: Sequence[Tree], name: str) -> List[str]:
    rendered: List[str] = []
    if not args:
        if not expected or OPTIONAL in expected[0]:
            return rendered
        raise ArgumentError(f"Argument count mismatch: '{name}' requires at least one argument")
    if len(args) > len(expected):
        raise ArgumentError(
            f"Argument count mismatch: '{name}' expects {len(expected)} args and got {len(args)}"
        )
    for index, accepted in enumerate(expected):
        if index >= len(args):
            if OPTIONAL in accepted:
                return rendered
            raise ArgumentError(f"Argument count mismatch: too few arguments passed to '{name}'")
        text = cast_type(walker, ctx, accepted, args[index])
        if text is None:
            names = [type_id if type_id is not None else "[optional]" for type_id in accepted]
            actual = ctx.type_of(args[index]).id
            raise ArgumentError(
                f"Argument type mismatch: '{name}' expects types {names} but got type {actual} "
                f"for argument at index {index}"
            )
        rendered.append(text)
    return rendered


def cast_type(walker: "Walker", ctx: CompileContext, accepted: Sequence[Optional[str]], node: Tree) -> Optional[str]:
    """Render `node` as one of the `accepted` type ids, or return None."""
    text = walker.visit(ctx, node)
    actual = ctx.type_of(node)

    if actual.id in accepted:
        return text

    # A generic numeric slot takes any numeric literal and the numeric wrappers as-is.
    if NUMERIC in accepted and (is_numeric(actual) or actual.id in NUMERIC_WRAPPER_IDS):
        return text

    if is_numeric(actual):
        for type_id in accepted:
            if type_id in NUMERIC_IDS:
                return walker.render_as(ctx, node, walker.registry[type_id])
    return None


__all__ = ["cast_type", "check_arguments"]
