"""
Decorated tree walker.

The walker renders a parsed program into target text while synthesizing a type
for every node it visits. Types are recorded on the per-call `CompileContext`,
never on the tree itself.

Dispatch happens in three layers:

* node category (the lark rule name) selects a handler from `_handlers`;
* for call expressions, the callee's type id selects a process hook, then an
  emit hook, before falling back to generic rendering through the type's
  `template` / `args_template`;
* unsupported syntax raises `UnimplementedError` from the same category table.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Tuple, Union

from lark import Token, Tree

from .builders import QueryBuilder
from .checker import check_arguments
from .context import CompileContext
from .errors import (
    ArgumentError,
    AttributeAccessError,
    EvaluationError,
    NotCallableError,
    UnimplementedError,
)
from .evaluator import (
    canonical_number,
    check_int64,
    evaluate_date,
    evaluate_decimal128,
    evaluate_int64,
    evaluate_number,
    evaluate_object_id,
    evaluate_regex_flags,
    translate_flags,
)
from .format import remove_quotes, string_body, string_value
from .parser import (
    Node,
    call_arguments,
    call_target,
    is_pass_through,
    leaf_token,
    name_of,
    node_text,
    operator_tokens,
    skip_pass_through,
    subtrees,
)
from .syntax import BSON_REGEX_FLAGS, SyntaxTable
from .types import (
    ARRAY,
    ARRAY_CODE,
    BINARY_LITERAL,
    BOOL,
    DATE,
    DECIMAL,
    HEX,
    LONG,
    NULL,
    OBJECT,
    OBJECT_CODE,
    OCTAL,
    CODE_WITH_SCOPE,
    STRING,
    UNDEFINED,
    CallableKind,
    Type,
    TypeRegistry,
    is_domain_type,
)

if TYPE_CHECKING:
    from .backends import Backend

logger = logging.getLogger(__name__)

Handler = Callable[[CompileContext, Tree], str]
CallHook = Callable[[CompileContext, Tree, Type, str], str]

# Natural type of each literal category.
_LITERAL_TYPES: Dict[str, str] = {
    "integer_literal": LONG,
    "float_literal": DECIMAL,
    "hex_literal": HEX,
    "oct_literal": OCTAL,
    "bin_literal": BINARY_LITERAL,
    "imag_literal": LONG,
    "boolean_literal": BOOL,
    "none_literal": NULL,
}
_NUMBER_LITERALS = frozenset(
    {"integer_literal", "float_literal", "hex_literal", "oct_literal", "bin_literal", "imag_literal"}
)

_UNSUPPORTED = (
    "del_stmt",
    "pass_stmt",
    "flow_stmt",
    "import_stmt",
    "global_stmt",
    "nonlocal_stmt",
    "assert_stmt",
    "if_stmt",
    "while_stmt",
    "for_stmt",
    "try_stmt",
    "with_stmt",
    "funcdef",
    "classdef",
    "decorated",
    "async_stmt",
    "star_expr",
    "star_argument",
    "inline_if",
    "lambdef",
    "ellipsis_atom",
)
_UNSUPPORTED_MESSAGES = {
    "annassign": "Assignment not yet implemented",
    "augassign": "Assignment not yet implemented",
    "assign_stmt": "Assignment not yet implemented",
    "comp_for": "Comprehensions not yet implemented",
    "comp_if": "Comprehensions not yet implemented",
    "keyword_argument": "Keyword arguments not yet implemented",
}

_EQUALITY_OPS = frozenset({"==", "!=", "is", "isnot"})
_CONTAINS_OPS = frozenset({"in", "notin"})


class Walker:
    """Renders parse trees for one backend. Holds no per-call state."""

    def __init__(self, backend: "Backend") -> None:
        self.backend = backend
        self.builder = QueryBuilder(self, backend.syntax.builders) if backend.syntax.builders is not None else None
        self._handlers: Dict[str, Handler] = {
            "file_input": self._file_input,
            "simple_stmt": self._simple_stmt,
            "expr_stmt": self._expr_stmt,
            "testlist_star_expr": self._testlist,
            "argument": self._argument,
            "string_literal": self._string_literal,
            "object_literal": self._object_literal,
            "array_literal": self._array_literal,
            "set_literal": self._set_literal,
            "or_test": self._or_test,
            "and_test": self._and_test,
            "not_test": self._not_test,
            "comparison": self._comparison,
            "expr": self._binary_chain,
            "xor_expr": self._binary_chain,
            "and_expr": self._binary_chain,
            "shift_expr": self._binary_chain,
            "arith_expr": self._binary_chain,
            "term": self._binary_chain,
            "factor": self._factor,
            "power": self._power,
            "function_call": self._function_call,
            "attribute_access": self._attribute_access,
            "index_access": self._index_access,
            "identifier": self._identifier,
        }
        for category, type_id in _LITERAL_TYPES.items():
            self._handlers[category] = self._literal_handler(type_id)
        for category in _UNSUPPORTED:
            self._handlers[category] = self._unsupported
        for category in _UNSUPPORTED_MESSAGES:
            self._handlers[category] = self._unsupported

        # Checked in order: process hooks see the raw call before any generic
        # handling, emit hooks replace generic rendering entirely.
        self._process_hooks: Dict[str, CallHook] = {
            "int": self._process_number,
            "float": self._process_number,
            "Int64": self._process_number,
            "Regex": self._process_regex,
            "Code": self._process_code,
            "datetime": self._process_datetime,
            "ObjectId.from_datetime": self._process_from_datetime,
            "Binary": self._process_binary,
            "re.compile": self._process_re_compile,
        }
        self._emit_hooks: Dict[str, CallHook] = {
            "ObjectId": self._emit_object_id,
            "Decimal128": self._emit_decimal128,
        }
        self._call_hooks: Tuple[Dict[str, CallHook], ...] = (self._process_hooks, self._emit_hooks)

    @property
    def registry(self) -> TypeRegistry:
        return self.backend.registry

    @property
    def syntax(self) -> SyntaxTable:
        return self.backend.syntax

    # Traversal

    def visit(self, ctx: CompileContext, node: Node) -> str:
        if isinstance(node, Token):
            return node.value
        handler = self._handlers.get(name_of(node))
        if handler is not None:
            return handler(ctx, node)
        if is_pass_through(node):
            return self._collapse(ctx, node)
        return self._visit_children(ctx, node)

    def _collapse(self, ctx: CompileContext, node: Tree) -> str:
        child = node.children[0]
        text = self.visit(ctx, child)
        ctx.set_type(node, ctx.type_of(child))
        return text

    def _visit_children(self, ctx: CompileContext, node: Tree) -> str:
        text = "".join(self.visit(ctx, child) for child in node.children)
        first = node.children[0] if node.children else None
        if isinstance(first, Tree):
            ctx.set_type(node, ctx.type_of(first))
        else:
            ctx.set_type(node, self.registry[UNDEFINED])
        return text

    def render_as(self, ctx: CompileContext, node: Tree, expected: Type) -> str:
        """Render a numeric node as if its natural type were `expected`.

        Literals are re-read from their source text so an octal literal keeps its
        base-8 value. Other numeric expressions keep their natural rendering.
        """
        original = ctx.original_type_of(node)
        chain = [node]
        while is_pass_through(chain[-1]):
            chain.append(chain[-1].children[0])
        target = chain[-1]
        category = name_of(target)

        if category == "factor":
            sign = operator_tokens(target)[0].value
            text = sign + self.render_as(ctx, subtrees(target)[0], expected)
        elif category in _NUMBER_LITERALS:
            value = evaluate_number(leaf_token(target).value, original.id)
            ctx.imports.touch(expected.code)
            text = self._literal_text(expected, canonical_number(value, expected.id), original)
        else:
            text = self.visit(ctx, node)

        for link in chain:
            ctx.cast(link, expected, original)
        return text

    # Statements

    def _file_input(self, ctx: CompileContext, node: Tree) -> str:
        statements = [self.visit(ctx, stmt) for stmt in subtrees(node)]
        ctx.set_type(node, self.registry[UNDEFINED])
        eof = self.syntax.eof() if self.syntax.eof is not None else ""
        return "\n".join(statements) + eof

    def _simple_stmt(self, ctx: CompileContext, node: Tree) -> str:
        eos = self.syntax.eos() if self.syntax.eos is not None else ""
        lines = [self.visit(ctx, small) + eos for small in subtrees(node)]
        ctx.set_type(node, ctx.type_of(node.children[0]))
        return "\n".join(lines)

    def _expr_stmt(self, ctx: CompileContext, node: Tree) -> str:
        if len(node.children) > 1:
            return self._unsupported(ctx, node.children[1])
        return self._collapse(ctx, node)

    def _testlist(self, ctx: CompileContext, node: Tree) -> str:
        if is_pass_through(node):
            return self._collapse(ctx, node)
        # A bare tuple renders like a parenthesized one.
        return self._sequence(ctx, node, subtrees(node))

    def _argument(self, ctx: CompileContext, node: Tree) -> str:
        if len(node.children) > 1:
            return self._unsupported(ctx, node.children[1])
        return self._collapse(ctx, node)

    def _unsupported(self, ctx: CompileContext, node: Tree) -> str:
        category = name_of(node)
        message = _UNSUPPORTED_MESSAGES.get(category)
        if message is None:
            message = f"'{category.replace('_stmt', '')}' not yet implemented"
        raise UnimplementedError(message, line=_line(node), column=_column(node))

    # Literals

    def _literal_handler(self, type_id: str) -> Handler:
        def handler(ctx: CompileContext, node: Tree) -> str:
            ty = self.registry[type_id]
            ctx.set_type(node, ty)
            ctx.imports.touch(ty.code)
            return self._literal_text(ty, leaf_token(node).value, ctx.original_type_of(node))

        return handler

    def _literal_text(self, ty: Type, text: str, original: Type) -> str:
        # Templates get the type the literal was written as, not the cast one.
        if ty.template is not None:
            return ty.template(text, original.id)
        return text

    def _string_literal(self, ctx: CompileContext, node: Tree) -> str:
        ty = self.registry[STRING]
        ctx.set_type(node, ty)
        ctx.imports.touch(ty.code)
        body = "".join(string_body(token.value) for token in node.children)
        if ty.template is not None:
            return ty.template(body, ty.id)
        return f"'{body}'"

    def _object_literal(self, ctx: CompileContext, node: Tree) -> str:
        maker = node.children[0] if node.children else None
        entries: List[Tree] = subtrees(maker) if maker is not None else []
        if any(name_of(entry) == "comp_for" for entry in entries):
            raise UnimplementedError("Comprehensions not yet implemented", line=_line(node), column=_column(node))
        if entries and name_of(entries[0]) != "key_value":
            # `{a, b}` is a set, which has no document form.
            return self._sequence(ctx, node, entries)

        pairs = [(entry.children[0], entry.children[1]) for entry in entries]
        if ctx.idiomatic and self.builder is not None:
            built = self.builder.document(ctx, pairs)
            if built is not None:
                ctx.set_type(node, self.registry[OBJECT])
                return built

        ty = self.registry[OBJECT]
        ctx.set_type(node, ty)
        ctx.imports.touch(OBJECT_CODE)
        rendered = [(self.plain(ctx, key), self.plain(ctx, value)) for key, value in pairs]
        if ty.template is not None:
            return ty.template(rendered)
        return "{" + ", ".join(f"{key}: {value}" for key, value in rendered) + "}"

    def _array_literal(self, ctx: CompileContext, node: Tree) -> str:
        return self._sequence(ctx, node, self._elements(node))

    def _set_literal(self, ctx: CompileContext, node: Tree) -> str:
        elements = self._elements(node)
        if len(elements) == 1:
            # A parenthesized expression, not a collection.
            text = self.visit(ctx, elements[0])
            ctx.set_type(node, ctx.type_of(elements[0]))
            return f"({text})"
        return self._sequence(ctx, node, elements)

    def _elements(self, node: Tree) -> List[Tree]:
        if not node.children:
            return []
        listing = node.children[0]
        elements = subtrees(listing)
        if any(name_of(element) == "comp_for" for element in elements):
            raise UnimplementedError("Comprehensions not yet implemented", line=_line(node), column=_column(node))
        return elements

    def _sequence(self, ctx: CompileContext, node: Tree, elements: Sequence[Tree]) -> str:
        ty = self.registry[ARRAY]
        ctx.set_type(node, ty)
        ctx.imports.touch(ARRAY_CODE)
        rendered = [self.visit(ctx, element) for element in elements]
        if ty.template is not None:
            return ty.template(rendered)
        return "[" + ", ".join(rendered) + "]"

    def plain(self, ctx: CompileContext, node: Tree) -> str:
        """Render `node` with no builder forms, whatever the caller's style."""
        with ctx.scoped_idiomatic(False):
            return self.visit(ctx, node)

    # Compound expressions

    def _or_test(self, ctx: CompileContext, node: Tree) -> str:
        if is_pass_through(node):
            return self._collapse(ctx, node)
        operands = subtrees(node)
        text = self.syntax.or_([self.visit(ctx, operand) for operand in operands])
        ctx.set_type(node, ctx.type_of(operands[0]))
        return text

    def _and_test(self, ctx: CompileContext, node: Tree) -> str:
        if is_pass_through(node):
            return self._collapse(ctx, node)
        operands = subtrees(node)
        text = self.syntax.and_([self.visit(ctx, operand) for operand in operands])
        ctx.set_type(node, ctx.type_of(operands[0]))
        return text

    def _not_test(self, ctx: CompileContext, node: Tree) -> str:
        if is_pass_through(node):
            return self._collapse(ctx, node)
        text = self.syntax.not_(self.visit(ctx, subtrees(node)[0]))
        ctx.set_type(node, self.registry[BOOL])
        return text

    def _comparison(self, ctx: CompileContext, node: Tree) -> str:
        if is_pass_through(node):
            return self._collapse(ctx, node)
        operands = [self.visit(ctx, child) for child in node.children[0::2]]
        operators = ["".join(token.value for token in operator_tokens(op)) for op in node.children[1::2]]
        parts = []
        for index, op in enumerate(operators):
            lhs, rhs = operands[index], operands[index + 1]
            if op in _EQUALITY_OPS:
                parts.append(self.syntax.equality(lhs, op, rhs))
            elif op in _CONTAINS_OPS:
                parts.append(self.syntax.contains(lhs, op, rhs))
            else:
                parts.append(f"{lhs} {op} {rhs}")
        ctx.set_type(node, self.registry[BOOL])
        if len(parts) == 1:
            return parts[0]
        return self.syntax.and_(parts)

    def _binary_chain(self, ctx: CompileContext, node: Tree) -> str:
        if is_pass_through(node):
            return self._collapse(ctx, node)
        children = node.children
        text = self.visit(ctx, children[0])
        for op, operand in zip(children[1::2], children[2::2]):
            rhs = self.visit(ctx, operand)
            if op.value == "//":
                text = self.syntax.floor_div(text, rhs)
            else:
                text = f"{text} {op.value} {rhs}"
        ctx.set_type(node, ctx.type_of(children[0]))
        return text

    def _factor(self, ctx: CompileContext, node: Tree) -> str:
        if is_pass_through(node):
            return self._collapse(ctx, node)
        sign, operand = node.children
        text = sign.value + self.visit(ctx, operand)
        ctx.set_type(node, ctx.type_of(operand))
        return text

    def _power(self, ctx: CompileContext, node: Tree) -> str:
        if is_pass_through(node):
            return self._collapse(ctx, node)
        base, exponent = subtrees(node)
        text = self.syntax.power(self.visit(ctx, base), self.visit(ctx, exponent))
        ctx.set_type(node, ctx.type_of(base))
        return text

    # Names, attributes and calls

    def _identifier(self, ctx: CompileContext, node: Tree) -> str:
        name = node.children[0].value
        ty = self.registry.lookup(name)
        ctx.set_type(node, ty)
        ctx.imports.touch(ty.code)
        if ty.template is not None:
            return ty.template()
        return name

    def _attribute_access(self, ctx: CompileContext, node: Tree) -> str:
        owner, member = node.children
        lhs = self.visit(ctx, owner)
        rhs = member.value
        owner_type = ctx.type_of(owner)
        attr = owner_type.attr.get(rhs)
        if attr is None:
            if is_domain_type(owner_type):
                raise AttributeAccessError(
                    f"'{rhs}' not an attribute of {owner_type.id}", line=_line(node), column=_column(node)
                )
            ctx.set_type(node, self.registry[UNDEFINED])
            return f"{lhs}.{rhs}"
        ctx.set_type(node, attr)
        if attr.template is not None:
            return attr.template(lhs, rhs)
        return f"{lhs}.{rhs}"

    def _index_access(self, ctx: CompileContext, node: Tree) -> str:
        raise UnimplementedError("Indexing not currently supported", line=_line(node), column=_column(node))

    def _function_call(self, ctx: CompileContext, node: Tree) -> str:
        target = call_target(node)
        lhs = self.visit(ctx, target)
        callee = ctx.type_of(target)

        for hooks in self._call_hooks:
            hook = hooks.get(callee.id)
            if hook is not None:
                logger.debug("call to %s handled by %s", callee.id, hook.__name__)
                return hook(ctx, node, callee, lhs)

        if callee.callable is CallableKind.NONE:
            raise NotCallableError(f"{callee.id} is not callable", line=_line(node), column=_column(node))
        ctx.set_type(node, self.registry[callee.result_id])
        args = check_arguments(self, ctx, callee.args, call_arguments(node), callee.id)
        return self._generate_call(callee, lhs, args, args)

    def _generate_call(
        self,
        callee: Type,
        lhs: str,
        template_args: Sequence[object],
        default_args: Sequence[str],
        skip_new: Optional[bool] = None,
    ) -> str:
        if callee.args_template is not None:
            expr = callee.args_template(lhs, *template_args)
        else:
            expr = f"{lhs}({', '.join(default_args)})"
        if skip_new is None:
            skip_new = callee.callable is not CallableKind.CONSTRUCTOR
        if self.syntax.new is not None:
            return self.syntax.new(expr, skip_new, callee.code)
        return expr

    # Process hooks

    def _process_number(self, ctx: CompileContext, node: Tree, callee: Type, lhs: str) -> str:
        ctx.set_type(node, self.registry[callee.result_id])
        arg_nodes = call_arguments(node)
        args = check_arguments(self, ctx, callee.args, arg_nodes, callee.id)
        if not args:
            return self._generate_call(callee, lhs, [None, None], [])
        arg_type = ctx.original_type_of(arg_nodes[0])
        value = args[0]
        if callee.id == "Int64" and arg_type.id == STRING:
            long_type = self.registry[LONG]
            value = self._literal_text(long_type, evaluate_int64(self._string_value(arg_nodes[0])), arg_type)
            arg_type = long_type
        elif callee.id == "Int64" and _is_number_literal(arg_nodes[0]):
            check_int64(self.numeric_value(ctx, arg_nodes[0]))
        return self._generate_call(callee, lhs, [value, arg_type.id], [value])

    def _process_regex(self, ctx: CompileContext, node: Tree, callee: Type, lhs: str) -> str:
        ctx.set_type(node, callee)
        args = check_arguments(self, ctx, callee.args, call_arguments(node), callee.id)
        pattern = args[0]
        flags = None
        if len(args) == 2:
            translated = translate_flags(remove_quotes(args[1]), self.syntax.bson_regex_flags, BSON_REGEX_FLAGS)
            flags = self._render_string(translated)
        rendered = [pattern] if flags is None else [pattern, flags]
        return self._generate_call(callee, lhs, [pattern, flags], rendered)

    def _process_code(self, ctx: CompileContext, node: Tree, callee: Type, lhs: str) -> str:
        ctx.set_type(node, callee)
        # The scope is always a plain document, whatever the caller's style.
        with ctx.scoped_idiomatic(False):
            args = check_arguments(self, ctx, callee.args, call_arguments(node), callee.id)
        scope = None
        if len(args) == 2:
            scope = args[1]
            ctx.imports.touch(CODE_WITH_SCOPE)
            ctx.imports.touch(OBJECT_CODE)
        return self._generate_call(callee, lhs, [args[0], scope], args)

    def _process_datetime(self, ctx: CompileContext, node: Tree, callee: Type, lhs: str) -> str:
        ctx.set_type(node, self.registry[DATE])
        arg_nodes = call_arguments(node)
        date = None
        if arg_nodes:
            if len(arg_nodes) < 3:
                raise ArgumentError(
                    f"Wrong number of arguments to datetime: needs at least 3, got {len(arg_nodes)}",
                    line=_line(node),
                    column=_column(node),
                )
            try:
                check_arguments(self, ctx, callee.args, arg_nodes, callee.id)
            except ArgumentError as exc:
                raise ArgumentError(
                    "Invalid argument to datetime: requires either no args or up to 7 numbers",
                    line=_line(node),
                    column=_column(node),
                ) from exc
            date = evaluate_date([int(self.numeric_value(ctx, arg)) for arg in arg_nodes])
        return self._generate_call(callee, lhs, [date], [])

    def _process_from_datetime(self, ctx: CompileContext, node: Tree, callee: Type, lhs: str) -> str:
        ctx.set_type(node, self.registry[callee.result_id])
        arg_nodes = call_arguments(node)
        args = check_arguments(self, ctx, callee.args, arg_nodes, callee.id)
        is_number = ctx.type_of(arg_nodes[0]).id != DATE
        if is_number:
            ctx.imports.touch(self.registry[DATE].code)
        return self._generate_call(callee, lhs, [args[0], is_number], args, skip_new=True)

    def _process_binary(self, ctx: CompileContext, node: Tree, callee: Type, lhs: str) -> str:
        raise UnimplementedError("Binary type not supported", line=_line(node), column=_column(node))

    def _process_re_compile(self, ctx: CompileContext, node: Tree, callee: Type, lhs: str) -> str:
        ctx.set_type(node, self.registry[callee.result_id])
        arg_nodes = call_arguments(node)
        args = check_arguments(self, ctx, callee.args, arg_nodes, callee.id)
        pattern = self._string_value(arg_nodes[0])
        flags = ""
        if len(arg_nodes) == 2:
            operands = _flag_operands(arg_nodes[1])
            flags = evaluate_regex_flags(ctx.type_of(operand).value for operand in operands)
            flags = translate_flags(flags, self.syntax.regex_flags)
        return self._generate_call(callee, lhs, [args[0], pattern, flags], args, skip_new=True)

    # Emit hooks

    def _emit_object_id(self, ctx: CompileContext, node: Tree, callee: Type, lhs: str) -> str:
        ctx.set_type(node, callee)
        arg_nodes = call_arguments(node)
        check_arguments(self, ctx, callee.args, arg_nodes, callee.id)
        if not arg_nodes:
            return self._generate_call(callee, lhs, [None], [])
        hexstr = self._render_string(evaluate_object_id(self._string_value(arg_nodes[0])))
        return self._generate_call(callee, lhs, [hexstr], [hexstr])

    def _emit_decimal128(self, ctx: CompileContext, node: Tree, callee: Type, lhs: str) -> str:
        ctx.set_type(node, callee)
        arg_nodes = call_arguments(node)
        check_arguments(self, ctx, callee.args, arg_nodes, callee.id)
        arg = arg_nodes[0]
        if ctx.type_of(arg).id == STRING:
            text = self._string_value(arg)
        else:
            text = str(self.numeric_value(ctx, arg))
        value = self._render_string(evaluate_decimal128(text))
        return self._generate_call(callee, lhs, [value], [value])

    # Literal values

    def _render_string(self, value: str) -> str:
        template = self.registry[STRING].template
        body = value.replace("\\", "\\\\")
        if template is not None:
            return template(body, STRING)
        return f"'{body}'"

    def _string_value(self, node: Tree) -> str:
        target = skip_pass_through(node)
        if name_of(target) != "string_literal":
            raise EvaluationError(f"expected a string literal, got '{name_of(target)}'")
        try:
            return string_value(token.value for token in target.children)
        except (ValueError, SyntaxError, TypeError) as exc:
            raise EvaluationError(f"Unable to evaluate string literal: {exc}") from exc

    def numeric_value(self, ctx: CompileContext, node: Tree) -> Union[int, float]:
        target = skip_pass_through(node)
        category = name_of(target)
        if category == "factor":
            sign = operator_tokens(target)[0].value
            value = self.numeric_value(ctx, subtrees(target)[0])
            if sign == "-":
                return -value
            if sign == "~":
                return ~int(value)
            return value
        if category not in _NUMBER_LITERALS:
            raise EvaluationError(f"Unable to convert argument to a number: {node_text(node, ctx.source)}")
        return evaluate_number(leaf_token(target).value, ctx.original_type_of(target).id)


def _line(node: Tree) -> Optional[int]:
    return getattr(node.meta, "line", None)


def _column(node: Tree) -> Optional[int]:
    return getattr(node.meta, "column", None)


def _is_number_literal(node: Tree) -> bool:
    target = skip_pass_through(node)
    if name_of(target) == "factor":
        return _is_number_literal(subtrees(target)[0])
    return name_of(target) in _NUMBER_LITERALS


def _flag_operands(node: Tree) -> List[Tree]:
    """Operands of a `re.I | re.M` expression."""
    target = skip_pass_through(node)
    if name_of(target) == "expr":
        return subtrees(target)
    return [target]


__all__ = ["Walker"]
