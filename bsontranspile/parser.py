from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional, Union

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken
from lark.indenter import DedentError, Indenter

from .errors import SourceSyntaxError

Node = Union[Tree, Token]

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


class BlockIndenter(Indenter):
    """Turns leading whitespace into _INDENT/_DEDENT and drops newlines inside brackets."""

    NL_type = "_NEWLINE"
    OPEN_PAREN_types = ["LPAR", "LSQB", "LBRACE"]
    CLOSE_PAREN_types = ["RPAR", "RSQB", "RBRACE"]
    INDENT_type = "_INDENT"
    DEDENT_type = "_DEDENT"
    tab_len = 8


_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    start="file_input",
    propagate_positions=True,
    maybe_placeholders=False,
    postlex=BlockIndenter(),
)


def normalize_source(source: str) -> str:
    """Text actually handed to lark; node positions index into this string."""
    return source.strip() + "\n"


def parse_source(source: str) -> Tree:
    """Parse dialect source into a lark tree; parse failures become SourceSyntaxError."""
    text = normalize_source(source)
    try:
        return _PARSER.parse(text)
    except UnexpectedInput as exc:
        line = getattr(exc, "line", None)
        column = getattr(exc, "column", None)
        raise SourceSyntaxError(_describe(exc), line=line, column=column) from exc
    except DedentError as exc:
        raise SourceSyntaxError(f"inconsistent indentation: {exc}") from exc


def _describe(exc: UnexpectedInput) -> str:
    if isinstance(exc, UnexpectedEOF):
        return "unexpected end of input"
    if isinstance(exc, UnexpectedToken):
        return f"unexpected token {exc.token!r}"
    if isinstance(exc, UnexpectedCharacters):
        return f"unexpected character {exc.char!r}"
    return "invalid syntax"


# Tree accessors used by the walker. The walker never reaches into lark
# internals beyond these helpers.


def name_of(node: Node) -> str:
    if isinstance(node, Tree):
        data = node.data
        if isinstance(data, Token):
            return data.value
        return data
    if isinstance(node, Token):
        return node.type
    return str(node)


def subtrees(node: Tree) -> List[Tree]:
    return [child for child in node.children if isinstance(child, Tree)]


def operator_tokens(node: Tree) -> List[Token]:
    return [child for child in node.children if isinstance(child, Token)]


# Categories that mean something on their own even when they hold a single subtree,
# e.g. `f()` or `{"a": 1}`.
CATEGORY_NODES = frozenset(
    {
        "function_call",
        "attribute_access",
        "index_access",
        "set_literal",
        "array_literal",
        "object_literal",
    }
)


def is_pass_through(node: Node) -> bool:
    """A rule node holding exactly one child exists only for grammar structure."""
    return (
        isinstance(node, Tree)
        and len(node.children) == 1
        and isinstance(node.children[0], Tree)
        and name_of(node) not in CATEGORY_NODES
    )


def skip_pass_through(node: Tree, goal: Optional[str] = None) -> Tree:
    """Walk down single-child wrappers, stopping early at a node named `goal`."""
    while is_pass_through(node):
        if goal is not None and name_of(node) == goal:
            return node
        node = node.children[0]
    return node


def node_text(node: Node, source: str) -> str:
    """Source text covered by a node (tokens return their own value)."""
    if isinstance(node, Token):
        return node.value
    meta = node.meta
    if getattr(meta, "empty", True):
        return "".join(node_text(child, source) for child in node.children)
    return source[meta.start_pos : meta.end_pos]


def leaf_token(node: Tree) -> Optional[Token]:
    """First token below a literal node."""
    for child in node.children:
        if isinstance(child, Token):
            return child
        found = leaf_token(child)
        if found is not None:
            return found
    return None


def call_arguments(call: Tree) -> List[Tree]:
    """Argument nodes of a function_call (empty when called with no arguments)."""
    arglist = next((child for child in subtrees(call)[1:] if name_of(child) == "arglist"), None)
    if arglist is None:
        return []
    return subtrees(arglist)


def call_target(call: Tree) -> Tree:
    return subtrees(call)[0]


def iter_tree(node: Node) -> Iterator[Tree]:
    if isinstance(node, Tree):
        yield node
        for child in node.children:
            yield from iter_tree(child)


__all__ = [
    "BlockIndenter",
    "CATEGORY_NODES",
    "Node",
    "call_arguments",
    "call_target",
    "is_pass_through",
    "iter_tree",
    "leaf_token",
    "name_of",
    "normalize_source",
    "node_text",
    "operator_tokens",
    "parse_source",
    "skip_pass_through",
    "subtrees",
]
