from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from lark import Tree

from .errors import InternalError
from .imports import ImportRegistry
from .parser import Node
from .types import Type

Checkpoint = Tuple[ImportRegistry, Dict[int, Type], Dict[int, Type]]


@dataclass
class CompileContext:
    """State for exactly one compile call.

    Node annotations are keyed by node identity and live only as long as the
    context; the parse tree is never mutated.
    """

    source: str
    idiomatic: bool = True
    imports: ImportRegistry = field(default_factory=ImportRegistry)
    types: Dict[int, Type] = field(default_factory=dict)
    original_types: Dict[int, Type] = field(default_factory=dict)

    @contextmanager
    def scoped_idiomatic(self, value: bool) -> Iterator[None]:
        saved = self.idiomatic
        self.idiomatic = value
        try:
            yield
        finally:
            self.idiomatic = saved

    def set_type(self, node: Node, ty: Type) -> None:
        """Record a node's synthesized type; the first writer wins."""
        self.types.setdefault(id(node), ty)

    def cast(self, node: Node, ty: Type, original: Type) -> None:
        self.types[id(node)] = ty
        self.original_types.setdefault(id(node), original)

    def checkpoint(self) -> Checkpoint:
        """Copy of the imports and types recorded so far, for `rollback`."""
        return self.imports.copy(), dict(self.types), dict(self.original_types)

    def rollback(self, saved: Checkpoint) -> None:
        """Forget everything recorded since `saved` was taken."""
        imports, types, original_types = saved
        self.imports = imports.copy()
        self.types = dict(types)
        self.original_types = dict(original_types)

    def type_of(self, node: Node) -> Type:
        """Synthesized type of `node`, looking through untyped single-child wrappers."""
        current = node
        while True:
            ty = self.types.get(id(current))
            if ty is not None:
                return ty
            if isinstance(current, Tree) and len(current.children) == 1:
                current = current.children[0]
                continue
            raise InternalError(f"no type recorded for node '{_describe(node)}'")

    def original_type_of(self, node: Node) -> Type:
        """Type a node had before any cast (its natural type otherwise)."""
        original: Optional[Type] = self.original_types.get(id(node))
        if original is not None:
            return original
        return self.type_of(node)


def _describe(node: Node) -> str:
    if isinstance(node, Tree):
        return str(node.data)
    return getattr(node, "type", type(node).__name__)


__all__ = ["CompileContext"]
