"""
Per-call import tracking.

Rendering code touches a type's numeric `code` whenever it emits that type;
builder codes additionally collect the helper names they used. At the end of a
call the registry renders the target's import block from its import table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

from .types import BUILDER_CODES

ImportTemplate = Callable[[Optional[Sequence[str]]], str]
# Receives (code, fragment) pairs in code order and returns the whole block.
BlockTemplate = Callable[[Sequence[tuple]], str]


@dataclass(frozen=True)
class ImportTable:
    templates: Mapping[int, ImportTemplate]
    block: Optional[BlockTemplate] = None
    separator: str = "\n"


class ImportRegistry:
    """Codes used during one compile call. Never shared between calls."""

    def __init__(self) -> None:
        self._used: Dict[int, Union[bool, List[str]]] = {code: [] for code in BUILDER_CODES}

    def touch(self, code: int) -> None:
        if not isinstance(self._used.get(code), list):
            self._used[code] = True

    def add(self, code: int, name: str) -> None:
        entry = self._used.get(code)
        if not isinstance(entry, list):
            entry = []
            self._used[code] = entry
        entry.append(name)

    def copy(self) -> "ImportRegistry":
        clone = ImportRegistry()
        clone._used = {code: (list(value) if isinstance(value, list) else value) for code, value in self._used.items()}
        return clone

    def used(self) -> Dict[int, Union[bool, List[str]]]:
        """Codes actually used; builder codes with no names are dropped."""
        return {
            code: (list(value) if isinstance(value, list) else value)
            for code, value in self._used.items()
            if not (isinstance(value, list) and not value)
        }

    def render(self, table: ImportTable) -> str:
        fragments = []
        for code, value in sorted(self.used().items()):
            template = table.templates.get(code)
            if not value or template is None:
                continue
            fragment = template(value if isinstance(value, list) else None)
            if fragment:
                fragments.append((code, fragment))
        if table.block is not None:
            return table.block(fragments)
        seen: List[str] = []
        for _, fragment in fragments:
            if fragment not in seen:
                seen.append(fragment)
        return table.separator.join(seen)


__all__ = ["ImportRegistry", "ImportTable"]
