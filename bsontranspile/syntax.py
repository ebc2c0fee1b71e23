from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Sequence

from .types import Template


def _join(separator: str) -> Callable[[Sequence[str]], str]:
    def render(operands: Sequence[str]) -> str:
        return separator.join(operands)

    return render


@dataclass(frozen=True)
class BuilderTemplate:
    """A query-builder helper.

    `code` is the import key the helper is recorded under and `name` the imported
    name; `template` renders one call from already rendered arguments.
    """

    code: int
    name: str
    template: Template


@dataclass(frozen=True)
class BuilderTable:
    """Builder helpers of one target, by family.

    Filters, aggregation stages and accumulators are keyed by their query
    operator (`$gt`, `$match`, `$sum`); filters also carry `eq` for plain
    equality and the `$box`, `$polygon`, `$center` and `$centerSphere` shapes of
    `$geoWithin`. Projections and sorts are keyed by helper name, GeoJSON and
    model classes by class name.
    """

    filters: Mapping[str, BuilderTemplate]
    aggregates: Mapping[str, BuilderTemplate] = field(default_factory=dict)
    accumulators: Mapping[str, BuilderTemplate] = field(default_factory=dict)
    projections: Mapping[str, BuilderTemplate] = field(default_factory=dict)
    sorts: Mapping[str, BuilderTemplate] = field(default_factory=dict)
    geojson: Mapping[str, BuilderTemplate] = field(default_factory=dict)
    model: Mapping[str, BuilderTemplate] = field(default_factory=dict)


@dataclass(frozen=True)
class SyntaxTable:
    """Operator and statement templates for one target language.

    `equality(lhs, op, rhs)` receives the source operator (`==`, `!=`, `is`,
    `isnot`); `contains(lhs, op, rhs)` receives `in` or `notin`.
    `new(expr, skip_new, code)` decorates constructor calls.
    A target without `builders` has no idiomatic document form.
    """

    equality: Template
    contains: Template
    and_: Callable[[Sequence[str]], str] = _join(" and ")
    or_: Callable[[Sequence[str]], str] = _join(" or ")
    not_: Template = lambda operand: f"not {operand}"
    power: Template = lambda base, exponent: f"{base} ** {exponent}"
    floor_div: Template = lambda lhs, rhs: f"{lhs} // {rhs}"
    new: Optional[Template] = None
    eos: Optional[Callable[[], str]] = None
    eof: Optional[Callable[[], str]] = None
    regex_flags: Mapping[str, str] = field(default_factory=dict)
    bson_regex_flags: Mapping[str, str] = field(default_factory=dict)
    builders: Optional[BuilderTable] = None


# Flags accepted by the BSON Regex constructor, in any target.
BSON_REGEX_FLAGS = "imxlsu"

__all__ = ["BSON_REGEX_FLAGS", "BuilderTable", "BuilderTemplate", "SyntaxTable"]
