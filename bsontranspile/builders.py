"""
Query-builder rendering of idiomatic documents.

A document rendered in idiomatic mode becomes a call to the target's builder
helpers when it has a builder form: a filter, a single aggregation stage, a
single accumulator or a `$geometry`. A document with no such form raises
`NotExpressible` part way through; `QueryBuilder.document` then rolls the
compile context back to where the attempt started and the caller renders a
plain document instead.

Values handed to a helper are always rendered as plain documents.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from lark import Tree

from .checker import cast_type
from .context import CompileContext
from .errors import EvaluationError
from .format import string_body
from .parser import leaf_token, name_of, skip_pass_through, subtrees
from .syntax import BuilderTable, BuilderTemplate
from .types import ARRAY, ARRAY_CODE, DECIMAL, INTEGER, STRING

if TYPE_CHECKING:
    from .walker import Walker

logger = logging.getLogger(__name__)

Pairs = Sequence[Tuple[Tree, Tree]]

_LOGICAL = frozenset({"$and", "$or", "$nor"})
# Operators rendered as `helper(field, value)`.
_FIELD_OPERATORS = frozenset(
    {
        "$eq",
        "$ne",
        "$gt",
        "$gte",
        "$lt",
        "$lte",
        "$in",
        "$nin",
        "$all",
        "$size",
        "$exists",
        "$type",
        "$bitsAllClear",
        "$bitsAllSet",
        "$bitsAnyClear",
        "$bitsAnySet",
    }
)
_NEAR_OPTIONS = ("$maxDistance", "$minDistance")
_GEOMETRIES = frozenset({"Point", "MultiPoint", "LineString", "MultiLineString", "Polygon", "MultiPolygon"})
_LOOKUP_FIELDS = ("from", "localField", "foreignField", "as")
_GRAPH_LOOKUP_FIELDS = ("from", "startWith", "connectFromField", "connectToField", "as")
_GRAPH_LOOKUP_OPTIONS = ("maxDepth", "depthField", "restrictSearchWithMatch")


class NotExpressible(Exception):
    """The document being rendered has no builder form."""


class QueryBuilder:
    """Renders documents through one target's builder helpers."""

    def __init__(self, walker: "Walker", table: BuilderTable) -> None:
        self.walker = walker
        self.table = table

    def document(self, ctx: CompileContext, pairs: Pairs) -> Optional[str]:
        """Builder form of a document, or None when it has none."""
        if not pairs:
            return None
        saved = ctx.checkpoint()
        try:
            return self._document(ctx, pairs)
        except NotExpressible as exc:
            logger.debug("rendering a plain document: %s", exc)
            ctx.rollback(saved)
            return None

    def _document(self, ctx: CompileContext, pairs: Pairs) -> str:
        if len(pairs) == 1:
            key_node, value = pairs[0]
            key = _string_key(key_node)
            if key in self.table.aggregates:
                return self._stage(ctx, key, value)
            if key == "$geometry":
                return self._geometry(ctx, value)[1]
            accumulator = self._accumulator_operator(value)
            if key is not None and accumulator is not None:
                return self._accumulator(ctx, key_node, *accumulator)
        return self._filter(ctx, pairs)

    # Filters

    def _filter(self, ctx: CompileContext, pairs: Pairs) -> str:
        if not pairs:
            raise NotExpressible("a filter needs at least one clause")
        filters = self.table.filters
        clauses: List[str] = []
        for key_node, value in pairs:
            key = _required_key(key_node)
            if key in _LOGICAL:
                documents = _array_items(value)
                if not documents:
                    raise NotExpressible(f"{key} needs a non-empty array of documents")
                inner = [self._filter(ctx, _document_pairs(document)) for document in documents]
                clauses.append(self._call(ctx, filters, key, *inner))
            elif key in ("$expr", "$where"):
                clauses.append(self._call(ctx, filters, key, self.walker.plain(ctx, value)))
            elif key == "$text":
                search = self._members(value, required=("$search",))["$search"]
                clauses.append(self._call(ctx, filters, key, self.walker.plain(ctx, search)))
            elif key.startswith("$"):
                raise NotExpressible(f"no filter helper for {key}")
            else:
                clauses.extend(self._field_filters(ctx, self._field(ctx, key_node), value))
        if len(clauses) == 1:
            return clauses[0]
        return self._call(ctx, filters, "$and", *clauses)

    def _field_filters(self, ctx: CompileContext, field: str, value: Tree) -> List[str]:
        operators = _operator_pairs(value)
        if operators is None:
            return [self._call(ctx, self.table.filters, "eq", field, self.walker.plain(ctx, value))]
        siblings = dict(operators)
        clauses = []
        for op, operand in operators:
            if op == "$options":
                if "$regex" not in siblings:
                    raise NotExpressible("$options without $regex")
                continue
            clauses.append(self._operator(ctx, field, op, operand, siblings))
        return clauses

    def _operator(self, ctx: CompileContext, field: str, op: str, operand: Tree, siblings: Mapping[str, Tree]) -> str:
        filters = self.table.filters
        plain = self.walker.plain
        if op in _FIELD_OPERATORS:
            return self._call(ctx, filters, op, field, plain(ctx, operand))
        if op == "$not":
            if _operator_pairs(operand) is None:
                raise NotExpressible("$not needs an operator document")
            inner = self._field_filters(ctx, field, operand)
            clause = inner[0] if len(inner) == 1 else self._call(ctx, filters, "$and", *inner)
            return self._call(ctx, filters, op, clause)
        if op == "$elemMatch":
            return self._call(ctx, filters, op, field, self._filter(ctx, _document_pairs(operand)))
        if op == "$regex":
            args = [field, plain(ctx, operand)]
            if "$options" in siblings:
                args.append(plain(ctx, siblings["$options"]))
            return self._call(ctx, filters, op, *args)
        if op == "$mod":
            divisor, remainder = self._items(operand, count=2)
            return self._call(ctx, filters, op, field, plain(ctx, divisor), plain(ctx, remainder))
        if op in ("$geoWithin", "$geoIntersects"):
            return self._geo_shape(ctx, op, field, operand)
        if op in ("$near", "$nearSphere"):
            members = self._members(operand, required=("$geometry",), optional=_NEAR_OPTIONS)
            kind, point = self._geometry(ctx, members["$geometry"])
            if kind != "Point":
                raise NotExpressible(f"{op} needs a Point, got {kind}")
            distances = [self._double(ctx, members[name]) if name in members else None for name in _NEAR_OPTIONS]
            return self._call(ctx, filters, op, field, point, *distances)
        raise NotExpressible(f"no filter helper for {op}")

    def _geo_shape(self, ctx: CompileContext, op: str, field: str, operand: Tree) -> str:
        filters = self.table.filters
        shapes = _operator_pairs(operand)
        if shapes is None or len(shapes) != 1:
            raise NotExpressible(f"{op} needs exactly one shape")
        shape, value = shapes[0]
        if shape == "$geometry":
            return self._call(ctx, filters, op, field, self._geometry(ctx, value)[1])
        if op != "$geoWithin":
            raise NotExpressible(f"{op} only takes a $geometry")
        if shape == "$box":
            lower_left, upper_right = self._items(value, count=2)
            corners = self._coordinates(ctx, lower_left) + self._coordinates(ctx, upper_right)
            return self._call(ctx, filters, shape, field, *corners)
        if shape == "$polygon":
            points = [self._list(ctx, self._coordinates(ctx, point)) for point in self._items(value)]
            return self._call(ctx, filters, shape, field, self._list(ctx, points))
        if shape in ("$center", "$centerSphere"):
            center, radius = self._items(value, count=2)
            return self._call(ctx, filters, shape, field, *self._coordinates(ctx, center), self._double(ctx, radius))
        raise NotExpressible(f"no $geoWithin helper for {shape}")

    # GeoJSON

    def _geometry(self, ctx: CompileContext, node: Tree) -> Tuple[str, str]:
        """(type name, rendering) of a GeoJSON geometry document."""
        geojson = self.table.geojson
        members = self._members(node, required=("type",), optional=("coordinates", "geometries"))
        kind = _string_key(members["type"])
        if kind == "GeometryCollection":
            # `coordinates` is accepted in place of `geometries`.
            geometries = members.get("geometries", members.get("coordinates"))
            if geometries is None:
                raise NotExpressible("GeometryCollection needs geometries")
            parts = [self._geometry(ctx, item)[1] for item in self._items(geometries)]
            return kind, self._call(ctx, geojson, kind, self._list(ctx, parts))
        if kind not in _GEOMETRIES or "coordinates" not in members or "geometries" in members:
            raise NotExpressible(f"unsupported geometry {kind!r}")
        coordinates = members["coordinates"]
        if kind == "Point":
            args = [self._position(ctx, coordinates)]
        elif kind in ("MultiPoint", "LineString"):
            args = [self._positions(ctx, coordinates)]
        elif kind == "MultiLineString":
            args = [self._list(ctx, [self._positions(ctx, line) for line in self._items(coordinates)])]
        elif kind == "Polygon":
            args = self._rings(ctx, coordinates)
        else:
            polygons = [
                self._call(ctx, geojson, "PolygonCoordinates", *self._rings(ctx, polygon))
                for polygon in self._items(coordinates)
            ]
            args = [self._list(ctx, polygons)]
        return kind, self._call(ctx, geojson, kind, *args)

    def _rings(self, ctx: CompileContext, node: Tree) -> List[str]:
        return [self._positions(ctx, ring) for ring in self._items(node)]

    def _positions(self, ctx: CompileContext, node: Tree) -> str:
        return self._list(ctx, [self._position(ctx, item) for item in self._items(node)])

    def _position(self, ctx: CompileContext, node: Tree) -> str:
        return self._call(ctx, self.table.geojson, "Position", *self._coordinates(ctx, node))

    def _coordinates(self, ctx: CompileContext, node: Tree) -> List[str]:
        items = self._items(node)
        if len(items) < 2:
            raise NotExpressible("a position needs at least two coordinates")
        return [self._double(ctx, item) for item in items]

    # Aggregation

    def _stage(self, ctx: CompileContext, stage: str, value: Tree) -> str:
        plain = self.walker.plain
        if stage in ("$count", "$out", "$sortByCount", "$unwind"):
            args = [self._string(ctx, value)]
        elif stage == "$match":
            args = [self._filter(ctx, _document_pairs(value))]
        elif stage in ("$limit", "$skip"):
            args = [self._integer(ctx, value)]
        elif stage == "$sample":
            args = [self._integer(ctx, self._members(value, required=("size",))["size"])]
        elif stage == "$lookup":
            members = self._members(value, required=_LOOKUP_FIELDS)
            args = [self._string(ctx, members[name]) for name in _LOOKUP_FIELDS]
        elif stage == "$graphLookup":
            args = self._graph_lookup(ctx, value)
        elif stage == "$group":
            args = self._group(ctx, value)
        elif stage == "$project":
            args = [self._projection(ctx, value)]
        elif stage == "$sort":
            args = [self._sort(ctx, value)]
        elif stage == "$replaceRoot":
            args = [plain(ctx, self._members(value, required=("newRoot",))["newRoot"])]
        elif stage == "$facet":
            args = self._facets(ctx, value)
        else:
            raise NotExpressible(f"no aggregation helper for {stage}")
        return self._call(ctx, self.table.aggregates, stage, *args)

    def _stage_document(self, ctx: CompileContext, node: Tree) -> str:
        pairs = _document_pairs(node)
        stage = _string_key(pairs[0][0]) if len(pairs) == 1 else None
        if stage not in self.table.aggregates:
            raise NotExpressible("a pipeline holds one stage per document")
        return self._stage(ctx, stage, pairs[0][1])

    def _facets(self, ctx: CompileContext, node: Tree) -> List[str]:
        facets = []
        for key_node, pipeline in self._pairs(node):
            if name_of(skip_pass_through(pipeline)) != "array_literal":
                raise NotExpressible("a facet needs a pipeline array")
            stages = [self._stage_document(ctx, item) for item in _array_items(pipeline)]
            facets.append(self._call(ctx, self.table.model, "Facet", self._field(ctx, key_node), self._list(ctx, stages)))
        return facets

    def _graph_lookup(self, ctx: CompileContext, node: Tree) -> List[str]:
        members = self._members(node, required=_GRAPH_LOOKUP_FIELDS, optional=_GRAPH_LOOKUP_OPTIONS)
        args = [
            self._string(ctx, members["from"]),
            self.walker.plain(ctx, members["startWith"]),
            self._string(ctx, members["connectFromField"]),
            self._string(ctx, members["connectToField"]),
            self._string(ctx, members["as"]),
        ]
        options: List[Tuple[str, str]] = []
        for name, value in members.items():
            if name == "maxDepth":
                options.append((name, self._integer(ctx, value)))
            elif name == "depthField":
                options.append((name, self._string(ctx, value)))
            elif name == "restrictSearchWithMatch":
                options.append((name, self._filter(ctx, _document_pairs(value))))
        if options:
            args.append(self._call(ctx, self.table.model, "GraphLookupOptions", *options))
        return args

    def _group(self, ctx: CompileContext, node: Tree) -> List[str]:
        pairs = self._pairs(node)
        if _string_key(pairs[0][0]) != "_id":
            raise NotExpressible("$group starts with _id")
        args = [self.walker.plain(ctx, pairs[0][1])]
        for key_node, expression in pairs[1:]:
            accumulator = self._accumulator_operator(expression)
            if accumulator is None:
                raise NotExpressible("$group fields need an accumulator")
            args.append(self._accumulator(ctx, key_node, *accumulator))
        return args

    def _accumulator_operator(self, node: Tree) -> Optional[Tuple[str, Tree]]:
        operators = _operator_pairs(node)
        if operators is None or len(operators) != 1 or operators[0][0] not in self.table.accumulators:
            return None
        return operators[0]

    def _accumulator(self, ctx: CompileContext, key_node: Tree, op: str, expression: Tree) -> str:
        field = self._field(ctx, key_node)
        return self._call(ctx, self.table.accumulators, op, field, self.walker.plain(ctx, expression))

    def _projection(self, ctx: CompileContext, node: Tree) -> str:
        projections = self.table.projections
        included: List[str] = []
        excluded: List[str] = []
        exclude_id = False
        for key_node, flag in self._pairs(node):
            keep = self._truth(ctx, flag)
            if _required_key(key_node) == "_id" and not keep:
                exclude_id = True
            elif keep:
                included.append(self._field(ctx, key_node))
            else:
                excluded.append(self._field(ctx, key_node))
        parts = []
        if included:
            parts.append(self._call(ctx, projections, "include", *included))
        if excluded:
            parts.append(self._call(ctx, projections, "exclude", *excluded))
        if exclude_id:
            parts.append(self._call(ctx, projections, "excludeId"))
        if len(parts) == 1:
            return parts[0]
        return self._call(ctx, projections, "fields", *parts)

    def _sort(self, ctx: CompileContext, node: Tree) -> str:
        sorts = self.table.sorts
        orders = []
        for key_node, direction in self._pairs(node):
            field = self._field(ctx, key_node)
            orders.append(self._call(ctx, sorts, self._direction(ctx, direction), field))
        if len(orders) == 1:
            return orders[0]
        return self._call(ctx, sorts, "orderBy", *orders)

    def _direction(self, ctx: CompileContext, node: Tree) -> str:
        meta = _operator_pairs(node)
        if meta is not None:
            if len(meta) == 1 and meta[0][0] == "$meta" and _string_key(meta[0][1]) == "textScore":
                return "metaTextScore"
            raise NotExpressible("the only sort $meta is textScore")
        value = self._number(ctx, node)
        if value == 1:
            return "ascending"
        if value == -1:
            return "descending"
        raise NotExpressible(f"sort direction {value} is not 1 or -1")

    # Values

    def _call(self, ctx: CompileContext, family: Mapping[str, BuilderTemplate], key: str, *args: object) -> str:
        helper = family.get(key)
        if helper is None:
            raise NotExpressible(f"no builder helper for {key}")
        ctx.imports.add(helper.code, helper.name)
        return helper.template(*args)

    def _list(self, ctx: CompileContext, items: Sequence[str]) -> str:
        ty = self.walker.registry[ARRAY]
        ctx.imports.touch(ARRAY_CODE)
        if ty.template is not None:
            return ty.template(list(items))
        return "[" + ", ".join(items) + "]"

    def _field(self, ctx: CompileContext, key_node: Tree) -> str:
        _required_key(key_node)
        return self.walker.plain(ctx, key_node)

    def _string(self, ctx: CompileContext, node: Tree) -> str:
        text = self.walker.plain(ctx, node)
        if ctx.type_of(node).id != STRING:
            raise NotExpressible(f"expected a string, got {ctx.type_of(node).id}")
        return text

    def _integer(self, ctx: CompileContext, node: Tree) -> str:
        return self._numeric(ctx, node, INTEGER)

    def _double(self, ctx: CompileContext, node: Tree) -> str:
        return self._numeric(ctx, node, DECIMAL)

    def _numeric(self, ctx: CompileContext, node: Tree, type_id: str) -> str:
        with ctx.scoped_idiomatic(False):
            text = cast_type(self.walker, ctx, (type_id,), node)
        if text is None:
            raise NotExpressible(f"expected a number, got {ctx.type_of(node).id}")
        return text

    def _number(self, ctx: CompileContext, node: Tree) -> Union[int, float]:
        self.walker.plain(ctx, node)
        try:
            return self.walker.numeric_value(ctx, node)
        except EvaluationError as exc:
            raise NotExpressible(str(exc)) from exc

    def _truth(self, ctx: CompileContext, node: Tree) -> bool:
        target = skip_pass_through(node)
        if name_of(target) == "boolean_literal":
            return leaf_token(target).value == "True"
        return bool(self._number(ctx, node))

    def _pairs(self, node: Tree) -> List[Tuple[Tree, Tree]]:
        pairs = _document_pairs(node)
        if not pairs:
            raise NotExpressible("expected a non-empty document")
        return pairs

    def _members(
        self, node: Tree, required: Sequence[str], optional: Sequence[str] = ()
    ) -> Dict[str, Tree]:
        """Entries of a document whose keys are exactly `required` plus any of `optional`."""
        members = {_required_key(key_node): value for key_node, value in self._pairs(node)}
        missing = [name for name in required if name not in members]
        unknown = [name for name in members if name not in required and name not in optional]
        if missing or unknown:
            raise NotExpressible(f"document keys: missing {missing}, unexpected {unknown}")
        return members

    def _items(self, node: Optional[Tree], count: Optional[int] = None) -> List[Tree]:
        items = _array_items(node) if node is not None else []
        if not items or (count is not None and len(items) != count):
            raise NotExpressible("unexpected array shape")
        return items


def _string_key(node: Tree) -> Optional[str]:
    """Text of a string literal, or None for anything else."""
    target = skip_pass_through(node)
    if name_of(target) != "string_literal":
        return None
    return "".join(string_body(token.value) for token in target.children)


def _required_key(node: Tree) -> str:
    key = _string_key(node)
    if key is None:
        raise NotExpressible("document key is not a string")
    return key


def _document_pairs(node: Tree) -> List[Tuple[Tree, Tree]]:
    target = skip_pass_through(node)
    if name_of(target) != "object_literal" or not target.children:
        return []
    entries = subtrees(target.children[0])
    if not all(name_of(entry) == "key_value" for entry in entries):
        return []
    return [(entry.children[0], entry.children[1]) for entry in entries]


def _array_items(node: Tree) -> List[Tree]:
    target = skip_pass_through(node)
    if name_of(target) != "array_literal" or not target.children:
        return []
    return subtrees(target.children[0])


def _operator_pairs(node: Tree) -> Optional[List[Tuple[str, Tree]]]:
    """`{"$gt": 1, ...}` as (operator, operand) pairs; None for any other value."""
    pairs = _document_pairs(node)
    if not pairs:
        return None
    keys = [_string_key(key) for key, _ in pairs]
    if not all(key is not None and key.startswith("$") for key in keys):
        return None
    return [(key, value) for key, (_, value) in zip(keys, pairs)]


__all__ = ["NotExpressible", "QueryBuilder"]
