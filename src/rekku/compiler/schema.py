"""Compile JSON Schema / OpenAPI schema objects into validator expressions.

The single public entry point is :func:`compile_schema`. It walks one
schema node (a plain ``dict`` as parsed from JSON or YAML) and returns an
:class:`~rekku.compiler.expressions.Expression`, recording the name of every
named schema it references into a :class:`ReferenceSet` so that the caller
can emit the matching imports.

Interpretation order (first match wins):

1. ``None`` -> accept anything.
2. ``$ref`` -> the referenced schema's validator symbol. The referenced body
   is never inlined, which is what makes self-referential and
   mutually-referential schemas safe to compile.
3. ``type`` given as a list -> union of the member types, ``.nullable()``
   when ``"null"`` is one of them.
4. ``oneOf`` / ``anyOf`` -> union of the branches; ``allOf`` -> the branches
   merged into one schema, compiled once.
5. Scalar ``type`` -> string, number/integer, boolean, array, object.
6. Anything else -> accept anything.

The compiler never raises. A node it cannot interpret compiles to an
:class:`~rekku.compiler.expressions.AnyExpr` whose ``fallback_reason`` says
why; :func:`find_fallbacks` collects those reasons from a compiled tree.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from typing import Any, Callable, Optional

from rekku.compiler.expressions import (
    EMPTY_OBJECT,
    AnyExpr,
    ArrayExpr,
    Check,
    EnumExpr,
    Expression,
    NullableExpr,
    NullExpr,
    ObjectExpr,
    ObjectField,
    PrimitiveExpr,
    ReferenceExpr,
    RefinedExpr,
    UnionExpr,
    format_number,
    validator_symbol,
)

_FORMAT_CHECKS: dict[str, str] = {
    "email": "email",
    "date-time": "datetime",
    "uri": "url",
    "url": "url",
    "uuid": "uuid",
    "date": "date",
}


class ReferenceSet:
    """Names of the named schemas referenced while compiling one unit.

    Duplicates collapse; iteration follows first-seen order so that import
    blocks come out the same on every run.
    """

    def __init__(self) -> None:
        self._names: dict[str, None] = {}

    def add(self, name: str) -> None:
        self._names.setdefault(name, None)

    def names(self) -> list[str]:
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"ReferenceSet({self.names()!r})"


def compile_schema(node: Any, refs: Optional[ReferenceSet] = None) -> Expression:
    """Compile a schema node into a validator expression.

    Args:
        node: The schema object. ``None`` and non-``dict`` values are
            accepted and compile to ``z.any()``.
        refs: Collector for referenced schema names. A throwaway set is used
            when omitted.

    Returns:
        The compiled expression; ``str()`` of it is the zod source text.

    Example::

        refs = ReferenceSet()
        expr = compile_schema(
            {"type": "array", "items": {"$ref": "#/components/schemas/Tag"}},
            refs,
        )
        str(expr)     # 'z.array(TagValidator)'
        refs.names()  # ['Tag']
    """
    if refs is None:
        refs = ReferenceSet()
    try:
        return _compile(node, refs)
    except RecursionError:
        # YAML aliases can build cyclic dicts without any $ref.
        return AnyExpr(fallback_reason="schema nesting is too deep or cyclic")


def merge_all_of(branches: list[Any]) -> dict[str, Any]:
    """Merge ``allOf`` branches into a single schema dict.

    Later branches override earlier keys, ``properties`` are merged key by
    key (later wins) and ``required`` lists are unioned in first-seen order.
    Branches that are not objects are ignored. A merged schema with
    ``properties`` but no ``type`` is typed as an object.

    Args:
        branches: The raw ``allOf`` list.

    Returns:
        A new dict; the input branches are not modified.
    """
    merged: dict[str, Any] = {}
    for branch in branches:
        if not isinstance(branch, dict):
            continue
        result = {**merged, **branch}
        if isinstance(merged.get("properties"), dict) and isinstance(
            branch.get("properties"), dict
        ):
            result["properties"] = {**merged["properties"], **branch["properties"]}
        if isinstance(merged.get("required"), list) and isinstance(
            branch.get("required"), list
        ):
            names = [*merged["required"], *branch["required"]]
            result["required"] = list(dict.fromkeys(n for n in names if isinstance(n, str)))
        merged = result

    if "type" not in merged and "$ref" not in merged and merged.get("properties"):
        merged["type"] = "object"
    return merged


def find_fallbacks(expr: Expression) -> list[str]:
    """Return the ``fallback_reason`` of every fallback in *expr*, depth first."""
    reasons: list[str] = []
    _collect_fallbacks(expr, reasons)
    return reasons


# ------------------------------------------------------------------ #
# Dispatch
# ------------------------------------------------------------------ #


def _compile(node: Any, refs: ReferenceSet) -> Expression:
    if node is None:
        return AnyExpr()
    if not isinstance(node, dict):
        return AnyExpr(
            fallback_reason=f"expected a schema object, got {type(node).__name__}"
        )

    if "$ref" in node:
        return _compile_reference(node["$ref"], refs)

    schema_type = node.get("type")
    if isinstance(schema_type, list):
        return _compile_type_list(node, schema_type, refs)

    for keyword in ("oneOf", "anyOf"):
        if node.get(keyword):
            return _compile_union(node[keyword], keyword, refs)
    if node.get("allOf"):
        return _compile_all_of(node["allOf"], refs)

    if schema_type is None:
        return AnyExpr()
    handler = _TYPE_HANDLERS.get(schema_type) if isinstance(schema_type, str) else None
    if handler is None:
        return AnyExpr(fallback_reason=f"unsupported type {schema_type!r}")
    return handler(node, refs)


def _compile_reference(ref: Any, refs: ReferenceSet) -> Expression:
    if not isinstance(ref, str):
        return AnyExpr(fallback_reason="$ref must be a string")
    name = ref.rsplit("/", 1)[-1].replace("~1", "/").replace("~0", "~")
    if not name:
        return AnyExpr(fallback_reason=f"cannot take a schema name from $ref {ref!r}")
    refs.add(name)
    return ReferenceExpr(name=name, symbol=validator_symbol(name))


def _compile_type_list(
    node: dict[str, Any], types: list[Any], refs: ReferenceSet
) -> Expression:
    if not all(isinstance(t, str) for t in types):
        return AnyExpr(fallback_reason="type list must only contain strings")

    nullable = "null" in types
    members = list(dict.fromkeys(t for t in types if t != "null"))
    if not members:
        if nullable:
            return NullExpr()
        return AnyExpr(fallback_reason="type list is empty")

    # Each member keeps every other constraint of the node.
    variants = tuple(_compile({**node, "type": member}, refs) for member in members)
    expr: Expression = variants[0] if len(variants) == 1 else UnionExpr(variants)
    return NullableExpr(expr) if nullable else expr


def _compile_union(branches: Any, keyword: str, refs: ReferenceSet) -> Expression:
    # oneOf is not checked for exclusivity; both keywords compile to a union.
    if not isinstance(branches, list):
        return AnyExpr(fallback_reason=f"{keyword} must be a list")
    return UnionExpr(tuple(_compile(branch, refs) for branch in branches))


def _compile_all_of(branches: Any, refs: ReferenceSet) -> Expression:
    if not isinstance(branches, list):
        return AnyExpr(fallback_reason="allOf must be a list")
    return _compile(merge_all_of(branches), refs)


# ------------------------------------------------------------------ #
# Scalar types
# ------------------------------------------------------------------ #


def _compile_string(node: dict[str, Any], refs: ReferenceSet) -> Expression:
    enum = node.get("enum")
    if isinstance(enum, list):
        literals = tuple(lit for lit in (_enum_literal(v) for v in enum) if lit is not None)
        if literals:
            # Format, pattern and length constraints do not apply to enums.
            return EnumExpr(literals)

    checks: list[Check] = []
    schema_format = node.get("format")
    if isinstance(schema_format, str) and schema_format in _FORMAT_CHECKS:
        checks.append(Check(_FORMAT_CHECKS[schema_format]))

    pattern = node.get("pattern")
    if isinstance(pattern, str):
        escaped = pattern.replace("\\", "\\\\").replace('"', '\\"')
        checks.append(Check("regex", (f'new RegExp("{escaped}")',)))

    for keyword, method in (("minLength", "min"), ("maxLength", "max")):
        bound = _number(node.get(keyword))
        if bound is not None:
            checks.append(Check(method, (format_number(bound),)))

    return PrimitiveExpr("string", tuple(checks))


def _compile_number(node: dict[str, Any], refs: ReferenceSet) -> Expression:
    enum = node.get("enum")
    if isinstance(enum, list):
        numbers = [format_number(v) for v in enum if _number(v) is not None]
        if numbers:
            listed = ", ".join(numbers)
            return RefinedExpr(
                PrimitiveExpr("number"),
                f"val => [{listed}].includes(val)",
                f"Number must be one of: {listed}",
            )

    checks: list[Check] = []
    if node.get("type") == "integer":
        checks.append(Check("int"))
    checks.extend(_bound_checks(node, "minimum", "exclusiveMinimum", "gte", "gt"))
    checks.extend(_bound_checks(node, "maximum", "exclusiveMaximum", "lte", "lt"))

    expr: Expression = PrimitiveExpr("number", tuple(checks))
    multiple_of = _number(node.get("multipleOf"))
    if multiple_of:
        divisor = format_number(multiple_of)
        expr = RefinedExpr(
            expr,
            f"val => val % {divisor} === 0",
            f"Number must be a multiple of {divisor}",
        )
    return expr


def _bound_checks(
    node: dict[str, Any],
    keyword: str,
    exclusive_keyword: str,
    inclusive_method: str,
    exclusive_method: str,
) -> list[Check]:
    """Checks for one side of a numeric range.

    ``exclusiveMinimum: true`` (OpenAPI 3.0) turns ``minimum`` exclusive;
    a numeric ``exclusiveMinimum`` (OpenAPI 3.1) is a bound of its own.
    """
    checks: list[Check] = []
    exclusive = node.get(exclusive_keyword)
    bound = _number(node.get(keyword))
    if bound is not None:
        method = exclusive_method if exclusive is True else inclusive_method
        checks.append(Check(method, (format_number(bound),)))
    exclusive_bound = _number(exclusive)
    if exclusive_bound is not None:
        checks.append(Check(exclusive_method, (format_number(exclusive_bound),)))
    return checks


def _compile_boolean(node: dict[str, Any], refs: ReferenceSet) -> Expression:
    return PrimitiveExpr("boolean")


def _compile_null(node: dict[str, Any], refs: ReferenceSet) -> Expression:
    return NullExpr()


def _compile_array(node: dict[str, Any], refs: ReferenceSet) -> Expression:
    items = node.get("items")
    item = AnyExpr() if items is None else _compile(items, refs)

    checks: list[Check] = []
    for keyword, method in (("minItems", "min"), ("maxItems", "max")):
        bound = _number(node.get(keyword))
        if bound is not None:
            checks.append(Check(method, (format_number(bound),)))

    expr: Expression = ArrayExpr(item, tuple(checks))
    if node.get("uniqueItems") is True:
        expr = RefinedExpr(
            expr,
            "items => new Set(items).size === items.length",
            "Array items must be unique",
        )
    return expr


def _compile_object(node: dict[str, Any], refs: ReferenceSet) -> Expression:
    properties = node.get("properties")
    if not properties:
        return EMPTY_OBJECT
    if not isinstance(properties, dict):
        return AnyExpr(fallback_reason="properties must be an object")

    required = node.get("required")
    required_names = (
        {name for name in required if isinstance(name, str)}
        if isinstance(required, list)
        else set()
    )

    fields = tuple(
        ObjectField(
            name=str(name),
            value=_compile(schema, refs),
            optional=str(name) not in required_names,
        )
        for name, schema in properties.items()
    )

    additional = node.get("additionalProperties")
    extra: str | Expression | None = None
    if additional is True:
        extra = "passthrough"
    elif additional is False:
        extra = "strict"
    elif isinstance(additional, dict):
        extra = _compile(additional, refs)

    return ObjectExpr(fields, extra)


_TYPE_HANDLERS: dict[str, Callable[[dict[str, Any], ReferenceSet], Expression]] = {
    "string": _compile_string,
    "number": _compile_number,
    "integer": _compile_number,
    "boolean": _compile_boolean,
    "null": _compile_null,
    "array": _compile_array,
    "object": _compile_object,
}


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _number(value: Any) -> int | float | None:
    """Return *value* if it is a finite JSON number, else ``None``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _enum_literal(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if _number(value) is not None:
        return format_number(value)
    return str(value)


def _collect_fallbacks(expr: Any, reasons: list[str]) -> None:
    if isinstance(expr, AnyExpr):
        if expr.fallback_reason is not None:
            reasons.append(expr.fallback_reason)
    elif isinstance(expr, ArrayExpr):
        _collect_fallbacks(expr.item, reasons)
    elif isinstance(expr, ObjectExpr):
        for field in expr.fields:
            _collect_fallbacks(field.value, reasons)
        if not isinstance(expr.extra, (str, type(None))):
            _collect_fallbacks(expr.extra, reasons)
    elif isinstance(expr, UnionExpr):
        for variant in expr.variants:
            _collect_fallbacks(variant, reasons)
    elif isinstance(expr, RefinedExpr):
        _collect_fallbacks(expr.base, reasons)
    elif isinstance(expr, NullableExpr):
        _collect_fallbacks(expr.inner, reasons)
