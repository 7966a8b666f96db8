"""Validator expression model and its zod rendering.

The schema compiler never builds zod source text directly. It builds a tree
of the frozen dataclasses defined here, one class per kind of expression,
and the tree renders itself to text with :meth:`render` (or ``str()``).
Keeping the set of kinds closed makes the compiler exhaustive and lets
tests assert on structure, e.g. that a malformed schema produced an
:class:`AnyExpr` with a ``fallback_reason``, rather than on strings alone.

Expression kinds:

* :class:`AnyExpr` -- ``z.any()``; carries ``fallback_reason`` when it stands
  in for a schema the compiler could not interpret.
* :class:`NeverExpr` -- ``z.never()``; "no body" for inputs and outputs.
* :class:`NullExpr` -- ``z.null()``.
* :class:`PrimitiveExpr` -- ``z.string()``, ``z.number()``, ``z.boolean()``
  followed by chained :class:`Check` modifiers.
* :class:`EnumExpr` -- ``z.enum([...])`` over string literals.
* :class:`ArrayExpr` -- ``z.array(item)`` plus checks.
* :class:`ObjectExpr` -- ``z.object({...})`` plus an extra-keys policy.
* :class:`UnionExpr` -- ``z.union([...])``.
* :class:`ReferenceExpr` -- the ``<Name>Validator`` symbol of a named schema.
* :class:`RefinedExpr` -- ``base.refine(predicate, { message })``.
* :class:`NullableExpr` -- ``inner.nullable()``.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

_BARE_IDENTIFIER = re.compile(r"^[a-zA-Z_$][a-zA-Z0-9_$]*$")
_INVALID_IDENTIFIER_CHARS = re.compile(r"[^a-zA-Z0-9_$]")


# ------------------------------------------------------------------ #
# Literal helpers
# ------------------------------------------------------------------ #


def is_bare_identifier(name: str) -> bool:
    """Return ``True`` if *name* can be used as an unquoted object key."""
    return bool(_BARE_IDENTIFIER.match(name))


def string_literal(value: Any) -> str:
    """Render *value* as a double-quoted string literal."""
    return json.dumps(str(value), ensure_ascii=False)


def property_key(name: str) -> str:
    """Render an object key, quoting it only when it is not a bare identifier.

    Example::

        property_key("status")          # status
        property_key("filter[status]")  # "filter[status]"
    """
    return name if is_bare_identifier(name) else string_literal(name)


def format_number(value: int | float) -> str:
    """Render a number the way a JSON serialiser would (``1.0`` -> ``1``)."""
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def to_identifier(name: str) -> str:
    """Turn a schema name into a valid identifier fragment.

    Characters that cannot appear in an identifier are replaced with ``_``
    and a leading digit is prefixed with ``_``. Names that are already valid
    are returned unchanged.
    """
    cleaned = _INVALID_IDENTIFIER_CHARS.sub("_", name) or "_"
    if cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    return cleaned


def validator_symbol(name: str) -> str:
    """Return the exported validator symbol for the named schema *name*."""
    return f"{to_identifier(name)}Validator"


# ------------------------------------------------------------------ #
# Modifiers
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class Check:
    """A chained method call such as ``.min(3)`` or ``.email()``."""

    method: str
    args: tuple[str, ...] = ()

    def render(self) -> str:
        return f".{self.method}({', '.join(self.args)})"


def _render_checks(checks: tuple[Check, ...]) -> str:
    return "".join(check.render() for check in checks)


# ------------------------------------------------------------------ #
# Expression kinds
# ------------------------------------------------------------------ #


class _Expression:
    """Shared behaviour: ``str(expr)`` is the rendered text."""

    def render(self) -> str:  # pragma: no cover - every kind overrides
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class AnyExpr(_Expression):
    """Accepts anything.

    Args:
        fallback_reason: Set when this expression replaces a schema that
            could not be interpreted; ``None`` for a legitimately untyped
            schema.
    """

    fallback_reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None

    def render(self) -> str:
        return "z.any()"


@dataclass(frozen=True)
class NeverExpr(_Expression):
    """Rejects everything."""

    def render(self) -> str:
        return "z.never()"


@dataclass(frozen=True)
class NullExpr(_Expression):
    def render(self) -> str:
        return "z.null()"


@dataclass(frozen=True)
class PrimitiveExpr(_Expression):
    """A scalar type (``string``, ``number`` or ``boolean``) plus checks."""

    kind: str
    checks: tuple[Check, ...] = ()

    def render(self) -> str:
        return f"z.{self.kind}(){_render_checks(self.checks)}"


@dataclass(frozen=True)
class EnumExpr(_Expression):
    values: tuple[str, ...]

    def render(self) -> str:
        return f"z.enum([{', '.join(string_literal(v) for v in self.values)}])"


@dataclass(frozen=True)
class ArrayExpr(_Expression):
    item: Expression
    checks: tuple[Check, ...] = ()

    def render(self) -> str:
        return f"z.array({self.item.render()}){_render_checks(self.checks)}"


@dataclass(frozen=True)
class ObjectField:
    """One declared property of an :class:`ObjectExpr`."""

    name: str
    value: Expression
    optional: bool = False

    def render(self) -> str:
        suffix = ".optional()" if self.optional else ""
        return f"{property_key(self.name)}: {self.value.render()}{suffix}"


@dataclass(frozen=True)
class ObjectExpr(_Expression):
    """An object with declared fields.

    ``extra`` controls keys that are not declared: ``"passthrough"`` keeps
    them, ``"strict"`` rejects them, an expression validates them (catch-all),
    and ``None`` leaves the zod default (strip).
    """

    fields: tuple[ObjectField, ...] = ()
    extra: Union[str, Expression, None] = None

    def render(self) -> str:
        if self.fields:
            body = f"z.object({{ {', '.join(f.render() for f in self.fields)} }})"
        else:
            body = "z.object({})"
        if self.extra is None:
            return body
        if isinstance(self.extra, str):
            return f"{body}.{self.extra}()"
        return f"{body}.catchall({self.extra.render()})"


@dataclass(frozen=True)
class UnionExpr(_Expression):
    """Matches any of ``variants``; a single variant renders as itself."""

    variants: tuple[Expression, ...]

    def render(self) -> str:
        if len(self.variants) == 1:
            return self.variants[0].render()
        return f"z.union([{', '.join(v.render() for v in self.variants)}])"


@dataclass(frozen=True)
class ReferenceExpr(_Expression):
    """Symbol of a named schema; the referenced body is never inlined."""

    name: str
    symbol: str

    def render(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class RefinedExpr(_Expression):
    """``base`` narrowed by a custom predicate with an error message."""

    base: Expression
    predicate: str
    message: str

    def render(self) -> str:
        return (
            f"{self.base.render()}.refine({self.predicate}, "
            f"{{ message: {string_literal(self.message)} }})"
        )


@dataclass(frozen=True)
class NullableExpr(_Expression):
    inner: Expression

    def render(self) -> str:
        return f"{self.inner.render()}.nullable()"


Expression = Union[
    AnyExpr,
    NeverExpr,
    NullExpr,
    PrimitiveExpr,
    EnumExpr,
    ArrayExpr,
    ObjectExpr,
    UnionExpr,
    ReferenceExpr,
    RefinedExpr,
    NullableExpr,
]
"""Every kind of validator expression the compiler can produce."""


EMPTY_OBJECT = ObjectExpr()
NEVER = NeverExpr()
