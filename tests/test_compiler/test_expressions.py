"""Tests for rekku.compiler.expressions."""

from __future__ import annotations

import pytest

from rekku.compiler.expressions import (
    EMPTY_OBJECT,
    NEVER,
    AnyExpr,
    ArrayExpr,
    Check,
    EnumExpr,
    NullableExpr,
    NullExpr,
    ObjectExpr,
    ObjectField,
    PrimitiveExpr,
    ReferenceExpr,
    RefinedExpr,
    UnionExpr,
    format_number,
    is_bare_identifier,
    property_key,
    string_literal,
    to_identifier,
    validator_symbol,
)


# ---------------------------------------------------------------------------
# Literal helpers
# ---------------------------------------------------------------------------


class TestIdentifiers:
    @pytest.mark.parametrize("name", ["status", "_private", "$ref", "camelCase2"])
    def test_bare_identifiers(self, name: str) -> None:
        assert is_bare_identifier(name)

    @pytest.mark.parametrize(
        "name", ["filter[status]", "sort-by", "include[]", "2fa", "a.b", ""]
    )
    def test_not_bare_identifiers(self, name: str) -> None:
        assert not is_bare_identifier(name)

    def test_property_key_leaves_bare_name_unquoted(self) -> None:
        assert property_key("status") == "status"

    def test_property_key_quotes_other_names(self) -> None:
        assert property_key("filter[status]") == '"filter[status]"'

    def test_to_identifier_replaces_invalid_characters(self) -> None:
        assert to_identifier("My-Schema.v2") == "My_Schema_v2"

    def test_to_identifier_prefixes_leading_digit(self) -> None:
        assert to_identifier("3DModel") == "_3DModel"

    def test_validator_symbol(self) -> None:
        assert validator_symbol("User") == "UserValidator"
        assert validator_symbol("user-profile") == "user_profileValidator"


class TestLiterals:
    def test_string_literal_escapes_quotes(self) -> None:
        assert string_literal('say "hi"') == '"say \\"hi\\""'

    def test_string_literal_keeps_unicode(self) -> None:
        assert string_literal("café") == '"café"'

    def test_format_integral_float(self) -> None:
        assert format_number(1.0) == "1"

    def test_format_fraction(self) -> None:
        assert format_number(0.5) == "0.5"

    def test_format_int(self) -> None:
        assert format_number(-3) == "-3"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRender:
    def test_any_and_never(self) -> None:
        assert AnyExpr().render() == "z.any()"
        assert NEVER.render() == "z.never()"
        assert NullExpr().render() == "z.null()"

    def test_fallback_flag(self) -> None:
        assert not AnyExpr().is_fallback
        assert AnyExpr(fallback_reason="bad").is_fallback

    def test_str_matches_render(self) -> None:
        expr = PrimitiveExpr("string", (Check("email"),))
        assert str(expr) == expr.render() == "z.string().email()"

    def test_checks_render_in_order(self) -> None:
        expr = PrimitiveExpr("string", (Check("min", ("1",)), Check("max", ("100",))))
        assert expr.render() == "z.string().min(1).max(100)"

    def test_enum(self) -> None:
        assert EnumExpr(("light", "dark")).render() == 'z.enum(["light", "dark"])'

    def test_array_with_checks(self) -> None:
        expr = ArrayExpr(PrimitiveExpr("string"), (Check("min", ("1",)),))
        assert expr.render() == "z.array(z.string()).min(1)"

    def test_empty_object(self) -> None:
        assert EMPTY_OBJECT.render() == "z.object({})"

    def test_object_fields(self) -> None:
        expr = ObjectExpr(
            (
                ObjectField("id", PrimitiveExpr("number")),
                ObjectField("sort-by", PrimitiveExpr("string"), optional=True),
            )
        )
        assert expr.render() == 'z.object({ id: z.number(), "sort-by": z.string().optional() })'

    @pytest.mark.parametrize(
        "extra, suffix",
        [
            ("passthrough", ".passthrough()"),
            ("strict", ".strict()"),
            (PrimitiveExpr("string"), ".catchall(z.string())"),
        ],
    )
    def test_object_extra_keys(self, extra, suffix: str) -> None:
        expr = ObjectExpr((ObjectField("a", PrimitiveExpr("boolean")),), extra)
        assert expr.render() == f"z.object({{ a: z.boolean() }}){suffix}"

    def test_union(self) -> None:
        expr = UnionExpr((PrimitiveExpr("string"), PrimitiveExpr("number")))
        assert expr.render() == "z.union([z.string(), z.number()])"

    def test_single_variant_union_renders_variant(self) -> None:
        assert UnionExpr((PrimitiveExpr("string"),)).render() == "z.string()"

    def test_reference_renders_symbol(self) -> None:
        assert ReferenceExpr("Tag", "TagValidator").render() == "TagValidator"

    def test_refined(self) -> None:
        expr = RefinedExpr(PrimitiveExpr("number"), "val => val > 0", "Must be positive")
        assert expr.render() == 'z.number().refine(val => val > 0, { message: "Must be positive" })'

    def test_nullable(self) -> None:
        assert NullableExpr(PrimitiveExpr("string")).render() == "z.string().nullable()"

    def test_expressions_are_immutable(self) -> None:
        expr = PrimitiveExpr("string")
        with pytest.raises(AttributeError):
            expr.kind = "number"  # type: ignore[misc]
