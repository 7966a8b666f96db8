"""Tests for rekku.compiler.schema."""

from __future__ import annotations

from typing import Any

import pytest

from rekku.compiler.expressions import (
    AnyExpr,
    EnumExpr,
    NullableExpr,
    NullExpr,
    ObjectExpr,
    PrimitiveExpr,
    ReferenceExpr,
    UnionExpr,
)
from rekku.compiler.schema import (
    ReferenceSet,
    compile_schema,
    find_fallbacks,
    merge_all_of,
)


def _render(node: Any, refs: ReferenceSet | None = None) -> str:
    return compile_schema(node, refs).render()


# ---------------------------------------------------------------------------
# ReferenceSet
# ---------------------------------------------------------------------------


class TestReferenceSet:
    def test_keeps_first_seen_order(self) -> None:
        refs = ReferenceSet()
        for name in ["B", "A", "B", "C"]:
            refs.add(name)
        assert refs.names() == ["B", "A", "C"]
        assert len(refs) == 3
        assert "A" in refs
        assert list(refs) == ["B", "A", "C"]


# ---------------------------------------------------------------------------
# Fallbacks
# ---------------------------------------------------------------------------


class TestFallback:
    def test_none_accepts_anything(self) -> None:
        expr = compile_schema(None)
        assert isinstance(expr, AnyExpr)
        assert not expr.is_fallback

    def test_missing_type_accepts_anything(self) -> None:
        assert compile_schema({"description": "free form"}) == AnyExpr()

    @pytest.mark.parametrize("node", ["string", 42, ["a"], True])
    def test_non_object_node_falls_back(self, node: Any) -> None:
        expr = compile_schema(node)
        assert isinstance(expr, AnyExpr)
        assert expr.is_fallback

    def test_unknown_type_falls_back(self) -> None:
        expr = compile_schema({"type": "file"})
        assert isinstance(expr, AnyExpr)
        assert "unsupported type" in (expr.fallback_reason or "")

    def test_non_string_ref_falls_back(self) -> None:
        expr = compile_schema({"$ref": 7})
        assert isinstance(expr, AnyExpr) and expr.is_fallback

    def test_malformed_properties_fall_back(self) -> None:
        expr = compile_schema({"type": "object", "properties": ["a", "b"]})
        assert isinstance(expr, AnyExpr) and expr.is_fallback

    def test_combinator_not_a_list_falls_back(self) -> None:
        expr = compile_schema({"anyOf": {"type": "string"}})
        assert isinstance(expr, AnyExpr) and expr.is_fallback

    def test_nested_fallback_is_reported(self) -> None:
        expr = compile_schema(
            {
                "type": "object",
                "properties": {"a": {"type": "string"}, "b": {"type": "tuple"}},
            }
        )
        assert expr.render() == "z.object({ a: z.string().optional(), b: z.any().optional() })"
        assert find_fallbacks(expr) == ["unsupported type 'tuple'"]

    def test_cyclic_structure_without_ref_terminates(self) -> None:
        node: dict[str, Any] = {"type": "array"}
        node["items"] = node
        expr = compile_schema(node)
        assert isinstance(expr, AnyExpr) and expr.is_fallback

    def test_wrongly_typed_constraints_are_ignored(self) -> None:
        node = {"type": "string", "minLength": "3", "maxLength": True, "pattern": 5}
        assert _render(node) == "z.string()"


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class TestReferences:
    def test_ref_returns_symbol_and_records_name(self) -> None:
        refs = ReferenceSet()
        expr = compile_schema({"$ref": "#/components/schemas/Foo"}, refs)
        assert expr == ReferenceExpr(name="Foo", symbol="FooValidator")
        assert refs.names() == ["Foo"]

    def test_ref_recorded_once_when_used_twice(self) -> None:
        refs = ReferenceSet()
        node = {
            "type": "object",
            "properties": {
                "a": {"$ref": "#/components/schemas/Foo"},
                "b": {"type": "array", "items": {"$ref": "#/components/schemas/Foo"}},
            },
        }
        rendered = _render(node, refs)
        assert rendered == (
            "z.object({ a: FooValidator.optional(), b: z.array(FooValidator).optional() })"
        )
        assert refs.names() == ["Foo"]

    def test_ref_wins_over_sibling_keywords(self) -> None:
        node = {"$ref": "#/components/schemas/Foo", "type": "string", "minLength": 2}
        assert _render(node) == "FooValidator"

    def test_pointer_escapes_are_decoded(self) -> None:
        refs = ReferenceSet()
        expr = compile_schema({"$ref": "#/components/schemas/a~1b~0c"}, refs)
        assert refs.names() == ["a/b~c"]
        assert expr.render() == "a_b_cValidator"


# ---------------------------------------------------------------------------
# Type lists
# ---------------------------------------------------------------------------


class TestTypeList:
    def test_single_type_with_null_is_nullable(self) -> None:
        expr = compile_schema({"type": ["string", "null"]})
        assert isinstance(expr, NullableExpr)
        assert expr.render() == "z.string().nullable()"

    def test_several_types_with_null(self) -> None:
        assert _render({"type": ["string", "number", "null"]}) == (
            "z.union([z.string(), z.number()]).nullable()"
        )

    def test_several_types_without_null(self) -> None:
        expr = compile_schema({"type": ["string", "boolean"]})
        assert isinstance(expr, UnionExpr)
        assert expr.render() == "z.union([z.string(), z.boolean()])"

    def test_only_null(self) -> None:
        assert compile_schema({"type": ["null"]}) == NullExpr()

    def test_members_keep_constraints(self) -> None:
        node = {"type": ["integer", "null"], "minimum": 0}
        assert _render(node) == "z.number().int().gte(0).nullable()"

    def test_empty_list_falls_back(self) -> None:
        expr = compile_schema({"type": []})
        assert isinstance(expr, AnyExpr) and expr.is_fallback


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


class TestCombinators:
    def test_one_of_is_union_in_order(self) -> None:
        node = {"oneOf": [{"type": "string"}, {"$ref": "#/components/schemas/Tag"}]}
        assert _render(node) == "z.union([z.string(), TagValidator])"

    def test_any_of_is_union(self) -> None:
        node = {"anyOf": [{"type": "number"}, {"type": "boolean"}]}
        assert _render(node) == "z.union([z.number(), z.boolean()])"

    def test_one_of_checked_before_any_of(self) -> None:
        node = {"oneOf": [{"type": "string"}], "anyOf": [{"type": "number"}]}
        assert _render(node) == "z.string()"

    def test_empty_combinator_is_ignored(self) -> None:
        assert _render({"oneOf": [], "type": "boolean"}) == "z.boolean()"

    def test_all_of_merges_into_one_object(self) -> None:
        node = {
            "allOf": [
                {"properties": {"a": {"type": "string"}}, "required": ["a"]},
                {"properties": {"b": {"type": "number"}}},
            ]
        }
        expr = compile_schema(node)
        assert isinstance(expr, ObjectExpr)
        assert expr.render() == "z.object({ a: z.string(), b: z.number().optional() })"

    def test_all_of_with_ref_keeps_reference(self) -> None:
        refs = ReferenceSet()
        node = {"allOf": [{"$ref": "#/components/schemas/Base"}]}
        assert _render(node, refs) == "BaseValidator"
        assert refs.names() == ["Base"]


class TestMergeAllOf:
    def test_later_properties_override(self) -> None:
        merged = merge_all_of(
            [
                {"properties": {"a": {"type": "string"}}},
                {"properties": {"a": {"type": "number"}, "b": {"type": "boolean"}}},
            ]
        )
        assert merged["properties"] == {"a": {"type": "number"}, "b": {"type": "boolean"}}
        assert merged["type"] == "object"

    def test_required_is_unioned(self) -> None:
        merged = merge_all_of(
            [{"required": ["a", "b"]}, {"required": ["b", "c"]}, {"required": [3]}]
        )
        assert merged["required"] == ["a", "b", "c"]

    def test_non_object_branches_skipped(self) -> None:
        assert merge_all_of(["x", None, {"type": "string"}]) == {"type": "string"}

    def test_inputs_not_modified(self) -> None:
        first = {"properties": {"a": {}}}
        merge_all_of([first, {"properties": {"b": {}}}])
        assert first == {"properties": {"a": {}}}


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------


class TestStrings:
    def test_length_bounds(self) -> None:
        node = {"type": "string", "minLength": 1, "maxLength": 100}
        assert _render(node) == "z.string().min(1).max(100)"

    @pytest.mark.parametrize(
        "fmt, check",
        [
            ("email", ".email()"),
            ("date-time", ".datetime()"),
            ("uri", ".url()"),
            ("url", ".url()"),
            ("uuid", ".uuid()"),
            ("date", ".date()"),
        ],
    )
    def test_formats(self, fmt: str, check: str) -> None:
        assert _render({"type": "string", "format": fmt}) == f"z.string(){check}"

    def test_unknown_format_adds_nothing(self) -> None:
        assert _render({"type": "string", "format": "hostname"}) == "z.string()"

    def test_pattern_is_escaped(self) -> None:
        node = {"type": "string", "pattern": '^\\d+"$'}
        assert _render(node) == 'z.string().regex(new RegExp("^\\\\d+\\"$"))'

    def test_check_order(self) -> None:
        node = {
            "type": "string",
            "maxLength": 9,
            "pattern": "^a",
            "minLength": 2,
            "format": "email",
        }
        assert _render(node) == 'z.string().email().regex(new RegExp("^a")).min(2).max(9)'

    def test_enum_wins_over_other_constraints(self) -> None:
        node = {"type": "string", "enum": ["a", "b"], "minLength": 5, "format": "email"}
        expr = compile_schema(node)
        assert expr == EnumExpr(("a", "b"))
        assert expr.render() == 'z.enum(["a", "b"])'

    def test_enum_literals_are_quoted(self) -> None:
        node = {"type": "string", "enum": ['say "hi"', 1, True, None]}
        assert _render(node) == 'z.enum(["say \\"hi\\"", "1", "true"])'


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


class TestNumbers:
    def test_integer_bounds(self) -> None:
        node = {"type": "integer", "minimum": 0, "maximum": 150}
        assert _render(node) == "z.number().int().gte(0).lte(150)"

    def test_number_is_not_int(self) -> None:
        assert _render({"type": "number"}) == "z.number()"

    def test_exclusive_bounds_boolean_form(self) -> None:
        node = {
            "type": "number",
            "minimum": 0,
            "exclusiveMinimum": True,
            "maximum": 10,
            "exclusiveMaximum": True,
        }
        assert _render(node) == "z.number().gt(0).lt(10)"

    def test_exclusive_bounds_numeric_form(self) -> None:
        node = {"type": "number", "exclusiveMinimum": 0, "exclusiveMaximum": 1.5}
        assert _render(node) == "z.number().gt(0).lt(1.5)"

    def test_multiple_of(self) -> None:
        assert _render({"type": "number", "multipleOf": 0.5}) == (
            'z.number().refine(val => val % 0.5 === 0, '
            '{ message: "Number must be a multiple of 0.5" })'
        )

    def test_zero_multiple_of_ignored(self) -> None:
        assert _render({"type": "number", "multipleOf": 0}) == "z.number()"

    def test_enum_wins(self) -> None:
        node = {"type": "integer", "enum": [1, 2, 3], "minimum": 5}
        assert _render(node) == (
            'z.number().refine(val => [1, 2, 3].includes(val), '
            '{ message: "Number must be one of: 1, 2, 3" })'
        )

    def test_enum_without_numbers_is_ignored(self) -> None:
        assert _render({"type": "integer", "enum": ["a", True]}) == "z.number().int()"

    def test_float_bounds_render_as_json_numbers(self) -> None:
        assert _render({"type": "number", "minimum": 1.0, "maximum": 2.5}) == (
            "z.number().gte(1).lte(2.5)"
        )


# ---------------------------------------------------------------------------
# Other scalars, arrays and objects
# ---------------------------------------------------------------------------


class TestScalars:
    def test_boolean_has_no_modifiers(self) -> None:
        assert _render({"type": "boolean", "enum": [True]}) == "z.boolean()"

    def test_null(self) -> None:
        assert compile_schema({"type": "null"}) == NullExpr()


class TestArrays:
    def test_items_default_to_any(self) -> None:
        assert _render({"type": "array"}) == "z.array(z.any())"

    def test_bounds_then_unique(self) -> None:
        node = {
            "type": "array",
            "items": {"type": "string"},
            "uniqueItems": True,
            "maxItems": 5,
            "minItems": 1,
        }
        assert _render(node) == (
            "z.array(z.string()).min(1).max(5)"
            '.refine(items => new Set(items).size === items.length, '
            '{ message: "Array items must be unique" })'
        )

    def test_unique_items_false(self) -> None:
        assert _render({"type": "array", "uniqueItems": False}) == "z.array(z.any())"


class TestObjects:
    def test_no_properties_is_empty_object(self) -> None:
        assert _render({"type": "object", "additionalProperties": False}) == "z.object({})"

    def test_required_and_optional(self) -> None:
        node = {
            "type": "object",
            "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
            "required": ["id"],
        }
        assert _render(node) == "z.object({ id: z.number().int(), name: z.string().optional() })"

    def test_declaration_order_kept(self) -> None:
        node = {
            "type": "object",
            "properties": {"z": {"type": "string"}, "a": {"type": "string"}},
        }
        assert _render(node).startswith("z.object({ z: ")

    def test_quoted_keys(self) -> None:
        node = {
            "type": "object",
            "properties": {"filter[status]": {"type": "string"}, "status": {"type": "string"}},
        }
        assert _render(node) == (
            'z.object({ "filter[status]": z.string().optional(), status: z.string().optional() })'
        )

    def test_additional_properties_true(self) -> None:
        node = {"type": "object", "properties": {"a": {}}, "additionalProperties": True}
        assert _render(node) == "z.object({ a: z.any().optional() }).passthrough()"

    def test_additional_properties_false(self) -> None:
        node = {"type": "object", "properties": {"a": {}}, "additionalProperties": False}
        assert _render(node) == "z.object({ a: z.any().optional() }).strict()"

    def test_additional_properties_schema(self) -> None:
        refs = ReferenceSet()
        node = {
            "type": "object",
            "properties": {"a": {}},
            "additionalProperties": {"$ref": "#/components/schemas/Extra"},
        }
        assert _render(node, refs) == "z.object({ a: z.any().optional() }).catchall(ExtraValidator)"
        assert refs.names() == ["Extra"]

    def test_self_reference_is_symbol(self) -> None:
        node = {
            "type": "object",
            "properties": {
                "children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}}
            },
        }
        assert _render(node) == "z.object({ children: z.array(NodeValidator).optional() })"


class TestDeterminism:
    def test_same_input_same_output(self, mock_openapi_raw: dict[str, Any]) -> None:
        schemas = mock_openapi_raw["components"]["schemas"]
        first = [_render(node) for node in schemas.values()]
        second = [_render(node) for node in schemas.values()]
        assert first == second

    def test_primitive_kind(self) -> None:
        assert compile_schema({"type": "string"}) == PrimitiveExpr("string")
