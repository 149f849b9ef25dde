"""Tests for specport.parser.schema."""

from __future__ import annotations

from specport.parser.schema import scaffold_from_schema


class TestScaffoldFromSchema:
    def test_object_with_string_and_array(self) -> None:
        schema = {
            "type": "object",
            "properties": {"id": {"type": "string"}, "tags": {"type": "array"}},
        }
        assert scaffold_from_schema(schema) == {"id": "", "tags": []}

    def test_nested_objects(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "owner": {
                    "type": "object",
                    "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
                }
            },
        }
        assert scaffold_from_schema(schema) == {"owner": {"name": "", "age": ""}}

    def test_array_ignores_items(self) -> None:
        assert scaffold_from_schema({"type": "array", "items": {"type": "object"}}) == []

    def test_object_without_properties(self) -> None:
        assert scaffold_from_schema({"type": "object"}) == {}

    def test_missing_type_and_non_mapping(self) -> None:
        assert scaffold_from_schema({"properties": {"a": {}}}) == ""
        assert scaffold_from_schema(None) == ""

    def test_combinators_not_interpreted(self) -> None:
        assert scaffold_from_schema({"allOf": [{"type": "object"}]}) == ""
