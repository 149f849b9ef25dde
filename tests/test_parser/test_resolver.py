"""Tests for specport.parser.resolver."""

from __future__ import annotations

import copy

import pytest

from specport.exceptions import RefCycleError
from specport.models import RefCyclePolicy
from specport.parser.resolver import resolve_refs

PET = {"type": "object", "properties": {"name": {"type": "string"}}}


# ---------------------------------------------------------------------------
# Basic resolution
# ---------------------------------------------------------------------------


class TestResolveRefs:
    """Test local components refs are substituted."""

    def test_resolves_to_literal_target(self) -> None:
        components = {"schemas": {"Pet": PET}}
        assert resolve_refs({"$ref": "#/components/schemas/Pet"}, components) == PET

    def test_resolves_nested_refs(self) -> None:
        components = {
            "schemas": {
                "Owner": {"type": "object", "properties": {"pet": {"$ref": "#/components/schemas/Pet"}}},
                "Pet": PET,
            }
        }
        node = {"schema": {"$ref": "#/components/schemas/Owner"}}
        resolved = resolve_refs(node, components)
        assert resolved["schema"]["properties"]["pet"] == PET

    def test_resolves_inside_lists(self) -> None:
        components = {"parameters": {"Limit": {"name": "limit", "in": "query"}}}
        node = {"parameters": [{"$ref": "#/components/parameters/Limit"}, {"name": "x"}]}
        resolved = resolve_refs(node, components)
        assert resolved["parameters"] == [{"name": "limit", "in": "query"}, {"name": "x"}]

    def test_does_not_mutate_inputs(self) -> None:
        components = {"schemas": {"Pet": copy.deepcopy(PET)}}
        node = {"a": {"$ref": "#/components/schemas/Pet"}}
        before_node = copy.deepcopy(node)
        before_components = copy.deepcopy(components)

        resolved = resolve_refs(node, components)
        resolved["a"]["type"] = "changed"

        assert node == before_node
        assert components == before_components

    def test_json_pointer_escapes(self) -> None:
        components = {"schemas": {"a/b": {"type": "string"}}}
        assert resolve_refs({"$ref": "#/components/schemas/a~1b"}, components) == {"type": "string"}


# ---------------------------------------------------------------------------
# Soft misses and pass-through
# ---------------------------------------------------------------------------


class TestSoftMiss:
    """Unresolvable refs come back unchanged instead of raising."""

    def test_missing_component_returned_unchanged(self) -> None:
        node = {"$ref": "#/components/schemas/Ghost"}
        assert resolve_refs(node, {"schemas": {"Pet": PET}}) == node

    def test_no_components(self) -> None:
        node = {"$ref": "#/components/schemas/Pet"}
        assert resolve_refs(node, None) == node

    def test_external_ref_passes_through(self) -> None:
        node = {"$ref": "common.yaml#/Pet"}
        assert resolve_refs(node, {"schemas": {"Pet": PET}}) == node

    def test_scalars_untouched(self) -> None:
        assert resolve_refs("text", {}) == "text"
        assert resolve_refs(3, {}) == 3


# ---------------------------------------------------------------------------
# Cycle guard
# ---------------------------------------------------------------------------


class TestCycles:
    """Test self-referencing schemas terminate."""

    COMPONENTS = {
        "schemas": {
            "Node": {
                "type": "object",
                "properties": {"child": {"$ref": "#/components/schemas/Node"}},
            }
        }
    }

    def test_cycle_truncates_by_default(self) -> None:
        resolved = resolve_refs({"$ref": "#/components/schemas/Node"}, self.COMPONENTS)
        assert resolved["type"] == "object"
        assert resolved["properties"]["child"] == {"$ref": "#/components/schemas/Node"}

    def test_cycle_raises_with_error_policy(self) -> None:
        with pytest.raises(RefCycleError) as exc_info:
            resolve_refs(
                {"$ref": "#/components/schemas/Node"},
                self.COMPONENTS,
                on_cycle=RefCyclePolicy.ERROR,
            )
        assert exc_info.value.ref == "#/components/schemas/Node"

    def test_depth_limit(self) -> None:
        components = {
            "schemas": {
                "A": {"$ref": "#/components/schemas/B"},
                "B": {"$ref": "#/components/schemas/C"},
                "C": {"type": "string"},
            }
        }
        node = {"$ref": "#/components/schemas/A"}
        assert resolve_refs(node, components, max_depth=1) == {"$ref": "#/components/schemas/B"}
        assert resolve_refs(node, components, max_depth=3) == {"type": "string"}

    def test_same_ref_twice_is_not_a_cycle(self) -> None:
        components = {"schemas": {"Pet": PET}}
        node = {
            "a": {"$ref": "#/components/schemas/Pet"},
            "b": {"$ref": "#/components/schemas/Pet"},
        }
        resolved = resolve_refs(node, components, on_cycle=RefCyclePolicy.ERROR)
        assert resolved == {"a": PET, "b": PET}
