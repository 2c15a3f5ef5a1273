"""
Unit tests for the structural schema diff.
"""

import pytest

from openrpc_diff.errors import SchemaDiffError
from openrpc_diff.structural_diff import ALL_TYPES, RawChange, RawChangeKind, diff_schemas, min_cost_assignment


def kinds(changes):
    return [(change.path, change.kind) for change in changes]


@pytest.mark.core
class TestInstanceTypes:
    """Test effective type comparison."""

    def test_identical_schemas(self):
        schema = {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["a"]}
        assert diff_schemas(schema, dict(schema)) == []

    def test_type_replaced(self):
        changes = diff_schemas({"type": "string"}, {"type": "integer"})
        assert changes == [
            RawChange("", RawChangeKind.TYPE_REMOVE, {"removed": "string"}),
            RawChange("", RawChangeKind.TYPE_ADD, {"added": "integer"}),
        ]

    def test_never_to_integer(self):
        """The never-matching schema has no types, so every type is added."""
        changes = diff_schemas({"not": {}}, {"type": "integer"})
        assert changes == [RawChange("", RawChangeKind.TYPE_ADD, {"added": "integer"})]

    def test_any_to_string(self):
        """An unconstrained schema accepts every type."""
        changes = diff_schemas({}, {"type": "string"})
        removed = [change.details["removed"] for change in changes]

        assert all(change.kind == RawChangeKind.TYPE_REMOVE for change in changes)
        assert removed == sorted(ALL_TYPES - {"string"})

    def test_nullable_split(self):
        """A multi-typed schema is compared type by type."""
        changes = diff_schemas({"type": "string"}, {"type": ["string", "null"]})
        assert changes == [RawChange("", RawChangeKind.TYPE_ADD, {"added": "null"})]

    def test_type_inferred_from_const_and_properties(self):
        assert diff_schemas({"const": "a"}, {"type": "string", "const": "a"}) == []
        assert diff_schemas({"properties": {"a": {}}}, {"type": "object", "properties": {"a": {}}}) == []

    def test_unknown_type_name(self):
        with pytest.raises(SchemaDiffError, match="unknown type 'strin'") as exc_info:
            diff_schemas({"type": "strin"}, {"type": "string"})
        assert exc_info.value.side == "left"

    def test_malformed_type_value(self):
        with pytest.raises(SchemaDiffError, match="type must be a string or an array of strings"):
            diff_schemas({"type": "string"}, {"type": 5})


@pytest.mark.core
class TestConst:
    """Test const comparison."""

    def test_const_changed(self):
        """A changed constant is reported as remove old, add new at the same path."""
        changes = diff_schemas({"const": 1}, {"const": 2})
        assert changes == [
            RawChange("", RawChangeKind.CONST_REMOVE, {"removed": 1}),
            RawChange("", RawChangeKind.CONST_ADD, {"added": 2}),
        ]

    def test_integer_to_float_const_is_const_change_only(self):
        changes = diff_schemas({"const": 1}, {"const": 1.5})
        assert changes == [
            RawChange("", RawChangeKind.CONST_REMOVE, {"removed": 1}),
            RawChange("", RawChangeKind.CONST_ADD, {"added": 1.5}),
        ]

    def test_const_added_and_removed(self):
        assert kinds(diff_schemas({"type": "string"}, {"type": "string", "const": "x"})) == [
            ("", RawChangeKind.CONST_ADD)
        ]
        assert kinds(diff_schemas({"type": "string", "const": "x"}, {"type": "string"})) == [
            ("", RawChangeKind.CONST_REMOVE)
        ]

    def test_single_valued_enum_is_const(self):
        changes = diff_schemas({"enum": ["a"]}, {"const": "b"})
        assert [(change.kind, change.details) for change in changes] == [
            (RawChangeKind.CONST_REMOVE, {"removed": "a"}),
            (RawChangeKind.CONST_ADD, {"added": "b"}),
        ]

    def test_numeric_formatting_ignored_inside_values(self):
        """1 and 1.0 inside a constant object are the same value."""
        assert diff_schemas({"const": {"limit": 1}}, {"const": {"limit": 1.0}}) == []


@pytest.mark.core
class TestProperties:
    """Test property and required comparison."""

    def test_added_removed_and_nested(self):
        lhs = {"type": "object", "properties": {"a": {"type": "string"}, "gone": {}}}
        rhs = {"type": "object", "properties": {"a": {"type": "integer"}, "b": {}}}

        changes = diff_schemas(lhs, rhs)

        assert kinds(changes) == [
            ("", RawChangeKind.PROPERTY_REMOVE),
            ("", RawChangeKind.PROPERTY_ADD),
            (".a", RawChangeKind.TYPE_REMOVE),
            (".a", RawChangeKind.TYPE_ADD),
        ]
        assert changes[0].details == {"lhs_additional_properties": True, "removed": "gone"}
        assert changes[1].details == {"lhs_additional_properties": True, "added": "b"}

    def test_closed_object_flag(self):
        lhs = {"type": "object", "properties": {"a": {}}, "additionalProperties": False}
        rhs = {"type": "object", "properties": {"a": {}, "b": {}}, "additionalProperties": False}

        changes = diff_schemas(lhs, rhs)

        assert changes == [
            RawChange("", RawChangeKind.PROPERTY_ADD, {"lhs_additional_properties": False, "added": "b"})
        ]

    def test_additional_properties_schema_changed(self):
        lhs = {"type": "object", "additionalProperties": {"type": "string"}}
        rhs = {"type": "object", "additionalProperties": {"type": "number"}}
        assert kinds(diff_schemas(lhs, rhs)) == [("", RawChangeKind.TYPE_REMOVE), ("", RawChangeKind.TYPE_ADD)]

    def test_additional_properties_reference_resolved_per_side(self):
        """The same reference can point at different definitions on each side."""
        schema = {"type": "object", "additionalProperties": {"$ref": "#/definitions/V"}}
        lhs = dict(schema, definitions={"V": {"type": "string"}})
        rhs = dict(schema, definitions={"V": {"type": "integer"}})

        assert diff_schemas(lhs, rhs) == [
            RawChange("", RawChangeKind.TYPE_REMOVE, {"removed": "string"}),
            RawChange("", RawChangeKind.TYPE_ADD, {"added": "integer"}),
        ]

    def test_required_names(self):
        changes = diff_schemas({"required": ["a", "b"]}, {"required": ["b", "c"]})
        assert changes == [
            RawChange("", RawChangeKind.REQUIRED_REMOVE, {"property": "a"}),
            RawChange("", RawChangeKind.REQUIRED_ADD, {"property": "c"}),
        ]

    def test_properties_must_be_object(self):
        with pytest.raises(SchemaDiffError, match="properties must be an object"):
            diff_schemas({"properties": []}, {})


@pytest.mark.core
class TestRanges:
    """Test numeric range comparison."""

    def test_range_add_remove_change(self):
        lhs = {"type": "integer", "minimum": 0, "maximum": 10}
        rhs = {"type": "integer", "minimum": 1, "exclusiveMaximum": 10}

        changes = diff_schemas(lhs, rhs)

        assert changes == [
            RawChange("", RawChangeKind.RANGE_CHANGE, {"old_value": ("minimum", 0), "new_value": ("minimum", 1)}),
            RawChange("", RawChangeKind.RANGE_REMOVE, {"removed": ("maximum", 10)}),
            RawChange("", RawChangeKind.RANGE_ADD, {"added": ("exclusiveMaximum", 10)}),
        ]

    def test_integer_and_float_bounds_are_equal(self):
        assert diff_schemas({"type": "number", "minimum": 1}, {"type": "number", "minimum": 1.0}) == []

    def test_boolean_bound_rejected(self):
        with pytest.raises(SchemaDiffError, match="exclusiveMinimum must be a number"):
            diff_schemas({"exclusiveMinimum": True}, {})


@pytest.mark.core
class TestArrayItems:
    """Test array and tuple item comparison."""

    def test_single_items(self):
        changes = diff_schemas({"items": {"type": "string"}}, {"items": {"type": "integer"}})
        assert kinds(changes) == [(".?", RawChangeKind.TYPE_REMOVE), (".?", RawChangeKind.TYPE_ADD)]

    def test_tuple_length_changed(self):
        lhs = {"type": "array", "items": [{"type": "string"}, {"type": "integer"}]}
        rhs = {"type": "array", "items": [{"type": "string"}]}
        assert diff_schemas(lhs, rhs) == [RawChange("", RawChangeKind.TUPLE_CHANGE, {"new_length": 1})]

    def test_array_to_tuple(self):
        lhs = {"type": "array", "items": {"type": "string"}}
        rhs = {"type": "array", "items": [{"type": "string"}, {"type": "integer"}]}

        changes = diff_schemas(lhs, rhs)

        assert changes[0] == RawChange("", RawChangeKind.ARRAY_TO_TUPLE, {"new_length": 2})
        assert kinds(changes[1:]) == [(".1", RawChangeKind.TYPE_REMOVE), (".1", RawChangeKind.TYPE_ADD)]

    def test_tuple_to_array(self):
        lhs = {"type": "array", "items": [{"type": "string"}, {"type": "integer"}]}
        rhs = {"type": "array", "items": {"type": "string"}}

        changes = diff_schemas(lhs, rhs)

        assert changes[0] == RawChange("", RawChangeKind.TUPLE_TO_ARRAY, {"old_length": 2})
        assert [(change.path, change.details) for change in changes[1:]] == [
            (".1", {"removed": "integer"}),
            (".1", {"added": "string"}),
        ]


@pytest.mark.core
class TestReferences:
    """Test resolution of local references."""

    def test_each_side_uses_its_own_definitions(self):
        lhs = {"$ref": "#/definitions/Id", "definitions": {"Id": {"type": "string"}}}
        rhs = {"$ref": "#/definitions/Id", "definitions": {"Id": {"type": "integer"}}}
        assert kinds(diff_schemas(lhs, rhs)) == [("", RawChangeKind.TYPE_REMOVE), ("", RawChangeKind.TYPE_ADD)]

    def test_reference_equivalent_to_inline(self):
        lhs = {"properties": {"id": {"$ref": "#/definitions/Id"}}, "definitions": {"Id": {"type": "string"}}}
        rhs = {"properties": {"id": {"type": "string"}}, "definitions": {}}
        assert diff_schemas(lhs, rhs) == []

    def test_reference_chain(self):
        definitions = {"A": {"$ref": "#/definitions/B"}, "B": {"type": "boolean"}}
        lhs = {"$ref": "#/definitions/A", "definitions": definitions}
        rhs = {"type": "boolean", "definitions": {}}
        assert diff_schemas(lhs, rhs) == []

    def test_unresolved_reference(self):
        lhs = {"properties": {"a": {"$ref": "#/definitions/Missing"}}, "definitions": {}}
        rhs = {"properties": {"a": {}}, "definitions": {}}

        with pytest.raises(SchemaDiffError, match="unresolved reference '#/definitions/Missing'") as exc_info:
            diff_schemas(lhs, rhs)

        assert exc_info.value.side == "left"
        assert exc_info.value.schema_path == ".a"

    def test_self_referential_definition(self):
        """A reference cycle is rejected instead of recursing forever."""
        definitions = {"Node": {"type": "object", "properties": {"next": {"$ref": "#/definitions/Node"}}}}
        lhs = {"$ref": "#/definitions/Node", "definitions": definitions}
        rhs = {"$ref": "#/definitions/Node", "definitions": definitions}

        with pytest.raises(SchemaDiffError, match="reference cycle through Node") as exc_info:
            diff_schemas(lhs, rhs)

        assert exc_info.value.side == "left"
        assert exc_info.value.schema_path == ".next"

    def test_cycle_only_on_the_right(self):
        lhs = {"type": "object", "properties": {"next": {"type": "object"}}, "definitions": {}}
        rhs = {
            "$ref": "#/definitions/Node",
            "definitions": {"Node": {"type": "object", "properties": {"next": {"$ref": "#/definitions/Node"}}}},
        }

        with pytest.raises(SchemaDiffError, match="reference cycle") as exc_info:
            diff_schemas(lhs, rhs)

        assert exc_info.value.side == "right"

    def test_foreign_reference_left_opaque(self):
        schema = {"$ref": "other.json#/definitions/X"}
        assert diff_schemas(schema, dict(schema)) == []


@pytest.mark.core
class TestAnyOf:
    """Test anyOf branch pairing."""

    def test_branches_paired_by_fewest_changes(self):
        lhs = {"anyOf": [{"type": "string"}, {"type": "integer"}]}
        rhs = {"anyOf": [{"type": "integer", "minimum": 0}, {"type": "string"}]}

        changes = diff_schemas(lhs, rhs)

        assert changes == [RawChange(".<anyOf:0>", RawChangeKind.RANGE_ADD, {"added": ("minimum", 0)})]

    def test_added_branch(self):
        lhs = {"anyOf": [{"type": "string"}]}
        rhs = {"anyOf": [{"type": "string"}, {"type": "null"}]}
        assert diff_schemas(lhs, rhs) == [RawChange("", RawChangeKind.TYPE_ADD, {"added": "null"})]

    def test_reordered_branches_are_equivalent(self):
        lhs = {"anyOf": [{"type": "string"}, {"type": "object", "properties": {"a": {}}}]}
        rhs = {"anyOf": [{"type": "object", "properties": {"a": {}}}, {"type": "string"}]}
        assert diff_schemas(lhs, rhs) == []


@pytest.mark.core
class TestMinCostAssignment:
    """Test the assignment solver used to pair anyOf branches."""

    def test_two_by_two(self):
        assert min_cost_assignment([[3, 0], [1, 2]]) == [1, 0]

    def test_three_by_three(self):
        assert min_cost_assignment([[4, 1, 3], [2, 0, 5], [3, 2, 2]]) == [1, 0, 2]

    def test_trivial_sizes(self):
        assert min_cost_assignment([]) == []
        assert min_cost_assignment([[7]]) == [0]
