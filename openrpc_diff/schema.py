"""
Schema tree used by OpenRPC content descriptors.

A schema is either a boolean (``true`` matches every instance, ``false``
matches none) or an object node. Object nodes keep every keyword that holds
subschemas in an explicit slot so the tree can be walked without guessing;
all remaining keywords (type, enum, const, ranges, required, ...) are kept
verbatim in ``keywords``. They take part in diffing but not in traversal.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

from openrpc_diff.errors import SchemaFormatError


@dataclass(frozen=True)
class BoolSchema:
    """``true`` or ``false`` schema."""

    value: bool


@dataclass
class ObjectSchema:
    """A JSON Schema object node."""

    reference: Optional[str] = None
    # subschemas
    all_of: Optional[List["Schema"]] = None
    any_of: Optional[List["Schema"]] = None
    one_of: Optional[List["Schema"]] = None
    not_schema: Optional["Schema"] = None
    if_schema: Optional["Schema"] = None
    then_schema: Optional["Schema"] = None
    else_schema: Optional["Schema"] = None
    # array validation
    items: Optional[Union["Schema", List["Schema"]]] = None
    additional_items: Optional["Schema"] = None
    contains: Optional["Schema"] = None
    # object validation
    properties: Optional[Dict[str, "Schema"]] = None
    pattern_properties: Optional[Dict[str, "Schema"]] = None
    additional_properties: Optional["Schema"] = None
    property_names: Optional["Schema"] = None
    # everything else
    keywords: Dict[str, Any] = field(default_factory=dict)

    def subschemas(self) -> Iterator["Schema"]:
        """Yield every direct child schema exactly once."""
        for branches in (self.all_of, self.any_of, self.one_of):
            if branches:
                yield from branches
        for child in (self.not_schema, self.if_schema, self.then_schema, self.else_schema):
            if child is not None:
                yield child
        if isinstance(self.items, list):
            yield from self.items
        elif self.items is not None:
            yield self.items
        for child in (self.additional_items, self.contains):
            if child is not None:
                yield child
        for named in (self.properties, self.pattern_properties):
            if named:
                yield from named.values()
        for child in (self.additional_properties, self.property_names):
            if child is not None:
                yield child


Schema = Union[BoolSchema, ObjectSchema]

TRUE_SCHEMA = BoolSchema(True)
FALSE_SCHEMA = BoolSchema(False)

# JSON keyword -> ObjectSchema attribute
_LIST_SLOTS = {"allOf": "all_of", "anyOf": "any_of", "oneOf": "one_of"}
_SINGLE_SLOTS = {
    "not": "not_schema",
    "if": "if_schema",
    "then": "then_schema",
    "else": "else_schema",
    "additionalItems": "additional_items",
    "contains": "contains",
    "additionalProperties": "additional_properties",
    "propertyNames": "property_names",
}
_MAP_SLOTS = {"properties": "properties", "patternProperties": "pattern_properties"}


def from_json(value: Any, pointer: str = "") -> Schema:
    """
    Build a schema tree from a decoded JSON value.

    Args:
        value: A bool or a dict
        pointer: Location of ``value`` in its document, used in errors

    Raises:
        SchemaFormatError: If a node is neither a bool nor an object, or a
            subschema container has the wrong shape
    """
    if isinstance(value, bool):
        return BoolSchema(value)
    if not isinstance(value, dict):
        raise SchemaFormatError(f"expected a schema (object or boolean), found {_json_type(value)}", pointer)

    node = ObjectSchema()
    for key, item in value.items():
        child_pointer = f"{pointer}/{key}"
        if key == "$ref":
            if not isinstance(item, str):
                raise SchemaFormatError(f"$ref must be a string, found {_json_type(item)}", child_pointer)
            node.reference = item
        elif key in _LIST_SLOTS:
            if not isinstance(item, list):
                raise SchemaFormatError(f"{key} must be an array, found {_json_type(item)}", child_pointer)
            branches = [from_json(branch, f"{child_pointer}/{i}") for i, branch in enumerate(item)]
            setattr(node, _LIST_SLOTS[key], branches)
        elif key in _SINGLE_SLOTS:
            setattr(node, _SINGLE_SLOTS[key], from_json(item, child_pointer))
        elif key in _MAP_SLOTS:
            if not isinstance(item, dict):
                raise SchemaFormatError(f"{key} must be an object, found {_json_type(item)}", child_pointer)
            for name in item:
                if not isinstance(name, str):
                    raise SchemaFormatError(f"{key} names must be strings, found {name!r}", child_pointer)
            children = {name: from_json(child, f"{child_pointer}/{name}") for name, child in item.items()}
            setattr(node, _MAP_SLOTS[key], children)
        elif key == "items":
            if isinstance(item, list):
                node.items = [from_json(entry, f"{child_pointer}/{i}") for i, entry in enumerate(item)]
            else:
                node.items = from_json(item, child_pointer)
        else:
            node.keywords[key] = item
    return node


def to_json(schema: Schema) -> Any:
    """Convert a schema tree back into plain JSON values."""
    if isinstance(schema, BoolSchema):
        return schema.value

    result: Dict[str, Any] = {}
    if schema.reference is not None:
        result["$ref"] = schema.reference
    result.update(schema.keywords)
    for key, attr in _LIST_SLOTS.items():
        branches = getattr(schema, attr)
        if branches is not None:
            result[key] = [to_json(branch) for branch in branches]
    for key, attr in _SINGLE_SLOTS.items():
        child = getattr(schema, attr)
        if child is not None:
            result[key] = to_json(child)
    for key, attr in _MAP_SLOTS.items():
        children = getattr(schema, attr)
        if children is not None:
            result[key] = {name: to_json(child) for name, child in children.items()}
    if isinstance(schema.items, list):
        result["items"] = [to_json(entry) for entry in schema.items]
    elif schema.items is not None:
        result["items"] = to_json(schema.items)
    return result


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"
