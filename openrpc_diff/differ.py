"""
Diffs a pair of content descriptors: schema structure and requiredness.
"""

from typing import Any, Dict, Optional

from openrpc_diff.classifier import classify
from openrpc_diff.models import ContentDescriptor, DescriptorDiff, RequiredChange
from openrpc_diff.schema import Schema, to_json
from openrpc_diff.structural_diff import diff_schemas


def bundle(schema: Schema, definitions: Dict[str, Schema]) -> Dict[str, Any]:
    """
    Combine a schema with its document's definitions into one JSON value.

    Boolean schemas become their object form: ``true`` is ``{}`` and
    ``false`` is ``{"not": {}}``.
    """
    value = to_json(schema)
    if value is True:
        value = {}
    elif value is False:
        value = {"not": {}}
    value["definitions"] = {name: to_json(definition) for name, definition in definitions.items()}
    return value


def required_change(left: ContentDescriptor, right: ContentDescriptor) -> Optional[RequiredChange]:
    if left.is_required and not right.is_required:
        return RequiredChange.LEFT
    if right.is_required and not left.is_required:
        return RequiredChange.RIGHT
    return None


def diff_descriptors(
    left: ContentDescriptor,
    right: ContentDescriptor,
    left_definitions: Dict[str, Schema],
    right_definitions: Dict[str, Schema],
) -> Optional[DescriptorDiff]:
    """
    Diff two content descriptors.

    Args:
        left: Descriptor from the left document
        right: Descriptor from the right document
        left_definitions: Schema definitions of the left document
        right_definitions: Schema definitions of the right document

    Returns:
        A DescriptorDiff, or None when the descriptors are equivalent

    Raises:
        SchemaDiffError: If either schema cannot be diffed
    """
    raw_changes = diff_schemas(bundle(left.schema, left_definitions), bundle(right.schema, right_definitions))
    changes = tuple(classify(raw) for raw in raw_changes)
    required = required_change(left, right)
    if not changes and required is None:
        return None
    return DescriptorDiff(changes=changes, required=required)
