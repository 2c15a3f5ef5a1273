"""
Rewrites document-local schema references into the shared definitions namespace.

OpenRPC documents point at their own schemas with ``#/components/schemas/X``.
Before two documents are diffed, each schema is bundled with its document's
definitions under ``definitions``, so every such reference is rewritten to
``#/definitions/X``. References with any other prefix are left alone.
"""

from typing import Dict, Iterable

from openrpc_diff.models import ContentDescriptor
from openrpc_diff.schema import ObjectSchema, Schema

COMPONENTS_PREFIX = "#/components/schemas/"
DEFINITIONS_PREFIX = "#/definitions/"


def normalize_schema(node: Schema):
    """Rewrite references in ``node`` and all of its subschemas, in place."""
    if not isinstance(node, ObjectSchema):
        return
    if node.reference is not None and node.reference.startswith(COMPONENTS_PREFIX):
        node.reference = DEFINITIONS_PREFIX + node.reference[len(COMPONENTS_PREFIX):]
    for child in node.subschemas():
        normalize_schema(child)


def normalize_descriptor(descriptor: ContentDescriptor):
    normalize_schema(descriptor.schema)


def normalize_document(
    descriptors: Iterable[ContentDescriptor],
    component_descriptors: Dict[str, ContentDescriptor],
    component_schemas: Dict[str, Schema],
):
    """
    Normalize every schema reachable from one document.

    Args:
        descriptors: Parameters and results of every method
        component_descriptors: ``components.contentDescriptors``
        component_schemas: ``components.schemas``
    """
    for descriptor in descriptors:
        normalize_descriptor(descriptor)
    for descriptor in component_descriptors.values():
        normalize_descriptor(descriptor)
    for schema in component_schemas.values():
        normalize_schema(schema)
