"""
Data model for OpenRPC compatibility checking.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from openrpc_diff.schema import FALSE_SCHEMA, Schema


@dataclass(frozen=True)
class ContentDescriptor:
    """A named, optionally required schema: one parameter or one result."""

    name: str
    schema: Schema
    required: Optional[bool] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    deprecated: Optional[bool] = None

    @property
    def is_required(self) -> bool:
        return bool(self.required)


# Stands in for a missing parameter or result when pairing signatures.
ABSENT_DESCRIPTOR = ContentDescriptor(name="", schema=FALSE_SCHEMA, required=False)


@dataclass(frozen=True)
class MethodSignature:
    """Represents one method: its ordered parameters and optional result."""

    name: str
    params: Tuple[ContentDescriptor, ...] = ()
    result: Optional[ContentDescriptor] = None


@dataclass(frozen=True)
class SpecificationDocument:
    """A loaded, reference-normalized OpenRPC document."""

    path: str
    definitions: Dict[str, Schema]
    methods: Dict[str, MethodSignature]


class ChangeKind(Enum):
    """Closed taxonomy of structural schema changes."""

    TYPE_ADD = "type-add"
    TYPE_REMOVE = "type-remove"
    CONST_ADD = "const-add"
    CONST_REMOVE = "const-remove"
    PROPERTY_ADD = "property-add"
    PROPERTY_REMOVE = "property-remove"
    RANGE_ADD = "range-add"
    RANGE_REMOVE = "range-remove"
    RANGE_CHANGE = "range-change"
    TUPLE_TO_ARRAY = "tuple-to-array"
    ARRAY_TO_TUPLE = "array-to-tuple"
    TUPLE_CHANGE = "tuple-change"
    REQUIRED_REMOVE = "required-remove"
    REQUIRED_ADD = "required-add"


class RequiredChange(Enum):
    """How requiredness of a content descriptor changed."""

    LEFT = "left"  # required on the left, not on the right
    RIGHT = "right"  # required on the right, not on the left


@dataclass(frozen=True)
class Change:
    """
    One classified structural difference.

    ``subject`` is a type name for type changes, the literal value for const
    changes and a property name for property and required changes. Range and
    tuple changes carry no subject.
    """

    path: str
    kind: ChangeKind
    subject: Any = None


@dataclass(frozen=True)
class DescriptorDiff:
    """Differences between two content descriptors; never empty."""

    changes: Tuple[Change, ...] = ()
    required: Optional[RequiredChange] = None


@dataclass(frozen=True)
class MethodChange:
    """Per-position parameter diffs plus the result diff of one method."""

    parameters: Dict[int, DescriptorDiff] = field(default_factory=dict)
    result: Optional[DescriptorDiff] = None


@dataclass(frozen=True)
class Summary:
    """Outcome of comparing two documents."""

    equivalent: List[str] = field(default_factory=list)
    different: Dict[str, MethodChange] = field(default_factory=dict)
    left: List[str] = field(default_factory=list)
    right: List[str] = field(default_factory=list)
