"""
Maps raw structural diff operations onto the public change taxonomy.
"""

from typing import Dict, Optional, Tuple

from openrpc_diff.models import Change, ChangeKind
from openrpc_diff.structural_diff import RawChange, RawChangeKind

# raw kind -> (public kind, detail key holding the subject)
# range and tuple operations carry no subject
CLASSIFICATION: Dict[RawChangeKind, Tuple[ChangeKind, Optional[str]]] = {
    RawChangeKind.TYPE_ADD: (ChangeKind.TYPE_ADD, "added"),
    RawChangeKind.TYPE_REMOVE: (ChangeKind.TYPE_REMOVE, "removed"),
    RawChangeKind.CONST_ADD: (ChangeKind.CONST_ADD, "added"),
    RawChangeKind.CONST_REMOVE: (ChangeKind.CONST_REMOVE, "removed"),
    RawChangeKind.PROPERTY_ADD: (ChangeKind.PROPERTY_ADD, "added"),
    RawChangeKind.PROPERTY_REMOVE: (ChangeKind.PROPERTY_REMOVE, "removed"),
    RawChangeKind.RANGE_ADD: (ChangeKind.RANGE_ADD, None),
    RawChangeKind.RANGE_REMOVE: (ChangeKind.RANGE_REMOVE, None),
    RawChangeKind.RANGE_CHANGE: (ChangeKind.RANGE_CHANGE, None),
    RawChangeKind.TUPLE_TO_ARRAY: (ChangeKind.TUPLE_TO_ARRAY, None),
    RawChangeKind.ARRAY_TO_TUPLE: (ChangeKind.ARRAY_TO_TUPLE, None),
    RawChangeKind.TUPLE_CHANGE: (ChangeKind.TUPLE_CHANGE, None),
    RawChangeKind.REQUIRED_REMOVE: (ChangeKind.REQUIRED_REMOVE, "property"),
    RawChangeKind.REQUIRED_ADD: (ChangeKind.REQUIRED_ADD, "property"),
}

_unclassified = [kind.name for kind in RawChangeKind if kind not in CLASSIFICATION]
if _unclassified:
    raise RuntimeError(f"raw change kinds without a classification: {', '.join(_unclassified)}")


def classify(raw: RawChange) -> Change:
    """Turn one raw diff operation into a Change."""
    kind, subject_key = CLASSIFICATION[raw.kind]
    subject = raw.details[subject_key] if subject_key is not None else None
    return Change(path=raw.path, kind=kind, subject=subject)
