"""
Structural diff between two self-contained JSON schemas.

Each side is a schema object that carries its own ``definitions``; local
references (``#/definitions/X``) are resolved against the side they appear
on. The walk reports raw change operations in a stable order. Paths are
dotted: ``.name`` for a property, ``.3`` for a tuple item, ``.?`` for the
single item schema of an array and ``.<anyOf:2>`` for an anyOf branch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from deepdiff import DeepDiff

from openrpc_diff.errors import SchemaDiffError
from openrpc_diff.references import DEFINITIONS_PREFIX

ALL_TYPES = frozenset({"array", "boolean", "integer", "null", "number", "object", "string"})

RANGE_KEYWORDS = ("minimum", "exclusiveMinimum", "maximum", "exclusiveMaximum")

_NUMBER_KEYWORDS = ("multipleOf", "minimum", "exclusiveMinimum", "maximum", "exclusiveMaximum")

# keywords that only constrain instances of one type
TYPE_KEYWORDS = {
    "string": ("minLength", "maxLength", "pattern"),
    "number": _NUMBER_KEYWORDS,
    "integer": _NUMBER_KEYWORDS,
    "object": (
        "maxProperties",
        "minProperties",
        "required",
        "properties",
        "patternProperties",
        "additionalProperties",
        "propertyNames",
    ),
    "array": ("items", "additionalItems", "maxItems", "minItems", "uniqueItems", "contains"),
}


class RawChangeKind(Enum):
    """Every operation the structural diff can report."""

    TYPE_ADD = "TypeAdd"
    TYPE_REMOVE = "TypeRemove"
    CONST_ADD = "ConstAdd"
    CONST_REMOVE = "ConstRemove"
    PROPERTY_ADD = "PropertyAdd"
    PROPERTY_REMOVE = "PropertyRemove"
    RANGE_ADD = "RangeAdd"
    RANGE_REMOVE = "RangeRemove"
    RANGE_CHANGE = "RangeChange"
    TUPLE_TO_ARRAY = "TupleToArray"
    ARRAY_TO_TUPLE = "ArrayToTuple"
    TUPLE_CHANGE = "TupleChange"
    REQUIRED_REMOVE = "RequiredRemove"
    REQUIRED_ADD = "RequiredAdd"


@dataclass
class RawChange:
    """
    One raw diff operation.

    ``details`` holds the operation's payload: ``added``/``removed`` for type,
    const, property and range changes, ``old_value``/``new_value`` for range
    changes, ``old_length``/``new_length`` for tuple changes and ``property``
    for required changes. Range values are ``(keyword, number)`` pairs.
    """

    path: str
    kind: RawChangeKind
    details: Dict[str, Any] = field(default_factory=dict)


def diff_schemas(lhs_root: Any, rhs_root: Any) -> List[RawChange]:
    """
    Diff two schemas, each bundled with its own ``definitions``.

    Raises:
        SchemaDiffError: On unresolved local references, reference cycles
            or schema values of the wrong shape
    """
    changes: List[RawChange] = []
    walker = DiffWalker(_definitions(lhs_root, "left"), _definitions(rhs_root, "right"), changes.append)
    walker.diff("", lhs_root, rhs_root)
    return changes


class DiffWalker:
    """Walks two schemas side by side and reports differences to ``callback``."""

    def __init__(
        self,
        lhs_definitions: Dict[str, Any],
        rhs_definitions: Dict[str, Any],
        callback: Callable[[RawChange], None],
        active: Iterable[Tuple[Tuple[str, ...], Tuple[str, ...]]] = (),
    ):
        self.lhs_definitions = lhs_definitions
        self.rhs_definitions = rhs_definitions
        self.callback = callback
        # reference pairs being compared on the current walk path
        self._active: Set[Tuple[Tuple[str, ...], Tuple[str, ...]]] = set(active)

    def diff(self, path: str, lhs: Any, rhs: Any):
        self._do_diff(path, False, lhs, rhs)

    def _emit(self, path: str, kind: RawChangeKind, **details):
        self.callback(RawChange(path=path, kind=kind, details=details))

    def _do_diff(self, path: str, comparing_any_of: bool, lhs: Any, rhs: Any):
        lhs, lhs_refs = self._resolve(path, "left", lhs)
        rhs, rhs_refs = self._resolve(path, "right", rhs)

        key = (lhs_refs, rhs_refs)
        entered = bool(lhs_refs or rhs_refs)
        if entered:
            if key in self._active:
                # the loop lies in whichever side followed references to get here
                side = "left" if lhs_refs else "right"
                names = ", ".join(sorted(set(lhs_refs + rhs_refs)))
                raise SchemaDiffError(f"reference cycle through {names}", side=side, schema_path=path)
            self._active.add(key)
        try:
            self._compare(path, comparing_any_of, dict(lhs), dict(rhs))
        finally:
            if entered:
                self._active.discard(key)

    def _compare(self, path: str, comparing_any_of: bool, lhs: Dict[str, Any], rhs: Dict[str, Any]):
        _normalize_const(lhs)
        _normalize_const(rhs)

        is_lhs_split = is_rhs_split = False
        if not comparing_any_of:
            branches = self._split_types(path, "left", lhs)
            if branches is not None:
                lhs["anyOf"] = branches
                is_lhs_split = True
            branches = self._split_types(path, "right", rhs)
            if branches is not None:
                rhs["anyOf"] = branches
                is_rhs_split = True

        self._diff_any_of(path, is_rhs_split, lhs, rhs)
        if not comparing_any_of:
            self._diff_instance_types(path, lhs, rhs)
        self._diff_const(path, lhs, rhs)

        # type-specific keywords of split schemas were compared branch by branch
        if not is_lhs_split and not is_rhs_split:
            self._diff_properties(path, lhs, rhs)
            self._diff_range(path, lhs, rhs)
            self._diff_additional_properties(path, lhs, rhs)
            self._diff_array_items(path, lhs, rhs)
            self._diff_required(path, lhs, rhs)

    def _resolve(self, path: str, side: str, node: Any) -> Tuple[Dict[str, Any], Tuple[str, ...]]:
        """Follow local references; returns the target and the names followed."""
        definitions = self.lhs_definitions if side == "left" else self.rhs_definitions
        node = _as_object(node, side, path)
        followed: List[str] = []
        while "$ref" in node:
            reference = node["$ref"]
            if not isinstance(reference, str):
                raise SchemaDiffError("$ref must be a string", side=side, schema_path=path)
            if not reference.startswith(DEFINITIONS_PREFIX):
                break
            name = reference[len(DEFINITIONS_PREFIX):]
            if name in followed:
                raise SchemaDiffError(f"reference cycle through '{reference}'", side=side, schema_path=path)
            if name not in definitions:
                raise SchemaDiffError(f"unresolved reference '{reference}'", side=side, schema_path=path)
            followed.append(name)
            node = _as_object(definitions[name], side, path)
        return node, tuple(followed)

    def _effective_types(
        self, path: str, side: str, node: Dict[str, Any], seen: FrozenSet[str] = frozenset()
    ) -> FrozenSet[str]:
        if "type" in node:
            return _type_names(node["type"], side, path)
        if "const" in node:
            return frozenset({_const_type(node["const"])})
        if _mapping(node, "properties", side, path):
            return frozenset({"object"})
        if "anyOf" in node:
            types: Set[str] = set()
            for branch in _sequence(node, "anyOf", side, path):
                resolved, followed = self._resolve(path, side, branch)
                if seen.intersection(followed):
                    raise SchemaDiffError(
                        f"reference cycle through {', '.join(followed)}", side=side, schema_path=path
                    )
                types |= self._effective_types(path, side, resolved, seen.union(followed))
            return frozenset(types)
        if "not" in node and _is_true(node["not"]):
            return frozenset()
        return ALL_TYPES

    def _split_types(self, path: str, side: str, node: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
        """One single-typed branch per type of a multi-typed schema, or None."""
        if "anyOf" in node or not isinstance(node.get("type"), list):
            return None
        types = _type_names(node["type"], side, path)
        if len(types) < 2:
            return None
        branches = []
        for type_name in sorted(types):
            branch = {"type": type_name}
            for keyword in TYPE_KEYWORDS.get(type_name, ()):
                if keyword in node:
                    branch[keyword] = node[keyword]
            branches.append(branch)
        return branches

    def _diff_any_of(self, path: str, is_rhs_split: bool, lhs: Dict[str, Any], rhs: Dict[str, Any]):
        if "anyOf" not in lhs or "anyOf" not in rhs:
            return
        lhs_branches = list(_sequence(lhs, "anyOf", "left", path))
        rhs_branches = list(_sequence(rhs, "anyOf", "right", path))
        size = max(len(lhs_branches), len(rhs_branches))
        lhs_branches.extend([False] * (size - len(lhs_branches)))
        rhs_branches.extend([False] * (size - len(rhs_branches)))

        cost = [[self._count_changes(left, right) for right in rhs_branches] for left in lhs_branches]
        pairs = min_cost_assignment(cost)

        for i, j in enumerate(pairs):
            new_path = path if is_rhs_split else f"{path}.<anyOf:{j}>"
            self._do_diff(new_path, True, lhs_branches[i], rhs_branches[j])

    def _count_changes(self, lhs: Any, rhs: Any) -> int:
        changes: List[RawChange] = []
        DiffWalker(self.lhs_definitions, self.rhs_definitions, changes.append, self._active).diff("", lhs, rhs)
        return len(changes)

    def _diff_instance_types(self, path: str, lhs: Dict[str, Any], rhs: Dict[str, Any]):
        lhs_types = self._effective_types(path, "left", lhs)
        rhs_types = self._effective_types(path, "right", rhs)
        for removed in sorted(lhs_types - rhs_types):
            self._emit(path, RawChangeKind.TYPE_REMOVE, removed=removed)
        for added in sorted(rhs_types - lhs_types):
            self._emit(path, RawChangeKind.TYPE_ADD, added=added)

    def _diff_const(self, path: str, lhs: Dict[str, Any], rhs: Dict[str, Any]):
        if "const" in lhs and "const" not in rhs:
            self._emit(path, RawChangeKind.CONST_REMOVE, removed=lhs["const"])
        elif "const" not in lhs and "const" in rhs:
            self._emit(path, RawChangeKind.CONST_ADD, added=rhs["const"])
        elif "const" in lhs and "const" in rhs and _values_differ(lhs["const"], rhs["const"]):
            self._emit(path, RawChangeKind.CONST_REMOVE, removed=lhs["const"])
            self._emit(path, RawChangeKind.CONST_ADD, added=rhs["const"])

    def _diff_properties(self, path: str, lhs: Dict[str, Any], rhs: Dict[str, Any]):
        lhs_properties = _mapping(lhs, "properties", "left", path)
        rhs_properties = _mapping(rhs, "properties", "right", path)
        lhs_additional_properties = _is_true(lhs.get("additionalProperties", True))

        for removed in sorted(set(lhs_properties) - set(rhs_properties)):
            self._emit(
                path,
                RawChangeKind.PROPERTY_REMOVE,
                lhs_additional_properties=lhs_additional_properties,
                removed=removed,
            )
        for added in sorted(set(rhs_properties) - set(lhs_properties)):
            self._emit(
                path,
                RawChangeKind.PROPERTY_ADD,
                lhs_additional_properties=lhs_additional_properties,
                added=added,
            )
        for common in sorted(set(lhs_properties) & set(rhs_properties)):
            self.diff(f"{path}.{common}", lhs_properties[common], rhs_properties[common])

    def _diff_additional_properties(self, path: str, lhs: Dict[str, Any], rhs: Dict[str, Any]):
        # equal values can still reference definitions that differ between sides
        if "additionalProperties" in lhs and "additionalProperties" in rhs:
            self.diff(path, lhs["additionalProperties"], rhs["additionalProperties"])

    def _diff_range(self, path: str, lhs: Dict[str, Any], rhs: Dict[str, Any]):
        for keyword in RANGE_KEYWORDS:
            lhs_value = _number(lhs, keyword, "left", path)
            rhs_value = _number(rhs, keyword, "right", path)
            if lhs_value is None and rhs_value is not None:
                self._emit(path, RawChangeKind.RANGE_ADD, added=(keyword, rhs_value))
            elif lhs_value is not None and rhs_value is None:
                self._emit(path, RawChangeKind.RANGE_REMOVE, removed=(keyword, lhs_value))
            elif lhs_value is not None and lhs_value != rhs_value:
                self._emit(
                    path,
                    RawChangeKind.RANGE_CHANGE,
                    old_value=(keyword, lhs_value),
                    new_value=(keyword, rhs_value),
                )

    def _diff_array_items(self, path: str, lhs: Dict[str, Any], rhs: Dict[str, Any]):
        lhs_items = lhs.get("items")
        rhs_items = rhs.get("items")
        # items appearing or disappearing has no change kind
        if lhs_items is None or rhs_items is None:
            return

        lhs_is_tuple = isinstance(lhs_items, list)
        rhs_is_tuple = isinstance(rhs_items, list)
        if lhs_is_tuple and rhs_is_tuple:
            if len(lhs_items) != len(rhs_items):
                self._emit(path, RawChangeKind.TUPLE_CHANGE, new_length=len(rhs_items))
            for i, (lhs_inner, rhs_inner) in enumerate(zip(lhs_items, rhs_items)):
                self.diff(f"{path}.{i}", lhs_inner, rhs_inner)
        elif not lhs_is_tuple and not rhs_is_tuple:
            self.diff(f"{path}.?", lhs_items, rhs_items)
        elif rhs_is_tuple:
            self._emit(path, RawChangeKind.ARRAY_TO_TUPLE, new_length=len(rhs_items))
            for i, rhs_inner in enumerate(rhs_items):
                self.diff(f"{path}.{i}", lhs_items, rhs_inner)
        else:
            self._emit(path, RawChangeKind.TUPLE_TO_ARRAY, old_length=len(lhs_items))
            for i, lhs_inner in enumerate(lhs_items):
                self.diff(f"{path}.{i}", lhs_inner, rhs_items)

    def _diff_required(self, path: str, lhs: Dict[str, Any], rhs: Dict[str, Any]):
        lhs_required = _names(lhs, "required", "left", path)
        rhs_required = _names(rhs, "required", "right", path)
        for removed in sorted(lhs_required - rhs_required):
            self._emit(path, RawChangeKind.REQUIRED_REMOVE, property=removed)
        for added in sorted(rhs_required - lhs_required):
            self._emit(path, RawChangeKind.REQUIRED_ADD, property=added)


def min_cost_assignment(cost: List[List[int]]) -> List[int]:
    """
    Solve the square assignment problem (Hungarian algorithm).

    Returns:
        ``pairs`` such that row ``i`` is assigned column ``pairs[i]`` and the
        summed cost is minimal
    """
    n = len(cost)
    inf = float("inf")
    u = [0] * (n + 1)
    v = [0] * (n + 1)
    owner = [0] * (n + 1)  # owner[j]: row assigned to column j (1-based, 0 = none)
    way = [0] * (n + 1)
    for row in range(1, n + 1):
        owner[0] = row
        col0 = 0
        min_v = [inf] * (n + 1)
        used = [False] * (n + 1)
        while True:
            used[col0] = True
            row0 = owner[col0]
            delta = inf
            col1 = 0
            for col in range(1, n + 1):
                if used[col]:
                    continue
                current = cost[row0 - 1][col - 1] - u[row0] - v[col]
                if current < min_v[col]:
                    min_v[col] = current
                    way[col] = col0
                if min_v[col] < delta:
                    delta = min_v[col]
                    col1 = col
            for col in range(n + 1):
                if used[col]:
                    u[owner[col]] += delta
                    v[col] -= delta
                else:
                    min_v[col] -= delta
            col0 = col1
            if owner[col0] == 0:
                break
        while col0:
            col1 = way[col0]
            owner[col0] = owner[col1]
            col0 = col1

    pairs = [0] * n
    for col in range(1, n + 1):
        if owner[col]:
            pairs[owner[col] - 1] = col - 1
    return pairs


def _definitions(root: Any, side: str) -> Dict[str, Any]:
    if not isinstance(root, dict):
        return {}
    definitions = root.get("definitions", {})
    if not isinstance(definitions, dict):
        raise SchemaDiffError("definitions must be an object", side=side)
    return definitions


def _as_object(value: Any, side: str, path: str) -> Dict[str, Any]:
    if value is True:
        return {}
    if value is False:
        return {"not": {}}
    if isinstance(value, dict):
        return value
    raise SchemaDiffError(f"expected a schema, found {_json_type(value)}", side=side, schema_path=path)


def _normalize_const(node: Dict[str, Any]):
    # a single-valued enum constrains exactly like const
    enum = node.get("enum")
    if "const" not in node and isinstance(enum, list) and len(enum) == 1:
        node["const"] = enum[0]
        del node["enum"]


def _is_true(schema: Any) -> bool:
    return schema is True or schema == {}


def _type_names(value: Any, side: str, path: str) -> FrozenSet[str]:
    names = [value] if isinstance(value, str) else value
    if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
        raise SchemaDiffError("type must be a string or an array of strings", side=side, schema_path=path)
    unknown = sorted(set(names) - ALL_TYPES)
    if unknown:
        raise SchemaDiffError(f"unknown type '{unknown[0]}'", side=side, schema_path=path)
    return frozenset(names)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _const_type(value: Any) -> str:
    # 1 and 1.5 are both plain numbers; an edited constant is a const change only
    json_type = _json_type(value)
    return "number" if json_type == "integer" else json_type


def _values_differ(lhs: Any, rhs: Any) -> bool:
    # DeepDiff would equate True with 1 once numeric type changes are ignored
    if isinstance(lhs, bool) != isinstance(rhs, bool):
        return True
    return bool(DeepDiff(lhs, rhs, ignore_numeric_type_changes=True))


def _mapping(node: Dict[str, Any], keyword: str, side: str, path: str) -> Dict[str, Any]:
    value = node.get(keyword, {})
    if not isinstance(value, dict):
        raise SchemaDiffError(f"{keyword} must be an object", side=side, schema_path=path)
    return value


def _sequence(node: Dict[str, Any], keyword: str, side: str, path: str) -> List[Any]:
    value = node.get(keyword, [])
    if not isinstance(value, list):
        raise SchemaDiffError(f"{keyword} must be an array", side=side, schema_path=path)
    return value


def _names(node: Dict[str, Any], keyword: str, side: str, path: str) -> Set[str]:
    value = _sequence(node, keyword, side, path)
    if not all(isinstance(name, str) for name in value):
        raise SchemaDiffError(f"{keyword} must be an array of strings", side=side, schema_path=path)
    return set(value)


def _number(node: Dict[str, Any], keyword: str, side: str, path: str) -> Optional[float]:
    value = node.get(keyword)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaDiffError(f"{keyword} must be a number", side=side, schema_path=path)
    return value
