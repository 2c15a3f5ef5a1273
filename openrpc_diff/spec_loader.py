"""
Loads OpenRPC documents from disk into SpecificationDocument values.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from openrpc_diff.errors import (
    DocumentNotFoundError,
    DocumentParseError,
    DocumentReadError,
    SchemaFormatError,
)
from openrpc_diff.models import ContentDescriptor, MethodSignature, SpecificationDocument
from openrpc_diff.references import normalize_document
from openrpc_diff.schema import Schema, from_json

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
DESCRIPTOR_REF_PREFIX = "#/components/contentDescriptors/"


class _StructureError(Exception):
    """Raised while walking a decoded document; carries the JSON pointer."""

    def __init__(self, message: str, pointer: str):
        super().__init__(message)
        self.pointer = pointer


def extract_methods(methods: Iterable[MethodSignature]) -> Dict[str, MethodSignature]:
    """Key method signatures by name."""
    return {method.name: method for method in methods}


class SpecLoader:
    """Reads and parses OpenRPC documents."""

    def load(self, path, side: Optional[str] = None) -> SpecificationDocument:
        """
        Load one document and normalize its schema references.

        Args:
            path: Path to a JSON (or YAML) OpenRPC document
            side: 'left' or 'right', used in error messages

        Returns:
            The parsed SpecificationDocument

        Raises:
            DocumentNotFoundError: If the file does not exist
            DocumentReadError: If the file cannot be read
            DocumentParseError: If the file is not a valid OpenRPC document
        """
        path = Path(path)
        raw = self._decode(self._read(path, side), path, side)
        try:
            definitions, signatures, component_descriptors, inline = self._parse_document(raw)
        except _StructureError as e:
            raise DocumentParseError(
                f"couldn't deserialize file: {e}", str(path), location=e.pointer, side=side
            ) from e

        normalize_document(inline, component_descriptors, definitions)
        methods = extract_methods(signatures)
        logger.debug(f"Loaded {path}: {len(methods)} methods, {len(definitions)} schema definitions")
        return SpecificationDocument(path=str(path), definitions=definitions, methods=methods)

    def _read(self, path: Path, side: Optional[str]) -> str:
        if not path.exists():
            raise DocumentNotFoundError("couldn't open file: no such file", str(path), side=side)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError("couldn't open file", str(path), side=side, original_error=e) from e

    def _decode(self, content: str, path: Path, side: Optional[str]) -> Any:
        if path.suffix.lower() in YAML_SUFFIXES:
            try:
                return yaml.safe_load(content)
            except yaml.YAMLError as e:
                mark = getattr(e, "problem_mark", None)
                location = f"line {mark.line + 1} column {mark.column + 1}" if mark else ""
                problem = getattr(e, "problem", None) or str(e)
                raise DocumentParseError(
                    f"couldn't deserialize file: {problem}", str(path), location=location, side=side
                ) from e
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise DocumentParseError(
                f"couldn't deserialize file: {e.msg}",
                str(path),
                location=f"line {e.lineno} column {e.colno}",
                side=side,
            ) from e

    def _parse_document(
        self, raw: Any
    ) -> Tuple[Dict[str, Schema], List[MethodSignature], Dict[str, ContentDescriptor], List[ContentDescriptor]]:
        """
        Walk a decoded document.

        Returns:
            (component schemas, method signatures, component content
            descriptors, descriptors defined inline in methods)
        """
        document = _expect(raw, dict, "")
        components = _expect(document.get("components", {}), dict, "/components")

        definitions = {}
        schemas = _expect(components.get("schemas", {}), dict, "/components/schemas")
        for name, value in _named(schemas, "/components/schemas"):
            definitions[name] = _schema(value, f"/components/schemas/{_escape(name)}")

        component_descriptors = {}
        raw_descriptors = _expect(components.get("contentDescriptors", {}), dict, "/components/contentDescriptors")
        for name, value in _named(raw_descriptors, "/components/contentDescriptors"):
            component_descriptors[name] = self._parse_descriptor(
                value, f"/components/contentDescriptors/{_escape(name)}"
            )

        if "methods" not in document:
            raise _StructureError("missing field `methods`", "")
        raw_methods = _expect(document["methods"], list, "/methods")

        signatures = []
        inline = []
        seen = {}
        for index, value in enumerate(raw_methods):
            pointer = f"/methods/{index}"
            method = _expect(value, dict, pointer)
            name = _expect(method.get("name"), str, f"{pointer}/name")
            if name in seen:
                raise _StructureError(f"duplicate method name '{name}' (first defined at /methods/{seen[name]})", pointer)
            seen[name] = index

            if "params" not in method:
                raise _StructureError("missing field `params`", pointer)
            params = []
            for i, param in enumerate(_expect(method["params"], list, f"{pointer}/params")):
                params.append(self._descriptor_or_ref(param, f"{pointer}/params/{i}", component_descriptors, inline))

            result = None
            if method.get("result") is not None:
                result = self._descriptor_or_ref(method["result"], f"{pointer}/result", component_descriptors, inline)

            signatures.append(MethodSignature(name=name, params=tuple(params), result=result))

        return definitions, signatures, component_descriptors, inline

    def _descriptor_or_ref(
        self,
        value: Any,
        pointer: str,
        component_descriptors: Dict[str, ContentDescriptor],
        inline: List[ContentDescriptor],
    ) -> ContentDescriptor:
        node = _expect(value, dict, pointer)
        if "$ref" in node:
            reference = _expect(node["$ref"], str, f"{pointer}/$ref")
            name = reference[len(DESCRIPTOR_REF_PREFIX):] if reference.startswith(DESCRIPTOR_REF_PREFIX) else None
            if name is None or name not in component_descriptors:
                raise _StructureError(f"unresolved content descriptor reference '{reference}'", f"{pointer}/$ref")
            return component_descriptors[name]
        descriptor = self._parse_descriptor(node, pointer)
        inline.append(descriptor)
        return descriptor

    def _parse_descriptor(self, value: Any, pointer: str) -> ContentDescriptor:
        node = _expect(value, dict, pointer)
        name = _expect(node.get("name"), str, f"{pointer}/name")
        if "schema" not in node:
            raise _StructureError("missing field `schema`", pointer)
        required = node.get("required")
        if required is not None:
            _expect(required, bool, f"{pointer}/required")
        return ContentDescriptor(
            name=name,
            schema=_schema(node["schema"], f"{pointer}/schema"),
            required=required,
            summary=node.get("summary"),
            description=node.get("description"),
            deprecated=node.get("deprecated"),
        )


def load_document(path, side: Optional[str] = None) -> SpecificationDocument:
    """Convenience wrapper around SpecLoader().load()."""
    return SpecLoader().load(path, side=side)


_TYPE_NAMES = {dict: "an object", list: "an array", str: "a string", bool: "a boolean"}


def _expect(value: Any, expected: type, pointer: str) -> Any:
    # bool is an int subclass, but ints are never accepted where a bool is expected
    if not isinstance(value, expected) or (expected is not bool and isinstance(value, bool)):
        found = "nothing" if value is None else type(value).__name__
        raise _StructureError(f"expected {_TYPE_NAMES[expected]}, found {found}", pointer)
    return value


def _named(mapping: Dict[Any, Any], pointer: str) -> List[Tuple[str, Any]]:
    # YAML allows non-string keys such as `200:`
    for name in mapping:
        if not isinstance(name, str):
            raise _StructureError(f"expected a string key, found {type(name).__name__} {name!r}", pointer)
    return list(mapping.items())


def _schema(value: Any, pointer: str) -> Schema:
    try:
        return from_json(value, pointer)
    except SchemaFormatError as e:
        raise _StructureError(str(e), e.pointer) from e


def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")
