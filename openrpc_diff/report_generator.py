"""
Renders a comparison Summary as YAML, JSON or an indented text report.
"""

import json
from typing import Any, Dict, List

import yaml

from openrpc_diff.models import Change, ChangeKind, DescriptorDiff, MethodChange, RequiredChange, Summary

_CONST_KINDS = (ChangeKind.CONST_ADD, ChangeKind.CONST_REMOVE)

_REQUIRED_TEXT = {
    RequiredChange.LEFT: "lost on the right",
    RequiredChange.RIGHT: "gained on the right",
}

INDENT = "  "


class ReportGenerator:
    """Generates comparison reports."""

    def render(self, summary: Summary, output_format: str) -> str:
        """
        Render ``summary`` in one of the supported formats.

        Args:
            summary: Result of SpecComparator.compare_specs
            output_format: 'yaml', 'json' or 'text'

        Returns:
            The report text
        """
        if output_format == "yaml":
            return self.export_yaml_report(summary)
        if output_format == "json":
            return self.export_json_report(summary)
        if output_format == "text":
            return self.generate_text_report(summary)
        raise ValueError(f"Invalid output format: {output_format}")

    def summary_to_dict(self, summary: Summary) -> Dict[str, Any]:
        """
        Convert a Summary into plain values; empty fields are omitted.
        """
        data: Dict[str, Any] = {}
        if summary.equivalent:
            data["equivalent"] = list(summary.equivalent)
        if summary.different:
            data["different"] = {name: self._method_to_dict(change) for name, change in summary.different.items()}
        if summary.left:
            data["left"] = list(summary.left)
        if summary.right:
            data["right"] = list(summary.right)
        return data

    def export_yaml_report(self, summary: Summary) -> str:
        data = self.summary_to_dict(summary)
        if not data:
            return "{}\n"
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)

    def export_json_report(self, summary: Summary) -> str:
        return json.dumps(self.summary_to_dict(summary), indent=2) + "\n"

    def generate_text_report(self, summary: Summary) -> str:
        """
        Generate the human-readable report.

        Each different method is printed by name with its parameter and
        result diffs indented below it, followed by the methods present on
        only one side.
        """
        lines: List[str] = []
        for name, change in summary.different.items():
            lines.append(name)
            lines.extend(self._format_method(change))
        if summary.left:
            lines.append("the following methods are only present on the left")
            lines.extend(f"{INDENT}{name}" for name in summary.left)
        if summary.right:
            lines.append("the following methods are only present on the right")
            lines.extend(f"{INDENT}{name}" for name in summary.right)
        return "\n".join(lines) + "\n" if lines else ""

    def _method_to_dict(self, change: MethodChange) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if change.parameters:
            data["parameter"] = {
                position: self._descriptor_to_dict(diff) for position, diff in sorted(change.parameters.items())
            }
        if change.result is not None:
            data["result"] = self._descriptor_to_dict(change.result)
        return data

    def _descriptor_to_dict(self, diff: DescriptorDiff) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if diff.changes:
            data["changes"] = [self._change_to_dict(change) for change in diff.changes]
        if diff.required is not None:
            data["required"] = diff.required.value
        return data

    def _change_to_dict(self, change: Change) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if change.path:
            data["path"] = change.path
        data["kind"] = change.kind.value
        if change.subject is not None or change.kind in _CONST_KINDS:
            data["of"] = change.subject
        return data

    def _format_method(self, change: MethodChange) -> List[str]:
        lines = []
        for position, diff in sorted(change.parameters.items()):
            lines.append(f"{INDENT}parameter {position}")
            lines.extend(self._format_descriptor(diff))
        if change.result is not None:
            lines.append(f"{INDENT}result")
            lines.extend(self._format_descriptor(change.result))
        return lines

    def _format_descriptor(self, diff: DescriptorDiff) -> List[str]:
        lines = [f"{INDENT * 2}{self._format_change(change)}" for change in diff.changes]
        if diff.required is not None:
            lines.append(f"{INDENT * 2}required: {_REQUIRED_TEXT[diff.required]}")
        return lines

    def _format_change(self, change: Change) -> str:
        text = change.kind.value
        if change.subject is not None or change.kind in _CONST_KINDS:
            subject = json.dumps(change.subject) if change.kind in _CONST_KINDS else str(change.subject)
            text += f" {subject}"
        if change.path:
            text += f" at {change.path}"
        return text
