"""Compares two OpenRPC documents method by method."""

import logging
from typing import AbstractSet, Dict, List, Optional, Tuple

from openrpc_diff.differ import diff_descriptors
from openrpc_diff.errors import MethodComparisonError, SchemaDiffError
from openrpc_diff.models import (
    ABSENT_DESCRIPTOR,
    ContentDescriptor,
    DescriptorDiff,
    MethodChange,
    MethodSignature,
    SpecificationDocument,
    Summary,
)
from openrpc_diff.schema import Schema

logger = logging.getLogger(__name__)


def venn(left: AbstractSet[str], right: AbstractSet[str]) -> Tuple[List[str], List[str], List[str]]:
    """
    Split two name sets into (left only, common, right only), each sorted.
    """
    return sorted(left - right), sorted(left & right), sorted(right - left)


def pad(descriptors: Tuple[ContentDescriptor, ...], length: int) -> List[ContentDescriptor]:
    """Right-pad a parameter list with ABSENT_DESCRIPTOR up to ``length``."""
    return list(descriptors) + [ABSENT_DESCRIPTOR] * (length - len(descriptors))


def pair_signatures(
    left: MethodSignature,
    right: MethodSignature,
    left_definitions: Dict[str, Schema],
    right_definitions: Dict[str, Schema],
) -> Optional[MethodChange]:
    """
    Diff two signatures of the same method.

    Parameters are compared strictly by position; the shorter list is padded
    with ABSENT_DESCRIPTOR so extra trailing parameters show up as changes.
    A missing result is compared as ABSENT_DESCRIPTOR too.

    Returns:
        A MethodChange, or None when the signatures are compatible

    Raises:
        MethodComparisonError: If a descriptor pair cannot be diffed
    """
    length = max(len(left.params), len(right.params))

    parameters: Dict[int, DescriptorDiff] = {}
    for position, (left_param, right_param) in enumerate(zip(pad(left.params, length), pad(right.params, length))):
        try:
            descriptor_diff = diff_descriptors(left_param, right_param, left_definitions, right_definitions)
        except SchemaDiffError as e:
            raise MethodComparisonError(left.name, position, e) from e
        if descriptor_diff is not None:
            parameters[position] = descriptor_diff

    try:
        result = diff_descriptors(
            left.result or ABSENT_DESCRIPTOR,
            right.result or ABSENT_DESCRIPTOR,
            left_definitions,
            right_definitions,
        )
    except SchemaDiffError as e:
        raise MethodComparisonError(left.name, None, e) from e

    if not parameters and result is None:
        return None
    return MethodChange(parameters=parameters, result=result)


class SpecComparator:
    """Compares specification versions."""

    def compare_specs(self, left: SpecificationDocument, right: SpecificationDocument) -> Summary:
        """
        Compare two loaded documents.

        Args:
            left: The old (left) document
            right: The new (right) document

        Returns:
            Summary of equivalent, different and exclusive methods

        Raises:
            MethodComparisonError: If a common method's schemas cannot be
                diffed; names the document on the failing side
        """
        only_left, common, only_right = venn(set(left.methods), set(right.methods))
        logger.debug(f"{len(common)} common methods, {len(only_left)} only on the left, {len(only_right)} only on the right")

        equivalent = []
        different = {}
        for name in common:
            try:
                method_change = pair_signatures(
                    left.methods[name], right.methods[name], left.definitions, right.definitions
                )
            except MethodComparisonError as e:
                document = {"left": left.path, "right": right.path}.get(e.cause.side)
                raise MethodComparisonError(e.method, e.position, e.cause, document=document) from e.cause

            if method_change is None:
                logger.debug(f"{name}: equivalent")
                equivalent.append(name)
            else:
                logger.debug(f"{name}: {len(method_change.parameters)} parameter diffs, result changed: {method_change.result is not None}")
                different[name] = method_change

        return Summary(equivalent=equivalent, different=different, left=only_left, right=only_right)
