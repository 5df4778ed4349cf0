# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Evaluation of validation check clauses against decoded probe bodies."""

import json
import math
from typing import Any, Optional, Tuple

from podscaler.workload import CheckClause, CheckCondition

_MISSING = object()


def decode_body(body: str) -> Optional[Any]:
    """Decode a JSON response body, returning None if it is not JSON."""
    try:
        return json.loads(body)
    except (TypeError, ValueError):
        return None


def extract_field(document: Any, path: str) -> Any:
    """Follow a dotted path through nested mappings and lists.

    Numeric path segments index into lists. Returns a sentinel when any
    segment is absent; callers should use ``evaluate_check`` instead.
    """
    current = document
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, list) and segment.lstrip("-").isdigit():
            index = int(segment)
            if not -len(current) <= index < len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING
    return current


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and not (isinstance(value, float) and math.isnan(value))
    )


def _comparable(actual: Any, expected: Any) -> Tuple[bool, bool]:
    """Return (can_test_equality, can_order) for a pair of values."""
    if isinstance(actual, bool) or isinstance(expected, bool):
        both_bool = isinstance(actual, bool) and isinstance(expected, bool)
        return both_bool, False
    if _is_number(actual) and _is_number(expected):
        return True, True
    return type(actual) is type(expected), False


def evaluate_check(check: CheckClause, document: Any) -> bool:
    """Evaluate ``check`` against a decoded body.

    Never raises: a missing field or a type mismatch (for example a boolean
    expected but a string returned) makes the check fail.
    """
    actual = extract_field(document, check.field)
    if actual is _MISSING:
        return False

    expected = check.value
    can_equal, can_order = _comparable(actual, expected)

    if check.condition == CheckCondition.EQUAL:
        return can_equal and actual == expected
    if check.condition == CheckCondition.NOT_EQUAL:
        return can_equal and actual != expected

    if not can_order:
        return False
    if check.condition == CheckCondition.GREATER_THAN:
        return actual > expected
    if check.condition == CheckCondition.LESS_THAN:
        return actual < expected
    if check.condition == CheckCondition.GREATER_OR_EQUAL:
        return actual >= expected
    if check.condition == CheckCondition.LESS_OR_EQUAL:
        return actual <= expected
    return False
