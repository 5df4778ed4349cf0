# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for check-clause evaluation and duration parsing."""

import pytest

from podscaler.utils.checks import decode_body, evaluate_check
from podscaler.utils.duration import format_duration, parse_duration
from podscaler.workload import CheckClause

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.podscaler,
]


def _check(field, condition, value):
    return CheckClause(field=field, condition=condition, value=value)


class TestEvaluateCheck:
    @pytest.mark.parametrize(
        "condition,expected,actual,result",
        [
            ("==", True, True, True),
            ("==", "ok", "ok", True),
            ("==", 3, 3.0, True),
            ("!=", "ok", "degraded", True),
            ("!=", 3, 3, False),
            (">", 10, 11, True),
            (">", 10, 10, False),
            ("<", 5, 4.5, True),
            (">=", 5, 5, True),
            ("<=", 5, 6, False),
        ],
    )
    def test_conditions(self, condition, expected, actual, result):
        assert evaluate_check(_check("v", condition, expected), {"v": actual}) is result

    def test_bool_does_not_equal_string(self):
        """Test an expected boolean against a returned string fails instead of raising."""
        assert evaluate_check(_check("ready", "==", True), {"ready": "true"}) is False

    def test_bool_does_not_equal_number(self):
        assert evaluate_check(_check("ready", "==", True), {"ready": 1}) is False

    def test_bool_never_not_equal_across_types(self):
        assert evaluate_check(_check("ready", "!=", False), {"ready": "no"}) is False

    def test_ordering_on_strings_fails(self):
        assert evaluate_check(_check("n", ">", 10), {"n": "11"}) is False

    def test_ordering_on_bools_fails(self):
        assert evaluate_check(_check("n", ">", 0), {"n": True}) is False

    def test_missing_field_fails(self):
        assert evaluate_check(_check("absent", "==", 1), {"present": 1}) is False

    def test_null_field_only_matches_null(self):
        assert evaluate_check(_check("v", "==", None), {"v": None}) is True
        assert evaluate_check(_check("v", ">", 1), {"v": None}) is False

    def test_nested_path(self):
        body = {"status": {"workers": [{"ready": True}, {"ready": False}]}}
        assert evaluate_check(_check("status.workers.0.ready", "==", True), body)
        assert not evaluate_check(_check("status.workers.1.ready", "==", True), body)
        assert not evaluate_check(_check("status.workers.5.ready", "==", True), body)

    def test_non_object_body_fails(self):
        assert evaluate_check(_check("ready", "==", True), ["ready"]) is False

    def test_decode_body(self):
        assert decode_body('{"ready": true}') == {"ready": True}
        assert decode_body("cluster-size: 3") is None


class TestDuration:
    @pytest.mark.parametrize(
        "value,seconds",
        [
            ("30s", 30.0),
            ("1m30s", 90.0),
            ("500ms", 0.5),
            ("2h", 7200.0),
            ("1.5s", 1.5),
            ("0", 0.0),
            ("10", 10.0),
            (45, 45.0),
            (0.25, 0.25),
        ],
    )
    def test_parse(self, value, seconds):
        assert parse_duration(value) == pytest.approx(seconds)

    @pytest.mark.parametrize(
        "value", ["", "abc", "10x", "5s ago", "-1s", "inf", -3, True, None, [1], {"s": 1}]
    )
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)

    def test_format(self):
        assert format_duration(90) == "1m30s"
        assert format_duration(120) == "2m"
        assert format_duration(10) == "10s"
        assert format_duration(0.5) == "500ms"
