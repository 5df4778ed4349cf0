# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the rollout readiness wait."""

import logging

import pytest

from podscaler.utils.exceptions import ReadFailure
from podscaler.utils.report import RolloutOutcome
from podscaler.utils.rollout import wait_for_rollout
from tests.conftest import FakeConnector

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.podscaler,
]


@pytest.mark.asyncio
@pytest.mark.parametrize("k", [1, 2, 5])
async def test_ready_after_k_polls(fake_clock, k):
    """Test the waiter returns after exactly k polls when the k-th poll is ready."""
    connector = FakeConnector(ready={"svc": [0] * (k - 1) + [4]})

    result = await wait_for_rollout(
        connector, "svc", target=4, timeout=60.0, poll_interval=1.0, clock=fake_clock
    )

    assert result.outcome == RolloutOutcome.READY
    assert result.polls == k
    assert connector.status_polls["svc"] == k
    assert result.ready_replicas == 4
    assert fake_clock.sleeps == [1.0] * (k - 1)


@pytest.mark.asyncio
async def test_timeout_proceeds_anyway(fake_clock, caplog):
    """Test a 2s timeout at a 1s interval polls exactly twice and warns."""
    connector = FakeConnector(ready={"svc": [1]})

    with caplog.at_level(logging.WARNING):
        result = await wait_for_rollout(
            connector, "svc", target=3, timeout=2.0, poll_interval=1.0, clock=fake_clock
        )

    assert result.outcome == RolloutOutcome.PROCEEDED_ANYWAY
    assert connector.status_polls["svc"] == 2
    assert result.polls == 2
    assert result.ready_replicas == 1
    assert "Timeout reached for svc" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize("timeout,interval", [(2.0, 1.0), (2.5, 1.0), (10.0, 3.0), (0.5, 10.0)])
async def test_never_overruns_timeout_by_more_than_one_interval(
    fake_clock, timeout, interval
):
    connector = FakeConnector(ready={"svc": [0]})

    result = await wait_for_rollout(
        connector, "svc", target=1, timeout=timeout, poll_interval=interval, clock=fake_clock
    )

    assert result.outcome == RolloutOutcome.PROCEEDED_ANYWAY
    assert result.elapsed >= timeout
    assert result.elapsed <= timeout + interval


@pytest.mark.asyncio
async def test_zero_timeout_still_polls_once(fake_clock):
    connector = FakeConnector(ready={"svc": [2]})

    result = await wait_for_rollout(
        connector, "svc", target=2, timeout=0.0, poll_interval=1.0, clock=fake_clock
    )

    assert result.outcome == RolloutOutcome.READY
    assert result.polls == 1


@pytest.mark.asyncio
async def test_transient_errors_keep_polling(fake_clock):
    """Test read errors while polling do not end the wait."""
    error = ReadFailure("svc", "connection refused")
    connector = FakeConnector(ready={"svc": [error, error, 2, 5]})

    result = await wait_for_rollout(
        connector, "svc", target=5, timeout=60.0, poll_interval=1.0, clock=fake_clock
    )

    assert result.outcome == RolloutOutcome.READY
    assert result.polls == 4


@pytest.mark.asyncio
async def test_persistent_errors_end_in_timeout(fake_clock):
    connector = FakeConnector(ready={"svc": [ReadFailure("svc", "unreachable")]})

    result = await wait_for_rollout(
        connector, "svc", target=5, timeout=3.0, poll_interval=1.0, clock=fake_clock
    )

    assert result.outcome == RolloutOutcome.PROCEEDED_ANYWAY
    assert result.polls == 3
