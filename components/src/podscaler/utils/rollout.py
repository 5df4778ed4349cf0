# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import Optional

from podscaler.common.logging import configure_podscaler_logging
from podscaler.utils.clock import Clock
from podscaler.utils.duration import format_duration
from podscaler.utils.exceptions import ReadFailure
from podscaler.utils.report import RolloutOutcome, RolloutResult

configure_podscaler_logging()
logger = logging.getLogger(__name__)


async def wait_for_rollout(
    connector,
    name: str,
    target: int,
    timeout: float,
    poll_interval: float,
    clock: Optional[Clock] = None,
    metrics=None,
) -> RolloutResult:
    """Poll a workload's ready replicas until they reach ``target``.

    The deadline is checked before every poll except the first, and sleeps
    are clamped to the time left, so the wait never overruns ``timeout`` by
    more than one status read. Read errors are logged and polling continues.

    A timeout is not an error: a warning is logged and the result reports
    ``PROCEEDED_ANYWAY`` so the wave can move on.
    """
    clock = clock or Clock()
    start = clock.now()
    polls = 0
    ready = 0

    logger.info(
        f"Waiting for {name} to be fully rolled out "
        f"({target} replicas, timeout {format_duration(timeout)})"
    )
    while True:
        elapsed = clock.now() - start
        if polls > 0 and elapsed >= timeout:
            logger.warning(
                f"Timeout reached for {name} after {format_duration(elapsed)} "
                f"({ready}/{target} replicas ready). Proceeding anyway..."
            )
            return RolloutResult(
                workload=name,
                outcome=RolloutOutcome.PROCEEDED_ANYWAY,
                target_replicas=target,
                ready_replicas=ready,
                polls=polls,
                elapsed=elapsed,
            )

        polls += 1
        try:
            ready = await connector.get_ready_replicas(name)
        except ReadFailure as e:
            logger.warning(f"Transient error reading rollout status of {name}: {e.reason}")
        else:
            if metrics is not None:
                metrics.ready_replicas.labels(workload=name).set(ready)
            if ready >= target:
                elapsed = clock.now() - start
                logger.info(
                    f"{name} is fully rolled out ({ready}/{target} ready) "
                    f"after {polls} poll(s)"
                )
                return RolloutResult(
                    workload=name,
                    outcome=RolloutOutcome.READY,
                    target_replicas=target,
                    ready_replicas=ready,
                    polls=polls,
                    elapsed=elapsed,
                )
            logger.info(f"Waiting for {name} to be ready ({ready}/{target})...")

        remaining = timeout - (clock.now() - start)
        await clock.sleep(max(0.0, min(poll_interval, remaining)))
