# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import Optional

from podscaler.common.logging import configure_podscaler_logging
from podscaler.utils.clock import Clock
from podscaler.utils.duration import format_duration
from podscaler.utils.report import ScalingResult

configure_podscaler_logging()
logger = logging.getLogger(__name__)


async def scale_workload(
    connector,
    name: str,
    target: int,
    step: int,
    pause: float,
    clock: Optional[Clock] = None,
    metrics=None,
) -> ScalingResult:
    """Raise a workload's replicas to ``target`` in increments of ``step``.

    The current count is read once; each iteration requests
    ``min(current + step, target)`` and pauses ``pause`` seconds while the
    target is not yet reached. Scaling is upward only: a workload already at
    or above its target gets no requests.

    Args:
        connector: Orchestrator client with get_replica_count/set_replica_count
        name: Workload name
        target: Replica count to reach
        step: Replicas added per request (>= 1)
        pause: Seconds to wait between requests
        clock: Time source used for pauses
        metrics: Optional PodScalerPrometheusMetrics

    Returns:
        ScalingResult listing every requested replica count in order

    Raises:
        ReadFailure: If the current replica count cannot be read
        ScaleRequestFailure: If a scale request is rejected
    """
    if step < 1:
        raise ValueError(f"scale step for {name} must be >= 1, got {step}")
    clock = clock or Clock()

    current = await connector.get_replica_count(name)
    result = ScalingResult(
        workload=name, start_replicas=current, target_replicas=target
    )

    if current >= target:
        if current > target:
            logger.info(
                f"{name} already has {current} replicas (target {target}); not scaling down"
            )
        else:
            logger.info(f"{name} already at target of {target} replicas")
        return result

    logger.info(
        f"Scaling {name} from {current} to {target} replicas "
        f"(step {step}, pause {format_duration(pause)})"
    )
    while current < target:
        next_replicas = min(current + step, target)
        await connector.set_replica_count(name, next_replicas)
        result.requested.append(next_replicas)
        if metrics is not None:
            metrics.requested_replicas.labels(workload=name).set(next_replicas)
        logger.info(f"Scaled {name} to {next_replicas} replicas")

        if next_replicas < target:
            logger.debug(f"Waiting {format_duration(pause)} before next increment of {name}")
            await clock.sleep(pause)
        current = next_replicas

    logger.info(
        f"Scaling complete for {name}: {len(result.requested)} request(s)"
    )
    return result
