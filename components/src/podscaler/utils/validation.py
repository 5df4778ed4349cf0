# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Application-level validation of a workload's pods through HTTP probes."""

import asyncio
import logging
from typing import List, Optional

from podscaler.common.logging import configure_podscaler_logging
from podscaler.utils.checks import decode_body, evaluate_check
from podscaler.utils.clock import Clock
from podscaler.utils.duration import format_duration
from podscaler.utils.exceptions import NoPodsFound, ProbeError
from podscaler.utils.report import ValidationOutcome, ValidationResult
from podscaler.workload import PodRef, ProbeTarget

configure_podscaler_logging()
logger = logging.getLogger(__name__)


async def probe_pod(probe_client, target: ProbeTarget, pod: PodRef) -> bool:
    """Probe one pod; True when the status is 2xx and the check holds."""
    url = target.url_for(pod)
    try:
        response = await probe_client.request(
            target.method,
            url,
            timeout=target.timeout,
            headers=dict(target.headers),
            body=target.body,
        )
    except ProbeError as e:
        logger.info(f"Pod {pod} not ready: {e}")
        return False

    if not response.ok:
        logger.info(f"Pod {pod} not ready: HTTP {response.status} from {url}")
        return False

    document = decode_body(response.body)
    if document is None:
        logger.info(f"Pod {pod} not ready: response from {url} is not JSON")
        return False

    if not evaluate_check(target.check, document):
        logger.info(
            f"Pod {pod} not ready: check '{target.check.field} "
            f"{target.check.condition.value} {target.check.value!r}' failed"
        )
        return False
    return True


async def validate_workload(
    connector,
    probe_client,
    target: ProbeTarget,
    delay: float,
    retry_interval: float,
    max_retries: int,
    clock: Optional[Clock] = None,
    metrics=None,
) -> ValidationResult:
    """Validate every running pod of a workload, retrying the ones that fail.

    After ``delay`` the running pods are discovered once. Each round probes
    all still-pending pods concurrently and drops the ones that pass. Rounds
    are separated by ``retry_interval``; after ``max_retries`` rounds any pods
    still pending are reported as INCOMPLETE, which is a warning, not an error.

    Raises:
        NoPodsFound: If no running pod matches the workload's selector
        ReadFailure: If the pod list cannot be retrieved
    """
    clock = clock or Clock()
    name = target.workload

    if delay > 0:
        logger.info(f"Waiting {format_duration(delay)} before validating {name}")
        await clock.sleep(delay)

    pods = await connector.list_running_pods(name, target.label_selector)
    if not pods:
        raise NoPodsFound(name, target.label_selector)

    logger.info(f"Validating {len(pods)} pod(s) of {name}")
    pending: List[PodRef] = list(pods)
    passed: List[PodRef] = []
    rounds = 0

    for attempt in range(1, max_retries + 1):
        rounds = attempt
        results = await asyncio.gather(
            *(probe_pod(probe_client, target, pod) for pod in pending)
        )

        still_pending = []
        for pod, ok in zip(pending, results):
            if ok:
                logger.info(f"Pod {pod} of {name} passed validation")
                passed.append(pod)
            else:
                still_pending.append(pod)
        pending = still_pending

        if metrics is not None:
            metrics.pods_validated.labels(workload=name).set(len(passed))
            metrics.pods_pending.labels(workload=name).set(len(pending))

        if not pending:
            logger.info(f"All {len(passed)} pod(s) of {name} are confirmed ready")
            return ValidationResult(
                workload=name,
                outcome=ValidationOutcome.PASSED,
                rounds=rounds,
                passed=passed,
            )

        if attempt < max_retries:
            logger.warning(
                f"Retrying validation for {len(pending)} pod(s) of {name} in "
                f"{format_duration(retry_interval)} "
                f"({max_retries - attempt} retries left)..."
            )
            await clock.sleep(retry_interval)

    logger.warning(
        f"Some pods of {name} failed validation after {max_retries} round(s): "
        f"{', '.join(str(pod) for pod in pending)}"
    )
    return ValidationResult(
        workload=name,
        outcome=ValidationOutcome.INCOMPLETE,
        rounds=rounds,
        passed=passed,
        pending=pending,
    )
