# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, Optional, Sequence

from podscaler.common.logging import configure_podscaler_logging
from podscaler.defaults import PodScalerDefaults
from podscaler.utils.clock import Clock
from podscaler.utils.exceptions import WorkloadError
from podscaler.utils.probe_client import HttpProbeClient
from podscaler.utils.report import WaveReport, WorkloadOutcome
from podscaler.utils.rollout import wait_for_rollout
from podscaler.utils.scaling import scale_workload
from podscaler.utils.validation import validate_workload
from podscaler.workload import ProbeTarget, WorkloadDescriptor

configure_podscaler_logging()
logger = logging.getLogger(__name__)


class WavePhase(str, Enum):
    SCALING = "scaling"
    WAITING = "waiting"
    VALIDATING = "validating"


class WaveExecutor:
    """Runs the scaling, rollout-wait and validation phases for one wave.

    Members of a wave are independent, so each phase fans out over all
    members with ``asyncio.gather`` and the next phase starts only once every
    member has returned. A hard failure (``WorkloadError``) stops that
    workload's remaining phases; its siblings carry on.
    """

    def __init__(
        self,
        connector,
        rollout_poll_interval: float = PodScalerDefaults.rollout_poll_interval,
        probe_timeout: float = PodScalerDefaults.probe_timeout,
        clock: Optional[Clock] = None,
        probe_client_factory: Callable = HttpProbeClient,
        metrics=None,
        on_phase: Optional[Callable[[int, WavePhase], None]] = None,
    ):
        self.connector = connector
        self.rollout_poll_interval = rollout_poll_interval
        self.probe_timeout = probe_timeout
        self.clock = clock or Clock()
        self.probe_client_factory = probe_client_factory
        self.metrics = metrics
        self.on_phase = on_phase

    async def run(
        self, wave: int, descriptors: Sequence[WorkloadDescriptor]
    ) -> WaveReport:
        report = WaveReport(wave=wave, started_at=self.clock.now())
        outcomes: Dict[str, WorkloadOutcome] = {}
        for descriptor in descriptors:
            outcome = WorkloadOutcome(name=descriptor.name, wave=wave)
            outcomes[descriptor.name] = outcome
            report.outcomes.append(outcome)

        self._enter_phase(wave, WavePhase.SCALING)
        await asyncio.gather(
            *(self._scale(d, outcomes[d.name]) for d in descriptors)
        )
        logger.info(f"Wave {wave} scaling complete. Waiting for readiness...")

        self._enter_phase(wave, WavePhase.WAITING)
        await asyncio.gather(
            *(
                self._wait(d, outcomes[d.name])
                for d in self._survivors(descriptors, outcomes)
            )
        )
        logger.info(f"Wave {wave} ready. Proceeding to validation...")

        self._enter_phase(wave, WavePhase.VALIDATING)
        await asyncio.gather(
            *(
                self._validate(d, outcomes[d.name])
                for d in self._survivors(descriptors, outcomes)
            )
        )

        report.finished_at = self.clock.now()
        return report

    def _enter_phase(self, wave: int, phase: WavePhase) -> None:
        if self.on_phase is not None:
            self.on_phase(wave, phase)

    @staticmethod
    def _survivors(descriptors, outcomes):
        return [d for d in descriptors if outcomes[d.name].error is None]

    def _record_failure(
        self, outcome: WorkloadOutcome, phase: WavePhase, error: Exception
    ) -> None:
        if isinstance(error, WorkloadError):
            logger.error(
                f"{type(error).__name__} for {outcome.name} during {phase.value}: "
                f"{error.reason}; skipping its remaining phases"
            )
            outcome.error = error
        else:
            logger.exception(
                f"Unexpected error for {outcome.name} during {phase.value}: {error}"
            )
            outcome.error = WorkloadError(
                outcome.name, f"unexpected error during {phase.value}: {error}"
            )

    async def _scale(
        self, descriptor: WorkloadDescriptor, outcome: WorkloadOutcome
    ) -> None:
        try:
            outcome.scaling = await scale_workload(
                self.connector,
                descriptor.name,
                target=descriptor.max_replicas,
                step=descriptor.scale_step,
                pause=descriptor.scale_interval,
                clock=self.clock,
                metrics=self.metrics,
            )
        except Exception as e:
            self._record_failure(outcome, WavePhase.SCALING, e)

    async def _wait(
        self, descriptor: WorkloadDescriptor, outcome: WorkloadOutcome
    ) -> None:
        try:
            outcome.rollout = await wait_for_rollout(
                self.connector,
                descriptor.name,
                target=descriptor.max_replicas,
                timeout=descriptor.readiness_timeout,
                poll_interval=self.rollout_poll_interval,
                clock=self.clock,
                metrics=self.metrics,
            )
        except Exception as e:
            self._record_failure(outcome, WavePhase.WAITING, e)

    async def _validate(
        self, descriptor: WorkloadDescriptor, outcome: WorkloadOutcome
    ) -> None:
        try:
            selector = descriptor.selector
            if not selector:
                selector = await self.connector.get_selector(descriptor.name)
            target = ProbeTarget.from_descriptor(
                descriptor, selector, default_timeout=self.probe_timeout
            )
            async with self.probe_client_factory() as probe_client:
                outcome.validation = await validate_workload(
                    self.connector,
                    probe_client,
                    target,
                    delay=descriptor.validation.validation_delay,
                    retry_interval=descriptor.validation.retry_interval,
                    max_retries=descriptor.max_retries,
                    clock=self.clock,
                    metrics=self.metrics,
                )
        except Exception as e:
            self._record_failure(outcome, WavePhase.VALIDATING, e)
