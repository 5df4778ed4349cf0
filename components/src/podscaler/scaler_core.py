# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge

from podscaler.common.logging import configure_podscaler_logging
from podscaler.defaults import PodScalerDefaults
from podscaler.utils.clock import Clock
from podscaler.utils.duration import format_duration
from podscaler.utils.probe_client import HttpProbeClient
from podscaler.utils.report import RolloutReport, WaveReport, WorkloadStatus
from podscaler.utils.wave_executor import WaveExecutor, WavePhase
from podscaler.utils.waves import WavePlan, group_by_wave
from podscaler.workload import WorkloadDescriptor

configure_podscaler_logging()
logger = logging.getLogger(__name__)


class PodScalerPrometheusMetrics:
    """Container for all podscaler Prometheus metrics."""

    def __init__(
        self, prefix: str = "podscaler", registry: CollectorRegistry = REGISTRY
    ):
        self.current_wave = Gauge(
            f"{prefix}_current_wave",
            "Wave currently being rolled out (-1 when idle or done)",
            registry=registry,
        )
        self.current_wave.set(-1)

        # Per-workload progress
        self.requested_replicas = Gauge(
            f"{prefix}_requested_replicas",
            "Last replica count requested for the workload",
            ["workload"],
            registry=registry,
        )
        self.ready_replicas = Gauge(
            f"{prefix}_ready_replicas",
            "Last observed ready replicas of the workload",
            ["workload"],
            registry=registry,
        )
        self.pods_validated = Gauge(
            f"{prefix}_pods_validated",
            "Pods of the workload that passed validation",
            ["workload"],
            registry=registry,
        )
        self.pods_pending = Gauge(
            f"{prefix}_pods_pending",
            "Pods of the workload still failing validation",
            ["workload"],
            registry=registry,
        )

        # Aggregates
        self.workload_outcomes = Counter(
            f"{prefix}_workload_outcomes",
            "Finished workloads by final status",
            ["status"],
            registry=registry,
        )
        self.wave_duration = Gauge(
            f"{prefix}_wave_duration_seconds",
            "Wall time taken by each wave",
            ["wave"],
            registry=registry,
        )


class ScalerState(str, Enum):
    IDLE = "idle"
    SCALING = "scaling"
    WAITING = "waiting"
    VALIDATING = "validating"
    DONE = "done"


_PHASE_STATES = {
    WavePhase.SCALING: ScalerState.SCALING,
    WavePhase.WAITING: ScalerState.WAITING,
    WavePhase.VALIDATING: ScalerState.VALIDATING,
}


class PodScaler:
    """Rolls out waves of workloads strictly one after another.

    Each wave is handed to a ``WaveExecutor`` and awaited in full before the
    next wave starts. Workload failures never stop the run: they are
    collected in the returned ``RolloutReport`` and the scaler always ends in
    ``ScalerState.DONE``.
    """

    def __init__(
        self,
        descriptors: Sequence[WorkloadDescriptor],
        connector,
        rollout_poll_interval: float = PodScalerDefaults.rollout_poll_interval,
        probe_timeout: float = PodScalerDefaults.probe_timeout,
        clock: Optional[Clock] = None,
        probe_client_factory: Callable = HttpProbeClient,
        metrics: Optional[PodScalerPrometheusMetrics] = None,
    ):
        self.plan: WavePlan = group_by_wave(descriptors)
        self.clock = clock or Clock()
        self.metrics = metrics
        self.state = ScalerState.IDLE
        self.state_history: List[ScalerState] = [self.state]
        self.executor = WaveExecutor(
            connector,
            rollout_poll_interval=rollout_poll_interval,
            probe_timeout=probe_timeout,
            clock=self.clock,
            probe_client_factory=probe_client_factory,
            metrics=metrics,
            on_phase=self._on_phase,
        )

    def _set_state(self, state: ScalerState) -> None:
        self.state = state
        self.state_history.append(state)

    def _on_phase(self, wave: int, phase: WavePhase) -> None:
        self._set_state(_PHASE_STATES[phase])

    async def run(self) -> RolloutReport:
        report = RolloutReport()
        if not self.plan:
            logger.info("No workloads configured; nothing to scale")
            self._set_state(ScalerState.DONE)
            return report

        logger.info(
            f"Rolling out {len(self.plan)} wave(s): "
            + ", ".join(
                f"wave {wave} [{', '.join(d.name for d in members)}]"
                for wave, members in self.plan
            )
        )
        for wave, members in self.plan:
            wave_report = await self._run_wave(wave, members)
            report.waves.append(wave_report)

        self._set_state(ScalerState.DONE)
        if self.metrics is not None:
            self.metrics.current_wave.set(-1)
        return report

    async def _run_wave(
        self, wave: int, members: Sequence[WorkloadDescriptor]
    ) -> WaveReport:
        logger.info(f"Starting wave {wave} ({len(members)} workload(s))...")
        if self.metrics is not None:
            self.metrics.current_wave.set(wave)

        wave_report = await self.executor.run(wave, members)

        duration = wave_report.finished_at - wave_report.started_at
        if self.metrics is not None:
            self.metrics.wave_duration.labels(wave=str(wave)).set(duration)
            for outcome in wave_report.outcomes:
                self.metrics.workload_outcomes.labels(
                    status=outcome.status.value
                ).inc()

        problems = [o for o in wave_report.outcomes if o.status != WorkloadStatus.VALIDATED]
        if problems:
            logger.warning(
                f"Wave {wave} completed in {format_duration(duration)} with "
                f"{len(problems)} degraded or failed workload(s): "
                + ", ".join(f"{o.name} ({o.status.value})" for o in problems)
            )
        else:
            logger.info(
                f"Wave {wave} completed in {format_duration(duration)}; "
                "all workloads validated"
            )
        return wave_report
