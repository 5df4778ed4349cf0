# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Results returned by each rollout phase and their aggregation into reports.

Phases never share state; each returns one of these records and the wave
executor folds them into a ``WorkloadOutcome``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from podscaler.utils.exceptions import WorkloadError
from podscaler.workload import PodRef


class RolloutOutcome(str, Enum):
    READY = "ready"
    PROCEEDED_ANYWAY = "proceeded_anyway"  # readiness timeout expired


class ValidationOutcome(str, Enum):
    PASSED = "passed"
    INCOMPLETE = "incomplete"  # retry rounds exhausted with pods pending


class WorkloadStatus(str, Enum):
    VALIDATED = "validated"
    DEGRADED = "degraded"
    FAILED = "failed"


@dataclass
class ScalingResult:
    workload: str
    start_replicas: int
    target_replicas: int
    requested: List[int] = field(default_factory=list)


@dataclass
class RolloutResult:
    workload: str
    outcome: RolloutOutcome
    target_replicas: int
    ready_replicas: int
    polls: int
    elapsed: float


@dataclass
class ValidationResult:
    workload: str
    outcome: ValidationOutcome
    rounds: int
    passed: List[PodRef] = field(default_factory=list)
    pending: List[PodRef] = field(default_factory=list)


@dataclass
class WorkloadOutcome:
    """Everything that happened to one workload within its wave."""

    name: str
    wave: int
    scaling: Optional[ScalingResult] = None
    rollout: Optional[RolloutResult] = None
    validation: Optional[ValidationResult] = None
    error: Optional[WorkloadError] = None

    @property
    def status(self) -> WorkloadStatus:
        if self.error is not None:
            return WorkloadStatus.FAILED
        if self.rollout is not None and self.rollout.outcome != RolloutOutcome.READY:
            return WorkloadStatus.DEGRADED
        if (
            self.validation is not None
            and self.validation.outcome != ValidationOutcome.PASSED
        ):
            return WorkloadStatus.DEGRADED
        return WorkloadStatus.VALIDATED

    def reasons(self) -> List[str]:
        """Human-readable reasons for a failed or degraded status."""
        reasons = []
        if self.error is not None:
            reasons.append(f"{type(self.error).__name__}: {self.error.reason}")
        if self.rollout is not None and self.rollout.outcome != RolloutOutcome.READY:
            reasons.append(
                f"rollout timed out with {self.rollout.ready_replicas}/"
                f"{self.rollout.target_replicas} replicas ready"
            )
        if (
            self.validation is not None
            and self.validation.outcome != ValidationOutcome.PASSED
        ):
            pending = ", ".join(pod.name for pod in self.validation.pending)
            reasons.append(
                f"ValidationIncomplete after {self.validation.rounds} round(s): "
                f"pending pods [{pending}]"
            )
        return reasons


@dataclass
class WaveReport:
    wave: int
    outcomes: List[WorkloadOutcome] = field(default_factory=list)
    started_at: float = 0.0
    finished_at: float = 0.0

    def by_status(self, status: WorkloadStatus) -> List[WorkloadOutcome]:
        return [o for o in self.outcomes if o.status == status]


@dataclass
class RolloutReport:
    waves: List[WaveReport] = field(default_factory=list)

    @property
    def outcomes(self) -> List[WorkloadOutcome]:
        return [o for wave in self.waves for o in wave.outcomes]

    def by_status(self, status: WorkloadStatus) -> List[WorkloadOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def validated(self) -> List[WorkloadOutcome]:
        return self.by_status(WorkloadStatus.VALIDATED)

    @property
    def degraded(self) -> List[WorkloadOutcome]:
        return self.by_status(WorkloadStatus.DEGRADED)

    @property
    def failed(self) -> List[WorkloadOutcome]:
        return self.by_status(WorkloadStatus.FAILED)

    def summary_lines(self) -> List[str]:
        lines = [
            f"Waves: {len(self.waves)}, workloads: {len(self.outcomes)} "
            f"(validated={len(self.validated)}, degraded={len(self.degraded)}, "
            f"failed={len(self.failed)})"
        ]
        for outcome in self.outcomes:
            line = f"  wave {outcome.wave} {outcome.name}: {outcome.status.value}"
            reasons = outcome.reasons()
            if reasons:
                line += " - " + "; ".join(reasons)
            lines.append(line)
        return lines
