# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Exception hierarchy for podscaler.

PodScalerError
├── ConfigurationError      fatal, raised before any wave runs
├── WorkloadError           hard failure scoped to one workload
│   ├── ReadFailure
│   ├── ScaleRequestFailure
│   └── NoPodsFound
└── ProbeError              one HTTP probe could not be completed
"""

from typing import List, Optional


class PodScalerError(Exception):
    """Base class for all podscaler errors."""


class ConfigurationError(PodScalerError):
    """The workload configuration could not be loaded or is invalid."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = errors or []
        if self.errors:
            message = f"{message}: " + "; ".join(self.errors)
        super().__init__(message)


class WorkloadError(PodScalerError):
    """A hard failure that aborts the remaining phases of a single workload."""

    def __init__(self, workload: str, reason: str):
        self.workload = workload
        self.reason = reason
        super().__init__(f"{workload}: {reason}")


class ReadFailure(WorkloadError):
    """The current replica count of a workload could not be read."""


class ScaleRequestFailure(WorkloadError):
    """The orchestrator rejected a scale request."""

    def __init__(self, workload: str, replicas: int, reason: str):
        self.replicas = replicas
        super().__init__(workload, f"scale to {replicas} rejected: {reason}")


class NoPodsFound(WorkloadError):
    """No running pods matched the workload selector at validation time."""

    def __init__(self, workload: str, selector: str):
        self.selector = selector
        super().__init__(workload, f"no running pods match selector '{selector}'")


class ProbeError(PodScalerError):
    """Transport-level failure of a single HTTP probe."""
