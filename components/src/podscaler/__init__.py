# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
podscaler - staged, wave-by-wave replica scale-up for Kubernetes Deployments.

Architecture:
- Workloads are grouped into waves by their wave number
- Within a wave, every workload is scaled in bounded steps, then its rollout
  is awaited, then its pods are validated over HTTP
- A wave starts only after the previous wave finished all three phases
- Failures stay local to a workload and are reported at the end

Usage:
    CONFIG_PATH=/config/deployments.yaml python -m podscaler
"""

__all__ = [
    "KubernetesConnector",
    "PodScaler",
    "WorkloadDescriptor",
    "load_config",
]

from podscaler.config import load_config
from podscaler.kubernetes_connector import KubernetesConnector
from podscaler.scaler_core import PodScaler
from podscaler.workload import WorkloadDescriptor
