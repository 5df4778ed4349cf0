# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0


class PodScalerDefaults:
    config_path = "/config/deployments.yaml"
    namespace = "default"
    log_level = "INFO"
    metrics_port = 0  # 0 disables the Prometheus exporter

    # Seconds between rollout status polls
    rollout_poll_interval = 10.0
    # Per-request timeout of a validation probe, in seconds
    probe_timeout = 10.0
    # Per-call timeout of Kubernetes API requests, in seconds
    k8s_request_timeout = 30.0

    # Workload defaults when the config omits them
    readiness_timeout = 300.0
    retry_interval = 10.0
    max_retries = 5
