# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Argument parsing for podscaler."""

import argparse

from podscaler.common.configuration.utils import add_argument
from podscaler.common.utils.namespace import get_namespace
from podscaler.defaults import PodScalerDefaults


def create_podscaler_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for podscaler.

    Returns:
        argparse.ArgumentParser: Configured argument parser for podscaler
    """
    parser = argparse.ArgumentParser(
        description="podscaler - staged replica scale-up in waves",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # In-cluster Job with the ConfigMap mounted at /config
  python -m podscaler

  # Local run against the current kubeconfig context
  python -m podscaler --config deployments.yaml --namespace staging \\
    --rollout-poll-interval 5
        """,
    )

    add_argument(
        parser,
        flag_name="--config",
        env_var="CONFIG_PATH",
        default=PodScalerDefaults.config_path,
        help="Path of the workload configuration (YAML or JSON)",
    )
    add_argument(
        parser,
        flag_name="--namespace",
        env_var="POD_NAMESPACE",
        default=get_namespace(PodScalerDefaults.namespace),
        help="Kubernetes namespace of the workloads",
    )
    add_argument(
        parser,
        flag_name="--kubeconfig",
        env_var="KUBECONFIG",
        default=None,
        help="Kubeconfig file (default: in-cluster config, then ~/.kube/config)",
    )
    add_argument(
        parser,
        flag_name="--rollout-poll-interval",
        env_var="PODSCALER_ROLLOUT_POLL_INTERVAL",
        default=PodScalerDefaults.rollout_poll_interval,
        arg_type=float,
        help="Seconds between rollout status polls",
    )
    add_argument(
        parser,
        flag_name="--probe-timeout",
        env_var="PODSCALER_PROBE_TIMEOUT",
        default=PodScalerDefaults.probe_timeout,
        arg_type=float,
        help="Timeout in seconds of one validation request, unless the workload sets its own",
    )
    add_argument(
        parser,
        flag_name="--k8s-request-timeout",
        env_var="PODSCALER_K8S_REQUEST_TIMEOUT",
        default=PodScalerDefaults.k8s_request_timeout,
        arg_type=float,
        help="Timeout in seconds of each Kubernetes API call",
    )
    add_argument(
        parser,
        flag_name="--metrics-port",
        env_var="PODSCALER_METRICS_PORT",
        default=PodScalerDefaults.metrics_port,
        arg_type=int,
        help="Port for exposing Prometheus metrics (0 disables the exporter)",
    )
    add_argument(
        parser,
        flag_name="--log-level",
        env_var="PODSCALER_LOG_LEVEL",
        default=PodScalerDefaults.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        arg_type=str.upper,
        help="Log level",
    )

    return parser


def validate_podscaler_args(args: argparse.Namespace) -> None:
    """Check argument constraints argparse cannot express.

    Raises:
        ValueError: If argument constraints are violated
    """
    if args.rollout_poll_interval <= 0:
        raise ValueError(
            f"--rollout-poll-interval must be positive, got {args.rollout_poll_interval}"
        )
    if args.probe_timeout <= 0:
        raise ValueError(f"--probe-timeout must be positive, got {args.probe_timeout}")
    if args.k8s_request_timeout <= 0:
        raise ValueError(
            f"--k8s-request-timeout must be positive, got {args.k8s_request_timeout}"
        )
    if not 0 <= args.metrics_port <= 65535:
        raise ValueError(f"--metrics-port out of range: {args.metrics_port}")
