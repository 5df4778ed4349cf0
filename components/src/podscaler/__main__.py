# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
podscaler - staged replica scale-up

Entry point for the podscaler Job.

Usage:
    CONFIG_PATH=/config/deployments.yaml python -m podscaler

Exit status is 0 whenever every wave ran, even if some workloads ended
degraded or failed; it is 1 only when configuration or startup fails.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

import uvloop
from prometheus_client import start_http_server

from podscaler.argparse_config import create_podscaler_parser, validate_podscaler_args
from podscaler.common.logging import configure_podscaler_logging
from podscaler.config import load_config
from podscaler.kubernetes_connector import KubernetesConnector
from podscaler.scaler_core import PodScaler, PodScalerPrometheusMetrics
from podscaler.utils.exceptions import ConfigurationError
from podscaler.utils.report import RolloutReport

configure_podscaler_logging()
logger = logging.getLogger(__name__)


async def run_podscaler(args: argparse.Namespace) -> RolloutReport:
    """Load the configuration, connect to the cluster and roll out every wave.

    Raises:
        ConfigurationError: If the configuration or cluster credentials are invalid
    """
    descriptors = load_config(args.config)

    connector = KubernetesConnector(
        args.namespace,
        kubeconfig=args.kubeconfig,
        request_timeout=args.k8s_request_timeout,
    )
    await connector._async_init()

    metrics = PodScalerPrometheusMetrics()
    if args.metrics_port:
        start_http_server(args.metrics_port)
        logger.info(f"Started Prometheus metrics server on port {args.metrics_port}")

    scaler = PodScaler(
        descriptors,
        connector,
        rollout_poll_interval=args.rollout_poll_interval,
        probe_timeout=args.probe_timeout,
        metrics=metrics,
    )
    return await scaler.run()


def log_summary(report: RolloutReport) -> None:
    logger.info("=" * 60)
    logger.info("Rollout summary")
    logger.info("=" * 60)
    for line in report.summary_lines():
        logger.info(line)
    logger.info("=" * 60)
    if report.failed or report.degraded:
        logger.warning(
            f"All waves completed with {len(report.failed)} failed and "
            f"{len(report.degraded)} degraded workload(s)"
        )
    else:
        logger.info("All waves completed successfully!")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = create_podscaler_parser()
    args = parser.parse_args(argv)
    configure_podscaler_logging(level=args.log_level, force=True)

    try:
        validate_podscaler_args(args)
    except ValueError as e:
        parser.error(str(e))

    logger.info("Starting podscaler...")
    logger.info(f"Config: {args.config}")
    logger.info(f"Namespace: {args.namespace}")

    try:
        report = uvloop.run(run_podscaler(args))
    except ConfigurationError as e:
        logger.error(f"Failed to start: {e}")
        return 1

    log_summary(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
