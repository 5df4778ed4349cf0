# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Kubernetes control-plane access used by the rollout phases."""

import asyncio
import logging
from typing import Dict, List, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from podscaler.common.logging import configure_podscaler_logging
from podscaler.defaults import PodScalerDefaults
from podscaler.utils.exceptions import (
    ConfigurationError,
    ReadFailure,
    ScaleRequestFailure,
)
from podscaler.workload import PodRef

configure_podscaler_logging()
logger = logging.getLogger(__name__)

RUNNING_POD_FIELD_SELECTOR = "status.phase=Running"


def _describe(e: Exception) -> str:
    if isinstance(e, ApiException):
        return f"API error {e.status}: {e.reason}"
    return str(e) or type(e).__name__


class KubernetesConnector:
    """Reads and scales Deployments in one namespace.

    The official client is synchronous, so every call runs in a worker thread
    to keep the event loop free for sibling workloads of the same wave. Each
    call is bounded by ``request_timeout`` seconds; a stalled API server
    surfaces as the same ReadFailure or ScaleRequestFailure as any API error.
    """

    def __init__(
        self,
        k8s_namespace: str,
        kubeconfig: Optional[str] = None,
        apps_api: Optional[client.AppsV1Api] = None,
        core_api: Optional[client.CoreV1Api] = None,
        request_timeout: float = PodScalerDefaults.k8s_request_timeout,
    ):
        self.k8s_namespace = k8s_namespace
        self.request_timeout = request_timeout
        self.kubeconfig = kubeconfig
        self.apps_api = apps_api
        self.core_api = core_api

    async def _async_init(self):
        """Load cluster credentials and create API clients if none were injected.

        Raises:
            ConfigurationError: If neither in-cluster nor kubeconfig credentials load
        """
        if self.apps_api is not None and self.core_api is not None:
            return
        try:
            if self.kubeconfig:
                config.load_kube_config(config_file=self.kubeconfig)
            else:
                try:
                    config.load_incluster_config()
                except ConfigException:
                    config.load_kube_config()
        except (ConfigException, OSError) as e:
            raise ConfigurationError(
                f"cannot load Kubernetes credentials: {e}"
            ) from e

        self.apps_api = self.apps_api or client.AppsV1Api()
        self.core_api = self.core_api or client.CoreV1Api()
        logger.info(
            f"KubernetesConnector initialized for namespace {self.k8s_namespace}"
        )

    async def get_replica_count(self, name: str) -> int:
        """Return the desired replica count (spec.replicas) of a Deployment.

        Raises:
            ReadFailure: If the Deployment is missing or the API is unreachable
        """
        try:
            scale = await asyncio.to_thread(
                self.apps_api.read_namespaced_deployment_scale,
                name,
                self.k8s_namespace,
                _request_timeout=self.request_timeout,
            )
        except Exception as e:
            raise ReadFailure(
                name, f"cannot read replica count: {_describe(e)}"
            ) from e
        return int(scale.spec.replicas or 0)

    async def set_replica_count(self, name: str, replicas: int) -> None:
        """Request ``replicas`` for a Deployment through its scale subresource.

        Raises:
            ScaleRequestFailure: If the request is rejected
        """
        body = {"spec": {"replicas": replicas}}
        try:
            await asyncio.to_thread(
                self.apps_api.patch_namespaced_deployment_scale,
                name,
                self.k8s_namespace,
                body,
                _request_timeout=self.request_timeout,
            )
        except Exception as e:
            raise ScaleRequestFailure(name, replicas, _describe(e)) from e

    async def get_ready_replicas(self, name: str) -> int:
        """Return status.readyReplicas of a Deployment (0 when unset).

        Raises:
            ReadFailure: If the status cannot be read
        """
        try:
            deployment = await asyncio.to_thread(
                self.apps_api.read_namespaced_deployment_status,
                name,
                self.k8s_namespace,
                _request_timeout=self.request_timeout,
            )
        except Exception as e:
            raise ReadFailure(
                name, f"cannot read rollout status: {_describe(e)}"
            ) from e
        status = deployment.status
        return int((status.ready_replicas if status else None) or 0)

    async def get_selector(self, name: str) -> Dict[str, str]:
        """Return the matchLabels selecting a Deployment's pods.

        Raises:
            ReadFailure: If the Deployment cannot be read or has no matchLabels
        """
        try:
            deployment = await asyncio.to_thread(
                self.apps_api.read_namespaced_deployment,
                name,
                self.k8s_namespace,
                _request_timeout=self.request_timeout,
            )
        except Exception as e:
            raise ReadFailure(name, f"cannot read selector: {_describe(e)}") from e

        selector = deployment.spec.selector
        match_labels = selector.match_labels if selector else None
        if not match_labels:
            raise ReadFailure(name, "deployment has no selector.matchLabels")
        return dict(match_labels)

    async def list_running_pods(self, name: str, label_selector: str) -> List[PodRef]:
        """List running, non-terminating pods matching ``label_selector``.

        Pods without an assigned IP are skipped since they cannot be probed.

        Raises:
            ReadFailure: If the pod list cannot be retrieved
        """
        try:
            pod_list = await asyncio.to_thread(
                self.core_api.list_namespaced_pod,
                self.k8s_namespace,
                label_selector=label_selector,
                field_selector=RUNNING_POD_FIELD_SELECTOR,
                _request_timeout=self.request_timeout,
            )
        except Exception as e:
            raise ReadFailure(name, f"cannot list pods: {_describe(e)}") from e

        pods = []
        for pod in pod_list.items:
            if pod.metadata.deletion_timestamp is not None:
                continue
            if not pod.status or not pod.status.pod_ip:
                continue
            pods.append(PodRef(name=pod.metadata.name, address=pod.status.pod_ip))
        return sorted(pods, key=lambda p: p.name)
