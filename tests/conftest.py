# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Shared fakes for podscaler tests: clock, orchestrator connector, probe client."""

import asyncio
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence

import pytest

from podscaler.utils.clock import Clock
from podscaler.utils.exceptions import ReadFailure, ScaleRequestFailure
from podscaler.utils.probe_client import ProbeResponse
from podscaler.workload import PodRef, WorkloadDescriptor


class FakeClock(Clock):
    """Virtual time that only moves when something sleeps."""

    def __init__(self, start: float = 0.0):
        self.time = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self.time

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.time += seconds
        # let sibling tasks run, like a real suspension point would
        await asyncio.sleep(0)


class FakeConnector:
    """In-memory stand-in for KubernetesConnector.

    - ``replicas``: current spec.replicas per workload
    - ``ready``: per-workload sequence of readyReplicas returned by successive
      polls (the last value repeats); defaults to the current replicas
    - ``pods``: running pods per workload
    """

    def __init__(
        self,
        replicas: Optional[Dict[str, int]] = None,
        ready: Optional[Dict[str, Sequence]] = None,
        pods: Optional[Dict[str, List[PodRef]]] = None,
        selectors: Optional[Dict[str, Dict[str, str]]] = None,
        clock: Optional[FakeClock] = None,
    ):
        self.replicas = dict(replicas or {})
        self.ready = {name: list(values) for name, values in (ready or {}).items()}
        self.pods = dict(pods or {})
        self.selectors = dict(selectors or {})
        self.clock = clock

        self.unreadable: set = set()
        self.rejected_scales: Dict[str, int] = {}

        self.scale_calls: List[tuple] = []
        self.status_polls: Dict[str, int] = defaultdict(int)
        self.pod_queries: List[tuple] = []
        self.events: List[tuple] = []

    def _record(self, kind: str, name: str, value=None):
        at = self.clock.now() if self.clock is not None else None
        self.events.append((at, kind, name, value))

    def requested(self, name: str) -> List[int]:
        return [n for workload, n in self.scale_calls if workload == name]

    async def get_replica_count(self, name: str) -> int:
        self._record("read", name)
        if name in self.unreadable or name not in self.replicas:
            raise ReadFailure(name, "deployment not found")
        return self.replicas[name]

    async def set_replica_count(self, name: str, replicas: int) -> None:
        self._record("scale", name, replicas)
        if self.rejected_scales.get(name) == replicas:
            raise ScaleRequestFailure(name, replicas, "API error 422: Unprocessable")
        self.scale_calls.append((name, replicas))
        self.replicas[name] = replicas

    async def get_ready_replicas(self, name: str) -> int:
        self.status_polls[name] += 1
        self._record("status", name)
        values = self.ready.get(name)
        if not values:
            return self.replicas.get(name, 0)
        value = values.pop(0) if len(values) > 1 else values[0]
        if isinstance(value, Exception):
            raise value
        return value

    async def get_selector(self, name: str) -> Dict[str, str]:
        if name not in self.selectors:
            return {"app": name}
        return self.selectors[name]

    async def list_running_pods(self, name: str, label_selector: str) -> List[PodRef]:
        self.pod_queries.append((name, label_selector))
        self._record("pods", name)
        return list(self.pods.get(name, []))


class FakeProbeClient:
    """Probe client answering from ``responder(url, attempt)``.

    ``attempt`` counts calls per URL starting at 1. The responder returns a
    ProbeResponse or raises ProbeError.
    """

    def __init__(self, responder: Callable[[str, int], ProbeResponse]):
        self.responder = responder
        self.calls: List[tuple] = []
        self._attempts: Dict[str, int] = defaultdict(int)
        self.entered = 0
        self.closed = 0

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed += 1

    async def request(self, method, url, timeout, headers=None, body=None):
        self._attempts[url] += 1
        self.calls.append((method, url, timeout, headers, body))
        return self.responder(url, self._attempts[url])

    def attempts(self, url: str) -> int:
        return self._attempts[url]


def json_response(body: str, status: int = 200) -> ProbeResponse:
    return ProbeResponse(status=status, body=body)


def make_descriptor(name: str, **overrides) -> WorkloadDescriptor:
    data = {
        "name": name,
        "maxReplicas": 4,
        "scaleStep": 2,
        "scaleInterval": "1s",
        "wave": 1,
        "readinessTimeout": "30s",
        "maxRetries": 3,
        "validation": {
            "url": "http://{pod_ip}:8080/health",
            "retryInterval": "5s",
            "check": {"field": "ready", "condition": "==", "value": True},
        },
    }
    validation = overrides.pop("validation", None)
    if validation:
        data["validation"] = {**data["validation"], **validation}
    data.update(overrides)
    return WorkloadDescriptor.model_validate(data)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def podscaler_log_capture(monkeypatch):
    """Let caplog see podscaler records, which do not reach the root logger."""
    monkeypatch.setattr(logging.getLogger("podscaler"), "propagate", True)
