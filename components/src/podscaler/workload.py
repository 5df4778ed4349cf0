# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Data structures describing the workloads to scale and how to validate them."""

import json
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from podscaler.defaults import PodScalerDefaults
from podscaler.utils.duration import parse_duration

# Placeholders a validation URL template may reference
URL_PLACEHOLDERS = frozenset({"pod_ip", "pod_name"})


class CheckCondition(str, Enum):
    """Comparison applied between the extracted field and the expected value"""

    EQUAL = "=="
    NOT_EQUAL = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_OR_EQUAL = ">="
    LESS_OR_EQUAL = "<="


class CheckClause(BaseModel):
    """Condition evaluated against the decoded probe response body"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str = Field(min_length=1)  # dotted path, e.g. "status.ready"
    condition: CheckCondition
    value: Any = None


class ValidationSpec(BaseModel):
    """How to probe one pod of a workload"""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    type: Literal["http"] = "http"
    url: str
    method: str = "GET"
    body: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    check: CheckClause

    # Timing
    validation_delay: float = Field(default=0.0, alias="validationDelay")
    retry_interval: float = Field(
        default=PodScalerDefaults.retry_interval, alias="retryInterval"
    )
    timeout: Optional[float] = None  # falls back to --probe-timeout

    @field_validator("validation_delay", "retry_interval", "timeout", mode="before")
    @classmethod
    def _parse_durations(cls, value):
        if value is None:
            return value
        return parse_duration(value)

    @field_validator("method")
    @classmethod
    def _normalize_method(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("body", mode="before")
    @classmethod
    def _serialize_body(cls, value):
        # Allow a structured body in YAML; it is sent as JSON
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return value

    @field_validator("url")
    @classmethod
    def _check_url_template(cls, value: str) -> str:
        names = {
            name for _, name, _, _ in string.Formatter().parse(value) if name
        }
        unknown = names - URL_PLACEHOLDERS
        if unknown:
            raise ValueError(
                f"unknown placeholder(s) {sorted(unknown)} in url; "
                f"allowed: {sorted(URL_PLACEHOLDERS)}"
            )
        if "pod_ip" not in names:
            raise ValueError("url must contain the {pod_ip} placeholder")
        return value


class WorkloadDescriptor(BaseModel):
    """Scaling and validation policy for one Deployment"""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: str = Field(min_length=1)

    # Replica policy
    initial_replicas: int = Field(default=0, ge=0, alias="initialReplicas")
    max_replicas: int = Field(ge=0, alias="maxReplicas")
    scale_step: int = Field(ge=1, alias="scaleStep")
    scale_interval: float = Field(default=0.0, alias="scaleInterval")

    # Sequencing
    wave: int = Field(default=0, ge=0)

    # Readiness and validation
    readiness_timeout: float = Field(
        default=PodScalerDefaults.readiness_timeout, alias="readinessTimeout"
    )
    max_retries: int = Field(
        default=PodScalerDefaults.max_retries, ge=1, alias="maxRetries"
    )
    selector: Optional[Dict[str, str]] = None  # defaults to the Deployment's matchLabels
    validation: ValidationSpec

    @field_validator("scale_interval", "readiness_timeout", mode="before")
    @classmethod
    def _parse_durations(cls, value):
        return parse_duration(value)

    @model_validator(mode="after")
    def _check_replica_bounds(self):
        if self.max_replicas < self.initial_replicas:
            raise ValueError(
                f"maxReplicas ({self.max_replicas}) must be >= "
                f"initialReplicas ({self.initial_replicas})"
            )
        return self


class PodScalerConfig(BaseModel):
    """Top-level configuration document"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    deployments: List[WorkloadDescriptor] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_names(self):
        seen = set()
        duplicates = []
        for descriptor in self.deployments:
            if descriptor.name in seen:
                duplicates.append(descriptor.name)
            seen.add(descriptor.name)
        if duplicates:
            raise ValueError(f"duplicate workload names: {sorted(set(duplicates))}")
        return self


@dataclass(frozen=True)
class PodRef:
    name: str
    address: str

    def __str__(self) -> str:
        return f"{self.name} ({self.address})"


@dataclass(frozen=True)
class ProbeTarget:
    """Validation settings of one workload, resolved once before probing.

    The selector is rendered to a label-selector string and the URL template
    is kept as-is, to be filled per pod with ``url_for``.
    """

    workload: str
    label_selector: str
    url_template: str
    method: str
    check: CheckClause
    timeout: float
    body: Optional[str] = None
    headers: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def from_descriptor(
        cls,
        descriptor: WorkloadDescriptor,
        selector: Mapping[str, str],
        default_timeout: float,
    ) -> "ProbeTarget":
        spec = descriptor.validation
        return cls(
            workload=descriptor.name,
            label_selector=format_label_selector(selector),
            url_template=spec.url,
            method=spec.method,
            check=spec.check,
            timeout=spec.timeout if spec.timeout is not None else default_timeout,
            body=spec.body,
            headers=tuple(sorted(spec.headers.items())),
        )

    def url_for(self, pod: PodRef) -> str:
        return self.url_template.format(pod_ip=pod.address, pod_name=pod.name)


def format_label_selector(selector: Mapping[str, str]) -> str:
    """Render {"app": "web", "tier": "api"} as "app=web,tier=api"."""
    return ",".join(f"{key}={value}" for key, value in sorted(selector.items()))
