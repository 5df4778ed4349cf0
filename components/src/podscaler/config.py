# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Loading of the workload configuration document.

The document is YAML (JSON is accepted too, being a subset) with a top-level
``deployments`` list, as mounted from the pod-scaler ConfigMap::

    deployments:
      - name: "service-a"
        maxReplicas: 10
        scaleStep: 2
        scaleInterval: "30s"
        wave: 1
        validation:
          url: "http://{pod_ip}:8080/health"
          check: {field: "active_connections", condition: ">", value: 10}
"""

import logging
from pathlib import Path
from typing import List, Union

import yaml
from pydantic import ValidationError

from podscaler.common.logging import configure_podscaler_logging
from podscaler.utils.exceptions import ConfigurationError
from podscaler.workload import PodScalerConfig, WorkloadDescriptor

configure_podscaler_logging()
logger = logging.getLogger(__name__)


def parse_config(data) -> List[WorkloadDescriptor]:
    """Validate an already-decoded document and return its workloads in order.

    Raises:
        ConfigurationError: If the document does not match the schema
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"configuration must be a mapping, got {type(data).__name__}"
        )
    try:
        config = PodScalerConfig.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigurationError("invalid configuration", errors) from e
    return list(config.deployments)


def load_config(path: Union[str, Path]) -> List[WorkloadDescriptor]:
    """Read and validate the configuration file at ``path``.

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise ConfigurationError(f"cannot read configuration {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"cannot parse configuration {path}: {e}") from e

    descriptors = parse_config(data)
    logger.info(f"Loaded {len(descriptors)} workload(s) from {path}")
    return descriptors
