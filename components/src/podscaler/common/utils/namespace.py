# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import os

SERVICE_ACCOUNT_NAMESPACE_FILE = "/var/run/secrets/kubernetes.io/serviceaccount/namespace"


def get_namespace(default="default"):
    """Get the Kubernetes namespace the scaled workloads live in.

    POD_NAMESPACE wins when set. Inside a cluster the service account's
    namespace file is used next, so a Job scales workloads in its own namespace.
    """
    namespace = os.environ.get("POD_NAMESPACE")
    if namespace:
        return namespace
    try:
        with open(SERVICE_ACCOUNT_NAMESPACE_FILE) as f:
            namespace = f.read().strip()
    except OSError:
        return default
    return namespace or default
