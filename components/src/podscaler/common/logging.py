# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Process-wide logging setup for podscaler.

Every module calls ``configure_podscaler_logging()`` at import time and then
takes ``logging.getLogger(__name__)``. The first call installs a single stream
handler on the ``podscaler`` logger; later calls are no-ops unless
``force=True`` is passed. Records do not propagate to the root logger.

Each line is prefixed with the elapsed time since the process started, e.g.::

    [02:15] INFO podscaler.utils.scaling: Scaled service-a to 4 replicas
"""

import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV_VAR = "PODSCALER_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

_ROOT_LOGGER_NAME = "podscaler"
_configured = False


class ElapsedTimeFormatter(logging.Formatter):
    """Formatter that renders ``%(elapsed)s`` as MM:SS since process start."""

    def format(self, record: logging.LogRecord) -> str:
        total_seconds = int(record.relativeCreated // 1000)
        minutes, seconds = divmod(total_seconds, 60)
        record.elapsed = f"{minutes:02d}:{seconds:02d}"
        return super().format(record)


def configure_podscaler_logging(
    level: Optional[str] = None, force: bool = False
) -> None:
    global _configured
    if _configured and not force:
        return

    level_name = (level or os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL)).upper()

    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ElapsedTimeFormatter("[%(elapsed)s] %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.setLevel(level_name)
    logger.propagate = False

    _configured = True
