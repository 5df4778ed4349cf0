# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import time


class Clock:
    """Monotonic time source and sleep used by every polling loop.

    Components take a clock instead of calling ``asyncio.sleep`` directly so
    timing can be replaced in tests.
    """

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
