# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

import aiohttp

from podscaler.common.logging import configure_podscaler_logging
from podscaler.utils.exceptions import ProbeError

configure_podscaler_logging()
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeResponse:
    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpProbeClient:
    """Issues single validation requests against pod addresses.

    One client (and one aiohttp session) is used per workload validation pass
    and closed afterwards; use it as an async context manager.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "HttpProbeClient":
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def request(
        self,
        method: str,
        url: str,
        timeout: float,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> ProbeResponse:
        """Send one request and return its status and body text.

        Raises:
            ProbeError: On connection failure or timeout
        """
        if self._session is None:
            raise RuntimeError("HttpProbeClient used outside 'async with'")
        try:
            async with self._session.request(
                method,
                url,
                headers=dict(headers or {}),
                data=body,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                text = await response.text(errors="replace")
                logger.debug(f"{method} {url} -> {response.status}")
                return ProbeResponse(status=response.status, body=text)
        except asyncio.TimeoutError as e:
            raise ProbeError(f"{method} {url} timed out after {timeout}s") from e
        except aiohttp.ClientError as e:
            raise ProbeError(f"{method} {url} failed: {e}") from e
