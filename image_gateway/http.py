"""Asynchronous HTTP utilities with per-call timeouts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for outbound provider requests."""

    timeout: float = 8.0
    user_agent: str = "ImageGateway/0.1"


class AsyncHTTPClient:
    """Wrapper around :class:`aiohttp.ClientSession` shared by all providers.

    Every request is a single attempt bounded by a total timeout; callers are
    responsible for deciding what a failure means.
    """

    def __init__(self, config: Optional[ClientConfig] = None) -> None:
        self._config = config or ClientConfig()
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "AsyncHTTPClient":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> None:
        if self._session is None:
            headers = {"User-Agent": self._config.user_agent}
            timeout = aiohttp.ClientTimeout(total=self._config.timeout)
            self._session = aiohttp.ClientSession(headers=headers, timeout=timeout)

    @property
    def session(self) -> aiohttp.ClientSession:
        if not self._session:
            raise RuntimeError("AsyncHTTPClient must be opened before use")
        return self._session

    def _timeout(self, timeout: Optional[float]) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=timeout if timeout is not None else self._config.timeout)

    async def fetch_json(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """GET ``url`` and decode the JSON body, raising on non-2xx responses."""

        async with self.session.get(url, headers=headers, timeout=self._timeout(timeout)) as resp:
            resp.raise_for_status()
            # Some providers label JSON as text/plain or javascript.
            return await resp.json(content_type=None)

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None
