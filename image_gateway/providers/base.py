"""Base classes for image providers."""

from __future__ import annotations

import abc
import asyncio
from typing import Any, List, Optional

import aiohttp

from ..config import GatewayConfig
from ..errors import ProviderUnavailable
from ..http import AsyncHTTPClient
from ..logging_utils import AuditLogger, FailureSink
from ..models import ImageResult, ProviderFailure

# Everything a single provider call may raise that is treated as that provider being down.
PROVIDER_ERRORS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ProviderUnavailable,
    ValueError,
    KeyError,
    TypeError,
    AttributeError,
)


class ImageProvider(abc.ABC):
    """Abstract interface for provider-specific search clients.

    :meth:`fetch` is the fail-soft entry point used by the aggregator: it
    performs one outbound call, and any failure at the provider is handed to
    the failure sink and turned into an empty result list.
    """

    name: str

    def __init__(
        self,
        http: AsyncHTTPClient,
        config: GatewayConfig,
        sink: Optional[FailureSink] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.http = http
        self.config = config
        self.sink = sink or AuditLogger()
        self.timeout = timeout if timeout is not None else config.provider_timeout

    async def fetch(self, query: str) -> List[ImageResult]:
        """Return normalized results for ``query``, or ``[]`` if the provider fails."""

        try:
            return await asyncio.wait_for(self.search(query), timeout=self.timeout)
        except asyncio.TimeoutError:
            self._report(query, f"timed out after {self.timeout:g}s")
        except aiohttp.ClientResponseError as exc:
            self._report(query, f"HTTP {exc.status}: {exc.message}", exc.status)
        except ProviderUnavailable as exc:
            self._report(query, exc.message, exc.upstream_status)
        except PROVIDER_ERRORS as exc:
            self._report(query, f"{type(exc).__name__}: {exc}")
        return []

    def _report(self, query: str, error: str, status: Optional[int] = None) -> None:
        self.sink.record(
            ProviderFailure(provider=self.name, query=query, error=error, status=status)
        )

    @abc.abstractmethod
    async def search(self, query: str) -> List[ImageResult]:
        """Perform one provider call and return normalized results; raises on failure."""

    @abc.abstractmethod
    def parse(self, payload: Any) -> List[ImageResult]:
        """Map a provider response body to canonical results."""
