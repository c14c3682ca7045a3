"""Concurrent fan-out of one query to every registered provider."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional, Sequence

from .errors import AggregatorInternal, InvalidRequest
from .models import ImageResult
from .providers.base import ImageProvider

LOGGER = logging.getLogger("image_gateway.aggregator")


def validate_query(query: Optional[str]) -> str:
    if not isinstance(query, str) or not query.strip():
        raise InvalidRequest('Query parameter "q" is required')
    return query


class Aggregator:
    """Dispatches a query to all providers at once and joins their results.

    Results are concatenated in the order providers were registered, never in
    completion order. Providers absorb their own failures, so the only error
    :meth:`search` raises besides :class:`InvalidRequest` is
    :class:`AggregatorInternal`.
    """

    def __init__(self, providers: Sequence[ImageProvider]) -> None:
        self._providers = tuple(providers)

    async def search(self, query: str) -> List[ImageResult]:
        query = validate_query(query)
        started = time.monotonic()
        tasks = [asyncio.create_task(provider.fetch(query)) for provider in self._providers]
        try:
            batches = await asyncio.gather(*tasks)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Error handling search for %r", query)
            for task in tasks:
                task.cancel()
            # Wait for the cancelled providers to unwind before reporting.
            await asyncio.gather(*tasks, return_exceptions=True)
            raise AggregatorInternal("Internal Server Error") from exc
        results: List[ImageResult] = []
        for provider, batch in zip(self._providers, batches):
            LOGGER.debug("%s contributed %d results", provider.name, len(batch))
            results.extend(batch)
        LOGGER.info(
            "Search %r returned %d results from %d providers in %.2fs",
            query,
            len(results),
            len(self._providers),
            time.monotonic() - started,
        )
        return results
