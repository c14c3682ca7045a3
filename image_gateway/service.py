"""The single search operation both transports call into."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .aggregator import Aggregator, validate_query
from .auth import TokenAuthority
from .models import ImageResult

LOGGER = logging.getLogger("image_gateway.service")


class SearchService:
    """Authorizes a caller, validates the query, then runs the aggregator."""

    def __init__(self, aggregator: Aggregator, tokens: TokenAuthority) -> None:
        self.aggregator = aggregator
        self.tokens = tokens

    async def perform_search(self, query: Optional[str], token: Optional[str]) -> List[ImageResult]:
        # The token is verified before the query is looked at.
        claims: Dict[str, Any] = self.tokens.verify(token)
        query = validate_query(query)
        LOGGER.info("Search by %s for %r", claims.get("sub"), query)
        return await self.aggregator.search(query)
