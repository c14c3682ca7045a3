"""Storyblocks stock image provider, authenticated with signed requests."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote, urlencode

from ..config import GatewayConfig
from ..errors import ConfigurationError
from ..http import AsyncHTTPClient
from ..logging_utils import FailureSink
from ..models import ImageResult, Source
from ..normalize import records, string_list, text, title_or_placeholder
from ..signing import (
    DEMO_USER_ID,
    SEARCH_PATH,
    SignedRequestContext,
    basic_auth_header,
    canonical_path,
)
from .base import ImageProvider

STORYBLOCKS_HOST = "https://api.graphicstock.com"
STORYBLOCKS_ENDPOINT = f"{STORYBLOCKS_HOST}{SEARCH_PATH}"
RESULTS_PER_PAGE = 10

# Characters JavaScript's encodeURIComponent leaves alone besides quote()'s defaults.
_COMPONENT_SAFE = "!~*'()"


class StoryblocksImageProvider(ImageProvider):
    name = Source.STORYBLOCKS.value

    def __init__(
        self,
        http: AsyncHTTPClient,
        config: GatewayConfig,
        sink: Optional[FailureSink] = None,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(http, config, sink, timeout)
        if not (
            config.storyblocks_public_key
            and config.storyblocks_private_key
            and config.storyblocks_project_id
        ):
            raise ConfigurationError(
                "StoryblocksImageProvider requires STORYBLOCKS_PUBLIC_KEY, "
                "STORYBLOCKS_PRIVATE_KEY and STORYBLOCKS_PROJECT_ID"
            )
        self._public_key = config.storyblocks_public_key
        self._private_key = config.storyblocks_private_key
        self._project_id = config.storyblocks_project_id
        self._clock = clock

    def build_params(self, query: str) -> Dict[str, Any]:
        return {
            "project_id": self._project_id,
            "user_id": DEMO_USER_ID,
            "keywords": query,
            "content_type": "photos",
            "page": 1,
            "results_per_page": RESULTS_PER_PAGE,
            "sort_by": "most_relevant",
            "sort_order": "DESC",
        }

    def build_request(self, query: str) -> tuple[str, Dict[str, str], SignedRequestContext]:
        """Return the URL, headers and signing context for one search call."""

        context = SignedRequestContext.create(
            canonical_path(self._project_id, query),
            self._private_key,
            clock=self._clock,
        )
        params = urlencode(self.build_params(query), quote_via=quote, safe=_COMPONENT_SAFE)
        headers = {"Authorization": basic_auth_header(self._public_key, self._private_key)}
        headers.update(context.headers())
        return f"{STORYBLOCKS_ENDPOINT}?{params}", headers, context

    async def search(self, query: str) -> List[ImageResult]:
        url, headers, _ = self.build_request(query)
        payload = await self.http.fetch_json(url, headers=headers, timeout=self.timeout)
        return self.parse(payload)

    def parse(self, payload: Any) -> List[ImageResult]:
        results: List[ImageResult] = []
        for item in records(payload, "results", self.name):
            results.append(
                ImageResult(
                    image_id=text(item.get("id")),
                    thumbnail_url=text(item.get("thumbnail_url")),
                    preview_url=text(item.get("preview_url")),
                    title=title_or_placeholder(item.get("title")),
                    source=self.name,
                    tags=string_list(item.get("keywords")),
                )
            )
        return results
