"""Unsplash photo search provider implementation."""

from __future__ import annotations

from typing import Any, List, Optional
from urllib.parse import urlencode

from ..config import GatewayConfig
from ..errors import ConfigurationError
from ..http import AsyncHTTPClient
from ..logging_utils import FailureSink
from ..models import ImageResult, Source
from ..normalize import nested, records, string_list, text, title_or_placeholder
from .base import ImageProvider

UNSPLASH_ENDPOINT = "https://api.unsplash.com/search/photos"


class UnsplashImageProvider(ImageProvider):
    name = Source.UNSPLASH.value

    def __init__(
        self,
        http: AsyncHTTPClient,
        config: GatewayConfig,
        sink: Optional[FailureSink] = None,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(http, config, sink, timeout)
        if not config.unsplash_key:
            raise ConfigurationError("UnsplashImageProvider requires UNSPLASH_KEY")
        self._api_key = config.unsplash_key

    async def search(self, query: str) -> List[ImageResult]:
        params = {"query": query, "client_id": self._api_key}
        payload = await self.http.fetch_json(
            f"{UNSPLASH_ENDPOINT}?{urlencode(params)}", timeout=self.timeout
        )
        return self.parse(payload)

    def parse(self, payload: Any) -> List[ImageResult]:
        results: List[ImageResult] = []
        for item in records(payload, "results", self.name):
            tags = item.get("tags")
            if not isinstance(tags, list):
                tags = []
            results.append(
                ImageResult(
                    image_id=text(item.get("id")),
                    thumbnail_url=text(nested(item, "urls", "thumb")),
                    preview_url=text(nested(item, "urls", "small")),
                    title=title_or_placeholder(item.get("alt_description")),
                    source=self.name,
                    tags=string_list([tag.get("title") for tag in tags if isinstance(tag, dict)]),
                )
            )
        return results
