"""Pixabay image search provider implementation."""

from __future__ import annotations

from typing import Any, List, Optional
from urllib.parse import urlencode

from ..config import GatewayConfig
from ..errors import ConfigurationError
from ..http import AsyncHTTPClient
from ..logging_utils import FailureSink
from ..models import ImageResult, Source
from ..normalize import records, split_tags, text, title_or_placeholder
from .base import ImageProvider

PIXABAY_ENDPOINT = "https://pixabay.com/api/"


class PixabayImageProvider(ImageProvider):
    name = Source.PIXABAY.value

    def __init__(
        self,
        http: AsyncHTTPClient,
        config: GatewayConfig,
        sink: Optional[FailureSink] = None,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(http, config, sink, timeout)
        if not config.pixabay_key:
            raise ConfigurationError("PixabayImageProvider requires PIXABAY_KEY")
        self._api_key = config.pixabay_key

    async def search(self, query: str) -> List[ImageResult]:
        params = {"key": self._api_key, "q": query}
        payload = await self.http.fetch_json(
            f"{PIXABAY_ENDPOINT}?{urlencode(params)}", timeout=self.timeout
        )
        return self.parse(payload)

    def parse(self, payload: Any) -> List[ImageResult]:
        results: List[ImageResult] = []
        for item in records(payload, "hits", self.name):
            # Pixabay has no title; its tags arrive as one comma-separated string.
            raw_tags = text(item.get("tags"))
            results.append(
                ImageResult(
                    image_id=text(item.get("id")),
                    thumbnail_url=text(item.get("previewURL")),
                    preview_url=text(item.get("webformatURL")),
                    title=title_or_placeholder(raw_tags.split(",")[0]),
                    source=self.name,
                    tags=split_tags(raw_tags),
                )
            )
        return results
