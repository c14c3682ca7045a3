from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from image_gateway.config import GatewayConfig
from image_gateway.models import ImageResult
from image_gateway.providers import pixabay, storyblocks, unsplash
from image_gateway.providers.base import ImageProvider

TOKEN_SECRET = "token-secret-for-tests-0123456789abcdef"


def make_config(**overrides: Any) -> GatewayConfig:
    values = dict(
        token_secret=TOKEN_SECRET,
        unsplash_key="unsplash-key",
        pixabay_key="pixabay-key",
        storyblocks_public_key="public-key",
        storyblocks_private_key="private-key",
        storyblocks_project_id="project-42",
        provider_timeout=1.0,
    )
    values.update(overrides)
    return GatewayConfig(**values)


class FakeHTTP:
    """Stands in for AsyncHTTPClient and records every outbound call."""

    def __init__(self, payload: Any = None, error: Optional[BaseException] = None, delay: float = 0.0) -> None:
        self.payload = payload
        self.error = error
        self.delay = delay
        self.calls: List[dict] = []

    async def fetch_json(self, url: str, *, headers=None, timeout=None) -> Any:
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.payload


def result(source: str, image_id: str) -> ImageResult:
    return ImageResult(
        image_id=image_id,
        thumbnail_url=f"https://img.example/{image_id}/thumb.jpg",
        preview_url=f"https://img.example/{image_id}/preview.jpg",
        title=f"image {image_id}",
        source=source,
        tags=("example",),
    )


class ScriptedProvider(ImageProvider):
    """Provider whose search sleeps, then returns canned results or raises."""

    def __init__(
        self,
        name: str,
        results: Optional[List[ImageResult]] = None,
        delay: float = 0.0,
        error: Optional[BaseException] = None,
        timeout: float = 1.0,
        sink=None,
    ) -> None:
        super().__init__(http=None, config=make_config(), sink=sink, timeout=timeout)
        self.name = name
        self.results = results or []
        self.delay = delay
        self.error = error
        self.calls = 0

    async def search(self, query: str) -> List[ImageResult]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.parse(self.results)

    def parse(self, payload: Any) -> List[ImageResult]:
        return list(payload)


def upstream_app(delay: float = 0.0, seen: dict | None = None) -> web.Application:
    seen = {} if seen is None else seen

    async def ok(request: web.Request) -> web.Response:
        return web.json_response({"hello": "world"})

    async def text_json(request: web.Request) -> web.Response:
        return web.Response(text='{"hits": []}', content_type="text/plain")

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(1.0)
        return web.json_response({})

    async def broken(request: web.Request) -> web.Response:
        return web.json_response({"error": "down"}, status=503)

    async def unsplash_search(request: web.Request) -> web.Response:
        await asyncio.sleep(delay)
        seen["unsplash"] = dict(request.query)
        return web.json_response(
            {"results": [{"id": "u1", "urls": {"thumb": "t", "small": "s"}, "alt_description": "fox"}]}
        )

    async def pixabay_search(request: web.Request) -> web.Response:
        await asyncio.sleep(delay)
        seen["pixabay"] = dict(request.query)
        return web.json_response({"hits": [{"id": 5, "previewURL": "t", "webformatURL": "w", "tags": "fox, red"}]})

    async def storyblocks_search(request: web.Request) -> web.Response:
        await asyncio.sleep(delay)
        seen["storyblocks"] = {key: request.headers.get(key) for key in ("Authorization", "EXPIRES", "HMAC")}
        return web.json_response({"results": [{"id": 9, "thumbnail_url": "t", "preview_url": "p"}]})

    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_get("/text", text_json)
    app.router.add_get("/slow", slow)
    app.router.add_get("/broken", broken)
    app.router.add_get("/unsplash", unsplash_search)
    app.router.add_get("/pixabay", pixabay_search)
    app.router.add_get("/storyblocks", storyblocks_search)
    return app


def point_providers_at(monkeypatch: pytest.MonkeyPatch, server: TestServer) -> None:
    """Route all three provider clients to the routes of ``upstream_app``."""

    monkeypatch.setattr(unsplash, "UNSPLASH_ENDPOINT", str(server.make_url("/unsplash")))
    monkeypatch.setattr(pixabay, "PIXABAY_ENDPOINT", str(server.make_url("/pixabay")))
    monkeypatch.setattr(storyblocks, "STORYBLOCKS_ENDPOINT", str(server.make_url("/storyblocks")))
