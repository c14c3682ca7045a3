from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from helpers import TOKEN_SECRET, ScriptedProvider, result

from image_gateway.aggregator import Aggregator
from image_gateway.auth import TokenAuthority
from image_gateway.errors import Forbidden, InvalidRequest, TokenExpired, Unauthorized
from image_gateway.service import SearchService


def build_service():
    providers = [ScriptedProvider(name, [result(name, "1")]) for name in ("Unsplash", "Pixabay", "Storyblocks")]
    tokens = TokenAuthority(TOKEN_SECRET, ttl=60)
    return SearchService(Aggregator(providers), tokens), providers


def test_authorized_search_returns_results() -> None:
    service, _ = build_service()
    token = service.tokens.issue("user-1")

    results = asyncio.run(service.perform_search("fox", token))

    assert [r.source for r in results] == ["Unsplash", "Pixabay", "Storyblocks"]


@pytest.mark.parametrize(
    "token, error",
    [
        (None, Unauthorized),
        ("not-a-token", Forbidden),
        ("a.b", Forbidden),
        ("abc.é", Forbidden),
        ("été.été.été", Forbidden),
    ],
)
def test_unauthorized_requests_never_reach_providers(token, error) -> None:
    service, providers = build_service()

    with pytest.raises(error):
        asyncio.run(service.perform_search("fox", token))
    assert all(p.calls == 0 for p in providers)


def test_expired_token_never_reaches_providers() -> None:
    service, providers = build_service()
    stale = TokenAuthority(TOKEN_SECRET, ttl=60, clock=lambda: time.time() - 3600)

    with pytest.raises(TokenExpired):
        asyncio.run(service.perform_search("fox", stale.issue("user-1")))
    assert all(p.calls == 0 for p in providers)


def test_empty_query_is_rejected_before_dispatch() -> None:
    service, providers = build_service()
    token = service.tokens.issue("user-1")

    with pytest.raises(InvalidRequest):
        asyncio.run(service.perform_search("", token))
    assert all(p.calls == 0 for p in providers)
