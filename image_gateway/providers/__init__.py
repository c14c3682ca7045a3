"""Provider factory utilities."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Type

from ..config import GatewayConfig
from ..errors import ConfigurationError
from ..http import AsyncHTTPClient
from ..logging_utils import FailureSink
from .base import ImageProvider
from .pixabay import PixabayImageProvider
from .storyblocks import StoryblocksImageProvider
from .unsplash import UnsplashImageProvider

LOGGER = logging.getLogger("image_gateway.providers")

# Insertion order is the order results are concatenated in.
PROVIDERS: Dict[str, Type[ImageProvider]] = {
    UnsplashImageProvider.name.lower(): UnsplashImageProvider,
    PixabayImageProvider.name.lower(): PixabayImageProvider,
    StoryblocksImageProvider.name.lower(): StoryblocksImageProvider,
}


def create_provider(
    name: str,
    http: AsyncHTTPClient,
    config: GatewayConfig,
    **kwargs,
) -> ImageProvider:
    try:
        provider_cls = PROVIDERS[name.lower()]
    except KeyError as exc:
        raise KeyError(f"Unknown provider '{name}'. Available: {', '.join(PROVIDERS)}") from exc
    return provider_cls(http, config, **kwargs)


def create_providers(
    http: AsyncHTTPClient,
    config: GatewayConfig,
    sink: Optional[FailureSink] = None,
    timeout: Optional[float] = None,
) -> List[ImageProvider]:
    """Build every provider whose credentials are configured, in registry order."""

    providers: List[ImageProvider] = []
    for name in PROVIDERS:
        try:
            providers.append(create_provider(name, http, config, sink=sink, timeout=timeout))
        except ConfigurationError as exc:
            LOGGER.warning("Skipping provider '%s': %s", name, exc)
    return providers


__all__ = ["ImageProvider", "create_provider", "create_providers", "PROVIDERS"]
