"""Federated image search across several third-party providers."""

from .aggregator import Aggregator
from .config import GatewayConfig, load_config
from .models import ImageResult, ProviderFailure, Source
from .providers import PROVIDERS, create_providers
from .service import SearchService

__all__ = [
    "Aggregator",
    "GatewayConfig",
    "ImageResult",
    "PROVIDERS",
    "ProviderFailure",
    "SearchService",
    "Source",
    "create_providers",
    "load_config",
]
