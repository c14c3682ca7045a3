"""Dataclasses used across the gateway modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

UNTITLED = "Untitled"


class Source(str, Enum):
    """Names of the image providers the gateway federates."""

    UNSPLASH = "Unsplash"
    PIXABAY = "Pixabay"
    STORYBLOCKS = "Storyblocks"


@dataclass(frozen=True, slots=True)
class ImageResult:
    """Canonical record for an image returned by any provider."""

    image_id: str
    thumbnail_url: str
    preview_url: str
    title: str
    source: str
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to the wire shape returned to callers."""

        return {
            "imageId": self.image_id,
            "thumbnailUrl": self.thumbnail_url,
            "previewUrl": self.preview_url,
            "title": self.title,
            "source": self.source,
            "tags": list(self.tags),
        }


@dataclass(slots=True)
class ProviderFailure:
    """Represents a failed provider call, as handed to the failure sink."""

    provider: str
    query: str
    error: str
    status: Optional[int] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert the failure to a JSON serialisable dictionary."""

        return {
            "provider": self.provider,
            "query": self.query,
            "error": self.error,
            "status": self.status,
            "timestamp": self.timestamp.isoformat(),
        }
