"""Defaulting rules shared by every provider's response parser.

Provider payloads are provider-owned and drift over time, so a missing or
renamed field is read as absent. Absent strings become ``""`` (or the title
placeholder) and absent lists become an empty tuple; nothing is ``None``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Tuple

from .errors import ProviderUnavailable
from .models import UNTITLED


def text(value: Any, default: str = "") -> str:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    return default


def title_or_placeholder(value: Any) -> str:
    title = text(value).strip()
    return title or UNTITLED


def nested(record: Dict[str, Any], *keys: str) -> Any:
    """Walk ``record`` through ``keys``, returning ``None`` at the first gap."""

    current: Any = record
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def string_list(values: Any) -> Tuple[str, ...]:
    """Keep the string (or numeric) entries of a provider list, in order."""

    if not isinstance(values, (list, tuple)):
        return ()
    return tuple(
        text(value)
        for value in values
        if isinstance(value, (str, int, float)) and not isinstance(value, bool)
    )


def split_tags(raw: Any) -> Tuple[str, ...]:
    """Split a comma-separated tag string into trimmed segments.

    A missing or blank string means no tags; otherwise every segment is kept,
    including empty ones between adjacent commas.
    """

    if not isinstance(raw, str) or not raw.strip():
        return ()
    return tuple(part.strip() for part in raw.split(","))


def records(payload: Any, key: str, provider: str) -> Iterator[Dict[str, Any]]:
    """Yield the result objects stored under ``key`` in a provider payload.

    Raises :class:`ProviderUnavailable` when the payload is not the expected
    envelope; individual entries that are not objects are skipped.
    """

    if not isinstance(payload, dict):
        raise ProviderUnavailable(f"unexpected payload type {type(payload).__name__}", provider)
    items: Iterable[Any] = payload.get(key)
    if not isinstance(items, list):
        raise ProviderUnavailable(f"payload has no '{key}' list", provider)
    for item in items:
        if isinstance(item, dict):
            yield item
