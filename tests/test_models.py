from __future__ import annotations

import dataclasses
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from image_gateway.logging_utils import AuditLogger, FanoutSink, MemorySink
from image_gateway.models import ImageResult, ProviderFailure, Source


def test_image_result_serialises_to_wire_shape() -> None:
    record = ImageResult(
        image_id="abc",
        thumbnail_url="https://t",
        preview_url="https://p",
        title="A fox",
        source=Source.UNSPLASH.value,
        tags=("fox", "animal"),
    )

    assert record.to_dict() == {
        "imageId": "abc",
        "thumbnailUrl": "https://t",
        "previewUrl": "https://p",
        "title": "A fox",
        "source": "Unsplash",
        "tags": ["fox", "animal"],
    }


def test_image_result_is_immutable() -> None:
    record = ImageResult("1", "t", "p", "title", Source.PIXABAY.value)

    with pytest.raises(dataclasses.FrozenInstanceError):
        record.source = "Other"  # type: ignore[misc]
    assert record.tags == ()


def test_audit_logger_writes_jsonl_and_logs(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    log_path = tmp_path / "logs" / "failures.jsonl"
    audit = AuditLogger(log_path)
    failure = ProviderFailure(
        provider="Pixabay",
        query="cats",
        error="HTTP 503: Service Unavailable",
        status=503,
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    with caplog.at_level(logging.WARNING, logger="image_gateway.providers"):
        audit.record(failure)
        audit.record(failure)

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert json.loads(lines[0]) == {
        "provider": "Pixabay",
        "query": "cats",
        "error": "HTTP 503: Service Unavailable",
        "status": 503,
        "timestamp": "2024-01-01T00:00:00+00:00",
    }
    assert "Error fetching from Pixabay" in caplog.text


def test_fanout_sink_forwards_to_every_sink() -> None:
    first, second = MemorySink(), MemorySink()
    failure = ProviderFailure(provider="Unsplash", query="q", error="boom")

    FanoutSink(first, second).record(failure)

    assert first.failures == [failure]
    assert second.failures == [failure]
