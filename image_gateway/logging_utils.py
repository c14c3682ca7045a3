"""Failure sinks that record provider errors for later diagnosis."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol

from .models import ProviderFailure

LOGGER = logging.getLogger("image_gateway.providers")


class FailureSink(Protocol):
    def record(self, failure: ProviderFailure) -> None:
        ...


class AuditLogger:
    """Logs provider failures and optionally appends them to a JSONL file."""

    def __init__(self, jsonl_path: Optional[Path] = None, logger: Optional[logging.Logger] = None) -> None:
        self._jsonl_path = jsonl_path
        self._logger = logger or LOGGER
        if self._jsonl_path is not None:
            self._jsonl_path.parent.mkdir(parents=True, exist_ok=True)

    def record(self, failure: ProviderFailure) -> None:
        payload = failure.to_dict()
        self._logger.warning(
            "Error fetching from %s: %s",
            failure.provider,
            failure.error,
            extra={"provider": failure.provider, "upstream_status": failure.status},
        )
        if self._jsonl_path is None:
            return
        with self._jsonl_path.open("a", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False)
            handle.write("\n")


class MemorySink:
    """Collects failures in memory; used by the CLI summary and in tests."""

    def __init__(self) -> None:
        self.failures: list[ProviderFailure] = []

    def record(self, failure: ProviderFailure) -> None:
        self.failures.append(failure)


class FanoutSink:
    def __init__(self, *sinks: FailureSink) -> None:
        self._sinks = sinks

    def record(self, failure: ProviderFailure) -> None:
        for sink in self._sinks:
            sink.record(failure)


def build_audit_logger(log_path: Optional[Path]) -> AuditLogger:
    return AuditLogger(log_path)
