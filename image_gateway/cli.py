"""Command line interface for running a one-off federated image search."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from contextlib import suppress
from pathlib import Path
from typing import Iterable, List

from .aggregator import Aggregator
from .config import load_config
from .errors import ConfigurationError, GatewayError
from .http import AsyncHTTPClient, ClientConfig
from .logging_utils import FanoutSink, MemorySink, build_audit_logger
from .models import ImageResult
from .providers import PROVIDERS, create_providers

LOGGER = logging.getLogger("image_gateway.cli")


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("query", type=str, help="Free-text search term.")
    parser.add_argument(
        "--provider",
        action="append",
        choices=sorted(PROVIDERS.keys()),
        default=None,
        help="Restrict the search to this provider (repeatable).",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file with provider credentials.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-provider timeout in seconds (overrides PROVIDER_TIMEOUT_SECONDS).",
    )
    parser.add_argument(
        "--failure-log",
        type=Path,
        default=None,
        help="Append provider failures to this JSONL file.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write results to this file instead of stdout.",
    )
    return parser.parse_args(argv)


def dump_results(results: List[ImageResult]) -> str:
    return json.dumps([result.to_dict() for result in results], ensure_ascii=False, indent=2)


async def run(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        config = load_config(env_file=args.env_file, require_token_secret=False)
    except ConfigurationError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 2
    timeout = args.timeout or config.provider_timeout
    failures = MemorySink()
    sink = FanoutSink(build_audit_logger(args.failure_log or config.failure_log), failures)
    async with AsyncHTTPClient(ClientConfig(timeout=timeout, user_agent=config.user_agent)) as http:
        providers = create_providers(http, config, sink=sink, timeout=timeout)
        if args.provider:
            wanted = set(args.provider)
            providers = [provider for provider in providers if provider.name.lower() in wanted]
        if not providers:
            LOGGER.error("No configured providers to search")
            return 2
        try:
            results = await Aggregator(providers).search(args.query)
        except GatewayError as exc:
            LOGGER.error("Search failed: %s", exc.message)
            return 1
    payload = dump_results(results)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload + "\n", encoding="utf-8")
        LOGGER.info("Wrote %d results to %s", len(results), args.output)
    else:
        sys.stdout.write(payload + "\n")
    LOGGER.info(
        "Completed search with %d results and %d provider failures",
        len(results),
        len(failures.failures),
    )
    return 0 if not failures.failures else 1


def main(argv: Iterable[str] | None = None) -> int:
    with suppress(KeyboardInterrupt):
        return asyncio.run(run(argv))
    return 130


if __name__ == "__main__":
    raise SystemExit(main())
