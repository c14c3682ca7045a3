"""Process-wide gateway configuration loaded once from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_PORT = 3000
DEFAULT_PROVIDER_TIMEOUT = 8.0
DEFAULT_TOKEN_TTL = 3600
DEFAULT_USER_AGENT = "ImageGateway/0.1"


@dataclass(frozen=True)
class GatewayConfig:
    """Credentials and tunables shared read-only by every component."""

    token_secret: Optional[str] = field(default=None, repr=False)
    unsplash_key: Optional[str] = field(default=None, repr=False)
    pixabay_key: Optional[str] = field(default=None, repr=False)
    storyblocks_public_key: Optional[str] = field(default=None, repr=False)
    storyblocks_private_key: Optional[str] = field(default=None, repr=False)
    storyblocks_project_id: Optional[str] = None
    port: int = DEFAULT_PORT
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    token_ttl: int = DEFAULT_TOKEN_TTL
    user_agent: str = DEFAULT_USER_AGENT
    failure_log: Optional[Path] = None


def _optional(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key, "").strip()
    return value or None


def _number(env: Mapping[str, str], key: str, default, cast):
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {raw!r}")
    return value


def load_config(
    env: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
    require_token_secret: bool = True,
) -> GatewayConfig:
    """Build a :class:`GatewayConfig` from ``env`` (defaults to ``os.environ``).

    When reading the process environment, variables from ``env_file`` (or a
    ``.env`` in the working directory) are loaded first without overriding
    values that are already set. ``JWT_SECRET`` is only mandatory when
    ``require_token_secret`` is true; the search CLI never issues tokens.
    """

    if env is None:
        load_dotenv(env_file)
        env = os.environ
    secret = _optional(env, "JWT_SECRET")
    if require_token_secret and not secret:
        raise ConfigurationError("JWT_SECRET must be set to sign caller tokens")
    failure_log = _optional(env, "PROVIDER_FAILURE_LOG")
    return GatewayConfig(
        token_secret=secret,
        unsplash_key=_optional(env, "UNSPLASH_KEY"),
        pixabay_key=_optional(env, "PIXABAY_KEY"),
        storyblocks_public_key=_optional(env, "STORYBLOCKS_PUBLIC_KEY"),
        storyblocks_private_key=_optional(env, "STORYBLOCKS_PRIVATE_KEY"),
        storyblocks_project_id=_optional(env, "STORYBLOCKS_PROJECT_ID"),
        port=_number(env, "PORT", DEFAULT_PORT, int),
        provider_timeout=_number(env, "PROVIDER_TIMEOUT_SECONDS", DEFAULT_PROVIDER_TIMEOUT, float),
        token_ttl=_number(env, "TOKEN_TTL_SECONDS", DEFAULT_TOKEN_TTL, int),
        user_agent=_optional(env, "USER_AGENT") or DEFAULT_USER_AGENT,
        failure_log=Path(failure_log) if failure_log else None,
    )
