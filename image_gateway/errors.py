"""Exception hierarchy shared by the gateway core and its adapters."""

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base gateway exception; ``status`` is the HTTP status adapters report."""

    status = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(GatewayError):
    """Required configuration is missing or malformed."""


class ProviderUnavailable(GatewayError):
    """A single provider failed; never propagated past the provider client."""

    def __init__(self, message: str, provider: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.upstream_status = status


class InvalidRequest(GatewayError):
    """The caller supplied no usable query."""

    status = 400


class Unauthorized(GatewayError):
    """The caller presented no token."""

    status = 401


class Forbidden(GatewayError):
    """The caller's token is malformed or carries a bad signature."""

    status = 403


class TokenExpired(Forbidden):
    """The caller's token was valid once but its expiry has passed."""


class InvalidCredentials(GatewayError):
    """Login with an unknown username or a wrong password."""

    status = 401


class UserExists(GatewayError):
    """Registration with a username that is already taken."""

    status = 409


class AggregatorInternal(GatewayError):
    """Unexpected failure inside the fan-out itself."""

    status = 500
