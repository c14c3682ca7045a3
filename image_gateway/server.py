"""REST adapter exposing registration, login and federated image search."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, Optional, Tuple

from aiohttp import web

from .aggregator import Aggregator
from .auth import TokenAuthority, UserStore, bearer_token
from .config import GatewayConfig, load_config
from .errors import ConfigurationError, GatewayError, InvalidRequest
from .http import AsyncHTTPClient, ClientConfig
from .logging_utils import build_audit_logger
from .providers import create_providers
from .service import SearchService

LOGGER = logging.getLogger("image_gateway.server")

CONFIG_KEY = web.AppKey("config", GatewayConfig)
USERS_KEY = web.AppKey("users", UserStore)
TOKENS_KEY = web.AppKey("tokens", TokenAuthority)
SERVICE_KEY = web.AppKey("service", SearchService)


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except GatewayError as exc:
        if exc.status >= 500:
            LOGGER.error("Request to %s failed: %s", request.path, exc.message)
        return web.json_response({"error": exc.message}, status=exc.status)
    except Exception:  # noqa: BLE001
        LOGGER.exception("Unhandled error serving %s", request.path)
        return web.json_response({"error": "Internal Server Error"}, status=500)


async def _credentials(request: web.Request) -> Tuple[str, str]:
    try:
        body: Any = await request.json()
    except ValueError as exc:
        raise InvalidRequest("Request body must be JSON") from exc
    if not isinstance(body, dict):
        raise InvalidRequest("Request body must be a JSON object")
    username = body.get("username")
    password = body.get("password")
    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        raise InvalidRequest("Username and password are required")
    return username, password


async def register(request: web.Request) -> web.Response:
    username, password = await _credentials(request)
    user = await request.app[USERS_KEY].register(username, password)
    LOGGER.info("Registered user %s", user.username)
    return web.json_response({"id": user.id, "username": user.username}, status=201)


async def login(request: web.Request) -> web.Response:
    username, password = await _credentials(request)
    user = await request.app[USERS_KEY].authenticate(username, password)
    token = request.app[TOKENS_KEY].issue(user.id, username=user.username)
    return web.json_response({"token": token})


async def logout(request: web.Request) -> web.Response:
    # Tokens are stateless; the client discards its copy.
    return web.Response(text="Logged out")


async def search_images(request: web.Request) -> web.Response:
    token = bearer_token(request.headers.get("Authorization"))
    results = await request.app[SERVICE_KEY].perform_search(request.query.get("q"), token)
    return web.json_response([result.to_dict() for result in results])


async def _provider_context(app: web.Application) -> AsyncIterator[None]:
    config = app[CONFIG_KEY]
    http = AsyncHTTPClient(ClientConfig(timeout=config.provider_timeout, user_agent=config.user_agent))
    await http.open()
    providers = create_providers(http, config, sink=build_audit_logger(config.failure_log))
    if not providers:
        LOGGER.warning("No providers are configured; searches will return no results")
    app[SERVICE_KEY] = SearchService(Aggregator(providers), app[TOKENS_KEY])
    try:
        yield
    finally:
        await http.close()


def create_app(
    config: GatewayConfig,
    service: Optional[SearchService] = None,
    users: Optional[UserStore] = None,
    tokens: Optional[TokenAuthority] = None,
) -> web.Application:
    """Build the application; ``service`` replaces the provider-backed one when given."""

    app = web.Application(middlewares=[error_middleware])
    app[CONFIG_KEY] = config
    app[USERS_KEY] = users or UserStore()
    if tokens is None and service is not None:
        tokens = service.tokens
    if tokens is None:
        if not config.token_secret:
            raise ConfigurationError("JWT_SECRET must be set to sign caller tokens")
        tokens = TokenAuthority(config.token_secret, config.token_ttl)
    app[TOKENS_KEY] = tokens
    if service is None:
        app.cleanup_ctx.append(_provider_context)
    else:
        app[SERVICE_KEY] = service
    app.router.add_post("/register", register)
    app.router.add_post("/login", login)
    app.router.add_post("/logout", logout)
    app.router.add_get("/search-images", search_images)
    return app


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Interface to bind.")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (defaults to PORT from the environment).",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file with provider credentials.",
    )
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        config = load_config(env_file=args.env_file)
    except ConfigurationError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 2
    port = args.port or config.port
    LOGGER.info("Image Search API running on http://%s:%d", args.host, port)
    web.run_app(create_app(config), host=args.host, port=port, print=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
