"""OAuth login middleware for Starlette applications.

OAuthMiddleware intercepts two routes and passes everything else through:

1. **/auth/{provider}**: validates the `return` query parameter, remembers it,
   and redirects (302) to the provider's authorization page.
2. **/auth/{provider}/callback**: exchanges the `code` for a token, creates the
   user, and points the client back at the remembered return URL with the
   token attached (cookie, URL parameter, and always the Authorization header).

Every other request gets the user resolved from its Authorization header
attached as `request.user` / `request.state.user` before it reaches the app.

Usage:
    config = load_config("oauth.yaml")
    app = OAuthMiddleware(app, OAuthFactory(config), InMemoryUserService())
    app = SessionMiddleware(app, secret_key="...")
"""

from __future__ import annotations

import urllib.parse
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from oauth_gate.debug import (
    enable_debug,
    log_debug,
    new_request_id,
    preview,
    reset_request_id,
)
from oauth_gate.exceptions import (
    InvalidReturnUrl,
    TokenExchangeError,
    UnknownProviderConfig,
    UnknownProviderType,
)
from oauth_gate.routing import RouteKind, match_route
from oauth_gate.storage import ReturnUrlStore, create_return_url_store

if TYPE_CHECKING:
    from starlette.types import ASGIApp

    from oauth_gate.providers import OAuthClient, OAuthFactory
    from oauth_gate.users import UserService

AUTH_SCHEMES = ("bearer", "token")
TOKEN_COOKIE_MAX_AGE = 60 * 60


def parse_authorization(auth_headers: list[str]) -> str | None:
    """Extract the credential from Authorization header values.

    The first value of the form "Bearer <credential>" or "token <credential>"
    (scheme case-insensitive) wins. Anything else is skipped.
    """
    for auth_header in auth_headers:
        parts = auth_header.split(" ")
        if len(parts) == 2 and parts[0].lower() in AUTH_SCHEMES:
            return parts[1]
    return None


def is_absolute_url(url: str | None) -> bool:
    """True if `url` has both a scheme and a host."""
    if not url or any(c.isspace() for c in url):
        return False
    try:
        parsed = urllib.parse.urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def append_query_param(url: str, name: str, value: str) -> str:
    """Append `name=value` to `url`, choosing "?" or "&"."""
    separator = "&" if "?" in url else "?"
    return url + separator + f"{name}={value}"


class OAuthMiddleware(BaseHTTPMiddleware):
    """Middleware that runs the OAuth login flow and attaches users to requests."""

    def __init__(
        self,
        app: ASGIApp,
        factory: OAuthFactory,
        user_service: UserService,
        allowed_providers: list[str] | None = None,
        store: ReturnUrlStore | None = None,
    ):
        super().__init__(app)
        self.factory = factory
        self.user_service = user_service
        self.config = factory.get_config()
        self.allowed_providers = (
            allowed_providers
            if allowed_providers is not None
            else list(self.config.allowed_providers)
        )
        self.store = store or create_return_url_store(self.config)
        if self.config.debug:
            enable_debug()

    async def dispatch(self, request: Request, call_next):
        """Route OAuth paths, attach the current user to everything else."""
        request_id = new_request_id()
        try:
            route = match_route(request.url.path)

            if route.kind is RouteKind.INITIATE:
                return self._initiate(request, route.provider_type)
            if route.kind is RouteKind.CALLBACK:
                return await self._callback(request, route.provider_type)

            return await self._forward(request, call_next)
        finally:
            reset_request_id(request_id)

    def _check_allowed(self, provider_type: str) -> None:
        if provider_type not in self.allowed_providers:
            log_debug(f"[AUTH] Rejecting provider '{provider_type}'")
            raise UnknownProviderType(provider_type)

    def _get_client(self, provider_type: str, request: Request) -> OAuthClient:
        client = self.factory.get_or_create_by_type(provider_type, request)
        if client is None:
            raise UnknownProviderConfig(provider_type)
        return client

    def _initiate(self, request: Request, provider_type: str) -> Response:
        """Redirect to the provider after remembering where to come back to."""
        self._check_allowed(provider_type)

        return_url = request.query_params.get("return")
        if not is_absolute_url(return_url):
            raise InvalidReturnUrl(f"Invalid return url: {return_url!r}")

        client = self._get_client(provider_type, request)
        url = client.get_authorization_uri()

        log_debug(f"[AUTH] Initiating {provider_type} login, return={return_url}")

        response = RedirectResponse(url=url, status_code=302)
        self.store.store(request, response, return_url)
        return response

    async def _callback(self, request: Request, provider_type: str) -> Response:
        """Turn the provider's code into a user and send the client home."""
        self._check_allowed(provider_type)

        client = self._get_client(provider_type, request)
        code = await self._get_code(request)
        token = await client.request_access_token(code)
        user = await self.user_service.create_user(client, token)
        user_token = user.token or token

        response = Response(status_code=200)
        return_url = self.store.retrieve(request, response)
        if not return_url:
            raise InvalidReturnUrl("No return url stored for this login")

        if self.config.token_cookie:
            response.set_cookie(
                self.config.token_cookie,
                user_token,
                max_age=TOKEN_COOKIE_MAX_AGE,
                path="/",
            )
        elif self.config.token_urlparam:
            return_url = append_query_param(
                return_url, self.config.token_urlparam, user_token
            )

        log_debug(
            f"[AUTH] {provider_type} login complete, token={preview(user_token)}"
        )

        response.headers["Authorization"] = f"token {user_token}"
        response.headers["Location"] = return_url
        return response

    async def _get_code(self, request: Request) -> str:
        code = request.query_params.get("code")
        if not code and request.method == "POST":
            form = await request.form()
            value = form.get("code")
            code = value if isinstance(value, str) else None
        if not code:
            raise TokenExchangeError("Missing authorization code")
        return code

    async def _forward(self, request: Request, call_next) -> Response:
        """Resolve the acting user and pass the request on."""
        credential = parse_authorization(request.headers.getlist("authorization"))
        user = await self.user_service.find_or_new(credential)

        log_debug(f"[AUTH] {request.url.path} credential={preview(credential)}")

        request.scope["user"] = user
        request.state.user = user

        response = await call_next(request)
        if user.token:
            response.headers["Authorization"] = f"token {user.token}"
        return response
