"""OAuth provider clients and the factory that builds them.

The factory turns a provider type ("github", "google", ...) into a configured
client bound to this app's credentials and callback URL. Clients implement
the small OAuthClient protocol, so tests and applications can substitute
their own.
"""

from __future__ import annotations

import urllib.parse
from dataclasses import dataclass, field
from typing import Callable, Protocol

import httpx
from starlette.requests import Request

from oauth_gate.debug import log_debug, preview
from oauth_gate.exceptions import TokenExchangeError
from oauth_gate.models import OAuthConfig, ProviderConfig

# =============================================================================
# Protocol / Interface
# =============================================================================


class OAuthClient(Protocol):
    """Protocol for provider-specific OAuth clients."""

    provider_type: str

    def get_authorization_uri(self) -> str:
        """URL of the provider's consent page."""
        ...

    async def request_access_token(self, code: str) -> str:
        """Exchange an authorization code for an access token."""
        ...


@dataclass(frozen=True)
class ProviderEndpoints:
    """Authorization and token endpoints of an OAuth2 provider."""

    authorize_url: str
    token_url: str
    scope_separator: str = " "


PROVIDER_ENDPOINTS: dict[str, ProviderEndpoints] = {
    "github": ProviderEndpoints(
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
    ),
    "google": ProviderEndpoints(
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
    ),
    "gitlab": ProviderEndpoints(
        authorize_url="https://gitlab.com/oauth/authorize",
        token_url="https://gitlab.com/oauth/token",
    ),
    "bitbucket": ProviderEndpoints(
        authorize_url="https://bitbucket.org/site/oauth2/authorize",
        token_url="https://bitbucket.org/site/oauth2/access_token",
    ),
    "facebook": ProviderEndpoints(
        authorize_url="https://www.facebook.com/dialog/oauth",
        token_url="https://graph.facebook.com/oauth/access_token",
        scope_separator=",",
    ),
}


# =============================================================================
# Authorization Code client
# =============================================================================


@dataclass
class OAuth2Service:
    """OAuth2 authorization code client for a single provider.

    Usage:
        service = OAuth2Service(
            provider_type="github",
            client_id="my-client",
            client_secret="my-secret",
            callback_url="https://app.example.com/auth/github/callback",
            endpoints=PROVIDER_ENDPOINTS["github"],
        )
        url = service.get_authorization_uri()
        token = await service.request_access_token(code)
    """

    provider_type: str
    client_id: str
    client_secret: str
    callback_url: str
    endpoints: ProviderEndpoints
    scopes: list[str] = field(default_factory=list)
    timeout: float = 10.0

    def get_authorization_uri(self) -> str:
        """Build the provider authorization URL for the code flow."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
        }
        if self.scopes:
            params["scope"] = self.endpoints.scope_separator.join(self.scopes)

        base = self.endpoints.authorize_url
        separator = "&" if "?" in base else "?"
        return base + separator + urllib.parse.urlencode(params)

    async def request_access_token(self, code: str) -> str:
        """Exchange an authorization code for an access token.

        httpx errors (network, non-2xx status) propagate unchanged. A 2xx
        response without an access token raises TokenExchangeError, since
        some providers (GitHub) report errors with a 200 status.
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.callback_url,
        }

        log_debug(f"[TOKEN] Exchanging code={preview(code)} with {self.provider_type}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.endpoints.token_url,
                data=data,
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            token_data = response.json()

        access_token = token_data.get("access_token")
        if not access_token:
            reason = (
                token_data.get("error_description")
                or token_data.get("error")
                or "no access_token in response"
            )
            raise TokenExchangeError(
                f"Token exchange with {self.provider_type} failed: {reason}"
            )

        log_debug(f"[TOKEN] Received token={preview(access_token)}")
        return access_token


ServiceBuilder = Callable[[str, ProviderConfig, str], "OAuthClient | None"]


def build_oauth2_service(
    provider_type: str, provider: ProviderConfig, callback_url: str
) -> OAuth2Service | None:
    """Default service builder. Returns None when no endpoints are known."""
    endpoints = PROVIDER_ENDPOINTS.get(provider_type)
    if provider.authorize_url and provider.token_url:
        endpoints = ProviderEndpoints(
            authorize_url=provider.authorize_url,
            token_url=provider.token_url,
            scope_separator=endpoints.scope_separator if endpoints else " ",
        )
    if endpoints is None:
        return None

    return OAuth2Service(
        provider_type=provider_type,
        client_id=provider.key,
        client_secret=provider.secret,
        callback_url=callback_url,
        endpoints=endpoints,
        scopes=list(provider.scopes),
    )


# =============================================================================
# Factory
# =============================================================================


def callback_url_for(request: Request) -> str:
    """Derive the callback URL from the current request URL.

    The query string is stripped and "/callback" appended, unless the request
    is already on the callback route.
    """
    url = str(request.url.replace(query="", fragment="")).rstrip("/")
    if url.endswith("/callback"):
        return url
    return url + "/callback"


class OAuthFactory:
    """Creates and caches OAuth clients per provider type.

    Clients are cached in a mapping keyed by the lowercased provider type, so
    one factory can serve several providers.
    """

    def __init__(
        self,
        config: OAuthConfig,
        service_builder: ServiceBuilder = build_oauth2_service,
    ):
        self._config = config
        self._service_builder = service_builder
        self._services: dict[str, OAuthClient] = {}

    def create_service(self, provider_type: str, request: Request) -> OAuthClient | None:
        """Create an OAuth client for `provider_type`.

        Returns None when the provider type has no configuration, or when no
        endpoints are known for it. Callers must check for None.
        """
        type_lower = provider_type.lower()
        provider = self._config.get_provider(type_lower)
        if provider is None:
            log_debug(f"[FACTORY] No configuration for provider '{provider_type}'")
            return None

        callback_url = callback_url_for(request)
        service = self._service_builder(type_lower, provider, callback_url)
        if service is None:
            log_debug(f"[FACTORY] No endpoints known for provider '{provider_type}'")
            return None

        log_debug(f"[FACTORY] Created {type_lower} client, callback={callback_url}")
        self._services[type_lower] = service
        return service

    def get_or_create_by_type(
        self, provider_type: str, request: Request
    ) -> OAuthClient | None:
        """Return the cached client for `provider_type`, creating it if needed."""
        service = self._services.get(provider_type.lower())
        if service is None:
            service = self.create_service(provider_type, request)
        return service

    def get_service(self, provider_type: str) -> OAuthClient | None:
        """Return the cached client for `provider_type`, if any."""
        return self._services.get(provider_type.lower())

    def get_config(self) -> OAuthConfig:
        """Return the configuration this factory was built with."""
        return self._config
