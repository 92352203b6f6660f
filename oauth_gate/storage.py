"""Return URL storage between the initiate and callback legs of a login.

Two backends are available, picked once from configuration:

1. **SessionReturnUrlStore**: keeps the URL in the server-side session.
   Requires Starlette's SessionMiddleware to be installed outside
   OAuthMiddleware.
2. **CookieReturnUrlStore**: keeps the URL in a short-lived cookie.

The stored value is cleared when it is retrieved, so a URL lives for exactly
one initiate/callback round trip.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from starlette.requests import Request
from starlette.responses import Response

from oauth_gate.exceptions import ConfigError
from oauth_gate.models import OAuthConfig, ReturnUrlStorage

RETURN_URL_KEY = "oauth_return_url"
RETURN_URL_COOKIE_MAX_AGE = 10 * 60


class ReturnUrlStore(ABC):
    """Persists a single return URL across the OAuth redirect."""

    @abstractmethod
    def store(self, request: Request, response: Response, url: str) -> None:
        """Remember `url` for the callback leg."""
        ...

    @abstractmethod
    def retrieve(self, request: Request, response: Response) -> str | None:
        """Return the remembered URL and forget it. None if nothing stored."""
        ...


class SessionReturnUrlStore(ReturnUrlStore):
    """Stores the return URL in `request.session`."""

    def store(self, request: Request, response: Response, url: str) -> None:
        request.session[RETURN_URL_KEY] = url

    def retrieve(self, request: Request, response: Response) -> str | None:
        return request.session.pop(RETURN_URL_KEY, None)


class CookieReturnUrlStore(ReturnUrlStore):
    """Stores the return URL in the `oauth_return_url` cookie."""

    def __init__(self, max_age: int = RETURN_URL_COOKIE_MAX_AGE):
        self.max_age = max_age

    def store(self, request: Request, response: Response, url: str) -> None:
        response.set_cookie(RETURN_URL_KEY, url, max_age=self.max_age, path="/")

    def retrieve(self, request: Request, response: Response) -> str | None:
        url = request.cookies.get(RETURN_URL_KEY)
        if url is not None:
            response.delete_cookie(RETURN_URL_KEY, path="/")
        return url


def create_return_url_store(config: OAuthConfig) -> ReturnUrlStore:
    """Build the store selected by `config.return_url_storage`."""
    if config.return_url_storage is ReturnUrlStorage.COOKIE:
        return CookieReturnUrlStore()
    if config.return_url_storage is ReturnUrlStorage.SESSION:
        return SessionReturnUrlStore()
    raise ConfigError(
        f"Unknown return URL storage: {config.return_url_storage!r}"
    )
