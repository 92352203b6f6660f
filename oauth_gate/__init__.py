"""OAuth Gate - third-party OAuth2 login middleware for Starlette apps."""

from oauth_gate.auth import OAuthMiddleware, parse_authorization
from oauth_gate.exceptions import (
    InvalidReturnUrl,
    OAuthGateError,
    TokenExchangeError,
    UnknownProviderConfig,
    UnknownProviderType,
)
from oauth_gate.providers import OAuthFactory

__all__ = [
    "InvalidReturnUrl",
    "OAuthFactory",
    "OAuthGateError",
    "OAuthMiddleware",
    "TokenExchangeError",
    "UnknownProviderConfig",
    "UnknownProviderType",
    "parse_authorization",
]
