"""Exceptions raised by OAuth Gate."""


class OAuthGateError(Exception):
    """Base class for all OAuth Gate errors."""


class ConfigError(OAuthGateError):
    """Raised when the configuration is invalid."""


class UnknownProviderType(OAuthGateError):
    """Raised when a provider type is not in the allow-list."""

    def __init__(self, provider_type: str):
        self.provider_type = provider_type
        super().__init__(f"Unknown provider type: {provider_type!r}")


class UnknownProviderConfig(OAuthGateError):
    """Raised when an allowed provider type has no credentials configured."""

    def __init__(self, provider_type: str):
        self.provider_type = provider_type
        super().__init__(f"No configuration for provider: {provider_type!r}")


class InvalidReturnUrl(OAuthGateError):
    """Raised when the return URL is missing or not an absolute URL."""


class TokenExchangeError(OAuthGateError):
    """Raised when an authorization code cannot be turned into a token."""
