"""Configuration models for OAuth Gate."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class ReturnUrlStorage(str, Enum):
    """Where the return URL is kept between the initiate and callback legs."""

    SESSION = "session"
    COOKIE = "cookie"


class ProviderConfig(BaseModel):
    """Credentials for a single OAuth provider.

    `authorize_url` and `token_url` override the built-in endpoints, and are
    required for provider types that have no built-in endpoints.
    """

    key: str
    secret: str
    scopes: list[str] = []
    authorize_url: str | None = None
    token_url: str | None = None


class OAuthConfig(BaseModel):
    """Root configuration for OAuth Gate."""

    model_config = ConfigDict(extra="forbid")

    providers: dict[str, ProviderConfig] = {}
    allowed_providers: list[str] = ["github"]
    return_url_storage: ReturnUrlStorage = ReturnUrlStorage.SESSION
    token_cookie: str | None = None
    token_urlparam: str | None = None
    session_secret: str | None = None
    debug: bool = False

    @field_validator("providers")
    @classmethod
    def _lowercase_provider_names(
        cls, value: dict[str, ProviderConfig]
    ) -> dict[str, ProviderConfig]:
        return {name.lower(): provider for name, provider in value.items()}

    @model_validator(mode="after")
    def _single_token_delivery(self) -> "OAuthConfig":
        if self.token_cookie and self.token_urlparam:
            raise ValueError(
                "token_cookie and token_urlparam are mutually exclusive"
            )
        return self

    def get_provider(self, provider_type: str) -> ProviderConfig | None:
        """Look up provider credentials, ignoring case."""
        return self.providers.get(provider_type.lower())
