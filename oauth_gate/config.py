"""Configuration loading for OAuth Gate."""

import os
import re
from pathlib import Path

import yaml

from oauth_gate.models import OAuthConfig


def _substitute_env_vars(obj):
    """Recursively substitute ${VAR} with environment variables."""
    if isinstance(obj, str):
        pattern = r"\$\{([^}]+)\}"
        return re.sub(pattern, lambda m: os.environ.get(m.group(1), m.group(0)), obj)
    elif isinstance(obj, dict):
        return {k: _substitute_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_substitute_env_vars(item) for item in obj]
    return obj


def load_config(path: str | Path) -> OAuthConfig:
    """Load configuration from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    data = _substitute_env_vars(data)
    return OAuthConfig(**data)


def validate_config(config: OAuthConfig) -> list[str]:
    """Validate configuration and return list of errors."""
    from oauth_gate.providers import PROVIDER_ENDPOINTS

    errors = []

    for provider_type in config.allowed_providers:
        provider = config.get_provider(provider_type)
        if provider is None:
            errors.append(
                f"Allowed provider '{provider_type}' has no credentials configured"
            )
            continue

        # Unknown providers must bring their own endpoints
        if provider_type.lower() not in PROVIDER_ENDPOINTS and not (
            provider.authorize_url and provider.token_url
        ):
            errors.append(
                f"Provider '{provider_type}' needs authorize_url and token_url"
            )

    for name, value in (
        ("token_cookie", config.token_cookie),
        ("token_urlparam", config.token_urlparam),
    ):
        if value is not None and not re.fullmatch(r"[\w.-]+", value):
            errors.append(f"{name} '{value}' is not a valid name")

    return errors
