"""Pytest fixtures for oauth_gate tests."""

import pytest
import yaml

from oauth_gate.models import OAuthConfig


class FakeOAuthClient:
    """OAuth client that never touches the network."""

    def __init__(self, provider_type: str, callback_url: str, token: str = "T123"):
        self.provider_type = provider_type
        self.callback_url = callback_url
        self.token = token
        self.codes: list[str] = []

    def get_authorization_uri(self) -> str:
        return f"https://{self.provider_type}.example/authorize?client_id=abc"

    async def request_access_token(self, code: str) -> str:
        self.codes.append(code)
        return self.token


@pytest.fixture
def fake_builder():
    """Service builder for OAuthFactory that records the clients it creates."""
    created: list[FakeOAuthClient] = []

    def build(provider_type, provider, callback_url):
        client = FakeOAuthClient(provider_type, callback_url)
        created.append(client)
        return client

    build.created = created
    return build


@pytest.fixture
def config_data():
    """Raw configuration with a single allowed GitHub provider."""
    return {
        "providers": {
            "github": {"key": "gh-key", "secret": "gh-secret", "scopes": ["user:email"]},
        },
        "allowed_providers": ["github"],
    }


@pytest.fixture
def config(config_data):
    return OAuthConfig(**config_data)


@pytest.fixture
def sample_config_yaml(tmp_path, config_data):
    """Write the sample configuration to a YAML file."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.dump(config_data))
    return config_file
