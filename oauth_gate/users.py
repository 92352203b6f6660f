"""User resolution for OAuth Gate.

The middleware does not own user storage. It talks to a UserService, and
only ever reads the `token` attribute of the users it gets back.
InMemoryUserService is a reference implementation for development and tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from oauth_gate.providers import OAuthClient


class User(Protocol):
    """Anything with a (possibly empty) token."""

    token: str | None


class UserService(Protocol):
    """Protocol for looking up and creating users."""

    async def find_or_new(self, credential: str | None) -> User:
        """Find the user owning `credential`, or return a new anonymous user."""
        ...

    async def create_user(self, client: OAuthClient, token: str) -> User:
        """Create (or update) the user who just logged in with `client`."""
        ...


@dataclass
class SimpleUser:
    """Minimal user record."""

    token: str | None = None
    provider: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def display_name(self) -> str:
        return self.provider or "anonymous"


class InMemoryUserService:
    """Keeps users in a dict keyed by token."""

    def __init__(self):
        self.users: dict[str, SimpleUser] = {}

    async def find_or_new(self, credential: str | None) -> SimpleUser:
        if credential and credential in self.users:
            return self.users[credential]
        return SimpleUser()

    async def create_user(self, client: OAuthClient, token: str) -> SimpleUser:
        user = self.users.get(token)
        if user is None:
            user = SimpleUser(token=token, provider=client.provider_type)
            self.users[token] = user
        return user
