"""Classification of request paths into OAuth initiate/callback routes."""

import re
from dataclasses import dataclass
from enum import Enum

AUTH_ROUTE = re.compile(r"^/auth/(?P<provider_type>\w+)$", re.ASCII)
CALLBACK_ROUTE = re.compile(r"^/auth/(?P<provider_type>\w+)/callback$", re.ASCII)


class RouteKind(str, Enum):
    """What the middleware should do with a request."""

    INITIATE = "initiate"
    CALLBACK = "callback"
    PASS_THROUGH = "pass_through"


@dataclass(frozen=True)
class RouteMatch:
    """Result of matching a path against the OAuth routes."""

    kind: RouteKind
    provider_type: str | None = None

    @property
    def is_oauth_route(self) -> bool:
        return self.kind is not RouteKind.PASS_THROUGH


PASS_THROUGH = RouteMatch(RouteKind.PASS_THROUGH)


def match_route(path: object) -> RouteMatch:
    """Match a URL path against the auth and callback routes.

    `\\w` never matches "/", so a callback path can not be mistaken for an
    initiate path. Anything else, including a missing or non-string path,
    is a pass-through. Provider types are ASCII word characters only.
    """
    if not isinstance(path, str):
        return PASS_THROUGH

    match = AUTH_ROUTE.fullmatch(path)
    if match:
        return RouteMatch(RouteKind.INITIATE, match.group("provider_type"))

    match = CALLBACK_ROUTE.fullmatch(path)
    if match:
        return RouteMatch(RouteKind.CALLBACK, match.group("provider_type"))

    return PASS_THROUGH
