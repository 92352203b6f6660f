"""Tests for return URL storage."""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import Response

from oauth_gate.models import OAuthConfig
from oauth_gate.storage import (
    RETURN_URL_KEY,
    CookieReturnUrlStore,
    SessionReturnUrlStore,
    create_return_url_store,
)


def build_request(cookies: dict[str, str] | None = None, session: dict | None = None):
    headers = []
    if cookies:
        cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())
        headers.append((b"cookie", cookie_header.encode()))
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": headers,
    }
    if session is not None:
        scope["session"] = session
    return Request(scope)


class TestSessionReturnUrlStore:
    """Tests for SessionReturnUrlStore."""

    def test_store_then_retrieve(self):
        """Retrieving should give back the identical string."""
        store = SessionReturnUrlStore()
        request = build_request(session={})
        url = "https://app.example/done?tab=1"

        store.store(request, Response(), url)

        assert request.session[RETURN_URL_KEY] == url
        assert store.retrieve(request, Response()) == url

    def test_retrieve_clears(self):
        """A stored URL should only be retrievable once."""
        store = SessionReturnUrlStore()
        request = build_request(session={RETURN_URL_KEY: "https://app.example/"})

        assert store.retrieve(request, Response()) == "https://app.example/"
        assert store.retrieve(request, Response()) is None

    def test_retrieve_empty(self):
        """Nothing stored should give None."""
        assert SessionReturnUrlStore().retrieve(build_request(session={}), Response()) is None

    def test_store_overwrites(self):
        """A second store should replace the first URL."""
        store = SessionReturnUrlStore()
        request = build_request(session={})
        store.store(request, Response(), "https://a.example/")
        store.store(request, Response(), "https://b.example/")
        assert store.retrieve(request, Response()) == "https://b.example/"


class TestCookieReturnUrlStore:
    """Tests for CookieReturnUrlStore."""

    def test_store_sets_cookie(self):
        """store should set a 10 minute cookie on path /."""
        store = CookieReturnUrlStore()
        response = Response()

        store.store(build_request(), response, "https://app.example/done")

        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f"{RETURN_URL_KEY}=")
        assert "Max-Age=600" in set_cookie
        assert "Path=/" in set_cookie

    def test_retrieve_reads_cookie_and_deletes(self):
        """retrieve should read the cookie and expire it on the response."""
        store = CookieReturnUrlStore()
        request = build_request(cookies={RETURN_URL_KEY: "https://app.example/done"})
        response = Response()

        assert store.retrieve(request, response) == "https://app.example/done"
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f'{RETURN_URL_KEY}=""')
        assert "Max-Age=0" in set_cookie

    def test_retrieve_missing_cookie(self):
        """No cookie should give None and leave the response untouched."""
        response = Response()
        assert CookieReturnUrlStore().retrieve(build_request(), response) is None
        assert "set-cookie" not in response.headers

    def test_custom_max_age(self):
        """max_age should be configurable."""
        response = Response()
        CookieReturnUrlStore(max_age=30).store(
            build_request(), response, "https://app.example/"
        )
        assert "Max-Age=30" in response.headers["set-cookie"]


class TestCreateReturnUrlStore:
    """Tests for create_return_url_store."""

    def test_default_is_session(self):
        assert isinstance(create_return_url_store(OAuthConfig()), SessionReturnUrlStore)

    def test_cookie(self):
        config = OAuthConfig(return_url_storage="cookie")
        assert isinstance(create_return_url_store(config), CookieReturnUrlStore)

    def test_unknown_backend_rejected_at_load(self):
        """Unknown backends should fail when the config is built."""
        with pytest.raises(ValidationError, match="return_url_storage"):
            OAuthConfig(return_url_storage="database")

    def test_session_store_only_needs_session(self):
        """The session store should only touch request.session."""
        store = SessionReturnUrlStore()
        request = MagicMock(spec=Request)
        request.session = {}
        store.store(request, MagicMock(spec=Response), "https://app.example/")
        assert request.session == {RETURN_URL_KEY: "https://app.example/"}
