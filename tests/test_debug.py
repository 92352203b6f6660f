"""Tests for the debug logging module."""

import logging

import pytest

from oauth_gate.debug import (
    configure_debug_logging,
    disable_debug,
    enable_debug,
    get_request_id,
    is_debug_enabled,
    log_debug,
    new_request_id,
    preview,
    reset_request_id,
)


class TestDebugState:
    """Tests for debug enable/disable state."""

    def test_is_debug_enabled_default_false(self, monkeypatch):
        """Debug should be disabled by default."""
        monkeypatch.delenv("OAUTH_GATE_DEBUG", raising=False)
        disable_debug()
        assert is_debug_enabled() is False

    def test_enable_debug_programmatically(self, monkeypatch):
        """enable_debug() should enable debug mode."""
        monkeypatch.delenv("OAUTH_GATE_DEBUG", raising=False)
        disable_debug()
        enable_debug()
        assert is_debug_enabled() is True
        disable_debug()

    @pytest.mark.parametrize("env_value", ["1", "true", "yes", "TRUE", "Yes"])
    def test_debug_enabled_via_env_var(self, monkeypatch, env_value):
        """OAUTH_GATE_DEBUG env var should enable debug mode."""
        disable_debug()
        monkeypatch.setenv("OAUTH_GATE_DEBUG", env_value)
        assert is_debug_enabled() is True

    @pytest.mark.parametrize("env_value", ["0", "false", "no", ""])
    def test_debug_disabled_via_env_var(self, monkeypatch, env_value):
        disable_debug()
        monkeypatch.setenv("OAUTH_GATE_DEBUG", env_value)
        assert is_debug_enabled() is False


class TestRequestId:
    """Tests for request ID tracking."""

    def test_no_request_id_outside_request(self):
        assert get_request_id() == "-"

    def test_new_and_reset(self):
        token = new_request_id()
        request_id = get_request_id()
        assert len(request_id) == 8
        reset_request_id(token)
        assert get_request_id() == "-"


class TestPreview:
    """Tests for credential truncation."""

    def test_none(self):
        assert preview(None) == "None"

    def test_short_secret_hidden(self):
        assert preview("abc") == "***"

    def test_long_secret_truncated(self):
        assert preview("abcdefghijkl") == "abcdef..."


class TestLogDebug:
    """Tests for log_debug and configure_debug_logging."""

    def test_logs_when_enabled(self, caplog):
        enable_debug()
        try:
            with caplog.at_level(logging.DEBUG, logger="oauth_gate.debug"):
                log_debug("hello")
        finally:
            disable_debug()
        assert "[req=-] hello" in caplog.text

    def test_silent_when_disabled(self, caplog, monkeypatch):
        monkeypatch.delenv("OAUTH_GATE_DEBUG", raising=False)
        disable_debug()
        with caplog.at_level(logging.DEBUG, logger="oauth_gate.debug"):
            log_debug("hello")
        assert "hello" not in caplog.text

    def test_configure_debug_logging(self):
        configure_debug_logging(logging.INFO)
        debug_logger = logging.getLogger("oauth_gate.debug")
        assert debug_logger.level == logging.INFO
        assert debug_logger.handlers
        configure_debug_logging(logging.INFO)
        assert len(debug_logger.handlers) == 1
