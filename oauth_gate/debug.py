"""Debug logging for OAuth Gate.

Enable via OAUTH_GATE_DEBUG=1 environment variable, the `debug` config flag,
or the enable_debug() function.

Every request handled by the middleware gets a short request ID so the log
lines of one login round trip can be correlated.
"""

import contextvars
import logging
import os
import uuid

logger = logging.getLogger("oauth_gate.debug")

# Context variable for request tracking
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)

# Module-level debug state
_debug_enabled = False

# Characters of a credential shown in log output
CREDENTIAL_PREVIEW_CHARS = 6


def is_debug_enabled() -> bool:
    """Check if debug logging is enabled.

    Returns True if either:
    - enable_debug() was called
    - OAUTH_GATE_DEBUG env var is set to "1", "true", or "yes"
    """
    if _debug_enabled:
        return True
    env_val = os.environ.get("OAUTH_GATE_DEBUG", "").lower()
    return env_val in ("1", "true", "yes")


def enable_debug() -> None:
    """Enable debug logging programmatically."""
    global _debug_enabled
    _debug_enabled = True


def disable_debug() -> None:
    """Disable debug logging programmatically."""
    global _debug_enabled
    _debug_enabled = False


def new_request_id() -> contextvars.Token:
    """Start a new request ID for the current context.

    Returns the context token to pass to reset_request_id().
    """
    return _request_id.set(str(uuid.uuid4())[:8])


def reset_request_id(token: contextvars.Token) -> None:
    """Restore the request ID that was active before new_request_id()."""
    _request_id.reset(token)


def get_request_id() -> str:
    """Get the request ID for the current context, or "-" outside a request."""
    return _request_id.get() or "-"


def preview(secret: str | None) -> str:
    """Truncate a credential for logging."""
    if not secret:
        return "None"
    if len(secret) <= CREDENTIAL_PREVIEW_CHARS:
        return "***"
    return f"{secret[:CREDENTIAL_PREVIEW_CHARS]}..."


def log_debug(message: str) -> None:
    """Log a debug message tagged with the current request ID."""
    if is_debug_enabled():
        logger.debug(f"[req={get_request_id()}] {message}")


def configure_debug_logging(level: int = logging.DEBUG) -> None:
    """Configure logging for debug output.

    Sets up the oauth_gate.debug logger with appropriate formatting.
    Call this during application startup if you want debug output.

    Args:
        level: Logging level for the debug logger
    """
    debug_logger = logging.getLogger("oauth_gate.debug")
    debug_logger.setLevel(level)

    if not debug_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        )
        handler.setFormatter(formatter)
        debug_logger.addHandler(handler)
