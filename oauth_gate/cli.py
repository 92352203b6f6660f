"""CLI commands for oauth-gate."""

from pathlib import Path

import click
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from oauth_gate.auth import OAuthMiddleware
from oauth_gate.config import load_config, validate_config
from oauth_gate.debug import configure_debug_logging, enable_debug
from oauth_gate.exceptions import OAuthGateError
from oauth_gate.models import OAuthConfig
from oauth_gate.providers import PROVIDER_ENDPOINTS, OAuthFactory
from oauth_gate.users import InMemoryUserService

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "oauth-gate"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"


def get_config_path(config: str | None) -> Path:
    """Get config file path, falling back to the default location."""
    if config:
        return Path(config)
    return DEFAULT_CONFIG_FILE


def load_or_exit(config: str | None) -> OAuthConfig:
    """Load the config, printing the error and exiting 1 on failure."""
    try:
        return load_config(get_config_path(config))
    except (FileNotFoundError, ValidationError, OAuthGateError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


def config_option():
    """Decorator for --config option."""
    return click.option(
        "--config", "-c",
        default=None,
        type=click.Path(exists=False),
        help=f"Config file path (default: {DEFAULT_CONFIG_FILE})"
    )


def create_demo_app(config: OAuthConfig) -> SessionMiddleware:
    """Build a small Starlette app protected by OAuthMiddleware.

    GET / reports the user attached to the request.
    """

    async def whoami(request: Request) -> JSONResponse:
        user = request.user
        return JSONResponse(
            {
                "authenticated": bool(user.token),
                "provider": getattr(user, "provider", None),
            }
        )

    async def done(request: Request) -> JSONResponse:
        return JSONResponse({"status": "logged in"})

    app = Starlette(routes=[Route("/", whoami), Route("/done", done)])
    gated = OAuthMiddleware(app, OAuthFactory(config), InMemoryUserService())
    return SessionMiddleware(gated, secret_key=config.session_secret or "change-me")


@click.group()
def main():
    """OAuth Gate CLI."""
    pass


@main.command()
@config_option()
def validate(config: str | None):
    """Validate the configuration file."""
    cfg = load_or_exit(config)
    errors = validate_config(cfg)
    if errors:
        for error in errors:
            click.echo(f"  {error}", err=True)
        raise SystemExit(1)
    click.echo("Configuration is valid")


@main.command()
@config_option()
def providers(config: str | None):
    """List configured providers and whether they are allowed."""
    cfg = load_or_exit(config)
    for name, provider in cfg.providers.items():
        allowed = "allowed" if name in cfg.allowed_providers else "not allowed"
        builtin = "built-in" if name in PROVIDER_ENDPOINTS else "custom"
        scopes = ",".join(provider.scopes) or "-"
        click.echo(f"{name}\t{allowed}\t{builtin}\tscopes={scopes}")


@main.command()
@config_option()
@click.option("--host", "-h", default="127.0.0.1", help="Host to bind")
@click.option("--port", "-p", default=8000, type=int, help="Port to bind")
@click.option("--env-file", "-e", default=".env", type=click.Path(), help="Path to .env file (default: .env)")
def serve(config: str | None, host: str, port: int, env_file: str):  # pragma: no cover
    """Serve a demo app behind the OAuth middleware."""
    import uvicorn
    from dotenv import load_dotenv

    # Load environment variables from .env file
    load_dotenv(env_file)

    cfg = load_or_exit(config)
    if cfg.debug:
        enable_debug()
        configure_debug_logging()

    uvicorn.run(create_demo_app(cfg), host=host, port=port)
