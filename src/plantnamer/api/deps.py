"""Dependency injection for API handlers."""

from typing import Annotated

from fastapi import Depends, Request

from plantnamer.config import Settings, get_settings
from plantnamer.core.agent import get_model_agent
from plantnamer.core.generator import NameGenerator
from plantnamer.rate_limit import ClientRateLimiter, get_client_id
from plantnamer.utils.errors import RateLimited


def get_settings_dependency(request: Request) -> Settings:
    """Get application settings.

    Prefers the settings the app was created with, so tests can pass their
    own to create_app().
    """
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


def get_request_id(request: Request) -> str | None:
    """Extract request ID from request state.

    The request ID is set by the request ID middleware.
    """
    return getattr(request.state, "request_id", None)


RequestIdDep = Annotated[str | None, Depends(get_request_id)]


def require_api_key(settings: SettingsDep) -> Settings:
    """Fail the request when the OpenAI credential is missing."""
    settings.validate_required()
    return settings


ConfiguredSettingsDep = Annotated[Settings, Depends(require_api_key)]


def get_rate_limiter(request: Request, settings: SettingsDep) -> ClientRateLimiter:
    """Return the app's limiter, creating it on first use."""
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        limiter = ClientRateLimiter(settings.rate_limit)
        request.app.state.rate_limiter = limiter
    return limiter


def enforce_rate_limit(
    request: Request,
    settings: ConfiguredSettingsDep,
    limiter: Annotated[ClientRateLimiter, Depends(get_rate_limiter)],
) -> str:
    """Reject the request if its client is still cooling down.

    Runs after the credential check. Returns the client identifier.
    """
    client_id = get_client_id(request, settings.rate_limit.trust_forwarded_for)
    if not limiter.hit(client_id):
        raise RateLimited(f"client {client_id} inside cooldown window")
    return client_id


ClientIdDep = Annotated[str, Depends(enforce_rate_limit)]


def get_name_generator(settings: ConfiguredSettingsDep) -> NameGenerator:
    """Build the generation pipeline around the shared model agent."""
    return NameGenerator(get_model_agent(settings), settings.generation)


NameGeneratorDep = Annotated[NameGenerator, Depends(get_name_generator)]
