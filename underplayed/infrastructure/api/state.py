"""Shared application state (injected into routes)."""

from fastapi import HTTPException, Request

from underplayed.infrastructure.factories import AppContext


def get_context(request: Request) -> AppContext:
    """Return the app context created by the lifespan handler."""
    context: AppContext | None = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Service is starting up.")
    return context
