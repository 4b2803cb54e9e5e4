"""FastAPI app factory, lifespan and route registration."""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from underplayed import __version__
from underplayed.config import Settings, get_logger
from underplayed.infrastructure.api import routes
from underplayed.infrastructure.factories import AppContext, create_app_context

logger = get_logger(__name__)

ContextFactory = Callable[[Settings], Awaitable[AppContext]]


def create_app(
    settings: Settings,
    context_factory: ContextFactory = create_app_context,
) -> FastAPI:
    """Create the HTTP app; services are built on startup and closed on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.context = await context_factory(settings)
        logger.info("Underplayed API ready")
        try:
            yield
        finally:
            await app.state.context.aclose()
            logger.info("Underplayed API stopped")

    app = FastAPI(
        title="Underplayed API",
        description="Builds a play-count weighted shuffle of your Spotify liked songs",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(routes.router, tags=["jobs"])
    return app
