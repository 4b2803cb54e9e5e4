"""Construction of the application's object graph from settings.

Components built here receive plain values rather than reading ``Settings``
themselves, so tests can build them with any configuration.
"""

import functools
import random

from attrs import define
from sqlalchemy.ext.asyncio import AsyncEngine

from underplayed.application.services import (
    JobStatusRepository,
    LikedCatalogFetcher,
    ListenCountFetcher,
    PlaylistPublisher,
)
from underplayed.application.use_cases import GeneratePlaylistUseCase
from underplayed.config import Settings, get_logger
from underplayed.domain.repositories import (
    KeyValueStoreProtocol,
    LikedTrackSourceProtocol,
    ListenCountSourceProtocol,
    PlaylistServiceProtocol,
)
from underplayed.infrastructure.connectors import LastFMConnector, SpotifyConnector
from underplayed.infrastructure.jobs import JobRunner, UseCaseFactory
from underplayed.infrastructure.persistence import (
    InMemoryKeyValueStore,
    SQLAlchemyKeyValueStore,
)
from underplayed.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
    init_db,
)

logger = get_logger(__name__)


def create_spotify_connector(settings: Settings) -> SpotifyConnector:
    credentials = settings.credentials
    return SpotifyConnector(
        client_id=credentials.spotify_client_id,
        client_secret=credentials.spotify_client_secret,
        redirect_uri=credentials.spotify_redirect_uri,
        cache_path=credentials.spotify_cache_path,
    )


def create_lastfm_connector(settings: Settings) -> LastFMConnector:
    credentials = settings.credentials
    return LastFMConnector(
        api_key=credentials.lastfm_key,
        api_secret=credentials.lastfm_secret,
        lastfm_username=credentials.lastfm_username,
    )


def create_generate_playlist_use_case(
    settings: Settings,
    status_repository: JobStatusRepository,
    *,
    liked_source: LikedTrackSourceProtocol | None = None,
    listen_source: ListenCountSourceProtocol | None = None,
    playlist_service: PlaylistServiceProtocol | None = None,
    rng: random.Random | None = None,
) -> GeneratePlaylistUseCase:
    """Wire a use case, defaulting to the real Spotify and Last.fm connectors."""
    if liked_source is None or playlist_service is None:
        spotify = create_spotify_connector(settings)
        liked_source = liked_source or spotify
        playlist_service = playlist_service or spotify
    if listen_source is None:
        listen_source = create_lastfm_connector(settings)

    api = settings.api
    jobs = settings.jobs
    return GeneratePlaylistUseCase(
        catalog_fetcher=LikedCatalogFetcher(
            source=liked_source, page_size=api.spotify_liked_page_size
        ),
        listen_count_fetcher=ListenCountFetcher(
            source=listen_source,
            page_size=api.lastfm_page_size,
            request_delay=api.lastfm_request_delay,
            max_pages=api.lastfm_max_pages,
        ),
        publisher=PlaylistPublisher(
            service=playlist_service,
            batch_size=api.spotify_playlist_batch_size,
            max_requests=api.spotify_max_add_requests,
            public=jobs.playlist_public,
        ),
        status_repository=status_repository,
        playlist_name_prefix=jobs.playlist_name_prefix,
        playlist_description=jobs.playlist_description,
        rng=rng,
    )


@define(slots=True)
class AppContext:
    """Long-lived services shared by the HTTP app and the CLI."""

    settings: Settings
    store: KeyValueStoreProtocol
    status_repository: JobStatusRepository
    runner: JobRunner
    engine: AsyncEngine | None = None

    async def aclose(self) -> None:
        """Wait for running jobs, then release the database engine."""
        await self.runner.drain(self.settings.jobs.shutdown_grace_seconds)
        if self.engine is not None:
            await self.engine.dispose()


async def create_status_store(
    settings: Settings,
) -> tuple[KeyValueStoreProtocol, AsyncEngine | None]:
    """Create the configured key-value store, initializing its schema."""
    if settings.database.is_memory:
        logger.info("Using in-memory status store; job status is lost on restart")
        return InMemoryKeyValueStore(), None

    engine = create_db_engine(settings.database.url, echo=settings.database.echo)
    await init_db(engine)
    return SQLAlchemyKeyValueStore(session_factory=create_session_factory(engine)), engine


async def create_app_context(
    settings: Settings,
    use_case_factory: UseCaseFactory | None = None,
    store: KeyValueStoreProtocol | None = None,
) -> AppContext:
    """Build the store, status repository and job runner.

    Args:
        settings: Application settings
        use_case_factory: Builds a use case per job; defaults to real connectors
        store: Pre-built store; skips database setup when given
    """
    engine = None
    if store is None:
        store, engine = await create_status_store(settings)

    status_repository = JobStatusRepository(
        store=store,
        key_prefix=settings.jobs.status_key_prefix,
        retention_seconds=settings.jobs.status_retention_seconds,
    )

    if use_case_factory is None:
        use_case_factory = functools.partial(create_generate_playlist_use_case, settings)

    return AppContext(
        settings=settings,
        store=store,
        status_repository=status_repository,
        runner=JobRunner(
            status_repository=status_repository, use_case_factory=use_case_factory
        ),
        engine=engine,
    )
