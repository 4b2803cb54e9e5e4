"""Application services - fetching, publishing and status persistence."""

from .catalog_fetcher import LikedCatalogFetcher
from .job_status import JobStatusRepository
from .listen_count_fetcher import ListenCountFetcher
from .playlist_publisher import PlaylistPublisher, ProgressCallback

__all__ = [
    "JobStatusRepository",
    "LikedCatalogFetcher",
    "ListenCountFetcher",
    "PlaylistPublisher",
    "ProgressCallback",
]
