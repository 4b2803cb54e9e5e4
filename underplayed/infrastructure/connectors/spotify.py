"""Spotify service connector with domain model conversion.

This module provides a connector for the Spotify API using the spotipy library
(https://spotipy.readthedocs.io/) to handle authentication, retries, and
conversion between Spotify objects and domain models.

Key components:
- SpotifyConnector: OAuth-authenticated client for liked tracks and playlists
- convert_spotify_track: Transform a saved-track payload into a domain Track

The module supports:
- Retrieving the user's liked/saved tracks with offset pagination
- Creating private playlists for the current user
- Appending batches of track URIs to a playlist
"""

import asyncio
from pathlib import Path
from typing import Any, ClassVar

from attrs import define, field
import backoff
import spotipy
from spotipy.oauth2 import SpotifyOAuth

from underplayed.config import get_logger, resilient_operation
from underplayed.domain.entities import Artist, CreatedPlaylist, Track

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="spotify")

# Spotify's hard limits per request
MAX_LIKED_PAGE_SIZE = 50
MAX_PLAYLIST_ITEMS_PER_REQUEST = 100


@define(slots=True)
class SpotifyConnector:
    """Thin wrapper around spotipy with domain model conversion.

    Handles the OAuth flow through spotipy's token cache and provides
    methods to:
    - Page through the user's liked tracks
    - Create a new playlist
    - Append track URIs to a playlist

    All methods retry Spotify errors via the backoff decorator.
    """

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""
    cache_path: Path = Path(".spotify_cache")
    client: spotipy.Spotify | None = field(default=None, repr=False)

    SCOPES: ClassVar[list[str]] = [
        "user-library-read",
        "playlist-modify-public",
        "playlist-modify-private",
    ]

    def __attrs_post_init__(self) -> None:
        """Initialize Spotify client with OAuth configuration."""
        if self.client is not None:
            return

        logger.debug("Initializing Spotify connector")
        self.client = spotipy.Spotify(
            auth_manager=SpotifyOAuth(
                client_id=self.client_id,
                client_secret=self.client_secret,
                redirect_uri=self.redirect_uri,
                scope=self.SCOPES,
                open_browser=False,
                cache_handler=spotipy.CacheFileHandler(cache_path=str(self.cache_path)),
            ),
        )

    @resilient_operation("get_liked_tracks")
    @backoff.on_exception(backoff.expo, spotipy.SpotifyException, max_tries=3)
    async def get_liked_tracks(
        self,
        limit: int = 50,
        cursor: str | None = None,
    ) -> tuple[list[Track], str | None]:
        """Fetch one page of the user's saved/liked tracks.

        Args:
            limit: Number of tracks to fetch per page (max 50)
            cursor: Offset cursor from the previous call

        Returns:
            Tuple of (list of Tracks, next cursor or None if done)
        """
        offset = 0
        if cursor:
            try:
                offset = int(cursor)
            except ValueError:
                logger.warning(f"Invalid cursor format: {cursor}, using offset=0")

        logger.debug(f"Fetching liked tracks from Spotify, limit={limit}, offset={offset}")
        saved_tracks = await asyncio.to_thread(
            self.client.current_user_saved_tracks,
            limit=min(limit, MAX_LIKED_PAGE_SIZE),
            offset=offset,
        )

        if not saved_tracks or "items" not in saved_tracks:
            logger.warning("No saved tracks found or invalid response format")
            return [], None

        # The API returns items with {added_at, track} structure
        tracks = []
        for item in saved_tracks["items"]:
            spotify_track = (item or {}).get("track")
            if not spotify_track or not spotify_track.get("id"):
                # Local files have no id and cannot be added to a playlist
                continue
            tracks.append(convert_spotify_track(spotify_track))

        next_cursor = None
        if saved_tracks.get("next") and saved_tracks["items"]:
            next_cursor = str(offset + len(saved_tracks["items"]))

        return tracks, next_cursor

    @resilient_operation("create_spotify_playlist")
    @backoff.on_exception(backoff.expo, spotipy.SpotifyException, max_tries=3)
    async def create_playlist(
        self,
        name: str,
        description: str = "",
        public: bool = False,
    ) -> CreatedPlaylist:
        """Create an empty playlist owned by the current user.

        Args:
            name: Playlist name
            description: Playlist description
            public: Whether the playlist is publicly visible

        Returns:
            The created playlist's id, name and web URL
        """
        current_user = await asyncio.to_thread(self.client.me)
        user_id = (current_user or {}).get("id")
        if not user_id:
            raise ValueError("Could not determine the current Spotify user")

        logger.info(f"Creating Spotify playlist: {name}")
        playlist = await asyncio.to_thread(
            self.client.user_playlist_create,
            user=user_id,
            name=name,
            public=public,
            description=description,
        )
        if not playlist or "id" not in playlist:
            raise ValueError("Failed to create playlist, received no playlist id")

        return CreatedPlaylist(
            id=playlist["id"],
            name=playlist.get("name", name),
            url=(playlist.get("external_urls") or {}).get("spotify"),
        )

    @resilient_operation("add_spotify_playlist_tracks")
    @backoff.on_exception(backoff.expo, spotipy.SpotifyException, max_tries=3)
    async def add_tracks(self, playlist_id: str, uris: list[str]) -> None:
        """Append one batch of track URIs (max 100) to a playlist."""
        if len(uris) > MAX_PLAYLIST_ITEMS_PER_REQUEST:
            raise ValueError(
                f"Spotify accepts at most {MAX_PLAYLIST_ITEMS_PER_REQUEST} items "
                f"per request, got {len(uris)}"
            )

        await asyncio.to_thread(
            self.client.playlist_add_items,
            playlist_id=playlist_id,
            items=uris,
        )


def convert_spotify_track(spotify_track: dict[str, Any]) -> Track:
    """Convert Spotify track data to a Track domain model."""
    artists = [
        Artist(name=artist.get("name") or "")
        for artist in spotify_track.get("artists", [])
    ]
    track_id = spotify_track["id"]

    return Track(
        id=track_id,
        title=spotify_track.get("name") or "",
        artists=artists,
        uri=spotify_track.get("uri") or f"spotify:track:{track_id}",
    )
