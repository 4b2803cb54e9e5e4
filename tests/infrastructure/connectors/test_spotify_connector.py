"""Tests for the Spotify connector with a mocked spotipy client."""

from unittest.mock import AsyncMock, Mock, patch

import pytest
import spotipy

from underplayed.infrastructure.connectors.spotify import (
    SpotifyConnector,
    convert_spotify_track,
)


def saved_item(track_id, name="Song", artists=("Band",)):
    return {
        "added_at": "2024-01-01T00:00:00Z",
        "track": {
            "id": track_id,
            "name": name,
            "uri": f"spotify:track:{track_id}" if track_id else "spotify:local:x",
            "artists": [{"name": artist} for artist in artists],
        },
    }


@pytest.fixture
def client():
    return Mock(spec=spotipy.Spotify)


@pytest.fixture
def connector(client):
    return SpotifyConnector(client=client)


class TestGetLikedTracks:
    async def test_converts_page_and_returns_offset_cursor(self, connector, client):
        client.current_user_saved_tracks.return_value = {
            "items": [saved_item("t1", "One", ("A", "B")), saved_item("t2")],
            "next": "https://api.spotify.com/v1/me/tracks?offset=52",
        }

        tracks, cursor = await connector.get_liked_tracks(limit=2, cursor="50")

        client.current_user_saved_tracks.assert_called_once_with(limit=2, offset=50)
        assert [t.id for t in tracks] == ["t1", "t2"]
        assert tracks[0].artist_names == ["A", "B"]
        assert tracks[0].uri == "spotify:track:t1"
        assert cursor == "52"

    async def test_last_page_has_no_cursor(self, connector, client):
        client.current_user_saved_tracks.return_value = {
            "items": [saved_item("t1")],
            "next": None,
        }

        _, cursor = await connector.get_liked_tracks()

        assert cursor is None

    async def test_local_files_are_skipped(self, connector, client):
        client.current_user_saved_tracks.return_value = {
            "items": [saved_item(None), saved_item("t2"), {"track": None}],
            "next": None,
        }

        tracks, _ = await connector.get_liked_tracks()

        assert [t.id for t in tracks] == ["t2"]

    async def test_page_size_is_capped_at_fifty(self, connector, client):
        client.current_user_saved_tracks.return_value = {"items": [], "next": None}

        await connector.get_liked_tracks(limit=500)

        assert client.current_user_saved_tracks.call_args.kwargs["limit"] == 50

    async def test_spotify_errors_are_retried_then_raised(self, connector, client):
        client.current_user_saved_tracks.side_effect = spotipy.SpotifyException(
            503, -1, "Service unavailable"
        )

        with (
            patch("asyncio.sleep", new_callable=AsyncMock),
            pytest.raises(spotipy.SpotifyException),
        ):
            await connector.get_liked_tracks()

        assert client.current_user_saved_tracks.call_count == 3


class TestPlaylists:
    async def test_create_playlist_for_current_user(self, connector, client):
        client.me.return_value = {"id": "user-1"}
        client.user_playlist_create.return_value = {
            "id": "pl-9",
            "name": "Mix",
            "external_urls": {"spotify": "https://open.spotify.com/playlist/pl-9"},
        }

        playlist = await connector.create_playlist("Mix", "desc")

        client.user_playlist_create.assert_called_once_with(
            user="user-1", name="Mix", public=False, description="desc"
        )
        assert playlist.id == "pl-9"
        assert playlist.url == "https://open.spotify.com/playlist/pl-9"

    async def test_create_playlist_without_user_fails(self, connector, client):
        client.me.return_value = None

        with pytest.raises(ValueError, match="current Spotify user"):
            await connector.create_playlist("Mix")

    async def test_add_tracks_sends_one_request(self, connector, client):
        uris = [f"spotify:track:{i}" for i in range(100)]

        await connector.add_tracks("pl-9", uris)

        client.playlist_add_items.assert_called_once_with(playlist_id="pl-9", items=uris)

    async def test_add_tracks_rejects_oversized_batches(self, connector, client):
        with pytest.raises(ValueError, match="at most 100"):
            await connector.add_tracks("pl-9", ["spotify:track:x"] * 101)

        client.playlist_add_items.assert_not_called()


class TestConvertSpotifyTrack:
    def test_uri_falls_back_to_track_id(self):
        track = convert_spotify_track({"id": "abc", "name": "Song", "artists": []})

        assert track.uri == "spotify:track:abc"
        assert track.artists == []
