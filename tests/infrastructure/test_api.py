"""Tests for the HTTP job lifecycle endpoints."""

import functools
import time

from fastapi.testclient import TestClient
import pytest

from underplayed.infrastructure.api import create_app
from underplayed.infrastructure.api.routes import NOT_FOUND_DETAIL
from underplayed.infrastructure.factories import (
    create_app_context,
    create_generate_playlist_use_case,
)
from underplayed.infrastructure.persistence import InMemoryKeyValueStore

from tests.fixtures.fakes import FakeLikedSource


def wait_for_terminal(client: TestClient, process_id: str, timeout: float = 5.0) -> dict:
    deadline = time.monotonic() + timeout
    while True:
        body = client.get(f"/status/{process_id}").json()
        if body["state"] in ("completed", "failed") or time.monotonic() > deadline:
            return body
        time.sleep(0.01)


@pytest.fixture
def make_client(test_settings, listen_source, playlist_service):
    def _make(liked_source):
        factory = functools.partial(
            create_generate_playlist_use_case,
            test_settings,
            liked_source=liked_source,
            listen_source=listen_source,
            playlist_service=playlist_service,
        )

        async def context_factory(settings):
            return await create_app_context(
                settings, use_case_factory=factory, store=InMemoryKeyValueStore()
            )

        return TestClient(create_app(test_settings, context_factory=context_factory))

    return _make


class TestShuffleEndpoint:
    def test_returns_202_with_process_id_and_status_url(self, make_client, liked_source):
        with make_client(liked_source) as client:
            response = client.post("/shuffle")

            assert response.status_code == 202
            body = response.json()
            assert body["process_id"]
            assert body["status_url"].endswith(f"/status/{body['process_id']}")
            assert body["message"]

    def test_job_completes_in_background(
        self, make_client, liked_source, playlist_service
    ):
        with make_client(liked_source) as client:
            process_id = client.post("/shuffle", json={"playlist_name": "API Mix"}).json()[
                "process_id"
            ]

            body = wait_for_terminal(client, process_id)

        assert body["state"] == "completed"
        assert body["progress_percent"] == 100
        assert body["playlist_url"] == "https://open.spotify.com/playlist/pl-1"
        assert playlist_service.created[0]["name"] == "API Mix"

    def test_failed_job_reports_error(self, make_client, liked_tracks):
        with make_client(FakeLikedSource(liked_tracks, fail_on_call=1)) as client:
            process_id = client.post("/shuffle").json()["process_id"]

            body = wait_for_terminal(client, process_id)

        assert body["state"] == "failed"
        assert body["message"] == "Playlist generation failed."
        assert "Spotify is unavailable" in body["error"]


class TestStatusEndpoint:
    def test_unknown_process_is_404(self, make_client, liked_source):
        with make_client(liked_source) as client:
            response = client.get("/status/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"detail": NOT_FOUND_DETAIL}

    def test_snapshot_fields(self, make_client):
        with make_client(FakeLikedSource([])) as client:
            process_id = client.post("/shuffle").json()["process_id"]
            body = wait_for_terminal(client, process_id)

        assert set(body) == {
            "process_id",
            "state",
            "message",
            "progress_percent",
            "playlist_url",
            "error",
            "updated_at_ms",
            "details",
        }
        assert body["message"] == "No liked songs found in your Spotify library."


class TestHealthEndpoint:
    def test_health(self, make_client, liked_source):
        with make_client(liked_source) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
