"""Configuration management using Pydantic Settings.

Type-safe configuration with automatic environment variable loading and
validation. The configuration is organized into logical groups:

- CredentialsConfig: Spotify and Last.fm API credentials
- DatabaseConfig: Status store connection settings
- LoggingConfig: Logging levels, files, and debugging options
- APIConfig: Page sizes, request budgets and delays for external APIs
- JobConfig: Status snapshot retention and playlist naming
- ServerConfig: HTTP server binding
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_DATABASE_URL = "memory"


class CredentialsConfig(BaseModel):
    """API credentials and authentication settings."""

    # Spotify credentials
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_redirect_uri: str = "http://localhost:8888/callback"
    spotify_cache_path: Path = Path(".spotify_cache")

    # LastFM credentials
    lastfm_key: str = ""
    lastfm_secret: str = ""
    lastfm_username: str = ""


class DatabaseConfig(BaseModel):
    """Status store connection configuration.

    Use ``memory`` as the URL for a process-local store that forgets
    everything on restart.
    """

    url: str = "sqlite+aiosqlite:///data/underplayed.db"
    echo: bool = False

    @property
    def is_memory(self) -> bool:
        return self.url == MEMORY_DATABASE_URL


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path = Path("logs/underplayed.log")
    real_time_debug: bool = True


class APIConfig(BaseModel):
    """External API paging and request limits."""

    # Spotify API Configuration
    spotify_liked_page_size: int = 50  # Spotify's max for saved tracks
    spotify_playlist_batch_size: int = 100  # Spotify's max items per add call
    spotify_max_add_requests: int = 100  # 10,000 items, Spotify's playlist cap

    # LastFM API Configuration (rate limited to 5 calls/second)
    lastfm_page_size: int = 50  # user.getTopTracks default page size
    lastfm_request_delay: float = 0.2
    lastfm_max_pages: int | None = None


class JobConfig(BaseModel):
    """Playlist job lifecycle and naming."""

    status_key_prefix: str = "playlist_status_"
    status_retention_seconds: int = 3600
    playlist_name_prefix: str = "Shuffled Liked Songs (Cumulative Plays)"
    playlist_description: str = (
        "Shuffled Liked Songs (cumulative by play count) - generated by Underplayed"
    )
    playlist_public: bool = False
    shutdown_grace_seconds: float = 30.0


class ServerConfig(BaseModel):
    """HTTP server binding."""

    host: str = "127.0.0.1"
    port: int = 8000


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables can be set using flat naming or nested naming:
    - Flat: DATABASE_URL, CONSOLE_LOG_LEVEL, LASTFM_USERNAME
    - Nested: DATABASE__URL, LOGGING__CONSOLE_LEVEL, API__LASTFM_PAGE_SIZE

    The .env file is automatically loaded for development convenience.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Nested configuration groups
    credentials: CredentialsConfig = CredentialsConfig()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    api: APIConfig = APIConfig()
    jobs: JobConfig = JobConfig()
    server: ServerConfig = ServerConfig()

    # Top-level settings
    data_dir: Path = Path("data")

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Transform flat environment variables to nested structure.

        Maps flat env vars (DATABASE_URL, SPOTIFY_CLIENT_ID) to the nested
        structure expected by the models (database.url, credentials.*).
        """
        if not isinstance(data, dict):
            return data

        transformed: dict[str, dict[str, Any]] = {}

        flat_mappings = {
            "database": {
                "database_url": "url",
                "database_echo": "echo",
            },
            "logging": {
                "console_log_level": "console_level",
                "file_log_level": "file_level",
                "log_file": "log_file",
                "log_real_time_debug": "real_time_debug",
            },
            "credentials": {
                "spotify_client_id": "spotify_client_id",
                "spotify_client_secret": "spotify_client_secret",
                "spotify_redirect_uri": "spotify_redirect_uri",
                "spotify_cache_path": "spotify_cache_path",
                "lastfm_key": "lastfm_key",
                "lastfm_api_key": "lastfm_key",
                "lastfm_secret": "lastfm_secret",
                "lastfm_username": "lastfm_username",
            },
        }
        for group, mapping in flat_mappings.items():
            for env_key, field_key in mapping.items():
                if env_key in data:
                    transformed.setdefault(group, {})[field_key] = data.pop(env_key)

        # Merge into any nested values that were already supplied
        for group, values in transformed.items():
            existing = data.get(group)
            if isinstance(existing, dict):
                data[group] = {**existing, **values}
            else:
                data[group] = values

        return data


def load_settings(**overrides: Any) -> Settings:
    """Build a fresh Settings instance, creating the data directory."""
    loaded = Settings(**overrides)
    loaded.data_dir.mkdir(parents=True, exist_ok=True)
    return loaded


# Singleton instance for application use
settings = load_settings()
