"""External service connectors for Spotify and Last.fm."""

from .lastfm import LastFMConnector
from .spotify import SpotifyConnector

__all__ = ["LastFMConnector", "SpotifyConnector"]
