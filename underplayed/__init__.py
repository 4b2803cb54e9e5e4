"""Underplayed - rebuilds your Spotify liked songs as a play-count weighted playlist."""

__version__ = "0.1.0"
