"""Spotify integration modules."""

from spotify.client import SpotifyClient, load_tracks

__all__ = ["SpotifyClient", "load_tracks"]
