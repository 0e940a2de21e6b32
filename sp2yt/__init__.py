"""Copy a Spotify playlist into a YouTube playlist."""

__version__ = "1.0.0"
