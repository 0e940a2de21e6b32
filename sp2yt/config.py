"""Run configuration from environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from sp2yt.auth.tokens import DEFAULT_REDIRECT_URI
from sp2yt.core.models import ConfigError

DEFAULT_PLAYLIST_TITLE = "My Spotify → YouTube Sync"
DEFAULT_DATA_DIR = Path.home() / ".config" / "sp2yt"

_TRUE = {"1", "true", "yes", "on"}


def _flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").strip().lower() in _TRUE


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class SyncConfig:
    spotify_playlist_id: str
    youtube_playlist_title: str = DEFAULT_PLAYLIST_TITLE
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    google_client_id: str = ""
    google_client_secret: str = ""
    spotify_redirect_uri: str = DEFAULT_REDIRECT_URI
    google_redirect_uri: str = DEFAULT_REDIRECT_URI
    max_tracks: int = 500
    search_max_results: int = 5
    dry_run: bool = False
    request_timeout: int = 30
    reauthorize_on_refresh_failure: bool = False
    data_dir: Path = DEFAULT_DATA_DIR

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "SyncConfig":
        env = os.environ if env is None else env

        playlist_id = env.get("SPOTIFY_PLAYLIST_ID", "").strip()
        if not playlist_id:
            raise ConfigError("Missing config: SPOTIFY_PLAYLIST_ID")

        data_dir = env.get("SP2YT_DATA_DIR", "").strip()
        return cls(
            spotify_playlist_id=playlist_id,
            youtube_playlist_title=env.get("YOUTUBE_PLAYLIST_TITLE", "").strip() or DEFAULT_PLAYLIST_TITLE,
            spotify_client_id=env.get("SPOTIFY_CLIENT_ID", "").strip(),
            spotify_client_secret=env.get("SPOTIFY_CLIENT_SECRET", "").strip(),
            google_client_id=env.get("GOOGLE_CLIENT_ID", "").strip(),
            google_client_secret=env.get("GOOGLE_CLIENT_SECRET", "").strip(),
            spotify_redirect_uri=env.get("SPOTIFY_REDIRECT_URI", "").strip() or DEFAULT_REDIRECT_URI,
            google_redirect_uri=env.get("GOOGLE_REDIRECT_URI", "").strip() or DEFAULT_REDIRECT_URI,
            max_tracks=_positive_int(env, "MAX_TRACKS", 500),
            search_max_results=_positive_int(env, "YT_SEARCH_MAX_RESULTS", 5),
            dry_run=_flag(env, "DRY_RUN"),
            request_timeout=_positive_int(env, "REQUEST_TIMEOUT", 30),
            reauthorize_on_refresh_failure=_flag(env, "REAUTHORIZE_ON_REFRESH_FAILURE"),
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
        )
