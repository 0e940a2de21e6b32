import pytest

from sp2yt.config import SyncConfig

ENV_KEYS = [
    "SPOTIFY_PLAYLIST_ID",
    "YOUTUBE_PLAYLIST_TITLE",
    "SPOTIFY_CLIENT_ID",
    "SPOTIFY_CLIENT_SECRET",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "SPOTIFY_REDIRECT_URI",
    "GOOGLE_REDIRECT_URI",
    "MAX_TRACKS",
    "YT_SEARCH_MAX_RESULTS",
    "DRY_RUN",
    "REQUEST_TIMEOUT",
    "REAUTHORIZE_ON_REFRESH_FAILURE",
    "SP2YT_DATA_DIR",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Tests never see the developer's real sync configuration."""
    for k in ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        values = {
            "spotify_playlist_id": "sp-playlist",
            "youtube_playlist_title": "Synced",
            "data_dir": tmp_path,
        }
        values.update(overrides)
        return SyncConfig(**values)
    return _make
