"""Spotify Web API Client - reads playlist tracks with a bearer access token"""

import logging
from typing import Any, Iterator
from urllib.parse import quote

import requests

from sp2yt.core.models import SourceError, TrackDescriptor

logger = logging.getLogger(__name__)

API_BASE = "https://api.spotify.com/v1"
PAGE_LIMIT = 100


class SpotifyClient:
    def __init__(self, access_token: str, timeout: float = 30, session: Any = None):
        self._token = access_token
        self._timeout = timeout
        self._session = session or requests.Session()

    def _get(self, url: str) -> dict:
        try:
            response = self._session.get(
                url,
                headers={"Authorization": f"Bearer {self._token}"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise SourceError(f"Spotify request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Spotify error {response.status_code}: {response.text[:200]}")
            raise SourceError(f"Spotify returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise SourceError(f"Spotify returned invalid JSON: {e}") from e

    def iter_tracks(self, playlist_id: str, cap: int) -> Iterator[TrackDescriptor]:
        """Yield at most ``cap`` tracks, following the ``next`` page URL."""
        if cap <= 0:
            return
        url: str | None = f"{API_BASE}/playlists/{quote(playlist_id, safe='')}/tracks?limit={PAGE_LIMIT}"
        count = 0

        while url:
            page = self._get(url)
            for item in page.get("items") or []:
                if not item:
                    continue
                track = self._extract_track(item)
                if track is None:
                    continue
                yield track
                count += 1
                if count >= cap:
                    return
            url = page.get("next")

    def get_playlist_tracks(self, playlist_id: str, cap: int) -> list[TrackDescriptor]:
        tracks = list(self.iter_tracks(playlist_id, cap))
        logger.info(f"Retrieved {len(tracks)} tracks from Spotify")
        return tracks

    def _extract_track(self, item: dict) -> TrackDescriptor | None:
        # Local files and removed tracks come back with null metadata
        track_data = item.get("track") or {}
        name = track_data.get("name") or ""
        artists = tuple(
            a["name"] for a in track_data.get("artists") or []
            if a and a.get("name")
        )
        if not name or not artists:
            logger.debug(f"Skipping malformed playlist item: {name or '<untitled>'}")
            return None

        album = (track_data.get("album") or {}).get("name") or ""
        return TrackDescriptor(title=name, artists=artists, album_hint=album)
