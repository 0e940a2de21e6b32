"""
YouTube Data API v3 Client

Wraps the search, playlists and playlistItems resources used by a sync run.
Includes retry logic for rate limiting and transient errors.
"""

import logging
import time
from typing import Any, Callable, TypeVar

import google_auth_httplib2
import httplib2
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from sp2yt.core.models import AuthError, CandidateItem

logger = logging.getLogger(__name__)

PLAYLIST_PAGE_SIZE = 50
PACING_DELAY = 0.5

T = TypeVar('T')


class YouTubeAPIError(Exception):
    """YouTube API operation failed."""
    pass


class YouTubeQuotaExceededError(YouTubeAPIError):
    """YouTube API quota exceeded."""
    pass


def _build_service(access_token: str, timeout: float) -> Any:
    try:
        credentials = Credentials(token=access_token)
        http = google_auth_httplib2.AuthorizedHttp(credentials, http=httplib2.Http(timeout=timeout))
        return build("youtube", "v3", http=http, cache_discovery=False)
    except Exception as e:
        raise AuthError(f"Failed to build YouTube client: {e}") from e


class YouTubeClient:
    """YouTube Data API client with retry logic."""

    def __init__(self, access_token: str = "", timeout: float = 30,
                 service: Any = None, pacing: float = PACING_DELAY):
        self._service = service if service is not None else _build_service(access_token, timeout)
        self._pacing = pacing
        logger.info("YouTube client initialized")

    def _retry(self, operation: Callable[[], T], name: str, max_retries: int = 3) -> T:
        """Execute operation with retry logic for transient errors."""
        for attempt in range(max_retries):
            try:
                return operation()
            except HttpError as e:
                status = e.resp.status if e.resp else 0
                error_str = str(e)

                # Quota exceeded - don't retry
                if status == 403 and "quotaExceeded" in error_str:
                    raise YouTubeQuotaExceededError(f"Quota exceeded: {e}") from e

                # Rate limit - wait and retry once
                if status == 403 and attempt == 0:
                    logger.warning(f"Rate limited on {name}, waiting 60s...")
                    time.sleep(60)
                    continue

                # Server error - retry with backoff
                if status >= 500 and attempt < max_retries - 1:
                    wait = 2 ** attempt
                    logger.warning(f"Server error on {name}, retrying in {wait}s...")
                    time.sleep(wait)
                    continue

                raise YouTubeAPIError(f"API error on {name}: {e}") from e

            except (ConnectionError, TimeoutError, OSError, httplib2.HttpLib2Error) as e:
                if attempt < max_retries - 1:
                    wait = 2 ** attempt
                    logger.warning(f"Network error on {name}, retrying in {wait}s...")
                    time.sleep(wait)
                    continue
                raise YouTubeAPIError(f"Network error on {name}: {e}") from e

        raise YouTubeAPIError(f"{name} failed after {max_retries} attempts")

    def _pace(self) -> None:
        if self._pacing:
            time.sleep(self._pacing)

    def search_candidates(self, query: str, max_results: int) -> list[CandidateItem]:
        """Return up to ``max_results`` video candidates for a query, in provider order."""
        def do_search():
            return self._service.search().list(
                part="snippet",
                q=query,
                type="video",
                maxResults=max_results
            ).execute()

        response = self._retry(do_search, f"search '{query}'")
        self._pace()

        candidates = []
        for item in response.get("items", []):
            video_id = (item.get("id") or {}).get("videoId")
            if not video_id:
                continue
            snippet = item.get("snippet") or {}
            candidates.append(CandidateItem(
                id=video_id,
                title=snippet.get("title") or "",
                channel=snippet.get("channelTitle") or "",
            ))
        return candidates

    def list_my_playlists(self) -> list[tuple[str, str]]:
        """First page of the account's playlists as (id, title) pairs."""
        def do_list():
            return self._service.playlists().list(
                part="snippet",
                mine=True,
                maxResults=PLAYLIST_PAGE_SIZE
            ).execute()

        response = self._retry(do_list, "list playlists")
        return [
            (item["id"], (item.get("snippet") or {}).get("title") or "")
            for item in response.get("items", [])
            if item.get("id")
        ]

    def create_playlist(self, title: str, privacy: str = "private") -> str | None:
        """Create a playlist. Returns its id, or None if the response has none."""
        def do_create():
            return self._service.playlists().insert(
                part="snippet,status",
                body={
                    "snippet": {"title": title},
                    "status": {"privacyStatus": privacy}
                }
            ).execute()

        response = self._retry(do_create, f"create playlist '{title}'")
        playlist_id = (response or {}).get("id")
        if playlist_id:
            logger.info(f"Created playlist '{title}' ({playlist_id})")
        return playlist_id

    def get_playlist_video_ids(self, playlist_id: str) -> set[str]:
        """All video ids in a playlist, across every page."""
        video_ids: set[str] = set()
        page_token = None

        while True:
            def do_list():
                return self._service.playlistItems().list(
                    part="contentDetails",
                    playlistId=playlist_id,
                    maxResults=PLAYLIST_PAGE_SIZE,
                    pageToken=page_token
                ).execute()

            response = self._retry(do_list, f"list playlist {playlist_id}")

            for item in response.get("items", []):
                video_id = (item.get("contentDetails") or {}).get("videoId")
                if video_id:
                    video_ids.add(video_id)

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        logger.info(f"Retrieved {len(video_ids)} items from YouTube playlist")
        return video_ids

    def add_to_playlist(self, playlist_id: str, video_id: str) -> None:
        """Add video to playlist. Raises YouTubeAPIError on failure."""
        def do_insert():
            body = {
                "snippet": {
                    "playlistId": playlist_id,
                    "resourceId": {"kind": "youtube#video", "videoId": video_id}
                }
            }
            return self._service.playlistItems().insert(
                part="snippet", body=body
            ).execute()

        self._retry(do_insert, f"add {video_id}")
        self._pace()
