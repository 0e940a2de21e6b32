"""Find-or-create the destination playlist and load its current membership."""

import logging
from typing import Protocol

from sp2yt.core.models import CreateError, DestinationPlaylistState

logger = logging.getLogger(__name__)

DRY_RUN_PLAYLIST_ID = "DRY_RUN_PLAYLIST_ID"


class PlaylistClientProtocol(Protocol):
    def list_my_playlists(self) -> list[tuple[str, str]]: ...
    def create_playlist(self, title: str, privacy: str = "private") -> str | None: ...
    def get_playlist_video_ids(self, playlist_id: str) -> set[str]: ...


class DestinationPlaylistResolver:
    def __init__(self, client: PlaylistClientProtocol, dry_run: bool = False):
        self._client = client
        self._dry_run = dry_run

    def _find_by_title(self, title: str) -> str | None:
        wanted = title.lower()
        for playlist_id, playlist_title in self._client.list_my_playlists():
            if playlist_title.lower() == wanted:
                return playlist_id
        return None

    def resolve(self, title: str) -> DestinationPlaylistState:
        playlist_id = self._find_by_title(title)

        if playlist_id is None:
            if self._dry_run:
                logger.info(f"[dry run] Would create playlist '{title}'")
                return DestinationPlaylistState(id=DRY_RUN_PLAYLIST_ID)

            playlist_id = self._client.create_playlist(title)
            if not playlist_id:
                raise CreateError("Failed to create YouTube playlist.")
        else:
            logger.info(f"Using existing playlist '{title}' ({playlist_id})")

        existing = self._client.get_playlist_video_ids(playlist_id)
        return DestinationPlaylistState(id=playlist_id, existing_item_ids=set(existing))
