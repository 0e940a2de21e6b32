"""
Sync Engine

Copies the tracks of a Spotify playlist into a YouTube playlist, inserting
each best-matching video at most once.

Pipeline:
1. Exchange both providers' refresh tokens for access tokens (fatal on failure)
2. Read source tracks, capped (empty source ends the run early)
3. Find or create the destination playlist and load its video ids
4. For each track in source order: search, score, then skip or insert

Per-track failures never abort the run; they are tallied in the report.
Video ids are added to the destination state as they are inserted, so a
later track resolving to the same video counts as a duplicate.

Calls are issued one at a time: no fan-out across tracks or pages.
"""

import dataclasses
import logging
import time
from typing import Any, Callable, Protocol

from sp2yt.auth.tokens import GOOGLE, SPOTIFY
from sp2yt.config import SyncConfig
from sp2yt.core.destination import DestinationPlaylistResolver
from sp2yt.core.matching import MatchEngine
from sp2yt.core.models import (
    AddFailure,
    DestinationPlaylistState,
    MatchFailure,
    SyncReport,
    TrackDescriptor,
)

logger = logging.getLogger(__name__)


class SourceClientProtocol(Protocol):
    def get_playlist_tracks(self, playlist_id: str, cap: int) -> list[TrackDescriptor]: ...


class DestinationClientProtocol(Protocol):
    def search_candidates(self, query: str, max_results: int) -> list: ...
    def list_my_playlists(self) -> list[tuple[str, str]]: ...
    def create_playlist(self, title: str, privacy: str = "private") -> str | None: ...
    def get_playlist_video_ids(self, playlist_id: str) -> set[str]: ...
    def add_to_playlist(self, playlist_id: str, video_id: str) -> None: ...


class SyncEngine:
    """Drives one sync run from credentials to report."""

    def __init__(self, tokens: Any,
                 source_factory: Callable[[str], SourceClientProtocol],
                 destination_factory: Callable[[str], DestinationClientProtocol]):
        self._tokens = tokens
        self._source_factory = source_factory
        self._destination_factory = destination_factory

    def _access_tokens(self, config: SyncConfig) -> tuple[str, str]:
        spotify = dataclasses.replace(SPOTIFY, redirect_uri=config.spotify_redirect_uri)
        google = dataclasses.replace(GOOGLE, redirect_uri=config.google_redirect_uri)

        sp_session = self._tokens.open_session(
            spotify, config.spotify_client_id, config.spotify_client_secret)
        g_session = self._tokens.open_session(
            google, config.google_client_id, config.google_client_secret)

        sp_token = self._tokens.get_access_credential(spotify, sp_session)
        g_token = self._tokens.get_access_credential(google, g_session)
        return sp_token, g_token

    def _add(self, youtube: DestinationClientProtocol, state: DestinationPlaylistState,
             video_id: str) -> None:
        try:
            youtube.add_to_playlist(state.id, video_id)
        except Exception as e:
            raise AddFailure(f"Failed to add {video_id}: {e}") from e
        state.existing_item_ids.add(video_id)

    def run(self, config: SyncConfig) -> SyncReport:
        """Perform full sync. Returns SyncReport."""
        start = time.time()

        logger.info("=" * 50)
        logger.info("Starting sync" + (" (DRY RUN)" if config.dry_run else ""))

        sp_token, g_token = self._access_tokens(config)

        spotify = self._source_factory(sp_token)
        tracks = spotify.get_playlist_tracks(config.spotify_playlist_id, config.max_tracks)
        logger.info(f"Spotify: {len(tracks)} tracks")

        if not tracks:
            logger.info("No tracks found in the Spotify playlist")
            return SyncReport(dry_run=config.dry_run, duration=time.time() - start)

        youtube = self._destination_factory(g_token)
        state = DestinationPlaylistResolver(youtube, dry_run=config.dry_run).resolve(
            config.youtube_playlist_title)
        logger.info(f"YouTube: {len(state.existing_item_ids)} items")

        matcher = MatchEngine(youtube, max_results=config.search_max_results)
        added = skipped = unmatched = failed = 0
        errors = []

        for track in tracks:
            try:
                video_id = matcher.find_best_match(track)
            except MatchFailure as e:
                logger.warning(str(e))
                errors.append(str(e))
                unmatched += 1
                continue

            if video_id in state.existing_item_ids:
                logger.debug(f"Already in playlist: {track.title} ({video_id})")
                skipped += 1
                continue

            if config.dry_run:
                logger.info(f"[dry run] Would add: {track.title} ({video_id})")
                added += 1
                continue

            try:
                self._add(youtube, state, video_id)
            except AddFailure as e:
                logger.warning(str(e))
                errors.append(str(e))
                failed += 1
                continue

            logger.info(f"Added: {track.title} ({video_id})")
            added += 1

        duration = time.time() - start
        logger.info(f"Completed in {duration:.1f}s: +{added} ={skipped} "
                    f"unmatched={unmatched} failed={failed}")
        logger.info("=" * 50)

        return SyncReport(
            total_tracks=len(tracks),
            added=added,
            skipped_duplicate=skipped,
            failed_to_match=unmatched,
            failed_to_add=failed,
            dry_run=config.dry_run,
            playlist_id=state.id,
            duration=duration,
            errors=tuple(errors),
        )
