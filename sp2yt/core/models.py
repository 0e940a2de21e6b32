"""Data models and errors for sync operations."""

from dataclasses import dataclass, field
from typing import Optional, Set, Tuple


class AuthError(Exception):
    """Credentials could not be obtained or exchanged."""
    pass


class TokenRejected(AuthError):
    """Token endpoint refused the grant (revoked or invalid refresh token)."""
    pass


class CreateError(Exception):
    """Destination playlist creation returned no identifier."""
    pass


class ConfigError(Exception):
    """Required configuration is missing or invalid."""
    pass


class SourceError(Exception):
    """Source playlist could not be read."""
    pass


class MatchFailure(Exception):
    """No candidate could be resolved for a track."""
    pass


class AddFailure(Exception):
    """Destination rejected or failed an insert."""
    pass


@dataclass(frozen=True)
class TrackDescriptor:
    """A track from the source playlist."""
    title: str
    artists: Tuple[str, ...]
    album_hint: str = ""


@dataclass(frozen=True)
class CandidateItem:
    """A search result considered as a possible match."""
    id: str
    title: str
    channel: str


@dataclass
class DestinationPlaylistState:
    """Destination playlist id and the video ids already in it."""
    id: str
    existing_item_ids: Set[str] = field(default_factory=set)


@dataclass
class ProviderSession:
    """Client credentials and refresh credential for one OAuth provider."""
    client_id: str
    client_secret: str
    refresh_credential: Optional[str] = None


@dataclass(frozen=True)
class SyncReport:
    """Final counts of a sync run."""
    total_tracks: int = 0
    added: int = 0
    skipped_duplicate: int = 0
    failed_to_match: int = 0
    failed_to_add: int = 0
    dry_run: bool = False
    playlist_id: str = ""
    duration: float = 0.0
    errors: Tuple[str, ...] = ()

    @property
    def processed(self) -> int:
        return self.added + self.skipped_duplicate + self.failed_to_match + self.failed_to_add
