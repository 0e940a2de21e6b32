import pytest

from fakes import FakeYouTube
from sp2yt.core.destination import DRY_RUN_PLAYLIST_ID, DestinationPlaylistResolver
from sp2yt.core.models import CreateError


def test_existing_playlist_matched_case_insensitively():
    yt = FakeYouTube(
        playlists=[("PL1", "Other"), ("PL2", "my SYNC")],
        members={"PL2": {"v1", "v2"}},
    )
    state = DestinationPlaylistResolver(yt).resolve("My Sync")

    assert state.id == "PL2"
    assert state.existing_item_ids == {"v1", "v2"}
    assert yt.created == []


def test_missing_playlist_is_created_private():
    yt = FakeYouTube(playlists=[("PL1", "Other")])
    state = DestinationPlaylistResolver(yt).resolve("My Sync")

    assert state.id == "PL_new"
    assert state.existing_item_ids == set()
    assert yt.created == [("My Sync", "private")]


def test_create_without_id_is_create_error():
    yt = FakeYouTube(create_id=None)
    with pytest.raises(CreateError):
        DestinationPlaylistResolver(yt).resolve("My Sync")


def test_dry_run_never_creates():
    yt = FakeYouTube()
    state = DestinationPlaylistResolver(yt, dry_run=True).resolve("My Sync")

    assert state.id == DRY_RUN_PLAYLIST_ID
    assert state.existing_item_ids == set()
    assert yt.created == []


def test_dry_run_still_reads_existing_playlist():
    yt = FakeYouTube(playlists=[("PL2", "My Sync")], members={"PL2": {"v9"}})
    state = DestinationPlaylistResolver(yt, dry_run=True).resolve("My Sync")
    assert state.id == "PL2"
    assert state.existing_item_ids == {"v9"}


def test_state_is_a_copy_of_remote_membership():
    yt = FakeYouTube(playlists=[("PL2", "My Sync")], members={"PL2": {"v1"}})
    state = DestinationPlaylistResolver(yt).resolve("My Sync")
    state.existing_item_ids.add("local")
    assert yt.members["PL2"] == {"v1"}
