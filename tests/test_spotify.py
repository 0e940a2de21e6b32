import pytest

from fakes import FakeHttp, FakeResponse
from sp2yt.clients.spotify import API_BASE, SpotifyClient
from sp2yt.core.models import SourceError, TrackDescriptor

FIRST = f"{API_BASE}/playlists/pl/tracks?limit=100"


def _item(name, *artists, album="Album"):
    return {"track": {
        "name": name,
        "artists": [{"name": a} for a in artists],
        "album": {"name": album},
    }}


def _pages(count, per_page):
    """Build ``count`` linked pages of ``per_page`` tracks each."""
    gets = {}
    for p in range(count):
        url = FIRST if p == 0 else f"https://next/{p}"
        nxt = f"https://next/{p + 1}" if p + 1 < count else None
        items = [_item(f"Song {p}-{i}", "Artist") for i in range(per_page)]
        gets[url] = FakeResponse(200, {"items": items, "next": nxt})
    return gets


def test_projects_tracks_and_drops_malformed_items():
    page = {"items": [
        _item("Song A", "Artist X", "Artist Z", album="LP"),
        {"track": None},
        _item("", "Nobody"),
        _item("No Artist"),
        {"track": {"name": "Local", "artists": [{"name": None}]}},
        {"track": {"name": "No Album", "artists": [{"name": "Y"}], "album": None}},
    ], "next": None}
    http = FakeHttp(gets={FIRST: FakeResponse(200, page)})

    tracks = SpotifyClient("tok", session=http).get_playlist_tracks("pl", cap=500)

    assert tracks == [
        TrackDescriptor("Song A", ("Artist X", "Artist Z"), "LP"),
        TrackDescriptor("No Album", ("Y",), ""),
    ]
    assert http.get_calls[0]["headers"] == {"Authorization": "Bearer tok"}


def test_follows_next_cursor_until_exhausted():
    http = FakeHttp(gets=_pages(3, 4))
    tracks = SpotifyClient("tok", session=http).get_playlist_tracks("pl", cap=500)
    assert len(tracks) == 12
    assert len(http.get_calls) == 3


@pytest.mark.parametrize("cap", [1, 4, 5, 9])
def test_cap_is_exact_regardless_of_page_boundaries(cap):
    http = FakeHttp(gets=_pages(5, 4))
    tracks = SpotifyClient("tok", session=http).get_playlist_tracks("pl", cap=cap)
    assert len(tracks) == cap
    # pages beyond the cap are never fetched
    assert len(http.get_calls) == (cap + 3) // 4


def test_iter_tracks_is_lazy():
    http = FakeHttp(gets=_pages(3, 2))
    it = SpotifyClient("tok", session=http).iter_tracks("pl", cap=10)
    assert next(it).title == "Song 0-0"
    assert len(http.get_calls) == 1


def test_http_error_is_source_error():
    http = FakeHttp(gets={FIRST: FakeResponse(404, {"error": {}}, text="not found")})
    with pytest.raises(SourceError, match="404"):
        SpotifyClient("tok", session=http).get_playlist_tracks("pl", cap=10)


def test_null_items_are_dropped():
    page = {"items": [None, _item("Song A", "Artist X"), {}], "next": None}
    http = FakeHttp(gets={FIRST: FakeResponse(200, page)})
    tracks = SpotifyClient("tok", session=http).get_playlist_tracks("pl", cap=10)
    assert [t.title for t in tracks] == ["Song A"]


def test_playlist_id_is_escaped_in_url():
    url = f"{API_BASE}/playlists/a%2Fb%20c/tracks?limit=100"
    http = FakeHttp(gets={url: FakeResponse(200, {"items": [], "next": None})})
    assert SpotifyClient("tok", session=http).get_playlist_tracks("a/b c", cap=10) == []
    assert http.get_calls[0]["url"] == url
