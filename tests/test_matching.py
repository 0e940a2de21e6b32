import pytest

from fakes import FakeYouTube, candidate
from sp2yt.core.matching import MatchEngine, build_query, pick_best, score_candidate
from sp2yt.core.models import MatchFailure, TrackDescriptor


def test_build_query_joins_artists_in_source_order():
    track = TrackDescriptor("Under Pressure", ("Queen", "David Bowie"))
    assert build_query(track) == "Under Pressure - Queen, David Bowie"


def test_score_components():
    q = "Song A - Artist X"
    assert score_candidate(candidate("v", "Song A - Artist X"), q) == 5 + 3
    assert score_candidate(candidate("v", "Artist X - Song A"), q) == 3
    assert score_candidate(candidate("v", "Song A", "Artist X - Topic"), q) == 2
    assert score_candidate(candidate("v", "Something (Official Music Video)"), q) == 1
    assert score_candidate(candidate("v", "Song A - Artist X (Official Audio)", "Artist X - Topic"), q) == 11
    assert score_candidate(candidate("v", "unrelated"), q) == 0


def test_official_pattern_alternatives():
    q = "zzz"
    assert score_candidate(candidate("v", "lyric video"), q) == 1
    assert score_candidate(candidate("v", "audio only"), q) == 1
    assert score_candidate(candidate("v", "official live video"), q) == 1
    assert score_candidate(candidate("v", "official"), q) == 0


def test_topic_must_be_at_end_of_channel_name():
    q = "zzz"
    assert score_candidate(candidate("v", "t", "Topical Beats"), q) == 0
    assert score_candidate(candidate("v", "t", "Band - TOPIC"), q) == 2


def test_exact_containment_beats_partial():
    q = "Song A - Artist X"
    partial = candidate("partial", "Artist X Song A live")
    exact = candidate("exact", "Song A - Artist X")
    assert pick_best([partial, exact], q).id == "exact"


def test_ties_go_to_first_candidate():
    q = "Song A - Artist X"
    first = candidate("first", "nothing here")
    second = candidate("second", "nor here")
    assert pick_best([first, second], q).id == "first"


def test_find_best_match_is_deterministic():
    q = "Song A - Artist X"
    yt = FakeYouTube(results={q: [
        candidate("cover", "Song A cover"),
        candidate("topic", "Song A", "Artist X - Topic"),
        candidate("official", "Song A - Artist X (Official Video)"),
    ]})
    engine = MatchEngine(yt, max_results=5)
    track = TrackDescriptor("Song A", ("Artist X",))

    assert engine.find_best_match(track) == "official"
    assert engine.find_best_match(track) == "official"
    assert yt.searches == [(q, 5), (q, 5)]


def test_no_results_is_match_failure():
    engine = MatchEngine(FakeYouTube(), max_results=3)
    with pytest.raises(MatchFailure, match="No results"):
        engine.find_best_match(TrackDescriptor("Song B", ("Artist Y",)))


def test_search_error_is_match_failure():
    q = "Song B - Artist Y"
    engine = MatchEngine(FakeYouTube(search_errors=[q]))
    with pytest.raises(MatchFailure, match="Search failed"):
        engine.find_best_match(TrackDescriptor("Song B", ("Artist Y",)))
