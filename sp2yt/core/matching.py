"""
Match Engine

Resolves a source track into one destination video by searching the
catalog and scoring every candidate.

Scoring (highest wins, earlier candidate wins ties):
- +5: lower-cased title contains the whole lower-cased query
- +3: every whitespace token of the query occurs in the title
- +2: channel name ends with "topic" (auto-generated music channels)
- +1: title looks like an official video/audio/lyric upload
"""

import logging
import re
from typing import Protocol

from sp2yt.core.models import CandidateItem, MatchFailure, TrackDescriptor

logger = logging.getLogger(__name__)

OFFICIAL_PATTERN = re.compile(r"official.*video|audio|lyric")


class SearchClientProtocol(Protocol):
    def search_candidates(self, query: str, max_results: int) -> list[CandidateItem]: ...


def build_query(track: TrackDescriptor) -> str:
    """``"<title> - <artist1, artist2, ...>"``"""
    return f"{track.title} - {', '.join(track.artists)}"


def score_candidate(candidate: CandidateItem, query: str) -> int:
    title = candidate.title.lower()
    channel = candidate.channel.lower()
    q = query.lower()

    score = 0
    if q in title:
        score += 5
    if all(word in title for word in q.split()):
        score += 3
    if channel.endswith("topic"):
        score += 2
    if OFFICIAL_PATTERN.search(title):
        score += 1
    return score


def pick_best(candidates: list[CandidateItem], query: str) -> CandidateItem | None:
    best = None
    best_score = -1
    for candidate in candidates:
        score = score_candidate(candidate, query)
        if score > best_score:
            best, best_score = candidate, score
    if best is not None:
        logger.debug(f"Best match (score={best_score}): {best.title}")
    return best


class MatchEngine:
    def __init__(self, search_client: SearchClientProtocol, max_results: int = 5):
        self._client = search_client
        self._max_results = max_results

    def find_best_match(self, track: TrackDescriptor) -> str:
        """Return the best candidate's video id. Raises MatchFailure when nothing matches."""
        query = build_query(track)
        try:
            candidates = self._client.search_candidates(query, self._max_results)
        except Exception as e:
            raise MatchFailure(f"Search failed for '{query}': {e}") from e

        best = pick_best(candidates, query)
        if best is None:
            raise MatchFailure(f"No results for: {query}")
        return best.id
