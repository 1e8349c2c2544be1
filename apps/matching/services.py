from __future__ import annotations

from dataclasses import dataclass
from typing import List

from django.conf import settings
from django.utils import timezone

from apps.directory.identities import JournalistCandidate
from apps.exclusives.errors import NotFound
from apps.exclusives.stores import get_directory, get_store

from .scoring import MatchInputs, score_match


@dataclass
class JournalistMatch:
    journalist: JournalistCandidate
    score: int
    matching_beats: List[str]
    reasons: List[str]


def rank_candidates(beat_tags, candidates, now, limit=None):
    """Score candidates against beat_tags; highest score first, ties by ascending member id."""
    if limit is None:
        limit = settings.EXCLUSIVES_MATCH_LIMIT
    tags = set(beat_tags or [])
    matches = []
    for candidate in candidates:
        if not candidate.searchable or not (candidate.beat_categories & tags):
            continue
        result = score_match(MatchInputs.build(beat_tags, candidate), now)
        matches.append(
            JournalistMatch(
                journalist=candidate,
                score=result['score'],
                matching_beats=result['matching_beats'],
                reasons=result['reasons'],
            )
        )
    matches.sort(key=lambda m: (-m.score, m.journalist.member_id))
    return matches[:limit]


def get_matches(announcement_id, store=None, directory=None, now=None, limit=None):
    """Ranked journalists for an announcement. Ownership is checked by the caller."""
    store = store or get_store()
    directory = directory or get_directory()
    now = now or timezone.now()

    announcement = store.get_announcement(announcement_id)
    if announcement is None:
        raise NotFound()

    candidates = directory.searchable_journalists(announcement.journalist_beat_tags)
    return rank_candidates(announcement.journalist_beat_tags, candidates, now, limit=limit)
