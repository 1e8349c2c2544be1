from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from apps.directory.identities import BeatExpertise

BEAT_POINTS = 10
EXPERT_BEAT_POINTS = 10
RESPONSE_TIME_POINTS = {
    'immediate': 15,
    'same-day': 10,
    'within-week': 5,
}
EXCLUSIVE_INTEREST_POINTS = {
    'high': 15,
    'medium': 10,
}
EXCLUSIVE_INTEREST_FALLBACK = 5
TRUST_WEIGHT = 0.1
COMPLETENESS_WEIGHT = 0.05
RECENT_DAYS = 7
RECENT_POINTS = 5
ACTIVE_DAYS = 30
ACTIVE_POINTS = 3
HIGH_TRUST_THRESHOLD = 80


@dataclass(frozen=True)
class MatchInputs:
    beat_tags: Tuple[str, ...]
    beats: Tuple[BeatExpertise, ...]
    response_time: str
    exclusive_interest: str
    is_verified: bool
    trust_score: float
    last_active: Optional[datetime]
    profile_completeness: float

    @classmethod
    def build(cls, beat_tags, candidate):
        return cls(
            beat_tags=tuple(beat_tags or ()),
            beats=tuple(candidate.beats),
            response_time=candidate.response_time,
            exclusive_interest=candidate.exclusive_interest,
            is_verified=candidate.is_verified,
            trust_score=candidate.trust_score or 0,
            last_active=candidate.last_active,
            profile_completeness=candidate.profile_completeness or 0,
        )


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def _recency_points(last_active, now):
    if last_active is None:
        return 0
    days_since = (now - last_active).total_seconds() / 86400
    if days_since <= RECENT_DAYS:
        return RECENT_POINTS
    if days_since <= ACTIVE_DAYS:
        return ACTIVE_POINTS
    return 0


def score_match(inputs, now):
    tags = set(inputs.beat_tags)
    matching = [beat for beat in inputs.beats if beat.category in tags]
    expert = [beat for beat in matching if beat.expertise_level == 'expert']

    score = len(matching) * BEAT_POINTS
    score += len(expert) * EXPERT_BEAT_POINTS
    score += RESPONSE_TIME_POINTS.get(inputs.response_time, 0)
    score += EXCLUSIVE_INTEREST_POINTS.get(inputs.exclusive_interest, EXCLUSIVE_INTEREST_FALLBACK)
    score += inputs.trust_score * TRUST_WEIGHT
    score += _recency_points(inputs.last_active, now)
    score += inputs.profile_completeness * COMPLETENESS_WEIGHT

    matching_beats = [beat.category for beat in matching]

    reasons = []
    if matching_beats:
        reasons.append(f"Covers {', '.join(matching_beats)}")
    if expert:
        reasons.append('Expert-level knowledge in relevant beats')
    if inputs.response_time == 'immediate':
        reasons.append('Fast response time')
    if inputs.exclusive_interest == 'high':
        reasons.append('High interest in exclusives')
    if inputs.is_verified:
        reasons.append('Verified journalist')
    if inputs.trust_score > HIGH_TRUST_THRESHOLD:
        reasons.append('High trust score')

    return {
        'score': _round_half_up(score),
        'matching_beats': matching_beats,
        'reasons': reasons,
    }
