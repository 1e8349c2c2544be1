"""Read-only views of directory members handed to the exclusives core.

A resolved member is either a ``CompanyIdentity`` or a ``JournalistIdentity``;
callers dispatch on the type instead of comparing role strings.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union

COMPANY = 'company'
JOURNALIST = 'journalist'


@dataclass(frozen=True)
class CompanyIdentity:
    member_id: int
    name: str
    company_name: str = ''

    role = COMPANY


@dataclass(frozen=True)
class JournalistIdentity:
    member_id: int
    name: str
    beat_tags: Tuple[str, ...] = ()
    publication: str = ''
    is_verified: bool = False
    trust_score: int = 50

    role = JOURNALIST

    def covers_any(self, tags) -> bool:
        return bool(set(self.beat_tags) & set(tags or ()))


Identity = Union[CompanyIdentity, JournalistIdentity]


@dataclass(frozen=True)
class BeatExpertise:
    category: str
    expertise_level: str = 'intermediate'


@dataclass(frozen=True)
class JournalistCandidate:
    member_id: int
    name: str
    publication: str = ''
    beats: Tuple[BeatExpertise, ...] = ()
    response_time: str = 'same-day'
    exclusive_interest: str = 'high'
    is_verified: bool = False
    trust_score: float = 50
    last_active: Optional[datetime] = None
    profile_completeness: float = 0
    searchable: bool = True

    @property
    def beat_categories(self):
        return {beat.category for beat in self.beats}
