"""Announcement state machine.

    awaiting_claim -> claimed -> published -> archived

Only the first two transitions are driven by this package; ``archived`` is
left to external housekeeping. A claimant is attached exactly while the
announcement is ``claimed`` or ``published``.
"""
from .errors import InvalidTransition
from .models import AnnouncementStatus

AWAITING_CLAIM = AnnouncementStatus.AWAITING_CLAIM.value
CLAIMED = AnnouncementStatus.CLAIMED.value
PUBLISHED = AnnouncementStatus.PUBLISHED.value
ARCHIVED = AnnouncementStatus.ARCHIVED.value

TRANSITIONS = {
    AWAITING_CLAIM: {CLAIMED},
    CLAIMED: {PUBLISHED},
    PUBLISHED: {ARCHIVED},
    ARCHIVED: set(),
}

CLAIMANT_STATUSES = frozenset({CLAIMED, PUBLISHED})


def can_transition(current, target):
    return target in TRANSITIONS.get(current, set())


def require_transition(current, target):
    if not can_transition(current, target):
        raise InvalidTransition(f"Cannot move announcement from {current} to {target}.")


def claimant_consistent(status, claimant_id):
    return (claimant_id is not None) == (status in CLAIMANT_STATUSES)
