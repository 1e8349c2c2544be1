from .base import BaseDirectory


class InMemoryDirectory(BaseDirectory):
    def __init__(self, members=None, candidates=None):
        self._members = {m.member_id: m for m in (members or [])}
        self._candidates = {c.member_id: c for c in (candidates or [])}

    def add_member(self, identity):
        self._members[identity.member_id] = identity

    def add_candidate(self, candidate):
        self._candidates[candidate.member_id] = candidate

    def resolve_member(self, member_id):
        return self._members.get(member_id)

    def searchable_journalists(self, beat_tags):
        tags = set(beat_tags or [])
        return [
            candidate
            for _member_id, candidate in sorted(self._candidates.items())
            if candidate.searchable and candidate.beat_categories & tags
        ]
