from apps.directory.identities import (
    BeatExpertise,
    CompanyIdentity,
    JournalistCandidate,
    JournalistIdentity,
)
from apps.directory.models import JournalistProfile, Member
from apps.exclusives.errors import translate_db_errors

from .base import BaseDirectory


def _to_candidate(profile):
    member = profile.member
    return JournalistCandidate(
        member_id=member.id,
        name=member.name,
        publication=member.publication,
        beats=tuple(
            BeatExpertise(category=beat.category, expertise_level=beat.expertise_level)
            for beat in profile.beats.all()
        ),
        response_time=profile.response_time,
        exclusive_interest=profile.exclusive_interest,
        is_verified=profile.is_verified,
        trust_score=profile.trust_score,
        last_active=profile.last_active,
        profile_completeness=profile.profile_completeness,
        searchable=profile.searchable,
    )


class DjangoDirectory(BaseDirectory):
    @translate_db_errors
    def resolve_member(self, member_id):
        member = (
            Member.objects.select_related('journalist_profile')
            .filter(pk=member_id)
            .first()
        )
        if member is None:
            return None

        if member.role == Member.Role.COMPANY:
            return CompanyIdentity(
                member_id=member.id,
                name=member.name,
                company_name=member.company_name,
            )

        profile = getattr(member, 'journalist_profile', None)
        return JournalistIdentity(
            member_id=member.id,
            name=member.name,
            beat_tags=tuple(member.beat_tags or ()),
            publication=member.publication,
            is_verified=profile.is_verified if profile else False,
            trust_score=profile.trust_score if profile else 50,
        )

    @translate_db_errors
    def searchable_journalists(self, beat_tags):
        tags = list(beat_tags or [])
        if not tags:
            return []
        profiles = (
            JournalistProfile.objects.filter(
                searchable=True,
                member__role=Member.Role.JOURNALIST,
                beats__category__in=tags,
            )
            .select_related('member')
            .prefetch_related('beats')
            .distinct()
            .order_by('member_id')
        )
        return [_to_candidate(profile) for profile in profiles]
