from datetime import timedelta
from unittest.mock import patch

from django.db import InterfaceError, OperationalError
from django.test import TestCase
from django.utils import timezone

from apps.directory.identities import (
    BeatExpertise,
    CompanyIdentity,
    JournalistCandidate,
    JournalistIdentity,
)
from apps.directory.models import JournalistBeat, JournalistProfile, Member
from apps.directory.providers.django_provider import DjangoDirectory
from apps.directory.providers.memory_provider import InMemoryDirectory
from apps.exclusives.errors import StoreUnavailable


class DjangoDirectoryTests(TestCase):
    def _journalist(self, email, beats, searchable=True, **profile_fields):
        member = Member.objects.create(
            name=email.split('@')[0],
            email=email,
            role=Member.Role.JOURNALIST,
            beat_tags=[category for category, _level in beats],
            publication='The Wire',
        )
        profile = JournalistProfile.objects.create(member=member, searchable=searchable, **profile_fields)
        for category, level in beats:
            JournalistBeat.objects.create(profile=profile, category=category, expertise_level=level)
        return member

    def test_resolve_company(self):
        company = Member.objects.create(
            name='Acme',
            email='press@acme.test',
            role=Member.Role.COMPANY,
            company_name='Acme Corp',
        )
        identity = DjangoDirectory().resolve_member(company.id)
        self.assertIsInstance(identity, CompanyIdentity)
        self.assertEqual(identity.company_name, 'Acme Corp')
        self.assertEqual(identity.role, 'company')

    def test_resolve_journalist_carries_beats_and_trust(self):
        member = self._journalist('ana@wire.test', [('Technology', 'expert')], trust_score=90, is_verified=True)
        identity = DjangoDirectory().resolve_member(member.id)
        self.assertIsInstance(identity, JournalistIdentity)
        self.assertEqual(identity.beat_tags, ('Technology',))
        self.assertEqual(identity.trust_score, 90)
        self.assertTrue(identity.is_verified)
        self.assertTrue(identity.covers_any(['Health', 'Technology']))
        self.assertFalse(identity.covers_any(['Health']))

    def test_resolve_missing_member(self):
        self.assertIsNone(DjangoDirectory().resolve_member(9999))

    def test_connectivity_errors_become_store_unavailable(self):
        with patch.object(Member.objects, 'select_related', side_effect=OperationalError('connection refused')):
            with self.assertRaises(StoreUnavailable):
                DjangoDirectory().resolve_member(1)
        with patch.object(JournalistProfile.objects, 'filter', side_effect=InterfaceError('connection closed')):
            with self.assertRaises(StoreUnavailable):
                DjangoDirectory().searchable_journalists(['Technology'])

    def test_searchable_journalists_filters_by_beat_and_visibility(self):
        tech = self._journalist('tech@wire.test', [('Technology', 'expert'), ('Finance', 'beginner')])
        self._journalist('health@wire.test', [('Health', 'expert')])
        self._journalist('hidden@wire.test', [('Technology', 'expert')], searchable=False)

        candidates = DjangoDirectory().searchable_journalists(['Technology'])

        self.assertEqual([c.member_id for c in candidates], [tech.id])
        candidate = candidates[0]
        self.assertEqual(
            candidate.beats,
            (BeatExpertise('Technology', 'expert'), BeatExpertise('Finance', 'beginner')),
        )
        self.assertEqual(candidate.beat_categories, {'Technology', 'Finance'})

    def test_searchable_journalists_without_tags(self):
        self._journalist('tech@wire.test', [('Technology', 'expert')])
        self.assertEqual(DjangoDirectory().searchable_journalists([]), [])


class InMemoryDirectoryTests(TestCase):
    def test_memory_directory_matches_django_semantics(self):
        now = timezone.now()
        visible = JournalistCandidate(
            member_id=2,
            name='Bo',
            beats=(BeatExpertise('Technology'),),
            last_active=now - timedelta(days=1),
        )
        hidden = JournalistCandidate(
            member_id=1,
            name='Al',
            beats=(BeatExpertise('Technology'),),
            searchable=False,
        )
        directory = InMemoryDirectory(
            members=[CompanyIdentity(member_id=5, name='Acme')],
            candidates=[visible, hidden],
        )
        self.assertEqual(directory.searchable_journalists(['Technology']), [visible])
        self.assertEqual(directory.resolve_member(5).name, 'Acme')
        self.assertIsNone(directory.resolve_member(6))
