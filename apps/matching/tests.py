from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase

from apps.directory.identities import BeatExpertise, JournalistCandidate
from apps.directory.models import JournalistBeat, JournalistProfile, Member
from apps.directory.providers.memory_provider import InMemoryDirectory
from apps.exclusives.errors import NotFound
from apps.exclusives.models import Announcement
from apps.exclusives.stores.memory_store import InMemoryExclusivesStore

from .scoring import MatchInputs, score_match
from .services import get_matches, rank_candidates

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=dt_timezone.utc)


def _candidate(member_id, **overrides):
    fields = {
        'member_id': member_id,
        'name': f"Journalist {member_id}",
        'beats': (BeatExpertise('Technology', 'intermediate'),),
        'response_time': 'same-day',
        'exclusive_interest': 'medium',
        'is_verified': False,
        'trust_score': 50,
        'last_active': NOW - timedelta(days=60),
        'profile_completeness': 0,
    }
    fields.update(overrides)
    return JournalistCandidate(**fields)


class ScoreMatchTests(SimpleTestCase):
    def test_reference_scenario_scores_68(self):
        candidate = _candidate(
            1,
            beats=(BeatExpertise('Technology', 'expert'),),
            response_time='immediate',
            exclusive_interest='high',
            trust_score=90,
            last_active=NOW,
            profile_completeness=80,
        )
        result = score_match(MatchInputs.build(['Technology'], candidate), NOW)

        self.assertEqual(result['score'], 68)
        self.assertEqual(result['matching_beats'], ['Technology'])
        self.assertCountEqual(
            result['reasons'],
            [
                'Covers Technology',
                'Expert-level knowledge in relevant beats',
                'Fast response time',
                'High interest in exclusives',
                'High trust score',
            ],
        )

    def test_beat_points_stack_per_matching_beat(self):
        candidate = _candidate(
            1,
            beats=(
                BeatExpertise('Technology', 'expert'),
                BeatExpertise('Finance', 'expert'),
                BeatExpertise('Health', 'beginner'),
                BeatExpertise('Sports', 'expert'),
            ),
            trust_score=0,
        )
        result = score_match(MatchInputs.build(['Technology', 'Finance', 'Health'], candidate), NOW)
        # 3 beats * 10 + 2 expert * 10 + same-day 10 + medium 10
        self.assertEqual(result['score'], 70)
        self.assertEqual(result['matching_beats'], ['Technology', 'Finance', 'Health'])
        self.assertIn('Covers Technology, Finance, Health', result['reasons'])

    def test_preference_points(self):
        def score(**overrides):
            candidate = _candidate(1, trust_score=0, **overrides)
            return score_match(MatchInputs.build(['Technology'], candidate), NOW)['score']

        self.assertEqual(score(response_time='immediate', exclusive_interest='low'), 10 + 15 + 5)
        self.assertEqual(score(response_time='within-week', exclusive_interest='high'), 10 + 5 + 15)
        self.assertEqual(score(response_time='whenever', exclusive_interest='unknown'), 10 + 0 + 5)

    def test_recency_thresholds(self):
        def recency(days):
            candidate = _candidate(1, trust_score=0, last_active=NOW - timedelta(days=days))
            return score_match(MatchInputs.build(['Technology'], candidate), NOW)['score'] - 30

        self.assertEqual(recency(0), 5)
        self.assertEqual(recency(7), 5)
        self.assertEqual(recency(8), 3)
        self.assertEqual(recency(30), 3)
        self.assertEqual(recency(31), 0)

        never = _candidate(1, trust_score=0, last_active=None)
        self.assertEqual(score_match(MatchInputs.build(['Technology'], never), NOW)['score'], 30)

    def test_rounds_half_up(self):
        # 10 + 10 + 10 + trust 0.5 = 30.5
        candidate = _candidate(1, trust_score=5)
        self.assertEqual(score_match(MatchInputs.build(['Technology'], candidate), NOW)['score'], 31)

    def test_reasons_only_when_applicable(self):
        candidate = _candidate(1, is_verified=True, trust_score=80)
        reasons = score_match(MatchInputs.build(['Technology'], candidate), NOW)['reasons']
        self.assertEqual(reasons, ['Covers Technology', 'Verified journalist'])


class RankCandidatesTests(SimpleTestCase):
    def test_ranking_is_deterministic_with_id_tiebreak(self):
        candidates = [_candidate(i) for i in (5, 3, 9)] + [_candidate(7, trust_score=100)]
        first = rank_candidates(['Technology'], candidates, NOW)
        second = rank_candidates(['Technology'], list(reversed(candidates)), NOW)

        self.assertEqual([m.journalist.member_id for m in first], [7, 3, 5, 9])
        self.assertEqual(
            [(m.journalist.member_id, m.score) for m in first],
            [(m.journalist.member_id, m.score) for m in second],
        )

    def test_higher_trust_never_ranks_lower(self):
        others = [_candidate(i, trust_score=t) for i, t in [(1, 10), (2, 45), (3, 70), (4, 95)]]
        previous_position = None
        previous_score = None
        for trust in range(0, 101, 5):
            ranked = rank_candidates(['Technology'], others + [_candidate(9, trust_score=trust)], NOW)
            ids = [m.journalist.member_id for m in ranked]
            position = ids.index(9)
            score = ranked[position].score
            if previous_position is not None:
                self.assertLessEqual(position, previous_position)
                self.assertGreaterEqual(score, previous_score)
            previous_position = position
            previous_score = score

    def test_pool_excludes_non_matching_and_hidden(self):
        candidates = [
            _candidate(1),
            _candidate(2, beats=(BeatExpertise('Health', 'expert'),)),
            _candidate(3, searchable=False),
        ]
        ranked = rank_candidates(['Technology'], candidates, NOW)
        self.assertEqual([m.journalist.member_id for m in ranked], [1])

    def test_limit_defaults_to_twenty(self):
        candidates = [_candidate(i) for i in range(1, 31)]
        ranked = rank_candidates(['Technology'], candidates, NOW)
        self.assertEqual(len(ranked), 20)
        self.assertEqual(ranked[0].journalist.member_id, 1)
        self.assertEqual(len(rank_candidates(['Technology'], candidates, NOW, limit=5)), 5)


class GetMatchesTests(TestCase):
    def _journalist(self, email, beats, **profile_fields):
        member = Member.objects.create(
            name=email.split('@')[0],
            email=email,
            role=Member.Role.JOURNALIST,
            beat_tags=[category for category, _level in beats],
        )
        profile = JournalistProfile.objects.create(member=member, **profile_fields)
        for category, level in beats:
            JournalistBeat.objects.create(profile=profile, category=category, expertise_level=level)
        return member

    def setUp(self):
        self.company = Member.objects.create(name='Acme', email='pr@acme.test', role=Member.Role.COMPANY)
        self.announcement = Announcement.objects.create(
            company=self.company,
            title='Launch',
            summary='s',
            full_content='c',
            journalist_beat_tags=['Technology'],
            embargo_at=NOW + timedelta(days=1),
            plan='Premium',
            fee=Decimal('1000.00'),
        )

    def test_ranks_directory_journalists(self):
        star = self._journalist(
            'star@wire.test',
            [('Technology', 'expert')],
            response_time='immediate',
            exclusive_interest='high',
            trust_score=90,
            last_active=NOW,
            profile_completeness=80,
            is_verified=True,
        )
        regular = self._journalist('regular@wire.test', [('Technology', 'beginner')], last_active=NOW)
        self._journalist('health@wire.test', [('Health', 'expert')])

        matches = get_matches(self.announcement.id, now=NOW)

        self.assertEqual([m.journalist.member_id for m in matches], [star.id, regular.id])
        self.assertEqual(matches[0].score, 68)
        self.assertIn('Verified journalist', matches[0].reasons)
        self.assertEqual(get_matches(self.announcement.id, now=NOW), matches)

    def test_missing_announcement(self):
        with self.assertRaises(NotFound):
            get_matches(9999, now=NOW)

    def test_works_against_memory_collaborators(self):
        store = InMemoryExclusivesStore()
        announcement = store.create_announcement(
            1,
            {
                'title': 't',
                'summary': 's',
                'full_content': 'c',
                'journalist_beat_tags': ['Technology'],
                'embargo_at': NOW,
                'plan': 'Basic',
                'fee': '10',
            },
            NOW,
        )
        directory = InMemoryDirectory(candidates=[_candidate(4), _candidate(2)])
        matches = get_matches(announcement.id, store=store, directory=directory, now=NOW)
        self.assertEqual([m.journalist.member_id for m in matches], [2, 4])

    def test_match_journalists_command(self):
        self._journalist('star@wire.test', [('Technology', 'expert')], last_active=NOW)
        out = StringIO()
        call_command('match_journalists', str(self.announcement.id), stdout=out)
        self.assertIn('1. star', out.getvalue())

        with self.assertRaises(CommandError):
            call_command('match_journalists', '9999', stdout=StringIO())
