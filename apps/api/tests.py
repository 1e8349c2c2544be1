from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import OperationalError
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.directory.models import JournalistBeat, JournalistProfile, Member
from apps.payments.models import PaymentSummary


class HealthEndpointTests(APITestCase):
    def test_health_endpoint(self):
        response = self.client.get('/api/v1/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'status': 'ok'})


class MetaEndpointTests(APITestCase):
    def test_meta_endpoint(self):
        response = self.client.get('/api/v1/meta')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'app': 'ExclusiveWire Core', 'version': '0.1.0'})


class ExclusivesApiTests(APITestCase):
    def _member(self, username, role, beats=(), **profile_fields):
        user = get_user_model().objects.create_user(username=username, password='secret')
        member = Member.objects.create(
            user=user,
            name=username,
            email=f"{username}@example.test",
            role=role,
            beat_tags=[category for category, _level in beats],
        )
        if role == Member.Role.JOURNALIST:
            profile = JournalistProfile.objects.create(member=member, **profile_fields)
            for category, level in beats:
                JournalistBeat.objects.create(profile=profile, category=category, expertise_level=level)
        return user, member

    def setUp(self):
        self.company_user, self.company = self._member('acme', Member.Role.COMPANY)
        self.j1_user, self.j1 = self._member(
            'j1',
            Member.Role.JOURNALIST,
            beats=[('Technology', 'expert')],
            response_time='immediate',
            exclusive_interest='high',
            trust_score=90,
            profile_completeness=80,
            last_active=timezone.now(),
        )
        self.j2_user, self.j2 = self._member('j2', Member.Role.JOURNALIST, beats=[('Technology', 'beginner')])
        self.health_user, self.health = self._member('health', Member.Role.JOURNALIST, beats=[('Health', 'expert')])

    def _as(self, user):
        self.client.force_authenticate(user=user)

    def _create_announcement(self, plan='Premium', fee='1000.00'):
        self._as(self.company_user)
        response = self.client.post(
            '/api/v1/announcements',
            {
                'title': 'Acme launches quantum router',
                'summary': 'Summary',
                'full_content': 'Body',
                'journalist_beat_tags': ['Technology'],
                'industry_tags': ['Networking'],
                'embargo_at': (timezone.now() + timedelta(days=2)).isoformat(),
                'plan': plan,
                'fee': fee,
            },
            format='json',
        )
        self.assertEqual(response.status_code, 201, response.content)
        return response.json()['id']

    def test_requires_authentication(self):
        response = self.client.get('/api/v1/announcements')
        self.assertEqual(response.status_code, 401)

    def test_create_rejects_unknown_plan_and_journalists(self):
        self._as(self.company_user)
        response = self.client.post(
            '/api/v1/announcements',
            {
                'title': 't',
                'summary': 's',
                'full_content': 'c',
                'embargo_at': timezone.now().isoformat(),
                'plan': 'Gold',
                'fee': '10',
            },
            format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('plan', response.json())

        self._as(self.j1_user)
        response = self.client.post(
            '/api/v1/announcements',
            {
                'title': 't',
                'summary': 's',
                'full_content': 'c',
                'embargo_at': timezone.now().isoformat(),
                'plan': 'Basic',
                'fee': '10',
            },
            format='json',
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['code'], 'forbidden')

    def test_listing_by_role(self):
        announcement_id = self._create_announcement()

        self._as(self.company_user)
        self.assertEqual([a['id'] for a in self.client.get('/api/v1/announcements').json()], [announcement_id])

        self._as(self.j1_user)
        self.assertEqual([a['id'] for a in self.client.get('/api/v1/announcements').json()], [announcement_id])

        self._as(self.health_user)
        self.assertEqual(self.client.get('/api/v1/announcements').json(), [])

    def test_claim_publish_flow(self):
        announcement_id = self._create_announcement()

        self._as(self.j1_user)
        response = self.client.post(f'/api/v1/announcements/{announcement_id}/claim')
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload['announcement']['status'], 'claimed')
        self.assertEqual(payload['announcement']['claimant_id'], self.j1.id)
        chat_id = payload['chat_id']

        self._as(self.j2_user)
        response = self.client.post(f'/api/v1/announcements/{announcement_id}/claim')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['code'], 'already_claimed')

        self._as(self.health_user)
        response = self.client.post(f'/api/v1/announcements/{announcement_id}/claim')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['code'], 'no_matching_beat')

        self._as(self.company_user)
        chat = self.client.get(f'/api/v1/announcements/{announcement_id}/chat').json()
        self.assertEqual(chat['id'], chat_id)
        self.assertEqual(len(chat['messages']), 1)

        self._as(self.j2_user)
        response = self.client.post(
            f'/api/v1/announcements/{announcement_id}/publish',
            {'published_url': 'https://news.test/story'},
            format='json',
        )
        self.assertEqual(response.status_code, 403)

        self._as(self.j1_user)
        response = self.client.post(
            f'/api/v1/announcements/{announcement_id}/publish',
            {'published_url': 'https://news.test/story'},
            format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['announcement']['status'], 'published')

        response = self.client.post(
            f'/api/v1/announcements/{announcement_id}/publish',
            {'published_url': 'https://news.test/story'},
            format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['code'], 'invalid_transition')

        payment = PaymentSummary.objects.get(announcement_id=announcement_id)
        self.assertEqual(payment.status, PaymentSummary.Status.COMPLETED)
        self.assertEqual(payment.payout_to_id, self.j1.id)
        self.assertEqual(payment.payout_amount, Decimal('300.00'))

    def test_missing_announcement_is_404(self):
        self._as(self.j1_user)
        response = self.client.post('/api/v1/announcements/9999/claim')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['code'], 'not_found')

    def test_matches_for_owner_only(self):
        announcement_id = self._create_announcement()

        self._as(self.company_user)
        response = self.client.get(f'/api/v1/announcements/{announcement_id}/matches')
        self.assertEqual(response.status_code, 200)
        matches = response.json()
        self.assertEqual([m['journalist']['member_id'] for m in matches], [self.j1.id, self.j2.id])
        self.assertEqual(matches[0]['score'], 68)
        self.assertEqual(matches[0]['matching_beats'], ['Technology'])

        self._as(self.j1_user)
        response = self.client.get(f'/api/v1/announcements/{announcement_id}/matches')
        self.assertEqual(response.status_code, 403)

        _other_user, _other = self._member('rival', Member.Role.COMPANY)
        self._as(_other_user)
        response = self.client.get(f'/api/v1/announcements/{announcement_id}/matches')
        self.assertEqual(response.status_code, 403)

    def test_chat_post_and_detail_access(self):
        announcement_id = self._create_announcement()

        self._as(self.company_user)
        response = self.client.post(
            f'/api/v1/announcements/{announcement_id}/chat', {'message': 'Hello'}, format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual([m['text'] for m in response.json()['messages']], ['Hello'])

        self._as(self.j2_user)
        response = self.client.post(
            f'/api/v1/announcements/{announcement_id}/chat', {'message': 'Hi'}, format='json'
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.get(f'/api/v1/announcements/{announcement_id}').status_code, 200)

        self._as(self.health_user)
        self.assertEqual(self.client.get(f'/api/v1/announcements/{announcement_id}').status_code, 403)

    def test_store_outage_is_503(self):
        self._as(self.j1_user)
        with patch(
            'apps.exclusives.stores.django_store.Announcement.objects.filter',
            side_effect=OperationalError('connection refused'),
        ):
            response = self.client.post('/api/v1/announcements/1/claim')
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['code'], 'store_unavailable')

    def test_directory_outage_is_503(self):
        self._as(self.company_user)
        with patch.object(Member.objects, 'select_related', side_effect=OperationalError('connection refused')):
            response = self.client.get('/api/v1/announcements')
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['code'], 'store_unavailable')

    def test_user_without_member_is_forbidden(self):
        user = get_user_model().objects.create_user(username='ghost', password='secret')
        self._as(user)
        response = self.client.get('/api/v1/announcements')
        self.assertEqual(response.status_code, 403)
