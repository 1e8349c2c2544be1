import threading
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

import requests
from django.core.exceptions import ValidationError
from django.db import IntegrityError, OperationalError, transaction
from django.test import TestCase, override_settings

from apps.directory.identities import CompanyIdentity, JournalistIdentity
from apps.directory.models import Member
from apps.directory.providers.django_provider import DjangoDirectory
from apps.directory.providers.memory_provider import InMemoryDirectory
from apps.exclusives.errors import (
    AlreadyClaimed,
    Forbidden,
    InvalidPlan,
    InvalidTransition,
    NoMatchingBeat,
    NotFound,
    StoreUnavailable,
)
from apps.exclusives.lifecycle import can_transition, claimant_consistent, require_transition
from apps.exclusives.models import Announcement, ChatMessage, ChatThread, Claim
from apps.exclusives.services import (
    CLAIM_SEED_MESSAGE,
    claim_exclusive,
    create_announcement,
    get_announcement_detail,
    get_chat,
    list_company_announcements,
    list_open_announcements,
    post_chat_message,
    publish_announcement,
)
from apps.exclusives.stores.django_store import DjangoExclusivesStore
from apps.exclusives.stores.memory_store import InMemoryExclusivesStore
from apps.exclusives.tasks import deliver_lifecycle_event
from apps.payments.models import PaymentSummary

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=dt_timezone.utc)


def _fields(**overrides):
    fields = {
        'title': 'Acme launches quantum router',
        'summary': 'A new router.',
        'full_content': 'Full press release body.',
        'attachments': ['press-kit.zip'],
        'industry_tags': ['Networking'],
        'journalist_beat_tags': ['Technology'],
        'embargo_at': NOW + timedelta(days=2),
        'plan': 'Premium',
        'fee': Decimal('1000.00'),
    }
    fields.update(overrides)
    return fields


class LifecycleTests(TestCase):
    def test_allowed_transitions(self):
        self.assertTrue(can_transition('awaiting_claim', 'claimed'))
        self.assertTrue(can_transition('claimed', 'published'))
        self.assertFalse(can_transition('awaiting_claim', 'published'))
        self.assertFalse(can_transition('published', 'claimed'))
        self.assertFalse(can_transition('archived', 'claimed'))

    def test_require_transition_raises(self):
        with self.assertRaises(InvalidTransition):
            require_transition('published', 'published')

    def test_claimant_consistency(self):
        self.assertTrue(claimant_consistent('awaiting_claim', None))
        self.assertTrue(claimant_consistent('claimed', 4))
        self.assertFalse(claimant_consistent('published', None))
        self.assertFalse(claimant_consistent('awaiting_claim', 4))


class InMemoryClaimLifecycleTests(TestCase):
    def setUp(self):
        self.store = InMemoryExclusivesStore()
        self.directory = InMemoryDirectory(
            members=[
                CompanyIdentity(member_id=1, name='Acme'),
                CompanyIdentity(member_id=2, name='Other Co'),
                JournalistIdentity(member_id=10, name='J1', beat_tags=('Technology',)),
                JournalistIdentity(member_id=11, name='J2', beat_tags=('Technology', 'Finance')),
                JournalistIdentity(member_id=12, name='Health Desk', beat_tags=('Health',)),
            ]
        )

    def _create(self, **overrides):
        return create_announcement(
            1, _fields(**overrides), store=self.store, directory=self.directory, now=NOW
        )

    def _claim(self, announcement_id, journalist_id):
        return claim_exclusive(
            announcement_id, journalist_id, store=self.store, directory=self.directory, now=NOW
        )

    def _publish(self, announcement_id, caller_id, url='https://news.test/story'):
        return publish_announcement(
            announcement_id, caller_id, url, store=self.store, directory=self.directory, now=NOW
        )

    def _assert_invariant(self, announcement_id):
        record = self.store.get_announcement(announcement_id)
        self.assertTrue(claimant_consistent(record.status, record.claimant_id))

    def test_only_companies_create(self):
        with self.assertRaises(Forbidden):
            create_announcement(10, _fields(), store=self.store, directory=self.directory, now=NOW)

    def test_create_opens_pending_payment(self):
        announcement = self._create()
        self.assertEqual(announcement.status, 'awaiting_claim')
        payment = self.store.get_payment_summary(announcement.id)
        self.assertEqual(payment.amount, Decimal('1000.00'))
        self.assertEqual(payment.status, 'pending')
        self.assertIsNone(payment.payout_to_id)
        self.assertEqual(payment.payout_split, 30)
        self.assertIsNone(payment.payout_amount)

        basic = self._create(plan='Basic')
        self.assertEqual(self.store.get_payment_summary(basic.id).payout_split, 0)

    def test_unknown_plan_is_rejected_at_creation(self):
        with self.assertRaises(InvalidPlan):
            self._create(plan='Gold')
        self.assertEqual(list_company_announcements(1, store=self.store, directory=self.directory), [])

    def test_returned_records_are_copies(self):
        announcement = self._create()
        announcement.journalist_beat_tags.append('Health')
        announcement.attachments.clear()

        stored = self.store.get_announcement(announcement.id)
        self.assertEqual(stored.journalist_beat_tags, ['Technology'])
        self.assertEqual(stored.attachments, ['press-kit.zip'])
        with self.assertRaises(NoMatchingBeat):
            self._claim(announcement.id, 12)

    def test_full_lifecycle_keeps_claimant_invariant(self):
        announcement = self._create()
        self._assert_invariant(announcement.id)

        outcome = self._claim(announcement.id, 10)
        self.assertEqual(outcome.announcement.status, 'claimed')
        self.assertEqual(outcome.announcement.claimant_id, 10)
        self.assertEqual(outcome.claim.status, 'pending')
        self._assert_invariant(announcement.id)

        thread = self.store.get_chat_thread(announcement.id)
        self.assertEqual(thread.id, outcome.chat_id)
        self.assertEqual([(m.sender_id, m.text) for m in thread.messages], [(10, CLAIM_SEED_MESSAGE)])

        published = self._publish(announcement.id, 10)
        self.assertEqual(published.status, 'published')
        self.assertEqual(published.claimant_id, 10)
        self._assert_invariant(announcement.id)

        claim = self.store.get_claim(announcement.id)
        self.assertEqual(claim.status, 'published')
        self.assertEqual(claim.published_url, 'https://news.test/story')

        payment = self.store.get_payment_summary(announcement.id)
        self.assertEqual(payment.payout_to_id, 10)
        self.assertEqual(payment.payout_split, 30)
        self.assertEqual(payment.payout_amount, Decimal('300.00'))
        self.assertEqual(payment.status, 'completed')

    def test_second_claim_is_already_claimed(self):
        announcement = self._create()
        self._claim(announcement.id, 10)
        with self.assertRaises(AlreadyClaimed):
            self._claim(announcement.id, 11)
        self.assertEqual(self.store.get_announcement(announcement.id).claimant_id, 10)
        self.assertEqual(self.store.claim_count(), 1)

    def test_eligibility_gate_applies_before_and_after_claim(self):
        announcement = self._create()
        with self.assertRaises(NoMatchingBeat):
            self._claim(announcement.id, 12)
        self.assertEqual(self.store.get_announcement(announcement.id).status, 'awaiting_claim')

        self._claim(announcement.id, 10)
        with self.assertRaises(NoMatchingBeat):
            self._claim(announcement.id, 12)

    def test_claim_rejections(self):
        announcement = self._create()
        with self.assertRaises(Forbidden):
            self._claim(announcement.id, 1)
        with self.assertRaises(NotFound):
            self._claim(9999, 10)
        with self.assertRaises(NotFound):
            self._claim(announcement.id, 404)
        self.assertEqual(self.store.claim_count(), 0)
        self.assertEqual(self.store.thread_count(), 0)

    def test_concurrent_claims_have_single_winner(self):
        journalists = [
            JournalistIdentity(member_id=100 + i, name=f"J{i}", beat_tags=('Technology',))
            for i in range(8)
        ]
        for journalist in journalists:
            self.directory.add_member(journalist)
        announcement = self._create()

        barrier = threading.Barrier(len(journalists))
        results = []
        results_lock = threading.Lock()

        def attempt(journalist_id):
            barrier.wait()
            try:
                self._claim(announcement.id, journalist_id)
                outcome = 'won'
            except AlreadyClaimed:
                outcome = 'lost'
            with results_lock:
                results.append(outcome)

        with patch('apps.exclusives.services.transaction.on_commit') as on_commit:
            threads = [threading.Thread(target=attempt, args=(j.member_id,)) for j in journalists]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        self.assertEqual(len(results), len(journalists))
        self.assertEqual(results.count('won'), 1)
        self.assertEqual(results.count('lost'), len(journalists) - 1)
        self.assertEqual(self.store.claim_count(), 1)
        self.assertEqual(self.store.thread_count(), 1)
        self.assertEqual(len(self.store.get_chat_thread(announcement.id).messages), 1)
        self.assertEqual(on_commit.call_count, 1)
        self._assert_invariant(announcement.id)

    def test_stale_read_loses_at_conditional_write(self):
        announcement = self._create()
        stale = self.store.get_announcement(announcement.id)
        self._claim(announcement.id, 10)

        with patch.object(self.store, 'get_announcement', return_value=stale):
            with self.assertRaises(AlreadyClaimed):
                self._claim(announcement.id, 11)

        self.assertEqual(self.store.claim_count(), 1)
        self.assertEqual(len(self.store.get_chat_thread(announcement.id).messages), 1)

    def test_publish_twice_pays_out_once(self):
        announcement = self._create()
        self._claim(announcement.id, 10)
        self._publish(announcement.id, 10)
        first_payment = self.store.get_payment_summary(announcement.id)

        with self.assertRaises(InvalidTransition):
            self._publish(announcement.id, 1)
        self.assertEqual(self.store.get_payment_summary(announcement.id), first_payment)

    def test_stale_publish_loses_at_conditional_write(self):
        announcement = self._create()
        self._claim(announcement.id, 10)
        stale = self.store.get_announcement(announcement.id)
        self._publish(announcement.id, 10)
        self.store.update_payment_summary(announcement.id, {'status': 'pending'})

        with patch.object(self.store, 'get_announcement', return_value=stale):
            with self.assertRaises(InvalidTransition):
                self._publish(announcement.id, 1)
        self.assertEqual(self.store.get_payment_summary(announcement.id).status, 'pending')

    def test_basic_plan_leaves_payment_pending(self):
        announcement = self._create(plan='Basic', fee=Decimal('250.00'))
        self._claim(announcement.id, 10)
        self._publish(announcement.id, 1)
        payment = self.store.get_payment_summary(announcement.id)
        self.assertEqual(payment.status, 'pending')
        self.assertIsNone(payment.payout_to_id)
        self.assertIsNone(payment.payout_amount)

    def test_publish_authorization(self):
        announcement = self._create()
        with self.assertRaises(Forbidden):
            self._publish(announcement.id, 10)
        with self.assertRaises(InvalidTransition):
            self._publish(announcement.id, 1)

        self._claim(announcement.id, 10)
        with self.assertRaises(Forbidden):
            self._publish(announcement.id, 11)
        with self.assertRaises(Forbidden):
            self._publish(announcement.id, 2)
        with self.assertRaises(NotFound):
            self._publish(9999, 10)
        self.assertEqual(self.store.get_announcement(announcement.id).status, 'claimed')

    def test_open_announcements_respect_beats_and_embargo(self):
        visible = self._create()
        self._create(journalist_beat_tags=['Health'])
        self._create(embargo_at=NOW - timedelta(minutes=1))
        claimed = self._create(title='Claimed already')
        self._claim(claimed.id, 11)

        items = list_open_announcements(10, store=self.store, directory=self.directory, now=NOW)
        self.assertEqual([a.id for a in items], [visible.id])
        with self.assertRaises(Forbidden):
            list_open_announcements(1, store=self.store, directory=self.directory, now=NOW)

    def test_company_listing_and_detail_visibility(self):
        announcement = self._create()
        items = list_company_announcements(1, store=self.store, directory=self.directory)
        self.assertEqual([a.id for a in items], [announcement.id])
        self.assertEqual(list_company_announcements(2, store=self.store, directory=self.directory), [])

        for member_id in (1, 10):
            detail = get_announcement_detail(
                announcement.id, member_id, store=self.store, directory=self.directory
            )
            self.assertEqual(detail.id, announcement.id)
        for member_id in (2, 12):
            with self.assertRaises(Forbidden):
                get_announcement_detail(announcement.id, member_id, store=self.store, directory=self.directory)

    def test_chat_is_private_and_append_only(self):
        announcement = self._create()
        with self.assertRaises(NotFound):
            get_chat(announcement.id, 1, store=self.store, directory=self.directory)

        thread = post_chat_message(
            announcement.id, 1, 'Embargo lifts Tuesday.', store=self.store, directory=self.directory, now=NOW
        )
        self.assertEqual([m.text for m in thread.messages], ['Embargo lifts Tuesday.'])

        outcome = self._claim(announcement.id, 10)
        self.assertEqual(outcome.chat_id, thread.id)
        post_chat_message(announcement.id, 10, 'Thanks!', store=self.store, directory=self.directory, now=NOW)

        thread = get_chat(announcement.id, 10, store=self.store, directory=self.directory)
        self.assertEqual(
            [(m.sender_id, m.text) for m in thread.messages],
            [(1, 'Embargo lifts Tuesday.'), (10, CLAIM_SEED_MESSAGE), (10, 'Thanks!')],
        )
        with self.assertRaises(Forbidden):
            post_chat_message(announcement.id, 11, 'Me too', store=self.store, directory=self.directory, now=NOW)
        with self.assertRaises(Forbidden):
            get_chat(announcement.id, 2, store=self.store, directory=self.directory)


class DjangoStoreClaimTests(TestCase):
    def setUp(self):
        self.store = DjangoExclusivesStore()
        self.directory = DjangoDirectory()
        self.company = Member.objects.create(name='Acme', email='pr@acme.test', role=Member.Role.COMPANY)
        self.j1 = Member.objects.create(
            name='J1', email='j1@wire.test', role=Member.Role.JOURNALIST, beat_tags=['Technology']
        )
        self.j2 = Member.objects.create(
            name='J2', email='j2@wire.test', role=Member.Role.JOURNALIST, beat_tags=['Technology']
        )

    def _create(self, **overrides):
        return create_announcement(
            self.company.id, _fields(**overrides), store=self.store, directory=self.directory, now=NOW
        )

    def test_claim_writes_claim_and_seeded_thread(self):
        announcement = self._create()
        outcome = claim_exclusive(announcement.id, self.j1.id, store=self.store, directory=self.directory, now=NOW)

        row = Announcement.objects.get(pk=announcement.id)
        self.assertEqual(row.status, 'claimed')
        self.assertEqual(row.claimant_id, self.j1.id)
        claim = Claim.objects.get(announcement_id=announcement.id)
        self.assertEqual(claim.journalist_id, self.j1.id)
        self.assertEqual(claim.status, Claim.Status.PENDING)
        thread = ChatThread.objects.get(announcement_id=announcement.id)
        self.assertEqual(thread.id, outcome.chat_id)
        self.assertEqual(
            list(thread.messages.values_list('sender_id', 'text')),
            [(self.j1.id, CLAIM_SEED_MESSAGE)],
        )

    def test_conditional_update_rejects_second_writer(self):
        announcement = self._create()
        first = self.store.claim_announcement(announcement.id, self.j1.id, CLAIM_SEED_MESSAGE, NOW)
        second = self.store.claim_announcement(announcement.id, self.j2.id, CLAIM_SEED_MESSAGE, NOW)

        self.assertIsNotNone(first)
        self.assertIsNone(second)
        self.assertEqual(Claim.objects.count(), 1)
        self.assertEqual(ChatThread.objects.count(), 1)
        self.assertEqual(ChatMessage.objects.count(), 1)
        self.assertEqual(Announcement.objects.get(pk=announcement.id).claimant_id, self.j1.id)

    def test_stale_read_loses_without_side_effects(self):
        announcement = self._create()
        stale = self.store.get_announcement(announcement.id)
        claim_exclusive(announcement.id, self.j1.id, store=self.store, directory=self.directory, now=NOW)

        with patch.object(self.store, 'get_announcement', return_value=stale):
            with self.assertRaises(AlreadyClaimed):
                claim_exclusive(announcement.id, self.j2.id, store=self.store, directory=self.directory, now=NOW)

        self.assertEqual(Claim.objects.count(), 1)
        self.assertEqual(ChatMessage.objects.count(), 1)

    def test_publish_premium_releases_payout_once(self):
        announcement = self._create()
        claim_exclusive(announcement.id, self.j1.id, store=self.store, directory=self.directory, now=NOW)
        publish_announcement(
            announcement.id, self.j1.id, 'https://news.test/a', store=self.store, directory=self.directory, now=NOW
        )

        payment = PaymentSummary.objects.get(announcement_id=announcement.id)
        self.assertEqual(payment.status, PaymentSummary.Status.COMPLETED)
        self.assertEqual(payment.payout_to_id, self.j1.id)
        self.assertEqual(payment.payout_split, 30)
        self.assertEqual(payment.payout_amount, Decimal('300.00'))
        self.assertEqual(payment.settled_at, NOW)
        claim = Claim.objects.get(announcement_id=announcement.id)
        self.assertEqual(claim.status, Claim.Status.PUBLISHED)
        self.assertEqual(claim.published_url, 'https://news.test/a')

        with self.assertRaises(InvalidTransition):
            publish_announcement(
                announcement.id, self.company.id, '', store=self.store, directory=self.directory, now=NOW
            )
        self.assertIsNone(self.store.publish_announcement(announcement.id, '', None, NOW))

    def test_basic_plan_publish_leaves_ledger(self):
        announcement = self._create(plan='Basic')
        claim_exclusive(announcement.id, self.j1.id, store=self.store, directory=self.directory, now=NOW)
        publish_announcement(announcement.id, self.company.id, '', store=self.store, directory=self.directory, now=NOW)

        payment = PaymentSummary.objects.get(announcement_id=announcement.id)
        self.assertEqual(payment.status, PaymentSummary.Status.PENDING)
        self.assertIsNone(payment.payout_to_id)

    def test_database_rejects_claimant_without_claimed_status(self):
        with self.assertRaises(IntegrityError), transaction.atomic():
            Announcement.objects.create(
                company=self.company,
                title='Broken',
                summary='s',
                full_content='c',
                embargo_at=NOW,
                plan='Basic',
                fee=Decimal('1'),
                status='claimed',
            )

    def test_connectivity_errors_become_store_unavailable(self):
        with patch.object(Announcement.objects, 'filter', side_effect=OperationalError('connection refused')):
            with self.assertRaises(StoreUnavailable):
                self.store.get_announcement(1)

    def test_ledger_update_rejects_unknown_fields(self):
        announcement = self._create()
        with self.assertRaises(ValueError):
            self.store.update_payment_summary(announcement.id, {'amount': Decimal('1')})
        summary = self.store.update_payment_summary(announcement.id, {'status': 'failed'})
        self.assertEqual(summary.status, 'failed')

    @override_settings(EXCLUSIVES_EVENTS_WEBHOOK_URL='https://hooks.test/exclusives')
    def test_claim_event_delivered_after_commit(self):
        announcement = self._create()
        with patch('apps.exclusives.tasks.requests.post') as post:
            with self.captureOnCommitCallbacks(execute=False) as callbacks:
                outcome = claim_exclusive(
                    announcement.id, self.j1.id, store=self.store, directory=self.directory, now=NOW
                )
            post.assert_not_called()
            for callback in callbacks:
                callback()

        post.assert_called_once()
        body = post.call_args.kwargs['json']
        self.assertEqual(body['event'], 'announcement.claimed')
        self.assertEqual(body['data']['announcement_id'], announcement.id)
        self.assertEqual(body['data']['journalist_id'], self.j1.id)
        self.assertEqual(body['data']['chat_id'], outcome.chat_id)

    def test_claim_and_publish_survive_broker_outage(self):
        announcement = self._create()
        with patch('apps.exclusives.services.deliver_lifecycle_event') as task:
            task.delay.side_effect = ConnectionError('broker down')
            with self.captureOnCommitCallbacks(execute=True):
                outcome = claim_exclusive(
                    announcement.id, self.j1.id, store=self.store, directory=self.directory, now=NOW
                )
            with self.captureOnCommitCallbacks(execute=True):
                published = publish_announcement(
                    announcement.id, self.j1.id, '', store=self.store, directory=self.directory, now=NOW
                )

        self.assertEqual(task.delay.call_count, 2)
        self.assertEqual(outcome.announcement.claimant_id, self.j1.id)
        self.assertEqual(published.status, 'published')
        self.assertEqual(Announcement.objects.get(pk=announcement.id).status, 'published')
        self.assertEqual(Claim.objects.get(announcement_id=announcement.id).status, Claim.Status.PUBLISHED)

    def test_plan_field_only_accepts_known_tiers(self):
        row = Announcement(
            company=self.company,
            title='t',
            summary='s',
            full_content='c',
            embargo_at=NOW,
            plan='Gold',
            fee=Decimal('1'),
        )
        with self.assertRaises(ValidationError) as ctx:
            row.full_clean()
        self.assertIn('plan', ctx.exception.message_dict)


class LifecycleEventTaskTests(TestCase):
    def test_skips_without_webhook(self):
        with patch('apps.exclusives.tasks.requests.post') as post:
            self.assertEqual(deliver_lifecycle_event('announcement.claimed', {'announcement_id': 1}), 'skip')
        post.assert_not_called()

    @override_settings(EXCLUSIVES_EVENTS_WEBHOOK_URL='https://hooks.test/exclusives')
    def test_reports_delivery_failure(self):
        with patch('apps.exclusives.tasks.requests.post', side_effect=requests.ConnectionError('down')):
            self.assertEqual(deliver_lifecycle_event('announcement.published', {'announcement_id': 1}), 'error')
