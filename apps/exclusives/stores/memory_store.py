import itertools
import threading
from dataclasses import replace
from decimal import Decimal

from apps.exclusives.lifecycle import AWAITING_CLAIM, CLAIMED, PUBLISHED
from apps.exclusives.records import (
    AnnouncementRecord,
    ChatMessageRecord,
    ChatThreadRecord,
    ClaimOutcome,
    ClaimRecord,
    PaymentSummaryRecord,
)

from .base import BaseExclusivesStore


def _copy_announcement(record):
    return replace(
        record,
        attachments=list(record.attachments),
        industry_tags=list(record.industry_tags),
        journalist_beat_tags=list(record.journalist_beat_tags),
        target_outlets=list(record.target_outlets),
    )


def _copy_thread(thread):
    return replace(thread, messages=list(thread.messages))


class InMemoryExclusivesStore(BaseExclusivesStore):
    """Process-local store for tests. A single lock stands in for the database's row locking."""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._announcements = {}
        self._claims = {}
        self._threads = {}
        self._payments = {}

    def create_announcement(self, company_id, fields, now):
        with self._lock:
            record = AnnouncementRecord(
                id=next(self._ids),
                company_id=company_id,
                title=fields['title'],
                summary=fields['summary'],
                full_content=fields['full_content'],
                embargo_at=fields['embargo_at'],
                plan=fields['plan'],
                fee=Decimal(fields['fee']),
                attachments=list(fields.get('attachments') or []),
                industry_tags=list(fields.get('industry_tags') or []),
                journalist_beat_tags=list(fields.get('journalist_beat_tags') or []),
                target_outlets=list(fields.get('target_outlets') or []),
                created_at=now,
            )
            self._announcements[record.id] = record
            self._payments[record.id] = PaymentSummaryRecord(
                announcement_id=record.id,
                amount=record.fee,
                payout_split=fields.get('payout_split', 0),
            )
            return _copy_announcement(record)

    def get_announcement(self, announcement_id):
        with self._lock:
            record = self._announcements.get(announcement_id)
            return _copy_announcement(record) if record else None

    def list_open_announcements(self, beat_tags, now):
        tags = set(beat_tags or [])
        with self._lock:
            rows = [
                _copy_announcement(r)
                for r in self._announcements.values()
                if r.status == AWAITING_CLAIM and r.embargo_at > now and tags & set(r.journalist_beat_tags)
            ]
        return sorted(rows, key=lambda r: (r.created_at, r.id), reverse=True)

    def list_company_announcements(self, company_id):
        with self._lock:
            rows = [_copy_announcement(r) for r in self._announcements.values() if r.company_id == company_id]
        return sorted(rows, key=lambda r: (r.created_at, r.id), reverse=True)

    def claim_announcement(self, announcement_id, journalist_id, seed_message, now):
        with self._lock:
            record = self._announcements.get(announcement_id)
            if record is None or record.status != AWAITING_CLAIM:
                return None
            record.status = CLAIMED
            record.claimant_id = journalist_id

            claim = ClaimRecord(
                id=next(self._ids),
                announcement_id=announcement_id,
                journalist_id=journalist_id,
                claimed_at=now,
            )
            self._claims[announcement_id] = claim
            thread = self._threads.get(announcement_id)
            if thread is None:
                thread = ChatThreadRecord(id=next(self._ids), announcement_id=announcement_id)
                self._threads[announcement_id] = thread
            thread.messages.append(ChatMessageRecord(sender_id=journalist_id, text=seed_message, sent_at=now))
            return ClaimOutcome(announcement=_copy_announcement(record), claim=replace(claim), chat_id=thread.id)

    def publish_announcement(self, announcement_id, published_url, payout_patch, now):
        with self._lock:
            record = self._announcements.get(announcement_id)
            if record is None or record.status != CLAIMED:
                return None
            record.status = PUBLISHED

            claim = self._claims.get(announcement_id)
            if claim is not None:
                claim.status = PUBLISHED
                claim.published_url = published_url or ''
            payment = self._payments.get(announcement_id)
            if payout_patch and payment is not None and payment.status == 'pending':
                self._payments[announcement_id] = replace(payment, **payout_patch)
            return _copy_announcement(record)

    def get_claim(self, announcement_id):
        with self._lock:
            claim = self._claims.get(announcement_id)
            return replace(claim) if claim else None

    def get_chat_thread(self, announcement_id):
        with self._lock:
            thread = self._threads.get(announcement_id)
            return _copy_thread(thread) if thread else None

    def append_chat_message(self, announcement_id, sender_id, text, now):
        with self._lock:
            thread = self._threads.get(announcement_id)
            if thread is None:
                thread = ChatThreadRecord(id=next(self._ids), announcement_id=announcement_id)
                self._threads[announcement_id] = thread
            thread.messages.append(ChatMessageRecord(sender_id=sender_id, text=text, sent_at=now))
            return _copy_thread(thread)

    def get_payment_summary(self, announcement_id):
        with self._lock:
            payment = self._payments.get(announcement_id)
            return replace(payment) if payment else None

    def update_payment_summary(self, announcement_id, patch):
        with self._lock:
            payment = self._payments.get(announcement_id)
            if payment is None:
                return None
            payment = replace(payment, **patch)
            self._payments[announcement_id] = payment
            return replace(payment)

    def claim_count(self):
        with self._lock:
            return len(self._claims)

    def thread_count(self):
        with self._lock:
            return len(self._threads)
