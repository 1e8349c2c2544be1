from django.db import transaction

from apps.exclusives.errors import translate_db_errors
from apps.exclusives.lifecycle import AWAITING_CLAIM, CLAIMED, PUBLISHED
from apps.exclusives.models import Announcement, ChatMessage, ChatThread, Claim
from apps.exclusives.records import (
    AnnouncementRecord,
    ChatMessageRecord,
    ChatThreadRecord,
    ClaimOutcome,
    ClaimRecord,
    PaymentSummaryRecord,
)
from apps.payments.models import PaymentSummary

from .base import BaseExclusivesStore

LEDGER_FIELDS = ('payout_split', 'payout_amount', 'payout_to_id', 'status', 'settled_at')


def _announcement_record(obj):
    return AnnouncementRecord(
        id=obj.id,
        company_id=obj.company_id,
        title=obj.title,
        summary=obj.summary,
        full_content=obj.full_content,
        embargo_at=obj.embargo_at,
        plan=obj.plan,
        fee=obj.fee,
        status=obj.status,
        claimant_id=obj.claimant_id,
        attachments=list(obj.attachments or []),
        industry_tags=list(obj.industry_tags or []),
        journalist_beat_tags=list(obj.journalist_beat_tags or []),
        target_outlets=list(obj.target_outlets or []),
        created_at=obj.created_at,
    )


def _claim_record(obj):
    return ClaimRecord(
        id=obj.id,
        announcement_id=obj.announcement_id,
        journalist_id=obj.journalist_id,
        claimed_at=obj.claimed_at,
        status=obj.status,
        published_url=obj.published_url,
    )


def _thread_record(thread):
    return ChatThreadRecord(
        id=thread.id,
        announcement_id=thread.announcement_id,
        messages=[
            ChatMessageRecord(sender_id=m.sender_id, text=m.text, sent_at=m.sent_at)
            for m in thread.messages.all()
        ],
    )


def _payment_record(obj):
    return PaymentSummaryRecord(
        announcement_id=obj.announcement_id,
        amount=obj.amount,
        payout_split=obj.payout_split,
        payout_amount=obj.payout_amount,
        payout_to_id=obj.payout_to_id,
        status=obj.status,
        settled_at=obj.settled_at,
    )


class DjangoExclusivesStore(BaseExclusivesStore):
    @translate_db_errors
    def create_announcement(self, company_id, fields, now):
        with transaction.atomic():
            obj = Announcement.objects.create(
                company_id=company_id,
                title=fields['title'],
                summary=fields['summary'],
                full_content=fields['full_content'],
                attachments=list(fields.get('attachments') or []),
                industry_tags=list(fields.get('industry_tags') or []),
                journalist_beat_tags=list(fields.get('journalist_beat_tags') or []),
                target_outlets=list(fields.get('target_outlets') or []),
                embargo_at=fields['embargo_at'],
                plan=fields['plan'],
                fee=fields['fee'],
            )
            PaymentSummary.objects.create(
                announcement=obj,
                amount=obj.fee,
                payout_split=fields.get('payout_split', 0),
            )
        return _announcement_record(obj)

    @translate_db_errors
    def get_announcement(self, announcement_id):
        obj = Announcement.objects.filter(pk=announcement_id).first()
        return _announcement_record(obj) if obj else None

    @translate_db_errors
    def list_open_announcements(self, beat_tags, now):
        tags = set(beat_tags or [])
        qs = Announcement.objects.filter(status=AWAITING_CLAIM, embargo_at__gt=now).order_by('-created_at', '-id')
        return [
            _announcement_record(obj)
            for obj in qs
            if tags & set(obj.journalist_beat_tags or [])
        ]

    @translate_db_errors
    def list_company_announcements(self, company_id):
        qs = Announcement.objects.filter(company_id=company_id).order_by('-created_at', '-id')
        return [_announcement_record(obj) for obj in qs]

    @translate_db_errors
    def claim_announcement(self, announcement_id, journalist_id, seed_message, now):
        with transaction.atomic():
            updated = Announcement.objects.filter(
                pk=announcement_id,
                status=AWAITING_CLAIM,
            ).update(status=CLAIMED, claimant_id=journalist_id, updated_at=now)
            if updated != 1:
                return None

            claim = Claim.objects.create(
                announcement_id=announcement_id,
                journalist_id=journalist_id,
                claimed_at=now,
            )
            thread, _created = ChatThread.objects.get_or_create(
                announcement_id=announcement_id,
                defaults={'created_at': now},
            )
            ChatMessage.objects.create(
                thread=thread,
                sender_id=journalist_id,
                text=seed_message,
                sent_at=now,
            )
            announcement = Announcement.objects.get(pk=announcement_id)

        return ClaimOutcome(
            announcement=_announcement_record(announcement),
            claim=_claim_record(claim),
            chat_id=thread.id,
        )

    @translate_db_errors
    def publish_announcement(self, announcement_id, published_url, payout_patch, now):
        with transaction.atomic():
            updated = Announcement.objects.filter(
                pk=announcement_id,
                status=CLAIMED,
            ).update(status=PUBLISHED, updated_at=now)
            if updated != 1:
                return None

            Claim.objects.filter(announcement_id=announcement_id).update(
                status=Claim.Status.PUBLISHED,
                published_url=published_url or '',
            )
            if payout_patch:
                PaymentSummary.objects.filter(
                    announcement_id=announcement_id,
                    status=PaymentSummary.Status.PENDING,
                ).update(**payout_patch)
            announcement = Announcement.objects.get(pk=announcement_id)

        return _announcement_record(announcement)

    @translate_db_errors
    def get_claim(self, announcement_id):
        obj = Claim.objects.filter(announcement_id=announcement_id).first()
        return _claim_record(obj) if obj else None

    @translate_db_errors
    def get_chat_thread(self, announcement_id):
        thread = ChatThread.objects.filter(announcement_id=announcement_id).first()
        return _thread_record(thread) if thread else None

    @translate_db_errors
    def append_chat_message(self, announcement_id, sender_id, text, now):
        with transaction.atomic():
            thread, _created = ChatThread.objects.get_or_create(
                announcement_id=announcement_id,
                defaults={'created_at': now},
            )
            ChatMessage.objects.create(thread=thread, sender_id=sender_id, text=text, sent_at=now)
        return _thread_record(thread)

    @translate_db_errors
    def get_payment_summary(self, announcement_id):
        obj = PaymentSummary.objects.filter(announcement_id=announcement_id).first()
        return _payment_record(obj) if obj else None

    @translate_db_errors
    def update_payment_summary(self, announcement_id, patch):
        unknown = set(patch) - set(LEDGER_FIELDS)
        if unknown:
            raise ValueError(f"unknown ledger fields: {sorted(unknown)}")
        with transaction.atomic():
            PaymentSummary.objects.filter(announcement_id=announcement_id).update(**patch)
            obj = PaymentSummary.objects.filter(announcement_id=announcement_id).first()
        return _payment_record(obj) if obj else None
