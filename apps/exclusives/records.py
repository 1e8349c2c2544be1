from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional


@dataclass
class AnnouncementRecord:
    id: int
    company_id: int
    title: str
    summary: str
    full_content: str
    embargo_at: datetime
    plan: str
    fee: Decimal
    status: str = 'awaiting_claim'
    claimant_id: Optional[int] = None
    attachments: List[str] = field(default_factory=list)
    industry_tags: List[str] = field(default_factory=list)
    journalist_beat_tags: List[str] = field(default_factory=list)
    target_outlets: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass
class ClaimRecord:
    id: int
    announcement_id: int
    journalist_id: int
    claimed_at: datetime
    status: str = 'pending'
    published_url: str = ''


@dataclass
class ChatMessageRecord:
    sender_id: int
    text: str
    sent_at: datetime


@dataclass
class ChatThreadRecord:
    id: int
    announcement_id: int
    messages: List[ChatMessageRecord] = field(default_factory=list)


@dataclass
class PaymentSummaryRecord:
    announcement_id: int
    amount: Decimal
    payout_split: int = 0
    payout_amount: Optional[Decimal] = None
    payout_to_id: Optional[int] = None
    status: str = 'pending'
    settled_at: Optional[datetime] = None


@dataclass
class ClaimOutcome:
    announcement: AnnouncementRecord
    claim: ClaimRecord
    chat_id: int
