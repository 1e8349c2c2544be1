from abc import ABC, abstractmethod


class BaseExclusivesStore(ABC):
    """Persistence boundary for announcements, claims, chat threads and the payment ledger.

    ``claim_announcement`` and ``publish_announcement`` are conditional writes:
    they only apply when the stored status still equals the expected one and
    return None otherwise. Every method that writes more than one record does
    so atomically.
    """

    # Announcements

    @abstractmethod
    def create_announcement(self, company_id, fields, now):
        """Persist a new announcement (awaiting_claim) and its pending payment summary."""
        raise NotImplementedError

    @abstractmethod
    def get_announcement(self, announcement_id):
        raise NotImplementedError

    @abstractmethod
    def list_open_announcements(self, beat_tags, now):
        """Announcements awaiting claim, embargo still ahead, sharing a beat with beat_tags."""
        raise NotImplementedError

    @abstractmethod
    def list_company_announcements(self, company_id):
        raise NotImplementedError

    # Transitions

    @abstractmethod
    def claim_announcement(self, announcement_id, journalist_id, seed_message, now):
        """
        awaiting_claim -> claimed. Inserts the Claim and opens the chat thread
        seeded with seed_message. Returns ClaimOutcome, or None when the
        announcement was no longer awaiting claim.
        """
        raise NotImplementedError

    @abstractmethod
    def publish_announcement(self, announcement_id, published_url, payout_patch, now):
        """
        claimed -> published. Marks the Claim published and, when payout_patch
        is given, applies it to a still-pending payment summary. Returns the
        updated AnnouncementRecord, or None when the announcement was not claimed.
        """
        raise NotImplementedError

    @abstractmethod
    def get_claim(self, announcement_id):
        raise NotImplementedError

    # Chat

    @abstractmethod
    def get_chat_thread(self, announcement_id):
        raise NotImplementedError

    @abstractmethod
    def append_chat_message(self, announcement_id, sender_id, text, now):
        """Append to the announcement's thread, creating it on first use."""
        raise NotImplementedError

    # Ledger

    @abstractmethod
    def get_payment_summary(self, announcement_id):
        raise NotImplementedError

    @abstractmethod
    def update_payment_summary(self, announcement_id, patch):
        raise NotImplementedError
