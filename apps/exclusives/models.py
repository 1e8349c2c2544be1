from django.db import models
from django.db.models import Q


class AnnouncementStatus(models.TextChoices):
    AWAITING_CLAIM = 'awaiting_claim', 'Awaiting claim'
    CLAIMED = 'claimed', 'Claimed'
    PUBLISHED = 'published', 'Published'
    ARCHIVED = 'archived', 'Archived'


class PlanTier(models.TextChoices):
    BASIC = 'Basic', 'Basic'
    PREMIUM = 'Premium', 'Premium'


class Announcement(models.Model):
    company = models.ForeignKey(
        'directory.Member', on_delete=models.PROTECT, related_name='announcements'
    )
    title = models.CharField(max_length=300)
    summary = models.TextField()
    full_content = models.TextField()
    attachments = models.JSONField(default=list, blank=True)
    industry_tags = models.JSONField(default=list, blank=True)
    journalist_beat_tags = models.JSONField(default=list, blank=True)
    target_outlets = models.JSONField(default=list, blank=True)
    embargo_at = models.DateTimeField(db_index=True)
    plan = models.CharField(max_length=20, choices=PlanTier.choices)
    fee = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=20,
        choices=AnnouncementStatus.choices,
        default=AnnouncementStatus.AWAITING_CLAIM,
        db_index=True,
    )
    claimant = models.ForeignKey(
        'directory.Member',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='claimed_announcements',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(claimant__isnull=True, status__in=['awaiting_claim', 'archived'])
                    | Q(claimant__isnull=False, status__in=['claimed', 'published'])
                ),
                name='announcement_claimant_matches_status',
            ),
        ]

    def __str__(self):
        return f"Announcement {self.id} {self.title} [{self.status}]"


class Claim(models.Model):
    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'
        PUBLISHED = 'published', 'Published'

    announcement = models.OneToOneField(Announcement, on_delete=models.CASCADE, related_name='claim')
    journalist = models.ForeignKey('directory.Member', on_delete=models.PROTECT, related_name='claims')
    claimed_at = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    published_url = models.URLField(max_length=500, blank=True, default='')

    class Meta:
        ordering = ['-claimed_at']

    def __str__(self):
        return f"Claim {self.announcement_id} by {self.journalist_id} [{self.status}]"


class ChatThread(models.Model):
    announcement = models.OneToOneField(Announcement, on_delete=models.CASCADE, related_name='chat')
    created_at = models.DateTimeField()

    def __str__(self):
        return f"ChatThread {self.announcement_id}"


class ChatMessage(models.Model):
    thread = models.ForeignKey(ChatThread, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey('directory.Member', on_delete=models.PROTECT, related_name='chat_messages')
    text = models.TextField()
    sent_at = models.DateTimeField()

    class Meta:
        ordering = ['sent_at', 'id']

    def __str__(self):
        return f"ChatMessage {self.thread_id} {self.sender_id}"
