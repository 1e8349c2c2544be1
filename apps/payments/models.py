from django.db import models


class PaymentSummary(models.Model):
    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        COMPLETED = 'completed', 'Completed'
        FAILED = 'failed', 'Failed'

    announcement = models.OneToOneField(
        'exclusives.Announcement',
        on_delete=models.CASCADE,
        related_name='payment',
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payout_split = models.IntegerField(default=0)
    payout_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    payout_to = models.ForeignKey(
        'directory.Member',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='payouts',
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    settled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"PaymentSummary {self.announcement_id} {self.status}"
