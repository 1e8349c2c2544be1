from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


class Member(models.Model):
    class Role(models.TextChoices):
        COMPANY = 'company', 'Company'
        JOURNALIST = 'journalist', 'Journalist'

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='member',
    )
    name = models.CharField(max_length=200)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=Role.choices)
    beat_tags = models.JSONField(default=list, blank=True)
    company_name = models.CharField(max_length=200, blank=True, default='')
    publication = models.CharField(max_length=200, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.name} ({self.role})"


class JournalistProfile(models.Model):
    class ResponseTime(models.TextChoices):
        IMMEDIATE = 'immediate', 'Immediate'
        SAME_DAY = 'same-day', 'Same day'
        WITHIN_WEEK = 'within-week', 'Within a week'

    class ExclusiveInterest(models.TextChoices):
        HIGH = 'high', 'High'
        MEDIUM = 'medium', 'Medium'
        LOW = 'low', 'Low'

    member = models.OneToOneField(Member, on_delete=models.CASCADE, related_name='journalist_profile')
    response_time = models.CharField(
        max_length=20, choices=ResponseTime.choices, default=ResponseTime.SAME_DAY
    )
    exclusive_interest = models.CharField(
        max_length=10, choices=ExclusiveInterest.choices, default=ExclusiveInterest.HIGH
    )
    is_verified = models.BooleanField(default=False)
    trust_score = models.IntegerField(
        default=50, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    searchable = models.BooleanField(default=True, db_index=True)
    last_active = models.DateTimeField(default=timezone.now)
    profile_completeness = models.IntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )

    def __str__(self):
        return f"JournalistProfile {self.member_id}"


class JournalistBeat(models.Model):
    class Expertise(models.TextChoices):
        BEGINNER = 'beginner', 'Beginner'
        INTERMEDIATE = 'intermediate', 'Intermediate'
        EXPERT = 'expert', 'Expert'

    profile = models.ForeignKey(JournalistProfile, on_delete=models.CASCADE, related_name='beats')
    category = models.CharField(max_length=100, db_index=True)
    expertise_level = models.CharField(
        max_length=20, choices=Expertise.choices, default=Expertise.INTERMEDIATE
    )

    class Meta:
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['profile', 'category'], name='uniq_journalist_beat_category'),
        ]

    def __str__(self):
        return f"{self.category} ({self.expertise_level})"
