from rest_framework import serializers

from apps.payments.plans import plan_names


class HealthResponseSerializer(serializers.Serializer):
    status = serializers.CharField()


class MetaResponseSerializer(serializers.Serializer):
    app = serializers.CharField()
    version = serializers.CharField()


class ErrorSerializer(serializers.Serializer):
    code = serializers.CharField()
    detail = serializers.CharField()


class AnnouncementCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=300)
    summary = serializers.CharField()
    full_content = serializers.CharField()
    attachments = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    industry_tags = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    journalist_beat_tags = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    target_outlets = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    embargo_at = serializers.DateTimeField()
    plan = serializers.CharField(max_length=20)
    fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)

    def validate_plan(self, value):
        if value not in plan_names():
            raise serializers.ValidationError(f"Unknown plan. Choose one of: {', '.join(plan_names())}.")
        return value


class AnnouncementSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    company_id = serializers.IntegerField()
    title = serializers.CharField()
    summary = serializers.CharField()
    full_content = serializers.CharField()
    attachments = serializers.ListField(child=serializers.CharField())
    industry_tags = serializers.ListField(child=serializers.CharField())
    journalist_beat_tags = serializers.ListField(child=serializers.CharField())
    target_outlets = serializers.ListField(child=serializers.CharField())
    embargo_at = serializers.DateTimeField()
    plan = serializers.CharField()
    fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = serializers.CharField()
    claimant_id = serializers.IntegerField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)


class ClaimResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    announcement = AnnouncementSerializer()
    chat_id = serializers.IntegerField()


class PublishRequestSerializer(serializers.Serializer):
    published_url = serializers.URLField(max_length=500, required=False, allow_blank=True, default='')


class PublishResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    announcement = AnnouncementSerializer()


class MatchJournalistSerializer(serializers.Serializer):
    member_id = serializers.IntegerField()
    name = serializers.CharField()
    publication = serializers.CharField()
    is_verified = serializers.BooleanField()
    trust_score = serializers.FloatField()


class MatchSerializer(serializers.Serializer):
    journalist = MatchJournalistSerializer()
    score = serializers.IntegerField()
    matching_beats = serializers.ListField(child=serializers.CharField())
    reasons = serializers.ListField(child=serializers.CharField())


class ChatMessageSerializer(serializers.Serializer):
    sender_id = serializers.IntegerField()
    text = serializers.CharField()
    sent_at = serializers.DateTimeField()


class ChatThreadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    announcement_id = serializers.IntegerField()
    messages = ChatMessageSerializer(many=True)


class ChatMessageCreateSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=5000)
