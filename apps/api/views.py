from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.serializers import (
    AnnouncementCreateSerializer,
    AnnouncementSerializer,
    ChatMessageCreateSerializer,
    ChatThreadSerializer,
    ClaimResponseSerializer,
    ErrorSerializer,
    HealthResponseSerializer,
    MatchSerializer,
    MetaResponseSerializer,
    PublishRequestSerializer,
    PublishResponseSerializer,
)
from apps.directory.identities import CompanyIdentity
from apps.exclusives import services
from apps.exclusives.errors import Forbidden, NotFound
from apps.exclusives.stores import get_directory, get_store
from apps.matching.services import get_matches


def _member_id(request):
    member = getattr(request.user, 'member', None)
    if member is None:
        raise Forbidden('No directory member is linked to this account.')
    return member.id


class HealthView(APIView):
    serializer_class = HealthResponseSerializer
    permission_classes = [AllowAny]

    @extend_schema(responses=HealthResponseSerializer)
    def get(self, request):
        return Response({'status': 'ok'})


class MetaView(APIView):
    serializer_class = MetaResponseSerializer
    permission_classes = [AllowAny]

    @extend_schema(responses=MetaResponseSerializer)
    def get(self, request):
        return Response({'app': 'ExclusiveWire Core', 'version': '0.1.0'})


class AnnouncementsView(APIView):
    serializer_class = AnnouncementSerializer

    @extend_schema(responses={200: AnnouncementSerializer(many=True), 403: ErrorSerializer})
    def get(self, request):
        member_id = _member_id(request)
        identity = get_directory().resolve_member(member_id)
        if isinstance(identity, CompanyIdentity):
            items = services.list_company_announcements(member_id)
        else:
            items = services.list_open_announcements(member_id)
        return Response(AnnouncementSerializer(items, many=True).data)

    @extend_schema(
        request=AnnouncementCreateSerializer,
        responses={201: AnnouncementSerializer, 403: ErrorSerializer},
    )
    def post(self, request):
        member_id = _member_id(request)
        serializer = AnnouncementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        announcement = services.create_announcement(member_id, serializer.validated_data)
        return Response(AnnouncementSerializer(announcement).data, status=status.HTTP_201_CREATED)


class AnnouncementDetailView(APIView):
    serializer_class = AnnouncementSerializer

    @extend_schema(responses={200: AnnouncementSerializer, 403: ErrorSerializer, 404: ErrorSerializer})
    def get(self, request, announcement_id):
        announcement = services.get_announcement_detail(announcement_id, _member_id(request))
        return Response(AnnouncementSerializer(announcement).data)


class ClaimView(APIView):
    serializer_class = ClaimResponseSerializer

    @extend_schema(
        request=None,
        responses={200: ClaimResponseSerializer, 400: ErrorSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
    )
    def post(self, request, announcement_id):
        outcome = services.claim_exclusive(announcement_id, _member_id(request))
        payload = {
            'message': 'Exclusive successfully claimed',
            'announcement': outcome.announcement,
            'chat_id': outcome.chat_id,
        }
        return Response(ClaimResponseSerializer(payload).data)


class PublishView(APIView):
    serializer_class = PublishResponseSerializer

    @extend_schema(
        request=PublishRequestSerializer,
        responses={200: PublishResponseSerializer, 400: ErrorSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
    )
    def post(self, request, announcement_id):
        serializer = PublishRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        announcement = services.publish_announcement(
            announcement_id,
            _member_id(request),
            serializer.validated_data['published_url'],
        )
        payload = {'message': 'Announcement marked as published', 'announcement': announcement}
        return Response(PublishResponseSerializer(payload).data)


class MatchesView(APIView):
    serializer_class = MatchSerializer

    @extend_schema(responses={200: MatchSerializer(many=True), 403: ErrorSerializer, 404: ErrorSerializer})
    def get(self, request, announcement_id):
        member_id = _member_id(request)
        identity = get_directory().resolve_member(member_id)
        if not isinstance(identity, CompanyIdentity):
            raise Forbidden('Only companies can get matches.')
        announcement = get_store().get_announcement(announcement_id)
        if announcement is None:
            raise NotFound()
        if announcement.company_id != member_id:
            raise Forbidden()
        matches = get_matches(announcement_id)
        return Response(MatchSerializer(matches, many=True).data)


class ChatView(APIView):
    serializer_class = ChatThreadSerializer

    @extend_schema(responses={200: ChatThreadSerializer, 403: ErrorSerializer, 404: ErrorSerializer})
    def get(self, request, announcement_id):
        thread = services.get_chat(announcement_id, _member_id(request))
        return Response(ChatThreadSerializer(thread).data)

    @extend_schema(
        request=ChatMessageCreateSerializer,
        responses={200: ChatThreadSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
    )
    def post(self, request, announcement_id):
        serializer = ChatMessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        thread = services.post_chat_message(
            announcement_id,
            _member_id(request),
            serializer.validated_data['message'],
        )
        return Response(ChatThreadSerializer(thread).data)
