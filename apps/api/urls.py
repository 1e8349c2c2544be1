from django.urls import path

from .views import (
    AnnouncementDetailView,
    AnnouncementsView,
    ChatView,
    ClaimView,
    HealthView,
    MatchesView,
    MetaView,
    PublishView,
)

urlpatterns = [
    path('health', HealthView.as_view(), name='health'),
    path('meta', MetaView.as_view(), name='meta'),
    path('announcements', AnnouncementsView.as_view(), name='announcements'),
    path('announcements/<int:announcement_id>', AnnouncementDetailView.as_view(), name='announcement-detail'),
    path('announcements/<int:announcement_id>/claim', ClaimView.as_view(), name='announcement-claim'),
    path('announcements/<int:announcement_id>/publish', PublishView.as_view(), name='announcement-publish'),
    path('announcements/<int:announcement_id>/matches', MatchesView.as_view(), name='announcement-matches'),
    path('announcements/<int:announcement_id>/chat', ChatView.as_view(), name='announcement-chat'),
]
