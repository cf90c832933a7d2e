"""
URL configuration for the tutor_marketplace project.

All API routes live under /api/ and end with a trailing slash.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path
from core.views import (
    AvailabilitySlotDeleteView,
    AvailableDayDeleteView,
    ChatDetailView,
    ChatListView,
    ChatMessagesView,
    FavoriteCheckView,
    FavoriteListView,
    FavoriteView,
    HealthCheckView,
    LessonRequestCancelView,
    LessonRequestDetailView,
    LessonRequestListCreateView,
    LessonRequestStatusView,
    MessageCreateView,
    MyAvailabilityView,
    MyAvailableDaysView,
    NotificationListView,
    NotificationReadAllView,
    NotificationReadView,
    NotificationUnreadCountView,
    ReviewCreateView,
    ReviewUpdateView,
    SubjectListView,
    TeacherAvailabilityView,
    TeacherAvailableDaysView,
    TeacherDetailView,
    TeacherListView,
    TeacherReviewsView,
)


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/health/', HealthCheckView.as_view(), name='health_check'),

    # Lesson request endpoints
    path('api/requests/', LessonRequestListCreateView.as_view(), name='lesson_request_list_create'),
    path('api/requests/<int:pk>/', LessonRequestDetailView.as_view(), name='lesson_request_detail'),
    path('api/requests/<int:pk>/status/', LessonRequestStatusView.as_view(), name='lesson_request_status'),
    path('api/requests/<int:pk>/cancel/', LessonRequestCancelView.as_view(), name='lesson_request_cancel'),

    # Chat and message endpoints
    path('api/chats/', ChatListView.as_view(), name='chat_list'),
    path('api/chats/<int:pk>/', ChatDetailView.as_view(), name='chat_detail'),
    path('api/messages/', MessageCreateView.as_view(), name='message_create'),
    path('api/messages/chat/<int:chat_id>/', ChatMessagesView.as_view(), name='chat_messages'),

    # Notification endpoints
    path('api/notifications/', NotificationListView.as_view(), name='notification_list'),
    path('api/notifications/read-all/', NotificationReadAllView.as_view(), name='notification_read_all'),
    path('api/notifications/unread-count/', NotificationUnreadCountView.as_view(), name='notification_unread_count'),
    path('api/notifications/<int:pk>/read/', NotificationReadView.as_view(), name='notification_read'),

    # Teacher discovery endpoints
    path('api/teachers/', TeacherListView.as_view(), name='teacher_list'),
    path('api/teachers/subjects/all/', SubjectListView.as_view(), name='subject_list'),
    path('api/teachers/<int:pk>/', TeacherDetailView.as_view(), name='teacher_detail'),

    # Favorite endpoints
    path('api/favorites/', FavoriteListView.as_view(), name='favorite_list'),
    path('api/favorites/check/<int:teacher_id>/', FavoriteCheckView.as_view(), name='favorite_check'),
    path('api/favorites/<int:teacher_id>/', FavoriteView.as_view(), name='favorite'),

    # Availability endpoints
    path('api/availability/', MyAvailabilityView.as_view(), name='availability_create'),
    path('api/availability/me/', MyAvailabilityView.as_view(), name='availability_me'),
    path('api/availability/days/', MyAvailableDaysView.as_view(), name='available_day_create'),
    path('api/availability/me/days/', MyAvailableDaysView.as_view(), name='available_days_me'),
    path('api/availability/<int:pk>/', AvailabilitySlotDeleteView.as_view(), name='availability_delete'),
    path('api/availability/days/<int:pk>/', AvailableDayDeleteView.as_view(), name='available_day_delete'),
    path('api/availability/teacher/<int:pk>/', TeacherAvailabilityView.as_view(), name='teacher_availability'),
    path('api/availability/teacher/<int:pk>/days/', TeacherAvailableDaysView.as_view(), name='teacher_available_days'),

    # Review endpoints
    path('api/reviews/', ReviewCreateView.as_view(), name='review_create'),
    path('api/reviews/teacher/<int:pk>/', TeacherReviewsView.as_view(), name='teacher_reviews'),
    path('api/reviews/<int:pk>/', ReviewUpdateView.as_view(), name='review_update'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
