"""
API views for the Tutor Marketplace.

Views authenticate the caller, validate input with serializers, call the
domain operations in core/ and shape the result. Domain operations raise DRF
exceptions (and core.exceptions.Conflict) which the project exception
handler turns into responses.
"""

import logging

from django.db import connection
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from . import availability, discovery, favorites, lifecycle, messaging, notifications, reviews
from .permissions import IsStudent, IsTeacher
from .serializers import (
    AvailabilityRangeSerializer,
    AvailabilitySlotSerializer,
    AvailabilitySlotWriteSerializer,
    AvailableDaySerializer,
    AvailableDayWriteSerializer,
    ChatDetailSerializer,
    ChatListSerializer,
    LessonRequestCreateSerializer,
    LessonRequestSerializer,
    LessonRequestStatusSerializer,
    MessageCreateSerializer,
    MessageSerializer,
    NotificationQuerySerializer,
    NotificationSerializer,
    ReviewCreateSerializer,
    ReviewSerializer,
    ReviewUpdateSerializer,
    SubjectSerializer,
    TeacherDetailSerializer,
    TeacherListSerializer,
    TeacherSearchSerializer,
)

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """
    Get client IP address from request.
    Handles proxy headers for accurate IP detection.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip


class PostThrottleMixin:
    """Apply the view's scoped throttle to POST requests only."""

    throttle_classes = [ScopedRateThrottle]

    def get_throttles(self):
        if self.request.method != 'POST':
            return []
        return super().get_throttles()


# ============================================================================
# Health Check
# ============================================================================

class HealthCheckView(APIView):
    """
    Liveness probe.

    GET /api/health/
    No authentication.

    Success response (200):
    {"status": "ok", "database": "ok"}

    Error response (503):
    {"status": "error", "database": "unavailable"}
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        try:
            with connection.cursor() as cursor:
                cursor.execute('SELECT 1')
        except Exception:
            logger.exception("Health check failed: database unavailable")
            return Response(
                {'status': 'error', 'database': 'unavailable'},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        return Response({'status': 'ok', 'database': 'ok'}, status=status.HTTP_200_OK)


# ============================================================================
# Lesson Request Views
# ============================================================================

class LessonRequestListCreateView(PostThrottleMixin, APIView):
    """
    API endpoint for creating and listing lesson requests.

    POST /api/requests/
    Headers: Authorization: Bearer <access_token>
    Request body:
    {
        "teacher_id": 7,
        "requested_date": "2025-12-15",
        "requested_time": "16:30",
        "message": "Algebra before the exam"
    }

    Success response (201): the created request (LessonRequestSerializer)

    GET /api/requests/?status=pending
    Returns the caller's requests newest first: sent requests for
    students, received requests for teachers.

    Error responses:
    - 400: Missing teacher_id, malformed date/time, unknown status filter
    - 401: Missing, invalid, or expired JWT token
    - 403: Only students can create requests
    - 404: teacher_id is not a teacher
    - 429: Too many requests created
    """
    permission_classes = [IsAuthenticated]
    throttle_scope = 'lesson_requests'

    def get(self, request, *args, **kwargs):
        lesson_requests = lifecycle.list_lesson_requests(
            request.user,
            status=request.query_params.get('status')
        )
        serializer = LessonRequestSerializer(lesson_requests, many=True, context={'request': request})
        return Response(serializer.data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = LessonRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lesson_request = lifecycle.create_lesson_request(
            request.user,
            serializer.validated_data.get('teacher_id'),
            requested_date=serializer.validated_data.get('requested_date'),
            requested_time=serializer.validated_data.get('requested_time'),
            message=serializer.validated_data.get('message'),
        )

        logger.info(
            f"Lesson request submitted. "
            f"Request ID: {lesson_request.id}, "
            f"User ID: {request.user.id}, "
            f"IP: {get_client_ip(request)}"
        )

        return Response(
            LessonRequestSerializer(lesson_request, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )


class LessonRequestDetailView(APIView):
    """
    API endpoint for a single lesson request.

    GET /api/requests/<id>/

    Error responses:
    - 401: Missing, invalid, or expired JWT token
    - 404: Request not found or caller is not a participant
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        lesson_request = lifecycle.get_lesson_request(kwargs['pk'], request.user)
        return Response(
            LessonRequestSerializer(lesson_request, context={'request': request}).data,
            status=status.HTTP_200_OK
        )


class LessonRequestStatusView(APIView):
    """
    API endpoint for a teacher's decision on a lesson request.

    PUT /api/requests/<id>/status/
    Headers: Authorization: Bearer <access_token>
    Request body: {"status": "confirmed"}

    The decision is applied only if the request is still pending. Confirming
    also opens the chat between the student and the teacher.

    Success response (200): the updated request

    Error responses:
    - 400: Status is not "confirmed" or "rejected"
    - 401: Missing, invalid, or expired JWT token
    - 403: Caller is not a teacher, or not this request's teacher
    - 404: Request not found
    - 409: Request is no longer pending
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, *args, **kwargs):
        serializer = LessonRequestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data['status']

        lesson_request = lifecycle.transition_lesson_request(kwargs['pk'], request.user, new_status)

        logger.info(
            f"Lesson request decided. "
            f"Request ID: {lesson_request.id}, "
            f"New Status: {new_status}, "
            f"User ID: {request.user.id}, "
            f"IP: {get_client_ip(request)}"
        )

        return Response(
            LessonRequestSerializer(lesson_request, context={'request': request}).data,
            status=status.HTTP_200_OK
        )


class LessonRequestCancelView(APIView):
    """
    API endpoint for a student withdrawing a pending lesson request.

    PUT /api/requests/<id>/cancel/

    Success response (200): the cancelled request

    Error responses:
    - 401: Missing, invalid, or expired JWT token
    - 403: Caller is not a student
    - 404: Request not found or not the caller's
    - 409: Request is no longer pending
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, *args, **kwargs):
        lesson_request = lifecycle.cancel_lesson_request(kwargs['pk'], request.user)

        logger.info(
            f"Lesson request cancelled. "
            f"Request ID: {lesson_request.id}, "
            f"User ID: {request.user.id}, "
            f"IP: {get_client_ip(request)}"
        )

        return Response(
            LessonRequestSerializer(lesson_request, context={'request': request}).data,
            status=status.HTTP_200_OK
        )


# ============================================================================
# Chat and Message Views
# ============================================================================

class ChatListView(APIView):
    """
    API endpoint listing the caller's chats, most recently active first.

    GET /api/chats/

    Success response (200):
    [
        {
            "id": 3,
            "lesson_request_id": 12,
            "counterpart": {"id": 7, "name": "Ms. Smith", ...},
            "unread_count": 1,
            "last_message": "hello",
            "last_message_at": "2025-12-08T10:00:00Z",
            "created_at": "...",
            "updated_at": "..."
        }
    ]
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        chats = messaging.list_chats(request.user)
        serializer = ChatListSerializer(chats, many=True, context={'request': request})
        return Response(serializer.data, status=status.HTTP_200_OK)


class ChatDetailView(APIView):
    """
    API endpoint opening a chat.

    GET /api/chats/<id>/

    Returns the chat, the counterpart and all messages oldest first.
    Side effect: every unread message from the counterpart is marked read
    (read_at is set). The response shows read_at as it was before this call.

    Error responses:
    - 401: Missing, invalid, or expired JWT token
    - 404: Chat not found or caller is not a participant
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        chat, counterpart, chat_messages = messaging.get_chat(kwargs['pk'], request.user)
        serializer = ChatDetailSerializer(
            chat,
            context={'request': request, 'counterpart': counterpart, 'messages': chat_messages}
        )
        return Response(serializer.data, status=status.HTTP_200_OK)


class MessageCreateView(PostThrottleMixin, APIView):
    """
    API endpoint for sending a chat message.

    POST /api/messages/
    Request body: {"chat_id": 3, "content": "hello"}

    Success response (201): the message with sender details

    Error responses:
    - 400: Blank content or malformed chat_id
    - 401: Missing, invalid, or expired JWT token
    - 404: Chat not found or caller is not a participant
    - 429: Too many messages
    """
    permission_classes = [IsAuthenticated]
    throttle_scope = 'messages'

    def post(self, request, *args, **kwargs):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = messaging.send_message(
            serializer.validated_data['chat_id'],
            request.user,
            serializer.validated_data['content'],
        )

        logger.info(
            f"Message posted. Message ID: {message.id}, "
            f"User ID: {request.user.id}, IP: {get_client_ip(request)}"
        )

        return Response(
            MessageSerializer(message, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )


class ChatMessagesView(APIView):
    """
    API endpoint listing a chat's messages oldest first. Nothing is marked read.

    GET /api/messages/chat/<chat_id>/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        chat_messages = messaging.list_messages(kwargs['chat_id'], request.user)
        serializer = MessageSerializer(chat_messages, many=True, context={'request': request})
        return Response(serializer.data, status=status.HTTP_200_OK)


# ============================================================================
# Notification Views
# ============================================================================

class NotificationListView(APIView):
    """
    API endpoint listing the caller's notifications, newest first.

    GET /api/notifications/?is_read=false&limit=20

    Query Parameters:
    - is_read: Optional true/false filter
    - limit: Optional maximum number of rows (1-100)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        query = NotificationQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)

        rows = notifications.list_notifications(
            request.user,
            is_read=query.validated_data.get('is_read'),
            limit=query.validated_data.get('limit'),
        )
        return Response(NotificationSerializer(rows, many=True).data, status=status.HTTP_200_OK)


class NotificationReadView(APIView):
    """
    API endpoint marking one notification read.

    PUT /api/notifications/<id>/read/

    Error responses:
    - 404: Notification not found or owned by someone else
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, *args, **kwargs):
        notification = notifications.mark_read(kwargs['pk'], request.user)
        return Response(NotificationSerializer(notification).data, status=status.HTTP_200_OK)


class NotificationReadAllView(APIView):
    """
    API endpoint marking all of the caller's notifications read.

    PUT /api/notifications/read-all/

    Success response (200): {"updated": 3}
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, *args, **kwargs):
        updated = notifications.mark_all_read(request.user)
        return Response({'updated': updated}, status=status.HTTP_200_OK)


class NotificationUnreadCountView(APIView):
    """
    GET /api/notifications/unread-count/

    Success response (200): {"count": 2}
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return Response({'count': notifications.unread_count(request.user)}, status=status.HTTP_200_OK)


# ============================================================================
# Teacher Discovery Views
# ============================================================================

class TeacherListView(APIView):
    """
    API endpoint for searching teachers.

    GET /api/teachers/

    Query Parameters (all optional, combined with AND):
    - search: Case-insensitive match on name or bio
    - subject: Subject ID
    - city: Case-insensitive partial match
    - min_price / max_price: Price per lesson range
    - online_offline_format: online, offline or both (teachers offering
      both always match)
    - available_date: YYYY-MM-DD with an open availability slot
    - available_day: 0 (Sunday) to 6 (Saturday) with weekly availability

    Results are ordered by rating (highest first), then name.

    Error responses:
    - 400: Invalid query parameters
    - 401: Missing, invalid, or expired JWT token
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        query = TeacherSearchSerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)

        teachers = discovery.search(query.validated_data)
        serializer = TeacherListSerializer(teachers, many=True, context={'request': request})
        return Response(serializer.data, status=status.HTTP_200_OK)


class TeacherDetailView(APIView):
    """
    API endpoint for a teacher's public profile.

    GET /api/teachers/<id>/

    Includes rating summary, subjects, upcoming availability slots, weekly
    available days and reviews.

    Error responses:
    - 404: Not a teacher
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        teacher = discovery.get_teacher(kwargs['pk'])
        serializer = TeacherDetailSerializer(teacher, context={'request': request})
        return Response(serializer.data, status=status.HTTP_200_OK)


class SubjectListView(APIView):
    """
    GET /api/teachers/subjects/all/

    The subject catalog ordered by name.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return Response(
            SubjectSerializer(discovery.list_subjects(), many=True).data,
            status=status.HTTP_200_OK
        )


# ============================================================================
# Favorite Views
# ============================================================================

class FavoriteListView(APIView):
    """
    API endpoint listing the student's favorite teachers ordered by name.

    GET /api/favorites/

    Error responses:
    - 403: Caller is not a student
    """
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request, *args, **kwargs):
        teachers = favorites.list_favorites(request.user)
        serializer = TeacherListSerializer(teachers, many=True, context={'request': request})
        return Response(serializer.data, status=status.HTTP_200_OK)


class FavoriteView(APIView):
    """
    API endpoint adding or removing a favorite teacher.

    POST /api/favorites/<teacher_id>/
    Success response (201): {"teacher_id": 7, "is_favorite": true}

    DELETE /api/favorites/<teacher_id>/
    Success response (204)

    Error responses:
    - 403: Caller is not a student
    - 404: Not a teacher (POST) or not a favorite (DELETE)
    - 409: Already a favorite
    """
    permission_classes = [IsAuthenticated, IsStudent]

    def post(self, request, *args, **kwargs):
        teacher_id = kwargs['teacher_id']
        favorites.add_favorite(request.user, teacher_id)
        logger.info(
            f"Favorite added via API. Teacher ID: {teacher_id}, "
            f"User ID: {request.user.id}, IP: {get_client_ip(request)}"
        )
        return Response(
            {'teacher_id': teacher_id, 'is_favorite': True},
            status=status.HTTP_201_CREATED
        )

    def delete(self, request, *args, **kwargs):
        favorites.remove_favorite(request.user, kwargs['teacher_id'])
        return Response(status=status.HTTP_204_NO_CONTENT)


class FavoriteCheckView(APIView):
    """
    GET /api/favorites/check/<teacher_id>/

    Success response (200): {"is_favorite": false}
    """
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request, *args, **kwargs):
        return Response(
            {'is_favorite': favorites.is_favorite(request.user, kwargs['teacher_id'])},
            status=status.HTTP_200_OK
        )


# ============================================================================
# Availability Views
# ============================================================================

class TeacherAvailabilityView(APIView):
    """
    API endpoint for a teacher's dated availability.

    GET /api/availability/teacher/<id>/?start_date=2025-12-01&end_date=2025-12-31

    Error responses:
    - 400: Malformed dates, or end_date before start_date
    - 404: Not a teacher
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        query = AvailabilityRangeSerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)

        slots = availability.list_slots(
            kwargs['pk'],
            start_date=query.validated_data.get('start_date'),
            end_date=query.validated_data.get('end_date'),
        )
        return Response(AvailabilitySlotSerializer(slots, many=True).data, status=status.HTTP_200_OK)


class TeacherAvailableDaysView(APIView):
    """GET /api/availability/teacher/<id>/days/"""
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        days = availability.list_days(kwargs['pk'])
        return Response(AvailableDaySerializer(days, many=True).data, status=status.HTTP_200_OK)


class MyAvailabilityView(APIView):
    """
    API endpoint for the teacher's own dated availability.

    GET /api/availability/me/
    POST /api/availability/
    Request body:
    {"date": "2025-12-15", "start_time": "10:00", "end_time": "12:00", "is_available": true}

    Posting an existing (date, start_time) updates that slot.

    Success responses:
    - 200: Slot updated / list
    - 201: Slot created

    Error responses:
    - 400: Malformed input or end_time not after start_time
    - 403: Caller is not a teacher
    """
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request, *args, **kwargs):
        slots = availability.list_slots(request.user.id)
        return Response(AvailabilitySlotSerializer(slots, many=True).data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = AvailabilitySlotWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        slot, created = availability.upsert_slot(request.user, **serializer.validated_data)
        return Response(
            AvailabilitySlotSerializer(slot).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )


class MyAvailableDaysView(APIView):
    """
    API endpoint for the teacher's own weekly availability.

    GET /api/availability/me/days/
    POST /api/availability/days/
    Request body: {"day_of_week": 1, "start_time": "09:00", "end_time": "17:00"}

    Posting an existing day_of_week replaces its range.
    """
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request, *args, **kwargs):
        days = availability.list_days(request.user.id)
        return Response(AvailableDaySerializer(days, many=True).data, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = AvailableDayWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        day, created = availability.upsert_day(request.user, **serializer.validated_data)
        return Response(
            AvailableDaySerializer(day).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )


class AvailabilitySlotDeleteView(APIView):
    """DELETE /api/availability/<id>/ (own slots only, 404 otherwise)."""
    permission_classes = [IsAuthenticated, IsTeacher]

    def delete(self, request, *args, **kwargs):
        availability.delete_slot(kwargs['pk'], request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AvailableDayDeleteView(APIView):
    """DELETE /api/availability/days/<id>/ (own days only, 404 otherwise)."""
    permission_classes = [IsAuthenticated, IsTeacher]

    def delete(self, request, *args, **kwargs):
        availability.delete_day(kwargs['pk'], request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Review Views
# ============================================================================

class ReviewCreateView(APIView):
    """
    API endpoint for creating a review.

    POST /api/reviews/
    Request body:
    {"teacher_id": 7, "rating": 5, "comment": "Great teacher", "lesson_request_id": 12}

    lesson_request_id is optional; when given it must be the caller's
    confirmed request with that teacher.

    Error responses:
    - 400: Rating outside 1-5, invalid lesson request
    - 403: Caller is not a student
    - 404: Not a teacher
    - 409: Already reviewed
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = reviews.create_review(request.user, **serializer.validated_data)

        logger.info(
            f"Review submitted. Review ID: {review.id}, "
            f"User ID: {request.user.id}, IP: {get_client_ip(request)}"
        )

        return Response(
            ReviewSerializer(review, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )


class TeacherReviewsView(APIView):
    """GET /api/reviews/teacher/<id>/ (newest first)."""
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        rows = reviews.list_reviews(kwargs['pk'])
        return Response(
            ReviewSerializer(rows, many=True, context={'request': request}).data,
            status=status.HTTP_200_OK
        )


class ReviewUpdateView(APIView):
    """
    API endpoint for editing one's own review.

    PUT /api/reviews/<id>/
    Request body: {"rating": 4} and/or {"comment": "..."}

    Error responses:
    - 400: Nothing to update, rating outside 1-5
    - 404: Review not found or not the caller's
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, *args, **kwargs):
        serializer = ReviewUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        review = reviews.update_review(kwargs['pk'], request.user, **serializer.validated_data)
        return Response(
            ReviewSerializer(review, context={'request': request}).data,
            status=status.HTTP_200_OK
        )
