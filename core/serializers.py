"""
Serializers for the Tutor Marketplace API.

Input serializers validate request bodies and query strings; the domain
operations in core/ then enforce roles, ownership and state. Output
serializers shape model instances (and the attributes the domain layer
annotates onto them) into JSON.
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model

from .models import (
    AvailabilitySlot,
    AvailableDay,
    Chat,
    LessonRequest,
    Message,
    Notification,
    Review,
    Subject,
)

User = get_user_model()

TIME_FORMAT = '%H:%M'
TIME_INPUT_FORMATS = ['%H:%M', '%H:%M:%S']


# ============================================================================
# Shared Serializers
# ============================================================================

class UserSummarySerializer(serializers.ModelSerializer):
    """
    Public identity of a user as shown to the other party.

    Fields:
    - id: User ID
    - name: Display name (name, full name or username)
    - role: 'student' or 'teacher'
    - avatar: Avatar URL or null
    - city: City or null
    """

    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'role', 'avatar', 'city']
        read_only_fields = fields


class SubjectSerializer(serializers.ModelSerializer):

    class Meta:
        model = Subject
        fields = ['id', 'name']
        read_only_fields = fields


# ============================================================================
# Lesson Request Serializers
# ============================================================================

class LessonRequestCreateSerializer(serializers.Serializer):
    """
    Input for POST /api/requests/.

    teacher_id is optional at this layer so that the role check runs first;
    its absence is reported by the lifecycle as a 400.
    """

    teacher_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    requested_date = serializers.DateField(required=False, allow_null=True)
    requested_time = serializers.TimeField(
        required=False,
        allow_null=True,
        input_formats=TIME_INPUT_FORMATS
    )
    message = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True,
        max_length=2000
    )


class LessonRequestStatusSerializer(serializers.Serializer):
    """Input for PUT /api/requests/<id>/status/."""

    status = serializers.CharField()


class LessonRequestSerializer(serializers.ModelSerializer):
    """
    Lesson request with both participants.

    Fields:
    - id, status, requested_date, requested_time, message
    - student / teacher: UserSummarySerializer
    - created_at, updated_at
    """

    student = UserSummarySerializer(read_only=True)
    teacher = UserSummarySerializer(read_only=True)
    requested_time = serializers.TimeField(format=TIME_FORMAT, read_only=True)

    class Meta:
        model = LessonRequest
        fields = [
            'id',
            'student',
            'teacher',
            'status',
            'requested_date',
            'requested_time',
            'message',
            'created_at',
            'updated_at'
        ]
        read_only_fields = fields


# ============================================================================
# Chat and Message Serializers
# ============================================================================

class MessageSerializer(serializers.ModelSerializer):
    """
    A single chat message.

    Fields:
    - id, chat_id, content, created_at
    - sender: UserSummarySerializer
    - read_at: When the recipient opened the chat, or null
    """

    chat_id = serializers.IntegerField(read_only=True)
    sender = UserSummarySerializer(read_only=True)

    class Meta:
        model = Message
        fields = ['id', 'chat_id', 'sender', 'content', 'created_at', 'read_at']
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    """Input for POST /api/messages/. Blank content is rejected by the store."""

    chat_id = serializers.IntegerField(min_value=1)
    content = serializers.CharField(allow_blank=True, max_length=5000, trim_whitespace=False)


class ChatListSerializer(serializers.ModelSerializer):
    """
    Chat row for GET /api/chats/.

    Reads the counterpart, unread_count, last_message and last_message_at
    attributes attached by core.messaging.list_chats.
    """

    lesson_request_id = serializers.IntegerField(read_only=True, allow_null=True)
    counterpart = UserSummarySerializer(read_only=True)
    unread_count = serializers.IntegerField(read_only=True)
    last_message = serializers.CharField(read_only=True, allow_null=True)
    last_message_at = serializers.DateTimeField(read_only=True, allow_null=True)

    class Meta:
        model = Chat
        fields = [
            'id',
            'lesson_request_id',
            'counterpart',
            'unread_count',
            'last_message',
            'last_message_at',
            'created_at',
            'updated_at'
        ]
        read_only_fields = fields


class ChatDetailSerializer(serializers.ModelSerializer):
    """
    Chat with its messages for GET /api/chats/<id>/.

    Expects 'counterpart' and 'messages' in the serializer context.
    """

    lesson_request_id = serializers.IntegerField(read_only=True, allow_null=True)
    counterpart = serializers.SerializerMethodField()
    messages = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = [
            'id',
            'lesson_request_id',
            'counterpart',
            'messages',
            'created_at',
            'updated_at'
        ]
        read_only_fields = fields

    def get_counterpart(self, obj):
        return UserSummarySerializer(self.context['counterpart']).data

    def get_messages(self, obj):
        return MessageSerializer(self.context['messages'], many=True).data


# ============================================================================
# Notification Serializers
# ============================================================================

class NotificationSerializer(serializers.ModelSerializer):

    class Meta:
        model = Notification
        fields = [
            'id',
            'type',
            'title',
            'message',
            'related_id',
            'related_type',
            'is_read',
            'created_at'
        ]
        read_only_fields = fields


class NotificationQuerySerializer(serializers.Serializer):
    """Query string for GET /api/notifications/."""

    is_read = serializers.BooleanField(required=False, allow_null=True, default=None)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100)


# ============================================================================
# Teacher Discovery Serializers
# ============================================================================

class TeacherSearchSerializer(serializers.Serializer):
    """
    Query string for GET /api/teachers/.

    Every filter is optional. Validation:
    - subject: positive integer
    - min_price / max_price: non-negative numbers, min_price <= max_price
    - online_offline_format: online, offline or both
    - available_date: YYYY-MM-DD
    - available_day: 0 (Sunday) to 6 (Saturday)
    """

    search = serializers.CharField(required=False, allow_blank=True, max_length=200)
    subject = serializers.IntegerField(required=False, min_value=1)
    city = serializers.CharField(required=False, allow_blank=True, max_length=100)
    min_price = serializers.DecimalField(
        required=False,
        max_digits=10,
        decimal_places=2,
        min_value=0
    )
    max_price = serializers.DecimalField(
        required=False,
        max_digits=10,
        decimal_places=2,
        min_value=0
    )
    online_offline_format = serializers.ChoiceField(
        required=False,
        choices=User.FORMAT_CHOICES
    )
    available_date = serializers.DateField(required=False)
    available_day = serializers.IntegerField(required=False, min_value=0, max_value=6)

    def validate(self, attrs):
        min_price = attrs.get('min_price')
        max_price = attrs.get('max_price')
        if min_price is not None and max_price is not None and min_price > max_price:
            raise serializers.ValidationError({
                'min_price': 'Minimum price cannot be greater than maximum price.'
            })
        return attrs


class AvailabilitySlotSerializer(serializers.ModelSerializer):
    """Dated availability slot. Times are rendered as HH:MM."""

    teacher_id = serializers.IntegerField(read_only=True)
    start_time = serializers.TimeField(format=TIME_FORMAT, read_only=True)
    end_time = serializers.TimeField(format=TIME_FORMAT, read_only=True)

    class Meta:
        model = AvailabilitySlot
        fields = ['id', 'teacher_id', 'date', 'start_time', 'end_time', 'is_available']
        read_only_fields = fields


class AvailableDaySerializer(serializers.ModelSerializer):
    """Weekly availability. day_of_week: 0=Sunday ... 6=Saturday."""

    teacher_id = serializers.IntegerField(read_only=True)
    day_name = serializers.CharField(source='get_day_of_week_display', read_only=True)
    start_time = serializers.TimeField(format=TIME_FORMAT, read_only=True)
    end_time = serializers.TimeField(format=TIME_FORMAT, read_only=True)

    class Meta:
        model = AvailableDay
        fields = ['id', 'teacher_id', 'day_of_week', 'day_name', 'start_time', 'end_time']
        read_only_fields = fields


class ReviewSerializer(serializers.ModelSerializer):
    """
    Review as shown on a teacher's profile.

    Fields:
    - id, teacher_id, lesson_request_id, rating, comment
    - student: UserSummarySerializer of the reviewer
    - created_at, updated_at
    """

    teacher_id = serializers.IntegerField(read_only=True)
    lesson_request_id = serializers.IntegerField(read_only=True, allow_null=True)
    student = UserSummarySerializer(read_only=True)

    class Meta:
        model = Review
        fields = [
            'id',
            'teacher_id',
            'student',
            'lesson_request_id',
            'rating',
            'comment',
            'created_at',
            'updated_at'
        ]
        read_only_fields = fields


class TeacherListSerializer(serializers.ModelSerializer):
    """
    Teacher row in discovery results and favorites.

    rating and review_count come from the core.discovery annotations, which
    favorites reuse; a teacher without reviews reports 0.
    """

    name = serializers.CharField(source='display_name', read_only=True)
    rating = serializers.SerializerMethodField()
    review_count = serializers.SerializerMethodField()
    subjects = SubjectSerializer(many=True, read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'name',
            'bio',
            'avatar',
            'city',
            'experience',
            'education',
            'specialization',
            'price_per_lesson',
            'online_offline_format',
            'rating',
            'review_count',
            'subjects'
        ]
        read_only_fields = fields

    def get_rating(self, obj):
        rating = getattr(obj, 'rating', None)
        return float(rating) if rating is not None else 0.0

    def get_review_count(self, obj):
        return getattr(obj, 'review_count', 0) or 0


class TeacherDetailSerializer(TeacherListSerializer):
    """
    Teacher profile for GET /api/teachers/<id>/.

    Adds upcoming availability slots, weekly days and reviews attached by
    core.discovery.get_teacher.
    """

    availability = AvailabilitySlotSerializer(source='upcoming_slots', many=True, read_only=True)
    available_days = AvailableDaySerializer(source='weekly_days', many=True, read_only=True)
    reviews = ReviewSerializer(source='recent_reviews', many=True, read_only=True)

    class Meta(TeacherListSerializer.Meta):
        fields = TeacherListSerializer.Meta.fields + [
            'availability',
            'available_days',
            'reviews'
        ]
        read_only_fields = fields


# ============================================================================
# Availability Input Serializers
# ============================================================================

class AvailabilityRangeSerializer(serializers.Serializer):
    """Query string for GET /api/availability/teacher/<id>/."""

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start_date = attrs.get('start_date')
        end_date = attrs.get('end_date')
        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({
                'end_date': 'End date must not be before start date.'
            })
        return attrs


class _TimeRangeInputSerializer(serializers.Serializer):
    start_time = serializers.TimeField(input_formats=TIME_INPUT_FORMATS)
    end_time = serializers.TimeField(input_formats=TIME_INPUT_FORMATS)

    def validate(self, attrs):
        if attrs['end_time'] <= attrs['start_time']:
            raise serializers.ValidationError({
                'end_time': 'End time must be after start time.'
            })
        return attrs


class AvailabilitySlotWriteSerializer(_TimeRangeInputSerializer):
    """Input for POST /api/availability/."""

    date = serializers.DateField()
    is_available = serializers.BooleanField(required=False, default=True)


class AvailableDayWriteSerializer(_TimeRangeInputSerializer):
    """Input for POST /api/availability/days/."""

    day_of_week = serializers.IntegerField(min_value=0, max_value=6)


# ============================================================================
# Review Input Serializers
# ============================================================================

class ReviewCreateSerializer(serializers.Serializer):
    """
    Input for POST /api/reviews/.

    The rating range is checked by core.reviews so that the role check runs
    before it.
    """

    teacher_id = serializers.IntegerField(min_value=1)
    rating = serializers.IntegerField()
    comment = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=2000)
    lesson_request_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class ReviewUpdateSerializer(serializers.Serializer):
    """Input for PUT /api/reviews/<id>/."""

    rating = serializers.IntegerField(required=False)
    comment = serializers.CharField(required=False, allow_blank=True, max_length=2000)
