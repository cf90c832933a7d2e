"""
Data model for the Tutor Marketplace.

Users are either students or teachers. Students send lesson requests to
teachers; a confirmed request gets a chat, and every chat keeps an
append-only message log. Notifications, favorites, availability and reviews
hang off the same two roles.
"""

from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from .validators import (
    validate_avatar_image,
    validate_day_of_week,
    validate_time_range,
)


def user_avatar_upload_path(instance, filename):
    """
    Generate upload path for user avatars.

    Path format: avatars/{user_id}/{filename}
    """
    user_id = instance.id if instance.id else 'temp'
    return f'avatars/{user_id}/{filename}'


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Additional fields:
    - role: Either 'student' or 'teacher'
    - name: Display name shown to other users
    - bio, avatar, city: Shared profile attributes
    - age: Student-only attribute
    - experience, education, specialization, price_per_lesson,
      online_offline_format: Teacher-only attributes
    - created_at / updated_at: Timestamps

    Role-specific attributes must stay empty for the other role.
    """

    ROLE_STUDENT = 'student'
    ROLE_TEACHER = 'teacher'

    ROLE_CHOICES = [
        (ROLE_STUDENT, 'Student'),
        (ROLE_TEACHER, 'Teacher'),
    ]

    FORMAT_ONLINE = 'online'
    FORMAT_OFFLINE = 'offline'
    FORMAT_BOTH = 'both'

    FORMAT_CHOICES = [
        (FORMAT_ONLINE, 'Online'),
        (FORMAT_OFFLINE, 'Offline'),
        (FORMAT_BOTH, 'Online and offline'),
    ]

    STUDENT_ONLY_FIELDS = ('age',)
    TEACHER_ONLY_FIELDS = (
        'experience',
        'education',
        'specialization',
        'price_per_lesson',
        'online_offline_format',
    )

    REQUIRED_FIELDS = ['email', 'role']

    role = models.CharField(
        _('role'),
        max_length=10,
        choices=ROLE_CHOICES,
        blank=False,
        null=False,
        help_text=_('Required. Whether the user is a student or a teacher.')
    )

    name = models.CharField(
        _('display name'),
        max_length=255,
        blank=True,
        default='',
        help_text=_('Name shown to other users.')
    )

    bio = models.TextField(
        _('bio'),
        blank=True,
        default='',
    )

    avatar = models.ImageField(
        _('avatar'),
        upload_to=user_avatar_upload_path,
        blank=True,
        null=True,
        validators=[validate_avatar_image],
        help_text=_('Optional. Profile picture (max 5MB, formats: jpg, png, webp).')
    )

    city = models.CharField(
        _('city'),
        max_length=255,
        blank=True,
        default='',
    )

    age = models.PositiveSmallIntegerField(
        _('age'),
        blank=True,
        null=True,
        help_text=_('Student only.')
    )

    experience = models.TextField(
        _('experience'),
        blank=True,
        null=True,
        help_text=_('Teacher only.')
    )

    education = models.TextField(
        _('education'),
        blank=True,
        null=True,
        help_text=_('Teacher only.')
    )

    specialization = models.TextField(
        _('specialization'),
        blank=True,
        null=True,
        help_text=_('Teacher only.')
    )

    price_per_lesson = models.DecimalField(
        _('price per lesson'),
        max_digits=10,
        decimal_places=2,
        blank=True,
        null=True,
        validators=[
            MinValueValidator(Decimal('0.00'), message=_('Price cannot be negative.'))
        ],
        help_text=_('Teacher only.')
    )

    online_offline_format = models.CharField(
        _('lesson format'),
        max_length=20,
        choices=FORMAT_CHOICES,
        blank=True,
        null=True,
        help_text=_('Teacher only. Where lessons take place.')
    )

    subjects = models.ManyToManyField(
        'Subject',
        through='TeacherSubject',
        related_name='teachers',
        blank=True,
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
    )

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['role'], name='core_user_role_idx'),
            models.Index(fields=['city'], name='core_user_city_idx'),
            models.Index(fields=['price_per_lesson'], name='core_user_price_idx'),
        ]

    def __str__(self):
        return self.display_name

    @property
    def display_name(self):
        """Name shown to other users: name, else full name, else username."""
        return self.name or self.get_full_name() or self.username

    def is_student(self):
        return self.role == self.ROLE_STUDENT

    def is_teacher(self):
        return self.role == self.ROLE_TEACHER

    def clean(self):
        """
        Validate model fields.

        Ensures:
        - Role is provided
        - Student-only attributes are empty for teachers
        - Teacher-only attributes are empty for students

        Raises:
            ValidationError: If validation fails
        """
        super().clean()

        if not self.role:
            raise ValidationError({
                'role': _('Role is required.')
            })

        if self.role == self.ROLE_TEACHER:
            foreign_fields = self.STUDENT_ONLY_FIELDS
            message = _('This attribute is only meaningful for students.')
        else:
            foreign_fields = self.TEACHER_ONLY_FIELDS
            message = _('This attribute is only meaningful for teachers.')

        errors = {
            field: message
            for field in foreign_fields
            if getattr(self, field) not in (None, '')
        }
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        # Uniqueness is left to the database so concurrent inserts surface
        # as IntegrityError instead of a racy pre-check.
        self.clean()
        super().save(*args, **kwargs)


class Subject(models.Model):
    """Global subject catalog entry (Math, History, ...)."""

    name = models.CharField(
        _('name'),
        max_length=100,
        unique=True,
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
    )

    class Meta:
        verbose_name = _('subject')
        verbose_name_plural = _('subjects')
        ordering = ['name']

    def __str__(self):
        return self.name


class TeacherSubject(models.Model):
    """Link between a teacher and a subject they teach."""

    teacher = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='teacher_subjects',
    )

    subject = models.ForeignKey(
        Subject,
        on_delete=models.CASCADE,
        related_name='teacher_subjects',
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
    )

    class Meta:
        verbose_name = _('teacher subject')
        verbose_name_plural = _('teacher subjects')
        constraints = [
            models.UniqueConstraint(
                fields=['teacher', 'subject'],
                name='unique_teacher_subject'
            )
        ]

    def __str__(self):
        return f"{self.teacher} teaches {self.subject}"


class LessonRequest(models.Model):
    """
    A student's proposal to take lessons with a teacher.

    Fields:
    - student / teacher: The two participants
    - status: pending, confirmed, rejected or cancelled
    - requested_date / requested_time: Optional preferred slot
    - message: Optional free text from the student
    - created_at / updated_at: Timestamps

    Status starts at pending and moves at most once to a terminal value.
    Transitions are performed with conditional updates in core.lifecycle,
    never by saving a modified instance.
    """

    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_REJECTED = 'rejected'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    TERMINAL_STATUSES = (STATUS_CONFIRMED, STATUS_REJECTED, STATUS_CANCELLED)

    # new status -> role allowed to request it
    TRANSITIONS = {
        STATUS_PENDING: {
            STATUS_CONFIRMED: User.ROLE_TEACHER,
            STATUS_REJECTED: User.ROLE_TEACHER,
            STATUS_CANCELLED: User.ROLE_STUDENT,
        },
    }

    student = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='student_lesson_requests',
        help_text=_('Student asking for lessons')
    )

    teacher = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='teacher_lesson_requests',
        help_text=_('Teacher being asked')
    )

    status = models.CharField(
        _('status'),
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    requested_date = models.DateField(
        _('requested date'),
        blank=True,
        null=True,
    )

    requested_time = models.TimeField(
        _('requested time'),
        blank=True,
        null=True,
    )

    message = models.TextField(
        _('message'),
        blank=True,
        null=True,
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
    )

    class Meta:
        verbose_name = _('lesson request')
        verbose_name_plural = _('lesson requests')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['student'], name='core_lr_student_idx'),
            models.Index(fields=['teacher'], name='core_lr_teacher_idx'),
            models.Index(fields=['status'], name='core_lr_status_idx'),
        ]

    def __str__(self):
        return f"Lesson request #{self.pk} {self.student} -> {self.teacher} ({self.status})"

    def clean(self):
        """
        Validate participants.

        Ensures:
        - Student has role 'student'
        - Teacher has role 'teacher'
        """
        super().clean()

        if self.student_id and not self.student.is_student():
            raise ValidationError({
                'student': _('Only students can request lessons.')
            })

        if self.teacher_id and not self.teacher.is_teacher():
            raise ValidationError({
                'teacher': _('Lessons can only be requested from teachers.')
            })

    def can_transition_to(self, new_status, role):
        """
        Check the state machine for a move from the current status.

        Valid transitions:
        - pending -> confirmed (teacher)
        - pending -> rejected (teacher)
        - pending -> cancelled (student)
        - confirmed / rejected / cancelled -> (terminal)

        Returns:
            tuple: (is_valid: bool, error_message: str or None)
        """
        if self.status in self.TERMINAL_STATUSES:
            return False, f'Request is already {self.status}.'

        allowed = self.TRANSITIONS.get(self.status, {})
        if new_status not in allowed:
            return False, f'Invalid status transition from {self.status} to {new_status}.'

        if allowed[new_status] != role:
            return False, f'Only a {allowed[new_status]} can move a request to {new_status}.'

        return True, None


class Chat(models.Model):
    """
    Conversation between a student and a teacher.

    Created by core.lifecycle.ensure_chat when a lesson request is
    confirmed. At most one chat exists per (student, teacher, lesson_request)
    triple. updated_at is the last-activity timestamp used for ordering.
    """

    student = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='student_chats',
    )

    teacher = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='teacher_chats',
    )

    lesson_request = models.ForeignKey(
        LessonRequest,
        on_delete=models.SET_NULL,
        related_name='chats',
        blank=True,
        null=True,
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
    )

    class Meta:
        verbose_name = _('chat')
        verbose_name_plural = _('chats')
        ordering = ['-updated_at', '-id']
        indexes = [
            models.Index(fields=['student'], name='core_chat_student_idx'),
            models.Index(fields=['teacher'], name='core_chat_teacher_idx'),
            models.Index(fields=['lesson_request'], name='core_chat_request_idx'),
        ]
        constraints = [
            # NULL lesson_request values never collide, so only chats tied
            # to a request are constrained.
            models.UniqueConstraint(
                fields=['student', 'teacher', 'lesson_request'],
                name='unique_chat_per_lesson_request'
            )
        ]

    def __str__(self):
        return f"Chat #{self.pk} {self.student} / {self.teacher}"

    def has_participant(self, user_id):
        return user_id in (self.student_id, self.teacher_id)

    def counterpart_id(self, user_id):
        """Return the id of the other participant."""
        return self.teacher_id if user_id == self.student_id else self.student_id


class Message(models.Model):
    """
    A single message in a chat.

    Append-only. read_at moves from null to a timestamp once, when the
    recipient opens the chat.
    """

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name='messages',
    )

    sender = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='sent_messages',
    )

    content = models.TextField(
        _('content'),
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
        db_index=True,
    )

    read_at = models.DateTimeField(
        _('read at'),
        blank=True,
        null=True,
    )

    class Meta:
        verbose_name = _('message')
        verbose_name_plural = _('messages')
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['chat', 'created_at'], name='core_msg_chat_created_idx'),
            models.Index(fields=['chat', 'read_at'], name='core_msg_chat_read_idx'),
        ]

    def __str__(self):
        return f"Message #{self.pk} in chat {self.chat_id}"

    def clean(self):
        super().clean()

        if self.chat_id and self.sender_id and not self.chat.has_participant(self.sender_id):
            raise ValidationError({
                'sender': _('Sender must be a participant of the chat.')
            })

        if not self.content or not self.content.strip():
            raise ValidationError({
                'content': _('Message content cannot be empty.')
            })

    def save(self, *args, **kwargs):
        if not self.pk:
            self.clean()
        super().save(*args, **kwargs)


class Notification(models.Model):
    """
    User-facing event (new request, decision, new message).

    Written best-effort by core.notifications.notify. Only the recipient
    flips is_read, and only from false to true.
    """

    TYPE_LESSON_REQUEST = 'lesson_request'
    TYPE_LESSON_CONFIRMED = 'lesson_confirmed'
    TYPE_LESSON_REJECTED = 'lesson_rejected'
    TYPE_LESSON_CANCELLED = 'lesson_cancelled'
    TYPE_MESSAGE = 'message'

    TYPE_CHOICES = [
        (TYPE_LESSON_REQUEST, 'New lesson request'),
        (TYPE_LESSON_CONFIRMED, 'Lesson confirmed'),
        (TYPE_LESSON_REJECTED, 'Lesson rejected'),
        (TYPE_LESSON_CANCELLED, 'Lesson cancelled'),
        (TYPE_MESSAGE, 'New message'),
    ]

    RELATED_LESSON_REQUEST = 'lesson_request'
    RELATED_CHAT = 'chat'

    RELATED_TYPE_CHOICES = [
        (RELATED_LESSON_REQUEST, 'Lesson request'),
        (RELATED_CHAT, 'Chat'),
    ]

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='notifications',
        help_text=_('Recipient')
    )

    type = models.CharField(
        _('type'),
        max_length=50,
        choices=TYPE_CHOICES,
    )

    title = models.CharField(
        _('title'),
        max_length=255,
    )

    message = models.TextField(
        _('message'),
    )

    related_id = models.PositiveBigIntegerField(
        _('related id'),
        blank=True,
        null=True,
    )

    related_type = models.CharField(
        _('related type'),
        max_length=50,
        choices=RELATED_TYPE_CHOICES,
        blank=True,
        null=True,
    )

    is_read = models.BooleanField(
        _('read'),
        default=False,
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
    )

    class Meta:
        verbose_name = _('notification')
        verbose_name_plural = _('notifications')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='core_notif_user_read_idx'),
            models.Index(fields=['created_at'], name='core_notif_created_idx'),
        ]

    def __str__(self):
        return f"Notification to {self.user_id}: {self.title}"


class Favorite(models.Model):
    """A student's bookmark of a teacher."""

    student = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='favorites',
    )

    teacher = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='favorited_by',
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
    )

    class Meta:
        verbose_name = _('favorite')
        verbose_name_plural = _('favorites')
        constraints = [
            models.UniqueConstraint(
                fields=['student', 'teacher'],
                name='unique_favorite_per_student_teacher'
            )
        ]

    def __str__(self):
        return f"{self.student} likes {self.teacher}"


class AvailabilitySlot(models.Model):
    """A teacher's availability on a specific calendar date."""

    teacher = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='availability_slots',
    )

    date = models.DateField(
        _('date'),
    )

    start_time = models.TimeField(
        _('start time'),
    )

    end_time = models.TimeField(
        _('end time'),
    )

    is_available = models.BooleanField(
        _('available'),
        default=True,
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
    )

    class Meta:
        verbose_name = _('availability slot')
        verbose_name_plural = _('availability slots')
        ordering = ['date', 'start_time']
        indexes = [
            models.Index(fields=['teacher'], name='core_slot_teacher_idx'),
            models.Index(fields=['date'], name='core_slot_date_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['teacher', 'date', 'start_time'],
                name='unique_slot_per_teacher_date_start'
            )
        ]

    def __str__(self):
        return f"{self.teacher} {self.date} {self.start_time}-{self.end_time}"

    def clean(self):
        super().clean()
        validate_time_range(self.start_time, self.end_time)


class AvailableDay(models.Model):
    """
    Weekly recurring availability.

    day_of_week: 0=Sunday, 1=Monday, ... 6=Saturday. One contiguous range
    per weekday.
    """

    DAY_CHOICES = [
        (0, 'Sunday'),
        (1, 'Monday'),
        (2, 'Tuesday'),
        (3, 'Wednesday'),
        (4, 'Thursday'),
        (5, 'Friday'),
        (6, 'Saturday'),
    ]

    teacher = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='available_days',
    )

    day_of_week = models.PositiveSmallIntegerField(
        _('day of week'),
        choices=DAY_CHOICES,
        validators=[validate_day_of_week],
    )

    start_time = models.TimeField(
        _('start time'),
    )

    end_time = models.TimeField(
        _('end time'),
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
    )

    class Meta:
        verbose_name = _('available day')
        verbose_name_plural = _('available days')
        ordering = ['day_of_week', 'start_time']
        indexes = [
            models.Index(fields=['teacher'], name='core_day_teacher_idx'),
            models.Index(fields=['day_of_week'], name='core_day_dow_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['teacher', 'day_of_week'],
                name='unique_available_day_per_teacher'
            )
        ]

    def __str__(self):
        return f"{self.teacher} {self.get_day_of_week_display()} {self.start_time}-{self.end_time}"

    def clean(self):
        super().clean()
        validate_time_range(self.start_time, self.end_time)


class Review(models.Model):
    """
    A student's rating of a teacher.

    Fields:
    - teacher / student: Reviewee and reviewer
    - lesson_request: Optional confirmed request the review refers to
    - rating: Integer from 1 to 5
    - comment: Optional written feedback
    """

    teacher = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='reviews_received',
    )

    student = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='reviews_given',
    )

    lesson_request = models.ForeignKey(
        LessonRequest,
        on_delete=models.SET_NULL,
        related_name='reviews',
        blank=True,
        null=True,
    )

    rating = models.PositiveSmallIntegerField(
        _('rating'),
        validators=[
            MinValueValidator(1, message=_('Rating must be at least 1.')),
            MaxValueValidator(5, message=_('Rating must be at most 5.'))
        ],
    )

    comment = models.TextField(
        _('comment'),
        blank=True,
        null=True,
    )

    created_at = models.DateTimeField(
        _('created at'),
        auto_now_add=True,
    )

    updated_at = models.DateTimeField(
        _('updated at'),
        auto_now=True,
    )

    class Meta:
        verbose_name = _('review')
        verbose_name_plural = _('reviews')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['teacher'], name='core_review_teacher_idx'),
            models.Index(fields=['student'], name='core_review_student_idx'),
            models.Index(fields=['rating'], name='core_review_rating_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['teacher', 'student', 'lesson_request'],
                name='unique_review_per_lesson'
            )
        ]

    def __str__(self):
        return f"Review by {self.student} for {self.teacher} - {self.rating}★"
