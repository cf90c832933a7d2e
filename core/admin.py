"""
Django admin configuration for the Tutor Marketplace models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import (
    AvailabilitySlot,
    AvailableDay,
    Chat,
    Favorite,
    LessonRequest,
    Message,
    Notification,
    Review,
    Subject,
    TeacherSubject,
    User,
)


class TeacherSubjectInline(admin.TabularInline):
    """Inline admin for the subjects a teacher teaches."""
    model = TeacherSubject
    fk_name = 'teacher'
    extra = 1
    fields = ['subject', 'created_at']
    readonly_fields = ['created_at']


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.

    Extends Django's UserAdmin with role and profile fields.
    """

    list_display = [
        'username',
        'email',
        'name',
        'role',
        'city',
        'price_per_lesson',
        'is_staff',
        'is_active',
        'created_at',
    ]

    list_filter = [
        'role',
        'online_offline_format',
        'is_staff',
        'is_active',
        'created_at',
    ]

    search_fields = [
        'username',
        'email',
        'name',
        'first_name',
        'last_name',
        'city',
    ]

    ordering = ['-created_at']

    fieldsets = (
        (None, {
            'fields': ('username', 'password')
        }),
        (_('Personal Info'), {
            'fields': (
                'name',
                'first_name',
                'last_name',
                'email',
                'bio',
                'avatar',
                'city',
            )
        }),
        (_('Role'), {
            'fields': ('role', 'age')
        }),
        (_('Teaching Profile'), {
            'fields': (
                'experience',
                'education',
                'specialization',
                'price_per_lesson',
                'online_offline_format',
            ),
            'classes': ('collapse',),
        }),
        (_('Permissions'), {
            'fields': (
                'is_active',
                'is_staff',
                'is_superuser',
                'groups',
                'user_permissions',
            ),
            'classes': ('collapse',),
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'username',
                'email',
                'password1',
                'password2',
                'role',
                'name',
            ),
        }),
    )

    readonly_fields = ['created_at', 'updated_at', 'last_login', 'date_joined']

    inlines = [TeacherSubjectInline]

    date_hierarchy = 'created_at'

    list_per_page = 25

    def get_inline_instances(self, request, obj=None):
        # Subjects only apply to teachers.
        if obj is None or not obj.is_teacher():
            return []
        return super().get_inline_instances(request, obj)


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_at']
    search_fields = ['name']
    ordering = ['name']


@admin.register(LessonRequest)
class LessonRequestAdmin(admin.ModelAdmin):
    """
    Admin interface for lesson requests.

    Status is read-only here: it only moves through the conditional updates
    in core.lifecycle.
    """

    list_display = ['id', 'student', 'teacher', 'status', 'requested_date', 'requested_time', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['student__username', 'student__name', 'teacher__username', 'teacher__name']
    readonly_fields = ['status', 'created_at', 'updated_at']
    raw_id_fields = ['student', 'teacher']
    date_hierarchy = 'created_at'
    list_per_page = 25


class MessageInline(admin.TabularInline):
    """Read-only inline for a chat's message log."""
    model = Message
    extra = 0
    fields = ['sender', 'content', 'created_at', 'read_at']
    readonly_fields = fields
    can_delete = False
    ordering = ['created_at']


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    list_display = ['id', 'student', 'teacher', 'lesson_request', 'created_at', 'updated_at']
    search_fields = ['student__username', 'teacher__username']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['student', 'teacher', 'lesson_request']
    inlines = [MessageInline]
    list_per_page = 25


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'chat', 'sender', 'created_at', 'read_at']
    list_filter = ['created_at']
    search_fields = ['content', 'sender__username']
    readonly_fields = ['created_at', 'read_at']
    raw_id_fields = ['chat', 'sender']


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'type', 'title', 'is_read', 'created_at']
    list_filter = ['type', 'is_read', 'created_at']
    search_fields = ['title', 'message', 'user__username']
    readonly_fields = ['created_at']
    raw_id_fields = ['user']


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ['student', 'teacher', 'created_at']
    raw_id_fields = ['student', 'teacher']


@admin.register(AvailabilitySlot)
class AvailabilitySlotAdmin(admin.ModelAdmin):
    list_display = ['teacher', 'date', 'start_time', 'end_time', 'is_available']
    list_filter = ['is_available', 'date']
    raw_id_fields = ['teacher']
    ordering = ['date', 'start_time']


@admin.register(AvailableDay)
class AvailableDayAdmin(admin.ModelAdmin):
    list_display = ['teacher', 'day_of_week', 'start_time', 'end_time']
    list_filter = ['day_of_week']
    raw_id_fields = ['teacher']


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    """Admin interface for reviews."""

    list_display = ['teacher', 'student', 'rating', 'lesson_request', 'created_at']
    list_filter = ['rating', 'created_at']
    search_fields = ['comment', 'teacher__username', 'student__username']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['teacher', 'student', 'lesson_request']
