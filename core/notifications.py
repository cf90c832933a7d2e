"""
In-app notifications.

Usage (from signal receivers or any domain operation):
    from core.notifications import notify
    notify(user_id=teacher.id, notification_type=Notification.TYPE_LESSON_REQUEST,
           title='New Lesson Request', message='...', related_id=request.id,
           related_type=Notification.RELATED_LESSON_REQUEST)

notify() is best-effort: a failure to record a notification is logged and
never propagates to the operation that triggered it.
"""

import logging

from django.db import transaction
from rest_framework.exceptions import NotFound

from .models import Notification

logger = logging.getLogger(__name__)


def notify(user_id, notification_type, title, message, related_id=None, related_type=None):
    """
    Record a notification for a user.

    The insert runs in its own savepoint so that a failure cannot poison an
    enclosing transaction.

    Returns:
        Notification or None if the write failed
    """
    try:
        with transaction.atomic():
            notification = Notification.objects.create(
                user_id=user_id,
                type=notification_type,
                title=title,
                message=message,
                related_id=related_id,
                related_type=related_type,
            )
    except Exception:
        logger.exception(
            f"Failed to record notification. "
            f"User ID: {user_id}, Type: {notification_type}, "
            f"Related: {related_type}#{related_id}"
        )
        return None

    logger.debug(f"Notification {notification.id} ({notification_type}) recorded for user {user_id}")
    return notification


def list_notifications(user, is_read=None, limit=None):
    """
    Return a user's notifications, newest first.

    Args:
        user: Recipient
        is_read: Optional bool filter
        limit: Optional maximum number of rows
    """
    queryset = Notification.objects.filter(user=user).order_by('-created_at', '-id')
    if is_read is not None:
        queryset = queryset.filter(is_read=is_read)
    if limit is not None:
        queryset = queryset[:limit]
    return list(queryset)


def mark_read(notification_id, user):
    """
    Mark one of the user's notifications as read.

    Raises:
        NotFound: If the notification does not exist or belongs to someone else
    """
    updated = Notification.objects.filter(pk=notification_id, user=user).update(is_read=True)
    if not updated:
        raise NotFound('Notification not found.')
    return Notification.objects.get(pk=notification_id)


def mark_all_read(user):
    """Mark every unread notification of the user as read. Returns the count."""
    return Notification.objects.filter(user=user, is_read=False).update(is_read=True)


def unread_count(user):
    return Notification.objects.filter(user=user, is_read=False).count()
