"""
Domain signals and the receivers that turn them into notifications.

Lifecycle and messaging operations announce what happened by sending one of
the signals below once their own transaction has committed. Receivers here
record notifications for the counterpart. Delivery is best-effort: signals
are sent with send_robust() and receiver failures are logged, so a broken
notification never fails the operation that triggered it.
"""

import logging

from django.dispatch import Signal, receiver

from .models import LessonRequest, Message, Notification
from .notifications import notify

logger = logging.getLogger(__name__)

# kwargs: lesson_request
lesson_request_created = Signal()

# kwargs: lesson_request, actor, old_status, new_status
lesson_request_status_changed = Signal()

# kwargs: message
message_sent = Signal()


def dispatch(signal, sender, **kwargs):
    """
    Send a signal to every receiver, logging receivers that raise.

    Returns:
        list: (receiver, response) pairs from send_robust()
    """
    responses = signal.send_robust(sender=sender, **kwargs)
    for handler, response in responses:
        if isinstance(response, Exception):
            logger.error(
                f"Signal receiver {getattr(handler, '__name__', handler)} failed: {response}",
                exc_info=response
            )
    return responses


@receiver(lesson_request_created, sender=LessonRequest)
def notify_teacher_of_new_request(sender, lesson_request, **kwargs):
    """Tell the teacher a student has asked for lessons."""
    notify(
        user_id=lesson_request.teacher_id,
        notification_type=Notification.TYPE_LESSON_REQUEST,
        title='New Lesson Request',
        message=f'You have a new lesson request from {lesson_request.student.display_name}',
        related_id=lesson_request.id,
        related_type=Notification.RELATED_LESSON_REQUEST,
    )


@receiver(lesson_request_status_changed, sender=LessonRequest)
def notify_counterpart_of_status_change(sender, lesson_request, actor, new_status, **kwargs):
    """
    Tell the other participant about a decision on a lesson request.

    confirmed / rejected go to the student, cancelled goes to the teacher.
    """
    if new_status == LessonRequest.STATUS_CONFIRMED:
        recipient_id = lesson_request.student_id
        notification_type = Notification.TYPE_LESSON_CONFIRMED
        title = 'Lesson Confirmed'
        message = f'Your lesson request has been confirmed by {actor.display_name}'
    elif new_status == LessonRequest.STATUS_REJECTED:
        recipient_id = lesson_request.student_id
        notification_type = Notification.TYPE_LESSON_REJECTED
        title = 'Lesson Request Rejected'
        message = (
            f'Your lesson request has been rejected by {actor.display_name}. '
            f'You can choose another teacher.'
        )
    elif new_status == LessonRequest.STATUS_CANCELLED:
        recipient_id = lesson_request.teacher_id
        notification_type = Notification.TYPE_LESSON_CANCELLED
        title = 'Lesson Request Cancelled'
        message = f'{actor.display_name} has cancelled their lesson request'
    else:
        logger.warning(
            f"No notification defined for lesson request {lesson_request.id} "
            f"moving to {new_status}"
        )
        return

    notify(
        user_id=recipient_id,
        notification_type=notification_type,
        title=title,
        message=message,
        related_id=lesson_request.id,
        related_type=Notification.RELATED_LESSON_REQUEST,
    )


@receiver(message_sent, sender=Message)
def notify_recipient_of_message(sender, message, **kwargs):
    """Tell the other chat participant a message has arrived."""
    chat = message.chat
    notify(
        user_id=chat.counterpart_id(message.sender_id),
        notification_type=Notification.TYPE_MESSAGE,
        title='New Message',
        message=f'You have a new message from {message.sender.display_name}',
        related_id=chat.id,
        related_type=Notification.RELATED_CHAT,
    )
