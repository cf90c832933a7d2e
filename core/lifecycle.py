"""
Lesson request lifecycle and chat provisioning.

A lesson request starts as pending and moves exactly once to confirmed,
rejected (teacher decisions) or cancelled (student withdrawal). Every move is
a single conditional UPDATE filtered on status='pending'; the number of rows
it touched is the only success signal, so two concurrent decisions cannot
both win.

Confirming a request provisions the chat for (student, teacher, request) in
the same transaction. Provisioning is an insert-if-absent against the
unique constraint on Chat and can be retried any number of times.

Notifications are sent through core.signals from transaction.on_commit, so
an enclosing transaction that rolls back never announces anything.
"""

import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from .discovery import resolve_teacher
from .exceptions import Conflict
from .models import Chat, LessonRequest
from .perspectives import own_filter
from .signals import dispatch, lesson_request_created, lesson_request_status_changed

logger = logging.getLogger(__name__)

TEACHER_DECISIONS = (LessonRequest.STATUS_CONFIRMED, LessonRequest.STATUS_REJECTED)


def create_lesson_request(student, teacher_id, requested_date=None, requested_time=None, message=None):
    """
    Create a pending lesson request from a student to a teacher.

    Raises:
        PermissionDenied: If the caller is not a student
        ValidationError: If teacher_id is missing
        NotFound: If teacher_id is not a teacher
    """
    if not student.is_student():
        raise PermissionDenied('Only students can create lesson requests.')

    if not teacher_id:
        raise ValidationError({'teacher_id': ['Teacher ID is required.']})

    teacher = resolve_teacher(teacher_id)

    with transaction.atomic():
        lesson_request = LessonRequest.objects.create(
            student=student,
            teacher=teacher,
            requested_date=requested_date,
            requested_time=requested_time,
            message=message or None,
        )

    logger.info(
        f"Lesson request created. "
        f"Request ID: {lesson_request.id}, "
        f"Student ID: {student.id}, Teacher ID: {teacher.id}"
    )

    transaction.on_commit(
        lambda: dispatch(lesson_request_created, sender=LessonRequest, lesson_request=lesson_request)
    )
    return lesson_request


def list_lesson_requests(user, status=None):
    """
    Return the requests the user takes part in, newest first.

    Students see requests they sent, teachers see requests they received.

    Raises:
        ValidationError: If status is not a known status
    """
    queryset = LessonRequest.objects.filter(**own_filter(user))

    if status:
        if status not in dict(LessonRequest.STATUS_CHOICES):
            raise ValidationError({'status': [f'Unknown status "{status}".']})
        queryset = queryset.filter(status=status)

    return list(
        queryset.select_related('student', 'teacher').order_by('-created_at', '-id')
    )


def get_lesson_request(request_id, user):
    """
    Fetch one request visible to the user.

    Raises:
        NotFound: If the request does not exist or the user is not a participant
    """
    try:
        return LessonRequest.objects.select_related('student', 'teacher').get(
            Q(student=user) | Q(teacher=user),
            pk=request_id,
        )
    except LessonRequest.DoesNotExist:
        raise NotFound('Request not found.')


def transition_lesson_request(request_id, teacher, new_status):
    """
    Confirm or reject a pending request on behalf of its teacher.

    On confirmation the chat for the request is provisioned in the same
    transaction as the status change.

    Raises:
        ValidationError: If new_status is not confirmed/rejected
        PermissionDenied: If the caller is not a teacher, or not this request's teacher
        NotFound: If the request does not exist
        Conflict: If the request is no longer pending
    """
    if new_status not in TEACHER_DECISIONS:
        raise ValidationError({'status': ['Invalid status. Must be confirmed or rejected.']})

    if not teacher.is_teacher():
        raise PermissionDenied('Only teachers can update request status.')

    with transaction.atomic():
        try:
            lesson_request = LessonRequest.objects.get(pk=request_id)
        except LessonRequest.DoesNotExist:
            raise NotFound('Request not found.')

        if lesson_request.teacher_id != teacher.id:
            raise PermissionDenied('Only the teacher of this request can update its status.')

        _apply_transition(lesson_request, teacher, new_status, participant_field='teacher')

        if new_status == LessonRequest.STATUS_CONFIRMED:
            ensure_chat(lesson_request.student_id, lesson_request.teacher_id, lesson_request.id)

        lesson_request.refresh_from_db()

    transaction.on_commit(lambda: dispatch(
        lesson_request_status_changed,
        sender=LessonRequest,
        lesson_request=lesson_request,
        actor=teacher,
        old_status=LessonRequest.STATUS_PENDING,
        new_status=new_status,
    ))
    return lesson_request


def cancel_lesson_request(request_id, student):
    """
    Withdraw a pending request on behalf of the student who sent it.

    Raises:
        PermissionDenied: If the caller is not a student
        NotFound: If the request does not exist or belongs to another student
        Conflict: If the request is no longer pending
    """
    if not student.is_student():
        raise PermissionDenied('Only students can cancel lesson requests.')

    with transaction.atomic():
        try:
            lesson_request = LessonRequest.objects.get(pk=request_id, student=student)
        except LessonRequest.DoesNotExist:
            raise NotFound('Request not found.')

        _apply_transition(
            lesson_request, student, LessonRequest.STATUS_CANCELLED, participant_field='student'
        )
        lesson_request.refresh_from_db()

    transaction.on_commit(lambda: dispatch(
        lesson_request_status_changed,
        sender=LessonRequest,
        lesson_request=lesson_request,
        actor=student,
        old_status=LessonRequest.STATUS_PENDING,
        new_status=LessonRequest.STATUS_CANCELLED,
    ))
    return lesson_request


def _apply_transition(lesson_request, actor, new_status, participant_field):
    """
    Move a request out of pending with one conditional UPDATE.

    The in-memory status is only used to build a helpful message; the
    decision is made by the database.

    Raises:
        Conflict: If no row was pending at update time
    """
    is_valid, error_message = lesson_request.can_transition_to(new_status, actor.role)
    if not is_valid and lesson_request.status != LessonRequest.STATUS_PENDING:
        raise Conflict(error_message)

    updated = LessonRequest.objects.filter(
        pk=lesson_request.pk,
        status=LessonRequest.STATUS_PENDING,
        **{participant_field: actor},
    ).update(status=new_status, updated_at=timezone.now())

    if updated != 1:
        logger.warning(
            f"Lesson request transition lost. "
            f"Request ID: {lesson_request.pk}, Target: {new_status}, Actor ID: {actor.id}"
        )
        raise Conflict('Request is not pending.')

    logger.info(
        f"Lesson request status updated. "
        f"Request ID: {lesson_request.pk}, "
        f"Old Status: {LessonRequest.STATUS_PENDING}, New Status: {new_status}, "
        f"Actor ID: {actor.id}"
    )


def ensure_chat(student_id, teacher_id, lesson_request_id):
    """
    Return the chat for a lesson request, creating it if absent.

    Safe under concurrent and repeated calls: the insert ignores unique
    constraint conflicts and the row is read back afterwards.

    Raises:
        ValueError: If lesson_request_id is None
    """
    if lesson_request_id is None:
        raise ValueError('ensure_chat needs a lesson request id.')

    Chat.objects.bulk_create(
        [Chat(student_id=student_id, teacher_id=teacher_id, lesson_request_id=lesson_request_id)],
        ignore_conflicts=True,
    )
    chat = Chat.objects.get(
        student_id=student_id,
        teacher_id=teacher_id,
        lesson_request_id=lesson_request_id,
    )
    logger.info(
        f"Chat ensured. Chat ID: {chat.id}, Request ID: {lesson_request_id}, "
        f"Student ID: {student_id}, Teacher ID: {teacher_id}"
    )
    return chat


def confirmed_requests_missing_chat():
    """Confirmed requests with no chat attached, oldest first."""
    return LessonRequest.objects.filter(
        status=LessonRequest.STATUS_CONFIRMED,
        chats__isnull=True,
    ).order_by('created_at', 'id')
