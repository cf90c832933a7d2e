"""Students' bookmarked teachers."""

import logging

from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound, PermissionDenied

from .discovery import resolve_teacher, round_rating, teacher_queryset
from .exceptions import Conflict
from .models import Favorite

logger = logging.getLogger(__name__)


def list_favorites(student):
    """
    Return the student's favorite teachers ordered by display name.

    Rows carry the same rating and review_count as discovery results.
    """
    teachers = list(teacher_queryset().filter(
        id__in=Favorite.objects.filter(student=student).values('teacher_id')
    ))
    for teacher in teachers:
        teacher.rating = round_rating(teacher.average_rating)
    return sorted(teachers, key=lambda t: (t.display_name.lower(), t.id))


def add_favorite(student, teacher_id):
    """
    Bookmark a teacher.

    Raises:
        PermissionDenied: If the caller is not a student
        NotFound: If teacher_id is not a teacher
        Conflict: If the teacher is already a favorite
    """
    if not student.is_student():
        raise PermissionDenied('Only students can add favorites.')

    teacher = resolve_teacher(teacher_id)

    try:
        with transaction.atomic():
            favorite = Favorite.objects.create(student=student, teacher=teacher)
    except IntegrityError:
        raise Conflict('Teacher already in favorites.')

    logger.info(f"Favorite added. Student ID: {student.id}, Teacher ID: {teacher.id}")
    return favorite


def remove_favorite(student, teacher_id):
    """
    Remove a bookmark.

    Raises:
        NotFound: If the teacher is not among the student's favorites
    """
    deleted, _ = Favorite.objects.filter(student=student, teacher_id=teacher_id).delete()
    if not deleted:
        raise NotFound('Favorite not found.')

    logger.info(f"Favorite removed. Student ID: {student.id}, Teacher ID: {teacher_id}")


def is_favorite(student, teacher_id):
    return Favorite.objects.filter(student=student, teacher_id=teacher_id).exists()
