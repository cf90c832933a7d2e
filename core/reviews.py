"""
Student reviews of teachers.

A student may leave one review per (teacher, lesson request). Reviews that
are not tied to a request count as a single "general" review per teacher,
checked here because the database treats NULL lesson requests as distinct.
"""

import logging

from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from .discovery import resolve_teacher
from .exceptions import Conflict
from .models import LessonRequest, Review

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _validate_rating(rating):
    try:
        rating = int(rating)
    except (TypeError, ValueError):
        raise ValidationError({'rating': ['Rating must be an integer.']})
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError({'rating': [f'Rating must be between {MIN_RATING} and {MAX_RATING}.']})
    return rating


def create_review(student, teacher_id, rating, comment=None, lesson_request_id=None):
    """
    Record a student's review of a teacher.

    Raises:
        PermissionDenied: If the caller is not a student
        NotFound: If teacher_id is not a teacher
        ValidationError: If rating is out of range, or the lesson request is
            not the student's confirmed request with this teacher
        Conflict: If the student already reviewed this teacher for the same
            lesson request (or generally, when no request is given)
    """
    if not student.is_student():
        raise PermissionDenied('Only students can leave reviews.')

    teacher = resolve_teacher(teacher_id)
    rating = _validate_rating(rating)

    if lesson_request_id is not None:
        is_own_confirmed = LessonRequest.objects.filter(
            pk=lesson_request_id,
            student=student,
            teacher=teacher,
            status=LessonRequest.STATUS_CONFIRMED,
        ).exists()
        if not is_own_confirmed:
            raise ValidationError({
                'lesson_request_id': ['Reviews can only refer to your own confirmed lesson with this teacher.']
            })

    try:
        with transaction.atomic():
            duplicate = Review.objects.select_for_update().filter(
                teacher=teacher,
                student=student,
                lesson_request_id=lesson_request_id,
            ).exists()
            if duplicate:
                raise Conflict('You have already reviewed this teacher.')

            review = Review.objects.create(
                teacher=teacher,
                student=student,
                lesson_request_id=lesson_request_id,
                rating=rating,
                comment=comment or None,
            )
    except IntegrityError:
        raise Conflict('You have already reviewed this teacher.')

    logger.info(
        f"Review created. Review ID: {review.id}, Teacher ID: {teacher.id}, "
        f"Student ID: {student.id}, Rating: {rating}"
    )
    return review


def list_reviews(teacher_id):
    """
    Return a teacher's reviews, newest first.

    Raises:
        NotFound: If teacher_id is not a teacher
    """
    teacher = resolve_teacher(teacher_id)
    return list(
        Review.objects.filter(teacher=teacher)
        .select_related('student')
        .order_by('-created_at', '-id')
    )


def update_review(review_id, student, rating=None, comment=None):
    """
    Change the rating and/or comment of the student's own review.

    Raises:
        NotFound: If the review does not exist or belongs to someone else
        ValidationError: If nothing is given to change, or rating is out of range
    """
    if rating is None and comment is None:
        raise ValidationError({'non_field_errors': ['Provide a rating or a comment to update.']})

    with transaction.atomic():
        try:
            review = Review.objects.select_for_update().get(pk=review_id, student=student)
        except Review.DoesNotExist:
            raise NotFound('Review not found.')

        if rating is not None:
            review.rating = _validate_rating(rating)
        if comment is not None:
            review.comment = comment
        review.save(update_fields=['rating', 'comment', 'updated_at'])

    logger.info(f"Review updated. Review ID: {review.id}, Student ID: {student.id}")
    return review
