"""
Teacher discovery.

Search runs over teacher profiles with their review aggregate. Filters that
touch related tables (subjects, availability) are expressed as id__in
subqueries so they never multiply the review rows being averaged.
"""

from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Avg, Count, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound

from .models import AvailabilitySlot, AvailableDay, Subject, TeacherSubject, User

RATING_PRECISION = Decimal('0.01')


def resolve_teacher(teacher_id):
    """
    Return the teacher with the given id.

    Raises:
        NotFound: If no user with role 'teacher' has that id
    """
    try:
        return User.objects.get(pk=teacher_id, role=User.ROLE_TEACHER)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound('Teacher not found.')


def round_rating(average):
    """Average rating rounded to two decimals; 0 when there are no reviews."""
    if average is None:
        return Decimal('0.00')
    return Decimal(str(average)).quantize(RATING_PRECISION, rounding=ROUND_HALF_UP)


def teacher_queryset():
    """Teachers annotated with their review aggregate and subjects prefetched."""
    return (
        User.objects.filter(role=User.ROLE_TEACHER)
        .annotate(
            average_rating=Avg('reviews_received__rating'),
            review_count=Count('reviews_received'),
        )
        .prefetch_related('subjects')
    )


def apply_filters(queryset, filters):
    """
    Narrow a teacher queryset with validated search filters.

    Supported keys: search, subject, city, min_price, max_price,
    online_offline_format, available_date, available_day. Missing or None
    values are ignored. All filters intersect.
    """
    search = filters.get('search')
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search)
            | Q(first_name__icontains=search)
            | Q(last_name__icontains=search)
            | Q(bio__icontains=search)
        )

    subject = filters.get('subject')
    if subject is not None:
        queryset = queryset.filter(
            id__in=TeacherSubject.objects.filter(subject_id=subject).values('teacher_id')
        )

    city = filters.get('city')
    if city:
        queryset = queryset.filter(city__icontains=city)

    if filters.get('min_price') is not None:
        queryset = queryset.filter(price_per_lesson__gte=filters['min_price'])

    if filters.get('max_price') is not None:
        queryset = queryset.filter(price_per_lesson__lte=filters['max_price'])

    lesson_format = filters.get('online_offline_format')
    if lesson_format:
        queryset = queryset.filter(
            Q(online_offline_format=lesson_format)
            | Q(online_offline_format=User.FORMAT_BOTH)
        )

    available_date = filters.get('available_date')
    if available_date is not None:
        queryset = queryset.filter(
            id__in=AvailabilitySlot.objects.filter(
                date=available_date,
                is_available=True,
            ).values('teacher_id')
        )

    available_day = filters.get('available_day')
    if available_day is not None:
        queryset = queryset.filter(
            id__in=AvailableDay.objects.filter(day_of_week=available_day).values('teacher_id')
        )

    return queryset


def search(filters):
    """
    Return teachers matching the filters, best rated first.

    Ties are broken by display name, then id, so repeated searches over
    unchanged data return the same order.
    """
    teachers = list(apply_filters(teacher_queryset(), filters or {}))
    for teacher in teachers:
        teacher.rating = round_rating(teacher.average_rating)

    teachers.sort(key=lambda t: (-t.rating, t.display_name.lower(), t.id))
    return teachers


def get_teacher(teacher_id):
    """
    Return one teacher with aggregate rating and profile extras attached.

    Attached attributes:
    - rating, review_count, subjects (via prefetch)
    - upcoming_slots: availability slots dated today or later
    - weekly_days: recurring available days
    - recent_reviews: reviews newest first

    Raises:
        NotFound: If the id is not a teacher
    """
    try:
        teacher = teacher_queryset().get(pk=teacher_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound('Teacher not found.')

    teacher.rating = round_rating(teacher.average_rating)
    teacher.upcoming_slots = list(
        teacher.availability_slots.filter(date__gte=timezone.localdate()).order_by('date', 'start_time')
    )
    teacher.weekly_days = list(teacher.available_days.order_by('day_of_week', 'start_time'))
    teacher.recent_reviews = list(
        teacher.reviews_received.select_related('student').order_by('-created_at', '-id')
    )
    return teacher


def list_subjects():
    return list(Subject.objects.order_by('name'))
