"""
Teacher availability.

Two shapes are kept side by side:
- AvailabilitySlot: a time range on a specific date, keyed on
  (teacher, date, start_time)
- AvailableDay: a weekly recurring range, keyed on (teacher, day_of_week)

Writing the same key twice updates the existing row.
"""

import logging

from django.db import transaction
from rest_framework.exceptions import NotFound, PermissionDenied

from .discovery import resolve_teacher
from .models import AvailabilitySlot, AvailableDay
from .validators import validate_time_range

logger = logging.getLogger(__name__)


def _require_teacher(user):
    if not user.is_teacher():
        raise PermissionDenied('Only teachers can manage availability.')


def list_slots(teacher_id, start_date=None, end_date=None):
    """
    Return a teacher's dated slots, optionally within [start_date, end_date].

    Raises:
        NotFound: If teacher_id is not a teacher
    """
    teacher = resolve_teacher(teacher_id)
    queryset = AvailabilitySlot.objects.filter(teacher=teacher)
    if start_date is not None:
        queryset = queryset.filter(date__gte=start_date)
    if end_date is not None:
        queryset = queryset.filter(date__lte=end_date)
    return list(queryset.order_by('date', 'start_time'))


def upsert_slot(teacher, date, start_time, end_time, is_available=True):
    """
    Create or update the slot starting at start_time on date.

    Returns:
        tuple: (slot, created)

    Raises:
        PermissionDenied: If the caller is not a teacher
        django.core.exceptions.ValidationError: If end_time <= start_time
    """
    _require_teacher(teacher)
    validate_time_range(start_time, end_time)

    with transaction.atomic():
        slot, created = AvailabilitySlot.objects.update_or_create(
            teacher=teacher,
            date=date,
            start_time=start_time,
            defaults={'end_time': end_time, 'is_available': is_available},
        )

    logger.info(
        f"Availability slot {'created' if created else 'updated'}. "
        f"Slot ID: {slot.id}, Teacher ID: {teacher.id}, Date: {date}"
    )
    return slot, created


def delete_slot(slot_id, teacher):
    """
    Raises:
        PermissionDenied: If the caller is not a teacher
        NotFound: If the slot does not exist or belongs to another teacher
    """
    _require_teacher(teacher)
    deleted, _ = AvailabilitySlot.objects.filter(pk=slot_id, teacher=teacher).delete()
    if not deleted:
        raise NotFound('Availability slot not found.')
    logger.info(f"Availability slot deleted. Slot ID: {slot_id}, Teacher ID: {teacher.id}")


def list_days(teacher_id):
    """
    Return a teacher's weekly available days, Sunday first.

    Raises:
        NotFound: If teacher_id is not a teacher
    """
    teacher = resolve_teacher(teacher_id)
    return list(AvailableDay.objects.filter(teacher=teacher).order_by('day_of_week', 'start_time'))


def upsert_day(teacher, day_of_week, start_time, end_time):
    """
    Create or update the weekly range for day_of_week.

    Returns:
        tuple: (day, created)
    """
    _require_teacher(teacher)
    validate_time_range(start_time, end_time)

    with transaction.atomic():
        day, created = AvailableDay.objects.update_or_create(
            teacher=teacher,
            day_of_week=day_of_week,
            defaults={'start_time': start_time, 'end_time': end_time},
        )

    logger.info(
        f"Available day {'created' if created else 'updated'}. "
        f"Day ID: {day.id}, Teacher ID: {teacher.id}, Day: {day_of_week}"
    )
    return day, created


def delete_day(day_id, teacher):
    _require_teacher(teacher)
    deleted, _ = AvailableDay.objects.filter(pk=day_id, teacher=teacher).delete()
    if not deleted:
        raise NotFound('Available day not found.')
    logger.info(f"Available day deleted. Day ID: {day_id}, Teacher ID: {teacher.id}")
