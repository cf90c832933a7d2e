"""
Viewer perspectives on two-party records.

Lesson requests and chats both carry a ``student`` and a ``teacher`` foreign
key. A viewer sees the side matching their role as "own" and the other side
as the counterpart. Queries that list a viewer's records are written once
against a Perspective instead of once per role.
"""

from collections import namedtuple

from rest_framework.exceptions import PermissionDenied

from .models import User

Perspective = namedtuple('Perspective', ['own', 'counterpart'])

PERSPECTIVES = {
    User.ROLE_STUDENT: Perspective(own='student', counterpart='teacher'),
    User.ROLE_TEACHER: Perspective(own='teacher', counterpart='student'),
}


def perspective_for(user):
    """
    Return the Perspective for a user's role.

    Raises:
        PermissionDenied: If the role has no perspective
    """
    try:
        return PERSPECTIVES[user.role]
    except KeyError:
        raise PermissionDenied('Invalid role.')


def own_filter(user):
    """Filter kwargs selecting records where ``user`` is on their own side."""
    return {perspective_for(user).own: user}
