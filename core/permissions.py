"""
Custom permission classes for the Tutor Marketplace.
"""

from rest_framework import permissions


class HasRole(permissions.BasePermission):
    """
    Base class for role-gated endpoints.

    Subclasses set ``role`` and ``message``. Unauthenticated requests are
    refused here too; DRF turns that into 401 when an authenticator is
    configured.
    """

    role = None
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        """
        Check if user is authenticated and has the required role.

        Returns:
            bool: True if the user's role matches, False otherwise
        """
        if not request.user or not request.user.is_authenticated:
            return False

        return getattr(request.user, 'role', None) == self.role


class IsStudent(HasRole):
    """
    Permission class that allows only students to access the endpoint.

    Usage:
        class MyView(APIView):
            permission_classes = [IsAuthenticated, IsStudent]
    """

    role = 'student'
    message = 'Only students can perform this action.'


class IsTeacher(HasRole):
    """
    Permission class that allows only teachers to access the endpoint.

    Usage:
        class MyView(APIView):
            permission_classes = [IsAuthenticated, IsTeacher]
    """

    role = 'teacher'
    message = 'Only teachers can perform this action.'
