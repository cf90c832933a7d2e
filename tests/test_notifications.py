"""
Tests for the notification endpoints and best-effort delivery.
"""

from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from core import lifecycle
from core.models import LessonRequest, Notification
from core.notifications import notify

User = get_user_model()


class NotificationEndpointTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username='student', email='student@example.com', password='testpass123', role='student'
        )
        self.other_user = User.objects.create_user(
            username='other', email='other@example.com', password='testpass123', role='student'
        )
        self.first = Notification.objects.create(
            user=self.user, type='message', title='New Message', message='one'
        )
        self.second = Notification.objects.create(
            user=self.user, type='lesson_confirmed', title='Lesson Confirmed', message='two', is_read=True
        )
        self.third = Notification.objects.create(
            user=self.user, type='message', title='New Message', message='three'
        )
        self.foreign = Notification.objects.create(
            user=self.other_user, type='message', title='New Message', message='not yours'
        )

        token = str(RefreshToken.for_user(self.user).access_token)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    def test_list_newest_first(self):
        response = self.client.get('/api/notifications/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [row['id'] for row in response.data],
            [self.third.id, self.second.id, self.first.id]
        )

    def test_is_read_filter(self):
        unread = self.client.get('/api/notifications/', {'is_read': 'false'})
        read = self.client.get('/api/notifications/', {'is_read': 'true'})

        self.assertEqual([row['id'] for row in unread.data], [self.third.id, self.first.id])
        self.assertEqual([row['id'] for row in read.data], [self.second.id])

    def test_limit(self):
        response = self.client.get('/api/notifications/', {'limit': 1})

        self.assertEqual([row['id'] for row in response.data], [self.third.id])

    def test_invalid_limit_returns_400(self):
        response = self.client.get('/api/notifications/', {'limit': 'lots'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_read(self):
        response = self.client.put(f'/api/notifications/{self.first.id}/read/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_read'])
        self.first.refresh_from_db()
        self.assertTrue(self.first.is_read)

    def test_cannot_mark_someone_elses_notification(self):
        response = self.client.put(f'/api/notifications/{self.foreign.id}/read/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.foreign.refresh_from_db()
        self.assertFalse(self.foreign.is_read)

    def test_mark_all_read(self):
        response = self.client.put('/api/notifications/read-all/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['updated'], 2)
        self.assertFalse(Notification.objects.filter(user=self.user, is_read=False).exists())
        self.foreign.refresh_from_db()
        self.assertFalse(self.foreign.is_read)

    def test_unread_count(self):
        response = self.client.get('/api/notifications/unread-count/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'count': 2})


class BestEffortNotificationTests(TestCase):
    """Notification failures never fail the operation that triggered them."""

    def setUp(self):
        self.client = APIClient()
        self.student = User.objects.create_user(
            username='student', email='student@example.com', password='testpass123', role='student'
        )
        self.teacher = User.objects.create_user(
            username='teacher', email='teacher@example.com', password='testpass123', role='teacher'
        )

    def test_notify_swallows_storage_errors(self):
        with mock.patch(
            'core.notifications.Notification.objects.create',
            side_effect=DatabaseError('disk full')
        ):
            with self.assertLogs('core.notifications', level='ERROR'):
                result = notify(self.teacher.id, 'message', 'New Message', 'hi')

        self.assertIsNone(result)
        self.assertFalse(Notification.objects.exists())

    def test_request_succeeds_when_notification_write_fails(self):
        token = str(RefreshToken.for_user(self.student).access_token)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        with mock.patch(
            'core.notifications.Notification.objects.create',
            side_effect=DatabaseError('disk full')
        ):
            with self.captureOnCommitCallbacks(execute=True):
                response = self.client.post('/api/requests/', {'teacher_id': self.teacher.id}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(LessonRequest.objects.filter(pk=response.data['id']).exists())
        self.assertFalse(Notification.objects.exists())

    def test_transition_succeeds_when_receiver_raises(self):
        lesson_request = LessonRequest.objects.create(student=self.student, teacher=self.teacher)
        token = str(RefreshToken.for_user(self.teacher).access_token)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        with mock.patch('core.signals.notify', side_effect=RuntimeError('receiver bug')):
            with self.assertLogs('core.signals', level='ERROR'):
                with self.captureOnCommitCallbacks(execute=True):
                    response = self.client.put(
                        f'/api/requests/{lesson_request.id}/status/', {'status': 'confirmed'}, format='json'
                    )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        lesson_request.refresh_from_db()
        self.assertEqual(lesson_request.status, LessonRequest.STATUS_CONFIRMED)
        self.assertTrue(lesson_request.chats.exists())


class NotificationTimingTests(TestCase):
    """Notifications go out only once the surrounding transaction commits."""

    def setUp(self):
        self.student = User.objects.create_user(
            username='student', email='student@example.com', password='testpass123', role='student'
        )
        self.teacher = User.objects.create_user(
            username='teacher', email='teacher@example.com', password='testpass123', role='teacher'
        )

    def test_notification_waits_for_commit(self):
        with self.captureOnCommitCallbacks() as callbacks:
            lifecycle.create_lesson_request(self.student, self.teacher.id)

        self.assertEqual(len(callbacks), 1)
        self.assertFalse(Notification.objects.exists())

        callbacks[0]()

        self.assertTrue(Notification.objects.filter(user=self.teacher).exists())

    def test_rolled_back_operation_sends_nothing(self):
        lesson_request = LessonRequest.objects.create(student=self.student, teacher=self.teacher)

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(RuntimeError):
                with transaction.atomic():
                    lifecycle.transition_lesson_request(
                        lesson_request.id, self.teacher, LessonRequest.STATUS_CONFIRMED
                    )
                    raise RuntimeError('outer transaction aborted')

        self.assertEqual(callbacks, [])
        self.assertFalse(Notification.objects.exists())
        lesson_request.refresh_from_db()
        self.assertEqual(lesson_request.status, LessonRequest.STATUS_PENDING)
