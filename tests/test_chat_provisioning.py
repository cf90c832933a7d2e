"""
Tests for chat provisioning and the repair_chats command.

Threaded tests need a database with real row locking and concurrent
connections; they are skipped on SQLite.
"""

import threading
from io import StringIO
from unittest import skipIf

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.db import connection
from django.test import TestCase, TransactionTestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from core.lifecycle import ensure_chat
from core.models import Chat, LessonRequest, Notification

User = get_user_model()


class EnsureChatTests(TestCase):

    def setUp(self):
        self.student = User.objects.create_user(
            username='student', email='student@example.com', password='testpass123', role='student'
        )
        self.teacher = User.objects.create_user(
            username='teacher', email='teacher@example.com', password='testpass123', role='teacher'
        )
        self.lesson_request = LessonRequest.objects.create(
            student=self.student, teacher=self.teacher, status='confirmed'
        )

    def test_repeated_calls_return_the_same_chat(self):
        chats = [
            ensure_chat(self.student.id, self.teacher.id, self.lesson_request.id)
            for _ in range(3)
        ]

        self.assertEqual(len({chat.id for chat in chats}), 1)
        self.assertEqual(Chat.objects.count(), 1)

    def test_each_request_gets_its_own_chat(self):
        second_request = LessonRequest.objects.create(
            student=self.student, teacher=self.teacher, status='confirmed'
        )

        first = ensure_chat(self.student.id, self.teacher.id, self.lesson_request.id)
        second = ensure_chat(self.student.id, self.teacher.id, second_request.id)

        self.assertNotEqual(first.id, second.id)

    def test_missing_request_id_is_rejected(self):
        with self.assertRaises(ValueError):
            ensure_chat(self.student.id, self.teacher.id, None)
        self.assertFalse(Chat.objects.exists())


class RepairChatsCommandTests(TestCase):

    def setUp(self):
        self.student = User.objects.create_user(
            username='student', email='student@example.com', password='testpass123', role='student'
        )
        self.teacher = User.objects.create_user(
            username='teacher', email='teacher@example.com', password='testpass123', role='teacher'
        )
        self.orphaned = [
            LessonRequest.objects.create(student=self.student, teacher=self.teacher, status='confirmed')
            for _ in range(3)
        ]
        self.healthy = LessonRequest.objects.create(
            student=self.student, teacher=self.teacher, status='confirmed'
        )
        ensure_chat(self.student.id, self.teacher.id, self.healthy.id)
        LessonRequest.objects.create(student=self.student, teacher=self.teacher, status='pending')

    def run_command(self, *args):
        out = StringIO()
        call_command('repair_chats', *args, stdout=out)
        return out.getvalue()

    def test_dry_run_changes_nothing(self):
        output = self.run_command('--dry-run')

        self.assertIn('[DRY-RUN]', output)
        self.assertIn('3 requests need a chat', output)
        self.assertEqual(Chat.objects.count(), 1)

    def test_repair_creates_missing_chats_only(self):
        output = self.run_command('--batch-size', '2')

        self.assertIn('3 chats provisioned', output)
        self.assertEqual(Chat.objects.count(), 4)
        for lesson_request in self.orphaned:
            self.assertEqual(Chat.objects.filter(lesson_request=lesson_request).count(), 1)

    def test_second_run_is_a_no_op(self):
        self.run_command()
        output = self.run_command()

        self.assertIn('already has a chat', output)
        self.assertEqual(Chat.objects.count(), 4)


@skipIf(connection.vendor == 'sqlite', 'SQLite serialises writers; needs a concurrent database')
class ConcurrentTransitionTests(TransactionTestCase):
    """Two decisions racing for the same pending request: exactly one wins."""

    def setUp(self):
        self.student = User.objects.create_user(
            username='student_conc', email='student_conc@example.com', password='testpass123', role='student'
        )
        self.teacher = User.objects.create_user(
            username='teacher_conc', email='teacher_conc@example.com', password='testpass123', role='teacher'
        )
        self.token = str(RefreshToken.for_user(self.teacher).access_token)

    def test_concurrent_decisions_fire_once(self):
        lesson_request = LessonRequest.objects.create(student=self.student, teacher=self.teacher)
        url = f'/api/requests/{lesson_request.id}/status/'
        results = []

        def decide(new_status):
            client = APIClient()
            client.credentials(HTTP_AUTHORIZATION=f'Bearer {self.token}')
            try:
                response = client.put(url, {'status': new_status}, format='json')
                results.append(response.status_code)
            finally:
                connection.close()

        threads = [
            threading.Thread(target=decide, args=(value,))
            for value in ('confirmed', 'rejected', 'confirmed', 'rejected')
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(results), [200, 409, 409, 409])
        lesson_request.refresh_from_db()
        self.assertEqual(Notification.objects.filter(user=self.student).count(), 1)
        expected_chats = 1 if lesson_request.status == LessonRequest.STATUS_CONFIRMED else 0
        self.assertEqual(Chat.objects.filter(lesson_request=lesson_request).count(), expected_chats)

    def test_concurrent_provisioning_creates_one_chat(self):
        lesson_request = LessonRequest.objects.create(
            student=self.student, teacher=self.teacher, status='confirmed'
        )
        chat_ids = []

        def provision():
            try:
                chat_ids.append(ensure_chat(self.student.id, self.teacher.id, lesson_request.id).id)
            finally:
                connection.close()

        threads = [threading.Thread(target=provision) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(set(chat_ids)), 1)
        self.assertEqual(Chat.objects.filter(lesson_request=lesson_request).count(), 1)
