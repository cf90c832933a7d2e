"""
End-to-end flow: discovery, request, confirmation, chat and notifications.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

User = get_user_model()


class MarketplaceFlowTests(TestCase):

    def setUp(self):
        self.student_client = APIClient()
        self.teacher_client = APIClient()

        self.student = User.objects.create_user(
            username='student', email='student@example.com', password='testpass123',
            role='student', name='Sam Student'
        )
        self.teacher = User.objects.create_user(
            username='teacher', email='teacher@example.com', password='testpass123',
            role='teacher', name='Tina Teacher', price_per_lesson=Decimal('60.00')
        )
        self.cheap_teacher = User.objects.create_user(
            username='cheap', email='cheap@example.com', password='testpass123',
            role='teacher', name='Carl Cheap', price_per_lesson=Decimal('20.00')
        )

        self.student_client.credentials(
            HTTP_AUTHORIZATION=f'Bearer {RefreshToken.for_user(self.student).access_token}'
        )
        self.teacher_client.credentials(
            HTTP_AUTHORIZATION=f'Bearer {RefreshToken.for_user(self.teacher).access_token}'
        )

    def test_request_confirm_chat_and_read(self):
        # Price filter excludes the teacher priced at 60.
        search = self.student_client.get('/api/teachers/', {'min_price': '10', 'max_price': '50'})
        self.assertEqual([row['id'] for row in search.data], [self.cheap_teacher.id])

        with self.captureOnCommitCallbacks(execute=True):
            created = self.student_client.post('/api/requests/', {'teacher_id': self.teacher.id}, format='json')
        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        request_id = created.data['id']

        with self.captureOnCommitCallbacks(execute=True):
            confirmed = self.teacher_client.put(
                f'/api/requests/{request_id}/status/', {'status': 'confirmed'}, format='json'
            )
        self.assertEqual(confirmed.status_code, status.HTTP_200_OK)

        student_chats = self.student_client.get('/api/chats/').data
        self.assertEqual(len(student_chats), 1)
        self.assertEqual(student_chats[0]['lesson_request_id'], request_id)
        self.assertEqual(student_chats[0]['unread_count'], 0)
        chat_id = student_chats[0]['id']

        with self.captureOnCommitCallbacks(execute=True):
            sent = self.student_client.post(
                '/api/messages/', {'chat_id': chat_id, 'content': 'hello'}, format='json'
            )
        self.assertEqual(sent.status_code, status.HTTP_201_CREATED)

        teacher_chats = self.teacher_client.get('/api/chats/').data
        self.assertEqual(teacher_chats[0]['unread_count'], 1)
        self.assertEqual(teacher_chats[0]['last_message'], 'hello')

        self.teacher_client.get(f'/api/chats/{chat_id}/')
        self.assertEqual(self.teacher_client.get('/api/chats/').data[0]['unread_count'], 0)

        # The student holds one unread notification: the confirmation.
        unread = self.student_client.get('/api/notifications/unread-count/')
        self.assertEqual(unread.data, {'count': 1})
        notification_id = self.student_client.get('/api/notifications/').data[0]['id']
        self.student_client.put(f'/api/notifications/{notification_id}/read/')
        self.assertEqual(self.student_client.get('/api/notifications/unread-count/').data, {'count': 0})

        # The teacher was told about the request and the message.
        teacher_types = sorted(row['type'] for row in self.teacher_client.get('/api/notifications/').data)
        self.assertEqual(teacher_types, ['lesson_request', 'message'])
