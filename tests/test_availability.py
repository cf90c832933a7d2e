"""
Tests for teacher availability: dated slots and weekly days.
"""

from datetime import date, time

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from core.models import AvailabilitySlot, AvailableDay

User = get_user_model()


class AvailabilityTestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.teacher = User.objects.create_user(
            username='teacher', email='teacher@example.com', password='testpass123', role='teacher'
        )
        self.other_teacher = User.objects.create_user(
            username='teacher2', email='teacher2@example.com', password='testpass123', role='teacher'
        )
        self.student = User.objects.create_user(
            username='student', email='student@example.com', password='testpass123', role='student'
        )
        self.authenticate(self.teacher)

    def authenticate(self, user):
        token = str(RefreshToken.for_user(user).access_token)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')


class AvailabilitySlotTests(AvailabilityTestCase):

    def test_create_slot(self):
        response = self.client.post('/api/availability/', {
            'date': '2030-03-10',
            'start_time': '10:00',
            'end_time': '11:30'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['start_time'], '10:00')
        self.assertEqual(response.data['end_time'], '11:30')
        self.assertTrue(response.data['is_available'])

    def test_same_date_and_start_updates_slot(self):
        payload = {'date': '2030-03-10', 'start_time': '10:00', 'end_time': '11:00'}
        self.client.post('/api/availability/', payload, format='json')

        payload.update(end_time='12:00', is_available=False)
        response = self.client.post('/api/availability/', payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        slot = AvailabilitySlot.objects.get(teacher=self.teacher)
        self.assertEqual(slot.end_time, time(12))
        self.assertFalse(slot.is_available)

    def test_end_before_start_returns_400(self):
        response = self.client.post('/api/availability/', {
            'date': '2030-03-10', 'start_time': '11:00', 'end_time': '10:00'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(AvailabilitySlot.objects.exists())

    def test_student_cannot_write_availability(self):
        self.authenticate(self.student)
        response = self.client.post('/api/availability/', {
            'date': '2030-03-10', 'start_time': '10:00', 'end_time': '11:00'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_public_slots_with_date_range(self):
        for day in (1, 10, 20):
            AvailabilitySlot.objects.create(
                teacher=self.teacher, date=date(2030, 3, day), start_time=time(9), end_time=time(10)
            )

        self.authenticate(self.student)
        response = self.client.get(
            f'/api/availability/teacher/{self.teacher.id}/',
            {'start_date': '2030-03-05', 'end_date': '2030-03-25'}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['date'] for row in response.data], ['2030-03-10', '2030-03-20'])

    def test_inverted_date_range_returns_400(self):
        response = self.client.get(
            f'/api/availability/teacher/{self.teacher.id}/',
            {'start_date': '2030-03-25', 'end_date': '2030-03-05'}
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_slots_of_non_teacher_return_404(self):
        response = self.client.get(f'/api/availability/teacher/{self.student.id}/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_my_slots(self):
        AvailabilitySlot.objects.create(
            teacher=self.teacher, date=date(2030, 3, 1), start_time=time(9), end_time=time(10)
        )
        AvailabilitySlot.objects.create(
            teacher=self.other_teacher, date=date(2030, 3, 1), start_time=time(9), end_time=time(10)
        )

        response = self.client.get('/api/availability/me/')

        self.assertEqual(len(response.data), 1)

    def test_delete_own_slot(self):
        slot = AvailabilitySlot.objects.create(
            teacher=self.teacher, date=date(2030, 3, 1), start_time=time(9), end_time=time(10)
        )

        response = self.client.delete(f'/api/availability/{slot.id}/')

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(AvailabilitySlot.objects.exists())

    def test_cannot_delete_other_teachers_slot(self):
        slot = AvailabilitySlot.objects.create(
            teacher=self.other_teacher, date=date(2030, 3, 1), start_time=time(9), end_time=time(10)
        )

        response = self.client.delete(f'/api/availability/{slot.id}/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(AvailabilitySlot.objects.filter(pk=slot.pk).exists())


class AvailableDayTests(AvailabilityTestCase):

    def test_create_and_replace_day(self):
        first = self.client.post('/api/availability/days/', {
            'day_of_week': 0, 'start_time': '09:00', 'end_time': '12:00'
        }, format='json')
        second = self.client.post('/api/availability/days/', {
            'day_of_week': 0, 'start_time': '13:00', 'end_time': '18:00'
        }, format='json')

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.data['day_name'], 'Sunday')
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        day = AvailableDay.objects.get(teacher=self.teacher)
        self.assertEqual(day.start_time, time(13))

    def test_day_out_of_range_returns_400(self):
        response = self.client.post('/api/availability/days/', {
            'day_of_week': 7, 'start_time': '09:00', 'end_time': '12:00'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_days_listed_sunday_first(self):
        AvailableDay.objects.create(teacher=self.teacher, day_of_week=3, start_time=time(9), end_time=time(10))
        AvailableDay.objects.create(teacher=self.teacher, day_of_week=0, start_time=time(9), end_time=time(10))

        mine = self.client.get('/api/availability/me/days/')
        public = self.client.get(f'/api/availability/teacher/{self.teacher.id}/days/')

        self.assertEqual([row['day_of_week'] for row in mine.data], [0, 3])
        self.assertEqual(mine.data, public.data)

    def test_delete_day(self):
        day = AvailableDay.objects.create(
            teacher=self.teacher, day_of_week=2, start_time=time(9), end_time=time(10)
        )

        response = self.client.delete(f'/api/availability/days/{day.id}/')

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(AvailableDay.objects.exists())

    def test_student_cannot_delete_days(self):
        day = AvailableDay.objects.create(
            teacher=self.teacher, day_of_week=2, start_time=time(9), end_time=time(10)
        )

        self.authenticate(self.student)
        response = self.client.delete(f'/api/availability/days/{day.id}/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
