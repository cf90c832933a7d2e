"""
Tests for the favorites endpoints.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from core.models import Favorite, Review

User = get_user_model()


class FavoriteTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.student = User.objects.create_user(
            username='student', email='student@example.com', password='testpass123', role='student'
        )
        self.teacher = User.objects.create_user(
            username='zed', email='zed@example.com', password='testpass123',
            role='teacher', name='Zed Zimmer', price_per_lesson=Decimal('15.00')
        )
        self.other_teacher = User.objects.create_user(
            username='amy', email='amy@example.com', password='testpass123',
            role='teacher', name='Amy Archer'
        )
        self.authenticate(self.student)

    def authenticate(self, user):
        token = str(RefreshToken.for_user(user).access_token)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    def test_add_favorite(self):
        response = self.client.post(f'/api/favorites/{self.teacher.id}/')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data, {'teacher_id': self.teacher.id, 'is_favorite': True})
        self.assertTrue(Favorite.objects.filter(student=self.student, teacher=self.teacher).exists())

    def test_duplicate_favorite_returns_409(self):
        self.client.post(f'/api/favorites/{self.teacher.id}/')
        response = self.client.post(f'/api/favorites/{self.teacher.id}/')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Favorite.objects.count(), 1)

    def test_favorite_must_be_teacher(self):
        other_student = User.objects.create_user(
            username='student2', email='student2@example.com', password='testpass123', role='student'
        )
        response = self.client.post(f'/api/favorites/{other_student.id}/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_teacher_cannot_add_favorites(self):
        self.authenticate(self.other_teacher)
        response = self.client.post(f'/api/favorites/{self.teacher.id}/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_favorites_ordered_by_name(self):
        self.client.post(f'/api/favorites/{self.teacher.id}/')
        self.client.post(f'/api/favorites/{self.other_teacher.id}/')

        response = self.client.get('/api/favorites/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['name'] for row in response.data], ['Amy Archer', 'Zed Zimmer'])

    def test_remove_favorite(self):
        self.client.post(f'/api/favorites/{self.teacher.id}/')
        response = self.client.delete(f'/api/favorites/{self.teacher.id}/')

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Favorite.objects.exists())

    def test_remove_missing_favorite_returns_404(self):
        response = self.client.delete(f'/api/favorites/{self.teacher.id}/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_check_favorite(self):
        before = self.client.get(f'/api/favorites/check/{self.teacher.id}/')
        self.client.post(f'/api/favorites/{self.teacher.id}/')
        after = self.client.get(f'/api/favorites/check/{self.teacher.id}/')

        self.assertEqual(before.data, {'is_favorite': False})
        self.assertEqual(after.data, {'is_favorite': True})

    def test_favorites_carry_review_aggregate(self):
        other_student = User.objects.create_user(
            username='student2', email='student2@example.com', password='testpass123', role='student'
        )
        Review.objects.create(teacher=self.teacher, student=self.student, rating=5)
        Review.objects.create(teacher=self.teacher, student=other_student, rating=4)
        self.client.post(f'/api/favorites/{self.teacher.id}/')
        self.client.post(f'/api/favorites/{self.other_teacher.id}/')

        favorites = {row['id']: row for row in self.client.get('/api/favorites/').data}
        search = {row['id']: row for row in self.client.get('/api/teachers/').data}

        self.assertEqual(favorites[self.teacher.id]['rating'], 4.5)
        self.assertEqual(favorites[self.teacher.id]['review_count'], 2)
        self.assertEqual(favorites[self.other_teacher.id]['rating'], 0.0)
        self.assertEqual(favorites[self.teacher.id]['rating'], search[self.teacher.id]['rating'])

    def test_favorites_ordered_by_display_name(self):
        unnamed = User.objects.create_user(
            username='bbaker', email='bbaker@example.com', password='testpass123',
            role='teacher', first_name='Bob', last_name='Baker'
        )
        for teacher in (self.teacher, unnamed, self.other_teacher):
            self.client.post(f'/api/favorites/{teacher.id}/')

        response = self.client.get('/api/favorites/')

        self.assertEqual([row['name'] for row in response.data], ['Amy Archer', 'Bob Baker', 'Zed Zimmer'])
