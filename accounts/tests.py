"""
Tests for operator accounts and role checks.
"""
from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from core.operator import ANONYMOUS, Operator

User = get_user_model()


class OperatorTestCase(TestCase):

    def test_operator_from_user(self):
        user = User.objects.create_user(username='owner', password='secret123',
                                        full_name='Irene Pardo', role=User.Role.ADMIN)

        operator = Operator.from_user(user)

        self.assertEqual(operator.user_id, user.pk)
        self.assertEqual(operator.name, 'Irene Pardo')
        self.assertTrue(operator.is_admin)

    def test_operator_name_falls_back_to_username(self):
        user = User.objects.create_user(username='seller', password='secret123')

        operator = Operator.from_user(user)

        self.assertEqual(operator.name, 'seller')
        self.assertFalse(operator.is_admin)

    def test_anonymous(self):
        self.assertEqual(Operator.from_user(None), ANONYMOUS)
        self.assertIsNone(ANONYMOUS.user_id)


class AccountApiTestCase(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='owner', password='secret123',
                                              full_name='Irene Pardo', role=User.Role.ADMIN)
        self.seller = User.objects.create_user(username='seller', password='secret123')

    def test_me(self):
        self.client.force_authenticate(self.seller)

        response = self.client.get('/api/auth/me/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'salesperson')
        self.assertFalse(response.data['is_admin'])

    def test_user_management_is_admin_only(self):
        self.client.force_authenticate(self.seller)

        response = self.client.get('/api/users/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_user(self):
        """
        Given: An administrator
        When: Creating a salesperson account
        Then: The user exists with a usable hashed password
        """
        self.client.force_authenticate(self.admin)

        response = self.client.post('/api/users/', {
            'username': 'newbie', 'password': 'secret123', 'full_name': 'New Person', 'role': 'salesperson'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)
        user = User.objects.get(username='newbie')
        self.assertTrue(user.check_password('secret123'))

    def test_update_password(self):
        self.client.force_authenticate(self.admin)

        response = self.client.patch(f'/api/users/{self.seller.id}/', {'password': 'another123'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.seller.refresh_from_db()
        self.assertTrue(self.seller.check_password('another123'))

    def test_toggle_active(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(f'/api/users/{self.seller.id}/toggle-active/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

        response = self.client.post(f'/api/users/{self.admin.id}/toggle-active/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
