"""
Tests for expense recording.
"""
from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from core.operator import Operator
from expenses.models import Expense
from expenses.services import ExpenseValidationError, next_sequence_number, record_expense

User = get_user_model()


class ExpenseServiceTestCase(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='owner', password='secret123', full_name='Marta Lopez')
        self.operator = Operator.from_user(self.user)

    def _data(self, **overrides):
        data = {
            'date': date(2026, 3, 1),
            'category': Expense.Category.RENT,
            'description': 'March rent',
            'amount': Decimal('1200.00'),
        }
        data.update(overrides)
        return data

    def test_sequence_numbers_increase(self):
        """
        Given: No expenses yet
        When: Recording two expenses
        Then: They get sequence numbers 1 and 2
        """
        first = record_expense(self.operator, self._data())
        second = record_expense(self.operator, self._data(description='Electricity', category='services'))

        self.assertEqual(first.sequence_number, 1)
        self.assertEqual(second.sequence_number, 2)
        self.assertEqual(second.recorded_by, self.user)

    def test_sequence_continues_after_gap(self):
        Expense.objects.create(sequence_number=7, category='other', description='Old', amount=Decimal('1.00'))

        self.assertEqual(next_sequence_number(), 8)

    def test_description_required(self):
        with self.assertRaises(ExpenseValidationError):
            record_expense(self.operator, self._data(description='  '))

        self.assertEqual(Expense.objects.count(), 0)


class ExpenseApiTestCase(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='owner', password='secret123', full_name='Marta Lopez')
        self.client.force_authenticate(self.user)

    def _post(self, **overrides):
        payload = {
            'date': '2026-03-01',
            'category': 'rent',
            'description': 'March rent',
            'amount': '1200.00',
            'payment_method': 'transfer',
        }
        payload.update(overrides)
        return self.client.post('/api/expenses/', payload, format='json')

    def test_create_expense(self):
        response = self._post()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sequence_number'], 1)
        self.assertEqual(response.data['recorded_by_name'], 'Marta Lopez')

    def test_sequence_number_is_read_only(self):
        response = self._post(sequence_number=99)

        self.assertEqual(response.data['sequence_number'], 1)

    def test_invalid_category_rejected(self):
        response = self._post(category='travel')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters_and_period_total(self):
        """
        Given: Rent in March, services in March and rent in April
        When: Listing March expenses
        Then: Two results and their total
        """
        self._post()
        self._post(category='services', description='Internet', amount='45.50')
        self._post(date='2026-04-01', description='April rent')

        response = self.client.get('/api/expenses/', {'start': '2026-03-01', 'end': '2026-03-31'})
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['period_total'], '1245.50')

        response = self.client.get('/api/expenses/', {'category': 'rent'})
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['results'][0]['description'], 'April rent')

        response = self.client.get('/api/expenses/', {'start': '2027-01-01'})
        self.assertEqual(response.data['count'], 0)
        self.assertEqual(response.data['period_total'], '0.00')
