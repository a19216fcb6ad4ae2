"""
Tests for sale transaction logic.

Test Cases:
1. Sale recorded with sufficient stock
2. Sale refused with insufficient stock
3. No stock deduction and no sale on refusal
4. Validation before any write
5. Deleting a sale leaves stock alone
6. Sale API endpoints
"""
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from core.operator import Operator
from directory.models import Client
from inventory.models import Category, Product
from inventory.services import InsufficientStockError, decrement_stock
from sales.models import Sale, SaleItem
from sales.services import SaleValidationError, create_sale, delete_sale

User = get_user_model()


def make_product(category, sku, price, stock, cost='0.00', stock_minimum=0):
    return Product.objects.create(
        name=f'Product {sku}',
        price=Decimal(price),
        cost=Decimal(cost),
        category=category,
        base_sku=sku,
        sku=f'{sku}MBLACK',
        size='M',
        color='Black',
        stock=stock,
        stock_minimum=stock_minimum,
    )


class SaleTransactionTestCase(TestCase):
    """Test cases for sale transaction logic."""

    def setUp(self):
        self.user = User.objects.create_user(username='seller', password='secret123', full_name='Sofia Torres')
        self.operator = Operator.from_user(self.user)
        self.category = Category.objects.create(name='Test Category')
        self.shirt = make_product(self.category, 'TSH', '15.00', stock=10)
        self.jacket = make_product(self.category, 'JKT', '40.00', stock=2)

    def test_sale_recorded_with_sufficient_stock(self):
        """
        Test: Sale is recorded when every line has enough stock.

        Given: 10 shirts and 2 jackets in stock
        When: Selling 3 shirts and 1 jacket with a 10% discount
        Then: Totals are 85.00 / 8.50 / 76.50 and stock is deducted
        """
        cart = [
            {'product_id': self.shirt.id, 'quantity': 3},
            {'product_id': self.jacket.id, 'quantity': 1},
        ]

        sale = create_sale(self.operator, {'name': 'Ana Diaz'}, cart, 'cash', discount_percent=Decimal('10'))

        self.assertEqual(sale.subtotal, Decimal('85.00'))
        self.assertEqual(sale.discount, Decimal('8.50'))
        self.assertEqual(sale.total, Decimal('76.50'))
        self.assertEqual(sale.items.count(), 2)
        self.assertEqual(sale.created_by, self.user)

        shirt_line = sale.items.get(product=self.shirt)
        self.assertEqual(shirt_line.unit_price, Decimal('15.00'))
        self.assertEqual(shirt_line.line_total, Decimal('45.00'))

        self.shirt.refresh_from_db()
        self.jacket.refresh_from_db()
        self.assertEqual(self.shirt.stock, 7)
        self.assertEqual(self.jacket.stock, 1)

    def test_sale_with_exact_stock(self):
        create_sale(self.operator, {'name': 'Ana'}, [{'product_id': self.jacket.id, 'quantity': 2}], 'card')

        self.jacket.refresh_from_db()
        self.assertEqual(self.jacket.stock, 0)

    def test_insufficient_stock_rolls_back_everything(self):
        """
        Test: Nothing is written when any line lacks stock.

        Given: Only 2 jackets in stock
        When: Selling 3 shirts and 5 jackets
        Then: InsufficientStockError, no sale, no items, stock unchanged
        """
        cart = [
            {'product_id': self.shirt.id, 'quantity': 3},
            {'product_id': self.jacket.id, 'quantity': 5},
        ]

        with self.assertRaises(InsufficientStockError) as context:
            create_sale(self.operator, {'name': 'Ana'}, cart, 'cash')

        self.assertIn('Product JKT', str(context.exception))
        self.assertIn('Available stock: 2', str(context.exception))
        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(SaleItem.objects.count(), 0)

        self.shirt.refresh_from_db()
        self.jacket.refresh_from_db()
        self.assertEqual(self.shirt.stock, 10)
        self.assertEqual(self.jacket.stock, 2)

    def test_new_client_rolled_back_with_failed_sale(self):
        cart = [{'product_id': self.jacket.id, 'quantity': 5}]

        with self.assertRaises(InsufficientStockError):
            create_sale(self.operator, {'name': 'New Person', 'create_client': True}, cart, 'cash')

        self.assertFalse(Client.objects.filter(name='New Person').exists())

    def test_validation_errors(self):
        cart = [{'product_id': self.shirt.id, 'quantity': 1}]

        with self.assertRaises(SaleValidationError) as context:
            create_sale(self.operator, {'name': '  '}, cart, 'cash')
        self.assertIn('Customer name is required', str(context.exception))

        with self.assertRaises(SaleValidationError) as context:
            create_sale(self.operator, {'name': 'Ana'}, cart, '')
        self.assertIn('Payment method is required', str(context.exception))

        with self.assertRaises(SaleValidationError) as context:
            create_sale(self.operator, {'name': 'Ana'}, cart, 'pending')
        self.assertIn('Invalid payment method', str(context.exception))

        with self.assertRaises(SaleValidationError) as context:
            create_sale(self.operator, {'name': 'Ana'}, [], 'cash')
        self.assertIn('at least one item', str(context.exception))

        with self.assertRaises(SaleValidationError):
            create_sale(self.operator, {'name': 'Ana'}, [{'product_id': self.shirt.id, 'quantity': 0}], 'cash')

        with self.assertRaises(SaleValidationError) as context:
            create_sale(self.operator, {'name': 'Ana'}, cart + cart, 'cash')
        self.assertIn('duplicate', str(context.exception).lower())

        with self.assertRaises(SaleValidationError) as context:
            create_sale(self.operator, {'name': 'Ana'}, [{'product_id': 99999, 'quantity': 1}], 'cash')
        self.assertIn('not found', str(context.exception))

        self.assertEqual(Sale.objects.count(), 0)

    def test_discount_out_of_range(self):
        cart = [{'product_id': self.shirt.id, 'quantity': 1}]
        with self.assertRaises(SaleValidationError):
            create_sale(self.operator, {'name': 'Ana'}, cart, 'cash', discount_percent=150)

    def test_linked_client_name_is_copied(self):
        client = Client.objects.create(name='Elena Romero', phone='555-7777')

        sale = create_sale(self.operator, {'client_id': client.id, 'name': ''}, [
            {'product_id': self.shirt.id, 'quantity': 1}
        ], 'transfer')

        self.assertEqual(sale.client, client)
        self.assertEqual(sale.client_name, 'Elena Romero')
        self.assertEqual(sale.client_phone, '555-7777')

    def test_linked_client_without_name_key(self):
        client = Client.objects.create(name='Elena Romero')

        sale = create_sale(self.operator, {'client_id': client.id}, [
            {'product_id': self.shirt.id, 'quantity': 2}
        ], 'card')

        self.assertEqual(sale.client_name, 'Elena Romero')
        self.shirt.refresh_from_db()
        self.assertEqual(self.shirt.stock, 8)

    def test_nameless_customer_writes_nothing(self):
        """
        Given: No client id and a blank name, with create_client requested
        When: Recording a sale
        Then: It is refused and neither a client nor a sale is written
        """
        with self.assertRaises(SaleValidationError) as context:
            create_sale(self.operator, {'name': '', 'create_client': True}, [
                {'product_id': self.shirt.id, 'quantity': 1}
            ], 'cash')

        self.assertIn('Customer name is required', str(context.exception))
        self.assertEqual(Client.objects.count(), 0)
        self.assertEqual(Sale.objects.count(), 0)
        self.shirt.refresh_from_db()
        self.assertEqual(self.shirt.stock, 10)

    def test_delete_sale_keeps_stock(self):
        """
        Given: A sale that took 3 shirts out of stock
        When: Deleting the sale
        Then: The sale and its items are gone; stock stays at 7
        """
        sale = create_sale(self.operator, {'name': 'Ana'}, [
            {'product_id': self.shirt.id, 'quantity': 3}
        ], 'cash')

        delete_sale(sale)

        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(SaleItem.objects.count(), 0)
        self.shirt.refresh_from_db()
        self.assertEqual(self.shirt.stock, 7)

    def test_deleted_product_keeps_sale_line(self):
        sale = create_sale(self.operator, {'name': 'Ana'}, [
            {'product_id': self.shirt.id, 'quantity': 1}
        ], 'cash')

        self.shirt.delete()

        line = sale.items.get()
        self.assertIsNone(line.product)
        self.assertEqual(line.line_total, Decimal('15.00'))

    def test_low_stock_alert_after_commit(self):
        """
        Given: A jacket with minimum stock 1
        When: A committed sale leaves 1 unit
        Then: The low stock task logs an alert for its SKU
        """
        self.jacket.stock_minimum = 1
        self.jacket.save()

        with self.assertLogs('inventory.tasks', level='WARNING') as logs:
            with self.captureOnCommitCallbacks(execute=True):
                create_sale(self.operator, {'name': 'Ana'}, [
                    {'product_id': self.jacket.id, 'quantity': 1}
                ], 'cash')

        self.assertTrue(any('JKTMBLACK' in line for line in logs.output))

    def test_alert_queue_failure_keeps_sale(self):
        """
        Given: The task broker is down
        When: A sale commits
        Then: The failure is logged and the sale stays recorded
        """
        with patch('inventory.tasks.notify_low_stock.delay', side_effect=ConnectionError('broker down')):
            with self.assertLogs('inventory.services', level='ERROR'):
                with self.captureOnCommitCallbacks(execute=True):
                    sale = create_sale(self.operator, {'name': 'Ana'}, [
                        {'product_id': self.shirt.id, 'quantity': 1}
                    ], 'cash')

        self.assertTrue(Sale.objects.filter(pk=sale.pk).exists())

    def test_atomic_rollback_on_error(self):
        """
        Test: A database failure after the first decrement undoes it.

        Given: The second stock decrement fails unexpectedly
        When: Selling a shirt and a jacket
        Then: The error propagates and no stock or sale rows change
        """
        real_decrement = decrement_stock
        calls = []

        def failing_decrement(product_id, quantity):
            calls.append(product_id)
            if len(calls) == 2:
                raise DatabaseError('connection lost')
            real_decrement(product_id, quantity)

        cart = [
            {'product_id': self.shirt.id, 'quantity': 1},
            {'product_id': self.jacket.id, 'quantity': 1},
        ]
        with patch('sales.services.decrement_stock', side_effect=failing_decrement):
            with self.assertRaises(DatabaseError):
                create_sale(self.operator, {'name': 'Ana'}, cart, 'cash')

        self.assertEqual(Sale.objects.count(), 0)
        self.shirt.refresh_from_db()
        self.assertEqual(self.shirt.stock, 10)


class SaleApiTestCase(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='seller', password='secret123', full_name='Sofia Torres')
        self.client.force_authenticate(self.user)
        category = Category.objects.create(name='API Category')
        self.product = make_product(category, 'API', '20.00', stock=3)

    def _payload(self, quantity, **overrides):
        payload = {
            'customer': {'name': 'Diego Ruiz', 'phone': '555-1212'},
            'items': [{'product_id': self.product.id, 'quantity': quantity}],
            'payment_method': 'card',
        }
        payload.update(overrides)
        return payload

    def test_create_sale(self):
        response = self.client.post('/api/sales/', self._payload(2), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total'], '40.00')
        self.assertEqual(response.data['created_by_name'], 'Sofia Torres')
        self.assertEqual(len(response.data['items']), 1)

    def test_insufficient_stock_returns_400(self):
        response = self.client.post('/api/sales/', self._payload(4), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Insufficient Stock')
        self.assertEqual(Sale.objects.count(), 0)

    def test_pending_payment_not_allowed_at_counter(self):
        response = self.client.post('/api/sales/', self._payload(1, payment_method='pending'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        self.client.post('/api/sales/', self._payload(1), format='json')
        self.client.post('/api/sales/', self._payload(1, payment_method='cash'), format='json')

        response = self.client.get('/api/sales/', {'payment_method': 'cash'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['item_count'], 1)

        response = self.client.get('/api/sales/', {'q': 'diego'})
        self.assertEqual(response.data['count'], 2)

    def test_unexpected_error_returns_500(self):
        with patch('sales.views.create_sale', side_effect=RuntimeError('boom')):
            with self.assertLogs('sales.views', level='ERROR'):
                response = self.client.post('/api/sales/', self._payload(1), format='json')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['detail'], 'Error saving the sale')

    def test_delete_sale(self):
        response = self.client.post('/api/sales/', self._payload(1), format='json')

        response = self.client.delete(f"/api/sales/{response.data['id']}/")

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 2)
