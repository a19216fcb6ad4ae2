"""
Tests for purchase order logic and concurrent stock decrements.

Test Cases:
1. Purchase order created in PENDING with computed total
2. Validation before any write
3. Status transitions and received_date stamping
4. Optional restock on receipt
5. Status changes restricted to administrators
6. Concurrent sales never oversell
"""
import threading
import unittest
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import connection
from django.test import TestCase, TransactionTestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from core.operator import ANONYMOUS, Operator
from directory.models import Supplier
from inventory.models import Category, Product
from inventory.services import InsufficientStockError
from orders.models import PurchaseOrder, PurchaseOrderItem
from orders.services import (
    PurchaseOrderStateError,
    PurchaseOrderValidationError,
    create_purchase_order,
    pending_order_count,
    update_order_status,
)
from sales.services import create_sale

User = get_user_model()


class PurchaseOrderTestCase(TestCase):
    """Test cases for purchase order creation and lifecycle."""

    def setUp(self):
        self.user = User.objects.create_user(username='owner', password='secret123', role=User.Role.ADMIN)
        self.operator = Operator.from_user(self.user)
        self.supplier = Supplier.objects.create(name='Denim Works')
        self.category = Category.objects.create(name='Jeans')

        self.product1 = Product.objects.create(
            name='Slim Jean', price=Decimal('45.00'), cost=Decimal('20.00'), category=self.category,
            base_sku='JN1', sku='JN132BLUE', size='32', color='Blue', stock=4
        )
        self.product2 = Product.objects.create(
            name='Slim Jean', price=Decimal('45.00'), cost=Decimal('20.00'), category=self.category,
            base_sku='JN1', sku='JN134BLUE', size='34', color='Blue', stock=0
        )

    def test_order_created_pending(self):
        """
        Test: Order is created PENDING with the right total.

        Given: Two products with cost 20.00
        When: Ordering 10 of product1 at 18.50 and 5 of product2 at its cost
        Then: Status is PENDING, total is (10 * 18.50) + (5 * 20.00) = 285.00
        """
        items = [
            {'product_id': self.product1.id, 'quantity': 10, 'unit_cost': '18.50'},
            {'product_id': self.product2.id, 'quantity': 5},
        ]

        order = create_purchase_order(self.operator, self.supplier.id, items, notes=' Rush ')

        self.assertEqual(order.status, PurchaseOrder.Status.PENDING)
        self.assertEqual(order.total, Decimal('285.00'))
        self.assertEqual(order.notes, 'Rush')
        self.assertEqual(order.items.count(), 2)
        self.assertIsNone(order.received_date)
        self.assertEqual(order.created_by, self.user)

    def test_order_does_not_touch_stock(self):
        create_purchase_order(self.operator, self.supplier.id, [{'product_id': self.product1.id, 'quantity': 10}])

        self.product1.refresh_from_db()
        self.assertEqual(self.product1.stock, 4)

    def test_validation_errors(self):
        items = [{'product_id': self.product1.id, 'quantity': 1}]

        with self.assertRaises(PurchaseOrderValidationError) as context:
            create_purchase_order(self.operator, None, items)
        self.assertIn('Supplier is required', str(context.exception))

        with self.assertRaises(PurchaseOrderValidationError) as context:
            create_purchase_order(self.operator, 99999, items)
        self.assertIn('not found', str(context.exception))

        with self.assertRaises(PurchaseOrderValidationError) as context:
            create_purchase_order(self.operator, self.supplier.id, [])
        self.assertIn('at least one item', str(context.exception))

        with self.assertRaises(PurchaseOrderValidationError):
            create_purchase_order(self.operator, self.supplier.id, items + items)

        with self.assertRaises(PurchaseOrderValidationError):
            create_purchase_order(self.operator, self.supplier.id, [
                {'product_id': self.product1.id, 'quantity': 1, 'unit_cost': '-1'}
            ])

        self.assertEqual(PurchaseOrder.objects.count(), 0)
        self.assertEqual(PurchaseOrderItem.objects.count(), 0)

    def test_received_date_stamped_on_receipt(self):
        """
        Given: A pending order
        When: It is shipped, then received
        Then: received_date is empty after shipping and set after receiving
        """
        order = create_purchase_order(self.operator, self.supplier.id, [
            {'product_id': self.product1.id, 'quantity': 3}
        ])

        order = update_order_status(order, PurchaseOrder.Status.SHIPPED)
        self.assertIsNone(order.received_date)

        order = update_order_status(order, PurchaseOrder.Status.RECEIVED)
        self.assertIsNotNone(order.received_date)
        self.assertFalse(order.is_open)

    def test_illegal_transitions(self):
        order = create_purchase_order(self.operator, self.supplier.id, [
            {'product_id': self.product1.id, 'quantity': 3}
        ])

        with self.assertRaises(PurchaseOrderStateError):
            update_order_status(order, PurchaseOrder.Status.RECEIVED)

        update_order_status(order, PurchaseOrder.Status.CANCELLED)
        with self.assertRaises(PurchaseOrderStateError):
            update_order_status(order, PurchaseOrder.Status.SHIPPED)

        order.refresh_from_db()
        self.assertEqual(order.status, PurchaseOrder.Status.CANCELLED)
        self.assertIsNone(order.received_date)

    def test_receipt_leaves_stock_by_default(self):
        order = create_purchase_order(self.operator, self.supplier.id, [
            {'product_id': self.product1.id, 'quantity': 6}
        ])
        update_order_status(order, PurchaseOrder.Status.SHIPPED)
        update_order_status(order, PurchaseOrder.Status.RECEIVED)

        self.product1.refresh_from_db()
        self.assertEqual(self.product1.stock, 4)

    @override_settings(PURCHASE_ORDER_RECEIPT_RESTOCKS=True)
    def test_receipt_restocks_when_enabled(self):
        """
        Given: Restocking on receipt is enabled
        When: An order for 6 + 5 units is received
        Then: Both products gain the ordered quantities
        """
        order = create_purchase_order(self.operator, self.supplier.id, [
            {'product_id': self.product1.id, 'quantity': 6},
            {'product_id': self.product2.id, 'quantity': 5},
        ])
        update_order_status(order, PurchaseOrder.Status.SHIPPED)
        update_order_status(order, PurchaseOrder.Status.RECEIVED)

        self.product1.refresh_from_db()
        self.product2.refresh_from_db()
        self.assertEqual(self.product1.stock, 10)
        self.assertEqual(self.product2.stock, 5)

    def test_pending_order_count(self):
        order = create_purchase_order(self.operator, self.supplier.id, [
            {'product_id': self.product1.id, 'quantity': 1}
        ])
        create_purchase_order(self.operator, self.supplier.id, [
            {'product_id': self.product2.id, 'quantity': 1}
        ])
        update_order_status(order, PurchaseOrder.Status.SHIPPED)

        self.assertEqual(pending_order_count(), 1)

    def test_order_item_subtotal(self):
        order = PurchaseOrder.objects.create(supplier=self.supplier)
        item = PurchaseOrderItem.objects.create(
            order=order, product=self.product1, quantity=3, unit_cost=Decimal('25.50')
        )

        self.assertEqual(item.subtotal, Decimal('76.50'))


class PurchaseOrderApiTestCase(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='owner', password='secret123', role=User.Role.ADMIN)
        self.seller = User.objects.create_user(username='seller', password='secret123')
        self.supplier = Supplier.objects.create(name='Textiles del Norte')
        category = Category.objects.create(name='Knitwear')
        self.product = Product.objects.create(
            name='Wool Sweater', price=Decimal('60.00'), cost=Decimal('28.00'), category=category,
            base_sku='SWT', sku='SWTMGRAY', size='M', color='Gray', stock=2
        )

    def _create_order(self):
        return self.client.post('/api/purchase-orders/', {
            'supplier_id': self.supplier.id,
            'items': [{'product_id': self.product.id, 'quantity': 12}],
        }, format='json')

    def test_salesperson_creates_but_cannot_advance(self):
        self.client.force_authenticate(self.seller)

        response = self._create_order()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total'], '336.00')
        self.assertEqual(response.data['supplier']['name'], 'Textiles del Norte')

        response = self.client.post(f"/api/purchase-orders/{response.data['id']}/status/",
                                    {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_advances_status(self):
        self.client.force_authenticate(self.admin)
        order_id = self._create_order().data['id']

        response = self.client.post(f'/api/purchase-orders/{order_id}/status/', {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(f'/api/purchase-orders/{order_id}/status/', {'status': 'pending'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid Status')

    def test_stats(self):
        self.client.force_authenticate(self.seller)
        response = self.client.get('/api/purchase-orders/stats/')
        self.assertEqual(response.data['open_value'], '0.00')

        self._create_order()

        response = self.client.get('/api/purchase-orders/stats/')

        self.assertEqual(response.data['total_orders'], 1)
        self.assertEqual(response.data['pending_orders'], 1)
        self.assertEqual(response.data['open_value'], '336.00')

    def test_list_filters_by_status(self):
        self.client.force_authenticate(self.seller)
        self._create_order()

        response = self.client.get('/api/purchase-orders/', {'status': 'received'})
        self.assertEqual(response.data['count'], 0)

        response = self.client.get('/api/purchase-orders/', {'status': 'pending'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['item_count'], 1)


@unittest.skipUnless(connection.vendor == 'postgresql', 'Row-level locking needs PostgreSQL')
class ConcurrentSaleTestCase(TransactionTestCase):
    """
    Test concurrent sales to verify the conditional decrement.
    Uses TransactionTestCase for proper multi-threading support.
    """

    def setUp(self):
        self.category = Category.objects.create(name='Concurrent Test Category')
        # Only 10 units available
        self.product = Product.objects.create(
            name='Limited Stock Product', price=Decimal('50.00'), category=self.category,
            base_sku='LTD', sku='LTDUBLACK', size='U', color='Black', stock=10
        )

    def test_concurrent_sales_no_overselling(self):
        """
        Test: Concurrent sales don't oversell stock.

        Given: 10 units in stock
        When: Two concurrent sales of 8 units each
        Then: At most one succeeds; final stock is 2 (or 10)
        """
        results = {}

        def sell(key):
            try:
                create_sale(ANONYMOUS, {'name': key}, [{'product_id': self.product.id, 'quantity': 8}], 'cash')
                results[key] = 'sold'
            except InsufficientStockError:
                results[key] = 'refused'
            finally:
                connection.close()

        threads = [threading.Thread(target=sell, args=(key,)) for key in ('sale1', 'sale2')]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.product.refresh_from_db()
        sold = sum(1 for r in results.values() if r == 'sold')

        self.assertLessEqual(sold, 1)
        self.assertGreaterEqual(self.product.stock, 0)
        if sold == 1:
            self.assertEqual(self.product.stock, 2)
        else:
            self.assertEqual(self.product.stock, 10)
