"""
Tests for clients, suppliers and customer resolution.
"""
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from directory.models import Client, Supplier
from directory.services import ClientNotFoundError, resolve_customer
from orders.models import PurchaseOrder

User = get_user_model()


class ResolveCustomerTestCase(TestCase):

    def setUp(self):
        self.client_record = Client.objects.create(name='Ana Diaz', phone='555-0101', email='ana@example.com')

    def test_existing_client_fills_missing_fields(self):
        client, name, phone = resolve_customer({'client_id': self.client_record.id})

        self.assertEqual(client, self.client_record)
        self.assertEqual(name, 'Ana Diaz')
        self.assertEqual(phone, '555-0101')

    def test_explicit_values_override_client(self):
        _, name, phone = resolve_customer({
            'client_id': self.client_record.id, 'name': 'Ana D.', 'phone': '555-9999'
        })

        self.assertEqual(name, 'Ana D.')
        self.assertEqual(phone, '555-9999')

    def test_unknown_client(self):
        with self.assertRaises(ClientNotFoundError):
            resolve_customer({'client_id': 99999})

    def test_create_client_on_the_fly(self):
        """
        Given: A walk-in customer with create_client set
        When: Resolving the customer
        Then: A new Client is stored and returned
        """
        client, name, _ = resolve_customer({
            'name': ' Luis Romero ', 'phone': '555-0202', 'email': 'luis@example.com', 'create_client': True
        })

        self.assertIsNotNone(client)
        self.assertEqual(client.name, 'Luis Romero')
        self.assertEqual(name, 'Luis Romero')
        self.assertEqual(Client.objects.count(), 2)

    def test_walk_in_customer_without_record(self):
        client, name, phone = resolve_customer({'name': 'Walk-in'})

        self.assertIsNone(client)
        self.assertEqual(name, 'Walk-in')
        self.assertEqual(phone, '')
        self.assertEqual(Client.objects.count(), 1)


class DirectoryApiTestCase(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(username='owner', password='secret123', role=User.Role.ADMIN)
        self.seller = User.objects.create_user(username='seller', password='secret123')
        self.client.force_authenticate(self.seller)

    def test_client_crud_and_search(self):
        response = self.client.post('/api/clients/', {'name': 'Marta Ruiz', 'phone': '555-3030'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        Client.objects.create(name='Jorge Diaz')

        response = self.client.get('/api/clients/', {'q': 'marta'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/clients/', {'q': '3030'})
        self.assertEqual(response.data['count'], 1)

    def test_client_name_required(self):
        response = self.client.post('/api/clients/', {'name': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_supplier_list_includes_order_count(self):
        supplier = Supplier.objects.create(name='Denim Works')
        PurchaseOrder.objects.create(supplier=supplier, total=Decimal('10.00'))

        response = self.client.get('/api/suppliers/')

        self.assertEqual(response.data['results'][0]['order_count'], 1)

    def test_only_admin_deletes_suppliers(self):
        supplier = Supplier.objects.create(name='Textiles del Norte')

        response = self.client.delete(f'/api/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.delete(f'/api/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_supplier_with_orders_cannot_be_deleted(self):
        """
        Given: A supplier referenced by a purchase order
        When: An administrator deletes it
        Then: 409 and the supplier remains
        """
        supplier = Supplier.objects.create(name='Accesorios Sol')
        PurchaseOrder.objects.create(supplier=supplier)
        self.client.force_authenticate(self.admin)

        response = self.client.delete(f'/api/suppliers/{supplier.id}/')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Supplier.objects.filter(pk=supplier.pk).exists())
