"""
Tests for quote lifecycle and conversion to a sale.

Test Cases:
1. Quote creation snapshots prices and computes totals
2. Status transitions follow the state machine
3. Only drafts are editable
4. Conversion of an approved quote creates a sale and takes stock
5. Conversion with insufficient stock writes nothing
6. Printable document
"""
from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from core.operator import Operator
from directory.models import Client
from inventory.models import Category, Product
from inventory.services import InsufficientStockError
from quotes.models import Quote, QuoteItem
from quotes.services import (
    QuoteStateError,
    QuoteValidationError,
    change_status,
    convert_to_sale,
    create_quote,
    delete_quote,
    render_quote_document,
    status_counts,
    update_quote,
)
from sales.models import Sale

User = get_user_model()


class QuoteTestMixin:

    def make_fixtures(self):
        self.user = User.objects.create_user(username='seller', password='secret123', full_name='Pablo Garcia')
        self.operator = Operator.from_user(self.user)
        self.category = Category.objects.create(name='Quote Category')
        self.shirt = Product.objects.create(
            name='Oxford Shirt', price=Decimal('30.00'), cost=Decimal('18.00'), category=self.category,
            base_sku='OXF', sku='OXFLWHITE', size='L', color='White', stock=10
        )
        self.belt = Product.objects.create(
            name='Leather Belt', price=Decimal('25.00'), cost=Decimal('10.00'), category=self.category,
            base_sku='BLT', sku='BLTUBROWN', size='U', color='Brown', stock=1
        )

    def approved_quote(self, items):
        quote = create_quote(
            self.operator, {'name': 'Lucia Fernandez'}, items,
            valid_until=date.today() + timedelta(days=30)
        )
        change_status(quote, Quote.Status.SENT)
        return change_status(quote, Quote.Status.APPROVED)


class QuoteServiceTestCase(QuoteTestMixin, TestCase):

    def setUp(self):
        self.make_fixtures()
        self.valid_until = date.today() + timedelta(days=15)

    def test_create_quote_snapshots_prices(self):
        """
        Given: A shirt at 30.00 and a belt at 25.00
        When: Quoting 2 shirts and 1 belt with 20% discount
        Then: 85.00 / 17.00 / 68.00, draft status, prices frozen on the lines
        """
        quote = create_quote(
            self.operator,
            {'name': 'Lucia Fernandez', 'email': 'lucia@example.com'},
            [{'product_id': self.shirt.id, 'quantity': 2}, {'product_id': self.belt.id, 'quantity': 1}],
            discount_percent=Decimal('20'),
            valid_until=self.valid_until,
        )

        self.assertEqual(quote.status, Quote.Status.DRAFT)
        self.assertEqual(quote.subtotal, Decimal('85.00'))
        self.assertEqual(quote.discount, Decimal('17.00'))
        self.assertEqual(quote.total, Decimal('68.00'))
        self.assertEqual(quote.discount_percent, Decimal('20.00'))
        self.assertEqual(quote.client_email, 'lucia@example.com')

        self.shirt.price = Decimal('35.00')
        self.shirt.save()
        line = quote.items.get(product=self.shirt)
        self.assertEqual(line.unit_price, Decimal('30.00'))

    def test_quote_does_not_touch_stock(self):
        create_quote(self.operator, {'name': 'Ana'}, [{'product_id': self.belt.id, 'quantity': 5}],
                     valid_until=self.valid_until)

        self.belt.refresh_from_db()
        self.assertEqual(self.belt.stock, 1)

    def test_create_quote_validation(self):
        items = [{'product_id': self.shirt.id, 'quantity': 1}]

        with self.assertRaises(QuoteValidationError) as context:
            create_quote(self.operator, {'name': ''}, items, valid_until=self.valid_until)
        self.assertIn('Client name is required', str(context.exception))

        with self.assertRaises(QuoteValidationError) as context:
            create_quote(self.operator, {'name': 'Ana'}, items, valid_until=None)
        self.assertIn('Valid-until date is required', str(context.exception))

        with self.assertRaises(QuoteValidationError):
            create_quote(self.operator, {'name': 'Ana'}, [], valid_until=self.valid_until)

        with self.assertRaises(QuoteValidationError):
            create_quote(self.operator, {'name': 'Ana'}, [{'product_id': 99999, 'quantity': 1}],
                         valid_until=self.valid_until)

        self.assertEqual(Quote.objects.count(), 0)

    def test_existing_client_by_id_alone(self):
        """
        Given: A client picked from the directory with no name typed in
        When: Creating a quote that only carries the client id
        Then: The quote copies the client's name, phone and email
        """
        client = Client.objects.create(name='Marta Gil', phone='555-1212', email='marta@example.com')

        quote = create_quote(self.operator, {'client_id': client.id},
                             [{'product_id': self.shirt.id, 'quantity': 1}], valid_until=self.valid_until)

        self.assertEqual(quote.client, client)
        self.assertEqual(quote.client_name, 'Marta Gil')
        self.assertEqual(quote.client_phone, '555-1212')
        self.assertEqual(quote.client_email, 'marta@example.com')

    def test_unknown_client_id_refused(self):
        with self.assertRaises(QuoteValidationError) as context:
            create_quote(self.operator, {'client_id': 99999},
                         [{'product_id': self.shirt.id, 'quantity': 1}], valid_until=self.valid_until)
        self.assertIn('not found', str(context.exception))

    def test_allowed_transitions(self):
        quote = create_quote(self.operator, {'name': 'Ana'}, [{'product_id': self.shirt.id, 'quantity': 1}],
                             valid_until=self.valid_until)

        quote = change_status(quote, Quote.Status.SENT)
        self.assertEqual(quote.status, Quote.Status.SENT)

        quote = change_status(quote, Quote.Status.REJECTED)
        self.assertEqual(quote.status, Quote.Status.REJECTED)

    def test_illegal_transitions(self):
        """
        Given: A draft quote
        When: Jumping straight to approved, or to converted by status change
        Then: QuoteStateError and the status is unchanged
        """
        quote = create_quote(self.operator, {'name': 'Ana'}, [{'product_id': self.shirt.id, 'quantity': 1}],
                             valid_until=self.valid_until)

        with self.assertRaises(QuoteStateError):
            change_status(quote, Quote.Status.APPROVED)
        with self.assertRaises(QuoteStateError):
            change_status(quote, Quote.Status.CONVERTED)

        quote.refresh_from_db()
        self.assertEqual(quote.status, Quote.Status.DRAFT)

    def test_only_drafts_are_editable(self):
        quote = create_quote(self.operator, {'name': 'Ana'}, [{'product_id': self.shirt.id, 'quantity': 1}],
                             valid_until=self.valid_until)

        quote = update_quote(self.operator, quote, {'name': 'Ana Diaz'},
                             [{'product_id': self.belt.id, 'quantity': 2}], valid_until=self.valid_until)
        self.assertEqual(quote.client_name, 'Ana Diaz')
        self.assertEqual(quote.total, Decimal('50.00'))
        self.assertEqual(list(quote.items.values_list('product_id', flat=True)), [self.belt.id])

        change_status(quote, Quote.Status.SENT)
        with self.assertRaises(QuoteStateError):
            update_quote(self.operator, quote, {'name': 'Other'},
                         [{'product_id': self.shirt.id, 'quantity': 1}], valid_until=self.valid_until)

    def test_convert_approved_quote(self):
        """
        Test: Approved quote becomes a pending-payment sale.

        Given: An approved quote for 3 shirts (10 in stock)
        When: Converting it
        Then: Sale carries the quote totals and prices, stock is 7,
              quote is CONVERTED and linked to the sale
        """
        quote = self.approved_quote([{'product_id': self.shirt.id, 'quantity': 3}])
        self.shirt.price = Decimal('99.00')
        self.shirt.save()

        sale = convert_to_sale(self.operator, quote)

        self.assertEqual(sale.payment_method, Sale.PaymentMethod.PENDING)
        self.assertEqual(sale.total, quote.total)
        self.assertEqual(sale.client_name, 'Lucia Fernandez')
        self.assertEqual(sale.notes, f'Converted from quote #{quote.id}')
        self.assertEqual(sale.items.get().unit_price, Decimal('30.00'))

        quote.refresh_from_db()
        self.assertEqual(quote.status, Quote.Status.CONVERTED)
        self.assertEqual(quote.sale, sale)

        self.shirt.refresh_from_db()
        self.assertEqual(self.shirt.stock, 7)

    def test_convert_with_insufficient_stock(self):
        """
        Test: Conversion writes nothing when any line lacks stock.

        Given: An approved quote for 2 shirts and 2 belts (1 belt in stock)
        When: Converting it
        Then: InsufficientStockError naming the belt, no sale, quote
              still APPROVED, stock unchanged
        """
        quote = self.approved_quote([
            {'product_id': self.shirt.id, 'quantity': 2},
            {'product_id': self.belt.id, 'quantity': 2},
        ])

        with self.assertRaises(InsufficientStockError) as context:
            convert_to_sale(self.operator, quote)

        self.assertIn('Leather Belt', str(context.exception))
        self.assertIn('Available stock: 1', str(context.exception))
        self.assertEqual(Sale.objects.count(), 0)

        quote.refresh_from_db()
        self.assertEqual(quote.status, Quote.Status.APPROVED)
        self.shirt.refresh_from_db()
        self.belt.refresh_from_db()
        self.assertEqual(self.shirt.stock, 10)
        self.assertEqual(self.belt.stock, 1)

    def test_convert_requires_approved(self):
        quote = create_quote(self.operator, {'name': 'Ana'}, [{'product_id': self.shirt.id, 'quantity': 1}],
                             valid_until=self.valid_until)

        with self.assertRaises(QuoteStateError):
            convert_to_sale(self.operator, quote)

        self.assertEqual(Sale.objects.count(), 0)

    def test_convert_twice_refused(self):
        quote = self.approved_quote([{'product_id': self.shirt.id, 'quantity': 1}])
        convert_to_sale(self.operator, quote)

        with self.assertRaises(QuoteStateError):
            convert_to_sale(self.operator, quote)

        self.assertEqual(Sale.objects.count(), 1)

    def test_convert_with_deleted_product(self):
        quote = self.approved_quote([{'product_id': self.shirt.id, 'quantity': 1}])
        self.shirt.delete()

        with self.assertRaises(QuoteValidationError):
            convert_to_sale(self.operator, quote)

    def test_delete_quote(self):
        quote = create_quote(self.operator, {'name': 'Ana'}, [{'product_id': self.shirt.id, 'quantity': 1}],
                             valid_until=self.valid_until)

        delete_quote(quote)

        self.assertEqual(Quote.objects.count(), 0)
        self.assertEqual(QuoteItem.objects.count(), 0)

    def test_status_counts(self):
        self.approved_quote([{'product_id': self.shirt.id, 'quantity': 1}])
        create_quote(self.operator, {'name': 'Ana'}, [{'product_id': self.shirt.id, 'quantity': 1}],
                     valid_until=self.valid_until)

        counts = status_counts()

        self.assertEqual(counts['draft'], 1)
        self.assertEqual(counts['approved'], 1)
        self.assertEqual(counts['converted'], 0)
        self.assertEqual(counts['total'], 2)

    def test_printable_document(self):
        quote = create_quote(
            self.operator, {'name': 'Lucia Fernandez'},
            [{'product_id': self.shirt.id, 'quantity': 2}],
            discount_percent=Decimal('10'), valid_until=self.valid_until
        )

        html = render_quote_document(quote)

        self.assertIn('Lucia Fernandez', html)
        self.assertIn('Oxford Shirt', html)
        self.assertIn('54.00', html)
        self.assertIn('Pablo Garcia', html)


class QuoteApiTestCase(QuoteTestMixin, APITestCase):

    def setUp(self):
        self.make_fixtures()
        self.client.force_authenticate(self.user)

    def test_create_quote_defaults_valid_until(self):
        response = self.client.post('/api/quotes/', {
            'customer': {'name': 'Tomas Diaz'},
            'items': [{'product_id': self.shirt.id, 'quantity': 1}],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'draft')
        self.assertEqual(response.data['created_by_name'], 'Pablo Garcia')
        self.assertIsNone(response.data['sale_id'])
        expected = timezone.localdate() + timedelta(days=30)
        self.assertEqual(response.data['valid_until'], expected.isoformat())

    def test_full_lifecycle(self):
        response = self.client.post('/api/quotes/', {
            'customer': {'name': 'Tomas Diaz'},
            'items': [{'product_id': self.shirt.id, 'quantity': 2}],
        }, format='json')
        quote_id = response.data['id']

        for new_status in ('sent', 'approved'):
            response = self.client.post(f'/api/quotes/{quote_id}/status/', {'status': new_status}, format='json')
            self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(f'/api/quotes/{quote_id}/convert/')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['payment_method'], 'pending')
        self.assertEqual(response.data['quote'], quote_id)

        response = self.client.get(f'/api/quotes/{quote_id}/')
        self.assertEqual(response.data['status'], 'converted')
        self.assertIsNotNone(response.data['sale_id'])

    def test_illegal_status_returns_400(self):
        response = self.client.post('/api/quotes/', {
            'customer': {'name': 'Tomas Diaz'},
            'items': [{'product_id': self.shirt.id, 'quantity': 1}],
        }, format='json')

        response = self.client.post(f"/api/quotes/{response.data['id']}/status/", {'status': 'approved'},
                                    format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid Status')

    def test_convert_insufficient_stock_returns_400(self):
        quote = self.approved_quote([{'product_id': self.belt.id, 'quantity': 3}])

        response = self.client.post(f'/api/quotes/{quote.id}/convert/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Insufficient Stock')

    def test_print_returns_html(self):
        quote = self.approved_quote([{'product_id': self.shirt.id, 'quantity': 1}])

        response = self.client.get(f'/api/quotes/{quote.id}/print/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/html'))
        self.assertIn(b'Oxford Shirt', response.content)

    def test_summary(self):
        self.approved_quote([{'product_id': self.shirt.id, 'quantity': 1}])

        response = self.client.get('/api/quotes/summary/')

        self.assertEqual(response.data['approved'], 1)
        self.assertEqual(response.data['total'], 1)
