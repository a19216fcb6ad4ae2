"""
Tests for report aggregations.
"""
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from directory.models import Supplier
from inventory.models import Category, Product
from orders.models import PurchaseOrder
from reports import services
from reports.tasks import generate_daily_sales_report
from sales.models import Sale, SaleItem

User = get_user_model()


class ReportFixturesMixin:

    def make_fixtures(self):
        self.today = timezone.localdate()
        self.category = Category.objects.create(name='Report Category')
        self.cap = Product.objects.create(
            name='Cap', price=Decimal('10.00'), cost=Decimal('6.00'), category=self.category,
            base_sku='CAP', sku='CAPUBLACK', size='U', color='Black', stock=20, stock_minimum=2
        )
        self.scarf = Product.objects.create(
            name='Scarf', price=Decimal('25.00'), cost=Decimal('20.00'), category=self.category,
            base_sku='SCF', sku='SCFURED', size='U', color='Red', stock=1, stock_minimum=3
        )

    def record_sale(self, day, lines, payment_method='cash'):
        """lines: (product, quantity, unit_price) tuples"""
        subtotal = sum((price * quantity for _, quantity, price in lines), Decimal('0.00'))
        sale = Sale.objects.create(
            client_name='Walk-in', subtotal=subtotal, total=subtotal,
            payment_method=payment_method, date=day
        )
        for product, quantity, price in lines:
            SaleItem.objects.create(
                sale=sale, product=product, quantity=quantity,
                unit_price=price, line_total=price * quantity
            )
        return sale


class ReportServiceTestCase(ReportFixturesMixin, TestCase):

    def setUp(self):
        self.make_fixtures()

    def test_product_profit_and_margin(self):
        """
        Given: One line of 3 caps at 10.00 with cost 6.00
        When: Computing product profits
        Then: Profit is (10 - 6) * 3 = 12 and margin 12 / 30 * 100 = 40%
        """
        self.record_sale(self.today, [(self.cap, 3, Decimal('10.00'))])

        rows = services.product_profits()

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['product'], 'Cap')
        self.assertEqual(rows[0]['revenue'], Decimal('30.00'))
        self.assertEqual(rows[0]['cost_total'], Decimal('18.00'))
        self.assertEqual(rows[0]['profit'], Decimal('12.00'))
        self.assertEqual(rows[0]['margin'], Decimal('40.00'))

    def test_profits_sorted_by_profit(self):
        self.record_sale(self.today, [(self.cap, 1, Decimal('10.00')), (self.scarf, 4, Decimal('25.00'))])

        rows = services.product_profits()

        self.assertEqual([row['product'] for row in rows], ['Scarf', 'Cap'])
        self.assertEqual(rows[0]['profit'], Decimal('20.00'))

    def test_deleted_product_reported_as_unknown(self):
        """
        Given: A sold product that was later deleted
        When: Computing profits
        Then: The line is grouped under "Unknown product" with cost 0
        """
        self.record_sale(self.today, [(self.scarf, 2, Decimal('25.00'))])
        self.scarf.delete()

        rows = services.product_profits()

        self.assertEqual(rows[0]['product'], services.UNKNOWN_PRODUCT)
        self.assertEqual(rows[0]['cost_total'], Decimal('0.00'))
        self.assertEqual(rows[0]['margin'], Decimal('100.00'))

    def test_zero_revenue_margin(self):
        self.record_sale(self.today, [(self.cap, 2, Decimal('0.00'))])

        rows = services.product_profits()

        self.assertEqual(rows[0]['margin'], Decimal('0.00'))
        self.assertEqual(rows[0]['profit'], Decimal('-12.00'))

    def test_top_products_by_quantity(self):
        self.record_sale(self.today, [(self.cap, 5, Decimal('10.00')), (self.scarf, 1, Decimal('25.00'))])
        self.record_sale(self.today, [(self.cap, 2, Decimal('9.00'))])

        rows = services.top_products()

        self.assertEqual(rows[0], {'product': 'Cap', 'quantity': 7, 'revenue': Decimal('68.00')})
        self.assertEqual(rows[1]['product'], 'Scarf')
        self.assertEqual(len(services.top_products(limit=1)), 1)

    def test_daily_sales_respects_range(self):
        yesterday = self.today - timedelta(days=1)
        self.record_sale(yesterday, [(self.cap, 1, Decimal('10.00'))])
        self.record_sale(self.today, [(self.cap, 2, Decimal('10.00'))])
        self.record_sale(self.today, [(self.scarf, 1, Decimal('25.00'))])

        rows = services.daily_sales((self.today, self.today))
        self.assertEqual(rows, [{'date': self.today, 'total': Decimal('45.00'), 'count': 2}])
        self.assertEqual(str(rows[0]['total']), '45.00')

        rows = services.daily_sales()
        self.assertEqual([row['date'] for row in rows], [yesterday, self.today])

    def test_daily_profit(self):
        self.record_sale(self.today, [(self.cap, 3, Decimal('10.00'))])

        rows = services.daily_profit()

        self.assertEqual(rows[0]['profit'], Decimal('12.00'))
        self.assertEqual(rows[0]['margin'], Decimal('40.00'))

    def test_stock_alerts(self):
        alerts = services.stock_alerts()

        self.assertEqual([alert['sku'] for alert in alerts], ['SCFURED'])
        self.assertEqual(alerts[0]['category'], 'Report Category')

    def test_resolve_range(self):
        start, end = services.resolve_range(days=7)
        self.assertEqual(end, self.today)
        self.assertEqual(start, self.today - timedelta(days=6))

        self.assertEqual(services.resolve_range(), (None, None))
        with self.assertRaises(ValueError):
            services.resolve_range(days=14)

    def test_dashboard_metrics(self):
        supplier = Supplier.objects.create(name='Accesorios Sol')
        PurchaseOrder.objects.create(supplier=supplier)
        self.record_sale(self.today, [(self.cap, 3, Decimal('10.00'))])
        self.record_sale(self.today - timedelta(days=3), [(self.scarf, 1, Decimal('30.00'))])

        metrics = services.dashboard_metrics()

        self.assertEqual(metrics['total_sales'], Decimal('60.00'))
        self.assertEqual(metrics['sale_count'], 2)
        self.assertEqual(metrics['today_sales'], Decimal('30.00'))
        self.assertEqual(metrics['units_sold'], 4)
        self.assertEqual(metrics['average_ticket'], Decimal('30.00'))
        self.assertEqual(metrics['gross_profit'], Decimal('22.00'))
        self.assertEqual(metrics['product_count'], 2)
        self.assertEqual(metrics['low_stock_count'], 1)
        self.assertEqual(metrics['pending_purchase_orders'], 1)

    def test_daily_report_task(self):
        yesterday = self.today - timedelta(days=1)
        self.record_sale(yesterday, [(self.cap, 3, Decimal('10.00'))])

        result = generate_daily_sales_report()

        self.assertEqual(result['date'], yesterday.isoformat())
        self.assertEqual(result['sale_count'], 1)
        self.assertEqual(result['gross_profit'], '12.00')


class ReportApiTestCase(ReportFixturesMixin, APITestCase):

    def setUp(self):
        self.make_fixtures()
        user = User.objects.create_user(username='owner', password='secret123')
        self.client.force_authenticate(user)

    def test_dashboard(self):
        self.record_sale(self.today, [(self.cap, 3, Decimal('10.00'))])

        response = self.client.get('/api/reports/dashboard/', {'days': 7})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sale_count'], 1)

    def test_money_rendered_as_cent_strings(self):
        """
        Given: A sale of 3 caps at 10.00 (cost 6.00) and one of 2 scarves at 12.75
        When: Fetching the dashboard, daily sales and product profits
        Then: Money and margins come out as two-decimal strings on any database
        """
        self.record_sale(self.today, [(self.cap, 3, Decimal('10.00'))])
        self.record_sale(self.today, [(self.scarf, 2, Decimal('12.75'))])

        dashboard = self.client.get('/api/reports/dashboard/').data
        self.assertEqual(dashboard['total_sales'], '55.50')
        self.assertEqual(dashboard['today_sales'], '55.50')
        self.assertEqual(dashboard['average_ticket'], '27.75')
        self.assertEqual(dashboard['gross_profit'], '-2.50')

        daily = self.client.get('/api/reports/daily-sales/').data
        self.assertEqual(daily[0]['total'], '55.50')
        self.assertEqual(daily[0]['count'], 2)

        profits = self.client.get('/api/reports/product-profits/').data
        self.assertEqual(profits[0]['product'], 'Cap')
        self.assertEqual(profits[0]['profit'], '12.00')
        self.assertEqual(profits[0]['margin'], '40.00')

    def test_invalid_period(self):
        response = self.client.get('/api/reports/daily-sales/', {'days': 15})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_product_profits_with_dates(self):
        self.record_sale(self.today, [(self.cap, 3, Decimal('10.00'))])
        tomorrow = self.today + timedelta(days=1)

        response = self.client.get('/api/reports/product-profits/', {'start': tomorrow.isoformat()})
        self.assertEqual(response.data, [])

        response = self.client.get('/api/reports/product-profits/', {'end': self.today.isoformat()})
        self.assertEqual(len(response.data), 1)

    def test_stock_alerts(self):
        response = self.client.get('/api/reports/stock-alerts/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
