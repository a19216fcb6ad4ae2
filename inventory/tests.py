"""
Tests for catalog logic.

Test Cases:
1. Variant SKU generation and base SKU recovery
2. Saving a product with its variants (create, edit, duplicates)
3. Category deletion guard
4. Conditional stock decrement
5. Catalog API endpoints
"""
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from inventory.models import Category, Product
from inventory.services import (
    CategoryInUseError,
    InsufficientStockError,
    ProductValidationError,
    check_stock,
    decrement_stock,
    delete_category,
    get_product_group,
    increment_stock,
    save_product,
)
from inventory.sku import extract_base_sku, generate_variant_sku

User = get_user_model()


class VariantSkuTestCase(TestCase):
    """Test cases for the variant SKU scheme."""

    def test_generate_normalizes_size_and_color(self):
        """
        Given: A base SKU and size/color with spaces and lower case
        When: Generating the variant SKU
        Then: Whitespace is dropped and the suffix is upper-cased
        """
        self.assertEqual(generate_variant_sku('TSH-01', 'x l', ' navy blue'), 'TSH-01XLNAVYBLUE')
        self.assertEqual(generate_variant_sku(' JN7 ', 'm', 'Black'), 'JN7MBLACK')

    def test_generate_returns_empty_for_blank_parts(self):
        self.assertEqual(generate_variant_sku('', 'M', 'Black'), '')
        self.assertEqual(generate_variant_sku('TSH', ' ', 'Black'), '')
        self.assertEqual(generate_variant_sku('TSH', 'M', None), '')

    def test_extract_recovers_base_sku(self):
        """
        Given: A SKU generated from base, size and color
        When: Extracting with the same size and color
        Then: The original base SKU comes back
        """
        for base, size, color in [('TSH-01', 'x l', 'navy blue'), ('A1', 'M', 'Red'), ('JN', '32', 'blue')]:
            full = generate_variant_sku(base, size, color)
            self.assertEqual(extract_base_sku(full, size, color), base)

    def test_extract_leaves_unrelated_sku_unchanged(self):
        self.assertEqual(extract_base_sku('TSH01MRED', 'L', 'Red'), 'TSH01MRED')
        self.assertEqual(extract_base_sku('TSH01MRED', '', 'Red'), 'TSH01MRED')
        self.assertEqual(extract_base_sku('', 'M', 'Red'), '')


class ProductSaveTestCase(TestCase):
    """Test cases for saving a product as a unit of variants."""

    def setUp(self):
        self.category = Category.objects.create(name='T-Shirts')
        self.data = {
            'name': 'Basic T-Shirt',
            'description': 'Cotton',
            'price': Decimal('15.00'),
            'cost': Decimal('8.00'),
            'category_id': self.category.id,
            'sku': 'TSH01',
        }

    def test_create_product_with_variants(self):
        """
        Given: Two size/color combinations
        When: Saving a new product
        Then: One row per variant with shared fields and generated SKUs
        """
        variants = [
            {'size': 'M', 'color': 'Black', 'stock': 10, 'stock_minimum': 2},
            {'size': 'L', 'color': 'Navy Blue', 'stock': 5, 'stock_minimum': 1},
        ]

        rows = save_product(self.data, variants)

        self.assertEqual(len(rows), 2)
        skus = sorted(row.sku for row in rows)
        self.assertEqual(skus, ['TSH01LNAVYBLUE', 'TSH01MBLACK'])
        for row in rows:
            self.assertEqual(row.name, 'Basic T-Shirt')
            self.assertEqual(row.price, Decimal('15.00'))
            self.assertEqual(row.base_sku, 'TSH01')

    def test_duplicate_combination_rejected(self):
        """
        Given: Two variants that normalize to the same size/color
        When: Saving the product
        Then: Validation fails and nothing is written
        """
        variants = [
            {'size': 'M', 'color': 'Navy Blue'},
            {'size': 'm', 'color': 'navyblue'},
        ]

        with self.assertRaises(ProductValidationError) as context:
            save_product(self.data, variants)

        self.assertIn('Duplicate', str(context.exception))
        self.assertEqual(Product.objects.count(), 0)

    def test_required_fields(self):
        variants = [{'size': 'M', 'color': 'Black'}]

        for field, message in [('name', 'Name'), ('sku', 'SKU'), ('category_id', 'Category')]:
            data = dict(self.data, **{field: None})
            with self.assertRaises(ProductValidationError) as context:
                save_product(data, variants)
            self.assertIn(message, str(context.exception))

        with self.assertRaises(ProductValidationError):
            save_product(self.data, [])
        with self.assertRaises(ProductValidationError):
            save_product(self.data, [{'size': 'M', 'color': ''}])

    def test_sku_taken_by_other_product(self):
        """
        Given: A product already using base SKU TSH01
        When: Creating a different product with the same base SKU
        Then: Validation fails
        """
        save_product(self.data, [{'size': 'M', 'color': 'Black'}])

        other = dict(self.data, name='Another Shirt')
        with self.assertRaises(ProductValidationError) as context:
            save_product(other, [{'size': 'S', 'color': 'White'}])

        self.assertIn('already used', str(context.exception))
        self.assertEqual(Product.objects.count(), 1)

    def test_edit_reconciles_variants(self):
        """
        Given: A product with variants M/Black and L/Black
        When: Editing it to M/Black and S/White
        Then: M/Black keeps its id, L/Black is removed, S/White is added
        """
        rows = save_product(self.data, [
            {'size': 'M', 'color': 'Black', 'stock': 10},
            {'size': 'L', 'color': 'Black', 'stock': 4},
        ])
        kept_id = next(row.id for row in rows if row.size == 'M')

        edited = dict(self.data, price=Decimal('18.00'))
        rows = save_product(edited, [
            {'size': 'M', 'color': 'Black', 'stock': 7},
            {'size': 'S', 'color': 'White', 'stock': 3},
        ], current_base_sku='TSH01')

        self.assertEqual(len(rows), 2)
        by_size = {row.size: row for row in rows}
        self.assertEqual(by_size['M'].id, kept_id)
        self.assertEqual(by_size['M'].stock, 7)
        self.assertEqual(by_size['M'].price, Decimal('18.00'))
        self.assertIn('S', by_size)
        self.assertFalse(Product.objects.filter(sku='TSH01LBLACK').exists())

    def test_edit_can_change_base_sku(self):
        save_product(self.data, [{'size': 'M', 'color': 'Black'}])

        renamed = dict(self.data, sku='TSH02')
        rows = save_product(renamed, [{'size': 'M', 'color': 'Black'}], current_base_sku='TSH01')

        self.assertEqual(rows[0].sku, 'TSH02MBLACK')
        self.assertFalse(Product.objects.filter(base_sku='TSH01').exists())

    def test_product_group_returns_base_sku(self):
        save_product(self.data, [
            {'size': 'M', 'color': 'Black'},
            {'size': 'L', 'color': 'Black'},
        ])

        group = get_product_group('TSH01')

        self.assertEqual(group['sku'], 'TSH01')
        self.assertEqual(len(group['variants']), 2)
        self.assertIsNone(get_product_group('NOPE'))


class CategoryGuardTestCase(TestCase):

    def test_category_with_products_cannot_be_deleted(self):
        """
        Given: A category with one product
        When: Deleting the category
        Then: CategoryInUseError carries the product count; category remains
        """
        category = Category.objects.create(name='Jeans')
        Product.objects.create(name='Slim Jean', category=category, base_sku='JN', sku='JN32BLUE',
                               size='32', color='Blue')

        with self.assertRaises(CategoryInUseError) as context:
            delete_category(category)

        self.assertEqual(context.exception.product_count, 1)
        self.assertTrue(Category.objects.filter(pk=category.pk).exists())

    def test_empty_category_is_deleted(self):
        category = Category.objects.create(name='Empty')
        delete_category(category)
        self.assertFalse(Category.objects.filter(pk=category.pk).exists())


class StockTestCase(TestCase):
    """Test cases for stock movements."""

    def setUp(self):
        category = Category.objects.create(name='Stock Category')
        self.product = Product.objects.create(
            name='Stock Product', price=Decimal('10.00'), category=category,
            base_sku='STK', sku='STKMRED', size='M', color='Red', stock=5
        )

    def test_decrement_within_stock(self):
        decrement_stock(self.product.id, 5)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 0)

    def test_decrement_beyond_stock_refused(self):
        """
        Given: 5 units in stock
        When: Taking 6 units
        Then: InsufficientStockError and stock unchanged
        """
        with self.assertRaises(InsufficientStockError) as context:
            decrement_stock(self.product.id, 6)

        self.assertEqual(context.exception.available, 5)
        self.assertIn('Stock Product', str(context.exception))
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 5)

    def test_increment(self):
        increment_stock(self.product.id, 3)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 8)

    def test_check_stock_does_not_write(self):
        check_stock([(self.product, 5)])
        with self.assertRaises(InsufficientStockError):
            check_stock([(self.product, 9)])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 5)


class CatalogApiTestCase(APITestCase):
    """Test cases for catalog endpoints."""

    def setUp(self):
        self.user = User.objects.create_user(username='seller', password='secret123', full_name='Seller')
        self.client.force_authenticate(self.user)
        self.category = Category.objects.create(name='Dresses')

    def _group_payload(self, **overrides):
        payload = {
            'name': 'Summer Dress',
            'price': '40.00',
            'cost': '22.00',
            'category_id': self.category.id,
            'sku': 'DRS1',
            'variants': [
                {'size': 'S', 'color': 'Red', 'stock': 3, 'stock_minimum': 1},
                {'size': 'M', 'color': 'Red', 'stock': 0, 'stock_minimum': 1},
            ],
        }
        payload.update(overrides)
        return payload

    def test_create_and_fetch_product_group(self):
        response = self.client.post('/api/products/groups/', self._group_payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sku'], 'DRS1')
        self.assertEqual(len(response.data['variants']), 2)

        response = self.client.get('/api/products/groups/DRS1/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Summer Dress')

    def test_duplicate_variants_return_400(self):
        payload = self._group_payload(variants=[
            {'size': 'S', 'color': 'Red'},
            {'size': 's', 'color': 'RED'},
        ])

        response = self.client.post('/api/products/groups/', payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation Error')

    def test_product_list_filters(self):
        self.client.post('/api/products/groups/', self._group_payload(), format='json')

        response = self.client.get('/api/products/', {'in_stock': 'true'})
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/products/', {'low_stock': 'true'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['size'], 'M')

    def test_autocomplete_requires_three_characters(self):
        self.client.post('/api/products/groups/', self._group_payload(), format='json')

        response = self.client.get('/api/products/autocomplete/', {'q': 'Su'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get('/api/products/autocomplete/', {'q': 'Sum'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_delete_category_in_use_returns_409(self):
        self.client.post('/api/products/groups/', self._group_payload(), format='json')

        response = self.client.delete(f'/api/categories/{self.category.id}/')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['product_count'], 2)

    def test_requires_authentication(self):
        self.client.force_authenticate(None)
        response = self.client.get('/api/products/')
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
