"""
Management command to seed the database with sample data.

Generates:
- Clothing categories
- Multi-variant products (one row per size/color combination)
- Clients and suppliers

Usage:
    python manage.py seed_data
    python manage.py seed_data --clear  # Clear existing data first
"""
import random
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from directory.models import Client, Supplier
from inventory.models import Category, Product
from inventory.services import ProductValidationError, save_product


class Command(BaseCommand):
    help = 'Seed the database with sample categories, products, clients and suppliers'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before seeding',
        )
        parser.add_argument(
            '--categories',
            type=int,
            default=6,
            help='Number of categories to create (default: 6)',
        )
        parser.add_argument(
            '--products',
            type=int,
            default=40,
            help='Number of logical products to create (default: 40)',
        )
        parser.add_argument(
            '--clients',
            type=int,
            default=25,
            help='Number of clients to create (default: 25)',
        )

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self._clear_data()

        self.stdout.write('Starting database seeding...')

        with transaction.atomic():
            categories = self._create_categories(options['categories'])
            self._create_products(options['products'], categories)
            self._create_clients(options['clients'])
            self._create_suppliers()

        self.stdout.write(self.style.SUCCESS('Database seeding completed successfully!'))

    def _clear_data(self):
        """Clear all existing data."""
        from expenses.models import Expense
        from orders.models import PurchaseOrder
        from quotes.models import Quote
        from sales.models import Sale

        Sale.objects.all().delete()
        Quote.objects.all().delete()
        PurchaseOrder.objects.all().delete()
        Expense.objects.all().delete()
        Product.objects.all().delete()
        Category.objects.all().delete()
        Client.objects.all().delete()
        Supplier.objects.all().delete()

        self.stdout.write(self.style.WARNING('All existing data cleared.'))

    def _create_categories(self, count):
        """Create sample categories."""
        category_names = [
            'T-Shirts', 'Jeans', 'Dresses', 'Jackets', 'Sweaters',
            'Shorts', 'Skirts', 'Accessories', 'Footwear', 'Sportswear'
        ]

        categories = []
        for name in category_names[:count]:
            category, created = Category.objects.get_or_create(name=name)
            categories.append(category)
            if created:
                self.stdout.write(f'  Created category: {name}')

        self.stdout.write(self.style.SUCCESS(f'Created {len(categories)} categories'))
        return categories

    def _create_products(self, count, categories):
        """Create logical products, each saved with all its variants."""
        styles = ['Basic', 'Classic', 'Slim', 'Oversize', 'Vintage', 'Premium', 'Urban', 'Essential']
        size_sets = [['S', 'M', 'L'], ['S', 'M', 'L', 'XL'], ['28', '30', '32', '34'], ['U']]
        colors = ['Black', 'White', 'Navy Blue', 'Gray', 'Red', 'Olive', 'Beige']

        created = 0
        self.stdout.write(f'Creating {count} products...')

        for i in range(count):
            category = random.choice(categories)
            base_sku = f"{category.name[:3].upper()}{i + 1:03d}"
            cost = Decimal(str(round(random.uniform(4, 40), 2)))
            price = (cost * Decimal(str(random.uniform(1.6, 2.5)))).quantize(Decimal('0.01'))

            sizes = random.choice(size_sets)
            product_colors = random.sample(colors, k=random.randint(1, 3))
            variants = [
                {
                    'size': size,
                    'color': color,
                    'stock': random.randint(0, 40),
                    'stock_minimum': random.randint(2, 6),
                }
                for size in sizes
                for color in product_colors
            ]

            data = {
                'name': f"{random.choice(styles)} {category.name.rstrip('s')} {i + 1}",
                'description': f"{category.name} from the seed catalog.",
                'price': price,
                'cost': cost,
                'category_id': category.id,
                'sku': base_sku,
            }

            try:
                rows = save_product(data, variants)
            except ProductValidationError as e:
                self.stdout.write(self.style.WARNING(f'  Skipped {base_sku}: {e}'))
                continue

            created += len(rows)
            if (i + 1) % 10 == 0:
                self.stdout.write(f'  Created {i + 1} products...')

        self.stdout.write(self.style.SUCCESS(f'Created {created} product variants'))

    def _create_clients(self, count):
        """Create sample clients."""
        first_names = ['Ana', 'Luis', 'Marta', 'Jorge', 'Lucia', 'Pablo', 'Sofia', 'Diego', 'Elena', 'Tomas']
        last_names = ['Garcia', 'Lopez', 'Martinez', 'Fernandez', 'Romero', 'Diaz', 'Torres', 'Ruiz']
        cities = ['Madrid', 'Barcelona', 'Valencia', 'Sevilla', 'Bilbao']

        clients = []
        for i in range(count):
            first = random.choice(first_names)
            last = random.choice(last_names)
            clients.append(Client(
                name=f"{first} {last}",
                email=f"{first.lower()}.{last.lower()}{i}@example.com",
                phone=f"555-{random.randint(1000, 9999)}",
                city=random.choice(cities),
                postal_code=f"{random.randint(10000, 52999)}",
            ))

        Client.objects.bulk_create(clients)
        self.stdout.write(self.style.SUCCESS(f'Created {len(clients)} clients'))

    def _create_suppliers(self):
        """Create sample suppliers."""
        suppliers = [
            Supplier(name='Textiles del Norte', contact_name='Carmen Vidal', phone='555-2100',
                     email='ventas@textilesnorte.example.com'),
            Supplier(name='Denim Works', contact_name='Raul Ortega', phone='555-2200',
                     email='orders@denimworks.example.com'),
            Supplier(name='Accesorios Sol', contact_name='Irene Pardo', phone='555-2300'),
        ]
        Supplier.objects.bulk_create(suppliers)
        self.stdout.write(self.style.SUCCESS(f'Created {len(suppliers)} suppliers'))
