import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, help_text='Unique category name', max_length=100, unique=True)),
                ('description', models.TextField(blank=True, default='', help_text='Optional category description')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, help_text='Product name shared by all variants', max_length=200)),
                ('description', models.TextField(blank=True, default='', help_text='Optional product description')),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Sale price', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Purchase cost, used for profit reports', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('base_sku', models.CharField(db_index=True, help_text='Identifier shared by all variants of the product', max_length=64)),
                ('sku', models.CharField(help_text='Variant SKU: base SKU + size + color', max_length=128, unique=True)),
                ('size', models.CharField(max_length=30)),
                ('color', models.CharField(max_length=50)),
                ('stock', models.IntegerField(default=0, help_text='Units on hand')),
                ('stock_minimum', models.PositiveIntegerField(default=0, help_text='Threshold for low stock alerts')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(help_text='Product category', on_delete=django.db.models.deletion.PROTECT, related_name='products', to='inventory.category')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['name', 'size', 'color'],
                'indexes': [
                    models.Index(fields=['category', 'name'], name='product_category_name_idx'),
                    models.Index(fields=['stock'], name='product_stock_idx'),
                ],
            },
        ),
    ]
