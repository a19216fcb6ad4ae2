"""
Django Admin configuration for catalog models.
"""
from django.contrib import admin
from django.db.models import Count, F

from .models import Category, Product


class LowStockFilter(admin.SimpleListFilter):
    title = 'stock level'
    parameter_name = 'stock_level'

    def lookups(self, request, model_admin):
        return [('low', 'At or below minimum'), ('out', 'Out of stock')]

    def queryset(self, request, queryset):
        if self.value() == 'low':
            return queryset.filter(stock__lte=F('stock_minimum'))
        if self.value() == 'out':
            return queryset.filter(stock__lte=0)
        return queryset


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'variant_count', 'updated_at']
    search_fields = ['name', 'description']
    ordering = ['name']

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(variant_total=Count('products'))

    def variant_count(self, obj):
        return obj.variant_total
    variant_count.short_description = 'Variants'
    variant_count.admin_order_field = 'variant_total'


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['sku', 'name', 'size', 'color', 'price', 'cost', 'stock', 'stock_minimum', 'low_stock']
    list_filter = [LowStockFilter, 'category', 'size']
    search_fields = ['name', 'sku', 'base_sku']
    ordering = ['base_sku', 'size', 'color']
    list_select_related = ['category']
    readonly_fields = ['sku', 'base_sku', 'created_at', 'updated_at']

    def low_stock(self, obj):
        return obj.is_low_stock
    low_stock.boolean = True
    low_stock.short_description = 'Low'
