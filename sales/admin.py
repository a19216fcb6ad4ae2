"""
Django Admin configuration for sale models.
"""
from django.contrib import admin
from .models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    readonly_fields = ['product', 'quantity', 'unit_price', 'line_total']
    can_delete = False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['id', 'date', 'client_name', 'payment_method', 'total', 'item_count', 'created_by']
    list_filter = ['payment_method', 'date']
    search_fields = ['id', 'client_name', 'client_phone']
    ordering = ['-created_at']
    readonly_fields = ['subtotal', 'discount', 'total', 'quote', 'created_at']
    raw_id_fields = ['client', 'created_by']
    inlines = [SaleItemInline]

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = 'Items'
