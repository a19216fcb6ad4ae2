"""
Django Admin configuration for purchase order models.
"""
from django.contrib import admin
from .models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ['product', 'quantity', 'unit_cost', 'subtotal']
    can_delete = False

    def subtotal(self, obj):
        return f"${obj.subtotal}"
    subtotal.short_description = 'Subtotal'


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'supplier', 'status', 'total', 'item_count', 'expected_date', 'received_date']
    list_filter = ['status', 'supplier', 'created_at']
    search_fields = ['id', 'supplier__name']
    ordering = ['-created_at']
    readonly_fields = ['status', 'total', 'received_date', 'created_at', 'updated_at']
    raw_id_fields = ['created_by']
    inlines = [PurchaseOrderItemInline]

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = 'Items'
