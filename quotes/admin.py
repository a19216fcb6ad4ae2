"""
Django Admin configuration for quote models.
"""
from django.contrib import admin
from .models import Quote, QuoteItem


class QuoteItemInline(admin.TabularInline):
    model = QuoteItem
    extra = 0
    readonly_fields = ['product', 'quantity', 'unit_price', 'line_total']
    can_delete = False

    def line_total(self, obj):
        return f"${obj.line_total}"
    line_total.short_description = 'Total'


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display = ['id', 'client_name', 'status', 'total', 'valid_until', 'created_by', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['id', 'client_name', 'client_phone']
    ordering = ['-created_at']
    readonly_fields = ['subtotal', 'discount', 'total', 'created_at', 'updated_at']
    raw_id_fields = ['client', 'created_by']
    inlines = [QuoteItemInline]
