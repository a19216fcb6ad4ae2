"""
Django Admin configuration for expenses.
"""
from django.contrib import admin
from .models import Expense
from .services import next_sequence_number


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['sequence_number', 'date', 'category', 'description', 'amount', 'payment_method', 'recorded_by']
    list_filter = ['category', 'payment_method', 'date']
    search_fields = ['description', 'provider', 'receipt_ref']
    ordering = ['-date', '-sequence_number']
    readonly_fields = ['sequence_number', 'created_at', 'updated_at']
    raw_id_fields = ['recorded_by']

    def save_model(self, request, obj, form, change):
        if not obj.sequence_number:
            obj.sequence_number = next_sequence_number()
        super().save_model(request, obj, form, change)
