"""
Django Admin configuration for clients and suppliers.
"""
from django.contrib import admin
from .models import Client, Supplier


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'phone', 'email', 'city', 'created_at']
    list_filter = ['city']
    search_fields = ['name', 'phone', 'email']
    ordering = ['-created_at']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'contact_name', 'phone', 'email']
    search_fields = ['name', 'contact_name', 'email']
    ordering = ['name']
