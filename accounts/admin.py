"""
Django Admin configuration for operator accounts.
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['id', 'username', 'full_name', 'role', 'is_active', 'date_joined']
    list_filter = ['role', 'is_active']
    search_fields = ['username', 'full_name', 'email']
    ordering = ['username']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Back office', {'fields': ('full_name', 'role')}),
    )
