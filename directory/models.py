"""
Directory Models - the people the business trades with.

Models:
    - Client: Customer records referenced by quotes and sales
    - Supplier: Vendors referenced by purchase orders
"""
from django.db import models


class Client(models.Model):
    """
    Customer record.

    Quotes and sales keep their own copy of the client name and phone, so a
    client can be edited or deleted without rewriting history.
    """
    name = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Client full name"
    )
    email = models.EmailField(blank=True, default='')
    phone = models.CharField(max_length=50, blank=True, default='')
    address = models.CharField(max_length=255, blank=True, default='')
    city = models.CharField(max_length=100, blank=True, default='')
    postal_code = models.CharField(max_length=20, blank=True, default='')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Client'
        verbose_name_plural = 'Clients'
        ordering = ['-created_at']

    def __str__(self):
        return self.name


class Supplier(models.Model):
    """
    Vendor the shop buys stock from.

    Deletion is blocked at the database level while purchase orders
    reference the supplier.
    """
    name = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Supplier company name"
    )
    contact_name = models.CharField(
        max_length=200,
        blank=True,
        default='',
        help_text="Person to talk to at the supplier"
    )
    email = models.EmailField(blank=True, default='')
    phone = models.CharField(max_length=50, blank=True, default='')
    address = models.CharField(max_length=255, blank=True, default='')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Supplier'
        verbose_name_plural = 'Suppliers'
        ordering = ['name']

    def __str__(self):
        return self.name
