"""
Operator accounts.

Every person using the back office is a User with one of two roles:
    - admin: full access, including user management and supplier deletion
    - salesperson: day-to-day catalog, quote and sale work
"""
from django.contrib.auth.models import AbstractUser
from django.db import models

from core.operator import ROLE_ADMIN, ROLE_SALESPERSON


class User(AbstractUser):

    class Role(models.TextChoices):
        ADMIN = ROLE_ADMIN, 'Administrator'
        SALESPERSON = ROLE_SALESPERSON, 'Salesperson'

    full_name = models.CharField(
        max_length=200,
        blank=True,
        default='',
        help_text="Name shown on quotes, sales and expenses"
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.SALESPERSON,
        db_index=True
    )

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-date_joined']

    def __str__(self):
        return self.full_name or self.username

    @property
    def is_admin_role(self) -> bool:
        return self.role == self.Role.ADMIN
