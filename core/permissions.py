"""
Role-based permissions for DRF views.
"""
from rest_framework.permissions import BasePermission

from .operator import Operator


class IsAdminRole(BasePermission):
    """Allow access only to operators with the admin role."""
    message = 'This action requires an administrator.'

    def has_permission(self, request, view):
        return Operator.from_request(request).is_admin


class IsAdminRoleForDelete(BasePermission):
    """Everyone authenticated may read and write; only admins may delete."""
    message = 'Only administrators can delete this record.'

    def has_permission(self, request, view):
        if request.method != 'DELETE':
            return True
        return Operator.from_request(request).is_admin

