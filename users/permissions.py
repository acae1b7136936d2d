"""
Permisos personalizados para el módulo de usuarios.
"""

from rest_framework.permissions import BasePermission


class IsServiceProvider(BasePermission):
    """
    Solo usuarios autenticados con rol SERVICE_PROVIDER.
    """
    message = 'Only service providers can access this resource.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.is_provider
