import logging

from django.conf import settings
from django.utils.crypto import constant_time_compare
from rest_framework.permissions import BasePermission

logger = logging.getLogger(__name__)


class IsAdminRole(BasePermission):
    """Only users whose role is admin (or superusers)."""
    message = 'Accès réservé aux administrateurs.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, 'is_admin_role', False))


class HasAdminSeedKey(BasePermission):
    """
    Seeding endpoints are protected by a shared key sent in the
    ``X-Admin-Seed-Key`` header. An unset key disables them entirely.
    """
    message = 'Clé administrateur invalide.'

    def has_permission(self, request, view):
        expected = getattr(settings, 'ADMIN_SEED_KEY', '')
        if not expected:
            logger.warning("Seed endpoint called but ADMIN_SEED_KEY is not configured")
            return False
        provided = request.headers.get('X-Admin-Seed-Key', '')
        return bool(provided) and constant_time_compare(provided, expected)
