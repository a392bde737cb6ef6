from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Back-office account. The role decides access to admin-only operations."""
    ROLE_CHOICES = [
        ('admin', 'Administrateur'),
        ('operator', 'Opérateur'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='operator')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def is_admin_role(self):
        return self.role == 'admin' or self.is_superuser


class AuditLog(models.Model):
    """Audit log for changes made through the API"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('status_change', 'Status Change'),
        ('tracking_add', 'Tracking Event Added'),
        ('qr_scan', 'QR Scanned'),
        ('notification', 'Notification Sent'),
        ('seed', 'Seed'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., client name, container code)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., order number, invoice number)")
    description = models.TextField(blank=True, default='')
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_a1b2c3_idx'),
            models.Index(fields=['action'], name='audit_logs_action_d4e5f6_idx'),
            models.Index(fields=['model_name', 'object_id'], name='audit_logs_model_n_0a1b2c_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__3d4e5f_idx'),
        ]

    def __str__(self):
        return f"{self.action} {self.model_name}#{self.object_id}"
