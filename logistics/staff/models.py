from django.conf import settings
from django.db import models


class Employee(models.Model):
    """Staff profile attached one-to-one to a login account"""
    ROLE_CHOICES = [
        ('admin', 'Administrateur'),
        ('manager', 'Responsable'),
        ('operator', 'Opérateur'),
        ('driver', 'Chauffeur'),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='employee')
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='operator')
    salary = models.DecimalField(max_digits=10, decimal_places=2)
    position = models.CharField(max_length=255)
    hire_date = models.DateField()
    is_active = models.BooleanField(default=True)
    last_login = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'employees'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.position})"


class EmployeeActivity(models.Model):
    ACTIVITY_CHOICES = [
        ('login', 'Connexion'),
        ('logout', 'Déconnexion'),
        ('order_created', 'Commande créée'),
        ('order_updated', 'Commande modifiée'),
        ('inventory_updated', 'Inventaire modifié'),
        ('tracking_updated', 'Suivi modifié'),
    ]

    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='activities')
    activity_type = models.CharField(max_length=30, choices=ACTIVITY_CHOICES)
    description = models.TextField(blank=True, default='')
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'employee_activities'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['employee', '-created_at'], name='employee_act_emp_created_idx'),
        ]

    def __str__(self):
        return f"{self.employee.name} - {self.activity_type}"
