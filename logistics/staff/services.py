"""
Account management for employees: every employee owns a login account and
the two are created, synchronised and removed together.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils.crypto import get_random_string

from .models import Employee

logger = logging.getLogger(__name__)

User = get_user_model()

TEMP_PASSWORD_LENGTH = 12


def account_role(employee_role):
    """Only admin employees get the admin account role"""
    return 'admin' if employee_role == 'admin' else 'operator'


def _split_name(name):
    first, _, last = (name or '').strip().partition(' ')
    return first, last.strip()


def create_employee_with_account(validated_data, password=None):
    """Create the login account and the employee atomically. Returns (employee, temp_password)."""
    temp_password = None
    if not password:
        temp_password = get_random_string(TEMP_PASSWORD_LENGTH)
        password = temp_password

    email = validated_data['email'].strip().lower()
    first_name, last_name = _split_name(validated_data['name'])
    with transaction.atomic():
        user = User.objects.create_user(
            username=email,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=account_role(validated_data.get('role')),
            is_active=validated_data.get('is_active', True),
        )
        employee = Employee.objects.create(user=user, **{**validated_data, 'email': email})
        employee.activities.create(
            activity_type='login',
            description=f"Employé créé: {employee.name}",
            metadata={'action': 'employee_created'},
        )
    logger.info(f"Employee created: {employee.name} ({email})")
    return employee, temp_password


def sync_account(employee, password=None):
    """Push email, name, role, active flag and optionally a new password to the login account"""
    user = employee.user
    user.email = employee.email
    user.username = employee.email
    user.first_name, user.last_name = _split_name(employee.name)
    user.role = account_role(employee.role)
    user.is_active = employee.is_active
    if password and password.strip():
        user.set_password(password)
    user.save()


def delete_employee_with_account(employee):
    with transaction.atomic():
        user = employee.user
        employee.delete()
        user.delete()
    logger.info(f"Employee deleted: {employee.name}")
