"""Database health probes used by the health endpoint."""
import logging
import time

from django.apps import apps
from django.contrib.auth import get_user_model
from django.db import DatabaseError, connection

logger = logging.getLogger(__name__)

CHECKED_TABLES = {
    'inventory': ('inventory', 'InventoryItem'),
    'orders': ('shipping', 'Order'),
    'employees': ('staff', 'Employee'),
    'employee_activities': ('staff', 'EmployeeActivity'),
}


def check_database_health():
    health = {
        'isConnected': False,
        'tables': {name: False for name in CHECKED_TABLES},
        'auth': False,
        'errors': [],
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
    except DatabaseError as e:
        health['errors'].append(f"Database connection failed: {str(e)}")
        return health

    health['isConnected'] = True

    for table, (app_label, model_name) in CHECKED_TABLES.items():
        try:
            model = apps.get_model(app_label, model_name)
            list(model.objects.all()[:1])
            health['tables'][table] = True
        except (DatabaseError, LookupError) as e:
            health['errors'].append(f"Table {table} not accessible: {str(e)}")

    try:
        get_user_model().objects.exists()
        health['auth'] = True
    except DatabaseError as e:
        health['errors'].append(f"Auth check failed: {str(e)}")

    return health


def test_database_operations():
    """Read, insert then delete a probe inventory row."""
    results = {'read': False, 'write': False, 'delete': False, 'errors': []}
    InventoryItem = apps.get_model('inventory', 'InventoryItem')

    try:
        list(InventoryItem.objects.values_list('id', flat=True)[:1])
        results['read'] = True
    except DatabaseError as e:
        results['errors'].append(f"Read test failed: {str(e)}")
        return results

    try:
        probe = InventoryItem.objects.create(
            type='colis',
            reference=f"TEST-{int(time.time() * 1000)}",
            description='Test item for health check',
            client='Health Check',
            status='en_stock',
            location='Test Location',
            poids='1kg',
            dimensions='10x10x10cm',
            valeur='1',
        )
        results['write'] = True
    except DatabaseError as e:
        results['errors'].append(f"Write test failed: {str(e)}")
        return results

    try:
        probe.delete()
        results['delete'] = True
    except DatabaseError as e:
        results['errors'].append(f"Delete test failed: {str(e)}")

    return results


def is_healthy(health, operations):
    return (
        health['isConnected']
        and all(health['tables'].values())
        and health['auth']
        and operations['read']
        and operations['write']
        and operations['delete']
    )
