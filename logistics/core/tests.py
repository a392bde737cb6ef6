"""
Test suite for core: authentication, health checks, audit logging, i18n,
validators and the response envelope
"""
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase, RequestFactory, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from logistics.core.i18n import translate, resolve_language
from logistics.core.models import AuditLog
from logistics.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logistics.core.utils import create_audit_log, diff_fields, get_client_ip
from logistics.shipping.models import Order
from logistics.core.validators import (
    is_duplicate_error, is_valid_email, is_valid_id, is_valid_phone, missing_fields, sanitize_input,
)


class AuthenticationTests(TestCase):
    """Test JWT login, refresh and profile endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='operator1', password='secret-pass-1')
        self.client = APIClient()

    def test_login_returns_tokens_and_user(self):
        """Test login returns access/refresh tokens and the user profile"""
        response = self.client.post('/api/v1/auth/login/', {'username': 'operator1', 'password': 'secret-pass-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'operator1')
        self.assertEqual(response.data['user']['role'], 'operator')

    def test_login_wrong_password(self):
        """Test login with a wrong password is rejected inside the envelope"""
        response = self.client.post('/api/v1/auth/login/', {'username': 'operator1', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_login_records_employee_activity(self):
        """Test an employee login updates last_login and logs an activity"""
        employee = TestDataFactory.create_employee(user=self.user, email='operator1@test.com')
        response = self.client.post('/api/v1/auth/login/', {'username': 'operator1', 'password': 'secret-pass-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        employee.refresh_from_db()
        self.assertIsNotNone(employee.last_login)
        self.assertTrue(employee.activities.filter(activity_type='login').exists())

    def test_refresh_token(self):
        """Test refreshing an access token"""
        login = self.client.post('/api/v1/auth/login/', {'username': 'operator1', 'password': 'secret-pass-1'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_me_requires_authentication(self):
        """Test the profile endpoint rejects anonymous requests"""
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['success'], False)

    def test_me_returns_profile(self):
        """Test the profile endpoint for an authenticated user"""
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['username'], 'operator1')


class HealthTests(TestCase):
    """Test public diagnostic endpoints"""

    def setUp(self):
        self.client = APIClient()

    def test_health(self):
        """Test health reports database, tables and operations"""
        response = self.client.get('/api/v1/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertTrue(response.data['healthy'])
        self.assertTrue(response.data['database']['isConnected'])
        self.assertTrue(all(response.data['database']['tables'].values()))
        self.assertTrue(response.data['operations']['write'])
        self.assertTrue(response.data['operations']['delete'])

    def test_health_check_row_is_removed(self):
        """Test the write check does not leave inventory rows behind"""
        from logistics.inventory.models import InventoryItem
        self.client.get('/api/v1/health/')
        self.assertEqual(InventoryItem.objects.count(), 0)

    def test_connection_returns_order_count(self):
        """Test the connection check reports the number of orders"""
        TestDataFactory.create_order()
        response = self.client.get('/api/v1/test-connection/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['ordersCount'], 1)

    def test_connection_database_error(self):
        """Test a database failure is reported as a 500 envelope"""
        with mock.patch.object(Order.objects, 'count', side_effect=DatabaseError('down')):
            response = self.client.get('/api/v1/test-connection/')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(response.data['success'])


class AuditLogTests(TestCase):
    """Test audit log helpers"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.factory = RequestFactory()

    def test_create_audit_log(self):
        """Test an audit entry is stored with user and IP"""
        request = self.factory.post('/', REMOTE_ADDR='10.0.0.5')
        request.user = self.user
        entry = create_audit_log(request=request, action='create', model_name='Order', object_id=12, object_reference='DN2025000001')
        self.assertIsNotNone(entry)
        self.assertEqual(entry.user, self.user)
        self.assertEqual(entry.ip_address, '10.0.0.5')
        self.assertEqual(entry.object_id, '12')

    def test_create_audit_log_missing_fields(self):
        """Test entries without an action are skipped"""
        self.assertIsNone(create_audit_log(model_name='Order', object_id=1))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_create_audit_log_never_raises(self):
        """Test a storage failure is swallowed"""
        with mock.patch.object(AuditLog.objects, 'create', side_effect=DatabaseError('boom')):
            self.assertIsNone(create_audit_log(action='create', model_name='Order', object_id=1))

    def test_forwarded_ip(self):
        """Test the first X-Forwarded-For address wins"""
        request = self.factory.get('/', HTTP_X_FORWARDED_FOR='203.0.113.9, 10.0.0.1')
        self.assertEqual(get_client_ip(request), '203.0.113.9')

    def test_diff_fields(self):
        """Test only changed fields are reported"""
        order = TestDataFactory.create_order(status='pending')
        changes = diff_fields(order, {'status': 'confirmed', 'client_name': order.client_name})
        self.assertEqual(changes, {'status': {'old': 'pending', 'new': 'confirmed'}})


class I18nTests(TestCase):
    """Test translation lookup and language negotiation"""

    def setUp(self):
        self.factory = RequestFactory()

    def test_translate(self):
        """Test nested keys resolve per language"""
        self.assertEqual(translate('fr', 'tracking.status.pending'), 'En attente')
        self.assertEqual(translate('en', 'tracking.status.pending'), 'Pending')

    def test_translate_missing_key_returns_key(self):
        """Test a missing key is returned as-is"""
        self.assertEqual(translate('fr', 'tracking.status.unknown'), 'tracking.status.unknown')

    def test_translate_unknown_language_falls_back(self):
        """Test unknown languages use French"""
        self.assertEqual(translate('de', 'tracking.containerStatus.arrived'), 'Arrivé')

    def test_resolve_language(self):
        """Test query parameter, then Accept-Language, then French"""
        self.assertEqual(resolve_language(self.factory.get('/?lang=en')), 'en')
        self.assertEqual(resolve_language(self.factory.get('/', HTTP_ACCEPT_LANGUAGE='en-GB,en;q=0.9')), 'en')
        self.assertEqual(resolve_language(self.factory.get('/', HTTP_ACCEPT_LANGUAGE='nl-BE')), 'fr')
        self.assertEqual(resolve_language(None), 'fr')


class ValidatorTests(TestCase):
    """Test input validators"""

    def test_email(self):
        """Test email format validation"""
        self.assertTrue(is_valid_email('jean.dupont@example.be'))
        self.assertFalse(is_valid_email('jean.dupont@'))
        self.assertFalse(is_valid_email(''))

    def test_phone(self):
        """Test phone format validation"""
        self.assertTrue(is_valid_phone('+32 470 12 34 56'))
        self.assertFalse(is_valid_phone('abc'))

    def test_id(self):
        """Test only positive integers pass as primary keys"""
        self.assertTrue(is_valid_id('42'))
        self.assertTrue(is_valid_id(7))
        self.assertFalse(is_valid_id('abc'))
        self.assertFalse(is_valid_id('0'))
        self.assertFalse(is_valid_id('-3'))
        self.assertFalse(is_valid_id('²'))

    def test_sanitize_input(self):
        """Test strings are trimmed and capped"""
        self.assertEqual(sanitize_input('  Jean  '), 'Jean')
        self.assertEqual(len(sanitize_input('x' * 300)), 255)
        self.assertEqual(len(sanitize_input('x' * 300, max_length=None)), 300)
        self.assertEqual(sanitize_input(12), 12)

    def test_duplicate_error(self):
        """Test duplicate database errors are recognised"""
        self.assertTrue(is_duplicate_error(Exception('duplicate key value violates unique constraint')))
        self.assertTrue(is_duplicate_error(Exception('UNIQUE constraint failed: containers.code')))
        self.assertFalse(is_duplicate_error(Exception('connection refused')))

    def test_missing_fields(self):
        """Test blank and absent fields are reported"""
        self.assertEqual(missing_fields({'name': ' ', 'email': 'a@b.c'}, ['name', 'email', 'phone']), ['name', 'phone'])


@override_settings(ADMIN_SEED_KEY='seed-secret')
class AdminSeedKeyTests(TestCase):
    """Test the shared-key permission on seeding endpoints"""

    def setUp(self):
        self.client = APIClient()

    def test_missing_key(self):
        """Test seeding without the key is refused"""
        response = self.client.post('/api/v1/admin/seed-containers/')
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertFalse(response.data['success'])

    def test_wrong_key(self):
        """Test seeding with a wrong key is refused"""
        response = self.client.post('/api/v1/admin/seed-containers/', HTTP_X_ADMIN_SEED_KEY='wrong')
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    @override_settings(ADMIN_SEED_KEY='')
    def test_unset_key_disables_seeding(self):
        """Test an unset key refuses every request"""
        response = self.client.post('/api/v1/admin/seed-containers/', HTTP_X_ADMIN_SEED_KEY='')
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
