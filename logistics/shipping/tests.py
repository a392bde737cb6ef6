"""
Comprehensive test suite for Shipping module
Tests: Containers, Orders, Tracking events, History, Packages, Seeding
"""
import io
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from logistics.billing.models import Invoice
from logistics.core.models import AuditLog
from logistics.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logistics.parties.models import Customer
from logistics.shipping.models import Container, Order, TrackingEvent
from logistics.shipping.seed_data import (
    SAMPLE_CONTAINERS, SAMPLE_CUSTOMERS, SAMPLE_ORDER_CONTAINERS, SAMPLE_ORDERS, SAMPLE_USERS,
    seed_containers, seed_customers_and_invoices, seed_users,
)
from logistics.shipping.utils import format_order_number, generate_order_number, generate_qr_code


class ContainerTests(TestCase):
    """Test container endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_container(self):
        """Test creating a container defaults to planned"""
        owner = TestDataFactory.create_client()
        data = {'code': 'MSKU7777777', 'vessel': 'MSC Test', 'etd': '', 'client_id': owner.id}
        response = self.client.post('/api/v1/containers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['status'], 'planned')
        self.assertEqual(response.data['data']['client_name'], owner.name)
        self.assertIsNone(response.data['data']['etd'])

    def test_create_container_requires_code(self):
        """Test code is mandatory"""
        response = self.client.post('/api/v1/containers/', {'vessel': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Missing required field: code')

    def test_duplicate_container_code(self):
        """Test container codes are unique"""
        TestDataFactory.create_container(code='MSKU1111111')
        response = self.client.post('/api/v1/containers/', {'code': 'MSKU1111111'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_list_containers(self):
        """Test listing containers"""
        TestDataFactory.create_container()
        TestDataFactory.create_container()
        response = self.client.get('/api/v1/containers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 2)

    @mock.patch('logistics.shipping.views.schedule_container_notification')
    def test_status_change_schedules_notification(self, mock_schedule):
        """Test a status change is audited and notifies the clients"""
        container = TestDataFactory.create_container(status='planned')
        data = {'status': 'departed', 'notificationMessage': 'Parti ce matin'}
        response = self.client.put(f'/api/v1/containers/{container.id}/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'departed')
        mock_schedule.assert_called_once_with(
            container.id, 'departed', custom_message='Parti ce matin', previous_status='planned',
        )
        self.assertTrue(AuditLog.objects.filter(model_name='Container', action='status_change').exists())

    @mock.patch('logistics.shipping.views.schedule_container_notification')
    def test_update_without_status_change_does_not_notify(self, mock_schedule):
        """Test editing other fields does not notify"""
        container = TestDataFactory.create_container(status='planned')
        response = self.client.put(f'/api/v1/containers/{container.id}/', {'vessel': 'CMA CGM'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_schedule.assert_not_called()

    def test_container_not_found(self):
        """Test an unknown container returns 404"""
        response = self.client.get('/api/v1/containers/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_container(self):
        """Test deleting a container"""
        container = TestDataFactory.create_container()
        response = self.client.delete(f'/api/v1/containers/{container.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Container.objects.filter(id=container.id).exists())

    def test_container_inventory_sorted_by_client(self):
        """Test container inventory lists its orders by client name"""
        container = TestDataFactory.create_container()
        TestDataFactory.create_order(client_name='Zacharie', container=container)
        TestDataFactory.create_order(client_name='Béatrice', container=container)
        TestDataFactory.create_order(client_name='Hors conteneur')
        response = self.client.get(f'/api/v1/containers/{container.id}/inventory/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([o['client_name'] for o in response.data['data']], ['Béatrice', 'Zacharie'])

    def test_container_inventory_not_found(self):
        """Test inventory of an unknown container returns 404"""
        response = self.client.get('/api/v1/containers/99999/inventory/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class OrderTests(TestCase):
    """Test order endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_order(self):
        """Test creating an order generates number and QR code and forces pending"""
        data = {
            'client_name': 'Jean Dupont',
            'client_email': 'jean@example.be',
            'service_type': 'fret_maritime',
            'origin': 'Bruxelles',
            'destination': 'Kinshasa',
            'value': '500.00',
            'status': 'completed',
        }
        response = self.client.post('/api/v1/orders/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        order = response.data['data']
        self.assertEqual(order['status'], 'pending')
        self.assertTrue(order['order_number'].startswith(f"DN{timezone.now().year}"))
        self.assertTrue(order['qr_code'].startswith('DNQR-'))
        self.assertTrue(AuditLog.objects.filter(model_name='Order', action='create', object_id=str(order['id'])).exists())

    def test_create_order_requires_client_name(self):
        """Test client_name is mandatory"""
        response = self.client.post('/api/v1/orders/', {'origin': 'Bruxelles'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Missing required field: client_name')

    def test_order_numbers_are_sequential(self):
        """Test consecutive orders get consecutive numbers"""
        first = self.client.post('/api/v1/orders/', {'client_name': 'A'}, format='json').data['data']
        second = self.client.post('/api/v1/orders/', {'client_name': 'B'}, format='json').data['data']
        year = timezone.now().year
        self.assertEqual(first['order_number'], format_order_number(year, 1))
        self.assertEqual(second['order_number'], format_order_number(year, 2))

    def test_generate_order_number_skips_taken(self):
        """Test the generator moves past numbers already in use"""
        year = timezone.now().year
        TestDataFactory.create_order(order_number=format_order_number(year, 2))
        self.assertEqual(generate_order_number(), format_order_number(year, 3))

    def test_generate_qr_code_prefix(self):
        """Test QR codes carry the requested prefix"""
        self.assertTrue(generate_qr_code(prefix='PKG').startswith('PKG-'))

    def test_list_orders_search_and_status(self):
        """Test search and status filters"""
        TestDataFactory.create_order(client_name='Alice Kabila', status='pending')
        TestDataFactory.create_order(client_name='Bob Tshisekedi', status='completed')
        response = self.client.get('/api/v1/orders/?status=completed')
        self.assertEqual([o['client_name'] for o in response.data['data']], ['Bob Tshisekedi'])
        response = self.client.get('/api/v1/orders/?search=alice')
        self.assertEqual([o['client_name'] for o in response.data['data']], ['Alice Kabila'])
        response = self.client.get('/api/v1/orders/?status=all')
        self.assertEqual(len(response.data['data']), 2)

    @mock.patch('logistics.shipping.views.schedule_order_notification')
    def test_update_order_status_with_notify(self, mock_schedule):
        """Test a status change with notify schedules the notification and records history"""
        order = TestDataFactory.create_order(status='pending')
        response = self.client.put(f'/api/v1/orders/{order.id}/', {'status': 'confirmed', 'notify': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_schedule.assert_called_once_with(order.id, 'confirmed')
        entry = AuditLog.objects.get(model_name='Order', object_id=str(order.id), action='status_change')
        self.assertEqual(entry.changes['status'], {'old': 'pending', 'new': 'confirmed'})

    @mock.patch('logistics.shipping.views.schedule_order_notification')
    def test_update_order_status_without_notify(self, mock_schedule):
        """Test no notification is sent unless requested"""
        order = TestDataFactory.create_order(status='pending')
        self.client.put(f'/api/v1/orders/{order.id}/', {'status': 'confirmed'}, format='json')
        mock_schedule.assert_not_called()

    def test_update_order_fields(self):
        """Test a plain update is audited as an update"""
        order = TestDataFactory.create_order(destination='Kinshasa')
        response = self.client.put(f'/api/v1/orders/{order.id}/', {'destination': 'Lubumbashi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['destination'], 'Lubumbashi')
        self.assertTrue(AuditLog.objects.filter(model_name='Order', action='update').exists())

    def test_delete_order(self):
        """Test deleting an order"""
        order = TestDataFactory.create_order()
        response = self.client.delete(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Order.objects.filter(id=order.id).exists())

    def test_order_history_newest_first(self):
        """Test history returns audit entries newest first with the user name"""
        order = TestDataFactory.create_order(status='pending')
        self.client.put(f'/api/v1/orders/{order.id}/', {'status': 'confirmed'}, format='json')
        self.client.put(f'/api/v1/orders/{order.id}/', {'status': 'in_progress'}, format='json')
        response = self.client.get(f'/api/v1/orders/{order.id}/history/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entries = response.data['data']
        self.assertEqual(len(entries), 2)
        self.assertEqual(entries[0]['changes']['status']['new'], 'in_progress')
        self.assertEqual(entries[0]['user_name'], self.user.username)


class TrackingEventTests(TestCase):
    """Test order tracking events"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.order = TestDataFactory.create_order(status='confirmed')

    def test_add_event_syncs_order_status(self):
        """Test an event with an order status updates the order"""
        data = {'status': 'in_progress', 'location': 'Anvers', 'description': 'Chargé'}
        response = self.client.post(f'/api/v1/orders/{self.order.id}/tracking/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'in_progress')
        event = TrackingEvent.objects.get(order=self.order)
        self.assertEqual(event.created_by, self.user)
        self.assertTrue(AuditLog.objects.filter(action='tracking_add', object_id=str(self.order.id)).exists())

    def test_add_free_form_event_keeps_order_status(self):
        """Test an event with a non-order status leaves the order untouched"""
        response = self.client.post(f'/api/v1/orders/{self.order.id}/tracking/', {'status': 'Dédouanement'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'confirmed')

    def test_add_event_requires_status(self):
        """Test status is mandatory"""
        response = self.client.post(f'/api/v1/orders/{self.order.id}/tracking/', {'location': 'Anvers'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_add_event_unknown_order(self):
        """Test an unknown order returns 404"""
        response = self.client.post('/api/v1/orders/99999/tracking/', {'status': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_events_in_chronological_order(self):
        """Test events are returned oldest first"""
        now = timezone.now()
        TrackingEvent.objects.create(order=self.order, status='second', event_date=now)
        TrackingEvent.objects.create(order=self.order, status='first', event_date=now - timedelta(days=1))
        response = self.client.get(f'/api/v1/orders/{self.order.id}/tracking/')
        self.assertEqual([e['status'] for e in response.data['data']], ['first', 'second'])


class PackageTests(TestCase):
    """Test package registration"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_package_generates_qr(self):
        """Test a package without QR code gets a generated one"""
        container = TestDataFactory.create_container()
        response = self.client.post('/api/v1/packages/', {'reference': 'R1', 'container_id': container.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['data']['qr_code'].startswith('PKG-'))

    def test_list_packages_by_container(self):
        """Test filtering packages by container"""
        container = TestDataFactory.create_container()
        TestDataFactory.create_package(container=container)
        TestDataFactory.create_package()
        response = self.client.get(f'/api/v1/packages/?container_id={container.id}')
        self.assertEqual(len(response.data['data']), 1)

    def test_list_packages_rejects_non_numeric_container(self):
        """Test a malformed container_id is a 400, not a server error"""
        response = self.client.get('/api/v1/packages/?container_id=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'container_id invalide')


@override_settings(ADMIN_SEED_KEY='seed-secret')
class SeedTests(TestCase):
    """Test seeding endpoints and helpers"""

    def setUp(self):
        self.client = APIClient()
        self.headers = {'HTTP_X_ADMIN_SEED_KEY': 'seed-secret'}

    def test_seed_containers(self):
        """Test all sample containers are inserted"""
        response = self.client.post('/api/v1/admin/seed-containers/', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(Container.objects.count(), len(SAMPLE_CONTAINERS))

    def test_seed_containers_is_idempotent(self):
        """Test existing containers count as success"""
        seed_containers()
        results = seed_containers()
        self.assertTrue(all(r['ok'] for r in results))
        self.assertEqual(Container.objects.count(), len(SAMPLE_CONTAINERS))

    def test_seed_orders(self):
        """Test orders, customers and containers are upserted"""
        response = self.client.post('/api/v1/admin/seed-orders/', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(Order.objects.exists())
        self.assertTrue(Customer.objects.exists())
        self.assertEqual(response.data['summary']['total_orders'], Order.objects.count())

    def test_seed_customers_creates_invoices(self):
        """Test customers are derived from orders and eligible orders invoiced"""
        TestDataFactory.create_order(client_name='Jean', client_email='Jean@Example.be', status='completed', value=Decimal('100.00'))
        TestDataFactory.create_order(client_name='Jean', client_email='jean@example.be', status='pending', value=Decimal('50.00'))
        results = seed_customers_and_invoices()
        self.assertEqual(results['errors'], [])
        self.assertEqual(results['customersCreated'], 1)
        self.assertEqual(results['ordersLinked'], 2)
        self.assertEqual(results['invoicesCreated'], 1)
        invoice = Invoice.objects.get()
        self.assertEqual(invoice.status, 'sent')
        self.assertEqual(invoice.total_amount, Decimal('121.00'))

    def test_seed_customers_view(self):
        """Test the seed-customers endpoint reports its counters"""
        response = self.client.post('/api/v1/admin/seed-customers/', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('customersCreated', response.data['results'])

    def test_seed_demo_data_command(self):
        """Test the management command seeds everything"""
        out = io.StringIO()
        call_command('seed_demo_data', stdout=out)
        self.assertIn('Done:', out.getvalue())
        self.assertTrue(Container.objects.exists())
        self.assertTrue(Order.objects.exists())

    @mock.patch('logistics.shipping.views.seed_containers')
    def test_seed_partial_failure_is_multi_status(self, mock_seed):
        """Test a failed item turns the answer into 207 Multi-Status"""
        mock_seed.return_value = [
            {'code': 'MSKU1234567', 'ok': True, 'id': 1},
            {'code': 'TCLU9876543', 'ok': False, 'message': 'disk full'},
        ]
        response = self.client.post('/api/v1/admin/seed-containers/', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_207_MULTI_STATUS)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['message'], 'Seeded 1 out of 2 containers')

    def test_seed_requires_matching_key(self):
        """Test missing or wrong keys are refused and nothing is written"""
        for headers in ({}, {'HTTP_X_ADMIN_SEED_KEY': 'wrong'}):
            response = self.client.post('/api/v1/admin/seed-containers/', **headers)
            self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
            self.assertFalse(response.data['success'])
        self.assertFalse(Container.objects.exists())

    @override_settings(ADMIN_SEED_KEY='')
    def test_seed_disabled_without_configured_key(self):
        """Test seeding is refused when no key is configured"""
        response = self.client.post('/api/v1/admin/seed-users/', HTTP_X_ADMIN_SEED_KEY='')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(get_user_model().objects.exists())

    def test_seed_users(self):
        """Test the admin and operator accounts are created with their roles"""
        response = self.client.post('/api/v1/admin/seed-users/', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        User = get_user_model()
        for email, password, role in SAMPLE_USERS:
            user = User.objects.get(email=email)
            self.assertEqual(user.role, role)
            self.assertTrue(user.check_password(password))

    def test_seed_users_is_idempotent(self):
        """Test existing accounts are reported as already existing"""
        seed_users()
        response = self.client.post('/api/v1/admin/seed-users/', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({r['message'] for r in response.data['results']}, {'Already exists'})
        self.assertEqual(get_user_model().objects.count(), len(SAMPLE_USERS))

    def test_reseed_data_replaces_existing_rows(self):
        """Test reseeding wipes orders, customers and containers first"""
        stale = TestDataFactory.create_order(client_name='Ancien client')
        TestDataFactory.create_container(code='OLDU0000001')
        response = self.client.post('/api/v1/admin/reseed-data/', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertFalse(Order.objects.filter(id=stale.id).exists())
        self.assertFalse(Container.objects.filter(code='OLDU0000001').exists())
        self.assertEqual(Order.objects.count(), len(SAMPLE_ORDERS))
        self.assertEqual(Customer.objects.count(), len(SAMPLE_CUSTOMERS))
        self.assertEqual(Container.objects.count(), len(SAMPLE_ORDER_CONTAINERS))

    @mock.patch('logistics.shipping.seed_data.seed_orders')
    def test_reseed_failure_keeps_previous_data(self, mock_seed_orders):
        """Test a failed reseed rolls the deletion back"""
        stale = TestDataFactory.create_order()
        mock_seed_orders.return_value = (
            {
                'customers': {'created': 0, 'errors': []},
                'containers': {'created': 0, 'errors': ['MSKU9876543: boom']},
                'orders': {'created': 0, 'errors': []},
            },
            {'total_customers': 0, 'total_containers': 0, 'total_orders': 0, 'linked_orders': 0},
        )
        response = self.client.post('/api/v1/admin/reseed-data/', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_207_MULTI_STATUS)
        self.assertFalse(response.data['success'])
        self.assertTrue(Order.objects.filter(id=stale.id).exists())
