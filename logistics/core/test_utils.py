"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from logistics.parties.models import Client, Customer
from logistics.shipping.models import Container, Order, Package
from logistics.shipping.utils import generate_order_number, generate_qr_code
from logistics.inventory.models import InventoryItem
from logistics.staff.models import Employee
from logistics.billing.models import Invoice
from decimal import Decimal
from django.utils import timezone
from datetime import timedelta
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='operator', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_admin(username=None, password='testpass123'):
        """Create a user with the admin role"""
        return TestDataFactory.create_user(username=username, password=password, role='admin')

    @staticmethod
    def create_client(name=None, email=None, phone='+32470000000', company=None):
        """Create a test client"""
        if not name:
            name = f'Client {TestDataFactory.random_string(6)}'
        return Client.objects.create(
            name=name,
            email=email or f'{TestDataFactory.random_string(6).lower()}@client.test',
            phone=phone,
            company=company
        )

    @staticmethod
    def create_customer(name=None, email=None, status='active'):
        """Create a test customer"""
        if not name:
            name = f'Customer {TestDataFactory.random_string(6)}'
        return Customer.objects.create(
            name=name,
            email=email or f'{TestDataFactory.random_string(8).lower()}@customer.test',
            phone='+32470111111',
            city='Bruxelles',
            country='Belgique',
            status=status
        )

    @staticmethod
    def create_container(code=None, status='planned', client=None):
        """Create a test container"""
        if not code:
            code = f'MSKU{random.randint(1000000, 9999999)}'
        return Container.objects.create(
            code=code,
            vessel='MSC Test',
            departure_port='Anvers',
            arrival_port='Kinshasa',
            etd=timezone.now() + timedelta(days=3),
            eta=timezone.now() + timedelta(days=30),
            status=status,
            client=client
        )

    @staticmethod
    def create_order(client_name=None, client_email=None, client_phone=None, status='pending',
                     container=None, customer=None, value=Decimal('250.00'), **extra):
        """Create a test order with a generated order number and QR code"""
        return Order.objects.create(
            order_number=extra.pop('order_number', None) or generate_order_number(),
            client_name=client_name or f'Client {TestDataFactory.random_string(6)}',
            client_email=client_email,
            client_phone=client_phone,
            service_type=extra.pop('service_type', 'fret_maritime'),
            origin=extra.pop('origin', 'Bruxelles'),
            destination=extra.pop('destination', 'Kinshasa'),
            weight=extra.pop('weight', Decimal('12.50')),
            value=value,
            status=status,
            container=container,
            customer=customer,
            qr_code=extra.pop('qr_code', None) or generate_qr_code(),
            **extra
        )

    @staticmethod
    def create_package(qr_code=None, client=None, container=None, order=None, status='preparation'):
        """Create a test package"""
        return Package.objects.create(
            qr_code=qr_code or f'PKG-{TestDataFactory.random_string(8).upper()}',
            reference=f'REF-{TestDataFactory.random_string(5).upper()}',
            description='Carton de vêtements',
            client=client,
            container=container,
            order=order,
            weight=Decimal('8.00'),
            status=status
        )

    @staticmethod
    def create_inventory_item(reference=None, type='colis', status='en_stock', client='Jean Dupont', container=None):
        """Create a test inventory item"""
        return InventoryItem.objects.create(
            type=type,
            reference=reference or f'INV-{TestDataFactory.random_string(6).upper()}',
            description='Article de test',
            client=client,
            status=status,
            location='Entrepôt A',
            poids='10kg',
            dimensions='50x40x30cm',
            valeur='150',
            container=container
        )

    @staticmethod
    def create_employee(name='Marie Lambert', email=None, role='operator', user=None):
        """Create a test employee with its login account"""
        email = email or f'{TestDataFactory.random_string(6).lower()}@danemo.test'
        if user is None:
            user = TestDataFactory.create_user(username=email, email=email)
        return Employee.objects.create(
            user=user,
            name=name,
            email=email,
            role=role,
            salary=Decimal('2500.00'),
            position='Agent logistique',
            hire_date=timezone.localdate() - timedelta(days=365)
        )

    @staticmethod
    def create_invoice(customer=None, order=None, subtotal=Decimal('100.00'), status='draft', issue_date=None, due_in_days=30):
        """Create a test invoice; totals are computed on save"""
        issue_date = issue_date or timezone.localdate()
        return Invoice.objects.create(
            customer=customer,
            order=order,
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=due_in_days),
            status=status,
            subtotal=subtotal
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
