"""
Test suite for Parties module
Tests: Clients and Customers CRUD, validation, embedded orders and invoices
"""
from django.test import TestCase
from rest_framework import status
from logistics.core.models import AuditLog
from logistics.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logistics.parties.models import Client, Customer


class ClientTests(TestCase):
    """Test client endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_requires_authentication(self):
        """Test anonymous access is refused"""
        self.client.logout()
        response = self.client.get('/api/v1/clients/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_clients_sorted_by_name(self):
        """Test clients are listed by name"""
        TestDataFactory.create_client(name='Zoé Mbala')
        TestDataFactory.create_client(name='Albert Kasongo')
        response = self.client.get('/api/v1/clients/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [c['name'] for c in response.data['data']]
        self.assertEqual(names, ['Albert Kasongo', 'Zoé Mbala'])

    def test_create_client(self):
        """Test creating a client trims blanks and lowercases the email"""
        data = {'name': '  Jean Dupont ', 'email': 'Jean.Dupont@Example.BE', 'phone': '', 'company': 'Dupont SPRL'}
        response = self.client.post('/api/v1/clients/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['name'], 'Jean Dupont')
        self.assertEqual(response.data['data']['email'], 'jean.dupont@example.be')
        self.assertIsNone(response.data['data']['phone'])
        self.assertTrue(AuditLog.objects.filter(model_name='Client', action='create').exists())

    def test_create_client_requires_name(self):
        """Test name is mandatory"""
        response = self.client.post('/api/v1/clients/', {'email': 'x@example.be'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Missing required field: name')

    def test_create_client_invalid_phone(self):
        """Test the phone format is validated"""
        response = self.client.post('/api/v1/clients/', {'name': 'Jean', 'phone': '12ab'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid phone format')
        self.assertFalse(Client.objects.exists())

    def test_get_client(self):
        """Test retrieving a client"""
        client = TestDataFactory.create_client(name='Marie Ilunga')
        response = self.client.get(f'/api/v1/clients/{client.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['name'], 'Marie Ilunga')

    def test_get_missing_client(self):
        """Test an unknown client returns 404"""
        response = self.client.get('/api/v1/clients/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Client not found')

    def test_update_client_only_applies_strings(self):
        """Test update ignores non-string values"""
        client = TestDataFactory.create_client(name='Old Name', company='Old Co')
        response = self.client.put(f'/api/v1/clients/{client.id}/', {'name': 'New Name', 'company': 42}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        client.refresh_from_db()
        self.assertEqual(client.name, 'New Name')
        self.assertEqual(client.company, 'Old Co')

    def test_delete_client(self):
        """Test deleting a client"""
        client = TestDataFactory.create_client()
        response = self.client.delete(f'/api/v1/clients/{client.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Client deleted successfully')
        self.assertFalse(Client.objects.filter(id=client.id).exists())


class CustomerTests(TestCase):
    """Test customer endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer(self):
        """Test creating a customer"""
        data = {'name': 'Sarah Lukusa', 'email': 'SARAH@example.be', 'city': 'Liège'}
        response = self.client.post('/api/v1/customers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['email'], 'sarah@example.be')
        self.assertEqual(response.data['data']['status'], 'active')

    def test_create_customer_requires_name_and_email(self):
        """Test name and email are mandatory"""
        response = self.client.post('/api/v1/customers/', {'name': 'No Mail'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Name and email are required')

    def test_create_customer_invalid_email(self):
        """Test email format is validated"""
        response = self.client.post('/api/v1/customers/', {'name': 'Bad', 'email': 'not-an-email'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid email format')

    def test_create_customer_invalid_phone(self):
        """Test the phone format is validated on create and update"""
        data = {'name': 'Bad Phone', 'email': 'phone@example.be', 'phone': 'call me'}
        response = self.client.post('/api/v1/customers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid phone format')
        customer = TestDataFactory.create_customer()
        response = self.client.put(f'/api/v1/customers/{customer.id}/', {'phone': '123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_customer_keeps_long_notes(self):
        """Test free-text fields are trimmed but not truncated"""
        notes = 'n' * 400
        data = {'name': 'Long Notes', 'email': 'notes@example.be', 'phone': '+32 470 12 34 56', 'notes': f'  {notes}  '}
        response = self.client.post('/api/v1/customers/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Customer.objects.get(email='notes@example.be').notes, notes)

    def test_create_customer_duplicate_email(self):
        """Test a duplicate email returns 409"""
        TestDataFactory.create_customer(email='dup@example.be')
        response = self.client.post('/api/v1/customers/', {'name': 'Dup', 'email': 'Dup@example.be'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_list_customers_with_orders(self):
        """Test customers are listed with their orders embedded"""
        customer = TestDataFactory.create_customer(name='Paul Mbuyi')
        TestDataFactory.create_order(customer=customer)
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(len(response.data['data'][0]['orders']), 1)

    def test_filter_customers(self):
        """Test status and search filters"""
        TestDataFactory.create_customer(name='Active One', status='active')
        TestDataFactory.create_customer(name='Prospect One', status='prospect')
        response = self.client.get('/api/v1/customers/?status=prospect')
        self.assertEqual([c['name'] for c in response.data['data']], ['Prospect One'])
        response = self.client.get('/api/v1/customers/?status=all&search=active')
        self.assertEqual([c['name'] for c in response.data['data']], ['Active One'])

    def test_customer_detail_embeds_invoices(self):
        """Test customer detail includes orders and invoices"""
        customer = TestDataFactory.create_customer()
        order = TestDataFactory.create_order(customer=customer)
        TestDataFactory.create_invoice(customer=customer, order=order)
        response = self.client.get(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']['orders']), 1)
        self.assertEqual(len(response.data['data']['invoices']), 1)

    def test_update_customer_partial(self):
        """Test update only touches provided fields"""
        customer = TestDataFactory.create_customer(name='Keep Name')
        response = self.client.put(f'/api/v1/customers/{customer.id}/', {'city': 'Namur'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        customer.refresh_from_db()
        self.assertEqual(customer.name, 'Keep Name')
        self.assertEqual(customer.city, 'Namur')

    def test_update_customer_invalid_email(self):
        """Test update rejects an invalid email"""
        customer = TestDataFactory.create_customer()
        response = self.client.put(f'/api/v1/customers/{customer.id}/', {'email': 'broken'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_customer(self):
        """Test deleting a customer"""
        customer = TestDataFactory.create_customer()
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Customer.objects.filter(id=customer.id).exists())
