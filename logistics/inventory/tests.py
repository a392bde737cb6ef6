"""
Test suite for Inventory module
"""
from django.test import TestCase
from rest_framework import status

from logistics.core.models import AuditLog
from logistics.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logistics.inventory.models import InventoryItem


class InventoryTests(TestCase):
    """Test inventory endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_item(self):
        """Test creating an inventory item with defaults"""
        data = {'type': 'vehicule', 'reference': 'VEH-001', 'client': 'Jean Dupont', 'container_id': ''}
        response = self.client.post('/api/v1/inventory/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        item = response.data['data']
        self.assertEqual(item['status'], 'en_stock')
        self.assertIsNone(item['container_id'])
        self.assertIsNotNone(item['date_ajout'])
        self.assertTrue(AuditLog.objects.filter(model_name='InventoryItem', action='create').exists())

    def test_create_item_requires_reference(self):
        """Test reference is mandatory"""
        response = self.client.post('/api/v1/inventory/', {'type': 'colis'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Missing required field: reference')

    def test_create_item_invalid_type(self):
        """Test unknown item types are rejected"""
        response = self.client.post('/api/v1/inventory/', {'type': 'avion', 'reference': 'X-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_item_in_container(self):
        """Test an item can be placed in a container"""
        container = TestDataFactory.create_container(code='MSKU5550001')
        data = {'type': 'colis', 'reference': 'COL-9', 'container_id': container.id}
        response = self.client.post('/api/v1/inventory/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['container_code'], 'MSKU5550001')

    def test_filters(self):
        """Test search, type, status and 'all'"""
        TestDataFactory.create_inventory_item(reference='COL-1', type='colis', status='en_stock', client='Alice')
        TestDataFactory.create_inventory_item(reference='VEH-1', type='vehicule', status='livre', client='Bob')
        response = self.client.get('/api/v1/inventory/?type=vehicule')
        self.assertEqual([i['reference'] for i in response.data['data']], ['VEH-1'])
        response = self.client.get('/api/v1/inventory/?status=en_stock&type=all')
        self.assertEqual([i['reference'] for i in response.data['data']], ['COL-1'])
        response = self.client.get('/api/v1/inventory/?search=bob')
        self.assertEqual([i['reference'] for i in response.data['data']], ['VEH-1'])
        response = self.client.get('/api/v1/inventory/?status=all')
        self.assertEqual(len(response.data['data']), 2)

    def test_update_item(self):
        """Test a partial update"""
        item = TestDataFactory.create_inventory_item(status='en_stock')
        response = self.client.put(f'/api/v1/inventory/{item.id}/', {'status': 'en_transit'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item.refresh_from_db()
        self.assertEqual(item.status, 'en_transit')

    def test_item_not_found(self):
        """Test an unknown item returns 404"""
        response = self.client.get('/api/v1/inventory/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Inventory item not found')

    def test_delete_item(self):
        """Test deleting an item"""
        item = TestDataFactory.create_inventory_item()
        response = self.client.delete(f'/api/v1/inventory/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Inventory item deleted successfully')
        self.assertFalse(InventoryItem.objects.filter(id=item.id).exists())
