"""
Test suite for public tracking
Tests: QR payload decoding, order search, package lookup, scans, QR label PDF
"""
import base64
import json

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from logistics.core.models import AuditLog
from logistics.core.test_utils import TestDataFactory
from logistics.shipping.models import TrackingEvent
from logistics.tracking.decoder import decode_payload, try_decode_base64


class DecoderTests(TestCase):
    """Test QR payload decoding"""

    def test_plain_code(self):
        """Test a bare code is returned as-is"""
        result = decode_payload('  PKG-ABC123  ')
        self.assertEqual(result.qr_code, 'PKG-ABC123')
        self.assertEqual(result.metadata, {})

    def test_empty_payload(self):
        """Test an empty payload yields no code"""
        result = decode_payload('   ')
        self.assertIsNone(result.qr_code)
        self.assertEqual(result.decoded, '')

    def test_url_query_parameter(self):
        """Test the code is read from the URL query"""
        result = decode_payload('https://danemo.be/qr?code=DNQR-1234')
        self.assertEqual(result.qr_code, 'DNQR-1234')
        self.assertEqual(result.metadata['source'], 'danemo.be')

    def test_url_last_path_segment(self):
        """Test the last path segment is used when no query key matches"""
        result = decode_payload('https://danemo.be/track/PKG-XYZ/')
        self.assertEqual(result.qr_code, 'PKG-XYZ')

    def test_json_payload(self):
        """Test known JSON keys are looked up in order"""
        result = decode_payload(json.dumps({'order_number': 'DN2026000001', 'qr_code': 'PKG-777'}))
        self.assertEqual(result.qr_code, 'PKG-777')
        self.assertEqual(result.metadata['format'], 'json')

    def test_base64_json_payload(self):
        """Test base64 wrapped JSON is unwrapped first"""
        encoded = base64.b64encode(json.dumps({'tracking': 'DN2026000042'}).encode()).decode()
        result = decode_payload(encoded)
        self.assertEqual(result.qr_code, 'DN2026000042')
        self.assertEqual(result.metadata['encoding'], 'base64')
        self.assertEqual(result.metadata['format'], 'json')

    def test_url_encoded_payload(self):
        """Test percent-encoded payloads are unquoted"""
        result = decode_payload('https%3A%2F%2Fdanemo.be%2Fqr%3Fqr%3DPKG-55')
        self.assertEqual(result.qr_code, 'PKG-55')

    def test_base64_requires_readable_text(self):
        """Test binary base64 content is not treated as decoded text"""
        self.assertIsNone(try_decode_base64(base64.b64encode(b'\x00\x01\x02').decode()))
        self.assertIsNone(try_decode_base64('abc'))

    def test_decode_endpoint(self):
        """Test the public decode endpoint"""
        client = APIClient()
        response = client.post('/api/v1/qr/decode/', {'raw': 'PKG-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['qr_code'], 'PKG-1')
        response = client.post('/api/v1/qr/decode/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class OrderSearchTests(TestCase):
    """Test the public order search"""

    def setUp(self):
        self.client = APIClient()
        self.order = TestDataFactory.create_order(client_email='jean@example.be', status='pending')

    def test_search_requires_query(self):
        """Test a query parameter is required"""
        response = self.client.get('/api/v1/orders/search/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Paramètre tracking ou email requis')

    def test_search_by_tracking_number(self):
        """Test tracking number lookup ignores case and adds a status label"""
        response = self.client.get(f'/api/v1/orders/search/?tracking={self.order.order_number.lower()}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['data'][0]['status_label'], 'En attente')

    def test_search_by_email_in_english(self):
        """Test email lookup with English labels"""
        TestDataFactory.create_order(client_email='other@example.be', recipient_email='JEAN@example.be')
        response = self.client.get('/api/v1/orders/search/?email=jean@example.be&lang=en')
        self.assertEqual(len(response.data['data']), 2)
        self.assertEqual(response.data['data'][-1]['status_label'], 'Pending')


class PackageLookupTests(TestCase):
    """Test package lookup by QR code"""

    def setUp(self):
        self.client = APIClient()
        self.container = TestDataFactory.create_container(status='in_transit')
        self.owner = TestDataFactory.create_client(name='Marie Ilunga')
        self.order = TestDataFactory.create_order(container=self.container)
        self.package = TestDataFactory.create_package(
            qr_code='PKG-LOOKUP1', client=self.owner, container=self.container, order=self.order,
        )

    def test_lookup_package(self):
        """Test the package comes with its order, client and container"""
        response = self.client.get('/api/v1/packages/PKG-LOOKUP1/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['package']['qr_code'], 'PKG-LOOKUP1')
        self.assertEqual(data['order']['order_number'], self.order.order_number)
        self.assertEqual(data['client']['name'], 'Marie Ilunga')
        self.assertEqual(data['container']['status_label'], 'En transit')

    def test_lookup_falls_back_to_order(self):
        """Test an order QR code resolves when no package matches"""
        response = self.client.get(f'/api/v1/packages/{self.order.qr_code}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['data']['package'])
        self.assertEqual(response.data['data']['order']['id'], self.order.id)

    def test_lookup_unknown_code(self):
        """Test an unknown code returns 404"""
        response = self.client.get('/api/v1/packages/NOPE-0000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Package not found')


class QrScanTests(TestCase):
    """Test QR scans"""

    def setUp(self):
        self.client = APIClient()
        self.container = TestDataFactory.create_container()
        self.order = TestDataFactory.create_order(container=self.container)

    def test_scan_updates_package_and_mirrors_event(self):
        """Test a scan updates the package and adds a tracking event"""
        package = TestDataFactory.create_package(qr_code='PKG-SCAN1', order=self.order)
        data = {'qr': 'PKG-SCAN1', 'status': 'en_transit', 'location': 'Anvers'}
        response = self.client.post('/api/v1/qr/scan/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        package.refresh_from_db()
        self.assertEqual(package.status, 'en_transit')
        self.assertIsNotNone(package.last_scan_at)
        event = TrackingEvent.objects.get(package=package)
        self.assertEqual(event.order, self.order)
        self.assertEqual(event.location, 'Anvers')
        self.assertTrue(AuditLog.objects.filter(action='qr_scan', object_reference='PKG-SCAN1').exists())

    def test_scan_uses_container_order(self):
        """Test a package without order borrows one from its container"""
        package = TestDataFactory.create_package(qr_code='PKG-SCAN2', container=self.container)
        self.client.post('/api/v1/qr/scan/', {'qr': 'PKG-SCAN2'}, format='json')
        event = TrackingEvent.objects.get(package=package)
        self.assertEqual(event.order, self.order)
        self.assertEqual(event.status, 'preparation')

    def test_scan_invalid_status(self):
        """Test unknown package statuses are rejected"""
        TestDataFactory.create_package(qr_code='PKG-SCAN3')
        response = self.client.post('/api/v1/qr/scan/', {'qr': 'PKG-SCAN3', 'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_scan_missing_or_unknown_qr(self):
        """Test missing and unknown QR codes"""
        response = self.client.post('/api/v1/qr/scan/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/qr/scan/', {'qr': 'PKG-NONE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class QrLabelTests(TestCase):
    """Test the printable QR label"""

    def test_order_qr_pdf(self):
        """Test the label is served inline as PDF"""
        order = TestDataFactory.create_order()
        response = APIClient().get(f'/api/v1/orders/{order.id}/qr-pdf/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn('inline;', response['Content-Disposition'])
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_order_qr_pdf_unknown_order(self):
        """Test an unknown order returns 404"""
        response = APIClient().get('/api/v1/orders/99999/qr-pdf/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
