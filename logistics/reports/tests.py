"""
Test suite for Reports module
Tests: Order statistics (cached), analytics export as CSV and PDF
"""
import csv
import io
from datetime import timedelta

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from logistics.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logistics.reports.services import ORDER_HEADERS, get_order_stats, resolve_range
from logistics.shipping.models import Order


class OrderStatsTests(TestCase):
    """Test order statistics"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_stats_counts(self):
        """Test counts per status and total"""
        TestDataFactory.create_order(status='pending')
        TestDataFactory.create_order(status='pending')
        TestDataFactory.create_order(status='completed')
        response = self.client.get('/api/v1/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stats = response.data['data']
        self.assertEqual(stats['total'], 3)
        self.assertEqual(stats['pending'], 2)
        self.assertEqual(stats['completed'], 1)
        self.assertEqual(stats['cancelled'], 0)

    def test_stats_are_cached(self):
        """Test bulk updates do not show until the cache is invalidated"""
        order = TestDataFactory.create_order(status='pending')
        self.assertEqual(get_order_stats()['pending'], 1)
        Order.objects.filter(id=order.id).update(status='completed')
        self.assertEqual(get_order_stats()['pending'], 1)

    def test_order_save_invalidates_stats(self):
        """Test saving an order refreshes the statistics"""
        order = TestDataFactory.create_order(status='pending')
        self.assertEqual(get_order_stats()['pending'], 1)
        order.status = 'completed'
        order.save()
        stats = get_order_stats()
        self.assertEqual(stats['pending'], 0)
        self.assertEqual(stats['completed'], 1)


class AnalyticsExportTests(TestCase):
    """Test analytics exports"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.recent = TestDataFactory.create_order(client_name='Récent', status='completed')
        self.old = TestDataFactory.create_order(client_name='Ancien', status='pending')
        Order.objects.filter(id=self.old.id).update(created_at=timezone.now() - timedelta(days=60))

    def _csv_rows(self, response):
        return list(csv.reader(io.StringIO(response.content.decode('utf-8-sig'))))

    def test_csv_export(self):
        """Test the CSV carries the period, statistics and order rows"""
        response = self.client.get('/api/v1/reports/analytics/export/?format=csv&range=30d')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.content.startswith('\ufeff'.encode('utf-8')))
        self.assertIn('analytics-danemo-', response['Content-Disposition'])
        rows = self._csv_rows(response)
        self.assertEqual(rows[0], ['Rapport Analytics', 'Danemo'])
        self.assertEqual(rows[1], ['Période', '30 derniers jours'])
        self.assertIn(['Total commandes', '1'], rows)
        self.assertIn(ORDER_HEADERS, rows)
        numbers = [row[0] for row in rows[rows.index(ORDER_HEADERS) + 1:]]
        self.assertEqual(numbers, [self.recent.order_number])

    def test_csv_export_all_periods(self):
        """Test the 'all' range includes older orders"""
        response = self.client.get('/api/v1/reports/analytics/export/?range=all')
        rows = self._csv_rows(response)
        self.assertIn(['Total commandes', '2'], rows)

    def test_pdf_export(self):
        """Test the PDF export"""
        response = self.client.get('/api/v1/reports/analytics/export/?format=pdf&range=1y')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_pdf_export_spans_pages(self):
        """Test long order lists still render"""
        for _ in range(45):
            TestDataFactory.create_order()
        response = self.client.get('/api/v1/reports/analytics/export/?format=pdf&range=all')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_unsupported_format(self):
        """Test only csv and pdf are produced"""
        response = self.client.get('/api/v1/reports/analytics/export/?format=xml')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Unsupported format')

    def test_unknown_range_defaults_to_30_days(self):
        """Test unknown range keys fall back to 30 days"""
        key, since, label = resolve_range('5y')
        self.assertEqual(key, '30d')
        self.assertEqual(label, '30 derniers jours')
        self.assertIsNotNone(since)
