"""
Test suite for Billing module
Tests: Invoices CRUD and totals, overdue marking, invoice/proforma documents,
client exports per container
"""
import io
from datetime import timedelta
from decimal import Decimal

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from docx import Document
from openpyxl import load_workbook
from rest_framework import status

from logistics.core.models import AuditLog
from logistics.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from logistics.billing.documents import (
    DOCX_CONTENT_TYPE, XLSX_CONTENT_TYPE, CLIENT_COLUMNS,
    compute_invoice_amounts, format_eur, build_clients_xlsx,
)
from logistics.billing.models import Invoice
from logistics.billing.services import mark_overdue_invoices


class InvoiceModelTests(TestCase):
    """Test invoice numbering and totals"""

    def test_totals_computed_on_save(self):
        """Test tax and total follow subtotal and the default rate"""
        invoice = TestDataFactory.create_invoice(subtotal=Decimal('100.00'))
        self.assertEqual(invoice.tax_amount, Decimal('21.00'))
        self.assertEqual(invoice.total_amount, Decimal('121.00'))

    def test_invoice_number_format(self):
        """Test invoice numbers are FAC-<year>-<sequence>"""
        first = TestDataFactory.create_invoice()
        second = TestDataFactory.create_invoice()
        year = timezone.localdate().year
        self.assertEqual(first.invoice_number, f'FAC-{year}-000001')
        self.assertEqual(second.invoice_number, f'FAC-{year}-000002')

    def test_totals_recomputed_on_update(self):
        """Test changing the subtotal updates the total"""
        invoice = TestDataFactory.create_invoice(subtotal=Decimal('100.00'))
        invoice.subtotal = Decimal('200.00')
        invoice.save()
        self.assertEqual(invoice.total_amount, Decimal('242.00'))


class InvoiceApiTests(TestCase):
    """Test invoice endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()

    def test_create_invoice(self):
        """Test creating an invoice computes its totals"""
        data = {
            'customer_id': self.customer.id,
            'issue_date': '2026-03-01',
            'due_date': '2026-03-31',
            'subtotal': '250.00',
        }
        response = self.client.post('/api/v1/invoices/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        invoice = response.data['data']
        self.assertEqual(invoice['invoice_number'], 'FAC-2026-000001')
        self.assertEqual(Decimal(invoice['total_amount']), Decimal('302.50'))
        self.assertEqual(invoice['customer_name'], self.customer.name)
        self.assertTrue(AuditLog.objects.filter(model_name='Invoice', action='create').exists())

    def test_due_date_before_issue_date(self):
        """Test the due date cannot precede the issue date"""
        data = {'issue_date': '2026-03-10', 'due_date': '2026-03-01', 'subtotal': '10.00'}
        response = self.client.post('/api/v1/invoices/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_filter_invoices(self):
        """Test status and customer filters"""
        TestDataFactory.create_invoice(customer=self.customer, status='sent')
        TestDataFactory.create_invoice(status='draft')
        response = self.client.get('/api/v1/invoices/?status=sent')
        self.assertEqual(len(response.data['data']), 1)
        response = self.client.get(f'/api/v1/invoices/?customer_id={self.customer.id}')
        self.assertEqual(len(response.data['data']), 1)
        response = self.client.get('/api/v1/invoices/?status=all')
        self.assertEqual(len(response.data['data']), 2)

    def test_filter_rejects_non_numeric_customer(self):
        """Test a malformed customer_id is a 400"""
        response = self.client.get('/api/v1/invoices/?customer_id=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'customer_id invalide')

    def test_update_invoice_status(self):
        """Test a status change is audited"""
        invoice = TestDataFactory.create_invoice(status='draft')
        response = self.client.put(f'/api/v1/invoices/{invoice.id}/', {'status': 'sent'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'sent')
        self.assertTrue(AuditLog.objects.filter(model_name='Invoice', action='status_change').exists())

    def test_invoice_not_found(self):
        """Test an unknown invoice returns 404"""
        response = self.client.get('/api/v1/invoices/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Invoice not found')

    def test_delete_invoice(self):
        """Test deleting an invoice"""
        invoice = TestDataFactory.create_invoice()
        response = self.client.delete(f'/api/v1/invoices/{invoice.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Invoice.objects.filter(id=invoice.id).exists())


class OverdueTests(TestCase):
    """Test overdue marking"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        past = timezone.localdate() - timedelta(days=60)
        self.late = TestDataFactory.create_invoice(status='sent', issue_date=past, due_in_days=30)
        self.draft = TestDataFactory.create_invoice(status='draft', issue_date=past, due_in_days=30)
        self.current = TestDataFactory.create_invoice(status='sent')

    def test_only_sent_past_due_invoices(self):
        """Test only sent invoices past their due date are flagged"""
        self.assertEqual(mark_overdue_invoices(), 1)
        self.late.refresh_from_db()
        self.draft.refresh_from_db()
        self.current.refresh_from_db()
        self.assertEqual(self.late.status, 'overdue')
        self.assertEqual(self.draft.status, 'draft')
        self.assertEqual(self.current.status, 'sent')

    def test_paid_invoices_are_skipped(self):
        """Test invoices with a payment date stay sent"""
        Invoice.objects.filter(id=self.late.id).update(payment_date=timezone.localdate())
        self.assertEqual(mark_overdue_invoices(), 0)

    def test_mark_overdue_endpoint(self):
        """Test the endpoint returns the number of flagged invoices"""
        response = self.client.post('/api/v1/invoices/mark-overdue/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['updated'], 1)

    def test_mark_overdue_command(self):
        """Test the management command flags overdue invoices"""
        out = io.StringIO()
        call_command('mark_overdue_invoices', stdout=out)
        self.assertIn('1 invoice(s) marked overdue', out.getvalue())
        self.late.refresh_from_db()
        self.assertEqual(self.late.status, 'overdue')


class InvoiceAmountTests(TestCase):
    """Test document amount helpers"""

    def test_compute_invoice_amounts(self):
        """Test commission and VAT are both taken on the base amount"""
        amounts = compute_invoice_amounts(Decimal('100'))
        self.assertEqual(amounts.commission, Decimal('10.00'))
        self.assertEqual(amounts.subtotal, Decimal('90.00'))
        self.assertEqual(amounts.vat, Decimal('20.00'))
        self.assertEqual(amounts.total, Decimal('110.00'))

    def test_compute_invoice_amounts_without_value(self):
        """Test a missing value yields zero amounts"""
        self.assertEqual(compute_invoice_amounts(None).total, Decimal('0.00'))

    def test_format_eur(self):
        """Test French euro formatting"""
        self.assertEqual(format_eur(Decimal('1234.5')), '1 234,50 €')
        self.assertEqual(format_eur(0), '0,00 €')
        self.assertEqual(format_eur(Decimal('12'), 'USD'), '12,00 USD')


class DocumentTests(TestCase):
    """Test generated documents"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.order = TestDataFactory.create_order(client_name='Jean Dupont', value=Decimal('500.00'))

    def test_invoice_pdf(self):
        """Test the invoice PDF is attached"""
        response = self.client.get(f'/api/v1/orders/{self.order.id}/invoice-pdf/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn(f'facture-{self.order.order_number}.pdf', response['Content-Disposition'])
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_invoice_pdf_unknown_order(self):
        """Test an unknown order returns 404"""
        response = self.client.get('/api/v1/orders/99999/invoice-pdf/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_proforma_docx(self):
        """Test the proforma document carries the order reference"""
        response = self.client.get(f'/api/v1/orders/{self.order.id}/proforma/?notes=Fragile')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], DOCX_CONTENT_TYPE)
        document = Document(io.BytesIO(response.content))
        text = '\n'.join(p.text for p in document.paragraphs)
        self.assertIn('PROFORMA', text)
        self.assertIn(self.order.order_number, text)
        self.assertIn('Fragile', text)


class ClientsByContainerTests(TestCase):
    """Test client exports per container"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.container = TestDataFactory.create_container(code='MSKU2468135')
        zoe = TestDataFactory.create_client(name='Zoé Mbala')
        alain = TestDataFactory.create_client(name='Alain Kabongo')
        TestDataFactory.create_package(client=zoe, container=self.container)
        TestDataFactory.create_package(client=zoe, container=self.container)
        TestDataFactory.create_package(client=alain, container=self.container)

    def test_requires_container_id(self):
        """Test container_id is mandatory"""
        response = self.client.get('/api/v1/documents/clients-by-container/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'container_id is required')

    def test_unsupported_format(self):
        """Test only docx and xlsx are produced"""
        response = self.client.get(f'/api/v1/documents/clients-by-container/?container_id={self.container.id}&format=pdf')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_container(self):
        """Test an unknown container returns 404"""
        response = self.client.get('/api/v1/documents/clients-by-container/?container_id=99999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_non_numeric_container(self):
        """Test a malformed container_id is a 400"""
        response = self.client.get('/api/v1/documents/clients-by-container/?container_id=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_xlsx_lists_distinct_clients(self):
        """Test each client appears once, sorted by name"""
        response = self.client.get(f'/api/v1/documents/clients-by-container/?container_id={self.container.id}&format=xlsx')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], XLSX_CONTENT_TYPE)
        self.assertIn('clients-MSKU2468135.xlsx', response['Content-Disposition'])
        sheet = load_workbook(io.BytesIO(response.content)).active
        rows = list(sheet.iter_rows(values_only=True))
        self.assertEqual(list(rows[0]), CLIENT_COLUMNS)
        self.assertEqual([row[0] for row in rows[1:]], ['Alain Kabongo', 'Zoé Mbala'])
        self.assertEqual(rows[1][4], 'MSKU2468135')

    def test_docx_default_format(self):
        """Test the default export is a Word table"""
        response = self.client.get(f'/api/v1/documents/clients-by-container/?container_id={self.container.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], DOCX_CONTENT_TYPE)
        table = Document(io.BytesIO(response.content)).tables[0]
        self.assertEqual(len(table.rows), 3)

    def test_sheet_title_is_sanitized(self):
        """Test forbidden characters and long names are cut from the sheet title"""
        content = build_clients_xlsx('A/B:C' + 'x' * 40, [])
        title = load_workbook(io.BytesIO(content)).active.title
        self.assertEqual(len(title), 31)
        self.assertTrue(title.startswith('ABC'))
