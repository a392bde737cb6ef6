import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from logistics.core.responses import success_response, error_response, validation_error_response
from logistics.core.utils import create_audit_log, diff_fields
from logistics.core.validators import is_valid_id
from logistics.shipping.models import Container, Order
from .documents import (
    DOCX_CONTENT_TYPE, XLSX_CONTENT_TYPE,
    build_invoice_pdf, build_proforma_docx, build_clients_docx, build_clients_xlsx,
    client_rows, company_info,
)
from .models import Invoice
from .serializers import InvoiceSerializer
from .services import mark_overdue_invoices

logger = logging.getLogger(__name__)


def _attachment(content, content_type, filename):
    response = HttpResponse(content, content_type=content_type)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def invoice_list_create(request):
    """List invoices (status / customer filters) or create one"""
    if request.method == 'GET':
        invoices = Invoice.objects.select_related('customer', 'order').all()
        status_filter = request.query_params.get('status')
        customer_id = request.query_params.get('customer_id')
        if status_filter and status_filter != 'all':
            invoices = invoices.filter(status=status_filter)
        if customer_id:
            if not is_valid_id(customer_id):
                return error_response('customer_id invalide')
            invoices = invoices.filter(customer_id=customer_id)
        return success_response(InvoiceSerializer(invoices, many=True).data)

    serializer = InvoiceSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    invoice = serializer.save()
    logger.info(f"Invoice created: {invoice.invoice_number}")
    create_audit_log(
        request=request, action='create', model_name='Invoice', object_id=invoice.id,
        object_reference=invoice.invoice_number,
        description=f"Facture {invoice.invoice_number} créée",
    )
    return success_response(InvoiceSerializer(invoice).data, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk):
    invoice = Invoice.objects.select_related('customer', 'order').filter(pk=pk).first()
    if invoice is None:
        return error_response('Invoice not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(InvoiceSerializer(invoice).data)

    if request.method == 'PUT':
        previous_status = invoice.status
        serializer = InvoiceSerializer(invoice, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        changes = diff_fields(invoice, serializer.validated_data)
        invoice = serializer.save()
        create_audit_log(
            request=request,
            action='status_change' if invoice.status != previous_status else 'update',
            model_name='Invoice', object_id=invoice.id,
            object_reference=invoice.invoice_number, changes=changes,
        )
        return success_response(InvoiceSerializer(invoice).data)

    invoice_id, invoice_number = invoice.id, invoice.invoice_number
    invoice.delete()
    create_audit_log(request=request, action='delete', model_name='Invoice', object_id=invoice_id, object_reference=invoice_number)
    return success_response(message='Invoice deleted successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invoice_mark_overdue(request):
    """Flag sent invoices whose due date has passed"""
    updated = mark_overdue_invoices()
    return success_response({'updated': updated})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_invoice_pdf(request, pk):
    order = Order.objects.filter(pk=pk).first()
    if order is None:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)
    content = build_invoice_pdf(order, company_info())
    logger.info(f"Invoice PDF generated for order {order.order_number}")
    return _attachment(content, 'application/pdf', f"facture-{order.order_number}.pdf")


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_proforma(request, pk):
    order = Order.objects.filter(pk=pk).first()
    if order is None:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)
    content = build_proforma_docx(order, company_info(), notes=request.query_params.get('notes') or None)
    return _attachment(content, DOCX_CONTENT_TYPE, f"proforma-{order.order_number}.docx")


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def clients_by_container(request):
    """Distinct clients having packages in a container, as DOCX or XLSX"""
    container_id = request.query_params.get('container_id')
    export_format = (request.query_params.get('format') or 'docx').lower()
    if not container_id:
        return error_response('container_id is required')
    if not is_valid_id(container_id):
        return error_response('container_id invalide')
    if export_format not in ('docx', 'xlsx'):
        return error_response('Unsupported format')

    container = Container.objects.filter(pk=container_id).first()
    if container is None:
        return error_response('Container not found', status.HTTP_404_NOT_FOUND)

    clients = []
    seen = set()
    for package in container.packages.select_related('client').order_by('client__name'):
        if package.client_id and package.client_id not in seen:
            seen.add(package.client_id)
            clients.append(package.client)
    rows = client_rows(clients, container.code)
    logger.debug(f"{len(rows)} clients in container {container.code}")

    title = f"Clients - Conteneur {container.code}"
    if export_format == 'xlsx':
        return _attachment(build_clients_xlsx(container.code, rows), XLSX_CONTENT_TYPE, f"clients-{container.code}.xlsx")
    return _attachment(build_clients_docx(title, rows), DOCX_CONTENT_TYPE, f"clients-{container.code}.docx")
