import logging

from django.db.models import Q, Prefetch
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from logistics.billing.serializers import InvoiceSerializer
from logistics.core.responses import success_response, error_response, validation_error_response
from logistics.core.utils import create_audit_log
from logistics.core.validators import is_valid_email, is_valid_phone, sanitize_input
from logistics.shipping.models import Order
from logistics.shipping.serializers import OrderSerializer
from .models import Client, Customer
from .serializers import ClientSerializer, CustomerSerializer

logger = logging.getLogger(__name__)

CLIENT_FIELDS = ['name', 'email', 'phone', 'address', 'company']
CUSTOMER_OPTIONAL_FIELDS = ['phone', 'address', 'city', 'postal_code', 'country', 'company', 'tax_id', 'notes']
TEXT_FIELDS = ('address', 'notes')


def _clean(value, field=None):
    """Trimmed string, or None for missing/blank values. Only free-text fields may exceed 255 chars."""
    if value is None:
        return None
    return sanitize_input(str(value), max_length=None if field in TEXT_FIELDS else 255) or None


# Client views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def client_list_create(request):
    """List all clients or create a new client"""
    if request.method == 'GET':
        clients = Client.objects.all()
        return success_response(ClientSerializer(clients, many=True).data)

    name = _clean(request.data.get('name'))
    if not name:
        return error_response('Missing required field: name')
    payload = {'name': name}
    for field in CLIENT_FIELDS[1:]:
        payload[field] = _clean(request.data.get(field), field)
    if payload['email']:
        payload['email'] = payload['email'].lower()
    if payload['phone'] and not is_valid_phone(payload['phone']):
        return error_response('Invalid phone format')

    serializer = ClientSerializer(data=payload)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    client = serializer.save()
    create_audit_log(request=request, action='create', model_name='Client', object_id=client.id, object_name=client.name)
    return success_response(ClientSerializer(client).data, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def client_detail(request, pk):
    """Retrieve, update or delete a client"""
    client = Client.objects.filter(pk=pk).first()
    if client is None:
        return error_response('Client not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(ClientSerializer(client).data)

    if request.method == 'PUT':
        # Only string values that are present are applied
        updates = {}
        for field in CLIENT_FIELDS:
            value = request.data.get(field)
            if isinstance(value, str):
                updates[field] = value.strip().lower() if field == 'email' else value.strip()
        if 'name' in updates and not updates['name']:
            return error_response('Missing required field: name')

        serializer = ClientSerializer(client, data=updates, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        serializer.save()
        return success_response(serializer.data)

    client_id, client_name = client.id, client.name
    client.delete()
    create_audit_log(request=request, action='delete', model_name='Client', object_id=client_id, object_name=client_name)
    return success_response(message='Client deleted successfully')


# Customer views
def _customer_payload(data):
    payload = {
        'name': _clean(data.get('name')),
        'email': (_clean(data.get('email')) or '').lower() or None,
    }
    for field in CUSTOMER_OPTIONAL_FIELDS:
        payload[field] = _clean(data.get(field), field)
    return payload


def _customer_with_orders(customer, orders):
    data = CustomerSerializer(customer).data
    data['orders'] = OrderSerializer(orders, many=True).data
    return data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List customers with their orders, or create a new customer"""
    if request.method == 'GET':
        customers = Customer.objects.prefetch_related(
            Prefetch('orders', queryset=Order.objects.select_related('container').order_by('-created_at'))
        )

        status_filter = request.query_params.get('status')
        if status_filter and status_filter != 'all':
            customers = customers.filter(status=status_filter)

        search = request.query_params.get('search')
        if search:
            customers = customers.filter(
                Q(name__icontains=search) |
                Q(email__icontains=search) |
                Q(company__icontains=search) |
                Q(phone__icontains=search)
            )

        data = [_customer_with_orders(c, c.orders.all()) for c in customers]
        return success_response(data)

    payload = _customer_payload(request.data)
    if not payload['name'] or not payload['email']:
        return error_response('Name and email are required')
    if not is_valid_email(payload['email']):
        return error_response('Invalid email format')
    if payload['phone'] and not is_valid_phone(payload['phone']):
        return error_response('Invalid phone format')
    payload['status'] = request.data.get('status') or 'active'

    if Customer.objects.filter(email=payload['email']).exists():
        return error_response('A customer with this email already exists', status.HTTP_409_CONFLICT)

    serializer = CustomerSerializer(data=payload)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    customer = serializer.save()
    logger.info(f"Customer created: {customer.email}")
    create_audit_log(request=request, action='create', model_name='Customer', object_id=customer.id, object_name=customer.name)
    return success_response(CustomerSerializer(customer).data, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve a customer with orders and invoices, update or delete it"""
    customer = Customer.objects.filter(pk=pk).first()
    if customer is None:
        return error_response('Customer not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        data = _customer_with_orders(customer, customer.orders.select_related('container').order_by('-created_at'))
        data['invoices'] = InvoiceSerializer(customer.invoices.order_by('-issue_date'), many=True).data
        return success_response(data)

    if request.method == 'PUT':
        updates = {}
        for field in ['name', 'email'] + CUSTOMER_OPTIONAL_FIELDS + ['status']:
            if field not in request.data:
                continue
            if field == 'email':
                updates[field] = (_clean(request.data.get(field)) or '').lower()
            elif field == 'status':
                updates[field] = request.data.get(field)
            else:
                updates[field] = _clean(request.data.get(field), field)

        if 'name' in updates and not updates['name']:
            return error_response('Name and email are required')
        if 'email' in updates and not is_valid_email(updates['email']):
            return error_response('Invalid email format')
        if updates.get('phone') and not is_valid_phone(updates['phone']):
            return error_response('Invalid phone format')

        serializer = CustomerSerializer(customer, data=updates, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        serializer.save()
        return success_response(serializer.data)

    customer_id, customer_name = customer.id, customer.name
    customer.delete()
    create_audit_log(request=request, action='delete', model_name='Customer', object_id=customer_id, object_name=customer_name)
    return success_response(message='Customer deleted successfully')
