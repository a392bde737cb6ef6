import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from logistics.core.models import AuditLog
from logistics.core.permissions import HasAdminSeedKey
from logistics.core.responses import success_response, error_response, validation_error_response
from logistics.core.serializers import AuditLogSerializer
from logistics.core.utils import create_audit_log, diff_fields
from logistics.core.validators import is_valid_id
from logistics.notifications.dispatch import schedule_container_notification, schedule_order_notification
from .models import Container, Order, Package, TrackingEvent
from .serializers import (
    ContainerSerializer, OrderSerializer, ContainerInventoryOrderSerializer,
    PackageSerializer, TrackingEventSerializer,
)
from .seed_data import reseed_data, seed_containers, seed_customers_and_invoices, seed_orders, seed_users
from .utils import generate_qr_code, save_new_order

logger = logging.getLogger(__name__)

CONTAINER_FIELDS = ['code', 'vessel', 'departure_port', 'arrival_port', 'etd', 'eta', 'status', 'client_id']
ORDER_STATUSES = {choice for choice, _ in Order.STATUS_CHOICES}


def _is_true(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def _blank_to_none(data, fields):
    """Empty strings become None so nullable dates/FKs validate"""
    for field in fields:
        if field in data and data[field] == '':
            data[field] = None
    return data


# Container views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def container_list_create(request):
    """List all containers or create a new container"""
    if request.method == 'GET':
        containers = Container.objects.select_related('client').all()
        logger.debug(f"Returning {containers.count()} containers")
        return success_response(ContainerSerializer(containers, many=True).data)

    code = str(request.data.get('code') or '').strip()
    if not code:
        return error_response('Missing required field: code')

    payload = {field: request.data.get(field) for field in CONTAINER_FIELDS if field in request.data}
    payload['code'] = code
    payload.setdefault('status', 'planned')
    for field in ('vessel', 'departure_port', 'arrival_port'):
        if isinstance(payload.get(field), str):
            payload[field] = payload[field].strip() or None
    _blank_to_none(payload, ['etd', 'eta', 'client_id'])

    serializer = ContainerSerializer(data=payload)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    container = serializer.save()
    create_audit_log(request=request, action='create', model_name='Container', object_id=container.id, object_name=container.code)
    return success_response(ContainerSerializer(container).data, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def container_detail(request, pk):
    """Retrieve, update or delete a container. A status change notifies the clients."""
    container = Container.objects.select_related('client').filter(pk=pk).first()
    if container is None:
        return error_response('Container not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(ContainerSerializer(container).data)

    if request.method == 'PUT':
        previous_status = container.status
        updates = {field: request.data.get(field) for field in CONTAINER_FIELDS if field in request.data}
        _blank_to_none(updates, ['etd', 'eta', 'client_id'])

        serializer = ContainerSerializer(container, data=updates, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        container = serializer.save()

        if container.status != previous_status:
            create_audit_log(
                request=request, action='status_change', model_name='Container',
                object_id=container.id, object_name=container.code,
                changes={'status': {'old': previous_status, 'new': container.status}},
            )
            schedule_container_notification(
                container.id,
                container.status,
                custom_message=request.data.get('notificationMessage') or None,
                previous_status=previous_status,
            )
        return success_response(ContainerSerializer(container).data)

    container_id, container_code = container.id, container.code
    container.delete()
    create_audit_log(request=request, action='delete', model_name='Container', object_id=container_id, object_name=container_code)
    return success_response(message='Container deleted successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def container_inventory(request, pk):
    """Orders loaded in a container, sorted by client name"""
    if not Container.objects.filter(pk=pk).exists():
        return error_response('Container not found', status.HTTP_404_NOT_FOUND)
    orders = Order.objects.filter(container_id=pk).order_by('client_name')
    return success_response(ContainerInventoryOrderSerializer(orders, many=True).data)


# Order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List orders (search, then status filter) or create a pending order"""
    if request.method == 'GET':
        orders = Order.objects.select_related('container').order_by('-created_at')
        search = request.query_params.get('search')
        status_filter = request.query_params.get('status')
        if search:
            orders = orders.filter(
                Q(order_number__icontains=search) |
                Q(client_name__icontains=search) |
                Q(client_email__icontains=search)
            )
        elif status_filter and status_filter != 'all':
            orders = orders.filter(status=status_filter)
        return success_response(OrderSerializer(orders, many=True).data)

    if not str(request.data.get('client_name') or '').strip():
        return error_response('Missing required field: client_name')

    payload = request.data.copy() if hasattr(request.data, 'copy') else dict(request.data)
    payload['status'] = 'pending'
    _blank_to_none(payload, ['estimated_delivery', 'customer_id', 'container_id', 'weight', 'value'])

    serializer = OrderSerializer(data=payload)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    order = save_new_order(serializer, qr_code=generate_qr_code())
    logger.info(f"Order created: {order.order_number}")
    create_audit_log(
        request=request, action='create', model_name='Order', object_id=order.id,
        object_name=order.client_name, object_reference=order.order_number,
        description=f"Commande {order.order_number} créée",
    )
    return success_response(OrderSerializer(order).data, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve, update or delete an order"""
    order = Order.objects.select_related('container').filter(pk=pk).first()
    if order is None:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(OrderSerializer(order).data)

    if request.method == 'PUT':
        previous_status = order.status
        payload = {k: v for k, v in request.data.items() if k != 'notify'}
        _blank_to_none(payload, ['estimated_delivery', 'customer_id', 'container_id', 'weight', 'value'])

        serializer = OrderSerializer(order, data=payload, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        changes = diff_fields(order, serializer.validated_data)
        order = serializer.save()

        status_changed = order.status != previous_status
        create_audit_log(
            request=request,
            action='status_change' if status_changed else 'update',
            model_name='Order', object_id=order.id,
            object_name=order.client_name, object_reference=order.order_number,
            changes=changes,
            description=(
                f"Statut modifié de {previous_status} à {order.status}" if status_changed
                else f"Commande {order.order_number} mise à jour"
            ),
        )
        if status_changed and _is_true(request.data.get('notify', False)):
            schedule_order_notification(order.id, order.status)
        return success_response(OrderSerializer(order).data)

    order_id, order_number = order.id, order.order_number
    order.delete()
    create_audit_log(request=request, action='delete', model_name='Order', object_id=order_id, object_reference=order_number)
    return success_response(message='Order deleted successfully')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_tracking(request, pk):
    """Tracking events of an order, or add one (syncing the order status)"""
    order = Order.objects.filter(pk=pk).first()
    if order is None:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        events = order.tracking_events.order_by('event_date')
        return success_response(TrackingEventSerializer(events, many=True).data)

    event_status = str(request.data.get('status') or '').strip()
    if not event_status:
        return error_response('Missing required field: status')

    serializer = TrackingEventSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    with transaction.atomic():
        event = serializer.save(
            order=order,
            status=event_status,
            event_date=serializer.validated_data.get('event_date') or timezone.now(),
            created_by=request.user,
        )
        if event_status != order.status and event_status in ORDER_STATUSES:
            previous_status = order.status
            order.status = event_status
            order.save(update_fields=['status', 'updated_at'])
            create_audit_log(
                request=request, action='status_change', model_name='Order', object_id=order.id,
                object_reference=order.order_number,
                changes={'status': {'old': previous_status, 'new': event_status}},
                description=f"Statut modifié de {previous_status} à {event_status} (suivi)",
            )

    create_audit_log(
        request=request, action='tracking_add', model_name='Order', object_id=order.id,
        object_reference=order.order_number,
        description=f"Événement de suivi ajouté: {event_status}",
    )
    return success_response(TrackingEventSerializer(event).data, status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_history(request, pk):
    """Change history of an order, newest first"""
    entries = AuditLog.objects.select_related('user').filter(
        model_name='Order', object_id=str(pk)
    ).order_by('-created_at', '-id')
    return success_response(AuditLogSerializer(entries, many=True).data)


# Package views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def package_list_create(request):
    """List packages or register a new one (QR code generated when absent)"""
    if request.method == 'GET':
        packages = Package.objects.all()
        container_id = request.query_params.get('container_id')
        if container_id:
            if not is_valid_id(container_id):
                return error_response('container_id invalide')
            packages = packages.filter(container_id=container_id)
        return success_response(PackageSerializer(packages, many=True).data)

    payload = request.data.copy() if hasattr(request.data, 'copy') else dict(request.data)
    if not str(payload.get('qr_code') or '').strip():
        payload['qr_code'] = generate_qr_code(prefix='PKG')
    _blank_to_none(payload, ['client_id', 'container_id', 'order_id', 'weight', 'value'])

    serializer = PackageSerializer(data=payload)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    package = serializer.save()
    create_audit_log(request=request, action='create', model_name='Package', object_id=package.id, object_reference=package.qr_code)
    return success_response(PackageSerializer(package).data, status.HTTP_201_CREATED)


# Seeding
def _seed_response(ok, message, **extra):
    """200 when every item succeeded, 207 Multi-Status otherwise"""
    payload = {'success': ok, 'message': message}
    payload.update(extra)
    return Response(payload, status=status.HTTP_200_OK if ok else status.HTTP_207_MULTI_STATUS)


@api_view(['POST'])
@permission_classes([HasAdminSeedKey])
def seed_containers_view(request):
    """Insert the sample containers; existing codes count as success"""
    results = seed_containers()
    ok_count = sum(1 for r in results if r['ok'])
    all_ok = ok_count == len(results)
    return _seed_response(all_ok, f"Seeded {ok_count} out of {len(results)} containers", results=results)


@api_view(['POST'])
@permission_classes([HasAdminSeedKey])
def seed_customers_view(request):
    """Derive customers from orders, link them, and create their invoices"""
    results = seed_customers_and_invoices()
    message = (
        f"Seeded {results['customersCreated']} customers, linked {results['ordersLinked']} orders, "
        f"created {results['invoicesCreated']} invoices"
    )
    return _seed_response(not results['errors'], message, results=results)


@api_view(['POST'])
@permission_classes([HasAdminSeedKey])
def seed_orders_view(request):
    """Upsert sample customers, containers and orders"""
    results, summary = seed_orders()
    has_errors = any(section['errors'] for section in results.values())
    message = (
        'Some records could not be seeded' if has_errors
        else 'Orders, customers, and containers seeded successfully'
    )
    return _seed_response(not has_errors, message, results=results, summary=summary)


@api_view(['POST'])
@permission_classes([HasAdminSeedKey])
def seed_users_view(request):
    """Create the default admin and operator accounts"""
    results = seed_users()
    ok_count = sum(1 for r in results if r['ok'])
    return _seed_response(ok_count == len(results), f"Seeded {ok_count} out of {len(results)} users", results=results)


@api_view(['POST'])
@permission_classes([HasAdminSeedKey])
def reseed_data_view(request):
    """Wipe orders, customers and containers, then seed the sample set again"""
    results, summary, rolled_back = reseed_data()
    message = 'Reseed failed, previous data kept' if rolled_back else 'Data reseeded successfully'
    return _seed_response(not rolled_back, message, results=results, summary=summary)
