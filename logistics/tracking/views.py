"""
Public tracking endpoints: order search, package lookup by QR, QR scans,
payload decoding and the printable QR label. No authentication required.
"""
import logging

from django.db import DatabaseError, transaction
from django.db.models import Q
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny

from logistics.core.i18n import resolve_language, translate
from logistics.core.responses import success_response, error_response
from logistics.core.utils import create_audit_log
from logistics.shipping.models import Order, Package, TrackingEvent
from .decoder import decode_payload
from .documents import build_order_qr_pdf
from .serializers import (
    PublicOrderSerializer, PublicPackageSerializer, PublicClientSerializer,
    PublicContainerSerializer, PublicTrackingEventSerializer,
)

logger = logging.getLogger(__name__)

PACKAGE_STATUSES = {choice for choice, _ in Package.STATUS_CHOICES}


def _with_status_label(data, lang, group):
    data['status_label'] = translate(lang, f"tracking.{group}.{data['status']}")
    return data


@api_view(['GET'])
@permission_classes([AllowAny])
def order_search(request):
    """Find orders by tracking number, or by client/recipient email"""
    lang = resolve_language(request)
    tracking = (request.query_params.get('tracking') or '').strip()
    email = (request.query_params.get('email') or '').strip()
    if not tracking and not email:
        return error_response(translate(lang, 'tracking.errors.missingQuery'))

    orders = Order.objects.select_related('container')
    if tracking:
        orders = orders.filter(order_number__iexact=tracking)
    else:
        orders = orders.filter(Q(client_email__iexact=email) | Q(recipient_email__iexact=email)).order_by('-created_at')

    data = [_with_status_label(item, lang, 'status') for item in PublicOrderSerializer(orders, many=True).data]
    logger.debug(f"Public search returned {len(data)} orders")
    return success_response(data)


def _lookup_payload(package=None, order=None, lang='fr'):
    client = package.client if package else None
    container = (package.container if package else None) or (order.container if order else None)

    if package is not None:
        event_filter = Q(package=package)
        if package.order_id:
            event_filter |= Q(order_id=package.order_id)
        events = TrackingEvent.objects.filter(event_filter)
    else:
        events = order.tracking_events.all()

    container_data = PublicContainerSerializer(container).data if container else None
    if container_data:
        _with_status_label(container_data, lang, 'containerStatus')
    return {
        'package': _with_status_label(PublicPackageSerializer(package).data, lang, 'packageStatus') if package else None,
        'order': _with_status_label(PublicOrderSerializer(order).data, lang, 'status') if order else None,
        'client': PublicClientSerializer(client).data if client else None,
        'container': container_data,
        'events': PublicTrackingEventSerializer(events.order_by('event_date'), many=True).data,
    }


@api_view(['GET'])
@permission_classes([AllowAny])
def package_by_qr(request, qr):
    """Package (or, failing that, order) behind a QR code with its tracking history"""
    lang = resolve_language(request)
    code = qr.strip()
    package = Package.objects.select_related('client', 'container', 'order__container').filter(qr_code=code).first()
    if package is not None:
        return success_response(_lookup_payload(package=package, order=package.order, lang=lang))

    order = Order.objects.select_related('container').filter(Q(qr_code=code) | Q(order_number__iexact=code)).first()
    if order is None:
        return error_response('Package not found', status.HTTP_404_NOT_FOUND)
    return success_response(_lookup_payload(order=order, lang=lang))


def _mirror_scan_event(package, event_status, request):
    """Record the scan in the tracking history of the package's order"""
    order = package.order
    if order is None and package.container_id:
        order = Order.objects.filter(container_id=package.container_id).order_by('created_at').first()
    try:
        with transaction.atomic():
            return TrackingEvent.objects.create(
                order=order,
                package=package,
                status=event_status,
                location=request.data.get('location') or None,
                description=request.data.get('description') or f"Scan QR: {package.qr_code}",
                operator=request.data.get('operator') or None,
                event_date=package.last_scan_at,
            )
    except DatabaseError as e:
        logger.warning(f"Could not add tracking event for QR scan {package.qr_code}: {str(e)}")
        return None


@api_view(['POST'])
@permission_classes([AllowAny])
def qr_scan(request):
    """Register a scan: update the package status and mirror a tracking event"""
    qr = str(request.data.get('qr') or '').strip()
    if not qr:
        return error_response('Missing qr')

    package = Package.objects.select_related('order').filter(qr_code=qr).first()
    if package is None:
        return error_response('Package not found', status.HTTP_404_NOT_FOUND)

    next_status = str(request.data.get('status') or '').strip() or package.status
    if next_status not in PACKAGE_STATUSES:
        return error_response(f"Invalid package status: {next_status}")

    previous_status = package.status
    package.status = next_status
    package.last_scan_at = timezone.now()
    package.save(update_fields=['status', 'last_scan_at', 'updated_at'])

    _mirror_scan_event(package, next_status, request)
    create_audit_log(
        request=request, action='qr_scan', model_name='Package', object_id=package.id,
        object_reference=package.qr_code,
        changes={'status': {'old': previous_status, 'new': next_status}},
        description=f"Scan QR {package.qr_code}",
    )
    return success_response(PublicPackageSerializer(package).data)


@api_view(['POST'])
@permission_classes([AllowAny])
def qr_decode(request):
    """Extract the lookup code from a raw scanned payload"""
    raw = request.data.get('raw')
    if raw is None:
        return error_response('Missing raw')
    return success_response(decode_payload(str(raw)).as_dict())


@api_view(['GET'])
@permission_classes([AllowAny])
def order_qr_pdf(request, pk):
    order = Order.objects.filter(pk=pk).first()
    if order is None:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)
    content = build_order_qr_pdf(order)
    response = HttpResponse(content, content_type='application/pdf')
    filename = f"qr-code-{order.order_number}-{timezone.localdate():%Y-%m-%d}.pdf"
    response['Content-Disposition'] = f'inline; filename="{filename}"'
    return response
