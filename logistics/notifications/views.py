import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from logistics.core.responses import success_response, error_response
from logistics.core.validators import is_valid_email, is_valid_id
from logistics.shipping.models import Container, Order
from .dispatch import notify_container_status_change, notify_order_status_change
from .email import NotificationConfigError, send_email
from .content import build_client_status_email

logger = logging.getLogger(__name__)

EVENT_TO_STATUS = {
    'depart': 'departed',
    'arrive': 'arrived',
    'deliver': 'delivered',
    'delay': 'delayed',
}


def _clean(value):
    return str(value or '').strip()


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def container_event(request):
    """Notify clients of a container event (depart, arrive, deliver, delay)"""
    container_id = _clean(request.data.get('container_id'))
    event = _clean(request.data.get('event'))
    if not container_id or not event:
        return error_response('Missing container_id or event')
    if not is_valid_id(container_id):
        return error_response('container_id invalide')

    next_status = EVENT_TO_STATUS.get(event, 'in_transit')
    result = notify_container_status_change(
        container_id, next_status, custom_message=_clean(request.data.get('message')) or None,
    )
    if result is None:
        return Response({'success': True, 'data': None})
    return success_response(result.as_dict())


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def container_status(request):
    """Resend the status notification of a container, optionally overriding status/message"""
    container_id = _clean(request.data.get('container_id'))
    if not container_id:
        return error_response('container_id requis')
    if not is_valid_id(container_id):
        return error_response('container_id invalide')

    container = Container.objects.filter(pk=container_id).first()
    if container is None:
        return error_response('Conteneur introuvable', status.HTTP_404_NOT_FOUND)

    result = notify_container_status_change(
        container.id,
        _clean(request.data.get('status')) or container.status,
        custom_message=_clean(request.data.get('message')) or None,
        previous_status=container.status,
    )
    if result is None:
        return error_response("Échec de l'envoi des notifications conteneur", status.HTTP_502_BAD_GATEWAY)
    return success_response(result.as_dict())


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_status(request):
    """Notify the recipient of an order of its (current or given) status"""
    order_id = _clean(request.data.get('order_id'))
    if not order_id:
        return error_response('order_id requis')
    if not is_valid_id(order_id):
        return error_response('order_id invalide')

    order = Order.objects.filter(pk=order_id).first()
    if order is None:
        return error_response('Commande introuvable', status.HTTP_404_NOT_FOUND)

    result = notify_order_status_change(order.id, _clean(request.data.get('status')) or order.status)
    if not result.success:
        return error_response(result.error or "Échec de l'envoi de la notification", status.HTTP_502_BAD_GATEWAY)
    return success_response(result.as_dict())


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_status_email(request):
    """Render and send the status email for an arbitrary order or container"""
    to = _clean(request.data.get('to'))
    if not to or not is_valid_email(to):
        return error_response('Invalid email format')

    item_label = 'commande' if request.data.get('type') == 'commande' else 'conteneur'
    content = build_client_status_email(
        recipient_name=request.data.get('prenom'),
        shipment_reference=request.data.get('reference'),
        stage_label=_clean(request.data.get('stade')),
        tracking_url=request.data.get('trackingUrl'),
        item_label=item_label,
        subject=f"Bonne nouvelle ! Votre {item_label} avance 🚚",
    )
    try:
        send_email(to, content.subject, content.html)
    except NotificationConfigError as e:
        return error_response(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.info(f"Status email sent to {to}")
    return success_response(message='Email sent')
