"""
Status-change notification fan-out.

Recipients and message content are resolved from the database in the calling
thread; only the email and SMS sends run on the pool, each independently.
A failed send is logged and counted, it never cancels the others.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, asdict
from typing import Callable, List, Optional

from django.conf import settings
from django.db import DatabaseError, close_old_connections, connection, transaction

from logistics.core.utils import create_audit_log
from logistics.shipping.models import Container, Order
from .email import NotificationConfigError, send_email
from .sms import send_sms
from .content import (
    build_client_status_email, build_client_status_sms, build_tracking_url,
    container_stage_label, order_stage_label,
)

logger = logging.getLogger(__name__)

_background_executor = None
_executor_lock = threading.Lock()


@dataclass
class NotificationResult:
    emails_sent: int = 0
    sms_sent: int = 0
    recipients: int = 0
    failures: List[dict] = field(default_factory=list)

    def as_dict(self):
        return {
            'emailsSent': self.emails_sent,
            'smsSent': self.sms_sent,
            'recipients': self.recipients,
            'failures': self.failures,
        }


@dataclass
class OrderNotificationResult:
    success: bool
    error: Optional[str] = None
    email_sent: bool = False
    sms_sent: bool = False

    def as_dict(self):
        return asdict(self)


@dataclass
class Delivery:
    """One send on one channel for one order"""
    channel: str
    order_id: int
    send: Callable[[], Optional[str]]


def _email_delivery(order_id, to, content):
    def send():
        try:
            send_email(to, content.subject, content.html)
        except NotificationConfigError as e:
            logger.warning(f"Email for order {order_id} not sent: {str(e)}")
            return 'missing_config'
        except Exception as e:
            logger.error(f"Failed to send email for order {order_id}: {str(e)}")
            return 'send_error'
        return None
    return Delivery('email', order_id, send)


def _sms_delivery(order_id, to, body):
    def send():
        result = send_sms(to, body)
        return None if result.success else result.reason
    return Delivery('sms', order_id, send)


def run_deliveries(deliveries: List[Delivery]):
    """Run every delivery concurrently and return (emails_sent, sms_sent, failures)."""
    sent = {'email': 0, 'sms': 0}
    failures = []
    if not deliveries:
        return 0, 0, failures

    workers = max(1, min(settings.NOTIFICATION_MAX_WORKERS, len(deliveries)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='notify-send') as pool:
        futures = {pool.submit(d.send): d for d in deliveries}
        for future in as_completed(futures):
            delivery = futures[future]
            try:
                reason = future.result()
            except Exception as e:
                logger.error(f"Unexpected {delivery.channel} failure for order {delivery.order_id}: {str(e)}")
                reason = 'unexpected_error'
            if reason is None:
                sent[delivery.channel] += 1
            else:
                failures.append({'orderId': delivery.order_id, 'channel': delivery.channel, 'reason': reason})
    return sent['email'], sent['sms'], failures


def _deliveries_for_order(order, stage_label, container_code=None):
    tracking_url = build_tracking_url(
        order_number=order.order_number,
        container_code=container_code or order.container_code,
        qr_code=order.qr_code,
    )
    deliveries = []
    if order.notification_email:
        content = build_client_status_email(
            recipient_name=order.notification_name,
            shipment_reference=order.order_number,
            stage_label=stage_label,
            tracking_url=tracking_url,
        )
        deliveries.append(_email_delivery(order.id, order.notification_email, content))
    if order.notification_phone:
        body = build_client_status_sms(
            recipient_name=order.notification_name,
            shipment_reference=order.order_number,
            stage_label=stage_label,
            tracking_url=tracking_url,
        )
        deliveries.append(_sms_delivery(order.id, order.notification_phone, body))
    return deliveries


def notify_container_status_change(container_id, status, custom_message=None, previous_status=None):
    """Notify every client with an order in the container. None when the container is unknown."""
    try:
        container = Container.objects.filter(pk=container_id).first()
        if container is None:
            logger.warning(f"Container not found for id {container_id}")
            return None
        orders = [
            order for order in Order.objects.filter(container_id=container.id)
            if order.notification_email or order.notification_phone
        ]
    except DatabaseError as e:
        logger.error(f"Error while loading container {container_id} for notification: {str(e)}")
        return None

    if not orders:
        logger.info(f"No client contacts linked to container {container.code}")
        return NotificationResult()

    stage_label = custom_message or container_stage_label(status)
    deliveries = []
    for order in orders:
        deliveries.extend(_deliveries_for_order(order, stage_label, container_code=container.code))

    emails_sent, sms_sent, failures = run_deliveries(deliveries)
    result = NotificationResult(
        emails_sent=emails_sent, sms_sent=sms_sent, recipients=len(orders), failures=failures,
    )
    logger.info(
        f"Container {container.code} {previous_status or '?'} -> {status}: "
        f"{emails_sent} emails, {sms_sent} SMS to {len(orders)} recipients, {len(failures)} failures"
    )
    create_audit_log(
        action='notification', model_name='Container', object_id=container.id,
        object_name=container.code, changes={'status': status, **result.as_dict()},
        description=f"Notification statut {status}: {emails_sent} email(s), {sms_sent} SMS",
    )
    return result


def notify_order_status_change(order_id, status) -> OrderNotificationResult:
    """Notify the recipient of a single order on both channels."""
    try:
        order = Order.objects.select_related('container').filter(pk=order_id).first()
    except DatabaseError as e:
        logger.error(f"Failed to load order {order_id} for notification: {str(e)}")
        return OrderNotificationResult(success=False, error='Database error')

    if order is None:
        logger.warning(f"Order not found {order_id}")
        return OrderNotificationResult(success=False, error='Order not found')
    if not order.notification_email:
        logger.warning(f"Missing recipient email for order {order_id}")
        return OrderNotificationResult(success=False, error='Missing recipient email')

    deliveries = _deliveries_for_order(order, order_stage_label(status))
    emails_sent, sms_sent, failures = run_deliveries(deliveries)
    if not emails_sent and not sms_sent:
        reasons = ', '.join(sorted({f['reason'] for f in failures}))
        return OrderNotificationResult(success=False, error=f"All channels failed ({reasons})")

    create_audit_log(
        action='notification', model_name='Order', object_id=order.id,
        object_reference=order.order_number,
        description=f"Notification statut {status} envoyée",
    )
    return OrderNotificationResult(success=True, email_sent=bool(emails_sent), sms_sent=bool(sms_sent))


def get_background_executor():
    global _background_executor
    with _executor_lock:
        if _background_executor is None:
            _background_executor = ThreadPoolExecutor(
                max_workers=settings.NOTIFICATION_MAX_WORKERS,
                thread_name_prefix='notify',
            )
        return _background_executor


def _run_in_background(func, *args, **kwargs):
    def runner():
        close_old_connections()
        try:
            func(*args, **kwargs)
        except Exception:
            logger.exception(f"Background notification {func.__name__} failed")
        finally:
            connection.close()

    return get_background_executor().submit(runner)


def schedule_container_notification(container_id, status, custom_message=None, previous_status=None):
    """Notify after the current transaction commits, off the request thread."""
    transaction.on_commit(lambda: _run_in_background(
        notify_container_status_change, container_id, status,
        custom_message=custom_message, previous_status=previous_status,
    ))


def schedule_order_notification(order_id, status):
    transaction.on_commit(lambda: _run_in_background(notify_order_status_change, order_id, status))
