"""
Identifier generation for orders and packages
"""
import logging
import uuid

from django.db import IntegrityError, transaction
from django.utils import timezone

from .models import Order, Package

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


def format_order_number(year, sequence):
    return f"DN{year}{sequence:06d}"


def generate_order_number():
    """Next free DN<year><6-digit sequence> based on this year's order count"""
    year = timezone.now().year
    sequence = Order.objects.filter(created_at__year=year).count() + 1
    order_number = format_order_number(year, sequence)

    # Ensure uniqueness
    while Order.objects.filter(order_number=order_number).exists():
        sequence += 1
        order_number = format_order_number(year, sequence)

    return order_number


def generate_qr_code(prefix='DNQR'):
    """Random QR identifier unique across orders and packages"""
    qr_code = f"{prefix}-{uuid.uuid4().hex[:12].upper()}"
    while Order.objects.filter(qr_code=qr_code).exists() or Package.objects.filter(qr_code=qr_code).exists():
        qr_code = f"{prefix}-{uuid.uuid4().hex[:12].upper()}"
    return qr_code


def save_new_order(serializer, **extra):
    """
    Save an order serializer with a generated order number.
    A concurrent insert taking the same number is retried with the next one.
    """
    last_error = None
    for attempt in range(ORDER_NUMBER_ATTEMPTS):
        try:
            with transaction.atomic():
                return serializer.save(order_number=generate_order_number(), **extra)
        except IntegrityError as e:
            last_error = e
            logger.warning(f"Order number collision (attempt {attempt + 1}): {str(e)}")
    raise last_error
