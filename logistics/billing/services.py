import logging

from django.utils import timezone

from .models import Invoice

logger = logging.getLogger(__name__)


def mark_overdue_invoices(today=None):
    """Flag sent, unpaid invoices whose due date has passed. Returns the count."""
    today = today or timezone.localdate()
    updated = Invoice.objects.filter(
        status='sent',
        due_date__lt=today,
        payment_date__isnull=True,
    ).update(status='overdue', updated_at=timezone.now())
    if updated:
        logger.info(f"Marked {updated} invoices as overdue")
    return updated
