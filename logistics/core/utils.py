"""Audit trail helpers shared by every app"""
import logging
from decimal import Decimal
from datetime import date, datetime

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First address of X-Forwarded-For when behind a proxy, else REMOTE_ADDR."""
    meta = getattr(request, 'META', None)
    if not meta:
        return None
    forwarded = meta.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return meta.get('REMOTE_ADDR') or None


def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if hasattr(value, 'pk'):
        return value.pk
    return value


def diff_fields(instance, new_values):
    """
    Compare model attributes with incoming values.

    Returns a dict of ``{field: {'old': ..., 'new': ...}}`` for fields whose
    value actually changes. Values are converted so the result can be stored
    in a JSONField.
    """
    changes = {}
    for field, new_value in new_values.items():
        old_value = getattr(instance, field, None)
        old_json, new_json = _jsonable(old_value), _jsonable(new_value)
        if str(old_json) != str(new_json):
            changes[field] = {'old': old_json, 'new': new_json}
    return changes


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None,
                     description=''):
    """
    Record an AuditLog row for an operator action.

    The acting user comes from ``user`` or, failing that, ``request.user``.
    Entries without an action, model name or object id are skipped. Any
    database error is logged and ``None`` returned so the caller's own
    operation still completes.
    """
    if not (action and model_name and object_id):
        logger.warning(f"Skipping audit entry with missing fields: {action!r} {model_name!r} {object_id!r}")
        return None

    actor = user or getattr(request, 'user', None)
    if actor is not None and not actor.is_authenticated:
        actor = None

    try:
        return AuditLog.objects.create(
            user=actor,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            description=description or '',
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Audit entry for {model_name} {object_id} not saved: {str(e)}")
        return None
