import logging

from django.http import HttpResponse
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from logistics.core.responses import success_response, error_response
from .services import (
    build_analytics_csv, build_analytics_pdf, count_by_status, get_order_stats,
    orders_in_range, resolve_range,
)

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_stats(request):
    """Order counts per status (cached)"""
    return success_response(get_order_stats())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def analytics_export(request):
    """Download the analytics report for a period as CSV or PDF"""
    export_format = (request.query_params.get('format') or 'csv').lower()
    if export_format not in ('csv', 'pdf'):
        return error_response('Unsupported format')

    range_key, since, period_label = resolve_range(request.query_params.get('range'))
    orders = orders_in_range(since)
    stats = count_by_status(orders)
    filename = f"analytics-danemo-{timezone.localdate():%Y-%m-%d}.{export_format}"
    logger.info(f"Analytics export {export_format} for {range_key}: {stats['total']} orders")

    if export_format == 'pdf':
        response = HttpResponse(build_analytics_pdf(stats, orders, period_label), content_type='application/pdf')
    else:
        response = HttpResponse(build_analytics_csv(stats, orders, period_label), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response
