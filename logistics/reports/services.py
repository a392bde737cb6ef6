"""
Order statistics and the analytics export (CSV or PDF).
"""
import csv
import io
import logging
from datetime import timedelta

from django.db.models import Count
from django.utils import timezone
from PIL import ImageDraw

from logistics.core import pdf
from logistics.core.cache_utils import cached_query, ORDER_STATS_CACHE_TTL, ORDER_STATS_PREFIX
from logistics.shipping.models import Order

logger = logging.getLogger(__name__)

RANGES = {
    '7d': (timedelta(days=7), '7 derniers jours'),
    '30d': (timedelta(days=30), '30 derniers jours'),
    '90d': (timedelta(days=90), '90 derniers jours'),
    '1y': (timedelta(days=365), 'Dernière année'),
    'all': (None, 'Toutes les périodes'),
}
DEFAULT_RANGE = '30d'

STAT_LABELS = [
    ('total', 'Total commandes'),
    ('pending', 'En attente'),
    ('confirmed', 'Confirmées'),
    ('in_progress', 'En cours'),
    ('completed', 'Terminées'),
    ('cancelled', 'Annulées'),
]
ORDER_HEADERS = ['Numéro', 'Expéditeur', 'Destinataire', 'Service', 'Statut', 'Valeur', 'Date']


def count_by_status(queryset):
    stats = {key: 0 for key, _ in STAT_LABELS}
    for row in queryset.values('status').annotate(count=Count('id')):
        if row['status'] in stats:
            stats[row['status']] = row['count']
        stats['total'] += row['count']
    return stats


@cached_query(cache_ttl=ORDER_STATS_CACHE_TTL, key_prefix=ORDER_STATS_PREFIX)
def get_order_stats():
    """Order counts per status plus the total"""
    return count_by_status(Order.objects.all())


def resolve_range(range_key):
    if range_key not in RANGES:
        range_key = DEFAULT_RANGE
    delta, label = RANGES[range_key]
    since = timezone.now() - delta if delta else None
    return range_key, since, label


def orders_in_range(since=None):
    orders = Order.objects.order_by('-created_at')
    if since is not None:
        orders = orders.filter(created_at__gte=since)
    return orders


def order_row(order):
    return [
        order.order_number,
        order.client_name,
        order.recipient_name or order.client_name,
        order.service_type,
        order.status,
        str(order.value) if order.value is not None else 'N/A',
        timezone.localtime(order.created_at).strftime('%d/%m/%Y'),
    ]


def build_analytics_csv(stats, orders, period_label) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(['Rapport Analytics', 'Danemo'])
    writer.writerow(['Période', period_label])
    writer.writerow(['Date de génération', timezone.localtime().strftime('%d/%m/%Y %H:%M:%S')])
    writer.writerow([])
    writer.writerow(['Statistiques générales'])
    for key, label in STAT_LABELS:
        writer.writerow([label, stats[key]])
    writer.writerow([])
    writer.writerow(['Détail des commandes'])
    writer.writerow(ORDER_HEADERS)
    for order in orders:
        writer.writerow(order_row(order))
    # BOM so spreadsheet tools detect UTF-8
    return ('\ufeff' + buffer.getvalue()).encode('utf-8')


def build_analytics_pdf(stats, orders, period_label) -> bytes:
    title_font = pdf.load_font(26, bold=True)
    section_font = pdf.load_font(18, bold=True)
    body_font = pdf.load_font(14)
    header_font = pdf.load_font(12, bold=True)
    cell_font = pdf.load_font(11)
    small_font = pdf.load_font(10)

    widths = [110, 120, 120, 95, 85, 85, 92]
    row_height = 24
    rows = [order_row(order) for order in orders]

    pages = []
    page, draw = pdf.new_page()
    pages.append(page)
    draw.rectangle([0, 0, pdf.PAGE_WIDTH, 100], fill=pdf.BRAND_ORANGE)
    draw.text((pdf.MARGIN, 32), 'Rapport Analytics - Danemo', fill='white', font=title_font)

    y = 130
    draw.text((pdf.MARGIN, y), f"Période: {period_label}", fill=pdf.TEXT_DARK, font=section_font)
    y += 30
    draw.text((pdf.MARGIN, y), f"Date de génération: {timezone.localtime():%d/%m/%Y %H:%M}", fill=pdf.TEXT_MUTED, font=body_font)
    y += 40
    draw.text((pdf.MARGIN, y), 'Statistiques générales', fill=pdf.BRAND_ORANGE, font=section_font)
    y += 32
    for key, label in STAT_LABELS:
        draw.text((pdf.MARGIN, y), f"{label}: {stats[key]}", fill=pdf.TEXT_DARK, font=body_font)
        y += 22
    y += 20
    draw.text((pdf.MARGIN, y), 'Détail des commandes', fill=pdf.BRAND_ORANGE, font=section_font)
    y += 32

    bottom = pdf.PAGE_HEIGHT - 70
    while True:
        fit = max(0, (bottom - y) // row_height - 1)
        chunk, rows = rows[:fit], rows[fit:]
        pdf.draw_table(draw, pdf.MARGIN, y, ORDER_HEADERS, chunk, widths, cell_font, header_font, row_height)
        if not rows:
            break
        page, draw = pdf.new_page()
        pages.append(page)
        y = pdf.MARGIN

    for number, page in enumerate(pages, 1):
        footer = ImageDraw.Draw(page)
        footer.text((pdf.MARGIN, pdf.PAGE_HEIGHT - 40), 'Généré par Danemo Analytics', fill=pdf.TEXT_MUTED, font=small_font)
        footer.text((pdf.PAGE_WIDTH - pdf.MARGIN - 60, pdf.PAGE_HEIGHT - 40), f"Page {number}/{len(pages)}", fill=pdf.TEXT_MUTED, font=small_font)

    logger.debug(f"Analytics PDF rendered on {len(pages)} page(s)")
    return pdf.pages_to_pdf(pages)
