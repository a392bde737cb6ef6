"""
Message content for client status notifications: tracking links, the HTML
status email (rendered from ``notifications/status_email.html``) and the SMS
text. Stage labels come from the i18n catalogue.
"""
import re
from dataclasses import dataclass
from urllib.parse import quote

from django.conf import settings
from django.template.loader import render_to_string

from logistics.core.i18n import DEFAULT_LANG, translate

ABSOLUTE_URL_RE = re.compile(r'^https?://', re.IGNORECASE)


@dataclass
class StatusEmail:
    subject: str
    html: str


def get_app_base_url():
    return settings.APP_BASE_URL.rstrip('/')


def get_first_name(full_name, lang=DEFAULT_LANG):
    default = translate(lang, 'notifications.defaultName')
    if not full_name or not full_name.strip():
        return default
    return full_name.split()[0]


def build_tracking_url(order_number=None, container_code=None, qr_code=None):
    base = get_app_base_url()
    if order_number:
        return f"{base}/tracking?tracking={quote(order_number, safe='')}"
    if container_code:
        return f"{base}/tracking?code={quote(container_code, safe='')}"
    if qr_code:
        return f"{base}/qr?code={quote(qr_code, safe='')}"
    return f"{base}/tracking"


def ensure_tracking_url(url=None):
    if url and ABSOLUTE_URL_RE.match(url):
        return url
    base = get_app_base_url()
    if not url:
        return f"{base}/tracking"
    return f"{base}{'' if url.startswith('/') else '/'}{url}"


def container_stage_label(status, lang=DEFAULT_LANG):
    key = f"notifications.containerStage.{status}"
    label = translate(lang, key)
    return translate(lang, 'notifications.orderStage.default') if label == key else label


def order_stage_label(status, lang=DEFAULT_LANG):
    key = f"notifications.orderStage.{status}"
    label = translate(lang, key)
    return translate(lang, 'notifications.orderStage.default') if label == key else label


def build_client_status_email(recipient_name=None, shipment_reference=None, stage_label='',
                              tracking_url=None, item_label='commande', subject=None,
                              lang=DEFAULT_LANG) -> StatusEmail:
    context = {
        'name': get_first_name(recipient_name, lang),
        'reference': shipment_reference or translate(lang, 'notifications.defaultReference'),
        'stage': stage_label,
        'link': ensure_tracking_url(tracking_url),
        'item_label': item_label,
    }
    html = render_to_string('notifications/status_email.html', context)
    return StatusEmail(subject=subject or translate(lang, 'notifications.subject'), html=html)


def build_client_status_sms(recipient_name=None, shipment_reference=None, stage_label='',
                            tracking_url=None, lang=DEFAULT_LANG):
    name = get_first_name(recipient_name, lang)
    reference = shipment_reference or translate(lang, 'notifications.defaultReference')
    link = ensure_tracking_url(tracking_url)
    return translate(lang, 'notifications.sms').format(name=name, reference=reference, stage=stage_label, link=link)
