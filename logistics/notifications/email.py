import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)

SMTP_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'


class NotificationConfigError(Exception):
    """Raised when a delivery channel is used without its configuration"""


def check_mail_config():
    """Only the SMTP backend needs credentials; console/locmem backends do not."""
    if settings.EMAIL_BACKEND != SMTP_BACKEND:
        return
    if not (settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASS):
        raise NotificationConfigError('Missing SMTP configuration')


def send_email(to, subject, html, from_email=None):
    """Send an HTML email with a plain-text alternative. Delivery errors propagate."""
    check_mail_config()
    message = EmailMultiAlternatives(
        subject=subject,
        body=strip_tags(html).strip(),
        from_email=from_email or settings.DEFAULT_FROM_EMAIL,
        to=[to],
    )
    message.attach_alternative(html, 'text/html')
    message.send(fail_silently=False)
    logger.debug(f"Email '{subject}' sent to {to}")
