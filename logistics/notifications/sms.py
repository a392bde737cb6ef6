import logging
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = 'https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json'


@dataclass
class SmsResult:
    success: bool
    reason: Optional[str] = None
    status: Optional[int] = None


def sms_configured():
    return bool(settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_FROM)


def send_sms(to, body) -> SmsResult:
    """Send an SMS through the Twilio REST API. Never raises."""
    if not sms_configured():
        logger.warning("Missing Twilio configuration. SMS notifications disabled.")
        return SmsResult(success=False, reason='missing_config')

    try:
        response = requests.post(
            TWILIO_MESSAGES_URL.format(sid=settings.TWILIO_ACCOUNT_SID),
            data={'From': settings.TWILIO_FROM, 'To': to, 'Body': body},
            auth=(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN),
            timeout=settings.TWILIO_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Unexpected error while sending SMS to {to}: {str(e)}")
        return SmsResult(success=False, reason='unexpected_error')

    if not response.ok:
        logger.error(f"Failed to send SMS via Twilio: {response.status_code} {response.text}")
        return SmsResult(success=False, reason='twilio_error', status=response.status_code)

    return SmsResult(success=True, status=response.status_code)
