import logging

import requests
from celery import shared_task
from django.conf import settings

from core.choices import SMSBackend
from gradebook import config

logger = logging.getLogger(__name__)

ARKESEL_API_URL = "https://sms.arkesel.com/api/v2/sms/send"
DEFAULT_SENDER_ID = 'SchoolSMS'


def format_phone_ghana(phone):
    """Format phone number to Ghana international format (233XXXXXXXXX)."""
    phone = phone.strip()
    if phone.startswith('+'):
        phone = phone[1:]
    elif phone.startswith('0'):
        phone = '233' + phone[1:]
    return phone


def send_via_arkesel(recipient, message, sender_id=None, api_key=None):
    """
    Send SMS via Arkesel API v2.
    API Documentation: https://developers.arkesel.com/
    """
    if not api_key:
        raise ValueError("Arkesel API key is required")

    recipient = format_phone_ghana(recipient)
    sender = (sender_id or DEFAULT_SENDER_ID)[:11]

    headers = {
        'api-key': api_key,
        'Content-Type': 'application/json',
    }

    payload = {
        'sender': sender,
        'message': message,
        'recipients': [recipient],
    }

    response = requests.post(ARKESEL_API_URL, json=payload, headers=headers, timeout=30)
    response.raise_for_status()

    # requests.JSONDecodeError subclasses RequestException and must not be retried
    try:
        result = response.json()
    except requests.JSONDecodeError as e:
        raise ValueError(f"Arkesel API returned an invalid response: {e}") from e
    if not isinstance(result, dict):
        raise ValueError("Arkesel API returned an invalid response")
    if result.get('status') != 'success':
        raise ValueError(f"Arkesel API error: {result.get('message', 'Unknown error')}")

    return result


def get_school_sms_settings():
    """
    Get SMS settings from the SchoolSettings singleton.

    Returns:
        dict: SMS configuration with keys: backend, api_key, sender_id, enabled
    """
    from core.models import SchoolSettings

    school = SchoolSettings.load()

    sender_id = school.sms_sender_id or getattr(settings, 'SMS_SENDER_ID', None)
    if not sender_id and school.display_name:
        # Derive from school name (alphanumeric, max 11 chars)
        sender_id = ''.join(c for c in school.display_name if c.isalnum())[:11]

    return {
        'backend': school.sms_backend or getattr(settings, 'SMS_BACKEND', SMSBackend.CONSOLE),
        'api_key': school.sms_api_key or '',
        'sender_id': sender_id or DEFAULT_SENDER_ID,
        'enabled': school.sms_enabled,
    }


def deliver(recipient, message, sms_settings):
    """
    Hand one message to the configured backend.

    Returns:
        dict: {'provider': str, 'response': str}
    """
    backend = sms_settings['backend']
    sender_id = sms_settings['sender_id']

    if backend == SMSBackend.ARKESEL:
        if not sms_settings['api_key']:
            raise ValueError("Arkesel API key not configured for this school")
        response = send_via_arkesel(
            recipient, message, sender_id=sender_id, api_key=sms_settings['api_key']
        )
        logger.info(f"Arkesel SMS sent to {recipient}: {response}")
        return {'provider': 'arkesel', 'response': str(response)}

    # Console backend for development
    logger.info(f"[CONSOLE SMS] To: {recipient}")
    logger.info(f"[CONSOLE SMS] From: {sender_id}")
    logger.info(f"[CONSOLE SMS] Message: {message}")
    return {'provider': 'console', 'response': 'logged'}


@shared_task(
    bind=True,
    max_retries=config.TASK_MAX_RETRIES,
    default_retry_delay=config.TASK_RETRY_DELAY,
    autoretry_for=(requests.RequestException,),
)
def send_communication_task(self, message_id):
    """
    Deliver a queued SMSMessage with retry logic for transient failures.

    Args:
        message_id: Primary key of the SMSMessage to deliver
    """
    from .models import SMSMessage

    try:
        sms = SMSMessage.objects.get(pk=message_id)
    except SMSMessage.DoesNotExist:
        logger.error(f"SMS message {message_id} no longer exists")
        return {"status": "missing", "message_id": message_id}

    sms_settings = get_school_sms_settings()

    if not sms_settings['enabled']:
        logger.info(f"[SMS DISABLED] SMS not enabled for this school. Message to {sms.recipient_phone} not sent.")
        sms.mark_failed('SMS not enabled for this school')
        return {"status": "disabled", "message": "SMS not enabled for this school"}

    try:
        result = deliver(sms.recipient_phone, sms.message, sms_settings)
    except requests.RequestException as e:
        if self.request.retries >= self.max_retries:
            logger.error(f"SMS to {sms.recipient_phone} failed after {self.max_retries} retries: {e}")
            sms.mark_failed(e)
            return {"status": "failed", "error": str(e)}
        logger.warning(f"SMS to {sms.recipient_phone} failed, retrying: {e}")
        # Re-raise to trigger retry (handled by autoretry_for)
        raise
    except ValueError as e:
        logger.error(f"SMS Error to {sms.recipient_phone}: {e}")
        sms.mark_failed(e)
        return {"status": "failed", "error": str(e)}

    sms.mark_sent(result['response'])
    return {"status": "sent", **result}
