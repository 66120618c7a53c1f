import logging
from twilio.rest import Client
from careops.config import settings
from careops.schemas.notification import DeliveryResult

logger = logging.getLogger(__name__)


def twilio_configured() -> bool:
    return bool(settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_PHONE_NUMBER)


def send_sms(to_phone: str, message: str, client: Client = None) -> DeliveryResult:
    """Send an SMS through Twilio. Never raises; failures come back as a result."""

    if not to_phone:
        return DeliveryResult.skipped("No phone number")

    if client is None:
        if not twilio_configured():
            logger.info(f"SMS skipped (Twilio not configured). To: {to_phone} | Body: {message}")
            return DeliveryResult.skipped("SMS integration not configured")
        client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)

    try:
        sms = client.messages.create(
            body=message,
            from_=settings.TWILIO_PHONE_NUMBER,
            to=to_phone
        )
    except Exception as e:
        logger.warning(f"Failed to send SMS to {to_phone}: {e}")
        return DeliveryResult.failed(str(e))

    logger.info(f"SMS sent to {to_phone} ({sms.sid})")
    return DeliveryResult.sent(sms.sid)
