import logging
import sib_api_v3_sdk
from careops.config import settings
from careops.schemas.notification import DeliveryResult

logger = logging.getLogger(__name__)


def build_email_api() -> sib_api_v3_sdk.TransactionalEmailsApi:
    configuration = sib_api_v3_sdk.Configuration()
    configuration.api_key['api-key'] = settings.BREVO_API_KEY
    return sib_api_v3_sdk.TransactionalEmailsApi(sib_api_v3_sdk.ApiClient(configuration))


def send_email(
    to_email: str,
    subject: str,
    html_content: str,
    api_instance: sib_api_v3_sdk.TransactionalEmailsApi = None,
) -> DeliveryResult:
    """Send a transactional email using Brevo (SendInBlue). Never raises."""

    if not to_email:
        return DeliveryResult.skipped("No email address")

    if api_instance is None:
        if not settings.BREVO_API_KEY:
            logger.info(f"Email skipped (no BREVO_API_KEY set). Would send '{subject}' to {to_email}")
            return DeliveryResult.skipped("Email integration not configured")
        api_instance = build_email_api()

    send_smtp_email = sib_api_v3_sdk.SendSmtpEmail(
        to=[{"email": to_email}],
        sender={"name": settings.BREVO_FROM_NAME, "email": settings.BREVO_FROM_EMAIL},
        subject=subject,
        html_content=html_content
    )

    try:
        response = api_instance.send_transac_email(send_smtp_email)
    except Exception as e:
        logger.warning(f"Failed to send email to {to_email}: {e}")
        return DeliveryResult.failed(str(e))

    logger.info(f"Email sent via Brevo to {to_email}")
    return DeliveryResult.sent(getattr(response, "message_id", None))
