from careops.schemas.notification import DeliveryResult
from careops.services import email_service, sms_service


class NotificationChannels:
    """
    Outbound email and SMS handed to the automations.

    Both sends are best-effort: they return a DeliveryResult and never raise,
    so a dead provider can't fail the business operation that triggered it.
    """

    def __init__(self, sms_client=None, email_api=None):
        self.sms_client = sms_client
        self.email_api = email_api

    def send_sms(self, to_phone: str, message: str) -> DeliveryResult:
        return sms_service.send_sms(to_phone, message, client=self.sms_client)

    def send_email(self, to_email: str, subject: str, html_content: str) -> DeliveryResult:
        return email_service.send_email(to_email, subject, html_content, api_instance=self.email_api)
