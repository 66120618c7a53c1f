"""
Event automations fired after a booking or a contact has been written.

Each chain first secures the conversation and its messages (failures there
propagate), commits, and only then attempts outbound email/SMS, whose
failures are reported in the result and never undo the messages.
"""
import logging
from typing import Optional

from careops.exceptions import NotFoundError, PersistenceError
from careops.models.contact import Contact
from careops.models.conversation import MessageSender
from careops.schemas.automation import BookingAutomationResult, ContactAutomationResult
from careops.schemas.notification import DeliveryResult
from careops.services.conversation_service import ensure_conversation, send_auto_message
from careops.services.notifications import NotificationChannels
from careops.services.store_gateway import StoreGateway
from careops.utils.validation import require_ids

logger = logging.getLogger(__name__)

CONTACT_SUBJECT = "Contact inquiry"

BOOKING_MESSAGE = (
    'Hi {name}! Your booking for "{service}" on {date} at {time} has been confirmed. '
    "We'll send you a reminder before your appointment. "
    "Reply here if you have any questions!"
)
BOOKING_SMS = 'Hi {name}! Your "{service}" on {date} at {time} is confirmed. Reply HELP for assistance.'
WELCOME_MESSAGE = (
    "Hi {name}! Thanks for reaching out. "
    "We've received your message and a team member will get back to you shortly. "
    "Feel free to reply here if you have any additional questions!"
)

BOOKING_EMAIL_HTML = """
<div style="font-family: Arial, sans-serif; max-width: 480px; margin: 0 auto;">
    <h2>Booking Confirmed!</h2>
    <p>Hi <strong>{name}</strong>,</p>
    <p>Your booking has been confirmed with the following details:</p>
    <table style="width: 100%; border-collapse: collapse; margin: 16px 0;">
        <tr><td style="padding: 8px; border: 1px solid #eee;"><strong>Service</strong></td><td style="padding: 8px; border: 1px solid #eee;">{service}</td></tr>
        <tr><td style="padding: 8px; border: 1px solid #eee;"><strong>Date</strong></td><td style="padding: 8px; border: 1px solid #eee;">{date}</td></tr>
        <tr><td style="padding: 8px; border: 1px solid #eee;"><strong>Time</strong></td><td style="padding: 8px; border: 1px solid #eee;">{time}</td></tr>
    </table>
    <p>Need to reschedule or have questions? Reply to this email or contact us.</p>
</div>
"""
WELCOME_EMAIL_HTML = """
<html>
    <body>
        <h2>Thank you for contacting us!</h2>
        <p>Hi {name},</p>
        <p>We've received your message and will get back to you shortly.</p>
    </body>
</html>
"""


def _lookup_contact(gateway: StoreGateway, workspace_id: int, contact_id: int) -> Optional[Contact]:
    try:
        return gateway.get(Contact, workspace_id, contact_id)
    except (PersistenceError, NotFoundError) as e:
        logger.warning(f"Contact lookup for notifications failed: {e}")
        return None


def on_booking_created(
    gateway: StoreGateway,
    channels: NotificationChannels,
    workspace_id: int,
    contact_id: int,
    contact_name: Optional[str] = None,
    service: Optional[str] = None,
    date: Optional[str] = None,
    time: Optional[str] = None,
) -> BookingAutomationResult:
    require_ids(workspace_id=workspace_id, contact_id=contact_id)
    name = contact_name or "there"
    service = service or "your service"
    date = date or "TBD"
    time = time or "TBD"

    conversation_id = ensure_conversation(gateway, workspace_id, contact_id, f"Booking: {service}")
    send_auto_message(
        gateway,
        workspace_id,
        contact_id,
        conversation_id,
        BOOKING_MESSAGE.format(name=name, service=service, date=date, time=time),
        MessageSender.ADMIN,
    )
    gateway.commit()

    sms = DeliveryResult.skipped("Contact has no phone number")
    email = DeliveryResult.skipped("Contact has no email address")
    contact = _lookup_contact(gateway, workspace_id, contact_id)
    if contact and contact.phone:
        sms = channels.send_sms(
            contact.phone, BOOKING_SMS.format(name=name, service=service, date=date, time=time)
        )
    if contact and contact.email:
        email = channels.send_email(
            contact.email,
            f"Booking Confirmed - {service}",
            BOOKING_EMAIL_HTML.format(name=name, service=service, date=date, time=time),
        )

    logger.info(
        f"Booking automation done for contact {contact_id} (conversation {conversation_id}, "
        f"sms {sms.status.value}, email {email.status.value})"
    )
    return BookingAutomationResult(conversation_id=conversation_id, sms=sms, email=email)


def on_contact_created(
    gateway: StoreGateway,
    channels: NotificationChannels,
    workspace_id: int,
    contact_id: int,
    contact_name: Optional[str] = None,
    message: Optional[str] = None,
) -> ContactAutomationResult:
    require_ids(workspace_id=workspace_id, contact_id=contact_id)
    name = contact_name or "there"

    conversation_id = ensure_conversation(gateway, workspace_id, contact_id, CONTACT_SUBJECT)

    # The customer's own message goes in before the welcome reply
    if message:
        send_auto_message(gateway, workspace_id, contact_id, conversation_id, message, MessageSender.CONTACT)
    send_auto_message(
        gateway,
        workspace_id,
        contact_id,
        conversation_id,
        WELCOME_MESSAGE.format(name=name),
        MessageSender.ADMIN,
    )
    gateway.commit()

    email = DeliveryResult.skipped("Contact has no email address")
    contact = _lookup_contact(gateway, workspace_id, contact_id)
    if contact and contact.email:
        email = channels.send_email(
            contact.email, "Thank you for contacting us", WELCOME_EMAIL_HTML.format(name=name)
        )

    logger.info(f"Contact automation done for contact {contact_id} (conversation {conversation_id})")
    return ContactAutomationResult(conversation_id=conversation_id, email=email)
