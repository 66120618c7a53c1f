import logging
import datetime
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional
from careops.dependencies import get_channels, get_gateway
from careops.exceptions import AutomationError
from careops.services import automation_service
from careops.services.booking_service import create_booking
from careops.services.contact_service import upsert_contact
from careops.services.notifications import NotificationChannels
from careops.services.store_gateway import StoreGateway

logger = logging.getLogger(__name__)

router = APIRouter()

# ============== CONTACT FORM ROUTES ==============

class ContactSubmission(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None

@router.post("/contact-form/{workspace_id}/submit")
def submit_contact_form(
    workspace_id: int,
    data: ContactSubmission,
    gateway: StoreGateway = Depends(get_gateway),
    channels: NotificationChannels = Depends(get_channels),
):
    """Submit contact form - creates the contact, then opens the conversation with a welcome reply"""

    contact, created = upsert_contact(gateway, workspace_id, data.name, data.email, data.phone)
    gateway.commit()

    conversation_id = None
    automation_ok = True
    try:
        result = automation_service.on_contact_created(
            gateway, channels, workspace_id, contact.id, data.name, data.message
        )
        conversation_id = result.conversation_id
    except AutomationError as e:
        # The contact is already saved; the automation is best-effort relative to it
        gateway.rollback()
        logger.error(f"Contact automation failed for contact {contact.id}: {e}")
        automation_ok = False

    return {
        "success": True,
        "message": "Thank you! We'll be in touch soon.",
        "contact_id": contact.id,
        "contact_created": created,
        "conversation_id": conversation_id,
        "automation_ok": automation_ok
    }

# ============== BOOKING ROUTES ==============

class BookingSubmission(BaseModel):
    service: str
    date: datetime.date
    time: str  # "HH:MM"
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    notes: Optional[str] = None

@router.post("/book/{workspace_id}")
def create_public_booking(
    workspace_id: int,
    data: BookingSubmission,
    gateway: StoreGateway = Depends(get_gateway),
    channels: NotificationChannels = Depends(get_channels),
):
    """Create a booking, then run the booking-created automation"""

    contact, _ = upsert_contact(
        gateway, workspace_id, data.customer_name, data.customer_email, data.customer_phone
    )
    booking = create_booking(
        gateway, workspace_id, contact.id, data.service, data.date, data.time, data.notes
    )

    conversation_id = None
    automation_ok = True
    try:
        result = automation_service.on_booking_created(
            gateway,
            channels,
            workspace_id,
            contact.id,
            data.customer_name,
            data.service,
            data.date.isoformat(),
            data.time,
        )
        conversation_id = result.conversation_id
    except AutomationError as e:
        gateway.rollback()
        logger.error(f"Booking automation failed for booking {booking.id}: {e}")
        automation_ok = False

    return {
        "success": True,
        "message": "Booking created successfully!",
        "booking_id": booking.id,
        "contact_id": contact.id,
        "conversation_id": conversation_id,
        "automation_ok": automation_ok
    }
