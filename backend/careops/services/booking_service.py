import logging
from datetime import date
from typing import Optional

from careops.exceptions import ValidationError
from careops.models.booking import Booking, BookingStatus
from careops.models.contact import Contact
from careops.services.store_gateway import StoreGateway
from careops.utils.validation import require_ids

logger = logging.getLogger(__name__)


def create_booking(
    gateway: StoreGateway,
    workspace_id: int,
    contact_id: int,
    service: str,
    booking_date: date,
    booking_time: str,
    notes: Optional[str] = None,
) -> Booking:
    """Write and commit a confirmed booking. Automations run only after this returns."""
    require_ids(workspace_id=workspace_id, contact_id=contact_id)
    if not service:
        raise ValidationError("service required")

    gateway.get(Contact, workspace_id, contact_id)

    booking = gateway.insert(
        Booking,
        workspace_id,
        contact_id=contact_id,
        service=service,
        date=booking_date,
        time=booking_time,
        status=BookingStatus.CONFIRMED,
        notes=notes,
    )
    gateway.commit()
    logger.info(f"Created booking {booking.id} for contact {contact_id} in workspace {workspace_id}")
    return booking


def update_booking_status(gateway: StoreGateway, workspace_id: int, booking_id: int, status: str) -> Booking:
    require_ids(workspace_id=workspace_id, booking_id=booking_id)
    try:
        status = BookingStatus(status)
    except ValueError:
        raise ValidationError("Invalid status. Use: confirmed, completed, cancelled, or no-show")

    booking = gateway.get(Booking, workspace_id, booking_id)
    gateway.update(Booking, workspace_id, {"status": status}, id=booking.id)
    gateway.commit()
    return booking
