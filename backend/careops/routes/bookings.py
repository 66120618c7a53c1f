from fastapi import APIRouter, Depends
from pydantic import BaseModel
from careops.dependencies import get_gateway
from careops.models.booking import Booking
from careops.services import booking_service
from careops.services.store_gateway import StoreGateway


router = APIRouter()


@router.get("/all/{workspace_id}")
def get_all_bookings(workspace_id: int, gateway: StoreGateway = Depends(get_gateway)):
    """Get all bookings for workspace"""

    bookings = gateway.select(Booking, workspace_id, order_by=(Booking.date.desc(), Booking.time.desc()))

    return [
        {
            "id": b.id,
            "date": b.date.isoformat(),
            "time": b.time,
            "service": b.service,
            "status": b.status.value,
            "notes": b.notes,
            "contact_id": b.contact_id,
            "customer_name": b.contact.name,
            "created_at": b.created_at.isoformat()
        }
        for b in bookings
    ]


class UpdateBookingStatus(BaseModel):
    status: str  # "confirmed", "completed", "cancelled", "no-show"


@router.patch("/{workspace_id}/{booking_id}/status")
def update_booking_status(
    workspace_id: int,
    booking_id: int,
    update: UpdateBookingStatus,
    gateway: StoreGateway = Depends(get_gateway),
):
    """Update booking status"""

    booking = booking_service.update_booking_status(gateway, workspace_id, booking_id, update.status)

    return {"success": True, "booking_id": booking.id, "status": booking.status.value}
