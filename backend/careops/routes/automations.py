import logging
from fastapi import APIRouter, Depends, HTTPException
from careops.dependencies import get_channels, get_gateway
from careops.exceptions import PersistenceError
from careops.schemas.automation import BookingCreatedEvent, ContactCreatedEvent, ScanRequest
from careops.services import alert_service, automation_service
from careops.services.notifications import NotificationChannels
from careops.services.store_gateway import StoreGateway

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/check-alerts")
def check_alerts(
    request: ScanRequest,
    gateway: StoreGateway = Depends(get_gateway),
):
    """
    Scan the workspace for alert conditions:
    - Low inventory items
    - Overdue form submissions
    - Unanswered messages (open conversations with unread > 0 for over 24h)

    Safe to call on every alerts page load; existing unresolved alerts are not duplicated.
    """
    gateway.workspace(request.workspace_id)

    try:
        created = alert_service.scan(gateway, request.workspace_id)
    except PersistenceError as e:
        logger.error(f"[check-alerts] {e}")
        raise HTTPException(status_code=500, detail="Failed")

    return {"ok": True, "created": created}


@router.post("/booking-created")
def booking_created(
    event: BookingCreatedEvent,
    gateway: StoreGateway = Depends(get_gateway),
    channels: NotificationChannels = Depends(get_channels),
):
    """Called after a booking is committed: confirmation message, then SMS/email"""
    try:
        result = automation_service.on_booking_created(
            gateway,
            channels,
            event.workspace_id,
            event.contact_id,
            contact_name=event.contact_name,
            service=event.service,
            date=event.date,
            time=event.time,
        )
    except PersistenceError as e:
        logger.error(f"[automation/booking-created] {e}")
        raise HTTPException(status_code=500, detail="Automation failed")

    return {"ok": True, **result.model_dump(mode="json")}


@router.post("/contact-created")
def contact_created(
    event: ContactCreatedEvent,
    gateway: StoreGateway = Depends(get_gateway),
    channels: NotificationChannels = Depends(get_channels),
):
    """Called after a contact is created: inbound message, then the welcome reply"""
    try:
        result = automation_service.on_contact_created(
            gateway,
            channels,
            event.workspace_id,
            event.contact_id,
            contact_name=event.contact_name,
            message=event.message,
        )
    except PersistenceError as e:
        logger.error(f"[automation/contact-created] {e}")
        raise HTTPException(status_code=500, detail="Automation failed")

    return {"ok": True, **result.model_dump(mode="json")}
