from pydantic import BaseModel
from typing import Optional
from careops.schemas.notification import DeliveryResult


# Requests

class BookingCreatedEvent(BaseModel):
    workspace_id: Optional[int] = None
    contact_id: Optional[int] = None
    contact_name: Optional[str] = None
    service: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None


class ContactCreatedEvent(BaseModel):
    workspace_id: Optional[int] = None
    contact_id: Optional[int] = None
    contact_name: Optional[str] = None
    message: Optional[str] = None


class ScanRequest(BaseModel):
    workspace_id: Optional[int] = None


# Results

class BookingAutomationResult(BaseModel):
    conversation_id: int
    sms: DeliveryResult
    email: DeliveryResult


class ContactAutomationResult(BaseModel):
    conversation_id: int
    email: DeliveryResult


class StaffReplyResult(BaseModel):
    message_id: int
    conversation_id: int
    delivery: DeliveryResult
