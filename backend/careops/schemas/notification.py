from pydantic import BaseModel
from typing import Optional
import enum


class DeliveryStatus(str, enum.Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


class DeliveryResult(BaseModel):
    """Outcome of a best-effort email or SMS send. Senders return it, never raise."""
    status: DeliveryStatus
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != DeliveryStatus.FAILED

    @classmethod
    def sent(cls, detail: Optional[str] = None) -> "DeliveryResult":
        return cls(status=DeliveryStatus.SENT, detail=detail)

    @classmethod
    def skipped(cls, detail: Optional[str] = None) -> "DeliveryResult":
        return cls(status=DeliveryStatus.SKIPPED, detail=detail)

    @classmethod
    def failed(cls, detail: Optional[str] = None) -> "DeliveryResult":
        return cls(status=DeliveryStatus.FAILED, detail=detail)
