from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Text, Boolean, Index, text
from sqlalchemy.orm import relationship
import enum
from careops.database import Base
from careops.utils.dates import utcnow


class AlertType(str, enum.Enum):
    LOW_STOCK = "low_stock"
    OVERDUE_FORM = "overdue_form"
    UNANSWERED_MESSAGE = "unanswered_message"
    BOOKING_REMINDER = "booking_reminder"  # not produced by the scanner


class Alert(Base):
    __tablename__ = "alerts"
    __table_args__ = (
        # At most one unresolved alert per condition subject
        Index(
            "uq_alerts_unresolved_subject",
            "workspace_id",
            "type",
            "subject_id",
            unique=True,
            sqlite_where=text("resolved = 0"),
            postgresql_where=text("resolved = false"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(AlertType), nullable=False)
    subject_id = Column(Integer, nullable=True)  # inventory item, form submission or conversation
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(255))
    resolved = Column(Boolean, default=False, nullable=False)

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    workspace = relationship("Workspace", back_populates="alerts")

    @property
    def key(self) -> str:
        return f"{self.type.value}:{self.subject_id}"
