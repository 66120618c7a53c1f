from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Text, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
import enum
from careops.database import Base
from careops.utils.dates import utcnow


class MessageSender(str, enum.Enum):
    ADMIN = "admin"
    CONTACT = "contact"


class ConversationStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    ARCHIVED = "archived"


class Conversation(Base):
    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("workspace_id", "contact_id", name="uq_conversations_workspace_contact"),
    )

    id = Column(Integer, primary_key=True, index=True)
    subject = Column(String(255))
    status = Column(Enum(ConversationStatus), default=ConversationStatus.OPEN, nullable=False)

    # Denormalized summary of the latest message
    last_message = Column(Text)
    last_message_at = Column(DateTime)
    unread_count = Column(Integer, default=0, nullable=False)

    # Latched once a human replies; automated replies stop for good
    automation_paused = Column(Boolean, default=False, nullable=False)

    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    contact = relationship("Contact", back_populates="conversations")
    workspace = relationship("Workspace", back_populates="conversations")
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.id",
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    sender = Column(Enum(MessageSender), nullable=False)

    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False)
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
