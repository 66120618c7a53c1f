"""
Conversation automation: one thread per contact, messages appended to it,
and the conversation's summary fields kept in step with the latest message.
"""
import logging
from typing import Optional

from careops.exceptions import PersistenceError, ValidationError
from careops.models.contact import Contact
from careops.models.conversation import Conversation, ConversationStatus, Message, MessageSender
from careops.schemas.automation import StaffReplyResult
from careops.schemas.notification import DeliveryResult
from careops.services.notifications import NotificationChannels
from careops.services.store_gateway import StoreGateway
from careops.utils.dates import utcnow
from careops.utils.validation import require_ids

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "New conversation"
REPLY_CHANNELS = ("email", "sms")


def ensure_conversation(
    gateway: StoreGateway,
    workspace_id: int,
    contact_id: int,
    subject: Optional[str] = None,
) -> int:
    """
    Return the id of the contact's conversation, creating it on first use.

    The subject is only written when the conversation is created.
    """
    require_ids(workspace_id=workspace_id, contact_id=contact_id)

    existing = gateway.first(Conversation, workspace_id, contact_id=contact_id)
    if existing:
        return existing.id

    gateway.get(Contact, workspace_id, contact_id)

    conversation = gateway.insert_if_absent(
        Conversation,
        workspace_id,
        contact_id=contact_id,
        subject=subject or DEFAULT_SUBJECT,
        status=ConversationStatus.OPEN,
        last_message=None,
        unread_count=0,
    )
    if conversation is None:
        # Another request created it between our lookup and insert
        existing = gateway.first(Conversation, workspace_id, contact_id=contact_id)
        if existing is None:
            raise PersistenceError(f"Failed to create conversation for contact {contact_id}")
        return existing.id

    logger.info(f"Created conversation {conversation.id} for contact {contact_id} in workspace {workspace_id}")
    return conversation.id


def send_auto_message(
    gateway: StoreGateway,
    workspace_id: int,
    contact_id: int,
    conversation_id: int,
    content: str,
    sender: MessageSender = MessageSender.ADMIN,
) -> Message:
    """
    Append a message and refresh the conversation summary.

    unread_count is overwritten, not incremented: 1 after a contact message,
    0 after an admin one.
    """
    require_ids(workspace_id=workspace_id, contact_id=contact_id, conversation_id=conversation_id)
    if not content:
        raise ValidationError("content required")
    try:
        sender = MessageSender(sender)
    except ValueError:
        raise ValidationError(f"Invalid sender: {sender}")

    conversation = gateway.get(Conversation, workspace_id, conversation_id)
    if conversation.contact_id != contact_id:
        raise ValidationError(f"Conversation {conversation_id} does not belong to contact {contact_id}")

    now = utcnow()
    message = gateway.insert(
        Message,
        workspace_id,
        contact_id=contact_id,
        conversation_id=conversation_id,
        content=content,
        sender=sender,
        created_at=now,
    )
    gateway.update(
        Conversation,
        workspace_id,
        {
            "last_message": content,
            "last_message_at": now,
            "unread_count": 1 if sender == MessageSender.CONTACT else 0,
        },
        id=conversation_id,
    )
    return message


def on_staff_reply(gateway: StoreGateway, workspace_id: int, conversation_id: int) -> None:
    """Stop automated replies on a conversation once a human has engaged."""
    require_ids(workspace_id=workspace_id, conversation_id=conversation_id)
    gateway.get(Conversation, workspace_id, conversation_id)
    gateway.update(Conversation, workspace_id, {"automation_paused": True}, id=conversation_id)


def reply_as_staff(
    gateway: StoreGateway,
    channels: NotificationChannels,
    workspace_id: int,
    conversation_id: int,
    content: str,
    channel: Optional[str] = None,
) -> StaffReplyResult:
    """Post a staff reply to the inbox, pause automations, then deliver it if asked."""
    require_ids(workspace_id=workspace_id, conversation_id=conversation_id)
    if channel is not None and channel not in REPLY_CHANNELS:
        raise ValidationError(f"Invalid channel: {channel}. Use: email or sms")

    conversation = gateway.get(Conversation, workspace_id, conversation_id)
    message = send_auto_message(
        gateway, workspace_id, conversation.contact_id, conversation.id, content, MessageSender.ADMIN
    )
    on_staff_reply(gateway, workspace_id, conversation.id)
    gateway.commit()

    contact = conversation.contact
    if channel == "email":
        delivery = channels.send_email(contact.email, f"Re: {conversation.subject}", f"<p>{content}</p>")
    elif channel == "sms":
        delivery = channels.send_sms(contact.phone, content)
    else:
        delivery = DeliveryResult.skipped("Inbox only")

    return StaffReplyResult(message_id=message.id, conversation_id=conversation.id, delivery=delivery)


def list_conversations(gateway: StoreGateway, workspace_id: int) -> list[Conversation]:
    return gateway.select(
        Conversation,
        workspace_id,
        order_by=(Conversation.last_message_at.desc(), Conversation.id.desc()),
    )


def list_messages(gateway: StoreGateway, workspace_id: int, conversation_id: int) -> list[Message]:
    gateway.get(Conversation, workspace_id, conversation_id)
    return gateway.select(
        Message, workspace_id, order_by=(Message.created_at, Message.id), conversation_id=conversation_id
    )


def mark_conversation_read(gateway: StoreGateway, workspace_id: int, conversation_id: int) -> None:
    gateway.get(Conversation, workspace_id, conversation_id)
    gateway.update(Conversation, workspace_id, {"unread_count": 0}, id=conversation_id)
    gateway.commit()


def update_conversation_status(
    gateway: StoreGateway, workspace_id: int, conversation_id: int, status: str
) -> Conversation:
    try:
        status = ConversationStatus(status)
    except ValueError:
        raise ValidationError("Invalid status. Use: open, closed, or archived")

    conversation = gateway.get(Conversation, workspace_id, conversation_id)
    gateway.update(Conversation, workspace_id, {"status": status}, id=conversation.id)
    gateway.commit()
    return conversation
