from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional
from careops.dependencies import get_channels, get_gateway
from careops.models.conversation import Conversation, Message
from careops.services import conversation_service
from careops.services.notifications import NotificationChannels
from careops.services.store_gateway import StoreGateway


router = APIRouter()


def conversation_to_dict(conv: Conversation) -> dict:
    return {
        "id": conv.id,
        "subject": conv.subject,
        "status": conv.status.value,
        "contact_id": conv.contact_id,
        "contact_name": conv.contact.name,
        "contact_email": conv.contact.email,
        "contact_phone": conv.contact.phone,
        "unread_count": conv.unread_count,
        "last_message": conv.last_message,
        "last_message_at": conv.last_message_at.isoformat() if conv.last_message_at else None,
        "automation_paused": conv.automation_paused,
        "created_at": conv.created_at.isoformat()
    }


def message_to_dict(msg: Message) -> dict:
    return {
        "id": msg.id,
        "content": msg.content,
        "sender": msg.sender.value,
        "created_at": msg.created_at.isoformat()
    }


@router.get("/conversations/{workspace_id}")
def get_conversations(workspace_id: int, gateway: StoreGateway = Depends(get_gateway)):
    """Get all conversations for workspace, most recent activity first"""

    conversations = conversation_service.list_conversations(gateway, workspace_id)
    return [conversation_to_dict(c) for c in conversations]


@router.get("/{workspace_id}/conversation/{conversation_id}/messages")
def get_conversation_messages(workspace_id: int, conversation_id: int, gateway: StoreGateway = Depends(get_gateway)):
    """Get all messages in a conversation, oldest first"""

    messages = conversation_service.list_messages(gateway, workspace_id, conversation_id)
    conversation = gateway.get(Conversation, workspace_id, conversation_id)

    return {
        "conversation": conversation_to_dict(conversation),
        "messages": [message_to_dict(m) for m in messages]
    }


class ReplyMessage(BaseModel):
    content: str
    channel: Optional[str] = None  # "email", "sms" or inbox only


@router.post("/{workspace_id}/conversation/{conversation_id}/reply")
def reply_to_conversation(
    workspace_id: int,
    conversation_id: int,
    reply: ReplyMessage,
    gateway: StoreGateway = Depends(get_gateway),
    channels: NotificationChannels = Depends(get_channels),
):
    """Staff reply: posts to the thread, pauses automations, optionally delivers by email/SMS"""

    result = conversation_service.reply_as_staff(
        gateway, channels, workspace_id, conversation_id, reply.content, reply.channel
    )

    return {"success": True, **result.model_dump(mode="json")}


@router.patch("/{workspace_id}/conversation/{conversation_id}/mark-read")
def mark_conversation_read(workspace_id: int, conversation_id: int, gateway: StoreGateway = Depends(get_gateway)):
    """Reset the conversation's unread count"""

    conversation_service.mark_conversation_read(gateway, workspace_id, conversation_id)

    return {"success": True, "message": "Conversation marked as read"}


class UpdateConversationStatus(BaseModel):
    status: str  # "open", "closed", "archived"


@router.patch("/{workspace_id}/conversation/{conversation_id}/status")
def update_conversation_status(
    workspace_id: int,
    conversation_id: int,
    update: UpdateConversationStatus,
    gateway: StoreGateway = Depends(get_gateway),
):
    """Update conversation status"""

    conversation = conversation_service.update_conversation_status(
        gateway, workspace_id, conversation_id, update.status
    )

    return {"success": True, "status": conversation.status.value}
