import logging
from typing import Optional

from careops.exceptions import ValidationError
from careops.models.contact import Contact
from careops.services.store_gateway import StoreGateway
from careops.utils.validation import require_ids

logger = logging.getLogger(__name__)


def upsert_contact(
    gateway: StoreGateway,
    workspace_id: int,
    name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> tuple[Contact, bool]:
    """Reuse the workspace's contact with this email, or create one. Returns (contact, created)."""
    require_ids(workspace_id=workspace_id)
    if not name:
        raise ValidationError("name required")

    gateway.workspace(workspace_id)

    email = email.strip().lower() if email else None
    if email:
        contact = gateway.first(Contact, workspace_id, email=email)
        if contact:
            return contact, False

    contact = gateway.insert(Contact, workspace_id, name=name, email=email, phone=phone)
    logger.info(f"Created contact {contact.id} in workspace {workspace_id}")
    return contact, True
