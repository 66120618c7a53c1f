"""
Alert scanner.

Scans a workspace for three independent conditions (low stock, overdue
forms, unanswered conversations) and materializes one unresolved alert per
condition subject. The dedup key is (workspace_id, type, subject_id) among
unresolved alerts, backed by a partial unique index, so re-running a scan
creates nothing new and a concurrent duplicate insert is a no-op.

Every candidate row is checked in its own savepoint: a store failure or a
dangling reference skips that row only. Scans are meant to be re-run on the
next trigger, which is the only retry there is.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from careops.config import settings
from careops.exceptions import NotFoundError, PersistenceError, ValidationError
from careops.models.alert import Alert, AlertType
from careops.models.contact import Contact
from careops.models.conversation import Conversation, ConversationStatus
from careops.models.form import Form, FormStatus, FormSubmission
from careops.models.inventory import InventoryItem
from careops.services.store_gateway import StoreGateway
from careops.utils.dates import short_date, utcnow
from careops.utils.validation import require_ids

logger = logging.getLogger(__name__)

INVENTORY_LINK = "/dashboard/inventory"
FORMS_LINK = "/dashboard/forms"
INBOX_LINK = "/dashboard/inbox"

ALERT_FILTERS = ("all", "active", "resolved")


def raise_alert(
    gateway: StoreGateway,
    workspace_id: int,
    alert_type: AlertType,
    subject_id: int,
    title: str,
    message: str,
    link: str,
) -> Optional[str]:
    """Create the alert unless an unresolved one exists for the subject. Returns its key."""
    existing = gateway.first(Alert, workspace_id, type=alert_type, subject_id=subject_id, resolved=False)
    if existing:
        return None

    alert = gateway.insert_if_absent(
        Alert,
        workspace_id,
        type=alert_type,
        subject_id=subject_id,
        title=title,
        message=message,
        link=link,
        resolved=False,
    )
    if alert is None:
        return None

    logger.info(f"Created {alert_type.value} alert for subject {subject_id} in workspace {workspace_id}")
    return alert.key


def _run_isolated(gateway: StoreGateway, label: str, load: Callable[[], list], check: Callable) -> list[str]:
    try:
        with gateway.savepoint():
            rows = load()
    except PersistenceError as e:
        logger.error(f"{label} scan could not load candidates: {e}")
        return []

    created = []
    for row in rows:
        row_id = row.id
        try:
            with gateway.savepoint():
                key = check(row)
        except (PersistenceError, NotFoundError) as e:
            logger.warning(f"{label} scan skipped {type(row).__name__} {row_id}: {e}")
            continue
        if key:
            created.append(key)
    return created


def scan_low_stock(gateway: StoreGateway, workspace_id: int, now: datetime) -> list[str]:
    def load():
        return gateway.select(
            InventoryItem, workspace_id, InventoryItem.quantity <= InventoryItem.min_quantity
        )

    def check(item: InventoryItem):
        return raise_alert(
            gateway,
            workspace_id,
            AlertType.LOW_STOCK,
            item.id,
            title=f"Low stock: {item.name}",
            message=f"{item.name} has {item.quantity} left (minimum: {item.min_quantity}).",
            link=INVENTORY_LINK,
        )

    return _run_isolated(gateway, "Low-stock", load, check)


def scan_overdue_forms(gateway: StoreGateway, workspace_id: int, now: datetime) -> list[str]:
    threshold = now - timedelta(days=settings.OVERDUE_FORM_DAYS)

    def load():
        return gateway.select(
            FormSubmission,
            workspace_id,
            FormSubmission.sent_at < threshold,
            status=FormStatus.PENDING,
        )

    def check(submission: FormSubmission):
        contact = gateway.get(Contact, workspace_id, submission.contact_id)
        form = gateway.get(Form, workspace_id, submission.form_id)

        gateway.update(FormSubmission, workspace_id, {"status": FormStatus.OVERDUE}, id=submission.id)

        return raise_alert(
            gateway,
            workspace_id,
            AlertType.OVERDUE_FORM,
            submission.id,
            title=f"Overdue form: {form.name}",
            message=f'{contact.name} hasn\'t completed "{form.name}" (sent {short_date(submission.sent_at)}).',
            link=FORMS_LINK,
        )

    return _run_isolated(gateway, "Overdue-form", load, check)


def scan_unanswered_messages(gateway: StoreGateway, workspace_id: int, now: datetime) -> list[str]:
    threshold = now - timedelta(hours=settings.UNANSWERED_MESSAGE_HOURS)

    def load():
        return gateway.select(
            Conversation,
            workspace_id,
            Conversation.unread_count > 0,
            Conversation.last_message_at.isnot(None),
            Conversation.last_message_at < threshold,
            status=ConversationStatus.OPEN,
        )

    def check(conversation: Conversation):
        contact = gateway.get(Contact, workspace_id, conversation.contact_id)
        hours = int((now - conversation.last_message_at).total_seconds() // 3600)

        return raise_alert(
            gateway,
            workspace_id,
            AlertType.UNANSWERED_MESSAGE,
            conversation.id,
            title=f"Unanswered: {contact.name}",
            message=(
                f"{contact.name} has been waiting {hours} hours for a reply "
                f"(since {short_date(conversation.last_message_at)})."
            ),
            link=INBOX_LINK,
        )

    return _run_isolated(gateway, "Unanswered-message", load, check)


SUB_SCANS = (scan_low_stock, scan_overdue_forms, scan_unanswered_messages)


def scan(gateway: StoreGateway, workspace_id: int, now: Optional[datetime] = None) -> list[str]:
    """Run every sub-scan for the workspace and return the keys of the alerts created."""
    require_ids(workspace_id=workspace_id)
    now = now or utcnow()

    created = []
    for sub_scan in SUB_SCANS:
        created.extend(sub_scan(gateway, workspace_id, now))
    gateway.commit()

    logger.info(f"Alert scan for workspace {workspace_id} created {len(created)} alert(s)")
    return created


def resolve_alert(gateway: StoreGateway, workspace_id: int, alert_id: int) -> Alert:
    require_ids(workspace_id=workspace_id, alert_id=alert_id)
    alert = gateway.get(Alert, workspace_id, alert_id)
    gateway.update(Alert, workspace_id, {"resolved": True}, id=alert.id)
    gateway.commit()
    return alert


def resolve_all(gateway: StoreGateway, workspace_id: int) -> int:
    """Resolve every unresolved alert in the workspace, whatever its type or age."""
    require_ids(workspace_id=workspace_id)
    count = gateway.update(Alert, workspace_id, {"resolved": True}, resolved=False)
    gateway.commit()
    logger.info(f"Resolved {count} alert(s) in workspace {workspace_id}")
    return count


def list_alerts(gateway: StoreGateway, workspace_id: int, status: str = "all") -> list[Alert]:
    if status not in ALERT_FILTERS:
        raise ValidationError(f"Invalid status: {status}. Use: all, active, or resolved")

    filters = {}
    if status == "active":
        filters["resolved"] = False
    elif status == "resolved":
        filters["resolved"] = True

    return gateway.select(
        Alert, workspace_id, order_by=(Alert.created_at.desc(), Alert.id.desc()), **filters
    )
