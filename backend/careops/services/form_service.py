import logging
from typing import Any, Optional

from careops.exceptions import ValidationError
from careops.models.contact import Contact
from careops.models.form import Form, FormFieldType, FormStatus, FormSubmission
from careops.services.store_gateway import StoreGateway
from careops.utils.dates import utcnow
from careops.utils.validation import require_ids

logger = logging.getLogger(__name__)

FIELD_TYPES = tuple(t.value for t in FormFieldType)


def normalize_fields(fields: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Shape builder fields for storage.

    Fields without a label are dropped, missing ids become f1, f2, ... by
    position, and every type must be one of text, textarea, select, checkbox.
    """
    normalized = []
    seen = set()
    for field in fields or []:
        label = (field.get("label") or "").strip()
        if not label:
            continue

        field_id = field.get("id") or f"f{len(normalized) + 1}"
        if field_id in seen:
            raise ValidationError(f"Duplicate field id: {field_id}")
        seen.add(field_id)

        field_type = field.get("type") or FormFieldType.TEXT.value
        if field_type not in FIELD_TYPES:
            raise ValidationError(f"Invalid field type: {field_type}. Use: {', '.join(FIELD_TYPES)}")

        options = [o for o in field.get("options") or [] if o]
        if field_type == FormFieldType.SELECT.value and not options:
            raise ValidationError(f"Select field {label} needs options")

        normalized.append({
            "id": field_id,
            "label": label,
            "type": field_type,
            "required": bool(field.get("required")),
            "options": options,
        })
    return normalized


def create_form(
    gateway: StoreGateway,
    workspace_id: int,
    name: str,
    fields: list[dict[str, Any]],
    description: Optional[str] = None,
) -> Form:
    require_ids(workspace_id=workspace_id)
    if not name or not name.strip():
        raise ValidationError("name required")

    gateway.workspace(workspace_id)

    form = gateway.insert(
        Form, workspace_id, name=name.strip(), description=description, fields=normalize_fields(fields)
    )
    gateway.commit()
    logger.info(f"Created form {form.id} in workspace {workspace_id}")
    return form


def list_forms(gateway: StoreGateway, workspace_id: int) -> list[Form]:
    return gateway.select(Form, workspace_id, order_by=(Form.created_at.desc(), Form.id.desc()))


def send_form(
    gateway: StoreGateway,
    workspace_id: int,
    form_id: int,
    contact_id: int,
    booking_id: Optional[int] = None,
) -> FormSubmission:
    """Issue a form to a contact as a pending submission; the overdue clock starts at sent_at."""
    require_ids(workspace_id=workspace_id, form_id=form_id, contact_id=contact_id)
    gateway.get(Form, workspace_id, form_id)
    gateway.get(Contact, workspace_id, contact_id)

    submission = gateway.insert(
        FormSubmission,
        workspace_id,
        form_id=form_id,
        contact_id=contact_id,
        booking_id=booking_id,
        status=FormStatus.PENDING,
        sent_at=utcnow(),
    )
    gateway.commit()
    logger.info(f"Sent form {form_id} to contact {contact_id} (submission {submission.id})")
    return submission


def missing_required_fields(form: Form, data: dict[str, Any]) -> list[str]:
    missing = []
    for field in form.fields or []:
        field_id = field.get("id")
        # a field without an id can't be answered
        if not field_id or not field.get("required"):
            continue
        value = data.get(field_id)
        if value is None or value == "" or (field.get("type") == FormFieldType.CHECKBOX.value and value is False):
            missing.append(field.get("label") or field_id)
    return missing


def complete_submission(
    gateway: StoreGateway,
    workspace_id: int,
    submission_id: int,
    data: dict[str, Any],
) -> FormSubmission:
    """Record a contact's answers. Pending and overdue submissions can both be completed."""
    require_ids(workspace_id=workspace_id, submission_id=submission_id)

    submission = gateway.get(FormSubmission, workspace_id, submission_id)
    if submission.status == FormStatus.COMPLETED:
        raise ValidationError("Submission already completed")

    form = gateway.get(Form, workspace_id, submission.form_id)
    missing = missing_required_fields(form, data)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    gateway.update(
        FormSubmission,
        workspace_id,
        {"status": FormStatus.COMPLETED, "data": data, "completed_at": utcnow()},
        id=submission.id,
    )
    gateway.commit()
    return submission


def list_submissions(gateway: StoreGateway, workspace_id: int) -> list[FormSubmission]:
    return gateway.select(
        FormSubmission, workspace_id, order_by=(FormSubmission.sent_at.desc(), FormSubmission.id.desc())
    )
