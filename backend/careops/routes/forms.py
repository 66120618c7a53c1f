from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from careops.dependencies import get_gateway
from careops.models.form import Form, FormSubmission
from careops.services import form_service
from careops.services.store_gateway import StoreGateway


router = APIRouter()


def form_to_dict(form: Form) -> dict:
    return {
        "id": form.id,
        "name": form.name,
        "description": form.description,
        "fields": form.fields,
        "created_at": form.created_at.isoformat()
    }


def submission_to_dict(sub: FormSubmission) -> dict:
    return {
        "id": sub.id,
        "form_id": sub.form_id,
        "form_name": sub.form.name,
        "contact_id": sub.contact_id,
        "contact_name": sub.contact.name,
        "status": sub.status.value,
        "data": sub.data,
        "sent_at": sub.sent_at.isoformat(),
        "completed_at": sub.completed_at.isoformat() if sub.completed_at else None
    }


class FormFieldSchema(BaseModel):
    id: Optional[str] = None
    label: str
    type: str = "text"  # "text", "textarea", "select", "checkbox"
    required: bool = False
    options: Optional[List[str]] = None  # For select fields


class CreateFormSchema(BaseModel):
    name: str
    description: Optional[str] = None
    fields: List[FormFieldSchema]


@router.post("/create/{workspace_id}")
def create_form(workspace_id: int, form_data: CreateFormSchema, gateway: StoreGateway = Depends(get_gateway)):
    """Create a new form for workspace"""

    form = form_service.create_form(
        gateway,
        workspace_id,
        form_data.name,
        [f.model_dump() for f in form_data.fields],
        form_data.description,
    )

    return {"success": True, "form": form_to_dict(form)}


@router.get("/all/{workspace_id}")
def get_all_forms(workspace_id: int, gateway: StoreGateway = Depends(get_gateway)):
    """Get all forms for workspace"""

    return [form_to_dict(f) for f in form_service.list_forms(gateway, workspace_id)]


class SendFormSchema(BaseModel):
    form_id: int
    contact_id: int
    booking_id: Optional[int] = None


class SubmitFormSchema(BaseModel):
    data: Dict[str, Any]


@router.post("/{workspace_id}/send")
def send_form(workspace_id: int, request: SendFormSchema, gateway: StoreGateway = Depends(get_gateway)):
    """Send a form to a contact; it becomes overdue if not completed in time"""

    submission = form_service.send_form(
        gateway, workspace_id, request.form_id, request.contact_id, request.booking_id
    )

    return {"success": True, "submission": submission_to_dict(submission)}


@router.post("/{workspace_id}/submission/{submission_id}/submit")
def submit_form(
    workspace_id: int,
    submission_id: int,
    request: SubmitFormSchema,
    gateway: StoreGateway = Depends(get_gateway),
):
    """Contact completes a form"""

    submission = form_service.complete_submission(gateway, workspace_id, submission_id, request.data)

    return {"success": True, "submission": submission_to_dict(submission)}


@router.get("/submissions/{workspace_id}")
def get_all_submissions(workspace_id: int, gateway: StoreGateway = Depends(get_gateway)):
    """Get all form submissions for workspace"""

    submissions = form_service.list_submissions(gateway, workspace_id)
    return [submission_to_dict(sub) for sub in submissions]
