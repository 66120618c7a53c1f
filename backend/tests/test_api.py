"""HTTP tests for the automation, alert, inbox and public routes."""
from datetime import timedelta

from sqlalchemy.orm import sessionmaker

from careops.dependencies import get_gateway, get_session_factory
from careops.exceptions import PersistenceError
from careops.main import app
from careops.models import Booking, Conversation, FormStatus, Message
from careops.services.store_gateway import StoreGateway
from careops.utils.dates import utcnow


class FailingCommitGateway(StoreGateway):

    def commit(self):
        self.db.rollback()
        raise PersistenceError("Store commit failed")


class FailingAfterFirstCommitGateway(StoreGateway):
    """Lets the contact write commit, then fails the automation's commit."""

    def __init__(self, db):
        super().__init__(db)
        self.commits = 0

    def commit(self):
        self.commits += 1
        if self.commits > 1:
            self.db.rollback()
            raise PersistenceError("Store commit failed")
        super().commit()


def use_gateway(gateway):
    app.dependency_overrides[get_gateway] = lambda: gateway


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/health").json()["status"] == "healthy"


# =============================================================================
# Automations
# =============================================================================

def test_check_alerts_returns_created_keys(client, make, workspace):
    item = make.item(workspace, name="Gloves")
    contact = make.contact(workspace)
    conversation = make.conversation(workspace, contact, last_message_at=utcnow() - timedelta(hours=30))

    response = client.post("/api/automations/check-alerts", json={"workspace_id": workspace.id})

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert sorted(body["created"]) == sorted([
        f"low_stock:{item.id}", f"unanswered_message:{conversation.id}",
    ])

    again = client.post("/api/automations/check-alerts", json={"workspace_id": workspace.id})
    assert again.json()["created"] == []


def test_check_alerts_marks_forms_overdue(client, db, make, workspace):
    contact = make.contact(workspace)
    form = make.form(workspace)
    submission = make.submission(workspace, form, contact.id, sent_at=utcnow() - timedelta(days=4))

    client.post("/api/automations/check-alerts", json={"workspace_id": workspace.id})

    db.refresh(submission)
    assert submission.status == FormStatus.OVERDUE


def test_check_alerts_requires_workspace_id(client):
    response = client.post("/api/automations/check-alerts", json={})

    assert response.status_code == 400
    assert response.json()["detail"] == "workspace_id required"


def test_check_alerts_unknown_workspace(client):
    response = client.post("/api/automations/check-alerts", json={"workspace_id": 999})

    assert response.status_code == 404


def test_check_alerts_store_failure(client, db, make, workspace):
    make.item(workspace)
    use_gateway(FailingCommitGateway(db))

    response = client.post("/api/automations/check-alerts", json={"workspace_id": workspace.id})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed"


def test_booking_created_event(client, channels, db, make, workspace):
    contact = make.contact(workspace, phone="+15551234567")

    response = client.post("/api/automations/booking-created", json={
        "workspace_id": workspace.id,
        "contact_id": contact.id,
        "contact_name": "Sarah",
        "service": "Consultation",
        "date": "2026-10-25",
        "time": "14:30",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["sms"]["status"] == "sent"
    assert body["email"]["status"] == "skipped"
    assert db.get(Conversation, body["conversation_id"]).subject == "Booking: Consultation"
    assert len(channels.sms) == 1


def test_booking_created_missing_ids(client, channels):
    response = client.post("/api/automations/booking-created", json={"service": "Consultation"})

    assert response.status_code == 400
    assert response.json()["detail"] == "workspace_id and contact_id required"
    assert channels.sms == []


def test_booking_created_store_failure(client, db, make, workspace):
    contact = make.contact(workspace)
    use_gateway(FailingCommitGateway(db))

    response = client.post("/api/automations/booking-created", json={
        "workspace_id": workspace.id, "contact_id": contact.id,
    })

    assert response.status_code == 500
    assert response.json()["detail"] == "Automation failed"


def test_contact_created_event(client, db, make, workspace):
    contact = make.contact(workspace, name="Emily")

    response = client.post("/api/automations/contact-created", json={
        "workspace_id": workspace.id,
        "contact_id": contact.id,
        "contact_name": "Emily",
        "message": "Are you open Sundays?",
    })

    assert response.status_code == 200
    body = response.json()
    messages = db.query(Message).filter_by(conversation_id=body["conversation_id"]).order_by(Message.id).all()
    assert [m.sender.value for m in messages] == ["contact", "admin"]


def test_contact_created_unknown_contact(client, workspace):
    response = client.post("/api/automations/contact-created", json={
        "workspace_id": workspace.id, "contact_id": 31337,
    })

    assert response.status_code == 404
    assert response.json()["detail"] == "Contact 31337 not found"


# =============================================================================
# Alerts
# =============================================================================

def test_alerts_list_and_resolve(client, make, workspace, other_workspace):
    first = make.alert(workspace, subject_id=1)
    make.alert(workspace, subject_id=2)
    make.alert(workspace, subject_id=3, resolved=True)
    make.alert(other_workspace, subject_id=1)

    listing = client.get(f"/api/alerts/{workspace.id}").json()
    assert len(listing["alerts"]) == 3
    assert listing["active_count"] == 2

    resolved = client.patch(f"/api/alerts/{workspace.id}/{first.id}/resolve")
    assert resolved.status_code == 200

    active = client.get(f"/api/alerts/{workspace.id}", params={"status": "active"}).json()
    assert [a["subject_id"] for a in active["alerts"]] == [2]

    result = client.post(f"/api/alerts/{workspace.id}/resolve-all").json()
    assert result == {"success": True, "resolved": 1}
    assert client.get(f"/api/alerts/{other_workspace.id}").json()["active_count"] == 1


def test_alerts_invalid_filter(client, workspace):
    response = client.get(f"/api/alerts/{workspace.id}", params={"status": "snoozed"})

    assert response.status_code == 400


def test_resolve_missing_alert(client, workspace):
    assert client.patch(f"/api/alerts/{workspace.id}/404/resolve").status_code == 404


# =============================================================================
# Inbox
# =============================================================================

def test_staff_reply_pauses_automation(client, channels, db, make, workspace):
    contact = make.contact(workspace, email="sarah@example.com")
    conversation = make.conversation(workspace, contact, unread_count=1)

    response = client.post(
        f"/api/inbox/{workspace.id}/conversation/{conversation.id}/reply",
        json={"content": "Thanks, see you soon", "channel": "email"},
    )

    assert response.status_code == 200
    assert response.json()["delivery"]["status"] == "sent"
    detail = client.get(f"/api/inbox/{workspace.id}/conversation/{conversation.id}/messages").json()
    assert detail["conversation"]["automation_paused"] is True
    assert detail["conversation"]["unread_count"] == 0
    assert [m["content"] for m in detail["messages"]] == ["Thanks, see you soon"]


def test_inbox_mark_read_and_status(client, db, make, workspace):
    contact = make.contact(workspace)
    conversation = make.conversation(workspace, contact, unread_count=4)

    client.patch(f"/api/inbox/{workspace.id}/conversation/{conversation.id}/mark-read")
    bad = client.patch(f"/api/inbox/{workspace.id}/conversation/{conversation.id}/status", json={"status": "spam"})
    ok = client.patch(f"/api/inbox/{workspace.id}/conversation/{conversation.id}/status", json={"status": "archived"})

    assert bad.status_code == 400
    assert ok.json()["status"] == "archived"
    conversations = client.get(f"/api/inbox/conversations/{workspace.id}").json()
    assert conversations[0]["unread_count"] == 0


# =============================================================================
# Public intake
# =============================================================================

def test_public_booking_runs_automation(client, channels, db, workspace):
    response = client.post(f"/api/public/book/{workspace.id}", json={
        "service": "Teeth Cleaning",
        "date": "2026-10-25",
        "time": "10:00",
        "customer_name": "Sarah Johnson",
        "customer_email": "Sarah@Example.com",
        "customer_phone": "+15551234567",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["automation_ok"] is True
    assert db.get(Booking, body["booking_id"]).service == "Teeth Cleaning"
    assert db.get(Conversation, body["conversation_id"]).subject == "Booking: Teeth Cleaning"
    assert channels.sms[0][1].startswith('Hi Sarah Johnson! Your "Teeth Cleaning" on 2026-10-25 at 10:00')
    assert channels.emails[0][0] == "sarah@example.com"


def test_public_contact_form_keeps_contact_when_automation_fails(client, db, workspace):
    use_gateway(FailingAfterFirstCommitGateway(db))

    response = client.post(f"/api/public/contact-form/{workspace.id}/submit", json={
        "name": "Emily", "email": "emily@example.com", "message": "Hello!",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["automation_ok"] is False
    assert body["conversation_id"] is None
    assert body["contact_created"] is True
    assert db.query(Message).count() == 0


def test_public_booking_unknown_workspace(client):
    response = client.post("/api/public/book/999", json={
        "service": "Checkup", "date": "2026-10-25", "time": "09:00", "customer_name": "Sam",
    })

    assert response.status_code == 404
    assert response.json()["detail"] == "Workspace 999 not found"


def test_inventory_and_forms_routes(client, db, make, workspace):
    item = make.item(workspace, name="Gloves", quantity=2, min_quantity=10)
    contact = make.contact(workspace, name="Michael")
    form = make.form(workspace, name="Intake", fields=[
        {"id": "allergies", "label": "Allergies", "type": "text", "required": True},
    ])

    restock = client.patch(f"/api/inventory/{workspace.id}/{item.id}/quantity", json={"quantity": 40})
    assert restock.json()["is_low_stock"] is False
    assert client.patch(f"/api/inventory/{workspace.id}/{item.id}/quantity", json={"quantity": -3}).status_code == 400

    sent = client.post(f"/api/forms/{workspace.id}/send", json={"form_id": form.id, "contact_id": contact.id})
    submission_id = sent.json()["submission"]["id"]
    assert sent.json()["submission"]["status"] == "pending"

    missing = client.post(f"/api/forms/{workspace.id}/submission/{submission_id}/submit", json={"data": {}})
    assert missing.status_code == 400

    done = client.post(
        f"/api/forms/{workspace.id}/submission/{submission_id}/submit", json={"data": {"allergies": "none"}}
    )
    assert done.json()["submission"]["status"] == "completed"
    assert client.get(f"/api/forms/submissions/{workspace.id}").json()[0]["contact_name"] == "Michael"


def test_bookings_routes(client, workspace):
    booked = client.post(f"/api/public/book/{workspace.id}", json={
        "service": "Checkup", "date": "2026-11-02", "time": "09:00", "customer_name": "Sam",
    }).json()

    listing = client.get(f"/api/bookings/all/{workspace.id}").json()
    assert listing[0]["status"] == "confirmed"

    update = client.patch(f"/api/bookings/{workspace.id}/{booked['booking_id']}/status", json={"status": "completed"})
    assert update.json()["status"] == "completed"
    assert listing[0]["customer_name"] == "Sam"


# =============================================================================
# Scheduled scan
# =============================================================================

def test_scheduled_scan_covers_every_workspace(client, db, engine, make, workspace, other_workspace):
    make.item(workspace, name="Gloves")
    make.item(workspace, name="Masks")
    make.item(other_workspace, name="Gloves")
    make.workspace(name="Quiet Clinic")
    db.close()
    app.dependency_overrides[get_session_factory] = lambda: sessionmaker(bind=engine, autoflush=False)

    response = client.get("/api/tasks/check-alerts")

    assert response.status_code == 200
    assert response.json() == {"success": True, "workspaces_scanned": 3, "alerts_created": 3}

    again = client.get("/api/tasks/check-alerts").json()
    assert again["alerts_created"] == 0


# =============================================================================
# Building forms and stocking inventory
# =============================================================================

def test_create_and_list_forms(client, workspace):
    response = client.post(f"/api/forms/create/{workspace.id}", json={
        "name": "New Patient Intake",
        "description": "Please fill this in before your visit",
        "fields": [
            {"label": "Allergies", "type": "textarea", "required": True},
            {"label": "How did you hear about us?", "type": "select", "options": ["Friend", "Online"]},
        ],
    })

    assert response.status_code == 200
    form = response.json()["form"]
    assert [f["id"] for f in form["fields"]] == ["f1", "f2"]
    assert form["fields"][0]["required"] is True

    listing = client.get(f"/api/forms/all/{workspace.id}").json()
    assert [f["name"] for f in listing] == ["New Patient Intake"]


def test_create_form_with_unknown_field_type(client, workspace):
    response = client.post(f"/api/forms/create/{workspace.id}", json={
        "name": "Intake", "fields": [{"label": "Birthday", "type": "date"}],
    })

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid field type: date")
    assert client.get(f"/api/forms/all/{workspace.id}").json() == []


def test_created_item_raises_low_stock_alert(client, workspace):
    response = client.post(f"/api/inventory/create/{workspace.id}", json={"name": "Gloves", "quantity": 2})

    assert response.status_code == 200
    item = response.json()["item"]
    assert item["min_quantity"] == 5
    assert item["unit"] == "pcs"
    assert item["is_low_stock"] is True

    scan = client.post("/api/automations/check-alerts", json={"workspace_id": workspace.id}).json()
    assert scan["created"] == [f"low_stock:{item['id']}"]


def test_create_item_rejects_negative_quantity(client, workspace):
    response = client.post(f"/api/inventory/create/{workspace.id}", json={"name": "Gloves", "quantity": -1})

    assert response.status_code == 400
    assert response.json()["detail"] == "quantity must be zero or more"
    assert client.get(f"/api/inventory/all/{workspace.id}").json() == []


def test_create_item_unknown_workspace(client):
    assert client.post("/api/inventory/create/999", json={"name": "Gloves"}).status_code == 404
