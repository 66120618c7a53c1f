"""
Test configuration and fixtures.

Provides:
- An in-memory SQLite database per test (StaticPool, savepoints enabled)
- A StoreGateway bound to that session
- Recording fake notification channels
- Row factories and a TestClient wired to the same gateway
"""
import os
from datetime import datetime, timedelta
from typing import Generator

# Keep the app's own engine off disk
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from careops.database import Base, enable_sqlite_savepoints
from careops.dependencies import get_channels, get_gateway
from careops.main import app
from careops.models import (
    Alert, AlertType, Contact, Conversation, ConversationStatus, Form,
    FormStatus, FormSubmission, InventoryItem, Workspace,
)
from careops.schemas.notification import DeliveryResult
from careops.services.store_gateway import StoreGateway

NOW = datetime(2026, 10, 19, 12, 0, 0)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture(scope="function")
def gateway(db: Session) -> StoreGateway:
    return StoreGateway(db)


# =============================================================================
# Notification Fakes
# =============================================================================

class FakeChannels:
    """Records every send; results can be swapped per test."""

    def __init__(self):
        self.sms = []
        self.emails = []
        self.sms_result = DeliveryResult.sent("SM-test")
        self.email_result = DeliveryResult.sent("email-test")

    def send_sms(self, to_phone, message):
        self.sms.append((to_phone, message))
        return self.sms_result

    def send_email(self, to_email, subject, html_content):
        self.emails.append((to_email, subject, html_content))
        return self.email_result


@pytest.fixture(scope="function")
def channels() -> FakeChannels:
    return FakeChannels()


# =============================================================================
# Row Factories
# =============================================================================

class Factory:

    def __init__(self, db: Session):
        self.db = db

    def _add(self, row):
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def workspace(self, name="Test Clinic"):
        return self._add(Workspace(name=name))

    def contact(self, workspace, name="Sarah Johnson", email=None, phone=None):
        return self._add(Contact(workspace_id=workspace.id, name=name, email=email, phone=phone))

    def item(self, workspace, name="Gloves", quantity=2, min_quantity=10, unit="boxes"):
        return self._add(InventoryItem(
            workspace_id=workspace.id,
            name=name,
            category="Supplies",
            quantity=quantity,
            min_quantity=min_quantity,
            unit=unit,
            cost_per_unit=4.5,
        ))

    def form(self, workspace, name="Intake Form", fields=None):
        return self._add(Form(workspace_id=workspace.id, name=name, fields=fields or []))

    def submission(self, workspace, form, contact_id, sent_at=NOW, status=FormStatus.PENDING):
        return self._add(FormSubmission(
            workspace_id=workspace.id,
            form_id=form.id,
            contact_id=contact_id,
            status=status,
            sent_at=sent_at,
        ))

    def conversation(self, workspace, contact, unread_count=1, last_message_at=NOW,
                     status=ConversationStatus.OPEN, subject="Contact inquiry"):
        return self._add(Conversation(
            workspace_id=workspace.id,
            contact_id=contact.id,
            subject=subject,
            status=status,
            last_message="Hello?",
            last_message_at=last_message_at,
            unread_count=unread_count,
        ))

    def alert(self, workspace, alert_type=AlertType.LOW_STOCK, subject_id=None, resolved=False,
              title="Alert", message="Something needs attention"):
        return self._add(Alert(
            workspace_id=workspace.id,
            type=alert_type,
            subject_id=subject_id,
            title=title,
            message=message,
            link="/dashboard",
            resolved=resolved,
        ))


@pytest.fixture(scope="function")
def make(db: Session) -> Factory:
    return Factory(db)


@pytest.fixture(scope="function")
def workspace(make: Factory) -> Workspace:
    return make.workspace()


@pytest.fixture(scope="function")
def other_workspace(make: Factory) -> Workspace:
    return make.workspace(name="Other Clinic")


@pytest.fixture(scope="function")
def now() -> datetime:
    return NOW


@pytest.fixture(scope="function")
def days_ago():
    def _days_ago(days=0, hours=0, minutes=0):
        return NOW - timedelta(days=days, hours=hours, minutes=minutes)
    return _days_ago


# =============================================================================
# HTTP Client
# =============================================================================

@pytest.fixture(scope="function")
def client(gateway: StoreGateway, channels: FakeChannels) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_channels] = lambda: channels
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
