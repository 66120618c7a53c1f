import logging
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from careops.config import settings
from careops.dependencies import get_session_factory
from careops.database import engine, Base
from careops.exceptions import NotFoundError, PersistenceError, ValidationError

# Import all models
from careops.models import (
    Workspace, Contact, Booking, Conversation, Message,
    Form, FormSubmission, InventoryItem, Alert
)

from careops.tasks.alerts import run_alert_scans
# Import routes
from careops.routes import automations, alerts, inbox, public, bookings, inventory, forms

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title="CareOps API",
    description="Bookings, inbox, forms, inventory and alerting for service businesses",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


def persistence_error_handler(request: Request, exc: PersistenceError):
    return JSONResponse(status_code=500, content={"detail": "Store operation failed"})


app.add_exception_handler(ValidationError, validation_error_handler)
app.add_exception_handler(NotFoundError, not_found_handler)
app.add_exception_handler(PersistenceError, persistence_error_handler)

# Include routers
app.include_router(automations.router, prefix="/api/automations", tags=["Automations"])
app.include_router(alerts.router, prefix="/api/alerts", tags=["Alerts"])
app.include_router(inbox.router, prefix="/api/inbox", tags=["Inbox"])
app.include_router(public.router, prefix="/api/public", tags=["Public"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["Bookings"])
app.include_router(inventory.router, prefix="/api/inventory", tags=["Inventory"])
app.include_router(forms.router, prefix="/api/forms", tags=["Forms"])


# Root endpoint
@app.get("/")
def root():
    return {
        "message": "CareOps API",
        "status": "running",
        "docs": "/docs"
    }

# Health check
@app.get("/health")
def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


@app.get("/api/tasks/check-alerts")
def trigger_alert_scans(session_factory=Depends(get_session_factory)):
    """
    Manual trigger for scanning every workspace for alerts
    Can be called by cron job or scheduler
    """
    counts = run_alert_scans(session_factory=session_factory)
    return {
        "success": True,
        "workspaces_scanned": len(counts),
        "alerts_created": sum(counts.values())
    }
