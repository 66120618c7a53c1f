from fastapi import APIRouter, Depends
from careops.dependencies import get_gateway
from careops.models.alert import Alert
from careops.services import alert_service
from careops.services.store_gateway import StoreGateway


router = APIRouter()


def alert_to_dict(alert: Alert) -> dict:
    return {
        "id": alert.id,
        "type": alert.type.value,
        "subject_id": alert.subject_id,
        "title": alert.title,
        "message": alert.message,
        "link": alert.link,
        "resolved": alert.resolved,
        "created_at": alert.created_at.isoformat()
    }


@router.get("/{workspace_id}")
def get_alerts(workspace_id: int, status: str = "all", gateway: StoreGateway = Depends(get_gateway)):
    """Get alerts for workspace, newest first (status: all, active, resolved)"""

    alerts = alert_service.list_alerts(gateway, workspace_id, status)

    return {
        "alerts": [alert_to_dict(a) for a in alerts],
        "active_count": sum(1 for a in alerts if not a.resolved)
    }


@router.patch("/{workspace_id}/{alert_id}/resolve")
def resolve_alert(workspace_id: int, alert_id: int, gateway: StoreGateway = Depends(get_gateway)):
    """Mark a single alert as resolved"""

    alert = alert_service.resolve_alert(gateway, workspace_id, alert_id)

    return {"success": True, "alert_id": alert.id, "resolved": True}


@router.post("/{workspace_id}/resolve-all")
def resolve_all_alerts(workspace_id: int, gateway: StoreGateway = Depends(get_gateway)):
    """Resolve every unresolved alert in the workspace"""

    gateway.workspace(workspace_id)
    count = alert_service.resolve_all(gateway, workspace_id)

    return {"success": True, "resolved": count}
