import logging
import sys
from typing import Optional
from careops.database import SessionLocal
from careops.exceptions import PersistenceError
from careops.models.workspace import Workspace
from careops.services.alert_service import scan
from careops.services.store_gateway import StoreGateway

logger = logging.getLogger(__name__)

def run_alert_scans(workspace_id: Optional[int] = None, session_factory=SessionLocal) -> dict:
    """
    Run the alert scanner for one workspace, or for every workspace.
    Run this from a cron job or scheduler; each workspace is scanned on its own,
    so one failing workspace doesn't stop the rest.
    Returns {workspace_id: number of alerts created}
    """
    db = session_factory()

    try:
        if workspace_id is None:
            workspace_ids = [w.id for w in db.query(Workspace.id).order_by(Workspace.id).all()]
        else:
            workspace_ids = [workspace_id]

        gateway = StoreGateway(db)
        results = {}

        for ws_id in workspace_ids:
            try:
                results[ws_id] = len(scan(gateway, ws_id))
            except PersistenceError as e:
                gateway.rollback()
                logger.error(f"Alert scan failed for workspace {ws_id}: {e}")

        logger.info(f"Scanned {len(results)} workspace(s), created {sum(results.values())} alert(s)")
        return results

    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    target = int(sys.argv[1]) if len(sys.argv) > 1 else None
    counts = run_alert_scans(target)
    print(f"Complete! {counts}")
