import logging
from typing import Optional

from careops.exceptions import ValidationError
from careops.models.inventory import InventoryItem
from careops.services.store_gateway import StoreGateway
from careops.utils.dates import utcnow
from careops.utils.validation import require_ids

logger = logging.getLogger(__name__)


def _check_quantity(name: str, value) -> None:
    if value is None or value < 0:
        raise ValidationError(f"{name} must be zero or more")


def create_inventory_item(
    gateway: StoreGateway,
    workspace_id: int,
    name: str,
    quantity: int = 0,
    min_quantity: int = 5,
    category: Optional[str] = "General",
    unit: Optional[str] = "pcs",
    cost_per_unit: float = 0,
) -> InventoryItem:
    """Add a stocked item. It is picked up by the next low-stock scan if already at its minimum."""
    require_ids(workspace_id=workspace_id)
    if not name or not name.strip():
        raise ValidationError("name required")
    _check_quantity("quantity", quantity)
    _check_quantity("min_quantity", min_quantity)
    _check_quantity("cost_per_unit", cost_per_unit)

    gateway.workspace(workspace_id)

    item = gateway.insert(
        InventoryItem,
        workspace_id,
        name=name.strip(),
        category=category,
        quantity=quantity,
        min_quantity=min_quantity,
        unit=unit,
        cost_per_unit=cost_per_unit,
    )
    gateway.commit()
    logger.info(f"Created inventory item {item.id} in workspace {workspace_id}")
    return item


def list_inventory(gateway: StoreGateway, workspace_id: int) -> list[InventoryItem]:
    return gateway.select(InventoryItem, workspace_id, order_by=InventoryItem.name)


def update_inventory_quantity(gateway: StoreGateway, workspace_id: int, item_id: int, quantity: int) -> InventoryItem:
    require_ids(workspace_id=workspace_id, item_id=item_id)
    _check_quantity("quantity", quantity)

    item = gateway.get(InventoryItem, workspace_id, item_id)
    gateway.update(
        InventoryItem, workspace_id, {"quantity": quantity, "updated_at": utcnow()}, id=item.id
    )
    gateway.commit()
    return item
