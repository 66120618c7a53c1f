from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional
from careops.dependencies import get_gateway
from careops.models.inventory import InventoryItem
from careops.services import inventory_service
from careops.services.store_gateway import StoreGateway


router = APIRouter()


def item_to_dict(item: InventoryItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category,
        "quantity": item.quantity,
        "min_quantity": item.min_quantity,
        "unit": item.unit,
        "cost_per_unit": float(item.cost_per_unit or 0),
        "is_low_stock": item.is_low_stock,
        "updated_at": item.updated_at.isoformat()
    }


class CreateInventoryItem(BaseModel):
    name: str
    category: Optional[str] = "General"
    quantity: int = 0
    min_quantity: int = 5
    unit: Optional[str] = "pcs"
    cost_per_unit: float = 0


@router.post("/create/{workspace_id}")
def create_inventory_item(
    workspace_id: int,
    data: CreateInventoryItem,
    gateway: StoreGateway = Depends(get_gateway),
):
    """Add an inventory item to the workspace"""

    item = inventory_service.create_inventory_item(
        gateway,
        workspace_id,
        data.name,
        quantity=data.quantity,
        min_quantity=data.min_quantity,
        category=data.category,
        unit=data.unit,
        cost_per_unit=data.cost_per_unit,
    )

    return {"success": True, "item": item_to_dict(item)}


@router.get("/all/{workspace_id}")
def get_all_inventory(workspace_id: int, gateway: StoreGateway = Depends(get_gateway)):
    """Get all inventory items for workspace"""

    items = inventory_service.list_inventory(gateway, workspace_id)
    return [item_to_dict(item) for item in items]


class UpdateInventory(BaseModel):
    quantity: int


@router.patch("/{workspace_id}/{item_id}/quantity")
def update_inventory_quantity(
    workspace_id: int,
    item_id: int,
    update: UpdateInventory,
    gateway: StoreGateway = Depends(get_gateway),
):
    """Update inventory quantity"""

    item = inventory_service.update_inventory_quantity(gateway, workspace_id, item_id, update.quantity)

    return {
        "success": True,
        "item_id": item.id,
        "quantity": item.quantity,
        "is_low_stock": item.is_low_stock
    }
