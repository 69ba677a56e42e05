from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException

from feemirror.api import deps
from feemirror.schemas.inventory import InventoryDetail, InventoryOverview
from feemirror.schemas.responses import SuccessResponse
from feemirror.services.inventory_service import InventoryService
from feemirror.services.snapshot_store import Snapshot

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[InventoryOverview]])
async def list_inventories(snapshot: Snapshot = Depends(deps.get_snapshot)) -> Any:
    """
    Stock figures for every inventory.
    """
    return SuccessResponse(data=[InventoryService.overview(inv) for inv in snapshot.inventories])


@router.get("/{inventory_name}", response_model=SuccessResponse[InventoryDetail])
async def get_inventory(
    inventory_name: str,
    snapshot: Snapshot = Depends(deps.get_snapshot),
) -> Any:
    """
    One inventory with its completed sales and merged stock history.
    """
    inventory = InventoryService.find_inventory(snapshot.inventories, inventory_name)
    if not inventory:
        raise HTTPException(status_code=404, detail="Inventory not found")

    return SuccessResponse(data=InventoryService.inventory_detail(inventory, snapshot.sales))
