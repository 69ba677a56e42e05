from typing import Iterable, List, Optional

from feemirror.models.enums import SaleStatus, StockHistoryType
from feemirror.schemas.inventory import (
    Inventory,
    InventoryDetail,
    InventoryOverview,
    InventoryStats,
    SaleRecord,
    StockHistoryRow,
)
from feemirror.utils.values import ZERO

# Items without a usable threshold count as low stock at or below this level
DEFAULT_LOW_STOCK_THRESHOLD = 5


class InventoryService:

    @staticmethod
    def inventory_stats(inventory: Inventory) -> InventoryStats:
        low_stock = 0
        out_of_stock = 0
        for item in inventory.items:
            threshold = item.low_stock_threshold
            if threshold is None:
                threshold = DEFAULT_LOW_STOCK_THRESHOLD
            if item.quantity == 0:
                out_of_stock += 1
            elif item.quantity <= threshold:
                low_stock += 1

        return InventoryStats(
            total_items=len(inventory.items),
            total_quantity=sum(item.quantity for item in inventory.items),
            total_value=sum((item.default_price * item.quantity for item in inventory.items), ZERO),
            low_stock_count=low_stock,
            out_of_stock_count=out_of_stock,
        )

    @staticmethod
    def completed_sales(inventory_name: str, sales: Iterable[SaleRecord]) -> List[SaleRecord]:
        return [
            sale for sale in sales
            if sale.inventory_name == inventory_name and sale.status == SaleStatus.COMPLETED.value
        ]

    @staticmethod
    def stock_history(inventory: Inventory, sales: Iterable[SaleRecord]) -> List[StockHistoryRow]:
        """
        Stock movements and completed sales of one inventory, newest first.

        Sales are matched on inventory name and year. Rows without a readable
        date sort last.
        """
        rows = [
            StockHistoryRow(
                type=StockHistoryType.RESTOCK,
                date=log.date,
                item_name=item.item_name,
                quantity=log.quantity_change,
                note=log.action_type,
                performed_by=log.performed_by,
            )
            for item in inventory.items
            for log in item.stock_log
        ]
        rows.extend(
            StockHistoryRow(
                type=StockHistoryType.SALE,
                date=sale.sold_at,
                item_name=sale.item_name,
                quantity=-sale.quantity_sold,
                value=sale.total,
                note=f"Sold by {sale.sold_by}",
                performed_by=sale.sold_by,
            )
            for sale in InventoryService.completed_sales(inventory.inventory_name, sales)
            if sale.year == inventory.year
        )

        dated = sorted((r for r in rows if r.date is not None), key=lambda r: r.date, reverse=True)
        undated = [r for r in rows if r.date is None]
        return dated + undated

    @staticmethod
    def overview(inventory: Inventory) -> InventoryOverview:
        return InventoryOverview(
            inventory_name=inventory.inventory_name,
            year=inventory.year,
            created_at=inventory.created_at,
            stats=InventoryService.inventory_stats(inventory),
        )

    @staticmethod
    def inventory_detail(inventory: Inventory, sales: Iterable[SaleRecord]) -> InventoryDetail:
        sales = list(sales)
        inventory_sales = InventoryService.completed_sales(inventory.inventory_name, sales)
        return InventoryDetail(
            inventory_name=inventory.inventory_name,
            year=inventory.year,
            created_at=inventory.created_at,
            stats=InventoryService.inventory_stats(inventory),
            sales=inventory_sales,
            sales_value=sum((sale.total for sale in inventory_sales), ZERO),
            stock_history=InventoryService.stock_history(inventory, sales),
        )

    @staticmethod
    def find_inventory(inventories: Iterable[Inventory], name: str) -> Optional[Inventory]:
        for inventory in inventories:
            if inventory.inventory_name == name:
                return inventory
        return None
