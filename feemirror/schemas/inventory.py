from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, Field

from feemirror.models.enums import StockHistoryType
from feemirror.schemas.base import Currency, LenientDatetime, MirrorDocument, OptionalText, PeriodNumber, Text
from feemirror.utils.values import ZERO, as_record_list, to_decimal, to_int


def _quantity(value) -> int:
    number = to_int(value)
    if number is None:
        return int(to_decimal(value))
    return number


Quantity = Annotated[int, BeforeValidator(_quantity)]


class StockLogEntry(MirrorDocument):
    id: Text = ""
    date: LenientDatetime = None
    quantity_change: Quantity = 0
    action_type: Text = ""
    notes: Text = ""
    performed_by: OptionalText = None
    year: PeriodNumber = None


class InventoryItem(MirrorDocument):
    item_name: Text = ""
    quantity: Quantity = 0
    default_price: Currency = ZERO
    low_stock_threshold: PeriodNumber = None
    stock_log: Annotated[List[StockLogEntry], BeforeValidator(as_record_list)] = Field(default_factory=list)


class Inventory(MirrorDocument):
    id: Text = ""
    inventory_name: Text = ""
    created_at: LenientDatetime = None
    year: PeriodNumber = None
    items: Annotated[List[InventoryItem], BeforeValidator(as_record_list)] = Field(default_factory=list)


class SaleRecord(MirrorDocument):
    id: Text = ""
    inventory_name: Text = ""
    item_name: Text = ""
    quantity_sold: Quantity = 0
    unit_price: Currency = ZERO
    total: Currency = ZERO
    sold_at: LenientDatetime = None
    sold_by: Text = ""
    year: PeriodNumber = None
    status: Text = ""
    reversed_at: LenientDatetime = None
    reversed_by: OptionalText = None
    reversal_reason: OptionalText = None


class InventoryStats(BaseModel):
    total_items: int
    total_quantity: int
    total_value: Decimal
    low_stock_count: int
    out_of_stock_count: int


class StockHistoryRow(BaseModel):
    type: StockHistoryType
    date: Optional[datetime] = None
    item_name: str
    quantity: int
    value: Optional[Decimal] = None
    note: str
    performed_by: OptionalText = None


class InventoryOverview(BaseModel):
    inventory_name: str
    year: Optional[int] = None
    created_at: Optional[datetime] = None
    stats: InventoryStats


class InventoryDetail(InventoryOverview):
    sales: List[SaleRecord]
    sales_value: Decimal
    stock_history: List[StockHistoryRow]
