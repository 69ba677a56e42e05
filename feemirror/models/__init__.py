"""Models Package - Export all enums for easy imports"""

from feemirror.models.enums import (
    BillingCycle,
    MirrorCollection,
    PaymentStatusLabel,
    SaleStatus,
    StockActionType,
    StockHistoryType,
)


__all__ = [
    # Billing
    "BillingCycle",
    "PaymentStatusLabel",
    # Inventory
    "SaleStatus",
    "StockActionType",
    "StockHistoryType",
    # Mirror
    "MirrorCollection",
]
