"""Centralized Enum Definitions"""

import enum


# Domain 1: Billing
class BillingCycle(str, enum.Enum):
    """School-wide tuition periodization"""
    MONTHLY = "MONTHLY"
    TERMLY = "TERMLY"

    @classmethod
    def _missing_(cls, value):
        # The desktop app has written both 'MONTHLY' and 'monthly'
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class PaymentStatusLabel(str, enum.Enum):
    """Coarse payment status shown next to a balance"""
    PAID_IN_FULL = "Paid in Full"
    PARTIAL_PAYMENT = "Partial Payment"
    OUTSTANDING = "Outstanding"


# Domain 2: Inventory
class SaleStatus(str, enum.Enum):
    """Sale record status"""
    COMPLETED = "completed"
    REVERSED = "reversed"


class StockActionType(str, enum.Enum):
    """Stock log action types written by the desktop app"""
    INITIAL_STOCK = "Initial Stock"
    RESTOCK = "Restock"
    CORRECTION = "Correction"


class StockHistoryType(str, enum.Enum):
    """Row kinds in a merged stock history"""
    RESTOCK = "restock"
    SALE = "sale"


# Domain 3: Mirror
class MirrorCollection(str, enum.Enum):
    """Firestore collections mirrored from the desktop app"""
    STUDENTS = "students"
    SETTINGS = "settings"
    EXPENSES = "expenses"
    EXTRA_BILLING = "extraBilling"
    OUTSTANDING_STUDENTS = "outstandingStudents"
    INVENTORIES = "inventories"
    SALES = "sales"
    STAFF = "staff"
    DELETED_STAFF = "deletedStaff"
    STAFF_LOGS = "staffLogs"
