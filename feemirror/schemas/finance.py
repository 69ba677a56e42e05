from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from feemirror.models.enums import BillingCycle
from feemirror.schemas.base import Currency, Flag, LenientDate, LenientDatetime, MirrorDocument, Text
from feemirror.schemas.billing import FeeCollectionSummary, PaymentStatus
from feemirror.utils.values import ZERO, to_bool


class Expense(MirrorDocument):
    id: Text = ""
    description: Text = ""
    amount: Currency = ZERO
    date: LenientDate = None
    category: Text = ""
    receipt_number: Text = ""
    notes: Text = ""
    is_reversed: Flag = False
    reversed_at: LenientDatetime = None
    reversal_reason: Text = ""

    @model_validator(mode="before")
    @classmethod
    def merge_legacy_reversed_flag(cls, data):
        # Older desktop builds wrote `reversed` instead of `isReversed`
        if isinstance(data, dict) and to_bool(data.get("reversed")) and not data.get("isReversed"):
            return {**data, "isReversed": True}
        return data


class ExtraBilling(MirrorDocument):
    id: Text = ""
    description: Text = ""
    amount: Currency = ZERO
    date: LenientDate = None


class OutstandingStudent(MirrorDocument):
    """A row of the desktop app's pre-calculated outstanding list"""
    id: Text = ""
    full_name: Text = ""
    class_name: Text = ""
    parent_contact: Text = ""
    class_group: Text = ""
    admission_date: LenientDate = None
    has_transport: Flag = False
    transport_fee: Currency = ZERO
    outstanding_amount: Currency = ZERO
    last_updated: LenientDatetime = None


class ExpenseSummary(BaseModel):
    expenses: List[Expense]
    total: Decimal
    reversed_count: int


class ExtraBillingSummary(BaseModel):
    records: List[ExtraBilling]
    total: Decimal


class PrecalculatedOutstandingRow(BaseModel):
    student: OutstandingStudent
    class_group_name: Optional[str] = None
    status: PaymentStatus


class PrecalculatedOutstandingReport(BaseModel):
    billing_cycle: Optional[BillingCycle] = None
    total_outstanding: Decimal
    student_count: int
    students: List[PrecalculatedOutstandingRow]


class DashboardSummary(BaseModel):
    """Headline figures for the dashboard landing page"""
    total_students: int
    total_expenses: Decimal
    total_extra_billing: Decimal
    total_outstanding: Decimal
    recomputed_outstanding: Decimal
    fee_collections: FeeCollectionSummary
    billing_cycle: Optional[BillingCycle] = None
    settings_loaded: bool = False
    unresolved_class_groups: List[str] = Field(default_factory=list)
    snapshot_version: int = 0
    generated_at: datetime
