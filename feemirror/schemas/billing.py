from typing import List, Optional
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field

from feemirror.models.enums import BillingCycle, PaymentStatusLabel


class PaymentStatus(BaseModel):
    status: PaymentStatusLabel
    color: str
    icon: str

    model_config = ConfigDict(frozen=True)


class StudentBalance(BaseModel):
    """Recomputed balance for one student, with the stored figure alongside for comparison"""
    student_id: str
    full_name: str
    class_name: str = ""
    class_group: str = ""
    class_group_name: Optional[str] = None
    billing_cycle: BillingCycle
    has_transport: bool = False
    transport_fee: Decimal = Decimal("0")
    school_fees_outstanding: Decimal
    transport_outstanding: Decimal
    total_outstanding: Decimal
    stored_outstanding: Decimal
    total_paid: Optional[Decimal] = None
    status: PaymentStatus
    warnings: List[str] = Field(default_factory=list)


class FeeCollectionSummary(BaseModel):
    """Fees collected in the current calendar month"""
    year: int
    month: int
    month_name: str
    tuition_collected: Decimal
    transport_collected: Decimal
    total_collected: Decimal


class OutstandingReport(BaseModel):
    billing_cycle: BillingCycle
    total_outstanding: Decimal
    student_count: int
    students: List[StudentBalance]
    unresolved_class_groups: List[str] = Field(default_factory=list)
