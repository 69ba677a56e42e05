from typing import Annotated, Any, List

from pydantic import BeforeValidator, Field, ValidationError

from feemirror.core.logging import get_logger
from feemirror.schemas.base import (
    Currency,
    Flag,
    LenientDate,
    LenientDatetime,
    MirrorDocument,
    OptionalCurrency,
    PeriodNumber,
    Text,
)
from feemirror.utils.values import ZERO, as_record_list

logger = get_logger(__name__)


class FeePayment(MirrorDocument):
    """One billed tuition period (a month, or a term under termly billing)"""
    period: PeriodNumber = None
    amount_due: Currency = ZERO
    amount_paid: Currency = ZERO
    outstanding_amount: Currency = ZERO
    paid: Flag = False
    paid_date: LenientDatetime = None
    is_transport_waived: Flag = False


class TransportPayment(MirrorDocument):
    """One calendar month of transport billing"""
    month: PeriodNumber = None
    amount_due: Currency = ZERO
    amount_paid: Currency = ZERO
    outstanding_amount: OptionalCurrency = None
    paid: Flag = False
    paid_date: LenientDatetime = None
    is_skipped: Flag = False
    is_waived: Flag = False


class Student(MirrorDocument):
    id: Text = ""
    full_name: Text = ""
    class_name: Text = ""
    parent_contact: Text = ""
    class_group: Text = ""
    admission_date: LenientDate = None
    has_transport: Flag = False
    transport_fee: Currency = ZERO
    has_custom_fees: Flag = False
    custom_school_fee: Currency = ZERO
    total_paid: OptionalCurrency = None
    total_owed: OptionalCurrency = None
    fee_payments: Annotated[List[FeePayment], BeforeValidator(as_record_list)] = Field(default_factory=list)
    transport_payments: Annotated[List[TransportPayment], BeforeValidator(as_record_list)] = Field(default_factory=list)

    @property
    def custom_fee(self):
        """The custom tuition override, or None when the class-group fee applies."""
        if self.has_custom_fees and self.custom_school_fee:
            return self.custom_school_fee
        return None


def coerce_student(value: Any) -> Student:
    """
    Accept a Student or a raw upstream document.

    A document that cannot be validated at all becomes an empty Student,
    which contributes nothing to any total.
    """
    if isinstance(value, Student):
        return value
    try:
        return Student.model_validate(value if value is not None else {})
    except ValidationError as exc:
        logger.warning(
            "Unreadable student document ignored",
            extra={"error_count": exc.error_count()},
        )
        return Student()
