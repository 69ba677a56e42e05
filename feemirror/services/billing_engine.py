"""
Billing calculation engine.

Pure functions over student snapshots: outstanding balances from enrollment
to today, a coarse payment status, and fees collected in the current
calendar month. Nothing here performs I/O or keeps state between calls.

Every function takes an optional keyword-only `today`; when omitted the
current date in the school timezone is used. Inputs may be schema
instances or raw upstream documents, and dirty data never raises: missing
lists are empty, bad numbers are zero and unreadable dates exclude the
records that depend on them.
"""

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from feemirror.core.logging import get_logger
from feemirror.models.enums import BillingCycle, PaymentStatusLabel
from feemirror.schemas.billing import PaymentStatus, StudentBalance
from feemirror.schemas.school import AppSettings
from feemirror.schemas.student import Student, coerce_student
from feemirror.utils.time import get_today
from feemirror.utils.values import ZERO, as_record_list

logger = get_logger(__name__)

# Term number -> calendar months it covers
TERM_MONTHS: Dict[int, Tuple[int, ...]] = {
    1: (1, 2, 3, 4),
    2: (5, 6, 7, 8),
    3: (9, 10, 11, 12),
}

# Transport is never billed in April, August or December
TRANSPORT_MONTHS = frozenset({1, 2, 3, 5, 6, 7, 9, 10, 11})

PAID_IN_FULL = PaymentStatus(status=PaymentStatusLabel.PAID_IN_FULL, color="green", icon="check-circle")
PARTIAL_PAYMENT = PaymentStatus(status=PaymentStatusLabel.PARTIAL_PAYMENT, color="yellow", icon="alert-triangle")
OUTSTANDING = PaymentStatus(status=PaymentStatusLabel.OUTSTANDING, color="red", icon="alert-triangle")


# --- input normalization ---


def coerce_billing_cycle(value: Any, default: Optional[BillingCycle] = BillingCycle.MONTHLY) -> Optional[BillingCycle]:
    if isinstance(value, BillingCycle):
        return value
    if value is None:
        return default
    try:
        return BillingCycle(value)
    except (ValueError, TypeError):
        return default


def coerce_settings(value: Any) -> Optional[AppSettings]:
    if value is None or isinstance(value, AppSettings):
        return value
    if isinstance(value, Mapping):
        try:
            return AppSettings.model_validate(value)
        except ValidationError:
            logger.warning("Unreadable settings document ignored")
    return None


def iter_students(students: Any) -> Iterable[Student]:
    for raw in as_record_list(students):
        yield coerce_student(raw)


# --- period arithmetic ---


def period_start_date(period: Optional[int], billing_cycle: BillingCycle, year: int) -> Optional[date]:
    """First day of a billing period in `year`; None for a period that does not exist."""
    if period is None:
        return None
    if billing_cycle is BillingCycle.MONTHLY:
        if 1 <= period <= 12:
            return date(year, period, 1)
        return None
    months = TERM_MONTHS.get(period)
    if months is None:
        return None
    return date(year, months[0], 1)


def months_in_period(period: Optional[int], billing_cycle: BillingCycle) -> int:
    if billing_cycle is BillingCycle.MONTHLY:
        return 1
    return len(TERM_MONTHS.get(period, ()))


def admission_period_start(student: Student) -> Optional[date]:
    if student.admission_date is None:
        return None
    return student.admission_date.replace(day=1)


def is_owed_period(period_start: Optional[date], admission_start: Optional[date], today: date) -> bool:
    """A period is owed from the admission month up to and including today."""
    if period_start is None or admission_start is None:
        return False
    return admission_start <= period_start <= today


def _in_calendar_month(moment: Optional[datetime], today: date) -> bool:
    return moment is not None and moment.year == today.year and moment.month == today.month


# --- tuition ---


def resolve_standard_fee(student: Student, settings: Optional[AppSettings]) -> Decimal:
    """The class group's monthly standard fee; an unknown group resolves to zero."""
    group = settings.get_class_group(student.class_group) if settings else None
    if group is None:
        logger.debug(
            "Class group not found, standard fee is 0",
            extra={"student_id": student.id, "class_group": student.class_group},
        )
        return ZERO
    return group.standard_fee


def has_unresolved_class_group(student: Student, settings: Optional[AppSettings]) -> bool:
    if student.custom_fee is not None:
        return False
    return settings is None or settings.get_class_group(student.class_group) is None


def find_unresolved_class_groups(students: Any, settings: Any) -> List[str]:
    """Ids of students billed against a class group that settings do not define."""
    settings = coerce_settings(settings)
    return [
        student.id
        for student in iter_students(students)
        if has_unresolved_class_group(student, settings)
    ]


def calculate_school_fees_outstanding(
    student: Any,
    billing_cycle: Any,
    settings: Any = None,
    *,
    today: Optional[date] = None,
) -> Decimal:
    """
    Tuition owed from the admission period to today.

    Each owed period contributes max(0, expected tuition - amount paid). The
    expected tuition is the custom fee when one is set, otherwise the class
    group's monthly standard fee scaled by the months in the period. Stored
    amountDue/outstandingAmount figures are not consulted.
    """
    student = coerce_student(student)
    cycle = coerce_billing_cycle(billing_cycle)
    settings = coerce_settings(settings)
    today = today or get_today()

    admission_start = admission_period_start(student)
    if admission_start is None:
        return ZERO

    # One figure per period, even if upstream wrote the same period twice
    paid_by_period: Dict[int, Decimal] = {}
    for payment in student.fee_payments:
        start = period_start_date(payment.period, cycle, today.year)
        if not is_owed_period(start, admission_start, today):
            continue
        paid_by_period[payment.period] = paid_by_period.get(payment.period, ZERO) + payment.amount_paid

    if not paid_by_period:
        return ZERO

    custom_fee = student.custom_fee
    standard_fee = ZERO if custom_fee is not None else resolve_standard_fee(student, settings)

    outstanding = ZERO
    for period, amount_paid in paid_by_period.items():
        if custom_fee is not None:
            tuition = custom_fee
        else:
            tuition = standard_fee * months_in_period(period, cycle)
        outstanding += max(ZERO, tuition - amount_paid)
    return outstanding


# --- transport ---


def calculate_transport_outstanding(student: Any, *, today: Optional[date] = None) -> Decimal:
    """
    Transport owed for billed months from the admission month to the current month.

    Skipped and waived months never count, nor do April, August and December.
    Only the month component of the admission date bounds the range. When
    several records share a month, the first record's amountDue is owed once
    and the amounts paid across all of them are summed.
    """
    student = coerce_student(student)
    if not student.has_transport or student.admission_date is None:
        return ZERO
    today = today or get_today()
    admission_month = student.admission_date.month

    by_month: Dict[int, Tuple[Decimal, Decimal]] = {}
    for payment in student.transport_payments:
        month = payment.month
        if month is None or payment.is_skipped or payment.is_waived:
            continue
        if month > today.month or month < admission_month or month not in TRANSPORT_MONTHS:
            continue
        due, paid = by_month.get(month, (payment.amount_due, ZERO))
        by_month[month] = (due, paid + payment.amount_paid)

    outstanding = sum((due - paid for due, paid in by_month.values()), ZERO)
    return max(ZERO, outstanding)


# --- combined figures ---


def calculate_outstanding_from_enrollment(
    student: Any,
    billing_cycle: Any,
    settings: Any = None,
    *,
    today: Optional[date] = None,
) -> Decimal:
    """School fees plus transport owed since enrollment: the headline "amount owed"."""
    student = coerce_student(student)
    today = today or get_today()
    return (
        calculate_school_fees_outstanding(student, billing_cycle, settings, today=today)
        + calculate_transport_outstanding(student, today=today)
    )


def has_recorded_payment(student: Any) -> bool:
    student = coerce_student(student)
    return any(p.amount_paid > 0 for p in student.fee_payments) or any(
        p.amount_paid > 0 for p in student.transport_payments
    )


def get_payment_status(
    student: Any,
    billing_cycle: Any,
    settings: Any = None,
    *,
    today: Optional[date] = None,
) -> PaymentStatus:
    student = coerce_student(student)
    outstanding = calculate_outstanding_from_enrollment(student, billing_cycle, settings, today=today)
    return status_for_outstanding(outstanding, has_recorded_payment(student))


def status_for_outstanding(outstanding: Decimal, has_paid_something: bool) -> PaymentStatus:
    if outstanding == 0:
        return PAID_IN_FULL
    if outstanding > 0 and has_paid_something:
        return PARTIAL_PAYMENT
    return OUTSTANDING


def calculate_stored_outstanding(
    student: Any,
    billing_cycle: Any,
    *,
    today: Optional[date] = None,
) -> Decimal:
    """
    The balance implied by the stored outstandingAmount fields.

    Kept for comparison with the recomputed figure; headline totals never use
    it. Under monthly billing the transport fee is removed from each stored
    tuition figure of a transport student unless that period is waived.
    """
    student = coerce_student(student)
    cycle = coerce_billing_cycle(billing_cycle)
    today = today or get_today()
    admission_start = admission_period_start(student)
    if admission_start is None:
        return ZERO

    subtract_transport = student.has_transport and cycle is BillingCycle.MONTHLY
    outstanding = ZERO
    seen = set()
    for payment in student.fee_payments:
        start = period_start_date(payment.period, cycle, today.year)
        if payment.period in seen or not is_owed_period(start, admission_start, today):
            continue
        seen.add(payment.period)
        if subtract_transport and not payment.is_transport_waived:
            outstanding += max(ZERO, payment.outstanding_amount - student.transport_fee)
        else:
            outstanding += payment.outstanding_amount

    if student.has_transport:
        seen_months = set()
        for payment in student.transport_payments:
            if payment.is_skipped or payment.is_waived or payment.month in seen_months:
                continue
            start = period_start_date(payment.month, BillingCycle.MONTHLY, today.year)
            if not is_owed_period(start, admission_start, today):
                continue
            seen_months.add(payment.month)
            if payment.outstanding_amount is not None:
                outstanding += payment.outstanding_amount
            else:
                outstanding += payment.amount_due - payment.amount_paid
    return outstanding


def build_student_balance(
    student: Any,
    billing_cycle: Any,
    settings: Any = None,
    *,
    today: Optional[date] = None,
) -> StudentBalance:
    """Everything the dashboard shows about one student's balance."""
    student = coerce_student(student)
    cycle = coerce_billing_cycle(billing_cycle)
    settings = coerce_settings(settings)
    today = today or get_today()

    school_fees = calculate_school_fees_outstanding(student, cycle, settings, today=today)
    transport = calculate_transport_outstanding(student, today=today)
    total = school_fees + transport

    warnings = []
    if student.admission_date is None:
        warnings.append("Admission date is missing or unreadable; no billing periods are counted")
    if has_unresolved_class_group(student, settings):
        warnings.append(f"Class group '{student.class_group}' is not defined in settings; tuition is treated as 0")

    group = settings.get_class_group(student.class_group) if settings else None
    return StudentBalance(
        student_id=student.id,
        full_name=student.full_name,
        class_name=student.class_name,
        class_group=student.class_group,
        class_group_name=group.name if group else None,
        billing_cycle=cycle,
        has_transport=student.has_transport,
        transport_fee=student.transport_fee,
        school_fees_outstanding=school_fees,
        transport_outstanding=transport,
        total_outstanding=total,
        stored_outstanding=calculate_stored_outstanding(student, cycle, today=today),
        total_paid=student.total_paid,
        status=status_for_outstanding(total, has_recorded_payment(student)),
        warnings=warnings,
    )


# --- current-month collections ---


def calculate_monthly_tuition_collections(
    students: Any,
    billing_cycle: Any = None,
    *,
    today: Optional[date] = None,
) -> Decimal:
    """
    Tuition collected this calendar month across all students.

    A payment counts when something was paid and it is either for the current
    month's period or was paid this month. Under monthly billing the transport
    fee is removed from a transport student's payment unless that period is
    transport-waived. Without a billing cycle nothing is subtracted.
    """
    cycle = coerce_billing_cycle(billing_cycle, default=None)
    today = today or get_today()

    total = ZERO
    for student in iter_students(students):
        subtract_transport = student.has_transport and cycle is BillingCycle.MONTHLY
        for payment in student.fee_payments:
            if payment.amount_paid <= 0:
                continue
            if payment.period != today.month and not _in_calendar_month(payment.paid_date, today):
                continue
            if subtract_transport and not payment.is_transport_waived:
                total += max(ZERO, payment.amount_paid - student.transport_fee)
            else:
                total += payment.amount_paid
    return total


def calculate_monthly_transport_collections(students: Any, *, today: Optional[date] = None) -> Decimal:
    """Transport collected this calendar month; skipped months are ignored."""
    today = today or get_today()

    total = ZERO
    for student in iter_students(students):
        if not student.has_transport:
            continue
        for payment in student.transport_payments:
            if payment.amount_paid <= 0 or payment.is_skipped:
                continue
            if payment.month == today.month or _in_calendar_month(payment.paid_date, today):
                total += payment.amount_paid
    return total
