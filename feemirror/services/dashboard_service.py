import calendar
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from feemirror.core.logging import get_logger
from feemirror.schemas.billing import FeeCollectionSummary, OutstandingReport, PaymentStatus
from feemirror.schemas.finance import (
    DashboardSummary,
    Expense,
    ExpenseSummary,
    ExtraBilling,
    ExtraBillingSummary,
    OutstandingStudent,
    PrecalculatedOutstandingReport,
    PrecalculatedOutstandingRow,
)
from feemirror.services import billing_engine
from feemirror.services.snapshot_store import Snapshot
from feemirror.utils.time import get_today, get_utc_now
from feemirror.utils.values import ZERO

logger = get_logger(__name__)

# Pre-calculated rows below this amount are labelled as partly paid
PARTIAL_PAYMENT_CEILING = Decimal("200")


class DashboardService:
    """Headline figures derived from one snapshot"""

    @staticmethod
    def total_expenses(expenses: Iterable[Expense]) -> Decimal:
        """Sum of expenses, excluding reversed ones."""
        return sum((e.amount for e in expenses if not e.is_reversed), ZERO)

    @staticmethod
    def total_extra_billing(records: Iterable[ExtraBilling]) -> Decimal:
        return sum((r.amount for r in records), ZERO)

    @staticmethod
    def total_precalculated_outstanding(rows: Iterable[OutstandingStudent]) -> Decimal:
        return sum((r.outstanding_amount for r in rows), ZERO)

    @staticmethod
    def precalculated_status(amount: Decimal) -> PaymentStatus:
        """
        Coarse label for a pre-calculated row.

        The desktop app's list carries no payment history, so small balances
        are assumed to be partly paid.
        """
        if amount == 0:
            return billing_engine.PAID_IN_FULL
        if 0 < amount < PARTIAL_PAYMENT_CEILING:
            return billing_engine.PARTIAL_PAYMENT
        return billing_engine.OUTSTANDING

    @staticmethod
    def fee_collection_summary(
        snapshot: Snapshot,
        today: Optional[date] = None,
    ) -> FeeCollectionSummary:
        today = today or get_today()
        tuition = billing_engine.calculate_monthly_tuition_collections(
            snapshot.students, snapshot.billing_cycle, today=today
        )
        transport = billing_engine.calculate_monthly_transport_collections(snapshot.students, today=today)
        return FeeCollectionSummary(
            year=today.year,
            month=today.month,
            month_name=calendar.month_name[today.month],
            tuition_collected=tuition,
            transport_collected=transport,
            total_collected=tuition + transport,
        )

    @staticmethod
    def expense_summary(snapshot: Snapshot) -> ExpenseSummary:
        return ExpenseSummary(
            expenses=snapshot.expenses,
            total=DashboardService.total_expenses(snapshot.expenses),
            reversed_count=sum(1 for e in snapshot.expenses if e.is_reversed),
        )

    @staticmethod
    def extra_billing_summary(snapshot: Snapshot) -> ExtraBillingSummary:
        return ExtraBillingSummary(
            records=snapshot.extra_billing,
            total=DashboardService.total_extra_billing(snapshot.extra_billing),
        )

    @staticmethod
    def build_outstanding_report(snapshot: Snapshot, today: Optional[date] = None) -> OutstandingReport:
        """Recomputed balances of every student who owes something, largest first."""
        today = today or get_today()
        cycle = billing_engine.coerce_billing_cycle(snapshot.billing_cycle)
        balances = [
            billing_engine.build_student_balance(student, cycle, snapshot.settings, today=today)
            for student in snapshot.students
        ]
        owing = sorted(
            (b for b in balances if b.total_outstanding > 0),
            key=lambda b: b.total_outstanding,
            reverse=True,
        )
        return OutstandingReport(
            billing_cycle=cycle,
            total_outstanding=sum((b.total_outstanding for b in owing), ZERO),
            student_count=len(owing),
            students=owing,
            unresolved_class_groups=billing_engine.find_unresolved_class_groups(snapshot.students, snapshot.settings),
        )

    @staticmethod
    def build_precalculated_report(snapshot: Snapshot) -> PrecalculatedOutstandingReport:
        settings = snapshot.settings
        rows: List[PrecalculatedOutstandingRow] = []
        for row in snapshot.outstanding_students:
            group = settings.get_class_group(row.class_group) if settings else None
            rows.append(
                PrecalculatedOutstandingRow(
                    student=row,
                    class_group_name=group.name if group else None,
                    status=DashboardService.precalculated_status(row.outstanding_amount),
                )
            )
        return PrecalculatedOutstandingReport(
            billing_cycle=snapshot.billing_cycle,
            total_outstanding=DashboardService.total_precalculated_outstanding(snapshot.outstanding_students),
            student_count=len(rows),
            students=rows,
        )

    @staticmethod
    def build_summary(snapshot: Snapshot, today: Optional[date] = None) -> DashboardSummary:
        today = today or get_today()
        cycle = billing_engine.coerce_billing_cycle(snapshot.billing_cycle)
        recomputed = sum(
            (
                billing_engine.calculate_outstanding_from_enrollment(student, cycle, snapshot.settings, today=today)
                for student in snapshot.students
            ),
            ZERO,
        )
        unresolved = billing_engine.find_unresolved_class_groups(snapshot.students, snapshot.settings)
        if unresolved:
            logger.warning(
                "Students reference class groups missing from settings",
                extra={"student_ids": unresolved, "snapshot_version": snapshot.version},
            )

        summary = DashboardSummary(
            total_students=len(snapshot.students),
            total_expenses=DashboardService.total_expenses(snapshot.expenses),
            total_extra_billing=DashboardService.total_extra_billing(snapshot.extra_billing),
            total_outstanding=DashboardService.total_precalculated_outstanding(snapshot.outstanding_students),
            recomputed_outstanding=recomputed,
            fee_collections=DashboardService.fee_collection_summary(snapshot, today=today),
            billing_cycle=snapshot.billing_cycle,
            settings_loaded=snapshot.settings is not None,
            unresolved_class_groups=unresolved,
            snapshot_version=snapshot.version,
            generated_at=get_utc_now(),
        )
        logger.info(
            "Dashboard summary computed",
            extra={
                "snapshot_version": snapshot.version,
                "students": summary.total_students,
                "outstanding": str(summary.total_outstanding),
            },
        )
        return summary
