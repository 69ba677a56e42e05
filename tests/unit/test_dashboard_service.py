"""Unit tests for DashboardService over a seeded snapshot."""

from decimal import Decimal

import pytest

from feemirror.models.enums import BillingCycle, PaymentStatusLabel
from feemirror.services.dashboard_service import DashboardService
from feemirror.services.snapshot_store import SnapshotStore


@pytest.fixture
def snapshot(documents):
    store = SnapshotStore()
    for collection, docs in documents.items():
        store.replace(collection, docs)
    return store.snapshot()


def test_fee_collection_summary(snapshot, today):
    summary = DashboardService.fee_collection_summary(snapshot, today=today)
    assert summary.month_name == "June"
    assert summary.tuition_collected == Decimal("130")
    assert summary.transport_collected == Decimal("20")
    assert summary.total_collected == Decimal("150")


def test_expense_total_excludes_reversed(snapshot):
    summary = DashboardService.expense_summary(snapshot)
    assert summary.total == Decimal("300")
    assert summary.reversed_count == 1
    assert len(summary.expenses) == 2


def test_extra_billing_summary(snapshot):
    assert DashboardService.extra_billing_summary(snapshot).total == Decimal("40")


@pytest.mark.parametrize("amount,label", [
    (Decimal("0"), PaymentStatusLabel.PAID_IN_FULL),
    (Decimal("199.99"), PaymentStatusLabel.PARTIAL_PAYMENT),
    (Decimal("200"), PaymentStatusLabel.OUTSTANDING),
])
def test_precalculated_status(amount, label):
    assert DashboardService.precalculated_status(amount).status == label


def test_outstanding_report_sorted_largest_first(snapshot, today):
    report = DashboardService.build_outstanding_report(snapshot, today=today)

    assert report.billing_cycle == BillingCycle.MONTHLY
    assert [b.student_id for b in report.students] == ["s2", "s4"]
    assert report.total_outstanding == Decimal("345")
    assert report.students[0].school_fees_outstanding == Decimal("250")
    assert report.students[0].transport_outstanding == Decimal("20")
    assert report.unresolved_class_groups == ["s3"]


def test_precalculated_report(snapshot):
    report = DashboardService.build_precalculated_report(snapshot)

    assert report.total_outstanding == Decimal("345")
    assert report.student_count == 2
    assert report.students[0].class_group_name == "Senior"
    assert report.students[0].status.status == PaymentStatusLabel.OUTSTANDING
    assert report.students[1].status.status == PaymentStatusLabel.PARTIAL_PAYMENT


def test_build_summary(snapshot, today, caplog):
    with caplog.at_level("WARNING", logger="feemirror.services.dashboard_service"):
        summary = DashboardService.build_summary(snapshot, today=today)

    assert summary.total_students == 4
    assert summary.total_expenses == Decimal("300")
    assert summary.total_extra_billing == Decimal("40")
    assert summary.total_outstanding == Decimal("345")
    assert summary.recomputed_outstanding == Decimal("345")
    assert summary.fee_collections.total_collected == Decimal("150")
    assert summary.settings_loaded is True
    assert summary.unresolved_class_groups == ["s3"]
    assert summary.snapshot_version == snapshot.version
    assert any("class groups" in r.getMessage() for r in caplog.records)


def test_build_summary_empty_snapshot(today):
    summary = DashboardService.build_summary(SnapshotStore().snapshot(), today=today)
    assert summary.total_students == 0
    assert summary.total_outstanding == 0
    assert summary.settings_loaded is False
    assert summary.billing_cycle is None
