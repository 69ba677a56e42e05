"""API Dependencies"""

from fastapi import Depends, Request

from feemirror.schemas.finance import DashboardSummary
from feemirror.services.snapshot_store import DebouncedRecompute, Snapshot, SnapshotStore


def get_store(request: Request) -> SnapshotStore:
    """The process-wide snapshot store created at startup"""
    return request.app.state.store


def get_snapshot(store: SnapshotStore = Depends(get_store)) -> Snapshot:
    """
    Parsed view of the latest snapshots.

    Each request works on one consistent snapshot even if the sync task
    replaces a collection mid-request.
    """
    return store.snapshot()


def get_dashboard_summary(request: Request) -> DashboardSummary:
    recompute: DebouncedRecompute[DashboardSummary] = request.app.state.dashboard
    return recompute.current()
