"""
In-memory mirror of upstream collections.

Upstream delivers whole collections; each delivery replaces the previous
snapshot of that collection. Listeners are told about every effective
change, and DebouncedRecompute turns a burst of changes into one
recomputation of derived figures.
"""

import asyncio
import hashlib
import json
from datetime import datetime
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from feemirror.core.logging import get_logger
from feemirror.models.enums import BillingCycle, MirrorCollection
from feemirror.schemas.base import MirrorDocument
from feemirror.schemas.finance import Expense, ExtraBilling, OutstandingStudent
from feemirror.schemas.inventory import Inventory, SaleRecord
from feemirror.schemas.school import AppSettings
from feemirror.schemas.staff import Staff, StaffLog
from feemirror.schemas.student import Student
from feemirror.utils.time import get_today, get_utc_now
from feemirror.utils.values import as_record_list

logger = get_logger(__name__)

T = TypeVar("T")

Listener = Callable[[str, int], None]

COLLECTION_SCHEMAS: Dict[str, Type[MirrorDocument]] = {
    MirrorCollection.STUDENTS.value: Student,
    MirrorCollection.SETTINGS.value: AppSettings,
    MirrorCollection.EXPENSES.value: Expense,
    MirrorCollection.EXTRA_BILLING.value: ExtraBilling,
    MirrorCollection.OUTSTANDING_STUDENTS.value: OutstandingStudent,
    MirrorCollection.INVENTORIES.value: Inventory,
    MirrorCollection.SALES.value: SaleRecord,
    MirrorCollection.STAFF.value: Staff,
    MirrorCollection.DELETED_STAFF.value: Staff,
    MirrorCollection.STAFF_LOGS.value: StaffLog,
}


class Snapshot(BaseModel):
    """Parsed, immutable view of every mirrored collection at one store version"""
    version: int = 0
    students: List[Student] = []
    settings: Optional[AppSettings] = None
    expenses: List[Expense] = []
    extra_billing: List[ExtraBilling] = []
    outstanding_students: List[OutstandingStudent] = []
    inventories: List[Inventory] = []
    sales: List[SaleRecord] = []
    staff: List[Staff] = []
    deleted_staff: List[Staff] = []
    staff_logs: List[StaffLog] = []

    model_config = ConfigDict(frozen=True)

    @property
    def billing_cycle(self) -> Optional[BillingCycle]:
        return self.settings.billing_cycle if self.settings else None


def _fingerprint(documents: List[Dict[str, Any]]) -> str:
    encoded = json.dumps(documents, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def _parse_documents(collection: str, documents: List[Dict[str, Any]]) -> List[MirrorDocument]:
    schema = COLLECTION_SCHEMAS.get(collection)
    if schema is None:
        return []
    parsed = []
    for document in documents:
        try:
            parsed.append(schema.model_validate(document))
        except ValidationError as exc:
            logger.warning(
                "Skipping unreadable document",
                extra={"collection": collection, "document_id": document.get("id"), "error_count": exc.error_count()},
            )
    return parsed


class SnapshotStore:
    """Latest whole-collection snapshot per upstream collection"""

    def __init__(self) -> None:
        self._documents: Dict[str, List[Dict[str, Any]]] = {}
        self._parsed: Dict[str, List[MirrorDocument]] = {}
        self._fingerprints: Dict[str, str] = {}
        self._listeners: List[Listener] = []
        self.updated_at: Dict[str, datetime] = {}
        self.version = 0

    def replace(self, collection: str, documents: Any) -> bool:
        """
        Replace a collection with a new snapshot.

        Returns False (and notifies nobody) when the content is unchanged.
        """
        collection = MirrorCollection(collection).value
        docs = [dict(document) for document in as_record_list(documents)]
        fingerprint = _fingerprint(docs)
        if self._fingerprints.get(collection) == fingerprint:
            return False

        self._documents[collection] = docs
        self._parsed[collection] = _parse_documents(collection, docs)
        self._fingerprints[collection] = fingerprint
        self.updated_at[collection] = get_utc_now()
        self.version += 1
        logger.info(
            "Collection snapshot replaced",
            extra={"collection": collection, "document_count": len(docs), "version": self.version},
        )

        for listener in list(self._listeners):
            listener(collection, self.version)
        return True

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def documents(self, collection: str) -> List[Dict[str, Any]]:
        return list(self._documents.get(MirrorCollection(collection).value, []))

    def has_collection(self, collection: str) -> bool:
        return MirrorCollection(collection).value in self._documents

    def _records(self, collection: MirrorCollection) -> list:
        return list(self._parsed.get(collection.value, []))

    def snapshot(self) -> Snapshot:
        settings_docs = self._records(MirrorCollection.SETTINGS)
        return Snapshot(
            version=self.version,
            students=self._records(MirrorCollection.STUDENTS),
            settings=settings_docs[0] if settings_docs else None,
            expenses=self._records(MirrorCollection.EXPENSES),
            extra_billing=self._records(MirrorCollection.EXTRA_BILLING),
            outstanding_students=self._records(MirrorCollection.OUTSTANDING_STUDENTS),
            inventories=self._records(MirrorCollection.INVENTORIES),
            sales=self._records(MirrorCollection.SALES),
            staff=self._records(MirrorCollection.STAFF),
            deleted_staff=self._records(MirrorCollection.DELETED_STAFF),
            staff_logs=self._records(MirrorCollection.STAFF_LOGS),
        )


class DebouncedRecompute(Generic[T]):
    """
    Recompute a derived value after upstream changes settle.

    Every change notification restarts a `delay`-second timer; the compute
    function runs once the timer expires. `current()` serves the cached
    value and recomputes synchronously if the cache predates the store or
    was computed on another school calendar day.
    """

    def __init__(self, store: SnapshotStore, compute: Callable[[Snapshot], T], delay: float = 1.0) -> None:
        self._store = store
        self._compute = compute
        self._delay = delay
        self._task: Optional[asyncio.Task] = None
        self._result: Optional[T] = None
        self._result_version = -1
        self._result_day = None
        self.runs = 0
        self._remove_listener = store.add_listener(self.notify)

    def notify(self, collection: str, version: int) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (sync caller): current() recomputes lazily
            return
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = loop.create_task(self._run_later())

    async def _run_later(self) -> None:
        await asyncio.sleep(self._delay)
        try:
            self.refresh()
        except Exception:
            logger.exception("Recomputation failed; keeping previous result")

    def refresh(self) -> T:
        snapshot = self._store.snapshot()
        day = get_today()
        self._result = self._compute(snapshot)
        self._result_version = snapshot.version
        self._result_day = day
        self.runs += 1
        return self._result

    def current(self) -> T:
        if self._result is None or self._result_version != self._store.version or self._result_day != get_today():
            return self.refresh()
        return self._result

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    async def aclose(self) -> None:
        self._remove_listener()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
