"""Keeps the snapshot store in step with Firestore."""

import asyncio
import json
from pathlib import Path
from typing import Dict, Iterable, Optional

from feemirror.config import settings
from feemirror.core.logging import get_logger
from feemirror.models.enums import MirrorCollection
from feemirror.services.firestore_client import FirestoreClient, FirestoreError
from feemirror.services.snapshot_store import SnapshotStore

logger = get_logger(__name__)


class MirrorSync:
    """
    Polls every mirrored collection and replaces changed snapshots.

    A collection that fails to load keeps its previous snapshot; an outage
    never blanks the dashboard.
    """

    def __init__(
        self,
        store: SnapshotStore,
        client: FirestoreClient,
        collections: Iterable[MirrorCollection] = tuple(MirrorCollection),
        interval: Optional[float] = None,
    ) -> None:
        self.store = store
        self.client = client
        self.collections = list(collections)
        self.interval = settings.MIRROR_POLL_SECONDS if interval is None else interval
        self._task: Optional[asyncio.Task] = None

    async def sync_once(self) -> Dict[str, bool]:
        """Poll each collection once; returns which collections changed."""
        changed: Dict[str, bool] = {}
        for collection in self.collections:
            try:
                documents = await self.client.list_documents(collection.value)
            except FirestoreError as exc:
                logger.warning(
                    "Collection sync failed; keeping previous snapshot",
                    extra={"collection": collection.value, "error": str(exc)},
                )
                continue
            changed[collection.value] = self.store.replace(collection, documents)
        return changed

    async def run(self) -> None:
        logger.info(
            "Mirror sync started",
            extra={"project_id": self.client.project_id, "interval": self.interval},
        )
        while True:
            try:
                await self.sync_once()
            except Exception:
                logger.exception("Mirror sync pass failed; retrying next interval")
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        await self.client.aclose()
        logger.info("Mirror sync stopped")


def load_seed_file(path: str, store: SnapshotStore) -> int:
    """
    Load a JSON export of the form {"<collection>": [documents, ...]}.

    Unknown collection names are skipped. Returns the number of collections loaded.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Seed file {path} must contain a JSON object")

    known = {collection.value for collection in MirrorCollection}
    loaded = 0
    for name, documents in data.items():
        if name not in known:
            logger.warning("Seed file names an unknown collection", extra={"collection": name})
            continue
        store.replace(name, documents)
        loaded += 1
    logger.info("Seed file loaded", extra={"path": path, "collections": loaded})
    return loaded
