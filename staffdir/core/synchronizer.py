"""
Synchronizer: owns one record store for the process lifetime and keeps the
in-memory employee list current.

Refreshes come from two producers, caller-triggered re-fetches after local
mutations and push notifications from the store. Both always deliver a full
snapshot, so the state cell simply keeps whichever arrived last.
"""

from typing import Callable, List, Optional

from ..util.logging import logger
from .errors import StoreError
from .schema import DedupeResult, EmployeeRecord

SnapshotListener = Callable[[List[EmployeeRecord]], None]


class SnapshotCell:
    """Holds the latest full employee snapshot; writers replace, never merge."""

    def __init__(self):
        self._records: List[EmployeeRecord] = []
        self.version = 0
        self._listeners: List[SnapshotListener] = []

    @property
    def records(self) -> List[EmployeeRecord]:
        return list(self._records)

    def replace(self, records: List[EmployeeRecord], source: str) -> None:
        self._records = list(records)
        self.version += 1
        logger.log_sync_event("snapshot", len(self._records), {"source": source, "version": self.version})
        for listener in list(self._listeners):
            try:
                listener(self.records)
            except Exception as e:
                logger.error(f"Snapshot listener failed: {e}")

    def add_listener(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


class Synchronizer:
    """Owner of the process-wide record store and its change subscription."""

    def __init__(self, store):
        self.store = store
        self.state = SnapshotCell()
        self._subscription = None
        self.started = False

    @classmethod
    async def start(cls, store=None) -> "Synchronizer":
        """Build the store (from configuration if not injected), seed state, subscribe."""
        if store is None:
            from .config import create_record_store
            store = await create_record_store()

        sync = cls(store)
        await sync.refresh(source="seed")

        if store.supports_subscriptions:
            sync._subscription = await store.subscribe_to_changes(sync._on_push)

        sync.started = True
        logger.log_sync_event("started", len(sync.employees), {"backend": store.backend_name})
        return sync

    @property
    def employees(self) -> List[EmployeeRecord]:
        return self.state.records

    @property
    def subscription(self):
        return self._subscription

    def add_listener(self, listener: SnapshotListener) -> None:
        self.state.add_listener(listener)

    def _on_push(self, records: List[EmployeeRecord]) -> None:
        self.state.replace(records, source="push")

    async def refresh(self, source: str = "refresh") -> List[EmployeeRecord]:
        """Re-fetch the full list and replace in-memory state."""
        records = await self.store.load_all()
        self.state.replace(records, source=source)
        return records

    async def add_employee(self, name: str, designation: str, department: str,
                           photo_url: Optional[str] = None) -> EmployeeRecord:
        record = await self.store.add(name, designation, department, photo_url)
        await self.refresh(source="add")
        return record

    async def delete_employee(self, record_id: int) -> None:
        await self.store.delete_one(record_id)
        await self.refresh(source="delete")

    async def clear_all(self) -> None:
        await self.store.clear_all()
        await self.refresh(source="clear")

    async def remove_duplicates(self) -> DedupeResult:
        if not self.store.supports_reconciliation:
            raise StoreError(f"Duplicate removal is not supported by the {self.store.backend_name} backend")
        result = await self.store.remove_duplicates()
        await self.refresh(source="dedupe")
        return result

    async def close(self) -> None:
        """Release the subscription and the store. Safe to call twice."""
        if self._subscription is not None:
            await self._subscription.close()
            self._subscription = None
        if self.started:
            await self.store.close()
            self.started = False
            logger.log_sync_event("stopped", details={"backend": self.store.backend_name})
