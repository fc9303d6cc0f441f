"""
Record store interfaces.
Every backend implements IRecordStore; the hosted backend additionally
implements IRealtimeRecordStore for change notification and reconciliation.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Union

from ..core.schema import DedupeResult, EmployeeRecord

# Receives the fresh full list after every change notification
ChangeCallback = Callable[[List[EmployeeRecord]], Union[None, Awaitable[None]]]


class IRecordStore(ABC):
    """Abstract interface for employee record persistence."""

    backend_name = "abstract"
    supports_subscriptions = False
    supports_reconciliation = False

    @abstractmethod
    async def add(self, name: str, designation: str, department: str,
                  photo_url: Optional[str] = None) -> EmployeeRecord:
        """Validate and persist a new record; the store assigns id and created_at."""
        pass

    @abstractmethod
    async def load_all(self) -> List[EmployeeRecord]:
        """Return every record newest first. Returns [] instead of raising."""
        pass

    @abstractmethod
    async def delete_one(self, record_id: int) -> None:
        """Delete a record by id. Unknown ids are a no-op."""
        pass

    @abstractmethod
    async def clear_all(self) -> None:
        """Remove every record."""
        pass

    async def health_check(self) -> bool:
        """Check that the backend is reachable."""
        return True

    async def count(self) -> int:
        return len(await self.load_all())

    async def close(self) -> None:
        """Release backend resources."""
        pass


class ISubscription(ABC):
    """Handle for an active change subscription."""

    @abstractmethod
    async def close(self) -> None:
        """Stop receiving change notifications."""
        pass


class IRealtimeRecordStore(IRecordStore):
    """Record store with push change notification and duplicate reconciliation."""

    supports_subscriptions = True
    supports_reconciliation = True

    @abstractmethod
    async def subscribe_to_changes(self, callback: ChangeCallback) -> ISubscription:
        """Re-fetch and deliver the full list to callback on every change."""
        pass

    @abstractmethod
    async def remove_duplicates(self) -> DedupeResult:
        """Collapse records sharing an identity key down to the newest one."""
        pass
