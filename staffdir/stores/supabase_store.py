"""
Hosted record store backed by Supabase.

Queries go through the PostgREST fluent builder of the async client; change
notification uses a realtime channel on the employees table. Backend errors
are translated into the store error taxonomy at this boundary.
"""

import asyncio
import inspect
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from ..core.config import EMPLOYEES_TABLE, REALTIME_CHANNEL
from ..core.dedupe import plan_dedupe
from ..core.errors import BackendUnavailable, DuplicateRecord, PermissionDenied, StoreError
from ..core.schema import DedupeResult, EmployeeRecord, iso_timestamp, utc_now
from ..core.validation import validate_new_employee
from ..util.logging import logger
from .base import ChangeCallback, IRealtimeRecordStore, ISubscription

# PostgREST / Postgres error codes
SCHEMA_MISSING_CODES = {"42P01", "PGRST205"}
PERMISSION_DENIED_CODE = "42501"
UNIQUE_VIOLATION_CODE = "23505"

DUPLICATE_MESSAGE = "Employee already exists with the same name, designation, and department"


def translate_error(exc: Exception, action: str) -> StoreError:
    """Map a client or transport exception onto the store error taxonomy."""
    if isinstance(exc, APIError):
        if exc.code in SCHEMA_MISSING_CODES:
            return BackendUnavailable(
                "Database table not found. Please run the schema.sql in your Supabase SQL Editor first."
            )
        if exc.code == PERMISSION_DENIED_CODE:
            return PermissionDenied("Permission denied. Please check your Supabase RLS policies.")
        if exc.code == UNIQUE_VIOLATION_CODE:
            return DuplicateRecord(DUPLICATE_MESSAGE)
        return BackendUnavailable(f"Failed to {action}: {exc.message}")
    return BackendUnavailable(f"Failed to {action}: {exc}")


def _event_type(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if isinstance(data, dict) and data.get("type"):
        return data["type"]
    return payload.get("eventType") or payload.get("type")


class ChangeSubscription(ISubscription):
    """
    Active realtime subscription on the employees table.

    Every change event triggers a full re-fetch delivered to the callback.
    Events arriving while a re-fetch is running collapse into one more
    re-fetch, so the callback always sees a complete snapshot.
    """

    def __init__(self, store: "SupabaseRecordStore", callback: ChangeCallback):
        self._store = store
        self._callback = callback
        self._loop = asyncio.get_running_loop()
        self._channel = None
        self._task: Optional[asyncio.Task] = None
        self._pending = False
        self.closed = False
        self.deliveries = 0

    async def open(self, channel_name: str) -> "ChangeSubscription":
        channel = self._store.client.channel(channel_name)
        channel.on_postgres_changes(
            "*",
            schema="public",
            table=self._store.table,
            callback=self._on_change,
        )
        await channel.subscribe()
        self._channel = channel
        logger.log_sync_event("subscribed", details={"channel": channel_name, "table": self._store.table})
        return self

    def _on_change(self, payload: Dict[str, Any]) -> None:
        if self.closed:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._schedule(payload)
        else:
            self._loop.call_soon_threadsafe(self._schedule, payload)

    def _schedule(self, payload: Dict[str, Any]) -> None:
        logger.log_sync_event("change_received", details={"event": _event_type(payload)})
        self._pending = True
        if self._task is None or self._task.done():
            self._task = self._loop.create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending and not self.closed:
            self._pending = False
            records = await self._store.load_all()
            try:
                result = self._callback(records)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.log_sync_event("callback", len(records), {"error": str(e)}, status="failed")
                continue
            self.deliveries += 1

    async def flush(self) -> None:
        """Wait until every scheduled re-fetch has been delivered."""
        await asyncio.sleep(0)
        while self._task is not None and not self._task.done():
            await self._task

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._channel is not None:
            await self._store.client.remove_channel(self._channel)
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._store._forget(self)
        logger.log_sync_event("unsubscribed", details={"deliveries": self.deliveries})


class SupabaseRecordStore(IRealtimeRecordStore):
    """Record store backed by a hosted Supabase table."""

    backend_name = "supabase"

    def __init__(self, client: AsyncClient, table: str = EMPLOYEES_TABLE,
                 clock: Callable[[], datetime] = utc_now, channel_name: str = REALTIME_CHANNEL):
        self.client = client
        self.table = table
        self.channel_name = channel_name
        self._clock = clock
        self._subscriptions: List[ChangeSubscription] = []

    @classmethod
    async def connect(cls, url: str, key: str, table: str = EMPLOYEES_TABLE) -> "SupabaseRecordStore":
        """Create the async client and wrap it in a store."""
        try:
            client = await acreate_client(url, key)
        except Exception as e:
            raise BackendUnavailable(f"Failed to connect to Supabase: {e}") from e
        logger.info(f"Supabase connection initialized: {url}")
        return cls(client, table=table)

    async def _execute(self, action: str, query):
        try:
            return await query.execute()
        except (APIError, httpx.HTTPError, OSError) as e:
            error = translate_error(e, action)
            logger.log_employee_operation(action.replace(" ", "_"), self.backend_name,
                                          {"error": str(error)}, status="failed")
            raise error from e

    async def add(self, name: str, designation: str, department: str,
                  photo_url: Optional[str] = None) -> EmployeeRecord:
        draft = validate_new_employee(name, designation, department, photo_url)

        # Not atomic with the insert; remove_duplicates repairs the race window
        existing = await self._execute(
            "check for duplicates",
            self.client.table(self.table)
            .select("id")
            .eq("name", draft.name)
            .eq("designation", draft.designation)
            .eq("department", draft.department),
        )
        if existing.data:
            logger.log_employee_operation("add", self.backend_name, {"name": draft.name}, status="rejected")
            raise DuplicateRecord(DUPLICATE_MESSAGE)

        payload = {
            "name": draft.name,
            "designation": draft.designation,
            "department": draft.department,
            "photo_url": draft.photo_url,
            "created_at": iso_timestamp(self._clock()),
        }
        response = await self._execute("add employee", self.client.table(self.table).insert(payload))
        if not response.data:
            raise BackendUnavailable("Failed to add employee: no row returned")

        record = EmployeeRecord.from_row(response.data[0])
        logger.log_employee_operation("add", self.backend_name, {"id": record.id, "name": record.name})
        return record

    async def _select_rows(self) -> Optional[List[Dict[str, Any]]]:
        """Raw rows newest first; None when the backend returned no result set."""
        response = await self._execute(
            "load employees",
            self.client.table(self.table).select("*").order("created_at", desc=True).order("id", desc=True),
        )
        return response.data

    async def _fetch_all(self) -> List[EmployeeRecord]:
        return [EmployeeRecord.from_row(row) for row in await self._select_rows() or []]

    async def load_all(self) -> List[EmployeeRecord]:
        try:
            return await self._fetch_all()
        except Exception as e:
            logger.log_employee_operation("load_all", self.backend_name, {"error": str(e)}, status="degraded")
            return []

    async def delete_one(self, record_id: int) -> None:
        await self._execute("delete employee", self.client.table(self.table).delete().eq("id", record_id))
        logger.log_employee_operation("delete", self.backend_name, {"id": record_id})

    async def clear_all(self) -> None:
        # PostgREST refuses an unfiltered delete
        await self._execute("clear employees", self.client.table(self.table).delete().neq("id", 0))
        logger.log_employee_operation("clear", self.backend_name)

    async def subscribe_to_changes(self, callback: ChangeCallback) -> ChangeSubscription:
        subscription = ChangeSubscription(self, callback)
        await subscription.open(self.channel_name)
        self._subscriptions.append(subscription)
        return subscription

    def _forget(self, subscription: ChangeSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    async def remove_duplicates(self) -> DedupeResult:
        logger.info("Starting duplicate removal")
        rows = await self._select_rows()
        if rows is None:
            return DedupeResult(removed=0, message="No employees found")
        plan = plan_dedupe([EmployeeRecord.from_row(row) for row in rows])

        for key, size in plan.duplicate_groups.items():
            logger.debug(f"Found {size} duplicates for: {'-'.join(key)}")

        if plan.remove_ids:
            await self._execute(
                "remove duplicates",
                self.client.table(self.table).delete().in_("id", plan.remove_ids),
            )

        logger.log_reconciliation(len(plan.duplicate_groups), len(plan.remove))
        return DedupeResult(removed=len(plan.remove), message=plan.summary())

    async def count(self) -> int:
        response = await self._execute("count employees", self.client.table(self.table).select("id", count="exact"))
        if response.count is not None:
            return response.count
        return len(response.data or [])

    async def health_check(self) -> bool:
        try:
            total = await self.count()
        except StoreError as e:
            logger.error(f"Supabase connection test failed: {e}")
            return False
        logger.info(f"Supabase connection successful, employee count: {total}")
        return True

    async def close(self) -> None:
        for subscription in list(self._subscriptions):
            await subscription.close()
        self._subscriptions.clear()
