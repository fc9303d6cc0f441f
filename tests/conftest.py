"""
Shared fixtures: temporary local stores, a controllable clock and an
in-memory stand-in for the Supabase async client.
"""

from datetime import datetime, timedelta, timezone

import pytest
from postgrest.exceptions import APIError

from staffdir.stores.kv_store import LocalKeyValueStore
from staffdir.stores.sqlite_store import SQLiteRecordStore
from staffdir.stores.supabase_store import SupabaseRecordStore


class SteppingClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        self.current = self.current + self.step
        return self.current


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Subset of the PostgREST request builder used by the hosted store."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.op = None
        self.payload = None
        self.count_mode = None
        self.filters = []
        self.orders = []

    def select(self, *columns, count=None):
        self.op = "select"
        self.count_mode = count
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload if isinstance(payload, list) else [payload]
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def _matches(self, row):
        return all(check(row) for check in self.filters)

    async def execute(self):
        self.client.calls.append((self.op, self.table))
        error = self.client.fail_on.get(self.op)
        if error is not None:
            raise error

        rows = self.client.tables.setdefault(self.table, [])

        if self.op == "select":
            selected = [dict(row) for row in rows if self._matches(row)]
            for column, desc in reversed(self.orders):
                selected.sort(key=lambda row: row[column], reverse=desc)
            count = len(selected) if self.count_mode else None
            return FakeResponse(selected, count)

        if self.op == "insert":
            inserted = []
            for item in self.payload:
                if self.client.unique_constraint and any(
                    (row["name"], row["designation"], row["department"]) ==
                    (item["name"], item["designation"], item["department"])
                    for row in rows
                ):
                    raise APIError({"message": "duplicate key value violates unique constraint",
                                    "code": "23505", "hint": None, "details": None})
                row = {"id": self.client.next_id, "updated_at": None, "photo_url": None}
                row.update(item)
                self.client.next_id += 1
                rows.append(row)
                inserted.append(dict(row))
            for _ in inserted:
                self.client.notify(self.table, "INSERT")
            return FakeResponse(inserted)

        if self.op == "delete":
            removed = [row for row in rows if self._matches(row)]
            self.client.tables[self.table] = [row for row in rows if not self._matches(row)]
            for _ in removed:
                self.client.notify(self.table, "DELETE")
            return FakeResponse([dict(row) for row in removed])

        raise AssertionError(f"Query executed without an operation: {self.op}")


class FakeChannel:
    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.handlers = []
        self.subscribed = False

    def on_postgres_changes(self, event, callback, table="*", schema="public", filter=None):
        self.handlers.append((event, table, callback))
        return self

    async def subscribe(self, callback=None):
        self.subscribed = True
        return self


class FakeSupabaseClient:
    """In-memory async client: tables, request builder and realtime channels."""

    def __init__(self):
        self.tables = {"employees": []}
        self.next_id = 1
        self.calls = []
        self.fail_on = {}
        self.unique_constraint = False
        self.channels = []

    def table(self, name):
        return FakeQuery(self, name)

    def channel(self, name):
        channel = FakeChannel(self, name)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel):
        channel.subscribed = False
        if channel in self.channels:
            self.channels.remove(channel)

    def notify(self, table, event_type):
        for channel in list(self.channels):
            if not channel.subscribed:
                continue
            for event, handler_table, callback in channel.handlers:
                if handler_table in (table, "*") and event in (event_type, "*"):
                    callback({"data": {"type": event_type, "table": table}})

    def seed(self, name, designation, department, created_at, photo_url=None):
        """Insert a row directly, bypassing the pre-insert duplicate check."""
        row = {
            "id": self.next_id,
            "name": name,
            "designation": designation,
            "department": department,
            "created_at": created_at,
            "photo_url": photo_url,
            "updated_at": None,
        }
        self.next_id += 1
        self.tables["employees"].append(row)
        return row


def api_error(code, message="backend error"):
    return APIError({"message": message, "code": code, "hint": None, "details": None})


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def sqlite_store(tmp_path, clock):
    return SQLiteRecordStore(str(tmp_path / "employees.db"), clock=clock)


@pytest.fixture
def kv_store(tmp_path, clock):
    return LocalKeyValueStore(str(tmp_path / "employees.json"), clock=clock)


@pytest.fixture
def fake_client():
    return FakeSupabaseClient()


@pytest.fixture
def supabase_store(fake_client, clock):
    return SupabaseRecordStore(fake_client, clock=clock)
