"""
Embedded SQLite record store.
Does not enforce identity-key uniqueness.
"""

import asyncio
import sqlite3
from datetime import datetime
from typing import Callable, List, Optional

from ..core.db import get_db, health_check, init_db
from ..core.errors import BackendUnavailable
from ..core.schema import EmployeeRecord, iso_timestamp, utc_now
from ..core.validation import validate_new_employee
from ..util.logging import logger
from .base import IRecordStore


class SQLiteRecordStore(IRecordStore):
    """Record store backed by a local SQLite file."""

    backend_name = "sqlite"

    def __init__(self, db_path: str, clock: Callable[[], datetime] = utc_now):
        self.db_path = db_path
        self._clock = clock
        try:
            init_db(self.db_path)
        except (sqlite3.Error, OSError) as e:
            logger.log_employee_operation("init", self.backend_name, {"db_path": db_path, "error": str(e)},
                                          status="failed")
            raise BackendUnavailable(f"Cannot open employee database at {db_path}: {e}") from e

    async def add(self, name: str, designation: str, department: str,
                  photo_url: Optional[str] = None) -> EmployeeRecord:
        draft = validate_new_employee(name, designation, department, photo_url)
        created_at = iso_timestamp(self._clock())
        try:
            record = await asyncio.to_thread(self._insert, draft, created_at)
        except (sqlite3.Error, OSError) as e:
            logger.log_employee_operation("add", self.backend_name, {"error": str(e)}, status="failed")
            raise BackendUnavailable(f"Failed to add employee: {e}") from e

        logger.log_employee_operation("add", self.backend_name, {"id": record.id, "name": record.name})
        return record

    def _insert(self, draft, created_at: str) -> EmployeeRecord:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO employees (name, designation, department, photo_url, created_at) VALUES (?, ?, ?, ?, ?)",
                (draft.name, draft.designation, draft.department, draft.photo_url, created_at)
            )
            conn.commit()
            return EmployeeRecord(
                id=cursor.lastrowid,
                name=draft.name,
                designation=draft.designation,
                department=draft.department,
                created_at=created_at,
                photo_url=draft.photo_url,
            )

    async def load_all(self) -> List[EmployeeRecord]:
        try:
            return await asyncio.to_thread(self._select_all)
        except Exception as e:
            logger.log_employee_operation("load_all", self.backend_name, {"error": str(e)}, status="degraded")
            return []

    def _select_all(self) -> List[EmployeeRecord]:
        with get_db(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM employees ORDER BY created_at DESC, id DESC")
            return [EmployeeRecord.from_row(dict(row)) for row in cursor.fetchall()]

    async def delete_one(self, record_id: int) -> None:
        deleted = await self._execute("delete", "DELETE FROM employees WHERE id = ?", (record_id,))
        logger.log_employee_operation("delete", self.backend_name, {"id": record_id, "deleted": deleted})

    async def clear_all(self) -> None:
        deleted = await self._execute("clear", "DELETE FROM employees", ())
        logger.log_employee_operation("clear", self.backend_name, {"deleted": deleted})

    async def _execute(self, operation: str, statement: str, params: tuple) -> int:
        def run() -> int:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(statement, params)
                conn.commit()
                return cursor.rowcount

        try:
            return await asyncio.to_thread(run)
        except (sqlite3.Error, OSError) as e:
            logger.log_employee_operation(operation, self.backend_name, {"error": str(e)}, status="failed")
            raise BackendUnavailable(f"Failed to {operation} employees: {e}") from e

    async def health_check(self) -> bool:
        return await asyncio.to_thread(health_check, self.db_path)
