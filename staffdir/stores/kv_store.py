"""
Local key-value record store.

All records live under a single key in a JSON document on disk, the way a
browser keeps an app's data in local storage. Writes replace the whole
document atomically. Identity-key uniqueness is not enforced.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..core.errors import BackendUnavailable
from ..core.schema import EmployeeRecord, iso_timestamp, newest_first, utc_now
from ..core.validation import validate_new_employee
from ..util.logging import logger
from .base import IRecordStore

STORAGE_KEY = "employees"


def read_document(path: Path) -> Dict[str, Any]:
    """Read the storage document, returning an empty one when the file is missing."""
    if not path.exists():
        return {"next_id": 1, STORAGE_KEY: []}
    with path.open("r", encoding="utf-8") as handle:
        document = json.load(handle)
    if not isinstance(document.get(STORAGE_KEY), list):
        raise ValueError(f"Invalid storage document in {path}")
    return document


def atomic_write_json(path: Path, document: Dict[str, Any]) -> None:
    """Atomically write *document* into *path* through a per-call temp file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, prefix=path.name + ".", suffix=".tmp", delete=False
    ) as handle:
        tmp_path = Path(handle.name)
        handle.write(json.dumps(document, ensure_ascii=False, indent=2, sort_keys=True))
        handle.flush()
        os.fsync(handle.fileno())
    try:
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


class LocalKeyValueStore(IRecordStore):
    """Record store persisted as one JSON document on the local filesystem."""

    backend_name = "local"

    def __init__(self, path: str, clock: Callable[[], datetime] = utc_now):
        self.path = Path(path)
        self._clock = clock
        # Serializes read-modify-write cycles across worker threads
        self._lock = threading.Lock()

    async def add(self, name: str, designation: str, department: str,
                  photo_url: Optional[str] = None) -> EmployeeRecord:
        draft = validate_new_employee(name, designation, department, photo_url)
        created_at = iso_timestamp(self._clock())

        def insert() -> EmployeeRecord:
            document = read_document(self.path)
            record = EmployeeRecord(
                id=int(document.get("next_id", 1)),
                name=draft.name,
                designation=draft.designation,
                department=draft.department,
                created_at=created_at,
                photo_url=draft.photo_url,
            )
            document[STORAGE_KEY].append(record.to_dict())
            document["next_id"] = record.id + 1
            atomic_write_json(self.path, document)
            return record

        record = await self._run("add", insert)
        logger.log_employee_operation("add", self.backend_name, {"id": record.id, "name": record.name})
        return record

    async def load_all(self) -> List[EmployeeRecord]:
        try:
            document = await asyncio.to_thread(read_document, self.path)
            return newest_first([EmployeeRecord.from_row(row) for row in document[STORAGE_KEY]])
        except Exception as e:
            logger.log_employee_operation("load_all", self.backend_name, {"error": str(e)}, status="degraded")
            return []

    async def delete_one(self, record_id: int) -> None:
        def delete() -> int:
            document = read_document(self.path)
            rows = document[STORAGE_KEY]
            remaining = [row for row in rows if int(row["id"]) != record_id]
            if len(remaining) != len(rows):
                document[STORAGE_KEY] = remaining
                atomic_write_json(self.path, document)
            return len(rows) - len(remaining)

        deleted = await self._run("delete", delete)
        logger.log_employee_operation("delete", self.backend_name, {"id": record_id, "deleted": deleted})

    async def clear_all(self) -> None:
        def clear() -> int:
            document = read_document(self.path)
            deleted = len(document[STORAGE_KEY])
            # next_id keeps counting so ids are never reused
            document[STORAGE_KEY] = []
            atomic_write_json(self.path, document)
            return deleted

        deleted = await self._run("clear", clear)
        logger.log_employee_operation("clear", self.backend_name, {"deleted": deleted})

    async def _run(self, operation: str, func):
        try:
            return await asyncio.to_thread(self._locked, func)
        except (OSError, ValueError) as e:
            logger.log_employee_operation(operation, self.backend_name, {"error": str(e)}, status="failed")
            raise BackendUnavailable(f"Failed to {operation} employees: {e}") from e

    def _locked(self, func):
        with self._lock:
            return func()

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(read_document, self.path)
            return True
        except (OSError, ValueError):
            return False
