"""
Employee record types shared by every store backend.
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


# Columns persisted by every backend, in table order
EMPLOYEE_COLUMNS = ("id", "name", "designation", "department", "photo_url", "created_at", "updated_at")


@dataclass(frozen=True)
class EmployeeRecord:
    id: int
    name: str
    designation: str
    department: str
    created_at: str
    photo_url: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def identity_key(self) -> Tuple[str, str, str]:
        """Key used for uniqueness checks and duplicate reconciliation."""
        return (self.name, self.designation, self.department)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "EmployeeRecord":
        """Build a record from a backend row, ignoring unknown columns."""
        return cls(
            id=int(row["id"]),
            name=row["name"],
            designation=row["designation"],
            department=row["department"],
            created_at=str(row["created_at"]),
            photo_url=row.get("photo_url"),
            updated_at=row.get("updated_at"),
        )


@dataclass(frozen=True)
class EmployeeDraft:
    """Validated, trimmed input for a new record (no id or timestamp yet)."""
    name: str
    designation: str
    department: str
    photo_url: Optional[str] = None

    @property
    def identity_key(self) -> Tuple[str, str, str]:
        return (self.name, self.designation, self.department)


@dataclass(frozen=True)
class DedupeResult:
    removed: int
    message: str


def newest_first(records: List[EmployeeRecord]) -> List[EmployeeRecord]:
    """Order records by creation time descending, newer id first on ties."""
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """Fixed-width ISO-8601 text so lexical and chronological order agree."""
    return moment.isoformat(timespec="microseconds")
