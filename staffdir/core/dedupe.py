"""
Duplicate reconciliation planning.

Records sharing the same (name, designation, department) key are collapsed
down to the single most recently created one. Planning is kept separate from
deletion so every backend that supports reconciliation applies the same rule.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .schema import EmployeeRecord, newest_first


@dataclass
class DedupePlan:
    """Outcome of grouping a full snapshot by identity key."""
    total_records: int
    keep: List[EmployeeRecord] = field(default_factory=list)
    remove: List[EmployeeRecord] = field(default_factory=list)
    duplicate_groups: Dict[Tuple[str, str, str], int] = field(default_factory=dict)

    @property
    def remove_ids(self) -> List[int]:
        return [record.id for record in self.remove]

    def summary(self) -> str:
        if not self.remove:
            return "No duplicates found"
        return f"Successfully removed {len(self.remove)} duplicate employees"


def group_by_identity(records: List[EmployeeRecord]) -> Dict[Tuple[str, str, str], List[EmployeeRecord]]:
    """Group records by identity key, each group ordered newest first."""
    groups: Dict[Tuple[str, str, str], List[EmployeeRecord]] = {}
    for record in newest_first(records):
        groups.setdefault(record.identity_key, []).append(record)
    return groups


def plan_dedupe(records: List[EmployeeRecord]) -> DedupePlan:
    """Decide which records survive reconciliation and which are removed."""
    plan = DedupePlan(total_records=len(records))

    for key, members in group_by_identity(records).items():
        # First member is the most recently created
        plan.keep.append(members[0])
        if len(members) > 1:
            plan.duplicate_groups[key] = len(members)
            plan.remove.extend(members[1:])

    return plan
