"""
Duplicate reconciliation planning.
"""

from staffdir.core.dedupe import group_by_identity, plan_dedupe
from staffdir.core.schema import EmployeeRecord


def make_record(record_id, name, created_at, designation="Engineer", department="R&D"):
    return EmployeeRecord(
        id=record_id,
        name=name,
        designation=designation,
        department=department,
        created_at=created_at,
    )


def test_groups_of_one_three_and_two():
    records = [
        make_record(1, "Solo", "2024-01-01T00:00:01.000000+00:00"),
        make_record(2, "Ana", "2024-01-01T00:00:02.000000+00:00"),
        make_record(3, "Ana", "2024-01-01T00:00:05.000000+00:00"),
        make_record(4, "Ana", "2024-01-01T00:00:03.000000+00:00"),
        make_record(5, "Ben", "2024-01-01T00:00:06.000000+00:00"),
        make_record(6, "Ben", "2024-01-01T00:00:04.000000+00:00"),
    ]

    plan = plan_dedupe(records)

    assert len(plan.remove) == 3
    assert sorted(plan.remove_ids) == [2, 4, 6]
    assert sorted(r.id for r in plan.keep) == [1, 3, 5]
    assert plan.duplicate_groups == {
        ("Ana", "Engineer", "R&D"): 3,
        ("Ben", "Engineer", "R&D"): 2,
    }
    assert plan.summary() == "Successfully removed 3 duplicate employees"


def test_survivor_is_latest_regardless_of_input_order():
    records = [
        make_record(10, "Ana", "2024-01-03T00:00:00.000000+00:00"),
        make_record(11, "Ana", "2024-01-01T00:00:00.000000+00:00"),
        make_record(12, "Ana", "2024-01-02T00:00:00.000000+00:00"),
    ]

    plan = plan_dedupe(list(reversed(records)))

    assert [r.id for r in plan.keep] == [10]
    assert sorted(plan.remove_ids) == [11, 12]


def test_identical_timestamps_keep_higher_id():
    stamp = "2024-01-01T00:00:00.000000+00:00"
    plan = plan_dedupe([make_record(7, "Ana", stamp), make_record(8, "Ana", stamp)])

    assert [r.id for r in plan.keep] == [8]
    assert plan.remove_ids == [7]


def test_second_pass_removes_nothing():
    records = [
        make_record(1, "Ana", "2024-01-01T00:00:01.000000+00:00"),
        make_record(2, "Ana", "2024-01-01T00:00:02.000000+00:00"),
    ]

    first = plan_dedupe(records)
    second = plan_dedupe(first.keep)

    assert len(first.remove) == 1
    assert second.remove == []
    assert second.summary() == "No duplicates found"


def test_empty_snapshot():
    plan = plan_dedupe([])
    assert plan.remove == []
    assert plan.summary() == "No duplicates found"


def test_key_uses_all_three_fields():
    records = [
        make_record(1, "Ana", "2024-01-01T00:00:01.000000+00:00", department="R&D"),
        make_record(2, "Ana", "2024-01-01T00:00:02.000000+00:00", department="Sales"),
        make_record(3, "Ana", "2024-01-01T00:00:03.000000+00:00", designation="Manager"),
    ]

    groups = group_by_identity(records)

    assert len(groups) == 3
    assert plan_dedupe(records).remove == []
