"""
Local key-value record store.
"""

import asyncio
import json

import pytest

from staffdir.core.errors import BackendUnavailable, ValidationError


def test_add_then_load(kv_store):
    record = asyncio.run(kv_store.add("Ana", "Engineer", "R&D"))

    assert asyncio.run(kv_store.load_all()) == [record]
    assert record.id == 1


def test_document_layout(kv_store):
    asyncio.run(kv_store.add("Ana", "Engineer", "R&D"))

    document = json.loads(kv_store.path.read_text(encoding="utf-8"))

    assert document["next_id"] == 2
    assert document["employees"][0]["name"] == "Ana"


def test_missing_file_loads_empty(kv_store):
    assert not kv_store.path.exists()
    assert asyncio.run(kv_store.load_all()) == []
    assert asyncio.run(kv_store.health_check()) is True


def test_newest_first(kv_store):
    older = asyncio.run(kv_store.add("Ana", "Engineer", "R&D"))
    newer = asyncio.run(kv_store.add("Ben", "Designer", "Product"))

    assert asyncio.run(kv_store.load_all()) == [newer, older]


def test_invalid_add_persists_nothing(kv_store):
    with pytest.raises(ValidationError):
        asyncio.run(kv_store.add("", "Engineer", "R&D"))
    assert not kv_store.path.exists()


def test_delete_and_unknown_delete(kv_store):
    ana = asyncio.run(kv_store.add("Ana", "Engineer", "R&D"))
    ben = asyncio.run(kv_store.add("Ben", "Designer", "Product"))

    asyncio.run(kv_store.delete_one(ana.id))
    asyncio.run(kv_store.delete_one(12345))

    assert asyncio.run(kv_store.load_all()) == [ben]


def test_ids_not_reused_after_clear(kv_store):
    asyncio.run(kv_store.add("Ana", "Engineer", "R&D"))
    asyncio.run(kv_store.clear_all())
    assert asyncio.run(kv_store.load_all()) == []

    record = asyncio.run(kv_store.add("Ben", "Designer", "Product"))
    assert record.id == 2


def test_corrupt_document(kv_store):
    kv_store.path.write_text("{not json", encoding="utf-8")

    assert asyncio.run(kv_store.load_all()) == []
    assert asyncio.run(kv_store.health_check()) is False
    with pytest.raises(BackendUnavailable):
        asyncio.run(kv_store.add("Ana", "Engineer", "R&D"))


def test_concurrent_adds_all_persist(kv_store):
    async def scenario():
        added = await asyncio.gather(*[kv_store.add(f"E{i}", "Engineer", "R&D") for i in range(20)])
        return added, await kv_store.load_all()

    added, stored = asyncio.run(scenario())

    assert sorted(record.id for record in added) == list(range(1, 21))
    assert sorted(record.id for record in stored) == list(range(1, 21))
    assert json.loads(kv_store.path.read_text(encoding="utf-8"))["next_id"] == 21
    assert [p.name for p in kv_store.path.parent.iterdir()] == [kv_store.path.name]
