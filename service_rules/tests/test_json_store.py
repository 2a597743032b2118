"""
Unit tests for the JSON rule store.
"""

import json
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from service_rules.app.persistence.json_store import JsonRuleStore, to_iso
from shared.errors import PersistenceError, RuleNotFoundError

FIXED_NOW = datetime(2025, 9, 23, 8, 30, tzinfo=timezone.utc)


class TestJsonRuleStore:
    """Test cases for JsonRuleStore."""

    @pytest.fixture
    def data_file(self, tmp_path):
        return tmp_path / "data" / "rules.json"

    @pytest.fixture
    def store(self, data_file):
        return JsonRuleStore(str(data_file), clock=lambda: FIXED_NOW)

    def test_to_iso(self):
        assert to_iso(FIXED_NOW) == "2025-09-23T08:30:00.000Z"

    @pytest.mark.asyncio
    async def test_missing_file_reads_as_empty(self, store):
        document = await store.list_rules()

        assert document["rules"] == []
        assert document["meta"] == {"lastId": 0, "version": "1.0", "updatedAt": "2025-09-23T08:30:00.000Z"}

    @pytest.mark.asyncio
    async def test_corrupt_file_reads_as_empty(self, store, data_file):
        data_file.parent.mkdir(parents=True)
        data_file.write_text("{not json", encoding="utf-8")

        document = await store.list_rules()

        assert document["rules"] == []

    @pytest.mark.asyncio
    async def test_string_last_id_is_coerced(self, store, data_file):
        data_file.parent.mkdir(parents=True)
        data_file.write_text(json.dumps({"rules": [], "meta": {"lastId": "3"}}), encoding="utf-8")

        await store.create_rule({"name": "A"})

        assert (await store.list_rules())["meta"]["lastId"] == 4

    @pytest.mark.asyncio
    async def test_unparseable_last_id_is_reset(self, store, data_file):
        data_file.parent.mkdir(parents=True)
        data_file.write_text(json.dumps({"rules": [{"id": "r1"}], "meta": {"lastId": "many"}}), encoding="utf-8")

        assert (await store.list_rules())["meta"]["lastId"] == 1

    @pytest.mark.asyncio
    async def test_malformed_rule_entries_are_skipped(self, store, data_file):
        data_file.parent.mkdir(parents=True)
        data_file.write_text(json.dumps({"rules": ["junk", None, {"id": "r1", "name": "Kept"}]}), encoding="utf-8")

        document = await store.list_rules()
        assert document["rules"] == [{"id": "r1", "name": "Kept"}]
        assert (await store.get_rule("r1"))["name"] == "Kept"
        with pytest.raises(RuleNotFoundError):
            await store.get_rule("junk")

    @pytest.mark.asyncio
    async def test_create_applies_defaults(self, store, data_file):
        rule = await store.create_rule({})

        assert rule["name"] == "Untitled Rule"
        assert rule["status"] == "Draft"
        assert rule["priority"] == 50
        assert rule["contentSources"] == []
        assert rule["startDate"] == "2025-09-23T08:30:00.000Z"
        assert rule["endDate"] == "2025-12-22T08:30:00.000Z"
        assert rule["audience"] is None
        assert rule["createdAt"] == rule["updatedAt"]
        assert "contentFiles" not in rule

        stored = json.loads(data_file.read_text(encoding="utf-8"))
        assert stored["rules"] == [rule]
        assert stored["meta"]["lastId"] == 1

    @pytest.mark.asyncio
    async def test_create_keeps_given_fields(self, store):
        audience = {"rootNode": {"id": "root", "type": "group", "operator": "AND", "children": []}}

        rule = await store.create_rule({
            "name": "Express Loan Leads",
            "status": "Active",
            "priority": 90,
            "audience": audience,
            "contentFiles": [{"name": "tile.json"}],
        })

        assert rule["name"] == "Express Loan Leads"
        assert rule["status"] == "Active"
        assert rule["priority"] == 90
        assert rule["audience"] == audience
        assert rule["contentFiles"] == [{"name": "tile.json"}]

    @pytest.mark.asyncio
    async def test_get_rule(self, store):
        created = await store.create_rule({"name": "A"})

        assert await store.get_rule(created["id"]) == created

    @pytest.mark.asyncio
    async def test_get_missing_rule(self, store):
        with pytest.raises(RuleNotFoundError) as exc_info:
            await store.get_rule("nope")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Rule not found"

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, store):
        created = await store.create_rule({"name": "A", "priority": 10})

        updated = await store.update_rule(created["id"], {
            "name": "B",
            "id": "hijack",
            "createdAt": "1999-01-01T00:00:00.000Z",
            "notes": "extra",
        })

        assert updated["id"] == created["id"]
        assert updated["name"] == "B"
        assert updated["priority"] == 10
        assert updated["createdAt"] == created["createdAt"]
        assert updated["notes"] == "extra"
        assert (await store.get_rule(created["id"]))["name"] == "B"

    @pytest.mark.asyncio
    async def test_update_missing_rule(self, store):
        with pytest.raises(RuleNotFoundError):
            await store.update_rule("nope", {"name": "B"})

    @pytest.mark.asyncio
    async def test_delete(self, store):
        keep = await store.create_rule({"name": "keep"})
        drop = await store.create_rule({"name": "drop"})

        deleted = await store.delete_rule(drop["id"])

        assert deleted["name"] == "drop"
        document = await store.list_rules()
        assert [r["id"] for r in document["rules"]] == [keep["id"]]
        assert document["meta"]["lastId"] == 2

        with pytest.raises(RuleNotFoundError):
            await store.delete_rule(drop["id"])

    @pytest.mark.asyncio
    async def test_duplicate(self, store):
        original = await store.create_rule({
            "name": "Gold Tier",
            "status": "Active",
            "audience": {"rootNode": {"id": "root", "type": "group", "operator": "OR", "children": []}},
        })

        duplicate = await store.duplicate_rule(original["id"])

        assert duplicate["id"] != original["id"]
        assert duplicate["name"] == "Gold Tier (Copy)"
        assert duplicate["status"] == "Draft"
        assert duplicate["audience"] == original["audience"]
        assert (await store.list_rules())["meta"]["lastId"] == 2

    @pytest.mark.asyncio
    async def test_write_failure_raises_persistence_error(self, store):
        with patch("service_rules.app.persistence.json_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError) as exc_info:
                await store.create_rule({"name": "A"})

        assert exc_info.value.message == "Failed to create rule"
        assert list(store.path.parent.glob(".rules-*")) == []

    @pytest.mark.asyncio
    async def test_stats_and_health(self, store):
        await store.start()
        await store.create_rule({"status": "Active"})
        await store.create_rule({})

        stats = await store.get_rule_stats()

        assert stats["total_rules"] == 2
        assert stats["by_status"] == {"Active": 1, "Draft": 1}
        assert await store.health_check() is True
