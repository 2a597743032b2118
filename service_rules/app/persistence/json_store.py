"""
JSON file persistence for rule documents.

The whole store is one document::

    {"rules": [...], "meta": {"lastId": 0, "version": "1.0", "updatedAt": "..."}}

Reads tolerate a missing or corrupt file by starting from an empty
document. Writes are serialised through an asyncio lock and land via a
temporary file and an atomic rename.
"""

import asyncio
import copy
import json
import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List

from shared.errors import PersistenceError, RuleNotFoundError
from shared.logging import get_logger

DEFAULT_RULE_NAME = "Untitled Rule"
DEFAULT_STATUS = "Draft"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonRuleStore:
    """File-backed store for rule documents."""

    def __init__(
        self,
        path: str,
        version: str = "1.0",
        default_duration_days: int = 90,
        default_priority: int = 50,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.path = Path(path)
        self.version = version
        self.default_duration = timedelta(days=default_duration_days)
        self.default_priority = default_priority
        self.clock = clock
        self.logger = get_logger("rules.persistence.json")
        self._lock = asyncio.Lock()

    async def start(self):
        """Make sure the data directory exists."""
        await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)
        self.logger.info("JSON rule store started", path=str(self.path))

    async def stop(self):
        self.logger.info("JSON rule store stopped", path=str(self.path))

    async def health_check(self) -> bool:
        return await asyncio.to_thread(os.access, self.path.parent, os.W_OK)

    def _empty_document(self) -> Dict[str, Any]:
        return {
            "rules": [],
            "meta": {
                "lastId": 0,
                "version": self.version,
                "updatedAt": to_iso(self.clock()),
            },
        }

    def _read_sync(self) -> Dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return self._empty_document()
        except (OSError, ValueError) as e:
            self.logger.error("Error reading rules file", path=str(self.path), error=str(e))
            return self._empty_document()

        if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
            self.logger.error("Rules file has unexpected shape", path=str(self.path))
            return self._empty_document()

        rules = [rule for rule in data["rules"] if isinstance(rule, dict)]
        if len(rules) != len(data["rules"]):
            self.logger.warning(
                "Skipping malformed rule entries",
                path=str(self.path),
                skipped=len(data["rules"]) - len(rules),
            )
        data["rules"] = rules

        meta = data.get("meta") if isinstance(data.get("meta"), dict) else {}
        try:
            meta["lastId"] = int(meta.get("lastId", 0))
        except (TypeError, ValueError):
            self.logger.warning("Resetting malformed lastId", path=str(self.path), last_id=repr(meta.get("lastId")))
            meta["lastId"] = len(rules)
        meta.setdefault("version", self.version)
        meta.setdefault("updatedAt", to_iso(self.clock()))
        data["meta"] = meta
        return data

    def _write_sync(self, data: Dict[str, Any]) -> None:
        data["meta"]["updatedAt"] = to_iso(self.clock())
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".rules-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def _read(self) -> Dict[str, Any]:
        return await asyncio.to_thread(self._read_sync)

    async def _write(self, data: Dict[str, Any], action: str) -> None:
        try:
            await asyncio.to_thread(self._write_sync, data)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error("Error writing rules file", path=str(self.path), action=action, error=str(e))
            raise PersistenceError(f"Failed to {action} rule", {"path": str(self.path)}) from e

    async def list_rules(self) -> Dict[str, Any]:
        """All rules plus the document meta block."""
        data = await self._read()
        return {"rules": data["rules"], "meta": data["meta"]}

    async def get_rule(self, rule_id: str) -> Dict[str, Any]:
        data = await self._read()
        return self._find(data["rules"], rule_id)

    async def create_rule(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            data = await self._read()
            now = self.clock()
            now_iso = to_iso(now)

            rule = {
                "id": str(uuid.uuid4()),
                "name": payload.get("name") or DEFAULT_RULE_NAME,
                "status": payload.get("status") or DEFAULT_STATUS,
                "priority": payload.get("priority") or self.default_priority,
                "audienceSummary": payload.get("audienceSummary") or "",
                "contentSources": payload.get("contentSources") or [],
                "startDate": payload.get("startDate") or now_iso,
                "endDate": payload.get("endDate") or to_iso(now + self.default_duration),
                "audience": payload.get("audience") or None,
                "content": payload.get("content") or None,
                "fallback": payload.get("fallback") or None,
                "createdAt": now_iso,
                "updatedAt": now_iso,
            }
            if payload.get("contentFiles"):
                rule["contentFiles"] = payload["contentFiles"]

            data["rules"].append(rule)
            data["meta"]["lastId"] += 1
            await self._write(data, "create")

        self.logger.info("Rule created", rule_id=rule["id"], name=rule["name"])
        return rule

    async def update_rule(self, rule_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge ``payload`` over the stored rule."""
        async with self._lock:
            data = await self._read()
            index = self._index(data["rules"], rule_id)
            existing = data["rules"][index]

            updated = {
                **existing,
                **payload,
                "id": rule_id,
                "createdAt": existing.get("createdAt"),
                "updatedAt": to_iso(self.clock()),
            }
            data["rules"][index] = updated
            await self._write(data, "update")

        self.logger.info("Rule updated", rule_id=rule_id, name=updated.get("name"))
        return updated

    async def delete_rule(self, rule_id: str) -> Dict[str, Any]:
        async with self._lock:
            data = await self._read()
            index = self._index(data["rules"], rule_id)
            deleted = data["rules"].pop(index)
            await self._write(data, "delete")

        self.logger.info("Rule deleted", rule_id=rule_id, name=deleted.get("name"))
        return deleted

    async def duplicate_rule(self, rule_id: str) -> Dict[str, Any]:
        async with self._lock:
            data = await self._read()
            original = self._find(data["rules"], rule_id)
            now_iso = to_iso(self.clock())

            duplicate = {
                **copy.deepcopy(original),
                "id": str(uuid.uuid4()),
                "name": f"{original.get('name')} (Copy)",
                "status": DEFAULT_STATUS,
                "createdAt": now_iso,
                "updatedAt": now_iso,
            }
            data["rules"].append(duplicate)
            data["meta"]["lastId"] += 1
            await self._write(data, "duplicate")

        self.logger.info("Rule duplicated", rule_id=rule_id, duplicate_id=duplicate["id"])
        return duplicate

    async def get_rule_stats(self) -> Dict[str, Any]:
        data = await self._read()
        by_status: Dict[str, int] = {}
        for rule in data["rules"]:
            status = rule.get("status", DEFAULT_STATUS)
            by_status[status] = by_status.get(status, 0) + 1
        return {
            "total_rules": len(data["rules"]),
            "by_status": by_status,
            "last_id": data["meta"]["lastId"],
            "updated_at": data["meta"]["updatedAt"],
        }

    @staticmethod
    def _index(rules: List[Dict[str, Any]], rule_id: str) -> int:
        for index, rule in enumerate(rules):
            if rule.get("id") == rule_id:
                return index
        raise RuleNotFoundError(rule_id)

    def _find(self, rules: List[Dict[str, Any]], rule_id: str) -> Dict[str, Any]:
        return rules[self._index(rules, rule_id)]

    def __repr__(self) -> str:
        return f"JsonRuleStore(path={str(self.path)!r})"
