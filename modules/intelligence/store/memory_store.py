"""
In-memory signal store.

Holds records as plain dicts per entity and answers the same aggregate
queries as the SQL store, with SQL NULL semantics: a comparison against a
missing or None value never matches, SUM/AVG skip nulls. Used by tests and
local demos; counts every query it answers.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

from modules.intelligence.core.exceptions import StoreQueryError
from modules.intelligence.store.base import ENTITIES, Condition, SignalStore, Where


def _matches(record: Dict[str, Any], condition: Condition) -> bool:
    value = record.get(condition.field)
    operator = condition.operator
    expected = condition.value

    if operator == "is_null":
        return value is None
    if operator == "is_not_null":
        return value is not None
    if value is None:
        return False

    if operator == "eq":
        return value == expected
    elif operator == "ne":
        return value != expected
    elif operator == "in":
        return value in expected
    elif operator == "not_in":
        return value not in expected

    try:
        if operator == "gt":
            return value > expected
        elif operator == "gte":
            return value >= expected
        elif operator == "lt":
            return value < expected
        elif operator == "lte":
            return value <= expected
    except TypeError as e:
        raise StoreQueryError(f"Cannot compare {condition.field}={value!r} with {expected!r}") from e

    return False


class MemorySignalStore(SignalStore):
    """
    Signal store backed by lists of dicts.

    Example:
        store = MemorySignalStore()
        store.add("prospects", workspace_id="ws-1", stage="lead", estimated_value=5000)
        await store.count("prospects", "ws-1")  # 1
    """

    def __init__(self, records: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self._records: Dict[str, List[Dict[str, Any]]] = {entity: [] for entity in ENTITIES}
        for entity, rows in (records or {}).items():
            self.extend(entity, rows)

        self.query_count = 0

    def add(self, entity: str, **fields: Any) -> Dict[str, Any]:
        """Add one record; it must carry workspace_id."""
        self._check_entity(entity)
        if "workspace_id" not in fields:
            raise ValueError("record must carry workspace_id")
        record = dict(fields)
        self._records[entity].append(record)
        return record

    def extend(self, entity: str, rows: Iterable[Dict[str, Any]]) -> None:
        for row in rows:
            self.add(entity, **row)

    @property
    def records(self) -> Dict[str, List[Dict[str, Any]]]:
        """Copy of all records, by entity."""
        return {entity: list(rows) for entity, rows in self._records.items()}

    def clear(self) -> None:
        for rows in self._records.values():
            rows.clear()

    def _check_entity(self, entity: str) -> None:
        if entity not in ENTITIES:
            raise StoreQueryError(f"Unknown entity: {entity}")

    def _select(self, entity: str, tenant_id: str, where: Where) -> List[Dict[str, Any]]:
        self._check_entity(entity)
        self.query_count += 1
        return [
            record for record in self._records[entity]
            if record.get("workspace_id") == tenant_id
            and all(_matches(record, condition) for condition in where)
        ]

    async def count(self, entity: str, tenant_id: str, where: Where = ()) -> int:
        return len(self._select(entity, tenant_id, where))

    async def total(self, entity: str, column: str, tenant_id: str, where: Where = ()) -> float:
        values = [r.get(column) for r in self._select(entity, tenant_id, where)]
        return float(sum(v for v in values if v is not None))

    async def average(self, entity: str, column: str, tenant_id: str, where: Where = ()) -> float:
        values = [r.get(column) for r in self._select(entity, tenant_id, where)]
        values = [v for v in values if v is not None]
        if not values:
            return 0.0
        return float(sum(values)) / len(values)

    async def group_count(
        self,
        entity: str,
        column: str,
        tenant_id: str,
        where: Where = ()
    ) -> Dict[str, int]:
        groups: Dict[str, int] = {}
        for record in self._select(entity, tenant_id, where):
            key = record.get(column)
            if key is None:
                continue
            groups[str(key)] = groups.get(str(key), 0) + 1
        return groups

    async def fetch(
        self,
        entity: str,
        columns: Sequence[str],
        tenant_id: str,
        where: Where = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        rows = self._select(entity, tenant_id, where)

        if order_by:
            present = [r for r in rows if r.get(order_by) is not None]
            missing = [r for r in rows if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            rows = present + missing

        if limit is not None:
            rows = rows[:limit]

        return [{column: row.get(column) for column in columns} for row in rows]
