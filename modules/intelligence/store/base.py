"""
Signal store interface.

Collectors read workspace records only through this boundary: a handful of
aggregate queries (count / sum / average / group count) plus a small fetch
for the entities an insight points at. Every query is scoped to one
workspace; implementations always filter on workspace_id.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

OPERATORS = frozenset({
    "eq", "ne", "gt", "gte", "lt", "lte", "in", "not_in", "is_null", "is_not_null",
})

ENTITIES = frozenset({
    "prospects",
    "contacts",
    "campaigns",
    "invoices",
    "expenses",
    "tasks",
    "calendar_events",
    "agents",
    "agent_executions",
})


@dataclass(frozen=True)
class Condition:
    """
    Filter on one field of an entity.

    Example:
        Condition("stage", "in", ("proposal", "negotiation"))
        Condition("due_date", "lt", now)
        Condition("paid_at", "is_null")
    """
    field: str
    operator: str
    value: Any = None

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise ValueError(f"Unknown operator: {self.operator}")
        if self.operator in ("in", "not_in") and isinstance(self.value, (str, bytes)):
            raise ValueError(f"Operator '{self.operator}' expects a collection, got a string")


Where = Sequence[Condition]


class SignalStore(ABC):
    """Read-only aggregate access to workspace records."""

    @abstractmethod
    async def count(self, entity: str, tenant_id: str, where: Where = ()) -> int:
        """Number of matching records."""
        pass

    @abstractmethod
    async def total(self, entity: str, column: str, tenant_id: str, where: Where = ()) -> float:
        """SUM of a column over matching records (0 when nothing matches)."""
        pass

    @abstractmethod
    async def average(self, entity: str, column: str, tenant_id: str, where: Where = ()) -> float:
        """AVG of a column over matching, non-null values (0 when nothing matches)."""
        pass

    @abstractmethod
    async def group_count(
        self,
        entity: str,
        column: str,
        tenant_id: str,
        where: Where = ()
    ) -> Dict[str, int]:
        """Count matching records per column value; null groups are dropped."""
        pass

    @abstractmethod
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
        """Selected columns of matching records as plain dicts."""
        pass
