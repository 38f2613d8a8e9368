"""
SQLAlchemy-backed signal store.

Aggregates run as Core SELECTs over the workspace ORM tables. Each query
opens its own AsyncSession from the session maker, so the four collectors
can await queries concurrently without sharing a session.
"""

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from modules.intelligence.core.exceptions import StoreQueryError
from modules.intelligence.store.base import Condition, SignalStore, Where
from shared.utils.logger import setup_logger
from src.database.connection import get_session_maker
from src.database.models import ENTITY_MODELS

logger = setup_logger(__name__)


def _to_float(value: Any) -> float:
    """Convert SUM/AVG results (Decimal, int, None) to float."""
    if value is None:
        return 0.0
    return float(value)


class SqlSignalStore(SignalStore):
    """
    Signal store over the workspace tables.

    Example:
        store = SqlSignalStore()
        hot = await store.count("prospects", workspace_id, [
            Condition("stage", "in", ("proposal", "negotiation")),
        ])
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        """
        Initialize SQL store.

        Args:
            session_maker: Session factory (defaults to the application's)
        """
        self._session_maker = session_maker

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        if self._session_maker is None:
            self._session_maker = get_session_maker()
        return self._session_maker

    def _model(self, entity: str):
        model = ENTITY_MODELS.get(entity)
        if model is None:
            raise StoreQueryError(f"Unknown entity: {entity}")
        return model

    def _column(self, model, name: str):
        column = model.__table__.columns.get(name)
        if column is None:
            raise StoreQueryError(f"Unknown column {model.__tablename__}.{name}")
        return column

    def _clause(self, model, condition: Condition):
        column = self._column(model, condition.field)
        operator = condition.operator
        value = condition.value

        if operator == "eq":
            return column == value
        elif operator == "ne":
            return column != value
        elif operator == "gt":
            return column > value
        elif operator == "gte":
            return column >= value
        elif operator == "lt":
            return column < value
        elif operator == "lte":
            return column <= value
        elif operator == "in":
            return column.in_(list(value))
        elif operator == "not_in":
            return column.not_in(list(value))
        elif operator == "is_null":
            return column.is_(None)
        elif operator == "is_not_null":
            return column.is_not(None)

        raise StoreQueryError(f"Unknown operator: {operator}")

    def _filters(self, model, tenant_id: str, where: Where) -> list:
        clauses = [model.__table__.c.workspace_id == tenant_id]
        clauses.extend(self._clause(model, condition) for condition in where)
        return clauses

    async def _execute(self, statement, description: str):
        try:
            async with self.session_maker() as session:
                result = await session.execute(statement)
                return result.all()
        except SQLAlchemyError as e:
            logger.error(f"Signal query failed ({description}): {e}")
            raise StoreQueryError(f"{description} failed: {e}") from e

    async def _scalar(self, statement, description: str) -> Any:
        rows = await self._execute(statement, description)
        return rows[0][0] if rows else None

    async def count(self, entity: str, tenant_id: str, where: Where = ()) -> int:
        model = self._model(entity)
        statement = (
            select(func.count())
            .select_from(model.__table__)
            .where(*self._filters(model, tenant_id, where))
        )
        value = await self._scalar(statement, f"count({entity})")
        return int(value or 0)

    async def total(self, entity: str, column: str, tenant_id: str, where: Where = ()) -> float:
        model = self._model(entity)
        statement = (
            select(func.sum(self._column(model, column)))
            .where(*self._filters(model, tenant_id, where))
        )
        return _to_float(await self._scalar(statement, f"sum({entity}.{column})"))

    async def average(self, entity: str, column: str, tenant_id: str, where: Where = ()) -> float:
        model = self._model(entity)
        statement = (
            select(func.avg(self._column(model, column)))
            .where(*self._filters(model, tenant_id, where))
        )
        return _to_float(await self._scalar(statement, f"avg({entity}.{column})"))

    async def group_count(
        self,
        entity: str,
        column: str,
        tenant_id: str,
        where: Where = ()
    ) -> Dict[str, int]:
        model = self._model(entity)
        group_column = self._column(model, column)
        statement = (
            select(group_column, func.count())
            .where(*self._filters(model, tenant_id, where))
            .where(group_column.is_not(None))
            .group_by(group_column)
        )
        rows = await self._execute(statement, f"group_count({entity}.{column})")
        return {str(key): int(count) for key, count in rows}

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
        model = self._model(entity)
        selected = [self._column(model, name) for name in columns]
        statement = select(*selected).where(*self._filters(model, tenant_id, where))

        if order_by:
            order_column = self._column(model, order_by)
            statement = statement.order_by(order_column.desc() if descending else order_column.asc())
        if limit is not None:
            statement = statement.limit(limit)

        rows = await self._execute(statement, f"fetch({entity})")
        return [dict(zip(columns, row)) for row in rows]
