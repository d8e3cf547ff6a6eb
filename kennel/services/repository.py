"""Read access to the six business record sets."""

import logging
from typing import Protocol, TypeVar

import aiosqlite
from pydantic import BaseModel, ValidationError

from kennel.models.records import Animal, Expense, HealthEvent, LitterEvent, Purchase, Sale

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class EntityRepository(Protocol):
    """Bulk, unfiltered reads; callers filter client-side."""

    async def fetch_animals(self) -> list[Animal]: ...

    async def fetch_purchases(self) -> list[Purchase]: ...

    async def fetch_sales(self) -> list[Sale]: ...

    async def fetch_expenses(self) -> list[Expense]: ...

    async def fetch_health_events(self) -> list[HealthEvent]: ...

    async def fetch_litters(self) -> list[LitterEvent]: ...


def parse_rows(model: type[RecordT], rows, kind: str) -> list[RecordT]:
    """Validate raw rows, dropping the ones that do not fit the record type."""
    records: list[RecordT] = []
    for row in rows:
        try:
            records.append(model.model_validate(dict(row)))
        except ValidationError as exc:
            logger.warning(
                "Dropping malformed %s row %s (%d errors)",
                kind, dict(row).get("id", "?"), exc.error_count(),
            )
    return records


class SqliteEntityRepository:
    """EntityRepository over an aiosqlite connection."""

    def __init__(self, db: aiosqlite.Connection):
        self._db = db

    async def _select(self, model: type[RecordT], table: str) -> list[RecordT]:
        rows = await self._db.execute_fetchall(f"SELECT * FROM {table} ORDER BY id")
        return parse_rows(model, rows, table)

    async def fetch_animals(self) -> list[Animal]:
        return await self._select(Animal, "dogs")

    async def fetch_purchases(self) -> list[Purchase]:
        return await self._select(Purchase, "purchases")

    async def fetch_sales(self) -> list[Sale]:
        return await self._select(Sale, "sales")

    async def fetch_expenses(self) -> list[Expense]:
        return await self._select(Expense, "expenses")

    async def fetch_health_events(self) -> list[HealthEvent]:
        return await self._select(HealthEvent, "health_records")

    async def fetch_litters(self) -> list[LitterEvent]:
        return await self._select(LitterEvent, "litters")
