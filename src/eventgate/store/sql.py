"""SQL-backed document store (PostgreSQL via SQLAlchemy asyncio)."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from eventgate.db.base import create_session_factory, init_db
from eventgate.db.tables import (
    AnalyticsCounterTable,
    EventTable,
    ReportTable,
    TransparencyLogTable,
)
from eventgate.store.base import (
    Collection,
    DocumentStore,
    Record,
    TransientStoreError,
    ensure_mutable,
    new_record_id,
)

logger = logging.getLogger(__name__)

TABLES: dict[Collection, Table] = {
    Collection.EVENTS: EventTable.__table__,
    Collection.REPORTS: ReportTable.__table__,
    Collection.TRANSPARENCY_LOG: TransparencyLogTable.__table__,
    Collection.ANALYTICS: AnalyticsCounterTable.__table__,
}


class StoreConnectionError(TransientStoreError):
    """The database could not be reached or dropped the connection."""


class SqlDocumentStore(DocumentStore):
    """
    Document store over one relational table per collection.

    Every call is its own unit of work. Conditional writes are expressed
    as `... WHERE id = :id AND field = :expected` and judged by rowcount,
    so the database decides which of two racing transitions wins.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: Optional[AsyncEngine] = None,
    ):
        self._session_factory = session_factory
        self._engine = engine

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "SqlDocumentStore":
        engine, factory = create_session_factory(database_url, echo=echo)
        return cls(factory, engine=engine)

    async def create_schema(self) -> None:
        if self._engine is None:
            raise RuntimeError("create_schema requires an engine")
        await init_db(self._engine)

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with self._session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except (OperationalError, ConnectionError, OSError) as exc:
            raise StoreConnectionError(str(exc)) from exc
        except DBAPIError as exc:
            if exc.connection_invalidated:
                raise StoreConnectionError(str(exc)) from exc
            raise

    @staticmethod
    def _conditions(table: Table, fields: Optional[Record]) -> list:
        return [table.c[name] == value for name, value in (fields or {}).items()]

    async def insert(self, collection: Collection, record: Record) -> str:
        table = TABLES[collection]
        record_id = record.get("id") or new_record_id()
        values = {**record, "id": record_id}
        async with self._session() as session:
            await session.execute(insert(table).values(**values))
        return record_id

    async def get(self, collection: Collection, record_id: str) -> Optional[Record]:
        table = TABLES[collection]
        async with self._session() as session:
            result = await session.execute(select(table).where(table.c.id == record_id))
            row = result.mappings().one_or_none()
        return dict(row) if row is not None else None

    async def update(
        self,
        collection: Collection,
        record_id: str,
        patch: Record,
        expected: Optional[Record] = None,
    ) -> bool:
        ensure_mutable(collection)
        table = TABLES[collection]
        values = {k: v for k, v in patch.items() if k != "id"}
        async with self._session() as session:
            result = await session.execute(
                update(table)
                .where(table.c.id == record_id, *self._conditions(table, expected))
                .values(**values)
            )
        return result.rowcount == 1

    async def delete(
        self,
        collection: Collection,
        record_id: str,
        expected: Optional[Record] = None,
    ) -> bool:
        ensure_mutable(collection)
        table = TABLES[collection]
        async with self._session() as session:
            result = await session.execute(
                delete(table).where(table.c.id == record_id, *self._conditions(table, expected))
            )
        return result.rowcount == 1

    async def query(
        self,
        collection: Collection,
        filters: Optional[Record] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        table = TABLES[collection]
        stmt = select(table).where(*self._conditions(table, filters))
        if order_by:
            column = table.c[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        async with self._session() as session:
            result = await session.execute(stmt)
            return [dict(row) for row in result.mappings().all()]

    async def increment(
        self,
        collection: Collection,
        record_id: str,
        field: str,
        amount: int = 1,
        patch: Optional[Record] = None,
    ) -> int:
        ensure_mutable(collection)
        table = TABLES[collection]
        extra = {k: v for k, v in (patch or {}).items() if k != "id"}
        # Upsert so the first increment and concurrent ones both land in one statement
        stmt = (
            pg_insert(table)
            .values(id=record_id, **{field: amount}, **extra)
            .on_conflict_do_update(
                index_elements=[table.c.id],
                set_={field: table.c[field] + amount, **extra},
            )
            .returning(table.c[field])
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("SQL document store connections closed")
