"""SQLAlchemy storage backend for LoadoutForge."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Sequence

from sqlalchemy import DateTime, Integer, JSON, delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .base import PreferenceRecord, PreferenceStore, RollHistoryRecord, RollHistoryStore


class Base(DeclarativeBase):
    pass


class PreferenceTable(Base):
    __tablename__ = "loadoutforge_preferences"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    data: Mapped[dict] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class RollHistoryTable(Base):
    __tablename__ = "loadoutforge_roll_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    item_ids: Mapped[list[str]] = mapped_column(JSON)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class AsyncSQLAlchemyStorage:
    """Bundle of async stores backed by SQLAlchemy."""

    def __init__(self, dsn: str, *, echo: bool = False) -> None:
        self._engine = create_async_engine(dsn, echo=echo, future=True)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            yield session

    async def init_models(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    def preference_store(self) -> "AsyncSQLAlchemyPreferenceStore":
        return AsyncSQLAlchemyPreferenceStore(self._session_factory)

    def roll_history_store(self) -> "AsyncSQLAlchemyRollHistoryStore":
        return AsyncSQLAlchemyRollHistoryStore(self._session_factory)


class AsyncSQLAlchemyPreferenceStore(PreferenceStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, user_id: int) -> PreferenceRecord | None:
        async with self._session_factory() as session:
            row = await session.get(PreferenceTable, user_id)
            if row is None:
                return None
            return PreferenceRecord(
                user_id=row.user_id,
                data=dict(row.data or {}),
                updated_at=row.updated_at,
            )

    async def save(self, record: PreferenceRecord) -> None:
        async with self._session_factory() as session:
            row = await session.get(PreferenceTable, record.user_id)
            if row is None:
                session.add(
                    PreferenceTable(
                        user_id=record.user_id,
                        data=dict(record.data),
                        updated_at=record.updated_at,
                    )
                )
            else:
                row.data = dict(record.data)
                row.updated_at = record.updated_at
            await session.commit()

    async def delete(self, user_id: int) -> None:
        async with self._session_factory() as session:
            await session.execute(delete(PreferenceTable).where(PreferenceTable.user_id == user_id))
            await session.commit()


class AsyncSQLAlchemyRollHistoryStore(RollHistoryStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add_record(self, record: RollHistoryRecord) -> None:
        async with self._session_factory() as session:
            session.add(
                RollHistoryTable(
                    user_id=record.user_id,
                    item_ids=list(record.item_ids),
                    timestamp=record.timestamp,
                )
            )
            await session.commit()

    async def recent_for_user(self, user_id: int, limit: int = 20) -> Sequence[RollHistoryRecord]:
        async with self._session_factory() as session:
            stmt = (
                select(RollHistoryTable)
                .where(RollHistoryTable.user_id == user_id)
                .order_by(RollHistoryTable.timestamp.desc(), RollHistoryTable.id.desc())
                .limit(limit)
            )
            rows = (await session.execute(stmt)).scalars().all()
            return [
                RollHistoryRecord(
                    user_id=row.user_id,
                    item_ids=list(row.item_ids),
                    timestamp=row.timestamp,
                )
                for row in rows
            ]
