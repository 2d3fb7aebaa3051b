"""Ledger stub — the get/put/delete/range/history primitives for one invocation.

A stub is bound to a single database session, which is the invocation's
transaction, plus the transaction id and timestamp the invocation runs
under. It performs no semantic checks of its own.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import AsyncIterator

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marbles_engine.common.exceptions import StoreError
from marbles_engine.ledger.models import KeyHistoryModel, WorldStateModel

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class HistoryEntry:
    """One historical write of a key. ``value`` is None for a delete."""

    tx_id: str
    value: bytes | None
    is_delete: bool


class LedgerStub:
    """Per-invocation view of the ledger."""

    def __init__(
        self,
        session: AsyncSession,
        tx_id: str,
        tx_timestamp: datetime | None = None,
    ):
        self.session = session
        self.tx_id = tx_id
        self.tx_timestamp = tx_timestamp or datetime.now(timezone.utc)

    @property
    def tx_date(self) -> str:
        """Transaction timestamp as recorded on workflow stages."""
        return self.tx_timestamp.strftime(TIMESTAMP_FORMAT)

    # ── Point access ──

    async def get_state(self, key: str) -> bytes | None:
        """Return the stored bytes for ``key``, or None when the key is absent."""
        try:
            row = await self.session.get(WorldStateModel, key)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to get state for {key}") from exc
        return None if row is None else row.value

    async def put_state(self, key: str, value: bytes) -> None:
        try:
            row = await self.session.get(WorldStateModel, key)
            if row is None:
                self.session.add(WorldStateModel(key=key, value=value, tx_id=self.tx_id))
            else:
                row.value = value
                row.tx_id = self.tx_id
            self.session.add(KeyHistoryModel(
                key=key, tx_id=self.tx_id, value=value, is_delete=False,
                created_at=self.tx_timestamp,
            ))
            await self.session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to put state for {key}") from exc

    async def del_state(self, key: str) -> None:
        """Remove ``key`` from world state; a no-op on the state for absent keys."""
        try:
            row = await self.session.get(WorldStateModel, key)
            if row is not None:
                await self.session.delete(row)
            self.session.add(KeyHistoryModel(
                key=key, tx_id=self.tx_id, value=None, is_delete=True,
                created_at=self.tx_timestamp,
            ))
            await self.session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to delete state for {key}") from exc

    # ── Scans ──

    async def get_state_by_range(
        self, start_key: str, end_key: str,
    ) -> AsyncIterator[tuple[str, bytes]]:
        """Yield ``(key, value)`` for ``start_key <= key < end_key`` in key order.

        An empty bound is open on that side.
        """
        query = select(WorldStateModel.key, WorldStateModel.value)
        if start_key:
            query = query.where(WorldStateModel.key >= start_key)
        if end_key:
            query = query.where(WorldStateModel.key < end_key)
        query = query.order_by(WorldStateModel.key.asc())
        try:
            result = await self.session.execute(query)
            rows = result.all()
        except SQLAlchemyError as exc:
            raise StoreError(
                f"Failed to scan range [{start_key}, {end_key})"
            ) from exc
        for key, value in rows:
            yield key, value

    async def get_history_for_key(self, key: str) -> AsyncIterator[HistoryEntry]:
        """Yield every write and delete of ``key``, oldest first."""
        query = (
            select(KeyHistoryModel)
            .where(KeyHistoryModel.key == key)
            .order_by(KeyHistoryModel.id.asc())
        )
        try:
            result = await self.session.execute(query)
            rows = list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read history for {key}") from exc
        for row in rows:
            yield HistoryEntry(
                tx_id=row.tx_id,
                value=row.value,
                is_delete=row.is_delete,
            )
