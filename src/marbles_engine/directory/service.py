"""Directory queries — full key-range scans filtered in memory.

The ledger has no secondary indexes, so every cross-record question
(who owns what, what waits on whom, what happened to a key) is answered
by scanning a key range and decoding each record. Undecodable records
are skipped so one bad entry cannot break a listing.
"""

from dataclasses import dataclass

from marbles_engine.assets.codec import CodecError, decode_marble, decode_user
from marbles_engine.assets.schemas import MARBLE_DOC_TYPE, USER_DOC_TYPE, Marble, User
from marbles_engine.common.config import MarblesSettings
from marbles_engine.common.logging import get_logger
from marbles_engine.ledger.stub import LedgerStub
from marbles_engine.workflow.stages import STAGE_COUNT, ReviewStatus, StageKind

logger = get_logger("directory")


@dataclass(frozen=True)
class HistoryRecord:
    tx_id: str
    value: Marble
    is_delete: bool = False


def is_relevant(marble: Marble, user_id: str, stage_window: int) -> bool:
    """Owner of the marble, or the assigned actor of one of its first stages."""
    if marble.owner.id == user_id:
        return True
    window = max(0, min(stage_window, STAGE_COUNT))
    return any(check.actor_id == user_id for check in marble.steps[:window])


class DirectoryService:
    """Read-side queries over users and marbles."""

    def __init__(self, settings: MarblesSettings):
        self.settings = settings

    # ── Scans ──

    async def list_all_marbles(self, stub: LedgerStub) -> list[Marble]:
        marbles = []
        async for key, payload in stub.get_state_by_range(
            self.settings.marble_key_start, self.settings.marble_key_end,
        ):
            try:
                marble = decode_marble(payload)
            except CodecError as exc:
                logger.warning("Skipping undecodable marble %s: %s", key, exc)
                continue
            if marble.doc_type != MARBLE_DOC_TYPE:
                logger.warning("Skipping non-marble record %s in marble range", key)
                continue
            marbles.append(marble)
        return marbles

    async def list_users(self, stub: LedgerStub) -> list[User]:
        users = []
        async for key, payload in stub.get_state_by_range(
            self.settings.user_key_start, self.settings.user_key_end,
        ):
            try:
                user = decode_user(payload)
            except CodecError as exc:
                logger.warning("Skipping undecodable user %s: %s", key, exc)
                continue
            if user.doc_type != USER_DOC_TYPE:
                logger.warning("Skipping non-user record %s in user range", key)
                continue
            users.append(user)
        return users

    async def list_enabled_users(self, stub: LedgerStub) -> list[User]:
        return [u for u in await self.list_users(stub) if u.enabled]

    async def find_user_by_company(
        self, stub: LedgerStub, company: str,
    ) -> User | None:
        """First enabled user, in key order, who belongs to ``company``."""
        for user in await self.list_enabled_users(stub):
            if user.company == company:
                return user
        return None

    # ── Filtered marble views ──

    async def marbles_relevant_to(
        self, stub: LedgerStub, user_id: str,
    ) -> list[Marble]:
        window = self.settings.relevance_stage_window
        return [
            m for m in await self.list_all_marbles(stub)
            if is_relevant(m, user_id, window)
        ]

    async def marbles_by_stage_status(
        self,
        stub: LedgerStub,
        user_id: str,
        stage: StageKind,
        status: ReviewStatus,
    ) -> list[Marble]:
        return [
            m for m in await self.marbles_relevant_to(stub, user_id)
            if m.steps[stage].status is status
        ]

    # ── Raw range and history ──

    async def records_by_range(
        self, stub: LedgerStub, start_key: str, end_key: str,
    ) -> list[tuple[str, bytes]]:
        return [item async for item in stub.get_state_by_range(start_key, end_key)]

    async def history(self, stub: LedgerStub, marble_id: str) -> list[HistoryRecord]:
        """Every write of ``marble_id`` in ledger order; deletes carry an empty marble."""
        records = []
        async for entry in stub.get_history_for_key(marble_id):
            if entry.is_delete or entry.value is None:
                records.append(HistoryRecord(entry.tx_id, Marble.empty(), is_delete=True))
                continue
            try:
                value = decode_marble(entry.value)
            except CodecError as exc:
                logger.warning(
                    "Undecodable history entry for %s in tx %s: %s",
                    marble_id, entry.tx_id, exc,
                )
                value = Marble.empty()
            records.append(HistoryRecord(entry.tx_id, value))
        return records
