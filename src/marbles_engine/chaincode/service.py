"""Invocation service — runs one chaincode call as one ledger transaction."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marbles_engine.chaincode.dispatcher import READ_ONLY_FUNCTIONS, MarblesChaincode
from marbles_engine.common.config import MarblesSettings
from marbles_engine.common.database import DatabaseManager
from marbles_engine.common.exceptions import MarblesError, StoreError, UnknownFunctionError
from marbles_engine.common.logging import get_logger
from marbles_engine.ledger.stub import LedgerStub

logger = get_logger("invocation")

SUCCESS = 200
ERROR = 500


@dataclass(frozen=True)
class ChaincodeResponse:
    """Outcome of one invocation: a payload on success, a message on error."""

    status: int
    tx_id: str
    payload: bytes = b""
    message: str = ""
    code: str = ""

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    @classmethod
    def success(cls, tx_id: str, payload: bytes) -> "ChaincodeResponse":
        return cls(status=SUCCESS, tx_id=tx_id, payload=payload)

    @classmethod
    def error(cls, tx_id: str, exc: MarblesError) -> "ChaincodeResponse":
        return cls(status=ERROR, tx_id=tx_id, message=exc.message, code=exc.code)


class InvocationService:
    """Binds a ledger stub to a session and dispatches into the chaincode."""

    def __init__(self, settings: MarblesSettings, chaincode: MarblesChaincode):
        self.settings = settings
        self.chaincode = chaincode

    async def invoke(
        self,
        session: AsyncSession,
        function: str,
        args: list[str],
        tx_id: str | None = None,
        read_only: bool = False,
    ) -> bytes:
        """Dispatch within ``session``. Raises MarblesError on rejection."""
        if read_only and function not in READ_ONLY_FUNCTIONS:
            raise UnknownFunctionError(f"'{function}' is not a query function")
        stub = LedgerStub(
            session,
            tx_id=tx_id or uuid.uuid4().hex,
            tx_timestamp=datetime.now(timezone.utc),
        )
        return await self.chaincode.dispatch(stub, function, list(args))

    async def execute(
        self,
        db: DatabaseManager,
        function: str,
        args: list[str],
        tx_id: str | None = None,
        read_only: bool = False,
    ) -> ChaincodeResponse:
        """Run one invocation in its own transaction and fold the outcome into a response.

        Any rejection rolls the transaction back, so nothing it wrote persists.
        """
        tx_id = tx_id or uuid.uuid4().hex
        try:
            async with db.get_session() as session:
                payload = await self.invoke(
                    session, function, args, tx_id=tx_id, read_only=read_only,
                )
        except MarblesError as exc:
            logger.warning(
                "invoke %s rejected [%s]: %s", function, exc.code, exc.message,
                extra={"tx_id": tx_id},
            )
            return ChaincodeResponse.error(tx_id, exc)
        except SQLAlchemyError:
            logger.exception("invoke %s failed to commit", function, extra={"tx_id": tx_id})
            return ChaincodeResponse.error(
                tx_id, StoreError(f"Failed to commit transaction {tx_id}"),
            )
        return ChaincodeResponse.success(tx_id, payload)
