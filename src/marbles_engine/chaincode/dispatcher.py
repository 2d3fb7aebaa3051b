"""Chaincode dispatcher — routes a function name and string args to a handler.

Handlers check argument count, sanitise, parse, then call into the
lifecycle, workflow and directory services. They return the response
payload as bytes and signal failure by raising MarblesError.
"""

import json
from collections.abc import Awaitable, Callable

from marbles_engine.assets.codec import marble_document, user_document
from marbles_engine.assets.repository import get_user
from marbles_engine.assets.validation import parse_int, require_arg_count, sanitize_arguments
from marbles_engine.common.config import MarblesSettings
from marbles_engine.common.exceptions import (
    NotFoundError,
    StateError,
    UnknownFunctionError,
    ValidationError,
)
from marbles_engine.common.logging import get_logger
from marbles_engine.directory.service import DirectoryService
from marbles_engine.ledger.stub import LedgerStub
from marbles_engine.lifecycle.service import LifecycleService
from marbles_engine.workflow.machine import require_enabled
from marbles_engine.workflow.service import WorkflowService
from marbles_engine.workflow.stages import ReviewStatus, StageKind, parse_review_status

logger = get_logger("chaincode")

Handler = Callable[[LedgerStub, list[str]], Awaitable[bytes]]

READ_ONLY_FUNCTIONS = frozenset({
    "read",
    "read_everything",
    "read_allmarble",
    "read_allstate",
    "getMarblesByRange",
    "getHistory",
})


def _dumps(document) -> bytes:
    return json.dumps(document, ensure_ascii=False).encode()


def _parse_state(raw: str) -> ReviewStatus:
    try:
        return parse_review_status(raw)
    except ValueError as exc:
        raise StateError(f"the marble state is wrong: {exc}") from None


class MarblesChaincode:
    """Function-name router over the marble services."""

    def __init__(
        self,
        settings: MarblesSettings,
        lifecycle: LifecycleService,
        workflow: WorkflowService,
        directory: DirectoryService,
    ):
        self.settings = settings
        self.lifecycle = lifecycle
        self.workflow = workflow
        self.directory = directory
        self._handlers: dict[str, Handler] = {
            "init": self.init,
            "read": self.read,
            "write": self.write,
            "init_owner": self.init_owner,
            "disable_owner": self.disable_owner,
            "init_marble": self.init_marble,
            "delete_marble": self.delete_marble,
            "tx_marble": self.tx_marble,
            "review_marble": self.review_marble,
            "read_everything": self.read_everything,
            "read_allmarble": self.read_marbles_for_user,
            "read_allstate": self.read_marbles_for_user,
            "getMarblesByRange": self.get_marbles_by_range,
            "getHistory": self.get_history,
        }

    @property
    def functions(self) -> list[str]:
        return sorted(self._handlers)

    async def dispatch(self, stub: LedgerStub, function: str, args: list[str]) -> bytes:
        handler = self._handlers.get(function)
        if handler is None:
            raise UnknownFunctionError(
                f"Received unknown invoke function name - '{function}'"
            )
        logger.info(
            "starting invoke, for - %s (%d args)", function, len(args),
            extra={"tx_id": stub.tx_id},
        )
        return await handler(stub, args)

    def _sanitize(self, args: list[str], optional=()) -> None:
        sanitize_arguments(args, self.settings.max_arg_length, optional=optional)

    # ── Bootstrap and raw keys ──

    async def init(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``[number]``: optional self-test value for instantiate."""
        require_arg_count(args, 0, 1)
        selftest = None
        if args and args[0]:
            selftest = parse_int(
                args[0], 0, "Expecting a numeric string argument to Init() for instantiate",
            )
        await self.lifecycle.init_ledger(stub, selftest)
        return b""

    async def read(self, stub: LedgerStub, args: list[str]) -> bytes:
        require_arg_count(args, 1)
        self._sanitize(args)
        return await self.lifecycle.read(stub, args[0])

    async def write(self, stub: LedgerStub, args: list[str]) -> bytes:
        require_arg_count(args, 2)
        self._sanitize(args)
        await self.lifecycle.write(stub, args[0], args[1])
        return b""

    # ── Users ──

    async def init_owner(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``id, username, company``"""
        require_arg_count(args, 3)
        self._sanitize(args)
        await self.lifecycle.create_user(stub, args[0], args[1], args[2])
        return b""

    async def disable_owner(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``owner id, authorizing company``"""
        require_arg_count(args, 2)
        self._sanitize(args)
        await self.lifecycle.disable_user(stub, args[0], args[1])
        return b""

    # ── Marbles ──

    async def init_marble(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``id, contact, balance, title, owner id, authorizing company``"""
        require_arg_count(args, 6)
        self._sanitize(args)
        balance = parse_int(args[2], 2, "3rd argument must be a numeric string")
        _, payload = await self.lifecycle.create_marble(
            stub,
            marble_id=args[0],
            contact=args[1],
            balance=balance,
            title=args[3],
            owner_id=args[4],
            authed_by_company=args[5],
        )
        return payload

    async def delete_marble(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``id, authorizing company``"""
        require_arg_count(args, 2)
        self._sanitize(args)
        await self.lifecycle.delete_marble(stub, args[0], args[1])
        return b""

    async def tx_marble(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``marble id, user id, step, state, next user (may be empty), comment``"""
        require_arg_count(args, 6)
        self._sanitize(args, optional=(4,))
        step = parse_int(args[2], 2)
        state = _parse_state(args[3])
        marble = await self.workflow.review_at_stage(
            stub,
            marble_id=args[0],
            user_id=args[1],
            stage_index=step,
            outcome=state,
            comment=args[5],
            next_actor_id=args[4],
        )
        return _dumps(marble_document(marble))

    async def review_marble(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``marble id, user id, state, comment``"""
        require_arg_count(args, 4)
        self._sanitize(args)
        state = _parse_state(args[2])
        marble = await self.workflow.review_current(
            stub,
            marble_id=args[0],
            user_id=args[1],
            outcome=state,
            comment=args[3],
        )
        return _dumps(marble_document(marble))

    # ── Queries ──

    async def read_everything(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``[company]``: enabled owners plus all marbles, or the company's marbles."""
        require_arg_count(args, 0, 1)
        self._sanitize(args)
        if args:
            company = args[0]
            representative = await self.directory.find_user_by_company(stub, company)
            if representative is None:
                raise NotFoundError(f"No enabled user for company - {company}")
            marbles = await self.directory.marbles_relevant_to(stub, representative.id)
        else:
            marbles = await self.directory.list_all_marbles(stub)
        owners = await self.directory.list_enabled_users(stub)
        return _dumps({
            "owners": [user_document(u) for u in owners],
            "marbles": [marble_document(m) for m in marbles],
        })

    async def read_marbles_for_user(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``user id [, stage, status]``: marbles the user owns or reviews."""
        require_arg_count(args, 1, 3)
        self._sanitize(args)
        user = await get_user(stub, args[0])
        require_enabled(user)

        if not await self.directory.list_all_marbles(stub):
            raise NotFoundError("There are no marbles")

        if len(args) == 1:
            marbles = await self.directory.marbles_relevant_to(stub, user.id)
        else:
            stage = parse_int(args[1], 1)
            status = parse_int(args[2], 2)
            try:
                stage_kind = StageKind(stage)
                review_status = ReviewStatus(status)
            except ValueError:
                raise ValidationError(
                    f"Unknown stage {stage} or status {status}"
                ) from None
            marbles = await self.directory.marbles_by_stage_status(
                stub, user.id, stage_kind, review_status,
            )
        return _dumps([marble_document(m) for m in marbles])

    async def get_marbles_by_range(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``start key, end key``: raw records, either bound may be empty."""
        require_arg_count(args, 2)
        results = []
        for key, payload in await self.directory.records_by_range(stub, args[0], args[1]):
            text = payload.decode(errors="replace")
            try:
                record = json.loads(text)
            except ValueError:
                record = text
            results.append({"Key": key, "Record": record})
        return _dumps(results)

    async def get_history(self, stub: LedgerStub, args: list[str]) -> bytes:
        """``marble id``: every transaction that wrote the marble."""
        require_arg_count(args, 1)
        self._sanitize(args)
        history = await self.directory.history(stub, args[0])
        return _dumps([
            {"txId": record.tx_id, "value": marble_document(record.value)}
            for record in history
        ])
