"""Lifecycle operations — create/disable users, create/delete marbles, raw key access."""

from marbles_engine.assets.repository import (
    find_user,
    get_marble,
    get_user,
    put_marble,
    put_user,
)
from marbles_engine.assets.schemas import Marble, User, UserRelation
from marbles_engine.common.config import MarblesSettings
from marbles_engine.common.exceptions import AlreadyExistsError, AuthorizationError, NotFoundError
from marbles_engine.common.logging import get_logger
from marbles_engine.ledger.stub import LedgerStub
from marbles_engine.workflow.machine import open_workflow, require_enabled

logger = get_logger("lifecycle")

SELFTEST_KEY = "selftest"
UI_VERSION_KEY = "marbles_ui"


class LifecycleService:
    """CRUD around users and marbles."""

    def __init__(self, settings: MarblesSettings):
        self.settings = settings

    # ── Bootstrap ──

    async def init_ledger(self, stub: LedgerStub, selftest: int | None = None) -> None:
        """Write the optional self-test value and the compatible UI version."""
        if selftest is not None:
            await stub.put_state(SELFTEST_KEY, str(selftest).encode())
        await stub.put_state(UI_VERSION_KEY, self.settings.ui_version.encode())

    # ── Users ──

    async def create_user(
        self, stub: LedgerStub, user_id: str, username: str, company: str,
    ) -> User:
        if await stub.get_state(user_id) is not None:
            raise AlreadyExistsError(f"This user already exists - {user_id}")
        user = User(
            id=user_id,
            username=username.lower(),
            company=company,
            enabled=True,
        )
        await put_user(stub, user)
        logger.info("Created user %s (%s)", user_id, company)
        return user

    async def disable_user(
        self, stub: LedgerStub, user_id: str, authed_by_company: str,
    ) -> User:
        user = await find_user(stub, user_id)
        if user is None:
            raise NotFoundError(f"This owner does not exist - {user_id}")
        if user.company != authed_by_company:
            raise AuthorizationError(
                f"The company '{authed_by_company}' cannot change another company's owner"
            )
        user.enabled = False
        await put_user(stub, user)
        logger.info("Disabled user %s", user_id)
        return user

    # ── Marbles ──

    async def create_marble(
        self,
        stub: LedgerStub,
        marble_id: str,
        contact: str,
        balance: int,
        title: str,
        owner_id: str,
        authed_by_company: str,
    ) -> tuple[Marble, bytes]:
        """Create a marble owned by ``owner_id``. Returns (marble, stored payload)."""
        owner = await get_user(stub, owner_id)
        require_enabled(owner)
        if owner.company != authed_by_company:
            raise AuthorizationError(
                f"The company '{authed_by_company}' cannot authorize creation "
                f"for '{owner.company}'."
            )
        if await stub.get_state(marble_id) is not None:
            raise AlreadyExistsError(f"This marble already exists - {marble_id}")

        marble = Marble(
            id=marble_id,
            contact=contact,
            balance=balance,
            title=title,
            owner=UserRelation.of(owner),
        )
        marble = open_workflow(marble, owner, stub.tx_date)
        payload = await put_marble(stub, marble)
        logger.info("Created marble %s for owner %s", marble_id, owner_id)
        return marble, payload

    async def delete_marble(
        self, stub: LedgerStub, marble_id: str, authed_by_company: str,
    ) -> None:
        marble = await get_marble(stub, marble_id)
        if marble.owner.company != authed_by_company:
            raise AuthorizationError(
                f"The company '{authed_by_company}' cannot authorize deletion "
                f"for '{marble.owner.company}'."
            )
        await stub.del_state(marble_id)
        logger.info("Deleted marble %s", marble_id)

    # ── Raw key access ──

    async def read(self, stub: LedgerStub, key: str) -> bytes:
        value = await stub.get_state(key)
        if value is None:
            raise NotFoundError(f"Failed to get state for {key}")
        return value

    async def write(self, stub: LedgerStub, key: str, value: str) -> None:
        await stub.put_state(key, value.encode())
