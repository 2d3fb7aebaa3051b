"""Tests for lifecycle operations — users, marbles and raw key access."""

import pytest

from marbles_engine.assets.repository import find_marble, find_user, get_marble, get_user
from marbles_engine.common.config import MarblesSettings
from marbles_engine.common.database import DatabaseManager
from marbles_engine.common.exceptions import AlreadyExistsError, AuthorizationError, NotFoundError
from marbles_engine.ledger.stub import LedgerStub
from marbles_engine.lifecycle.service import LifecycleService
from marbles_engine.workflow.stages import ReviewStatus, StageKind


def make_settings(**overrides) -> MarblesSettings:
    defaults = {"db_url": "sqlite+aiosqlite://"}
    defaults.update(overrides)
    return MarblesSettings(**defaults)


@pytest.fixture
async def db():
    manager = DatabaseManager(make_settings())
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def svc():
    return LifecycleService(make_settings())


async def _create_owner(db, svc, user_id="o1", username="Alice", company="Acme"):
    async with db.get_session() as session:
        return await svc.create_user(LedgerStub(session, "tx-user"), user_id, username, company)


class TestCreateUser:
    async def test_create_user(self, db, svc):
        user = await _create_owner(db, svc)
        assert user.username == "alice"
        assert user.enabled is True
        async with db.get_session() as session:
            stored = await get_user(LedgerStub(session, "q"), "o1")
            assert stored.company == "Acme"

    async def test_duplicate_id_rejected(self, db, svc):
        await _create_owner(db, svc)
        with pytest.raises(AlreadyExistsError, match="already exists"):
            await _create_owner(db, svc, username="other")

    async def test_id_taken_by_other_record_rejected(self, db, svc):
        async with db.get_session() as session:
            await svc.write(LedgerStub(session, "tx"), "o1", "raw")
        with pytest.raises(AlreadyExistsError):
            await _create_owner(db, svc)


class TestDisableUser:
    async def test_disable(self, db, svc):
        await _create_owner(db, svc)
        async with db.get_session() as session:
            user = await svc.disable_user(LedgerStub(session, "tx"), "o1", "Acme")
            assert user.enabled is False
        async with db.get_session() as session:
            stored = await find_user(LedgerStub(session, "q"), "o1")
            assert stored.enabled is False

    async def test_disable_twice_still_disabled(self, db, svc):
        await _create_owner(db, svc)
        for _ in range(2):
            async with db.get_session() as session:
                user = await svc.disable_user(LedgerStub(session, "tx"), "o1", "Acme")
        assert user.enabled is False

    async def test_disable_missing_user(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(NotFoundError):
                await svc.disable_user(LedgerStub(session, "tx"), "o404", "Acme")

    async def test_disable_wrong_company(self, db, svc):
        await _create_owner(db, svc)
        async with db.get_session() as session:
            with pytest.raises(AuthorizationError):
                await svc.disable_user(LedgerStub(session, "tx"), "o1", "Globex")


class TestCreateMarble:
    async def test_create_marble_initial_stages(self, db, svc):
        await _create_owner(db, svc)
        async with db.get_session() as session:
            marble, payload = await svc.create_marble(
                LedgerStub(session, "tx"), "m1", "555", 100, "t", "o1", "Acme",
            )
        assert payload
        assert marble.owner.id == "o1"
        assert marble.owner.username == "alice"
        assert marble.steps[StageKind.CREATED].status is ReviewStatus.SUCCESS
        assert marble.steps[StageKind.CREATED].actor_id == "o1"
        assert marble.steps[StageKind.SUPPLIER_APPLY].status is ReviewStatus.WAITING
        assert marble.steps[StageKind.SUPPLIER_APPLY].actor_id == "o1"
        assert all(c.status is ReviewStatus.DISABLED for c in marble.steps[2:])

        async with db.get_session() as session:
            stored = await get_marble(LedgerStub(session, "q"), "m1")
            assert stored == marble

    async def test_missing_owner(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(NotFoundError):
                await svc.create_marble(
                    LedgerStub(session, "tx"), "m1", "555", 100, "t", "o404", "Acme",
                )

    async def test_wrong_company(self, db, svc):
        await _create_owner(db, svc)
        async with db.get_session() as session:
            with pytest.raises(AuthorizationError, match="cannot authorize creation"):
                await svc.create_marble(
                    LedgerStub(session, "tx"), "m1", "555", 100, "t", "o1", "Globex",
                )

    async def test_disabled_owner(self, db, svc):
        await _create_owner(db, svc)
        async with db.get_session() as session:
            await svc.disable_user(LedgerStub(session, "tx"), "o1", "Acme")
        async with db.get_session() as session:
            with pytest.raises(AuthorizationError):
                await svc.create_marble(
                    LedgerStub(session, "tx"), "m1", "555", 100, "t", "o1", "Acme",
                )

    async def test_duplicate_marble(self, db, svc):
        await _create_owner(db, svc)
        async with db.get_session() as session:
            await svc.create_marble(LedgerStub(session, "tx"), "m1", "555", 100, "t", "o1", "Acme")
        async with db.get_session() as session:
            with pytest.raises(AlreadyExistsError):
                await svc.create_marble(
                    LedgerStub(session, "tx"), "m1", "556", 5, "t2", "o1", "Acme",
                )


class TestDeleteMarble:
    async def _setup(self, db, svc):
        await _create_owner(db, svc)
        async with db.get_session() as session:
            await svc.create_marble(LedgerStub(session, "tx"), "m1", "555", 100, "t", "o1", "Acme")

    async def test_delete(self, db, svc):
        await self._setup(db, svc)
        async with db.get_session() as session:
            await svc.delete_marble(LedgerStub(session, "tx"), "m1", "Acme")
        async with db.get_session() as session:
            assert await find_marble(LedgerStub(session, "q"), "m1") is None

    async def test_delete_wrong_company_leaves_ledger(self, db, svc):
        await self._setup(db, svc)
        async with db.get_session() as session:
            with pytest.raises(AuthorizationError):
                await svc.delete_marble(LedgerStub(session, "tx"), "m1", "WrongCo")
        async with db.get_session() as session:
            assert await find_marble(LedgerStub(session, "q"), "m1") is not None

    async def test_delete_missing(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(NotFoundError):
                await svc.delete_marble(LedgerStub(session, "tx"), "m404", "Acme")

    async def test_user_key_is_not_a_marble(self, db, svc):
        await _create_owner(db, svc)
        async with db.get_session() as session:
            with pytest.raises(NotFoundError):
                await svc.delete_marble(LedgerStub(session, "tx"), "o1", "Acme")


class TestRawAccess:
    async def test_write_then_read(self, db, svc):
        async with db.get_session() as session:
            await svc.write(LedgerStub(session, "tx"), "abc", "test")
        async with db.get_session() as session:
            assert await svc.read(LedgerStub(session, "q"), "abc") == b"test"

    async def test_read_missing(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(NotFoundError):
                await svc.read(LedgerStub(session, "q"), "nope")

    async def test_init_ledger(self, db, svc):
        async with db.get_session() as session:
            await svc.init_ledger(LedgerStub(session, "tx"), 314)
        async with db.get_session() as session:
            stub = LedgerStub(session, "q")
            assert await svc.read(stub, "selftest") == b"314"
            assert await svc.read(stub, "marbles_ui") == b"4.0.1"
