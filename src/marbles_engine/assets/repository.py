"""Single-record reads and writes against the ledger stub."""

from marbles_engine.assets.codec import (
    CodecError,
    decode_marble,
    decode_user,
    encode_marble,
    encode_user,
)
from marbles_engine.assets.schemas import MARBLE_DOC_TYPE, USER_DOC_TYPE, Marble, User
from marbles_engine.common.exceptions import NotFoundError
from marbles_engine.ledger.stub import LedgerStub


async def find_user(stub: LedgerStub, user_id: str) -> User | None:
    """Return the user stored under ``user_id`` or None.

    A key holding something other than a decodable user record counts as absent.
    """
    payload = await stub.get_state(user_id)
    if payload is None:
        return None
    try:
        user = decode_user(payload)
    except CodecError:
        return None
    if user.doc_type != USER_DOC_TYPE or user.id != user_id:
        return None
    return user


async def get_user(stub: LedgerStub, user_id: str) -> User:
    user = await find_user(stub, user_id)
    if user is None:
        raise NotFoundError(f"User does not exist - {user_id}")
    return user


async def find_marble(stub: LedgerStub, marble_id: str) -> Marble | None:
    payload = await stub.get_state(marble_id)
    if payload is None:
        return None
    try:
        marble = decode_marble(payload)
    except CodecError:
        return None
    if marble.doc_type != MARBLE_DOC_TYPE or marble.id != marble_id:
        return None
    return marble


async def get_marble(stub: LedgerStub, marble_id: str) -> Marble:
    marble = await find_marble(stub, marble_id)
    if marble is None:
        raise NotFoundError(f"Marble does not exist - {marble_id}")
    return marble


async def put_user(stub: LedgerStub, user: User) -> bytes:
    payload = encode_user(user)
    await stub.put_state(user.id, payload)
    return payload


async def put_marble(stub: LedgerStub, marble: Marble) -> bytes:
    payload = encode_marble(marble)
    await stub.put_state(marble.id, payload)
    return payload
