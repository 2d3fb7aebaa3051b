"""Encode and decode ledger records to their JSON byte payloads."""

from pydantic import BaseModel, ValidationError as PydanticValidationError

from marbles_engine.assets.schemas import Marble, User


class CodecError(ValueError):
    """A payload could not be decoded into the requested record."""


def _encode(record: BaseModel) -> bytes:
    return record.model_dump_json(by_alias=True).encode()


def encode_user(user: User) -> bytes:
    return _encode(user)


def encode_marble(marble: Marble) -> bytes:
    return _encode(marble)


def decode_user(payload: bytes) -> User:
    try:
        return User.model_validate_json(payload)
    except PydanticValidationError as exc:
        raise CodecError(f"undecodable user payload: {exc.error_count()} error(s)") from exc


def decode_marble(payload: bytes) -> Marble:
    try:
        return Marble.model_validate_json(payload)
    except PydanticValidationError as exc:
        raise CodecError(f"undecodable marble payload: {exc.error_count()} error(s)") from exc


def marble_document(marble: Marble) -> dict:
    """JSON-ready dict of a marble under its persisted field names."""
    return marble.model_dump(mode="json", by_alias=True)


def user_document(user: User) -> dict:
    return user.model_dump(mode="json", by_alias=True)
