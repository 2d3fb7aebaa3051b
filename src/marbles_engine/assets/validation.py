"""Invocation argument checks."""

import re
from collections.abc import Collection, Sequence

from marbles_engine.common.exceptions import ValidationError

DEFAULT_MAX_LENGTH = 32
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")


def require_arg_count(args: Sequence[str], *expected: int) -> None:
    """Raise unless ``len(args)`` is one of ``expected``."""
    if len(args) not in expected:
        wanted = " or ".join(str(n) for n in expected)
        raise ValidationError(
            f"Incorrect number of arguments. Expecting {wanted}, got {len(args)}"
        )


def sanitize_arguments(
    args: Sequence[str],
    max_length: int = DEFAULT_MAX_LENGTH,
    optional: Collection[int] = (),
) -> None:
    """Every argument must be 1..max_length characters long.

    Positions listed in ``optional`` may be empty but are still length-bounded.
    """
    for index, value in enumerate(args):
        if not value and index not in optional:
            raise ValidationError(
                f"Argument {index} must be a non-empty string", index=index
            )
        if len(value) > max_length:
            raise ValidationError(
                f"Argument {index} must be <= {max_length} characters", index=index
            )


def parse_int(value: str, index: int, message: str | None = None) -> int:
    """Parse an ASCII decimal integer that fits in a signed 64-bit value."""
    message = message or f"Argument {index} must be a numeric string"
    if not _INTEGER.fullmatch(value):
        raise ValidationError(message, index=index)
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise ValidationError(f"Argument {index} is out of range", index=index)
    return number
