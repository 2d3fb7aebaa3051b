"""Stage table for the financing-application workflow.

Each marble carries one check per stage. The table fixes the stage order
and which company role must act at every stage. It is built once at import
time and never mutated.
"""

import enum
from dataclasses import dataclass
from types import MappingProxyType

SUPPLIER = "supplier"
CORE_ENTERPRISE = "core-enterprise"
BANK = "bank"


class StageKind(enum.IntEnum):
    CREATED = 0
    SUPPLIER_APPLY = 1
    CORE_ENTERPRISE_CHECK = 2
    BANK_CHECK = 3
    SUPPLIER_RECEIVE = 4
    CORE_ENTERPRISE_REPAYMENT = 5
    BANK_RECEIVE = 6
    END = 7

    @property
    def is_actionable(self) -> bool:
        """Stages a reviewer can act on; CREATED and END are set by the engine."""
        return FIRST_ACTIONABLE <= self <= LAST_ACTIONABLE

    @property
    def next(self) -> "StageKind":
        if self is StageKind.END:
            raise ValueError("END has no following stage")
        return StageKind(self + 1)


class ReviewStatus(enum.IntEnum):
    DISABLED = 0
    WAITING = 1
    SUCCESS = 2
    FAILURE = 3

    @property
    def is_terminal(self) -> bool:
        return self in (ReviewStatus.SUCCESS, ReviewStatus.FAILURE)


@dataclass(frozen=True)
class StageDefinition:
    kind: StageKind
    label: str
    company: str


STAGE_COUNT = len(StageKind)
FIRST_ACTIONABLE = StageKind.SUPPLIER_APPLY
LAST_ACTIONABLE = StageKind.BANK_RECEIVE

STAGES: tuple[StageDefinition, ...] = (
    StageDefinition(StageKind.CREATED, "created", SUPPLIER),
    StageDefinition(StageKind.SUPPLIER_APPLY, "supplier apply", SUPPLIER),
    StageDefinition(StageKind.CORE_ENTERPRISE_CHECK, "core enterprise check", CORE_ENTERPRISE),
    StageDefinition(StageKind.BANK_CHECK, "bank check", BANK),
    StageDefinition(StageKind.SUPPLIER_RECEIVE, "supplier receives loan", SUPPLIER),
    StageDefinition(StageKind.CORE_ENTERPRISE_REPAYMENT, "core enterprise repayment", CORE_ENTERPRISE),
    # Repayment is confirmed by the receiving bank.
    StageDefinition(StageKind.BANK_RECEIVE, "bank receives repayment", BANK),
    StageDefinition(StageKind.END, "end", BANK),
)

STAGE_COMPANY = MappingProxyType({s.kind: s.company for s in STAGES})


def stage_company(kind: StageKind) -> str:
    """Company role required to act at ``kind``."""
    return STAGE_COMPANY[kind]


def parse_review_status(raw: str) -> ReviewStatus:
    """Parse a review outcome given as ``2``/``3`` or ``success``/``failure``.

    Only the two outcome values are accepted; raises ValueError otherwise.
    """
    value = raw.strip().lower()
    if value.isascii() and value.isdigit():
        try:
            status = ReviewStatus(int(value))
        except ValueError:
            raise ValueError(f"unknown review state '{raw}'") from None
    else:
        try:
            status = ReviewStatus[value.upper()]
        except KeyError:
            raise ValueError(f"unknown review state '{raw}'") from None
    if not status.is_terminal:
        raise ValueError(f"review state must be success or failure, got '{raw}'")
    return status
