"""Ledger records: users, marbles and per-stage checks.

Field aliases are the persisted JSON names and must stay stable so that
records written by earlier versions keep decoding.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from marbles_engine.workflow.stages import STAGE_COUNT, ReviewStatus, StageKind

USER_DOC_TYPE = "marble_user"
MARBLE_DOC_TYPE = "marble"


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    doc_type: str = Field(default=USER_DOC_TYPE, alias="docType")
    id: str = ""
    username: str = ""
    company: str = ""
    enabled: bool = False


class UserRelation(BaseModel):
    """Denormalised copy of the owning user; authority checks re-resolve by id."""

    id: str = ""
    username: str = ""
    company: str = ""

    @classmethod
    def of(cls, user: User) -> "UserRelation":
        return cls(id=user.id, username=user.username, company=user.company)


class CheckInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    actor_id: str = Field(default="", alias="userid")
    company: str = ""
    date: str = ""
    status: ReviewStatus = Field(default=ReviewStatus.DISABLED, alias="review")
    comment: str = ""


def _empty_steps() -> list[CheckInfo]:
    return [CheckInfo() for _ in range(STAGE_COUNT)]


class Marble(BaseModel):
    """A financing application moving through the stage table."""

    model_config = ConfigDict(populate_by_name=True)

    doc_type: str = Field(default=MARBLE_DOC_TYPE, alias="docType")
    id: str = ""
    contact: str = ""
    balance: int = 0
    title: str = ""
    owner: UserRelation = Field(default_factory=UserRelation, alias="user")
    steps: list[CheckInfo] = Field(default_factory=_empty_steps, alias="check")

    @field_validator("steps")
    @classmethod
    def _exactly_one_check_per_stage(cls, value: list[CheckInfo]) -> list[CheckInfo]:
        if len(value) != STAGE_COUNT:
            raise ValueError(f"expected {STAGE_COUNT} checks, got {len(value)}")
        return value

    @classmethod
    def empty(cls) -> "Marble":
        """Zero-valued marble, used for deleted entries in key history."""
        return cls(doc_type="")

    def waiting_stage(self) -> StageKind | None:
        """The stage currently awaiting review, if any."""
        for kind in StageKind:
            if self.steps[kind].status is ReviewStatus.WAITING:
                return kind
        return None

    @property
    def outcome(self) -> ReviewStatus:
        """Status of the END stage: DISABLED while the workflow is still running."""
        return self.steps[StageKind.END].status
