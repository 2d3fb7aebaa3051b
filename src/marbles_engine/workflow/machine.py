"""Approval state machine.

Per stage: DISABLED -> WAITING -> SUCCESS | FAILURE. Exactly one stage is
WAITING while a marble is active. Success hands the next stage to its
actor; failure at any stage fails END and nothing further becomes
actionable. END succeeds only when BANK_RECEIVE succeeds.

Everything here is pure: functions take the records they need and return
new ones, so a replay over the same inputs yields the same marble.
"""

from marbles_engine.assets.schemas import CheckInfo, Marble, User
from marbles_engine.common.exceptions import AuthorizationError, StateError, ValidationError
from marbles_engine.workflow.stages import (
    FIRST_ACTIONABLE,
    LAST_ACTIONABLE,
    STAGE_COUNT,
    STAGES,
    ReviewStatus,
    StageKind,
    stage_company,
)

CREATED_COMMENT = "new marble"
END_SUCCESS_COMMENT = "the marble ended in success"


def open_workflow(marble: Marble, creator: User, date: str) -> Marble:
    """Return ``marble`` with a fresh check table: CREATED done, SUPPLIER_APPLY waiting."""
    steps = [CheckInfo() for _ in range(STAGE_COUNT)]
    steps[StageKind.CREATED] = CheckInfo(
        actor_id=creator.id,
        company=creator.company,
        date=date,
        status=ReviewStatus.SUCCESS,
        comment=CREATED_COMMENT,
    )
    steps[StageKind.SUPPLIER_APPLY] = CheckInfo(
        actor_id=creator.id,
        company=creator.company,
        status=ReviewStatus.WAITING,
    )
    return marble.model_copy(update={"steps": steps})


def resolve_stage(raw: int) -> StageKind:
    """Map a caller-supplied stage index onto an actionable stage."""
    if not FIRST_ACTIONABLE <= raw <= LAST_ACTIONABLE:
        raise ValidationError(
            f"Stage {raw} is not a reviewable stage "
            f"({int(FIRST_ACTIONABLE)}-{int(LAST_ACTIONABLE)})"
        )
    return StageKind(raw)


def locate_waiting_stage(marble: Marble) -> StageKind:
    """First actionable stage currently WAITING."""
    for kind in StageKind:
        if kind.is_actionable and marble.steps[kind].status is ReviewStatus.WAITING:
            return kind
    raise StateError(f"Marble {marble.id} has no stage awaiting review")


def require_enabled(user: User) -> None:
    if not user.enabled:
        raise AuthorizationError(f"User is disabled - {user.id}")


def require_company(user: User, stage: StageKind) -> None:
    required = stage_company(stage)
    if user.company != required:
        raise AuthorizationError(
            f"Company '{user.company}' cannot act at stage "
            f"'{STAGES[stage].label}', requires '{required}'"
        )


def require_actor(marble: Marble, user: User, stage: StageKind) -> None:
    """The caller must be the stage's assigned actor and the stage must be WAITING."""
    check = marble.steps[stage]
    if check.actor_id != user.id:
        raise AuthorizationError(
            f"User {user.id} has no competence to review marble {marble.id} "
            f"at stage {int(stage)}"
        )
    if check.status is not ReviewStatus.WAITING:
        raise StateError(
            f"Marble {marble.id} stage {int(stage)} is not waiting "
            f"(status {check.status.name})"
        )


def apply_review(
    marble: Marble,
    stage: StageKind,
    reviewer: User,
    outcome: ReviewStatus,
    comment: str,
    date: str,
    next_actor_id: str = "",
) -> Marble:
    """Resolve ``stage`` with ``outcome`` and return the advanced marble.

    Guards are the caller's job; this only enforces that ``stage`` is
    actionable and ``outcome`` is terminal.
    """
    if not stage.is_actionable:
        raise StateError(f"Stage {int(stage)} cannot be reviewed")
    if not outcome.is_terminal:
        raise StateError(f"Review outcome must be SUCCESS or FAILURE, got {outcome.name}")

    updated = marble.model_copy(deep=True)
    current = updated.steps[stage]
    current.company = reviewer.company
    current.date = date
    current.status = outcome
    current.comment = comment

    end = updated.steps[StageKind.END]
    if outcome is ReviewStatus.FAILURE:
        end.actor_id = reviewer.id
        end.company = reviewer.company
        end.date = date
        end.status = ReviewStatus.FAILURE
        end.comment = f"the marble ended in failure at {STAGES[stage].label}"
        return updated

    if stage is LAST_ACTIONABLE:
        end.actor_id = reviewer.id
        end.company = reviewer.company
        end.date = date
        end.status = ReviewStatus.SUCCESS
        end.comment = END_SUCCESS_COMMENT
        return updated

    following = updated.steps[stage.next]
    following.actor_id = next_actor_id or reviewer.id
    following.status = ReviewStatus.WAITING
    return updated
