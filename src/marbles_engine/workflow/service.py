"""Workflow service — the two review entry points over the ledger."""

from marbles_engine.assets.repository import get_marble, get_user, put_marble
from marbles_engine.assets.schemas import Marble
from marbles_engine.common.config import MarblesSettings
from marbles_engine.common.exceptions import NotFoundError
from marbles_engine.common.logging import get_logger
from marbles_engine.directory.service import DirectoryService
from marbles_engine.ledger.stub import LedgerStub
from marbles_engine.workflow.machine import (
    apply_review,
    locate_waiting_stage,
    require_actor,
    require_company,
    require_enabled,
    resolve_stage,
)
from marbles_engine.workflow.stages import LAST_ACTIONABLE, ReviewStatus, stage_company

logger = get_logger("workflow")


class WorkflowService:
    """Advance or fail a marble's current stage."""

    def __init__(self, settings: MarblesSettings, directory: DirectoryService):
        self.settings = settings
        self.directory = directory

    async def review_at_stage(
        self,
        stub: LedgerStub,
        marble_id: str,
        user_id: str,
        stage_index: int,
        outcome: ReviewStatus,
        comment: str,
        next_actor_id: str = "",
    ) -> Marble:
        """Explicit-step review: the caller names the stage it is acting on.

        An empty ``next_actor_id`` hands the following stage back to the caller.
        """
        user = await get_user(stub, user_id)
        require_enabled(user)
        stage = resolve_stage(stage_index)
        marble = await get_marble(stub, marble_id)
        require_actor(marble, user, stage)

        updated = apply_review(
            marble, stage, user, outcome, comment, stub.tx_date,
            next_actor_id=next_actor_id,
        )
        await put_marble(stub, updated)
        logger.info(
            "Marble %s stage %d reviewed by %s: %s",
            marble_id, stage, user_id, outcome.name,
        )
        return updated

    async def review_current(
        self,
        stub: LedgerStub,
        marble_id: str,
        user_id: str,
        outcome: ReviewStatus,
        comment: str,
    ) -> Marble:
        """Auto-detect review: act on whichever stage is waiting.

        The caller's company must match the stage's company, and the next
        stage is assigned to the first enabled user of the next company.
        """
        user = await get_user(stub, user_id)
        require_enabled(user)
        marble = await get_marble(stub, marble_id)
        stage = locate_waiting_stage(marble)
        require_company(user, stage)

        next_actor_id = ""
        if outcome is ReviewStatus.SUCCESS and stage is not LAST_ACTIONABLE:
            next_company = stage_company(stage.next)
            next_actor = await self.directory.find_user_by_company(stub, next_company)
            if next_actor is None:
                raise NotFoundError(
                    f"No enabled user of company '{next_company}' for the next stage"
                )
            next_actor_id = next_actor.id

        require_actor(marble, user, stage)
        updated = apply_review(
            marble, stage, user, outcome, comment, stub.tx_date,
            next_actor_id=next_actor_id,
        )
        await put_marble(stub, updated)
        logger.info(
            "Marble %s stage %d reviewed by %s: %s",
            marble_id, stage, user_id, outcome.name,
        )
        return updated
