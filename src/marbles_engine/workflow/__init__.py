"""Approval workflow: stage table and state machine."""

from marbles_engine.workflow.stages import (
    STAGE_COUNT,
    STAGES,
    ReviewStatus,
    StageKind,
    stage_company,
)

__all__ = ["STAGE_COUNT", "STAGES", "ReviewStatus", "StageKind", "stage_company"]
