"""Period summary endpoints for support projects and the goal overview."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from gia.api.payloads import GoalFiltersPayload, GoalPayload, SupportFiltersPayload, SupportProjectPayload
from gia.core.auth import RequestUserContext, get_current_user_context
from gia.services.report_service import ReportService

router = APIRouter(tags=["summaries"])


class SupportSummariesPayload(BaseModel):
    anchor: date
    granularity: str
    projects: list[SupportProjectPayload] = Field(default_factory=list)


class OverviewStatsPayload(BaseModel):
    goals: list[GoalPayload] = Field(default_factory=list)
    support_projects: list[SupportProjectPayload] = Field(default_factory=list)
    goal_filters: GoalFiltersPayload | None = None
    support_filters: SupportFiltersPayload | None = None


def _service() -> ReportService:
    return ReportService()


@router.post("/summaries/support-projects")
def summarize_support_projects(payload: SupportSummariesPayload) -> dict[str, object]:
    items = _service().support_project_summaries(
        anchor=payload.anchor,
        granularity=payload.granularity,
        projects=[project.to_domain() for project in payload.projects],
    )
    return {"items": items}


@router.post("/overview/stats")
def overview_stats(
    payload: OverviewStatsPayload,
    context: RequestUserContext = Depends(get_current_user_context),
) -> dict[str, object]:
    return _service().overview_stats(
        context=context,
        goals=[goal.to_domain() for goal in payload.goals],
        projects=[project.to_domain() for project in payload.support_projects],
        goal_filters=payload.goal_filters.to_domain() if payload.goal_filters else None,
        support_filters=payload.support_filters.to_domain() if payload.support_filters else None,
    )
