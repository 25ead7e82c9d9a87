"""Daily report assistance backed by the advisory collaborator."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter
from pydantic import BaseModel, Field

from gia.api.payloads import GoalPayload
from gia.services.advisory_service import AdvisoryService

router = APIRouter(prefix="/reports", tags=["reports"])


class RiskAnalysisPayload(BaseModel):
    content: str = Field(min_length=1)
    goal: GoalPayload


class SuggestionsPayload(BaseModel):
    task: str = Field(min_length=1)


class InsightPayload(BaseModel):
    content: str = Field(min_length=1)


def _advisory() -> AdvisoryService:
    return AdvisoryService()


@router.post("/risk-analysis")
def analyze_report_risk(payload: RiskAnalysisPayload) -> dict[str, object]:
    analysis = _advisory().analyze_report_risk(payload.content, payload.goal.to_domain())
    return asdict(analysis)


@router.post("/suggestions")
def suggest_pitfalls(payload: SuggestionsPayload) -> dict[str, object]:
    return {"items": _advisory().suggest_pitfalls(payload.task)}


@router.post("/insight")
def extract_insight(payload: InsightPayload) -> dict[str, object]:
    """Lessons learned from a report segment; ``insight`` is null when none is found."""

    insight = _advisory().extract_insight(payload.content)
    return {"insight": asdict(insight) if insight else None}
