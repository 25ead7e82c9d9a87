"""Download endpoints for goal reports and daily-report hours details."""

from __future__ import annotations

from datetime import date
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field

from gia.api.payloads import (
    DailyReportPayload,
    GoalFiltersPayload,
    GoalPayload,
    PeriodOverviewPayload,
    SupportFiltersPayload,
    SupportProjectPayload,
)
from gia.core.auth import RequestUserContext, get_current_user_context
from gia.services.report_service import ExportFilePayload, ExportRequestData, ReportService

router = APIRouter(prefix="/exports", tags=["exports"])


class ExportPayload(BaseModel):
    anchor: date
    granularity: str = "quarter"
    goals: list[GoalPayload] = Field(default_factory=list)
    support_projects: list[SupportProjectPayload] = Field(default_factory=list)
    selected_fields: list[str] | None = None
    selected_support_fields: list[str] | None = None
    risk_only: bool = False
    overview: PeriodOverviewPayload | None = None
    goal_filters: GoalFiltersPayload | None = None
    support_filters: SupportFiltersPayload | None = None
    export_date: date | None = None


class ReportDetailsPayload(BaseModel):
    start: date
    end: date
    reports: list[DailyReportPayload] = Field(default_factory=list)
    selected_fields: list[str] | None = None


def _service() -> ReportService:
    return ReportService()


def _content_disposition(filename: str) -> str:
    return f"attachment; filename*=UTF-8''{quote(filename)}"


def _download(exported: ExportFilePayload) -> Response:
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": _content_disposition(exported.filename)},
    )


@router.get("/fields/{mode}")
def export_field_catalog(mode: str, granularity: str = Query(default="quarter")) -> dict[str, object]:
    return _service().export_fields(mode=mode, granularity=granularity)


@router.post("/report-details")
def export_report_details(
    payload: ReportDetailsPayload,
    format: str = Query(default="csv"),
) -> Response:
    exported = _service().export_report_details(
        start=payload.start,
        end=payload.end,
        reports=[report.to_domain() for report in payload.reports],
        selected_fields=payload.selected_fields,
        format_name=format,
    )
    return _download(exported)


@router.post("/{mode}")
def export_report(
    mode: str,
    payload: ExportPayload,
    format: str = Query(default="csv"),
    context: RequestUserContext = Depends(get_current_user_context),
) -> Response:
    data = ExportRequestData(
        mode=mode,
        anchor=payload.anchor,
        granularity=payload.granularity,
        goals=[goal.to_domain() for goal in payload.goals],
        support_projects=[project.to_domain() for project in payload.support_projects],
        selected_fields=payload.selected_fields,
        selected_support_fields=payload.selected_support_fields,
        risk_only=payload.risk_only,
        overview=payload.overview.to_domain() if payload.overview else None,
        goal_filters=payload.goal_filters.to_domain() if payload.goal_filters else None,
        support_filters=payload.support_filters.to_domain() if payload.support_filters else None,
        export_date=payload.export_date,
    )
    exported = _service().export_report(context=context, data=data, format_name=format)
    return _download(exported)
