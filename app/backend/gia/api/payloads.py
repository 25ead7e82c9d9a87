"""Request payloads shared by goal and support-project endpoints."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from gia.models.entities import (
    ActionItem,
    DailyReport,
    Goal,
    GoalStatus,
    GoalType,
    PeriodGranularity,
    PeriodOverview,
    PeriodSummary,
    ReportSegment,
    SupportProject,
    TimelineEntry,
)
from gia.services.report_service import GoalFilters, SupportFilters


class GoalPeriodSummaryPayload(BaseModel):
    current_goal: str = ""
    progress_and_risk: str = ""
    next_goal: str = ""

    def to_domain(self) -> PeriodSummary:
        return PeriodSummary(
            current_summary=self.current_goal,
            issues=self.progress_and_risk,
            next_summary=self.next_goal,
        )


class ProjectPeriodSummaryPayload(BaseModel):
    current_summary: str = ""
    issues: str = ""
    next_summary: str = ""

    def to_domain(self) -> PeriodSummary:
        return PeriodSummary(current_summary=self.current_summary, issues=self.issues, next_summary=self.next_summary)


class ActionItemPayload(BaseModel):
    id: str
    text: str
    done: bool = False
    start_date: date | None = None
    end_date: date | None = None
    hours: float | None = Field(default=None, ge=0)

    def to_domain(self) -> ActionItem:
        return ActionItem(
            id=self.id,
            text=self.text,
            done=self.done,
            start_date=self.start_date,
            end_date=self.end_date,
            hours=self.hours,
        )


class GoalPayload(BaseModel):
    id: str
    name: str = Field(min_length=1)
    type: GoalType
    owner: str = ""
    progress: int = Field(ge=0, le=100)
    status: GoalStatus
    category: str = ""
    product_line: str = ""
    importance: str = ""
    tags: list[str] = Field(default_factory=list)
    action_items: list[ActionItemPayload] = Field(default_factory=list)
    period_summaries: dict[PeriodGranularity, GoalPeriodSummaryPayload] = Field(default_factory=dict)

    def to_domain(self) -> Goal:
        return Goal(
            id=self.id,
            name=self.name,
            type=self.type,
            owner=self.owner,
            progress=self.progress,
            status=self.status,
            category=self.category,
            product_line=self.product_line,
            importance=self.importance,
            tags=tuple(self.tags),
            action_items=tuple(item.to_domain() for item in self.action_items),
            period_summaries={unit: summary.to_domain() for unit, summary in self.period_summaries.items()},
        )


class TimelineEntryPayload(BaseModel):
    id: str
    start_time: date
    status: str = ""
    description: str = ""
    hours: float = Field(default=0, ge=0)
    tag: str = ""

    def to_domain(self) -> TimelineEntry:
        return TimelineEntry(
            id=self.id,
            start_time=self.start_time,
            status=self.status,
            description=self.description,
            hours=self.hours,
            tag=self.tag,
        )


class SupportProjectPayload(BaseModel):
    id: str
    name: str = Field(min_length=1)
    bu: str = ""
    stage: str = ""
    estimated_value: float = 0
    value_impact: str = ""
    initiator: str = ""
    project_date: date | None = Field(default=None, alias="date")
    timeline: list[TimelineEntryPayload] = Field(default_factory=list)
    period_summaries: dict[PeriodGranularity, ProjectPeriodSummaryPayload] = Field(default_factory=dict)

    def to_domain(self) -> SupportProject:
        return SupportProject(
            id=self.id,
            name=self.name,
            bu=self.bu,
            stage=self.stage,
            estimated_value=self.estimated_value,
            value_impact=self.value_impact,
            initiator=self.initiator,
            project_date=self.project_date,
            timeline=tuple(entry.to_domain() for entry in self.timeline),
            period_defaults={unit: summary.to_domain() for unit, summary in self.period_summaries.items()},
        )


class PeriodOverviewPayload(BaseModel):
    completion: str = ""
    risk: str = ""
    special: str = ""

    def to_domain(self) -> PeriodOverview:
        return PeriodOverview(completion=self.completion, risk=self.risk, special=self.special)


class GoalFiltersPayload(BaseModel):
    product_line: str | None = None
    category: str | None = None
    importance: str | None = None
    goal_type: GoalType | None = None

    def to_domain(self) -> GoalFilters:
        return GoalFilters(
            product_line=self.product_line,
            category=self.category,
            importance=self.importance,
            goal_type=self.goal_type.value if self.goal_type else None,
        )


class SupportFiltersPayload(BaseModel):
    bu: str | None = None
    stage: str | None = None

    def to_domain(self) -> SupportFilters:
        return SupportFilters(bu=self.bu, stage=self.stage)


class ReportSegmentPayload(BaseModel):
    id: str
    goal_id: str = ""
    goal_name: str = ""
    hours: float = Field(default=0, ge=0)
    content: str = ""
    summary: str = ""
    next_plan: str = ""
    progress: int = Field(default=0, ge=0, le=100)

    def to_domain(self) -> ReportSegment:
        return ReportSegment(
            id=self.id,
            goal_id=self.goal_id,
            goal_name=self.goal_name,
            hours=self.hours,
            content=self.content,
            summary=self.summary,
            next_plan=self.next_plan,
            progress=self.progress,
        )


class DailyReportPayload(BaseModel):
    id: str
    report_date: date = Field(alias="date")
    user_name: str = ""
    role: str = ""
    segments: list[ReportSegmentPayload] = Field(default_factory=list)

    def to_domain(self) -> DailyReport:
        return DailyReport(
            id=self.id,
            report_date=self.report_date,
            user_name=self.user_name,
            role=self.role,
            segments=tuple(segment.to_domain() for segment in self.segments),
        )
