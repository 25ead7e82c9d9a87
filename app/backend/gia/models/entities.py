"""Domain entities for goals, support projects, and reporting periods."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date


class PeriodGranularity(str, enum.Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

    @property
    def label(self) -> str:
        """Short period label used in headers and filenames (e.g. ``季``)."""

        return PERIOD_LABELS[self]


PERIOD_LABELS: dict[PeriodGranularity, str] = {
    PeriodGranularity.DAY: "日",
    PeriodGranularity.WEEK: "周",
    PeriodGranularity.MONTH: "月",
    PeriodGranularity.QUARTER: "季",
    PeriodGranularity.YEAR: "年",
}


class GoalStatus(str, enum.Enum):
    STABLE = "stable"
    DEVIATED = "deviated"
    HIGH_RISK = "high_risk"

    @property
    def label(self) -> str:
        return GOAL_STATUS_LABELS[self]


GOAL_STATUS_LABELS: dict[GoalStatus, str] = {
    GoalStatus.STABLE: "稳定",
    GoalStatus.DEVIATED: "偏离",
    GoalStatus.HIGH_RISK: "高风险",
}


class GoalType(str, enum.Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"
    DEPARTMENT = "department"

    @property
    def label(self) -> str:
        return GOAL_TYPE_LABELS[self]


GOAL_TYPE_LABELS: dict[GoalType, str] = {
    GoalType.INDIVIDUAL: "个人",
    GoalType.TEAM: "小组",
    GoalType.DEPARTMENT: "部门",
}


SUPPORT_STAGES: tuple[str, ...] = ("需求沟通", "POC验证", "已签单", "正式交付")


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive calendar date range."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"DateRange end {self.end} precedes start {self.start}.")

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True, slots=True)
class TimelineEntry:
    id: str
    start_time: date
    status: str
    description: str
    hours: float = 0.0
    tag: str = ""


@dataclass(frozen=True, slots=True)
class PeriodSummary:
    current_summary: str
    issues: str
    next_summary: str


@dataclass(frozen=True, slots=True)
class ActionItem:
    id: str
    text: str
    done: bool = False
    start_date: date | None = None
    end_date: date | None = None
    hours: float | None = None


@dataclass(frozen=True, slots=True)
class Goal:
    """Goal with pre-authored per-period summaries.

    ``period_summaries`` maps a granularity to ``PeriodSummary`` where
    ``current_summary`` is the period goal, ``issues`` the progress/risk note
    and ``next_summary`` the next-period goal.
    """

    id: str
    name: str
    type: GoalType
    owner: str
    progress: int
    status: GoalStatus
    category: str = ""
    product_line: str = ""
    importance: str = ""
    tags: tuple[str, ...] = ()
    action_items: tuple[ActionItem, ...] = ()
    period_summaries: dict[PeriodGranularity, PeriodSummary] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SupportProject:
    """Cross-department support project whose rollups come from its timeline."""

    id: str
    name: str
    bu: str
    stage: str
    estimated_value: float = 0.0
    value_impact: str = ""
    initiator: str = ""
    project_date: date | None = None
    timeline: tuple[TimelineEntry, ...] = ()
    period_defaults: dict[PeriodGranularity, PeriodSummary] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PeriodOverview:
    """Free-text period overview shown in the first meeting-report section."""

    completion: str = ""
    risk: str = ""
    special: str = ""


@dataclass(frozen=True, slots=True)
class ReportSegment:
    """Time spent on one goal within a daily report."""

    id: str
    goal_id: str
    goal_name: str
    hours: float
    content: str = ""
    summary: str = ""
    next_plan: str = ""
    progress: int = 0


@dataclass(frozen=True, slots=True)
class DailyReport:
    id: str
    report_date: date
    user_name: str
    role: str
    segments: tuple[ReportSegment, ...] = ()
