"""Domain model package."""

from gia.models.entities import (
    ActionItem,
    DailyReport,
    DateRange,
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
from gia.models.policy import ReportingPolicy

__all__ = [
    "ActionItem",
    "DailyReport",
    "DateRange",
    "Goal",
    "GoalStatus",
    "GoalType",
    "PeriodGranularity",
    "PeriodOverview",
    "PeriodSummary",
    "ReportSegment",
    "ReportingPolicy",
    "SupportProject",
    "TimelineEntry",
]
