"""Period rollups for goals and support projects, plus achievement estimates."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from gia.models.entities import (
    Goal,
    GoalStatus,
    PeriodGranularity,
    PeriodSummary,
    SupportProject,
    TimelineEntry,
)
from gia.models.policy import DEFAULT_POLICY, ReportingPolicy
from gia.services.periods import bucket_entries, coerce_granularity

EMPTY_SUMMARY = PeriodSummary(current_summary="", issues="", next_summary="")

# (ceiling, bonus) per goal status
_ACHIEVEMENT_RULES: dict[GoalStatus, tuple[int, int]] = {
    GoalStatus.STABLE: (100, 40),
    GoalStatus.DEVIATED: (80, 20),
    GoalStatus.HIGH_RISK: (50, 5),
}


def estimate_achievement(progress: int, status: GoalStatus) -> int:
    """Predicted completion percentage for a goal; ``progress`` is already 0..100."""

    ceiling, bonus = _ACHIEVEMENT_RULES[status]
    return min(ceiling, progress + bonus)


class PeriodSummaryProvider(Protocol):
    def summarize(self, anchor: date, granularity: PeriodGranularity) -> PeriodSummary: ...


@dataclass(frozen=True, slots=True)
class StaticSummaryProvider:
    """Looks up pre-authored text per granularity; the anchor is not consulted."""

    table: Mapping[PeriodGranularity, PeriodSummary]
    fallback: PeriodSummary = EMPTY_SUMMARY

    def summarize(self, anchor: date, granularity: PeriodGranularity) -> PeriodSummary:
        return self.table.get(coerce_granularity(granularity), self.fallback)


@dataclass(frozen=True, slots=True)
class TimelineSummaryProvider:
    """Aggregates timeline entries live, falling back to configured defaults."""

    timeline: tuple[TimelineEntry, ...]
    defaults: Mapping[PeriodGranularity, PeriodSummary]
    policy: ReportingPolicy = DEFAULT_POLICY

    def summarize(self, anchor: date, granularity: PeriodGranularity) -> PeriodSummary:
        return derive_period_summary(
            self.timeline,
            self.defaults,
            anchor,
            granularity,
            policy=self.policy,
        )


def is_risk_status(status: str, keywords: Iterable[str]) -> bool:
    folded = status.casefold()
    return any(keyword.casefold() in folded for keyword in keywords if keyword)


def _join_entries(entries: list[TimelineEntry], separator: str) -> str:
    return separator.join(f"[{entry.status}] {entry.description}" for entry in entries)


def derive_period_summary(
    timeline: Iterable[TimelineEntry],
    defaults: Mapping[PeriodGranularity, PeriodSummary],
    anchor: date,
    granularity: PeriodGranularity | str,
    *,
    policy: ReportingPolicy = DEFAULT_POLICY,
) -> PeriodSummary:
    unit = coerce_granularity(granularity)
    buckets = bucket_entries(timeline, anchor, unit, week_start=policy.week_start)
    default = defaults.get(unit)
    separator = policy.summary_separator

    if buckets.current:
        current_summary = _join_entries(buckets.current, separator)
    else:
        current_summary = (default.current_summary if default else "") or policy.current_placeholder

    risky = [entry for entry in buckets.current if is_risk_status(entry.status, policy.risk_keywords)]
    if risky:
        issues = separator.join(entry.description for entry in risky)
    else:
        issues = (default.issues if default else "") or policy.issues_placeholder

    if buckets.next:
        next_summary = _join_entries(buckets.next, separator)
    else:
        next_summary = (default.next_summary if default else "") or policy.next_placeholder

    return PeriodSummary(current_summary=current_summary, issues=issues, next_summary=next_summary)


def goal_summary_provider(goal: Goal) -> PeriodSummaryProvider:
    return StaticSummaryProvider(table=goal.period_summaries)


def project_summary_provider(
    project: SupportProject,
    policy: ReportingPolicy = DEFAULT_POLICY,
) -> PeriodSummaryProvider:
    return TimelineSummaryProvider(timeline=project.timeline, defaults=project.period_defaults, policy=policy)
