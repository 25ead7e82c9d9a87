from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from conftest import ANCHOR, make_goal
from gia.models.entities import GoalStatus, PeriodGranularity, PeriodSummary, SupportProject, TimelineEntry
from gia.models.policy import ReportingPolicy
from gia.services.summaries import (
    StaticSummaryProvider,
    TimelineSummaryProvider,
    derive_period_summary,
    estimate_achievement,
    goal_summary_provider,
    project_summary_provider,
)


def test_weekly_summary_joins_entries_in_input_order(support_project: SupportProject) -> None:
    summary = derive_period_summary(support_project.timeline, {}, ANCHOR, PeriodGranularity.WEEK)

    assert summary.current_summary == "[POC验证] 完成武汉节点压力测试; [接口阻塞] 等待数据接口授权"
    assert summary.issues == "等待数据接口授权"
    assert summary.next_summary == "[正式交付] 启动深圳节点联调"


def test_quarterly_summary_uses_next_quarter_entries(support_project: SupportProject) -> None:
    summary = derive_period_summary(support_project.timeline, {}, ANCHOR, "quarter")

    assert summary.current_summary.count("; ") == 2
    assert summary.next_summary == "[规划] 全国推广"


def test_empty_buckets_without_defaults_use_placeholders() -> None:
    summary = derive_period_summary((), {}, ANCHOR, PeriodGranularity.DAY)

    assert summary == PeriodSummary(
        current_summary="本期暂无计划动作",
        issues="进度正常，暂无重大风险",
        next_summary="下期计划待同步",
    )


def test_empty_buckets_fall_back_to_period_defaults(support_project: SupportProject) -> None:
    defaults = {
        PeriodGranularity.YEAR: PeriodSummary(current_summary="", issues="年度无风险", next_summary="明年推广"),
    }

    summary = derive_period_summary(support_project.timeline, defaults, ANCHOR, PeriodGranularity.YEAR)

    assert summary.current_summary.startswith("[POC验证]")
    assert summary.issues == "等待数据接口授权"
    assert summary.next_summary == "明年推广"

    day_summary = derive_period_summary(support_project.timeline, defaults, ANCHOR, PeriodGranularity.DAY)
    assert day_summary.issues == "进度正常，暂无重大风险"


def test_no_risk_entries_falls_back_for_issues_only() -> None:
    timeline = (TimelineEntry(id="a", start_time=ANCHOR, status="已签单", description="接口联调"),)
    defaults = {PeriodGranularity.DAY: PeriodSummary(current_summary="x", issues="接口已调通", next_summary="")}

    summary = derive_period_summary(timeline, defaults, ANCHOR, PeriodGranularity.DAY)

    assert summary.current_summary == "[已签单] 接口联调"
    assert summary.issues == "接口已调通"
    assert summary.next_summary == "下期计划待同步"


def test_risk_keywords_are_configurable() -> None:
    timeline = (TimelineEntry(id="a", start_time=ANCHOR, status="Blocked by vendor", description="vendor SLA"),)
    policy = ReportingPolicy(risk_keywords=("blocked", "risk"))

    summary = derive_period_summary(timeline, {}, ANCHOR, PeriodGranularity.DAY, policy=policy)
    default_summary = derive_period_summary(timeline, {}, ANCHOR, PeriodGranularity.DAY)

    assert summary.issues == "vendor SLA"
    assert default_summary.issues == "进度正常，暂无重大风险"


def test_derivation_is_deterministic(support_project: SupportProject) -> None:
    first = derive_period_summary(support_project.timeline, {}, ANCHOR, PeriodGranularity.MONTH)
    second = derive_period_summary(support_project.timeline, {}, ANCHOR, PeriodGranularity.MONTH)

    assert first == second


def test_providers_share_one_capability(support_project: SupportProject) -> None:
    table = {PeriodGranularity.QUARTER: PeriodSummary("本季目标", "进展顺利", "下季目标")}
    goal = make_goal("g-1", period_summaries=table)
    project = replace(support_project, period_defaults=table)

    static = goal_summary_provider(goal)
    live = project_summary_provider(project)

    assert isinstance(static, StaticSummaryProvider)
    assert isinstance(live, TimelineSummaryProvider)
    assert static.summarize(ANCHOR, PeriodGranularity.QUARTER) == table[PeriodGranularity.QUARTER]
    assert static.summarize(ANCHOR, PeriodGranularity.WEEK) == PeriodSummary("", "", "")
    assert live.summarize(date(2030, 1, 1), PeriodGranularity.QUARTER) == table[PeriodGranularity.QUARTER]


@pytest.mark.parametrize(
    ("progress", "status", "expected"),
    [
        (100, GoalStatus.STABLE, 100),
        (45, GoalStatus.STABLE, 85),
        (70, GoalStatus.DEVIATED, 80),
        (30, GoalStatus.DEVIATED, 50),
        (0, GoalStatus.HIGH_RISK, 5),
        (10, GoalStatus.HIGH_RISK, 15),
        (90, GoalStatus.HIGH_RISK, 50),
    ],
)
def test_estimate_achievement(progress: int, status: GoalStatus, expected: int) -> None:
    assert estimate_achievement(progress, status) == expected
