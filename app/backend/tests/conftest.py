from __future__ import annotations

from collections.abc import Generator
from datetime import date

import pytest
from fastapi.testclient import TestClient

from gia.core.config import get_settings
from gia.main import create_app
from gia.models.entities import (
    ActionItem,
    Goal,
    GoalStatus,
    GoalType,
    PeriodGranularity,
    PeriodSummary,
    SupportProject,
    TimelineEntry,
)

ANCHOR = date(2026, 2, 26)


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    get_settings.cache_clear()
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()


def auth_headers(
    *,
    role: str = "dept_head",
    oid: str = "oid-dept-head",
    email: str = "dept.head@test.local",
    display_name: str = "Dept Head",
) -> dict[str, str]:
    return {
        "X-MS-OID": oid,
        "X-MS-EMAIL": email,
        "X-MS-DISPLAY-NAME": display_name,
        "X-GIA-ROLE": role,
    }


def make_goal(
    goal_id: str,
    *,
    name: str | None = None,
    product_line: str = "地图",
    status: GoalStatus = GoalStatus.STABLE,
    progress: int = 50,
    goal_type: GoalType = GoalType.INDIVIDUAL,
    category: str = "地图",
    tags: tuple[str, ...] = (),
    action_items: tuple[ActionItem, ...] = (),
    period_summaries: dict[PeriodGranularity, PeriodSummary] | None = None,
) -> Goal:
    return Goal(
        id=goal_id,
        name=name or f"Goal {goal_id}",
        type=goal_type,
        owner="Alex",
        progress=progress,
        status=status,
        category=category,
        product_line=product_line,
        tags=tags,
        action_items=action_items,
        period_summaries=period_summaries or {},
    )


@pytest.fixture()
def support_project() -> SupportProject:
    return SupportProject(
        id="s-b1",
        name="物流事业部：武汉样板间建设",
        bu="物流事业部",
        stage="正式交付",
        estimated_value=150,
        value_impact="降低二次派送成本约 15%",
        initiator="Sarah (TL)",
        project_date=date(2026, 2, 10),
        timeline=(
            TimelineEntry(id="te-1", start_time=date(2026, 2, 23), status="POC验证", description="完成武汉节点压力测试"),
            TimelineEntry(id="te-2", start_time=date(2026, 2, 25), status="接口阻塞", description="等待数据接口授权"),
            TimelineEntry(id="te-3", start_time=date(2026, 3, 3), status="正式交付", description="启动深圳节点联调"),
            TimelineEntry(id="te-4", start_time=date(2026, 6, 1), status="规划", description="全国推广"),
        ),
    )
