from __future__ import annotations

import json
from typing import Any

from conftest import make_goal
from gia.models.entities import PeriodGranularity, PeriodOverview
from gia.services.advisory_service import DEFAULT_SUGGESTIONS, AdvisoryService, RiskAnalysis


class _StubClient:
    def __init__(self, response: str | Exception) -> None:
        self.response = response
        self.prompts: list[str] = []

    def generate(self, prompt: str, *, schema: dict[str, Any] | None = None) -> str:
        self.prompts.append(prompt)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def test_without_client_every_call_returns_fallbacks() -> None:
    service = AdvisoryService()
    goal = make_goal("g1")

    assert service.analyze_report_risk("日报", goal) == RiskAnalysis()
    assert service.suggest_pitfalls("部署") == list(DEFAULT_SUGGESTIONS)
    assert service.extract_insight("日报") is None
    assert service.summarize_period([goal], PeriodGranularity.WEEK) == PeriodOverview()
    assert service.calls_failed == 0


def test_client_errors_are_absorbed() -> None:
    service = AdvisoryService(client=_StubClient(TimeoutError("upstream timeout")))

    assert service.analyze_report_risk("日报", make_goal("g1")).level == "低"
    assert service.suggest_pitfalls("部署") == list(DEFAULT_SUGGESTIONS)
    assert service.calls_failed == 2


def test_invalid_json_is_absorbed() -> None:
    service = AdvisoryService(client=_StubClient("not json"))

    assert service.extract_insight("日报") is None
    assert service.calls_failed == 1


def test_structured_responses_are_mapped() -> None:
    payload = {
        "level": "高",
        "explanation": "接口授权阻塞",
        "affectedGoals": ["台湾地图"],
        "suggestedActions": ["升级协调"],
    }
    client = _StubClient(json.dumps(payload, ensure_ascii=False))
    service = AdvisoryService(client=client)

    analysis = service.analyze_report_risk("今天接口仍未授权", make_goal("g1", name="台湾地图"))

    assert analysis == RiskAnalysis(
        level="高",
        explanation="接口授权阻塞",
        affected_goals=("台湾地图",),
        suggested_actions=("升级协调",),
    )
    assert "台湾地图" in client.prompts[0]


def test_incomplete_insight_falls_back_to_none() -> None:
    service = AdvisoryService(client=_StubClient(json.dumps({"title": "x"})))

    assert service.extract_insight("日报") is None


def test_period_overview_from_client() -> None:
    client = _StubClient(json.dumps({"completion": "整体平稳", "risk": "", "special": "专项推进"}, ensure_ascii=False))
    service = AdvisoryService(client=client)

    overview = service.summarize_period([make_goal("g1")], PeriodGranularity.MONTH)

    assert overview == PeriodOverview(completion="整体平稳", risk="", special="专项推进")
    assert "本月" in client.prompts[0]
