"""Boundary to the AI advisory collaborator.

Every call returns a well-defined fallback when no client is configured or the
client fails, so reports render the same with or without AI-derived text.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from gia.models.entities import Goal, PeriodGranularity, PeriodOverview

logger = logging.getLogger("gia.advisory")

RISK_LEVELS = ("低", "中", "高")
FALLBACK_EXPLANATION = "暂时无法分析。"
DEFAULT_SUGGESTIONS: tuple[str, ...] = ("检查依赖管理", "复核部署配置")

RISK_ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "level": {"type": "string", "enum": list(RISK_LEVELS)},
        "explanation": {"type": "string"},
        "affectedGoals": {"type": "array", "items": {"type": "string"}},
        "suggestedActions": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["level", "explanation", "affectedGoals", "suggestedActions"],
}

INSIGHT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "type": {"type": "string", "enum": ["踩坑", "最佳实践"]},
        "trigger": {"type": "string"},
        "solution": {"type": "string"},
        "reliability": {"type": "number"},
        "category": {"type": "string"},
    },
    "required": ["title", "type", "trigger", "solution", "reliability"],
}

OVERVIEW_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "completion": {"type": "string"},
        "risk": {"type": "string"},
        "special": {"type": "string"},
    },
}


class AdvisoryClient(Protocol):
    """Text generation backend; returns JSON text when ``schema`` is given."""

    def generate(self, prompt: str, *, schema: dict[str, Any] | None = None) -> str: ...


@dataclass(frozen=True, slots=True)
class RiskAnalysis:
    level: str = "低"
    explanation: str = FALLBACK_EXPLANATION
    affected_goals: tuple[str, ...] = ()
    suggested_actions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Insight:
    title: str
    type: str
    trigger: str
    solution: str
    reliability: float
    category: str = ""


@dataclass(slots=True)
class AdvisoryService:
    client: AdvisoryClient | None = None
    calls_failed: int = field(default=0, init=False)

    def _generate(self, prompt: str, schema: dict[str, Any] | None = None) -> str | None:
        if self.client is None:
            return None
        try:
            return self.client.generate(prompt, schema=schema)
        except Exception:
            self.calls_failed += 1
            logger.warning("Advisory call failed; using fallback", exc_info=True)
            return None

    def _generate_json(self, prompt: str, schema: dict[str, Any]) -> Any:
        text = self._generate(prompt, schema)
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            self.calls_failed += 1
            logger.warning("Advisory response is not valid JSON; using fallback")
            return None

    def analyze_report_risk(self, report_content: str, goal: Goal) -> RiskAnalysis:
        prompt = (
            "作为目标管理系统的 AI 风险分析师，请根据以下日报内容针对目标和计划进行分析。\n"
            f"目标：{goal.name} (当前进度: {goal.progress}%)\n"
            f'日报内容："{report_content}"\n'
            "请使用中文返回结果，包含风险等级、解释、受影响目标及建议。"
        )
        data = self._generate_json(prompt, RISK_ANALYSIS_SCHEMA)
        if not isinstance(data, dict):
            return RiskAnalysis()
        level = data.get("level")
        return RiskAnalysis(
            level=level if level in RISK_LEVELS else "低",
            explanation=str(data.get("explanation") or FALLBACK_EXPLANATION),
            affected_goals=tuple(str(item) for item in data.get("affectedGoals") or ()),
            suggested_actions=tuple(str(item) for item in data.get("suggestedActions") or ()),
        )

    def suggest_pitfalls(self, task: str) -> list[str]:
        prompt = f'基于任务 "{task}"，建议 3 个潜在的历史“踩坑”点或最佳实践。请保持简短且专业，并使用中文。'
        data = self._generate_json(prompt, {"type": "array", "items": {"type": "string"}})
        if not isinstance(data, list):
            return list(DEFAULT_SUGGESTIONS)
        return [str(item) for item in data]

    def extract_insight(self, daily_content: str) -> Insight | None:
        prompt = (
            "你是一个经验丰富的项目专家。请分析以下日报内容，提取其中的“踩坑教训”或“最佳实践”。\n"
            f"日报内容：{daily_content}\n"
            "如果内容中不包含明显的经验值，请返回 null。"
        )
        data = self._generate_json(prompt, INSIGHT_SCHEMA)
        if not isinstance(data, dict):
            return None
        try:
            return Insight(
                title=str(data["title"]),
                type=str(data["type"]),
                trigger=str(data["trigger"]),
                solution=str(data["solution"]),
                reliability=float(data["reliability"]),
                category=str(data.get("category") or ""),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Advisory insight is missing required fields; using fallback")
            return None

    def summarize_period(self, goals: Sequence[Goal], granularity: PeriodGranularity) -> PeriodOverview:
        lines = [f"- {goal.name}: {goal.progress}% ({goal.status.label})" for goal in goals]
        prompt = (
            f"请基于以下目标数据，总结本{granularity.label}的完成情况、风险说明及重点专项进展：\n" + "\n".join(lines)
        )
        data = self._generate_json(prompt, OVERVIEW_SCHEMA)
        if not isinstance(data, dict):
            return PeriodOverview()
        return PeriodOverview(
            completion=str(data.get("completion") or ""),
            risk=str(data.get("risk") or ""),
            special=str(data.get("special") or ""),
        )
