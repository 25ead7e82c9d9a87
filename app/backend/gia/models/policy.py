"""Reporting policy knobs consumed by the pure period/summary/export core."""

from __future__ import annotations

from dataclasses import dataclass

MONDAY = 0


@dataclass(frozen=True, slots=True)
class ReportingPolicy:
    """Locale-dependent choices for period boundaries, risk detection and exports.

    ``week_start`` follows ``date.weekday()`` numbering (0=Monday).
    """

    week_start: int = MONDAY
    risk_keywords: tuple[str, ...] = ("阻塞", "风险")
    current_placeholder: str = "本期暂无计划动作"
    issues_placeholder: str = "进度正常，暂无重大风险"
    next_placeholder: str = "下期计划待同步"
    summary_separator: str = "; "
    special_marker: str = "专项"
    special_category: str = "组织专项"
    default_product_line: str = "其他"
    high_risk_note: str = "资源依赖阻塞"
    normal_risk_note: str = "正常"
    timesheet_default_hours: float = 8.0
    export_filename_prefix: str = "GIA"

    def __post_init__(self) -> None:
        if not 0 <= self.week_start <= 6:
            raise ValueError(f"week_start must be within 0..6, got {self.week_start}.")


DEFAULT_POLICY = ReportingPolicy()
