"""Compile goals and support projects into sectioned meeting/timesheet exports."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from gia.models.entities import (
    ActionItem,
    DailyReport,
    DateRange,
    Goal,
    GoalStatus,
    PeriodGranularity,
    PeriodOverview,
    PeriodSummary,
    ReportSegment,
    SupportProject,
)
from gia.models.policy import DEFAULT_POLICY, ReportingPolicy
from gia.services.export_fields import (
    MEETING_FIELDS,
    REPORT_DETAIL_FIELDS,
    SUPPORT_FIELDS,
    TIMESHEET_FIELDS,
    ExportField,
    ExportFieldSpec,
    ExportMode,
    MeetingField,
    ReportDetailField,
    SupportField,
    TimesheetField,
    csv_row,
    select_fields,
)
from gia.services.periods import coerce_granularity
from gia.services.summaries import estimate_achievement, goal_summary_provider, project_summary_provider

logger = logging.getLogger("gia.reports")

BOM = "\ufeff"
NO_SPECIAL_DATA = "暂无符合条件的重点专项数据"


@dataclass(frozen=True, slots=True)
class ExportLine:
    """One output line: quoted CSV cells, or raw comma-joined text when ``quoted`` is false."""

    cells: tuple[str, ...] = ()
    quoted: bool = True

    @classmethod
    def text(cls, value: str) -> ExportLine:
        return cls(cells=(value,), quoted=False)

    def render(self) -> str:
        if self.quoted:
            return csv_row(self.cells)
        return ",".join(self.cells)


BLANK = ExportLine()


@dataclass(slots=True)
class ExportSection:
    title: str | None = None
    lines: list[ExportLine] = field(default_factory=list)


@dataclass(slots=True)
class ExportDocument:
    sections: list[ExportSection] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return sum(1 for section in self.sections for line in section.lines if line.quoted and line.cells)


# ---------- Cell extractors ----------
GoalCell = Callable[[Goal, PeriodSummary, ReportingPolicy], str]
SupportCell = Callable[[SupportProject, PeriodSummary], str]
TimesheetCell = Callable[[Goal, ActionItem, date, ReportingPolicy], str]
ReportDetailCell = Callable[[DailyReport, ReportSegment], str]


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _risk_note(goal: Goal, policy: ReportingPolicy) -> str:
    if goal.status is GoalStatus.HIGH_RISK:
        return policy.high_risk_note
    return policy.normal_risk_note


_GOAL_CELLS: dict[MeetingField, GoalCell] = {
    MeetingField.NAME: lambda goal, summary, policy: goal.name,
    MeetingField.TYPE: lambda goal, summary, policy: goal.type.label,
    MeetingField.OWNER: lambda goal, summary, policy: goal.owner,
    MeetingField.PROGRESS: lambda goal, summary, policy: f"{goal.progress}%",
    MeetingField.STATUS: lambda goal, summary, policy: goal.status.label,
    MeetingField.AI_PROB: lambda goal, summary, policy: f"{estimate_achievement(goal.progress, goal.status)}%",
    MeetingField.RISK: lambda goal, summary, policy: _risk_note(goal, policy),
    MeetingField.CATEGORY: lambda goal, summary, policy: goal.category,
    MeetingField.CURRENT_GOAL: lambda goal, summary, policy: summary.current_summary,
    MeetingField.PROGRESS_AND_RISK: lambda goal, summary, policy: summary.issues,
    MeetingField.NEXT_GOAL: lambda goal, summary, policy: summary.next_summary,
}

_SUPPORT_CELLS: dict[SupportField, SupportCell] = {
    SupportField.NAME: lambda project, summary: project.name,
    SupportField.BU: lambda project, summary: project.bu,
    SupportField.STAGE: lambda project, summary: project.stage,
    SupportField.ESTIMATED_VALUE: lambda project, summary: format_number(project.estimated_value),
    SupportField.VALUE_IMPACT: lambda project, summary: project.value_impact,
    SupportField.INITIATOR: lambda project, summary: project.initiator,
    SupportField.DATE: lambda project, summary: project.project_date.isoformat() if project.project_date else "",
    SupportField.CURRENT_SUMMARY: lambda project, summary: summary.current_summary,
    SupportField.ISSUES: lambda project, summary: summary.issues,
    SupportField.NEXT_SUMMARY: lambda project, summary: summary.next_summary,
}

_TIMESHEET_CELLS: dict[TimesheetField, TimesheetCell] = {
    TimesheetField.DATE: lambda goal, item, anchor, policy: (item.start_date or anchor).isoformat(),
    TimesheetField.NAME: lambda goal, item, anchor, policy: goal.name,
    TimesheetField.CATEGORY: lambda goal, item, anchor, policy: goal.category,
    TimesheetField.ACTION: lambda goal, item, anchor, policy: item.text,
    TimesheetField.OWNER: lambda goal, item, anchor, policy: goal.owner,
    TimesheetField.HOURS: lambda goal, item, anchor, policy: format_number(
        item.hours if item.hours is not None else policy.timesheet_default_hours
    ),
}

_REPORT_DETAIL_CELLS: dict[ReportDetailField, ReportDetailCell] = {
    ReportDetailField.DATE: lambda report, segment: report.report_date.isoformat(),
    ReportDetailField.USER_NAME: lambda report, segment: report.user_name,
    ReportDetailField.ROLE: lambda report, segment: report.role,
    ReportDetailField.GOAL_NAME: lambda report, segment: segment.goal_name,
    ReportDetailField.HOURS: lambda report, segment: format_number(segment.hours),
    ReportDetailField.CONTENT: lambda report, segment: segment.content,
    ReportDetailField.SUMMARY: lambda report, segment: segment.summary or segment.content,
}


def _ensure_exhaustive(fields: type[enum.Enum], extractors: Mapping[ExportField, object]) -> None:
    missing = [member.value for member in fields if member not in extractors]
    if missing:
        raise RuntimeError(f"{fields.__name__} has no cell extractor for: {', '.join(missing)}")


_ensure_exhaustive(MeetingField, _GOAL_CELLS)
_ensure_exhaustive(SupportField, _SUPPORT_CELLS)
_ensure_exhaustive(TimesheetField, _TIMESHEET_CELLS)
_ensure_exhaustive(ReportDetailField, _REPORT_DETAIL_CELLS)


def _header(fields: Sequence[ExportFieldSpec]) -> ExportLine:
    return ExportLine(cells=tuple(spec.label for spec in fields))


# ---------- Goal selection ----------
def is_special_goal(goal: Goal, policy: ReportingPolicy = DEFAULT_POLICY) -> bool:
    return (
        goal.product_line == policy.special_marker
        or goal.category == policy.special_category
        or policy.special_marker in goal.tags
    )


def group_by_product_line(goals: Sequence[Goal], default: str) -> dict[str, list[Goal]]:
    """Group goals by product line, keeping first-seen group order."""

    grouped: dict[str, list[Goal]] = {}
    for goal in goals:
        grouped.setdefault(goal.product_line or default, []).append(goal)
    return grouped


def apply_risk_filter(goals: Sequence[Goal], risk_only: bool) -> list[Goal]:
    if not risk_only:
        return list(goals)
    return [goal for goal in goals if goal.status is not GoalStatus.STABLE]


# ---------- Sections ----------
def _overview_section(overview: PeriodOverview, unit: PeriodGranularity) -> ExportSection:
    return ExportSection(
        title=f"一、总体目标概览 ({unit.label}度)",
        lines=[
            ExportLine.text(f"完成情况: {overview.completion}"),
            ExportLine.text(f"风险说明: {overview.risk}"),
            ExportLine.text(f"重点专项总结: {overview.special}"),
            BLANK,
        ],
    )


def _goal_detail_section(
    goals: Sequence[Goal],
    fields: Sequence[ExportFieldSpec],
    anchor: date,
    unit: PeriodGranularity,
    policy: ReportingPolicy,
) -> ExportSection:
    section = ExportSection(title="二、目标执行明细")
    for product_line, line_goals in group_by_product_line(goals, policy.default_product_line).items():
        section.lines.append(ExportLine.text(f"【产线：{product_line}】"))
        section.lines.append(_header(fields))
        for goal in line_goals:
            summary = goal_summary_provider(goal).summarize(anchor, unit)
            section.lines.append(
                ExportLine(cells=tuple(_GOAL_CELLS[spec.id](goal, summary, policy) for spec in fields))
            )
        section.lines.append(BLANK)
    return section


def _support_section(
    projects: Sequence[SupportProject],
    fields: Sequence[ExportFieldSpec],
    anchor: date,
    unit: PeriodGranularity,
    policy: ReportingPolicy,
) -> ExportSection:
    section = ExportSection(title="三、支撑项目说明", lines=[_header(fields)])
    for project in projects:
        summary = project_summary_provider(project, policy).summarize(anchor, unit)
        section.lines.append(ExportLine(cells=tuple(_SUPPORT_CELLS[spec.id](project, summary) for spec in fields)))
    section.lines.append(BLANK)
    return section


def _special_section(
    goals: Sequence[Goal],
    anchor: date,
    unit: PeriodGranularity,
    policy: ReportingPolicy,
) -> ExportSection:
    section = ExportSection(title="四、重点专项与跨事业部支撑明细 (专项标签/跨BU)")
    special = [goal for goal in goals if is_special_goal(goal, policy)]
    if not special:
        section.lines.append(ExportLine.text(NO_SPECIAL_DATA))
        return section

    section.lines.append(
        ExportLine(
            cells=("模块", "目标名称", "负责人", "当前进度", f"本{unit.label}进展", f"下{unit.label}计划"),
            quoted=False,
        )
    )
    for goal in special:
        summary = goal_summary_provider(goal).summarize(anchor, unit)
        section.lines.append(
            ExportLine(
                cells=(
                    goal.product_line,
                    goal.name,
                    goal.owner,
                    f"{goal.progress}%",
                    summary.issues,
                    summary.next_summary,
                )
            )
        )
    return section


# ---------- Compilation ----------
def compile_meeting_report(
    goals: Sequence[Goal],
    support_projects: Sequence[SupportProject],
    granularity: PeriodGranularity | str,
    anchor: date,
    *,
    selected_fields: Sequence[MeetingField | str] | None = None,
    selected_support_fields: Sequence[SupportField | str] | None = None,
    risk_only: bool = False,
    overview: PeriodOverview | None = None,
    policy: ReportingPolicy = DEFAULT_POLICY,
) -> ExportDocument:
    """Build the four-section meeting document.

    The risk-only filter narrows the goal-detail section only; the special
    section always considers every goal passed in.
    """

    unit = coerce_granularity(granularity)
    fields = select_fields(MEETING_FIELDS, selected_fields, unit)
    support_fields = select_fields(SUPPORT_FIELDS, selected_support_fields, unit)

    return ExportDocument(
        sections=[
            _overview_section(overview or PeriodOverview(), unit),
            _goal_detail_section(apply_risk_filter(goals, risk_only), fields, anchor, unit, policy),
            _support_section(support_projects, support_fields, anchor, unit, policy),
            _special_section(goals, anchor, unit, policy),
        ]
    )


def compile_timesheet_report(
    goals: Sequence[Goal],
    granularity: PeriodGranularity | str,
    anchor: date,
    *,
    selected_fields: Sequence[TimesheetField | str] | None = None,
    risk_only: bool = False,
    policy: ReportingPolicy = DEFAULT_POLICY,
) -> ExportDocument:
    """Flat table with one row per (goal, action item) pair."""

    unit = coerce_granularity(granularity)
    fields = select_fields(TIMESHEET_FIELDS, selected_fields, unit)
    section = ExportSection(lines=[_header(fields)])
    for goal in apply_risk_filter(goals, risk_only):
        for item in goal.action_items:
            section.lines.append(
                ExportLine(cells=tuple(_TIMESHEET_CELLS[spec.id](goal, item, anchor, policy) for spec in fields))
            )
    return ExportDocument(sections=[section])


def compile_report_details(
    reports: Sequence[DailyReport],
    period: DateRange,
    *,
    selected_fields: Sequence[ReportDetailField | str] | None = None,
) -> ExportDocument:
    """Hours detail table: one row per report segment for reports dated within ``period``.

    The header row is written unquoted; data rows are quoted like every other export.
    """

    fields = select_fields(REPORT_DETAIL_FIELDS, selected_fields, PeriodGranularity.DAY)
    section = ExportSection(lines=[ExportLine(cells=tuple(spec.label for spec in fields), quoted=False)])
    for report in reports:
        if not period.contains(report.report_date):
            continue
        for segment in report.segments:
            section.lines.append(
                ExportLine(cells=tuple(_REPORT_DETAIL_CELLS[spec.id](report, segment) for spec in fields))
            )
    document = ExportDocument(sections=[section])
    logger.info(
        "Compiled %s export for %s..%s: %d rows",
        ExportMode.REPORT_DETAIL.value,
        period.start,
        period.end,
        document.row_count,
    )
    return document


def compile_report(
    mode: ExportMode | str,
    goals: Sequence[Goal],
    support_projects: Sequence[SupportProject],
    granularity: PeriodGranularity | str,
    anchor: date,
    *,
    selected_fields: Sequence[str] | None = None,
    selected_support_fields: Sequence[str] | None = None,
    risk_only: bool = False,
    overview: PeriodOverview | None = None,
    policy: ReportingPolicy = DEFAULT_POLICY,
) -> ExportDocument:
    export_mode = ExportMode(mode)
    if export_mode is ExportMode.MEETING:
        document = compile_meeting_report(
            goals,
            support_projects,
            granularity,
            anchor,
            selected_fields=selected_fields,
            selected_support_fields=selected_support_fields,
            risk_only=risk_only,
            overview=overview,
            policy=policy,
        )
    elif export_mode is ExportMode.TIMESHEET:
        document = compile_timesheet_report(
            goals,
            granularity,
            anchor,
            selected_fields=selected_fields,
            risk_only=risk_only,
            policy=policy,
        )
    else:
        raise ValueError(f"{export_mode.value} exports are compiled from daily reports, not goals.")
    logger.info(
        "Compiled %s export for %s anchored at %s: %d sections, %d rows",
        export_mode.value,
        coerce_granularity(granularity).value,
        anchor,
        len(document.sections),
        document.row_count,
    )
    return document


# ---------- Rendering ----------
def render_csv(document: ExportDocument) -> str:
    """Serialize to CSV text prefixed with a byte-order mark, ``\\n`` line endings."""

    parts: list[str] = [BOM]
    for section in document.sections:
        if section.title is not None:
            parts.append(section.title + "\n")
        for line in section.lines:
            parts.append(line.render() + "\n")
    return "".join(parts)


def compile_csv(*args, **kwargs) -> str:
    """``compile_report`` followed by ``render_csv``."""

    return render_csv(compile_report(*args, **kwargs))


def _write_text(sheet, row: int, column: int, value: str):
    cell = sheet.cell(row=row, column=column, value=value)
    # Stored as plain text so "=..." never becomes a formula.
    cell.data_type = "s"
    return cell


def render_xlsx(document: ExportDocument, sheet_title: str = "report") -> bytes:
    """Write the document lines into a single worksheet, section titles in bold."""

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_title

    row_idx = 1
    for section in document.sections:
        if section.title is not None:
            _write_text(sheet, row_idx, 1, section.title).font = Font(bold=True)
            row_idx += 1
        for line in section.lines:
            for col_idx, value in enumerate(line.cells, start=1):
                _write_text(sheet, row_idx, col_idx, value)
            row_idx += 1

    output = BytesIO()
    workbook.save(output)
    return output.getvalue()


def export_filename(
    mode: ExportMode,
    granularity: PeriodGranularity,
    export_date: date,
    *,
    extension: str = "csv",
    policy: ReportingPolicy = DEFAULT_POLICY,
) -> str:
    return f"{policy.export_filename_prefix}_{mode.label}_{granularity.label}报_{export_date.isoformat()}.{extension}"


def report_details_filename(
    period: DateRange,
    *,
    extension: str = "csv",
    policy: ReportingPolicy = DEFAULT_POLICY,
) -> str:
    return (
        f"{policy.export_filename_prefix}_{ExportMode.REPORT_DETAIL.label}_"
        f"{period.start.isoformat()}_至_{period.end.isoformat()}.{extension}"
    )
