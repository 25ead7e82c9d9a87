"""Export field catalogs, selection with period relabeling, and CSV escaping."""

from __future__ import annotations

import csv
import enum
import io
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from gia.models.entities import PeriodGranularity


class UnknownExportFieldError(ValueError):
    """Raised for a field id that is not part of the export catalog."""


class ExportMode(str, enum.Enum):
    MEETING = "meeting"
    TIMESHEET = "timesheet"
    REPORT_DETAIL = "report-details"

    @property
    def label(self) -> str:
        return EXPORT_MODE_LABELS[self]


EXPORT_MODE_LABELS: dict[ExportMode, str] = {
    ExportMode.MEETING: "经分会汇报",
    ExportMode.TIMESHEET: "工时系统对齐",
    ExportMode.REPORT_DETAIL: "工时明细",
}


class MeetingField(str, enum.Enum):
    NAME = "name"
    TYPE = "type"
    OWNER = "owner"
    PROGRESS = "progress"
    STATUS = "status"
    AI_PROB = "aiProb"
    RISK = "risk"
    CATEGORY = "category"
    CURRENT_GOAL = "currentGoal"
    PROGRESS_AND_RISK = "progressAndRisk"
    NEXT_GOAL = "nextGoal"


class SupportField(str, enum.Enum):
    NAME = "name"
    BU = "bu"
    STAGE = "stage"
    ESTIMATED_VALUE = "estimatedValue"
    VALUE_IMPACT = "valueImpact"
    INITIATOR = "initiator"
    DATE = "date"
    CURRENT_SUMMARY = "currentSummary"
    ISSUES = "issues"
    NEXT_SUMMARY = "nextSummary"


class TimesheetField(str, enum.Enum):
    DATE = "date"
    NAME = "name"
    CATEGORY = "category"
    ACTION = "action"
    OWNER = "owner"
    HOURS = "hours"


class ReportDetailField(str, enum.Enum):
    DATE = "date"
    USER_NAME = "userName"
    ROLE = "role"
    GOAL_NAME = "goalName"
    HOURS = "hours"
    CONTENT = "content"
    SUMMARY = "summary"


ExportField = MeetingField | SupportField | TimesheetField | ReportDetailField


@dataclass(frozen=True, slots=True)
class ExportFieldSpec:
    id: ExportField
    label: str
    default_selected: bool = True


MEETING_FIELDS: tuple[ExportFieldSpec, ...] = (
    ExportFieldSpec(MeetingField.NAME, "目标名称"),
    ExportFieldSpec(MeetingField.TYPE, "组织层级"),
    ExportFieldSpec(MeetingField.OWNER, "责任人"),
    ExportFieldSpec(MeetingField.PROGRESS, "当前进度"),
    ExportFieldSpec(MeetingField.STATUS, "健康状态"),
    ExportFieldSpec(MeetingField.AI_PROB, "AI达成预测"),
    ExportFieldSpec(MeetingField.RISK, "关键风险点"),
    ExportFieldSpec(MeetingField.CATEGORY, "业务分类", default_selected=False),
    ExportFieldSpec(MeetingField.CURRENT_GOAL, "本次目标"),
    ExportFieldSpec(MeetingField.PROGRESS_AND_RISK, "完成情况"),
    ExportFieldSpec(MeetingField.NEXT_GOAL, "下次目标"),
)

SUPPORT_FIELDS: tuple[ExportFieldSpec, ...] = (
    ExportFieldSpec(SupportField.NAME, "项目名称"),
    ExportFieldSpec(SupportField.BU, "支撑事业部"),
    ExportFieldSpec(SupportField.STAGE, "阶段状态"),
    ExportFieldSpec(SupportField.ESTIMATED_VALUE, "预估价值(万)"),
    ExportFieldSpec(SupportField.VALUE_IMPACT, "价值影响力"),
    ExportFieldSpec(SupportField.INITIATOR, "发起人", default_selected=False),
    ExportFieldSpec(SupportField.DATE, "日期", default_selected=False),
    ExportFieldSpec(SupportField.CURRENT_SUMMARY, "本次支撑总结"),
    ExportFieldSpec(SupportField.ISSUES, "存在问题"),
    ExportFieldSpec(SupportField.NEXT_SUMMARY, "下次支撑总结"),
)

TIMESHEET_FIELDS: tuple[ExportFieldSpec, ...] = (
    ExportFieldSpec(TimesheetField.DATE, "日期"),
    ExportFieldSpec(TimesheetField.NAME, "目标项目"),
    ExportFieldSpec(TimesheetField.CATEGORY, "业务分类"),
    ExportFieldSpec(TimesheetField.ACTION, "执行动作"),
    ExportFieldSpec(TimesheetField.OWNER, "负责人"),
    ExportFieldSpec(TimesheetField.HOURS, "工时(h)"),
)

REPORT_DETAIL_FIELDS: tuple[ExportFieldSpec, ...] = (
    ExportFieldSpec(ReportDetailField.DATE, "日期"),
    ExportFieldSpec(ReportDetailField.USER_NAME, "填报人"),
    ExportFieldSpec(ReportDetailField.ROLE, "角色"),
    ExportFieldSpec(ReportDetailField.GOAL_NAME, "关联目标"),
    ExportFieldSpec(ReportDetailField.HOURS, "投入工时(h)"),
    ExportFieldSpec(ReportDetailField.CONTENT, "执行内容", default_selected=False),
    ExportFieldSpec(ReportDetailField.SUMMARY, "一句话总结"),
)

# Header templates for fields whose label depends on the active period.
_PERIOD_LABELS: dict[enum.Enum, str] = {
    MeetingField.CURRENT_GOAL: "本{period}目标",
    MeetingField.NEXT_GOAL: "下{period}目标",
    SupportField.CURRENT_SUMMARY: "本{period}支撑总结",
    SupportField.NEXT_SUMMARY: "下{period}支撑总结",
}


def csv_escape(value: str) -> str:
    """Quote a cell unconditionally, doubling embedded quotes."""

    return '"' + value.replace('"', '""') + '"'


def csv_row(values: Iterable[str]) -> str:
    """One always-quoted CSV row without its line terminator."""

    buffer = io.StringIO()
    csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n").writerow(list(values))
    return buffer.getvalue().removesuffix("\n")


def parse_field_ids(
    catalog: Sequence[ExportFieldSpec],
    field_ids: Iterable[str] | None,
) -> set[ExportField] | None:
    """Map raw field ids onto the catalog's enum; ``None`` means "use defaults"."""

    if field_ids is None:
        return None
    by_id = {spec.id.value: spec.id for spec in catalog}
    parsed: set[ExportField] = set()
    for raw in field_ids:
        member = by_id.get(raw)
        if member is None:
            allowed = ", ".join(by_id)
            raise UnknownExportFieldError(f"Unknown export field {raw!r}; expected one of: {allowed}.")
        parsed.add(member)
    return parsed


def select_fields(
    catalog: Sequence[ExportFieldSpec],
    selected: Iterable[ExportField | str] | None,
    granularity: PeriodGranularity,
) -> list[ExportFieldSpec]:
    """Return the chosen fields in catalog order, with period-specific labels applied."""

    if selected is None:
        chosen = {spec.id for spec in catalog if spec.default_selected}
    else:
        raw = [item.value if isinstance(item, enum.Enum) else item for item in selected]
        chosen = parse_field_ids(catalog, raw) or set()

    fields: list[ExportFieldSpec] = []
    for spec in catalog:
        if spec.id not in chosen:
            continue
        template = _PERIOD_LABELS.get(spec.id)
        if template is not None:
            spec = replace(spec, label=template.format(period=granularity.label))
        fields.append(spec)
    return fields


def field_catalog(mode: ExportMode) -> tuple[ExportFieldSpec, ...]:
    """Primary field catalog for an export mode."""

    if mode is ExportMode.MEETING:
        return MEETING_FIELDS
    if mode is ExportMode.REPORT_DETAIL:
        return REPORT_DETAIL_FIELDS
    return TIMESHEET_FIELDS
