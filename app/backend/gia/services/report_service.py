"""Overview, summary, and export service layer."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from fastapi import HTTPException, status

from gia.core.auth import RequestUserContext
from gia.core.config import Settings, get_settings
from gia.models.entities import (
    SUPPORT_STAGES,
    DailyReport,
    DateRange,
    Goal,
    GoalStatus,
    PeriodGranularity,
    PeriodOverview,
    SupportProject,
)
from gia.services.advisory_service import AdvisoryService
from gia.services.export_fields import (
    SUPPORT_FIELDS,
    ExportMode,
    UnknownExportFieldError,
    field_catalog,
    select_fields,
)
from gia.services.periods import InvalidGranularityError, coerce_granularity, resolve_period
from gia.services.report_compiler import (
    ExportDocument,
    compile_report,
    compile_report_details,
    export_filename,
    render_csv,
    render_xlsx,
    report_details_filename,
)
from gia.services.summaries import derive_period_summary

EXPORT_FORMATS = {
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@dataclass(slots=True)
class GoalFilters:
    product_line: str | None = None
    category: str | None = None
    importance: str | None = None
    goal_type: str | None = None

    def matches(self, goal: Goal) -> bool:
        if self.product_line and goal.product_line != self.product_line:
            return False
        if self.category and goal.category != self.category:
            return False
        if self.importance and goal.importance != self.importance:
            return False
        if self.goal_type and goal.type.value != self.goal_type:
            return False
        return True


@dataclass(slots=True)
class SupportFilters:
    bu: str | None = None
    stage: str | None = None

    def matches(self, project: SupportProject) -> bool:
        if self.bu and project.bu != self.bu:
            return False
        if self.stage and project.stage != self.stage:
            return False
        return True


@dataclass(slots=True)
class ExportRequestData:
    mode: str
    anchor: date
    granularity: str
    goals: list[Goal]
    support_projects: list[SupportProject]
    selected_fields: list[str] | None = None
    selected_support_fields: list[str] | None = None
    risk_only: bool = False
    overview: PeriodOverview | None = None
    goal_filters: GoalFilters | None = None
    support_filters: SupportFilters | None = None
    export_date: date | None = None


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


def _unprocessable(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class ReportService:
    """Service implementing period summaries and report exports."""

    def __init__(self, settings: Settings | None = None, advisory: AdvisoryService | None = None) -> None:
        self.settings = settings or get_settings()
        self.policy = self.settings.reporting_policy()
        self.advisory = advisory or AdvisoryService()

    # ---------- Validation ----------
    @staticmethod
    def _granularity(value: str) -> PeriodGranularity:
        try:
            return coerce_granularity(value)
        except InvalidGranularityError as exc:
            raise _unprocessable(str(exc)) from exc

    @staticmethod
    def _mode(value: str) -> ExportMode:
        try:
            return ExportMode(value.strip().lower())
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Unknown export mode. Expected one of: meeting, timesheet, report-details.",
            ) from None

    @staticmethod
    def _format(value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in EXPORT_FORMATS:
            raise _unprocessable("format must be one of: csv, xlsx.")
        return normalized

    # ---------- Scope ----------
    @staticmethod
    def visible_goals(
        context: RequestUserContext,
        goals: Sequence[Goal],
        filters: GoalFilters | None = None,
    ) -> list[Goal]:
        return [goal for goal in goals if context.can_view(goal) and (filters is None or filters.matches(goal))]

    @staticmethod
    def visible_projects(projects: Sequence[SupportProject], filters: SupportFilters | None = None) -> list[SupportProject]:
        return [project for project in projects if filters is None or filters.matches(project)]

    # ---------- Periods ----------
    def resolve(self, *, anchor: date, granularity: str, offset: int) -> dict[str, object]:
        unit = self._granularity(granularity)
        try:
            period = resolve_period(anchor, unit, offset, week_start=self.policy.week_start)
        except (ValueError, OverflowError) as exc:
            raise _unprocessable(f"offset {offset} moves the period outside the supported calendar range.") from exc
        return self.serialize_range(unit, offset, period)

    @staticmethod
    def serialize_range(unit: PeriodGranularity, offset: int, period: DateRange) -> dict[str, object]:
        return {
            "granularity": unit.value,
            "label": unit.label,
            "offset": offset,
            "start": period.start.isoformat(),
            "end": period.end.isoformat(),
        }

    # ---------- Summaries ----------
    def support_project_summaries(
        self,
        *,
        anchor: date,
        granularity: str,
        projects: Sequence[SupportProject],
    ) -> list[dict[str, str]]:
        unit = self._granularity(granularity)
        rows: list[dict[str, str]] = []
        for project in projects:
            summary = derive_period_summary(project.timeline, project.period_defaults, anchor, unit, policy=self.policy)
            rows.append(
                {
                    "id": project.id,
                    "name": project.name,
                    "current_summary": summary.current_summary,
                    "issues": summary.issues,
                    "next_summary": summary.next_summary,
                }
            )
        return rows

    def overview_stats(
        self,
        *,
        context: RequestUserContext,
        goals: Sequence[Goal],
        projects: Sequence[SupportProject],
        goal_filters: GoalFilters | None = None,
        support_filters: SupportFilters | None = None,
    ) -> dict[str, object]:
        visible = self.visible_goals(context, goals, goal_filters)
        shown_projects = self.visible_projects(projects, support_filters)
        status_counts = Counter(goal.status for goal in visible)
        stage_counts = Counter(project.stage for project in shown_projects)
        return {
            "goal_total": len(visible),
            "goal_status": [
                {"status": item.value, "label": item.label, "count": status_counts.get(item, 0)}
                for item in GoalStatus
            ],
            "support_total": len(shown_projects),
            "support_stages": [{"stage": stage, "count": stage_counts.get(stage, 0)} for stage in SUPPORT_STAGES],
        }

    # ---------- Exports ----------
    def export_fields(self, *, mode: str, granularity: str) -> dict[str, object]:
        export_mode = self._mode(mode)
        unit = self._granularity(granularity)

        def serialize(catalog) -> list[dict[str, object]]:
            labels = {spec.id: spec.label for spec in select_fields(catalog, [spec.id for spec in catalog], unit)}
            return [
                {"id": spec.id.value, "label": labels[spec.id], "default": spec.default_selected}
                for spec in catalog
            ]

        payload: dict[str, object] = {"mode": export_mode.value, "fields": serialize(field_catalog(export_mode))}
        if export_mode is ExportMode.MEETING:
            payload["support_fields"] = serialize(SUPPORT_FIELDS)
        return payload

    def export_report(
        self,
        *,
        context: RequestUserContext,
        data: ExportRequestData,
        format_name: str = "csv",
    ) -> ExportFilePayload:
        export_mode = self._mode(data.mode)
        if export_mode is ExportMode.REPORT_DETAIL:
            raise _unprocessable("report-details exports are built from daily reports, not goals.")
        unit = self._granularity(data.granularity)
        normalized_format = self._format(format_name)

        goals = self.visible_goals(context, data.goals, data.goal_filters)
        projects = self.visible_projects(data.support_projects, data.support_filters)

        overview = data.overview
        if export_mode is ExportMode.MEETING and overview is None:
            overview = self.advisory.summarize_period(goals, unit)

        try:
            document = compile_report(
                export_mode,
                goals,
                projects,
                unit,
                data.anchor,
                selected_fields=data.selected_fields,
                selected_support_fields=data.selected_support_fields,
                risk_only=data.risk_only,
                overview=overview,
                policy=self.policy,
            )
        except UnknownExportFieldError as exc:
            raise _unprocessable(str(exc)) from exc

        filename = export_filename(
            export_mode,
            unit,
            data.export_date or data.anchor,
            extension=normalized_format,
            policy=self.policy,
        )
        return self._file(document, normalized_format, filename)

    def export_report_details(
        self,
        *,
        start: date,
        end: date,
        reports: Sequence[DailyReport],
        selected_fields: list[str] | None = None,
        format_name: str = "csv",
    ) -> ExportFilePayload:
        normalized_format = self._format(format_name)
        try:
            period = DateRange(start, end)
        except ValueError as exc:
            raise _unprocessable(str(exc)) from exc

        try:
            document = compile_report_details(reports, period, selected_fields=selected_fields)
        except UnknownExportFieldError as exc:
            raise _unprocessable(str(exc)) from exc

        filename = report_details_filename(period, extension=normalized_format, policy=self.policy)
        return self._file(document, normalized_format, filename)

    @staticmethod
    def _file(document: ExportDocument, normalized_format: str, filename: str) -> ExportFilePayload:
        if normalized_format == "csv":
            content = render_csv(document).encode("utf-8")
        else:
            content = render_xlsx(document)
        return ExportFilePayload(media_type=EXPORT_FORMATS[normalized_format], filename=filename, content=content)
