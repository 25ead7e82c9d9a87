from __future__ import annotations

import csv
import io

import pytest

from gia.models.entities import PeriodGranularity
from gia.services.export_fields import (
    MEETING_FIELDS,
    REPORT_DETAIL_FIELDS,
    SUPPORT_FIELDS,
    TIMESHEET_FIELDS,
    MeetingField,
    ReportDetailField,
    SupportField,
    UnknownExportFieldError,
    csv_escape,
    csv_row,
    select_fields,
)


def test_escape_always_quotes_and_doubles_quotes() -> None:
    assert csv_escape("plain") == '"plain"'
    assert csv_escape("") == '""'
    assert csv_escape('say "hi"') == '"say ""hi"""'


@pytest.mark.parametrize(
    "value",
    [
        "a,b,c",
        'quote " inside',
        "multi\nline\ntext",
        '",\n"',
        "中文,逗号，和\"引号\"",
    ],
)
def test_escaped_row_parses_back_with_csv_reader(value: str) -> None:
    line = csv_row([value, "tail"])

    parsed = next(csv.reader(io.StringIO(line)))

    assert parsed == [value, "tail"]
    assert line == csv_escape(value) + ',"tail"'


def test_defaults_follow_catalog_flags() -> None:
    fields = select_fields(MEETING_FIELDS, None, PeriodGranularity.QUARTER)

    ids = [spec.id for spec in fields]
    assert MeetingField.CATEGORY not in ids
    assert ids[0] is MeetingField.NAME
    assert len(ids) == len(MEETING_FIELDS) - 1


def test_selection_keeps_catalog_order_and_relabels_period_fields() -> None:
    fields = select_fields(MEETING_FIELDS, ["nextGoal", "name", "currentGoal"], PeriodGranularity.MONTH)

    assert [(spec.id.value, spec.label) for spec in fields] == [
        ("name", "目标名称"),
        ("currentGoal", "本月目标"),
        ("nextGoal", "下月目标"),
    ]
    # the catalog itself keeps its neutral labels
    assert MEETING_FIELDS[8].label == "本次目标"


def test_support_summary_fields_are_relabeled() -> None:
    fields = select_fields(SUPPORT_FIELDS, [SupportField.CURRENT_SUMMARY, SupportField.NEXT_SUMMARY], PeriodGranularity.WEEK)

    assert [spec.label for spec in fields] == ["本周支撑总结", "下周支撑总结"]


def test_empty_selection_yields_no_fields() -> None:
    assert select_fields(TIMESHEET_FIELDS, [], PeriodGranularity.DAY) == []


def test_unknown_field_is_rejected() -> None:
    with pytest.raises(UnknownExportFieldError, match="budget"):
        select_fields(TIMESHEET_FIELDS, ["date", "budget"], PeriodGranularity.DAY)

    with pytest.raises(UnknownExportFieldError):
        # valid for meetings, not for timesheets
        select_fields(TIMESHEET_FIELDS, ["aiProb"], PeriodGranularity.DAY)


def test_rows_quote_every_cell_including_empty_ones() -> None:
    assert csv_row(["", "8", "a"]) == '"","8","a"'
    assert csv_row([""]) == '""'
    assert csv_row([]) == ""


def test_report_detail_catalog_defaults() -> None:
    fields = select_fields(REPORT_DETAIL_FIELDS, None, PeriodGranularity.DAY)

    assert [spec.id for spec in fields] == [
        ReportDetailField.DATE,
        ReportDetailField.USER_NAME,
        ReportDetailField.ROLE,
        ReportDetailField.GOAL_NAME,
        ReportDetailField.HOURS,
        ReportDetailField.SUMMARY,
    ]
