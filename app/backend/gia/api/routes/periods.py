"""Reporting period boundary endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query
from pydantic import BaseModel

from gia.services.report_service import ReportService

router = APIRouter(prefix="/periods", tags=["periods"])


class CurrentAndNextPayload(BaseModel):
    anchor: date
    granularity: str


def _service() -> ReportService:
    return ReportService()


@router.get("/resolve")
def resolve_period_range(
    anchor: date = Query(...),
    granularity: str = Query(...),
    offset: int = Query(default=0),
) -> dict[str, object]:
    return _service().resolve(anchor=anchor, granularity=granularity, offset=offset)


@router.post("/current-and-next")
def current_and_next_ranges(payload: CurrentAndNextPayload) -> dict[str, object]:
    service = _service()
    return {
        "current": service.resolve(anchor=payload.anchor, granularity=payload.granularity, offset=0),
        "next": service.resolve(anchor=payload.anchor, granularity=payload.granularity, offset=1),
    }
