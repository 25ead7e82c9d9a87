"""Top-level API router: periods, summaries, report assistance and exports."""

from fastapi import APIRouter

from gia.api.routes.exports import router as exports_router
from gia.api.routes.health import router as health_router
from gia.api.routes.periods import router as periods_router
from gia.api.routes.reports import router as reports_router
from gia.api.routes.summaries import router as summaries_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(periods_router)
api_router.include_router(summaries_router)
api_router.include_router(reports_router)
api_router.include_router(exports_router)
