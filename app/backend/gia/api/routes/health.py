"""Liveness endpoint for the reporting API."""

from fastapi import APIRouter

from gia.core.config import get_settings

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str]:
    """Report that the service is up, with its name and environment."""

    settings = get_settings()
    return {"status": "ok", "service": settings.app_name, "env": settings.app_env}
