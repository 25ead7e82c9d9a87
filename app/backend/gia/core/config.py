"""Application configuration."""

import logging
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from gia.models.policy import ReportingPolicy


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "GIA Backend"
    app_env: str = "development"
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Development fallback principal (for local MVP and tests).
    # Must be disabled in production environments.
    auth_allow_dev_principal: bool = True
    auth_dev_microsoft_oid: str = "dev-user-oid"
    auth_dev_email: str = "dev.user@local.test"
    auth_dev_display_name: str = "Dev User"
    auth_dev_role: str = "dept_head"

    # Reporting policy. Keep .env support for comma-separated values (non-JSON).
    week_start: int = Field(default=0, ge=0, le=6)
    risk_keywords: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["阻塞", "风险"])
    summary_current_placeholder: str = "本期暂无计划动作"
    summary_issues_placeholder: str = "进度正常，暂无重大风险"
    summary_next_placeholder: str = "下期计划待同步"
    special_marker: str = "专项"
    special_category: str = "组织专项"
    default_product_line: str = "其他"
    timesheet_default_hours: float = Field(default=8.0, ge=0)
    export_filename_prefix: str = "GIA"

    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("allowed_origins", "risk_keywords", mode="before")
    @classmethod
    def parse_comma_separated(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    def reporting_policy(self) -> ReportingPolicy:
        """Project reporting settings onto the policy used by the pure core."""

        return ReportingPolicy(
            week_start=self.week_start,
            risk_keywords=tuple(self.risk_keywords),
            current_placeholder=self.summary_current_placeholder,
            issues_placeholder=self.summary_issues_placeholder,
            next_placeholder=self.summary_next_placeholder,
            special_marker=self.special_marker,
            special_category=self.special_category,
            default_product_line=self.default_product_line,
            timesheet_default_hours=self.timesheet_default_hours,
            export_filename_prefix=self.export_filename_prefix,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""

    return Settings()


def setup_logging(settings: Settings) -> None:
    """Attach a stderr handler to the ``gia`` logger tree once."""

    root = logging.getLogger("gia")
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    if root.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root.addHandler(handler)
