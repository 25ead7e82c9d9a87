"""Request identity extraction and role-based goal visibility."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fastapi import Header, HTTPException, status

from gia.core.config import get_settings
from gia.models.entities import Goal, GoalType


class AppRole(str, Enum):
    """Dashboard viewer roles."""

    DEPT_HEAD = "dept_head"
    TEAM_LEAD = "team_lead"
    MEMBER = "member"


ROLE_VISIBLE_GOAL_TYPES: dict[AppRole, frozenset[GoalType]] = {
    AppRole.DEPT_HEAD: frozenset(GoalType),
    AppRole.TEAM_LEAD: frozenset({GoalType.TEAM, GoalType.INDIVIDUAL}),
    AppRole.MEMBER: frozenset({GoalType.INDIVIDUAL}),
}


@dataclass(frozen=True)
class RequestUserContext:
    """Authenticated request actor resolved from headers."""

    microsoft_oid: str
    email: str
    display_name: str
    role: AppRole

    def can_view(self, goal: Goal) -> bool:
        """Whether this role sees the goal on the overview and in exports."""

        return goal.type in ROLE_VISIBLE_GOAL_TYPES[self.role]


def _parse_role(value: str) -> AppRole:
    try:
        return AppRole(value.strip().lower())
    except ValueError:
        allowed = ", ".join(role.value for role in AppRole)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown role {value!r}. Expected one of: {allowed}.",
        ) from None


def _require_identity_headers(
    x_ms_oid: str | None,
    x_ms_email: str | None,
    x_ms_display_name: str | None,
) -> tuple[str, str, str]:
    if not x_ms_oid or not x_ms_email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=(
                "Missing identity headers. Expected X-MS-OID and X-MS-EMAIL or enable development principal fallback."
            ),
        )

    display_name = x_ms_display_name or x_ms_email
    return x_ms_oid.strip(), x_ms_email.strip().lower(), display_name.strip()


def get_current_user_context(
    x_ms_oid: str | None = Header(default=None, alias="X-MS-OID"),
    x_ms_email: str | None = Header(default=None, alias="X-MS-EMAIL"),
    x_ms_display_name: str | None = Header(default=None, alias="X-MS-DISPLAY-NAME"),
    x_gia_role: str | None = Header(default=None, alias="X-GIA-ROLE"),
) -> RequestUserContext:
    """Resolve current request user from trusted proxy headers.

    Falls back to the configured development principal when identity headers
    are absent and the fallback is enabled.
    """

    settings = get_settings()
    if x_ms_oid and x_ms_email:
        oid, email, display_name = _require_identity_headers(x_ms_oid, x_ms_email, x_ms_display_name)
        role = _parse_role(x_gia_role or AppRole.MEMBER.value)
    elif settings.auth_allow_dev_principal:
        oid = settings.auth_dev_microsoft_oid.strip()
        email = settings.auth_dev_email.strip().lower()
        display_name = settings.auth_dev_display_name.strip()
        role = _parse_role(x_gia_role or settings.auth_dev_role)
    else:
        oid, email, display_name = _require_identity_headers(x_ms_oid, x_ms_email, x_ms_display_name)
        role = _parse_role(x_gia_role or AppRole.MEMBER.value)

    return RequestUserContext(microsoft_oid=oid, email=email, display_name=display_name, role=role)
