"""Expiring demo session tokens scoping the map and chat view to a role."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from urllib.parse import quote

from src.sara.core.config_loader import get_site_url
from src.sara.core.errors import ExpiredError, ForbiddenRoleError, NoRoleAssignedError, NotFoundError
from src.sara.core.logger import get_logger
from src.sara.core.records import DemoRole, DemoSessionToken, utc_now
from src.sara.core.token_policy import DEFAULT_DEMO_SESSION_TTL_HOURS, compute_expiry, is_expired, new_token

from .demo_store import get_session_token, save_session_token
from .roles import get_role_info

log = get_logger("demo.sessions")


def demo_map_url(token: str, *, site_url: str | None = None) -> str:
    base_url = (site_url if site_url is not None else get_site_url()).rstrip("/")
    return f"{base_url}/demo-map?token={quote(token, safe='')}"


def issue_session_token(
    user_id: str,
    role: DemoRole | None = None,
    *,
    ttl_hours: float = DEFAULT_DEMO_SESSION_TTL_HOURS,
    site_url: str | None = None,
) -> dict[str, Any]:
    role_info = get_role_info(user_id)
    if role_info is None:
        raise NoRoleAssignedError(
            "No demo role is set for this user. Ask them to choose resident, city worker, or contractor first."
        )
    if role is not None and role != role_info.role:
        raise ForbiddenRoleError(f"User is assigned the `{role_info.role}` role, not `{role}`.")

    now = utc_now()
    session = save_session_token(
        DemoSessionToken(
            token=new_token(),
            user_id=user_id,
            role=role_info.role,
            primary_report_id=role_info.primary_demo_report_id,
            created_at=now.isoformat(),
            expires_at=compute_expiry(ttl_hours, now=now),
        )
    )
    log.info("issued demo session for user %s role %s", user_id, session.role)
    return {
        "url": demo_map_url(session.token, site_url=site_url),
        "token": session.token,
        "expiresAt": session.expires_at,
        "role": session.role,
    }


def resolve_session(token: str, *, now: datetime | None = None) -> DemoSessionToken:
    session = get_session_token(token)
    if session is None:
        raise NotFoundError("Session not found")
    if is_expired(session.expires_at, now=now):
        raise ExpiredError("Demo session expired")
    return session
