"""Persistence for shared demo entities, persona bindings and session tokens."""

from __future__ import annotations

from typing import Any

from src.sara.core.blob_store import (
    DEMO_AREA_STATS,
    DEMO_CONTRACTOR_STATS,
    DEMO_DAMAGE_REPORTS,
    DEMO_PROJECTS,
    DEMO_ROLES,
    DEMO_SESSIONS,
    get_blob_store,
)
from src.sara.core.records import DemoDamageReport, DemoProject, DemoRoleInfo, DemoSessionToken, utc_now_iso


def _list_payloads(collection: str) -> list[dict[str, Any]]:
    store = get_blob_store()
    out: list[dict[str, Any]] = []
    for key in store.list(collection):
        payload = store.get(collection, key)
        if isinstance(payload, dict):
            out.append(payload)
    return out


def list_all_demo_reports() -> list[DemoDamageReport]:
    return [DemoDamageReport.from_dict(item) for item in _list_payloads(DEMO_DAMAGE_REPORTS)]


def get_demo_report(report_id: str) -> DemoDamageReport | None:
    payload = get_blob_store().get(DEMO_DAMAGE_REPORTS, report_id)
    return DemoDamageReport.from_dict(payload) if isinstance(payload, dict) else None


def save_demo_report(report: DemoDamageReport, *, touch: bool = True) -> DemoDamageReport:
    if touch:
        report.updated_at = utc_now_iso()
    get_blob_store().set(DEMO_DAMAGE_REPORTS, report.id, report.to_dict())
    return report


def list_all_demo_projects() -> list[DemoProject]:
    return [DemoProject.from_dict(item) for item in _list_payloads(DEMO_PROJECTS)]


def get_demo_project(project_id: str) -> DemoProject | None:
    payload = get_blob_store().get(DEMO_PROJECTS, project_id)
    return DemoProject.from_dict(payload) if isinstance(payload, dict) else None


def save_demo_project(project: DemoProject, *, touch: bool = True) -> DemoProject:
    if touch:
        project.updated_at = utc_now_iso()
    get_blob_store().set(DEMO_PROJECTS, project.id, project.to_dict())
    return project


def list_area_stats() -> list[dict[str, Any]]:
    return _list_payloads(DEMO_AREA_STATS)


def list_contractor_stats() -> list[dict[str, Any]]:
    return _list_payloads(DEMO_CONTRACTOR_STATS)


def get_role_for_user(user_id: str) -> DemoRoleInfo | None:
    payload = get_blob_store().get(DEMO_ROLES, user_id)
    return DemoRoleInfo.from_dict(payload) if isinstance(payload, dict) else None


def save_role_for_user(role_info: DemoRoleInfo) -> DemoRoleInfo:
    get_blob_store().set(DEMO_ROLES, role_info.user_id, role_info.to_dict())
    return role_info


def delete_role_for_user(user_id: str) -> None:
    get_blob_store().delete(DEMO_ROLES, user_id)


def get_session_token(token: str) -> DemoSessionToken | None:
    payload = get_blob_store().get(DEMO_SESSIONS, token)
    return DemoSessionToken.from_dict(payload) if isinstance(payload, dict) else None


def save_session_token(session: DemoSessionToken) -> DemoSessionToken:
    get_blob_store().set(DEMO_SESSIONS, session.token, session.to_dict())
    return session
