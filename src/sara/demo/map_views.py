"""Role-scoped map payloads for the demo map view and map summary tool."""

from __future__ import annotations

from typing import Any

from src.sara.core.records import DemoDamageReport, DemoProject, DemoRole, DemoSessionToken, Message

from .roles import CANONICAL_REPORT_ID, contractor_id_for_role

SIMULATION_NOTICE = (
    "This is a DEMO simulation of Hurricane Santa in the fictional town of Saraville. "
    "It is not an official damage reporting channel."
)
DEFAULT_MAP_CENTER = {"lat": 29.5, "lng": -90.75}
TOP_CONTRACTOR_LIMIT = 5

COMPLETED_STATUSES = ("completed", "resolved")


def report_totals(reports: list[DemoDamageReport]) -> dict[str, int]:
    return {
        "totalReports": len(reports),
        "assignedCount": sum(1 for report in reports if report.assigned_contractor_id),
        "inProgressCount": sum(1 for report in reports if report.status == "in_progress"),
        "completedCount": sum(1 for report in reports if report.status in COMPLETED_STATUSES),
    }


def top_contractors(projects: list[DemoProject], *, limit: int = TOP_CONTRACTOR_LIMIT) -> list[dict[str, Any]]:
    """Rank contractors by job count; ties keep first-seen order."""
    counts: dict[str, int] = {}
    for project in projects:
        counts[project.contractor_id] = counts.get(project.contractor_id, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [{"contractorId": contractor_id, "jobCount": job_count} for contractor_id, job_count in ranked[:limit]]


def contractor_slice(
    contractor_id: str | None,
    reports: list[DemoDamageReport],
    projects: list[DemoProject],
) -> tuple[list[DemoProject], list[DemoDamageReport]]:
    assigned_projects = [project for project in projects if project.contractor_id == contractor_id]
    report_ids = {project.report_id for project in assigned_projects}
    assigned_reports = [report for report in reports if report.id in report_ids]
    return assigned_projects, assigned_reports


def role_map_payload(
    role: DemoRole | None,
    reports: list[DemoDamageReport],
    projects: list[DemoProject],
) -> dict[str, Any]:
    if role == "resident":
        return {"totals": report_totals(reports), "topContractors": top_contractors(projects)}
    if role == "city":
        return {"reports": [report.to_dict() for report in reports]}
    if role == "contractor":
        assigned_projects, assigned_reports = contractor_slice(contractor_id_for_role(role), reports, projects)
        return {
            "projects": [project.to_dict() for project in assigned_projects],
            "reports": [report.to_dict() for report in assigned_reports],
        }
    return {"message": "No demo role set; map summary is not scoped."}


def linked_project(report: DemoDamageReport | None, projects: list[DemoProject]) -> DemoProject | None:
    if report is None:
        return None
    return next((project for project in projects if project.report_id == report.id), None)


def map_center(primary: DemoDamageReport | None, reports: list[DemoDamageReport]) -> dict[str, float]:
    if primary is not None:
        return dict(primary.geo)
    if reports:
        return dict(reports[0].geo)
    return dict(DEFAULT_MAP_CENTER)


def _dict_or_none(record: DemoDamageReport | DemoProject | None) -> dict[str, Any] | None:
    return record.to_dict() if record is not None else None


def default_map_view(reports: list[DemoDamageReport], projects: list[DemoProject]) -> dict[str, Any]:
    """Unauthenticated entry view centered on the canonical report."""
    # Every stored demo report carries a geo point, so "first with geo" is the first report.
    primary = next((report for report in reports if report.id == CANONICAL_REPORT_ID), None)
    if primary is None and reports:
        primary = reports[0]
    return {
        "simulationNotice": SIMULATION_NOTICE,
        "token": None,
        "userId": None,
        "role": None,
        "userProfile": None,
        "primaryReport": _dict_or_none(primary),
        "primaryProject": _dict_or_none(linked_project(primary, projects)),
        "mapCenter": map_center(primary, reports),
        "mapData": {"reports": [report.to_dict() for report in reports]},
        "messages": [],
    }


def session_map_view(
    session: DemoSessionToken,
    user_profile: dict[str, Any],
    reports: list[DemoDamageReport],
    projects: list[DemoProject],
    messages: list[Message],
    *,
    primary_report_id: str | None = None,
) -> dict[str, Any]:
    """Role-scoped view for a resolved demo session."""
    wanted_id = session.primary_report_id or primary_report_id
    primary = next((report for report in reports if report.id == wanted_id), None) if wanted_id else None
    return {
        "simulationNotice": SIMULATION_NOTICE,
        "token": session.token,
        "userId": session.user_id,
        "role": session.role,
        "userProfile": user_profile,
        "primaryReport": _dict_or_none(primary),
        "primaryProject": _dict_or_none(linked_project(primary, projects)),
        "mapCenter": map_center(primary, reports),
        "mapData": role_map_payload(session.role, reports, projects),
        "messages": [message.to_dict() for message in messages],
    }
