"""Demo-mode tools over the shared Saraville data set."""

from __future__ import annotations

from typing import Any

from src.sara.core.errors import ForbiddenRoleError, ModeError, NoRoleAssignedError, NotFoundError
from src.sara.core.records import DemoDamageReport
from src.sara.core.token_policy import DEFAULT_DEMO_SESSION_TTL_HOURS
from src.sara.core.tool_context import ToolContext
from src.sara.demo.demo_store import (
    get_demo_project,
    get_demo_report,
    list_all_demo_projects,
    list_all_demo_reports,
    list_contractor_stats,
    save_demo_project,
    save_demo_report,
)
from src.sara.demo.map_views import COMPLETED_STATUSES, linked_project, role_map_payload
from src.sara.demo.roles import (
    assign_role,
    clear_role,
    contractor_id_for_role,
    default_report_id_for_role,
    get_role_info,
    persona_summary,
)
from src.sara.demo.sessions import issue_session_token

from .arguments import (
    ContractorStatsArgs,
    DemoMapSessionLinkArgs,
    DemoMapSummaryArgs,
    ListDemoReportsForCityArgs,
    NoArgs,
    SetDemoRoleArgs,
    UpdateDemoProjectStatusArgs,
    UpdateDemoReportFieldsArgs,
)

NO_ROLE_SUMMARY = (
    "The user has not selected a demo role yet. Invite them to choose resident, city worker, or contractor."
)


def require_demo_mode(context: ToolContext, tool_name: str) -> None:
    if not context.is_demo:
        raise ModeError(f"{tool_name} is only available in demo mode")


def require_role(context: ToolContext, role: str, message: str) -> None:
    if context.role != role:
        raise ForbiddenRoleError(message)


def set_demo_role(args: SetDemoRoleArgs, context: ToolContext) -> dict[str, Any]:
    require_demo_mode(context, "set_demo_role")
    role_info = assign_role(context.user_id, args.role)
    context.role = role_info.role
    return role_info.to_dict()


def clear_demo_role(args: NoArgs, context: ToolContext) -> dict[str, Any]:
    require_demo_mode(context, "clear_demo_role")
    clear_role(context.user_id)
    context.role = None
    return {"cleared": True, "role": None}


def get_demo_overview_for_current_role(args: NoArgs, context: ToolContext) -> dict[str, Any]:
    require_demo_mode(context, "get_demo_overview_for_current_role")
    role_info = get_role_info(context.user_id)
    if role_info is None:
        return {"role": None, "summary": NO_ROLE_SUMMARY}
    return {
        "role": role_info.role,
        "canonicalName": role_info.canonical_name,
        "primaryDemoReportId": role_info.primary_demo_report_id,
        "summary": persona_summary(role_info.role),
    }


def get_demo_report_for_current_role(args: NoArgs, context: ToolContext) -> dict[str, Any]:
    require_demo_mode(context, "get_demo_report_for_current_role")
    role_info = get_role_info(context.user_id)
    if role_info is None:
        raise NoRoleAssignedError("No demo role found for this user")

    reports = list_all_demo_reports()
    primary_id = role_info.primary_demo_report_id or default_report_id_for_role(role_info.role)
    report = next((item for item in reports if item.id == primary_id), None)
    if report is None and reports:
        report = reports[0]
    project = linked_project(report, list_all_demo_projects())
    return {
        "role": role_info.role,
        "report": report.to_dict() if report is not None else None,
        "project": project.to_dict() if project is not None else None,
    }


def update_demo_report_fields(args: UpdateDemoReportFieldsArgs, context: ToolContext) -> dict[str, Any]:
    require_demo_mode(context, "update_demo_report_fields")
    report = get_demo_report(args.report_id)
    if report is None:
        raise NotFoundError("Demo report not found")

    if args.address is not None:
        report.address = args.address
    if args.damage_type is not None:
        report.damage_type = args.damage_type
    if args.insurance_info is not None:
        report.insurance_info = args.insurance_info
    if args.help_requested is not None:
        report.help_requested = args.help_requested
    if args.notes is not None:
        report.notes = args.notes
    return save_demo_report(report).to_dict()


def update_demo_project_status(args: UpdateDemoProjectStatusArgs, context: ToolContext) -> dict[str, Any]:
    require_demo_mode(context, "update_demo_project_status")
    project = get_demo_project(args.project_id)
    if project is None:
        raise NotFoundError("Demo project not found")

    project.status = args.status
    if args.note is not None:
        project.notes = args.note
    return save_demo_project(project).to_dict()


def _matches_city_filter(report: DemoDamageReport, status_filter: str) -> bool:
    if status_filter == "unassigned":
        return not report.assigned_contractor_id
    if status_filter == "assigned":
        return bool(report.assigned_contractor_id) and report.status != "completed"
    if status_filter == "completed":
        return report.status in COMPLETED_STATUSES
    return True


def list_demo_reports_for_city(args: ListDemoReportsForCityArgs, context: ToolContext) -> dict[str, Any]:
    require_demo_mode(context, "list_demo_reports_for_city")
    require_role(context, "city", "Only the city demo role can list all demo reports")

    # areaQuery is echoed for the model; the data set has no area index to filter on.
    filtered = [report for report in list_all_demo_reports() if _matches_city_filter(report, args.status)]
    return {
        "statusFilter": args.status,
        "areaQuery": args.area_query,
        "total": len(filtered),
        "reports": [report.to_dict() for report in filtered],
    }


def get_demo_map_summary(args: DemoMapSummaryArgs, context: ToolContext) -> dict[str, Any]:
    require_demo_mode(context, "get_demo_map_summary")
    payload = role_map_payload(context.role, list_all_demo_reports(), list_all_demo_projects())
    return {
        "role": context.role,
        "viewport": args.viewport.model_dump(by_alias=True) if args.viewport is not None else None,
        "areaId": args.area_id,
        **payload,
    }


def get_demo_stats_for_contractor(args: ContractorStatsArgs, context: ToolContext) -> dict[str, Any]:
    require_demo_mode(context, "get_demo_stats_for_contractor")
    require_role(context, "contractor", "Contractor stats are only available for the contractor demo role")

    contractor_id = contractor_id_for_role(context.role)
    projects = [project for project in list_all_demo_projects() if project.contractor_id == contractor_id]
    profile = next((item for item in list_contractor_stats() if item.get("contractorId") == contractor_id), None)
    return {
        "contractorId": contractor_id,
        "lookbackDays": args.lookback_days,
        "totalJobs": len(projects),
        "completedJobs": sum(1 for project in projects if project.status == "completed"),
        "profile": profile,
    }


def create_demo_map_session_link(args: DemoMapSessionLinkArgs, context: ToolContext) -> dict[str, Any]:
    require_demo_mode(context, "create_demo_map_session_link")
    ttl_hours = args.ttl_hours if args.ttl_hours is not None else DEFAULT_DEMO_SESSION_TTL_HOURS
    return issue_session_token(context.user_id, ttl_hours=ttl_hours, site_url=context.site_url)
