"""Tool handlers callable by the completion endpoint."""

from .arguments import ToolArguments, validate_arguments
from .demo import (
    clear_demo_role,
    create_demo_map_session_link,
    get_demo_map_summary,
    get_demo_overview_for_current_role,
    get_demo_report_for_current_role,
    get_demo_stats_for_contractor,
    list_demo_reports_for_city,
    set_demo_role,
    update_demo_project_status,
    update_demo_report_fields,
)
from .reports import (
    create_time_limited_report_link,
    delete_report,
    ensure_user_owns_report,
    get_report_details,
    list_user_reports,
    mark_report_resolved,
    start_damage_report,
    update_damage_report_section,
    update_report_address,
    update_report_photos,
)

__all__ = [
    "ToolArguments",
    "clear_demo_role",
    "create_demo_map_session_link",
    "create_time_limited_report_link",
    "delete_report",
    "ensure_user_owns_report",
    "get_demo_map_summary",
    "get_demo_overview_for_current_role",
    "get_demo_report_for_current_role",
    "get_demo_stats_for_contractor",
    "get_report_details",
    "list_demo_reports_for_city",
    "list_user_reports",
    "mark_report_resolved",
    "set_demo_role",
    "start_damage_report",
    "update_damage_report_section",
    "update_demo_project_status",
    "update_demo_report_fields",
    "update_report_address",
    "update_report_photos",
    "validate_arguments",
]
