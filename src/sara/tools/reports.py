"""Damage report tools scoped to the calling user."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from src.sara.core.config_loader import get_site_url
from src.sara.core.errors import DomainInvariantError, NotFoundError
from src.sara.core.records import DamageReport, ReportToken, new_id, utc_now
from src.sara.core.report_store import delete_report as remove_report
from src.sara.core.report_store import get_report_by_id, get_user_reports, save_report, save_report_token
from src.sara.core.token_policy import DEFAULT_REPORT_LINK_TTL_HOURS, compute_expiry, new_token
from src.sara.core.tool_context import ToolContext

from .arguments import (
    CreateReportLinkArgs,
    NoArgs,
    ReportIdArgs,
    StartDamageReportArgs,
    UpdateDamageReportSectionArgs,
    UpdateReportAddressArgs,
    UpdateReportPhotosArgs,
)


def ensure_user_owns_report(user_id: str, report_id: str) -> DamageReport:
    """Reports are addressed under their owner's key; any miss is a NotFound."""
    report = get_report_by_id(user_id, report_id)
    if report is None or report.user_id != user_id:
        raise NotFoundError("Report not found for this user")
    return report


def start_damage_report(args: StartDamageReportArgs, context: ToolContext) -> dict[str, Any]:
    report = DamageReport(id=new_id(), user_id=context.user_id, address=args.address)
    return save_report(report).to_dict()


def update_damage_report_section(args: UpdateDamageReportSectionArgs, context: ToolContext) -> dict[str, Any]:
    report = ensure_user_owns_report(context.user_id, args.report_id)
    if args.address is not None:
        report.address = args.address
    if args.status is not None:
        report.status = args.status
    if args.photo_urls is not None:
        report.photo_urls = list(args.photo_urls)
    return save_report(report).to_dict()


def get_report_details(args: ReportIdArgs, context: ToolContext) -> dict[str, Any]:
    return ensure_user_owns_report(context.user_id, args.report_id).to_dict()


def list_user_reports(args: NoArgs, context: ToolContext) -> list[dict[str, Any]]:
    return [report.summary() for report in get_user_reports(context.user_id)]


def update_report_address(args: UpdateReportAddressArgs, context: ToolContext) -> dict[str, Any]:
    report = ensure_user_owns_report(context.user_id, args.report_id)
    report.address = args.address
    return save_report(report).to_dict()


def update_report_photos(args: UpdateReportPhotosArgs, context: ToolContext) -> dict[str, Any]:
    report = ensure_user_owns_report(context.user_id, args.report_id)
    report.photo_urls = list(args.photo_urls)
    return save_report(report).to_dict()


def delete_report(args: ReportIdArgs, context: ToolContext) -> dict[str, Any]:
    report = ensure_user_owns_report(context.user_id, args.report_id)
    if report.status != "pending":
        raise DomainInvariantError("Only pending reports can be deleted")
    remove_report(context.user_id, report.id)
    return {"deleted": True}


def mark_report_resolved(args: ReportIdArgs, context: ToolContext) -> dict[str, Any]:
    report = ensure_user_owns_report(context.user_id, args.report_id)
    report.status = "resolved"
    return save_report(report).to_dict()


def report_link_path(report_id: str, mode: str) -> str:
    prefix = "/demo-report" if mode == "demo" else "/report"
    return f"{prefix}/{quote(report_id, safe='')}"


def create_time_limited_report_link(args: CreateReportLinkArgs, context: ToolContext) -> dict[str, Any]:
    report = ensure_user_owns_report(context.user_id, args.report_id)
    ttl_hours = args.ttl_hours if args.ttl_hours is not None else DEFAULT_REPORT_LINK_TTL_HOURS
    now = utc_now()
    token = save_report_token(
        ReportToken(
            report_id=report.id,
            token=new_token(),
            expires_at=compute_expiry(ttl_hours, now=now),
            created_at=now.isoformat(),
        )
    )

    base_url = (context.site_url if context.site_url is not None else get_site_url()).rstrip("/")
    url = f"{base_url}{report_link_path(report.id, context.mode)}?token={quote(token.token, safe='')}"
    return {"url": url, "token": token.token, "expiresAt": token.expires_at}
