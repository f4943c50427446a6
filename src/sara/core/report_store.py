"""Damage report and report-token persistence."""

from __future__ import annotations

from .blob_store import DAMAGE_REPORTS, REPORT_TOKENS, get_blob_store
from .records import DamageReport, ReportToken, utc_now_iso


def get_user_reports(user_id: str) -> list[DamageReport]:
    store = get_blob_store()
    reports: list[DamageReport] = []
    for key in store.list(DAMAGE_REPORTS, prefix=f"{user_id}/"):
        payload = store.get(DAMAGE_REPORTS, key)
        # The prefix also matches owners whose id extends this one past a slash.
        if isinstance(payload, dict) and payload.get("userId") == user_id:
            reports.append(DamageReport.from_dict(payload))
    return reports


def get_report_by_id(user_id: str, report_id: str) -> DamageReport | None:
    payload = get_blob_store().get(DAMAGE_REPORTS, DamageReport.build_key(user_id, report_id))
    return DamageReport.from_dict(payload) if isinstance(payload, dict) else None


def find_report_by_id(report_id: str) -> DamageReport | None:
    """Locate a report regardless of owner; used by the token-gated viewer."""
    store = get_blob_store()
    suffix = f"/{report_id}"
    for key in store.list(DAMAGE_REPORTS):
        if not key.endswith(suffix):
            continue
        payload = store.get(DAMAGE_REPORTS, key)
        if isinstance(payload, dict):
            return DamageReport.from_dict(payload)
    return None


def save_report(report: DamageReport) -> DamageReport:
    """Merge `report` over the stored record and refresh `updatedAt`."""
    store = get_blob_store()
    existing = store.get(DAMAGE_REPORTS, report.key)
    merged = {**existing, **report.to_dict()} if isinstance(existing, dict) else report.to_dict()
    merged["updatedAt"] = utc_now_iso()
    store.set(DAMAGE_REPORTS, report.key, merged)
    return DamageReport.from_dict(merged)


def delete_report(user_id: str, report_id: str) -> None:
    get_blob_store().delete(DAMAGE_REPORTS, DamageReport.build_key(user_id, report_id))


def save_report_token(token: ReportToken) -> ReportToken:
    get_blob_store().set(REPORT_TOKENS, ReportToken.build_key(token.report_id, token.token), token.to_dict())
    return token


def get_report_token(report_id: str, token: str) -> ReportToken | None:
    payload = get_blob_store().get(REPORT_TOKENS, ReportToken.build_key(report_id, token))
    return ReportToken.from_dict(payload) if isinstance(payload, dict) else None
