"""Downloadable renderings of demo data."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

from src.sara.core.records import DemoDamageReport

DOWNLOAD_NOTICE = "DEMO ONLY: This report is part of a fictional Hurricane Santa simulation in Saraville."
CSV_COMMENT = "# DEMO ONLY: Fictional data for Hurricane Santa in Saraville"
CSV_HEADER = ("report_id", "resident_name", "address", "damage_type", "status", "assigned_contractor_id")
CITY_EXPORT_FILENAME = "demo-city-export.csv"


def report_download_payload(report: DemoDamageReport) -> dict[str, Any]:
    return {"demo": True, "simulationNotice": DOWNLOAD_NOTICE, "report": report.to_dict()}


def report_download_body(report: DemoDamageReport) -> str:
    return json.dumps(report_download_payload(report), indent=2)


def report_download_filename(report_id: str) -> str:
    return f"demo-report-{quote(report_id, safe='')}.json"


def _csv_cell(value: Any) -> str:
    # Missing values render as an empty JSON string.
    return json.dumps("" if value is None else value)


def city_report_csv(reports: list[DemoDamageReport]) -> str:
    """Render reports as CSV with every cell JSON-string encoded for safe quoting."""
    lines = [CSV_COMMENT, ",".join(CSV_HEADER)]
    for report in reports:
        row = (
            report.id,
            report.resident_name,
            report.address,
            report.damage_type,
            report.status,
            report.assigned_contractor_id,
        )
        lines.append(",".join(_csv_cell(cell) for cell in row))
    return "\n".join(lines)
