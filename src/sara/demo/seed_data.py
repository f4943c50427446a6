"""Canonical fictional data for Hurricane Santa in Saraville."""

from __future__ import annotations

from typing import Any

from src.sara.core.records import DemoDamageReport, DemoProject, utc_now_iso

from .roles import CONTRACTOR_ID

AREA_STATS: list[dict[str, Any]] = [
    {
        "id": "saraville-core",
        "name": "Central Saraville",
        "totalReports": 42,
        "assignedCount": 30,
        "inProgressCount": 8,
        "completedCount": 4,
    },
    {
        "id": "saraville-riverfront",
        "name": "Riverfront District",
        "totalReports": 27,
        "assignedCount": 18,
        "inProgressCount": 5,
        "completedCount": 4,
    },
]

CONTRACTOR_STATS: list[dict[str, Any]] = [
    {
        "contractorId": CONTRACTOR_ID,
        "contractorName": "John Smith Roofing & Restoration",
        "totalJobs": 25,
        "completedJobs": 12,
        "positiveFeedbackCount": 21,
    },
]


def build_damage_reports(now: str | None = None) -> list[DemoDamageReport]:
    stamp = now or utc_now_iso()
    return [
        DemoDamageReport(
            id="report-john-doe-home",
            resident_name="John Doe",
            address="123 Bayview Lane, Saraville",
            lat=29.501,
            lng=-90.751,
            damage_type="Roof damage and minor interior flooding",
            insurance_info="Homeowners policy with 2% hurricane deductible",
            help_requested="Tarping, debris removal, and inspection for hidden water damage",
            status="in_progress",
            assigned_contractor_id=CONTRACTOR_ID,
            created_at=stamp,
            updated_at=stamp,
        ),
        DemoDamageReport(
            id="report-high-school-gym",
            resident_name="Saraville High School",
            address="1 Wildcat Way, Saraville",
            lat=29.505,
            lng=-90.748,
            damage_type="Roof damage and blown-out windows at gym",
            insurance_info="City facilities coverage",
            help_requested="Temporary roofing, board-up, and electrical inspection",
            status="in_progress",
            assigned_contractor_id=CONTRACTOR_ID,
            created_at=stamp,
            updated_at=stamp,
        ),
        DemoDamageReport(
            id="report-riverside-apartments",
            resident_name="Riverside Apartments",
            address="400 Riverfront Drive, Saraville",
            lat=29.498,
            lng=-90.745,
            damage_type="Flooding in ground-floor units, damaged HVAC",
            insurance_info="Mixed flood and property coverage; some tenants uninsured",
            help_requested="Pumping out water, mold inspection, temporary housing coordination",
            status="completed",
            assigned_contractor_id=CONTRACTOR_ID,
            created_at=stamp,
            updated_at=stamp,
        ),
    ]


def build_projects(now: str | None = None) -> list[DemoProject]:
    stamp = now or utc_now_iso()
    return [
        DemoProject(
            id="project-john-doe-roof",
            contractor_id=CONTRACTOR_ID,
            report_id="report-john-doe-home",
            status="in_progress",
            notes="Initial walkthrough completed, temporary tarp installed, and full roof replacement scheduled.",
            created_at=stamp,
            updated_at=stamp,
        ),
        DemoProject(
            id="project-high-school-gym",
            contractor_id=CONTRACTOR_ID,
            report_id="report-high-school-gym",
            status="in_progress",
            notes="Temporary roof in place, window board-up underway.",
            created_at=stamp,
            updated_at=stamp,
        ),
        DemoProject(
            id="project-riverside-apartments",
            contractor_id=CONTRACTOR_ID,
            report_id="report-riverside-apartments",
            status="completed",
            notes="Dry-out completed, final walkthrough with property manager done.",
            created_at=stamp,
            updated_at=stamp,
        ),
    ]
