"""Idempotent seeding of the shared demo data set."""

from __future__ import annotations

from typing import Any

from src.sara.core.blob_store import (
    DEMO_AREA_STATS,
    DEMO_CONTRACTOR_STATS,
    DEMO_DAMAGE_REPORTS,
    DEMO_META,
    DEMO_PROJECTS,
    get_blob_store,
)
from src.sara.core.logger import get_logger
from src.sara.core.records import utc_now_iso

from .seed_data import AREA_STATS, CONTRACTOR_STATS, build_damage_reports, build_projects

log = get_logger("demo.seeding")

SEEDED_KEY = "seeded"


def _set_if_absent(collection: str, key: str, value: dict[str, Any]) -> bool:
    store = get_blob_store()
    if store.get(collection, key) is not None:
        return False
    store.set(collection, key, value)
    return True


def is_seeded() -> bool:
    marker = get_blob_store().get(DEMO_META, SEEDED_KEY)
    return isinstance(marker, dict) and bool(marker.get("seeded"))


def seed_demo_data_if_needed(mode: str) -> bool:
    """Write canonical demo records once per deployment.

    Records that already exist are left untouched, so a repeated or racing
    seed never resets fields a tool call has changed. Returns True when the
    marker was written by this call.
    """
    if mode != "demo":
        return False
    if is_seeded():
        return False

    now = utc_now_iso()
    written = 0
    for report in build_damage_reports(now):
        written += _set_if_absent(DEMO_DAMAGE_REPORTS, report.id, report.to_dict())
    for project in build_projects(now):
        written += _set_if_absent(DEMO_PROJECTS, project.id, project.to_dict())
    for area in AREA_STATS:
        written += _set_if_absent(DEMO_AREA_STATS, area["id"], dict(area))
    for stats in CONTRACTOR_STATS:
        written += _set_if_absent(DEMO_CONTRACTOR_STATS, stats["contractorId"], dict(stats))

    get_blob_store().set(DEMO_META, SEEDED_KEY, {"seeded": True, "mode": mode, "lastSeededAt": now})
    log.info("seeded demo data (%d records written)", written)
    return True
