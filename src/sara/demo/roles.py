"""Demo persona configuration and role assignment."""

from __future__ import annotations

from dataclasses import dataclass

from src.sara.core.errors import ValidationError
from src.sara.core.logger import get_logger
from src.sara.core.records import DEMO_ROLES, DemoRole, DemoRoleInfo
from src.sara.core.users import update_user_demo_fields

from .demo_store import delete_role_for_user, get_role_for_user, save_role_for_user

log = get_logger("demo.roles")

CANONICAL_REPORT_ID = "report-john-doe-home"
CONTRACTOR_ID = "contractor-john-smith"


@dataclass(frozen=True)
class PersonaConfig:
    canonical_name: str
    primary_demo_report_id: str
    summary: str
    contractor_id: str | None = None


ROLE_CONFIG: dict[str, PersonaConfig] = {
    "resident": PersonaConfig(
        canonical_name="John Doe",
        primary_demo_report_id="report-john-doe-home",
        summary=(
            "You are John Doe, a Saraville resident whose home was damaged by Hurricane Santa. "
            "Your roof and parts of the interior were impacted, and you are working with Sara to "
            "confirm your location, document damage, and understand next steps."
        ),
    ),
    "city": PersonaConfig(
        canonical_name="Jane Smith",
        primary_demo_report_id="report-high-school-gym",
        summary=(
            "You are Jane Smith from Saraville Emergency Management. You are using Sara to understand "
            "citywide damage after Hurricane Santa, prioritize unassigned reports, and coordinate "
            "response work across neighborhoods."
        ),
    ),
    "contractor": PersonaConfig(
        canonical_name="John Smith",
        primary_demo_report_id="report-john-doe-home",
        summary=(
            "You are John Smith, a local contractor in Saraville. You are using Sara to see your "
            "assigned jobs, update progress on bids and repairs, and understand how much work you "
            "have in the pipeline after Hurricane Santa."
        ),
        contractor_id=CONTRACTOR_ID,
    ),
}


def _persona(role: str) -> PersonaConfig:
    if role not in DEMO_ROLES:
        raise ValidationError(f"Unknown demo role `{role}`. Expected one of: {', '.join(DEMO_ROLES)}.")
    return ROLE_CONFIG[role]


def get_role_info(user_id: str) -> DemoRoleInfo | None:
    """Role info exists only after the user explicitly picked a persona."""
    return get_role_for_user(user_id)


def assign_role(user_id: str, role: DemoRole) -> DemoRoleInfo:
    persona = _persona(role)
    role_info = save_role_for_user(
        DemoRoleInfo(
            user_id=user_id,
            role=role,
            canonical_name=persona.canonical_name,
            primary_demo_report_id=persona.primary_demo_report_id,
        )
    )
    update_user_demo_fields(user_id, demo_role=role, demo_canonical_name=persona.canonical_name)
    log.info("user %s assigned demo role %s", user_id, role)
    return role_info


def clear_role(user_id: str) -> None:
    delete_role_for_user(user_id)
    update_user_demo_fields(user_id, demo_role=None, demo_canonical_name=None)
    log.info("user %s cleared demo role", user_id)


def default_report_id_for_role(role: DemoRole) -> str:
    return _persona(role).primary_demo_report_id


def contractor_id_for_role(role: DemoRole | None) -> str | None:
    if role is None:
        return None
    return _persona(role).contractor_id


def persona_summary(role: DemoRole) -> str:
    return _persona(role).summary
