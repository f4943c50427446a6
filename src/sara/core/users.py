"""User profile resolution and the model-visible profile projection."""

from __future__ import annotations

from typing import Any

from .blob_store import USERS, get_blob_store
from .errors import NotFoundError
from .logger import get_logger
from .records import Channel, DamageReport, DemoRole, DemoRoleInfo, UserProfile, utc_now_iso

log = get_logger("users")


def get_user_by_channel_id(channel: Channel, channel_user_id: str) -> UserProfile | None:
    payload = get_blob_store().get(USERS, UserProfile.build_key(channel, channel_user_id))
    return UserProfile.from_dict(payload) if isinstance(payload, dict) else None


def save_user(user: UserProfile) -> UserProfile:
    user.updated_at = utc_now_iso()
    get_blob_store().set(USERS, user.key, user.to_dict())
    return user


def resolve_or_create_user(channel: Channel, channel_user_id: str, name_hint: str | None = None) -> UserProfile:
    """Return the stored profile, creating it on first contact only."""
    existing = get_user_by_channel_id(channel, channel_user_id)
    if existing is not None:
        return existing

    user = UserProfile(
        id=UserProfile.build_id(channel, channel_user_id),
        channel=channel,
        channel_user_id=channel_user_id,
        name=name_hint or None,
    )
    get_blob_store().set(USERS, user.key, user.to_dict())
    log.info("created user %s on channel %s", user.id, channel)
    return user


def get_user_by_id(user_id: str) -> UserProfile | None:
    """Find a profile by id with a full collection scan."""
    store = get_blob_store()
    for key in store.list(USERS):
        payload = store.get(USERS, key)
        if isinstance(payload, dict) and payload.get("id") == user_id:
            return UserProfile.from_dict(payload)
    return None


def update_user_demo_fields(
    user_id: str,
    *,
    demo_role: DemoRole | None,
    demo_canonical_name: str | None,
) -> UserProfile:
    user = get_user_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User `{user_id}` not found.")
    user.demo_role = demo_role
    user.demo_canonical_name = demo_canonical_name
    return save_user(user)


def project_for_model(
    user: UserProfile,
    reports: list[DamageReport],
    role_info: DemoRoleInfo | None = None,
    *,
    mode: str = "live",
) -> dict[str, Any]:
    """Reduce stored state to the profile the model sees.

    The report summary is always rebuilt from `reports`.
    """
    profile: dict[str, Any] = {"id": user.id}
    if user.name:
        profile["name"] = user.name
    profile["channel"] = user.channel
    profile["reportIdsWithStatus"] = [report.summary() for report in reports]

    if mode == "demo":
        profile["mode"] = "demo"
        if role_info is not None:
            profile["demoRole"] = role_info.role
            profile["demoCanonicalName"] = role_info.canonical_name
            profile["primaryDemoReportId"] = role_info.primary_demo_report_id
        else:
            profile["demoRole"] = user.demo_role
            profile["demoCanonicalName"] = user.demo_canonical_name
            profile["primaryDemoReportId"] = None
    return profile
