"""Persisted record schemas.

Records are stored as JSON documents with camelCase keys; the same shape is
returned from tools and HTTP endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal
from uuid import uuid4

Channel = Literal["messenger", "web"]
MessageDirection = Literal["user", "assistant"]
ReportStatus = Literal["pending", "completed", "resolved"]
DemoRole = Literal["resident", "city", "contractor"]
DemoReportStatus = Literal["pending", "in_progress", "completed", "resolved"]
DemoProjectStatus = Literal["bid", "in_progress", "completed"]

CHANNELS = ("messenger", "web")
REPORT_STATUSES = ("pending", "completed", "resolved")
DEMO_ROLES = ("resident", "city", "contractor")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def new_id() -> str:
    return str(uuid4())


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _opt_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    return float(value) if isinstance(value, (int, float)) else None


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


@dataclass(slots=True)
class UserProfile:
    """Durable identity for one (channel, channel user id) pair."""

    id: str
    channel: Channel
    channel_user_id: str
    name: str | None = None
    demo_role: DemoRole | None = None
    demo_canonical_name: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    @staticmethod
    def build_id(channel: str, channel_user_id: str) -> str:
        return f"{channel}-{channel_user_id}"

    @staticmethod
    def build_key(channel: str, channel_user_id: str) -> str:
        return f"{channel}:{channel_user_id}"

    @property
    def key(self) -> str:
        return self.build_key(self.channel, self.channel_user_id)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "channel": self.channel,
                "channelUserId": self.channel_user_id,
                "name": self.name,
                "demoRole": self.demo_role,
                "demoCanonicalName": self.demo_canonical_name,
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
            }
        )

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "UserProfile":
        return cls(
            id=str(payload["id"]),
            channel=payload["channel"],
            channel_user_id=str(payload["channelUserId"]),
            name=_opt_str(payload.get("name")),
            demo_role=payload.get("demoRole") if payload.get("demoRole") in DEMO_ROLES else None,
            demo_canonical_name=_opt_str(payload.get("demoCanonicalName")),
            created_at=str(payload.get("createdAt") or utc_now_iso()),
            updated_at=str(payload.get("updatedAt") or utc_now_iso()),
        )


@dataclass(slots=True)
class Message:
    """One immutable conversation turn."""

    id: str
    user_id: str
    direction: MessageDirection
    text: str
    media_urls: list[str] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        contents: dict[str, Any] = {"text": self.text}
        if self.media_urls:
            contents["mediaUrls"] = list(self.media_urls)
        return {
            "id": self.id,
            "userId": self.user_id,
            "direction": self.direction,
            "contents": contents,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Message":
        contents = payload.get("contents") if isinstance(payload.get("contents"), dict) else {}
        return cls(
            id=str(payload["id"]),
            user_id=str(payload["userId"]),
            direction="assistant" if payload.get("direction") == "assistant" else "user",
            text=str(contents.get("text") or ""),
            media_urls=_str_list(contents.get("mediaUrls")),
            created_at=str(payload.get("createdAt") or ""),
        )


@dataclass(slots=True)
class DamageReport:
    """A user's tracked damage claim."""

    id: str
    user_id: str
    status: ReportStatus = "pending"
    address: str | None = None
    photo_urls: list[str] = field(default_factory=list)
    latitude: float | None = None
    longitude: float | None = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    @staticmethod
    def build_key(user_id: str, report_id: str) -> str:
        return f"{user_id}/{report_id}"

    @property
    def key(self) -> str:
        return self.build_key(self.user_id, self.id)

    def summary(self) -> dict[str, Any]:
        return {"id": self.id, "status": self.status, "address": self.address}

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "userId": self.user_id,
                "address": self.address,
                "status": self.status,
                "photoUrls": list(self.photo_urls),
                "latitude": self.latitude,
                "longitude": self.longitude,
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
            }
        )

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DamageReport":
        status = payload.get("status")
        return cls(
            id=str(payload["id"]),
            user_id=str(payload["userId"]),
            status=status if status in REPORT_STATUSES else "pending",
            address=_opt_str(payload.get("address")),
            photo_urls=_str_list(payload.get("photoUrls")),
            latitude=_opt_float(payload.get("latitude")),
            longitude=_opt_float(payload.get("longitude")),
            created_at=str(payload.get("createdAt") or utc_now_iso()),
            updated_at=str(payload.get("updatedAt") or utc_now_iso()),
        )


@dataclass(slots=True)
class ReportToken:
    """Capability granting time-limited read access to one report."""

    report_id: str
    token: str
    expires_at: str
    created_at: str = field(default_factory=utc_now_iso)

    @staticmethod
    def build_key(report_id: str, token: str) -> str:
        return f"{report_id}/{token}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "reportId": self.report_id,
            "token": self.token,
            "expiresAt": self.expires_at,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ReportToken":
        return cls(
            report_id=str(payload["reportId"]),
            token=str(payload["token"]),
            expires_at=str(payload["expiresAt"]),
            created_at=str(payload.get("createdAt") or utc_now_iso()),
        )


@dataclass(slots=True)
class DemoDamageReport:
    """Shared fictional damage report; never user scoped."""

    id: str
    resident_name: str
    address: str
    lat: float
    lng: float
    damage_type: str
    status: DemoReportStatus = "pending"
    insurance_info: str | None = None
    help_requested: str | None = None
    notes: str | None = None
    assigned_contractor_id: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)
    is_demo: bool = True

    @property
    def geo(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "residentName": self.resident_name,
                "address": self.address,
                "geo": self.geo,
                "damageType": self.damage_type,
                "insuranceInfo": self.insurance_info,
                "helpRequested": self.help_requested,
                "notes": self.notes,
                "status": self.status,
                "assignedContractorId": self.assigned_contractor_id,
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
                "isDemo": self.is_demo,
            }
        )

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DemoDamageReport":
        geo = payload.get("geo") if isinstance(payload.get("geo"), dict) else {}
        return cls(
            id=str(payload["id"]),
            resident_name=str(payload.get("residentName") or ""),
            address=str(payload.get("address") or ""),
            lat=float(geo.get("lat", 0.0)),
            lng=float(geo.get("lng", 0.0)),
            damage_type=str(payload.get("damageType") or ""),
            status=payload.get("status") or "pending",
            insurance_info=_opt_str(payload.get("insuranceInfo")),
            help_requested=_opt_str(payload.get("helpRequested")),
            notes=_opt_str(payload.get("notes")),
            assigned_contractor_id=_opt_str(payload.get("assignedContractorId")),
            created_at=str(payload.get("createdAt") or utc_now_iso()),
            updated_at=str(payload.get("updatedAt") or utc_now_iso()),
            is_demo=bool(payload.get("isDemo", True)),
        )


@dataclass(slots=True)
class DemoProject:
    """A contractor's job tied to a demo report."""

    id: str
    contractor_id: str
    report_id: str
    status: DemoProjectStatus = "bid"
    notes: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)
    is_demo: bool = True

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "contractorId": self.contractor_id,
                "reportId": self.report_id,
                "status": self.status,
                "notes": self.notes,
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
                "isDemo": self.is_demo,
            }
        )

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DemoProject":
        return cls(
            id=str(payload["id"]),
            contractor_id=str(payload["contractorId"]),
            report_id=str(payload["reportId"]),
            status=payload.get("status") or "bid",
            notes=_opt_str(payload.get("notes")),
            created_at=str(payload.get("createdAt") or utc_now_iso()),
            updated_at=str(payload.get("updatedAt") or utc_now_iso()),
            is_demo=bool(payload.get("isDemo", True)),
        )


@dataclass(slots=True)
class DemoRoleInfo:
    """Binds a user to one simulated persona."""

    user_id: str
    role: DemoRole
    canonical_name: str
    primary_demo_report_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "userId": self.user_id,
                "role": self.role,
                "canonicalName": self.canonical_name,
                "primaryDemoReportId": self.primary_demo_report_id,
            }
        )

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DemoRoleInfo":
        return cls(
            user_id=str(payload["userId"]),
            role=payload["role"],
            canonical_name=str(payload.get("canonicalName") or ""),
            primary_demo_report_id=_opt_str(payload.get("primaryDemoReportId")),
        )


@dataclass(slots=True)
class DemoSessionToken:
    """Capability granting a role-scoped map and chat view."""

    token: str
    user_id: str
    role: DemoRole
    expires_at: str
    primary_report_id: str | None = None
    mode: str = "demo"
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "token": self.token,
                "userId": self.user_id,
                "role": self.role,
                "mode": self.mode,
                "primaryReportId": self.primary_report_id,
                "createdAt": self.created_at,
                "expiresAt": self.expires_at,
            }
        )

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "DemoSessionToken":
        return cls(
            token=str(payload["token"]),
            user_id=str(payload["userId"]),
            role=payload["role"],
            expires_at=str(payload["expiresAt"]),
            primary_report_id=_opt_str(payload.get("primaryReportId")),
            mode=str(payload.get("mode") or "demo"),
            created_at=str(payload.get("createdAt") or utc_now_iso()),
        )
