"""Typed argument contracts for every model-callable tool.

Models accept the camelCase keys the completion endpoint emits and reject
unknown fields, so a malformed call fails before any handler runs.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from src.sara.core.errors import ToolArgumentError
from src.sara.core.records import DemoProjectStatus, DemoRole, ReportStatus

CityStatusFilter = Literal["unassigned", "assigned", "completed", "any"]


class ToolArguments(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class NoArgs(ToolArguments):
    pass


class StartDamageReportArgs(ToolArguments):
    address: str = Field(min_length=1)


class ReportIdArgs(ToolArguments):
    report_id: str = Field(min_length=1, pattern=r"^[^/]+$")


class UpdateDamageReportSectionArgs(ReportIdArgs):
    address: str | None = None
    status: ReportStatus | None = None
    photo_urls: list[str] | None = None


class UpdateReportAddressArgs(ReportIdArgs):
    address: str = Field(min_length=1)


class UpdateReportPhotosArgs(ReportIdArgs):
    photo_urls: list[str]


class CreateReportLinkArgs(ReportIdArgs):
    ttl_hours: float | None = Field(default=None, gt=0)


class SetDemoRoleArgs(ToolArguments):
    role: DemoRole


class UpdateDemoReportFieldsArgs(ReportIdArgs):
    address: str | None = None
    damage_type: str | None = None
    insurance_info: str | None = None
    help_requested: str | None = None
    notes: str | None = None


class UpdateDemoProjectStatusArgs(ToolArguments):
    project_id: str = Field(min_length=1)
    status: DemoProjectStatus
    note: str | None = None


class ListDemoReportsForCityArgs(ToolArguments):
    status: CityStatusFilter
    area_query: str | None = None


class Viewport(ToolArguments):
    center_lat: float
    center_lng: float
    radius_km: float = Field(gt=0)


class DemoMapSummaryArgs(ToolArguments):
    viewport: Viewport | None = None
    area_id: str | None = None


class ContractorStatsArgs(ToolArguments):
    lookback_days: int | None = Field(default=None, gt=0)


class DemoMapSessionLinkArgs(ToolArguments):
    ttl_hours: float | None = Field(default=None, gt=0)


def _describe_errors(exc: PydanticValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "arguments"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def validate_arguments(tool_name: str, model: type[ToolArguments], raw_args: Any) -> ToolArguments:
    if raw_args is None:
        raw_args = {}
    if not isinstance(raw_args, dict):
        raise ToolArgumentError(f"Invalid arguments for `{tool_name}`: expected a JSON object.")
    try:
        return model.model_validate(raw_args)
    except PydanticValidationError as exc:
        raise ToolArgumentError(f"Invalid arguments for `{tool_name}`: {_describe_errors(exc)}") from exc
