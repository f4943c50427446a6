"""Central registry for callable tool contracts."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

from src.sara.tools import demo as demo_tools
from src.sara.tools import reports as report_tools
from src.sara.tools.arguments import (
    ContractorStatsArgs,
    CreateReportLinkArgs,
    DemoMapSessionLinkArgs,
    DemoMapSummaryArgs,
    ListDemoReportsForCityArgs,
    NoArgs,
    ReportIdArgs,
    SetDemoRoleArgs,
    StartDamageReportArgs,
    ToolArguments,
    UpdateDamageReportSectionArgs,
    UpdateDemoProjectStatusArgs,
    UpdateDemoReportFieldsArgs,
    UpdateReportAddressArgs,
    UpdateReportPhotosArgs,
    validate_arguments,
)

from .errors import ToolArgumentError, UnknownToolError
from .logger import get_logger
from .tool_context import ToolContext

log = get_logger("tools")

ToolHandler = Callable[[Any, ToolContext], Any]

_REPORT_ID = {"type": "string", "required": True}
_VIEWPORT_PROPERTIES = {
    "centerLat": {"type": "number", "required": True},
    "centerLng": {"type": "number", "required": True},
    "radiusKm": {"type": "number", "required": True},
}


@dataclass(frozen=True)
class ToolSpec:
    """Declarative metadata, argument contract and callable for one tool."""

    name: str
    handler: ToolHandler
    category: str
    description: str
    arguments: type[ToolArguments] = NoArgs
    parameters: dict[str, Any] = field(default_factory=dict)


class ToolRegistry:
    """In-memory registry with deterministic lookup and invocation."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        if not spec.name or not isinstance(spec.name, str):
            raise ValueError("Tool name must be a non-empty string.")
        if spec.name in self._tools:
            raise ValueError(f"Tool `{spec.name}` is already registered.")
        self._tools[spec.name] = spec

    def get(self, name: str) -> ToolSpec:
        try:
            return self._tools[name]
        except KeyError as exc:
            raise UnknownToolError(f"Unknown tool: {name}") from exc

    def names(self) -> list[str]:
        return list(self._tools)

    def list_specs(self) -> list[ToolSpec]:
        return [self._tools[name] for name in sorted(self._tools)]

    def invoke(self, name: str, raw_args: Any, context: ToolContext) -> Any:
        """Validate arguments against the tool's contract, then run its handler.

        Failures propagate as `SaraError` subclasses; the caller decides how
        to surface them.
        """
        spec = self.get(name)
        args = validate_arguments(name, spec.arguments, _decode_arguments(name, raw_args))
        log.info("dispatching tool %s for user %s", name, context.user_id)
        return spec.handler(args, context)


def _decode_arguments(name: str, raw_args: Any) -> Any:
    if isinstance(raw_args, str):
        if not raw_args.strip():
            return {}
        try:
            return json.loads(raw_args)
        except json.JSONDecodeError as exc:
            raise ToolArgumentError(f"Invalid JSON arguments for `{name}`: {exc.msg}") from exc
    return raw_args


def _create_default_registry() -> ToolRegistry:
    registry = ToolRegistry()

    registry.register(
        ToolSpec(
            name="start_damage_report",
            handler=report_tools.start_damage_report,
            category="reports",
            description="Start a new damage report for the current user.",
            arguments=StartDamageReportArgs,
            parameters={
                "address": {
                    "type": "string",
                    "required": True,
                    "description": "Street address for the damage location.",
                },
            },
        )
    )
    registry.register(
        ToolSpec(
            name="update_damage_report_section",
            handler=report_tools.update_damage_report_section,
            category="reports",
            description="Update one logical section of an existing damage report.",
            arguments=UpdateDamageReportSectionArgs,
            parameters={
                "reportId": _REPORT_ID,
                "address": {"type": "string", "required": False},
                "status": {"type": "string", "enum": ["pending", "completed", "resolved"], "required": False},
                "photoUrls": {
                    "type": "array",
                    "items_type": "string",
                    "required": False,
                    "description": "Full replacement list of photo URLs.",
                },
            },
        )
    )
    registry.register(
        ToolSpec(
            name="get_report_details",
            handler=report_tools.get_report_details,
            category="reports",
            description="Fetch details for a specific damage report.",
            arguments=ReportIdArgs,
            parameters={"reportId": _REPORT_ID},
        )
    )
    registry.register(
        ToolSpec(
            name="list_user_reports",
            handler=report_tools.list_user_reports,
            category="reports",
            description="List all damage reports for the current user.",
        )
    )
    registry.register(
        ToolSpec(
            name="update_report_address",
            handler=report_tools.update_report_address,
            category="reports",
            description="Update the address on a specific damage report.",
            arguments=UpdateReportAddressArgs,
            parameters={
                "reportId": _REPORT_ID,
                "address": {"type": "string", "required": True},
            },
        )
    )
    registry.register(
        ToolSpec(
            name="update_report_photos",
            handler=report_tools.update_report_photos,
            category="reports",
            description="Add or replace photo URLs on a damage report.",
            arguments=UpdateReportPhotosArgs,
            parameters={
                "reportId": _REPORT_ID,
                "photoUrls": {"type": "array", "items_type": "string", "required": True},
            },
        )
    )
    registry.register(
        ToolSpec(
            name="delete_report",
            handler=report_tools.delete_report,
            category="reports",
            description="Delete a pending report after the user explicitly confirms this is what they want.",
            arguments=ReportIdArgs,
            parameters={"reportId": _REPORT_ID},
        )
    )
    registry.register(
        ToolSpec(
            name="mark_report_resolved",
            handler=report_tools.mark_report_resolved,
            category="reports",
            description="Mark a report as resolved when downstream work is complete.",
            arguments=ReportIdArgs,
            parameters={"reportId": _REPORT_ID},
        )
    )
    registry.register(
        ToolSpec(
            name="create_time_limited_report_link",
            handler=report_tools.create_time_limited_report_link,
            category="reports",
            description="Create a time-limited link to view a specific report.",
            arguments=CreateReportLinkArgs,
            parameters={
                "reportId": _REPORT_ID,
                "ttlHours": {
                    "type": "number",
                    "required": False,
                    "description": "Time to live in hours for the link (defaults to 24 if omitted).",
                },
            },
        )
    )

    registry.register(
        ToolSpec(
            name="set_demo_role",
            handler=demo_tools.set_demo_role,
            category="demo",
            description="Assign the demo persona the user chose: resident, city worker, or contractor.",
            arguments=SetDemoRoleArgs,
            parameters={
                "role": {"type": "string", "enum": ["resident", "city", "contractor"], "required": True},
            },
        )
    )
    registry.register(
        ToolSpec(
            name="clear_demo_role",
            handler=demo_tools.clear_demo_role,
            category="demo",
            description="Clear the user's demo persona so they can choose again.",
        )
    )
    registry.register(
        ToolSpec(
            name="get_demo_overview_for_current_role",
            handler=demo_tools.get_demo_overview_for_current_role,
            category="demo",
            description="Describe the user's current demo persona and its primary report.",
        )
    )
    registry.register(
        ToolSpec(
            name="get_demo_report_for_current_role",
            handler=demo_tools.get_demo_report_for_current_role,
            category="demo",
            description="Fetch the primary demo damage report and linked project for the current persona.",
        )
    )
    registry.register(
        ToolSpec(
            name="update_demo_report_fields",
            handler=demo_tools.update_demo_report_fields,
            category="demo",
            description="Update descriptive fields on a shared demo damage report.",
            arguments=UpdateDemoReportFieldsArgs,
            parameters={
                "reportId": _REPORT_ID,
                "address": {"type": "string", "required": False},
                "damageType": {"type": "string", "required": False},
                "insuranceInfo": {"type": "string", "required": False},
                "helpRequested": {"type": "string", "required": False},
                "notes": {"type": "string", "required": False},
            },
        )
    )
    registry.register(
        ToolSpec(
            name="update_demo_project_status",
            handler=demo_tools.update_demo_project_status,
            category="demo",
            description="Move a contractor demo project between bid, in_progress and completed.",
            arguments=UpdateDemoProjectStatusArgs,
            parameters={
                "projectId": {"type": "string", "required": True},
                "status": {"type": "string", "enum": ["bid", "in_progress", "completed"], "required": True},
                "note": {"type": "string", "required": False},
            },
        )
    )
    registry.register(
        ToolSpec(
            name="list_demo_reports_for_city",
            handler=demo_tools.list_demo_reports_for_city,
            category="demo",
            description="List demo damage reports across Saraville filtered by assignment status (city persona only).",
            arguments=ListDemoReportsForCityArgs,
            parameters={
                "status": {
                    "type": "string",
                    "enum": ["unassigned", "assigned", "completed", "any"],
                    "required": True,
                },
                "areaQuery": {"type": "string", "required": False},
            },
        )
    )
    registry.register(
        ToolSpec(
            name="get_demo_map_summary",
            handler=demo_tools.get_demo_map_summary,
            category="demo",
            description="Summarize the demo map for the current persona.",
            arguments=DemoMapSummaryArgs,
            parameters={
                "viewport": {"type": "object", "properties": _VIEWPORT_PROPERTIES, "required": False},
                "areaId": {"type": "string", "required": False},
            },
        )
    )
    registry.register(
        ToolSpec(
            name="get_demo_stats_for_contractor",
            handler=demo_tools.get_demo_stats_for_contractor,
            category="demo",
            description="Job totals for the contractor persona.",
            arguments=ContractorStatsArgs,
            parameters={"lookbackDays": {"type": "integer", "required": False}},
        )
    )
    registry.register(
        ToolSpec(
            name="create_demo_map_session_link",
            handler=demo_tools.create_demo_map_session_link,
            category="demo",
            description="Create a time-limited link to the demo map scoped to the user's persona.",
            arguments=DemoMapSessionLinkArgs,
            parameters={
                "ttlHours": {
                    "type": "number",
                    "required": False,
                    "description": "Time to live in hours for the link (defaults to 1 if omitted).",
                },
            },
        )
    )

    return registry


_DEFAULT_TOOL_REGISTRY = _create_default_registry()


def get_tool_registry() -> ToolRegistry:
    return _DEFAULT_TOOL_REGISTRY


def list_tools(*, category: str | None = None) -> list[dict[str, Any]]:
    specs = get_tool_registry().list_specs()
    out: list[dict[str, Any]] = []
    for spec in specs:
        if category and spec.category != category:
            continue
        out.append(
            {
                "name": spec.name,
                "category": spec.category,
                "description": spec.description,
                "parameters": spec.parameters,
            }
        )
    return out


def _param_schema(meta: dict[str, Any] | None) -> dict[str, Any]:
    kind = "string"
    if isinstance(meta, dict) and isinstance(meta.get("type"), str):
        kind = meta["type"]

    schema: dict[str, Any]
    if kind == "array":
        items_type = "string"
        if isinstance(meta, dict) and isinstance(meta.get("items_type"), str):
            items_type = meta["items_type"]
        schema = {"type": "array", "items": {"type": items_type}}
    elif kind == "object":
        nested = meta.get("properties") if isinstance(meta, dict) else None
        if isinstance(nested, dict):
            schema = _object_schema(nested)
        else:
            schema = {"type": "object", "additionalProperties": True}
    elif kind in {"string", "number", "integer", "boolean", "null"}:
        schema = {"type": kind}
    else:
        schema = {"type": "string"}

    if isinstance(meta, dict):
        if isinstance(meta.get("enum"), list):
            schema["enum"] = list(meta["enum"])
        if isinstance(meta.get("description"), str):
            schema["description"] = meta["description"]
    return schema


def _object_schema(params: dict[str, Any]) -> dict[str, Any]:
    properties: dict[str, Any] = {}
    required: list[str] = []
    for name, meta in params.items():
        if not isinstance(name, str) or not name:
            continue
        meta_dict = meta if isinstance(meta, dict) else None
        properties[name] = _param_schema(meta_dict)
        if meta_dict is not None and bool(meta_dict.get("required")):
            required.append(name)

    schema: dict[str, Any] = {
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }
    if required:
        schema["required"] = required
    return schema


def tool_schemas_for_llm(*, category: str | None = None) -> list[dict[str, Any]]:
    """Convert registry metadata into OpenAI-compatible tool schemas."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool["name"],
                "description": tool["description"],
                "parameters": _object_schema(tool["parameters"]),
            },
        }
        for tool in list_tools(category=category)
    ]


def execute_tool_call(name: str, raw_args: Any, context: ToolContext) -> Any:
    return get_tool_registry().invoke(name, raw_args, context)
