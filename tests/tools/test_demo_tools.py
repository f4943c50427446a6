import pytest

from src.sara.core.blob_store import MemoryBlobStore, set_blob_store
from src.sara.core.errors import ForbiddenRoleError, ModeError, NoRoleAssignedError, NotFoundError
from src.sara.core.tool_context import ToolContext
from src.sara.core.users import get_user_by_id, resolve_or_create_user
from src.sara.demo.demo_store import get_demo_project, get_demo_report, get_role_for_user
from src.sara.demo.seeding import seed_demo_data_if_needed
from src.sara.tools.arguments import (
    ContractorStatsArgs,
    DemoMapSessionLinkArgs,
    DemoMapSummaryArgs,
    ListDemoReportsForCityArgs,
    NoArgs,
    SetDemoRoleArgs,
    UpdateDemoProjectStatusArgs,
    UpdateDemoReportFieldsArgs,
    Viewport,
)
from src.sara.tools.demo import (
    clear_demo_role,
    create_demo_map_session_link,
    get_demo_map_summary,
    get_demo_overview_for_current_role,
    get_demo_report_for_current_role,
    get_demo_stats_for_contractor,
    list_demo_reports_for_city,
    set_demo_role,
    update_demo_project_status,
    update_demo_report_fields,
)

SITE = "https://sara.example"


@pytest.fixture()
def store():
    memory = MemoryBlobStore()
    set_blob_store(memory)
    seed_demo_data_if_needed("demo")
    yield memory
    set_blob_store(None)


@pytest.fixture()
def context(store):
    user = resolve_or_create_user("web", "demo-1")
    return ToolContext(user_id=user.id, mode="demo", site_url=SITE)


def _as(context, role):
    set_demo_role(SetDemoRoleArgs(role=role), context)
    return context


def test_demo_tools_refuse_live_mode(store):
    live = ToolContext(user_id="web-demo-1", mode="live", site_url=SITE)
    with pytest.raises(ModeError, match="only available in demo mode"):
        set_demo_role(SetDemoRoleArgs(role="resident"), live)
    with pytest.raises(ModeError):
        get_demo_overview_for_current_role(NoArgs(), live)
    with pytest.raises(ModeError):
        create_demo_map_session_link(DemoMapSessionLinkArgs(), live)


def test_set_role_binds_persona_and_updates_context(context):
    result = set_demo_role(SetDemoRoleArgs(role="contractor"), context)

    assert result == {
        "userId": context.user_id,
        "role": "contractor",
        "canonicalName": "John Smith",
        "primaryDemoReportId": "report-john-doe-home",
    }
    assert context.role == "contractor"
    user = get_user_by_id(context.user_id)
    assert user.demo_role == "contractor"
    assert user.demo_canonical_name == "John Smith"


def test_clear_role_removes_binding(context):
    _as(context, "city")
    assert clear_demo_role(NoArgs(), context) == {"cleared": True, "role": None}
    assert context.role is None
    assert get_role_for_user(context.user_id) is None
    assert get_user_by_id(context.user_id).demo_role is None


def test_overview_without_role_invites_choice(context):
    overview = get_demo_overview_for_current_role(NoArgs(), context)
    assert overview["role"] is None
    assert "resident, city worker, or contractor" in overview["summary"]


def test_overview_with_role_returns_persona(context):
    _as(context, "city")
    overview = get_demo_overview_for_current_role(NoArgs(), context)
    assert overview["canonicalName"] == "Jane Smith"
    assert overview["primaryDemoReportId"] == "report-high-school-gym"
    assert "Emergency Management" in overview["summary"]


def test_report_for_current_role_requires_role(context):
    with pytest.raises(NoRoleAssignedError, match="No demo role found for this user"):
        get_demo_report_for_current_role(NoArgs(), context)


def test_report_for_current_role_joins_project(context):
    _as(context, "resident")
    result = get_demo_report_for_current_role(NoArgs(), context)
    assert result["role"] == "resident"
    assert result["report"]["id"] == "report-john-doe-home"
    assert result["project"]["id"] == "project-john-doe-roof"


def test_update_report_fields_persists_notes(context):
    updated = update_demo_report_fields(
        UpdateDemoReportFieldsArgs(report_id="report-john-doe-home", notes="Tarp holding", damage_type="Roof"),
        context,
    )
    assert updated["notes"] == "Tarp holding"
    stored = get_demo_report("report-john-doe-home")
    assert stored.notes == "Tarp holding"
    assert stored.damage_type == "Roof"
    assert stored.address == "123 Bayview Lane, Saraville"


def test_update_unknown_demo_records(context):
    with pytest.raises(NotFoundError, match="Demo report not found"):
        update_demo_report_fields(UpdateDemoReportFieldsArgs(report_id="nope"), context)
    with pytest.raises(NotFoundError, match="Demo project not found"):
        update_demo_project_status(UpdateDemoProjectStatusArgs(project_id="nope", status="completed"), context)


def test_update_project_status_with_note(context):
    updated = update_demo_project_status(
        UpdateDemoProjectStatusArgs(project_id="project-high-school-gym", status="completed", note="All done"),
        context,
    )
    assert updated["status"] == "completed"
    assert get_demo_project("project-high-school-gym").notes == "All done"


def test_city_listing_is_restricted_to_city_role(context):
    with pytest.raises(ForbiddenRoleError):
        list_demo_reports_for_city(ListDemoReportsForCityArgs(status="any"), context)
    _as(context, "resident")
    with pytest.raises(ForbiddenRoleError):
        list_demo_reports_for_city(ListDemoReportsForCityArgs(status="any"), context)


@pytest.mark.parametrize(
    ("status", "expected_ids"),
    [
        ("any", {"report-john-doe-home", "report-high-school-gym", "report-riverside-apartments"}),
        ("assigned", {"report-john-doe-home", "report-high-school-gym"}),
        ("completed", {"report-riverside-apartments"}),
        ("unassigned", set()),
    ],
)
def test_city_listing_status_filters(context, status, expected_ids):
    _as(context, "city")
    result = list_demo_reports_for_city(ListDemoReportsForCityArgs(status=status, area_query="river"), context)
    assert {report["id"] for report in result["reports"]} == expected_ids
    assert result["total"] == len(expected_ids)
    assert result["statusFilter"] == status
    assert result["areaQuery"] == "river"


def test_map_summary_is_scoped_by_role(context):
    args = DemoMapSummaryArgs(viewport=Viewport(center_lat=29.5, center_lng=-90.75, radius_km=5))

    unscoped = get_demo_map_summary(args, context)
    assert unscoped["message"] == "No demo role set; map summary is not scoped."
    assert unscoped["viewport"] == {"centerLat": 29.5, "centerLng": -90.75, "radiusKm": 5.0}

    _as(context, "resident")
    resident = get_demo_map_summary(args, context)
    assert resident["totals"] == {"totalReports": 3, "assignedCount": 3, "inProgressCount": 2, "completedCount": 1}
    assert resident["topContractors"] == [{"contractorId": "contractor-john-smith", "jobCount": 3}]
    assert "reports" not in resident

    _as(context, "city")
    assert len(get_demo_map_summary(DemoMapSummaryArgs(), context)["reports"]) == 3

    _as(context, "contractor")
    contractor = get_demo_map_summary(DemoMapSummaryArgs(), context)
    assert len(contractor["projects"]) == 3
    assert len(contractor["reports"]) == 3


def test_contractor_stats(context):
    with pytest.raises(ForbiddenRoleError):
        get_demo_stats_for_contractor(ContractorStatsArgs(), context)

    _as(context, "contractor")
    stats = get_demo_stats_for_contractor(ContractorStatsArgs(lookback_days=30), context)
    assert stats["contractorId"] == "contractor-john-smith"
    assert stats["lookbackDays"] == 30
    assert stats["totalJobs"] == 3
    assert stats["completedJobs"] == 1
    assert stats["profile"]["positiveFeedbackCount"] == 21


def test_map_session_link_requires_role(context):
    with pytest.raises(NoRoleAssignedError):
        create_demo_map_session_link(DemoMapSessionLinkArgs(), context)


def test_map_session_link_for_role(context):
    _as(context, "resident")
    link = create_demo_map_session_link(DemoMapSessionLinkArgs(), context)
    assert link["role"] == "resident"
    assert link["url"] == f"{SITE}/demo-map?token={link['token']}"
