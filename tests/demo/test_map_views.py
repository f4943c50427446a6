from src.sara.core.records import DemoDamageReport, DemoProject, DemoSessionToken, Message
from src.sara.demo.map_views import (
    DEFAULT_MAP_CENTER,
    SIMULATION_NOTICE,
    default_map_view,
    map_center,
    role_map_payload,
    session_map_view,
    top_contractors,
)
from src.sara.demo.seed_data import build_damage_reports, build_projects

NOW = "2025-06-01T12:00:00+00:00"


def _report(report_id, lat, lng):
    return DemoDamageReport(
        id=report_id,
        resident_name="R",
        address="A",
        lat=lat,
        lng=lng,
        damage_type="Wind",
        created_at=NOW,
        updated_at=NOW,
    )


def _project(project_id, contractor_id):
    return DemoProject(id=project_id, contractor_id=contractor_id, report_id="r", created_at=NOW, updated_at=NOW)


def test_default_view_centers_on_canonical_report():
    reports = build_damage_reports(NOW)
    view = default_map_view(list(reversed(reports)), build_projects(NOW))

    assert view["simulationNotice"] == SIMULATION_NOTICE
    assert view["token"] is None
    assert view["role"] is None
    assert view["primaryReport"]["id"] == "report-john-doe-home"
    assert view["primaryProject"]["id"] == "project-john-doe-roof"
    assert view["mapCenter"] == {"lat": 29.501, "lng": -90.751}
    assert len(view["mapData"]["reports"]) == 3
    assert view["messages"] == []


def test_default_view_falls_back_to_first_report_then_constant():
    other = [_report("r-a", 1.0, 2.0), _report("r-b", 3.0, 4.0)]
    view = default_map_view(other, [])
    assert view["primaryReport"]["id"] == "r-a"
    assert view["primaryProject"] is None
    assert view["mapCenter"] == {"lat": 1.0, "lng": 2.0}

    empty = default_map_view([], [])
    assert empty["primaryReport"] is None
    assert empty["mapCenter"] == DEFAULT_MAP_CENTER


def test_map_center_prefers_primary():
    reports = [_report("r-a", 1.0, 2.0)]
    assert map_center(_report("r-p", 5.0, 6.0), reports) == {"lat": 5.0, "lng": 6.0}
    assert map_center(None, reports) == {"lat": 1.0, "lng": 2.0}


def test_top_contractors_sorted_with_stable_ties():
    projects = [
        _project("p1", "c-b"),
        _project("p2", "c-a"),
        _project("p3", "c-a"),
        _project("p4", "c-c"),
        _project("p5", "c-d"),
    ]
    ranked = top_contractors(projects)
    assert ranked == [
        {"contractorId": "c-a", "jobCount": 2},
        {"contractorId": "c-b", "jobCount": 1},
        {"contractorId": "c-c", "jobCount": 1},
        {"contractorId": "c-d", "jobCount": 1},
    ]
    assert len(top_contractors(projects, limit=2)) == 2


def test_unscoped_payload_has_message_only():
    assert role_map_payload(None, build_damage_reports(NOW), build_projects(NOW)) == {
        "message": "No demo role set; map summary is not scoped."
    }


def test_session_view_is_role_scoped():
    session = DemoSessionToken(
        token="tok",
        user_id="web-u1",
        role="city",
        expires_at="2030-01-01T00:00:00+00:00",
        primary_report_id="report-high-school-gym",
    )
    message = Message(id="m1", user_id="web-u1", direction="user", text="hi", created_at=NOW)
    view = session_map_view(
        session,
        {"id": "web-u1"},
        build_damage_reports(NOW),
        build_projects(NOW),
        [message],
    )

    assert view["token"] == "tok"
    assert view["role"] == "city"
    assert view["primaryReport"]["id"] == "report-high-school-gym"
    assert view["mapCenter"] == {"lat": 29.505, "lng": -90.748}
    assert set(view["mapData"]) == {"reports"}
    assert view["messages"][0]["id"] == "m1"
