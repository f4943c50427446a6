from datetime import timedelta

import pytest

from src.sara.core.blob_store import MemoryBlobStore, set_blob_store
from src.sara.core.errors import ExpiredError, ForbiddenRoleError, NoRoleAssignedError, NotFoundError, ValidationError
from src.sara.core.token_policy import parse_timestamp
from src.sara.core.users import resolve_or_create_user
from src.sara.demo.roles import assign_role, contractor_id_for_role, default_report_id_for_role, get_role_info
from src.sara.demo.sessions import demo_map_url, issue_session_token, resolve_session


@pytest.fixture()
def store():
    memory = MemoryBlobStore()
    set_blob_store(memory)
    yield memory
    set_blob_store(None)


@pytest.fixture()
def user(store):
    return resolve_or_create_user("messenger", "psid-1")


def test_assign_role_rejects_unknown_persona(user):
    with pytest.raises(ValidationError, match="Unknown demo role"):
        assign_role(user.id, "mayor")
    assert get_role_info(user.id) is None


def test_reassigning_replaces_persona(user):
    assign_role(user.id, "resident")
    assign_role(user.id, "city")
    info = get_role_info(user.id)
    assert info.role == "city"
    assert info.canonical_name == "Jane Smith"


def test_persona_lookups():
    assert default_report_id_for_role("city") == "report-high-school-gym"
    assert contractor_id_for_role("contractor") == "contractor-john-smith"
    assert contractor_id_for_role("resident") is None
    assert contractor_id_for_role(None) is None


def test_demo_map_url_trims_trailing_slash():
    assert demo_map_url("t1", site_url="https://sara.example/") == "https://sara.example/demo-map?token=t1"


def test_issue_requires_an_assigned_role(user):
    with pytest.raises(NoRoleAssignedError, match="No demo role is set for this user"):
        issue_session_token(user.id)


def test_issue_rejects_mismatched_role(user):
    assign_role(user.id, "resident")
    with pytest.raises(ForbiddenRoleError):
        issue_session_token(user.id, "city")


def test_issued_session_resolves_until_expiry(user):
    assign_role(user.id, "contractor")
    issued = issue_session_token(user.id, "contractor", ttl_hours=1, site_url="https://sara.example")

    session = resolve_session(issued["token"])
    assert session.user_id == user.id
    assert session.role == "contractor"
    assert session.primary_report_id == "report-john-doe-home"
    assert issued["url"].endswith(f"/demo-map?token={issued['token']}")

    expires_at = parse_timestamp(issued["expiresAt"])
    assert expires_at - parse_timestamp(session.created_at) == timedelta(hours=1)
    assert resolve_session(issued["token"], now=expires_at - timedelta(seconds=1)).token == issued["token"]
    with pytest.raises(ExpiredError, match="Demo session expired"):
        resolve_session(issued["token"], now=expires_at)


def test_unknown_session_is_not_found(store):
    with pytest.raises(NotFoundError, match="Session not found"):
        resolve_session("missing")
